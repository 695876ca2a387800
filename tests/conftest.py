"""
Pytest configuration and fixtures.
Each test gets a fresh VerificationService backed by a temp chat id file,
a controllable clock and mocked Telegram / registration collaborators.
"""
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from regbridge.main import app
from regbridge.services.directory import HandleDirectory
from regbridge.services.ledger import VerificationLedger
from regbridge.services.verification import VerificationService, get_service


class FakeClock:
    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def chat_ids_path(tmp_path):
    return tmp_path / "data" / "chat_ids.json"


@pytest.fixture()
def directory(chat_ids_path):
    directory = HandleDirectory(chat_ids_path)
    directory.ensure_data_dir()
    return directory


@pytest.fixture()
def ledger(clock):
    return VerificationLedger(ttl=timedelta(minutes=10), clock=clock)


@pytest.fixture()
def mock_dispatcher():
    mock = MagicMock()
    mock.send_text = AsyncMock(return_value={"message_id": 1})
    return mock


@pytest.fixture()
def mock_registrar():
    mock = MagicMock()
    mock.complete = AsyncMock(return_value=1700000000000)
    return mock


@pytest.fixture()
def service(directory, ledger, mock_dispatcher, mock_registrar):
    return VerificationService(
        directory=directory,
        ledger=ledger,
        dispatcher=mock_dispatcher,
        registrar=mock_registrar,
    )


@pytest.fixture()
def client(service):
    app.dependency_overrides[get_service] = lambda: service
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c
    app.dependency_overrides.clear()
