"""
Handle directory: Telegram username → chat id.
Populated when a user sends /start to the bot, kept in memory and mirrored
to a JSON file that is rewritten in full on every registration.
"""
import json
import logging
import os
from pathlib import Path

from regbridge.services.errors import PersistenceFailure
from regbridge.services.handles import normalize_handle

logger = logging.getLogger(__name__)

ChatId = int | str


class HandleDirectory:
    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._records: dict[str, ChatId] = {}

    def __len__(self) -> int:
        return len(self._records)

    def ensure_data_dir(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            logger.info("Data directory ready: %s", self.path.parent)
        except OSError as exc:
            logger.error("Could not create data directory %s: %s", self.path.parent, exc)

    def load_all(self) -> int:
        """
        Load every saved chat id into memory.
        A missing or unreadable file is normal on first run and leaves the
        directory empty.
        """
        try:
            saved = self._read_file()
        except PersistenceFailure as exc:
            logger.info("No saved chat ids loaded: %s", exc.message)
            return 0

        for handle, chat_id in saved.items():
            self._records[normalize_handle(handle)] = chat_id
        logger.info("Loaded %d chat ids from %s", len(saved), self.path)
        return len(saved)

    def register(self, handle: str, chat_id: ChatId) -> None:
        """Upsert a handle in memory, then persist. Persist errors are only logged."""
        key = normalize_handle(handle)
        self._records[key] = chat_id
        try:
            self._persist(key, chat_id)
        except PersistenceFailure as exc:
            logger.error("Failed to save chat id for @%s: %s", key, exc.message)
            return
        logger.info("Saved chat id for @%s: %s", key, chat_id)

    def lookup(self, handle: str) -> ChatId | None:
        return self._records.get(normalize_handle(handle))

    # ─── File backing store ──────────────────────────────────────────────────

    def _read_file(self) -> dict[str, ChatId]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            raise PersistenceFailure(f"{self.path} does not exist")
        except (OSError, ValueError) as exc:
            raise PersistenceFailure(f"cannot read {self.path}: {exc}")
        if not isinstance(data, dict):
            raise PersistenceFailure(f"{self.path} does not hold a JSON object")
        return data

    def _persist(self, key: str, chat_id: ChatId) -> None:
        # Read-modify-write of the whole file, not an append.
        try:
            saved = self._read_file()
        except PersistenceFailure:
            saved = {}
        saved[key] = chat_id

        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            tmp_path.write_text(json.dumps(saved, indent=2, ensure_ascii=False), encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError as exc:
            tmp_path.unlink(missing_ok=True)
            raise PersistenceFailure(f"cannot write {self.path}: {exc}")
