"""Tests for the verification code HTTP endpoints."""
from unittest.mock import patch

SEND_URL = "/api/auth/send-verification-code"
VERIFY_URL = "/api/auth/verify-code"


def test_send_code_missing_handle(client, mock_dispatcher):
    resp = client.post(SEND_URL, json={})
    assert resp.status_code == 400
    assert resp.json()["success"] is False
    mock_dispatcher.send_text.assert_not_called()


def test_send_code_unregistered_handle(client, service, mock_dispatcher):
    resp = client.post(SEND_URL, json={"telegram": "student1"})
    assert resp.status_code == 400
    assert resp.json() == {
        "success": False,
        "error": "Telegram username not found. Please send /start to the bot first",
    }
    assert service.ledger.get("student1") is None
    mock_dispatcher.send_text.assert_not_called()


def test_send_then_verify(client, service, mock_dispatcher):
    service.register_handle("student1", 42)
    with patch("regbridge.services.ledger.generate_code", return_value="654321"):
        resp = client.post(SEND_URL, json={"telegram": "Student1"})
    assert resp.status_code == 200
    assert resp.json() == {"success": True}
    assert mock_dispatcher.send_text.call_args.kwargs["to"] == 42
    assert "654321" in mock_dispatcher.send_text.call_args.kwargs["body"]

    resp = client.post(VERIFY_URL, json={"telegram": "student1", "code": "654321"})
    assert resp.status_code == 200
    assert resp.json() == {"success": True}

    resp = client.post(VERIFY_URL, json={"telegram": "student1", "code": "654321"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "No verification code found for this user"


def test_send_code_dispatch_failure(client, service, mock_dispatcher):
    service.register_handle("student1", 42)
    mock_dispatcher.send_text.side_effect = RuntimeError("Forbidden: bot was blocked")
    resp = client.post(SEND_URL, json={"telegram": "student1"})
    assert resp.status_code == 500
    assert "bot was blocked" in resp.json()["error"]
    assert service.ledger.get("student1") is not None


def test_verify_missing_fields(client):
    resp = client.post(VERIFY_URL, json={"telegram": "student1"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Telegram username and code are required"


def test_verify_wrong_code(client, service):
    service.register_handle("student1", 42)
    with patch("regbridge.services.ledger.generate_code", return_value="654321"):
        client.post(SEND_URL, json={"telegram": "student1"})
    resp = client.post(VERIFY_URL, json={"telegram": "student1", "code": "000000"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid verification code"
    assert service.ledger.get("student1") is not None


def test_verify_expired_code(client, service, clock):
    service.register_handle("student1", 42)
    with patch("regbridge.services.ledger.generate_code", return_value="654321"):
        client.post(SEND_URL, json={"telegram": "student1"})
    clock.advance(minutes=11)
    resp = client.post(VERIFY_URL, json={"telegram": "student1", "code": "654321"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Verification code has expired"
    assert service.ledger.get("student1") is None


def test_non_string_code_rejected_with_json_error(client):
    resp = client.post(VERIFY_URL, json={"telegram": "student1", "code": ["1"]})
    assert resp.status_code == 400
    assert resp.json()["success"] is False


def test_cors_preflight_allows_student_headers(client):
    resp = client.options(
        SEND_URL,
        headers={
            "Origin": "https://register.example.com",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "X-Student-Id",
        },
    )
    assert resp.status_code == 200
    assert "POST" in resp.headers["access-control-allow-methods"]
