from dataclasses import replace
from datetime import timedelta

from fastapi.testclient import TestClient

from email_verification.config import Settings
from email_verification.main import create_app
from email_verification.services import email as email_service
from email_verification.services.email import SmtpEmailDispatcher
from email_verification.services.verification import VerificationService

from conftest import TTL


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_sweeper_runs_with_app(client):
    assert client.app.state.expiry_sweeper.running is True


def test_send_then_verify(client, dispatcher):
    response = client.post("/api/send-code", json={"email": "a@x.com", "name": "Ann"})
    assert response.status_code == 200
    assert response.json() == {"ok": True, "message": "Code sent"}
    assert client.get("/api/health").json() == {"status": "ok", "pending_codes": 1}

    code = dispatcher.last_code("a@x.com")
    response = client.post("/api/verify-code", json={"email": "a@x.com", "code": code})
    assert response.status_code == 200
    assert response.json() == {"ok": True, "message": "Email verified"}

    response = client.post("/api/verify-code", json={"email": "a@x.com", "code": code})
    assert response.status_code == 400
    assert response.json()["detail"]["reason"] == "not_found"


def test_send_code_missing_name(client, dispatcher):
    response = client.post("/api/send-code", json={"email": "a@x.com"})
    assert response.status_code == 400
    assert response.json()["detail"] == {
        "ok": False,
        "reason": "invalid_input",
        "message": "Required fields are missing",
    }
    assert dispatcher.sent == []


def test_verify_code_missing_code(client):
    response = client.post("/api/verify-code", json={"email": "a@x.com"})
    assert response.status_code == 400
    assert response.json()["detail"]["reason"] == "invalid_input"


def test_dispatch_failure_is_bad_gateway(client, dispatcher):
    dispatcher.fail = True

    response = client.post("/api/send-code", json={"email": "b@x.com", "name": "Bob"})
    assert response.status_code == 502
    assert response.json()["detail"]["reason"] == "dispatch_failed"

    code = dispatcher.last_code("b@x.com")
    response = client.post("/api/verify-code", json={"email": "b@x.com", "code": code})
    assert response.status_code == 200


def test_wrong_code_then_expired(client, dispatcher, clock):
    client.post("/api/send-code", json={"email": "a@x.com", "name": "Ann"})
    code = dispatcher.last_code("a@x.com")
    wrong = "100000" if code != "100000" else "100001"

    response = client.post("/api/verify-code", json={"email": "a@x.com", "code": wrong})
    assert response.json()["detail"]["reason"] == "mismatch"

    clock.advance(TTL + timedelta(seconds=1))
    response = client.post("/api/verify-code", json={"email": "a@x.com", "code": code})
    assert response.status_code == 400
    assert response.json()["detail"] == {
        "ok": False,
        "reason": "expired",
        "message": "Code expired",
    }


def test_malformed_address_is_dispatch_failed(store, clock, sweeper, monkeypatch):
    class FakeSmtp:
        def __init__(self, *args, **kwargs):
            pass

        def __enter__(self):
            return self

        def __exit__(self, *exc_info):
            return False

        def login(self, user, password):
            pass

        def send_message(self, message):
            pass

    monkeypatch.setattr(email_service.smtplib, "SMTP_SSL", FakeSmtp)
    settings = replace(
        Settings(),
        email_user="forum@example.com",
        email_pass="app-password",
        smtp_use_ssl=True,
    )
    service = VerificationService(store, SmtpEmailDispatcher(settings), clock=clock)
    app = create_app(service=service, sweeper=sweeper)

    with TestClient(app) as client:
        response = client.post(
            "/api/send-code", json={"email": "a@x.com\nBcc: z@x.com", "name": "Ann"}
        )

    assert response.status_code == 502
    assert response.json()["detail"]["reason"] == "dispatch_failed"
    assert len(store) == 1
