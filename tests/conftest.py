from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from email_verification.main import create_app
from email_verification.schemas.email import EmailSendError
from email_verification.services.store import CodeStore
from email_verification.services.sweeper import ExpirySweeper
from email_verification.services.verification import VerificationService

TTL = timedelta(minutes=10)
START = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now: datetime = START) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


class RecordingDispatcher:
    """Keeps every sent code; ``fail`` makes sends raise, ``result`` sets the return value."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str, str]] = []
        self.fail = False
        self.result = True

    def send(self, to_address: str, display_name: str, code: str) -> bool:
        self.sent.append((to_address, display_name, code))
        if self.fail:
            raise EmailSendError("Failed to send verification email")
        return self.result

    def last_code(self, to_address: str) -> str:
        for address, _, code in reversed(self.sent):
            if address == to_address:
                return code
        raise AssertionError(f"no code sent to {to_address}")


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture
def store():
    return CodeStore(TTL)


@pytest.fixture
def service(store, dispatcher, clock):
    return VerificationService(store, dispatcher, clock=clock)


@pytest.fixture
def sweeper(store, clock):
    sweeper = ExpirySweeper(store, interval_seconds=3600, clock=clock)
    yield sweeper
    sweeper.stop(timeout=1)


@pytest.fixture
def client(service, sweeper):
    app = create_app(service=service, sweeper=sweeper)
    with TestClient(app) as test_client:
        yield test_client
