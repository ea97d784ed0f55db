from datetime import datetime, timedelta
import threading
from typing import Optional

from email_verification.schemas.verification import FailureReason, PendingVerification


class CodeStore:
    """In-memory pending verifications keyed by email.

    Every operation runs under a single lock, including the check-then-delete
    in :meth:`consume`, so a sweep or a replacing ``put`` cannot interleave
    with a verification.
    """

    def __init__(self, ttl: timedelta) -> None:
        self._ttl = ttl
        self._records: dict[str, PendingVerification] = {}
        self._lock = threading.Lock()

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def put(self, record: PendingVerification) -> None:
        with self._lock:
            self._records[record.email] = record

    def get(self, email: str) -> Optional[PendingVerification]:
        with self._lock:
            return self._records.get(email)

    def remove(self, email: str) -> None:
        with self._lock:
            self._records.pop(email, None)

    def is_expired(self, record: PendingVerification, now: datetime) -> bool:
        return now - record.issued_at > self._ttl

    def consume(self, email: str, code: str, now: datetime) -> Optional[FailureReason]:
        with self._lock:
            record = self._records.get(email)
            if record is None:
                return FailureReason.NOT_FOUND
            if self.is_expired(record, now):
                del self._records[email]
                return FailureReason.EXPIRED
            if record.code != code:
                return FailureReason.MISMATCH
            del self._records[email]
            return None

    def sweep_expired(self, now: datetime) -> int:
        with self._lock:
            expired = [
                email
                for email, record in self._records.items()
                if self.is_expired(record, now)
            ]
            for email in expired:
                del self._records[email]
            return len(expired)
