from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Callable, Optional

from email_verification.services.store import CodeStore

LOGGER = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ExpirySweeper:
    """Periodically drops expired codes from a :class:`CodeStore`.

    The sweep runs on a daemon thread until :meth:`stop` is called. Failures
    inside a sweep are logged and the loop keeps going.
    """

    def __init__(
        self,
        store: CodeStore,
        interval_seconds: float = 60,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._interval_seconds = interval_seconds
        self._clock = clock
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run, name="code-expiry-sweeper", daemon=True
        )
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def run_once(self) -> int:
        removed = self._store.sweep_expired(self._clock())
        if removed:
            LOGGER.info("Swept %d expired verification code(s)", removed)
        return removed

    def _run(self) -> None:
        while not self._stop_event.wait(self._interval_seconds):
            try:
                self.run_once()
            except Exception:
                LOGGER.exception("Verification code sweep failed")
