from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from email_verification.schemas.email import EmailSendError
from email_verification.schemas.verification import (
    FailureReason,
    PendingVerification,
    VerificationResult,
)
from email_verification.services.codes import generate_code
from email_verification.services.email import EmailDispatcher
from email_verification.services.store import CodeStore

LOGGER = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class VerificationService:
    """Issues registration codes and checks them.

    ``request_code`` stores the new code before handing it to the dispatcher,
    and a failed dispatch leaves the stored code in place. ``verify_code`` is
    single-use: the record is deleted on success or when found expired, and
    kept on a mismatch.
    """

    def __init__(
        self,
        store: CodeStore,
        dispatcher: EmailDispatcher,
        clock: Callable[[], datetime] = _utcnow,
        code_generator: Callable[[], str] = generate_code,
    ) -> None:
        self._store = store
        self._dispatcher = dispatcher
        self._clock = clock
        self._generate_code = code_generator

    @property
    def store(self) -> CodeStore:
        return self._store

    def request_code(
        self, email: Optional[str], display_name: Optional[str]
    ) -> VerificationResult:
        if not email or not display_name:
            return VerificationResult.failure(FailureReason.INVALID_INPUT)

        code = self._generate_code()
        self._store.put(
            PendingVerification(
                email=email,
                code=code,
                display_name=display_name,
                issued_at=self._clock(),
            )
        )
        LOGGER.info("Verification code issued for %s", email)

        try:
            delivered = self._dispatcher.send(email, display_name, code)
        except EmailSendError as exc:
            LOGGER.error("Verification email to %s failed: %s", email, exc)
            delivered = False
        except Exception:
            LOGGER.exception("Email dispatcher raised for %s", email)
            delivered = False
        if not delivered:
            LOGGER.warning("Verification code for %s stored but not delivered", email)
            return VerificationResult.failure(FailureReason.DISPATCH_FAILED)
        return VerificationResult.success()

    def verify_code(
        self, email: Optional[str], submitted_code: Optional[str]
    ) -> VerificationResult:
        if not email or not submitted_code:
            return VerificationResult.failure(FailureReason.INVALID_INPUT)

        reason = self._store.consume(email, submitted_code, self._clock())
        if reason is None:
            LOGGER.info("Email %s verified", email)
            return VerificationResult.success()
        if reason is FailureReason.EXPIRED:
            LOGGER.warning("Expired verification code submitted for %s", email)
        return VerificationResult.failure(reason)
