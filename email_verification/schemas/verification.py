from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class FailureReason(str, Enum):
    INVALID_INPUT = "invalid_input"
    DISPATCH_FAILED = "dispatch_failed"
    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    MISMATCH = "mismatch"

    @property
    def message(self) -> str:
        return _FAILURE_MESSAGES[self]


_FAILURE_MESSAGES = {
    FailureReason.INVALID_INPUT: "Required fields are missing",
    FailureReason.DISPATCH_FAILED: "Failed to send verification email",
    FailureReason.NOT_FOUND: "Code not found or expired",
    FailureReason.EXPIRED: "Code expired",
    FailureReason.MISMATCH: "Invalid code",
}


@dataclass(frozen=True)
class PendingVerification:
    email: str
    code: str
    display_name: str
    issued_at: datetime


@dataclass(frozen=True)
class VerificationResult:
    ok: bool
    reason: Optional[FailureReason] = None

    @classmethod
    def success(cls) -> "VerificationResult":
        return cls(ok=True)

    @classmethod
    def failure(cls, reason: FailureReason) -> "VerificationResult":
        return cls(ok=False, reason=reason)


# Fields are optional so that missing values reach the service and come back
# as invalid_input instead of a schema validation error.
class SendCodeRequest(BaseModel):
    email: Optional[str] = None
    name: Optional[str] = None


class VerifyCodeRequest(BaseModel):
    email: Optional[str] = None
    code: Optional[str] = None


class VerificationResponse(BaseModel):
    ok: bool
    message: str


class HealthResponse(BaseModel):
    status: str
    pending_codes: int
