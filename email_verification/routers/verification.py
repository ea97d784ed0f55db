from fastapi import APIRouter, Depends, HTTPException, Request, status

from email_verification.schemas.verification import (
    FailureReason,
    SendCodeRequest,
    VerificationResponse,
    VerificationResult,
    VerifyCodeRequest,
)
from email_verification.services.verification import VerificationService

router = APIRouter(tags=["verification"])


def get_verification_service(request: Request) -> VerificationService:
    return request.app.state.verification_service


def _raise_for_failure(result: VerificationResult) -> None:
    reason = result.reason
    status_code = (
        status.HTTP_502_BAD_GATEWAY
        if reason is FailureReason.DISPATCH_FAILED
        else status.HTTP_400_BAD_REQUEST
    )
    raise HTTPException(
        status_code=status_code,
        detail={"ok": False, "reason": reason.value, "message": reason.message},
    )


@router.post("/send-code", response_model=VerificationResponse)
def send_code(
    payload: SendCodeRequest,
    service: VerificationService = Depends(get_verification_service),
) -> VerificationResponse:
    result = service.request_code(payload.email, payload.name)
    if not result.ok:
        _raise_for_failure(result)
    return VerificationResponse(ok=True, message="Code sent")


@router.post("/verify-code", response_model=VerificationResponse)
def verify_code(
    payload: VerifyCodeRequest,
    service: VerificationService = Depends(get_verification_service),
) -> VerificationResponse:
    result = service.verify_code(payload.email, payload.code)
    if not result.ok:
        _raise_for_failure(result)
    return VerificationResponse(ok=True, message="Email verified")
