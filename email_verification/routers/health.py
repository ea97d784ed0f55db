from fastapi import APIRouter, Depends

from email_verification.routers.verification import get_verification_service
from email_verification.schemas.verification import HealthResponse
from email_verification.services.verification import VerificationService

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
def health(
    service: VerificationService = Depends(get_verification_service),
) -> HealthResponse:
    return HealthResponse(status="ok", pending_codes=len(service.store))
