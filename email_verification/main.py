from datetime import timedelta
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from email_verification.config import settings
from email_verification.routers import health, verification
from email_verification.services.email import build_dispatcher
from email_verification.services.store import CodeStore
from email_verification.services.sweeper import ExpirySweeper
from email_verification.services.verification import VerificationService


def build_service() -> VerificationService:
    store = CodeStore(timedelta(seconds=settings.code_ttl_seconds))
    return VerificationService(store, build_dispatcher(settings))


def create_app(
    service: Optional[VerificationService] = None,
    sweeper: Optional[ExpirySweeper] = None,
) -> FastAPI:
    service = service or build_service()
    sweeper = sweeper or ExpirySweeper(
        service.store, settings.code_sweep_interval_seconds
    )

    app = FastAPI(title="Email Verification Server")
    app.state.verification_service = service
    app.state.expiry_sweeper = sweeper

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type"],
    )

    app.include_router(health.router, prefix="/api")
    app.include_router(verification.router, prefix="/api")

    @app.on_event("startup")
    def startup() -> None:
        sweeper.start()

    @app.on_event("shutdown")
    def shutdown() -> None:
        sweeper.stop()

    @app.get("/")
    def root():
        return {"status": "ok", "message": "Email verification server is running"}

    return app


app = create_app()
