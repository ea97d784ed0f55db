import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv(override=True)


def _env_bool(name: str, default: bool = False) -> bool:
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_list(name: str, default: str) -> tuple[str, ...]:
    raw_value = os.getenv(name, default)
    return tuple(item.strip() for item in raw_value.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    code_ttl_seconds: int = int(os.getenv("CODE_TTL_SECONDS", "600"))
    code_sweep_interval_seconds: int = int(
        os.getenv("CODE_SWEEP_INTERVAL_SECONDS", "60")
    )
    email_transport: str = os.getenv("EMAIL_TRANSPORT", "smtp").strip().lower()
    email_user: str = os.getenv("EMAIL_USER", "")
    email_pass: str = os.getenv("EMAIL_PASS", "")
    email_from_name: str = os.getenv("EMAIL_FROM_NAME", "LostRP Forum")
    email_subject: str = os.getenv(
        "EMAIL_SUBJECT", "Your LostRP Forum verification code"
    )
    email_timezone: str = os.getenv("EMAIL_TIMEZONE", "Europe/Moscow")
    smtp_host: str = os.getenv("SMTP_HOST", "smtp.gmail.com")
    smtp_port: int = int(os.getenv("SMTP_PORT", "465"))
    smtp_use_ssl: bool = _env_bool("SMTP_USE_SSL", True)
    smtp_timeout_seconds: int = int(os.getenv("SMTP_TIMEOUT_SECONDS", "10"))
    cors_origins: tuple[str, ...] = _env_list("CORS_ORIGINS", "*")
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "3001"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()


settings = Settings()
