from __future__ import annotations

import html
import logging
import smtplib
import ssl
from datetime import datetime, timezone
from email.message import EmailMessage
from email.utils import formataddr
from typing import Protocol
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from email_verification.config import Settings
from email_verification.schemas.email import EmailSendError

LOGGER = logging.getLogger(__name__)


class EmailDispatcher(Protocol):
    def send(self, to_address: str, display_name: str, code: str) -> bool:
        ...


class ConsoleEmailDispatcher:
    """Logs the code instead of mailing it. For local development only."""

    def send(self, to_address: str, display_name: str, code: str) -> bool:
        LOGGER.info(
            "[VERIFICATION] to=%s name=%s code=%s", to_address, display_name, code
        )
        return True


class SmtpEmailDispatcher:
    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    def send(self, to_address: str, display_name: str, code: str) -> bool:
        settings = self._settings
        if not settings.email_user or not settings.email_pass:
            raise EmailSendError("SMTP credentials are not configured")

        try:
            message = _build_message(settings, to_address, display_name, code)
        except ValueError as exc:
            raise EmailSendError("Invalid verification email headers") from exc

        try:
            with self._connect() as client:
                client.login(settings.email_user, settings.email_pass)
                client.send_message(message)
        except smtplib.SMTPException as exc:
            LOGGER.error("SMTP error sending to=%s: %s", to_address, exc)
            raise EmailSendError("Failed to send verification email") from exc
        except OSError as exc:
            raise EmailSendError("Failed to reach SMTP server") from exc
        return True

    def _connect(self) -> smtplib.SMTP:
        settings = self._settings
        context = ssl.create_default_context()
        if settings.smtp_use_ssl:
            return smtplib.SMTP_SSL(
                settings.smtp_host,
                settings.smtp_port,
                timeout=settings.smtp_timeout_seconds,
                context=context,
            )
        client = smtplib.SMTP(
            settings.smtp_host,
            settings.smtp_port,
            timeout=settings.smtp_timeout_seconds,
        )
        try:
            client.starttls(context=context)
        except OSError:
            client.close()
            raise
        return client


def build_dispatcher(settings: Settings) -> EmailDispatcher:
    if settings.email_transport == "smtp":
        return SmtpEmailDispatcher(settings)
    if settings.email_transport == "console":
        return ConsoleEmailDispatcher()
    raise ValueError(f"Unknown email transport: {settings.email_transport}")


def _build_message(
    settings: Settings, recipient: str, display_name: str, code: str
) -> EmailMessage:
    minutes = max(1, settings.code_ttl_seconds // 60)
    sent_at = _format_sent_at(settings.email_timezone)

    message = EmailMessage()
    message["From"] = formataddr((settings.email_from_name, settings.email_user))
    message["To"] = recipient
    message["Subject"] = settings.email_subject
    message.set_content(
        _build_text_body(settings.email_from_name, display_name, code, minutes)
    )
    message.add_alternative(
        _build_html_body(
            settings.email_from_name, display_name, code, minutes, sent_at
        ),
        subtype="html",
    )
    return message


def _format_sent_at(tz_name: str) -> str:
    try:
        tz = ZoneInfo(tz_name)
    except ZoneInfoNotFoundError:
        LOGGER.warning("Unknown EMAIL_TIMEZONE %s, falling back to UTC", tz_name)
        tz = timezone.utc
    return datetime.now(tz).strftime("%d.%m.%Y %H:%M")


def _build_text_body(brand: str, display_name: str, code: str, minutes: int) -> str:
    return (
        f"Hello, {display_name}!\n\n"
        f"Your {brand} verification code is {code}.\n\n"
        f"It expires in {minutes} minute(s).\n"
        "If you did not register, you can ignore this email."
    )


def _build_html_body(
    brand: str, display_name: str, code: str, minutes: int, sent_at: str
) -> str:
    brand = html.escape(brand)
    name = html.escape(display_name)
    return f"""\
<div style="font-family: system-ui, sans-serif; max-width: 600px; margin: 0 auto; background: #111111; color: #ffffff; border-radius: 12px;">
  <div style="padding: 30px; text-align: center; border-bottom: 1px solid #222;">
    <h1 style="margin: 0; font-size: 22px;">{brand}: confirm your registration</h1>
  </div>
  <div style="padding: 30px;">
    <p style="color: #a0a0a0; font-size: 14px;">Hello, <strong style="color: #ffffff;">{name}</strong>!</p>
    <p style="color: #a0a0a0; font-size: 14px;">Enter this code to finish creating your account:</p>
    <div style="background: #000000; border: 1px solid #333; border-radius: 10px; padding: 25px; text-align: center;">
      <div style="font-size: 36px; font-weight: bold; letter-spacing: 8px; font-family: monospace;">{code}</div>
    </div>
    <p style="color: #666; font-size: 12px;">The code is valid for {minutes} minute(s). If you did not register, ignore this email.</p>
    <p style="color: #666; font-size: 12px;">{name} &middot; {sent_at}</p>
  </div>
</div>
"""
