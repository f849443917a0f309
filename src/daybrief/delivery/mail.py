"""SMTP email delivery and its dry-run counterpart."""

from __future__ import annotations

import smtplib
import ssl
import sys
from dataclasses import dataclass
from email.message import EmailMessage
from typing import TextIO

from daybrief.config import Settings
from daybrief.errors import ConfigError, DeliveryError
from daybrief.logging.logger import LoggerProtocol, StdOutLogger

STARTTLS_PORT = 587


@dataclass
class EmailConfig:
    sender_email: str
    sender_password: str
    recipient_email: str
    subject: str
    text_content: str
    html_content: str
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 465
    timeout_seconds: float = 20.0

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        recipient_email: str,
        subject: str,
        text_content: str,
        html_content: str,
    ) -> "EmailConfig":
        return cls(
            sender_email=settings.sender_email or "",
            sender_password=settings.sender_password or "",
            recipient_email=recipient_email,
            subject=subject,
            text_content=text_content,
            html_content=html_content,
            smtp_host=settings.smtp_host,
            smtp_port=settings.smtp_port,
        )


def build_message(config: EmailConfig) -> EmailMessage:
    msg = EmailMessage()
    msg["Subject"] = config.subject
    msg["From"] = config.sender_email
    msg["To"] = config.recipient_email
    # text first, then the HTML alternative
    msg.set_content(config.text_content or "")
    if config.html_content:
        msg.add_alternative(config.html_content, subtype="html")
    return msg


def send_email(config: EmailConfig, logger: LoggerProtocol | None = None) -> None:
    """Send over implicit TLS, or STARTTLS when the port is 587."""
    logger = logger or StdOutLogger()
    missing = [name for name in ("sender_email", "sender_password") if not getattr(config, name)]
    if missing:
        raise ConfigError(missing)
    logger.log(f"✉️ Preparing to send email from {config.sender_email}...")
    msg = build_message(config)
    context = ssl.create_default_context()
    try:
        if config.smtp_port == STARTTLS_PORT:
            with smtplib.SMTP(config.smtp_host, config.smtp_port, timeout=config.timeout_seconds) as server:
                server.ehlo()
                server.starttls(context=context)
                server.ehlo()
                server.login(config.sender_email, config.sender_password)
                server.send_message(msg)
        else:
            with smtplib.SMTP_SSL(
                config.smtp_host, config.smtp_port, context=context, timeout=config.timeout_seconds
            ) as server:
                server.login(config.sender_email, config.sender_password)
                server.send_message(msg)
    except smtplib.SMTPAuthenticationError as exc:
        raise DeliveryError(f"SMTP auth failed (code {exc.smtp_code}) for {config.sender_email}") from exc
    except (smtplib.SMTPException, OSError) as exc:
        raise DeliveryError(f"Email send failed: {type(exc).__name__}: {exc}") from exc

    logger.log(f"🚀 Email sent successfully to {config.recipient_email}!")


def mock_send_email(config: EmailConfig, stream: TextIO | None = None) -> None:
    out = stream or sys.stdout
    lines = [
        "",
        "--- 📧 Mock Email Content ---",
        f"To: {config.recipient_email}",
        f"Subject: {config.subject}",
        "----------------------------",
        "📝 Text Content:",
        config.text_content,
        "",
        "🌐 HTML Content:",
        config.html_content,
        "----------------------------",
    ]
    print("\n".join(lines), file=out, flush=True)
