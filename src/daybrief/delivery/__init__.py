"""Email and SMS delivery."""

from .mail import EmailConfig, build_message, mock_send_email, send_email
from .sms import SmsConfig, send_sms

__all__ = [
    "EmailConfig",
    "SmsConfig",
    "build_message",
    "mock_send_email",
    "send_email",
    "send_sms",
]
