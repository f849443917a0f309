"""SMS delivery through the Twilio Messages REST API."""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from daybrief.config import Settings
from daybrief.errors import DeliveryError
from daybrief.logging.logger import LoggerProtocol, StdOutLogger

TWILIO_API_BASE = "https://api.twilio.com/2010-04-01"


@dataclass
class SmsConfig:
    account_sid: str
    auth_token: str
    from_number: str
    timeout_seconds: float = 20.0
    api_base: str = TWILIO_API_BASE

    @classmethod
    def from_settings(cls, settings: Settings) -> "SmsConfig":
        settings.require("twilio_account_sid", "twilio_auth_token", "twilio_from_number")
        return cls(
            account_sid=settings.twilio_account_sid,  # type: ignore[arg-type]
            auth_token=settings.twilio_auth_token,  # type: ignore[arg-type]
            from_number=settings.twilio_from_number,  # type: ignore[arg-type]
        )

    @property
    def messages_url(self) -> str:
        return f"{self.api_base}/Accounts/{self.account_sid}/Messages.json"


async def send_sms(
    config: SmsConfig,
    to_number: str,
    body: str,
    *,
    logger: LoggerProtocol | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> str | None:
    """Post one message and return its Twilio SID."""
    logger = logger or StdOutLogger()
    logger.log(f"📱 Sending SMS to {to_number}...")
    timeout = httpx.Timeout(config.timeout_seconds)
    try:
        async with httpx.AsyncClient(
            auth=(config.account_sid, config.auth_token),
            timeout=timeout,
            transport=transport,
        ) as client:
            response = await client.post(
                config.messages_url,
                data={"To": to_number, "From": config.from_number, "Body": body},
            )
            response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise DeliveryError(
            f"SMS rejected with HTTP {exc.response.status_code}: {exc.response.text[:200]}"
        ) from exc
    except httpx.HTTPError as exc:
        raise DeliveryError(f"SMS send failed: {type(exc).__name__}: {exc}") from exc

    try:
        sid = response.json().get("sid")
    except ValueError:
        sid = None
    logger.log(f"🚀 SMS sent successfully to {to_number}!")
    return sid
