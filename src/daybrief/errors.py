"""
Exception taxonomy and user-facing error notices.

Core optimizer code converts ``GenerationError`` and ``DecodeError`` into
fallback results; jobs let ``ConfigError`` and ``DeliveryError`` propagate to
the CLI, which turns them into an ``ErrorNotice`` for the terminal.
"""

from __future__ import annotations

import re
import smtplib
import uuid
from dataclasses import dataclass
from typing import Any

import httpx


class DaybriefError(Exception):
    """Base class for all errors raised by daybrief."""


class GenerationError(DaybriefError):
    """The oracle call did not return text."""


class DecodeError(DaybriefError):
    """Text could not be interpreted as a JSON object."""

    def __init__(self, message: str, raw: str = "") -> None:
        super().__init__(message)
        self.raw = raw


class ConfigError(DaybriefError):
    """Required settings are missing or malformed."""

    def __init__(self, missing: list[str] | tuple[str, ...] = (), message: str | None = None) -> None:
        self.missing = list(missing)
        if message is None:
            message = "Missing required settings: " + ", ".join(self.missing)
        super().__init__(message)


class DeliveryError(DaybriefError):
    """An email or SMS could not be sent."""


@dataclass
class ErrorNotice:
    code: str  # short machine code, e.g. "NETWORK_DNS", "SMTP_AUTH"
    title: str
    user_message: str
    hint: str | None = None
    support_id: str = ""
    debug: str | None = None  # long detail for logs only

    def flash_text(self) -> str:
        base = f"{self.title}: {self.user_message}"
        if self.hint:
            base += f" ({self.hint})"
        base += f" [ref: {self.support_id}]"
        return base


def _is_dns_error(exc: BaseException) -> bool:
    msg = str(exc)
    return "nodename nor servname provided" in msg or "Name or service not known" in msg


_RATE_LIMIT_TEXT = re.compile(r"rate[_ ]?limit|too many requests|(?:http|status|code|error)\W{0,3}429\b")


def _status_code(exc: BaseException) -> int | None:
    code = getattr(exc, "status_code", None)
    if code is None:
        code = getattr(getattr(exc, "response", None), "status_code", None)
    return code if isinstance(code, int) else None


def _rate_or_quota(exc: BaseException) -> str | None:
    s = str(exc).lower()
    if _status_code(exc) == 429 or _RATE_LIMIT_TEXT.search(s):
        return "RATE_LIMIT"
    if "quota" in s or "resource_exhausted" in s:
        return "QUOTA"
    return None


def _root_cause(exc: BaseException) -> BaseException:
    seen = {id(exc)}
    current = exc
    while current.__cause__ is not None and id(current.__cause__) not in seen:
        current = current.__cause__
        seen.add(id(current))
    return current


def describe_error(exc: BaseException, context: dict[str, Any] | None = None) -> ErrorNotice:
    """
    Map a raw exception to a short, user-safe notice.

    The chain of ``__cause__`` exceptions is inspected so wrapped transport
    errors (e.g. ``DeliveryError`` from ``SMTPAuthenticationError``) still
    map to the specific notice.
    """
    ctx = context or {}
    op = ctx.get("op", "operation")
    support_id = uuid.uuid4().hex[:8]
    root = _root_cause(exc)
    debug = f"{op}: {exc!r}"

    if isinstance(exc, ConfigError):
        return ErrorNotice(
            code="CONFIG",
            title="Configuration incomplete",
            user_message=str(exc),
            hint="Set the variables in your environment or .env file.",
            support_id=support_id,
            debug=debug,
        )

    if _is_dns_error(exc) or _is_dns_error(root):
        return ErrorNotice(
            code="NETWORK_DNS",
            title="Network problem",
            user_message="The model provider could not be reached from this network.",
            hint="If you are on a VPN, disconnect or try another network.",
            support_id=support_id,
            debug=debug,
        )

    rate_or_quota = _rate_or_quota(exc) or _rate_or_quota(root)
    if rate_or_quota == "RATE_LIMIT":
        return ErrorNotice(
            code="LLM_RATE",
            title="Busy right now",
            user_message="Too many requests were sent to the model provider.",
            hint="Retry in a few seconds.",
            support_id=support_id,
            debug=debug,
        )
    if rate_or_quota == "QUOTA":
        return ErrorNotice(
            code="LLM_QUOTA",
            title="Quota exceeded",
            user_message="The model provider usage quota has been reached.",
            support_id=support_id,
            debug=debug,
        )

    if isinstance(root, smtplib.SMTPAuthenticationError):
        return ErrorNotice(
            code="SMTP_AUTH",
            title="Email send failed",
            user_message="The email account rejected the sign-in.",
            hint="Check SENDER_EMAIL and use a Gmail app password for SENDER_PASSWORD.",
            support_id=support_id,
            debug=debug,
        )

    if isinstance(root, (httpx.ConnectError, httpx.ConnectTimeout, httpx.ReadTimeout, TimeoutError)):
        return ErrorNotice(
            code="NETWORK_TIMEOUT",
            title="Network timeout",
            user_message="A request took too long to respond.",
            hint="Retry in a moment.",
            support_id=support_id,
            debug=debug,
        )

    if isinstance(exc, DecodeError):
        return ErrorNotice(
            code="BAD_PAYLOAD",
            title="Unreadable model output",
            user_message="The model did not return valid JSON.",
            hint="Run again; the output varies between calls.",
            support_id=support_id,
            debug=debug,
        )

    return ErrorNotice(
        code="UNKNOWN",
        title="Something went wrong",
        user_message="An unexpected error occurred.",
        hint="Run with --verbose for details.",
        support_id=support_id,
        debug=debug,
    )
