import smtplib

import httpx
import pytest

from daybrief.errors import ConfigError, DecodeError, DeliveryError, GenerationError, describe_error


@pytest.mark.parametrize(
    "exc, code",
    [
        (ConfigError(["sender_email"]), "CONFIG"),
        (GenerationError("litellm.RateLimitError: 429 Too Many Requests"), "LLM_RATE"),
        (GenerationError("RESOURCE_EXHAUSTED: quota exceeded"), "LLM_QUOTA"),
        (OSError("[Errno 8] nodename nor servname provided, or not known"), "NETWORK_DNS"),
        (DecodeError("no JSON object found"), "BAD_PAYLOAD"),
        (RuntimeError("weird"), "UNKNOWN"),
    ],
)
def test_describe_error_codes(exc, code):
    notice = describe_error(exc, {"op": "tv"})
    assert notice.code == code
    assert len(notice.support_id) == 8
    assert notice.debug.startswith("tv: ")


def test_wrapped_causes_are_inspected():
    try:
        try:
            raise smtplib.SMTPAuthenticationError(535, b"bad credentials")
        except smtplib.SMTPAuthenticationError as inner:
            raise DeliveryError("SMTP auth failed") from inner
    except DeliveryError as outer:
        assert describe_error(outer).code == "SMTP_AUTH"

    try:
        try:
            raise httpx.ConnectTimeout("timed out")
        except httpx.ConnectTimeout as inner:
            raise DeliveryError("SMS send failed") from inner
    except DeliveryError as outer:
        assert describe_error(outer).code == "NETWORK_TIMEOUT"


@pytest.mark.parametrize(
    "message",
    [
        "SMS rejected with HTTP 400: 'To' number +447700900429 is not a valid phone number",
        "Message SM4290f1c2 failed: unknown destination",
    ],
)
def test_digits_429_alone_are_not_a_rate_limit(message):
    assert describe_error(DeliveryError(message)).code == "UNKNOWN"


def test_http_429_status_on_cause_is_a_rate_limit():
    request = httpx.Request("POST", "https://api.twilio.com/2010-04-01/Accounts/AC1/Messages.json")
    response = httpx.Response(429, request=request, text="slow down")
    try:
        try:
            raise httpx.HTTPStatusError("rejected", request=request, response=response)
        except httpx.HTTPStatusError as inner:
            raise DeliveryError("SMS send failed") from inner
    except DeliveryError as outer:
        assert describe_error(outer).code == "LLM_RATE"


def test_flash_text():
    notice = describe_error(ConfigError(["tv_recipient"]))
    text = notice.flash_text()
    assert text.startswith("Configuration incomplete: Missing required settings: tv_recipient")
    assert f"[ref: {notice.support_id}]" in text
