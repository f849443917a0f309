import asyncio
import io
import smtplib
from urllib.parse import parse_qs

import httpx
import pytest

from daybrief.config import Settings
from daybrief.delivery import mail
from daybrief.delivery.mail import EmailConfig, build_message, mock_send_email, send_email
from daybrief.delivery.sms import SmsConfig, send_sms
from daybrief.errors import ConfigError, DeliveryError


def _config(**overrides):
    values = dict(
        sender_email="me@example.com",
        sender_password="app-pass",
        recipient_email="you@example.com",
        subject="Hello",
        text_content="plain body",
        html_content="<p>html body</p>",
    )
    values.update(overrides)
    return EmailConfig(**values)


class FakeSMTP:
    instances: list["FakeSMTP"] = []
    fail_login: Exception | None = None

    def __init__(self, host, port, **kwargs):
        self.host, self.port, self.kwargs = host, port, kwargs
        self.calls: list[str] = []
        self.sent = []
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def ehlo(self):
        self.calls.append("ehlo")

    def starttls(self, context=None):
        self.calls.append("starttls")

    def login(self, user, password):
        self.calls.append("login")
        if FakeSMTP.fail_login is not None:
            raise FakeSMTP.fail_login

    def send_message(self, msg):
        self.calls.append("send")
        self.sent.append(msg)


@pytest.fixture
def fake_smtp(monkeypatch):
    FakeSMTP.instances = []
    FakeSMTP.fail_login = None
    monkeypatch.setattr(mail.smtplib, "SMTP_SSL", FakeSMTP)
    monkeypatch.setattr(mail.smtplib, "SMTP", FakeSMTP)
    return FakeSMTP


def test_message_has_text_and_html_parts():
    msg = build_message(_config())
    assert msg["To"] == "you@example.com"
    assert msg.is_multipart()
    types = [part.get_content_type() for part in msg.iter_parts()]
    assert types == ["text/plain", "text/html"]


def test_send_over_implicit_tls(fake_smtp, logger):
    send_email(_config(), logger=logger)
    server = fake_smtp.instances[0]
    assert (server.host, server.port) == ("smtp.gmail.com", 465)
    assert "context" in server.kwargs
    assert server.calls == ["login", "send"]
    assert server.sent[0]["Subject"] == "Hello"


def test_send_over_starttls(fake_smtp, logger):
    send_email(_config(smtp_port=587), logger=logger)
    assert fake_smtp.instances[0].calls == ["ehlo", "starttls", "ehlo", "login", "send"]


def test_auth_failure_is_wrapped(fake_smtp, logger):
    fake_smtp.fail_login = smtplib.SMTPAuthenticationError(535, b"nope")
    with pytest.raises(DeliveryError) as info:
        send_email(_config(), logger=logger)
    assert "535" in str(info.value)
    assert isinstance(info.value.__cause__, smtplib.SMTPAuthenticationError)


def test_socket_failure_is_wrapped(fake_smtp, logger):
    fake_smtp.fail_login = ConnectionRefusedError("refused")
    with pytest.raises(DeliveryError):
        send_email(_config(), logger=logger)


def test_missing_credentials(fake_smtp, logger):
    config = EmailConfig.from_settings(Settings(), "you@example.com", "s", "t", "h")
    with pytest.raises(ConfigError) as info:
        send_email(config, logger=logger)
    assert info.value.missing == ["sender_email", "sender_password"]
    assert fake_smtp.instances == []


def test_mock_send_prints_both_bodies():
    out = io.StringIO()
    mock_send_email(_config(), stream=out)
    text = out.getvalue()
    assert "--- 📧 Mock Email Content ---" in text
    assert "Subject: Hello" in text
    assert "plain body" in text and "<p>html body</p>" in text


SMS = SmsConfig(account_sid="AC123", auth_token="token", from_number="+15005550006")


def test_sms_posts_form_to_twilio(logger):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(201, json={"sid": "SM42", "status": "queued"})

    sid = asyncio.run(
        send_sms(SMS, "+447700900000", "Hang in there", logger=logger, transport=httpx.MockTransport(handler))
    )

    assert sid == "SM42"
    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == "https://api.twilio.com/2010-04-01/Accounts/AC123/Messages.json"
    assert request.headers["authorization"].startswith("Basic ")
    form = parse_qs(request.content.decode())
    assert form == {"To": ["+447700900000"], "From": ["+15005550006"], "Body": ["Hang in there"]}


def test_sms_http_error(logger):
    transport = httpx.MockTransport(lambda request: httpx.Response(400, json={"message": "bad number"}))
    with pytest.raises(DeliveryError) as info:
        asyncio.run(send_sms(SMS, "bogus", "hi", logger=logger, transport=transport))
    assert "HTTP 400" in str(info.value)


def test_sms_transport_error(logger):
    def handler(request):
        raise httpx.ConnectError("unreachable", request=request)

    with pytest.raises(DeliveryError) as info:
        asyncio.run(send_sms(SMS, "+44", "hi", logger=logger, transport=httpx.MockTransport(handler)))
    assert isinstance(info.value.__cause__, httpx.ConnectError)


def test_sms_config_requires_twilio_settings():
    with pytest.raises(ConfigError):
        SmsConfig.from_settings(Settings(twilio_account_sid="AC1"))
