import asyncio
import io
from datetime import datetime, timezone

import pytest
from conftest import ScriptedOracle

from daybrief.config import Settings
from daybrief.digests import JobContext, shift
from daybrief.errors import ConfigError, DecodeError
from daybrief.logging.logger import LogLevel


@pytest.mark.parametrize(
    "hour, expected",
    [(19, 12), (20, 11), (23, 8), (0, 7), (3, 4), (6, 1), (7, 0), (12, 0), (18, 0)],
)
def test_remaining_hours(hour, expected):
    assert shift.remaining_hours(hour) == expected


@pytest.mark.parametrize("hour", [-1, 24])
def test_remaining_hours_rejects_bad_hours(hour):
    with pytest.raises(ValueError):
        shift.remaining_hours(hour)


def test_uk_now_converts_aware_datetimes():
    # 21:30 UTC in October is 22:30 in London (BST)
    local = shift.uk_now(datetime(2025, 10, 6, 21, 30, tzinfo=timezone.utc))
    assert local.hour == 22
    # after the clocks go back London matches UTC
    assert shift.uk_now(datetime(2025, 11, 6, 21, 30, tzinfo=timezone.utc)).hour == 21
    assert shift.uk_now(datetime(2025, 10, 6, 3, 0)).hour == 3


def test_prompt_mentions_hours_and_signature():
    prompt = shift.build_prompt(5)
    assert "5 hours left" in prompt
    assert "Sent from the machine on behalf of Ahmed" in prompt


def _ctx(oracle, logger, *, settings=None, dry_run=True, now=datetime(2025, 10, 6, 23, 15)):
    return JobContext(
        settings=settings or Settings(phone_number="+447700900000"),
        oracle=oracle,
        dry_run=dry_run,
        logger=logger,
        now=now,
        stream=io.StringIO(),
    )


def test_dry_run_prints_message(logger):
    oracle = ScriptedOracle('{"message": "8 hours to go! Kevin ate the defib pads. Sent from the machine on behalf of Ahmed"}')
    ctx = _ctx(oracle, logger)
    message = asyncio.run(shift.run(ctx))

    assert "8 hours left" in oracle.prompts[0]
    assert message.message.startswith("8 hours to go!")
    out = ctx.stream.getvalue()
    assert "📧 Shift Motivational Message:" in out
    assert "DRY RUN: SMS not sent." in out
    assert "Remaining hours in shift: 8" in logger.at(LogLevel.INFO)


def test_long_message_warns(logger):
    oracle = ScriptedOracle('{"message": "' + "x" * 250 + '"}')
    asyncio.run(shift.run(_ctx(oracle, logger)))
    assert any("250 characters" in m for m in logger.at(LogLevel.WARNING))


def test_empty_message_is_rejected(logger):
    with pytest.raises(DecodeError):
        asyncio.run(shift.run(_ctx(ScriptedOracle('{"message": "  "}'), logger)))


def test_phone_number_required(logger):
    oracle = ScriptedOracle()
    with pytest.raises(ConfigError):
        asyncio.run(shift.run(_ctx(oracle, logger, settings=Settings())))
    assert oracle.prompts == []


def test_twilio_settings_required_when_sending(logger):
    with pytest.raises(ConfigError) as info:
        asyncio.run(shift.run(_ctx(ScriptedOracle(), logger, dry_run=False)))
    assert info.value.missing == ["twilio_account_sid", "twilio_auth_token", "twilio_from_number"]


def test_live_run_sends_sms(monkeypatch, logger):
    sent = {}

    async def fake_send_sms(config, to_number, body, *, logger=None, transport=None):
        sent.update(to=to_number, body=body, sid=config.account_sid)
        return "SM123"

    monkeypatch.setattr(shift, "send_sms", fake_send_sms)
    settings = Settings(
        phone_number="+447700900000",
        twilio_account_sid="AC1",
        twilio_auth_token="token",
        twilio_from_number="+15005550006",
    )
    asyncio.run(shift.run(_ctx(ScriptedOracle('{"message": "Nearly there"}'), logger, settings=settings, dry_run=False)))
    assert sent == {"to": "+447700900000", "body": "Nearly there", "sid": "AC1"}

