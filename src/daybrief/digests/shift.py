"""Night-shift motivational SMS."""

from __future__ import annotations

from datetime import datetime

import pytz

from daybrief.delivery.sms import SmsConfig, send_sms
from daybrief.logging.logger import LogLevel

from .base import JobContext, ask_json, parse_model
from .models import SHIFT_SIGNATURE, ShiftMessage

UK_TZ = "Europe/London"
SHIFT_START_HOUR = 19
SHIFT_END_HOUR = 7
MAX_MESSAGE_CHARS = 200


def remaining_hours(hour: int) -> int:
    """Hours left in a 19:00 to 07:00 shift at ``hour`` (0-23); 0 outside the shift."""
    if not 0 <= hour <= 23:
        raise ValueError(f"hour must be in 0..23, got {hour}")
    if hour >= SHIFT_START_HOUR:
        return 24 - hour + SHIFT_END_HOUR
    if hour < SHIFT_END_HOUR:
        return SHIFT_END_HOUR - hour
    return 0


def uk_now(now: datetime | None = None) -> datetime:
    tz = pytz.timezone(UK_TZ)
    if now is None:
        return datetime.now(tz)
    if now.tzinfo is None:
        # naive datetimes are taken as already UK-local
        return tz.localize(now)
    return now.astimezone(tz)


def build_prompt(hours_left: int) -> str:
    return f"""Create a funny motivational message for a night shift paramedic with {hours_left} hours left in the shift (from 7 pm to 7 am UK time). The message should indicate how much is left in the shift and include a joke related to our golden retriever Kevin who is naughty.

Keep the message very casual, try to be funny, and not too cheesy and keep it under {MAX_MESSAGE_CHARS} characters. End it with '{SHIFT_SIGNATURE}'.

Return the response as a JSON object with the following structure:

{{
  "message": "Your message text here, mentioning {hours_left} hours left and a joke."
}}

Make the message encouraging, light-hearted, and relevant to a night shift as a paramedic.

Return ONLY the JSON object, no additional text or formatting."""


async def run(ctx: JobContext) -> ShiftMessage:
    ctx.settings.require("phone_number")
    sms_config = None if ctx.dry_run else SmsConfig.from_settings(ctx.settings)

    local = uk_now(ctx.now)
    hours_left = remaining_hours(local.hour)
    ctx.logger.log(f"Current UK time: {local:%d/%m/%Y, %H:%M:%S}")
    ctx.logger.log(f"Remaining hours in shift: {hours_left}")

    message = parse_model(ShiftMessage, await ask_json(ctx, build_prompt(hours_left), "shift"))
    if len(message.message) > MAX_MESSAGE_CHARS:
        ctx.logger.log(
            f"⚠️  Message is {len(message.message)} characters (limit {MAX_MESSAGE_CHARS})",
            LogLevel.WARNING,
        )
    ctx.echo("📧 Shift Motivational Message:")
    ctx.echo(message.message)

    if sms_config is None:
        ctx.echo("\n🟢 DRY RUN: SMS not sent.")
        ctx.echo("\n🟢 DRY RUN: JSON Data:")
        ctx.echo(message.model_dump_json(indent=2))
        return message
    await send_sms(sms_config, ctx.settings.phone_number, message.message, logger=ctx.logger)  # type: ignore[arg-type]
    return message
