"""
Plumbing shared by the digest jobs.

A job asks the oracle for JSON, validates it into a pydantic model, renders
an ``EmailDigest`` and hands it to ``deliver_email``. In dry-run mode the
decoded payload and a mock email are printed instead of being sent.
"""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, TextIO, TypeVar

from pydantic import BaseModel, ValidationError

from daybrief.config import Settings
from daybrief.decode import decode_object
from daybrief.delivery.mail import EmailConfig, mock_send_email, send_email
from daybrief.errors import DecodeError
from daybrief.llm import Oracle
from daybrief.logging.logger import LoggerProtocol, StdOutLogger
from daybrief.logging.sink import NullRecordSink, RecordSink, render_exchange, safe_record

ModelT = TypeVar("ModelT", bound=BaseModel)


@dataclass
class EmailDigest:
    subject: str
    text: str
    html: str


@dataclass
class JobContext:
    settings: Settings
    oracle: Oracle
    dry_run: bool = False
    sink: RecordSink = field(default_factory=NullRecordSink)
    logger: LoggerProtocol = field(default_factory=StdOutLogger)
    now: datetime | None = None
    stream: TextIO | None = None

    def today(self) -> datetime:
        return self.now or datetime.now()

    def echo(self, text: str) -> None:
        print(text, file=self.stream or sys.stdout, flush=True)

    def require_email(self, recipient_field: str) -> str:
        """Check the settings needed to email ``recipient_field`` and return the address."""
        names = [recipient_field] if self.dry_run else [recipient_field, "sender_email", "sender_password"]
        self.settings.require(*names)
        return getattr(self.settings, recipient_field)


async def ask_json(ctx: JobContext, prompt: str, category: str) -> dict[str, Any]:
    """Send ``prompt`` and decode the reply; the exchange is recorded under ``category``."""
    response = await ctx.oracle(prompt)
    safe_record(ctx.sink, ctx.logger, category, render_exchange(category, prompt, response))
    return decode_object(response)


def parse_model(model_cls: type[ModelT], data: dict[str, Any]) -> ModelT:
    try:
        return model_cls.model_validate(data)
    except ValidationError as exc:
        raise DecodeError(f"{model_cls.__name__} payload did not validate: {exc}", raw=json.dumps(data)) from exc


def deliver_email(ctx: JobContext, recipient: str, digest: EmailDigest, payload: BaseModel) -> None:
    config = EmailConfig.from_settings(ctx.settings, recipient, digest.subject, digest.text, digest.html)
    if ctx.dry_run:
        ctx.echo("📊 JSON Data:")
        ctx.echo(payload.model_dump_json(by_alias=True, indent=2))
        mock_send_email(config, stream=ctx.stream)
        return
    send_email(config, logger=ctx.logger)
