"""
Central configuration for daybrief.

``Settings`` is built once at process start (usually via ``from_env``) and
handed to jobs, senders and the optimizer. Nothing below the CLI reads the
process environment directly.
"""

from __future__ import annotations

import tempfile
from dataclasses import dataclass, field, fields
from typing import Mapping

DEFAULT_MODEL = "gemini/gemini-2.5-pro"

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass(slots=True)
class OptimizerConfig:
    """Knobs for the prompt optimization loop."""

    max_evaluations: int = 12
    batch_size: int = 5  # upper bound on concurrent evaluations per round
    fallback_score: float = 5.0
    seed_id: str = "original"

    def __post_init__(self) -> None:
        if self.batch_size < 1:
            raise ValueError("batch_size must be at least 1")


@dataclass(slots=True)
class Settings:
    """Credentials, recipients and runtime options for every job."""

    gemini_api_key: str | None = None
    model: str = DEFAULT_MODEL
    temperature: float | None = None
    timeout_seconds: float | None = 300.0

    sender_email: str | None = None
    sender_password: str | None = None
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 465

    events_recipient: str | None = None
    games_recipient: str | None = None
    tv_recipient: str | None = None
    phone_number: str | None = None

    twilio_account_sid: str | None = None
    twilio_auth_token: str | None = None
    twilio_from_number: str | None = None

    record_dir: str = field(default_factory=tempfile.gettempdir)
    open_records: bool = False

    @classmethod
    def from_env(cls, environ: Mapping[str, str]) -> "Settings":
        """Build settings from an environment mapping (``os.environ`` in practice)."""

        def get(*names: str) -> str | None:
            for name in names:
                value = environ.get(name)
                if value is not None and value.strip():
                    return value.strip()
            return None

        kwargs: dict[str, object] = {
            "gemini_api_key": get("FINAL_GEMINI_API_KEY", "GEMINI_API_KEY"),
            "sender_email": get("SENDER_EMAIL"),
            "sender_password": get("SENDER_PASSWORD"),
            "events_recipient": get("PERSONAL_NEWSLETTER"),
            "games_recipient": get("RECIPIENT_EMAIL"),
            "tv_recipient": get("TV_NEWSLETTER"),
            "phone_number": get("MY_PHONE_NUMBER"),
            "twilio_account_sid": get("TWILIO_ACCOUNT_SID"),
            "twilio_auth_token": get("TWILIO_AUTH_TOKEN"),
            "twilio_from_number": get("TWILIO_FROM_NUMBER"),
        }
        model = get("DAYBRIEF_MODEL")
        if model:
            kwargs["model"] = model
        smtp_host = get("SMTP_HOST")
        if smtp_host:
            kwargs["smtp_host"] = smtp_host
        smtp_port = get("SMTP_PORT")
        if smtp_port:
            try:
                kwargs["smtp_port"] = int(smtp_port)
            except ValueError as exc:
                raise ValueError(f"SMTP_PORT must be an integer, got {smtp_port!r}") from exc
        record_dir = get("DAYBRIEF_RECORD_DIR")
        if record_dir:
            kwargs["record_dir"] = record_dir
        open_records = get("DAYBRIEF_OPEN_RECORDS")
        if open_records:
            kwargs["open_records"] = open_records.lower() in _TRUE_VALUES
        return cls(**kwargs)  # type: ignore[arg-type]

    def require(self, *names: str) -> None:
        """Raise ``ConfigError`` listing every named field that is unset."""
        from .errors import ConfigError

        known = {f.name for f in fields(self)}
        unknown = [name for name in names if name not in known]
        if unknown:
            raise AttributeError(f"Unknown settings: {', '.join(unknown)}")
        missing = [name for name in names if not getattr(self, name)]
        if missing:
            raise ConfigError(missing)
