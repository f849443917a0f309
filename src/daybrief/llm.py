"""
Model access for daybrief.

Everything that talks to a generative model goes through an ``Oracle``: an
async callable taking a prompt and returning the response text. The default
implementation uses LiteLLM so any provider/model string works
(``gemini/gemini-2.5-pro`` by default).
"""

from __future__ import annotations

import time
from typing import Any, Protocol, runtime_checkable

from .config import DEFAULT_MODEL, Settings
from .errors import GenerationError
from .logging.logger import LoggerProtocol, LogLevel, StdOutLogger


@runtime_checkable
class Oracle(Protocol):
    async def __call__(self, prompt: str) -> str: ...


class LiteLLMOracle:
    """Single-attempt text completion through ``litellm.acompletion``."""

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        *,
        api_key: str | None = None,
        temperature: float | None = None,
        timeout_seconds: float | None = None,
        logger: LoggerProtocol | None = None,
        **completion_kwargs: Any,
    ) -> None:
        self.model = model
        self.api_key = api_key
        self.temperature = temperature
        self.timeout_seconds = timeout_seconds
        self.completion_kwargs = completion_kwargs
        self.logger: LoggerProtocol = logger or StdOutLogger()

    @classmethod
    def from_settings(cls, settings: Settings, logger: LoggerProtocol | None = None) -> "LiteLLMOracle":
        return cls(
            settings.model,
            api_key=settings.gemini_api_key,
            temperature=settings.temperature,
            timeout_seconds=settings.timeout_seconds,
            logger=logger,
        )

    async def __call__(self, prompt: str) -> str:
        from litellm import acompletion

        kwargs: dict[str, Any] = dict(self.completion_kwargs)
        if self.api_key:
            kwargs["api_key"] = self.api_key
        if self.temperature is not None:
            kwargs["temperature"] = self.temperature
        if self.timeout_seconds is not None:
            kwargs["timeout"] = self.timeout_seconds

        self.logger.log(f"🤖 Generating content with {self.model}...", LogLevel.DEBUG)
        start = time.time()
        try:
            response = await acompletion(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                **kwargs,
            )
            text = response.choices[0].message.content
        except Exception as exc:
            raise GenerationError(f"{self.model} call failed: {exc}") from exc

        if not isinstance(text, str) or not text.strip():
            raise GenerationError(f"{self.model} returned no text")
        self.logger.log(
            f"✅ Content generated in {time.time() - start:.1f}s ({len(text)} chars)",
            LogLevel.DEBUG,
        )
        return text
