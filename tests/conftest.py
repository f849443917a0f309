from __future__ import annotations

import json
from typing import Callable

import pytest

from daybrief.errors import GenerationError
from daybrief.logging.logger import LogLevel

SCORING_MARKER = "AI RESPONSE TO EVALUATE"
VARIANT_MARKER = "Create 3 distinct improved variants"


class CollectingLogger:
    def __init__(self) -> None:
        self.messages: list[tuple[LogLevel, str]] = []

    def log(self, message: str, level: LogLevel = LogLevel.INFO) -> None:
        self.messages.append((level, message))

    def at(self, level: LogLevel) -> list[str]:
        return [m for lvl, m in self.messages if lvl == level]

    def events(self, name: str) -> list[dict]:
        found = []
        for _, message in self.messages:
            if message.startswith("{"):
                try:
                    payload = json.loads(message)
                except ValueError:
                    continue
                if payload.get("event") == name:
                    found.append(payload)
        return found


class RoutingOracle:
    """Fake oracle dispatching on the kind of prompt it receives.

    Each handler takes the prompt and returns text, or raises.
    """

    def __init__(
        self,
        generate: Callable[[str], str] | None = None,
        score: Callable[[str], str] | None = None,
        variants: Callable[[str], str] | None = None,
    ) -> None:
        self._generate = generate or (lambda prompt: '{"ok": true}')
        self._score = score or (lambda prompt: scoring_json(5, 5, 5))
        self._variants = variants or (lambda prompt: "not json")
        self.prompts: list[str] = []

    def kinds(self) -> list[str]:
        return [self._kind(p) for p in self.prompts]

    @staticmethod
    def _kind(prompt: str) -> str:
        if SCORING_MARKER in prompt:
            return "score"
        if VARIANT_MARKER in prompt:
            return "variants"
        return "generate"

    async def __call__(self, prompt: str) -> str:
        self.prompts.append(prompt)
        kind = self._kind(prompt)
        if kind == "score":
            return self._score(prompt)
        if kind == "variants":
            return self._variants(prompt)
        return self._generate(prompt)


def scoring_json(factuality, quantity, genericity, **extra) -> str:
    payload = {
        "scores": {
            "factualityScore": factuality,
            "quantityScore": quantity,
            "genericityScore": genericity,
        },
        "analysis": {"strengths": ["clear"], "weaknesses": ["thin"]},
        "improvedPromptSuggestions": [
            {"focus": "factuality", "description": "Name real shows"},
            {"focus": "quantity", "description": "Hit the item targets"},
        ],
    }
    payload.update(extra)
    return json.dumps(payload)


def variants_json(*prompts: str) -> str:
    return json.dumps(
        {f"variant{i}": {"approach": f"approach {i}", "prompt": p} for i, p in enumerate(prompts, start=1)}
    )


def failing(prompt: str) -> str:
    raise GenerationError("model unavailable")


@pytest.fixture
def logger() -> CollectingLogger:
    return CollectingLogger()


class ScriptedOracle:
    """Fake oracle returning canned responses in order."""

    def __init__(self, *responses: str) -> None:
        self._responses = list(responses)
        self.prompts: list[str] = []

    async def __call__(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self._responses:
            raise GenerationError("no scripted response left")
        return self._responses.pop(0)
