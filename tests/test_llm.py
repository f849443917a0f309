import asyncio
from types import SimpleNamespace

import pytest

from daybrief.config import Settings
from daybrief.errors import GenerationError
from daybrief.llm import LiteLLMOracle, Oracle


def _response(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def test_oracle_passes_settings_to_litellm(monkeypatch, logger):
    calls = []

    async def fake_acompletion(**kwargs):
        calls.append(kwargs)
        return _response('{"ok": true}')

    monkeypatch.setattr("litellm.acompletion", fake_acompletion)
    oracle = LiteLLMOracle.from_settings(
        Settings(gemini_api_key="secret", model="gemini/gemini-2.5-flash", temperature=0.2), logger=logger
    )

    assert isinstance(oracle, Oracle)
    assert asyncio.run(oracle("hello")) == '{"ok": true}'
    assert calls[0]["model"] == "gemini/gemini-2.5-flash"
    assert calls[0]["messages"] == [{"role": "user", "content": "hello"}]
    assert calls[0]["api_key"] == "secret"
    assert calls[0]["temperature"] == 0.2
    assert calls[0]["timeout"] == 300.0


def test_provider_error_becomes_generation_error(monkeypatch, logger):
    async def fake_acompletion(**kwargs):
        raise RuntimeError("503 Service Unavailable")

    monkeypatch.setattr("litellm.acompletion", fake_acompletion)
    with pytest.raises(GenerationError) as info:
        asyncio.run(LiteLLMOracle(logger=logger)("hi"))
    assert isinstance(info.value.__cause__, RuntimeError)


@pytest.mark.parametrize("content", [None, "", "   \n"])
def test_empty_text_is_a_generation_error(monkeypatch, logger, content):
    async def fake_acompletion(**kwargs):
        return _response(content)

    monkeypatch.setattr("litellm.acompletion", fake_acompletion)
    with pytest.raises(GenerationError):
        asyncio.run(LiteLLMOracle(logger=logger)("hi"))
