"""Variant synthesis: turn the best evaluated prompt into up to three new candidates."""

from __future__ import annotations

from typing import Iterable

from daybrief.decode import decode_object
from daybrief.errors import DecodeError
from daybrief.llm import Oracle
from daybrief.logging.logger import LoggerProtocol, LogLevel, StdOutLogger
from daybrief.logging.sink import NullRecordSink, RecordSink, render_exchange, safe_record

from .interfaces import Candidate, Evaluation, variant_id
from .signatures import VariantPrompt


class VariantGenerator:
    """
    Ask the oracle for three improved prompts derived from ``parent``.

    When the synthesis call fails or its output cannot be decoded, the
    deterministic fallback variants from ``VariantPrompt.fallback_variants``
    are used instead. ``used_ids`` is shared with the orchestrator so an id
    is never issued twice within a run.
    """

    def __init__(
        self,
        oracle: Oracle,
        *,
        sink: RecordSink | None = None,
        logger: LoggerProtocol | None = None,
        used_ids: set[str] | None = None,
    ) -> None:
        self.oracle = oracle
        self.sink: RecordSink = sink or NullRecordSink()
        self.logger: LoggerProtocol = logger or StdOutLogger()
        self.used_ids: set[str] = used_ids if used_ids is not None else set()

    def reserve(self, ids: Iterable[str]) -> None:
        self.used_ids.update(ids)

    def _next_id(self, parent_id: str, index: int, generation: int) -> str:
        candidate_id = variant_id(parent_id, index, generation)
        if candidate_id not in self.used_ids:
            return candidate_id
        # Re-expanding a parent reuses the same base id; suffix until unique.
        attempt = 2
        while f"{candidate_id}-r{attempt}" in self.used_ids:
            attempt += 1
        return f"{candidate_id}-r{attempt}"

    async def _synthesize(self, parent: Candidate, evaluation: Evaluation) -> list[tuple[int, str, str]]:
        prompt = VariantPrompt.build_prompt(parent.prompt_text, evaluation)
        try:
            response = await self.oracle(prompt)
        except Exception as exc:
            self.logger.log(f"❌ Variant generation failed for {parent.id}: {exc}", LogLevel.WARNING)
            return VariantPrompt.fallback_variants(parent.prompt_text)

        safe_record(
            self.sink,
            self.logger,
            "variant-generation",
            render_exchange("variant-generation", prompt, response, parent.id, parent.generation),
            parent.id,
            parent.generation,
        )
        try:
            data = decode_object(response)
        except DecodeError as exc:
            self.logger.log(
                f"⚠️  Failed to parse variant JSON for {parent.id} ({exc}); using fallback variants",
                LogLevel.WARNING,
            )
            return VariantPrompt.fallback_variants(parent.prompt_text)
        return VariantPrompt.extract_variants(data)

    async def generate(self, parent: Candidate) -> list[Candidate]:
        """Return 0..3 new, un-evaluated candidates one generation below ``parent``."""
        evaluation = parent.evaluation
        if evaluation is None:
            self.logger.log(f"⚠️  {parent.id} has no evaluation; skipping variant generation", LogLevel.WARNING)
            return []

        self.logger.log(f"🧬 Generating variants for {parent.id} (score {evaluation.scores.overall:.2f}/10)")
        generation = parent.generation + 1
        children: list[Candidate] = []
        for index, approach, text in await self._synthesize(parent, evaluation):
            child_id = self._next_id(parent.id, index, generation)
            self.used_ids.add(child_id)
            children.append(
                Candidate(
                    id=child_id,
                    prompt_text=text,
                    generation=generation,
                    meta={"parent_id": parent.id, "approach": approach},
                )
            )

        if children:
            self.logger.log(f"✨ Generated {len(children)} variants: {', '.join(c.id for c in children)}")
        else:
            self.logger.log(f"⚠️  No usable variants returned for {parent.id}", LogLevel.WARNING)
        return children
