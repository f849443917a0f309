"""
Candidate evaluation: generate content with a prompt, then score it.

Each evaluation is two sequential oracle calls. Nothing here raises to the
caller: generation and decode failures both attach the neutral fallback
evaluation so the loop always moves forward.
"""

from __future__ import annotations

import time

from daybrief.decode import decode_object
from daybrief.errors import DecodeError
from daybrief.llm import Oracle
from daybrief.logging.logger import LoggerProtocol, LogLevel, StdOutLogger
from daybrief.logging.sink import NullRecordSink, RecordSink, render_exchange, safe_record

from .interfaces import Candidate, Evaluation
from .signatures import ScoringPrompt


def render_evaluation_report(candidate: Candidate, evaluation: Evaluation) -> str:
    scores = evaluation.scores
    suggestions = "\n".join(f"{i}. {s}" for i, s in enumerate(evaluation.improvement_suggestions, start=1))
    return "\n".join(
        [
            "PROMPT EVALUATION REPORT",
            "======================",
            f"Generation: {candidate.generation}",
            f"Prompt ID: {candidate.id}",
            f"Fallback: {'yes' if evaluation.is_fallback else 'no'}",
            "",
            "SCORES:",
            "-------",
            f"Factuality Score: {scores.factuality:g}/10",
            f"Quantity Score: {scores.quantity:g}/10",
            f"Genericity Score: {scores.genericity:g}/10",
            f"Overall Score: {scores.overall:g}/10",
            "",
            "ORIGINAL PROMPT:",
            "---------------",
            candidate.prompt_text,
            "",
            "AI RESPONSE:",
            "-----------",
            evaluation.generated_response,
            "",
            "EVALUATION FEEDBACK:",
            "-------------------",
            evaluation.feedback,
            "",
            "IMPROVEMENT SUGGESTIONS:",
            "-----------------------",
            suggestions,
            "",
            "END OF REPORT",
            "=============",
        ]
    )


class CandidateEvaluator:
    """Generate-then-score evaluator with a fixed fallback on any failure."""

    def __init__(
        self,
        oracle: Oracle,
        *,
        sink: RecordSink | None = None,
        logger: LoggerProtocol | None = None,
        fallback_score: float = 5.0,
    ) -> None:
        self.oracle = oracle
        self.sink: RecordSink = sink or NullRecordSink()
        self.logger: LoggerProtocol = logger or StdOutLogger()
        self.fallback_score = fallback_score

    def _record(self, category: str, payload: str, candidate: Candidate) -> None:
        safe_record(self.sink, self.logger, category, payload, candidate.id, candidate.generation)

    def _finish(self, candidate: Candidate, evaluation: Evaluation) -> Candidate:
        candidate.attach_evaluation(evaluation)
        self._record("prompt-evaluation", render_evaluation_report(candidate, evaluation), candidate)
        s = evaluation.scores
        marker = " (fallback)" if evaluation.is_fallback else ""
        self.logger.log(
            f"✅ {candidate.id}: Score {s.overall:.2f}/10 "
            f"(F:{s.factuality:g}, Q:{s.quantity:g}, G:{s.genericity:g}){marker}"
        )
        return candidate

    async def evaluate(self, candidate: Candidate) -> Candidate:
        """Populate ``candidate.evaluation`` and return the same candidate."""
        self.logger.log(f"🤖 Testing prompt: {candidate.id} (generation {candidate.generation})")
        start = time.time()

        try:
            response = await self.oracle(candidate.prompt_text)
        except Exception as exc:
            self.logger.log(f"❌ Content generation failed for {candidate.id}: {exc}", LogLevel.WARNING)
            return self._finish(candidate, Evaluation.fallback(score=self.fallback_score))
        self._record("content-generation", render_exchange(
            "content-generation", candidate.prompt_text, response, candidate.id, candidate.generation
        ), candidate)

        scoring_prompt = ScoringPrompt.build_prompt(candidate.prompt_text, response)
        try:
            scoring_response = await self.oracle(scoring_prompt)
        except Exception as exc:
            self.logger.log(f"❌ Scoring call failed for {candidate.id}: {exc}", LogLevel.WARNING)
            return self._finish(candidate, Evaluation.fallback(response, score=self.fallback_score))
        self._record("evaluation", render_exchange(
            "evaluation", scoring_prompt, scoring_response, candidate.id, candidate.generation
        ), candidate)

        try:
            data = decode_object(scoring_response)
        except DecodeError as exc:
            self.logger.log(
                f"⚠️  Failed to parse evaluation JSON for {candidate.id} ({exc}); using default evaluation",
                LogLevel.WARNING,
            )
            return self._finish(candidate, Evaluation.fallback(response, score=self.fallback_score))

        evaluation = ScoringPrompt.extract_evaluation(data, response, default_score=self.fallback_score)
        self.logger.log(f"📊 Evaluated {candidate.id} in {time.time() - start:.1f}s", LogLevel.DEBUG)
        return self._finish(candidate, evaluation)
