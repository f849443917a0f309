"""
Async orchestrator for the prompt optimization loop.

Each round either evaluates a bounded batch of pending candidates
concurrently, or, when nothing is pending, expands the best evaluated
candidate into new variants. The loop ends when the evaluation budget is
spent or variant synthesis produces nothing.
"""

from __future__ import annotations

import asyncio
import json
import time
import uuid
from dataclasses import dataclass
from typing import Any, Sequence

from daybrief.config import OptimizerConfig
from daybrief.llm import Oracle
from daybrief.logging.logger import LoggerProtocol, LogLevel, StdOutLogger
from daybrief.logging.sink import NullRecordSink, RecordSink, safe_record

from .evaluator import CandidateEvaluator
from .interfaces import Candidate, Evaluation
from .mutator import VariantGenerator
from .report import RankedReport, rank_candidates


@dataclass
class OptimizationResult:
    report: RankedReport
    candidates: list[Candidate]
    evaluations_performed: int
    stop_reason: str

    @property
    def best(self) -> Candidate:
        return rank_candidates(self.candidates)[0]


@dataclass
class NoEvaluations:
    """Returned instead of a result when no candidate was ever evaluated."""

    reason: str
    candidates: list[Candidate]


class Orchestrator:
    """Drive evaluate/expand rounds until the evaluation budget is spent."""

    def __init__(
        self,
        oracle: Oracle,
        seed_prompt: str,
        config: OptimizerConfig | None = None,
        *,
        evaluator: CandidateEvaluator | None = None,
        mutator: VariantGenerator | None = None,
        sink: RecordSink | None = None,
        logger: LoggerProtocol | None = None,
        target: str | None = None,
        record_dir: str | None = None,
    ) -> None:
        self.config = config or OptimizerConfig()
        self.sink: RecordSink = sink or NullRecordSink()
        self.logger: LoggerProtocol = logger or StdOutLogger()
        self.evaluator = evaluator or CandidateEvaluator(
            oracle,
            sink=self.sink,
            logger=self.logger,
            fallback_score=self.config.fallback_score,
        )
        self.mutator = mutator or VariantGenerator(oracle, sink=self.sink, logger=self.logger)
        self.seed_prompt = seed_prompt
        self.target = target
        self.record_dir = record_dir
        self.candidates: list[Candidate] = []
        self.evaluations_performed = 0
        self._stop_reason: str | None = None
        self._run_id = uuid.uuid4().hex[:8]

    @property
    def run_id(self) -> str:
        return self._run_id

    @property
    def stop_reason(self) -> str | None:
        return self._stop_reason

    def _log_structured(self, event: str, level: LogLevel = LogLevel.INFO, **fields: Any) -> None:
        payload = {"event": event, "run_id": self._run_id}
        payload.update(fields)
        try:
            message = json.dumps(payload, sort_keys=True)
        except (TypeError, ValueError):
            message = json.dumps({k: repr(v) for k, v in payload.items()}, sort_keys=True)
        self.logger.log(message, level)

    def _append(self, candidates: Sequence[Candidate]) -> None:
        self.candidates.extend(candidates)
        self.mutator.reserve(c.id for c in candidates)

    async def _evaluate_batch(self, batch: Sequence[Candidate]) -> None:
        results = await asyncio.gather(
            *(self.evaluator.evaluate(candidate) for candidate in batch),
            return_exceptions=True,
        )
        for candidate, result in zip(batch, results):
            if isinstance(result, BaseException) and not candidate.is_evaluated:
                self.logger.log(f"❌ Failed to evaluate candidate {candidate.id}: {result}", LogLevel.ERROR)
                candidate.attach_evaluation(Evaluation.fallback(score=self.config.fallback_score))

    async def _expand_best(self) -> list[Candidate]:
        best = rank_candidates(self.candidates)[0]
        try:
            variants = await self.mutator.generate(best)
        except Exception as exc:
            self.logger.log(f"❌ Variant generation raised for {best.id}: {exc}", LogLevel.ERROR)
            return []
        self._log_structured(
            "variants_generated",
            parent_id=best.id,
            parent_score=round(best.overall_score or 0.0, 4),
            variant_ids=[v.id for v in variants],
        )
        return variants

    async def run(self, max_evaluations: int | None = None) -> OptimizationResult | NoEvaluations:
        """
        Run the loop and return the ranked outcome.

        ``max_evaluations`` defaults to ``config.max_evaluations`` and must be
        a positive integer. Oracle failures never escape; they show up as
        fallback evaluations in the result.
        """
        budget = self.config.max_evaluations if max_evaluations is None else max_evaluations
        if isinstance(budget, bool) or not isinstance(budget, int) or budget < 1:
            raise ValueError(f"max_evaluations must be a positive integer, got {budget!r}")

        self.logger.log(f"🚀 Starting prompt optimization (budget {budget} evaluations)")
        start = time.time()
        if not self.candidates:
            self._append([Candidate(id=self.config.seed_id, prompt_text=self.seed_prompt, generation=0)])

        round_index = 0
        while self.evaluations_performed < budget:
            round_index += 1
            pending = [c for c in self.candidates if not c.is_evaluated]
            if pending:
                batch = pending[: min(self.config.batch_size, budget - self.evaluations_performed)]
                self._log_structured(
                    "batch_start",
                    round=round_index,
                    candidate_ids=[c.id for c in batch],
                    pending=len(pending),
                )
                self.logger.log(f"📊 Evaluating {len(batch)} candidates in parallel...")
                await self._evaluate_batch(batch)
                self.evaluations_performed += len(batch)
                self._log_structured(
                    "batch_done",
                    round=round_index,
                    evaluations=self.evaluations_performed,
                    scores={c.id: round(c.overall_score or 0.0, 4) for c in batch},
                )
                continue

            if not any(c.is_evaluated for c in self.candidates):
                self._stop_reason = "nothing_evaluated"
                break

            variants = await self._expand_best()
            if not variants:
                self.logger.log("❌ Failed to generate any new candidates - stopping", LogLevel.WARNING)
                self._stop_reason = "no_variants"
                break
            self._append(variants)
        else:
            self._stop_reason = "budget_exhausted"

        elapsed = time.time() - start
        if not any(c.is_evaluated for c in self.candidates):
            self._log_structured("run_complete", level=LogLevel.WARNING, reason="no_evaluations", evaluations=0)
            return NoEvaluations(reason="no candidate could be evaluated", candidates=list(self.candidates))

        report = RankedReport.build(
            self.candidates,
            self.evaluations_performed,
            seed_id=self.config.seed_id,
            target=self.target,
            record_dir=self.record_dir,
        )
        self.logger.log(f"🎉 OPTIMIZATION COMPLETE: {self.evaluations_performed} evaluations in {elapsed:.1f}s")
        self.logger.log("🏆 FINAL RANKINGS:\n" + "\n".join(report.ranking_lines()))
        self._log_structured(
            "run_complete",
            reason=self._stop_reason,
            evaluations=self.evaluations_performed,
            candidates=len(self.candidates),
            best_id=report.best.candidate_id if report.best else None,
            best_score=report.best_score,
            improvement=report.improvement,
            elapsed_seconds=round(elapsed, 3),
        )
        location = safe_record(self.sink, self.logger, "optimization-summary", report.render())
        if location:
            self.logger.log(f"📄 Summary saved: {location}")
        return OptimizationResult(
            report=report,
            candidates=list(self.candidates),
            evaluations_performed=self.evaluations_performed,
            stop_reason=self._stop_reason or "budget_exhausted",
        )


def optimize(
    seed_prompt: str,
    oracle: Oracle,
    max_evaluations: int | None = None,
    *,
    config: OptimizerConfig | None = None,
    sink: RecordSink | None = None,
    logger: LoggerProtocol | None = None,
    target: str | None = None,
    record_dir: str | None = None,
) -> OptimizationResult | NoEvaluations:
    """Synchronous convenience wrapper around ``Orchestrator.run``."""
    orchestrator = Orchestrator(
        oracle,
        seed_prompt,
        config,
        sink=sink,
        logger=logger,
        target=target,
        record_dir=record_dir,
    )
    return asyncio.run(orchestrator.run(max_evaluations))
