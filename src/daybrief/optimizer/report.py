"""Ranking of evaluated candidates and the end-of-run summary."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, Sequence

from .interfaces import Candidate, Scores


def rank_candidates(candidates: Iterable[Candidate]) -> list[Candidate]:
    """Evaluated candidates by overall score, best first; ties keep insertion order."""
    evaluated = [c for c in candidates if c.evaluation is not None]
    return sorted(evaluated, key=lambda c: -c.evaluation.scores.overall)  # type: ignore[union-attr]


@dataclass(frozen=True)
class RankedEntry:
    rank: int
    candidate_id: str
    generation: int
    scores: Scores
    is_fallback: bool = False


@dataclass
class RankedReport:
    entries: list[RankedEntry]
    best_prompt: str | None
    seed_score: float | None
    total_evaluations: int
    target: str | None = None
    record_dir: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def build(
        cls,
        candidates: Sequence[Candidate],
        total_evaluations: int,
        *,
        seed_id: str = "original",
        target: str | None = None,
        record_dir: str | None = None,
    ) -> "RankedReport":
        ranked = rank_candidates(candidates)
        entries = [
            RankedEntry(
                rank=i,
                candidate_id=c.id,
                generation=c.generation,
                scores=c.evaluation.scores,  # type: ignore[union-attr]
                is_fallback=c.evaluation.is_fallback,  # type: ignore[union-attr]
            )
            for i, c in enumerate(ranked, start=1)
        ]
        seed = next((c for c in candidates if c.id == seed_id), None)
        return cls(
            entries=entries,
            best_prompt=ranked[0].prompt_text if ranked else None,
            seed_score=seed.overall_score if seed is not None else None,
            total_evaluations=total_evaluations,
            target=target,
            record_dir=record_dir,
        )

    @property
    def best(self) -> RankedEntry | None:
        return self.entries[0] if self.entries else None

    @property
    def best_score(self) -> float | None:
        return self.entries[0].scores.overall if self.entries else None

    @property
    def improvement(self) -> float | None:
        if self.seed_score is None or self.best_score is None:
            return None
        return self.best_score - self.seed_score

    def ranking_lines(self) -> list[str]:
        return [
            f"{e.rank}. {e.candidate_id} - Score: {e.scores.overall:.2f}/10 "
            f"(Factuality: {e.scores.factuality:g}, Quantity: {e.scores.quantity:g}, "
            f"Genericity: {e.scores.genericity:g})"
            + (" [fallback]" if e.is_fallback else "")
            for e in self.entries
        ]

    def render(self) -> str:
        def fmt(value: float | None) -> str:
            return "N/A" if value is None else f"{value:g}"

        improvement = self.improvement
        lines = [
            "PROMPT OPTIMIZATION SUMMARY",
            "==========================",
            f"Date: {self.created_at.isoformat()}",
        ]
        if self.target:
            lines.append(f"Target Date: {self.target}")
        lines += [
            f"Total Evaluations: {self.total_evaluations}",
            "",
            "FINAL RANKINGS:",
            *self.ranking_lines(),
            "",
            "BEST PERFORMING PROMPT:",
            "======================",
            self.best_prompt if self.best_prompt is not None else "No evaluations completed",
            "",
            "IMPROVEMENT OVER ORIGINAL:",
            "=========================",
            f"Original Score: {fmt(self.seed_score)}/10",
            f"Best Score: {fmt(self.best_score)}/10",
            f"Improvement: {'N/A' if improvement is None else f'{improvement:+.1f}'} points",
        ]
        if self.record_dir:
            lines += [
                "",
                "LOG FILES GENERATED:",
                "===================",
                "- content-generation-*.txt: generation prompts and responses",
                "- evaluation-*.txt: scoring prompts and responses",
                "- variant-generation-*.txt: variant synthesis prompts and responses",
                "- prompt-evaluation-*.txt: per-candidate evaluation reports",
                "",
                f"Log files are saved in: {self.record_dir}",
            ]
        return "\n".join(lines) + "\n"
