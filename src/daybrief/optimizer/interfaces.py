"""
Core data contracts for the prompt optimizer.

These dataclasses mirror the artifacts produced and consumed by the
orchestrator loop, keeping the evaluator, mutator and report loosely coupled.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

SCORE_MIN = 0.0
SCORE_MAX = 10.0

FALLBACK_FEEDBACK = "default evaluation created"
FALLBACK_SUGGESTIONS: tuple[str, ...] = (
    "Add more specific guidelines",
    "Include better examples",
    "Enhance flexibility",
)


@dataclass(frozen=True)
class Scores:
    """Rubric scores on a 0-10 scale; ``overall`` is the mean of the three axes."""

    factuality: float
    quantity: float
    genericity: float
    overall: float

    @classmethod
    def from_components(cls, factuality: float, quantity: float, genericity: float) -> "Scores":
        return cls(
            factuality=factuality,
            quantity=quantity,
            genericity=genericity,
            overall=(factuality + quantity + genericity) / 3.0,
        )

    @classmethod
    def neutral(cls, value: float = 5.0) -> "Scores":
        return cls(factuality=value, quantity=value, genericity=value, overall=value)

    def as_dict(self) -> dict[str, float]:
        return {
            "factuality": self.factuality,
            "quantity": self.quantity,
            "genericity": self.genericity,
            "overall": self.overall,
        }


@dataclass(frozen=True)
class Evaluation:
    generated_response: str
    scores: Scores
    feedback: str
    improvement_suggestions: tuple[str, ...]
    is_fallback: bool = False

    @classmethod
    def fallback(cls, generated_response: str = "", score: float = 5.0) -> "Evaluation":
        """Neutral evaluation used when generation or scoring could not be read."""
        return cls(
            generated_response=generated_response,
            scores=Scores.neutral(score),
            feedback=FALLBACK_FEEDBACK,
            improvement_suggestions=FALLBACK_SUGGESTIONS,
            is_fallback=True,
        )


@dataclass
class Candidate:
    """One prompt under evaluation plus its lineage metadata.

    ``evaluation`` is write-once: use ``attach_evaluation``.
    """

    id: str
    prompt_text: str
    generation: int = 0
    meta: dict[str, Any] = field(default_factory=dict)
    _evaluation: Evaluation | None = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.generation < 0:
            raise ValueError("generation must be non-negative")

    @property
    def evaluation(self) -> Evaluation | None:
        return self._evaluation

    @property
    def is_evaluated(self) -> bool:
        return self._evaluation is not None

    @property
    def overall_score(self) -> float | None:
        return self._evaluation.scores.overall if self._evaluation is not None else None

    def attach_evaluation(self, evaluation: Evaluation) -> None:
        if self._evaluation is not None:
            raise RuntimeError(f"candidate {self.id} already has an evaluation")
        self._evaluation = evaluation


def variant_id(parent_id: str, index: int, generation: int) -> str:
    """Lineage-encoding id for the ``index``-th (1-based) variant of ``parent_id``."""
    return f"{parent_id}-v{index}-gen{generation}"
