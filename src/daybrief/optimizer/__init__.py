"""Prompt optimizer: evaluate, rank and expand prompt candidates."""

from .evaluator import CandidateEvaluator, render_evaluation_report
from .interfaces import Candidate, Evaluation, Scores, variant_id
from .mutator import VariantGenerator
from .orchestrator import NoEvaluations, OptimizationResult, Orchestrator, optimize
from .report import RankedEntry, RankedReport, rank_candidates
from .signatures import ScoringPrompt, VariantPrompt

__all__ = [
    "Candidate",
    "CandidateEvaluator",
    "Evaluation",
    "NoEvaluations",
    "OptimizationResult",
    "Orchestrator",
    "RankedEntry",
    "RankedReport",
    "Scores",
    "ScoringPrompt",
    "VariantGenerator",
    "VariantPrompt",
    "optimize",
    "rank_candidates",
    "render_evaluation_report",
    "variant_id",
]
