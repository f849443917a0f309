"""
daybrief package initialization.

Personal automation jobs that turn model-generated JSON into email and SMS
briefings, plus a prompt optimizer that hill-climbs on the prompts used by
those jobs.
"""

from .config import OptimizerConfig, Settings  # noqa: F401
from .decode import tolerant_decode  # noqa: F401
from .errors import ConfigError, DaybriefError, DecodeError, DeliveryError, GenerationError  # noqa: F401
from .llm import LiteLLMOracle, Oracle  # noqa: F401
from .optimizer import (  # noqa: F401
    Candidate,
    CandidateEvaluator,
    Evaluation,
    NoEvaluations,
    OptimizationResult,
    Orchestrator,
    RankedReport,
    Scores,
    VariantGenerator,
    optimize,
)

__version__ = "0.3.0"
