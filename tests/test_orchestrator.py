import asyncio

import pytest
from conftest import RoutingOracle, scoring_json, variants_json

from daybrief.config import OptimizerConfig
from daybrief.logging.sink import MemoryRecordSink
from daybrief.optimizer import NoEvaluations, OptimizationResult, Orchestrator, optimize

SEED = "SEED PROMPT. SPORTS (Aim for 4-8 items)"


def _run(oracle, logger, max_evaluations, sink=None, **config):
    orchestrator = Orchestrator(
        oracle,
        SEED,
        OptimizerConfig(**config),
        sink=sink or MemoryRecordSink(),
        logger=logger,
    )
    return orchestrator, asyncio.run(orchestrator.run(max_evaluations))


def _score_by_marker(scores: dict[str, float], default: float = 5.0):
    def score(prompt: str) -> str:
        for marker, value in scores.items():
            if marker in prompt:
                return scoring_json(value, value, value)
        return scoring_json(default, default, default)

    return score


def test_garbage_oracle_single_evaluation(logger):
    oracle = RoutingOracle(generate=lambda p: "garbage", score=lambda p: "garbage", variants=lambda p: "garbage")
    orchestrator, result = _run(oracle, logger, 1)

    assert isinstance(result, OptimizationResult)
    assert result.evaluations_performed == 1
    assert "variants" not in oracle.kinds()
    assert [(e.candidate_id, e.scores.overall) for e in result.report.entries] == [("original", 5.0)]
    assert result.report.entries[0].is_fallback
    assert result.report.improvement == 0.0


def test_seed_then_three_variants(logger):
    oracle = RoutingOracle(
        score=_score_by_marker({"VARIANT-B": 9, "VARIANT-A": 7, "VARIANT-C": 4, SEED: 6}),
        variants=lambda p: variants_json("VARIANT-A", "VARIANT-B", "VARIANT-C"),
    )
    _, result = _run(oracle, logger, 4)

    assert result.evaluations_performed == 4
    assert [e.candidate_id for e in result.report.entries] == [
        "original-v2-gen1",
        "original-v1-gen1",
        "original",
        "original-v3-gen1",
    ]
    assert result.report.best_prompt == "VARIANT-B"
    assert result.report.seed_score == 6.0
    assert result.report.improvement == pytest.approx(3.0)
    assert result.best.id == "original-v2-gen1"


def test_partial_batch_respects_remaining_budget(logger):
    oracle = RoutingOracle(variants=lambda p: variants_json("A", "B", "C"))
    orchestrator, result = _run(oracle, logger, 3)

    assert result.evaluations_performed == 3
    assert len(result.candidates) == 4
    assert [c.is_evaluated for c in result.candidates] == [True, True, True, False]
    assert len(result.report.entries) == 3


def test_budget_is_never_exceeded(logger):
    oracle = RoutingOracle(variants=lambda p: "unparseable")
    orchestrator, result = _run(oracle, logger, 12)

    assert result.evaluations_performed == 12
    assert sum(c.is_evaluated for c in result.candidates) == 12
    assert result.stop_reason == "budget_exhausted"
    ids = [c.id for c in result.candidates]
    assert len(ids) == len(set(ids))


def test_ties_keep_insertion_order(logger):
    oracle = RoutingOracle(variants=lambda p: variants_json("A", "B", "C"))
    _, result = _run(oracle, logger, 4)
    assert [e.candidate_id for e in result.report.entries] == [c.id for c in result.candidates]


def test_stops_when_no_variants(logger):
    oracle = RoutingOracle(variants=lambda p: "{}")
    _, result = _run(oracle, logger, 10)

    assert result.evaluations_performed == 1
    assert result.stop_reason == "no_variants"
    assert oracle.kinds() == ["generate", "score", "variants"]


def test_best_candidate_is_expanded(logger):
    rounds = iter([variants_json("LOW", "HIGH"), variants_json("NEXT")])
    oracle = RoutingOracle(
        score=_score_by_marker({"NEXT": 5, "HIGH": 9, "LOW": 2, SEED: 4}),
        variants=lambda p: next(rounds),
    )
    _, result = _run(oracle, logger, 4)

    ids = [c.id for c in result.candidates]
    assert ids == ["original", "original-v1-gen1", "original-v2-gen1", "original-v2-gen1-v1-gen2"]
    assert result.candidates[-1].generation == 2


@pytest.mark.parametrize("bad", [0, -3, 1.5, True, "5"])
def test_invalid_budget_raises_before_any_call(bad, logger):
    oracle = RoutingOracle()
    orchestrator = Orchestrator(oracle, SEED, logger=logger)
    with pytest.raises(ValueError):
        asyncio.run(orchestrator.run(bad))
    assert oracle.prompts == []


def test_batches_are_bounded(logger):
    inflight = 0
    peak = 0

    class SlowOracle(RoutingOracle):
        async def __call__(self, prompt: str) -> str:
            nonlocal inflight, peak
            if self._kind(prompt) == "generate":
                inflight += 1
                peak = max(peak, inflight)
                await asyncio.sleep(0.01)
                inflight -= 1
            return await super().__call__(prompt)

    oracle = SlowOracle(variants=lambda p: variants_json(*[f"P{i}" for i in range(3)]))
    _, result = _run(oracle, logger, 7, batch_size=2)

    assert result.evaluations_performed == 7
    assert peak <= 2


def test_summary_and_structured_events(logger):
    sink = MemoryRecordSink()
    oracle = RoutingOracle(variants=lambda p: variants_json("A"))
    _, result = _run(oracle, logger, 2, sink=sink)

    summary = sink.by_category("optimization-summary")
    assert len(summary) == 1
    assert summary[0].payload == result.report.render()
    assert "PROMPT OPTIMIZATION SUMMARY" in summary[0].payload
    assert len(logger.events("batch_start")) == 2
    assert len(logger.events("batch_done")) == 2
    assert logger.events("variants_generated")[0]["variant_ids"] == ["original-v1-gen1"]
    assert logger.events("run_complete")[0]["evaluations"] == 2


def test_evaluator_exception_becomes_fallback(logger):
    class ExplodingEvaluator:
        async def evaluate(self, candidate):
            raise RuntimeError("boom")

    oracle = RoutingOracle()
    orchestrator = Orchestrator(oracle, SEED, evaluator=ExplodingEvaluator(), logger=logger)
    result = asyncio.run(orchestrator.run(1))
    assert result.report.entries[0].is_fallback


def test_no_evaluations_result(logger):
    class SilentEvaluator:
        async def evaluate(self, candidate):
            return candidate

    class NoOpMutator:
        def reserve(self, ids):
            pass

    orchestrator = Orchestrator(
        RoutingOracle(), SEED, evaluator=SilentEvaluator(), mutator=NoOpMutator(), logger=logger
    )
    result = asyncio.run(orchestrator.run(1))
    assert isinstance(result, NoEvaluations)


def test_sync_optimize_wrapper(logger):
    result = optimize(SEED, RoutingOracle(), 1, logger=logger, target="Monday, 6/10/2025")
    assert isinstance(result, OptimizationResult)
    assert "Target Date: Monday, 6/10/2025" in result.report.render()
