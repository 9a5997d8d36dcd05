# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for the evaluator.

These pin down the scoring math: weighted sums, COUNT saturation, half-up
rounding and the 0-100 bounds. They also check that one broken predicate
can't take the rest of the evaluation down with it.
"""

import pytest

from archbench.evaluation.metrics.evaluator import evaluate, failed_evaluation
from archbench.evaluation.metrics.predicates import build_output_registry, pattern_predicate
from archbench.evaluation.metrics.registry import Metric, MetricKind, MetricRegistry

ALL_MARKERS = (
    "Goal: ship a validator. Write tests first. @param email the input. "
    "Depend on an interface.\nDo not add deps. Do not log secrets. Do not block."
)


def _count_registry(weight: float = 1.0) -> MetricRegistry:
    return MetricRegistry([
        Metric("hits", "Hits", weight, MetricKind.COUNT, pattern_predicate(r"\bhit\b", MetricKind.COUNT)),
    ])


def _boolean_registry(count: int) -> MetricRegistry:
    return MetricRegistry([
        Metric(f"m{i}", f"M{i}", 1.0, MetricKind.BOOLEAN, pattern_predicate(rf"\bm{i}\b", MetricKind.BOOLEAN))
        for i in range(count)
    ])


class TestConcreteScenarios:
    def test_baseline_text_scores_zero(self, registry: MetricRegistry, baseline_text: str) -> None:
        result = evaluate(baseline_text, registry)
        assert result.score == 0
        assert not any(outcome.passed for outcome in result.outcomes.values())

    def test_text_with_every_marker_scores_hundred(self, registry: MetricRegistry) -> None:
        result = evaluate(ALL_MARKERS, registry)
        assert result.score == 100
        assert result.outcomes["constraints"].value == 3.0
        assert result.achieved == result.maximum == 5.0

    def test_builtin_heuristics_on_structured_output(self, enhanced_text: str, baseline_text: str) -> None:
        registry = build_output_registry()
        assert evaluate(enhanced_text, registry).score == 100
        assert evaluate(baseline_text, registry).score == 0


class TestDeterminism:
    @pytest.mark.parametrize("text", ["", "Here is the code.", ALL_MARKERS, "do not " * 50])
    def test_same_input_same_result(self, registry: MetricRegistry, text: str) -> None:
        assert evaluate(text, registry) == evaluate(text, registry)


class TestSaturation:
    def test_contribution_grows_until_saturation_then_stays_flat(self) -> None:
        registry = _count_registry()
        achieved = [evaluate(" ".join(["hit"] * n), registry).achieved for n in range(6)]

        assert achieved[0] < achieved[1] < achieved[2] < achieved[3]
        assert achieved[3] == achieved[4] == achieved[5] == 1.0

    def test_partial_count_scores_proportionally(self) -> None:
        registry = _count_registry(weight=3.0)
        result = evaluate("hit hit", registry)
        assert result.achieved == pytest.approx(2.0)
        assert result.score == 67

    def test_saturation_is_a_parameter(self) -> None:
        registry = _count_registry()
        assert evaluate("hit hit hit", registry, count_saturation=6).score == 50
        assert evaluate("hit", registry, count_saturation=1).score == 100

    def test_count_outcome_passes_on_any_match(self) -> None:
        result = evaluate("hit", _count_registry())
        assert result.outcomes["hits"].passed is True
        assert result.outcomes["hits"].value == 1.0

    def test_saturation_below_one_is_rejected(self) -> None:
        with pytest.raises(ValueError, match="count_saturation"):
            evaluate("hit", _count_registry(), count_saturation=0)


class TestScoring:
    def test_weights_are_proportional(self) -> None:
        registry = MetricRegistry([
            Metric("heavy", "Heavy", 3.0, MetricKind.BOOLEAN, lambda text: True),
            Metric("light", "Light", 1.0, MetricKind.BOOLEAN, lambda text: False),
        ])
        assert evaluate("anything", registry).score == 75

    def test_rounds_half_up(self) -> None:
        # 1/8 of the maximum is exactly 12.5
        assert evaluate("hit", _count_registry(), count_saturation=8).score == 13

    def test_rounds_to_nearest(self) -> None:
        registry = _boolean_registry(3)
        assert evaluate("m0", registry).score == 33
        assert evaluate("m0 m1", registry).score == 67

    @pytest.mark.parametrize("text", ["", "m0", "m0 m1 m2 m3", "x" * 1000])
    def test_score_stays_in_bounds(self, text: str) -> None:
        score = evaluate(text, _boolean_registry(4)).score
        assert 0 <= score <= 100

    @pytest.mark.parametrize("text", ["", "Here is the code.", ALL_MARKERS])
    def test_empty_registry_scores_zero(self, text: str) -> None:
        result = evaluate(text, MetricRegistry())
        assert result.score == 0
        assert result.outcomes == {}
        assert result.maximum == 0.0

    def test_outcomes_follow_registry_order(self, registry: MetricRegistry) -> None:
        result = evaluate(ALL_MARKERS, registry)
        assert list(result.outcomes) == registry.ids()


class TestFaultIsolation:
    def _raising(self, text: str) -> bool:
        raise RuntimeError("boom")

    def test_failing_predicate_only_fails_its_own_metric(self) -> None:
        registry = MetricRegistry([
            Metric("ok_before", "Before", 1.0, MetricKind.BOOLEAN, lambda text: True),
            Metric("broken", "Broken", 1.0, MetricKind.BOOLEAN, self._raising),
            Metric("ok_after", "After", 1.0, MetricKind.BOOLEAN, lambda text: True),
        ])
        result = evaluate("text", registry)

        assert result.outcomes["ok_before"].passed is True
        assert result.outcomes["ok_after"].passed is True
        assert result.outcomes["broken"].passed is False
        assert result.outcomes["broken"].error == "RuntimeError: boom"
        assert result.score == 67

    def test_count_predicate_returning_bool_is_recorded_as_fault(self) -> None:
        registry = MetricRegistry([
            Metric("bad_count", "Bad", 1.0, MetricKind.COUNT, lambda text: True),
        ])
        outcome = evaluate("text", registry).outcomes["bad_count"]
        assert outcome.passed is False
        assert outcome.error is not None
        assert outcome.error.startswith("ValueError")

    def test_negative_count_is_recorded_as_fault(self) -> None:
        registry = MetricRegistry([
            Metric("neg", "Neg", 1.0, MetricKind.COUNT, lambda text: -1),
        ])
        result = evaluate("text", registry)
        assert result.outcomes["neg"].error is not None
        assert result.score == 0


class TestFailedEvaluation:
    def test_every_metric_fails_with_the_error(self, registry: MetricRegistry) -> None:
        result = failed_evaluation(registry, "GenerationError: timeout")
        assert result.score == 0
        assert result.maximum == 5.0
        assert all(
            not outcome.passed and outcome.error == "GenerationError: timeout"
            for outcome in result.outcomes.values()
        )
        assert list(result.outcomes) == registry.ids()
