# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Evaluator — applies every metric in a registry to one text sample.

Scoring:
  - every metric adds its weight to the maximum achievable score
  - a BOOLEAN metric adds its full weight when its predicate passes
  - a COUNT metric adds min(count / count_saturation, 1) * weight, so it
    grows with each match until it saturates and then stays flat
  - score = round(achieved / maximum * 100), clamped to [0, 100], and 0
    for an empty registry

This is a pure function of (text, registry, count_saturation). The only
thing it does besides computing is logging a warning when a predicate
blows up; that metric becomes a fail and the rest still get evaluated.
"""

from archbench.evaluation.benchmarks.models import EvaluationResult, MetricOutcome, round_half_up
from archbench.evaluation.metrics.registry import Metric, MetricKind, MetricRegistry
from archbench.logging.logger import get_logger

logger = get_logger(__name__)

# Number of COUNT matches that earns a metric its full weight. Three has
# always been the default; it is a parameter so that it can be recalibrated.
DEFAULT_COUNT_SATURATION = 3


def _apply(metric: Metric, text: str) -> MetricOutcome:
    """Run one predicate and normalize what it returned into an outcome."""
    result = metric.detect(text)

    if metric.kind is MetricKind.BOOLEAN:
        passed = bool(result)
        return MetricOutcome(passed=passed, value=1.0 if passed else 0.0)

    # bool is an int subclass; a COUNT predicate answering True/False is a bug.
    if isinstance(result, bool) or not isinstance(result, int) or result < 0:
        raise ValueError(f"COUNT predicate returned {result!r}, expected a non-negative int")
    return MetricOutcome(passed=result > 0, value=float(result))


def _contribution(metric: Metric, outcome: MetricOutcome, count_saturation: int) -> float:
    if metric.kind is MetricKind.COUNT:
        return min(outcome.value / count_saturation, 1.0) * metric.weight
    return metric.weight if outcome.passed else 0.0


def evaluate(
    text: str,
    registry: MetricRegistry,
    count_saturation: int = DEFAULT_COUNT_SATURATION,
) -> EvaluationResult:
    """
    Score one text sample against every metric in the registry.

    Args:
        text: The generated text to inspect.
        registry: Metrics to apply, in registry order.
        count_saturation: Match count at which COUNT metrics stop earning more.

    Returns:
        EvaluationResult with one outcome per metric and the 0–100 score.

    Raises:
        ValueError: If count_saturation is less than 1.
    """
    if count_saturation < 1:
        raise ValueError(f"count_saturation must be >= 1, got {count_saturation}")

    outcomes: dict[str, MetricOutcome] = {}
    achieved = 0.0
    maximum = 0.0

    for metric in registry.all():
        maximum += metric.weight
        try:
            outcome = _apply(metric, text)
        except Exception as exc:
            logger.warning(
                "Metric predicate failed, recording as not passed",
                extra={"metric_id": metric.id, "error": f"{type(exc).__name__}: {exc}"},
            )
            outcomes[metric.id] = MetricOutcome(
                passed=False, value=0.0, error=f"{type(exc).__name__}: {exc}",
            )
            continue

        outcomes[metric.id] = outcome
        achieved += _contribution(metric, outcome, count_saturation)

    if maximum <= 0:
        score = 0
    else:
        score = min(max(round_half_up(achieved / maximum * 100), 0), 100)

    return EvaluationResult(outcomes=outcomes, achieved=achieved, maximum=maximum, score=score)


def failed_evaluation(registry: MetricRegistry, error: str) -> EvaluationResult:
    """
    The result recorded for a trial whose text never arrived.

    Every metric is a fail carrying `error`; the maximum is still the full
    registry weight so the zero score is comparable with real trials.
    """
    outcomes = {
        metric.id: MetricOutcome(passed=False, value=0.0, error=error)
        for metric in registry.all()
    }
    maximum = sum(metric.weight for metric in registry.all())
    return EvaluationResult(outcomes=outcomes, achieved=0.0, maximum=maximum, score=0)
