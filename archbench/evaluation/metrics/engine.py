# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Aggregation engine.

Takes the trial pairs from a run and reduces them to the numbers that end
up in the report:

  - baseline / enhanced average score across all tasks
  - improvement = enhanced average - baseline average
  - per-metric pass rates for each variant
  - per-category average scores

Everything here is a pure reduction over already-scored trials. It never
re-runs the evaluator and never talks to the generation service, so the
same pairs always produce the same report (apart from the timestamp, which
callers can pin).
"""

from collections import defaultdict
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Optional

from archbench.evaluation.benchmarks.models import (
    AggregateReport,
    CategorySummary,
    MetricRate,
    OverallSummary,
    TrialPair,
    TrialResult,
)
from archbench.evaluation.metrics.registry import MetricRegistry
from archbench.logging.logger import get_logger

logger = get_logger(__name__)


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _pass_pct(trials: Sequence[TrialResult], metric_id: str) -> float:
    """Percentage of trials whose outcome for `metric_id` passed."""
    if not trials:
        return 0.0
    passed = 0
    for trial in trials:
        outcome = trial.outcomes.get(metric_id)
        if outcome is not None and outcome.passed:
            passed += 1
    return passed / len(trials) * 100


def aggregate(
    pairs: Sequence[TrialPair],
    registry: MetricRegistry,
    timestamp: Optional[str] = None,
    catalog_version: Optional[str] = None,
    catalog_sha256: Optional[str] = None,
) -> AggregateReport:
    """
    Build the AggregateReport for one run.

    Args:
        pairs: Scored (baseline, enhanced) pairs in catalog order.
        registry: The registry the trials were scored with; decides which
                  metrics get a pass rate and in what order.
        timestamp: ISO 8601 timestamp for the report. Defaults to now (UTC).
        catalog_version: Version string of the catalog, kept for provenance.
        catalog_sha256: Hash of the catalog file, kept for provenance.

    Returns:
        The finished, immutable report.
    """
    if timestamp is None:
        timestamp = datetime.now(tz=timezone.utc).isoformat()

    if not pairs:
        return AggregateReport(
            timestamp=timestamp,
            tasks=(),
            metric_rates={},
            overall=OverallSummary(),
            catalog_version=catalog_version,
            catalog_sha256=catalog_sha256,
        )

    baselines = [pair.baseline for pair in pairs]
    enhanced = [pair.enhanced for pair in pairs]

    baseline_avg = _mean([t.score for t in baselines])
    enhanced_avg = _mean([t.score for t in enhanced])
    overall = OverallSummary(
        baseline_avg=baseline_avg,
        enhanced_avg=enhanced_avg,
        improvement=enhanced_avg - baseline_avg,
    )

    metric_rates: dict[str, MetricRate] = {}
    for metric in registry.all():
        metric_rates[metric.id] = MetricRate(
            metric_id=metric.id,
            name=metric.name,
            kind=metric.kind.value,
            baseline_pct=_pass_pct(baselines, metric.id),
            enhanced_pct=_pass_pct(enhanced, metric.id),
        )

    # Categories keep first-seen order so the report reads like the catalog.
    category_groups: dict[str, list[TrialPair]] = defaultdict(list)
    for pair in pairs:
        category_groups[pair.task.category].append(pair)

    categories = {
        name: CategorySummary(
            category=name,
            task_count=len(group),
            baseline_avg=_mean([p.baseline.score for p in group]),
            enhanced_avg=_mean([p.enhanced.score for p in group]),
        )
        for name, group in category_groups.items()
    }

    failed_trials = sum(1 for t in baselines + enhanced if t.failed)

    report = AggregateReport(
        timestamp=timestamp,
        tasks=tuple(pairs),
        metric_rates=metric_rates,
        overall=overall,
        categories=categories,
        failed_trials=failed_trials,
        catalog_version=catalog_version,
        catalog_sha256=catalog_sha256,
    )

    logger.info(
        "Report aggregated",
        extra={
            "total_tasks": len(pairs),
            "baseline_avg": round(baseline_avg, 2),
            "enhanced_avg": round(enhanced_avg, 2),
            "improvement": round(overall.improvement, 2),
            "failed_trials": failed_trials,
        },
    )

    return report
