# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Data models for the benchmark system.

These are the types that everything in the evaluation pipeline passes
around. They're frozen dataclasses because nothing should change a task,
a trial or a report after it has been built. A trial's score is derived
from its metric outcomes exactly once, by the evaluator.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class Complexity(str, Enum):
    """How involved a benchmark task is. Purely descriptive, never scored."""

    SIMPLE = "simple"
    MEDIUM = "medium"
    COMPLEX = "complex"


class Variant(str, Enum):
    """
    Which form of a task's prompt produced a text sample.

    The values double as the report keys ("without" / "with" enhancement).
    """

    BASELINE = "without"
    ENHANCED = "with"


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up, unlike Python's round()."""
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class Task:
    """One benchmark task. The description is what the model is asked to build."""

    id: str
    description: str
    category: str
    complexity: Complexity = Complexity.MEDIUM


@dataclass(frozen=True)
class MetricOutcome:
    """
    The result of applying one metric to one text sample.

    For BOOLEAN metrics `value` is 1.0 or 0.0. For COUNT metrics it is the
    raw match count and `passed` means "at least one match". `error` is set
    when the predicate itself failed, in which case the outcome is a fail.
    """

    passed: bool
    value: float
    error: Optional[str] = None


@dataclass(frozen=True)
class EvaluationResult:
    """Per-metric outcomes for one text sample plus the weighted 0–100 score."""

    outcomes: dict[str, MetricOutcome]
    achieved: float
    maximum: float
    score: int


@dataclass(frozen=True)
class TrialResult:
    """
    One scored text sample: a task run once under one variant.

    When the generation call failed, `raw_text` holds "<error: ...>",
    `error` holds the message, every outcome is a fail and the score is 0.
    """

    task_id: str
    variant: Variant
    raw_text: str
    outcomes: dict[str, MetricOutcome]
    score: int
    error: Optional[str] = None
    prompt_sha256: str = ""
    generation_time_seconds: float = 0.0

    @property
    def failed(self) -> bool:
        return self.error is not None


@dataclass(frozen=True)
class TrialPair:
    """The baseline and enhanced trials for one task, in that order."""

    task: Task
    baseline: TrialResult
    enhanced: TrialResult

    @property
    def improvement(self) -> int:
        return self.enhanced.score - self.baseline.score


@dataclass(frozen=True)
class MetricRate:
    """How often a metric passed across all tasks, per variant, in percent."""

    metric_id: str
    name: str
    kind: str
    baseline_pct: float
    enhanced_pct: float

    @property
    def change(self) -> float:
        return self.enhanced_pct - self.baseline_pct


@dataclass(frozen=True)
class CategorySummary:
    """Average scores for the tasks of one category."""

    category: str
    task_count: int
    baseline_avg: float
    enhanced_avg: float


@dataclass(frozen=True)
class OverallSummary:
    """
    Mean scores per variant across every task.

    The averages are kept at full precision so that
    `improvement == enhanced_avg - baseline_avg` holds exactly. Use the
    display properties when showing them to people.
    """

    baseline_avg: float = 0.0
    enhanced_avg: float = 0.0
    improvement: float = 0.0

    @property
    def baseline_display(self) -> int:
        return round_half_up(self.baseline_avg)

    @property
    def enhanced_display(self) -> int:
        return round_half_up(self.enhanced_avg)


@dataclass(frozen=True)
class AggregateReport:
    """
    The complete comparative summary of one benchmark run.

    `tasks` keeps catalog order and `metric_rates` keeps registry order.
    Built once by the aggregator and never modified afterwards; the result
    store only ever writes snapshots of it.
    """

    timestamp: str
    tasks: tuple[TrialPair, ...]
    metric_rates: dict[str, MetricRate]
    overall: OverallSummary
    categories: dict[str, CategorySummary] = field(default_factory=dict)
    failed_trials: int = 0
    catalog_version: Optional[str] = None
    catalog_sha256: Optional[str] = None
