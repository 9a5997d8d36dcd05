# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Metric registry for archbench.

A metric is a named, weighted rule that detects one quality signal in a
block of text. The registry holds the metrics for one benchmark run in
registration order; that order decides report column order, never scores.

Registries are plain objects that callers construct and pass around. There
is no module-level registry, so two runs in the same process (tests do this
constantly) can never see each other's metrics. A registry is filled at
startup and sealed when the run begins; after that it is read-only.
"""

import math
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from archbench.evaluation.exceptions import DuplicateMetricError, RegistrySealedError
from archbench.logging.logger import get_logger

logger = get_logger(__name__)

# A pure function from a text sample to a verdict: bool for BOOLEAN metrics,
# a non-negative match count for COUNT metrics.
TextPredicate = Callable[[str], Union[bool, int]]


class MetricKind(str, Enum):
    """How a metric's predicate result turns into score."""

    BOOLEAN = "boolean"
    COUNT = "count"


@dataclass(frozen=True)
class Metric:
    """
    One quality signal.

    `weight` is the share of the maximum score this metric controls. A
    BOOLEAN metric earns all of it or nothing; a COUNT metric earns it
    gradually as matches accumulate (see the evaluator). `pattern` is the
    source regex when the metric came from a catalog file.
    """

    id: str
    name: str
    weight: float
    kind: MetricKind
    detect: TextPredicate
    pattern: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Metric id must be a non-empty string")
        if not (math.isfinite(self.weight) and self.weight > 0):
            raise ValueError(f"Metric '{self.id}' weight must be a finite number > 0, got {self.weight}")


class MetricRegistry:
    """Ordered, write-once collection of metrics for a single run."""

    def __init__(self, metrics: Optional[list[Metric]] = None) -> None:
        self._metrics: dict[str, Metric] = {}
        self._sealed = False
        for metric in metrics or []:
            self.register(metric)

    def register(self, metric: Metric) -> None:
        """
        Add a metric to the end of the registry.

        Raises:
            DuplicateMetricError: If a metric with the same id is already registered.
            RegistrySealedError: If the registry has been sealed.
        """
        if self._sealed:
            raise RegistrySealedError(
                f"Cannot register metric '{metric.id}': registry is sealed for this run"
            )
        if metric.id in self._metrics:
            raise DuplicateMetricError(
                f"Metric '{metric.id}' is already registered as '{self._metrics[metric.id].name}'"
            )
        self._metrics[metric.id] = metric
        logger.debug("registered_metric", extra={"metric_id": metric.id, "kind": metric.kind.value})

    def seal(self) -> None:
        """Freeze the registry. Idempotent."""
        self._sealed = True

    @property
    def sealed(self) -> bool:
        return self._sealed

    def all(self) -> tuple[Metric, ...]:
        """All metrics in registration order."""
        return tuple(self._metrics.values())

    def ids(self) -> list[str]:
        return list(self._metrics.keys())

    def get(self, metric_id: str) -> Metric:
        """
        Look up a metric by id.

        Raises:
            KeyError: If `metric_id` is not registered.
        """
        if metric_id not in self._metrics:
            raise KeyError(f"Unknown metric '{metric_id}'. Available: {self.ids()}")
        return self._metrics[metric_id]

    def __contains__(self, metric_id: object) -> bool:
        return metric_id in self._metrics

    def __iter__(self) -> Iterator[Metric]:
        return iter(self.all())

    def __len__(self) -> int:
        return len(self._metrics)
