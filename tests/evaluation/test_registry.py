# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for the metric registry.

Registration order is what the report columns follow, ids are unique, and
once a run starts the registry is read-only.
"""

import pytest

from archbench.evaluation.exceptions import DuplicateMetricError, IntegrityError, RegistrySealedError
from archbench.evaluation.metrics.registry import Metric, MetricKind, MetricRegistry


def _metric(metric_id: str, weight: float = 1.0, kind: MetricKind = MetricKind.BOOLEAN) -> Metric:
    return Metric(metric_id, metric_id.title(), weight, kind, lambda text: True)


class TestMetric:
    def test_rejects_zero_weight(self) -> None:
        with pytest.raises(ValueError, match="weight"):
            _metric("a", weight=0)

    def test_rejects_negative_weight(self) -> None:
        with pytest.raises(ValueError, match="weight"):
            _metric("a", weight=-1.0)

    @pytest.mark.parametrize("weight", [float("nan"), float("inf")])
    def test_rejects_non_finite_weight(self, weight: float) -> None:
        with pytest.raises(ValueError, match="finite"):
            _metric("a", weight=weight)

    def test_rejects_empty_id(self) -> None:
        with pytest.raises(ValueError, match="id"):
            _metric("")

    def test_is_frozen(self) -> None:
        metric = _metric("a")
        with pytest.raises(AttributeError):
            metric.weight = 5.0  # type: ignore[misc]


class TestRegistration:
    def test_preserves_registration_order(self) -> None:
        registry = MetricRegistry()
        for metric_id in ("zeta", "alpha", "mid"):
            registry.register(_metric(metric_id))

        assert registry.ids() == ["zeta", "alpha", "mid"]
        assert [m.id for m in registry.all()] == ["zeta", "alpha", "mid"]
        assert [m.id for m in registry] == ["zeta", "alpha", "mid"]

    def test_duplicate_id_raises(self) -> None:
        registry = MetricRegistry([_metric("a")])
        with pytest.raises(DuplicateMetricError):
            registry.register(_metric("a", weight=2.0))

    def test_duplicate_leaves_original_in_place(self) -> None:
        registry = MetricRegistry([_metric("a", weight=1.0)])
        with pytest.raises(DuplicateMetricError):
            registry.register(_metric("a", weight=2.0))
        assert registry.get("a").weight == 1.0
        assert len(registry) == 1

    def test_duplicate_is_an_integrity_error(self) -> None:
        assert issubclass(DuplicateMetricError, IntegrityError)

    def test_constructor_rejects_duplicates(self) -> None:
        with pytest.raises(DuplicateMetricError):
            MetricRegistry([_metric("a"), _metric("a")])


class TestSealing:
    def test_register_after_seal_raises(self) -> None:
        registry = MetricRegistry([_metric("a")])
        registry.seal()
        with pytest.raises(RegistrySealedError):
            registry.register(_metric("b"))

    def test_seal_is_idempotent(self) -> None:
        registry = MetricRegistry()
        registry.seal()
        registry.seal()
        assert registry.sealed

    def test_new_registry_is_unsealed(self) -> None:
        assert not MetricRegistry().sealed


class TestLookup:
    def test_get_known_metric(self) -> None:
        registry = MetricRegistry([_metric("a"), _metric("b", kind=MetricKind.COUNT)])
        assert registry.get("b").kind is MetricKind.COUNT

    def test_get_unknown_metric_raises_key_error(self) -> None:
        registry = MetricRegistry([_metric("a")])
        with pytest.raises(KeyError, match="Unknown metric"):
            registry.get("missing")

    def test_contains(self) -> None:
        registry = MetricRegistry([_metric("a")])
        assert "a" in registry
        assert "b" not in registry

    def test_independent_registries_do_not_share_state(self) -> None:
        first = MetricRegistry([_metric("a")])
        second = MetricRegistry()
        first.seal()
        second.register(_metric("a"))

        assert len(first) == 1
        assert len(second) == 1
        assert not second.sealed
