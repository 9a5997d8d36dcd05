# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for the result store.

"latest" is overwritten wholesale on every save; archival slots are
write-once. Writes are atomic, so no temp files are left behind.
"""

import json
from pathlib import Path

import pytest

from archbench.evaluation.benchmarks.models import (
    AggregateReport,
    MetricOutcome,
    Task,
    TrialPair,
    TrialResult,
    Variant,
)
from archbench.evaluation.exceptions import DuplicateSlotError
from archbench.evaluation.metrics.engine import aggregate
from archbench.evaluation.metrics.registry import Metric, MetricKind, MetricRegistry
from archbench.evaluation.reporting.store import LATEST_SLOT, ResultStore


def _report(task_ids: list[str], timestamp: str, text: str = "output") -> AggregateReport:
    registry = MetricRegistry([Metric("m", "M", 1.0, MetricKind.BOOLEAN, lambda t: True)])
    pairs = []
    for task_id in task_ids:
        trials = [
            TrialResult(
                task_id=task_id,
                variant=variant,
                raw_text=text,
                outcomes={"m": MetricOutcome(passed=True, value=1.0)},
                score=100,
            )
            for variant in Variant
        ]
        pairs.append(TrialPair(Task(task_id, task_id, "c"), trials[0], trials[1]))
    return aggregate(pairs, registry, timestamp=timestamp)


class TestSave:
    def test_latest_overwrite_keeps_only_second_report(self, tmp_path: Path) -> None:
        store = ResultStore(tmp_path)
        report_a = _report(["a1", "a2", "a3"], "2026-10-18T10:00:00+00:00")
        report_b = _report(["b1"], "2026-10-18T11:00:00+00:00")

        store.save(report_a)
        store.save(report_b)
        loaded = store.load(LATEST_SLOT)

        assert loaded["timestamp"] == "2026-10-18T11:00:00+00:00"
        assert [t["id"] for t in loaded["tasks"]] == ["b1"]

    def test_archival_slot_is_write_once(self, tmp_path: Path) -> None:
        store = ResultStore(tmp_path)
        report = _report(["a"], "2026-10-18T10:00:00+00:00")
        store.save(report, "baseline-run")

        with pytest.raises(DuplicateSlotError):
            store.save(report, "baseline-run")

    def test_file_is_complete_json(self, tmp_path: Path) -> None:
        store = ResultStore(tmp_path)
        path = store.save(_report(["a"], "2026-10-18T10:00:00+00:00"))

        assert path == tmp_path / "latest.json"
        assert json.loads(path.read_text(encoding="utf-8"))["summary"]["failedTrials"] == 0
        assert list(tmp_path.glob(".archbench_tmp_*")) == []

    def test_creates_results_directory(self, tmp_path: Path) -> None:
        store = ResultStore(tmp_path / "nested" / "results")
        store.save(_report(["a"], "2026-10-18T10:00:00+00:00"))
        assert (tmp_path / "nested" / "results" / "latest.json").is_file()

    @pytest.mark.parametrize("slot", ["", "../escape", "a/b", ".hidden"])
    def test_rejects_bad_slot_names(self, tmp_path: Path, slot: str) -> None:
        with pytest.raises(ValueError, match="Invalid slot"):
            ResultStore(tmp_path).save(_report(["a"], "2026-10-18T10:00:00+00:00"), slot)

    def test_excerpt_truncates_outputs(self, tmp_path: Path) -> None:
        store = ResultStore(tmp_path, excerpt_chars=5)
        store.save(_report(["a"], "2026-10-18T10:00:00+00:00", text="abcdefghij"))

        output = store.load()["tasks"][0]["with"]["output"]
        assert output == "abcde..."


class TestPublish:
    def test_writes_archive_and_latest(self, tmp_path: Path) -> None:
        store = ResultStore(tmp_path)
        archive_path, latest_path = store.publish(_report(["a"], "2026-10-18T10:00:00.123456+00:00"))

        assert archive_path.name == "benchmark-20261018T100000123456Z.json"
        assert latest_path.name == "latest.json"
        assert archive_path.read_text(encoding="utf-8") == latest_path.read_text(encoding="utf-8")

    def test_archive_name_is_utc(self, tmp_path: Path) -> None:
        store = ResultStore(tmp_path)
        report = _report(["a"], "2026-10-18T12:00:00+02:00")
        assert store.archive_slot(report) == "benchmark-20261018T100000000000Z"

    def test_collision_leaves_latest_untouched(self, tmp_path: Path) -> None:
        store = ResultStore(tmp_path)
        store.publish(_report(["first"], "2026-10-18T10:00:00+00:00"))

        with pytest.raises(DuplicateSlotError):
            store.publish(_report(["second"], "2026-10-18T10:00:00+00:00"))
        assert [t["id"] for t in store.load()["tasks"]] == ["first"]


class TestLoad:
    def test_missing_slot_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            ResultStore(tmp_path).load("latest")

    def test_list_slots(self, tmp_path: Path) -> None:
        store = ResultStore(tmp_path)
        assert store.list_slots() == []

        store.publish(_report(["a"], "2026-10-18T10:00:00+00:00"))
        assert store.list_slots() == ["benchmark-20261018T100000000000Z", "latest"]
