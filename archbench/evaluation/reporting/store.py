# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Result store — durable snapshots of benchmark reports.

Layout:

    <results_dir>/
    ├── latest.json                          — always the most recent run
    ├── benchmark-20261018T120000000000Z.json — one archival file per run
    └── ...

Two kinds of slot:
  - "latest" is overwritten on every save. Saving A then B leaves exactly B.
  - every other slot is archival and write-once. Writing one twice raises
    DuplicateSlotError so history can't be rewritten by accident.

Every write goes through atomic_write, so a slot holds either a complete
report or nothing. There is no locking: only one harness process may write
to a given results directory at a time.
"""

import json
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from archbench.evaluation.benchmarks.models import AggregateReport
from archbench.evaluation.exceptions import DuplicateSlotError
from archbench.evaluation.reporting.writer import report_to_dict
from archbench.logging.logger import get_logger
from archbench.utils.filesystem import atomic_write, safe_read

logger = get_logger(__name__)

LATEST_SLOT = "latest"
ARCHIVE_PREFIX = "benchmark-"

_SLOT_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


def _validate_slot(slot: str) -> str:
    if not _SLOT_RE.match(slot):
        raise ValueError(
            f"Invalid slot name '{slot}': use letters, digits, '.', '_' or '-', "
            "starting with a letter or digit"
        )
    return slot


class ResultStore:
    """Writes and reads report snapshots under one results directory."""

    def __init__(self, results_dir: Path, excerpt_chars: int = 0) -> None:
        self.results_dir = results_dir
        self.excerpt_chars = excerpt_chars

    def path_for(self, slot: str) -> Path:
        return self.results_dir / f"{_validate_slot(slot)}.json"

    def save(self, report: AggregateReport, slot: str = LATEST_SLOT) -> Path:
        """
        Write a snapshot of `report` under `slot`.

        Raises:
            DuplicateSlotError: If `slot` is archival and already written.
            ValueError: If `slot` is not a valid slot name.
            OSError: If the write fails.
        """
        target = self.path_for(slot)
        if slot != LATEST_SLOT and target.exists():
            raise DuplicateSlotError(f"Archival slot '{slot}' already exists at {target}")

        payload = report_to_dict(report, excerpt_chars=self.excerpt_chars)
        atomic_write(target, json.dumps(payload, indent=2, ensure_ascii=False) + "\n")

        logger.info("Report saved", extra={"slot": slot, "path": str(target)})
        return target

    def archive_slot(self, report: AggregateReport) -> str:
        """
        Archival slot name derived from the report timestamp,
        e.g. "benchmark-20261018T120000123456Z".
        """
        moment = datetime.fromisoformat(report.timestamp)
        if moment.tzinfo is not None:
            moment = moment.astimezone(timezone.utc)
        return f"{ARCHIVE_PREFIX}{moment.strftime('%Y%m%dT%H%M%S%f')}Z"

    def publish(self, report: AggregateReport) -> tuple[Path, Path]:
        """
        Save the report to its archival slot, then to "latest".

        The archive goes first: if it collides, "latest" is left untouched.

        Returns:
            (archive_path, latest_path)
        """
        archive_path = self.save(report, self.archive_slot(report))
        latest_path = self.save(report, LATEST_SLOT)
        return archive_path, latest_path

    def load(self, slot: str = LATEST_SLOT) -> dict[str, Any]:
        """
        Read a stored snapshot back as a dict.

        Raises:
            FileNotFoundError: If nothing was ever saved under `slot`.
        """
        return json.loads(safe_read(self.path_for(slot)))

    def list_slots(self) -> list[str]:
        """Names of all stored slots, sorted."""
        if not self.results_dir.is_dir():
            return []
        return sorted(
            path.stem
            for path in self.results_dir.glob("*.json")
            if _SLOT_RE.match(path.stem)
        )
