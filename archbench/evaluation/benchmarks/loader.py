# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Task catalog loader.

Reads a catalog file and turns it into the tasks and the metric registry
for a run. The file format is:

    {
      "version": "1.0.0",
      "prompts": [
        {"id": "...", "prompt": "...", "category": "...", "complexity": "simple"}
      ],
      "metrics": {
        "items": [
          {"id": "...", "name": "...", "pattern": "...", "weight": 1, "type": "count"}
        ]
      }
    }

JSON is the canonical format; .yaml/.yml files with the same structure are
accepted too. A catalog without a "metrics" section is scored with the
built-in output metrics.

Every problem is a CatalogFormatError raised before any trial runs. We
don't skip bad entries and we don't guess defaults for required fields.
"""

import json
import math
import re
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml

from archbench.evaluation.benchmarks.models import Complexity, Task, Variant
from archbench.evaluation.exceptions import CatalogFormatError
from archbench.evaluation.metrics.predicates import build_output_registry, pattern_predicate
from archbench.evaluation.metrics.registry import Metric, MetricKind, MetricRegistry
from archbench.logging.logger import get_logger
from archbench.utils.filesystem import safe_read
from archbench.utils.hashing import compute_sha256

logger = get_logger(__name__)

_TASK_REQUIRED: tuple[str, ...] = ("id", "prompt", "category")
_METRIC_REQUIRED: tuple[str, ...] = ("id", "name", "pattern", "weight", "type")


@dataclass(frozen=True)
class BenchmarkCatalog:
    """Everything a catalog file defines: its version, the tasks and the metrics."""

    version: str
    tasks: tuple[Task, ...]
    registry: MetricRegistry
    sha256: Optional[str] = None


def _require_str(entry: dict[str, Any], field_name: str, where: str) -> str:
    if field_name not in entry:
        raise CatalogFormatError(f"{where} is missing required field '{field_name}'")
    value = entry[field_name]
    if not isinstance(value, str) or not value.strip():
        raise CatalogFormatError(f"{where} field '{field_name}' must be a non-empty string")
    return value


def _parse_task(entry: Any, index: int) -> Task:
    where = f"prompts[{index}]"
    if not isinstance(entry, dict):
        raise CatalogFormatError(f"{where} must be an object, got {type(entry).__name__}")

    for field_name in _TASK_REQUIRED:
        _require_str(entry, field_name, where)

    raw_complexity = entry.get("complexity", Complexity.MEDIUM.value)
    try:
        complexity = Complexity(raw_complexity)
    except ValueError:
        allowed = ", ".join(c.value for c in Complexity)
        raise CatalogFormatError(
            f"{where} complexity '{raw_complexity}' is not one of: {allowed}"
        ) from None

    return Task(
        id=entry["id"],
        description=entry["prompt"],
        category=entry["category"],
        complexity=complexity,
    )


def parse_tasks(entries: Any) -> tuple[Task, ...]:
    """
    Turn raw prompt entries into Tasks, keeping their order.

    Raises:
        CatalogFormatError: On a malformed entry, a duplicate id, or an empty list.
    """
    if not isinstance(entries, list):
        raise CatalogFormatError("'prompts' must be a list")
    if not entries:
        raise CatalogFormatError("Catalog has no prompts")

    tasks: list[Task] = []
    seen: set[str] = set()
    for index, entry in enumerate(entries):
        task = _parse_task(entry, index)
        if task.id in seen:
            raise CatalogFormatError(f"prompts[{index}] id '{task.id}' collides with an earlier task")
        seen.add(task.id)
        tasks.append(task)
    return tuple(tasks)


def _parse_metric(entry: Any, index: int) -> Metric:
    where = f"metrics.items[{index}]"
    if not isinstance(entry, dict):
        raise CatalogFormatError(f"{where} must be an object, got {type(entry).__name__}")

    for field_name in _METRIC_REQUIRED:
        if field_name not in entry:
            raise CatalogFormatError(f"{where} is missing required field '{field_name}'")
    for field_name in ("id", "name", "pattern", "type"):
        _require_str(entry, field_name, where)

    weight = entry["weight"]
    if (
        isinstance(weight, bool)
        or not isinstance(weight, (int, float))
        or not math.isfinite(weight)
        or weight <= 0
    ):
        raise CatalogFormatError(f"{where} weight must be a finite positive number, got {weight!r}")

    try:
        kind = MetricKind(entry["type"])
    except ValueError:
        raise CatalogFormatError(
            f"{where} type '{entry['type']}' must be 'boolean' or 'count'"
        ) from None

    try:
        detect = pattern_predicate(entry["pattern"], kind)
    except re.error as err:
        raise CatalogFormatError(f"{where} pattern does not compile: {err}") from err

    return Metric(
        id=entry["id"],
        name=entry["name"],
        weight=float(weight),
        kind=kind,
        detect=detect,
        pattern=entry["pattern"],
    )


def parse_metrics(entries: Any) -> MetricRegistry:
    """
    Turn raw metric entries into a fresh registry, in file order.

    Raises:
        CatalogFormatError: On a malformed entry.
        DuplicateMetricError: When two entries share an id.
    """
    if not isinstance(entries, list):
        raise CatalogFormatError("'metrics.items' must be a list")

    registry = MetricRegistry()
    for index, entry in enumerate(entries):
        registry.register(_parse_metric(entry, index))
    return registry


def parse_catalog(data: Any, sha256: Optional[str] = None) -> BenchmarkCatalog:
    """
    Validate an already-deserialized catalog.

    Raises:
        CatalogFormatError: If anything about the structure is wrong.
    """
    if not isinstance(data, dict):
        raise CatalogFormatError(f"Catalog must be an object, got {type(data).__name__}")
    if "prompts" not in data:
        raise CatalogFormatError("Catalog is missing required field 'prompts'")

    version = data.get("version", "unversioned")
    if not isinstance(version, str):
        raise CatalogFormatError("Catalog 'version' must be a string")

    tasks = parse_tasks(data["prompts"])

    metrics_section = data.get("metrics")
    if metrics_section is None:
        registry = build_output_registry()
    else:
        if not isinstance(metrics_section, dict) or "items" not in metrics_section:
            raise CatalogFormatError("'metrics' must be an object with an 'items' list")
        registry = parse_metrics(metrics_section["items"])

    return BenchmarkCatalog(version=version, tasks=tasks, registry=registry, sha256=sha256)


def _read_structured(path: Path) -> Any:
    """Read a JSON or YAML file, turning every read/parse failure into CatalogFormatError."""
    try:
        raw_text = safe_read(path)
    except OSError as err:
        raise CatalogFormatError(f"Cannot read {path}: {err}") from err

    try:
        if path.suffix.lower() in (".yaml", ".yml"):
            return yaml.safe_load(raw_text)
        return json.loads(raw_text)
    except (json.JSONDecodeError, yaml.YAMLError) as err:
        raise CatalogFormatError(f"{path} is not valid: {err}") from err


def load_catalog(path: Path) -> BenchmarkCatalog:
    """
    Load and validate a catalog file.

    Raises:
        CatalogFormatError: If the file is unreadable or malformed.
        DuplicateMetricError: When two metrics share an id.
    """
    data = _read_structured(path)
    catalog = parse_catalog(data, sha256=compute_sha256(path))

    logger.info(
        "Catalog loaded",
        extra={
            "path": str(path),
            "version": catalog.version,
            "total_tasks": len(catalog.tasks),
            "metrics": catalog.registry.ids(),
        },
    )
    return catalog


def parse_samples(data: Any) -> tuple[tuple[Task, ...], dict[str, dict[Variant, str]]]:
    """
    Validate precomputed outputs.

    Expected shape: {"tasks": [{"id", "task", "without", "with"}]} where
    "without" / "with" hold the baseline / enhanced text. An optional
    "category" per entry defaults to "sample".

    Returns:
        The tasks in file order and a {task_id: {variant: text}} mapping.
    """
    if not isinstance(data, dict) or not isinstance(data.get("tasks"), list):
        raise CatalogFormatError("Samples file must be an object with a 'tasks' list")
    if not data["tasks"]:
        raise CatalogFormatError("Samples file has no tasks")

    tasks: list[Task] = []
    samples: dict[str, dict[Variant, str]] = {}
    for index, entry in enumerate(data["tasks"]):
        where = f"tasks[{index}]"
        if not isinstance(entry, dict):
            raise CatalogFormatError(f"{where} must be an object")
        task_id = _require_str(entry, "id", where)
        description = _require_str(entry, "task", where)
        for variant in Variant:
            if not isinstance(entry.get(variant.value), str):
                raise CatalogFormatError(f"{where} field '{variant.value}' must be a string")
        if task_id in samples:
            raise CatalogFormatError(f"{where} id '{task_id}' collides with an earlier task")

        category = entry.get("category", "sample")
        if not isinstance(category, str) or not category:
            raise CatalogFormatError(f"{where} field 'category' must be a non-empty string")

        tasks.append(Task(id=task_id, description=description, category=category))
        samples[task_id] = {variant: entry[variant.value] for variant in Variant}

    return tuple(tasks), samples


def load_samples(path: Path) -> tuple[tuple[Task, ...], dict[str, dict[Variant, str]]]:
    """Load a precomputed-outputs file. See parse_samples for the format."""
    tasks, samples = parse_samples(_read_structured(path))
    logger.info("Samples loaded", extra={"path": str(path), "total_tasks": len(tasks)})
    return tasks, samples


def ensure_unique_ids(tasks: Sequence[Task]) -> None:
    """Raise CatalogFormatError if two tasks share an id."""
    seen: set[str] = set()
    for task in tasks:
        if task.id in seen:
            raise CatalogFormatError(f"Duplicate task id '{task.id}'")
        seen.add(task.id)
