# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Report serialization and the human-readable summary.

`report_to_dict` produces the persisted JSON shape:

    {
      "timestamp": "...",
      "catalogVersion": "...",
      "catalogSha256": "...",
      "tasks": [
        {"id", "task", "category", "complexity",
         "without": {"score", "error", "promptSha256", "output", "metrics": {...}},
         "with":    {...},
         "improvement"}
      ],
      "summary": {
        "without": {"average", "averageExact", "scores"},
        "with":    {"average", "averageExact", "scores"},
        "byMetric": {"<id>": {"name", "type", "withoutPct", "withPct", "change"}},
        "byCategory": {"<category>": {"tasks", "without", "with"}},
        "improvement": <float>,
        "failedTrials": <int>
      }
    }

The JSON is the authoritative output. `format_report_text` renders the
summary table from that same dict, so a stored report prints exactly like a
fresh one.
"""

from typing import Any

from archbench.evaluation.benchmarks.models import (
    AggregateReport,
    TrialPair,
    TrialResult,
    round_half_up,
)


def _excerpt(text: str, excerpt_chars: int) -> str:
    if excerpt_chars > 0 and len(text) > excerpt_chars:
        return text[:excerpt_chars] + "..."
    return text


def _trial_to_dict(trial: TrialResult, excerpt_chars: int) -> dict[str, Any]:
    return {
        "score": trial.score,
        "error": trial.error,
        "promptSha256": trial.prompt_sha256,
        "generationTimeSeconds": round(trial.generation_time_seconds, 3),
        "output": _excerpt(trial.raw_text, excerpt_chars),
        "metrics": {
            metric_id: {
                "passed": outcome.passed,
                "value": outcome.value,
                "error": outcome.error,
            }
            for metric_id, outcome in trial.outcomes.items()
        },
    }


def _pair_to_dict(pair: TrialPair, excerpt_chars: int) -> dict[str, Any]:
    return {
        "id": pair.task.id,
        "task": pair.task.description,
        "category": pair.task.category,
        "complexity": pair.task.complexity.value,
        "without": _trial_to_dict(pair.baseline, excerpt_chars),
        "with": _trial_to_dict(pair.enhanced, excerpt_chars),
        "improvement": pair.improvement,
    }


def report_to_dict(report: AggregateReport, excerpt_chars: int = 0) -> dict[str, Any]:
    """
    Serialize a report into plain JSON-compatible data.

    Args:
        report: The report to serialize.
        excerpt_chars: Keep at most this many characters of each generated
                       output (plus "..."). 0 keeps the full text.
    """
    overall = report.overall
    return {
        "timestamp": report.timestamp,
        "catalogVersion": report.catalog_version,
        "catalogSha256": report.catalog_sha256,
        "tasks": [_pair_to_dict(pair, excerpt_chars) for pair in report.tasks],
        "summary": {
            "without": {
                "average": overall.baseline_display,
                "averageExact": overall.baseline_avg,
                "scores": [pair.baseline.score for pair in report.tasks],
            },
            "with": {
                "average": overall.enhanced_display,
                "averageExact": overall.enhanced_avg,
                "scores": [pair.enhanced.score for pair in report.tasks],
            },
            "byMetric": {
                metric_id: {
                    "name": rate.name,
                    "type": rate.kind,
                    "withoutPct": rate.baseline_pct,
                    "withPct": rate.enhanced_pct,
                    "change": rate.change,
                }
                for metric_id, rate in report.metric_rates.items()
            },
            "byCategory": {
                name: {
                    "tasks": summary.task_count,
                    "without": summary.baseline_avg,
                    "with": summary.enhanced_avg,
                }
                for name, summary in report.categories.items()
            },
            "improvement": overall.improvement,
            "failedTrials": report.failed_trials,
        },
    }


def _signed(value: float) -> str:
    rounded = round_half_up(value)
    return f"+{rounded}%" if rounded > 0 else f"{rounded}%"


def format_report_text(data: dict[str, Any]) -> str:
    """
    Render a serialized report as a plain-text summary.

    Works on the dict from report_to_dict (or one loaded back from the
    result store), never on live objects.
    """
    summary = data["summary"]
    width = 64
    lines: list[str] = [
        "=" * width,
        "ARCHBENCH REPORT",
        f"Generated: {data['timestamp']}",
    ]
    if data.get("catalogVersion"):
        lines.append(f"Catalog: {data['catalogVersion']}")
    lines.extend([
        "=" * width,
        "",
        "--- OVERALL ---",
        f"Average WITHOUT enhancement: {summary['without']['average']}%",
        f"Average WITH enhancement:    {summary['with']['average']}%",
        f"Improvement:                 {_signed(summary['improvement'])}",
        f"Failed trials:               {summary['failedTrials']}",
    ])

    if summary["byMetric"]:
        lines.extend([
            "",
            "--- METRIC BREAKDOWN ---",
            f"{'Metric':<30} {'Without':>8} {'With':>8} {'Change':>8}",
            f"{'-' * 30} {'-' * 8} {'-' * 8} {'-' * 8}",
        ])
        for rate in summary["byMetric"].values():
            without = f"{round_half_up(rate['withoutPct'])}%"
            with_ = f"{round_half_up(rate['withPct'])}%"
            lines.append(
                f"{rate['name'][:30]:<30} {without:>8} {with_:>8} {_signed(rate['change']):>8}"
            )

    if summary.get("byCategory"):
        lines.extend(["", "--- CATEGORIES ---"])
        for name, category in summary["byCategory"].items():
            lines.append(
                f"  {name}: {round_half_up(category['without'])}% -> "
                f"{round_half_up(category['with'])}% ({category['tasks']} tasks)"
            )

    if data["tasks"]:
        lines.extend(["", "--- TASKS ---"])
        for task in data["tasks"]:
            lines.append(
                f"  {task['id']}: {task['without']['score']}% -> {task['with']['score']}% "
                f"({_signed(task['improvement'])})"
            )
            for variant in ("without", "with"):
                error = task[variant].get("error")
                if error:
                    lines.append(f"    ! {variant} trial failed: {error}")

    lines.extend(["", "=" * width])
    return "\n".join(lines) + "\n"
