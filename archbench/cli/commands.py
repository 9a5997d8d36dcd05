# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Command handlers for the archbench CLI.

Each handler takes the parsed argparse namespace and returns an exit code.
Diagnostics go through the structured logger; the only direct writes to
stdout are the summary tables a person asked for.

Fatal problems (bad config, malformed catalog, missing API key) are caught
before the first request goes out. Once trials are running, a failed call
only costs that trial; the run still ends with a complete report.
"""

import argparse
import json
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from archbench.cli.exit_codes import CONFIG_ERROR, RUNTIME_ERROR, SUCCESS, USER_ERROR, VALIDATION_ERROR
from archbench.config.exceptions import ConfigError
from archbench.config.loader import load_config
from archbench.config.schema import ArchBenchConfig, default_config
from archbench.evaluation.benchmarks.builtin import builtin_tasks
from archbench.evaluation.benchmarks.loader import BenchmarkCatalog, load_catalog, load_samples
from archbench.evaluation.benchmarks.models import AggregateReport, Task
from archbench.evaluation.exceptions import BenchmarkError, CatalogFormatError, IntegrityError
from archbench.evaluation.metrics.engine import aggregate
from archbench.evaluation.metrics.predicates import build_output_registry
from archbench.evaluation.reporting.store import LATEST_SLOT, ResultStore
from archbench.evaluation.reporting.writer import format_report_text, report_to_dict
from archbench.evaluation.runner.executor import TrialRunner
from archbench.evaluation.runner.generation import (
    OpenAIGenerator,
    PrecomputedGenerator,
    TextGenerator,
    load_environment,
)
from archbench.logging.logger import get_logger
from archbench.runtime.bootstrap import bootstrap
from archbench.utils.paths import resolve_base_dir, resolve_path

API_KEY_ENV = "OPENAI_API_KEY"


@dataclass(frozen=True)
class CommandContext:
    """What every command needs after setup: config, path base and a logger."""

    config: ArchBenchConfig
    base_dir: Path
    logger: logging.Logger


def _load_and_bootstrap(
    args: argparse.Namespace,
    command_name: str,
) -> tuple[int, Optional[CommandContext]]:
    """
    Shared setup: load config (or defaults), run bootstrap.

    Returns (exit_code, context). If exit_code is not SUCCESS the caller
    returns it immediately.
    """
    logger = get_logger(f"archbench.cli.{command_name}", log_level=args.log_level or "INFO")

    config_path = Path(args.config) if args.config is not None else None
    if config_path is None:
        config = default_config()
        logger.debug("No config provided, running with defaults", extra={"command": command_name})
    else:
        try:
            config = load_config(config_path)
        except ConfigError as err:
            logger.error(
                "Configuration error",
                extra={"command": command_name, "error": str(err)},
            )
            return CONFIG_ERROR, None

    if args.log_level is not None:
        global_config = config.global_config.model_copy(update={"log_level": args.log_level})
    else:
        global_config = config.global_config

    base_dir = resolve_base_dir(config_path)
    bootstrap(global_config, base_dir)

    return SUCCESS, CommandContext(config=config, base_dir=base_dir, logger=logger)


def _resolve_catalog(args: argparse.Namespace, ctx: CommandContext) -> BenchmarkCatalog:
    """The catalog from --catalog, then bench.catalog_path, then the built-in suite."""
    raw = getattr(args, "catalog", None) or ctx.config.bench.catalog_path
    if raw is None:
        ctx.logger.info("No catalog configured, using the built-in suite")
        return BenchmarkCatalog(
            version="builtin",
            tasks=builtin_tasks(),
            registry=build_output_registry(),
        )
    return load_catalog(resolve_path(raw, ctx.base_dir))


def _result_store(args: argparse.Namespace, ctx: CommandContext) -> ResultStore:
    raw = getattr(args, "results_dir", None) or ctx.config.bench.results_directory
    return ResultStore(
        resolve_path(raw, ctx.base_dir),
        excerpt_chars=ctx.config.bench.output_excerpt_chars,
    )


def _write_stdout(text: str) -> None:
    sys.stdout.write(text)
    sys.stdout.flush()


def _execute_benchmark(
    ctx: CommandContext,
    catalog: BenchmarkCatalog,
    tasks: tuple[Task, ...],
    generator: TextGenerator,
    delay_seconds: float,
    store: ResultStore,
) -> AggregateReport:
    """Run every task, aggregate, publish, and print the summary."""
    runner = TrialRunner(
        generator=generator,
        registry=catalog.registry,
        delay_seconds=delay_seconds,
        count_saturation=ctx.config.bench.count_saturation,
    )
    pairs = runner.run_suite(tasks)
    report = aggregate(
        pairs,
        catalog.registry,
        catalog_version=catalog.version,
        catalog_sha256=catalog.sha256,
    )

    archive_path, latest_path = store.publish(report)
    _write_stdout(format_report_text(report_to_dict(report)))

    ctx.logger.info(
        "Benchmark complete",
        extra={
            "baseline_avg": report.overall.baseline_display,
            "enhanced_avg": report.overall.enhanced_display,
            "improvement": round(report.overall.improvement, 2),
            "failed_trials": report.failed_trials,
            "archive": str(archive_path),
            "latest": str(latest_path),
        },
    )
    return report


def handle_run(args: argparse.Namespace) -> int:
    """
    Run the live benchmark: every task, both variants, against the
    configured model.
    """
    exit_code, ctx = _load_and_bootstrap(args, "run")
    if exit_code != SUCCESS or ctx is None:
        return exit_code

    try:
        catalog = _resolve_catalog(args, ctx)
        generation = ctx.config.generation
        delay = args.delay if getattr(args, "delay", None) is not None else generation.inter_call_delay_seconds
        if delay < 0:
            ctx.logger.error("--delay must be >= 0", extra={"delay": delay})
            return USER_ERROR

        if generation.env_file is not None:
            load_environment(resolve_path(generation.env_file, ctx.base_dir))
        if not os.environ.get(API_KEY_ENV):
            ctx.logger.error(
                f"{API_KEY_ENV} is not set, export it or put it in the configured env_file",
                extra={"command": "run"},
            )
            return CONFIG_ERROR

        ctx.logger.info(
            "Starting benchmark",
            extra={
                "command": "run",
                "dry_run": args.dry_run,
                "model": generation.model,
                "total_tasks": len(catalog.tasks),
                "metrics": catalog.registry.ids(),
                "delay_seconds": delay,
            },
        )
        if args.dry_run:
            ctx.logger.info("Dry run: no requests sent, nothing written")
            return SUCCESS

        generator = OpenAIGenerator(
            model=generation.model,
            max_output_tokens=generation.max_output_tokens,
            timeout_seconds=generation.timeout_seconds,
        )
        _execute_benchmark(ctx, catalog, catalog.tasks, generator, delay, _result_store(args, ctx))
        return SUCCESS

    except (CatalogFormatError, IntegrityError) as err:
        ctx.logger.error("Benchmark aborted, invalid inputs", extra={"error": str(err)})
        return VALIDATION_ERROR
    except Exception as err:
        ctx.logger.error("Benchmark failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR


def handle_analyze(args: argparse.Namespace) -> int:
    """
    Score precomputed outputs. No network, no delay.

    Metrics come from --catalog / bench.catalog_path when given, otherwise
    the built-in output metrics are used. Tasks always come from the
    samples file.
    """
    exit_code, ctx = _load_and_bootstrap(args, "analyze")
    if exit_code != SUCCESS or ctx is None:
        return exit_code

    raw_samples = getattr(args, "samples", None) or ctx.config.bench.samples_path
    if raw_samples is None:
        ctx.logger.error("analyze needs --samples or bench.samples_path", extra={"command": "analyze"})
        return USER_ERROR

    try:
        catalog = _resolve_catalog(args, ctx)
        tasks, samples = load_samples(resolve_path(raw_samples, ctx.base_dir))

        ctx.logger.info(
            "Starting sample analysis",
            extra={"command": "analyze", "dry_run": args.dry_run, "total_tasks": len(tasks)},
        )
        if args.dry_run:
            ctx.logger.info("Dry run: samples validated, nothing written")
            return SUCCESS

        generator = PrecomputedGenerator(tasks, samples)
        _execute_benchmark(ctx, catalog, tasks, generator, 0.0, _result_store(args, ctx))
        return SUCCESS

    except (CatalogFormatError, IntegrityError) as err:
        ctx.logger.error("Analysis aborted, invalid inputs", extra={"error": str(err)})
        return VALIDATION_ERROR
    except Exception as err:
        ctx.logger.error("Analysis failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR


def handle_report(args: argparse.Namespace) -> int:
    """Print a stored report."""
    exit_code, ctx = _load_and_bootstrap(args, "report")
    if exit_code != SUCCESS or ctx is None:
        return exit_code

    slot = getattr(args, "slot", None) or LATEST_SLOT
    store = _result_store(args, ctx)
    try:
        data = store.load(slot)
    except FileNotFoundError:
        ctx.logger.error(
            "No stored report for slot",
            extra={"slot": slot, "available": store.list_slots()},
        )
        return VALIDATION_ERROR
    except json.JSONDecodeError as err:
        ctx.logger.error("Stored report is not valid JSON", extra={"slot": slot, "error": str(err)})
        return VALIDATION_ERROR
    except ValueError as err:
        ctx.logger.error("Cannot read stored report", extra={"slot": slot, "error": str(err)})
        return USER_ERROR

    try:
        text = format_report_text(data)
    except (KeyError, TypeError) as err:
        ctx.logger.error(
            "Stored report is missing required fields",
            extra={"slot": slot, "error": f"{type(err).__name__}: {err}"},
        )
        return VALIDATION_ERROR

    _write_stdout(text)
    return SUCCESS


def handle_metrics(args: argparse.Namespace) -> int:
    """List the metrics a run with the current config would use."""
    exit_code, ctx = _load_and_bootstrap(args, "metrics")
    if exit_code != SUCCESS or ctx is None:
        return exit_code

    try:
        catalog = _resolve_catalog(args, ctx)
    except BenchmarkError as err:
        ctx.logger.error("Cannot load catalog", extra={"error": str(err)})
        return VALIDATION_ERROR

    lines = [f"{'ID':<28} {'NAME':<32} {'TYPE':<8} {'WEIGHT':>6}"]
    for metric in catalog.registry.all():
        lines.append(
            f"{metric.id[:28]:<28} {metric.name[:32]:<32} {metric.kind.value:<8} {metric.weight:>6g}"
        )
    _write_stdout("\n".join(lines) + "\n")
    return SUCCESS
