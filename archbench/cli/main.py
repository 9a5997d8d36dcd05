# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
CLI entrypoint for archbench.

A single root command with subcommands. The global options (--config,
--log-level, --dry-run) are inherited by every subcommand through
argparse's parent parser mechanism.

Usage:
    archbench run --config archbench.yaml
    archbench analyze --samples benchmarks/results/sample-outputs.json
    archbench report --slot latest
    archbench metrics --catalog benchmarks/test-prompts.json
"""

import argparse
import sys
from typing import Optional

from archbench.cli.commands import handle_analyze, handle_metrics, handle_report, handle_run
from archbench.cli.exit_codes import USER_ERROR


def _build_global_parser() -> argparse.ArgumentParser:
    """
    Build the parent parser with global options.

    add_help=False so its help text doesn't collide with the subcommand
    parsers that inherit from it.
    """
    parent = argparse.ArgumentParser(add_help=False)
    parent.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to YAML configuration file.",
    )
    parent.add_argument(
        "--log-level",
        type=str,
        default=None,
        dest="log_level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override the configured logging level.",
    )
    parent.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        dest="dry_run",
        help="Validate config and inputs without generating or writing anything.",
    )
    return parent


def _register_subcommands(
    subparsers: argparse._SubParsersAction,  # type: ignore[type-arg]
    parent: argparse.ArgumentParser,
) -> None:
    """
    Register all subcommands with their handler functions.

    Each subcommand sets its handler via set_defaults(func=...).
    """
    commands = [
        ("run", "Run the paired benchmark against the generation service.", handle_run),
        ("analyze", "Score precomputed baseline/enhanced outputs.", handle_analyze),
        ("report", "Print a stored report.", handle_report),
        ("metrics", "List the metrics a run would score with.", handle_metrics),
    ]

    for name, help_text, handler in commands:
        parser = subparsers.add_parser(name, parents=[parent], help=help_text)
        parser.set_defaults(func=handler, catalog=None, results_dir=None)

    for name in ("run", "analyze", "metrics"):
        subparsers.choices[name].add_argument(
            "--catalog",
            type=str,
            default=None,
            help="Task catalog JSON/YAML (overrides bench.catalog_path).",
        )

    for name in ("run", "analyze", "report"):
        subparsers.choices[name].add_argument(
            "--results-dir",
            type=str,
            default=None,
            dest="results_dir",
            help="Where reports are stored (overrides bench.results_directory).",
        )

    subparsers.choices["run"].add_argument(
        "--delay",
        type=float,
        default=None,
        help="Seconds to pause between calls (overrides generation.inter_call_delay_seconds).",
    )
    subparsers.choices["analyze"].add_argument(
        "--samples",
        type=str,
        default=None,
        help="Precomputed outputs JSON (overrides bench.samples_path).",
    )
    subparsers.choices["report"].add_argument(
        "--slot",
        type=str,
        default="latest",
        help="Which stored report to print.",
    )


def build_parser() -> argparse.ArgumentParser:
    parent = _build_global_parser()
    root_parser = argparse.ArgumentParser(
        prog="archbench",
        description="archbench — paired benchmark for engineering-quality signals in generated text.",
        parents=[parent],
    )
    subparsers = root_parser.add_subparsers(dest="command")
    _register_subcommands(subparsers, parent)
    return root_parser


def main(argv: Optional[list[str]] = None) -> None:
    """
    Main CLI entrypoint, referenced by [project.scripts] in pyproject.toml.

    With no subcommand we show help and exit with USER_ERROR.
    """
    root_parser = build_parser()
    args = root_parser.parse_args(argv)

    if not hasattr(args, "func") or args.func is None:
        root_parser.print_help()
        sys.exit(USER_ERROR)

    exit_code = args.func(args)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
