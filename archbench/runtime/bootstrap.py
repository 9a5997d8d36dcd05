# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Runtime bootstrap for archbench.

One-time setup that happens before a command does any real work:
  1. Check the interpreter version
  2. Configure the package logger from the global config
  3. Log what we're running on

Commands call this after the config is loaded and before the catalog is
touched, so every later log line goes to the configured level and file.
"""

import platform
import sys
from pathlib import Path

from archbench.config.schema import GlobalConfig
from archbench.logging.logger import configure_package_loggers, get_logger
from archbench.utils.paths import resolve_path

MINIMUM_PYTHON = (3, 10)


def check_minimum_python() -> None:
    """
    Raises:
        RuntimeError: If the interpreter is older than MINIMUM_PYTHON.
    """
    major, minor = sys.version_info[:2]
    if (major, minor) < MINIMUM_PYTHON:
        raise RuntimeError(
            f"archbench requires Python >= {MINIMUM_PYTHON[0]}.{MINIMUM_PYTHON[1]}, "
            f"but you're running {major}.{minor}. Please upgrade."
        )


def bootstrap(config: GlobalConfig, base_dir: Path) -> None:
    """
    Put the process into a known state for a benchmark command.

    Args:
        config: The validated global configuration.
        base_dir: Directory that a relative log_file is resolved against.
    """
    check_minimum_python()

    log_file = None
    if config.log_file is not None:
        log_file = resolve_path(config.log_file, base_dir)

    logger = get_logger("archbench", log_level=config.log_level, log_file=log_file)
    configure_package_loggers("archbench", config.log_level, log_file)
    logger.info(
        "archbench bootstrap complete",
        extra={
            "project_name": config.project_name,
            "config_version": config.config_version,
            "python_version": platform.python_version(),
            "platform": platform.system(),
        },
    )
