# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Path utilities for archbench.

Paths in a config file are written relative to that file, so a config can
be moved together with its catalog and results directory. Without a config
file, relative paths are taken from the current working directory.
"""

from pathlib import Path
from typing import Optional


def resolve_base_dir(config_path: Optional[Path]) -> Path:
    """
    Return the directory that relative config paths are resolved against.

    Args:
        config_path: The config file that was loaded, or None.

    Returns:
        The config file's parent directory, or the working directory.
    """
    if config_path is None:
        return Path.cwd()
    return config_path.resolve().parent


def resolve_path(raw: str, base_dir: Path) -> Path:
    """Resolve `raw` against `base_dir` unless it is already absolute."""
    path = Path(raw).expanduser()
    if path.is_absolute():
        return path
    return (base_dir / path).resolve()
