# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Safe filesystem operations for archbench.

Result files are shared between runs (the "latest" report is overwritten
every time), so a crash in the middle of a write must never leave a
half-written JSON file behind.

Atomic writes work by writing to a temporary file in the same directory as
the target, then renaming. A rename on the same filesystem is atomic on
POSIX and replaces the target in a single step on Windows.
"""

import os
import tempfile
from pathlib import Path

_TEMP_PREFIX = ".archbench_tmp_"


def atomic_write(target_path: Path, content: str, encoding: str = "utf-8") -> None:
    """
    Write content to a file atomically.

    The temp file lives next to the target so the final rename never
    crosses a filesystem boundary. Readers see either the complete old
    content or the complete new content.

    Args:
        target_path: Where the final file should end up.
        content: The string content to write.
        encoding: Text encoding to use.

    Raises:
        OSError: If the write or rename fails.
    """
    target_path.parent.mkdir(parents=True, exist_ok=True)

    # delete=False: the file has to survive close() so it can be renamed.
    temp_fd = tempfile.NamedTemporaryFile(
        mode="w",
        encoding=encoding,
        dir=str(target_path.parent),
        prefix=_TEMP_PREFIX,
        suffix=".tmp",
        delete=False,
    )
    temp_path = Path(temp_fd.name)

    try:
        temp_fd.write(content)
        temp_fd.flush()
        os.fsync(temp_fd.fileno())
        temp_fd.close()
        os.replace(temp_path, target_path)
    except BaseException:
        temp_fd.close()
        if temp_path.exists():
            temp_path.unlink()
        raise


def safe_read(file_path: Path, encoding: str = "utf-8") -> str:
    """
    Read a text file with proper error context.

    Args:
        file_path: Path to the file to read.
        encoding: Text encoding, defaults to UTF-8.

    Returns:
        The file contents as a string.

    Raises:
        FileNotFoundError: If the path doesn't exist.
        IsADirectoryError: If the path is a directory.
        OSError: For other I/O errors.
    """
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")
    if not file_path.is_file():
        raise IsADirectoryError(f"Expected a file, got a directory: {file_path}")
    return file_path.read_text(encoding=encoding)
