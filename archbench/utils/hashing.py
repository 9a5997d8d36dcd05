# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Hashing helpers used for report provenance.

Each trial records the SHA256 of the exact prompt it sent, and each report
records the SHA256 of the catalog file it was built from. That is enough to
tell whether two reports are comparable without storing the prompts twice.
"""

import hashlib
from pathlib import Path

HASH_BUFFER_SIZE = 65536  # 64 KiB


def compute_sha256(file_path: Path) -> str:
    """
    Compute the SHA256 hex digest of a file, reading it in 64 KiB chunks.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        OSError: If the file can't be read.
    """
    hasher = hashlib.sha256()
    with open(file_path, "rb") as f:
        while True:
            chunk = f.read(HASH_BUFFER_SIZE)
            if not chunk:
                break
            hasher.update(chunk)
    return hasher.hexdigest()


def compute_sha256_text(text: str) -> str:
    """SHA256 hex digest of a string's UTF-8 encoding."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()
