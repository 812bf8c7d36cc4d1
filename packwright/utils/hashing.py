# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Hashing utilities for packwright.

Notarization tickets are issued for one exact artifact. The SHA-256 of a
disk image is recorded when it is submitted and compared again right before
stapling, so a file touched in between is caught instead of stapled.
"""

import hashlib
from pathlib import Path

HASH_BUFFER_SIZE = 65536  # 64 KiB chunks


def compute_sha256(file_path: Path) -> str:
    """
    Compute the SHA256 hex digest of a file.

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


def verify_checksum(file_path: Path, expected_hash: str) -> bool:
    """True if the file's SHA256 matches `expected_hash` (case-insensitive)."""
    return compute_sha256(file_path) == expected_hash.lower()
