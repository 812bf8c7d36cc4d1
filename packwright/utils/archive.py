# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Zip archives of app-image directories.

The archive keeps the directory itself as the top-level entry, so
`appdir/Demo` becomes `Demo/bin/Demo`, `Demo/lib/...` inside
`Demo-1.0.zip`. File modes are stored too, otherwise the launcher loses its
execute bit on extraction.
"""

import zipfile
from pathlib import Path

from packwright.logging.logger import get_logger

_logger = get_logger(__name__)


def zip_directory(source_dir: Path, target_zip: Path) -> Path:
    """
    Write `source_dir` (and everything below it) into `target_zip`.

    An existing archive at `target_zip` is replaced. The archive is written
    next to the target first and renamed into place once complete.

    Raises:
        FileNotFoundError: If `source_dir` is not a directory.
    """
    if not source_dir.is_dir():
        raise FileNotFoundError(f"Directory to zip not found: {source_dir}")

    target_zip.parent.mkdir(parents=True, exist_ok=True)
    partial = target_zip.with_name(f".{target_zip.name}.partial")
    base = source_dir.parent

    file_count = 0
    try:
        with zipfile.ZipFile(partial, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            archive.write(source_dir, source_dir.relative_to(base).as_posix())
            for path in sorted(source_dir.rglob("*")):
                archive.write(path, path.relative_to(base).as_posix())
                if path.is_file():
                    file_count += 1
        partial.replace(target_zip)
    except BaseException:
        if partial.exists():
            partial.unlink()
        raise

    _logger.info(
        "Zipped app image",
        extra={"source": str(source_dir), "archive": str(target_zip), "files": file_count},
    )
    return target_zip
