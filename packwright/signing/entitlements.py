# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Default entitlements files.

codesign reads entitlements by path, so the plists shipped inside the
package have to exist as real files while signing runs. DefaultEntitlements
writes them to a private temp directory once and removes that directory on
release. The bootstrap owns one instance for the lifetime of the process.

Usage:
    with DefaultEntitlements() as paths:
        identity = SigningIdentity(developer_id, paths.runtime, paths.launcher)
        ...
    # directory is gone here
"""

import shutil
import tempfile
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from types import TracebackType
from typing import Optional

from packwright.logging.logger import get_logger

_logger = get_logger(__name__)

RUNTIME_RESOURCE = "default-entitlements-runtime.plist"
LAUNCHER_RESOURCE = "default-entitlements-launcher.plist"


@dataclass(frozen=True)
class EntitlementsPaths:
    runtime: Path
    launcher: Path


def read_default(resource_name: str) -> str:
    """Text of a bundled entitlements plist."""
    return (
        resources.files("packwright.signing")
        .joinpath("resources", resource_name)
        .read_text(encoding="utf-8")
    )


class DefaultEntitlements:
    """Materializes the bundled entitlements once, cleans them up on release."""

    def __init__(self, base_dir: Optional[Path] = None) -> None:
        self._base_dir = base_dir
        self._directory: Optional[Path] = None
        self._paths: Optional[EntitlementsPaths] = None

    @property
    def paths(self) -> EntitlementsPaths:
        if self._paths is None:
            raise RuntimeError("Default entitlements have not been acquired")
        return self._paths

    def acquire(self) -> EntitlementsPaths:
        if self._paths is not None:
            return self._paths

        directory = Path(
            tempfile.mkdtemp(
                prefix="packwright_entitlements_",
                dir=str(self._base_dir) if self._base_dir else None,
            )
        )
        try:
            runtime = directory / RUNTIME_RESOURCE
            launcher = directory / LAUNCHER_RESOURCE
            runtime.write_text(read_default(RUNTIME_RESOURCE), encoding="utf-8")
            launcher.write_text(read_default(LAUNCHER_RESOURCE), encoding="utf-8")
        except Exception:
            shutil.rmtree(directory, ignore_errors=True)
            raise

        self._directory = directory
        self._paths = EntitlementsPaths(runtime=runtime, launcher=launcher)
        _logger.info("Wrote default entitlements", extra={"directory": str(directory)})
        return self._paths

    def release(self) -> None:
        if self._directory is not None and self._directory.is_dir():
            shutil.rmtree(self._directory, ignore_errors=True)
            _logger.debug("Removed default entitlements", extra={"directory": str(self._directory)})
        self._directory = None
        self._paths = None

    def __enter__(self) -> EntitlementsPaths:
        return self.acquire()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.release()
