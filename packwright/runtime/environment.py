# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Build host inspection for packwright.

The pipeline branch (Windows, Linux or macOS) is chosen exactly once per
run from the host's operating system. Nothing downstream re-checks it.
"""

import platform
import sys
from enum import Enum
from typing import NamedTuple, Optional

MINIMUM_PYTHON_MAJOR = 3
MINIMUM_PYTHON_MINOR = 11


class HostPlatform(str, Enum):
    WINDOWS = "windows"
    LINUX = "linux"
    MAC = "mac"


class SystemInfo(NamedTuple):
    """Snapshot of the current system environment."""

    python_version: str
    platform: str
    architecture: str
    hostname: str


def detect_host_platform(system_name: Optional[str] = None) -> HostPlatform:
    """
    Map `platform.system()` onto the three platforms jpackage supports.

    Raises:
        RuntimeError: On any other operating system.
    """
    name = (system_name if system_name is not None else platform.system()).lower()
    if name == "windows" or name.startswith(("cygwin", "msys")):
        return HostPlatform.WINDOWS
    if name == "linux":
        return HostPlatform.LINUX
    if name == "darwin":
        return HostPlatform.MAC
    raise RuntimeError(f"Unsupported build host operating system: {name or 'unknown'}")


def check_minimum_python() -> None:
    """
    Raises:
        RuntimeError: If Python version is below 3.11.
    """
    major, minor = sys.version_info[:2]
    if major < MINIMUM_PYTHON_MAJOR or (
        major == MINIMUM_PYTHON_MAJOR and minor < MINIMUM_PYTHON_MINOR
    ):
        raise RuntimeError(
            f"packwright requires Python >= {MINIMUM_PYTHON_MAJOR}.{MINIMUM_PYTHON_MINOR}, "
            f"but you're running {major}.{minor}. Please upgrade."
        )


def get_system_info() -> SystemInfo:
    """Collect basic system information for logging and diagnostics."""
    return SystemInfo(
        python_version=platform.python_version(),
        platform=platform.system(),
        architecture=platform.machine(),
        hostname=platform.node(),
    )
