# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Linux package-format detection.

Which installer a Linux host can build is decided by the tooling it has:
a host with dpkg builds .deb, a host with rpm builds .rpm. Detection asks
the tool for its version through the CommandRunner; exit code 0 means the
tool is there.
"""

from typing import Literal, Optional

from packwright.logging.logger import get_logger
from packwright.process.runner import CommandRunner

_logger = get_logger(__name__)

LinuxPackageFormat = Literal["deb", "rpm"]


class ToolDetector:
    """Reports whether one package manager is installed on the build host."""

    executable: str = ""

    def __init__(self, runner: CommandRunner) -> None:
        self._runner = runner

    def apply(self) -> bool:
        result = self._runner.run([self.executable, "--version"])
        _logger.debug(
            "Package tool probe",
            extra={"executable": self.executable, "found": result.success},
        )
        return result.success


class DebDetector(ToolDetector):
    executable = "dpkg"


class RpmDetector(ToolDetector):
    executable = "rpm"


def detect_linux_format(runner: CommandRunner) -> Optional[LinuxPackageFormat]:
    """
    Pick the installer format for this host, deb first.

    Returns None when neither tool is found; the orchestrator turns that
    into a DetectionError instead of guessing a format.
    """
    if DebDetector(runner).apply():
        return "deb"
    if RpmDetector(runner).apply():
        return "rpm"
    return None
