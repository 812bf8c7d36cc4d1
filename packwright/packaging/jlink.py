# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Runtime image linking with jlink.

jlink refuses to write into an existing directory, so a stale image from a
previous build is removed first. The image is stripped of debug symbols,
headers and man pages: it ships inside every installer.
"""

import shutil
from collections.abc import Sequence
from pathlib import Path
from typing import Optional

from packwright.logging.logger import get_logger
from packwright.pipeline.results import StepResult
from packwright.process.runner import CommandRunner

_logger = get_logger(__name__)

JLINK = "jlink"
STEP_NAME = "jlink"


def build_jlink_command(
    module_names: Sequence[str],
    output: Path,
    module_path: Optional[Path] = None,
) -> list[str]:
    command = [JLINK]
    if module_path is not None:
        command += ["--module-path", str(module_path)]
    command += [
        "--add-modules",
        ",".join(module_names),
        "--output",
        str(output),
        "--strip-debug",
        "--no-header-files",
        "--no-man-pages",
    ]
    return command


class JLinker:
    """Links the given platform modules into a runtime image at `output`."""

    def __init__(
        self,
        module_names: Sequence[str],
        output: Path,
        runner: CommandRunner,
        module_path: Optional[Path] = None,
    ) -> None:
        if not module_names:
            raise ValueError("jlink needs at least one module name")
        self._module_names = list(module_names)
        self._output = output
        self._module_path = module_path
        self._runner = runner

    def build_command(self) -> list[str]:
        return build_jlink_command(self._module_names, self._output, self._module_path)

    def apply(self) -> StepResult:
        if self._output.exists():
            _logger.info("Removing stale runtime image", extra={"path": str(self._output)})
            shutil.rmtree(self._output)

        _logger.info(
            "Running jlink",
            extra={"modules": self._module_names, "output": str(self._output)},
        )
        result = StepResult.from_command(STEP_NAME, self._runner.run(self.build_command()))
        if not result.success:
            _logger.error(
                "jlink failed",
                extra={"exit_code": result.exit_code, "stderr": result.stderr},
            )
        return result
