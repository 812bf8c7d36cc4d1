# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Signs the finished disk image as one artifact."""

from pathlib import Path

from packwright.logging.logger import get_logger
from packwright.pipeline.exceptions import ArtifactMissingError
from packwright.pipeline.results import StepResult
from packwright.process.runner import CommandRunner
from packwright.signing.signer import codesign_command

_logger = get_logger(__name__)

STEP_NAME = "codesign (dmg)"


class DmgCodeSigner:
    def __init__(self, developer_id: str, dmg_path: Path, runner: CommandRunner) -> None:
        self._developer_id = developer_id
        self._dmg_path = dmg_path
        self._runner = runner

    def build_command(self) -> list[str]:
        return codesign_command(self._developer_id, [self._dmg_path])

    def apply(self) -> StepResult:
        if not self._dmg_path.is_file():
            raise ArtifactMissingError(f"Disk image not found: {self._dmg_path}")

        result = StepResult.from_command(STEP_NAME, self._runner.run(self.build_command()))
        if result.stderr.strip():
            _logger.warning(
                "codesign reported output on stderr",
                extra={"dmg": str(self._dmg_path), "stderr": result.stderr.strip()},
            )
        if not result.success:
            _logger.error(
                "Code signing dmg failed",
                extra={"dmg": str(self._dmg_path), "exit_code": result.exit_code},
            )
        return result
