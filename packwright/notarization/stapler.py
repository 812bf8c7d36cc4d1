# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Staples an accepted notarization ticket into the artifact.

The ticket belongs to the exact bytes that were submitted. Before running
`xcrun stapler staple` we check that the result is accepted, that it is for
this path, and that the file's SHA-256 still matches the one taken at
submission. Re-signing or re-zipping in between would otherwise staple a
ticket that no longer matches.
"""

from pathlib import Path

from packwright.logging.logger import get_logger
from packwright.notarization.notarizer import XCRUN, NotarizationResult
from packwright.pipeline.exceptions import StaplingPreconditionError
from packwright.pipeline.results import StepResult
from packwright.process.runner import CommandRunner
from packwright.utils.hashing import verify_checksum

_logger = get_logger(__name__)

STEP_NAME = "stapler"


class NotarizationStapler:
    def __init__(self, artifact: Path, runner: CommandRunner) -> None:
        self._artifact = artifact
        self._runner = runner

    def build_command(self) -> list[str]:
        return [XCRUN, "stapler", "staple", str(self._artifact)]

    def verify_input(self, notarization: NotarizationResult) -> None:
        if not notarization.success:
            raise StaplingPreconditionError(
                f"Cannot staple {self._artifact}: notarization status is {notarization.status.value}"
            )
        if notarization.artifact.resolve() != self._artifact.resolve():
            raise StaplingPreconditionError(
                f"Cannot staple {self._artifact}: ticket was issued for {notarization.artifact}"
            )
        if not self._artifact.is_file():
            raise StaplingPreconditionError(f"Cannot staple: {self._artifact} not found")
        if not verify_checksum(self._artifact, notarization.artifact_sha256):
            raise StaplingPreconditionError(
                f"Cannot staple {self._artifact}: file changed after it was submitted"
            )

    def apply(self, notarization: NotarizationResult) -> StepResult:
        self.verify_input(notarization)

        result = StepResult.from_command(STEP_NAME, self._runner.run(self.build_command()))
        if result.success:
            _logger.info(
                "Notarization ticket stapled",
                extra={"artifact": str(self._artifact), "submission_id": notarization.submission_id},
            )
        else:
            _logger.error(
                "Stapling failed",
                extra={"artifact": str(self._artifact), "exit_code": result.exit_code, "stderr": result.stderr},
            )
        return result
