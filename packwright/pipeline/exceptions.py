# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Error taxonomy for the packaging pipeline.

  PreconditionError          inputs missing or unusable, nothing was run
  PipelineStepError          a native tool exited non-zero
  NotarizationSubmissionError  the upload itself failed
  NotarizationFailedError    the notary answered Rejected, or never answered
  DetectionError             no deb/rpm tooling on a Linux host
  PipelineCancelledError     a stop was requested between two steps

None of these are retried. The CLI maps them to exit codes.
"""

from typing import TYPE_CHECKING

from packwright.process.runner import CommandResult
from packwright.pipeline.results import StepResult

if TYPE_CHECKING:
    from packwright.notarization.notarizer import NotarizationResult


class PipelineError(Exception):
    """Base for every failure the pipeline reports."""


class PreconditionError(PipelineError):
    """An input was missing or unusable before any native tool ran."""


class SigningPreconditionError(PreconditionError):
    """Bundle, launcher or entitlements missing, or the launcher is not executable."""


class StaplingPreconditionError(PreconditionError):
    """The artifact was not accepted, or it changed after submission."""


class ArtifactMissingError(PreconditionError):
    """A step did not produce the file the next step expects."""


class DetectionError(PipelineError):
    """Neither dpkg nor rpm is available on the Linux build host."""


class PipelineCancelledError(PipelineError):
    """A stop request was observed between two steps."""


class PipelineStepError(PipelineError):
    """A native tool failed. Carries the StepResult with exit code and stderr."""

    def __init__(self, result: StepResult) -> None:
        detail = result.stderr.strip()
        message = result.message if not detail else f"{result.message}: {detail}"
        super().__init__(message)
        self.result = result

    @property
    def step(self) -> str:
        return self.result.step


class NotarizationSubmissionError(PipelineError):
    """The artifact could not be submitted (network, credentials, bad output)."""

    def __init__(self, message: str, command_result: CommandResult | None = None) -> None:
        super().__init__(message)
        self.command_result = command_result


class NotarizationFailedError(PipelineError):
    """Notarization reached Rejected or ran out of poll attempts."""

    def __init__(self, result: "NotarizationResult") -> None:
        super().__init__(
            f"Notarization {result.status.value} for submission {result.submission_id}"
            + (f": {result.message}" if result.message else "")
        )
        self.result = result
