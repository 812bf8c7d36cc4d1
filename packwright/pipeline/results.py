# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Step results and the pipeline report.

A StepResult is what every packaging, signing and stapling step returns
instead of a bare boolean, so the exit code and captured stderr of the
native tool are still there when the orchestrator decides to abort.
"""

from dataclasses import dataclass, field
from typing import Optional

from packwright.process.runner import CommandResult


@dataclass(frozen=True)
class StepResult:
    """Outcome of one pipeline step."""

    step: str
    success: bool
    message: str = ""
    command_result: Optional[CommandResult] = None

    @classmethod
    def from_command(cls, step: str, result: CommandResult) -> "StepResult":
        if result.success:
            return cls(step=step, success=True, message=f"{step} succeeded", command_result=result)
        return cls(
            step=step,
            success=False,
            message=f"{step} failed with exit code {result.exit_code}",
            command_result=result,
        )

    @classmethod
    def ok(cls, step: str, message: str = "") -> "StepResult":
        return cls(step=step, success=True, message=message or f"{step} succeeded")

    @property
    def exit_code(self) -> Optional[int]:
        return self.command_result.exit_code if self.command_result else None

    @property
    def stderr(self) -> str:
        return self.command_result.stderr if self.command_result else ""


@dataclass
class PipelineReport:
    """Steps completed so far, in execution order."""

    platform: str
    steps: list[StepResult] = field(default_factory=list)

    def record(self, result: StepResult) -> StepResult:
        self.steps.append(result)
        return result

    @property
    def step_names(self) -> list[str]:
        return [step.step for step in self.steps]

    @property
    def success(self) -> bool:
        return bool(self.steps) and all(step.success for step in self.steps)
