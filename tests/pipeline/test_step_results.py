# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Tests for StepResult, PipelineReport and PipelineStepError."""

from packwright.pipeline.exceptions import PipelineStepError
from packwright.pipeline.results import PipelineReport, StepResult
from packwright.process.runner import CommandResult


def _command(exit_code: int, stderr: str = "") -> CommandResult:
    return CommandResult(("jpackage",), exit_code, "", stderr, 0.1)


def test_from_command_keeps_exit_code_and_stderr() -> None:
    result = StepResult.from_command("jpackage (deb)", _command(2, "dpkg-deb: error"))
    assert not result.success
    assert result.exit_code == 2
    assert result.stderr == "dpkg-deb: error"


def test_ok_has_no_command() -> None:
    result = StepResult.ok("zip app image")
    assert result.success
    assert result.exit_code is None
    assert result.stderr == ""


def test_step_error_message_includes_stderr() -> None:
    error = PipelineStepError(StepResult.from_command("jlink", _command(1, "module not found")))
    assert error.step == "jlink"
    assert "module not found" in str(error)


def test_report_success_requires_every_step() -> None:
    report = PipelineReport(platform="linux")
    assert not report.success

    report.record(StepResult.ok("jlink"))
    assert report.success

    report.record(StepResult.from_command("jpackage (deb)", _command(1)))
    assert not report.success
    assert report.step_names == ["jlink", "jpackage (deb)"]
