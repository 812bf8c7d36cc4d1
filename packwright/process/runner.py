# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
The one place where packwright spawns a process.

Every native tool (jlink, jpackage, codesign, notarytool, stapler, dpkg,
rpm) goes through CommandRunner.run. It runs the argument list without a
shell, captures stdout and stderr, enforces an optional timeout and hands
back a CommandResult. It never raises on a non-zero exit: deciding whether
a failure is fatal is the caller's job.

A missing executable and a timeout are folded into the same shape with
exit_code -1, so callers only ever inspect one structure.
"""

import subprocess
import time
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from packwright.logging.logger import get_logger

_logger = get_logger(__name__)

FAILED_TO_START: int = -1


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one native tool invocation."""

    command: tuple[str, ...]
    exit_code: int
    stdout: str
    stderr: str
    elapsed_seconds: float

    @property
    def success(self) -> bool:
        return self.exit_code == 0


class CommandRunner:
    """
    Runs external commands synchronously.

    Tests substitute a scripted runner with the same `run` signature, which
    is why every component takes its runner as a constructor argument.
    """

    def __init__(self, timeout_seconds: Optional[float] = None) -> None:
        self._timeout_seconds = timeout_seconds

    def run(self, command: Sequence[str], cwd: Optional[Path] = None) -> CommandResult:
        args = tuple(str(part) for part in command)
        _logger.debug("Running command", extra={"command": list(args)})

        start = time.monotonic()
        try:
            completed = subprocess.run(
                list(args),
                capture_output=True,
                text=True,
                timeout=self._timeout_seconds,
                cwd=str(cwd) if cwd is not None else None,
            )
        except subprocess.TimeoutExpired:
            elapsed = time.monotonic() - start
            _logger.warning(
                "Command timed out",
                extra={"command": list(args), "timeout_seconds": self._timeout_seconds},
            )
            return CommandResult(
                command=args,
                exit_code=FAILED_TO_START,
                stdout="",
                stderr=f"{args[0]} timed out after {self._timeout_seconds}s",
                elapsed_seconds=elapsed,
            )
        except FileNotFoundError:
            elapsed = time.monotonic() - start
            _logger.error("Executable not found", extra={"executable": args[0]})
            return CommandResult(
                command=args,
                exit_code=FAILED_TO_START,
                stdout="",
                stderr=f"{args[0]} executable not found",
                elapsed_seconds=elapsed,
            )

        elapsed = time.monotonic() - start
        _logger.debug(
            "Command finished",
            extra={
                "executable": args[0],
                "exit_code": completed.returncode,
                "elapsed_seconds": round(elapsed, 3),
            },
        )
        return CommandResult(
            command=args,
            exit_code=completed.returncode,
            stdout=completed.stdout,
            stderr=completed.stderr,
            elapsed_seconds=elapsed,
        )
