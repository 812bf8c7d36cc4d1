# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Recursive code signing of a macOS .app bundle.

Signing runs in four phases, each a precondition for the next:

  1. verify           bundle, launcher and both entitlements files exist and
                      the launcher is executable. Nothing is run otherwise.
  2. sign-all         every regular file under the bundle, default flags.
  3. sign-runtime     the embedded runtime's executables again, this time
                      with the runtime entitlements (JIT and friends).
  4. sign-launcher    the launcher last, with the launcher entitlements.

Order matters: an outer binary's signature covers what it contains, so the
launcher is signed only once everything inside the bundle is. Re-signing a
file that phase 2 already signed is harmless.

codesign prints informational chatter on stderr even when it succeeds, so
stderr is only logged. A non-zero exit stops the run and the remaining
phases never start.
"""

import os
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from packwright.config.schema import DEFAULT_RUNTIME_EXECUTABLES, DEFAULT_RUNTIME_PATH_IN_BUNDLE
from packwright.logging.logger import get_logger
from packwright.pipeline.exceptions import SigningPreconditionError
from packwright.pipeline.results import StepResult
from packwright.process.runner import CommandRunner

_logger = get_logger(__name__)

CODESIGN = "codesign"
DEFAULT_CODESIGNING_ARGS: tuple[str, ...] = ("-v", "--timestamp", "--force", "--options", "runtime")

PHASE_SIGN_ALL = "sign-all"
PHASE_SIGN_RUNTIME = "sign-runtime-executables"
PHASE_SIGN_LAUNCHER = "sign-launcher"
PHASE_REMOVE_SIGNATURE = "remove-signature"


@dataclass(frozen=True)
class SigningIdentity:
    """A signing certificate plus the entitlements used for the runtime and the launcher."""

    identity: str
    entitlements_runtime: Path
    entitlements_launcher: Path


def codesign_command(identity: str, targets: Sequence[Path], entitlements: Path | None = None) -> list[str]:
    """`codesign -s <identity> -v --timestamp --force --options runtime [--entitlements e] targets...`"""
    command = [CODESIGN, "-s", identity, *DEFAULT_CODESIGNING_ARGS]
    if entitlements is not None:
        command += ["--entitlements", str(entitlements)]
    command += [str(target) for target in targets]
    return command


def build_remove_signature_command(runtime_root: Path) -> list[str]:
    # `{} ;` keeps going past files that carry no signature.
    return [
        "find",
        str(runtime_root),
        "-type",
        "f",
        "-exec",
        CODESIGN,
        "--remove-signature",
        "{}",
        ";",
    ]


def _run_phase(runner: CommandRunner, phase: str, command: list[str]) -> StepResult:
    result = StepResult.from_command(phase, runner.run(command))
    if result.stderr.strip():
        _logger.warning(
            "codesign reported output on stderr",
            extra={"phase": phase, "stderr": result.stderr.strip()},
        )
    if result.success:
        _logger.info("Signing phase finished", extra={"phase": phase})
    else:
        _logger.error(
            "Signing phase failed",
            extra={"phase": phase, "exit_code": result.exit_code},
        )
    return result


def remove_signatures(runtime_root: Path, runner: CommandRunner) -> StepResult:
    """
    Strip signatures from every regular file under `runtime_root`.

    A recovery tool, not part of the normal signing run. Running it twice
    leaves the same unsigned tree as running it once.
    """
    if not runtime_root.is_dir():
        raise SigningPreconditionError(
            f"Cannot remove signatures: runtime not found at {runtime_root}"
        )
    return _run_phase(runner, PHASE_REMOVE_SIGNATURE, build_remove_signature_command(runtime_root))


class Signer:
    """Signs (or un-signs) one .app bundle."""

    def __init__(
        self,
        identity: SigningIdentity,
        bundle_root: Path,
        launcher: Path,
        runner: CommandRunner,
        runtime_path_in_bundle: str = DEFAULT_RUNTIME_PATH_IN_BUNDLE,
        runtime_executables: Sequence[str] = DEFAULT_RUNTIME_EXECUTABLES,
    ) -> None:
        self._identity = identity
        self._bundle_root = bundle_root
        self._launcher = launcher
        self._runner = runner
        self._runtime_root = bundle_root / runtime_path_in_bundle
        self._runtime_executables = tuple(runtime_executables)

    @property
    def runtime_root(self) -> Path:
        return self._runtime_root

    def verify_input(self) -> None:
        """Fail fast, before any codesign command is even built."""
        required = {
            "bundle": self._bundle_root,
            "launcher": self._launcher,
            "runtime entitlements": self._identity.entitlements_runtime,
            "launcher entitlements": self._identity.entitlements_launcher,
        }
        for label, path in required.items():
            if not path.exists():
                raise SigningPreconditionError(f"Cannot sign: {label} not found at {path}")

        if not self._launcher.is_file() or not os.access(self._launcher, os.X_OK):
            raise SigningPreconditionError(
                f"Cannot sign: launcher {self._launcher} is not an executable file"
            )

    def build_sign_all_command(self) -> list[str]:
        # `{} +` batches files and makes find exit non-zero if any codesign call fails.
        return [
            "find",
            str(self._bundle_root),
            "-depth",
            "-type",
            "f",
            "-exec",
            CODESIGN,
            "-s",
            self._identity.identity,
            *DEFAULT_CODESIGNING_ARGS,
            "{}",
            "+",
        ]

    def build_sign_runtime_executables_command(self) -> list[str]:
        home_bin = self._runtime_root / "Contents" / "Home" / "bin"
        targets = [home_bin / name for name in self._runtime_executables]
        return codesign_command(
            self._identity.identity, targets, self._identity.entitlements_runtime
        )

    def build_sign_launcher_command(self) -> list[str]:
        return codesign_command(
            self._identity.identity, [self._launcher], self._identity.entitlements_launcher
        )

    def build_remove_signature_command(self) -> list[str]:
        return build_remove_signature_command(self._runtime_root)

    def _run(self, phase: str, command: list[str]) -> StepResult:
        return _run_phase(self._runner, phase, command)

    def sign(self) -> StepResult:
        """
        Run all phases in order.

        Returns the first failing phase's result, or a success result once the
        launcher is signed.

        Raises:
            SigningPreconditionError: inputs are missing or the launcher is not executable.
        """
        self.verify_input()

        phases = (
            (PHASE_SIGN_ALL, self.build_sign_all_command),
            (PHASE_SIGN_RUNTIME, self.build_sign_runtime_executables_command),
            (PHASE_SIGN_LAUNCHER, self.build_sign_launcher_command),
        )
        for phase, build in phases:
            result = self._run(phase, build())
            if not result.success:
                return result

        _logger.info("Bundle signed", extra={"bundle": str(self._bundle_root)})
        return StepResult.ok("codesign", f"Signed {self._bundle_root}")

    def remove_signature(self) -> StepResult:
        """Strip signatures from every file of the embedded runtime."""
        return remove_signatures(self._runtime_root, self._runner)
