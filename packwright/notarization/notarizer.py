# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Notarization: submit a signed artifact, then poll until the notary decides.

The state machine:

    submitted -> {pending, in_progress}* -> accepted | rejected
                                         -> timed_out (attempt budget spent)

Submission failures (network, bad credentials, unparseable output) are
fatal straight away. Retrying is the caller's business: rerun the pipeline
and it gets a fresh submission with a fresh id.

Polling sleeps a fixed interval before each status request and stops at the
first terminal status. A status request that fails counts as an attempt
without a verdict. Running out of attempts is reported as timed_out, never
as rejected: timed out means "wait and resubmit", rejected means "fix the
artifact". A rejected result carries the notary's log so the reason is
visible in the build output.

All talking is done through `xcrun notarytool ... --output-format json`.
"""

import json
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from packwright.logging.logger import get_logger
from packwright.pipeline.exceptions import ArtifactMissingError, NotarizationSubmissionError
from packwright.process.runner import CommandRunner
from packwright.utils.hashing import compute_sha256

_logger = get_logger(__name__)

XCRUN = "xcrun"
NOTARYTOOL = "notarytool"


class NotarizationStatus(str, Enum):
    SUBMITTED = "submitted"
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    TIMED_OUT = "timed_out"

    @property
    def is_terminal(self) -> bool:
        return self in (
            NotarizationStatus.ACCEPTED,
            NotarizationStatus.REJECTED,
            NotarizationStatus.TIMED_OUT,
        )


# notarytool's wording -> our states. Anything unknown is treated as pending.
_SERVICE_STATUSES: dict[str, NotarizationStatus] = {
    "accepted": NotarizationStatus.ACCEPTED,
    "invalid": NotarizationStatus.REJECTED,
    "rejected": NotarizationStatus.REJECTED,
    "in progress": NotarizationStatus.IN_PROGRESS,
    "pending": NotarizationStatus.PENDING,
}


def parse_service_status(raw: Optional[str]) -> NotarizationStatus:
    if not raw:
        return NotarizationStatus.PENDING
    return _SERVICE_STATUSES.get(raw.strip().lower(), NotarizationStatus.PENDING)


@dataclass(frozen=True)
class NotarizationRequest:
    artifact: Path
    keychain_profile: str


@dataclass(frozen=True)
class NotarizationResult:
    """Terminal outcome of one submission."""

    status: NotarizationStatus
    submission_id: str
    artifact: Path
    artifact_sha256: str
    polls: int
    message: str = ""
    log: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.status is NotarizationStatus.ACCEPTED


def _parse_json(output: str) -> dict[str, Any]:
    try:
        parsed = json.loads(output)
    except ValueError:
        return {}
    return parsed if isinstance(parsed, dict) else {}


class Notarizer:
    """Drives one submission of one artifact to a terminal status."""

    def __init__(
        self,
        request: NotarizationRequest,
        runner: CommandRunner,
        poll_interval_seconds: float = 30.0,
        max_poll_attempts: int = 120,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_poll_attempts < 1:
            raise ValueError("max_poll_attempts must be at least 1")
        self._request = request
        self._runner = runner
        self._poll_interval_seconds = poll_interval_seconds
        self._max_poll_attempts = max_poll_attempts
        self._sleep = sleep

    def _notarytool(self, *args: str) -> list[str]:
        return [
            XCRUN,
            NOTARYTOOL,
            *args,
            "--keychain-profile",
            self._request.keychain_profile,
        ]

    def build_submit_command(self) -> list[str]:
        return self._notarytool("submit", str(self._request.artifact), "--output-format", "json")

    def build_info_command(self, submission_id: str) -> list[str]:
        return self._notarytool("info", submission_id, "--output-format", "json")

    def build_log_command(self, submission_id: str) -> list[str]:
        return self._notarytool("log", submission_id)

    def submit(self) -> str:
        """
        Upload the artifact and return the submission id.

        Raises:
            NotarizationSubmissionError: notarytool failed or gave no id.
        """
        result = self._runner.run(self.build_submit_command())
        if not result.success:
            raise NotarizationSubmissionError(
                f"notarytool submit failed with exit code {result.exit_code}: {result.stderr.strip()}",
                command_result=result,
            )

        submission_id = _parse_json(result.stdout).get("id")
        if not submission_id:
            raise NotarizationSubmissionError(
                "notarytool submit returned no submission id", command_result=result
            )
        return str(submission_id)

    def poll_status(self, submission_id: str) -> tuple[NotarizationStatus, str]:
        result = self._runner.run(self.build_info_command(submission_id))
        if not result.success:
            _logger.warning(
                "Status request failed",
                extra={
                    "submission_id": submission_id,
                    "exit_code": result.exit_code,
                    "stderr": result.stderr.strip(),
                },
            )
            return NotarizationStatus.PENDING, result.stderr.strip()

        payload = _parse_json(result.stdout)
        return parse_service_status(payload.get("status")), str(payload.get("message") or "")

    def fetch_log(self, submission_id: str) -> Optional[str]:
        result = self._runner.run(self.build_log_command(submission_id))
        if not result.success:
            _logger.warning(
                "Could not fetch notarization log",
                extra={"submission_id": submission_id, "exit_code": result.exit_code},
            )
            return None
        return result.stdout

    def notarize(self) -> NotarizationResult:
        """
        Submit and block until accepted, rejected, or out of attempts.

        Raises:
            ArtifactMissingError: the artifact does not exist.
            NotarizationSubmissionError: the upload failed.
        """
        artifact = self._request.artifact
        if not artifact.is_file():
            raise ArtifactMissingError(f"Artifact to notarize not found: {artifact}")

        checksum = compute_sha256(artifact)
        submission_id = self.submit()
        state = NotarizationStatus.SUBMITTED
        _logger.info(
            "Submitted for notarization",
            extra={"submission_id": submission_id, "artifact": str(artifact)},
        )

        for attempt in range(1, self._max_poll_attempts + 1):
            self._sleep(self._poll_interval_seconds)
            status, message = self.poll_status(submission_id)
            if status is not state:
                _logger.info(
                    "Notarization status changed",
                    extra={
                        "submission_id": submission_id,
                        "from": state.value,
                        "to": status.value,
                        "attempt": attempt,
                    },
                )
                state = status

            if status is NotarizationStatus.ACCEPTED:
                return NotarizationResult(
                    status=status,
                    submission_id=submission_id,
                    artifact=artifact,
                    artifact_sha256=checksum,
                    polls=attempt,
                    message=message,
                )
            if status is NotarizationStatus.REJECTED:
                _logger.error(
                    "Notarization rejected",
                    extra={"submission_id": submission_id, "service_message": message},
                )
                return NotarizationResult(
                    status=status,
                    submission_id=submission_id,
                    artifact=artifact,
                    artifact_sha256=checksum,
                    polls=attempt,
                    message=message,
                    log=self.fetch_log(submission_id),
                )

        _logger.error(
            "Notarization timed out",
            extra={
                "submission_id": submission_id,
                "attempts": self._max_poll_attempts,
                "last_status": state.value,
            },
        )
        return NotarizationResult(
            status=NotarizationStatus.TIMED_OUT,
            submission_id=submission_id,
            artifact=artifact,
            artifact_sha256=checksum,
            polls=self._max_poll_attempts,
            message=f"No verdict after {self._max_poll_attempts} status requests",
        )
