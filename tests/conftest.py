# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Shared pytest fixtures for packwright tests.

Fixtures here are available to every test file automatically. The main one
is FakeRunner: it has CommandRunner's `run` signature, records every
command line it receives and answers from a script, so no test ever spawns
jpackage, codesign or notarytool.
"""

import logging
import textwrap
from collections import deque
from collections.abc import Callable, Iterator, Sequence
from pathlib import Path
from typing import Optional

import pytest

from packwright.config.schema import PackwrightConfig
from packwright.logging.logger import configure_package_logging
from packwright.process.runner import CommandResult

# (exit_code, stdout, stderr)
Outcome = tuple[int, str, str]


class FakeRunner:
    """
    Scripted stand-in for CommandRunner.

    Answers come from, in order of priority:
      1. `handler(args)`, if given and it returns an outcome
      2. the queue filled with `queue(...)`
      3. `default` (success with empty output unless told otherwise)
    """

    def __init__(
        self,
        handler: Optional[Callable[[list[str]], Optional[Outcome]]] = None,
        default: Outcome = (0, "", ""),
    ) -> None:
        self.commands: list[list[str]] = []
        self.handler = handler
        self.default = default
        self._queue: deque[Outcome] = deque()

    def queue(self, exit_code: int = 0, stdout: str = "", stderr: str = "") -> "FakeRunner":
        self._queue.append((exit_code, stdout, stderr))
        return self

    def run(self, command: Sequence[str], cwd: Optional[Path] = None) -> CommandResult:
        args = [str(part) for part in command]
        self.commands.append(args)

        outcome = self.handler(args) if self.handler is not None else None
        if outcome is None:
            outcome = self._queue.popleft() if self._queue else self.default

        exit_code, stdout, stderr = outcome
        return CommandResult(
            command=tuple(args),
            exit_code=exit_code,
            stdout=stdout,
            stderr=stderr,
            elapsed_seconds=0.0,
        )

    def calls_to(self, executable: str) -> list[list[str]]:
        return [command for command in self.commands if command[0] == executable]


@pytest.fixture()
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture()
def runner_factory() -> type[FakeRunner]:
    """For tests that need a handler: `runner_factory(handler=...)`."""
    return FakeRunner


@pytest.fixture()
def demo_config() -> Callable[..., PackwrightConfig]:
    """
    Build a config for the 'Demo 1.0' application, with per-section overrides.

    Usage:
        config = demo_config(linux={"package_format": "rpm"})
    """

    def _build(**sections: dict) -> PackwrightConfig:
        raw: dict[str, dict] = {
            "global": {"config_version": "1.0.0"},
            "project": {"name": "Demo", "version": "1.0", "entry_module": "demo/demo.Main"},
        }
        for key, value in sections.items():
            if key == "project":
                raw["project"] = {**raw["project"], **value}
            else:
                raw[key] = value
        return PackwrightConfig.model_validate(raw)

    return _build


class _RecordCollector(logging.Handler):
    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


@pytest.fixture()
def log_records() -> Iterator[Callable[[str], list[logging.LogRecord]]]:
    """
    Collect what a packwright logger emits, after every package logger is set to INFO.

    packwright loggers don't propagate, so caplog never sees them.

    Usage:
        records = log_records("packwright.pipeline.orchestrator")
    """
    configure_package_logging("INFO")
    attached: list[tuple[logging.Logger, _RecordCollector]] = []

    def _attach(logger_name: str) -> list[logging.LogRecord]:
        logger = logging.getLogger(logger_name)
        collector = _RecordCollector()
        logger.addHandler(collector)
        attached.append((logger, collector))
        return collector.records

    yield _attach

    for logger, collector in attached:
        logger.removeHandler(collector)


@pytest.fixture()
def tmp_config_file(tmp_path: Path) -> Path:
    """
    Create a minimal valid config YAML file in a temp directory.

    This is the smallest config that passes schema validation.
    Tests that need specific config values should write their own files.
    """
    config_content = textwrap.dedent("""\
        global:
          config_version: "1.0.0"
          log_level: "DEBUG"
    """)
    config_file = tmp_path / "test_config.yaml"
    config_file.write_text(config_content, encoding="utf-8")
    return config_file


@pytest.fixture()
def project_config_file(tmp_path: Path) -> Path:
    """A config with a project section, forcing the deb format on Linux."""
    config_content = textwrap.dedent(f"""\
        global:
          config_version: "1.0.0"
        project:
          name: "Demo"
          version: "1.0"
          entry_module: "demo/demo.Main"
          build_directory: "{(tmp_path / 'target').as_posix()}"
          application_modules_path: "{(tmp_path / 'target' / 'mods').as_posix()}"
        linux:
          package_format: "deb"
    """)
    config_file = tmp_path / "packwright.yaml"
    config_file.write_text(config_content, encoding="utf-8")
    return config_file


@pytest.fixture()
def invalid_config_file(tmp_path: Path) -> Path:
    """A config file that's valid YAML but fails schema validation (missing required field)."""
    config_content = textwrap.dedent("""\
        global:
          log_level: "INFO"
    """)
    config_file = tmp_path / "invalid_config.yaml"
    config_file.write_text(config_content, encoding="utf-8")
    return config_file


@pytest.fixture()
def broken_yaml_file(tmp_path: Path) -> Path:
    """A file that isn't valid YAML at all."""
    config_file = tmp_path / "broken.yaml"
    config_file.write_text("{{not: yaml: at: all:::", encoding="utf-8")
    return config_file
