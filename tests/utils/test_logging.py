# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for the structured JSON logger.

We verify:
  - output is valid JSON
  - all mandatory fields are present (ts, level, module, msg)
  - log levels filter correctly
  - extra context fields get merged into the JSON
  - configure_package_logging reaches loggers created earlier
"""

import json
import logging
import os
from pathlib import Path

import pytest

from packwright.logging.logger import configure_package_logging, get_logger


@pytest.fixture(autouse=True)
def _reset_loggers() -> None:
    """
    Clear test logger handlers between tests so get_logger's handler-stacking
    guard doesn't interfere with test isolation.
    """
    yield  # type: ignore[misc]
    for name in list(logging.Logger.manager.loggerDict):
        if name.startswith("packwright.test"):
            logger = logging.getLogger(name)
            for handler in logger.handlers:
                handler.close()
            logger.handlers.clear()


class TestJsonOutput:
    def test_mandatory_fields_are_present(self, capsys: pytest.CaptureFixture[str]) -> None:
        logger = get_logger("packwright.test.fields", log_level="INFO")
        logger.info("test message")
        captured = capsys.readouterr()

        parsed = json.loads(captured.out.strip())
        assert parsed["level"] == "INFO"
        assert parsed["module"] == "packwright.test.fields"
        assert parsed["msg"] == "test message"
        assert "ts" in parsed

    def test_extra_fields_are_included(self, capsys: pytest.CaptureFixture[str]) -> None:
        logger = get_logger("packwright.test.extra", log_level="DEBUG")
        logger.info("Signing phase finished", extra={"phase": "sign-all", "exit_code": 0})
        captured = capsys.readouterr()

        parsed = json.loads(captured.out.strip())
        assert parsed["phase"] == "sign-all"
        assert parsed["exit_code"] == 0

    def test_exception_is_serialized(self, capsys: pytest.CaptureFixture[str]) -> None:
        logger = get_logger("packwright.test.exc", log_level="INFO")
        try:
            raise ValueError("boom")
        except ValueError:
            logger.error("failed", exc_info=True)
        captured = capsys.readouterr()

        parsed = json.loads(captured.out.strip())
        assert "ValueError: boom" in parsed["exception"]


class TestLogLevelFiltering:
    def test_debug_messages_hidden_at_info_level(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        logger = get_logger("packwright.test.level_filter", log_level="INFO")
        logger.debug("this should not appear")
        assert capsys.readouterr().out.strip() == ""

    def test_invalid_level_raises(self) -> None:
        with pytest.raises(ValueError):
            get_logger("packwright.test.invalid", log_level="LOUD")

    def test_repeated_calls_do_not_stack_handlers(self) -> None:
        first = get_logger("packwright.test.stack")
        second = get_logger("packwright.test.stack", log_level="DEBUG")
        assert first is second
        assert len(second.handlers) == 1
        assert second.level == logging.DEBUG


class TestPackageConfiguration:
    def test_level_reaches_existing_loggers(self) -> None:
        logger = get_logger("packwright.test.configured", log_level="INFO")
        configure_package_logging("DEBUG")
        assert logger.level == logging.DEBUG
        assert all(handler.level == logging.DEBUG for handler in logger.handlers)
        configure_package_logging("INFO")

    def test_log_file_receives_entries(self, tmp_path: Path) -> None:
        log_file = tmp_path / "logs" / "packwright.log"
        logger = get_logger("packwright.test.file", log_level="INFO", log_file=log_file)
        logger.info("to the file")
        for handler in logger.handlers:
            handler.flush()

        lines = log_file.read_text(encoding="utf-8").strip().splitlines()
        assert json.loads(lines[-1])["msg"] == "to the file"

    def test_log_file_added_next_to_an_unrelated_file_handler(self, tmp_path: Path) -> None:
        logger = get_logger("packwright.test.second_file", log_level="INFO", log_file=tmp_path / "other.log")
        run_log = tmp_path / "run.log"

        configure_package_logging("INFO", log_file=run_log)
        configure_package_logging("INFO", log_file=run_log)
        try:
            targets = [getattr(h, "baseFilename", None) for h in logger.handlers]
            assert targets.count(os.path.abspath(run_log)) == 1
            assert os.path.abspath(tmp_path / "other.log") in targets
        finally:
            for name in list(logging.Logger.manager.loggerDict):
                if not name.startswith("packwright"):
                    continue
                package_logger = logging.getLogger(name)
                for handler in list(package_logger.handlers):
                    if getattr(handler, "baseFilename", None) == os.path.abspath(run_log):
                        package_logger.removeHandler(handler)
                        handler.close()
