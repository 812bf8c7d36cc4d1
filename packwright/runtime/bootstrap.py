# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Runtime bootstrap for packwright.

One-time setup that happens before any native tool runs:
  1. Check the Python version
  2. Apply the configured log level (and log file) to every packwright logger
  3. Write the bundled default entitlements to a private temp directory

RuntimeSession owns step 3 for the whole process: the files exist from
startup until the session closes, and are removed then, whatever happened
in between.
"""

from pathlib import Path
from types import TracebackType
from typing import Optional

from packwright.config.schema import GlobalConfig
from packwright.logging.logger import configure_package_logging, get_logger
from packwright.runtime.environment import check_minimum_python, get_system_info
from packwright.signing.entitlements import DefaultEntitlements, EntitlementsPaths

_logger = get_logger(__name__)


def bootstrap(config: Optional[GlobalConfig], log_level: Optional[str] = None) -> None:
    """
    Run the bootstrap sequence. An explicit `log_level` wins over the config.
    """
    check_minimum_python()

    level = log_level or (config.log_level if config is not None else "INFO")
    log_file = Path(config.log_file) if config is not None and config.log_file else None
    configure_package_logging(level, log_file)

    system_info = get_system_info()
    _logger.info(
        "packwright bootstrap complete",
        extra={
            "python_version": system_info.python_version,
            "platform": system_info.platform,
            "architecture": system_info.architecture,
        },
    )


class RuntimeSession:
    """
    Process-wide resources: bootstrapped logging plus the default entitlements.

    Usage:
        with RuntimeSession(config.global_config) as session:
            session.entitlements.runtime  # path to a real plist file
    """

    def __init__(
        self,
        config: Optional[GlobalConfig],
        log_level: Optional[str] = None,
        scratch_dir: Optional[Path] = None,
    ) -> None:
        self._config = config
        self._log_level = log_level
        self._defaults = DefaultEntitlements(base_dir=scratch_dir)

    @property
    def entitlements(self) -> EntitlementsPaths:
        return self._defaults.paths

    def __enter__(self) -> "RuntimeSession":
        bootstrap(self._config, self._log_level)
        self._defaults.acquire()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self._defaults.release()
