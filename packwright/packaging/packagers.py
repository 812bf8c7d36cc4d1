# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
jpackage command construction, one variant per platform/format.

Every command is built in two explicit steps:
  1. build_base_command: the arguments every platform needs
  2. the variant's own arguments, appended to that list

The variant helpers only ever return *extra* arguments, so no platform can
drop or reorder a base argument. Running the command never raises on a
non-zero exit; the StepResult carries exit code and stderr back to the
orchestrator, which decides the failure is fatal. Packaging failures are
configuration problems, so nothing here retries.
"""

import os

from packwright.logging.logger import get_logger
from packwright.packaging.models import (
    LinuxAppImageVariant,
    LinuxDebVariant,
    LinuxRpmVariant,
    MacVariant,
    PackagerVariant,
    PackagingConfig,
    WindowsVariant,
)
from packwright.pipeline.results import StepResult
from packwright.process.runner import CommandRunner

_logger = get_logger(__name__)

JPACKAGE = "jpackage"


def build_base_command(config: PackagingConfig, package_type: str) -> list[str]:
    """The platform-independent part of a jpackage command line."""
    command = [
        JPACKAGE,
        "--type",
        package_type,
        "--name",
        config.name,
        "--app-version",
        config.app_version,
        "--module",
        config.entry_module,
        "--module-path",
        os.pathsep.join(str(path) for path in config.module_path),
        "--dest",
        str(config.dest),
        "--runtime-image",
        str(config.runtime_image),
    ]
    if config.icon is not None:
        command += ["--icon", str(config.icon)]
    if config.resource_dir is not None:
        command += ["--resource-dir", str(config.resource_dir)]
    return command


def _windows_arguments(variant: WindowsVariant) -> list[str]:
    arguments = ["--win-menu", "--win-shortcut"]
    if variant.upgrade_uuid:
        arguments += ["--win-upgrade-uuid", variant.upgrade_uuid]
    return arguments


def _app_image_arguments(variant: LinuxAppImageVariant) -> list[str]:
    return []


def _linux_menu_arguments(menu_group: str | None) -> list[str]:
    arguments = ["--linux-shortcut"]
    if menu_group:
        arguments += ["--linux-menu-group", menu_group]
    return arguments


def _deb_arguments(variant: LinuxDebVariant) -> list[str]:
    arguments = _linux_menu_arguments(variant.menu_group)
    if variant.maintainer:
        arguments += ["--linux-deb-maintainer", variant.maintainer]
    return arguments


def _rpm_arguments(variant: LinuxRpmVariant) -> list[str]:
    return _linux_menu_arguments(variant.menu_group)


def _mac_arguments(variant: MacVariant) -> list[str]:
    arguments: list[str] = []
    if variant.package_identifier:
        arguments += ["--mac-package-identifier", variant.package_identifier]
    if variant.package_name:
        arguments += ["--mac-package-name", variant.package_name]
    if variant.signing_key_user_name:
        arguments += ["--mac-signing-key-user-name", variant.signing_key_user_name]
    return arguments


def variant_arguments(variant: PackagerVariant) -> list[str]:
    """The arguments only this variant adds."""
    match variant:
        case WindowsVariant():
            return _windows_arguments(variant)
        case LinuxAppImageVariant():
            return _app_image_arguments(variant)
        case LinuxDebVariant():
            return _deb_arguments(variant)
        case LinuxRpmVariant():
            return _rpm_arguments(variant)
        case MacVariant():
            return _mac_arguments(variant)
    raise TypeError(f"Unknown packager variant: {type(variant).__name__}")


def build_command(variant: PackagerVariant, config: PackagingConfig) -> list[str]:
    """Full jpackage command: base arguments first, variant arguments appended."""
    command = build_base_command(config, variant.package_type)
    command.extend(variant_arguments(variant))
    return command


def step_name(variant: PackagerVariant) -> str:
    return f"jpackage ({variant.package_type})"


def apply_packager(
    variant: PackagerVariant,
    config: PackagingConfig,
    runner: CommandRunner,
) -> StepResult:
    """Run jpackage for one variant and report the outcome."""
    command = build_command(variant, config)
    name = step_name(variant)
    _logger.info("Running jpackage", extra={"type": variant.package_type, "dest": str(config.dest)})

    result = StepResult.from_command(name, runner.run(command))
    if result.success:
        _logger.info("jpackage successful", extra={"type": variant.package_type})
    else:
        _logger.error(
            "jpackage failed",
            extra={
                "type": variant.package_type,
                "exit_code": result.exit_code,
                "stderr": result.stderr,
            },
        )
    return result
