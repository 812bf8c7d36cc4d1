# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
The packaging pipeline, start to finish.

    copy module -> jlink -> one platform branch

    windows: jpackage (msi)
    linux:   jpackage (app-image) -> zip -> deb | rpm
    mac:     jpackage (dmg) -> codesign dmg -> notarize -> staple

The branch is picked once from the host OS. Every step has to succeed
before the next one starts; the first failure raises and nothing after it
runs. There is no partial recovery: a deb failure does not fall back to
shipping just the app image, because the artifacts downstream would be
built on top of something broken.

Stop requests are only looked at between steps. A native tool that has
been started runs to completion (or to its timeout).
"""

import shutil
import threading
import time
from collections.abc import Callable
from pathlib import Path
from typing import Optional

from packwright.config.schema import PackwrightConfig, ProjectConfig
from packwright.logging.logger import get_logger
from packwright.notarization.notarizer import NotarizationRequest, Notarizer
from packwright.notarization.stapler import NotarizationStapler
from packwright.packaging.detectors import LinuxPackageFormat, detect_linux_format
from packwright.packaging.jlink import JLinker
from packwright.packaging.models import (
    ArtifactPaths,
    LinuxAppImageVariant,
    LinuxDebVariant,
    LinuxRpmVariant,
    MacVariant,
    PackagerVariant,
    PackagingConfig,
    WindowsVariant,
    archive_path,
)
from packwright.packaging.packagers import apply_packager, build_command
from packwright.pipeline.exceptions import (
    ArtifactMissingError,
    DetectionError,
    NotarizationFailedError,
    PipelineCancelledError,
    PipelineStepError,
    PreconditionError,
)
from packwright.pipeline.results import PipelineReport, StepResult
from packwright.process.runner import CommandRunner
from packwright.runtime.environment import HostPlatform, detect_host_platform
from packwright.signing.dmg import DmgCodeSigner
from packwright.utils.archive import zip_directory

_logger = get_logger(__name__)

JLINK_OUT = "runtime"
JPACKAGE_OUT = "appdir"


class PipelineOrchestrator:
    """Owns the PackagingConfig for one run and drives every step."""

    def __init__(
        self,
        config: PackwrightConfig,
        runner: CommandRunner,
        host: Optional[HostPlatform] = None,
        stop_event: Optional[threading.Event] = None,
        sleep: Callable[[float], None] = time.sleep,
        base_dir: Optional[Path] = None,
    ) -> None:
        if config.project is None:
            raise PreconditionError("The configuration has no 'project' section to package")

        self._config = config
        self._project: ProjectConfig = config.project
        self._runner = runner
        self._host = host if host is not None else detect_host_platform()
        self._stop_event = stop_event
        self._sleep = sleep
        self._base_dir = base_dir if base_dir is not None else Path.cwd()
        self._packaging_config = self._build_packaging_config()

    @property
    def host(self) -> HostPlatform:
        return self._host

    @property
    def packaging_config(self) -> PackagingConfig:
        return self._packaging_config

    def _resolve(self, value: str) -> Path:
        path = Path(value)
        return path if path.is_absolute() else self._base_dir / path

    @property
    def build_directory(self) -> Path:
        return self._resolve(self._project.build_directory)

    @property
    def modules_directory(self) -> Path:
        return self._resolve(self._project.application_modules_path)

    def _build_packaging_config(self) -> PackagingConfig:
        project = self._project
        return PackagingConfig(
            name=project.name,
            app_version=project.version,
            module_name=project.entry_module.split("/", 1)[0],
            entry_module=project.entry_module,
            module_path=(self.modules_directory,),
            runtime_image=self.build_directory / JLINK_OUT,
            dest=self.build_directory / JPACKAGE_OUT,
            icon=self._resolve(project.icon) if project.icon else None,
            resource_dir=self._resolve(project.resource_dir) if project.resource_dir else None,
        )

    # -- variants ---------------------------------------------------------

    def _windows_variant(self) -> WindowsVariant:
        return WindowsVariant(upgrade_uuid=self._config.windows.upgrade_uuid)

    def _linux_variant(self, package_format: LinuxPackageFormat) -> PackagerVariant:
        linux = self._config.linux
        if package_format == "deb":
            return LinuxDebVariant(maintainer=linux.deb_maintainer, menu_group=linux.menu_group)
        return LinuxRpmVariant(menu_group=linux.menu_group)

    def _mac_variant(self) -> MacVariant:
        mac = self._config.mac
        return MacVariant(
            package_identifier=mac.package_identifier,
            package_name=mac.package_name,
            signing_key_user_name=mac.developer_id,
        )

    def resolve_linux_format(self) -> LinuxPackageFormat:
        """The configured format, or whatever package manager the host has."""
        configured = self._config.linux.package_format
        if configured != "auto":
            _logger.info("Using configured Linux package format", extra={"format": configured})
            return configured

        detected = detect_linux_format(self._runner)
        if detected is None:
            raise DetectionError(
                "Could find neither dpkg nor rpm on this host; set linux.package_format to force one"
            )
        _logger.info("Detected Linux package format", extra={"format": detected})
        return detected

    # -- plumbing ---------------------------------------------------------

    def _checkpoint(self) -> None:
        if self._stop_event is not None and self._stop_event.is_set():
            raise PipelineCancelledError("Packaging cancelled between steps")

    def _require(self, report: PipelineReport, result: StepResult) -> StepResult:
        report.record(result)
        if not result.success:
            raise PipelineStepError(result)
        return result

    def _verify_preconditions(self) -> None:
        if self._host is HostPlatform.MAC:
            mac = self._config.mac
            if not mac.developer_id:
                raise PreconditionError("mac.developer_id is required to sign the disk image")
            if not mac.keychain_profile:
                raise PreconditionError("mac.keychain_profile is required for notarization")

        artifact = self._project.artifact
        if artifact is not None and not self._resolve(artifact).is_file():
            raise ArtifactMissingError(f"Built module not found: {self._resolve(artifact)}")

    # -- steps ------------------------------------------------------------

    def _copy_module(self) -> StepResult:
        if self._project.artifact is None:
            _logger.info("No module artifact configured, using module path as is")
            return StepResult.ok("copy module", "nothing to copy")

        source = self._resolve(self._project.artifact)
        target = self.modules_directory / source.name
        _logger.info("Copying module", extra={"from": str(source), "to": str(target)})
        try:
            self.modules_directory.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, target)
        except OSError as err:
            return StepResult(step="copy module", success=False, message=f"Cannot copy {source.name}: {err}")
        return StepResult.ok("copy module", f"Copied {source.name} to {self.modules_directory}")

    def _jlinker(self) -> JLinker:
        jre_path = self._project.jre_modules_path
        return JLinker(
            self._project.jre_module_names,
            self._packaging_config.runtime_image,
            self._runner,
            module_path=self._resolve(jre_path) if jre_path else None,
        )

    def _package(self, report: PipelineReport, variant: PackagerVariant) -> None:
        self._checkpoint()
        self._require(report, apply_packager(variant, self._packaging_config, self._runner))

    def _run_windows(self, report: PipelineReport) -> None:
        self._package(report, self._windows_variant())

    def _run_linux(self, report: PipelineReport) -> None:
        config = self._packaging_config
        self._package(report, LinuxAppImageVariant())

        self._checkpoint()
        image = ArtifactPaths.for_app_image(config).bundle_root
        if not image.is_dir():
            raise ArtifactMissingError(f"jpackage did not produce the app image at {image}")
        try:
            archive = zip_directory(image, archive_path(config))
            zipped = StepResult.ok("zip app image", f"Wrote {archive}")
        except OSError as err:
            zipped = StepResult(step="zip app image", success=False, message=f"Cannot zip {image}: {err}")
        self._require(report, zipped)

        self._checkpoint()
        self._package(report, self._linux_variant(self.resolve_linux_format()))

    def _run_mac(self, report: PipelineReport) -> None:
        mac = self._config.mac
        self._package(report, self._mac_variant())

        dmg = ArtifactPaths.for_mac(self._packaging_config).disk_image
        if dmg is None or not dmg.is_file():
            raise ArtifactMissingError(f"jpackage did not produce the disk image at {dmg}")

        self._checkpoint()
        _logger.info("Code signing dmg", extra={"dmg": str(dmg)})
        self._require(report, DmgCodeSigner(mac.developer_id or "", dmg, self._runner).apply())

        self._checkpoint()
        _logger.info("Running notarization (this will take a few minutes)")
        notarizer = Notarizer(
            NotarizationRequest(artifact=dmg, keychain_profile=mac.keychain_profile or ""),
            self._runner,
            poll_interval_seconds=self._config.notarization.poll_interval_seconds,
            max_poll_attempts=self._config.notarization.max_poll_attempts,
            sleep=self._sleep,
        )
        notarization = notarizer.notarize()
        report.record(
            StepResult(
                step="notarization",
                success=notarization.success,
                message=f"{notarization.status.value} ({notarization.submission_id})",
            )
        )
        if not notarization.success:
            raise NotarizationFailedError(notarization)

        self._checkpoint()
        self._require(report, NotarizationStapler(dmg, self._runner).apply(notarization))

    # -- entry points -----------------------------------------------------

    def plan(self) -> list[list[str]]:
        """The native commands a run would issue on this host, for --dry-run."""
        config = self._packaging_config
        commands = [self._jlinker().build_command()]
        if self._host is HostPlatform.WINDOWS:
            commands.append(build_command(self._windows_variant(), config))
        elif self._host is HostPlatform.LINUX:
            commands.append(build_command(LinuxAppImageVariant(), config))
            if self._config.linux.package_format == "auto":
                _logger.info("Linux package format is detected at run time, deb/rpm step not planned")
            else:
                commands.append(
                    build_command(self._linux_variant(self._config.linux.package_format), config)
                )
        else:
            commands.append(build_command(self._mac_variant(), config))
        return commands

    def run(self) -> PipelineReport:
        """
        Execute the whole pipeline.

        Returns:
            The report of every step, all successful.

        Raises:
            PipelineError: the first failure, naming the step.
        """
        report = PipelineReport(platform=self._host.value)
        _logger.info(
            "Packaging started",
            extra={
                "platform": self._host.value,
                "app_name": self._packaging_config.name,
                "version": self._packaging_config.app_version,
            },
        )

        self._verify_preconditions()
        self._require(report, self._copy_module())

        self._checkpoint()
        self._require(report, self._jlinker().apply())

        branches = {
            HostPlatform.WINDOWS: self._run_windows,
            HostPlatform.LINUX: self._run_linux,
            HostPlatform.MAC: self._run_mac,
        }
        branches[self._host](report)

        _logger.info(
            "Packaging finished",
            extra={"platform": self._host.value, "steps": report.step_names},
        )
        return report
