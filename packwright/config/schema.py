# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Type-safe configuration schemas for packwright.

Every config section gets its own frozen pydantic model. Frozen means once
the loader creates it, nothing can mutate it; the orchestrator reads from
it, the packagers never see it directly.

The models use pydantic v2's ConfigDict with:
  - frozen=True: immutability after construction
  - extra="forbid": unknown fields cause immediate failure
  - validate_default=True: even defaults get type-checked

A single YAML file carries every section. Only `global` is mandatory; the
`package` command additionally requires `project`, and platform sections
fall back to their defaults when absent.
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_RUNTIME_PATH_IN_BUNDLE = "Contents/PlugIns/jre"
DEFAULT_RUNTIME_EXECUTABLES = ("java", "jrunscript", "keytool")


class GlobalConfig(BaseModel):
    """Cross-cutting settings: schema version and observability."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    config_version: str = Field(
        description="Schema version for compatibility tracking, e.g. '1.0.0'"
    )
    log_level: str = Field(
        default="INFO",
        description="One of DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Optional path for file-based log output",
    )


class ProjectConfig(BaseModel):
    """
    The application being packaged.

    `name`, `version` and `entry_module` end up on every jpackage command
    line, so they may not be blank. Everything else is optional or has a
    conventional default relative to the build directory.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    name: str = Field(min_length=1, description="Application name passed to --name")
    version: str = Field(min_length=1, description="Application version passed to --app-version")
    entry_module: str = Field(
        min_length=1,
        description="Main module, e.g. 'demo/demo.Main', passed to --module",
    )
    artifact: Optional[str] = Field(
        default=None,
        description="Built application module jar copied into the module path before linking",
    )
    build_directory: str = Field(
        default="target",
        description="Where the runtime image and the packaged output are written",
    )
    application_modules_path: str = Field(
        default="target/mods",
        description="Directory holding the application's modules (jpackage --module-path)",
    )
    jre_modules_path: Optional[str] = Field(
        default=None,
        description="Where jlink finds platform modules; jlink's own default when unset",
    )
    jre_module_names: list[str] = Field(
        default_factory=lambda: ["java.base"],
        min_length=1,
        description="Platform modules linked into the runtime image",
    )
    icon: Optional[str] = Field(default=None, description="Icon file passed to --icon")
    resource_dir: Optional[str] = Field(
        default=None,
        description="Resource override directory passed to --resource-dir",
    )

    @field_validator("jre_module_names", mode="before")
    @classmethod
    def _split_module_names(cls, value: object) -> object:
        # Accept the comma-separated form build tools usually hand over.
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value


class WindowsConfig(BaseModel):
    """Windows installer settings."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    upgrade_uuid: Optional[str] = Field(
        default=None,
        description="Stable upgrade code so new MSIs replace older installs",
    )


class LinuxConfig(BaseModel):
    """Linux packaging settings."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    deb_maintainer: Optional[str] = Field(
        default=None, description="Maintainer e-mail for the .deb control file"
    )
    menu_group: Optional[str] = Field(
        default=None, description="Desktop menu group for the launcher shortcut"
    )
    package_format: Literal["auto", "deb", "rpm"] = Field(
        default="auto",
        description="'auto' detects dpkg/rpm on the build host; 'deb' or 'rpm' forces a format",
    )


class MacConfig(BaseModel):
    """macOS bundle, signing and notarization settings."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    package_identifier: Optional[str] = Field(
        default=None, description="CFBundleIdentifier, e.g. 'com.example.demo'"
    )
    package_name: Optional[str] = Field(
        default=None, description="Name shown in the menu bar"
    )
    developer_id: Optional[str] = Field(
        default=None,
        description="Signing certificate, e.g. 'Developer ID Application: Jane Doe (ABCDE12345)'",
    )
    keychain_profile: Optional[str] = Field(
        default=None,
        description="notarytool credential profile created with `notarytool store-credentials`",
    )
    runtime_path_in_bundle: str = Field(
        default=DEFAULT_RUNTIME_PATH_IN_BUNDLE,
        description="Where the embedded runtime lives, relative to the .app root",
    )
    runtime_executables: list[str] = Field(
        default_factory=lambda: list(DEFAULT_RUNTIME_EXECUTABLES),
        description="Runtime binaries re-signed with the runtime entitlements",
    )
    entitlements_runtime: Optional[str] = Field(
        default=None,
        description="Entitlements for the runtime executables; bundled default when unset",
    )
    entitlements_launcher: Optional[str] = Field(
        default=None,
        description="Entitlements for the launcher; bundled default when unset",
    )


class NotarizationConfig(BaseModel):
    """How long to wait for the notary service."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    poll_interval_seconds: float = Field(
        default=30.0,
        ge=0.0,
        description="Pause between two status requests",
    )
    max_poll_attempts: int = Field(
        default=120,
        ge=1,
        description="Status requests before giving up with a timeout",
    )


class ProcessConfig(BaseModel):
    """Settings applied to every native tool invocation."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    timeout_seconds: Optional[float] = Field(
        default=None,
        gt=0.0,
        description="Hard limit per native tool run; unlimited when unset",
    )


class PackwrightConfig(BaseModel):
    """
    Top-level config container.

    Sections not present in the YAML either stay None (`project`) or take
    their defaults. Commands validate they have what they need.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    global_config: GlobalConfig = Field(alias="global")
    project: Optional[ProjectConfig] = Field(default=None)
    windows: WindowsConfig = Field(default_factory=WindowsConfig)
    linux: LinuxConfig = Field(default_factory=LinuxConfig)
    mac: MacConfig = Field(default_factory=MacConfig)
    notarization: NotarizationConfig = Field(default_factory=NotarizationConfig)
    process: ProcessConfig = Field(default_factory=ProcessConfig)
