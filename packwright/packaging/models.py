# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Data model for one packaging run.

PackagingConfig holds the platform-independent jpackage inputs and is
built once per run by the orchestrator. The variants hold what only one
platform needs (an upgrade UUID, a deb maintainer, a bundle identifier),
so adding a platform never touches the shared config.

ArtifactPaths is derived, never typed in by hand: the disk image path has
to be exactly what jpackage writes, otherwise signing and notarization
would look for a file that isn't there.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class PackagingConfig(BaseModel):
    """Immutable jpackage inputs shared by every platform variant."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(min_length=1)
    app_version: str = Field(min_length=1)
    module_name: str = Field(min_length=1, description="Application module copied into the module path")
    entry_module: str = Field(min_length=1, description="Value for --module, e.g. 'demo/demo.Main'")
    module_path: tuple[Path, ...] = Field(default=())
    runtime_image: Path
    dest: Path
    icon: Optional[Path] = None
    resource_dir: Optional[Path] = None


@dataclass(frozen=True)
class WindowsVariant:
    upgrade_uuid: Optional[str] = None

    package_type = "msi"


@dataclass(frozen=True)
class LinuxAppImageVariant:
    package_type = "app-image"


@dataclass(frozen=True)
class LinuxDebVariant:
    maintainer: Optional[str] = None
    menu_group: Optional[str] = None

    package_type = "deb"


@dataclass(frozen=True)
class LinuxRpmVariant:
    menu_group: Optional[str] = None

    package_type = "rpm"


@dataclass(frozen=True)
class MacVariant:
    package_identifier: Optional[str] = None
    package_name: Optional[str] = None
    signing_key_user_name: Optional[str] = None

    package_type = "dmg"


PackagerVariant = Union[
    WindowsVariant,
    LinuxAppImageVariant,
    LinuxDebVariant,
    LinuxRpmVariant,
    MacVariant,
]


@dataclass(frozen=True)
class ArtifactPaths:
    """Where a packaging run leaves its output."""

    bundle_root: Path
    launcher: Path
    disk_image: Optional[Path] = None

    @classmethod
    def for_app_image(cls, config: PackagingConfig) -> "ArtifactPaths":
        bundle_root = config.dest / config.name
        return cls(bundle_root=bundle_root, launcher=bundle_root / "bin" / config.name)

    @classmethod
    def for_mac(cls, config: PackagingConfig) -> "ArtifactPaths":
        bundle_root = config.dest / f"{config.name}.app"
        return cls(
            bundle_root=bundle_root,
            launcher=bundle_root / "Contents" / "MacOS" / config.name,
            disk_image=disk_image_path(config, MacVariant.package_type),
        )


def disk_image_path(config: PackagingConfig, extension: str) -> Path:
    """`<dest>/<name>-<version>.<ext>`, the name jpackage gives installers."""
    return config.dest / f"{config.name}-{config.app_version}.{extension}"


def archive_path(config: PackagingConfig) -> Path:
    """Zip of the Linux app image, next to the image directory."""
    return disk_image_path(config, "zip")
