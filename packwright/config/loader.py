# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Turns a packwright YAML file into a frozen PackwrightConfig.

Steps, in order:
  1. read and parse the YAML into a mapping
  2. overlay the PACKWRIGHT_* environment variables listed in ENV_OVERRIDES
  3. validate the result with pydantic

Signing identities and notarytool profiles are usually CI secrets, so they
can come from the environment instead of being committed in the YAML. An
environment value always wins over the file.

Any failure stops the build before a single native tool has been spawned.
"""

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from packwright.config.exceptions import ConfigLoadError, ConfigValidationError
from packwright.config.schema import PackwrightConfig

# environment variable -> (section, key)
ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "PACKWRIGHT_DEVELOPER_ID": ("mac", "developer_id"),
    "PACKWRIGHT_KEYCHAIN_PROFILE": ("mac", "keychain_profile"),
    "PACKWRIGHT_LOG_LEVEL": ("global", "log_level"),
}


def _read_yaml_file(config_path: Path) -> dict[str, Any]:
    """
    Raises:
        ConfigLoadError: missing path, a directory, unreadable, bad YAML, or
            a document that is not a mapping.
    """
    if not config_path.exists():
        raise ConfigLoadError(f"Config file not found: {config_path}")
    if not config_path.is_file():
        raise ConfigLoadError(f"Config path is not a file: {config_path}")

    try:
        parsed = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except OSError as err:
        raise ConfigLoadError(f"Cannot read config file {config_path}: {err}") from err
    except yaml.YAMLError as err:
        raise ConfigLoadError(f"Invalid YAML in {config_path}: {err}") from err

    if not isinstance(parsed, dict):
        raise ConfigLoadError(
            f"Config file must contain a YAML mapping (dict), got {type(parsed).__name__}"
        )
    return parsed


def apply_env_overrides(raw: dict[str, Any], environ: Mapping[str, str]) -> dict[str, Any]:
    """Return a copy of `raw` with every set PACKWRIGHT_* variable applied."""
    merged = dict(raw)
    for variable, (section, key) in ENV_OVERRIDES.items():
        value = environ.get(variable)
        if not value:
            continue
        current = merged.get(section)
        if current is not None and not isinstance(current, dict):
            raise ConfigLoadError(f"Section '{section}' must be a mapping to apply {variable}")
        merged[section] = {**(current or {}), key: value}
    return merged


def load_config(
    config_path: Path,
    environ: Optional[Mapping[str, str]] = None,
) -> PackwrightConfig:
    """
    Load, validate, and freeze a config file.

    Args:
        config_path: Path to a YAML config file.
        environ: Where to read overrides from; os.environ when omitted.

    Raises:
        ConfigLoadError: File I/O or YAML parse failures.
        ConfigValidationError: Schema violations (missing fields, wrong types, unknown keys).
    """
    raw_data = apply_env_overrides(
        _read_yaml_file(config_path),
        os.environ if environ is None else environ,
    )

    try:
        return PackwrightConfig.model_validate(raw_data)
    except ValidationError as err:
        raise ConfigValidationError(
            f"Config validation failed for {config_path}:\n{err}"
        ) from err
