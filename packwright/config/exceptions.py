# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Custom exceptions for the configuration system.

We keep these separate so that the CLI can catch config-specific failures
without importing the pipeline machinery.
"""


class ConfigError(Exception):
    """Base for all configuration errors."""


class ConfigLoadError(ConfigError):
    """Raised when a config file cannot be read from disk or parsed as YAML."""


class ConfigValidationError(ConfigError):
    """
    Raised when a config file parses fine but fails schema validation.
    This covers missing required fields, type mismatches, unknown keys,
    and values like an empty application name or a bad package format.
    """
