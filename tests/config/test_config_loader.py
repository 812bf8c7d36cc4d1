# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for the config loader, the entry point for all config loading.

We test:
  1. Valid YAML loads into a frozen, correct config object
  2. Missing required fields raise ConfigValidationError
  3. Unknown fields raise ConfigValidationError (extra="forbid")
  4. Broken YAML raises ConfigLoadError
  5. Loaded config is truly immutable
"""

import textwrap
from pathlib import Path

import pytest

from packwright.config.exceptions import ConfigLoadError, ConfigValidationError
from packwright.config.loader import ENV_OVERRIDES, load_config
from packwright.config.schema import DEFAULT_RUNTIME_EXECUTABLES, DEFAULT_RUNTIME_PATH_IN_BUNDLE


@pytest.fixture(autouse=True)
def _clear_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    for variable in ENV_OVERRIDES:
        monkeypatch.delenv(variable, raising=False)


def _write(tmp_path: Path, name: str, content: str) -> Path:
    config_file = tmp_path / name
    config_file.write_text(textwrap.dedent(content), encoding="utf-8")
    return config_file


class TestLoadValidConfig:
    def test_loads_minimal_valid_config(self, tmp_config_file: Path) -> None:
        config = load_config(tmp_config_file)
        assert config.global_config.config_version == "1.0.0"
        assert config.global_config.log_level == "DEBUG"

    def test_optional_sections_take_defaults(self, tmp_config_file: Path) -> None:
        config = load_config(tmp_config_file)
        assert config.project is None
        assert config.linux.package_format == "auto"
        assert config.mac.runtime_path_in_bundle == DEFAULT_RUNTIME_PATH_IN_BUNDLE
        assert tuple(config.mac.runtime_executables) == DEFAULT_RUNTIME_EXECUTABLES
        assert config.notarization.poll_interval_seconds == 30.0
        assert config.notarization.max_poll_attempts == 120
        assert config.process.timeout_seconds is None

    def test_loads_full_config_with_all_sections(self, tmp_path: Path) -> None:
        config_file = _write(
            tmp_path,
            "full.yaml",
            """\
            global:
              config_version: "1.0.0"
              log_level: "WARNING"
            project:
              name: "Demo"
              version: "1.0"
              entry_module: "demo/demo.Main"
              artifact: "build/demo.jar"
              jre_module_names: "java.base, java.desktop"
            windows:
              upgrade_uuid: "6b9d2f4e-1c1a-4d43-9a2c-5f0c6f0e7a11"
            linux:
              deb_maintainer: "ops@example.com"
              menu_group: "Development"
              package_format: "rpm"
            mac:
              package_identifier: "com.example.demo"
              developer_id: "Developer ID Application: Example (ABCDE12345)"
              keychain_profile: "notary"
            notarization:
              poll_interval_seconds: 5
              max_poll_attempts: 10
            process:
              timeout_seconds: 900
            """,
        )

        config = load_config(config_file)
        assert config.project is not None
        assert config.project.name == "Demo"
        assert config.project.build_directory == "target"
        assert config.project.jre_module_names == ["java.base", "java.desktop"]
        assert config.linux.package_format == "rpm"
        assert config.mac.keychain_profile == "notary"
        assert config.notarization.max_poll_attempts == 10
        assert config.process.timeout_seconds == 900


class TestLoadInvalidConfig:
    def test_missing_required_field_raises_validation_error(
        self, invalid_config_file: Path
    ) -> None:
        with pytest.raises(ConfigValidationError):
            load_config(invalid_config_file)

    def test_unknown_field_raises_validation_error(self, tmp_path: Path) -> None:
        config_file = _write(
            tmp_path,
            "unknown_field.yaml",
            """\
            global:
              config_version: "1.0.0"
              some_nonsense_field: true
            """,
        )
        with pytest.raises(ConfigValidationError):
            load_config(config_file)

    def test_blank_project_name_is_rejected(self, tmp_path: Path) -> None:
        config_file = _write(
            tmp_path,
            "blank_name.yaml",
            """\
            global:
              config_version: "1.0.0"
            project:
              name: ""
              version: "1.0"
              entry_module: "demo/demo.Main"
            """,
        )
        with pytest.raises(ConfigValidationError):
            load_config(config_file)

    @pytest.mark.parametrize("names", ['""', "[]", '" , "'])
    def test_empty_jre_module_names_are_rejected(self, tmp_path: Path, names: str) -> None:
        config_file = _write(
            tmp_path,
            "no_jre_modules.yaml",
            f"""\
            global:
              config_version: "1.0.0"
            project:
              name: "Demo"
              version: "1.0"
              entry_module: "demo/demo.Main"
              jre_module_names: {names}
            """,
        )
        with pytest.raises(ConfigValidationError):
            load_config(config_file)

    def test_unknown_package_format_is_rejected(self, tmp_path: Path) -> None:
        config_file = _write(
            tmp_path,
            "bad_format.yaml",
            """\
            global:
              config_version: "1.0.0"
            linux:
              package_format: "apk"
            """,
        )
        with pytest.raises(ConfigValidationError):
            load_config(config_file)

    def test_zero_poll_attempts_is_rejected(self, tmp_path: Path) -> None:
        config_file = _write(
            tmp_path,
            "zero_polls.yaml",
            """\
            global:
              config_version: "1.0.0"
            notarization:
              max_poll_attempts: 0
            """,
        )
        with pytest.raises(ConfigValidationError):
            load_config(config_file)

    def test_broken_yaml_raises_load_error(self, broken_yaml_file: Path) -> None:
        with pytest.raises(ConfigLoadError):
            load_config(broken_yaml_file)

    def test_non_mapping_yaml_raises_load_error(self, tmp_path: Path) -> None:
        config_file = _write(tmp_path, "list.yaml", "- one\n- two\n")
        with pytest.raises(ConfigLoadError):
            load_config(config_file)

    def test_nonexistent_file_raises_load_error(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigLoadError):
            load_config(tmp_path / "does_not_exist.yaml")

    def test_directory_path_raises_load_error(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigLoadError):
            load_config(tmp_path)


class TestConfigImmutability:
    def test_cannot_mutate_frozen_config(self, tmp_config_file: Path) -> None:
        config = load_config(tmp_config_file)
        with pytest.raises(Exception):
            config.global_config.log_level = "ERROR"  # type: ignore[misc]

    def test_cannot_mutate_nested_section(self, tmp_config_file: Path) -> None:
        config = load_config(tmp_config_file)
        with pytest.raises(Exception):
            config.linux.package_format = "rpm"  # type: ignore[misc]


class TestEnvironmentOverrides:
    def test_credentials_come_from_environment(self, tmp_config_file: Path) -> None:
        environ = {
            "PACKWRIGHT_DEVELOPER_ID": "Developer ID Application: Example (ABCDE12345)",
            "PACKWRIGHT_KEYCHAIN_PROFILE": "ci-notary",
        }
        config = load_config(tmp_config_file, environ=environ)
        assert config.mac.developer_id == "Developer ID Application: Example (ABCDE12345)"
        assert config.mac.keychain_profile == "ci-notary"

    def test_environment_wins_over_file(self, tmp_config_file: Path) -> None:
        config = load_config(tmp_config_file, environ={"PACKWRIGHT_LOG_LEVEL": "ERROR"})
        assert config.global_config.log_level == "ERROR"

    def test_empty_variables_are_ignored(self, tmp_config_file: Path) -> None:
        config = load_config(tmp_config_file, environ={"PACKWRIGHT_KEYCHAIN_PROFILE": ""})
        assert config.mac.keychain_profile is None

    def test_file_values_kept_without_environment(self, tmp_path: Path) -> None:
        config_file = _write(
            tmp_path,
            "mac.yaml",
            """\
            global:
              config_version: "1.0.0"
            mac:
              keychain_profile: "from-file"
              package_identifier: "com.example.demo"
            """,
        )
        config = load_config(config_file, environ={"PACKWRIGHT_DEVELOPER_ID": "Example"})
        assert config.mac.keychain_profile == "from-file"
        assert config.mac.package_identifier == "com.example.demo"
        assert config.mac.developer_id == "Example"
