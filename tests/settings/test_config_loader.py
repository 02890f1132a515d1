# -*- coding: utf-8 -*-
"""
Tests for the layered configuration loader.
"""

import argparse
import logging
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from settings.config_loader import load_app_settings
from settings.config_models import (
    ProgressPreference,
    RepairFailurePolicy,
)


@pytest.fixture
def mock_logger():
    return MagicMock(spec=logging.Logger)


@pytest.fixture
def clean_env(monkeypatch):
    for name in (
        "WINGET_BOOTSTRAP_MODULE_NAME",
        "WINGET_BOOTSTRAP_REPAIR_FAILURE_POLICY",
        "WINGET_BOOTSTRAP_PROGRESS_PREFERENCE",
        "WINGET_BOOTSTRAP_VERBOSE",
        "WINGET_BOOTSTRAP_GALLERY_HTTP_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def _cli(**values):
    defaults = {
        "verbose": False,
        "progress": None,
        "repair_policy": None,
        "module_path": None,
        "module_name": None,
        "module_root": None,
        "powershell": None,
    }
    defaults.update(values)
    return argparse.Namespace(**defaults)


def test_defaults_without_config_file(clean_env, tmp_path, mock_logger):
    settings = load_app_settings(None, tmp_path / "missing.yaml", mock_logger)

    assert settings.module_name == "Microsoft.WinGet.Client"
    assert settings.provider.name == "NuGet"
    assert settings.provider.min_version == "2.8.5.201"
    assert settings.provider.remediation_modules == ["PackageManagement", "PowerShellGet"]
    assert settings.gallery.repository_name == "PSGallery"
    assert settings.gallery.http_timeout == 120
    assert settings.repair_failure_policy is RepairFailurePolicy.FATAL
    assert settings.progress_preference is ProgressPreference.SILENT
    assert settings.verbose is False


def test_yaml_overrides_defaults(clean_env, tmp_path, mock_logger):
    config_file = tmp_path / "config.yaml"
    config_file.write_text(
        "module_root: /opt/modules\n"
        "repair_failure_policy: warn\n"
        "gallery:\n"
        "  http_timeout: 30\n"
        "  repository_name: InternalGallery\n",
        encoding="utf-8",
    )

    settings = load_app_settings(None, config_file, mock_logger)

    assert settings.module_root == Path("/opt/modules")
    assert settings.repair_failure_policy is RepairFailurePolicy.WARN
    assert settings.gallery.http_timeout == 30
    assert settings.gallery.repository_name == "InternalGallery"
    # Untouched nested values keep their defaults.
    assert str(settings.gallery.api_url).startswith("https://www.powershellgallery.com")


def test_environment_is_applied(clean_env, tmp_path, mock_logger):
    clean_env.setenv("WINGET_BOOTSTRAP_REPAIR_FAILURE_POLICY", "warn")
    clean_env.setenv("WINGET_BOOTSTRAP_GALLERY_HTTP_TIMEOUT", "15")

    settings = load_app_settings(None, tmp_path / "missing.yaml", mock_logger)

    assert settings.repair_failure_policy is RepairFailurePolicy.WARN
    assert settings.gallery.http_timeout == 15


def test_yaml_overrides_environment(clean_env, tmp_path, mock_logger):
    clean_env.setenv("WINGET_BOOTSTRAP_REPAIR_FAILURE_POLICY", "warn")
    config_file = tmp_path / "config.yaml"
    config_file.write_text("repair_failure_policy: fatal\n", encoding="utf-8")

    settings = load_app_settings(None, config_file, mock_logger)

    assert settings.repair_failure_policy is RepairFailurePolicy.FATAL


def test_cli_overrides_yaml(clean_env, tmp_path, mock_logger):
    config_file = tmp_path / "config.yaml"
    config_file.write_text(
        "progress_preference: continue\nrepair_failure_policy: fatal\n",
        encoding="utf-8",
    )

    settings = load_app_settings(
        _cli(verbose=True, progress="stop", repair_policy="warn"),
        config_file,
        mock_logger,
    )

    assert settings.verbose is True
    assert settings.progress_preference is ProgressPreference.STOP
    assert settings.repair_failure_policy is RepairFailurePolicy.WARN


def test_cli_module_and_host_options(clean_env, tmp_path, mock_logger):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("module_name: From.Yaml\npowershell_executable: powershell\n", encoding="utf-8")

    settings = load_app_settings(
        _cli(module_name="From.Cli", module_root=str(tmp_path / "Modules"), powershell="pwsh"),
        config_file,
        mock_logger,
    )

    assert settings.module_name == "From.Cli"
    assert settings.module_root == tmp_path / "Modules"
    assert settings.powershell_executable == "pwsh"


def test_unset_cli_flags_keep_yaml_values(clean_env, tmp_path, mock_logger):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("progress_preference: inquire\nverbose: true\n", encoding="utf-8")

    settings = load_app_settings(_cli(), config_file, mock_logger)

    assert settings.progress_preference is ProgressPreference.INQUIRE
    assert settings.verbose is True


def test_invalid_yaml_is_ignored(clean_env, tmp_path, mock_logger):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("gallery: [unclosed\n", encoding="utf-8")

    settings = load_app_settings(None, config_file, mock_logger)

    assert settings.gallery.repository_name == "PSGallery"
    mock_logger.warning.assert_called_once()


def test_non_mapping_yaml_is_ignored(clean_env, tmp_path, mock_logger):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("- just\n- a list\n", encoding="utf-8")

    load_app_settings(None, config_file, mock_logger)

    mock_logger.warning.assert_called_once()


def test_invalid_values_exit(clean_env, tmp_path, mock_logger):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("gallery:\n  http_timeout: -1\n", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        load_app_settings(None, config_file, mock_logger)

    assert "Configuration error" in str(excinfo.value)
    mock_logger.error.assert_called_once()
