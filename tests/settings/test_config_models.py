# -*- coding: utf-8 -*-
from pathlib import Path

import pytest
from pydantic import ValidationError

from settings.config import PROGRESS_PREFERENCES
from settings.config_models import (
    AppSettings,
    ProgressPreference,
    default_module_root,
)


def test_default_module_root_windows(monkeypatch):
    monkeypatch.setenv("ProgramFiles", r"C:\Program Files")

    assert default_module_root() == Path(r"C:\Program Files") / "WindowsPowerShell" / "Modules"


def test_default_module_root_elsewhere(monkeypatch):
    monkeypatch.delenv("ProgramFiles", raising=False)

    assert default_module_root() == Path("/usr/local/share/powershell/Modules")


def test_every_progress_choice_maps_to_powershell_value():
    assert set(PROGRESS_PREFERENCES) == {p.value for p in ProgressPreference}
    assert PROGRESS_PREFERENCES["silent"] == "SilentlyContinue"


def test_env_prefix(monkeypatch):
    monkeypatch.setenv("WINGET_BOOTSTRAP_MODULE_NAME", "Contoso.Client")
    monkeypatch.setenv("WINGET_BOOTSTRAP_PROVIDER_MIN_VERSION", "3.0.0")

    settings = AppSettings()

    assert settings.module_name == "Contoso.Client"
    assert settings.provider.min_version == "3.0.0"


def test_rejects_unknown_policy():
    with pytest.raises(ValidationError):
        AppSettings(repair_failure_policy="ignore")


def test_rejects_non_positive_timeout():
    with pytest.raises(ValidationError):
        AppSettings(gallery={"http_timeout": 0})
