# tests/conftest.py
import io
import logging
import zipfile
from pathlib import Path
from typing import Dict
from unittest.mock import MagicMock, create_autospec

import pytest

from bootstrap_installer.bootstrap_process import BootstrapServices
from bootstrap_installer.bs_gallery import GalleryClient
from bootstrap_installer.bs_registries import (
    ChannelRegistry,
    ModuleRegistry,
    ProviderRegistry,
    RepairEngine,
    TlsPolicy,
)
from bootstrap_installer.bs_states import ChannelState, QueryResult
from settings.config_models import AppSettings

GALLERY_BASE = "https://gallery.example.test/api/v2"


def build_nupkg(entries: Dict[str, str]) -> bytes:
    """Zip bytes holding `entries` (archive name -> text content)."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for name, content in entries.items():
            zf.writestr(name, content)
    return buffer.getvalue()


@pytest.fixture
def mock_logger():
    return MagicMock(spec=logging.Logger)


@pytest.fixture
def app_settings(tmp_path):
    """Settings whose module root lives under the test's tmp_path."""
    return AppSettings(
        module_root=tmp_path / "Modules",
        gallery={"api_url": GALLERY_BASE, "http_timeout": 5},
    )


@pytest.fixture
def services():
    """
    Autospecced collaborators in the "everything already in place" state:
    provider and module present, repository trusted.
    """
    svc = BootstrapServices(
        providers=create_autospec(ProviderRegistry, instance=True),
        modules=create_autospec(ModuleRegistry, instance=True),
        channels=create_autospec(ChannelRegistry, instance=True),
        repair=create_autospec(RepairEngine, instance=True),
        gallery=create_autospec(GalleryClient, instance=True),
        tls=create_autospec(TlsPolicy, instance=True),
    )
    svc.providers.list_installed.return_value = QueryResult.present("2.8.5.208")
    svc.providers.install.return_value = "2.8.5.208"
    svc.modules.list_installed.return_value = QueryResult.present("1.9.2")
    svc.modules.install.return_value = "1.9.2"
    svc.channels.get.return_value = ChannelState.TRUSTED
    return svc


@pytest.fixture
def context(services, mock_logger):
    return {"services": services, "logger": mock_logger}


@pytest.fixture
def make_nupkg():
    return build_nupkg


@pytest.fixture
def archive_gallery(services):
    """
    Returns a function that makes the gallery double publish the given
    archive entries, as version 1.5.2 unless told otherwise.
    """

    def _configure(entries: Dict[str, str], version: str = "1.5.2"):
        payload = build_nupkg(entries)

        def _download(url: str, destination: Path) -> Path:
            destination.parent.mkdir(parents=True, exist_ok=True)
            destination.write_bytes(payload)
            return destination

        services.gallery.get_latest_version.return_value = version
        services.gallery.build_download_url.side_effect = (
            lambda name, ver: f"{GALLERY_BASE}/package/{name}/{ver}"
        )
        services.gallery.download_archive.side_effect = _download
        return services.gallery

    return _configure
