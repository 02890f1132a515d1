# bootstrap_installer/bs_fallback.py
# -*- coding: utf-8 -*-
"""
Direct acquisition of a module from the gallery archive store.

Used when the PSGallery repository is unusable or Install-Module failed:
the newest .nupkg is downloaded into a private staging directory,
extracted, and its module content copied to
`<module root>/<module name>/<version>`. The staging directory is removed
whatever the outcome.
"""

import logging
import tempfile
import zipfile
from pathlib import Path
from typing import Optional

import requests

from common.command_utils import get_symbols, log_bootstrap
from common.file_utils import (
    copy_tree_filtered,
    remove_directory_quietly,
    replace_directory,
)
from settings.config import (
    FALLBACK_ARCHIVE_NAME,
    FALLBACK_EXTRACT_DIRNAME,
    FALLBACK_TEMP_PREFIX,
    PACKAGE_METADATA_EXTENSIONS,
    PACKAGE_METADATA_FILENAMES,
    PACKAGE_METADATA_SEGMENTS,
)
from settings.config_models import AppSettings

from .bs_errors import FallbackInstallError, FallbackTimeoutError
from .bs_gallery import GalleryClient, validate_package_version

module_logger = logging.getLogger(__name__)


def module_install_path(module_root: Path, module_name: str, version: str) -> Path:
    return Path(module_root) / module_name / version


def install_module_from_gallery(
    module_name: str,
    gallery: GalleryClient,
    app_settings: AppSettings,
    current_logger: Optional[logging.Logger] = None,
) -> str:
    """
    Installs the newest gallery version of `module_name` without going
    through the repository.

    Args:
        module_name: Exact gallery id of the module.
        gallery: Client for the metadata feed and the archive store.
        app_settings: Supplies the machine-wide module root.
        current_logger: Logger to use; defaults to the module logger.

    Returns:
        The installed version.

    Raises:
        FallbackTimeoutError: A gallery request timed out.
        FallbackInstallError: Any other failure while resolving, downloading,
            extracting or copying the module.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = get_symbols(app_settings)
    staging_dir: Optional[Path] = None

    log_bootstrap(
        f"{symbols.get('step', '➡️')} Installing {module_name} directly from the gallery archive...",
        "info",
        logger_to_use,
        app_settings,
    )
    try:
        version = validate_package_version(
            gallery.get_latest_version(module_name)
        )
        download_url = gallery.build_download_url(module_name, version)

        staging_dir = Path(tempfile.mkdtemp(prefix=FALLBACK_TEMP_PREFIX))
        archive_path = gallery.download_archive(
            download_url, staging_dir / FALLBACK_ARCHIVE_NAME
        )

        extract_dir = staging_dir / FALLBACK_EXTRACT_DIRNAME
        with zipfile.ZipFile(archive_path, "r") as zip_ref:
            zip_ref.extractall(extract_dir)

        install_path = module_install_path(
            app_settings.module_root, module_name, version
        )
        replace_directory(install_path, app_settings, logger_to_use)
        copied = copy_tree_filtered(
            extract_dir,
            install_path,
            excluded_extensions=PACKAGE_METADATA_EXTENSIONS,
            excluded_names=PACKAGE_METADATA_FILENAMES,
            excluded_segments=PACKAGE_METADATA_SEGMENTS,
            app_settings=app_settings,
            current_logger=logger_to_use,
        )
        log_bootstrap(
            f"{symbols.get('success', '✅')} {module_name} {version} installed to {install_path} ({len(copied)} files).",
            "success",
            logger_to_use,
            app_settings,
        )
        return version
    except requests.exceptions.Timeout as e:
        log_bootstrap(
            f"{symbols.get('error', '❌')} Gallery request timed out after {app_settings.gallery.http_timeout}s: {e}",
            "error",
            logger_to_use,
            app_settings,
        )
        raise FallbackTimeoutError(
            f"gallery request for {module_name} timed out", cause=e
        ) from e
    except Exception as e:
        log_bootstrap(
            f"{symbols.get('error', '❌')} Direct install of {module_name} failed: {e}",
            "error",
            logger_to_use,
            app_settings,
            exc_info=True,
        )
        raise FallbackInstallError(
            f"could not install {module_name} from the gallery archive",
            cause=e,
        ) from e
    finally:
        if staging_dir is not None:
            remove_directory_quietly(staging_dir, app_settings, logger_to_use)
