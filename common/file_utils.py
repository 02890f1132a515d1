# common/file_utils.py
# -*- coding: utf-8 -*-
"""
File system utility functions: quiet directory cleanup, idempotent
directory replacement and filtered tree copies.
"""

import logging
import shutil
from pathlib import Path, PurePath
from typing import Iterable, List, Optional

from settings.config_models import AppSettings

from .command_utils import get_symbols, log_bootstrap

module_logger = logging.getLogger(__name__)


def remove_directory_quietly(
    directory_path: Path,
    app_settings: Optional[AppSettings] = None,
    current_logger: Optional[logging.Logger] = None,
) -> None:
    """
    Removes a directory tree, logging and suppressing any failure.

    Parameters:
        directory_path (Path): The directory to remove. Missing paths are a no-op.
        app_settings (Optional[AppSettings]): Settings supplying log symbols.
        current_logger (Optional[logging.Logger]): Logger to use; defaults to
            the module logger.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = get_symbols(app_settings)

    try:
        if directory_path.exists():
            shutil.rmtree(directory_path)
            log_bootstrap(
                f"Removed temporary directory: {directory_path}",
                "debug",
                logger_to_use,
                app_settings,
            )
    except Exception as e:
        log_bootstrap(
            f"{symbols.get('warning', '!')} Could not remove directory {directory_path}: {e}",
            "warning",
            logger_to_use,
            app_settings,
        )


def replace_directory(
    directory_path: Path,
    app_settings: Optional[AppSettings] = None,
    current_logger: Optional[logging.Logger] = None,
) -> None:
    """
    Ensures `directory_path` exists and is empty.

    An existing tree is deleted recursively first, so nothing from a previous
    install survives. Errors propagate.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = get_symbols(app_settings)

    if directory_path.exists():
        log_bootstrap(
            f"{symbols.get('info', 'ℹ️')} Removing existing directory {directory_path}",
            "info",
            logger_to_use,
            app_settings,
        )
        shutil.rmtree(directory_path)
    directory_path.mkdir(parents=True, exist_ok=True)


def is_excluded(
    relative_path: PurePath,
    excluded_extensions: Iterable[str] = (),
    excluded_names: Iterable[str] = (),
    excluded_segments: Iterable[str] = (),
) -> bool:
    """
    True if `relative_path` matches an excluded extension, an excluded file
    name, or has an excluded directory anywhere in its parent chain.
    Comparisons are case-insensitive.
    """
    extensions = {e.lower() for e in excluded_extensions}
    names = {n.lower() for n in excluded_names}
    segments = {s.lower() for s in excluded_segments}

    if relative_path.suffix.lower() in extensions:
        return True
    if relative_path.name.lower() in names:
        return True
    return any(part.lower() in segments for part in relative_path.parts[:-1])


def copy_tree_filtered(
    source_dir: Path,
    destination_dir: Path,
    excluded_extensions: Iterable[str] = (),
    excluded_names: Iterable[str] = (),
    excluded_segments: Iterable[str] = (),
    app_settings: Optional[AppSettings] = None,
    current_logger: Optional[logging.Logger] = None,
) -> List[PurePath]:
    """
    Copies every file under `source_dir` into `destination_dir`, preserving
    relative directories and skipping excluded entries.

    Returns:
        The relative paths that were copied, in sorted order.
    """
    logger_to_use = current_logger if current_logger else module_logger
    excluded_extensions = tuple(excluded_extensions)
    excluded_names = tuple(excluded_names)
    excluded_segments = tuple(excluded_segments)

    copied: List[PurePath] = []
    for source_file in sorted(p for p in source_dir.rglob("*") if p.is_file()):
        relative = source_file.relative_to(source_dir)
        if is_excluded(
            relative, excluded_extensions, excluded_names, excluded_segments
        ):
            log_bootstrap(
                f"Skipping package artifact: {relative.as_posix()}",
                "debug",
                logger_to_use,
                app_settings,
            )
            continue
        target = destination_dir / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source_file, target)
        copied.append(relative)
    return copied
