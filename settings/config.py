# settings/config.py
# -*- coding: utf-8 -*-
"""
Centralized static constants for the WinGet bootstrapper.

Mutable runtime configuration (module names, gallery URL, timeouts, policies)
is handled by 'settings/config_models.py' and 'settings/config_loader.py'.
"""

SCRIPT_VERSION: str = "1.0"

SYMBOLS: dict[str, str] = {
    "success": "✅",
    "error": "❌",
    "warning": "⚠️",
    "info": "ℹ️",
    "step": "➡️",
    "gear": "⚙️",
    "package": "📦",
    "rocket": "🚀",
    "sparkles": "✨",
    "critical": "🔥",
    "debug": "🐛",
}

# PowerShell $ProgressPreference values keyed by the CLI spelling.
PROGRESS_PREFERENCES: dict[str, str] = {
    "silent": "SilentlyContinue",
    "continue": "Continue",
    "inquire": "Inquire",
    "break": "Break",
    "stop": "Stop",
}

# Archive entries that belong to the nupkg container, not to the module.
PACKAGE_METADATA_EXTENSIONS: tuple[str, ...] = (".nuspec", ".psmdcp")
PACKAGE_METADATA_FILENAMES: tuple[str, ...] = ("[Content_Types].xml",)
PACKAGE_METADATA_SEGMENTS: tuple[str, ...] = ("_rels", "package")

FALLBACK_TEMP_PREFIX: str = "winget_bootstrap_"
FALLBACK_ARCHIVE_NAME: str = "module.zip"
FALLBACK_EXTRACT_DIRNAME: str = "extracted"
