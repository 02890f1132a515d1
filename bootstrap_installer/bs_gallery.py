# bootstrap_installer/bs_gallery.py
# -*- coding: utf-8 -*-
"""
Client for the PowerShell Gallery OData v2 feed.

Used by the fallback installer to look up the newest published version of
a module and to download its .nupkg archive (a zip container).
"""

import logging
import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Dict, List, Optional
from urllib.parse import quote as url_quote

import requests
from urllib3.exceptions import ReadTimeoutError

from common.network_utils import create_http_session
from settings.config_models import AppSettings

module_logger = logging.getLogger(__name__)

ATOM_NS = "http://www.w3.org/2005/Atom"
ODATA_METADATA_NS = (
    "http://schemas.microsoft.com/ado/2007/08/dataservices/metadata"
)
ODATA_DATA_NS = "http://schemas.microsoft.com/ado/2007/08/dataservices"

DOWNLOAD_CHUNK_SIZE = 8192

# NuGet version: 2 to 4 numeric parts, optional prerelease label.
PACKAGE_VERSION_PATTERN = re.compile(r"^\d+(\.\d+){1,3}(-[0-9A-Za-z.-]+)?$")


class GalleryError(RuntimeError):
    """The feed answered, but not with a usable package descriptor."""


def validate_package_version(version: str) -> str:
    """
    Returns `version` if it is a plain NuGet version string.

    The version becomes a directory name under the module root, so anything
    with a path separator or a dot-only segment is refused.

    Raises:
        GalleryError: The version is not a NuGet version.
    """
    if (
        "/" in version
        or "\\" in version
        or version in (".", "..")
        or not PACKAGE_VERSION_PATTERN.match(version)
    ):
        raise GalleryError(f"Gallery returned an invalid version: {version!r}")
    return version


def odata_string_literal(value: str) -> str:
    """Quotes `value` as an OData string literal."""
    return "'" + value.replace("'", "''") + "'"


def parse_package_feed(xml_text: str) -> List[Dict[str, str]]:
    """
    Extracts `{"id", "version"}` descriptors from an OData Atom feed.

    The id comes from `d:Id`, falling back to the entry title.
    """
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as e:
        raise GalleryError(f"Gallery feed is not valid XML: {e}") from e

    if root.tag == f"{{{ATOM_NS}}}entry":
        entries = [root]
    else:
        entries = root.findall(f"{{{ATOM_NS}}}entry")

    descriptors = []
    for entry in entries:
        properties = entry.find(f"{{{ODATA_METADATA_NS}}}properties")
        if properties is None:
            continue
        package_id = properties.findtext(f"{{{ODATA_DATA_NS}}}Id")
        if not package_id:
            package_id = entry.findtext(f"{{{ATOM_NS}}}title")
        version = properties.findtext(f"{{{ODATA_DATA_NS}}}Version")
        if package_id and version:
            descriptors.append(
                {"id": package_id.strip(), "version": version.strip()}
            )
    return descriptors


class GalleryClient:
    """Metadata queries and archive downloads against the gallery feed."""

    def __init__(
        self,
        app_settings: AppSettings,
        session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.app_settings = app_settings
        self.session = session or create_http_session()
        self.logger = logger or module_logger
        self.base_url = str(app_settings.gallery.api_url).rstrip("/")
        self.timeout = app_settings.gallery.http_timeout

    def get_latest_version(self, module_name: str) -> str:
        """
        Newest version of `module_name`: the feed is filtered by exact id,
        ordered by version descending and limited to one entry.

        Raises:
            requests.exceptions.RequestException: Transport or HTTP errors.
            GalleryError: No matching package in the response, or its
                version is not a valid NuGet version.
        """
        params = {
            "$filter": f"Id eq {odata_string_literal(module_name)}",
            "$orderby": "Version desc",
            "$top": "1",
        }
        url = f"{self.base_url}/Packages()"
        self.logger.info(f"Querying gallery metadata for '{module_name}'")
        response = self.session.get(
            url,
            params=params,
            headers={"Accept": "application/atom+xml"},
            timeout=self.timeout,
        )
        response.raise_for_status()

        descriptors = [
            d
            for d in parse_package_feed(response.text)
            if d["id"].lower() == module_name.lower()
        ]
        if not descriptors:
            raise GalleryError(
                f"Gallery returned no package named '{module_name}'"
            )
        version = validate_package_version(descriptors[0]["version"])
        self.logger.info(f"Latest gallery version of {module_name}: {version}")
        return version

    def build_download_url(self, module_name: str, version: str) -> str:
        return (
            f"{self.base_url}/package/"
            f"{url_quote(module_name)}/{url_quote(version)}"
        )

    def download_archive(self, url: str, destination: Path) -> Path:
        """
        Streams the archive at `url` to `destination`.

        Raises:
            requests.exceptions.ReadTimeout: The body stopped arriving for
                longer than the timeout.
            requests.exceptions.RequestException: Other transport or HTTP
                errors.
            IOError: The file could not be written.
        """
        self.logger.info(f"Downloading {url}")
        response = self.session.get(url, stream=True, timeout=self.timeout)
        try:
            response.raise_for_status()
            destination.parent.mkdir(parents=True, exist_ok=True)
            with open(destination, "wb") as f:
                for chunk in response.iter_content(
                    chunk_size=DOWNLOAD_CHUNK_SIZE
                ):
                    if chunk:
                        f.write(chunk)
        except requests.exceptions.ConnectionError as e:
            # requests reports a stalled body as ConnectionError(ReadTimeoutError).
            if e.args and isinstance(e.args[0], ReadTimeoutError):
                raise requests.exceptions.ReadTimeout(
                    e.args[0], request=e.request, response=response
                ) from e
            raise
        finally:
            response.close()
        self.logger.debug(f"Archive saved to {destination}")
        return destination
