# tests/bootstrap_installer/test_bs_gallery.py
# -*- coding: utf-8 -*-
import socket
import threading
from unittest.mock import MagicMock

import pytest
import requests

from bootstrap_installer.bs_gallery import (
    GalleryClient,
    GalleryError,
    odata_string_literal,
    parse_package_feed,
    validate_package_version,
)

FEED_TEMPLATE = """<?xml version="1.0" encoding="utf-8"?>
<feed xml:base="https://www.powershellgallery.com/api/v2"
      xmlns="http://www.w3.org/2005/Atom"
      xmlns:d="http://schemas.microsoft.com/ado/2007/08/dataservices"
      xmlns:m="http://schemas.microsoft.com/ado/2007/08/dataservices/metadata">
  <title type="text">Packages</title>
  {entries}
</feed>
"""

ENTRY_TEMPLATE = """<entry>
    <title type="text">{title}</title>
    <m:properties>
      {id_element}
      <d:Version>{version}</d:Version>
    </m:properties>
  </entry>"""


def _entry(package_id, version, title=None, with_id=True):
    return ENTRY_TEMPLATE.format(
        title=title or package_id,
        id_element=f"<d:Id>{package_id}</d:Id>" if with_id else "",
        version=version,
    )


def _feed(*entries):
    return FEED_TEMPLATE.format(entries="\n".join(entries))


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def client(app_settings, session, mock_logger):
    return GalleryClient(app_settings, session=session, logger=mock_logger)


class TestParsePackageFeed:
    def test_entries(self):
        xml_text = _feed(
            _entry("Microsoft.WinGet.Client", "1.5.2"),
            _entry("Microsoft.WinGet.Configuration", "0.3.1"),
        )

        assert parse_package_feed(xml_text) == [
            {"id": "Microsoft.WinGet.Client", "version": "1.5.2"},
            {"id": "Microsoft.WinGet.Configuration", "version": "0.3.1"},
        ]

    def test_title_used_when_id_missing(self):
        xml_text = _feed(_entry("ignored", "2.0.0", title="Some.Module", with_id=False))

        assert parse_package_feed(xml_text) == [
            {"id": "Some.Module", "version": "2.0.0"}
        ]

    def test_empty_feed(self):
        assert parse_package_feed(_feed()) == []

    def test_invalid_xml(self):
        with pytest.raises(GalleryError):
            parse_package_feed("<feed><entry>")


class TestGalleryClient:
    def test_base_url_strips_trailing_slash(self, tmp_path, session):
        from settings.config_models import AppSettings

        settings = AppSettings(
            module_root=tmp_path, gallery={"api_url": "https://g.test/api/v2/"}
        )

        assert GalleryClient(settings, session=session).base_url == "https://g.test/api/v2"

    def test_get_latest_version_query(self, client, session):
        session.get.return_value.text = _feed(_entry("Microsoft.WinGet.Client", "1.5.2"))

        assert client.get_latest_version("Microsoft.WinGet.Client") == "1.5.2"

        session.get.assert_called_once_with(
            "https://gallery.example.test/api/v2/Packages()",
            params={
                "$filter": "Id eq 'Microsoft.WinGet.Client'",
                "$orderby": "Version desc",
                "$top": "1",
            },
            headers={"Accept": "application/atom+xml"},
            timeout=5,
        )
        session.get.return_value.raise_for_status.assert_called_once_with()

    def test_get_latest_version_ignores_other_ids(self, client, session):
        session.get.return_value.text = _feed(_entry("Other.Module", "9.9.9"))

        with pytest.raises(GalleryError):
            client.get_latest_version("Microsoft.WinGet.Client")

    def test_get_latest_version_id_match_is_case_insensitive(self, client, session):
        session.get.return_value.text = _feed(_entry("microsoft.winget.client", "1.5.2"))

        assert client.get_latest_version("Microsoft.WinGet.Client") == "1.5.2"

    def test_get_latest_version_http_error(self, client, session):
        session.get.return_value.raise_for_status.side_effect = requests.exceptions.HTTPError(
            "503 Server Error"
        )

        with pytest.raises(requests.exceptions.HTTPError):
            client.get_latest_version("Microsoft.WinGet.Client")

    def test_build_download_url(self, client):
        assert (
            client.build_download_url("Microsoft.WinGet.Client", "1.5.2")
            == "https://gallery.example.test/api/v2/package/Microsoft.WinGet.Client/1.5.2"
        )

    def test_download_archive(self, client, session, tmp_path):
        response = session.get.return_value
        response.iter_content.return_value = [b"PK\x03\x04", b"", b"rest"]
        destination = tmp_path / "nested" / "module.zip"

        result = client.download_archive("https://g.test/package/m/1.0.0", destination)

        assert result == destination
        assert destination.read_bytes() == b"PK\x03\x04rest"
        session.get.assert_called_once_with(
            "https://g.test/package/m/1.0.0", stream=True, timeout=5
        )
        response.close.assert_called_once_with()

    def test_download_archive_closes_response_on_error(self, client, session, tmp_path):
        response = session.get.return_value
        response.raise_for_status.side_effect = requests.exceptions.HTTPError("404")

        with pytest.raises(requests.exceptions.HTTPError):
            client.download_archive("https://g.test/package/m/1.0.0", tmp_path / "m.zip")

        response.close.assert_called_once_with()
        assert not (tmp_path / "m.zip").exists()


class TestPackageVersion:
    @pytest.mark.parametrize("version", ["1.5", "1.5.2", "2.8.5.208", "1.6.0-preview.2"])
    def test_valid(self, version):
        assert validate_package_version(version) == version

    @pytest.mark.parametrize(
        "version", ["..", ".", "", "../../x", "1.5/..", "1.5\\x", "1", "v1.5.2", "1.2.3.4.5"]
    )
    def test_invalid(self, version):
        with pytest.raises(GalleryError):
            validate_package_version(version)

    def test_feed_with_traversal_version_is_refused(self, client, session):
        session.get.return_value.text = _feed(_entry("Microsoft.WinGet.Client", ".."))

        with pytest.raises(GalleryError, match="invalid version"):
            client.get_latest_version("Microsoft.WinGet.Client")


def test_odata_string_literal_doubles_quotes():
    assert odata_string_literal("Microsoft.WinGet.Client") == "'Microsoft.WinGet.Client'"
    assert odata_string_literal("O'Brien.Tools") == "'O''Brien.Tools'"


def test_module_name_is_escaped_in_filter(client, session):
    session.get.return_value.text = _feed(_entry("O'Brien.Tools", "1.0.0"))

    assert client.get_latest_version("O'Brien.Tools") == "1.0.0"

    params = session.get.call_args.kwargs["params"]
    assert params["$filter"] == "Id eq 'O''Brien.Tools'"


@pytest.fixture
def stalling_server():
    """
    Serves one request: headers promising a large body, two bytes of it,
    then nothing until the test finishes.
    """
    listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    listener.bind(("127.0.0.1", 0))
    listener.listen(1)
    done = threading.Event()

    def _serve():
        conn, _ = listener.accept()
        with conn:
            conn.recv(65536)
            conn.sendall(
                b"HTTP/1.1 200 OK\r\n"
                b"Content-Type: application/octet-stream\r\n"
                b"Content-Length: 100000\r\n"
                b"\r\n"
                b"PK"
            )
            done.wait(10)

    thread = threading.Thread(target=_serve, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{listener.getsockname()[1]}/package/m/1.0.0"
    done.set()
    thread.join(5)
    listener.close()


def test_stalled_download_raises_read_timeout(stalling_server, tmp_path, mock_logger):
    from settings.config_models import AppSettings

    settings = AppSettings(module_root=tmp_path, gallery={"http_timeout": 0.5})
    with requests.Session() as session:
        session.trust_env = False
        client = GalleryClient(settings, session=session, logger=mock_logger)

        with pytest.raises(requests.exceptions.ReadTimeout):
            client.download_archive(stalling_server, tmp_path / "m.zip")


def test_other_connection_errors_pass_through(client, session, tmp_path):
    error = requests.exceptions.ConnectionError("connection reset")
    session.get.return_value.iter_content.side_effect = error

    with pytest.raises(requests.exceptions.ConnectionError) as excinfo:
        client.download_archive("https://g.test/package/m/1.0.0", tmp_path / "m.zip")

    assert excinfo.value is error
    session.get.return_value.close.assert_called_once_with()
