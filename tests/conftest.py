"""Shared fixtures: fake release source, zip payloads, configuration."""

import io
import zipfile

import pytest
import requests
from urllib3.exceptions import ProtocolError

from config import Config


class FakeReleaseSource:
    """In-memory release source recording every call."""

    def __init__(self, releases=None, latest=None, checksums=None):
        self.releases = list(releases or [])
        self.latest = latest
        self.checksums = dict(checksums or {})
        self.calls = []

    def list_releases(self):
        self.calls.append(("list_releases",))
        return list(self.releases)

    def latest_release(self):
        self.calls.append(("latest_release",))
        return self.latest

    def download_asset_url(self, version):
        self.calls.append(("download_asset_url", version))
        return f"https://example.invalid/tool_{version}.zip"

    def asset_checksum(self, version):
        self.calls.append(("asset_checksum", version))
        return self.checksums.get(version)


def fake_download(payload):
    """Side effect for a patched ``download_to`` writing ``payload``."""

    def _download(url, fileobj, **kwargs):
        fileobj.write(payload)
        return len(payload)

    return _download


class BrokenRaw:
    """Response body whose connection drops after the first chunk."""

    def stream(self, chunk_size, decode_content=True):
        yield b"PK\x03\x04"
        raise ProtocolError("Connection broken: reset by peer")

    def close(self):
        pass


def broken_response():
    """Streamed 200 response failing mid-body."""
    response = requests.Response()
    response.status_code = 200
    response.raw = BrokenRaw()
    return response


def make_zip(files=None):
    """Build zip bytes holding ``files`` (name -> text)."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        for name, text in (files or {"tofu": "#!/bin/sh\necho tofu\n"}).items():
            info = zipfile.ZipInfo(name)
            info.external_attr = 0o755 << 16
            zf.writestr(info, text)
    return buf.getvalue()


@pytest.fixture
def conf(tmp_path):
    """Configuration rooted in a temporary directory."""
    return Config(root_path=str(tmp_path / "root"), user_path=str(tmp_path / "home"))
