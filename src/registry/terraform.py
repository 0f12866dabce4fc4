"""Terraform release index backed by releases.hashicorp.com."""
from __future__ import annotations

import logging
from typing import Any, List, Optional, Tuple

from constants import Constants
from common.checksum import parse_checksums
from common.http_client import get_json, get_text
from versioning.errors import NetworkError
from versioning.semantic import is_stable, sort_versions

from .target import PlatformTarget, resolve_target

logger = logging.getLogger(__name__)


def extract_releases(payload: Any) -> List[str]:
    """Return the version keys of the product ``index.json``.

    Raises:
        NetworkError: if the document has no ``versions`` mapping.
    """
    versions = payload.get("versions") if isinstance(payload, dict) else None
    if not isinstance(versions, dict):
        raise NetworkError("Unexpected Terraform release index payload")
    return list(versions.keys())


def extract_asset_urls(
    base_url: str, os_name: str, arch: str, release: Any
) -> Tuple[str, str, str, str]:
    """Locate the archive of one release for a platform.

    Args:
        base_url: URL of the release directory, used for checksum files.
        os_name: Target OS ("linux", "darwin", ...).
        arch: Target architecture ("amd64", "386", ...).
        release: Parsed ``<version>/index.json`` document.

    Returns:
        Tuple of (file_name, download_url, sha256sums_url, sha256sums_sig_url)

    Raises:
        NetworkError: if the document is malformed or has no matching build.
    """
    if not isinstance(release, dict):
        raise NetworkError("Unexpected Terraform release payload")
    builds = release.get("builds")
    if not isinstance(builds, list):
        raise NetworkError("Terraform release has no builds")

    base_url = base_url.rstrip("/")
    sums_url = f"{base_url}/{release.get('shasums', '')}"
    sums_sig_url = f"{base_url}/{release.get('shasums_signature', '')}"
    for build in builds:
        if not isinstance(build, dict):
            continue
        if build.get("os") == os_name and build.get("arch") == arch:
            file_name = build.get("filename", "")
            download_url = build.get("url") or f"{base_url}/{file_name}"
            return file_name, download_url, sums_url, sums_sig_url
    raise NetworkError(f"No Terraform build for {os_name}/{arch}")


class TerraformRetriever:
    """Release source for Terraform.

    Conforms to ``versioning.models.ReleaseInfoRetriever``.
    """

    def __init__(self, remote_url: Optional[str] = None, target: Optional[PlatformTarget] = None):
        self.base_url = f"{(remote_url or Constants.TERRAFORM_REMOTE).rstrip('/')}/terraform"
        self.target = target or resolve_target()

    def list_releases(self) -> List[str]:
        return extract_releases(get_json(f"{self.base_url}/index.json"))

    def latest_release(self) -> str:
        """Highest stable version of the index."""
        stable = [v for v in self.list_releases() if is_stable(v)]
        if not stable:
            raise NetworkError("Terraform release index lists no stable version")
        return sort_versions(stable)[-1]

    def _asset_urls(self, version: str) -> Tuple[str, str, str, str]:
        version_url = f"{self.base_url}/{version}"
        release = get_json(f"{version_url}/index.json")
        return extract_asset_urls(version_url, self.target.os_name, self.target.arch, release)

    def download_asset_url(self, version: str) -> str:
        _, download_url, _, _ = self._asset_urls(version)
        return download_url

    def asset_checksum(self, version: str) -> Optional[str]:
        """SHA-256 of the platform archive listed in the release SHA256SUMS."""
        file_name, _, sums_url, _ = self._asset_urls(version)
        return parse_checksums(get_text(sums_url)).get(file_name)
