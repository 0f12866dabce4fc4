"""OpenTofu release index backed by the GitHub releases API."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from constants import Constants
from common.checksum import parse_checksums
from common.http_client import get_json, get_text
from common.logging_utils import extra_context, is_debug_enabled
from versioning.errors import NetworkError
from versioning.semantic import is_exact, normalize

from .target import PlatformTarget, resolve_target

logger = logging.getLogger(__name__)

HEADERS_JSON = {"Accept": "application/vnd.github+json"}


def _tag_to_version(tag: Any) -> Optional[str]:
    """Return the normalized version of a release tag ("v1.6.0" -> "1.6.0")."""
    if not isinstance(tag, str) or not is_exact(tag):
        return None
    return normalize(tag)


def extract_releases(payload: Any) -> List[str]:
    """Extract version strings from one page of GitHub releases.

    Drafts and tags that are not versions are skipped.

    Raises:
        NetworkError: if ``payload`` is not a list of release objects.
    """
    if not isinstance(payload, list):
        raise NetworkError("Unexpected GitHub releases payload")
    versions: List[str] = []
    for release in payload:
        if not isinstance(release, dict) or release.get("draft"):
            continue
        version = _tag_to_version(release.get("tag_name"))
        if version:
            versions.append(version)
    return versions


class TofuRetriever:
    """Release source for OpenTofu.

    Conforms to ``versioning.models.ReleaseInfoRetriever``.
    """

    def __init__(
        self,
        api_base: Optional[str] = None,
        token: Optional[str] = None,
        target: Optional[PlatformTarget] = None,
        download_base: str = Constants.TOFU_DOWNLOAD_BASE,
    ):
        self.api_base = (api_base or Constants.GITHUB_API_BASE).rstrip("/")
        self.token = token
        self.target = target or resolve_target()
        self.download_base = download_base.rstrip("/")

    def _headers(self) -> Dict[str, str]:
        headers = dict(HEADERS_JSON)
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _releases_url(self) -> str:
        return f"{self.api_base}/repos/{Constants.TOFU_GITHUB_REPO}/releases"

    def list_releases(self) -> List[str]:
        """Walk every page of the releases listing."""
        versions: List[str] = []
        page = 1
        while True:
            url = f"{self._releases_url()}?per_page={Constants.REPO_API_PER_PAGE}&page={page}"
            payload = get_json(url, headers=self._headers())
            if not payload:
                break
            versions.extend(extract_releases(payload))
            if len(payload) < Constants.REPO_API_PER_PAGE:
                break
            page += 1
        if is_debug_enabled(logger):
            logger.debug(
                "Listed remote releases",
                extra=extra_context(
                    event="complete",
                    component="tofu_retriever",
                    action="list_releases",
                    count=len(versions),
                    pages=page,
                ),
            )
        return versions

    def latest_release(self) -> str:
        payload = get_json(f"{self._releases_url()}/latest", headers=self._headers())
        version = _tag_to_version(payload.get("tag_name") if isinstance(payload, dict) else None)
        if not version:
            raise NetworkError("GitHub latest release has no usable tag")
        return version

    def _asset_name(self, version: str) -> str:
        return f"tofu_{version}_{self.target.os_name}_{self.target.arch}.zip"

    def download_asset_url(self, version: str) -> str:
        return f"{self.download_base}/v{version}/{self._asset_name(version)}"

    def asset_checksum(self, version: str) -> Optional[str]:
        """SHA-256 of the platform archive listed in ``tofu_<version>_SHA256SUMS``."""
        sums_url = f"{self.download_base}/v{version}/tofu_{version}_SHA256SUMS"
        return parse_checksums(get_text(sums_url)).get(self._asset_name(version))
