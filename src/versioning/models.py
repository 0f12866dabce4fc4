"""Data models for version resolution and the release source capability."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Protocol, runtime_checkable


class ResolutionMode(Enum):
    """Resolution strategy derived from the requested string."""
    EXACT = "exact"
    LATEST = "latest"
    CONSTRAINT = "constraint"


@dataclass(frozen=True)
class ResolutionRequest:
    """Per-call resolution input; never persisted."""
    requested: str
    local_check: bool
    no_install: bool


@runtime_checkable
class ReleaseInfoRetriever(Protocol):
    """Remote release index of one tool.

    Implementations raise ``NetworkError`` when the index cannot be read.
    """

    def list_releases(self) -> List[str]:
        """Return every released version string, in any order."""
        ...

    def latest_release(self) -> str:
        """Return the version the index reports as latest."""
        ...

    def download_asset_url(self, version: str) -> str:
        """Return the URL of the zip archive for ``version`` on this platform."""
        ...

    def asset_checksum(self, version: str) -> Optional[str]:
        """Return the published SHA-256 of that archive, or None when not listed."""
        ...
