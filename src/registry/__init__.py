"""Release index clients, one per managed tool."""

from __future__ import annotations

from constants import Tools

from .target import PlatformTarget, resolve_target
from .terraform import TerraformRetriever
from .tofu import TofuRetriever


def get_retriever(tool: str, conf):
    """Build the release source for ``tool`` from a ``config.Config``."""
    if tool == Tools.TOFU.value:
        return TofuRetriever(api_base=conf.remote_url, token=conf.github_token)
    if tool == Tools.TERRAFORM.value:
        return TerraformRetriever(remote_url=conf.remote_url)
    raise ValueError(f"Unsupported tool: {tool}")


__all__ = [
    "PlatformTarget",
    "TerraformRetriever",
    "TofuRetriever",
    "get_retriever",
    "resolve_target",
]
