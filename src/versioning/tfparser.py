"""Scan Terraform/OpenTofu configuration files for version requirements."""

from __future__ import annotations

import logging
import os
import re
from typing import List

from common.logging_utils import extra_context, is_debug_enabled

logger = logging.getLogger(__name__)

TF_FILE_SUFFIXES = (".tf", ".tofu")

# Matches `required_version = ">= 1.2, < 2.0"` inside a terraform block
_REQUIRED_VERSION_RE = re.compile(r'^\s*required_version\s*=\s*"([^"]*)"', re.MULTILINE)
_LINE_COMMENT_RE = re.compile(r"(?m)^\s*(#|//).*$")
_BLOCK_COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)


def extract_required_versions(content: str) -> List[str]:
    """Return the ``required_version`` constraints declared in ``content``."""
    stripped = _BLOCK_COMMENT_RE.sub("", content)
    stripped = _LINE_COMMENT_RE.sub("", stripped)
    return [m.strip() for m in _REQUIRED_VERSION_RE.findall(stripped) if m.strip()]


def gather_required_versions(dir_name: str = ".") -> List[str]:
    """Collect ``required_version`` constraints from configuration files.

    Args:
        dir_name: Directory scanned (not recursively).

    Returns:
        Constraint strings in file-name order; empty when none are declared.

    Raises:
        OSError: if the directory or a configuration file cannot be read.
    """
    constraints: List[str] = []
    for entry in sorted(os.listdir(dir_name)):
        if not entry.endswith(TF_FILE_SUFFIXES):
            continue
        path = os.path.join(dir_name, entry)
        if not os.path.isfile(path):
            continue
        with open(path, encoding="utf-8") as fh:
            found = extract_required_versions(fh.read())
        if found and is_debug_enabled(logger):
            logger.debug(
                "Found required_version",
                extra=extra_context(
                    event="parse",
                    component="tfparser",
                    action="gather_required_versions",
                    target=path,
                    count=len(found),
                ),
            )
        constraints.extend(found)
    return constraints
