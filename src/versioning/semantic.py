"""Semantic version parsing, normalization and ordering."""

from __future__ import annotations

import functools
import re
from typing import Iterable, List, Optional

import semantic_version

from .errors import ParseError

# Accepts "v" prefix and missing minor/patch parts ("v1.7" -> 1.7.0)
_EXACT_RE = re.compile(
    r"^v?(?P<major>\d+)(?:\.(?P<minor>\d+))?(?:\.(?P<patch>\d+))?"
    r"(?:-(?P<prerelease>[0-9A-Za-z.-]+))?"
    r"(?:\+(?P<build>[0-9A-Za-z.-]+))?$"
)


def parse_version(raw: str) -> semantic_version.Version:
    """Parse an exact version string.

    Args:
        raw: Version text, e.g. "1.7.0", "v1.7.0-rc1" or "1.7".

    Returns:
        semantic_version.Version

    Raises:
        ParseError: if ``raw`` is not an exact version.
    """
    m = _EXACT_RE.match(raw.strip()) if raw else None
    if not m:
        raise ParseError(f"Malformed version: {raw!r}")
    prerelease = tuple(m.group("prerelease").split(".")) if m.group("prerelease") else ()
    build = tuple(m.group("build").split(".")) if m.group("build") else ()
    try:
        return semantic_version.Version(
            major=int(m.group("major")),
            minor=int(m.group("minor") or 0),
            patch=int(m.group("patch") or 0),
            prerelease=prerelease,
            build=build,
        )
    except ValueError as exc:  # empty identifiers such as "1.0.0-rc..1"
        raise ParseError(f"Malformed version: {raw!r}") from exc


def try_parse(raw: str) -> Optional[semantic_version.Version]:
    """Return the parsed version or None."""
    try:
        return parse_version(raw)
    except ParseError:
        return None


def is_exact(raw: str) -> bool:
    return try_parse(raw) is not None


def normalize(raw: str) -> str:
    """Parse and re-stringify ``raw``; idempotent."""
    return str(parse_version(raw))


def _sort_key(raw: str):
    parsed = try_parse(raw)
    if parsed is None:
        # unparseable names sort first, lexically among themselves
        return (0, (), (), raw)
    return (1, parsed.precedence_key, parsed.build, raw)


def cmp_version(a: str, b: str) -> int:
    """Three-way comparison following semver precedence.

    Build metadata and then the raw text break ties so that the order is
    total over any list of strings.
    """
    key_a, key_b = _sort_key(a), _sort_key(b)
    if key_a < key_b:
        return -1
    if key_a > key_b:
        return 1
    return 0


def sort_versions(versions: Iterable[str], reverse: bool = False) -> List[str]:
    """Return ``versions`` sorted ascending (or descending)."""
    return sorted(versions, key=functools.cmp_to_key(cmp_version), reverse=reverse)


def is_stable(raw: str) -> bool:
    """True for a valid version without pre-release identifiers."""
    parsed = try_parse(raw)
    return parsed is not None and not parsed.prerelease
