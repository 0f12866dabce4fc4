"""Constraint parsing: turn a requested version expression into a predicate."""

from __future__ import annotations

import logging
import re
from typing import Callable, List, Optional, Tuple

import semantic_version

from constants import Constants
from .errors import ParseError
from .semantic import is_stable, try_parse
from .tfparser import gather_required_versions

logger = logging.getLogger(__name__)

Predicate = Callable[[str], bool]

# A pre-release identifier inside a clause, e.g. ">=1.7.0-rc1"
_PRERELEASE_RE = re.compile(r"\d-[0-9A-Za-z]")
# Operand of a configuration file "~>" clause
_PESSIMISTIC_RE = re.compile(r"^v?(\d+)(?:\.(\d+))?(?:\.(\d+))?(-[0-9A-Za-z.-]+)?$")


def tokenize_direction(s: str) -> Tuple[Optional[bool], str]:
    """Split an explicit direction marker off ``s``.

    Returns:
        (reverse_order or None when no marker is present, remaining expression)
    """
    s = s.strip()
    if s.startswith(Constants.LATEST_PREFIX):
        return True, s[len(Constants.LATEST_PREFIX):].strip()
    if s.startswith(Constants.MIN_PREFIX):
        return False, s[len(Constants.MIN_PREFIX):].strip()
    return None, s


def _pessimistic_range(operand: str) -> str:
    """Expand the operand of a configuration file ``~>`` clause.

    Only the right-most component given may grow: ``~> 1.6`` allows every
    1.x from 1.6.0, ``~> 1.6.2`` every 1.6.x from 1.6.2.
    """
    m = _PESSIMISTIC_RE.match(operand)
    if not m:
        raise ParseError(f"Invalid pessimistic constraint operand {operand!r}")
    major = int(m.group(1))
    pre = m.group(4) or ""
    if m.group(2) is None:
        return f">={major}.0.0{pre},<{major + 1}.0.0"
    minor = int(m.group(2))
    if m.group(3) is None:
        return f">={major}.{minor}.0{pre},<{major + 1}.0.0"
    return f">={major}.{minor}.{int(m.group(3))}{pre},<{major}.{minor + 1}.0"


def _normalize_clause(clause: str, config_syntax: bool = False) -> str:
    """Rewrite one clause into ``semantic_version.SimpleSpec`` syntax.

    ``~>`` becomes the tilde operator, or the configuration file pessimistic
    range when ``config_syntax`` is set. x-ranges become comparator pairs.
    """
    clause = "".join(clause.split())
    if clause.startswith("~>") and config_syntax:
        return _pessimistic_range(clause[2:])
    if clause.startswith("~>"):
        clause = "~" + clause[2:]
    if clause.startswith("v"):
        clause = clause[1:]

    wildcard = clause.lstrip("=").lower().replace("*", "x")
    m = re.match(r"^(\d+)\.(\d+)\.x$", wildcard)
    if m:
        major, minor = int(m.group(1)), int(m.group(2))
        return f">={major}.{minor}.0,<{major}.{minor + 1}.0"
    m = re.match(r"^(\d+)\.x(?:\.x)?$", wildcard)
    if m:
        major = int(m.group(1))
        return f">={major}.0.0,<{major + 1}.0.0"
    if wildcard == "x":
        return ">=0.0.0"
    return clause


def _compile_spec(expression: str, config_syntax: bool = False) -> semantic_version.base.BaseSpec:
    """Compile ``expression`` with SimpleSpec, falling back to NpmSpec.

    Hyphen ranges and ``||`` alternatives only exist in the npm grammar.
    """
    if " - " not in expression and "||" not in expression:
        simple = ",".join(_normalize_clause(c, config_syntax) for c in expression.split(","))
        try:
            return semantic_version.SimpleSpec(simple)
        except ValueError:
            pass
    try:
        return semantic_version.NpmSpec(expression)
    except ValueError as exc:
        raise ParseError(f"Invalid version constraint {expression!r}: {exc}") from exc


def constraint_predicate(expression: str, config_syntax: bool = False) -> Predicate:
    """Build a predicate from a constraint expression.

    Pre-release candidates only match when the expression itself names a
    pre-release. Candidates that are not valid versions never match.

    Args:
        expression: Comma-separated clauses.
        config_syntax: Read ``~>`` the way ``required_version`` does.

    Raises:
        ParseError: if ``expression`` is empty or not a recognizable constraint.
    """
    if not expression or not expression.strip():
        raise ParseError("Empty version constraint")
    spec = _compile_spec(expression.strip(), config_syntax)
    allow_prerelease = bool(_PRERELEASE_RE.search(expression))

    def predicate(candidate: str) -> bool:
        parsed = try_parse(candidate)
        if parsed is None:
            return False
        if parsed.prerelease and not allow_prerelease:
            return False
        return spec.match(parsed)

    return predicate


def _all_of(predicates: List[Predicate]) -> Predicate:
    def predicate(candidate: str) -> bool:
        return all(p(candidate) for p in predicates)

    return predicate


def _always_true(candidate: str) -> bool:
    return try_parse(candidate) is not None


def _required_predicate(verbose: bool) -> Predicate:
    """Predicate honoring every ``required_version`` of the working directory."""
    requireds = gather_required_versions(".")
    if not requireds:
        if verbose:
            logger.info("No required_version found, fallback to any stable version")
        return is_stable
    if verbose:
        logger.info("Found required_version constraints: %s", ", ".join(requireds))
    return _all_of([constraint_predicate(r, config_syntax=True) for r in requireds])


def parse_predicate(requested: str, verbose: bool = False) -> Tuple[Predicate, bool]:
    """Parse a requested version expression.

    Args:
        requested: Keyword ("latest", "latest-pre", "min-required", ...),
            a constraint such as "~>1.6" or ">=1.0,<2.0", optionally prefixed
            by "latest:" or "min:".
        verbose: Log the constraints gathered from configuration files.

    Returns:
        Tuple of (predicate, reverse_order). reverse_order means the search
        walks from the newest version down.

    Raises:
        ParseError: when ``requested`` cannot be interpreted.
    """
    requested = (requested or "").strip()
    if requested in (Constants.LATEST_KEY, Constants.LATEST_STABLE_KEY):
        return is_stable, True
    if requested == Constants.LATEST_PRE_KEY:
        return _always_true, True
    if requested == Constants.MIN_REQUIRED_KEY:
        return _required_predicate(verbose), False
    if requested == Constants.LATEST_ALLOWED_KEY:
        return _required_predicate(verbose), True

    reverse_order, expression = tokenize_direction(requested)
    if reverse_order is None:
        reverse_order = True
    return constraint_predicate(expression), reverse_order
