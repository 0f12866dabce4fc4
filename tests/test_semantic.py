"""Tests for version parsing, normalization and ordering."""

import random

import pytest

from versioning.errors import ParseError
from versioning.semantic import cmp_version, is_exact, is_stable, normalize, sort_versions


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("1.7.0", "1.7.0"),
        ("v1.7.0", "1.7.0"),
        ("1.7", "1.7.0"),
        ("2", "2.0.0"),
        ("1.7.0-rc1", "1.7.0-rc1"),
        ("v1.6.0-beta.2+build.5", "1.6.0-beta.2+build.5"),
    ],
)
def test_normalize(raw, expected):
    assert normalize(raw) == expected


@pytest.mark.parametrize("raw", ["1.7.0", "v1.7", "1.7.0-rc2", "3.0.0+meta"])
def test_normalize_is_idempotent(raw):
    once = normalize(raw)
    assert normalize(once) == once


@pytest.mark.parametrize("raw", ["", "latest", "~>1.6", ">=1.0,<2.0", "1.x", "one.two"])
def test_normalize_rejects_non_exact(raw):
    with pytest.raises(ParseError):
        normalize(raw)
    assert is_exact(raw) is False


def test_prerelease_sorts_before_release():
    assert cmp_version("1.7.0-rc1", "1.7.0") == -1
    assert cmp_version("1.7.0", "1.7.0-rc1") == 1
    assert cmp_version("1.7.0-rc1", "1.7.0-rc2") == -1


def test_numeric_components_compare_numerically():
    assert cmp_version("1.10.0", "1.9.9") == 1
    assert cmp_version("1.2.3", "1.2.3") == 0


def test_prerelease_identifier_rules():
    ordered = [
        "1.0.0-alpha",
        "1.0.0-alpha.1",
        "1.0.0-alpha.beta",
        "1.0.0-beta",
        "1.0.0-beta.2",
        "1.0.0-beta.11",
        "1.0.0-rc.1",
        "1.0.0",
    ]
    shuffled = list(ordered)
    random.Random(7).shuffle(shuffled)
    assert sort_versions(shuffled) == ordered


def test_sort_release_list():
    releases = ["1.7.0", "1.6.6", "1.7.0-rc2", "1.7.0-rc1"]
    assert sort_versions(releases) == ["1.6.6", "1.7.0-rc1", "1.7.0-rc2", "1.7.0"]


def test_descending_sort_is_reverse_of_ascending():
    versions = ["0.9.1", "1.7.0", "1.7.0-rc1", "1.6.6", "junk", "1.7.0+b1", "1.10.0"]
    assert sort_versions(versions, reverse=True) == list(reversed(sort_versions(versions)))


def test_invalid_names_sort_first():
    assert sort_versions(["1.0.0", "tmp", "0.1.0"]) == ["tmp", "0.1.0", "1.0.0"]


def test_is_stable():
    assert is_stable("1.7.0") is True
    assert is_stable("1.7.0-rc1") is False
    assert is_stable("nope") is False
