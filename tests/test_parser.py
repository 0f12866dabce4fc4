"""Tests for constraint parsing into predicates."""

import pytest

from versioning.errors import ParseError
from versioning.iterate import iterate
from versioning.parser import constraint_predicate, parse_predicate, tokenize_direction

RELEASES = ["1.5.7", "1.6.0", "1.6.6", "1.7.0-rc1", "1.7.0-rc2", "1.7.0", "2.0.0"]


def first_match(requested, versions=RELEASES):
    predicate, reverse_order = parse_predicate(requested)
    for version in iterate(versions, reverse_order):
        if predicate(version):
            return version
    return None


def test_latest_keyword_selects_newest_stable():
    predicate, reverse_order = parse_predicate("latest")
    assert reverse_order is True
    assert predicate("1.7.0") is True
    assert predicate("1.7.0-rc2") is False


def test_latest_pre_includes_prereleases():
    assert first_match("latest-pre", RELEASES[:-2]) == "1.7.0-rc2"


def test_plain_constraint_searches_newest_first():
    assert first_match(">=1.6,<2.0") == "1.7.0"


def test_pessimistic_operator_stays_within_minor():
    assert first_match("~>1.6") == "1.6.6"
    assert first_match("~> 1.5") == "1.5.7"


def test_caret_constraint():
    assert first_match("^1.5") == "1.7.0"


def test_wildcard_constraint():
    assert first_match("1.6.x") == "1.6.6"
    assert first_match("1.*") == "1.7.0"


def test_latest_prefix_is_descending():
    assert first_match("latest:^1.3") == "1.7.0"


def test_min_prefix_is_ascending():
    predicate, reverse_order = parse_predicate("min:>=1.6")
    assert reverse_order is False
    assert first_match("min:>=1.6") == "1.6.0"


def test_prerelease_only_matches_when_requested():
    predicate = constraint_predicate(">=1.7.0-rc1")
    assert predicate("1.7.0-rc2") is True
    assert constraint_predicate(">=1.6.7")("1.7.0-rc2") is False


def test_npm_hyphen_range():
    assert first_match("1.5.0 - 1.6.5") == "1.6.0"


def test_invalid_candidates_never_match():
    predicate = constraint_predicate(">=1.0")
    assert predicate("not-a-version") is False


@pytest.mark.parametrize("requested", ["", "foo", ">=abc", "latest:", "~>one"])
def test_invalid_expressions_raise(requested):
    with pytest.raises(ParseError):
        parse_predicate(requested)


def test_predicate_is_deterministic():
    predicate, _ = parse_predicate("~>1.6")
    assert [predicate(v) for v in RELEASES] == [predicate(v) for v in RELEASES]


def test_tokenize_direction():
    assert tokenize_direction("latest:^1.3") == (True, "^1.3")
    assert tokenize_direction("min: >=1.0") == (False, ">=1.0")
    assert tokenize_direction(">=1.0") == (None, ">=1.0")


def test_min_required_reads_tf_files(tmp_path, monkeypatch):
    (tmp_path / "main.tf").write_text(
        'terraform {\n  required_version = ">= 1.6.0, < 1.8.0"\n}\n', encoding="utf-8"
    )
    monkeypatch.chdir(tmp_path)
    assert first_match("min-required") == "1.6.0"
    assert first_match("latest-allowed") == "1.7.0"


def test_min_required_without_constraint_accepts_stable(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert first_match("min-required") == "1.5.7"


@pytest.mark.parametrize(
    "required,oldest,newest",
    [
        ("~> 1.6", "1.6.0", "1.8.2"),
        ("~> 1.6.2", "1.6.6", "1.6.6"),
        ("~> 1", "1.6.0", "1.8.2"),
        (">= 1.6.5, ~> 1.6", "1.6.6", "1.8.2"),
    ],
)
def test_required_version_pessimistic_operator(tmp_path, monkeypatch, required, oldest, newest):
    releases = ["1.6.0", "1.6.6", "1.7.0", "1.8.2", "2.0.0"]
    (tmp_path / "versions.tf").write_text(
        f'terraform {{\n  required_version = "{required}"\n}}\n', encoding="utf-8"
    )
    monkeypatch.chdir(tmp_path)

    assert first_match("min-required", releases) == oldest
    assert first_match("latest-allowed", releases) == newest


def test_cli_pessimistic_operator_stays_tilde():
    assert first_match("~>1.6", ["1.6.0", "1.6.6", "1.7.0", "1.8.2"]) == "1.6.6"
    assert constraint_predicate("~> 1.6", config_syntax=True)("1.8.2") is True
    assert constraint_predicate("~> 1.6")("1.8.2") is False


def test_required_version_invalid_pessimistic_operand():
    with pytest.raises(ParseError):
        constraint_predicate("~> one", config_syntax=True)
