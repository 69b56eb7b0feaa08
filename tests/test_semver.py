"""Tests for semver utilities."""

import pytest

from wally_registry.resolver.semver import (
    find_best_match,
    matches,
    parse_specifier,
    parse_version,
    same_version,
    sort_versions,
)


def test_parse_version_prerelease() -> None:
    """Test that semver pre-release tags are understood."""
    v = parse_version("2.0.0-alpha.1")
    assert v.prerelease == "alpha.1"
    assert (v.major, v.minor, v.patch) == (2, 0, 0)


@pytest.mark.parametrize("version", ["1.0", "v1.0.0", "1.0.0a0", "latest"])
def test_parse_version_rejects_non_semver(version: str) -> None:
    """Test that only full semantic versions are accepted."""
    with pytest.raises(ValueError):
        parse_version(version)


def test_parse_specifier_caret() -> None:
    """Test caret specifier."""
    spec = parse_specifier("^1.2.0")
    assert matches("1.2.0", spec)
    assert matches("1.9.9", spec)
    assert not matches("1.1.9", spec)
    assert not matches("2.0.0", spec)


def test_parse_specifier_caret_zero_major() -> None:
    """Test that caret below 1.0.0 is minor-sensitive."""
    spec = parse_specifier("^0.1.0")
    assert matches("0.1.0", spec)
    assert matches("0.1.7", spec)
    assert not matches("0.2.0", spec)


def test_parse_specifier_tilde() -> None:
    """Test tilde specifier."""
    spec = parse_specifier("~1.2.0")
    assert matches("1.2.9", spec)
    assert not matches("1.3.0", spec)


@pytest.mark.parametrize("constraint", ["1.2.0", "=1.2.0", "==1.2.0"])
def test_parse_specifier_exact(constraint: str) -> None:
    """Test that a constraint without range operator is an exact match."""
    spec = parse_specifier(constraint)
    assert matches("1.2.0", spec)
    assert not matches("1.2.1", spec)


@pytest.mark.parametrize("constraint", ["*", ""])
def test_parse_specifier_wildcard(constraint: str) -> None:
    """Test wildcard specifier."""
    spec = parse_specifier(constraint)
    assert matches("0.0.1", spec)
    assert matches("99.99.99", spec)


@pytest.mark.parametrize("constraint", [">=1.0.0,<2.0.0", ">=1.0.0 <2.0.0", ">= 1.0.0, < 2.0.0"])
def test_parse_specifier_range(constraint: str) -> None:
    """Test range specifier."""
    spec = parse_specifier(constraint)
    assert matches("1.5.0", spec)
    assert not matches("2.0.0", spec)


@pytest.mark.parametrize("constraint", ["^", "^abc", "not a version", "~x.y"])
def test_parse_specifier_invalid(constraint: str) -> None:
    """Test that unparseable constraints raise ValueError."""
    with pytest.raises(ValueError):
        parse_specifier(constraint)


def test_prerelease_only_matches_when_named() -> None:
    """Test that ranges skip pre-releases unless the constraint names one."""
    assert not matches("1.3.0-beta", parse_specifier("^1.2.0"))
    assert matches("1.3.0-beta", parse_specifier("^1.3.0-alpha"))
    assert not matches("1.4.0-beta", parse_specifier("^1.3.0-alpha"))
    assert not matches("1.3.0-beta", parse_specifier("*"))
    assert matches("1.0.0-rc.1", parse_specifier("=1.0.0-rc.1"))


def test_matches_invalid_version() -> None:
    """Test that invalid versions never match."""
    assert not matches("latest", parse_specifier("*"))


def test_sort_versions_newest_first() -> None:
    """Test semantic-version precedence including pre-releases."""
    versions = ["1.0.0", "2.1.0", "1.9.9", "2.0.0-alpha"]
    assert sort_versions(versions) == ["2.1.0", "2.0.0-alpha", "1.9.9", "1.0.0"]


def test_sort_versions_prerelease_below_release() -> None:
    """Test that a release outranks its pre-releases."""
    versions = ["1.0.0-rc.1", "1.0.0", "1.0.0-beta.2", "1.0.0-beta.11"]
    assert sort_versions(versions) == ["1.0.0", "1.0.0-rc.1", "1.0.0-beta.11", "1.0.0-beta.2"]


def test_sort_versions_drops_invalid() -> None:
    """Test that unparseable versions are left out."""
    assert sort_versions(["1.0.0", "banana", "0.9.0"]) == ["1.0.0", "0.9.0"]


def test_sort_versions_numeric_not_lexical() -> None:
    """Test that components compare numerically."""
    assert sort_versions(["0.9.0", "0.10.0", "0.2.0"]) == ["0.10.0", "0.9.0", "0.2.0"]


def test_find_best_match() -> None:
    """Test finding best matching version."""
    best = find_best_match(["1.2.0", "2.0.0", "1.5.0"], parse_specifier("^1.2.0"))
    assert best == "1.5.0"


def test_find_best_match_no_match() -> None:
    """Test finding best match with no matches."""
    assert find_best_match(["0.1.0", "0.2.0"], parse_specifier(">=1.0.0")) is None


def test_same_version() -> None:
    """Test version equality across spellings."""
    assert same_version("1.0.0", "1.0.0")
    assert same_version("1.0.0+build.5", "1.0.0")
    assert not same_version("1.0.0-alpha", "1.0.0")
    assert not same_version("1.0.0", "1.0.1")
    assert not same_version("banana", "1.0.0")


def test_parse_specifier_partial_bound() -> None:
    """Test that constraints may leave out minor and patch."""
    spec = parse_specifier("^1.2")
    assert matches("1.2.0", spec)
    assert matches("1.9.0", spec)
    assert not matches("1.1.9", spec)


def test_sort_versions_precedence_chain() -> None:
    """Test the precedence chain from the semantic versioning rules."""
    chain = [
        "1.0.0-alpha",
        "1.0.0-alpha.1",
        "1.0.0-alpha.beta",
        "1.0.0-beta",
        "1.0.0-beta.2",
        "1.0.0-beta.11",
        "1.0.0-rc.1",
        "1.0.0",
    ]
    shuffled = [chain[i] for i in (4, 7, 0, 6, 2, 5, 1, 3)]
    assert sort_versions(shuffled) == list(reversed(chain))


def test_sort_versions_prerelease_identifiers() -> None:
    """Test that alphanumeric identifiers compare in ASCII order."""
    versions = [
        "1.0.0-alpha.beta",
        "1.0.0-alpha.1",
        "1.0.0-x.7.z.92",
        "1.0.0",
        "1.0.0-dev",
        "1.0.0-alpha",
    ]
    assert sort_versions(versions) == [
        "1.0.0",
        "1.0.0-x.7.z.92",
        "1.0.0-dev",
        "1.0.0-alpha.beta",
        "1.0.0-alpha.1",
        "1.0.0-alpha",
    ]


def test_find_best_match_skips_prereleases() -> None:
    """Test that a release-only constraint never picks a pre-release."""
    versions = ["1.2.0", "1.5.0", "1.6.0-rc.1"]
    assert find_best_match(versions, parse_specifier("^1.2.0")) == "1.5.0"
    assert find_best_match(versions, parse_specifier("^1.6.0-rc.1")) == "1.6.0-rc.1"


def test_find_best_match_first_of_equal() -> None:
    """Test that versions differing only in build metadata keep listing order."""
    assert find_best_match(["1.0.0+b", "1.0.0+a"], parse_specifier("*")) == "1.0.0+b"
