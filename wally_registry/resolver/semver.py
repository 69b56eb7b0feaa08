"""Semantic versioning utilities."""

import logging
import operator
import re
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from semver import Version

logger = logging.getLogger(__name__)

_COMPARATORS: dict[str, Callable[[Version, Version], bool]] = {
    ">=": operator.ge,
    "<=": operator.le,
    ">": operator.gt,
    "<": operator.lt,
    "==": operator.eq,
    "=": operator.eq,
}

_COMPARATOR = re.compile(r"^(>=|<=|==|>|<|=)?(.+)$")

# Operators may be written with a space before the version
_OPERATOR_SPACING = re.compile(r"(>=|<=|==|>|<|=|\^|~)\s+")


@dataclass(frozen=True)
class VersionConstraint:
    """An intersection of comparators a version must all satisfy.

    No comparators means any release matches. A pre-release only matches
    when a comparator names a pre-release of the same major.minor.patch.

    Attributes:
        comparators: (operator, bound) pairs, operator one of ``_COMPARATORS``.
    """

    comparators: tuple[tuple[str, Version], ...] = ()

    def allows(self, version: Version) -> bool:
        for op, bound in self.comparators:
            if not _COMPARATORS[op](version, bound):
                return False
        if version.prerelease is None:
            return True
        return any(
            bound.prerelease is not None and _release(bound) == _release(version)
            for _, bound in self.comparators
        )


def _release(version: Version) -> tuple[int, int, int]:
    return version.major, version.minor, version.patch


def parse_version(version_str: str) -> Version:
    """Parse a version string into a Version object.

    Args:
        version_str: Version string (e.g., "1.0.0", "2.1.0-beta.1").

    Returns:
        Parsed Version object.

    Raises:
        ValueError: If version string is not a semantic version.
    """
    return Version.parse(version_str)


def try_parse_version(version_str: str) -> Optional[Version]:
    """Parse a version string, returning None if it is invalid."""
    try:
        return Version.parse(version_str)
    except ValueError:
        return None


def _parse_bound(version_str: str) -> Version:
    # Constraints may leave out minor and patch ("^1.2")
    return Version.parse(version_str, optional_minor_and_patch=True)


def _parse_part(part: str) -> list[tuple[str, Version]]:
    if part == "*":
        return []

    # Caret: same major, for 0.x same minor
    if part.startswith("^"):
        version = _parse_bound(part[1:])
        if version.major == 0:
            upper = Version(0, version.minor + 1, 0)
        else:
            upper = Version(version.major + 1, 0, 0)
        return [(">=", version), ("<", upper)]

    # Tilde: same minor
    if part.startswith("~"):
        version = _parse_bound(part[1:])
        return [(">=", version), ("<", Version(version.major, version.minor + 1, 0))]

    match = _COMPARATOR.match(part)
    if match is None:
        raise ValueError(f"Invalid version comparator '{part}'")
    op, version_str = match.groups()
    # No operator means exact match
    return [(op or "=", _parse_bound(version_str))]


def parse_specifier(spec_str: str) -> VersionConstraint:
    """Parse a version constraint as written in a Wally manifest.

    Supports:
    - Caret: "^1.2.0" (>=1.2.0,<2.0.0), "^0.3.1" (>=0.3.1,<0.4.0)
    - Tilde: "~1.2.0" (>=1.2.0,<1.3.0)
    - Exact: "1.2.0", "=1.2.0" or "==1.2.0"
    - Wildcard: "*"
    - Range: ">=1.0.0,<2.0.0" or ">=1.0.0 <2.0.0"

    Args:
        spec_str: Version constraint string.

    Returns:
        Constraint for matching versions.

    Raises:
        ValueError: If the constraint cannot be parsed.
    """
    normalized = _OPERATOR_SPACING.sub(r"\1", spec_str.strip())
    comparators: list[tuple[str, Version]] = []
    for part in re.split(r"[,\s]+", normalized):
        if part:
            comparators.extend(_parse_part(part))
    return VersionConstraint(tuple(comparators))


def matches(version_str: str, constraint: VersionConstraint) -> bool:
    """Check if a version satisfies a constraint.

    Args:
        version_str: Version to check.
        constraint: Constraint to match against.

    Returns:
        True if the version is valid and satisfies the constraint.
    """
    version = try_parse_version(version_str)
    return version is not None and constraint.allows(version)


def sort_versions(versions: Iterable[str]) -> list[str]:
    """Sort version strings newest first by semantic-version precedence.

    Versions that cannot be parsed are dropped. Equal versions keep their
    input order.

    Args:
        versions: Version strings.

    Returns:
        Sorted version strings, newest first.
    """
    parsed: list[tuple[Version, str]] = []
    for version_str in versions:
        version = try_parse_version(version_str)
        if version is None:
            logger.warning(f"Ignoring invalid version '{version_str}'")
            continue
        parsed.append((version, version_str))
    parsed.sort(key=lambda pair: pair[0], reverse=True)
    return [version_str for _, version_str in parsed]


def find_best_match(versions: Iterable[str], constraint: VersionConstraint) -> Optional[str]:
    """Find the newest version satisfying a constraint.

    Args:
        versions: Available version strings, in any order.
        constraint: Constraint to match against.

    Returns:
        Best matching version or None if no match. Among equal versions the
        first one listed wins.
    """
    best: Optional[tuple[Version, str]] = None
    for version_str in versions:
        version = try_parse_version(version_str)
        if version is None or not constraint.allows(version):
            continue
        if best is None or version > best[0]:
            best = (version, version_str)
    return best[1] if best else None


def same_version(v1: str, v2: str) -> bool:
    """Check whether two version strings denote the same version.

    Build metadata does not take part in the comparison.
    """
    if v1 == v2:
        return True
    parsed_v1 = try_parse_version(v1)
    parsed_v2 = try_parse_version(v2)
    return parsed_v1 is not None and parsed_v1 == parsed_v2
