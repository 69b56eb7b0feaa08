"""Helpers for Wally package and author names."""

import re
from typing import Optional

_PACKAGE_NAME = re.compile(r"^([a-z0-9_\-]+)/([a-z0-9_\-]+)$", re.IGNORECASE)


def split_package_name(full_name: str) -> Optional[tuple[str, str]]:
    """Split ``author/name`` into its parts.

    Args:
        full_name: Full package name.

    Returns:
        Lower-cased (author, name) tuple, None if the name is malformed.
    """
    matched = _PACKAGE_NAME.match(full_name.strip())
    if not matched:
        return None
    return matched.group(1).lower(), matched.group(2).lower()


def parse_author_name(author: str) -> str:
    """Strip contact details from a manifest author string.

    ``"Jane Doe <jane@example.com>"`` and ``"Jane Doe (janedoe)"`` both
    become ``"Jane Doe"``.
    """
    cut = len(author)
    for marker in ("<", "("):
        idx = author.find(marker)
        if idx >= 0:
            cut = min(cut, idx)
    return author[:cut].strip()


def format_authors(authors: Optional[list[str]], package_author: str) -> str:
    """Describe who published a package.

    Args:
        authors: Author strings from the package manifest, if any.
        package_author: Author namespace taken from the package name.

    Returns:
        e.g. ``"Jane Doe (janedoe)"`` or ``"Ann, Bob and Cid (team)"``.
    """
    if not authors:
        return package_author

    names = [parse_author_name(author) for author in authors]
    if len(names) == 1:
        if names[0].lower() == package_author.lower():
            return names[0]
        return f"{names[0]} ({package_author})"
    return f"{', '.join(names[:-1])} and {names[-1]} ({package_author})"


def parse_dependency(dependency: str) -> Optional[tuple[str, str, str]]:
    """Split a manifest dependency such as ``roblox/roact@^1.4.0``.

    A missing constraint means any version.

    Returns:
        (author, name, constraint) tuple, None if the package part is malformed.
    """
    package, _, constraint = dependency.strip().partition("@")
    parts = split_package_name(package)
    if parts is None:
        return None
    author, name = parts
    return author, name, constraint.strip() or "*"
