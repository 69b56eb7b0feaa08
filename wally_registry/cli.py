"""
Wally Registry CLI: look up packages in a Wally registry index.

Usage:
    wally-registry authors
    wally-registry packages <author>
    wally-registry versions <author/name>
    wally-registry resolve <author/name@constraint>
"""

import argparse
import asyncio
import json
import sys
from typing import Any, Optional

from wally_registry.config import Settings, get_settings
from wally_registry.exceptions import RegistryException
from wally_registry.log import setup_logging
from wally_registry.models.package import FullPackageInfo
from wally_registry.naming import format_authors, parse_dependency, split_package_name
from wally_registry.resolver.registry import WallyRegistry

EXIT_OK = 0
EXIT_NOT_FOUND = 1
EXIT_BAD_REGISTRY = 2


# =================== Colors ===================

class C:
    R = "\033[0m"
    B = "\033[1m"
    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    CYAN = "\033[96m"
    GREY = "\033[90m"


def colored(text: str, color: str) -> str:
    return f"{color}{text}{C.R}"


def ok(msg: str):
    print(f"  {C.GREEN}✓{C.R} {msg}")


def err(msg: str):
    print(f"  {C.RED}✗{C.R} {msg}", file=sys.stderr)


def emit_json(data: Any):
    print(json.dumps(data, indent=2))


# =================== Commands ===================

async def cmd_authors(registry: WallyRegistry, as_json: bool) -> int:
    """List all authors in the registry."""
    authors = await registry.get_package_authors()
    if authors is None:
        err(f"Could not read registry {registry.get_registry()}")
        return EXIT_NOT_FOUND
    if as_json:
        emit_json(authors)
    else:
        for author in authors:
            print(f"  {author}")
    return EXIT_OK


async def cmd_packages(registry: WallyRegistry, author: str, as_json: bool) -> int:
    """List the packages of one author."""
    names = await registry.get_package_names(author)
    if names is None:
        err(f"No packages found for author '{author}'")
        return EXIT_NOT_FOUND
    if as_json:
        emit_json(names)
    else:
        for name in names:
            print(f"  {author.lower()}/{name}")
    return EXIT_OK


async def cmd_versions(registry: WallyRegistry, package: str, as_json: bool) -> int:
    """List the published versions of a package, newest first."""
    parts = split_package_name(package)
    if parts is None:
        err(f"Invalid package name '{package}', expected author/name")
        return EXIT_NOT_FOUND
    versions = await registry.get_package_versions(*parts)
    if versions is None:
        err(f"No versions found for {package}")
        return EXIT_NOT_FOUND
    if as_json:
        emit_json(versions)
    else:
        for version in versions:
            print(f"  {version}")
    return EXIT_OK


def print_package_info(info: FullPackageInfo):
    package_author, _, package_name = info.name.partition("/")
    print(f"\n  {C.B}{package_name}{C.R} {colored(info.version, C.CYAN)}")
    print(f"  by {format_authors(info.authors, package_author)}")
    if info.description:
        print(f"\n  {info.description}")
    print(f"\n  {C.GREY}realm:{C.R}    {info.realm.value}")
    if info.license:
        print(f"  {C.GREY}license:{C.R}  {info.license}")
    for label, deps in (
        ("dependencies", info.dependencies),
        ("server", info.server_dependencies),
        ("dev", info.dev_dependencies),
    ):
        for alias, constraint in deps.items():
            print(f"  {C.GREY}{label}:{C.R} {alias} = {constraint}")
    if info.web_url:
        print(f"\n  {info.web_url}")
    print()


async def cmd_resolve(registry: WallyRegistry, dependency: str, as_json: bool) -> int:
    """Resolve a dependency to its newest compatible version."""
    parsed = parse_dependency(dependency)
    if parsed is None:
        err(f"Invalid dependency '{dependency}', expected author/name@constraint")
        return EXIT_NOT_FOUND
    info = await registry.resolve(*parsed)
    if info is None:
        err(f"Could not resolve {dependency}")
        return EXIT_NOT_FOUND
    if as_json:
        emit_json(info.model_dump(mode="json", by_alias=True))
    else:
        ok(f"{info.name}@{info.version}")
        print_package_info(info)
    return EXIT_OK


# =================== Entry ===================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wally-registry",
        description="Resolve packages against a Wally registry index",
    )
    parser.add_argument("--registry", help="Registry URL (default: WALLY_REGISTRY_URL or the public index)")
    parser.add_argument("--token", help="GitHub token (default: WALLY_GITHUB_TOKEN)")
    parser.add_argument("--json", action="store_true", help="Print results as JSON")
    parser.add_argument("--json-logs", action="store_true", help="Emit logs as JSON lines")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("authors", help="List all authors")
    packages = sub.add_parser("packages", help="List the packages of an author")
    packages.add_argument("author")
    versions = sub.add_parser("versions", help="List the versions of a package")
    versions.add_argument("package", help="author/name")
    resolve = sub.add_parser("resolve", help="Resolve a dependency")
    resolve.add_argument("dependency", help="author/name@constraint")
    return parser


def settings_from_args(args: argparse.Namespace, base: Optional[Settings] = None) -> Settings:
    base = base or get_settings()
    update: dict[str, Any] = {}
    if args.registry:
        update["registry_url"] = args.registry.rstrip("/")
    if args.token:
        update["github_token"] = args.token
    if args.verbose:
        update["log_level"] = "DEBUG"
    if args.json_logs:
        update["log_json"] = True
    return base.model_copy(update=update)


async def run(args: argparse.Namespace, settings: Settings, transport=None) -> int:
    try:
        registry = WallyRegistry.for_url(settings.registry_url, settings, transport)
    except RegistryException as e:
        err(e.message)
        return EXIT_BAD_REGISTRY

    async with registry:
        if args.command == "authors":
            return await cmd_authors(registry, args.json)
        if args.command == "packages":
            return await cmd_packages(registry, args.author, args.json)
        if args.command == "versions":
            return await cmd_versions(registry, args.package, args.json)
        return await cmd_resolve(registry, args.dependency, args.json)


def main(argv: Optional[list[str]] = None):
    args = build_parser().parse_args(argv)
    settings = settings_from_args(args)
    setup_logging(settings.log_level, settings.log_json)
    sys.exit(asyncio.run(run(args, settings)))


if __name__ == "__main__":
    main()
