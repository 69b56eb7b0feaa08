"""Fake GitHub git data API and Wally metadata API for tests."""

import base64
import json
import re
from typing import Any, Optional, Union

import httpx

REGISTRY_URL = "https://github.com/UpliftGames/wally-index"
API_URL = "https://api.wally.test"

_TREE_PATH = re.compile(r"^/repos/([^/]+)/([^/]+)/git/trees/([^/]+)$")
_BLOB_PATH = re.compile(r"^/repos/([^/]+)/([^/]+)/git/blobs/([^/]+)$")
_METADATA_PATH = re.compile(r"^/v1/package-metadata/([^/]+)/([^/]+)$")

Reply = Union[dict[str, Any], int, Exception]


def version_entry(
    name: str,
    version: str,
    realm: str = "shared",
    registry: str = REGISTRY_URL,
    **package: Any,
) -> dict[str, Any]:
    """Build one element of a metadata ``versions`` array."""
    return {
        "package": {
            "name": name,
            "version": version,
            "registry": registry,
            "realm": realm,
            **package,
        },
        "dependencies": {},
        "server-dependencies": {},
        "dev-dependencies": {},
    }


class FakeRegistryServer:
    """In-memory GitHub + Wally API answering through httpx.MockTransport.

    Replies are keyed by request target. A reply is a JSON dict, an HTTP
    status code, or an exception to raise from the transport.

    Attributes:
        requests: Every request seen, in order.
        trees: (owner, repo, sha) -> reply.
        blobs: (owner, repo, sha) -> reply.
        metadata: (api host, author, name) -> reply.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.trees: dict[tuple[str, str, str], Reply] = {}
        self.blobs: dict[tuple[str, str, str], Reply] = {}
        self.metadata: dict[tuple[str, str, str], Reply] = {}

    # =================== Setup ===================

    def add_registry(
        self,
        owner: str,
        repo: str,
        authors: dict[str, list[str]],
        api: str = API_URL,
        fallback_registries: Optional[list[str]] = None,
        ref: str = "main",
    ) -> None:
        root = [
            {"path": ".github", "sha": f"{repo}-github", "type": "tree"},
            {"path": "config.json", "sha": f"{repo}-config", "type": "blob"},
        ]
        for author, packages in authors.items():
            sha = f"{repo}-{author}"
            root.append({"path": author, "sha": sha, "type": "tree"})
            entries = [{"path": "owners.json", "sha": f"{sha}-owners", "type": "blob"}]
            entries += [
                {"path": package, "sha": f"{sha}-{package}", "type": "blob"}
                for package in packages
            ]
            self.trees[(owner, repo, sha)] = {"sha": sha, "tree": entries}
        self.trees[(owner, repo, ref)] = {"sha": ref, "tree": root}

        config: dict[str, Any] = {"api": api, "github_oauth_id": "oauth-id"}
        if fallback_registries is not None:
            config["fallback_registries"] = fallback_registries
        self.set_config(owner, repo, config)

    def set_config(self, owner: str, repo: str, config: Union[dict[str, Any], bytes]) -> None:
        raw = config if isinstance(config, bytes) else json.dumps(config).encode("utf-8")
        encoded = base64.encodebytes(raw).decode("ascii")
        self.blobs[(owner, repo, f"{repo}-config")] = {
            "sha": f"{repo}-config",
            "content": encoded,
            "encoding": "base64",
        }

    def add_versions(self, author: str, name: str, versions: list[Any], api: str = API_URL) -> None:
        entries = [
            version_entry(f"{author}/{name}", v) if isinstance(v, str) else v
            for v in versions
        ]
        self.metadata[(httpx.URL(api).host, author, name)] = {"versions": entries}

    # =================== Inspection ===================

    def count(self, fragment: str) -> int:
        return sum(1 for request in self.requests if fragment in request.url.path)

    @property
    def github_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host == "api.github.com"]

    # =================== Transport ===================

    def _reply(self, reply: Optional[Reply], request: httpx.Request) -> httpx.Response:
        if reply is None:
            return httpx.Response(404, json={"message": "Not Found"}, request=request)
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, int):
            return httpx.Response(reply, json={"message": "error"}, request=request)
        return httpx.Response(200, json=reply, request=request)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if request.url.host == "api.github.com":
            matched = _TREE_PATH.match(path)
            if matched:
                return self._reply(self.trees.get(matched.groups()), request)
            matched = _BLOB_PATH.match(path)
            if matched:
                return self._reply(self.blobs.get(matched.groups()), request)
        else:
            matched = _METADATA_PATH.match(path)
            if matched:
                key = (request.url.host, *matched.groups())
                return self._reply(self.metadata.get(key), request)
        return httpx.Response(404, json={"message": "Not Found"}, request=request)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)
