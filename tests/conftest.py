# Shared pytest fixtures
from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Any

import pytest

from metafield_sync.logging.init import reset_logging
from metafield_sync.models.config_models import ShopifySettings
from metafield_sync.shopify import queries


class FakeAdminClient:
    """Scripted stand-in for ShopifyAdminClient.

    products: handle -> product GID (missing handle = not found)
    lookup_errors / mutation_errors: handle / owner GID -> exception to raise
    user_errors: owner GID -> userErrors list returned by metafieldsSet
    files_by_name / latest_files: Files API node lists
    downloads: url -> bytes
    """

    def __init__(
        self,
        products: dict[str, str] | None = None,
        *,
        lookup_errors: dict[str, Exception] | None = None,
        mutation_errors: dict[str, Exception] | None = None,
        user_errors: dict[str, list[dict[str, Any]]] | None = None,
        files_by_name: list[dict[str, Any]] | None = None,
        latest_files: list[dict[str, Any]] | None = None,
        downloads: dict[str, bytes] | None = None,
    ) -> None:
        self.products = products or {}
        self.lookup_errors = lookup_errors or {}
        self.mutation_errors = mutation_errors or {}
        self.user_errors = user_errors or {}
        self.files_by_name = files_by_name or []
        self.latest_files = latest_files or []
        self.downloads = downloads or {}
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.written: list[list[dict[str, str]]] = []
        self.closed = False

    def request(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        variables = variables or {}
        if query == queries.PRODUCT_BY_HANDLE:
            self.calls.append(("lookup", variables))
            handle = variables["handle"]
            if handle in self.lookup_errors:
                raise self.lookup_errors[handle]
            gid = self.products.get(handle)
            return {"productByHandle": {"id": gid, "title": handle} if gid else None}
        if query == queries.METAFIELDS_SET:
            self.calls.append(("write", variables))
            metafields = variables["metafields"]
            owner = metafields[0]["ownerId"]
            if owner in self.mutation_errors:
                raise self.mutation_errors[owner]
            self.written.append(metafields)
            return {
                "metafieldsSet": {
                    "metafields": [
                        {"id": f"gid://shopify/Metafield/{i}", "namespace": m["namespace"], "key": m["key"]}
                        for i, m in enumerate(metafields)
                    ],
                    "userErrors": self.user_errors.get(owner, []),
                }
            }
        if query == queries.FILES:
            self.calls.append(("files", variables))
            nodes = self.files_by_name if variables.get("query") else self.latest_files
            return {"files": {"edges": [{"node": n} for n in nodes[: variables["first"]]]}}
        raise AssertionError(f"unexpected query: {query[:40]}")

    def fetch_bytes(self, url: str) -> bytes:
        self.calls.append(("download", {"url": url}))
        return self.downloads[url]

    def close(self) -> None:
        self.closed = True

    def count(self, kind: str) -> int:
        return sum(1 for k, _ in self.calls if k == kind)


def generic_file(url: str, node_id: str = "gid://shopify/GenericFile/1") -> dict[str, Any]:
    return {"__typename": "GenericFile", "id": node_id, "createdAt": "2024-10-01T00:00:00Z", "url": url}


@pytest.fixture()
def fake_client_cls() -> type[FakeAdminClient]:
    return FakeAdminClient


@pytest.fixture()
def settings() -> ShopifySettings:
    return ShopifySettings(
        store_domain="test-shop.myshopify.com",
        access_token="shpat_test",
        api_version="2024-10",
    )


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def shopify_env(monkeypatch) -> None:
    monkeypatch.setenv("SHOPIFY_STORE_DOMAIN", "test-shop")
    monkeypatch.setenv("SHOPIFY_ADMIN_API_ACCESS_TOKEN", "shpat_test")
    monkeypatch.setenv("SHOPIFY_ADMIN_API_VERSION", "2024-10")
    monkeypatch.delenv("INTERNAL_SYNC_TOKEN", raising=False)


@pytest.fixture()
def sample_config_yaml() -> str:
    return """pacing_ms: 0
source_file_name: beer.csv
fallback_file_limit: 100
max_attempts: 1
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "sync.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def write_csv(temp_workdir: Path):
    def _write(text: str, name: str = "beer.csv") -> Path:
        path = temp_workdir / "data" / name
        path.write_text(text, encoding="utf-8")
        return path
    return _write


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def file_node():
    return generic_file
