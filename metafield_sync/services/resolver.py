from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Protocol

from ..models.file_node import parse_file_node
from ..shopify import queries
from ..shopify.client import MalformedResponseError

"""Remote resolution: product handle -> owner id, file name -> download URL.

lookup_product() treats "no such product" as a normal result (ProductLookup
with owner_id=None); only transport problems raise TransportError.

find_file_url() first asks the Files API for an exact filename match, then
falls back to scanning the newest files' URLs for a `/name` or `/name?`
suffix (ASCII case-insensitive). SourceNotFoundError carries every
candidate URL that was considered.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "AdminTransport",
    "ProductLookup",
    "SourceNotFoundError",
    "lookup_product",
    "find_file_url",
    "list_file_urls",
    "url_matches_name",
]


class AdminTransport(Protocol):
    def request(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]: ...


class SourceNotFoundError(Exception):
    def __init__(self, file_name: str, candidates: list[str]) -> None:
        super().__init__(f'File "{file_name}" not found in Files')
        self.file_name = file_name
        self.candidates = candidates


@dataclass(frozen=True)
class ProductLookup:
    handle: str
    owner_id: str | None = None
    title: str | None = None

    @property
    def found(self) -> bool:
        return self.owner_id is not None


def lookup_product(client: AdminTransport, handle: str) -> ProductLookup:
    """Resolve a product handle to its GID.

    Raises:
        TransportError: the lookup call itself failed
    """
    data = client.request(queries.PRODUCT_BY_HANDLE, {"handle": handle})
    product = data.get("productByHandle")
    if product is None:
        return ProductLookup(handle=handle)
    if not isinstance(product, dict) or not product.get("id"):
        raise MalformedResponseError(f"productByHandle: unexpected payload {product!r}")
    return ProductLookup(handle=handle, owner_id=str(product["id"]), title=product.get("title"))


def list_file_urls(client: AdminTransport, *, first: int, query: str | None = None) -> list[str]:
    """Download URLs of the newest `first` files matching `query` (None = all)."""
    data = client.request(queries.FILES, {"query": query, "first": first})
    files = data.get("files")
    if not isinstance(files, dict):
        raise MalformedResponseError("files: missing connection")
    urls: list[str] = []
    for edge in files.get("edges") or []:
        node = (edge or {}).get("node")
        if not isinstance(node, dict):
            continue
        url = parse_file_node(node).download_url()
        if url:
            urls.append(url)
    return urls


def url_matches_name(url: str, file_name: str) -> bool:
    """True when the URL path ends with /file_name (query string tolerated).

    Comparison is ASCII case-insensitive only.
    """
    lower = url.lower()
    target = file_name.lower()
    return lower.endswith(f"/{target}") or f"/{target}?" in lower


def find_file_url(
    client: AdminTransport,
    file_name: str,
    *,
    exact_limit: int = 5,
    fallback_limit: int = 100,
) -> str:
    """Locate a file in Shopify Files and return its download URL.

    Raises:
        SourceNotFoundError: neither the filename search nor the fallback scan
            matched
        TransportError: a Files query failed
    """
    by_name = list_file_urls(client, first=exact_limit, query=f"filename:{json.dumps(file_name)}")
    if by_name:
        logger.debug("file=%s found by filename search url=%s", file_name, by_name[0])
        return by_name[0]

    logger.info("file=%s not found by filename search, scanning latest %d files", file_name, fallback_limit)
    candidates = list_file_urls(client, first=fallback_limit)
    for url in candidates:
        if url_matches_name(url, file_name):
            logger.debug("file=%s matched by url suffix url=%s", file_name, url)
            return url
    raise SourceNotFoundError(file_name, candidates)
