from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

from ..shopify.client import TransportError
from ..tabular.reader import decode_source
from .resolver import AdminTransport, find_file_url

"""Source file loading: local path (CLI) or Shopify Files (HTTP endpoint)."""

logger = logging.getLogger(__name__)

__all__ = [
    "SourceReadError",
    "read_local_source",
    "read_remote_source",
]


class FileFetcher(AdminTransport, Protocol):
    def fetch_bytes(self, url: str) -> bytes: ...


class SourceReadError(Exception):
    """Source file exists in principle but could not be read or downloaded."""


def read_local_source(path: Path) -> str:
    if not path.exists():
        raise SourceReadError(f"file not found: {path}")
    if not path.is_file():
        raise SourceReadError(f"not a file: {path}")
    try:
        return decode_source(path.read_bytes())
    except OSError as e:
        raise SourceReadError(f"cannot read {path}: {e}") from e


def read_remote_source(
    client: FileFetcher,
    file_name: str,
    *,
    exact_limit: int = 5,
    fallback_limit: int = 100,
) -> tuple[str, str]:
    """Locate `file_name` in Shopify Files and download it.

    Returns:
        (url, decoded text)

    Raises:
        SourceNotFoundError: the file could not be located
        TransportError: a Files query failed
        SourceReadError: the download failed
    """
    url = find_file_url(client, file_name, exact_limit=exact_limit, fallback_limit=fallback_limit)
    logger.info("downloading %s from %s", file_name, url)
    try:
        raw = client.fetch_bytes(url)
    except TransportError as e:
        raise SourceReadError(f"download failed for {url}: {e}") from e
    return url, decode_source(raw)
