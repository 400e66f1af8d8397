from __future__ import annotations

from dataclasses import dataclass
from typing import Any

"""File node variants returned by the Admin API `files` connection.

The API returns one of several node shapes distinguished by `__typename`.
parse_file_node() builds the matching variant; every variant answers
download_url(), unknown shapes answer None.
"""

__all__ = [
    "GenericFileNode",
    "MediaImageNode",
    "UnknownFileNode",
    "FileNode",
    "parse_file_node",
]


@dataclass(frozen=True)
class GenericFileNode:
    id: str
    created_at: str | None
    url: str | None

    def download_url(self) -> str | None:
        return self.url


@dataclass(frozen=True)
class MediaImageNode:
    id: str
    created_at: str | None
    image_url: str | None

    def download_url(self) -> str | None:
        return self.image_url


@dataclass(frozen=True)
class UnknownFileNode:
    id: str
    created_at: str | None
    typename: str

    def download_url(self) -> str | None:
        return None


FileNode = GenericFileNode | MediaImageNode | UnknownFileNode


def _generic(node: dict[str, Any]) -> FileNode:
    return GenericFileNode(id=node.get("id", ""), created_at=node.get("createdAt"), url=node.get("url"))


def _media_image(node: dict[str, Any]) -> FileNode:
    image = node.get("image") or {}
    return MediaImageNode(
        id=node.get("id", ""), created_at=node.get("createdAt"), image_url=image.get("url")
    )


_BUILDERS = {
    "GenericFile": _generic,
    "MediaImage": _media_image,
}


def parse_file_node(node: dict[str, Any]) -> FileNode:
    typename = str(node.get("__typename", ""))
    builder = _BUILDERS.get(typename)
    if builder is None:
        return UnknownFileNode(id=node.get("id", ""), created_at=node.get("createdAt"), typename=typename)
    return builder(node)
