from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

"""Attribute (metafield) definitions for the metafield sync pipeline.

ATTRIBUTE_DEFINITIONS is the static column -> metafield table shared read-only
by every row. Columns not listed here are never written.
"""

__all__ = [
    "ValueKind",
    "AttributeDefinition",
    "AttributeTemplate",
    "ResolvedAttribute",
    "ATTRIBUTE_DEFINITIONS",
    "DefinitionTableError",
    "coerce_value",
    "validate_definitions",
]


class ValueKind(Enum):
    """Metafield value type (value = Shopify wire name)."""
    SHORT_TEXT = "single_line_text_field"
    LONG_TEXT = "multi_line_text_field"
    INTEGER = "number_integer"


class DefinitionTableError(Exception):
    """Raised when the static attribute table is inconsistent."""


@dataclass(frozen=True)
class AttributeDefinition:
    namespace: str
    key: str
    value_kind: ValueKind

    @property
    def column(self) -> str:
        return f"{self.namespace}.{self.key}"


@dataclass(frozen=True)
class AttributeTemplate:
    """A mapped attribute value waiting for its owner id."""
    namespace: str
    key: str
    value_kind: ValueKind
    value: str

    def bind(self, owner_id: str) -> ResolvedAttribute:
        return ResolvedAttribute(
            owner_id=owner_id,
            namespace=self.namespace,
            key=self.key,
            value_kind=self.value_kind,
            value=self.value,
        )


@dataclass(frozen=True)
class ResolvedAttribute:
    owner_id: str
    namespace: str
    key: str
    value_kind: ValueKind
    value: str

    def to_input(self) -> dict[str, str]:
        """MetafieldsSetInput payload."""
        return {
            "ownerId": self.owner_id,
            "namespace": self.namespace,
            "key": self.key,
            "type": self.value_kind.value,
            "value": self.value,
        }


def _define(namespace: str, key: str, kind: ValueKind) -> tuple[str, AttributeDefinition]:
    d = AttributeDefinition(namespace=namespace, key=key, value_kind=kind)
    return d.column, d


# 挿入順 = 書き込み順
ATTRIBUTE_DEFINITIONS: dict[str, AttributeDefinition] = dict(
    [
        _define("custom", "tasted_best_with", ValueKind.LONG_TEXT),
        _define("custom", "pack_type", ValueKind.SHORT_TEXT),
        # 数値で保存する場合は INTEGER に変更 (既存ストアは文字列で定義済み)
        _define("custom", "shelf_life_days", ValueKind.SHORT_TEXT),
        _define("custom", "country", ValueKind.SHORT_TEXT),
        _define("custom", "ingredients", ValueKind.LONG_TEXT),
        _define("custom", "allergens", ValueKind.LONG_TEXT),
        _define("custom", "bottle_in_boxes", ValueKind.SHORT_TEXT),
    ]
)


def coerce_value(kind: ValueKind, raw: str | None) -> str | None:
    """Return the wire value for a cell, or None when the cell carries no value.

    Text kinds are trimmed; blank -> None. INTEGER cells must parse as an int
    (surrounding whitespace allowed), otherwise None.
    """
    if raw is None:
        return None
    value = raw.strip()
    if not value:
        return None
    if kind is ValueKind.INTEGER:
        try:
            return str(int(value, 10))
        except ValueError:
            return None
    return value


def validate_definitions(table: dict[str, AttributeDefinition] | None = None) -> None:
    """Check the definition table once at startup.

    Raises:
        DefinitionTableError: column name does not equal namespace.key, or a
            namespace/key pair is defined twice.
    """
    table = ATTRIBUTE_DEFINITIONS if table is None else table
    seen: set[tuple[str, str]] = set()
    for column, definition in table.items():
        if column != definition.column:
            raise DefinitionTableError(
                f"column '{column}' does not match definition {definition.column}"
            )
        pair = (definition.namespace, definition.key)
        if pair in seen:
            raise DefinitionTableError(f"duplicate definition: {definition.column}")
        seen.add(pair)
