from __future__ import annotations

import logging

from ..models.attribute import ATTRIBUTE_DEFINITIONS, AttributeDefinition, AttributeTemplate, coerce_value
from ..models.row_data import RowData

logger = logging.getLogger(__name__)


def map_row(
    row: RowData,
    definitions: dict[str, AttributeDefinition] | None = None,
) -> list[AttributeTemplate]:
    """Map a normalized row onto the attribute definition table.

    Definitions are visited in table order; a column that is absent, blank,
    or (for INTEGER) not an integer yields nothing. Columns outside the
    table are ignored.
    """
    table = ATTRIBUTE_DEFINITIONS if definitions is None else definitions
    templates: list[AttributeTemplate] = []
    for column, definition in table.items():
        raw = row.get(column)
        value = coerce_value(definition.value_kind, raw)
        if value is None:
            if raw is not None and raw.strip():
                logger.warning(
                    "row=%d column=%s value %r is not a valid %s, skipped",
                    row.row_number,
                    column,
                    raw,
                    definition.value_kind.value,
                )
            continue
        templates.append(
            AttributeTemplate(
                namespace=definition.namespace,
                key=definition.key,
                value_kind=definition.value_kind,
                value=value,
            )
        )
    return templates
