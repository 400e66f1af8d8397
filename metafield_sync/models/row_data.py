from __future__ import annotations

from dataclasses import dataclass

"""RowData model for the metafield sync pipeline.

RowData represents a single data line of the source file after header
normalization. Rows are created by the tabular reader and consumed once by
the field mapper / run coordinator.
"""

__all__ = [
    "RowData",
    "HANDLE_COLUMN",
]

HANDLE_COLUMN = "Handle"


@dataclass(frozen=True)
class RowData:
    """Logical representation of one source row after header normalization.

    row_number is the 1-based position among data rows (header and blank
    lines are not counted).
    """
    row_number: int  # 1 = first data row
    values: dict[str, str]  # normalized column name -> raw (trimmed) value

    def get(self, column: str) -> str | None:
        return self.values.get(column)

    @property
    def handle(self) -> str:
        """Product handle, matched on the `Handle` column case-insensitively.

        The exact `Handle` column wins when non-blank; otherwise the first
        non-blank case variant (`handle`, `HANDLE`, ...) is used. Returns an
        empty string when no such column carries a value.
        """
        exact = (self.values.get(HANDLE_COLUMN) or "").strip()
        if exact:
            return exact
        for col, val in self.values.items():
            if col != HANDLE_COLUMN and col.casefold() == HANDLE_COLUMN.casefold():
                value = (val or "").strip()
                if value:
                    return value
        return ""
