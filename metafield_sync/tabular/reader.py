from __future__ import annotations

import re
from collections.abc import Iterator

from ..models.row_data import RowData

"""Delimited text reader.

- Lines are split on \\n / \\r\\n; whitespace-only lines are dropped before
  header detection, the first remaining line is the header.
- Fields may be wrapped in double quotes; "" inside a quoted field is one
  literal quote; each field is trimmed after quote processing.
- `Metafield: custom.key` header cells normalize to `custom.key`.
- Short lines are padded with "" (no parse error); surplus fields are ignored.

Quoted fields spanning several lines are not supported (one record per line).
"""

__all__ = [
    "decode_source",
    "split_fields",
    "normalize_header",
    "read_rows",
    "METAFIELD_PREFIX",
]

METAFIELD_PREFIX = "metafield:"
QUOTE = '"'

_LINE_SPLIT = re.compile(r"\r?\n")


def decode_source(raw: str | bytes) -> str:
    """Decode file content, stripping a UTF-8 BOM."""
    if isinstance(raw, bytes):
        if raw.startswith(b"\xef\xbb\xbf"):
            raw = raw[3:]
        return raw.decode("utf-8", errors="replace")
    if raw.startswith("\ufeff"):
        return raw[1:]
    return raw


def split_fields(line: str, delimiter: str = ",") -> list[str]:
    """Split one line into trimmed fields honoring double-quote escaping."""
    out: list[str] = []
    cur: list[str] = []
    in_quotes = False
    i = 0
    n = len(line)
    while i < n:
        ch = line[i]
        if ch == QUOTE:
            if in_quotes and i + 1 < n and line[i + 1] == QUOTE:
                cur.append(QUOTE)
                i += 1
            else:
                in_quotes = not in_quotes
        elif ch == delimiter and not in_quotes:
            out.append("".join(cur).strip())
            cur = []
        else:
            cur.append(ch)
        i += 1
    out.append("".join(cur).strip())
    return out


def normalize_header(cell: str) -> str:
    """`Metafield: custom.country` -> `custom.country`; others trimmed."""
    trimmed = cell.strip()
    if trimmed.lower().startswith(METAFIELD_PREFIX):
        return trimmed[len(METAFIELD_PREFIX):].strip()
    return trimmed


def read_rows(text: str, delimiter: str = ",") -> Iterator[RowData]:
    """Yield RowData for each non-blank data line, in source order.

    Empty input (or header only) yields nothing.
    """
    columns: list[str] | None = None
    row_number = 0
    for line in _LINE_SPLIT.split(text):
        if not line.strip():
            continue
        fields = split_fields(line, delimiter)
        if columns is None:
            columns = [normalize_header(c) for c in fields]
            continue
        row_number += 1
        if len(fields) < len(columns):
            fields = fields + [""] * (len(columns) - len(fields))
        # 重複列名は後勝ち
        values = {col: val for col, val in zip(columns, fields)}
        yield RowData(row_number=row_number, values=values)
