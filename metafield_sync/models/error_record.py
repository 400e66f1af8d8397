from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for the per-row error log.

Each failed row becomes one JSON Lines record with a fixed key set
(timestamp, source, row, handle, error_type, message). row=-1 marks a
run-level error where no row applies (e.g. source file not found).
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        source: Input file name (local path name or remote file name)
        row: Data row number (1-based). -1 for run-level errors
        handle: Product handle of the row ("" when unknown)
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Error message reported for the row
    """
    timestamp: str  # ISO8601 UTC
    source: str
    row: int  # 不明な場合 -1
    handle: str
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(source: str, row: int, handle: str, error_type: str, message: str) -> ErrorRecord:
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            source=source,
            row=row,
            handle=handle,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        # 追加キー阻止: dataclass -> dict して json.dumps
        return json.dumps(asdict(self), ensure_ascii=False)
