from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any

"""Run outcome models for the metafield sync pipeline.

RunOutcomeAccumulator is owned by the run coordinator and mutated once per
row; finish() freezes it into a RunOutcome which is what callers (CLI, HTTP
endpoint) report.
"""

__all__ = [
    "RowStatus",
    "RowResult",
    "RowFailure",
    "RunOutcome",
    "RunOutcomeAccumulator",
]


class RowStatus(Enum):
    """Terminal classification of a row.

    - UPDATED: metafieldsSet succeeded without user errors
    - SKIPPED: no handle, or no mappable non-empty values
    - FAILED: lookup / mutation error, product not found, or user errors
    """
    UPDATED = "updated"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class RowResult:
    row_number: int
    handle: str
    status: RowStatus
    message: str | None = None  # failure / skip reason


@dataclass(frozen=True)
class RowFailure:
    handle: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"handle": self.handle, "message": self.message}


@dataclass(frozen=True)
class RunOutcome:
    """Final, immutable result of one sync run."""
    updated: int
    skipped: int
    failed: int
    failures: tuple[RowFailure, ...]
    results: tuple[RowResult, ...]  # 行順 (source order)
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    aborted: bool = False  # stop requested between rows

    @property
    def total_rows(self) -> int:
        return self.updated + self.skipped + self.failed

    def status_by_handle(self) -> dict[str, RowStatus]:
        """Last classification per non-empty handle."""
        return {r.handle: r.status for r in self.results if r.handle}

    def to_report(self) -> dict[str, Any]:
        """JSON report shape used by the HTTP endpoint."""
        return {
            "ok": True,
            "updated": self.updated,
            "skipped": self.skipped,
            "errors": [f.to_dict() for f in self.failures],
        }


class RunOutcomeAccumulator:
    """Mutable per-run counters. One record_* call per row."""

    def __init__(self) -> None:
        self.start_time = datetime.now(UTC)
        self.updated = 0
        self.skipped = 0
        self.failed = 0
        self.failures: list[RowFailure] = []
        self.results: list[RowResult] = []
        self._finished = False

    def _check_open(self) -> None:
        if self._finished:
            raise RuntimeError("run outcome already finished")

    def record_updated(self, row_number: int, handle: str) -> None:
        self._check_open()
        self.updated += 1
        self.results.append(RowResult(row_number, handle, RowStatus.UPDATED))

    def record_skipped(self, row_number: int, handle: str, reason: str) -> None:
        self._check_open()
        self.skipped += 1
        self.results.append(RowResult(row_number, handle, RowStatus.SKIPPED, reason))

    def record_failed(self, row_number: int, handle: str, message: str) -> None:
        self._check_open()
        self.failed += 1
        self.failures.append(RowFailure(handle=handle, message=message))
        self.results.append(RowResult(row_number, handle, RowStatus.FAILED, message))

    def finish(self, *, aborted: bool = False) -> RunOutcome:
        self._check_open()
        self._finished = True
        end_time = datetime.now(UTC)
        return RunOutcome(
            updated=self.updated,
            skipped=self.skipped,
            failed=self.failed,
            failures=tuple(self.failures),
            results=tuple(self.results),
            start_time=self.start_time,
            end_time=end_time,
            elapsed_seconds=(end_time - self.start_time).total_seconds(),
            aborted=aborted,
        )
