from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Iterable

from ..logging.error_log import ErrorLogBuffer, ErrorRecord
from ..models.row_data import RowData
from ..models.run_outcome import RunOutcome, RunOutcomeAccumulator
from ..shopify.client import TransportError
from .field_mapper import map_row
from .progress import RowProgressTracker
from .resolver import AdminTransport, lookup_product
from .writer import write_attributes

"""Run coordination for the metafield sync pipeline.

sync_rows() drives rows one at a time in source order:

1. blank handle -> skipped
2. productByHandle; transport error or not found -> failed
3. map columns; nothing to write -> skipped
4. metafieldsSet -> updated / failed

A failing row never stops the run. Consecutive write attempts are separated
by a fixed pacing delay; rows that end before a write spend no delay. A set
stop_event ends the run before the next row starts.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "NOT_FOUND_MESSAGE",
    "sync_rows",
]

NOT_FOUND_MESSAGE = "Product not found by handle"


class _RowFailed(Exception):
    def __init__(self, message: str, error_type: str) -> None:
        super().__init__(message)
        self.message = message
        self.error_type = error_type


def sync_rows(
    rows: Iterable[RowData],
    client: AdminTransport,
    *,
    source_name: str = "",
    pacing_seconds: float = 0.3,
    dry_run: bool = False,
    error_log: ErrorLogBuffer | None = None,
    stop_event: threading.Event | None = None,
    sleep: Callable[[float], None] = time.sleep,
    progress_enabled: bool | None = None,
) -> RunOutcome:
    """Synchronize every row's metafields and return the run outcome.

    Args:
        rows: Normalized rows in source order (consumed once)
        client: Admin API transport used for lookup and write
        source_name: Input file name recorded in the error log
        pacing_seconds: Delay between consecutive write attempts
        dry_run: Resolve and map, but do not call metafieldsSet
        error_log: Buffer receiving one ErrorRecord per failed row
        stop_event: Checked before each row; when set the run ends early
        sleep: Injected for tests
        progress_enabled: Force the tqdm bar on/off (None = TTY detection)

    Returns:
        Frozen RunOutcome; exactly one classification per processed row
    """
    outcome = RunOutcomeAccumulator()
    aborted = False
    wrote_before = False

    with RowProgressTracker(enabled=progress_enabled) as progress:
        for row in rows:
            if stop_event is not None and stop_event.is_set():
                logger.warning("stop requested, ending run before row %d", row.row_number)
                aborted = True
                break

            handle = row.handle
            progress.start_row(handle)

            if not handle:
                logger.info("Skip row %d: no Handle", row.row_number)
                outcome.record_skipped(row.row_number, handle, "no handle")
                progress.finish_row()
                continue

            try:
                lookup = lookup_product(client, handle)
                if not lookup.found:
                    raise _RowFailed(NOT_FOUND_MESSAGE, "PRODUCT_NOT_FOUND")

                templates = map_row(row)
                if not templates:
                    logger.info("No metafields for %s", handle)
                    outcome.record_skipped(row.row_number, handle, "no metafields")
                    continue

                attributes = [t.bind(lookup.owner_id) for t in templates]  # type: ignore[arg-type]
                keys = ", ".join(f"{a.namespace}.{a.key}" for a in attributes)

                if dry_run:
                    logger.info("DRY RUN: would update %s: %s", handle, keys)
                    outcome.record_updated(row.row_number, handle)
                    continue

                if wrote_before and pacing_seconds > 0:
                    sleep(pacing_seconds)
                wrote_before = True

                result = write_attributes(client, attributes)
                if not result.ok:
                    raise _RowFailed(result.message or "metafieldsSet failed", result.error_type or "MUTATION_ERROR")

                logger.info("Updated %s: %s", handle, keys)
                outcome.record_updated(row.row_number, handle)

            except _RowFailed as e:
                _record_failure(outcome, error_log, source_name, row, handle, e.error_type, e.message)
            except TransportError as e:
                # lookup 段階の通信/プロトコルエラー
                _record_failure(outcome, error_log, source_name, row, handle, "LOOKUP_ERROR", f"Lookup error: {e}")
            except Exception as e:
                logger.debug("unexpected error row=%d", row.row_number, exc_info=True)
                _record_failure(outcome, error_log, source_name, row, handle, "UNEXPECTED_ERROR", f"Unexpected error: {e}")
            finally:
                progress.finish_row()
                progress.set_postfix(updated=outcome.updated, skipped=outcome.skipped, failed=outcome.failed)

    return outcome.finish(aborted=aborted)


def _record_failure(
    outcome: RunOutcomeAccumulator,
    error_log: ErrorLogBuffer | None,
    source_name: str,
    row: RowData,
    handle: str,
    error_type: str,
    message: str,
) -> None:
    logger.error("%s: %s", handle, message)
    outcome.record_failed(row.row_number, handle, message)
    if error_log is not None:
        error_log.append(
            ErrorRecord.create(
                source=source_name,
                row=row.row_number,
                handle=handle,
                error_type=error_type,
                message=message,
            )
        )
