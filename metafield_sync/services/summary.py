from __future__ import annotations

from ..models.run_outcome import RunOutcome

"""Summary line rendering for the sync run.

Format:
SUMMARY rows={total} updated={updated} skipped={skipped} failed={failed} elapsed_sec={elapsed}
"""


def _format_seconds(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # Format very small numbers to avoid scientific notation
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.2f}".rstrip("0").rstrip(".")


def render_summary_line(outcome: RunOutcome) -> str:
    """Render the SUMMARY line for a finished run.

    Examples:
        >>> from datetime import datetime, timezone
        >>> t = datetime(2024, 1, 1, tzinfo=timezone.utc)
        >>> o = RunOutcome(updated=2, skipped=1, failed=0, failures=(), results=(),
        ...                start_time=t, end_time=t, elapsed_seconds=1.5)
        >>> render_summary_line(o)
        'SUMMARY rows=3 updated=2 skipped=1 failed=0 elapsed_sec=1.5'
    """
    line = (
        f"SUMMARY rows={outcome.total_rows} "
        f"updated={outcome.updated} "
        f"skipped={outcome.skipped} "
        f"failed={outcome.failed} "
        f"elapsed_sec={_format_seconds(outcome.elapsed_seconds)}"
    )
    if outcome.aborted:
        line += " aborted=1"
    return line


def render_failure_lines(outcome: RunOutcome) -> list[str]:
    """One `<handle>: <message>` line per failed row, in row order."""
    return [f"{f.handle}: {f.message}" for f in outcome.failures]
