from __future__ import annotations

import argparse
import signal
import sys
import threading
from pathlib import Path

from dotenv import load_dotenv

from ..config.loader import ConfigError, load_config, load_settings
from ..logging.error_log import ErrorLogBuffer
from ..logging.init import log_summary, setup_logging
from ..models.attribute import DefinitionTableError, validate_definitions
from ..services.coordinator import sync_rows
from ..services.source import SourceReadError, read_local_source
from ..services.summary import render_failure_lines, render_summary_line
from ..shopify.client import ShopifyAdminClient
from ..tabular.reader import read_rows

"""CLI entrypoint: import metafields from a local CSV file.

Flow:
- Load .env, validate Shopify settings and the attribute table
- Read the file, stream rows through the run coordinator
- Print SUMMARY and one ERROR line per failed row

Exit codes reflect invocation errors only; failed rows still exit 0.
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1

USAGE = "usage: metafield-sync [--debug] [--dry-run] [--inspect-data] [--config PATH] CSV_PATH"


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env using python-dotenv (values override the process environment)."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="metafield-sync", description="CSV -> Shopify product metafields importer"
    )
    p.add_argument("csv_path", nargs="?", help="Path to the CSV file")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--dry-run", action="store_true", help="Resolve and map rows without writing")
    p.add_argument(
        "--inspect-data", action="store_true", help="Print normalized headers & first rows then exit"
    )
    p.add_argument("--config", type=Path, default=None, help="Run policy YAML (default: config/sync.yml)")
    return p.parse_args(argv)


def _inspect_data(text: str, delimiter: str, limit: int = 3) -> int:
    rows = read_rows(text, delimiter)
    first = next(rows, None)
    if first is None:
        print("inspect: no data rows")
        return EXIT_SUCCESS
    print(f"  columns={list(first.values.keys())}")
    sample = [first]
    for row in rows:
        if len(sample) >= limit:
            break
        sample.append(row)
    for row in sample:
        print(f"    row={row.row_number} handle={row.handle!r} values={row.values}")
    return EXIT_SUCCESS


def _install_stop_handler(stop_event: threading.Event):
    """SIGTERM stops the run between rows. Returns the previous handler."""
    def _handler(signum, frame):  # noqa: ARG001
        stop_event.set()

    try:
        return signal.signal(signal.SIGTERM, _handler)
    except ValueError:  # pragma: no cover - not in main thread
        return None


def main(argv: list[str] | None = None) -> int:
    # None のときのみ sys.argv を読む (テストから [] を渡すケース)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)
    if args.debug:
        logger.debug("debug mode enabled")

    if not args.csv_path:
        print(USAGE, file=sys.stderr)
        return EXIT_FATAL

    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    csv_path = Path(args.csv_path)
    try:
        text = read_local_source(csv_path)
    except SourceReadError as e:
        logger.error(f"source: {e}")
        return EXIT_FATAL

    if args.inspect_data:
        return _inspect_data(text, cfg.delimiter)

    _load_env_file(Path(".env"), override=True)
    try:
        settings = load_settings()
        validate_definitions()
    except (ConfigError, DefinitionTableError) as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    logger.info(f"Processing {csv_path} -> {settings.store_domain}")

    stop_event = threading.Event()
    previous_handler = _install_stop_handler(stop_event)
    error_log = ErrorLogBuffer()
    client = ShopifyAdminClient(
        settings, timeout=cfg.request_timeout_sec, max_attempts=cfg.max_attempts
    )
    try:
        outcome = sync_rows(
            read_rows(text, cfg.delimiter),
            client,
            source_name=csv_path.name,
            pacing_seconds=cfg.pacing_seconds,
            dry_run=args.dry_run,
            error_log=error_log,
            stop_event=stop_event,
        )
    finally:
        client.close()
        if previous_handler is not None:
            signal.signal(signal.SIGTERM, previous_handler)

    try:
        log_path = error_log.flush()
        if log_path is not None:
            logger.info(f"error log: {log_path}")
    except OSError as e:
        logger.warning(f"failed to write error log: {e}")

    for line in render_failure_lines(outcome):
        logger.error(line)
    # render_summary_line は "SUMMARY " 付きなので除去して SUMMARY レベルで出力
    log_summary(render_summary_line(outcome)[len("SUMMARY "):])
    return EXIT_SUCCESS


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
