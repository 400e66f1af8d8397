"""
server.app - HTTP trigger for the metafield sync.

GET /api/metafields?token=...

Locates the configured source file in Shopify Files, downloads it and runs
the same coordinator as the CLI. Runs are serial per process: a request
arriving while another run is in progress gets 409 instead of starting a
second run against the same store.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from pathlib import Path

from dotenv import load_dotenv
from flask import Blueprint, Flask, current_app, jsonify, request

from ..config.loader import ConfigError, load_config, load_settings
from ..logging.error_log import ErrorLogBuffer
from ..logging.init import setup_logging
from ..models.attribute import validate_definitions
from ..models.config_models import ShopifySettings, SyncConfig
from ..models.error_record import ErrorRecord
from ..services.coordinator import sync_rows
from ..services.resolver import SourceNotFoundError
from ..services.source import FileFetcher, read_remote_source
from ..services.summary import render_summary_line
from ..shopify.client import ShopifyAdminClient
from ..tabular.reader import read_rows

logger = logging.getLogger(__name__)

sync_bp = Blueprint("sync", __name__, url_prefix="/api")

# 同時実行は 1 本まで (Shopify のレート制限はストア単位)
_run_lock = threading.Lock()

ClientFactory = Callable[[ShopifySettings, SyncConfig], FileFetcher]


def _default_client_factory(settings: ShopifySettings, cfg: SyncConfig) -> FileFetcher:
    return ShopifyAdminClient(
        settings, timeout=cfg.request_timeout_sec, max_attempts=cfg.max_attempts
    )


def _authorized(settings: ShopifySettings) -> bool:
    if not settings.sync_token:
        return True
    return request.args.get("token") == settings.sync_token


@sync_bp.route("/metafields", methods=["GET"])
def run_metafield_sync():
    settings: ShopifySettings = current_app.config["SHOPIFY_SETTINGS"]
    cfg: SyncConfig = current_app.config["SYNC_CONFIG"]
    factory: ClientFactory = current_app.config["CLIENT_FACTORY"]

    if not _authorized(settings):
        return jsonify({"ok": False, "error": "Unauthorized"}), 401

    if not _run_lock.acquire(blocking=False):
        logger.warning("sync already running, request rejected")
        return jsonify({"ok": False, "error": "sync already running"}), 409
    try:
        return _run_sync(settings, cfg, factory)
    finally:
        _run_lock.release()


def _run_sync(settings: ShopifySettings, cfg: SyncConfig, factory: ClientFactory):
    error_log = ErrorLogBuffer()
    client = factory(settings, cfg)
    try:
        try:
            url, text = read_remote_source(
                client,
                cfg.source_file_name,
                exact_limit=cfg.exact_match_limit,
                fallback_limit=cfg.fallback_file_limit,
            )
        except SourceNotFoundError as e:
            logger.error("source: %s (candidates=%d)", e, len(e.candidates))
            error_log.append(ErrorRecord.create(cfg.source_file_name, -1, "", "SOURCE_NOT_FOUND", str(e)))
            return jsonify({"ok": False, "error": str(e), "candidates": e.candidates}), 404

        outcome = sync_rows(
            read_rows(text, cfg.delimiter),
            client,
            source_name=cfg.source_file_name,
            pacing_seconds=cfg.pacing_seconds,
            error_log=error_log,
            progress_enabled=False,
        )
        logger.info("source url=%s", url)
        logger.info(render_summary_line(outcome))
        return jsonify(outcome.to_report())
    except Exception as e:
        logger.exception("metafield sync failed")
        return jsonify({"ok": False, "error": str(e)}), 500
    finally:
        close = getattr(client, "close", None)
        if close is not None:
            close()
        try:
            error_log.flush()
        except OSError as e:
            logger.warning("failed to write error log: %s", e)


def create_app(
    settings: ShopifySettings | None = None,
    sync_config: SyncConfig | None = None,
    client_factory: ClientFactory | None = None,
) -> Flask:
    """Flask application factory.

    Settings default to the environment and config/sync.yml; missing
    environment variables raise ConfigError here, before any request.
    """
    setup_logging()
    validate_definitions()

    app = Flask(__name__)
    app.config["SHOPIFY_SETTINGS"] = settings or load_settings()
    app.config["SYNC_CONFIG"] = sync_config or load_config()
    app.config["CLIENT_FACTORY"] = client_factory or _default_client_factory
    app.register_blueprint(sync_bp)

    @app.errorhandler(404)
    def not_found(_e):
        return jsonify({"ok": False, "error": "not found"}), 404

    return app


def main() -> int:  # pragma: no cover - thin wrapper around the dev server
    env_path = Path(".env")
    if env_path.exists():
        load_dotenv(dotenv_path=env_path, override=True)
    try:
        app = create_app()
    except ConfigError as e:
        setup_logging().error(f"config: {e}")
        return 1
    app.run(host="127.0.0.1", port=8000)
    return 0
