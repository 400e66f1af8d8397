from __future__ import annotations

import json
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import ShopifySettings, SyncConfig

"""Config loader.

Responsibilities:
- Read Shopify Admin settings from the environment (required)
- Load the optional YAML run-policy file (config/sync.yml)
- Validate the YAML against the bundled JSON schema and apply defaults
"""

__all__ = [
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "REQUIRED_ENV",
    "load_settings",
    "load_config",
    "normalize_store_domain",
]

SCHEMA_PATH = Path(__file__).parent / "sync_schema.json"
DEFAULT_CONFIG_PATH = Path("config/sync.yml")

ENV_STORE_DOMAIN = "SHOPIFY_STORE_DOMAIN"
ENV_ACCESS_TOKEN = "SHOPIFY_ADMIN_API_ACCESS_TOKEN"
ENV_API_VERSION = "SHOPIFY_ADMIN_API_VERSION"
ENV_SYNC_TOKEN = "INTERNAL_SYNC_TOKEN"

REQUIRED_ENV = (ENV_STORE_DOMAIN, ENV_ACCESS_TOKEN, ENV_API_VERSION)


class ConfigError(Exception):
    pass


def normalize_store_domain(domain: str) -> str:
    """Normalize a store domain.

    A bare shop name ("my-store") gets ".myshopify.com" appended; scheme and
    trailing slash are stripped. Dotted hosts are kept as given.
    """
    domain = domain.strip().replace("https://", "").replace("http://", "").rstrip("/")
    if "." not in domain:
        domain = f"{domain}.myshopify.com"
    return domain


def load_settings(environ: Mapping[str, str] | None = None) -> ShopifySettings:
    """Build ShopifySettings from the environment.

    Raises:
        ConfigError: one or more required variables are missing or blank
    """
    env = os.environ if environ is None else environ
    missing = [name for name in REQUIRED_ENV if not (env.get(name) or "").strip()]
    if missing:
        raise ConfigError(f"missing environment variables: {', '.join(missing)}")
    sync_token = (env.get(ENV_SYNC_TOKEN) or "").strip() or None
    return ShopifySettings(
        store_domain=normalize_store_domain(env[ENV_STORE_DOMAIN]),
        access_token=env[ENV_ACCESS_TOKEN].strip(),
        api_version=env[ENV_API_VERSION].strip(),
        sync_token=sync_token,
    )


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the bundled JSON schema.

    Raises:
        ConfigError: schema file missing / not JSON, or the data violates it
            (unknown keys, wrong types, out-of-range values).
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def load_config(path: Path | None = None) -> SyncConfig:
    """Load run policy from YAML.

    path=None means the default location; a missing default file yields the
    defaults. An explicitly given path must exist.
    """
    if path is None:
        path = DEFAULT_CONFIG_PATH
        if not path.exists():
            return SyncConfig()
    elif not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping: {path}")

    _validate_config_schema(data)

    defaults = SyncConfig()
    return SyncConfig(
        pacing_ms=data.get("pacing_ms", defaults.pacing_ms),
        source_file_name=data.get("source_file_name", defaults.source_file_name),
        exact_match_limit=data.get("exact_match_limit", defaults.exact_match_limit),
        fallback_file_limit=data.get("fallback_file_limit", defaults.fallback_file_limit),
        request_timeout_sec=float(data.get("request_timeout_sec", defaults.request_timeout_sec)),
        max_attempts=data.get("max_attempts", defaults.max_attempts),
        delimiter=data.get("delimiter", defaults.delimiter),
    )
