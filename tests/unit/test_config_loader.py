from __future__ import annotations

from pathlib import Path

import pytest

from metafield_sync.config.loader import ConfigError, load_config, load_settings, normalize_store_domain
from metafield_sync.models.config_models import SyncConfig

ENV = {
    "SHOPIFY_STORE_DOMAIN": "test-shop",
    "SHOPIFY_ADMIN_API_ACCESS_TOKEN": "shpat_test",
    "SHOPIFY_ADMIN_API_VERSION": "2024-10",
}


@pytest.mark.parametrize(
    "raw",
    ["test-shop", "test-shop.myshopify.com", "https://test-shop.myshopify.com/", " test-shop "],
)
def test_normalize_store_domain(raw):
    assert normalize_store_domain(raw) == "test-shop.myshopify.com"


def test_normalize_store_domain_keeps_custom_host():
    assert normalize_store_domain("https://shop.example.com/") == "shop.example.com"


def test_load_settings_ok():
    s = load_settings(dict(ENV, INTERNAL_SYNC_TOKEN="secret"))
    assert s.store_domain == "test-shop.myshopify.com"
    assert s.graphql_endpoint == "https://test-shop.myshopify.com/admin/api/2024-10/graphql.json"
    assert s.sync_token == "secret"


def test_load_settings_token_optional():
    assert load_settings(ENV).sync_token is None


def test_load_settings_reports_every_missing_variable():
    env = {"SHOPIFY_STORE_DOMAIN": "test-shop", "SHOPIFY_ADMIN_API_VERSION": "  "}
    with pytest.raises(ConfigError) as ei:
        load_settings(env)
    assert str(ei.value) == (
        "missing environment variables: SHOPIFY_ADMIN_API_ACCESS_TOKEN, SHOPIFY_ADMIN_API_VERSION"
    )


def test_load_config_defaults_when_default_file_missing(temp_workdir: Path):
    assert load_config() == SyncConfig()
    assert SyncConfig().pacing_seconds == 0.3


def test_load_config_from_default_location(write_config: Path):
    cfg = load_config()
    assert cfg.pacing_ms == 0
    assert cfg.max_attempts == 1
    assert cfg.exact_match_limit == 5


def test_load_config_explicit_missing_path(temp_workdir: Path):
    with pytest.raises(ConfigError, match="config file not found"):
        load_config(Path("nope.yml"))


def test_load_config_empty_file_gives_defaults(temp_workdir: Path):
    p = temp_workdir / "config" / "sync.yml"
    p.write_text("", encoding="utf-8")
    assert load_config(p) == SyncConfig()


@pytest.mark.parametrize(
    "body",
    [
        "unknown_key: 1\n",
        "pacing_ms: -5\n",
        "delimiter: ';;'\n",
        "max_attempts: many\n",
    ],
)
def test_load_config_schema_violations(temp_workdir: Path, body: str):
    p = temp_workdir / "config" / "sync.yml"
    p.write_text(body, encoding="utf-8")
    with pytest.raises(ConfigError, match="config validation failed"):
        load_config(p)


def test_load_config_invalid_yaml(temp_workdir: Path):
    p = temp_workdir / "config" / "sync.yml"
    p.write_text("pacing_ms: [1, 2\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="invalid yaml"):
        load_config(p)


def test_load_config_root_must_be_mapping(temp_workdir: Path):
    p = temp_workdir / "config" / "sync.yml"
    p.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="mapping"):
        load_config(p)
