from __future__ import annotations

from dataclasses import dataclass

"""Config dataclasses for the metafield sync tool.

ShopifySettings comes from the environment (required at startup), SyncConfig
from the optional YAML policy file. Loading lives in metafield_sync.config.loader.
"""


@dataclass(frozen=True)
class ShopifySettings:
    """Admin API credentials and endpoint (environment only)."""
    store_domain: str  # normalized: "<shop>.myshopify.com"
    access_token: str
    api_version: str  # e.g. "2024-10"
    sync_token: str | None = None  # HTTP endpoint shared secret (INTERNAL_SYNC_TOKEN)

    @property
    def graphql_endpoint(self) -> str:
        return f"https://{self.store_domain}/admin/api/{self.api_version}/graphql.json"


@dataclass(frozen=True)
class SyncConfig:
    """Run policy knobs. Every field has a default so the YAML file is optional."""
    pacing_ms: int = 300  # delay between consecutive write attempts
    source_file_name: str = "beer.csv"  # remote file used by the HTTP endpoint
    exact_match_limit: int = 5
    fallback_file_limit: int = 100
    request_timeout_sec: float = 30.0
    max_attempts: int = 3  # transport retries (total attempts)
    delimiter: str = ","

    @property
    def pacing_seconds(self) -> float:
        return self.pacing_ms / 1000.0
