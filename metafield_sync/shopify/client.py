"""
Shopify Admin GraphQL transport with retries and error classification
"""
from __future__ import annotations

import logging
from typing import Any

import requests
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..models.config_models import ShopifySettings

logger = logging.getLogger(__name__)

__all__ = [
    "TransportError",
    "ConnectionFailure",
    "HttpStatusError",
    "GraphQLError",
    "MalformedResponseError",
    "ShopifyAdminClient",
]

BODY_EXCERPT = 500


class TransportError(Exception):
    """Base class for every failure of a remote call."""


class ConnectionFailure(TransportError):
    """Connection error or timeout, after retries."""


class HttpStatusError(TransportError):
    def __init__(self, status: int, body: str) -> None:
        super().__init__(f"Shopify Admin HTTP {status}: {body}")
        self.status = status
        self.body = body


class GraphQLError(TransportError):
    def __init__(self, errors: Any) -> None:
        if isinstance(errors, list):
            msg = " | ".join(
                str(e.get("message", e)) if isinstance(e, dict) else str(e) for e in errors
            )
        else:
            msg = str(errors)
        super().__init__(f"Shopify Admin GraphQL error: {msg}")
        self.errors = errors


class MalformedResponseError(TransportError):
    pass


class _RetryableStatus(Exception):
    """429 / 5xx response; retried, converted to HttpStatusError when exhausted."""

    def __init__(self, response: requests.Response) -> None:
        super().__init__(f"HTTP {response.status_code}")
        self.response = response


_RETRY_ON = (requests.ConnectionError, requests.Timeout, _RetryableStatus)


class ShopifyAdminClient:
    """
    Blocking Admin API client: request(query, variables) -> data.

    Every call bypasses caches (no-cache headers). Connection errors,
    timeouts, 429 and 5xx responses are retried with exponential backoff up
    to max_attempts total attempts.
    """

    def __init__(
        self,
        settings: ShopifySettings,
        *,
        timeout: float = 30.0,
        max_attempts: int = 3,
        backoff_sec: float = 1.0,
        session: requests.Session | None = None,
    ) -> None:
        self.settings = settings
        self.endpoint = settings.graphql_endpoint
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.backoff_sec = backoff_sec
        self.session = session or requests.Session()

        self.headers = {
            "X-Shopify-Access-Token": settings.access_token,
            "Content-Type": "application/json",
            "Accept": "application/json",
            "Cache-Control": "no-cache",
            "Pragma": "no-cache",
        }
        logger.debug("admin client endpoint=%s", self.endpoint)

    def _retrying(self) -> Retrying:
        return Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.backoff_sec, max=10),
            retry=retry_if_exception_type(_RETRY_ON),
            reraise=True,
        )

    def _send(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        try:
            for attempt in self._retrying():
                with attempt:
                    n = attempt.retry_state.attempt_number
                    if n > 1:
                        logger.warning("retrying %s %s (attempt %d/%d)", method, url, n, self.max_attempts)
                    response = self.session.request(method, url, timeout=self.timeout, **kwargs)
                    if response.status_code == 429 or response.status_code >= 500:
                        raise _RetryableStatus(response)
        except _RetryableStatus as e:
            resp = e.response
            raise HttpStatusError(resp.status_code, resp.text[:BODY_EXCERPT]) from e
        except requests.RequestException as e:
            raise ConnectionFailure(f"Request failed: {e}") from e
        if not response.ok:
            raise HttpStatusError(response.status_code, response.text[:BODY_EXCERPT])
        return response

    def request(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """POST a GraphQL document and return its `data` object.

        Raises:
            TransportError: ConnectionFailure, HttpStatusError, GraphQLError
                or MalformedResponseError
        """
        response = self._send(
            "POST",
            self.endpoint,
            json={"query": query, "variables": variables or {}},
            headers=self.headers,
        )
        try:
            payload = response.json()
        except ValueError as e:
            raise MalformedResponseError(f"Shopify Admin: invalid JSON response: {e}") from e
        if not isinstance(payload, dict):
            raise MalformedResponseError("Shopify Admin: unexpected response shape")
        errors = payload.get("errors")
        if errors:
            raise GraphQLError(errors)
        data = payload.get("data")
        if not isinstance(data, dict):
            raise MalformedResponseError("Shopify Admin: empty response data")
        return data

    def fetch_bytes(self, url: str) -> bytes:
        """Download a file (CDN URL) without using any cache."""
        response = self._send(
            "GET",
            url,
            headers={"Cache-Control": "no-cache", "Pragma": "no-cache"},
        )
        return response.content

    def close(self) -> None:
        self.session.close()
