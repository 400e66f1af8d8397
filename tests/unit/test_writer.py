from __future__ import annotations

import json

import pytest

from metafield_sync.models.attribute import ResolvedAttribute, ValueKind
from metafield_sync.services.writer import write_attributes
from metafield_sync.shopify.client import GraphQLError, HttpStatusError

OWNER = "gid://shopify/Product/10"


def _attrs() -> list[ResolvedAttribute]:
    return [
        ResolvedAttribute(OWNER, "custom", "country", ValueKind.SHORT_TEXT, "Japan"),
        ResolvedAttribute(OWNER, "custom", "allergens", ValueKind.LONG_TEXT, "Barley"),
    ]


def test_write_success_single_call(fake_client_cls):
    client = fake_client_cls()
    result = write_attributes(client, _attrs())
    assert result.ok
    assert client.count("write") == 1
    assert [m["key"] for m in client.written[0]] == ["country", "allergens"]
    assert client.written[0][1]["type"] == "multi_line_text_field"


def test_write_empty_rejected(fake_client_cls):
    with pytest.raises(ValueError):
        write_attributes(fake_client_cls(), [])


def test_write_user_errors_serialized(fake_client_cls):
    errors = [{"field": ["metafields", "0", "value"], "message": "値が長すぎます"}]
    client = fake_client_cls(user_errors={OWNER: errors})
    result = write_attributes(client, _attrs())
    assert not result.ok
    assert result.error_type == "USER_ERRORS"
    assert json.loads(result.message) == errors
    # 非 ASCII はそのまま
    assert "値が長すぎます" in result.message


@pytest.mark.parametrize(
    "exc",
    [HttpStatusError(502, "Bad Gateway"), GraphQLError([{"message": "Throttled"}])],
)
def test_write_transport_error(fake_client_cls, exc):
    client = fake_client_cls(mutation_errors={OWNER: exc})
    result = write_attributes(client, _attrs())
    assert not result.ok
    assert result.error_type == "MUTATION_ERROR"
    assert result.message == f"Mutation error: {exc}"


def test_write_missing_payload_is_mutation_error():
    class NoPayload:
        def request(self, query, variables=None):
            return {}

    result = write_attributes(NoPayload(), _attrs())
    assert not result.ok
    assert result.error_type == "MUTATION_ERROR"
    assert result.message.startswith("Mutation error: ")
