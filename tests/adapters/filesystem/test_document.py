from __future__ import annotations

import pytest
import yaml

from catalogsync.adapters.filesystem.document import (
    entity_from_document,
    parse_document,
    render_document,
)
from catalogsync.domain.errors import CorruptDocumentError
from catalogsync.domain.model import CatalogEntity, EntityKind, MessageType, Relationships
from tests.helpers.revisions import ref


def _entity() -> CatalogEntity:
    return CatalogEntity(
        id="OrderService",
        kind=EntityKind.SERVICE,
        version="1.2.0",
        user_fields={"markdown": "Hand written", "owners": ["orders-team"]},
        source_fields={"name": "Order service", "specifications": {"openapiPath": "api.yml"}},
        relationships=Relationships(
            sends=(ref("OrderPlaced", "1"),),
            receives=(ref("PlaceOrder"),),
            writes_to=(ref("orders-db"),),
            parent_domain=ref("Orders"),
        ),
        sequence_hint=4,
        source_hash="abc",
    )


def test_render_document_lays_out_frontmatter_and_body() -> None:
    text = render_document(_entity())

    assert text.startswith("---\nid: OrderService\nversion: 1.2.0\n")
    assert text.endswith("---\n\nHand written\n")
    front, body = parse_document(text)
    assert body == "Hand written"
    assert list(front)[:5] == ["id", "version", "owners", "name", "specifications"]
    assert front["sends"] == [{"id": "OrderPlaced", "version": "1"}]
    assert front["receives"] == [{"id": "PlaceOrder"}]
    assert front["writesTo"] == [{"id": "orders-db"}]
    assert "channels" not in front
    assert "markdown" not in front
    assert front["reconciliation"] == {
        "kind": "service",
        "sourceKeys": ["name", "specifications"],
        "sourceHash": "abc",
        "sequenceHint": 4,
        "domain": {"id": "Orders"},
    }


def test_rendered_document_reads_back_into_the_same_entity() -> None:
    entity = _entity()

    front, body = parse_document(render_document(entity))
    restored = entity_from_document(front, body, kind=EntityKind.SERVICE, message_type=None)

    assert restored.user_fields == entity.user_fields
    assert restored.source_fields == entity.source_fields
    assert restored.relationships == entity.relationships
    assert restored.sequence_hint == 4
    assert restored.source_hash == "abc"


def test_hand_written_document_classifies_fields_by_name() -> None:
    text = (
        "---\n"
        "id: OrderPlaced\n"
        "version: 1\n"
        "name: Order placed\n"
        "summary: Written by hand\n"
        "badges: []\n"
        "---\n"
        "\n"
        "Some docs\n"
    )

    front, body = parse_document(text)
    entity = entity_from_document(
        front, body, kind=EntityKind.MESSAGE, message_type=MessageType.EVENT
    )

    assert entity.version == "1"
    assert entity.source_fields == {"name": "Order placed"}
    assert entity.user_fields == {
        "summary": "Written by hand",
        "badges": [],
        "markdown": "Some docs",
    }
    assert entity.source_hash is None


def test_document_without_body_has_empty_markdown() -> None:
    entity = CatalogEntity(id="orders", kind=EntityKind.CHANNEL, version="1")

    text = render_document(entity)
    front, body = parse_document(text)

    assert text.endswith("---\n")
    assert body == ""
    assert front["reconciliation"]["kind"] == "channel"  # type: ignore[index]


@pytest.mark.parametrize(
    "text",
    [
        "no frontmatter here",
        "---\nid: [unclosed\n---\n",
        "---\n- just\n- a list\n---\n",
    ],
)
def test_parse_document_rejects_malformed_frontmatter(text: str) -> None:
    with pytest.raises(CorruptDocumentError):
        parse_document(text)


def test_kind_mismatch_is_reported_as_corrupt() -> None:
    front, body = parse_document(render_document(_entity()))

    with pytest.raises(CorruptDocumentError, match="declares service"):
        entity_from_document(front, body, kind=EntityKind.DOMAIN, message_type=None)


def test_missing_version_is_reported_as_corrupt() -> None:
    with pytest.raises(CorruptDocumentError, match="Invalid frontmatter"):
        entity_from_document({"id": "x"}, "", kind=EntityKind.CHANNEL, message_type=None)


def test_invalid_id_is_reported_as_corrupt() -> None:
    with pytest.raises(CorruptDocumentError):
        entity_from_document(
            {"id": "../escape", "version": "1"}, "", kind=EntityKind.CHANNEL, message_type=None
        )


def test_unquoted_decimal_version_is_reported_as_corrupt() -> None:
    front, body = parse_document("---\nid: orders\nversion: 1.10\n---\n")

    with pytest.raises(CorruptDocumentError, match="quote it as a string"):
        entity_from_document(front, body, kind=EntityKind.CHANNEL, message_type=None)


def test_decimal_looking_version_survives_a_write() -> None:
    entity = CatalogEntity(id="orders", kind=EntityKind.CHANNEL, version="1.10")

    front, body = parse_document(render_document(entity))
    restored = entity_from_document(front, body, kind=EntityKind.CHANNEL, message_type=None)

    assert restored.version == "1.10"


def test_yaml_output_is_block_style() -> None:
    text = render_document(_entity())
    header = text.split("---\n")[1]

    assert yaml.safe_load(header)["owners"] == ["orders-team"]
    assert "- orders-team" in header
