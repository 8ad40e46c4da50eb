from __future__ import annotations

import pytest

from catalogsync.domain.errors import InvalidRevisionError
from catalogsync.domain.model import EntityKind, EntityRef, EntityRevision, MessageType
from tests.helpers.revisions import make_revision


@pytest.mark.parametrize("entity_id", ["", "../escape", "a/b", "a\\b", ".hidden", ".", ".."])
def test_revision_rejects_ids_that_are_not_path_segments(entity_id: str) -> None:
    with pytest.raises(InvalidRevisionError):
        make_revision(entity_id)


def test_invalid_revision_error_is_a_value_error() -> None:
    with pytest.raises(ValueError, match="path separators"):
        make_revision("orders/placed")


def test_revision_rejects_reserved_latest_version() -> None:
    with pytest.raises(InvalidRevisionError, match="reserved"):
        make_revision(version="latest")


def test_message_requires_message_type() -> None:
    with pytest.raises(InvalidRevisionError, match="message type"):
        EntityRevision(id="OrderPlaced", kind=EntityKind.MESSAGE, version="1")


def test_non_message_rejects_message_type() -> None:
    with pytest.raises(InvalidRevisionError):
        EntityRevision(
            id="orders",
            kind=EntityKind.CHANNEL,
            version="1",
            message_type=MessageType.EVENT,
        )


def test_only_services_belong_to_a_domain() -> None:
    with pytest.raises(InvalidRevisionError, match="only services"):
        make_revision(domain=EntityRef("Orders"))


def test_source_fields_cannot_use_reserved_frontmatter_keys() -> None:
    with pytest.raises(InvalidRevisionError, match="reserved"):
        make_revision(fields={"name": "x", "sends": []})


def test_file_names_must_not_shadow_the_document() -> None:
    with pytest.raises(InvalidRevisionError, match="catalog layout"):
        make_revision(files={"index.md": "nope"})


def test_source_hash_ignores_key_order_and_non_source_inputs() -> None:
    first = make_revision(fields={"name": "Order placed", "schemaPath": "schema.json"})
    second = make_revision(
        fields={"schemaPath": "schema.json", "name": "Order placed"},
        latest=False,
        forced={"summary": "forced"},
        notices=("tags unavailable",),
        sequence_hint=3,
    )

    assert first.source_hash == second.source_hash


def test_source_hash_covers_fields_relationships_and_files() -> None:
    base = make_revision(fields={"name": "Order placed"})

    assert make_revision(fields={"name": "Order created"}).source_hash != base.source_hash
    assert make_revision(fields={"name": "Order placed"}, sends=[EntityRef("A")]).source_hash != (
        base.source_hash
    )
    assert make_revision(fields={"name": "Order placed"}, files={"s.json": "{}"}).source_hash != (
        base.source_hash
    )


def test_collections_use_catalog_plural_segments() -> None:
    assert EntityKind.DOMAIN.collection == "domains"
    assert EntityKind.SERVICE.collection == "services"
    assert EntityKind.CHANNEL.collection == "channels"
    assert MessageType.EVENT.collection == "events"
    assert MessageType.COMMAND.collection == "commands"
    assert MessageType.QUERY.collection == "queries"


def test_entity_ref_omits_missing_version() -> None:
    assert EntityRef("A").as_dict() == {"id": "A"}
    assert EntityRef("A", "2").as_dict() == {"id": "A", "version": "2"}
    assert str(EntityRef("A", "2")) == "A@2"


def test_entity_key_labels_messages_by_type() -> None:
    assert str(make_revision().key) == "event:OrderPlaced"
    assert str(make_revision("Orders", kind=EntityKind.DOMAIN).key) == "domain:Orders"
