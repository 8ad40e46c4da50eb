from __future__ import annotations

import pytest

from catalogsync.domain.model import EntityKind
from catalogsync.domain.reconciliation import ReconcileAction
from catalogsync.domain.reconciliation.policy import (
    merge_fields,
    merge_keyed,
    specification_file_names,
    split_source_fields,
)
from tests.helpers.revisions import fixed_render, make_revision, stored_from


def test_split_source_fields_moves_user_keys_out() -> None:
    seeds, source = split_source_fields({"name": "x", "summary": "from source", "owners": ["a"]})

    assert seeds == {"summary": "from source", "owners": ["a"]}
    assert source == {"name": "x"}


def test_create_layers_defaults_seeds_and_forced_fields() -> None:
    incoming = make_revision(
        fields={"name": "Order placed", "summary": "seeded", "owners": ["orders-team"]},
        forced={"owners": ["platform"]},
    )

    merged = merge_fields(ReconcileAction.CREATE, incoming, None, render=fixed_render)

    assert merged.user_fields["markdown"] == "Default docs for OrderPlaced 1"
    assert merged.user_fields["summary"] == "seeded"
    assert merged.user_fields["owners"] == ["platform"]
    assert merged.user_fields["badges"] == []
    assert merged.source_fields == {"name": "Order placed"}


def test_update_keeps_user_fields_and_replaces_source_fields() -> None:
    stored = stored_from(
        make_revision(fields={"name": "Order placed", "schemaPath": "old.json"}),
        user_fields={"markdown": "Hand written", "owners": ["orders-team"]},
    )
    incoming = make_revision(fields={"name": "Order placed v1", "summary": "ignored"})

    merged = merge_fields(
        ReconcileAction.UPDATE_SAME_VERSION, incoming, stored, render=fixed_render
    )

    assert merged.user_fields == {"markdown": "Hand written", "owners": ["orders-team"]}
    assert merged.source_fields == {"name": "Order placed v1"}


def test_supersede_keeps_user_fields_and_takes_incoming_files() -> None:
    stored = stored_from(make_revision(version="1"), user_fields={"markdown": "Hand written"})
    incoming = make_revision(version="2", files={"schema.json": "{}"})

    merged = merge_fields(ReconcileAction.SUPERSEDE, incoming, stored, render=fixed_render)

    assert merged.user_fields == {"markdown": "Hand written"}
    assert merged.files == {"schema.json": "{}"}


def test_user_fields_are_copied_not_shared() -> None:
    stored = stored_from(make_revision(), user_fields={"owners": ["a"]})
    incoming = make_revision(fields={"name": "changed"})

    merged = merge_fields(
        ReconcileAction.UPDATE_SAME_VERSION, incoming, stored, render=fixed_render
    )
    merged.user_fields["owners"].append("b")  # type: ignore[union-attr]

    assert stored.user_fields == {"owners": ["a"]}


def test_specifications_are_merged_by_key() -> None:
    stored = stored_from(
        make_revision(
            kind=EntityKind.SERVICE,
            entity_id="OrderService",
            fields={"specifications": {"openapiPath": "openapi.yml", "asyncapiPath": "old.yml"}},
        )
    )
    incoming = make_revision(
        kind=EntityKind.SERVICE,
        entity_id="OrderService",
        version="2",
        fields={"specifications": {"asyncapiPath": "asyncapi.yml"}},
    )

    merged = merge_fields(ReconcileAction.SUPERSEDE, incoming, stored, render=fixed_render)

    assert merged.source_fields["specifications"] == {
        "openapiPath": "openapi.yml",
        "asyncapiPath": "asyncapi.yml",
    }


def test_supersede_carries_stored_files_named_by_merged_specifications() -> None:
    stored = stored_from(
        make_revision(
            kind=EntityKind.SERVICE,
            entity_id="OrderService",
            fields={"specifications": {"asyncapiPath": "asyncapi.yml", "openapiPath": "api.yml"}},
        )
    )
    incoming = make_revision(
        kind=EntityKind.SERVICE,
        entity_id="OrderService",
        version="2",
        fields={"specifications": {"openapiPath": "api.yml"}},
        files={"api.yml": "openapi: 3.1.0"},
    )

    merged = merge_fields(
        ReconcileAction.SUPERSEDE,
        incoming,
        stored,
        render=fixed_render,
        stored_files={"asyncapi.yml": "asyncapi: 3.0.0", "api.yml": "openapi: 3.0.0"},
    )

    assert merged.files == {"asyncapi.yml": "asyncapi: 3.0.0", "api.yml": "openapi: 3.1.0"}


def test_same_version_update_does_not_rewrite_stored_files() -> None:
    stored = stored_from(make_revision(fields={"specifications": {"schemaPath": "schema.json"}}))

    merged = merge_fields(
        ReconcileAction.UPDATE_SAME_VERSION,
        make_revision(),
        stored,
        render=fixed_render,
        stored_files={"schema.json": "{}"},
    )

    assert merged.files == {}


def test_specification_file_names_only_lists_attached_files() -> None:
    fields = {"specifications": {"a": "a.yml", "b": "missing.yml", "c": 3}, "schemaPath": "s.json"}

    assert specification_file_names(fields, ["a.yml", "s.json", "notes.txt"]) == ["a.yml"]


def test_merge_keyed_keeps_stored_mapping_when_incoming_has_none() -> None:
    merged = merge_keyed({"specifications": {"a": 1}, "name": "old"}, {"name": "new"})

    assert merged == {"name": "new", "specifications": {"a": 1}}


def test_message_markdown_is_rerendered_when_not_preserved() -> None:
    stored = stored_from(make_revision(), user_fields={"markdown": "Hand written", "owners": ["a"]})
    incoming = make_revision(fields={"name": "changed"})

    merged = merge_fields(
        ReconcileAction.UPDATE_SAME_VERSION,
        incoming,
        stored,
        render=fixed_render,
        preserve_existing_messages=False,
    )

    assert merged.user_fields == {"markdown": "Default docs for OrderPlaced 1", "owners": ["a"]}


def test_service_markdown_is_kept_even_when_messages_are_not_preserved() -> None:
    service = make_revision("OrderService", kind=EntityKind.SERVICE)
    stored = stored_from(service, user_fields={"markdown": "Hand written"})

    merged = merge_fields(
        ReconcileAction.UPDATE_SAME_VERSION,
        make_revision("OrderService", kind=EntityKind.SERVICE, fields={"name": "changed"}),
        stored,
        render=fixed_render,
        preserve_existing_messages=False,
    )

    assert merged.user_fields["markdown"] == "Hand written"


def test_archive_write_without_current_uses_creation_rule() -> None:
    incoming = make_revision(version="1", latest=False, forced={"summary": "forced"})

    merged = merge_fields(ReconcileAction.ARCHIVE_WRITE, incoming, None, render=fixed_render)

    assert merged.user_fields["markdown"] == "Default docs for OrderPlaced 1"
    assert merged.user_fields["summary"] == "forced"


def test_archive_write_with_current_copies_current_user_fields() -> None:
    stored = stored_from(make_revision(version="3"), user_fields={"markdown": "Current docs"})

    merged = merge_fields(
        ReconcileAction.ARCHIVE_WRITE,
        make_revision(version="2"),
        stored,
        render=fixed_render,
    )

    assert merged.user_fields == {"markdown": "Current docs"}


def test_skip_has_nothing_to_merge() -> None:
    with pytest.raises(ValueError, match="Skipped"):
        merge_fields(ReconcileAction.SKIP_DUPLICATE, make_revision(), None, render=fixed_render)
