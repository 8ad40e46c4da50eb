from __future__ import annotations

from catalogsync.domain.model import Relationships
from catalogsync.domain.reconciliation import ReconcileAction
from catalogsync.domain.reconciliation.relationships import (
    add_member,
    merge_references,
    merge_relationships,
)
from tests.helpers.revisions import ref


def test_same_version_update_keeps_first_occurrence_per_id() -> None:
    stored = Relationships(sends=(ref("A", "1"),))
    incoming = Relationships(sends=(ref("A", "2"), ref("B", "1")))

    merged = merge_relationships(ReconcileAction.UPDATE_SAME_VERSION, incoming, stored)

    assert merged.sends == (ref("A", "1"), ref("B", "1"))


def test_same_version_update_never_drops_existing_entries() -> None:
    stored = Relationships(
        receives=(ref("X"),),
        writes_to=(ref("db"),),
        channels=(ref("orders"),),
    )
    incoming = Relationships(receives=(ref("Y"),))

    merged = merge_relationships(ReconcileAction.UPDATE_SAME_VERSION, incoming, stored)

    assert merged.receives == (ref("X"), ref("Y"))
    assert merged.writes_to == (ref("db"),)
    assert merged.channels == (ref("orders"),)


def test_other_actions_use_incoming_arrays_deduplicated() -> None:
    stored = Relationships(sends=(ref("A", "1"),))
    incoming = Relationships(sends=(ref("B"), ref("B", "2"), ref("C")))

    for action in (
        ReconcileAction.CREATE,
        ReconcileAction.SUPERSEDE,
        ReconcileAction.ARCHIVE_WRITE,
    ):
        merged = merge_relationships(action, incoming, stored)
        assert merged.sends == (ref("B"), ref("C"))


def test_parent_domain_falls_back_to_stored() -> None:
    stored = Relationships(parent_domain=ref("Orders", "1"))

    merged = merge_relationships(ReconcileAction.UPDATE_SAME_VERSION, Relationships(), stored)

    assert merged.parent_domain == ref("Orders", "1")


def test_merge_references_across_arrays() -> None:
    assert merge_references([ref("A")], [ref("A", "2"), ref("B")], []) == (ref("A"), ref("B"))


def test_add_member_is_idempotent() -> None:
    members, changed = add_member((ref("svc", "1"),), ref("svc", "1"))

    assert changed is False
    assert members == (ref("svc", "1"),)


def test_add_member_appends_new_ids_and_ignores_known_ones() -> None:
    members, changed = add_member((ref("a", "1"),), ref("b", "1"))
    assert changed is True
    assert members == (ref("a", "1"), ref("b", "1"))

    members, changed = add_member(members, ref("a", "2"))
    assert changed is False
    assert members == (ref("a", "1"), ref("b", "1"))

