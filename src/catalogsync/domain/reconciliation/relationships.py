"""Identity-based merging of relationship arrays."""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from catalogsync.domain.model import Relationships

from .contracts import ReconcileAction

if TYPE_CHECKING:
    from collections.abc import Iterable

    from catalogsync.domain.model import EntityRef

_LIST_FIELDS = ("sends", "receives", "writes_to", "reads_from", "channels", "services")


def merge_references(*arrays: Iterable[EntityRef]) -> tuple[EntityRef, ...]:
    """Concatenate ``arrays`` keeping the first reference seen for each id."""

    seen: set[str] = set()
    merged: list[EntityRef] = []
    for array in arrays:
        for ref in array:
            if ref.id in seen:
                continue
            seen.add(ref.id)
            merged.append(ref)
    return tuple(merged)


def add_member(
    members: Iterable[EntityRef],
    member: EntityRef,
) -> tuple[tuple[EntityRef, ...], bool]:
    """Set-add ``member`` by id; return the members and whether anything changed."""

    existing = tuple(members)
    if any(ref.id == member.id for ref in existing):
        return existing, False
    return (*existing, member), True


def dedupe_relationships(relationships: Relationships) -> Relationships:
    return replace(
        relationships,
        **{name: merge_references(getattr(relationships, name)) for name in _LIST_FIELDS},
    )


def merge_relationships(
    action: ReconcileAction,
    incoming: Relationships,
    stored: Relationships | None,
) -> Relationships:
    """Relationships to persist; stored arrays only survive a same-version update."""

    if action is not ReconcileAction.UPDATE_SAME_VERSION or stored is None:
        return dedupe_relationships(incoming)
    merged = {
        name: merge_references(getattr(stored, name), getattr(incoming, name))
        for name in _LIST_FIELDS
    }
    return Relationships(
        **merged,
        parent_domain=incoming.parent_domain or stored.parent_domain,
    )
