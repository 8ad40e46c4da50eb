"""Field merge policy.

Decides per field whether the persisted value comes from the source or from
what the catalog already holds. User-owned fields are seeded once, on
creation, and afterwards only change by hand. Source fields are replaced
wholesale, except key-merged mappings such as ``specifications``.
"""

from __future__ import annotations

from collections.abc import Mapping
from copy import deepcopy
from typing import TYPE_CHECKING

from catalogsync.domain.model import KEY_MERGED_FIELD_KEYS, USER_FIELD_KEYS, EntityKind

from .contracts import MergedFields, ReconcileAction

if TYPE_CHECKING:
    from collections.abc import Iterable

    from catalogsync.domain.model import CatalogEntity, EntityRevision
    from catalogsync.domain.ports import RenderDefaults


def split_source_fields(
    fields: Mapping[str, object],
) -> tuple[dict[str, object], dict[str, object]]:
    """Split incoming source fields into (user-field seeds, source fields)."""

    seeds: dict[str, object] = {}
    source: dict[str, object] = {}
    for key, value in fields.items():
        (seeds if key in USER_FIELD_KEYS else source)[key] = deepcopy(value)
    return seeds, source


def merge_keyed(
    stored: Mapping[str, object],
    incoming: Mapping[str, object],
) -> dict[str, object]:
    """Overlay ``incoming`` on ``stored`` for key-merged fields only."""

    merged = dict(incoming)
    for key in KEY_MERGED_FIELD_KEYS:
        previous = stored.get(key)
        current = incoming.get(key)
        if isinstance(previous, Mapping) and isinstance(current, Mapping):
            merged[key] = {**deepcopy(dict(previous)), **current}
        elif current is None and previous is not None:
            merged[key] = deepcopy(previous)
    return merged


def specification_file_names(
    fields: Mapping[str, object],
    file_names: Iterable[str],
) -> list[str]:
    """Names in ``file_names`` that a key-merged mapping in ``fields`` points at."""

    available = set(file_names)
    named: set[str] = set()
    for key in KEY_MERGED_FIELD_KEYS:
        value = fields.get(key)
        if isinstance(value, Mapping):
            named.update(item for item in value.values() if isinstance(item, str))
    return sorted(named & available)


def _creation_user_fields(
    incoming: EntityRevision,
    seeds: Mapping[str, object],
    render: RenderDefaults,
) -> dict[str, object]:
    user_fields = render(incoming).as_user_fields()
    user_fields.update(seeds)
    user_fields.update(deepcopy(dict(incoming.forced_fields)))
    return user_fields


def merge_fields(
    action: ReconcileAction,
    incoming: EntityRevision,
    stored: CatalogEntity | None,
    *,
    render: RenderDefaults,
    preserve_existing_messages: bool = True,
    stored_files: Mapping[str, str] | None = None,
) -> MergedFields:
    """Return the fields to persist for ``incoming`` under ``action``.

    ``stored`` is the current entity; for ``ARCHIVE_WRITE`` without one the
    creation rule applies to the archived snapshot. ``stored_files`` holds
    attachments of ``stored``; on ``SUPERSEDE`` those still named by the
    merged ``specifications`` move along to the new current revision.
    """

    if action is ReconcileAction.SKIP_DUPLICATE:
        raise ValueError("Skipped revisions have no fields to merge")

    seeds, source_fields = split_source_fields(incoming.source_fields)
    files = dict(incoming.files)

    if action is ReconcileAction.CREATE or stored is None:
        return MergedFields(
            user_fields=_creation_user_fields(incoming, seeds, render),
            source_fields=source_fields,
            files=files,
        )

    user_fields = deepcopy(stored.user_fields)
    if action in (ReconcileAction.UPDATE_SAME_VERSION, ReconcileAction.SUPERSEDE):
        source_fields = merge_keyed(stored.source_fields, source_fields)
    if action is ReconcileAction.SUPERSEDE and stored_files:
        carried = specification_file_names(source_fields, stored_files)
        files = {**{name: stored_files[name] for name in carried}, **files}
    if incoming.kind is EntityKind.MESSAGE and not preserve_existing_messages:
        user_fields["markdown"] = render(incoming).markdown
    return MergedFields(user_fields=user_fields, source_fields=source_fields, files=files)
