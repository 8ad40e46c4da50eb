"""Translate manifest payloads into entity revisions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from catalogsync.domain.model import EntityRef, EntityRevision, Relationships

if TYPE_CHECKING:
    from .schema import ManifestPayload, RefPayload, RevisionPayload


def _refs(payloads: list[RefPayload]) -> tuple[EntityRef, ...]:
    return tuple(EntityRef(payload.id, payload.version) for payload in payloads)


def translate_revision(payload: RevisionPayload) -> EntityRevision:
    relationships = Relationships(
        sends=_refs(payload.sends),
        receives=_refs(payload.receives),
        writes_to=_refs(payload.writes_to),
        reads_from=_refs(payload.reads_from),
        channels=_refs(payload.channels),
        services=_refs(payload.services),
        parent_domain=(
            EntityRef(payload.domain.id, payload.domain.version) if payload.domain else None
        ),
    )
    return EntityRevision(
        id=payload.id,
        kind=payload.kind,
        version=payload.version,
        message_type=payload.message_type,
        is_latest_from_source=payload.latest,
        source_fields=payload.fields,
        relationships=relationships,
        forced_fields=payload.forced,
        files=payload.files,
        sequence_hint=payload.sequence_hint,
        notices=tuple(payload.notices),
    )


def translate_manifest(payload: ManifestPayload) -> list[EntityRevision]:
    return [translate_revision(revision) for revision in payload.revisions]
