"""Decide which store mutation an incoming revision requires.

Rules, in order:
- nothing stored: ``CREATE``, unless the version already sits in the archive
- same version as current: ``SKIP_DUPLICATE`` when the source does not mark it
  latest or nothing changed, else ``UPDATE_SAME_VERSION``
- version already archived: ``SKIP_DUPLICATE`` (archives are immutable)
- newer than current and latest (or forward-only processing): ``SUPERSEDE``
- anything else: ``ARCHIVE_WRITE``
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from catalogsync.domain.errors import PartialWriteError

from .contracts import ReconcileAction, Resolution, VersionRelation
from .versions import compare_versions

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from catalogsync.domain.model import CatalogEntity, EntityRevision


def resolve_action(
    incoming: EntityRevision,
    stored: CatalogEntity | None,
    *,
    archived_versions: Sequence[str] = (),
    archived_hints: Mapping[str, int | None] | None = None,
    forward_only: bool = False,
) -> Resolution:
    if stored is None:
        if incoming.version in archived_versions:
            return Resolution(
                action=ReconcileAction.SKIP_DUPLICATE,
                reason="version already archived",
            )
        if archived_versions:
            # The engine restores the newest snapshot before resolving.
            raise PartialWriteError(
                f"{incoming.key} has archived versions but no current revision"
            )
        return Resolution(action=ReconcileAction.CREATE, reason="nothing stored")

    if incoming.version == stored.version:
        if not incoming.is_latest_from_source and not forward_only:
            return Resolution(
                action=ReconcileAction.SKIP_DUPLICATE,
                relation=VersionRelation.SAME,
                reason="version exists and source does not mark it latest",
            )
        if incoming.source_hash == stored.source_hash:
            return Resolution(
                action=ReconcileAction.SKIP_DUPLICATE,
                relation=VersionRelation.SAME,
                reason="content unchanged",
            )
        return Resolution(
            action=ReconcileAction.UPDATE_SAME_VERSION,
            relation=VersionRelation.SAME,
            reason="content changed",
        )

    if incoming.version in archived_versions:
        return Resolution(
            action=ReconcileAction.SKIP_DUPLICATE,
            reason="version already archived",
        )

    hints: dict[str, int | None] = dict(archived_hints or {})
    hints[incoming.version] = incoming.sequence_hint
    hints[stored.version] = stored.sequence_hint
    relation = compare_versions(
        incoming.version,
        stored.version,
        known=archived_versions,
        hints=hints,
    )
    if relation is VersionRelation.NEWER and (incoming.is_latest_from_source or forward_only):
        return Resolution(
            action=ReconcileAction.SUPERSEDE,
            relation=relation,
            reason=f"newer than current {stored.version}",
        )
    reason = (
        f"older than current {stored.version}"
        if relation is VersionRelation.OLDER
        else "newer but not marked latest"
    )
    return Resolution(action=ReconcileAction.ARCHIVE_WRITE, relation=relation, reason=reason)
