"""Orchestrator for the reconciliation subsystem.

For every incoming revision the engine runs
``FETCH_CURRENT -> RESOLVE_VERSION -> {CREATE | UPDATE | SUPERSEDE | ARCHIVE_WRITE | SKIP}``
and performs exactly one store mutation sequence. Failures are scoped to the
revision that caused them and collected in the report.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from logging import getLogger
from typing import TYPE_CHECKING

from catalogsync.domain.errors import (
    AmbiguousVersionOrderError,
    CatalogError,
    NotFoundError,
    PartialWriteError,
)
from catalogsync.domain.model import (
    KIND_PROCESSING_ORDER,
    CatalogEntity,
    EntityKind,
    EntityRef,
)

from .contracts import (
    EntityOutcome,
    ReconcileAction,
    ReconciliationReport,
)
from .policy import merge_fields, specification_file_names
from .relationships import add_member, merge_relationships
from .resolve import resolve_action
from .versions import detect_scheme, newest_version, sort_versions

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from catalogsync.domain.model import EntityKey, EntityRevision
    from catalogsync.domain.ports import EntityStore, RenderDefaults

    from .contracts import EngineOptions

log = getLogger(__name__)

_CURRENT_WRITES = (
    ReconcileAction.CREATE,
    ReconcileAction.UPDATE_SAME_VERSION,
    ReconcileAction.SUPERSEDE,
)


@dataclass(slots=True)
class _CurrentState:
    stored: CatalogEntity | None
    archived: list[str]
    recovered: bool = False
    restored_version: str | None = None


@dataclass(slots=True)
class ReconciliationEngine:
    """Reconcile incoming revisions into the catalog held by ``store``."""

    store: EntityStore
    render: RenderDefaults
    options: EngineOptions

    def reconcile_all(self, revisions: Iterable[EntityRevision]) -> ReconciliationReport:
        """Reconcile a batch: domains, channels, messages, then services, oldest version first."""

        report = ReconciliationReport()
        groups: dict[EntityKey, list[EntityRevision]] = {}
        dropped = 0
        for revision in revisions:
            if not revision.is_latest_from_source and not self.options.include_all_versions:
                dropped += 1
                continue
            groups.setdefault(revision.key, []).append(revision)
        if dropped:
            log.info("Ignoring %s non-latest revisions (include_all_versions is off)", dropped)

        for kind in KIND_PROCESSING_ORDER:
            for key, group in groups.items():
                if key.kind is not kind:
                    continue
                for revision in _in_version_order(key, group):
                    report.add(self.reconcile(revision))
        return report

    def reconcile(self, revision: EntityRevision) -> EntityOutcome:
        """Reconcile one revision; store and ordering errors end up on the outcome."""

        outcome = EntityOutcome(
            key=revision.key,
            version=revision.version,
            notices=revision.notices,
        )
        try:
            self._reconcile(revision, outcome)
        except CatalogError as exc:
            outcome.error = exc
            log.error(
                "Failed to reconcile %s@%s: %s: %s",
                revision.key,
                revision.version,
                type(exc).__name__,
                exc,
            )
        except OSError as exc:
            outcome.error = exc
            log.exception(
                "Filesystem error while reconciling %s@%s", revision.key, revision.version
            )
        return outcome

    def repair(self, key: EntityKey) -> tuple[bool, str | None]:
        """Recover one entity; return (interrupted move repaired, restored version)."""

        state = self._fetch_current(key)
        return state.recovered, state.restored_version

    # ------------------------------------------------------------------ steps

    def _reconcile(self, revision: EntityRevision, outcome: EntityOutcome) -> None:
        key = revision.key
        state = self._fetch_current(key)
        outcome.recovered = state.recovered or state.restored_version is not None
        stored = state.stored

        known = (revision.version, *([stored.version] if stored else []), *state.archived)
        resolution = resolve_action(
            revision,
            stored,
            archived_versions=state.archived,
            archived_hints=self._hints_if_needed(key, known, state.archived),
            forward_only=self.options.forward_only,
        )
        outcome.action = resolution.action
        log.debug(
            "%s@%s resolved to %s (%s)",
            key,
            revision.version,
            resolution.action,
            resolution.reason,
        )

        if resolution.action is ReconcileAction.SKIP_DUPLICATE:
            log.info("Skipped %s@%s: %s", key, revision.version, resolution.reason)
            return

        parent = revision.relationships.parent_domain
        if parent is not None and resolution.action in _CURRENT_WRITES:
            # Fail before writing anything rather than leave a dangling membership.
            self.store.get(EntityKind.DOMAIN, parent.id)

        entity = self._build_entity(resolution.action, revision, stored)
        self._apply(resolution.action, entity, stored)

        if parent is not None and resolution.action in _CURRENT_WRITES:
            notice = self._link_parent_domain(entity, parent)
            if notice is not None:
                log.warning(notice)
                outcome.notices = (*outcome.notices, notice)

    def _fetch_current(self, key: EntityKey) -> _CurrentState:
        kind, entity_id, message_type = key.kind, key.id, key.message_type
        recovered = self.store.recover_interrupted(kind, entity_id, message_type=message_type)
        if recovered:
            log.warning("Recovered interrupted write for %s", key)
        stored = self.store.find(kind, entity_id, message_type=message_type)
        archived = self.store.list_archived(kind, entity_id, message_type=message_type)
        if stored is not None or not archived:
            return _CurrentState(stored=stored, archived=archived, recovered=recovered)

        def pick_newest(versions: Sequence[str]) -> str:
            return newest_version(versions, self._hints_if_needed(key, versions, versions))

        restored = self.store.restore_latest_archived(
            kind, entity_id, pick_newest, message_type=message_type
        )
        log.warning("%s had no current revision; restored archived version %s", key, restored)
        return _CurrentState(
            stored=self.store.get(kind, entity_id, message_type=message_type),
            archived=self.store.list_archived(kind, entity_id, message_type=message_type),
            recovered=recovered,
            restored_version=restored,
        )

    def _hints_if_needed(
        self,
        key: EntityKey,
        versions: Sequence[str],
        archived: Sequence[str],
    ) -> dict[str, int | None]:
        """Sequence hints of archived snapshots, read only when versions have no numeric shape."""

        try:
            detect_scheme(versions)
        except AmbiguousVersionOrderError:
            pass
        else:
            return {}
        hints: dict[str, int | None] = {}
        for version in archived:
            snapshot = self.store.get(key.kind, key.id, version, message_type=key.message_type)
            hints[version] = snapshot.sequence_hint
        return hints

    def _build_entity(
        self,
        action: ReconcileAction,
        revision: EntityRevision,
        stored: CatalogEntity | None,
    ) -> CatalogEntity:
        stored_files: dict[str, str] = {}
        if action is ReconcileAction.SUPERSEDE and stored is not None:
            stored_files = {
                name: self.store.read_file(
                    stored.kind, stored.id, name, message_type=stored.message_type
                )
                for name in specification_file_names(stored.source_fields, stored.file_names)
            }
        merged = merge_fields(
            action,
            revision,
            stored,
            render=self.render,
            preserve_existing_messages=self.options.preserve_existing_messages,
            stored_files=stored_files,
        )
        relationships = merge_relationships(
            action,
            revision.relationships,
            stored.relationships if stored is not None else None,
        )
        return CatalogEntity(
            id=revision.id,
            kind=revision.kind,
            version=revision.version,
            message_type=revision.message_type,
            user_fields=merged.user_fields,
            source_fields=merged.source_fields,
            relationships=relationships,
            files=merged.files,
            sequence_hint=revision.sequence_hint,
            source_hash=revision.source_hash,
        )

    def _apply(
        self,
        action: ReconcileAction,
        entity: CatalogEntity,
        stored: CatalogEntity | None,
    ) -> None:
        match action:
            case ReconcileAction.CREATE:
                self.store.put(entity, overwrite_current=False)
                log.info("Created %s@%s", entity.key, entity.version)
            case ReconcileAction.UPDATE_SAME_VERSION:
                self.store.put(entity, overwrite_current=True)
                log.info("Updated %s@%s in place", entity.key, entity.version)
            case ReconcileAction.SUPERSEDE if stored is not None:
                self._supersede(entity, stored.version)
            case ReconcileAction.ARCHIVE_WRITE:
                self.store.put_archived(entity)
                log.info("Archived %s@%s", entity.key, entity.version)
            case _:
                raise ValueError(f"Cannot apply {action} to {entity.key}@{entity.version}")

    def _supersede(self, entity: CatalogEntity, previous: str) -> None:
        self.store.archive(entity.kind, entity.id, previous, message_type=entity.message_type)
        log.info("Versioned previous %s@%s", entity.key, previous)
        try:
            self.store.put(entity, overwrite_current=False)
        except (CatalogError, OSError) as exc:
            raise PartialWriteError(
                f"{entity.key}: archived {previous} but could not write {entity.version}"
            ) from exc
        log.info("Created %s@%s as current", entity.key, entity.version)

    def _link_parent_domain(self, service: CatalogEntity, parent: EntityRef) -> str | None:
        """Record ``service`` in its domain's ``services``; return a notice when that is refused."""

        try:
            domain = self.store.get(EntityKind.DOMAIN, parent.id)
        except NotFoundError:
            message = f"Domain {parent.id} for service {service.id} does not exist"
            raise NotFoundError(message) from None
        if parent.version is not None and domain.version != parent.version:
            return (
                f"Service {service.id}@{service.version} not added to domain {parent.id}: "
                f"requested version {parent.version} but current is {domain.version}"
            )
        services, changed = add_member(
            domain.relationships.services, EntityRef(service.id, service.version)
        )
        if changed:
            domain.relationships = replace(domain.relationships, services=services)
            self.store.put(domain, overwrite_current=True)
            log.info("Added service %s@%s to domain %s", service.id, service.version, parent.id)
        return None


def _in_version_order(key: EntityKey, group: list[EntityRevision]) -> list[EntityRevision]:
    if len(group) < 2:  # noqa: PLR2004
        return group
    hints = {revision.version: revision.sequence_hint for revision in group}
    try:
        ordered = sort_versions(dict.fromkeys(revision.version for revision in group), hints)
    except AmbiguousVersionOrderError as exc:
        log.warning("Keeping submission order for %s: %s", key, exc)
        return group
    rank = {version: index for index, version in enumerate(ordered)}
    return sorted(group, key=lambda revision: rank[revision.version])
