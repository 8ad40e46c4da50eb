"""Application orchestration entry points."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from catalogsync.adapters.filesystem import FileSystemEntityStore
from catalogsync.adapters.rendering import render_defaults
from catalogsync.config import ManualOptions, get_catalog_config
from catalogsync.domain.errors import AmbiguousVersionOrderError, CatalogError
from catalogsync.domain.model import KIND_PROCESSING_ORDER, EntityKey, EntityKind, MessageType
from catalogsync.domain.reconciliation import (
    ReconciliationEngine,
    ReconciliationReport,
    RepairReport,
    sort_versions,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from catalogsync.config import CatalogConfig, ReconciliationOptions
    from catalogsync.domain.model import EntityRevision
    from catalogsync.domain.ports import EntityStore, RenderDefaults


log = getLogger(__name__)


@dataclass(slots=True)
class VersionListing:
    key: EntityKey
    current: str | None = None
    archived: list[str] = field(default_factory=list)


def _resolve_store(config: CatalogConfig | None, store: EntityStore | None) -> EntityStore:
    if store is not None:
        return store
    return FileSystemEntityStore.from_config(config or get_catalog_config())


def sync_catalog(
    revisions: Iterable[EntityRevision],
    *,
    config: CatalogConfig | None = None,
    options: ReconciliationOptions | None = None,
    store: EntityStore | None = None,
    render: RenderDefaults | None = None,
) -> ReconciliationReport:
    """Reconcile ``revisions`` into the catalog using the configured adapters."""

    effective_store = _resolve_store(config, store)
    effective_options = options or ManualOptions()
    batch = list(revisions)
    log.info(
        "Starting catalog sync: generator=%s, revisions=%s, include_all_versions=%s, "
        "forward_only=%s",
        effective_options.generator,
        len(batch),
        effective_options.include_all_versions,
        effective_options.forward_only,
    )

    engine = ReconciliationEngine(
        store=effective_store,
        render=render or render_defaults,
        options=effective_options,
    )
    report = engine.reconcile_all(batch)

    counts = report.counts()
    log.info(
        "Finished catalog sync: created=%s, updated=%s, versioned=%s, archived=%s, "
        "skipped=%s, failed=%s",
        counts["create"],
        counts["update"],
        counts["supersede"],
        counts["archive_write"],
        counts["skip"],
        counts["failed"],
    )
    for key, notice in report.notices:
        log.info("Notice for %s: %s", key, notice)
    return report


def _all_keys(store: EntityStore) -> list[EntityKey]:
    keys: list[EntityKey] = []
    for kind in KIND_PROCESSING_ORDER:
        message_types: tuple[MessageType | None, ...] = (
            tuple(MessageType) if kind is EntityKind.MESSAGE else (None,)
        )
        for message_type in message_types:
            keys.extend(
                EntityKey(kind, entity_id, message_type)
                for entity_id in store.list_ids(kind, message_type=message_type)
            )
    return keys


def repair_catalog(
    *,
    config: CatalogConfig | None = None,
    store: EntityStore | None = None,
) -> RepairReport:
    """Finish interrupted writes and restore a current revision wherever one is missing."""

    effective_store = _resolve_store(config, store)
    engine = ReconciliationEngine(
        store=effective_store,
        render=render_defaults,
        options=ManualOptions(),
    )
    report = RepairReport()
    keys = _all_keys(effective_store)
    log.info("Starting catalog repair: entities=%s", len(keys))
    for key in keys:
        try:
            recovered, restored = engine.repair(key)
        except (CatalogError, OSError) as exc:
            log.error("Could not repair %s: %s: %s", key, type(exc).__name__, exc)
            report.failures.append((key, exc))
            continue
        if recovered:
            report.recovered.append(key)
        if restored is not None:
            report.restored.append((key, restored))
    log.info(
        "Finished catalog repair: recovered=%s, restored=%s, failed=%s",
        len(report.recovered),
        len(report.restored),
        len(report.failures),
    )
    return report


def describe_versions(
    kind: EntityKind,
    entity_id: str,
    *,
    message_type: MessageType | None = None,
    config: CatalogConfig | None = None,
    store: EntityStore | None = None,
) -> VersionListing:
    """Current and archived versions of one entity, archive oldest first where orderable."""

    effective_store = _resolve_store(config, store)
    key = EntityKey(kind, entity_id, message_type)
    current = effective_store.find(kind, entity_id, message_type=message_type)
    archived = effective_store.list_archived(kind, entity_id, message_type=message_type)
    try:
        archived = sort_versions(archived)
    except AmbiguousVersionOrderError:
        log.debug("Archived versions of %s have no common ordering; listing by name", key)
    return VersionListing(
        key=key,
        current=current.version if current is not None else None,
        archived=archived,
    )
