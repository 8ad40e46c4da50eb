"""Entity store backed by the catalog directory tree.

Every file write goes to a hidden sibling temp file first and is moved into
place with ``os.replace``. Moves between current and archive go through a
staging directory under ``versioned/`` with the document moved last, so
``recover_interrupted`` can always tell how far an operation got.
"""

from __future__ import annotations

import os
import shutil
from logging import getLogger
from typing import TYPE_CHECKING

from catalogsync.domain.errors import ConflictError, CorruptDocumentError, NotFoundError
from catalogsync.domain.model import LATEST, EntityKind, validate_segment, validate_version

from .document import entity_from_document, parse_document, render_document
from .layout import (
    DOCUMENT_NAMES,
    CatalogLayout,
    StagingState,
    is_tmp_file,
    parse_staging_name,
    tmp_path_for,
)

if TYPE_CHECKING:
    from pathlib import Path

    from catalogsync.config import CatalogConfig, DocumentFormat
    from catalogsync.domain.model import CatalogEntity, MessageType
    from catalogsync.domain.ports import PickNewest

log = getLogger(__name__)


def _label(kind: EntityKind, entity_id: str, message_type: MessageType | None) -> str:
    return f"{message_type or kind}:{entity_id}"


def _atomic_write(path: Path, content: str) -> None:
    tmp = tmp_path_for(path)
    tmp.write_text(content, encoding="utf-8")
    os.replace(tmp, path)


class FileSystemEntityStore:
    def __init__(
        self,
        root: Path,
        *,
        document_format: DocumentFormat = "md",
        nest_services_under_domain: bool = True,
    ) -> None:
        self.layout = CatalogLayout(root, document_format, nest_services_under_domain)

    @classmethod
    def from_config(cls, config: CatalogConfig) -> FileSystemEntityStore:
        return cls(
            config.ensure_root(),
            document_format=config.document_format,
            nest_services_under_domain=config.nest_services_under_domain,
        )

    @property
    def root(self) -> Path:
        return self.layout.root

    # ------------------------------------------------------------------ reads

    def get(
        self,
        kind: EntityKind,
        entity_id: str,
        version: str = LATEST,
        *,
        message_type: MessageType | None = None,
    ) -> CatalogEntity:
        label = _label(kind, entity_id, message_type)
        directory = self._require_dir(kind, entity_id, message_type)
        current = self._read_current(directory, kind, entity_id, message_type)
        if current is not None:
            current.archived_versions = tuple(self._archived_in(directory))

        if version == LATEST:
            if current is None:
                raise NotFoundError(f"{label} has no current revision")
            return current
        validate_version(version)
        if current is not None and current.version == version:
            return current

        snapshot_dir = self.layout.archive_dir(directory, version)
        if self.layout.find_document(snapshot_dir) is None:
            raise NotFoundError(f"{label} has no version {version}")
        snapshot = self._read(snapshot_dir, kind, message_type)
        if snapshot.id != entity_id or snapshot.version != version:
            raise CorruptDocumentError(
                f"Archived snapshot {snapshot_dir} holds {snapshot.id}@{snapshot.version}"
            )
        return snapshot

    def find(
        self,
        kind: EntityKind,
        entity_id: str,
        version: str = LATEST,
        *,
        message_type: MessageType | None = None,
    ) -> CatalogEntity | None:
        try:
            return self.get(kind, entity_id, version, message_type=message_type)
        except NotFoundError:
            return None

    def list_archived(
        self,
        kind: EntityKind,
        entity_id: str,
        *,
        message_type: MessageType | None = None,
    ) -> list[str]:
        directory = self._locate(kind, entity_id, message_type)
        return self._archived_in(directory) if directory is not None else []

    def list_ids(self, kind: EntityKind, *, message_type: MessageType | None = None) -> list[str]:
        collections = [self.layout.collection_dir(kind, message_type)]
        if kind is EntityKind.SERVICE:
            domains = self.layout.collection_dir(EntityKind.DOMAIN)
            if domains.is_dir():
                collections.extend(sorted(domains.glob(f"*/{EntityKind.SERVICE.collection}")))
        ids: set[str] = set()
        for collection in collections:
            if not collection.is_dir():
                continue
            ids.update(
                child.name
                for child in collection.iterdir()
                if child.is_dir() and not child.name.startswith(".")
            )
        return sorted(ids)

    def read_file(
        self,
        kind: EntityKind,
        entity_id: str,
        name: str,
        version: str = LATEST,
        *,
        message_type: MessageType | None = None,
    ) -> str:
        label = _label(kind, entity_id, message_type)
        directory = self._require_dir(kind, entity_id, message_type)
        if version != LATEST:
            validate_version(version)
            current = self._read_current(directory, kind, entity_id, message_type)
            if current is None or current.version != version:
                directory = self.layout.archive_dir(directory, version)
        path = directory / validate_segment(name, label="file name")
        if name in DOCUMENT_NAMES or not path.is_file():
            raise NotFoundError(f"{label}@{version} has no file {name}")
        return path.read_text(encoding="utf-8")

    # ----------------------------------------------------------------- writes

    def put(self, entity: CatalogEntity, *, overwrite_current: bool) -> None:
        directory = self._entity_dir(entity)
        document = self.layout.find_document(directory) if directory.is_dir() else None
        if document is not None:
            current = self._read(directory, entity.kind, entity.message_type)
            if not overwrite_current:
                raise ConflictError(f"{entity.key} already has current version {current.version}")
            if current.version != entity.version:
                raise ConflictError(
                    f"Refusing to overwrite {entity.key}@{current.version} "
                    f"with {entity.version}; archive it first"
                )
        elif entity.version in self._archived_in(directory):
            raise ConflictError(f"{entity.key}@{entity.version} is already archived")

        directory.mkdir(parents=True, exist_ok=True)
        for name, content in entity.files.items():
            _atomic_write(directory / validate_segment(name, label="file name"), content)
        _atomic_write(document or self.layout.document_path(directory), render_document(entity))
        log.debug("Wrote %s@%s to %s", entity.key, entity.version, directory)

    def put_archived(self, entity: CatalogEntity) -> None:
        directory = self._entity_dir(entity)
        current = self._read_current(directory, entity.kind, entity.id, entity.message_type)
        if current is not None and current.version == entity.version:
            raise ConflictError(f"{entity.key}@{entity.version} is the current version")
        target = self.layout.archive_dir(directory, entity.version)
        if target.exists():
            raise ConflictError(f"{entity.key}@{entity.version} is already archived")

        staging = self.layout.staging_dir(directory, entity.version, StagingState.INCOMING)
        if staging.exists():
            shutil.rmtree(staging)
        staging.mkdir(parents=True)
        for name, content in entity.files.items():
            _atomic_write(staging / validate_segment(name, label="file name"), content)
        _atomic_write(self.layout.document_path(staging), render_document(entity))
        staging.replace(target)
        log.debug("Wrote archived %s@%s to %s", entity.key, entity.version, target)

    def archive(
        self,
        kind: EntityKind,
        entity_id: str,
        version: str,
        *,
        message_type: MessageType | None = None,
    ) -> None:
        label = _label(kind, entity_id, message_type)
        directory = self._require_dir(kind, entity_id, message_type)
        document = self.layout.find_document(directory)
        if document is None:
            raise NotFoundError(f"{label} has no current revision")
        current = self._read(directory, kind, message_type)
        if current.version != version:
            raise ConflictError(
                f"Cannot archive {label}@{version}: "
                f"current version is {current.version}"
            )
        target = self.layout.archive_dir(directory, version)
        if target.exists():
            raise ConflictError(f"{label}@{version} is already archived")

        staging = self.layout.staging_dir(directory, version, StagingState.MOVING)
        staging.mkdir(parents=True, exist_ok=True)
        for path in self.layout.attachment_paths(directory):
            os.replace(path, staging / path.name)
        os.replace(document, staging / document.name)
        staging.replace(target)
        log.debug("Archived %s@%s", label, version)

    def restore_latest_archived(
        self,
        kind: EntityKind,
        entity_id: str,
        pick_newest: PickNewest,
        *,
        message_type: MessageType | None = None,
    ) -> str:
        label = _label(kind, entity_id, message_type)
        directory = self._require_dir(kind, entity_id, message_type)
        if self.layout.find_document(directory) is not None:
            raise ConflictError(f"{label} already has a current revision")
        versions = self._archived_in(directory)
        if not versions:
            raise NotFoundError(f"{label} has no archived versions")

        version = pick_newest(versions)
        staging = self.layout.staging_dir(directory, version, StagingState.RESTORING)
        self.layout.archive_dir(directory, version).replace(staging)
        self._drain(staging, directory)
        return version

    def recover_interrupted(
        self,
        kind: EntityKind,
        entity_id: str,
        *,
        message_type: MessageType | None = None,
    ) -> bool:
        directory = self._locate(kind, entity_id, message_type)
        if directory is None:
            return False

        repaired = False
        archive_root = self.layout.archive_root(directory)
        if archive_root.is_dir():
            for child in sorted(archive_root.iterdir()):
                staged = parse_staging_name(child.name)
                if staged is None or not child.is_dir():
                    continue
                version, state = staged
                if state is StagingState.INCOMING:
                    shutil.rmtree(child)
                    log.warning("Discarded incomplete archive write of %s@%s", entity_id, version)
                else:
                    self._drain(child, directory)
                    log.warning(
                        "Moved %s@%s back to current after interrupted %s",
                        entity_id,
                        version,
                        state,
                    )
                repaired = True

        stray = [path for path in directory.glob("*") if is_tmp_file(path)]
        if archive_root.is_dir():
            stray.extend(path for path in archive_root.glob("*/*") if is_tmp_file(path))
        for path in stray:
            path.unlink()
            log.warning("Removed stray temp file %s", path)
            repaired = True
        return repaired

    # ---------------------------------------------------------------- helpers

    def _locate(
        self, kind: EntityKind, entity_id: str, message_type: MessageType | None
    ) -> Path | None:
        validate_segment(entity_id, label="id")
        return self.layout.locate(kind, entity_id, message_type)

    def _entity_dir(self, entity: CatalogEntity) -> Path:
        located = self._locate(entity.kind, entity.id, entity.message_type)
        return located or self.layout.new_entity_dir(entity)

    def _require_dir(
        self, kind: EntityKind, entity_id: str, message_type: MessageType | None
    ) -> Path:
        directory = self._locate(kind, entity_id, message_type)
        if directory is None:
            raise NotFoundError(f"{_label(kind, entity_id, message_type)} does not exist")
        return directory

    def _read(
        self, directory: Path, kind: EntityKind, message_type: MessageType | None
    ) -> CatalogEntity:
        document = self.layout.find_document(directory)
        if document is None:
            raise NotFoundError(f"No entity document in {directory}")
        data, body = parse_document(document.read_text(encoding="utf-8"))
        return entity_from_document(
            data,
            body,
            kind=kind,
            message_type=message_type,
            file_names=[path.name for path in self.layout.attachment_paths(directory)],
        )

    def _read_current(
        self,
        directory: Path,
        kind: EntityKind,
        entity_id: str,
        message_type: MessageType | None,
    ) -> CatalogEntity | None:
        if self.layout.find_document(directory) is None:
            return None
        current = self._read(directory, kind, message_type)
        if current.id != entity_id:
            raise CorruptDocumentError(
                f"Document in {directory} belongs to {current.id}, not {entity_id}"
            )
        return current

    def _archived_in(self, directory: Path) -> list[str]:
        archive_root = self.layout.archive_root(directory)
        if not archive_root.is_dir():
            return []
        return sorted(
            child.name
            for child in archive_root.iterdir()
            if child.is_dir()
            and not child.name.startswith(".")
            and self.layout.find_document(child) is not None
        )

    def _drain(self, staging: Path, directory: Path) -> None:
        """Move files from ``staging`` into ``directory`` (document last) and drop ``staging``."""

        entries = [path for path in staging.iterdir() if path.is_file() and not is_tmp_file(path)]
        documents = [path for path in entries if path.name in DOCUMENT_NAMES]
        for path in entries:
            if path.name not in DOCUMENT_NAMES:
                os.replace(path, directory / path.name)
        for path in documents:
            os.replace(path, directory / path.name)
        shutil.rmtree(staging)


__all__ = ["FileSystemEntityStore"]
