"""Directory layout of a catalog on disk.

::

    <root>/<kindPlural>/<id>/index.md                 current revision
    <root>/<kindPlural>/<id>/versioned/<version>/     archived snapshots
    <root>/<kindPlural>/<id>/versioned/.<version>.<state>/   staging areas
    <root>/domains/<domainId>/services/<id>/          services nested in a domain
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Final

from catalogsync.domain.model import EntityKind

if TYPE_CHECKING:
    from pathlib import Path

    from catalogsync.config import DocumentFormat
    from catalogsync.domain.model import CatalogEntity, MessageType

ARCHIVE_DIR_NAME: Final[str] = "versioned"
DOCUMENT_STEM: Final[str] = "index"
DOCUMENT_NAMES: Final[tuple[str, ...]] = ("index.md", "index.mdx")
TMP_SUFFIX: Final[str] = ".tmp"


class StagingState(StrEnum):
    MOVING = "moving"
    RESTORING = "restoring"
    INCOMING = "incoming"


_STAGING_NAME: Final = re.compile(r"^\.(?P<version>.+)\.(?P<state>moving|restoring|incoming)$")


def parse_staging_name(name: str) -> tuple[str, StagingState] | None:
    match = _STAGING_NAME.match(name)
    if match is None:
        return None
    return match["version"], StagingState(match["state"])


def tmp_path_for(path: Path) -> Path:
    return path.with_name(f".{path.name}{TMP_SUFFIX}")


def is_tmp_file(path: Path) -> bool:
    return path.name.startswith(".") and path.name.endswith(TMP_SUFFIX)


@dataclass(frozen=True, slots=True)
class CatalogLayout:
    root: Path
    document_format: DocumentFormat = "md"
    nest_services_under_domain: bool = True

    def collection_dir(self, kind: EntityKind, message_type: MessageType | None = None) -> Path:
        if kind is EntityKind.MESSAGE:
            if message_type is None:
                raise ValueError("message entities need a message type to be located")
            return self.root / message_type.collection
        return self.root / kind.collection

    def candidate_dirs(
        self,
        kind: EntityKind,
        entity_id: str,
        message_type: MessageType | None = None,
    ) -> list[Path]:
        """Directories that may hold ``entity_id``, in lookup order."""

        candidates = [self.collection_dir(kind, message_type) / entity_id]
        if kind is EntityKind.SERVICE:
            domains = self.collection_dir(EntityKind.DOMAIN)
            if domains.is_dir():
                pattern = f"*/{EntityKind.SERVICE.collection}/{entity_id}"
                candidates.extend(sorted(domains.glob(pattern)))
        return candidates

    def locate(
        self,
        kind: EntityKind,
        entity_id: str,
        message_type: MessageType | None = None,
    ) -> Path | None:
        for candidate in self.candidate_dirs(kind, entity_id, message_type):
            if candidate.is_dir():
                return candidate
        return None

    def new_entity_dir(self, entity: CatalogEntity) -> Path:
        parent = entity.relationships.parent_domain
        if (
            entity.kind is EntityKind.SERVICE
            and parent is not None
            and self.nest_services_under_domain
        ):
            domain_dir = self.locate(EntityKind.DOMAIN, parent.id) or (
                self.collection_dir(EntityKind.DOMAIN) / parent.id
            )
            return domain_dir / EntityKind.SERVICE.collection / entity.id
        return self.collection_dir(entity.kind, entity.message_type) / entity.id

    def archive_root(self, entity_dir: Path) -> Path:
        return entity_dir / ARCHIVE_DIR_NAME

    def archive_dir(self, entity_dir: Path, version: str) -> Path:
        return self.archive_root(entity_dir) / version

    def staging_dir(self, entity_dir: Path, version: str, state: StagingState) -> Path:
        return self.archive_root(entity_dir) / f".{version}.{state}"

    def document_path(self, directory: Path) -> Path:
        return directory / f"{DOCUMENT_STEM}.{self.document_format}"

    def find_document(self, directory: Path) -> Path | None:
        """Existing document in ``directory``; the configured format wins if both exist."""

        preferred = self.document_path(directory)
        if preferred.is_file():
            return preferred
        for name in DOCUMENT_NAMES:
            path = directory / name
            if path.is_file():
                return path
        return None

    def attachment_paths(self, directory: Path) -> list[Path]:
        """Regular files next to the document, excluding the document and temp files."""

        if not directory.is_dir():
            return []
        return sorted(
            path
            for path in directory.iterdir()
            if path.is_file() and path.name not in DOCUMENT_NAMES and not is_tmp_file(path)
        )
