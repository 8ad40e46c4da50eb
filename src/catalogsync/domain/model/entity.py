"""Catalog entities, their incoming revisions and relationship references."""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

from catalogsync.domain.errors import InvalidRevisionError
from catalogsync.domain.model.enums import EntityKind, MessageType

if TYPE_CHECKING:
    from collections.abc import Mapping

LATEST: Final[str] = "latest"

# Fields authored in the catalog by people; the engine only seeds them on creation.
USER_FIELD_KEYS: Final[frozenset[str]] = frozenset(
    {"markdown", "badges", "summary", "owners", "styles", "attachments", "repository"}
)
# Mapping-valued source fields merged key by key instead of replaced.
KEY_MERGED_FIELD_KEYS: Final[frozenset[str]] = frozenset({"specifications"})
# Frontmatter keys owned by the document format itself.
RESERVED_FIELD_KEYS: Final[frozenset[str]] = frozenset(
    {
        "id",
        "version",
        "sends",
        "receives",
        "writesTo",
        "readsFrom",
        "channels",
        "services",
        "reconciliation",
    }
)


def validate_segment(value: object, *, label: str) -> str:
    """Return ``value`` if it is usable as a single directory name."""

    if not isinstance(value, str) or not value.strip():
        raise InvalidRevisionError(f"{label} must be a non-empty string, got {value!r}")
    if "/" in value or "\\" in value or "\x00" in value:
        raise InvalidRevisionError(f"{label} {value!r} must not contain path separators")
    if value.startswith("."):
        raise InvalidRevisionError(f"{label} {value!r} must not start with '.'")
    return value


def validate_version(value: object) -> str:
    version = validate_segment(value, label="version")
    if version == LATEST:
        raise InvalidRevisionError(f"{LATEST!r} is reserved and cannot be used as a version")
    return version


@dataclass(frozen=True, slots=True)
class EntityRef:
    """Relationship target; ``version=None`` points at whatever is current."""

    id: str
    version: str | None = None

    def __post_init__(self) -> None:
        validate_segment(self.id, label="reference id")
        if self.version is not None:
            validate_version(self.version)

    def as_dict(self) -> dict[str, str]:
        if self.version is None:
            return {"id": self.id}
        return {"id": self.id, "version": self.version}

    def __str__(self) -> str:
        return self.id if self.version is None else f"{self.id}@{self.version}"


@dataclass(frozen=True, slots=True, kw_only=True)
class Relationships:
    sends: tuple[EntityRef, ...] = ()
    receives: tuple[EntityRef, ...] = ()
    writes_to: tuple[EntityRef, ...] = ()
    reads_from: tuple[EntityRef, ...] = ()
    channels: tuple[EntityRef, ...] = ()
    services: tuple[EntityRef, ...] = ()
    parent_domain: EntityRef | None = None

    def as_dict(self) -> dict[str, object]:
        return {
            "sends": [ref.as_dict() for ref in self.sends],
            "receives": [ref.as_dict() for ref in self.receives],
            "writes_to": [ref.as_dict() for ref in self.writes_to],
            "reads_from": [ref.as_dict() for ref in self.reads_from],
            "channels": [ref.as_dict() for ref in self.channels],
            "services": [ref.as_dict() for ref in self.services],
            "parent_domain": self.parent_domain.as_dict() if self.parent_domain else None,
        }


@dataclass(frozen=True, slots=True)
class EntityKey:
    """Identity of an entity across all of its versions."""

    kind: EntityKind
    id: str
    message_type: MessageType | None = None

    def __str__(self) -> str:
        label = self.message_type or self.kind
        return f"{label}:{self.id}"


def _check_kind(kind: EntityKind, message_type: MessageType | None) -> None:
    if kind is EntityKind.MESSAGE and message_type is None:
        raise InvalidRevisionError("messages require a message type")
    if kind is not EntityKind.MESSAGE and message_type is not None:
        raise InvalidRevisionError(f"{kind} entities cannot have a message type")


def canonical_hash(payload: Mapping[str, object]) -> str:
    encoded = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(encoded.encode("utf-8")).hexdigest()


@dataclass(frozen=True, slots=True, kw_only=True)
class EntityRevision:
    """One version of an entity as described by a source."""

    id: str
    kind: EntityKind
    version: str
    message_type: MessageType | None = None
    is_latest_from_source: bool = True
    source_fields: Mapping[str, object] = field(default_factory=dict)
    relationships: Relationships = field(default_factory=Relationships)
    forced_fields: Mapping[str, object] = field(default_factory=dict)
    files: Mapping[str, str] = field(default_factory=dict)
    sequence_hint: int | None = None
    notices: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        validate_segment(self.id, label="id")
        validate_version(self.version)
        _check_kind(self.kind, self.message_type)
        checked = (("source field", self.source_fields), ("forced field", self.forced_fields))
        for label, fields in checked:
            reserved = sorted(RESERVED_FIELD_KEYS.intersection(fields))
            if reserved:
                raise InvalidRevisionError(f"{label} names {reserved} are reserved")
        for name in self.files:
            validate_segment(name, label="file name")
            if name.startswith("index.") or name in ("versioned", "services"):
                raise InvalidRevisionError(f"file name {name!r} collides with the catalog layout")
        if self.relationships.parent_domain is not None and self.kind is not EntityKind.SERVICE:
            raise InvalidRevisionError("only services can belong to a domain")
        if self.sequence_hint is not None and isinstance(self.sequence_hint, bool):
            raise InvalidRevisionError("sequence_hint must be an integer")

    @property
    def key(self) -> EntityKey:
        return EntityKey(self.kind, self.id, self.message_type)

    @property
    def source_hash(self) -> str:
        """SHA-256 over the canonical JSON of what the source provided."""
        return canonical_hash(
            {
                "fields": dict(self.source_fields),
                "relationships": self.relationships.as_dict(),
                "files": dict(self.files),
            }
        )


@dataclass(slots=True, kw_only=True)
class CatalogEntity:
    """An entity revision as held by the store (current or archived).

    ``files`` holds contents still to be written next to the document while
    ``file_names`` lists what the store found on disk.
    """

    id: str
    kind: EntityKind
    version: str
    message_type: MessageType | None = None
    user_fields: dict[str, object] = field(default_factory=dict)
    source_fields: dict[str, object] = field(default_factory=dict)
    relationships: Relationships = field(default_factory=Relationships)
    files: dict[str, str] = field(default_factory=dict)
    file_names: tuple[str, ...] = ()
    sequence_hint: int | None = None
    source_hash: str | None = None
    archived_versions: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        validate_segment(self.id, label="id")
        validate_version(self.version)
        _check_kind(self.kind, self.message_type)

    @property
    def key(self) -> EntityKey:
        return EntityKey(self.kind, self.id, self.message_type)

    @property
    def markdown(self) -> str:
        value = self.user_fields.get("markdown")
        return value if isinstance(value, str) else ""
