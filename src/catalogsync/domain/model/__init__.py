"""Public domain model surface."""

from __future__ import annotations

from catalogsync.domain.model.entity import (
    KEY_MERGED_FIELD_KEYS,
    LATEST,
    RESERVED_FIELD_KEYS,
    USER_FIELD_KEYS,
    CatalogEntity,
    EntityKey,
    EntityRef,
    EntityRevision,
    Relationships,
    canonical_hash,
    validate_segment,
    validate_version,
)
from catalogsync.domain.model.enums import KIND_PROCESSING_ORDER, EntityKind, MessageType

__all__ = [  # noqa: RUF022
    # entities
    "CatalogEntity",
    "EntityKey",
    "EntityRef",
    "EntityRevision",
    "Relationships",
    # enums
    "EntityKind",
    "MessageType",
    "KIND_PROCESSING_ORDER",
    # field classification
    "LATEST",
    "USER_FIELD_KEYS",
    "KEY_MERGED_FIELD_KEYS",
    "RESERVED_FIELD_KEYS",
    # helpers
    "canonical_hash",
    "validate_segment",
    "validate_version",
]
