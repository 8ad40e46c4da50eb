"""Port for the versioned entity store."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, TypeAlias, runtime_checkable

from catalogsync.domain.model import LATEST

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from catalogsync.domain.model import CatalogEntity, EntityKind, MessageType


PickNewest: TypeAlias = "Callable[[Sequence[str]], str]"


@runtime_checkable
class EntityStore(Protocol):
    """Persistent home of current revisions and their immutable archive.

    Every entity has at most one current revision; superseded revisions live
    in the archive keyed by their version string.
    """

    def get(
        self,
        kind: EntityKind,
        entity_id: str,
        version: str = LATEST,
        *,
        message_type: MessageType | None = None,
    ) -> CatalogEntity:
        """Return the current revision or an archived snapshot; raise ``NotFoundError``."""
        ...

    def find(
        self,
        kind: EntityKind,
        entity_id: str,
        version: str = LATEST,
        *,
        message_type: MessageType | None = None,
    ) -> CatalogEntity | None: ...

    def read_file(
        self,
        kind: EntityKind,
        entity_id: str,
        name: str,
        version: str = LATEST,
        *,
        message_type: MessageType | None = None,
    ) -> str:
        """Return the content of an attachment stored next to a revision's document."""
        ...

    def put(self, entity: CatalogEntity, *, overwrite_current: bool) -> None:
        """Write ``entity`` as the current revision; raise ``ConflictError`` if refused."""
        ...

    def put_archived(self, entity: CatalogEntity) -> None:
        """Write ``entity`` straight into its archive slot."""
        ...

    def archive(
        self,
        kind: EntityKind,
        entity_id: str,
        version: str,
        *,
        message_type: MessageType | None = None,
    ) -> None:
        """Move the current revision (which must be ``version``) into the archive."""
        ...

    def list_archived(
        self,
        kind: EntityKind,
        entity_id: str,
        *,
        message_type: MessageType | None = None,
    ) -> list[str]: ...

    def list_ids(
        self, kind: EntityKind, *, message_type: MessageType | None = None
    ) -> list[str]: ...

    def restore_latest_archived(
        self,
        kind: EntityKind,
        entity_id: str,
        pick_newest: PickNewest,
        *,
        message_type: MessageType | None = None,
    ) -> str:
        """Move the archived version chosen by ``pick_newest`` back to current."""
        ...

    def recover_interrupted(
        self,
        kind: EntityKind,
        entity_id: str,
        *,
        message_type: MessageType | None = None,
    ) -> bool:
        """Finish or roll back interrupted moves; return whether anything was repaired."""
        ...


__all__ = ["EntityStore", "PickNewest"]
