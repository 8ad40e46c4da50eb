"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class EntityKind(StrEnum):
    DOMAIN = "domain"
    SERVICE = "service"
    MESSAGE = "message"
    CHANNEL = "channel"

    @property
    def collection(self) -> str:
        """Plural path segment; messages are stored under their message type instead."""
        return f"{self.value}s"


class MessageType(StrEnum):
    EVENT = "event"
    COMMAND = "command"
    QUERY = "query"

    @property
    def collection(self) -> str:
        return "queries" if self is MessageType.QUERY else f"{self.value}s"


# Domains first so services can link to them, channels before the messages that use them.
KIND_PROCESSING_ORDER: tuple[EntityKind, ...] = (
    EntityKind.DOMAIN,
    EntityKind.CHANNEL,
    EntityKind.MESSAGE,
    EntityKind.SERVICE,
)
