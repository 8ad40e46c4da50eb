"""Domain port definitions for adapters."""

from __future__ import annotations

from .rendering import Badge, DefaultContent, RenderDefaults
from .store import EntityStore, PickNewest

__all__ = [
    "Badge",
    "DefaultContent",
    "EntityStore",
    "PickNewest",
    "RenderDefaults",
]
