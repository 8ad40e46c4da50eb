"""Filesystem adapter: the catalog directory tree as an entity store."""

from __future__ import annotations

from .document import entity_from_document, parse_document, render_document
from .layout import CatalogLayout, StagingState
from .store import FileSystemEntityStore

__all__ = [
    "CatalogLayout",
    "FileSystemEntityStore",
    "StagingState",
    "entity_from_document",
    "parse_document",
    "render_document",
]
