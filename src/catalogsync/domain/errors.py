"""Errors raised by the catalog store and the reconciliation engine."""

from __future__ import annotations


class CatalogError(RuntimeError):
    """Base class for catalog failures scoped to a single entity."""


class NotFoundError(CatalogError):
    """The requested entity or version does not exist."""


class ConflictError(CatalogError):
    """The store refused a write that would overwrite existing state."""


class AmbiguousVersionOrderError(CatalogError):
    """Versions of one entity cannot be ordered without guessing."""


class PartialWriteError(CatalogError):
    """The current revision was archived but its replacement was not written."""


class CorruptDocumentError(CatalogError):
    """A stored entity document cannot be parsed or validated."""


class InvalidRevisionError(ValueError):
    """An incoming revision violates the catalog data model."""


__all__ = [
    "AmbiguousVersionOrderError",
    "CatalogError",
    "ConflictError",
    "CorruptDocumentError",
    "InvalidRevisionError",
    "NotFoundError",
    "PartialWriteError",
]
