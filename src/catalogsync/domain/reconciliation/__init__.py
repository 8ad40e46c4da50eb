"""Reconciliation core for merging source revisions into the versioned catalog.

Layered flow per revision:
1) fetch the current state, recovering interrupted writes
2) resolve the incoming version against current and archived versions
3) merge fields (user-owned vs. source-owned) and relationships
4) perform one store mutation sequence
"""

from __future__ import annotations

from .contracts import (
    EngineOptions,
    EntityOutcome,
    MergedFields,
    ReconcileAction,
    ReconciliationReport,
    RepairReport,
    Resolution,
    VersionRelation,
)
from .engine import ReconciliationEngine
from .versions import VersionScheme, compare_versions, newest_version, sort_versions

__all__ = [
    "EngineOptions",
    "EntityOutcome",
    "MergedFields",
    "ReconcileAction",
    "ReconciliationEngine",
    "ReconciliationReport",
    "RepairReport",
    "Resolution",
    "VersionRelation",
    "VersionScheme",
    "compare_versions",
    "newest_version",
    "sort_versions",
]
