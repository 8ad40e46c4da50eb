"""Shared reconciliation contract components.

Actions, per-entity outcomes and the batch report, plus the options protocol
the engine reads. Nothing here touches the store.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from catalogsync.domain.model import EntityKey


class ReconcileAction(StrEnum):
    """Store mutation chosen for one incoming revision."""

    CREATE = "create"
    UPDATE_SAME_VERSION = "update"
    SUPERSEDE = "supersede"
    ARCHIVE_WRITE = "archive_write"
    SKIP_DUPLICATE = "skip"


class VersionRelation(StrEnum):
    """How the incoming version orders against the stored one."""

    SAME = "same"
    NEWER = "newer"
    OLDER = "older"


@dataclass(slots=True, kw_only=True)
class Resolution:
    action: ReconcileAction
    relation: VersionRelation | None = None
    reason: str | None = None


@dataclass(slots=True, kw_only=True)
class MergedFields:
    user_fields: dict[str, object]
    source_fields: dict[str, object]
    files: dict[str, str]


class EngineOptions(Protocol):
    """Subset of generator options the engine depends on."""

    @property
    def include_all_versions(self) -> bool: ...

    @property
    def preserve_existing_messages(self) -> bool: ...

    @property
    def forward_only(self) -> bool: ...


@dataclass(slots=True, kw_only=True)
class EntityOutcome:
    """Result of reconciling one revision."""

    key: EntityKey
    version: str
    action: ReconcileAction | None = None
    error: Exception | None = None
    notices: tuple[str, ...] = ()
    recovered: bool = False

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def error_kind(self) -> str | None:
        return type(self.error).__name__ if self.error is not None else None


@dataclass(slots=True)
class ReconciliationReport:
    outcomes: list[EntityOutcome] = field(default_factory=list)

    def add(self, outcome: EntityOutcome) -> None:
        self.outcomes.append(outcome)

    @property
    def failures(self) -> list[EntityOutcome]:
        return [outcome for outcome in self.outcomes if outcome.failed]

    @property
    def notices(self) -> list[tuple[EntityKey, str]]:
        return [(outcome.key, notice) for outcome in self.outcomes for notice in outcome.notices]

    @property
    def failed(self) -> bool:
        return any(outcome.failed for outcome in self.outcomes)

    def counts(self) -> Counter[str]:
        """Outcome counts keyed by action value, failures under ``"failed"``."""

        counter: Counter[str] = Counter()
        for outcome in self.outcomes:
            if outcome.failed:
                counter["failed"] += 1
            elif outcome.action is not None:
                counter[outcome.action.value] += 1
        return counter


@dataclass(slots=True)
class RepairReport:
    """Entities touched by a catalog-wide recovery pass."""

    recovered: list[EntityKey] = field(default_factory=list)
    restored: list[tuple[EntityKey, str]] = field(default_factory=list)
    failures: list[tuple[EntityKey, Exception]] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return bool(self.failures)
