"""Ordering of opaque version strings.

Versions are compared as strings first. Only when they differ is an ordering
scheme chosen over every version known for the entity:

- ``SEMANTIC``: dotted numbers with optional ``v`` prefix, ``-prerelease`` and
  ``+build`` (``1``, ``3``, ``1.0.0``, ``v2.1-rc.1``)
- ``NUMERIC``: one integer wrapped in a prefix and suffix shared by all
  versions (``r1``, ``r10``, ``rev-3``)
- ``SEQUENCE``: source-declared sequence hints, when every version has one

Anything else raises ``AmbiguousVersionOrderError``; so do distinct strings
that order as equal (``1.0`` and ``1.0.0``).
"""

from __future__ import annotations

import re
from enum import StrEnum
from typing import TYPE_CHECKING, Final, TypeAlias

from catalogsync.domain.errors import AmbiguousVersionOrderError

from .contracts import VersionRelation

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping


SortKey: TypeAlias = tuple[object, ...]

_SEMANTIC: Final = re.compile(
    r"^[vV]?(?P<release>\d+(?:\.\d+)*)"
    r"(?:-(?P<pre>[0-9A-Za-z.-]+))?"
    r"(?:\+(?P<build>[0-9A-Za-z.-]+))?$"
)
_NUMERIC: Final = re.compile(r"^(?P<prefix>.*?)(?P<number>\d+)(?P<suffix>\D*)$")


class VersionScheme(StrEnum):
    SEMANTIC = "semantic"
    NUMERIC = "numeric"
    SEQUENCE = "sequence"


def _semantic_key(version: str) -> SortKey | None:
    match = _SEMANTIC.match(version)
    if match is None:
        return None
    release = [int(part) for part in match["release"].split(".")]
    while len(release) > 1 and release[-1] == 0:
        release.pop()
    pre = match["pre"]
    if pre is None:
        return (tuple(release), 1, ())
    identifiers = tuple(
        (0, int(part), "") if part.isdigit() else (1, 0, part) for part in pre.split(".")
    )
    return (tuple(release), 0, identifiers)


def _numeric_parts(version: str) -> tuple[str, int, str] | None:
    match = _NUMERIC.match(version)
    if match is None:
        return None
    return match["prefix"], int(match["number"]), match["suffix"]


def detect_scheme(
    versions: Iterable[str],
    hints: Mapping[str, int | None] | None = None,
) -> VersionScheme:
    """Pick the first scheme that orders every version in ``versions``."""

    distinct = sorted(set(versions))
    if all(_semantic_key(version) is not None for version in distinct):
        return VersionScheme.SEMANTIC

    parts = [_numeric_parts(version) for version in distinct]
    if all(part is not None for part in parts):
        shapes = {(part[0], part[2]) for part in parts if part is not None}
        if len(shapes) == 1:
            return VersionScheme.NUMERIC

    hints = hints or {}
    if all(hints.get(version) is not None for version in distinct):
        return VersionScheme.SEQUENCE

    raise AmbiguousVersionOrderError(
        f"Cannot order versions {', '.join(distinct)}: "
        "no common numeric shape and no sequence hints"
    )


def _sort_keys(
    versions: Iterable[str],
    scheme: VersionScheme,
    hints: Mapping[str, int | None],
) -> dict[str, SortKey]:
    keys: dict[str, SortKey] = {}
    for version in versions:
        key: SortKey | None = None
        match scheme:
            case VersionScheme.SEMANTIC:
                key = _semantic_key(version)
            case VersionScheme.NUMERIC:
                parts = _numeric_parts(version)
                key = (parts[1],) if parts is not None else None
            case VersionScheme.SEQUENCE:
                hint = hints.get(version)
                key = (hint,) if hint is not None else None
        if key is None:
            raise AmbiguousVersionOrderError(f"Version {version!r} does not fit {scheme} ordering")
        keys[version] = key
    return keys


def compare_versions(
    incoming: str,
    stored: str,
    *,
    known: Iterable[str] = (),
    hints: Mapping[str, int | None] | None = None,
) -> VersionRelation:
    """Order ``incoming`` against ``stored``; ``known`` widens the scheme decision."""

    if incoming == stored:
        return VersionRelation.SAME
    hints = hints or {}
    scheme = detect_scheme((incoming, stored, *known), hints)
    keys = _sort_keys((incoming, stored), scheme, hints)
    incoming_key, stored_key = keys[incoming], keys[stored]
    if incoming_key == stored_key:
        raise AmbiguousVersionOrderError(
            f"Versions {incoming!r} and {stored!r} are distinct but order as equal ({scheme})"
        )
    return VersionRelation.NEWER if incoming_key > stored_key else VersionRelation.OLDER


def sort_versions(
    versions: Iterable[str],
    hints: Mapping[str, int | None] | None = None,
) -> list[str]:
    """Return ``versions`` oldest first; repeated strings keep their relative order."""

    ordered = list(versions)
    if len(set(ordered)) < 2:  # noqa: PLR2004
        return ordered
    hints = hints or {}
    scheme = detect_scheme(ordered, hints)
    keys = _sort_keys(ordered, scheme, hints)
    seen_keys: dict[SortKey, str] = {}
    for version in ordered:
        seen = seen_keys.setdefault(keys[version], version)
        if seen != version:
            raise AmbiguousVersionOrderError(
                f"Versions {seen!r} and {version!r} are distinct but order as equal ({scheme})"
            )
    return sorted(ordered, key=keys.__getitem__)


def newest_version(
    versions: Iterable[str],
    hints: Mapping[str, int | None] | None = None,
) -> str:
    ordered = sort_versions(versions, hints)
    if not ordered:
        raise ValueError("newest_version() needs at least one version")
    return ordered[-1]
