"""Read revision manifests (YAML or JSON) from disk."""

from __future__ import annotations

import json
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

import yaml
from pydantic import ValidationError

from catalogsync.domain.errors import InvalidRevisionError

from .schema import ManifestPayload
from .translator import translate_revision

if TYPE_CHECKING:
    from pathlib import Path

    from catalogsync.domain.model import EntityRevision

log = getLogger(__name__)


class ManifestError(ValueError):
    """Raised when a manifest cannot be read or does not describe valid revisions."""


@dataclass(slots=True)
class Manifest:
    generator: str | None
    revisions: list[EntityRevision]


def parse_manifest(text: str, *, source: str = "<manifest>") -> Manifest:
    try:
        data = json.loads(text) if text.lstrip().startswith("{") else yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ManifestError(f"{source}: cannot parse manifest: {exc}") from exc
    if data is None:
        data = {}
    if isinstance(data, list):
        data = {"revisions": data}

    try:
        payload = ManifestPayload.model_validate(data)
    except ValidationError as exc:
        raise ManifestError(f"{source}: invalid manifest:\n{exc}") from exc

    revisions: list[EntityRevision] = []
    for index, revision in enumerate(payload.revisions):
        try:
            revisions.append(translate_revision(revision))
        except InvalidRevisionError as exc:
            raise ManifestError(f"{source}: revision #{index} ({revision.id}): {exc}") from exc
    log.debug("Loaded %s revisions from %s", len(revisions), source)
    return Manifest(generator=payload.generator, revisions=revisions)


def load_manifest(path: Path) -> Manifest:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ManifestError(f"Cannot read manifest {path}: {exc}") from exc
    return parse_manifest(text, source=str(path))
