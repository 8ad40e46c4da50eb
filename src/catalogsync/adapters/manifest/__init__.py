"""Manifest adapter: revisions described in a YAML or JSON file."""

from __future__ import annotations

from .loader import Manifest, ManifestError, load_manifest, parse_manifest
from .schema import ManifestPayload, RevisionPayload
from .translator import translate_manifest, translate_revision

__all__ = [
    "Manifest",
    "ManifestError",
    "ManifestPayload",
    "RevisionPayload",
    "load_manifest",
    "parse_manifest",
    "translate_manifest",
    "translate_revision",
]
