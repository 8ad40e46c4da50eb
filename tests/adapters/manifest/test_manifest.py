from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from catalogsync.adapters.manifest import ManifestError, load_manifest, parse_manifest
from catalogsync.adapters.manifest.schema import ManifestPayload
from catalogsync.adapters.manifest.translator import translate_manifest
from catalogsync.domain.model import EntityKind, MessageType
from tests.helpers.revisions import ref

if TYPE_CHECKING:
    from pathlib import Path

YAML_MANIFEST = """\
generator: asyncapi
revisions:
  - id: Orders
    kind: domain
    version: 1
  - id: OrderService
    kind: service
    version: 1.0.0
    domain: {id: Orders}
    fields:
      name: Order service
      specifications:
        asyncapiPath: asyncapi.yml
    sends:
      - id: OrderPlaced
        version: 2
    files:
      asyncapi.yml: "asyncapi: 3.0.0"
  - id: OrderPlaced
    kind: message
    messageType: event
    version: 2
    latest: false
    sequenceHint: 7
    forced:
      owners: [orders-team]
    notices: [schema registry unavailable]
"""


def test_parse_yaml_manifest() -> None:
    manifest = parse_manifest(YAML_MANIFEST)

    assert manifest.generator == "asyncapi"
    domain, service, event = manifest.revisions
    assert domain.kind is EntityKind.DOMAIN
    assert domain.version == "1"
    assert service.version == "1.0.0"
    assert service.relationships.parent_domain == ref("Orders")
    assert service.relationships.sends == (ref("OrderPlaced", "2"),)
    assert service.source_fields["specifications"] == {"asyncapiPath": "asyncapi.yml"}
    assert service.files == {"asyncapi.yml": "asyncapi: 3.0.0"}
    assert event.message_type is MessageType.EVENT
    assert event.is_latest_from_source is False
    assert event.sequence_hint == 7
    assert event.forced_fields == {"owners": ["orders-team"]}
    assert event.notices == ("schema registry unavailable",)


def test_parse_json_manifest() -> None:
    text = json.dumps(
        {
            "revisions": [
                {"id": "orders", "kind": "channel", "version": "1", "writesTo": [{"id": "db"}]}
            ]
        }
    )

    [channel] = parse_manifest(text).revisions

    assert channel.relationships.writes_to == (ref("db"),)


def test_top_level_list_and_empty_manifest() -> None:
    manifest = parse_manifest("- {id: orders, kind: channel, version: 1}\n")
    assert manifest.generator is None
    assert [revision.id for revision in manifest.revisions] == ["orders"]

    assert parse_manifest("").revisions == []


@pytest.mark.parametrize(
    ("text", "message"),
    [
        ("revisions: [", "cannot parse manifest"),
        ("revisions:\n  - {id: x, kind: planet, version: 1}\n", "invalid manifest"),
        ("revisions:\n  - {id: x, kind: channel, version: 1, colour: red}\n", "invalid manifest"),
        ("revisions:\n  - {id: x, kind: message, version: 1}\n", "revision #0 \\(x\\)"),
        ("revisions:\n  - {id: x, kind: channel, version: latest}\n", "reserved"),
        ("revisions:\n  - {id: x, kind: channel, version: 1.10}\n", "quote it as a string"),
        (
            "revisions:\n  - {id: x, kind: channel, version: 1, fields: {sends: []}}\n",
            "reserved",
        ),
    ],
)
def test_invalid_manifests_are_rejected(text: str, message: str) -> None:
    with pytest.raises(ManifestError, match=message):
        parse_manifest(text, source="bad.yml")


def test_quoted_decimal_version_keeps_its_spelling() -> None:
    text = 'revisions:\n  - {id: x, kind: channel, version: "1.10"}\n'

    [channel] = parse_manifest(text).revisions

    assert channel.version == "1.10"


def test_load_manifest_from_disk(tmp_path: Path) -> None:
    path = tmp_path / "manifest.yml"
    path.write_text(YAML_MANIFEST, encoding="utf-8")

    assert len(load_manifest(path).revisions) == 3

    with pytest.raises(ManifestError, match="Cannot read manifest"):
        load_manifest(tmp_path / "missing.yml")


def test_translate_manifest_keeps_payload_order() -> None:
    payload = ManifestPayload.model_validate(
        {
            "revisions": [
                {"id": "b", "kind": "channel", "version": "2"},
                {"id": "a", "kind": "channel", "version": "1"},
            ]
        }
    )

    assert [revision.id for revision in translate_manifest(payload)] == ["b", "a"]
