"""Entity documents: YAML frontmatter followed by the markdown body."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import TYPE_CHECKING, Final

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from catalogsync.domain.errors import CorruptDocumentError, InvalidRevisionError
from catalogsync.domain.model import (
    USER_FIELD_KEYS,
    CatalogEntity,
    EntityKind,
    EntityRef,
    MessageType,
    Relationships,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

_FRONTMATTER: Final = re.compile(
    r"\A---[ \t]*\r?\n(?P<yaml>.*?)^---[ \t]*\r?$\n?(?P<body>.*)\Z",
    re.DOTALL | re.MULTILINE,
)


def _to_str(value: object) -> object:
    # YAML reads unquoted versions such as 1 as numbers. 1.10 would come back as 1.1.
    if isinstance(value, bool):
        return value
    if isinstance(value, float):
        message = f"unquoted decimal {value!r} is ambiguous, quote it as a string"
        raise ValueError(message)  # noqa: TRY004
    if isinstance(value, int):
        return str(value)
    return value


class DocumentModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class RefModel(DocumentModel):
    id: str
    version: str | None = None

    _coerce = field_validator("id", "version", mode="before")(_to_str)

    def to_ref(self) -> EntityRef:
        return EntityRef(self.id, self.version)


class ReconciliationMeta(DocumentModel):
    kind: EntityKind
    message_type: MessageType | None = Field(default=None, alias="messageType")
    source_keys: list[str] = Field(default_factory=list, alias="sourceKeys")
    source_hash: str | None = Field(default=None, alias="sourceHash")
    sequence_hint: int | None = Field(default=None, alias="sequenceHint")
    domain: RefModel | None = None


class Frontmatter(DocumentModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str
    version: str
    sends: list[RefModel] = Field(default_factory=list)
    receives: list[RefModel] = Field(default_factory=list)
    writes_to: list[RefModel] = Field(default_factory=list, alias="writesTo")
    reads_from: list[RefModel] = Field(default_factory=list, alias="readsFrom")
    channels: list[RefModel] = Field(default_factory=list)
    services: list[RefModel] = Field(default_factory=list)
    reconciliation: ReconciliationMeta | None = None

    _coerce = field_validator("id", "version", mode="before")(_to_str)


def parse_document(text: str) -> tuple[dict[str, object], str]:
    """Split ``text`` into its frontmatter mapping and markdown body."""

    match = _FRONTMATTER.match(text)
    if match is None:
        raise CorruptDocumentError("Document does not start with a YAML frontmatter block")
    try:
        data = yaml.safe_load(match["yaml"]) or {}
    except yaml.YAMLError as exc:
        raise CorruptDocumentError(f"Invalid YAML frontmatter: {exc}") from exc
    if not isinstance(data, dict):
        raise CorruptDocumentError("Frontmatter must be a mapping")
    return data, match["body"].strip()


def _plain(value: object) -> object:
    """Convert mappings and sequences into types ``yaml.safe_dump`` accepts."""

    if isinstance(value, Mapping):
        return {str(key): _plain(item) for key, item in value.items()}
    if isinstance(value, list | tuple | set | frozenset):
        return [_plain(item) for item in value]
    return value


def _refs(refs: Sequence[EntityRef]) -> list[dict[str, str]]:
    return [ref.as_dict() for ref in refs]


def render_document(entity: CatalogEntity) -> str:
    front: dict[str, object] = {"id": entity.id, "version": entity.version}
    for key, value in entity.user_fields.items():
        if key != "markdown":
            front[key] = _plain(value)
    for key, value in entity.source_fields.items():
        front[key] = _plain(value)

    relationships = entity.relationships
    for key, refs in (
        ("sends", relationships.sends),
        ("receives", relationships.receives),
        ("writesTo", relationships.writes_to),
        ("readsFrom", relationships.reads_from),
        ("channels", relationships.channels),
        ("services", relationships.services),
    ):
        if refs:
            front[key] = _refs(refs)

    meta: dict[str, object] = {"kind": entity.kind.value}
    if entity.message_type is not None:
        meta["messageType"] = entity.message_type.value
    meta["sourceKeys"] = sorted(entity.source_fields)
    if entity.source_hash is not None:
        meta["sourceHash"] = entity.source_hash
    if entity.sequence_hint is not None:
        meta["sequenceHint"] = entity.sequence_hint
    if relationships.parent_domain is not None:
        meta["domain"] = relationships.parent_domain.as_dict()
    front["reconciliation"] = meta

    header = yaml.safe_dump(front, sort_keys=False, allow_unicode=True, default_flow_style=False)
    body = entity.markdown.strip()
    return f"---\n{header}---\n\n{body}\n" if body else f"---\n{header}---\n"


def entity_from_document(
    data: Mapping[str, object],
    body: str,
    *,
    kind: EntityKind,
    message_type: MessageType | None,
    file_names: Sequence[str] = (),
) -> CatalogEntity:
    """Rebuild a stored entity; documents without a ``reconciliation`` block are hand-written."""

    try:
        front = Frontmatter.model_validate(data)
    except ValidationError as exc:
        raise CorruptDocumentError(f"Invalid frontmatter: {exc}") from exc

    meta = front.reconciliation
    if meta is not None and (meta.kind is not kind or meta.message_type is not message_type):
        raise CorruptDocumentError(
            f"Document for {front.id} declares {meta.message_type or meta.kind}, "
            f"expected {message_type or kind}"
        )

    extras: dict[str, object] = dict(front.model_extra or {})
    source_keys = set(meta.source_keys) if meta is not None else set(extras) - USER_FIELD_KEYS
    user_fields = {key: value for key, value in extras.items() if key not in source_keys}
    user_fields["markdown"] = body
    source_fields = {key: value for key, value in extras.items() if key in source_keys}

    try:
        relationships = Relationships(
            sends=tuple(ref.to_ref() for ref in front.sends),
            receives=tuple(ref.to_ref() for ref in front.receives),
            writes_to=tuple(ref.to_ref() for ref in front.writes_to),
            reads_from=tuple(ref.to_ref() for ref in front.reads_from),
            channels=tuple(ref.to_ref() for ref in front.channels),
            services=tuple(ref.to_ref() for ref in front.services),
            parent_domain=meta.domain.to_ref() if meta is not None and meta.domain else None,
        )
        return CatalogEntity(
            id=front.id,
            kind=kind,
            version=front.version,
            message_type=message_type,
            user_fields=user_fields,
            source_fields=source_fields,
            relationships=relationships,
            file_names=tuple(file_names),
            sequence_hint=meta.sequence_hint if meta is not None else None,
            source_hash=meta.source_hash if meta is not None else None,
        )
    except InvalidRevisionError as exc:
        raise CorruptDocumentError(f"Invalid entity document for {front.id}: {exc}") from exc
