"""Pydantic models describing revision manifest files."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from catalogsync.domain.model import EntityKind, MessageType


def _to_str(value: object) -> object:
    # Unquoted YAML versions arrive as numbers; floats have already lost their spelling.
    if isinstance(value, bool):
        return value
    if isinstance(value, float):
        message = f"unquoted decimal {value!r} is ambiguous, quote it as a string"
        raise ValueError(message)  # noqa: TRY004
    if isinstance(value, int):
        return str(value)
    return value


class ManifestBaseModel(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class RefPayload(ManifestBaseModel):
    id: str
    version: str | None = None

    _coerce = field_validator("id", "version", mode="before")(_to_str)


class RevisionPayload(ManifestBaseModel):
    id: str
    kind: EntityKind
    version: str
    message_type: MessageType | None = Field(default=None, alias="messageType")
    latest: bool = True
    sequence_hint: int | None = Field(default=None, alias="sequenceHint")
    fields: dict[str, Any] = Field(default_factory=dict)
    forced: dict[str, Any] = Field(default_factory=dict)
    files: dict[str, str] = Field(default_factory=dict)
    sends: list[RefPayload] = Field(default_factory=list)
    receives: list[RefPayload] = Field(default_factory=list)
    writes_to: list[RefPayload] = Field(default_factory=list, alias="writesTo")
    reads_from: list[RefPayload] = Field(default_factory=list, alias="readsFrom")
    channels: list[RefPayload] = Field(default_factory=list)
    services: list[RefPayload] = Field(default_factory=list)
    domain: RefPayload | None = None
    notices: list[str] = Field(default_factory=list)

    _coerce = field_validator("id", "version", mode="before")(_to_str)


class ManifestPayload(ManifestBaseModel):
    generator: str | None = None
    revisions: list[RevisionPayload] = Field(default_factory=list)
