"""Per-generator reconciliation options.

Each generator gets its own tagged options type so the defaults that used to
live in loosely typed option maps are explicit and reviewable in one place.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Final

from .errors import ConfigurationError


class GeneratorName(StrEnum):
    ASYNCAPI = "asyncapi"
    OPENAPI = "openapi"
    AWS_GLUE = "aws-glue"
    APICURIO = "apicurio"
    EVENTBRIDGE = "eventbridge"
    AZURE_SCHEMA_REGISTRY = "azure-schema-registry"
    MANUAL = "manual"


@dataclass(frozen=True, slots=True, kw_only=True)
class ReconciliationOptions:
    """Options understood by the reconciliation engine.

    ``include_all_versions``: keep revisions the source does not mark as latest
    (they are written into the archive); when false they are dropped up front.
    ``preserve_existing_messages``: keep stored message markdown; when false the
    default markdown is re-rendered on every write.
    ``forward_only``: the source yields revisions strictly oldest-to-newest, so a
    newer revision supersedes the current one even if it is not flagged latest.
    """

    generator: GeneratorName = GeneratorName.MANUAL
    include_all_versions: bool = True
    preserve_existing_messages: bool = True
    forward_only: bool = False


@dataclass(frozen=True, slots=True, kw_only=True)
class ManualOptions(ReconciliationOptions):
    generator: GeneratorName = GeneratorName.MANUAL


@dataclass(frozen=True, slots=True, kw_only=True)
class AsyncApiOptions(ReconciliationOptions):
    generator: GeneratorName = GeneratorName.ASYNCAPI


@dataclass(frozen=True, slots=True, kw_only=True)
class OpenApiOptions(ReconciliationOptions):
    generator: GeneratorName = GeneratorName.OPENAPI


@dataclass(frozen=True, slots=True, kw_only=True)
class AwsGlueOptions(ReconciliationOptions):
    generator: GeneratorName = GeneratorName.AWS_GLUE
    include_all_versions: bool = False
    forward_only: bool = True


@dataclass(frozen=True, slots=True, kw_only=True)
class ApicurioOptions(ReconciliationOptions):
    generator: GeneratorName = GeneratorName.APICURIO


@dataclass(frozen=True, slots=True, kw_only=True)
class EventBridgeOptions(ReconciliationOptions):
    generator: GeneratorName = GeneratorName.EVENTBRIDGE


@dataclass(frozen=True, slots=True, kw_only=True)
class AzureSchemaRegistryOptions(ReconciliationOptions):
    generator: GeneratorName = GeneratorName.AZURE_SCHEMA_REGISTRY


OPTIONS_BY_GENERATOR: Final[dict[GeneratorName, type[ReconciliationOptions]]] = {
    GeneratorName.MANUAL: ManualOptions,
    GeneratorName.ASYNCAPI: AsyncApiOptions,
    GeneratorName.OPENAPI: OpenApiOptions,
    GeneratorName.AWS_GLUE: AwsGlueOptions,
    GeneratorName.APICURIO: ApicurioOptions,
    GeneratorName.EVENTBRIDGE: EventBridgeOptions,
    GeneratorName.AZURE_SCHEMA_REGISTRY: AzureSchemaRegistryOptions,
}


def parse_generator_name(value: str) -> GeneratorName:
    try:
        return GeneratorName(value.strip().lower())
    except ValueError as exc:
        allowed = ", ".join(name.value for name in GeneratorName)
        message = f"Unknown generator {value!r} (expected one of {allowed})"
        raise ConfigurationError(message) from exc


def options_for(
    generator: GeneratorName | str,
    *,
    include_all_versions: bool | None = None,
    preserve_existing_messages: bool | None = None,
    forward_only: bool | None = None,
) -> ReconciliationOptions:
    """Return the tagged options for ``generator`` with explicit overrides applied."""

    name = generator if isinstance(generator, GeneratorName) else parse_generator_name(generator)
    options_cls = OPTIONS_BY_GENERATOR[name]
    overrides: dict[str, bool] = {}
    if include_all_versions is not None:
        overrides["include_all_versions"] = include_all_versions
    if preserve_existing_messages is not None:
        overrides["preserve_existing_messages"] = preserve_existing_messages
    if forward_only is not None:
        overrides["forward_only"] = forward_only
    return options_cls(**overrides)
