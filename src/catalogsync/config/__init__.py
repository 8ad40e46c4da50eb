"""Application configuration helpers."""

from __future__ import annotations

from .catalog import (
    CatalogConfig,
    DocumentFormat,
    get_catalog_config,
    parse_document_format,
    require_catalog_config,
)
from .env import env_flag, optional_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .generators import (
    ApicurioOptions,
    AsyncApiOptions,
    AwsGlueOptions,
    AzureSchemaRegistryOptions,
    EventBridgeOptions,
    GeneratorName,
    ManualOptions,
    OpenApiOptions,
    ReconciliationOptions,
    options_for,
    parse_generator_name,
)
from .logging import configure_logging

__all__ = [
    "ApicurioOptions",
    "AsyncApiOptions",
    "AwsGlueOptions",
    "AzureSchemaRegistryOptions",
    "CatalogConfig",
    "ConfigurationError",
    "DocumentFormat",
    "EventBridgeOptions",
    "GeneratorName",
    "ManualOptions",
    "MissingConfigurationError",
    "OpenApiOptions",
    "ReconciliationOptions",
    "configure_logging",
    "env_flag",
    "get_catalog_config",
    "optional_env_var",
    "options_for",
    "parse_document_format",
    "parse_generator_name",
    "require_catalog_config",
    "require_env_vars",
]
