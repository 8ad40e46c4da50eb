"""Catalog location and on-disk format configuration."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Final, Literal, TypeAlias, cast

from .env import env_flag, optional_env_var, require_env_vars
from .errors import ConfigurationError

DocumentFormat: TypeAlias = Literal["md", "mdx"]

CATALOG_DIR_ENV: Final[str] = "CATALOG_DIR"
DOCUMENT_FORMAT_ENV: Final[str] = "CATALOG_DOCUMENT_FORMAT"
NEST_SERVICES_ENV: Final[str] = "CATALOG_NEST_SERVICES"
DOCUMENT_FORMATS: Final[tuple[DocumentFormat, ...]] = ("md", "mdx")


@dataclass(frozen=True, slots=True)
class CatalogConfig:
    root: Path
    document_format: DocumentFormat = "md"
    nest_services_under_domain: bool = True

    def resolve_root(self) -> Path:
        return self.root.expanduser().resolve()

    def ensure_root(self) -> Path:
        root = self.resolve_root()
        root.mkdir(parents=True, exist_ok=True)
        return root


def parse_document_format(value: str) -> DocumentFormat:
    normalized = value.strip().lower().lstrip(".")
    if normalized not in DOCUMENT_FORMATS:
        allowed = ", ".join(DOCUMENT_FORMATS)
        raise ConfigurationError(f"Unsupported document format {value!r} (expected {allowed})")
    return cast("DocumentFormat", normalized)


def _document_format_from_env() -> DocumentFormat:
    value = optional_env_var(DOCUMENT_FORMAT_ENV)
    return parse_document_format(value) if value else "md"


def get_catalog_config(*, root: Path | None = None) -> CatalogConfig:
    """Build the catalog configuration, falling back to the working directory."""

    env_root = optional_env_var(CATALOG_DIR_ENV)
    resolved_root = root or (Path(env_root) if env_root else Path.cwd())
    return CatalogConfig(
        root=resolved_root,
        document_format=_document_format_from_env(),
        nest_services_under_domain=env_flag(NEST_SERVICES_ENV, default=True),
    )


def require_catalog_config() -> CatalogConfig:
    """Like ``get_catalog_config`` but insists on an explicit ``CATALOG_DIR``."""

    values = require_env_vars((CATALOG_DIR_ENV,))
    return get_catalog_config(root=Path(values[CATALOG_DIR_ENV]))
