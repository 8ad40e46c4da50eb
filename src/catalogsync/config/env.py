"""Environment variable readers used by the config loaders."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Final

from .errors import ConfigurationError, MissingConfigurationError

if TYPE_CHECKING:
    from collections.abc import Sequence

_TRUE_VALUES: Final = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES: Final = frozenset({"0", "false", "no", "off"})


def optional_env_var(name: str) -> str | None:
    """Return a stripped environment variable, treating blank values as unset."""

    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def require_env_vars(names: Sequence[str]) -> dict[str, str]:
    """Return every variable in ``names``; raise listing all that are missing or blank."""

    values: dict[str, str] = {}
    missing: list[str] = []
    for name in names:
        value = optional_env_var(name)
        if value is None:
            missing.append(name)
        else:
            values[name] = value
    if missing:
        raise MissingConfigurationError(missing)
    return values


def env_flag(name: str, *, default: bool) -> bool:
    """Parse a boolean flag such as ``CATALOG_NEST_SERVICES=false``."""

    value = optional_env_var(name)
    if value is None:
        return default
    lowered = value.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"Invalid boolean for {name}: {value!r}")
