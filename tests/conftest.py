from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from catalogsync.adapters.filesystem import FileSystemEntityStore
from catalogsync.config import ManualOptions
from catalogsync.domain.reconciliation import ReconciliationEngine
from tests.helpers.revisions import fixed_render

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("CATALOG_DIR", "CATALOG_DOCUMENT_FORMAT", "CATALOG_NEST_SERVICES"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def catalog_root(tmp_path: Path) -> Path:
    root = tmp_path / "catalog"
    root.mkdir()
    return root


@pytest.fixture
def store(catalog_root: Path) -> FileSystemEntityStore:
    return FileSystemEntityStore(catalog_root)


@pytest.fixture
def engine(store: FileSystemEntityStore) -> ReconciliationEngine:
    return ReconciliationEngine(store=store, render=fixed_render, options=ManualOptions())
