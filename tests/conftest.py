"""Shared pytest fixtures for all tests."""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path

import pytest

import startup_valuator.server as server_module
from startup_valuator.config import DEFAULT_DB_PATH
from startup_valuator.store import SQLiteStore

# Close the module-level store that was created at import time so the
# default database file can be cleaned up.
_original_store: SQLiteStore = server_module.store
_original_store.close()
_default_db = Path(DEFAULT_DB_PATH)
if _default_db.exists():
    _default_db.unlink()


@pytest.fixture(autouse=True)
def isolated_store(tmp_path: Path) -> Generator[SQLiteStore, None, None]:
    """Replace the module-level store with a temp-dir-backed instance."""
    store = SQLiteStore(tmp_path / "test.db")
    server_module.store = store
    yield store
    store.close()
