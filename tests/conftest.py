"""Shared fixtures: temporary data roots and an in-memory remote client."""

import tempfile
from collections.abc import Generator
from pathlib import Path
from typing import Any, Optional

import pytest

from shero_core.config import KEY_ENV_VARS, URL_ENV_VARS, DataPaths, RemoteConfig
from shero_core.exceptions import RemoteStoreError
from shero_core.models import Entity


class FakeClient:
    """In-memory stand-in for SupabaseClient.

    Attributes:
        tables: Rows per table name.
        fail_writes_after: Number of upserts/deletes that succeed before
            every further one raises; None never fails.
        fail_reads: Tables whose reads raise.
        reachable: When False every call raises.
    """

    def __init__(self, config: Optional[RemoteConfig] = None, **kwargs: Any) -> None:
        self.config = config
        self.kwargs = kwargs
        self.tables: dict[str, list[dict[str, Any]]] = {e.value: [] for e in Entity}
        self.fail_writes_after: Optional[int] = None
        self.fail_reads: set[str] = set()
        self.reachable = True
        self.writes = 0
        self.calls: list[tuple[str, str]] = []
        self.closed = False

    def _check_write(self) -> None:
        if not self.reachable:
            raise RemoteStoreError("connection refused")
        if self.fail_writes_after is not None and self.writes >= self.fail_writes_after:
            raise RemoteStoreError("HTTP 500: write rejected")
        self.writes += 1

    def select(self, table: str, columns: str = "*", limit: Optional[int] = None, offset: Optional[int] = None, order: Optional[str] = None) -> list[dict[str, Any]]:
        self.calls.append(("select", table))
        if not self.reachable or table in self.fail_reads:
            raise RemoteStoreError(f"Select from {table} failed. HTTP 401: Invalid API key")
        rows = [dict(r) for r in self.tables[table]]
        return rows[:limit] if limit is not None else rows

    def select_all(self, table: str, page_size: int = 1000) -> list[dict[str, Any]]:
        return self.select(table)

    def upsert(self, table: str, row: dict[str, Any]) -> None:
        self.calls.append(("upsert", table))
        self._check_write()
        rows = self.tables[table]
        for i, existing in enumerate(rows):
            if existing["id"] == row["id"]:
                rows[i] = dict(row)
                return
        rows.append(dict(row))

    def delete(self, table: str, record_id: str) -> None:
        self.calls.append(("delete", table))
        self._check_write()
        self.tables[table] = [r for r in self.tables[table] if r["id"] != record_id]

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def temp_data_dir() -> Generator[Path, None, None]:
    """Create a temporary data directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_paths(temp_data_dir: Path) -> DataPaths:
    """Create a DataPaths for testing."""
    return DataPaths.from_root(temp_data_dir)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove remote store and SHERO_* settings from the environment."""
    for name in (*URL_ENV_VARS, *KEY_ENV_VARS, "SHERO_PARSE_MODE", "SHERO_PROBE", "SHERO_TIMEOUT", "SHERO_RETRIES", "SHERO_DATA_ROOT"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def fake_client() -> FakeClient:
    return FakeClient(RemoteConfig(url="https://demo.supabase.co", key="anon-key"))


@pytest.fixture
def remote_config() -> RemoteConfig:
    return RemoteConfig(url="https://demo.supabase.co", key="anon-key")
