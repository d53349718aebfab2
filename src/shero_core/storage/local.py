"""Local fallback store: three JSON blobs under the data root.

Each collection is one JSON array in its own file, read once at startup
and rewritten wholesale whenever the collection changes. There is no
per-record durability.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Sequence

from shero_core.config import DataPaths
from shero_core.constants import SEED_MENU
from shero_core.exceptions import LocalStoreError
from shero_core.models import Entity, Record
from shero_core.storage.base import ConnectionCheck, GatewayState, PersistenceGateway
from shero_core.storage.schema import from_local, to_local

logger = logging.getLogger(__name__)


class LocalStore:
    """Reads and writes the collection blobs.

    Example:
        >>> store = LocalStore(DataPaths.from_root("data"))
        >>> store.write(Entity.SALES, sales)
        >>> store.read(Entity.SALES) == sales
        True
    """

    def __init__(self, paths: DataPaths) -> None:
        self.paths = paths

    def path_for(self, entity: Entity) -> Path:
        return {
            Entity.MENU_ITEMS: self.paths.menu_items_json,
            Entity.SALES: self.paths.sales_json,
            Entity.EXPENSES: self.paths.expenses_json,
        }[entity]

    def read(self, entity: Entity) -> Optional[list[Record]]:
        """Load a collection, or None when its blob does not exist yet.

        Raises:
            LocalStoreError: If the blob exists but is not a JSON array of objects.
        """
        path = self.path_for(entity)
        if not path.exists():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise LocalStoreError(f"Could not read {path}: {e}") from e
        if not isinstance(data, list) or not all(isinstance(d, dict) for d in data):
            raise LocalStoreError(f"{path} must contain a JSON array of objects")
        return [from_local(entity, d) for d in data]

    def write(self, entity: Entity, records: Sequence[Record]) -> None:
        """Replace a collection's blob atomically."""
        path = self.path_for(entity)
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps([to_local(r) for r in records], indent=2, ensure_ascii=False)

        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
            os.replace(tmp_name, path)
        except OSError as e:
            Path(tmp_name).unlink(missing_ok=True)
            raise LocalStoreError(f"Could not write {path}: {e}") from e
        logger.debug("Wrote %d %s record(s) to %s", len(records), entity.value, path)


class LocalGateway(PersistenceGateway):
    """Gateway that treats local storage as the store of record."""

    def __init__(self, store: LocalStore) -> None:
        self.store = store
        self.state = GatewayState.LOCAL_ACTIVE
        self._loaded = False

    def load(self, entity: Entity) -> list[Record]:
        records = self.store.read(entity)
        if records is None:
            if entity is Entity.MENU_ITEMS:
                logger.info("No local menu found; starting from the seed menu")
                return [from_local(entity, d) for d in SEED_MENU]
            return []
        return records

    def write(self, entity: Entity, record: Record) -> None:
        # Durability happens in snapshot().
        pass

    def remove(self, entity: Entity, record_id: str) -> None:
        pass

    def snapshot(self, entity: Entity, records: Sequence[Record]) -> None:
        if not self._loaded:
            logger.debug("Initial load not finished; not writing %s", entity.value)
            return
        self.store.write(entity, records)

    def mark_loaded(self) -> None:
        self._loaded = True

    def test_connection(self) -> ConnectionCheck:
        return ConnectionCheck(success=False, message="Client not initialized")
