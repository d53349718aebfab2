"""Persistence gateway interface.

A gateway is chosen once at startup and stays in place for the process
lifetime. The two implementations differ in when durability happens:

- remote: each mutation is sent to the remote store *before* memory is
  updated; a failure raises and memory is left alone;
- local: memory is updated first, then the whole affected collection is
  rewritten to disk.

The synchronizer calls :meth:`write`/:meth:`remove` before touching
memory and :meth:`snapshot` afterwards, so neither side branches on the
active mode.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from shero_core.models import Entity, Record


class GatewayState(str, Enum):
    """Lifecycle of store selection."""

    UNINITIALIZED = "uninitialized"
    PROBING = "probing"
    REMOTE_ACTIVE = "remote-active"
    LOCAL_ACTIVE = "local-active"


@dataclass(frozen=True)
class ConnectionCheck:
    """Outcome of a reachability test."""

    success: bool
    message: str


class PersistenceGateway(ABC):
    """Abstract base class for the store of record."""

    state: GatewayState

    @property
    def is_remote(self) -> bool:
        return self.state is GatewayState.REMOTE_ACTIVE

    @abstractmethod
    def load(self, entity: Entity) -> list[Record]:
        """Read the whole collection from the store.

        Raises:
            StoreError: If the store cannot be read.
        """
        pass

    @abstractmethod
    def write(self, entity: Entity, record: Record) -> None:
        """Insert or replace one record by identifier before memory changes.

        Raises:
            RemoteStoreError: If the remote store rejects the write.
        """
        pass

    @abstractmethod
    def remove(self, entity: Entity, record_id: str) -> None:
        """Delete one record by identifier before memory changes."""
        pass

    @abstractmethod
    def snapshot(self, entity: Entity, records: Sequence[Record]) -> None:
        """Persist a collection after memory changed."""
        pass

    @abstractmethod
    def test_connection(self) -> ConnectionCheck:
        """Check reachability without mutating anything."""
        pass

    def mark_loaded(self) -> None:
        """Signal that the initial load finished."""
        pass

    def close(self) -> None:
        """Release resources held by the gateway."""
        pass
