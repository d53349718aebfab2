"""Collection synchronizer: keeps in-memory collections in step with the store.

Every mutation goes through :class:`CollectionSynchronizer`:

1. the gateway confirms the change (remote mode) or does nothing (local),
2. the in-memory collection is updated,
3. the gateway snapshots the collection (local mode) or does nothing.

When step 1 raises, steps 2 and 3 never run, so memory never shows a
change the remote store did not accept.

Example:
    >>> from shero_core import DataPaths, Ledger
    >>> with Ledger.open(DataPaths.from_root("data")) as ledger:
    ...     item = ledger.save_menu_item("Sambar Rice", 200, 120)
    ...     sale = ledger.record_sale(item.id, 3, "2024-01-15")
    ...     sale.total_shero_share
    240.0
"""

from __future__ import annotations

import logging
from typing import Any, Generic, Iterable, Optional, Sequence, TypeVar

from shero_core.config import DataPaths, Settings
from shero_core.exceptions import InvalidRecordError, PartialWriteError, RemoteStoreError
from shero_core.models import Entity, ExpenseEntry, MenuItem, Record, SaleEntry, new_expense
from shero_core.parsing import parse_number
from shero_core.splits import build_menu_item, snapshot_sale
from shero_core.storage.base import ConnectionCheck, PersistenceGateway
from shero_core.storage.gateway import ClientFactory, open_gateway
from shero_core.utils import validate_date

logger = logging.getLogger(__name__)

R = TypeVar("R", MenuItem, SaleEntry, ExpenseEntry)


class Collection(Generic[R]):
    """Ordered in-memory records of one entity.

    Args:
        entity: Which collection this is.
        records: Initial records, in display order.
        prepend_new: New records go first (sales) instead of last.
    """

    def __init__(self, entity: Entity, records: Iterable[R] = (), prepend_new: bool = False) -> None:
        self.entity = entity
        self.prepend_new = prepend_new
        self._records: list[R] = list(records)

    @property
    def records(self) -> list[R]:
        """A copy of the records, in order."""
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self):
        return iter(list(self._records))

    def index_of(self, record_id: str) -> int:
        for i, record in enumerate(self._records):
            if record.id == record_id:
                return i
        return -1

    def get(self, record_id: str) -> Optional[R]:
        i = self.index_of(record_id)
        return self._records[i] if i >= 0 else None

    def apply_upsert(self, record: R) -> bool:
        """Replace in place or insert; returns True when a record was replaced."""
        i = self.index_of(record.id)
        if i >= 0:
            self._records[i] = record
            return True
        if self.prepend_new:
            self._records.insert(0, record)
        else:
            self._records.append(record)
        return False

    def apply_delete(self, record_id: str) -> bool:
        before = len(self._records)
        self._records = [r for r in self._records if r.id != record_id]
        return len(self._records) != before

    def apply_append(self, records: Sequence[R]) -> None:
        self._records.extend(records)

    def replace_all(self, records: Iterable[R]) -> None:
        self._records = list(records)


class CollectionSynchronizer(Generic[R]):
    """Applies upserts and deletes to one collection through the gateway."""

    def __init__(self, gateway: PersistenceGateway, collection: Collection[R]) -> None:
        self.gateway = gateway
        self.collection = collection

    @property
    def entity(self) -> Entity:
        return self.collection.entity

    @property
    def records(self) -> list[R]:
        return self.collection.records

    def get(self, record_id: str) -> Optional[R]:
        return self.collection.get(record_id)

    def upsert(self, record: R) -> R:
        """Insert or replace a record by identifier.

        Raises:
            RemoteStoreError: If the remote store rejects the write; memory
                is left unchanged.
        """
        self.gateway.write(self.entity, record)
        replaced = self.collection.apply_upsert(record)
        self.gateway.snapshot(self.entity, self.collection.records)
        logger.info("%s %s %s", "Updated" if replaced else "Added", self.entity.value, record.id)
        return record

    def delete(self, record_id: str) -> bool:
        """Delete a record by identifier.

        Returns:
            False when no such record exists (nothing is sent to the store).
        """
        if self.collection.index_of(record_id) < 0:
            logger.info("No %s record with id %s; nothing to delete", self.entity.value, record_id)
            return False
        self.gateway.remove(self.entity, record_id)
        self.collection.apply_delete(record_id)
        self.gateway.snapshot(self.entity, self.collection.records)
        logger.info("Deleted %s %s", self.entity.value, record_id)
        return True

    def bulk_upsert(self, records: Sequence[R]) -> list[R]:
        """Append many new records, one store write each.

        Identifiers are assumed to be new; no existence check is made.

        Raises:
            PartialWriteError: If the remote store fails part-way; records it
                confirmed before the failure are kept in memory.
        """
        if not records:
            logger.info("No valid %s records to add", self.entity.value)
            return []

        written: list[R] = []
        try:
            for record in records:
                self.gateway.write(self.entity, record)
                written.append(record)
        except RemoteStoreError as e:
            failed = list(records[len(written):])
            self._append(written)
            raise PartialWriteError(
                f"Bulk write of {self.entity.value} stopped after {len(written)} of "
                f"{len(records)} record(s): {e}",
                written=written,
                failed=failed,
            ) from e

        self._append(written)
        logger.info("Added %d %s record(s)", len(written), self.entity.value)
        return written

    def _append(self, records: Sequence[R]) -> None:
        if not records:
            return
        self.collection.apply_append(records)
        self.gateway.snapshot(self.entity, self.collection.records)


class Ledger:
    """The three collections of the business, bound to one gateway.

    Use :meth:`open` to select the store and load everything, then mutate
    through the ``save_*``/``record_*``/``delete`` helpers or the
    synchronizers (``ledger.menu``, ``ledger.sales``, ``ledger.expenses``).
    """

    def __init__(self, gateway: PersistenceGateway, settings: Optional[Settings] = None) -> None:
        self.gateway = gateway
        self.settings = settings or Settings()
        self.menu: CollectionSynchronizer[MenuItem] = CollectionSynchronizer(
            gateway, Collection(Entity.MENU_ITEMS)
        )
        self.sales: CollectionSynchronizer[SaleEntry] = CollectionSynchronizer(
            gateway, Collection(Entity.SALES, prepend_new=True)
        )
        self.expenses: CollectionSynchronizer[ExpenseEntry] = CollectionSynchronizer(
            gateway, Collection(Entity.EXPENSES)
        )

    @classmethod
    def open(
        cls,
        paths: DataPaths,
        settings: Optional[Settings] = None,
        client_factory: Optional[ClientFactory] = None,
    ) -> Ledger:
        """Select the store of record and load all collections."""
        settings = settings or Settings.from_env(paths)
        gateway = open_gateway(settings, paths, client_factory=client_factory)
        ledger = cls(gateway, settings)
        ledger.load()
        return ledger

    def __enter__(self) -> Ledger:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    @property
    def is_remote(self) -> bool:
        return self.gateway.is_remote

    def synchronizers(self) -> list[CollectionSynchronizer[Any]]:
        return [self.menu, self.sales, self.expenses]

    def load(self) -> None:
        """Load every collection from the store.

        A remote read failure leaves that collection empty and is logged;
        the store stays selected. Once everything is loaded each collection
        is snapshotted, so a fresh local data root gets the seed menu on disk.
        """
        for sync in self.synchronizers():
            try:
                records: list[Record] = self.gateway.load(sync.entity)
            except RemoteStoreError as e:
                logger.error("Error fetching %s: %s", sync.entity.value, e)
                records = []
            sync.collection.replace_all(records)
        self.gateway.mark_loaded()
        for sync in self.synchronizers():
            self.gateway.snapshot(sync.entity, sync.collection.records)

    def close(self) -> None:
        self.gateway.close()

    def test_connection(self) -> ConnectionCheck:
        return self.gateway.test_connection()

    # Menu
    def save_menu_item(
        self,
        name: str,
        price: Any,
        my_share: Any,
        shero_share: Any = None,
        category: Optional[str] = None,
        item_id: Optional[str] = None,
    ) -> MenuItem:
        """Create a menu item, or replace the one with ``item_id``."""
        item = build_menu_item(
            name,
            price,
            my_share,
            shero_share=shero_share,
            category=category,
            item_id=item_id,
            mode=self.settings.parse_mode,
        )
        return self.menu.upsert(item)

    def import_menu(self, items: Sequence[MenuItem]) -> list[MenuItem]:
        return self.menu.bulk_upsert(items)

    # Sales
    def _menu_item(self, menu_item_id: str) -> MenuItem:
        item = self.menu.get(menu_item_id)
        if item is None:
            raise InvalidRecordError(f"Unknown menu item: {menu_item_id}")
        return item

    def record_sale(self, menu_item_id: str, quantity: Any, date: str, notes: Optional[str] = None) -> SaleEntry:
        """Record a new sale with the item's current pricing."""
        sale = snapshot_sale(
            self._menu_item(menu_item_id),
            quantity,
            validate_date(date),
            notes=notes,
            mode=self.settings.parse_mode,
        )
        return self.sales.upsert(sale)

    def edit_sale(
        self,
        sale_id: str,
        menu_item_id: str,
        quantity: Any,
        date: str,
        notes: Optional[str] = None,
    ) -> SaleEntry:
        """Re-record an existing sale from the menu item selected now."""
        if self.sales.get(sale_id) is None:
            raise InvalidRecordError(f"Unknown sale: {sale_id}")
        sale = snapshot_sale(
            self._menu_item(menu_item_id),
            quantity,
            validate_date(date),
            notes=notes,
            sale_id=sale_id,
            mode=self.settings.parse_mode,
        )
        return self.sales.upsert(sale)

    # Expenses
    def save_expense(
        self,
        date: str,
        category: str,
        amount: Any,
        notes: Optional[str] = None,
        expense_id: Optional[str] = None,
    ) -> ExpenseEntry:
        """Create an expense, or replace the one with ``expense_id``."""
        expense = new_expense(
            validate_date(date),
            category,
            parse_number(amount, mode=self.settings.parse_mode),
            notes=notes or None,
            expense_id=expense_id,
        )
        return self.expenses.upsert(expense)
