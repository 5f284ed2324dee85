"""Warehouse intake batches."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

from coffee_ops.domain.costing import PurchasePlan
from coffee_ops.domain.warehouse import (
    NewWarehouseItem,
    WarehouseBatch,
    WarehouseItem,
    WarehouseStats,
)
from coffee_ops.services.costing import format_quantity
from coffee_ops.services.stock import StockService

_logger = logging.getLogger(__name__)


class WarehouseRepository(Protocol):
    """Persistence interface for warehouse batches."""

    def count_batches(self) -> int:
        """Return the number of batches recorded."""

    def create_batch(
        self, batch_number: int, date_added: datetime, note: str
    ) -> WarehouseBatch:
        """Create an empty batch."""

    def add_items(
        self, batch_id: UUID, items: list[NewWarehouseItem]
    ) -> list[WarehouseItem]:
        """Attach items to a batch."""

    def get_batch(self, batch_id: UUID) -> WarehouseBatch | None:
        """Return a batch with its items, if present."""

    def list_batches(self) -> list[WarehouseBatch]:
        """Return all batches with their items."""


@dataclass
class WarehouseService:
    """Records deliveries and feeds them into stock."""

    repository: WarehouseRepository
    stock_service: StockService

    def create_batch(
        self, note: str = "", date_added: datetime | None = None
    ) -> WarehouseBatch:
        """Open a new batch numbered after the existing ones."""
        batch_number = self.repository.count_batches() + 1
        added = date_added or datetime.now(tz=UTC)
        return self.repository.create_batch(batch_number, added, note)

    def add_items(
        self, batch: WarehouseBatch, items: list[NewWarehouseItem]
    ) -> list[WarehouseItem]:
        """Store batch items and add their quantities to stock."""
        created = self.repository.add_items(batch.id, items)
        for item in items:
            self.stock_service.add_stock(
                item.ingredient_name,
                item.unit,
                item.quantity,
                reason=f"Warehouse batch #{batch.batch_number}",
                batch_id=batch.id,
            )
        _logger.info(
            "Warehouse batch #%s received %s items", batch.batch_number, len(items)
        )
        return created

    def receive_purchase_plan(
        self, plan: PurchasePlan, note: str = ""
    ) -> WarehouseBatch:
        """Create a batch holding everything a purchase plan buys."""
        default_note = (
            f"Purchase plan: {plan.total_units} units, total cost {plan.total_cost:g}"
        )
        batch = self.create_batch(
            note=f"{note.strip()} | {default_note}" if note.strip() else default_note
        )
        items = [
            NewWarehouseItem(
                ingredient_name=item.name,
                quantity=item.purchased_quantity,
                unit=item.unit,
                cost_per_unit=item.cost_per_unit,
                total_cost=item.total_cost,
                note=(
                    f"{item.units_to_buy} x "
                    f"{format_quantity(item.base_unit_quantity, item.unit)}"
                ),
            )
            for item in plan.items
        ]
        created = self.add_items(batch, items) if items else []
        return WarehouseBatch(
            id=batch.id,
            batch_number=batch.batch_number,
            date_added=batch.date_added,
            note=batch.note,
            items=created,
        )

    def get_batch(self, batch_id: UUID) -> WarehouseBatch | None:
        """Return a batch with its items."""
        return self.repository.get_batch(batch_id)

    def list_batches(self) -> list[WarehouseBatch]:
        """Batches, newest first."""
        return sorted(
            self.repository.list_batches(),
            key=lambda batch: batch.batch_number,
            reverse=True,
        )

    def stats(self) -> WarehouseStats:
        """Totals across all batches."""
        batches = self.list_batches()
        items = [item for batch in batches for item in batch.items]
        return WarehouseStats(
            total_batches=len(batches),
            total_items=len(items),
            total_value=sum((item.total_cost for item in items), 0.0),
            latest_batch_number=batches[0].batch_number if batches else None,
        )
