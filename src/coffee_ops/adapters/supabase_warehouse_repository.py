"""Supabase repository for warehouse batches."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from coffee_ops.domain.warehouse import NewWarehouseItem, WarehouseBatch, WarehouseItem
from coffee_ops.services.warehouse import WarehouseRepository


@dataclass
class SupabaseWarehouseRepository(WarehouseRepository):
    """Supabase-backed warehouse repository."""

    client: Client

    def count_batches(self) -> int:
        """Return the number of batches recorded."""
        response = self.client.table("warehouse_batches").select("id").execute()
        return len(response.data or [])

    def create_batch(
        self, batch_number: int, date_added: datetime, note: str
    ) -> WarehouseBatch:
        """Insert an empty batch."""
        response = (
            self.client.table("warehouse_batches")
            .insert(
                {
                    "batch_number": batch_number,
                    "date_added": date_added.isoformat(),
                    "note": note,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create warehouse batch")
        return _parse_batch(response.data[0], [])

    def add_items(
        self, batch_id: UUID, items: list[NewWarehouseItem]
    ) -> list[WarehouseItem]:
        """Insert batch items."""
        response = (
            self.client.table("warehouse_items")
            .insert(
                [
                    {
                        "batch_id": str(batch_id),
                        "ingredient_name": item.ingredient_name,
                        "quantity": item.quantity,
                        "unit": item.unit,
                        "cost_per_unit": item.cost_per_unit,
                        "total_cost": item.total_cost,
                        "note": item.note,
                    }
                    for item in items
                ]
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to add warehouse items")
        return [_parse_item(row) for row in response.data]

    def get_batch(self, batch_id: UUID) -> WarehouseBatch | None:
        """Return a batch with its items, if present."""
        response = (
            self.client.table("warehouse_batches")
            .select("*")
            .eq("id", str(batch_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        items_response = (
            self.client.table("warehouse_items")
            .select("*")
            .eq("batch_id", str(batch_id))
            .execute()
        )
        items = [_parse_item(row) for row in items_response.data or []]
        return _parse_batch(response.data[0], items)

    def list_batches(self) -> list[WarehouseBatch]:
        """Return all batches with their items."""
        response = (
            self.client.table("warehouse_batches")
            .select("*")
            .order("batch_number", desc=True)
            .execute()
        )
        rows = response.data or []
        if not rows:
            return []
        items_response = (
            self.client.table("warehouse_items")
            .select("*")
            .in_("batch_id", [str(row["id"]) for row in rows])
            .execute()
        )
        items = [_parse_item(row) for row in items_response.data or []]
        return [
            _parse_batch(
                row, [item for item in items if str(item.batch_id) == str(row["id"])]
            )
            for row in rows
        ]


def _parse_batch(row: dict[str, object], items: list[WarehouseItem]) -> WarehouseBatch:
    date_raw = row.get("date_added")
    return WarehouseBatch(
        id=UUID(str(row["id"])),
        batch_number=int(row.get("batch_number", 0)),
        date_added=(
            datetime.fromisoformat(date_raw)
            if isinstance(date_raw, str) and date_raw
            else datetime.min.replace(tzinfo=UTC)
        ),
        note=str(row.get("note") or ""),
        items=items,
    )


def _parse_item(row: dict[str, object]) -> WarehouseItem:
    return WarehouseItem(
        id=UUID(str(row["id"])),
        batch_id=UUID(str(row["batch_id"])),
        ingredient_name=str(row.get("ingredient_name", "")),
        quantity=float(row.get("quantity", 0.0)),
        unit=str(row.get("unit", "")),
        cost_per_unit=float(row.get("cost_per_unit", 0.0)),
        total_cost=float(row.get("total_cost", 0.0)),
        note=str(row.get("note") or ""),
    )
