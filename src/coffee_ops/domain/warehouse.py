"""Domain models for warehouse intake."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class NewWarehouseItem:
    """Item to be received into a batch."""

    ingredient_name: str
    quantity: float
    unit: str
    cost_per_unit: float
    total_cost: float
    note: str = ""


@dataclass(frozen=True)
class WarehouseItem:
    """Ingredient quantity received in a batch."""

    id: UUID
    batch_id: UUID
    ingredient_name: str
    quantity: float
    unit: str
    cost_per_unit: float
    total_cost: float
    note: str = ""


@dataclass(frozen=True)
class WarehouseBatch:
    """Numbered delivery of ingredients."""

    id: UUID
    batch_number: int
    date_added: datetime
    note: str
    items: list[WarehouseItem] = field(default_factory=list)


@dataclass(frozen=True)
class WarehouseStats:
    """Warehouse totals."""

    total_batches: int
    total_items: int
    total_value: float
    latest_batch_number: int | None
