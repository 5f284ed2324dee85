"""Domain models for stock tracking."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class StockLevel:
    """On-hand quantity of an ingredient, keyed by name and unit."""

    id: UUID
    ingredient_name: str
    unit: str
    current_stock: float
    reserved_stock: float
    low_stock_threshold: float
    last_updated: datetime | None = None

    @property
    def available(self) -> float:
        """Stock that is not reserved."""
        return self.current_stock - self.reserved_stock

    @property
    def is_low(self) -> bool:
        """True when stock is at or below its alert threshold."""
        return self.current_stock <= self.low_stock_threshold


@dataclass(frozen=True)
class StockTransaction:
    """Signed stock movement."""

    id: UUID
    ingredient_name: str
    unit: str
    transaction_type: str
    quantity: float
    reason: str
    transaction_date: datetime
    batch_id: UUID | None = None


@dataclass(frozen=True)
class StockDeduction:
    """Outcome of a single deduction attempt."""

    success: bool
    available_stock: float


@dataclass(frozen=True)
class SaleDeduction:
    """Stock removed for one ingredient by a sale."""

    ingredient_name: str
    quantity: float
    remaining_stock: float


@dataclass(frozen=True)
class SaleResult:
    """Outcome of processing a sale against stock."""

    success: bool
    errors: list[str] = field(default_factory=list)
    deductions: list[SaleDeduction] = field(default_factory=list)


@dataclass(frozen=True)
class StockReservation:
    """Outcome of reserving or releasing stock for a pending order."""

    success: bool
    available_stock: float
    reserved_stock: float
    error: str = ""
