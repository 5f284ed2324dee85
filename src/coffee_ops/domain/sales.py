"""Domain models for recorded sales."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class NewSalesRecord:
    """Sale to be stored."""

    product_id: UUID
    product_name: str
    quantity: float
    unit_price: float
    total_amount: float
    cogs_per_unit: float
    total_cogs: float
    sale_date: datetime
    note: str = ""


@dataclass(frozen=True)
class SalesRecord:
    """Units of a product sold, with revenue and ingredient cost."""

    id: UUID
    product_id: UUID
    product_name: str
    quantity: float
    unit_price: float
    total_amount: float
    cogs_per_unit: float
    total_cogs: float
    sale_date: datetime
    note: str = ""

    @property
    def gross_profit(self) -> float:
        return self.total_amount - self.total_cogs


@dataclass(frozen=True)
class TopProduct:
    """Best selling product of a period by units."""

    name: str
    quantity: float


@dataclass(frozen=True)
class SalesSummary:
    """Totals over the sales of a period."""

    record_count: int = 0
    total_sales: float = 0
    total_revenue: float = 0
    total_cogs: float = 0
    average_order_value: float = 0
    top_product: TopProduct | None = None

    @property
    def gross_profit(self) -> float:
        return self.total_revenue - self.total_cogs
