"""Sales records and period summaries."""

import logging
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta
from typing import Protocol
from uuid import UUID

from coffee_ops.domain.ingredients import Product
from coffee_ops.domain.sales import (
    NewSalesRecord,
    SalesRecord,
    SalesSummary,
    TopProduct,
)
from coffee_ops.services.costing import round_currency

_logger = logging.getLogger(__name__)


class SalesRepository(Protocol):
    """Persistence interface for sales records."""

    def create_record(self, record: NewSalesRecord) -> SalesRecord:
        """Store a sale."""

    def list_records(self, start: datetime, end: datetime) -> list[SalesRecord]:
        """Return sales with ``start <= sale_date < end``, newest first."""


@dataclass
class SalesService:
    """Records completed sales and summarises them by day."""

    repository: SalesRepository

    def record_sale(  # noqa: PLR0913
        self,
        product: Product,
        quantity: float,
        cogs_per_unit: float,
        unit_price: float = 0,
        note: str = "",
        sale_date: datetime | None = None,
    ) -> SalesRecord:
        """Store a sale of a product; totals are rounded to whole currency."""
        if quantity <= 0:
            raise ValueError("Quantity sold must be greater than 0")
        if unit_price < 0:
            raise ValueError("Unit price cannot be negative")
        record = self.repository.create_record(
            NewSalesRecord(
                product_id=product.id,
                product_name=product.name,
                quantity=quantity,
                unit_price=unit_price,
                total_amount=round_currency(unit_price * quantity),
                cogs_per_unit=cogs_per_unit,
                total_cogs=round_currency(cogs_per_unit * quantity),
                sale_date=sale_date or datetime.now(tz=UTC),
                note=note,
            )
        )
        _logger.info(
            "Stored sales record %s: %s x %s", record.id, quantity, product.name
        )
        return record

    def records_for_date(self, day: date) -> list[SalesRecord]:
        """Sales of one calendar day (UTC), newest first."""
        return self.records_for_range(day, day)

    def records_for_range(self, start: date, end: date) -> list[SalesRecord]:
        """Sales from ``start`` through ``end`` inclusive, newest first."""
        if end < start:
            raise ValueError("End date must not be before start date")
        records = self.repository.list_records(
            _day_start(start), _day_start(end + timedelta(days=1))
        )
        return sorted(records, key=lambda record: record.sale_date, reverse=True)

    def summary(self, start: date, end: date | None = None) -> SalesSummary:
        """Units, revenue and ingredient cost over a day or a range of days."""
        records = self.records_for_range(start, end or start)
        if not records:
            return SalesSummary()

        by_product: dict[UUID, TopProduct] = {}
        for record in records:
            current = by_product.get(record.product_id)
            by_product[record.product_id] = TopProduct(
                name=record.product_name,
                quantity=(current.quantity if current else 0) + record.quantity,
            )
        total_revenue = sum((record.total_amount for record in records), 0)
        return SalesSummary(
            record_count=len(records),
            total_sales=sum((record.quantity for record in records), 0),
            total_revenue=total_revenue,
            total_cogs=sum((record.total_cogs for record in records), 0),
            average_order_value=total_revenue / len(records),
            top_product=max(by_product.values(), key=lambda item: item.quantity),
        )


def _day_start(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=UTC)
