"""Supabase repository for sales records."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from coffee_ops.domain.sales import NewSalesRecord, SalesRecord
from coffee_ops.services.sales import SalesRepository


@dataclass
class SupabaseSalesRepository(SalesRepository):
    """Supabase-backed sales repository."""

    client: Client

    def create_record(self, record: NewSalesRecord) -> SalesRecord:
        """Insert a sales record row."""
        response = (
            self.client.table("sales_records")
            .insert(
                {
                    "product_id": str(record.product_id),
                    "product_name": record.product_name,
                    "quantity": record.quantity,
                    "unit_price": record.unit_price,
                    "total_amount": record.total_amount,
                    "cogs_per_unit": record.cogs_per_unit,
                    "total_cogs": record.total_cogs,
                    "sale_date": record.sale_date.isoformat(),
                    "note": record.note,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create sales record")
        return _parse_record(response.data[0])

    def list_records(self, start: datetime, end: datetime) -> list[SalesRecord]:
        """Return sales in ``[start, end)``, newest first."""
        response = (
            self.client.table("sales_records")
            .select("*")
            .gte("sale_date", start.isoformat())
            .lt("sale_date", end.isoformat())
            .order("sale_date", desc=True)
            .execute()
        )
        return [_parse_record(row) for row in response.data or []]


def _parse_record(row: dict[str, object]) -> SalesRecord:
    date_raw = row.get("sale_date")
    return SalesRecord(
        id=UUID(str(row["id"])),
        product_id=UUID(str(row["product_id"])),
        product_name=str(row.get("product_name") or ""),
        quantity=float(row.get("quantity", 0.0)),
        unit_price=float(row.get("unit_price") or 0.0),
        total_amount=float(row.get("total_amount") or 0.0),
        cogs_per_unit=float(row.get("cogs_per_unit") or 0.0),
        total_cogs=float(row.get("total_cogs") or 0.0),
        sale_date=(
            datetime.fromisoformat(date_raw)
            if isinstance(date_raw, str) and date_raw
            else datetime.min.replace(tzinfo=UTC)
        ),
        note=str(row.get("note") or ""),
    )
