"""Supabase repository for stock levels and transactions."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from coffee_ops.domain.stock import StockLevel, StockTransaction
from coffee_ops.services.stock import StockRepository


@dataclass
class SupabaseStockRepository(StockRepository):
    """Supabase-backed stock repository."""

    client: Client

    def get_stock_level(self, ingredient_name: str, unit: str) -> StockLevel | None:
        """Return the stock level for an ingredient, if tracked."""
        response = (
            self.client.table("stock_levels")
            .select("*")
            .eq("ingredient_name", ingredient_name)
            .eq("unit", unit)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_level(response.data[0])

    def list_stock_levels(self) -> list[StockLevel]:
        """Return all stock levels."""
        response = (
            self.client.table("stock_levels")
            .select("*")
            .order("ingredient_name")
            .execute()
        )
        return [_parse_level(row) for row in response.data or []]

    def upsert_stock_level(  # noqa: PLR0913
        self,
        ingredient_name: str,
        unit: str,
        current_stock: float,
        reserved_stock: float,
        low_stock_threshold: float,
    ) -> StockLevel:
        """Create or replace the stock level for an ingredient."""
        response = (
            self.client.table("stock_levels")
            .upsert(
                {
                    "ingredient_name": ingredient_name,
                    "unit": unit,
                    "current_stock": current_stock,
                    "reserved_stock": reserved_stock,
                    "low_stock_threshold": low_stock_threshold,
                    "last_updated": datetime.now(tz=UTC).isoformat(),
                },
                on_conflict="ingredient_name,unit",
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to upsert stock level")
        return _parse_level(response.data[0])

    def create_transaction(  # noqa: PLR0913
        self,
        ingredient_name: str,
        unit: str,
        transaction_type: str,
        quantity: float,
        reason: str,
        batch_id: UUID | None,
    ) -> StockTransaction:
        """Insert a stock movement row."""
        response = (
            self.client.table("stock_transactions")
            .insert(
                {
                    "ingredient_name": ingredient_name,
                    "unit": unit,
                    "transaction_type": transaction_type,
                    "quantity": quantity,
                    "reason": reason,
                    "batch_id": str(batch_id) if batch_id else None,
                    "transaction_date": datetime.now(tz=UTC).isoformat(),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to record stock transaction")
        return _parse_transaction(response.data[0])

    def list_transactions(
        self, ingredient_name: str | None, unit: str | None, limit: int
    ) -> list[StockTransaction]:
        """Return recent movements, newest first."""
        query = self.client.table("stock_transactions").select("*")
        if ingredient_name:
            query = query.eq("ingredient_name", ingredient_name)
        if unit:
            query = query.eq("unit", unit)
        response = query.order("transaction_date", desc=True).limit(limit).execute()
        return [_parse_transaction(row) for row in response.data or []]


def _parse_level(row: dict[str, object]) -> StockLevel:
    last_updated_raw = row.get("last_updated")
    return StockLevel(
        id=UUID(str(row["id"])),
        ingredient_name=str(row.get("ingredient_name", "")),
        unit=str(row.get("unit", "")),
        current_stock=float(row.get("current_stock", 0.0)),
        reserved_stock=float(row.get("reserved_stock", 0.0)),
        low_stock_threshold=float(row.get("low_stock_threshold", 0.0)),
        last_updated=(
            datetime.fromisoformat(last_updated_raw)
            if isinstance(last_updated_raw, str) and last_updated_raw
            else None
        ),
    )


def _parse_transaction(row: dict[str, object]) -> StockTransaction:
    date_raw = row.get("transaction_date")
    batch_raw = row.get("batch_id")
    return StockTransaction(
        id=UUID(str(row["id"])),
        ingredient_name=str(row.get("ingredient_name", "")),
        unit=str(row.get("unit", "")),
        transaction_type=str(row.get("transaction_type", "")),
        quantity=float(row.get("quantity", 0.0)),
        reason=str(row.get("reason") or ""),
        transaction_date=(
            datetime.fromisoformat(date_raw)
            if isinstance(date_raw, str) and date_raw
            else datetime.min.replace(tzinfo=UTC)
        ),
        batch_id=UUID(str(batch_raw)) if batch_raw else None,
    )
