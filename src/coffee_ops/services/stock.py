"""Stock level tracking and sale deductions."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from coffee_ops.domain.costing import IngredientUsage
from coffee_ops.domain.stock import (
    SaleDeduction,
    SaleResult,
    StockDeduction,
    StockLevel,
    StockReservation,
    StockTransaction,
)
from coffee_ops.services import costing

ADD = "ADD"
DEDUCT = "DEDUCT"
RESERVE = "RESERVE"
UNRESERVE = "UNRESERVE"

_logger = logging.getLogger(__name__)


class StockRepository(Protocol):
    """Persistence interface for stock levels and movements."""

    def get_stock_level(self, ingredient_name: str, unit: str) -> StockLevel | None:
        """Return the stock level for an ingredient, if tracked."""

    def list_stock_levels(self) -> list[StockLevel]:
        """Return all tracked stock levels."""

    def upsert_stock_level(  # noqa: PLR0913
        self,
        ingredient_name: str,
        unit: str,
        current_stock: float,
        reserved_stock: float,
        low_stock_threshold: float,
    ) -> StockLevel:
        """Create or replace the stock level for an ingredient."""

    def create_transaction(  # noqa: PLR0913
        self,
        ingredient_name: str,
        unit: str,
        transaction_type: str,
        quantity: float,
        reason: str,
        batch_id: UUID | None,
    ) -> StockTransaction:
        """Record a stock movement."""

    def list_transactions(
        self, ingredient_name: str | None, unit: str | None, limit: int
    ) -> list[StockTransaction]:
        """Return recent movements, newest first."""


@dataclass
class StockService:
    """Service for stock levels keyed by ingredient name and unit."""

    repository: StockRepository
    default_low_stock_threshold: float = 10.0

    def get_level(self, ingredient_name: str, unit: str) -> StockLevel | None:
        """Return the stock level for an ingredient."""
        return self.repository.get_stock_level(ingredient_name, unit)

    def list_levels(self) -> list[StockLevel]:
        """Return stock levels sorted by ingredient name."""
        return sorted(
            self.repository.list_stock_levels(),
            key=lambda level: level.ingredient_name.lower(),
        )

    def on_hand(self) -> dict[tuple[str, str], float]:
        """Available stock keyed by (ingredient name, unit)."""
        return {
            (level.ingredient_name, level.unit): level.available
            for level in self.repository.list_stock_levels()
        }

    def add_stock(
        self,
        ingredient_name: str,
        unit: str,
        quantity: float,
        reason: str,
        batch_id: UUID | None = None,
    ) -> StockLevel:
        """Increase stock and record an ADD movement."""
        if quantity <= 0:
            raise ValueError("Quantity to add must be greater than 0")
        current = self.repository.get_stock_level(ingredient_name, unit)
        level = self.repository.upsert_stock_level(
            ingredient_name,
            unit,
            current_stock=(current.current_stock if current else 0) + quantity,
            reserved_stock=current.reserved_stock if current else 0,
            low_stock_threshold=(
                current.low_stock_threshold
                if current
                else self.default_low_stock_threshold
            ),
        )
        self.repository.create_transaction(
            ingredient_name, unit, ADD, quantity, reason, batch_id
        )
        _logger.info("Added %s %s of %s", quantity, unit, ingredient_name)
        return level

    def deduct_stock(
        self, ingredient_name: str, unit: str, quantity: float, reason: str
    ) -> StockDeduction:
        """Remove stock when enough is available; record a DEDUCT movement."""
        current = self.repository.get_stock_level(ingredient_name, unit)
        if current is None:
            return StockDeduction(success=False, available_stock=0)
        if current.available < quantity:
            return StockDeduction(success=False, available_stock=current.available)
        self.repository.upsert_stock_level(
            ingredient_name,
            unit,
            current_stock=current.current_stock - quantity,
            reserved_stock=current.reserved_stock,
            low_stock_threshold=current.low_stock_threshold,
        )
        self.repository.create_transaction(
            ingredient_name, unit, DEDUCT, -quantity, reason, None
        )
        return StockDeduction(
            success=True, available_stock=current.available - quantity
        )

    def reserve_stock(
        self, ingredient_name: str, unit: str, quantity: float, reason: str
    ) -> StockReservation:
        """Hold back available stock for a pending order."""
        if quantity <= 0:
            raise ValueError("Reservation quantity must be greater than 0")
        current = self.repository.get_stock_level(ingredient_name, unit)
        if current is None:
            return _no_level(ingredient_name)
        if current.available < quantity:
            return StockReservation(
                success=False,
                available_stock=current.available,
                reserved_stock=current.reserved_stock,
                error=(
                    f"Insufficient stock to reserve {ingredient_name}: "
                    f"need {quantity}, have {current.available}"
                ),
            )
        return self._set_reserved(
            current, current.reserved_stock + quantity, RESERVE, quantity, reason
        )

    def unreserve_stock(
        self, ingredient_name: str, unit: str, quantity: float, reason: str
    ) -> StockReservation:
        """Release part of a reservation back to available stock."""
        if quantity <= 0:
            raise ValueError("Quantity to release must be greater than 0")
        current = self.repository.get_stock_level(ingredient_name, unit)
        if current is None:
            return _no_level(ingredient_name)
        if current.reserved_stock < quantity:
            return StockReservation(
                success=False,
                available_stock=current.available,
                reserved_stock=current.reserved_stock,
                error=(
                    f"Cannot unreserve more than reserved: trying to unreserve "
                    f"{quantity}, have {current.reserved_stock} reserved"
                ),
            )
        return self._set_reserved(
            current, current.reserved_stock - quantity, UNRESERVE, -quantity, reason
        )

    def update_reservation(
        self, ingredient_name: str, unit: str, quantity: float, reason: str
    ) -> StockReservation:
        """Set the reserved amount, checking availability for any increase."""
        if quantity < 0:
            raise ValueError("Reservation quantity cannot be negative")
        current = self.repository.get_stock_level(ingredient_name, unit)
        if current is None:
            return _no_level(ingredient_name)
        difference = quantity - current.reserved_stock
        if difference == 0:
            return StockReservation(
                success=True,
                available_stock=current.available,
                reserved_stock=current.reserved_stock,
            )
        if difference > 0 and current.available < difference:
            return StockReservation(
                success=False,
                available_stock=current.available,
                reserved_stock=current.reserved_stock,
                error=(
                    f"Insufficient stock to reserve {ingredient_name}: "
                    f"need {difference}, have {current.available}"
                ),
            )
        return self._set_reserved(
            current,
            quantity,
            RESERVE if difference > 0 else UNRESERVE,
            difference,
            f"{reason} (reservation {current.reserved_stock:g} -> {quantity:g})",
        )

    def _set_reserved(
        self,
        current: StockLevel,
        reserved_stock: float,
        transaction_type: str,
        change: float,
        reason: str,
    ) -> StockReservation:
        level = self.repository.upsert_stock_level(
            current.ingredient_name,
            current.unit,
            current_stock=current.current_stock,
            reserved_stock=reserved_stock,
            low_stock_threshold=current.low_stock_threshold,
        )
        self.repository.create_transaction(
            current.ingredient_name,
            current.unit,
            transaction_type,
            change,
            reason,
            None,
        )
        _logger.info(
            "Reserved stock of %s is now %s %s",
            current.ingredient_name,
            reserved_stock,
            current.unit,
        )
        return StockReservation(
            success=True,
            available_stock=level.available,
            reserved_stock=level.reserved_stock,
        )

    def low_stock_alerts(self) -> list[StockLevel]:
        """Stock levels at or below their threshold."""
        return [level for level in self.list_levels() if level.is_low]

    def update_low_stock_threshold(
        self, ingredient_name: str, unit: str, threshold: float
    ) -> StockLevel | None:
        """Change the alert threshold of a tracked ingredient."""
        current = self.repository.get_stock_level(ingredient_name, unit)
        if current is None:
            return None
        return self.repository.upsert_stock_level(
            ingredient_name,
            unit,
            current_stock=current.current_stock,
            reserved_stock=current.reserved_stock,
            low_stock_threshold=threshold,
        )

    def transactions(
        self,
        ingredient_name: str | None = None,
        unit: str | None = None,
        limit: int = 50,
    ) -> list[StockTransaction]:
        """Recent stock movements, optionally for one ingredient."""
        return self.repository.list_transactions(ingredient_name, unit, limit)

    def process_sale(
        self, units_sold: float, usages: Iterable[IngredientUsage]
    ) -> SaleResult:
        """Deduct the ingredients of a sale, only when every one is in stock."""
        requirements = []
        errors: list[str] = []
        for usage in usages:
            unit = (usage.unit or "").strip()
            required = costing.total_quantity_needed(usage.usage_per_unit, units_sold)
            if required <= 0 or not unit:
                continue
            level = self.repository.get_stock_level(usage.name, unit)
            if level is None:
                errors.append(f"No stock record found for {usage.name}")
                continue
            if level.available < required:
                errors.append(
                    f"Insufficient stock for {usage.name}: "
                    f"need {required}, have {level.available}"
                )
                continue
            requirements.append((usage.name, unit, required))

        if errors:
            _logger.warning("Sale of %s units rejected: %s", units_sold, errors)
            return SaleResult(success=False, errors=errors)

        deductions = []
        for name, unit, required in requirements:
            result = self.deduct_stock(
                name, unit, required, f"Sale: {units_sold} units sold"
            )
            if not result.success:
                errors.append(f"Failed to deduct stock for {name}")
                continue
            deductions.append(
                SaleDeduction(
                    ingredient_name=name,
                    quantity=required,
                    remaining_stock=result.available_stock,
                )
            )
        return SaleResult(success=not errors, errors=errors, deductions=deductions)


def _no_level(ingredient_name: str) -> StockReservation:
    return StockReservation(
        success=False,
        available_stock=0,
        reserved_stock=0,
        error=f"No stock record found for {ingredient_name}",
    )
