"""Pydantic models for API request payloads."""

from uuid import UUID

from pydantic import BaseModel, Field

from coffee_ops.domain.costing import IngredientUsage


class CostPerUnitRequest(BaseModel):
    """Inputs for the cost of one ingredient in one product unit."""

    base_unit_cost: float | None = None
    base_unit_quantity: float | None = None
    usage_per_unit: float | None = None
    stored_cost: float | None = None


class QuantityRequest(BaseModel):
    """Quantity to express in a larger unit."""

    quantity: float | None = None
    unit: str | None = None


class PurchaseQuantityRequest(BaseModel):
    """Required quantity and the size of one purchasable unit."""

    required: float | None = None
    base_unit_size: float | None = None
    on_hand: float | None = None


class UsageItem(BaseModel):
    """Ingredient pricing plus usage per product unit."""

    name: str
    base_unit_cost: float | None = None
    base_unit_quantity: float | None = None
    unit: str | None = None
    usage_per_unit: float | None = None
    stored_cost: float | None = None
    on_hand: float | None = None

    def to_usage(self) -> IngredientUsage:
        """Convert to the costing input model."""
        return IngredientUsage(
            name=self.name,
            base_unit_cost=self.base_unit_cost,
            base_unit_quantity=self.base_unit_quantity,
            unit=self.unit,
            usage_per_unit=self.usage_per_unit,
            stored_cost=self.stored_cost,
        )


class CostingRequest(BaseModel):
    """A set of ingredient usages and an optional daily target."""

    items: list[UsageItem] = Field(default_factory=list)
    daily_target: float | None = None


class IngredientCreate(BaseModel):
    """Payload for a new ingredient."""

    name: str
    unit: str
    base_unit_cost: float | None = None
    base_unit_quantity: float | None = None
    category: str | None = None
    supplier_info: str | None = None
    note: str = ""


class IngredientUpdate(BaseModel):
    """Partial ingredient update."""

    name: str | None = None
    unit: str | None = None
    base_unit_cost: float | None = None
    base_unit_quantity: float | None = None
    category: str | None = None
    supplier_info: str | None = None
    note: str | None = None


class ProductCreate(BaseModel):
    """Payload for a new product."""

    name: str = Field(min_length=1)
    description: str = ""
    note: str = ""


class ProductIngredientCreate(BaseModel):
    """Recipe line to add to a product."""

    ingredient_id: UUID
    usage_per_unit: float
    note: str = ""


class SaleRequest(BaseModel):
    """Units of a product sold."""

    product_id: UUID
    units_sold: float = Field(gt=0)
    unit_price: float = Field(default=0, ge=0)
    note: str = ""


class WarehouseBatchRequest(BaseModel):
    """Receive the purchase plan of a product into the warehouse."""

    product_id: UUID
    daily_target: float | None = None
    note: str = ""
    use_stock: bool = True


class StockReservationRequest(BaseModel):
    """Stock to reserve for, or release from, a pending order."""

    ingredient_name: str = Field(min_length=1)
    unit: str = Field(min_length=1)
    quantity: float = Field(gt=0)
    reason: str = ""


class ReservationUpdateRequest(BaseModel):
    """New total reservation for an ingredient."""

    ingredient_name: str = Field(min_length=1)
    unit: str = Field(min_length=1)
    quantity: float = Field(ge=0)
    reason: str = "Reservation updated"
