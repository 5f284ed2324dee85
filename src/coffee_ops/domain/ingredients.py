"""Domain models for ingredients and products."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class Ingredient:
    """Purchasable ingredient with its base unit pricing."""

    id: UUID
    name: str
    base_unit_cost: float | None
    base_unit_quantity: float | None
    unit: str | None
    category: str | None = None
    supplier_info: str | None = None
    note: str = ""
    is_active: bool = True
    updated_at: datetime | None = None


@dataclass(frozen=True)
class ProductIngredient:
    """Usage of one ingredient per product unit."""

    id: UUID
    product_id: UUID
    ingredient_id: UUID
    usage_per_unit: float
    note: str = ""


@dataclass(frozen=True)
class Product:
    """Sellable product with its recipe."""

    id: UUID
    name: str
    description: str = ""
    note: str = ""
    is_active: bool = True
    ingredients: list[ProductIngredient] = field(default_factory=list)
