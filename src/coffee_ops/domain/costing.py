"""Domain models for costing calculations."""

from dataclasses import dataclass, field
from uuid import UUID


@dataclass(frozen=True)
class IngredientUsage:
    """Costing input: an ingredient's pricing plus its usage per product unit."""

    name: str
    base_unit_cost: float | None
    base_unit_quantity: float | None
    unit: str | None
    usage_per_unit: float | None
    stored_cost: float | None = None
    ingredient_id: UUID | None = None


@dataclass(frozen=True)
class UnitConversion:
    """Quantity expressed in the largest sensible unit."""

    value: float
    unit: str
    display_text: str


@dataclass(frozen=True)
class PurchaseQuantity:
    """Whole base units to buy and the quantity they amount to."""

    purchase_units: int
    actual_quantity: float


@dataclass(frozen=True)
class ShoppingListItem:
    """Theoretical ingredient requirement for a daily target."""

    name: str
    unit: str
    usage_per_unit: float
    total_needed: float
    formatted_quantity: str
    unit_cost: float
    total_cost: float
    ingredient_id: UUID | None = None


@dataclass(frozen=True)
class ShoppingListSummary:
    """Shopping list sorted by cost with its totals."""

    items: list[ShoppingListItem] = field(default_factory=list)
    grand_total: float = 0
    total_items: int = 0


@dataclass(frozen=True)
class CogsBreakdownItem:
    """Share of one ingredient in the cost of a product unit."""

    name: str
    cost_per_unit: float
    percentage: float
    usage_per_unit: float | None
    unit: str | None
    ingredient_id: UUID | None = None


@dataclass(frozen=True)
class CogsBreakdown:
    """Cost of one product unit split by ingredient."""

    total_cost_per_unit: float
    items: list[CogsBreakdownItem]


@dataclass(frozen=True)
class PurchasePlanItem:
    """Requirement rounded up to whole base units."""

    name: str
    unit: str
    total_needed: float
    on_hand: float
    shortfall: float
    base_unit_quantity: float
    base_unit_cost: float
    units_to_buy: int
    purchased_quantity: float
    total_cost: float
    waste_amount: float
    waste_percentage: float
    ingredient_id: UUID | None = None

    @property
    def cost_per_unit(self) -> float:
        """Cost of a single unit of measure."""
        return self.base_unit_cost / self.base_unit_quantity


@dataclass(frozen=True)
class PurchasePlan:
    """What to actually buy, with totals."""

    items: list[PurchasePlanItem] = field(default_factory=list)
    total_cost: float = 0
    total_units: int = 0
    total_waste: float = 0
