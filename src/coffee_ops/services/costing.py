"""Ingredient costing, shopping lists and purchase rounding.

Every function here is pure and total: missing or invalid numbers never
raise, they fall back to zero (or to a caller-supplied stored value).
"""

import logging
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from coffee_ops.domain.costing import (
    CogsBreakdown,
    CogsBreakdownItem,
    IngredientUsage,
    PurchasePlan,
    PurchasePlanItem,
    PurchaseQuantity,
    ShoppingListItem,
    ShoppingListSummary,
    UnitConversion,
)

DEFAULT_UNIT_LABEL = "unit"
_RATIO_DECIMALS = 9

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UnitStep:
    """Threshold at which a small unit is shown in a larger one."""

    threshold: float
    target_unit: str
    factor: float


UNIT_CONVERSIONS: dict[str, UnitStep] = {
    "ml": UnitStep(threshold=1000, target_unit="l", factor=1000),
    "g": UnitStep(threshold=1000, target_unit="kg", factor=1000),
    "tsp": UnitStep(threshold=3, target_unit="tbsp", factor=3),
    "tbsp": UnitStep(threshold=16, target_unit="cup", factor=16),
}

UNIT_OPTIONS: dict[str, str] = {
    "ml": "Milliliters (ml)",
    "l": "Liters (l)",
    "g": "Grams (g)",
    "kg": "Kilograms (kg)",
    "piece": "Pieces",
    "cup": "Cups",
    "tbsp": "Tablespoons",
    "tsp": "Teaspoons",
}


def round_currency(value: float) -> int:
    """Round to the nearest whole currency unit, halves up; 0 if not finite."""
    if not math.isfinite(value):
        return 0
    return math.floor(value + 0.5)


def cost_per_unit(
    base_unit_cost: object,
    base_unit_quantity: object,
    usage_per_unit: object,
    fallback: object = None,
) -> float:
    """Return the cost one product unit takes from an ingredient."""
    cost = _number(base_unit_cost)
    quantity = _number(base_unit_quantity)
    usage = _number(usage_per_unit)
    if cost is None or quantity is None or usage is None:
        return _fallback(fallback)
    if cost <= 0 or quantity <= 0 or usage < 0:
        return _fallback(fallback)
    value = (cost / quantity) * usage
    if not math.isfinite(value):
        return _fallback(fallback)
    return round_currency(value)


def usage_cost(usage: IngredientUsage) -> float:
    """Cost per product unit for a costing input, using its stored value as fallback."""
    return cost_per_unit(
        usage.base_unit_cost,
        usage.base_unit_quantity,
        usage.usage_per_unit,
        fallback=usage.stored_cost,
    )


def total_cogs_per_unit(usages: Iterable[IngredientUsage]) -> float:
    """Sum of ingredient costs for one product unit."""
    return sum((usage_cost(usage) for usage in usages), 0)


def daily_cogs(usages: Iterable[IngredientUsage], daily_target: object) -> float:
    """Ingredient cost of producing the daily target."""
    target = _number(daily_target)
    if target is None or target <= 0:
        return 0
    total = total_cogs_per_unit(usages) * target
    return total if math.isfinite(total) else 0


def total_quantity_needed(usage_per_unit: object, daily_target: object) -> float:
    """Quantity of an ingredient consumed by the daily target."""
    usage = _number(usage_per_unit)
    target = _number(daily_target)
    if usage is None or usage < 0 or target is None or target <= 0:
        return 0
    total = usage * target
    return total if math.isfinite(total) else 0


def convert_to_larger_unit(quantity: object, unit: str | None) -> UnitConversion:
    """Express a quantity in the next unit up once it crosses the threshold."""
    label = _unit_label(unit)
    amount = _number(quantity) or 0.0
    step = UNIT_CONVERSIONS.get(label.lower())
    if step is not None and amount >= step.threshold:
        converted = _round_to(amount / step.factor, 2)
        return UnitConversion(
            value=converted,
            unit=step.target_unit,
            display_text=(
                f"{_format_number(amount)} {label} "
                f"({_format_number(converted)} {step.target_unit})"
            ),
        )
    return UnitConversion(
        value=amount,
        unit=label,
        display_text=f"{_format_number(amount)} {label}",
    )


def format_quantity(quantity: object, unit: str | None) -> str:
    """Display string for a quantity, with the larger unit when useful."""
    return convert_to_larger_unit(quantity, unit).display_text


def purchase_quantity(required: object, base_unit_size: object) -> PurchaseQuantity:
    """Round a requirement up to whole purchasable base units."""
    needed = _number(required)
    if needed is None or needed <= 0:
        return PurchaseQuantity(purchase_units=0, actual_quantity=0.0)
    size = _number(base_unit_size)
    if size is None or size <= 0:
        return PurchaseQuantity(purchase_units=1, actual_quantity=needed)
    ratio = needed / size
    if not math.isfinite(ratio):
        return PurchaseQuantity(purchase_units=1, actual_quantity=needed)
    # 0.3 / 0.1 must not become 4 units
    units = math.ceil(round(ratio, _RATIO_DECIMALS))
    actual = units * size
    if not math.isfinite(actual):
        return PurchaseQuantity(purchase_units=1, actual_quantity=needed)
    return PurchaseQuantity(purchase_units=units, actual_quantity=actual)


def stock_deficit(required: object, on_hand: object) -> float:
    """Shortfall between a requirement and available stock, floored at zero."""
    needed = _number(required) or 0.0
    available = max(_number(on_hand) or 0.0, 0.0)
    return max(needed - available, 0.0)


def deficit_purchase(
    required: object, on_hand: object, base_unit_size: object
) -> PurchaseQuantity:
    """Round the stock shortfall up to whole base units."""
    return purchase_quantity(stock_deficit(required, on_hand), base_unit_size)


def unit_cost(base_unit_cost: object, base_unit_quantity: object) -> float:
    """Cost of a single unit of measure, or 0 for unusable pricing."""
    cost = _number(base_unit_cost)
    quantity = _number(base_unit_quantity)
    if cost is None or quantity is None or cost < 0 or quantity <= 0:
        return 0
    rate = cost / quantity
    return rate if math.isfinite(rate) else 0


def has_complete_costing_data(usage: IngredientUsage) -> bool:
    """True when pricing, base quantity, usage and unit are all present."""
    cost = _number(usage.base_unit_cost)
    quantity = _number(usage.base_unit_quantity)
    return (
        cost is not None
        and cost > 0
        and quantity is not None
        and quantity > 0
        and _number(usage.usage_per_unit) is not None
        and bool(usage.unit and usage.unit.strip())
    )


def validate_costing_fields(
    base_unit_cost: float | None = None,
    base_unit_quantity: float | None = None,
    usage_per_unit: float | None = None,
) -> list[str]:
    """Return problems with costing fields; fields left as None are not checked."""
    errors: list[str] = []
    if base_unit_cost is not None and base_unit_cost <= 0:
        errors.append("Base unit cost must be greater than 0")
    if base_unit_quantity is not None and base_unit_quantity <= 0:
        errors.append("Base unit quantity must be greater than 0")
    if usage_per_unit is not None and usage_per_unit < 0:
        errors.append("Usage per unit cannot be negative")
    return errors


def cogs_breakdown(usages: Iterable[IngredientUsage]) -> CogsBreakdown:
    """Split the cost of one product unit by ingredient."""
    entries = [(usage, usage_cost(usage)) for usage in usages]
    total = sum((cost for _, cost in entries), 0)
    items = [
        CogsBreakdownItem(
            name=usage.name,
            cost_per_unit=cost,
            percentage=_round_to(cost / total * 100, 2) if total > 0 else 0,
            usage_per_unit=_number(usage.usage_per_unit),
            unit=usage.unit,
            ingredient_id=usage.ingredient_id,
        )
        for usage, cost in entries
    ]
    return CogsBreakdown(total_cost_per_unit=total, items=items)


def generate_shopping_list(
    usages: Iterable[IngredientUsage], daily_target: object
) -> ShoppingListSummary:
    """Theoretical ingredient requirements for a daily target, priciest first."""
    target = _number(daily_target)
    if target is None or target <= 0:
        return ShoppingListSummary()

    items: list[ShoppingListItem] = []
    for usage in usages:
        fields = _costable_fields(usage)
        if fields is None:
            _logger.debug("Skipping %s: incomplete costing data", usage.name)
            continue
        cost, quantity, unit, per_unit = fields
        total_needed = total_quantity_needed(per_unit, target)
        rate = unit_cost(cost, quantity)
        line_cost = rate * total_needed
        if total_needed <= 0 or rate <= 0 or not math.isfinite(line_cost):
            _logger.debug("Skipping %s: quantities out of range", usage.name)
            continue
        items.append(
            ShoppingListItem(
                name=usage.name,
                unit=unit,
                usage_per_unit=per_unit,
                total_needed=total_needed,
                formatted_quantity=format_quantity(total_needed, unit),
                unit_cost=rate,
                total_cost=round_currency(line_cost),
                ingredient_id=usage.ingredient_id,
            )
        )

    items.sort(key=lambda item: item.total_cost, reverse=True)
    return ShoppingListSummary(
        items=items,
        grand_total=sum((item.total_cost for item in items), 0),
        total_items=len(items),
    )


def generate_purchase_plan(
    usages: Iterable[IngredientUsage],
    daily_target: object,
    on_hand: Mapping[tuple[str, str], float] | None = None,
) -> PurchasePlan:
    """Whole base units to buy for a daily target, net of stock on hand.

    ``on_hand`` maps ``(ingredient name, unit)`` to available stock. Items
    whose requirement is already covered are left out of the plan.
    """
    target = _number(daily_target)
    if target is None or target <= 0:
        return PurchasePlan()

    stock = on_hand or {}
    items: list[PurchasePlanItem] = []
    for usage in usages:
        fields = _costable_fields(usage)
        if fields is None:
            continue
        cost, quantity, unit, per_unit = fields
        total_needed = total_quantity_needed(per_unit, target)
        available = max(_number(stock.get((usage.name, unit))) or 0.0, 0.0)
        shortfall = stock_deficit(total_needed, available)
        purchase = purchase_quantity(shortfall, quantity)
        if purchase.purchase_units == 0:
            continue
        line_cost = purchase.purchase_units * cost
        if not math.isfinite(line_cost):
            _logger.debug("Skipping %s: purchase cost out of range", usage.name)
            continue
        waste = _round_to(max(purchase.actual_quantity - shortfall, 0.0), 6)
        items.append(
            PurchasePlanItem(
                name=usage.name,
                unit=unit,
                total_needed=total_needed,
                on_hand=available,
                shortfall=shortfall,
                base_unit_quantity=quantity,
                base_unit_cost=cost,
                units_to_buy=purchase.purchase_units,
                purchased_quantity=purchase.actual_quantity,
                total_cost=line_cost,
                waste_amount=waste,
                waste_percentage=_round_to(waste / purchase.actual_quantity * 100, 2),
                ingredient_id=usage.ingredient_id,
            )
        )

    items.sort(key=lambda item: item.total_cost, reverse=True)
    return PurchasePlan(
        items=items,
        total_cost=sum((item.total_cost for item in items), 0),
        total_units=sum(item.units_to_buy for item in items),
        total_waste=sum((item.waste_amount for item in items), 0.0),
    )


def _costable_fields(
    usage: IngredientUsage,
) -> tuple[float, float, str, float] | None:
    """Parsed (cost, base quantity, unit, usage) when the item can be costed."""
    if not has_complete_costing_data(usage):
        return None
    per_unit = _number(usage.usage_per_unit)
    if per_unit is None or per_unit <= 0:
        return None
    return (
        _number(usage.base_unit_cost),
        _number(usage.base_unit_quantity),
        usage.unit.strip(),
        per_unit,
    )


def _number(value: object) -> float | None:
    """Coerce user-entered input to a finite float, or None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return number


def _fallback(value: object) -> float:
    number = _number(value)
    if number is None or number < 0:
        return 0
    return number


def _unit_label(unit: str | None) -> str:
    if not unit or not unit.strip():
        return DEFAULT_UNIT_LABEL
    return unit.strip()


def _round_to(value: float, places: int) -> float:
    """Round half up to a fixed number of decimals."""
    scale = 10**places
    scaled = value * scale
    if not math.isfinite(scaled):
        return value
    return math.floor(scaled + 0.5) / scale


def _format_number(value: float) -> str:
    """Render a quantity without trailing zeros."""
    if value == int(value):
        return str(int(value))
    return f"{value:.6f}".rstrip("0").rstrip(".")
