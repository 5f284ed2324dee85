"""Services for products and their ingredient recipes."""

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from coffee_ops.domain.costing import (
    CogsBreakdown,
    IngredientUsage,
    PurchasePlan,
    ShoppingListSummary,
)
from coffee_ops.domain.errors import DuplicateIngredientError, InvalidUsageError
from coffee_ops.domain.ingredients import Product, ProductIngredient
from coffee_ops.services import costing
from coffee_ops.services.ingredients import IngredientRepository

_logger = logging.getLogger(__name__)


class ProductRepository(Protocol):
    """Persistence interface for products and recipes."""

    def list_products(self, include_inactive: bool) -> list[Product]:
        """Return products with their recipe lines."""

    def get_product(self, product_id: UUID) -> Product | None:
        """Return a product with its recipe lines, if present."""

    def create_product(self, payload: dict[str, object]) -> Product:
        """Create a product and return it."""

    def update_product(self, product_id: UUID, payload: dict[str, object]) -> Product:
        """Update a product and return it."""

    def add_product_ingredient(
        self, product_id: UUID, ingredient_id: UUID, usage_per_unit: float, note: str
    ) -> ProductIngredient:
        """Attach an ingredient to a product recipe."""

    def update_product_ingredient(
        self, product_ingredient_id: UUID, usage_per_unit: float
    ) -> ProductIngredient:
        """Change the usage of a recipe line."""

    def remove_product_ingredient(self, product_ingredient_id: UUID) -> None:
        """Delete a recipe line."""


@dataclass
class ProductCostSummary:
    """Product with its recipe size and cost per unit."""

    product: Product
    ingredient_count: int
    cogs_per_unit: float


@dataclass
class ProductService:
    """Application service for products, recipes and their costing."""

    repository: ProductRepository
    ingredient_repository: IngredientRepository

    def list_products(self, include_inactive: bool = False) -> list[Product]:
        """Return products sorted by name."""
        products = self.repository.list_products(include_inactive)
        return sorted(products, key=lambda product: product.name.lower())

    def get(self, product_id: UUID) -> Product | None:
        """Return a product with its recipe."""
        return self.repository.get_product(product_id)

    def create(self, payload: dict[str, object]) -> Product:
        """Create an active product."""
        return self.repository.create_product({**payload, "is_active": True})

    def update(self, product_id: UUID, payload: dict[str, object]) -> Product | None:
        """Update a product; None when the id is unknown."""
        if self.repository.get_product(product_id) is None:
            return None
        return self.repository.update_product(product_id, payload)

    def delete(self, product_id: UUID) -> bool:
        """Soft delete a product."""
        if self.repository.get_product(product_id) is None:
            return False
        self.repository.update_product(product_id, {"is_active": False})
        return True

    def add_ingredient(
        self,
        product_id: UUID,
        ingredient_id: UUID,
        usage_per_unit: float,
        note: str = "",
    ) -> ProductIngredient | None:
        """Add an ingredient to a recipe; None when product or ingredient is unknown."""
        _check_usage(usage_per_unit)
        product = self.repository.get_product(product_id)
        if product is None:
            return None
        if self.ingredient_repository.get_ingredient(ingredient_id) is None:
            return None
        if _find_line(product, ingredient_id) is not None:
            raise DuplicateIngredientError("Ingredient is already in this product")
        return self.repository.add_product_ingredient(
            product_id, ingredient_id, usage_per_unit, note
        )

    def update_usage(
        self, product_id: UUID, ingredient_id: UUID, usage_per_unit: float
    ) -> ProductIngredient | None:
        """Change how much of an ingredient one product unit uses."""
        _check_usage(usage_per_unit)
        product = self.repository.get_product(product_id)
        line = _find_line(product, ingredient_id) if product else None
        if line is None:
            return None
        return self.repository.update_product_ingredient(line.id, usage_per_unit)

    def remove_ingredient(self, product_id: UUID, ingredient_id: UUID) -> bool:
        """Remove an ingredient from a recipe."""
        product = self.repository.get_product(product_id)
        line = _find_line(product, ingredient_id) if product else None
        if line is None:
            return False
        self.repository.remove_product_ingredient(line.id)
        return True

    def get_usages(self, product: Product) -> list[IngredientUsage]:
        """Join recipe lines with ingredient pricing, in recipe order."""
        usages = []
        for line in product.ingredients:
            ingredient = self.ingredient_repository.get_ingredient(line.ingredient_id)
            if ingredient is None:
                _logger.warning(
                    "Missing ingredient %s for product %s",
                    line.ingredient_id,
                    product.id,
                )
                continue
            usages.append(
                IngredientUsage(
                    name=ingredient.name,
                    base_unit_cost=ingredient.base_unit_cost,
                    base_unit_quantity=ingredient.base_unit_quantity,
                    unit=ingredient.unit,
                    usage_per_unit=line.usage_per_unit,
                    ingredient_id=ingredient.id,
                )
            )
        return usages

    def cogs_breakdown(self, product_id: UUID) -> CogsBreakdown | None:
        """Cost of one unit of the product, split by ingredient."""
        product = self.repository.get_product(product_id)
        if product is None:
            return None
        return costing.cogs_breakdown(self.get_usages(product))

    def shopping_list(
        self, product_id: UUID, daily_target: float
    ) -> ShoppingListSummary | None:
        """Theoretical ingredient needs for a daily target of the product."""
        product = self.repository.get_product(product_id)
        if product is None:
            return None
        return costing.generate_shopping_list(self.get_usages(product), daily_target)

    def purchase_plan(
        self,
        product_id: UUID,
        daily_target: float,
        on_hand: Mapping[tuple[str, str], float] | None = None,
    ) -> PurchasePlan | None:
        """Whole base units to buy for a daily target of the product."""
        product = self.repository.get_product(product_id)
        if product is None:
            return None
        return costing.generate_purchase_plan(
            self.get_usages(product), daily_target, on_hand
        )

    def list_with_costs(
        self, include_inactive: bool = False
    ) -> list[ProductCostSummary]:
        """Products with recipe size and cost per unit."""
        return [
            ProductCostSummary(
                product=product,
                ingredient_count=len(product.ingredients),
                cogs_per_unit=costing.total_cogs_per_unit(self.get_usages(product)),
            )
            for product in self.list_products(include_inactive)
        ]


def _find_line(product: Product, ingredient_id: UUID) -> ProductIngredient | None:
    for line in product.ingredients:
        if line.ingredient_id == ingredient_id:
            return line
    return None


def _check_usage(usage_per_unit: float) -> None:
    if (
        not isinstance(usage_per_unit, int | float)
        or not math.isfinite(usage_per_unit)
        or usage_per_unit < 0
    ):
        raise InvalidUsageError("Usage per unit cannot be negative")
