"""Services for managing ingredients."""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from coffee_ops.domain.errors import IngredientInUseError, InvalidIngredientError
from coffee_ops.domain.ingredients import Ingredient

_logger = logging.getLogger(__name__)


class IngredientRepository(Protocol):
    """Persistence interface for ingredients."""

    def list_ingredients(self, include_inactive: bool) -> list[Ingredient]:
        """Return ingredients, optionally including soft-deleted ones."""

    def get_ingredient(self, ingredient_id: UUID) -> Ingredient | None:
        """Return an ingredient by id, if present."""

    def create_ingredient(self, payload: dict[str, object]) -> Ingredient:
        """Create an ingredient and return it."""

    def update_ingredient(
        self, ingredient_id: UUID, payload: dict[str, object]
    ) -> Ingredient:
        """Update an ingredient and return it."""

    def list_by_category(self, category: str) -> list[Ingredient]:
        """Return active ingredients in a category."""

    def count_product_usage(self, ingredient_id: UUID) -> int:
        """Return how many product recipes use the ingredient."""


@dataclass
class IngredientService:
    """Application service for ingredient catalogue operations."""

    repository: IngredientRepository

    def list_ingredients(self, include_inactive: bool = False) -> list[Ingredient]:
        """Return ingredients sorted by name."""
        ingredients = self.repository.list_ingredients(include_inactive)
        return sorted(ingredients, key=lambda item: item.name.lower())

    def get(self, ingredient_id: UUID) -> Ingredient | None:
        """Return a single ingredient."""
        return self.repository.get_ingredient(ingredient_id)

    def create(self, payload: dict[str, object]) -> Ingredient:
        """Validate and create an ingredient."""
        errors = validate_ingredient_data(payload, partial=False)
        if errors:
            raise InvalidIngredientError(errors)
        ingredient = self.repository.create_ingredient({**payload, "is_active": True})
        _logger.info("Created ingredient %s (%s)", ingredient.name, ingredient.id)
        return ingredient

    def update(
        self, ingredient_id: UUID, payload: dict[str, object]
    ) -> Ingredient | None:
        """Validate and apply a partial update; None when the id is unknown."""
        if self.repository.get_ingredient(ingredient_id) is None:
            return None
        errors = validate_ingredient_data(payload, partial=True)
        if errors:
            raise InvalidIngredientError(errors)
        return self.repository.update_ingredient(ingredient_id, payload)

    def delete(self, ingredient_id: UUID) -> bool:
        """Soft delete an ingredient that no product uses."""
        if self.repository.get_ingredient(ingredient_id) is None:
            return False
        if self.is_used_in_products(ingredient_id):
            raise IngredientInUseError(
                "Cannot delete ingredient that is used in products"
            )
        self.repository.update_ingredient(ingredient_id, {"is_active": False})
        _logger.info("Deactivated ingredient %s", ingredient_id)
        return True

    def is_used_in_products(self, ingredient_id: UUID) -> bool:
        """Return True when a product recipe references the ingredient."""
        return self.repository.count_product_usage(ingredient_id) > 0

    def by_category(self, category: str) -> list[Ingredient]:
        """Return active ingredients in a category, sorted by name."""
        return sorted(
            self.repository.list_by_category(category),
            key=lambda item: item.name.lower(),
        )

    def categories(self) -> list[str]:
        """Return distinct categories of active ingredients."""
        active = self.repository.list_ingredients(False)
        return sorted({item.category for item in active if item.category})

    def search(self, query: str) -> list[Ingredient]:
        """Case-insensitive substring search over active ingredient names."""
        needle = query.strip().lower()
        return [
            item for item in self.list_ingredients() if needle in item.name.lower()
        ]


def validate_ingredient_data(
    payload: dict[str, object], *, partial: bool
) -> list[str]:
    """Return validation problems for an ingredient payload.

    With ``partial`` set only the keys present in the payload are checked.
    """
    errors: list[str] = []
    if not partial or "name" in payload:
        name = payload.get("name")
        if not isinstance(name, str) or not name.strip():
            errors.append("Name is required")
    if not partial or "unit" in payload:
        unit = payload.get("unit")
        if not isinstance(unit, str) or not unit.strip():
            errors.append("Unit is required")
    cost = payload.get("base_unit_cost")
    if cost is not None and (not _is_number(cost) or cost < 0):
        errors.append("Base unit cost cannot be negative")
    quantity = payload.get("base_unit_quantity")
    if quantity is not None and (not _is_number(quantity) or quantity <= 0):
        errors.append("Base unit quantity must be greater than 0")
    return errors


def _is_number(value: object) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)
