"""Supabase implementation for ingredients."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from coffee_ops.domain.ingredients import Ingredient
from coffee_ops.services.ingredients import IngredientRepository


@dataclass
class SupabaseIngredientRepository(IngredientRepository):
    """Supabase-backed ingredient catalogue."""

    client: Client

    def list_ingredients(self, include_inactive: bool) -> list[Ingredient]:
        """Return ingredients ordered by name."""
        query = self.client.table("ingredients").select("*")
        if not include_inactive:
            query = query.eq("is_active", True)
        response = query.order("name").execute()
        return [_parse_ingredient(row) for row in response.data or []]

    def get_ingredient(self, ingredient_id: UUID) -> Ingredient | None:
        """Return an ingredient by id, if present."""
        response = (
            self.client.table("ingredients")
            .select("*")
            .eq("id", str(ingredient_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_ingredient(response.data[0])

    def create_ingredient(self, payload: dict[str, object]) -> Ingredient:
        """Create an ingredient and return it."""
        response = self.client.table("ingredients").insert(payload).execute()
        if not response.data:
            raise RuntimeError("Failed to create ingredient")
        return _parse_ingredient(response.data[0])

    def update_ingredient(
        self, ingredient_id: UUID, payload: dict[str, object]
    ) -> Ingredient:
        """Update an ingredient and return it."""
        response = (
            self.client.table("ingredients")
            .update({**payload, "updated_at": datetime.now(tz=UTC).isoformat()})
            .eq("id", str(ingredient_id))
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to update ingredient")
        return _parse_ingredient(response.data[0])

    def list_by_category(self, category: str) -> list[Ingredient]:
        """Return active ingredients in a category."""
        response = (
            self.client.table("ingredients")
            .select("*")
            .eq("category", category)
            .eq("is_active", True)
            .order("name")
            .execute()
        )
        return [_parse_ingredient(row) for row in response.data or []]

    def count_product_usage(self, ingredient_id: UUID) -> int:
        """Return how many recipe lines reference the ingredient."""
        response = (
            self.client.table("product_ingredients")
            .select("id")
            .eq("ingredient_id", str(ingredient_id))
            .execute()
        )
        return len(response.data or [])


def _parse_ingredient(row: dict[str, object]) -> Ingredient:
    """Parse an ingredient row into a domain model."""
    updated_raw = row.get("updated_at")
    return Ingredient(
        id=UUID(str(row["id"])),
        name=str(row.get("name", "")),
        base_unit_cost=_optional_float(row.get("base_unit_cost")),
        base_unit_quantity=_optional_float(row.get("base_unit_quantity")),
        unit=row.get("unit"),
        category=row.get("category"),
        supplier_info=row.get("supplier_info"),
        note=str(row.get("note") or ""),
        is_active=bool(row.get("is_active", True)),
        updated_at=(
            datetime.fromisoformat(updated_raw)
            if isinstance(updated_raw, str) and updated_raw
            else None
        ),
    )


def _optional_float(value: object) -> float | None:
    if value is None:
        return None
    return float(value)
