"""Supabase implementation for products and recipe lines."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from coffee_ops.domain.ingredients import Product, ProductIngredient
from coffee_ops.services.products import ProductRepository


@dataclass
class SupabaseProductRepository(ProductRepository):
    """Supabase-backed repository for products."""

    client: Client

    def list_products(self, include_inactive: bool) -> list[Product]:
        """Return products with their recipe lines."""
        query = self.client.table("products").select("*")
        if not include_inactive:
            query = query.eq("is_active", True)
        response = query.order("name").execute()
        rows = response.data or []
        if not rows:
            return []
        lines_response = (
            self.client.table("product_ingredients")
            .select("*")
            .in_("product_id", [str(row["id"]) for row in rows])
            .order("created_at")
            .execute()
        )
        lines = [_parse_line(row) for row in lines_response.data or []]
        return [
            _parse_product(
                row, [line for line in lines if str(line.product_id) == str(row["id"])]
            )
            for row in rows
        ]

    def get_product(self, product_id: UUID) -> Product | None:
        """Return a product with its recipe lines, if present."""
        response = (
            self.client.table("products")
            .select("*")
            .eq("id", str(product_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_product(response.data[0], self._list_lines(product_id))

    def create_product(self, payload: dict[str, object]) -> Product:
        """Create a product and return it."""
        response = self.client.table("products").insert(payload).execute()
        if not response.data:
            raise RuntimeError("Failed to create product")
        return _parse_product(response.data[0], [])

    def update_product(self, product_id: UUID, payload: dict[str, object]) -> Product:
        """Update a product and return it."""
        response = (
            self.client.table("products")
            .update(payload)
            .eq("id", str(product_id))
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to update product")
        return _parse_product(response.data[0], self._list_lines(product_id))

    def add_product_ingredient(
        self, product_id: UUID, ingredient_id: UUID, usage_per_unit: float, note: str
    ) -> ProductIngredient:
        """Insert a recipe line."""
        response = (
            self.client.table("product_ingredients")
            .insert(
                {
                    "product_id": str(product_id),
                    "ingredient_id": str(ingredient_id),
                    "usage_per_unit": usage_per_unit,
                    "note": note,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to add product ingredient")
        return _parse_line(response.data[0])

    def update_product_ingredient(
        self, product_ingredient_id: UUID, usage_per_unit: float
    ) -> ProductIngredient:
        """Change the usage of a recipe line."""
        response = (
            self.client.table("product_ingredients")
            .update({"usage_per_unit": usage_per_unit})
            .eq("id", str(product_ingredient_id))
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to update product ingredient")
        return _parse_line(response.data[0])

    def remove_product_ingredient(self, product_ingredient_id: UUID) -> None:
        """Delete a recipe line."""
        self.client.table("product_ingredients").delete().eq(
            "id", str(product_ingredient_id)
        ).execute()

    def _list_lines(self, product_id: UUID) -> list[ProductIngredient]:
        response = (
            self.client.table("product_ingredients")
            .select("*")
            .eq("product_id", str(product_id))
            .order("created_at")
            .execute()
        )
        return [_parse_line(row) for row in response.data or []]


def _parse_product(
    row: dict[str, object], lines: list[ProductIngredient]
) -> Product:
    return Product(
        id=UUID(str(row["id"])),
        name=str(row.get("name", "")),
        description=str(row.get("description") or ""),
        note=str(row.get("note") or ""),
        is_active=bool(row.get("is_active", True)),
        ingredients=lines,
    )


def _parse_line(row: dict[str, object]) -> ProductIngredient:
    return ProductIngredient(
        id=UUID(str(row["id"])),
        product_id=UUID(str(row["product_id"])),
        ingredient_id=UUID(str(row["ingredient_id"])),
        usage_per_unit=float(row.get("usage_per_unit", 0.0)),
        note=str(row.get("note") or ""),
    )
