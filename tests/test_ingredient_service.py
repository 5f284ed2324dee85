"""Tests for ingredient service."""

from uuid import uuid4

import pytest

from coffee_ops.domain.errors import IngredientInUseError, InvalidIngredientError
from coffee_ops.services.ingredients import IngredientService, validate_ingredient_data
from tests.conftest import InMemoryIngredientRepository


def _milk_payload() -> dict[str, object]:
    return {
        "name": "Milk",
        "unit": "ml",
        "base_unit_cost": 20000,
        "base_unit_quantity": 1000,
        "category": "dairy",
    }


def test_create_ingredient_is_active() -> None:
    service = IngredientService(InMemoryIngredientRepository())

    ingredient = service.create(_milk_payload())

    assert ingredient.is_active
    assert service.get(ingredient.id) == ingredient


def test_create_ingredient_rejects_invalid_payload() -> None:
    service = IngredientService(InMemoryIngredientRepository())

    with pytest.raises(InvalidIngredientError) as exc_info:
        service.create({"name": " ", "base_unit_cost": -1})

    assert exc_info.value.errors == [
        "Name is required",
        "Unit is required",
        "Base unit cost cannot be negative",
    ]


def test_validate_partial_update_checks_present_keys_only() -> None:
    assert validate_ingredient_data({"note": "organic"}, partial=True) == []
    assert validate_ingredient_data({"base_unit_quantity": 0}, partial=True) == [
        "Base unit quantity must be greater than 0"
    ]


def test_update_ingredient() -> None:
    service = IngredientService(InMemoryIngredientRepository())
    ingredient = service.create(_milk_payload())

    updated = service.update(ingredient.id, {"base_unit_cost": 22000})

    assert updated is not None
    assert updated.base_unit_cost == 22000
    assert updated.updated_at is not None
    assert service.update(uuid4(), {"base_unit_cost": 1}) is None


def test_update_ingredient_rejects_blank_name() -> None:
    service = IngredientService(InMemoryIngredientRepository())
    ingredient = service.create(_milk_payload())

    with pytest.raises(InvalidIngredientError):
        service.update(ingredient.id, {"name": ""})


def test_delete_ingredient_soft_deletes() -> None:
    repository = InMemoryIngredientRepository()
    service = IngredientService(repository)
    ingredient = service.create(_milk_payload())

    assert service.delete(ingredient.id)
    assert service.list_ingredients() == []
    assert len(service.list_ingredients(include_inactive=True)) == 1
    assert not service.delete(uuid4())


def test_delete_ingredient_used_in_product_is_refused() -> None:
    repository = InMemoryIngredientRepository()
    service = IngredientService(repository)
    ingredient = service.create(_milk_payload())
    repository.usage_counts[ingredient.id] = 1

    with pytest.raises(IngredientInUseError):
        service.delete(ingredient.id)
    assert service.get(ingredient.id).is_active


def test_categories_and_search() -> None:
    service = IngredientService(InMemoryIngredientRepository())
    service.create(_milk_payload())
    service.create(
        {"name": "Oat Milk", "unit": "ml", "category": "dairy alternative"}
    )
    service.create({"name": "Espresso Beans", "unit": "g", "category": "coffee"})
    service.create({"name": "Cups", "unit": "piece"})

    assert service.categories() == ["coffee", "dairy", "dairy alternative"]
    assert [item.name for item in service.search("milk")] == ["Milk", "Oat Milk"]
    assert [item.name for item in service.by_category("coffee")] == [
        "Espresso Beans"
    ]
    assert [item.name for item in service.list_ingredients()] == [
        "Cups",
        "Espresso Beans",
        "Milk",
        "Oat Milk",
    ]
