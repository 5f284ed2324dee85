"""Business rule violations raised by application services."""


class CoffeeOpsError(Exception):
    """Base exception for rule violations."""


class InvalidIngredientError(CoffeeOpsError, ValueError):
    """Ingredient payload failed validation."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__("; ".join(errors))
        self.errors = errors


class IngredientInUseError(CoffeeOpsError, ValueError):
    """Ingredient is still part of a product recipe."""


class DuplicateIngredientError(CoffeeOpsError, ValueError):
    """Ingredient already belongs to the product."""


class InvalidUsageError(CoffeeOpsError, ValueError):
    """Usage per product unit is negative or not a number."""
