"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, date, datetime
from uuid import UUID

from fastapi import FastAPI, HTTPException, Request, status

from coffee_ops.api.admin import router as admin_router
from coffee_ops.api.schemas import (
    CostingRequest,
    CostPerUnitRequest,
    PurchaseQuantityRequest,
    QuantityRequest,
    SaleRequest,
)
from coffee_ops.app_logging import configure_logging
from coffee_ops.config import Settings
from coffee_ops.containers import AppContainer
from coffee_ops.domain.costing import (
    CogsBreakdown,
    PurchasePlan,
    ShoppingListSummary,
)
from coffee_ops.domain.ingredients import Ingredient, Product
from coffee_ops.domain.sales import SalesRecord
from coffee_ops.domain.stock import StockLevel
from coffee_ops.services import costing
from coffee_ops.services.money import format_money


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "Starting coffee_ops API (%s)", app.state.container.settings.environment
        )
        yield
        logger.info("Stopping coffee_ops API")

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(admin_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/costing/cost-per-unit")
    async def cost_per_unit(
        payload: CostPerUnitRequest, request: Request
    ) -> dict[str, object]:
        """Cost one product unit takes from an ingredient."""
        settings = _settings(request)
        value = costing.cost_per_unit(
            payload.base_unit_cost,
            payload.base_unit_quantity,
            payload.usage_per_unit,
            fallback=payload.stored_cost,
        )
        return {
            "cost_per_unit": value,
            "display": _money(settings, value),
            "unit_cost": costing.unit_cost(
                payload.base_unit_cost, payload.base_unit_quantity
            ),
            "errors": costing.validate_costing_fields(
                payload.base_unit_cost,
                payload.base_unit_quantity,
                payload.usage_per_unit,
            ),
        }

    @app.post("/costing/quantity")
    async def quantity(payload: QuantityRequest) -> dict[str, object]:
        """Express a quantity in a larger unit where one applies."""
        conversion = costing.convert_to_larger_unit(payload.quantity, payload.unit)
        return {
            "value": conversion.value,
            "unit": conversion.unit,
            "display_text": conversion.display_text,
        }

    @app.get("/costing/units")
    async def units() -> dict[str, object]:
        """Selectable units and the conversions applied when displaying them."""
        return {
            "units": costing.UNIT_OPTIONS,
            "conversions": {
                unit: {
                    "threshold": step.threshold,
                    "target_unit": step.target_unit,
                    "factor": step.factor,
                }
                for unit, step in costing.UNIT_CONVERSIONS.items()
            },
        }

    @app.post("/costing/purchase-quantity")
    async def purchase_quantity(payload: PurchaseQuantityRequest) -> dict[str, object]:
        """Whole base units needed for a requirement, net of stock when given."""
        if payload.on_hand is None:
            required = payload.required
        else:
            required = costing.stock_deficit(payload.required, payload.on_hand)
        result = costing.purchase_quantity(required, payload.base_unit_size)
        return {
            "purchase_units": result.purchase_units,
            "actual_quantity": result.actual_quantity,
            "shortfall": costing.stock_deficit(payload.required, payload.on_hand),
        }

    @app.post("/costing/shopping-list")
    async def shopping_list(
        payload: CostingRequest, request: Request
    ) -> dict[str, object]:
        """Shopping list for posted ingredient usages."""
        settings = _settings(request)
        summary = costing.generate_shopping_list(
            [item.to_usage() for item in payload.items],
            _daily_target(settings, payload.daily_target),
        )
        return _shopping_list_payload(settings, summary)

    @app.post("/costing/purchase-plan")
    async def purchase_plan(
        payload: CostingRequest, request: Request
    ) -> dict[str, object]:
        """Purchase plan for posted ingredient usages and stock on hand."""
        settings = _settings(request)
        on_hand = {
            (item.name, (item.unit or "").strip()): item.on_hand
            for item in payload.items
            if item.on_hand is not None
        }
        plan = costing.generate_purchase_plan(
            [item.to_usage() for item in payload.items],
            _daily_target(settings, payload.daily_target),
            on_hand,
        )
        return _purchase_plan_payload(settings, plan)

    @app.get("/ingredients")
    async def list_ingredients(
        request: Request,
        category: str | None = None,
        q: str | None = None,
        include_inactive: bool = False,
    ) -> dict[str, object]:
        """Return the ingredient catalogue."""
        state_container: AppContainer = request.app.state.container
        service = state_container.ingredient_service
        if category:
            ingredients = service.by_category(category)
        elif q:
            ingredients = service.search(q)
        else:
            ingredients = service.list_ingredients(include_inactive)
        return {
            "ingredients": [
                _ingredient_payload(state_container.settings, item)
                for item in ingredients
            ]
        }

    @app.get("/ingredients/categories")
    async def ingredient_categories(request: Request) -> dict[str, list[str]]:
        """Return distinct ingredient categories."""
        state_container: AppContainer = request.app.state.container
        return {"categories": state_container.ingredient_service.categories()}

    @app.get("/ingredients/{ingredient_id}")
    async def ingredient_detail(
        ingredient_id: UUID, request: Request
    ) -> dict[str, object]:
        """Return one ingredient."""
        state_container: AppContainer = request.app.state.container
        ingredient = state_container.ingredient_service.get(ingredient_id)
        if ingredient is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Ingredient not found"
            )
        return {
            **_ingredient_payload(state_container.settings, ingredient),
            "used_in_products": state_container.ingredient_service.is_used_in_products(
                ingredient_id
            ),
        }

    @app.get("/products")
    async def list_products(
        request: Request, include_inactive: bool = False
    ) -> dict[str, object]:
        """Return products with their cost per unit."""
        state_container: AppContainer = request.app.state.container
        settings = state_container.settings
        summaries = state_container.product_service.list_with_costs(include_inactive)
        return {
            "products": [
                {
                    **_product_payload(summary.product),
                    "ingredient_count": summary.ingredient_count,
                    "cogs_per_unit": summary.cogs_per_unit,
                    "cogs_per_unit_display": _money(settings, summary.cogs_per_unit),
                }
                for summary in summaries
            ]
        }

    @app.get("/products/{product_id}/cogs")
    async def product_cogs(
        product_id: UUID, request: Request, daily_target: float | None = None
    ) -> dict[str, object]:
        """Cost breakdown of one product unit and of the daily target."""
        state_container: AppContainer = request.app.state.container
        settings = state_container.settings
        product = _get_product(state_container, product_id)
        usages = state_container.product_service.get_usages(product)
        breakdown = costing.cogs_breakdown(usages)
        target = _daily_target(settings, daily_target)
        daily = costing.daily_cogs(usages, target)
        return {
            "product": _product_payload(product),
            **_breakdown_payload(settings, breakdown),
            "daily_target": target,
            "daily_cogs": daily,
            "daily_cogs_display": _money(settings, daily),
        }

    @app.get("/products/{product_id}/shopping-list")
    async def product_shopping_list(
        product_id: UUID, request: Request, daily_target: float | None = None
    ) -> dict[str, object]:
        """Shopping list for a daily target of a product."""
        state_container: AppContainer = request.app.state.container
        settings = state_container.settings
        summary = state_container.product_service.shopping_list(
            product_id, _daily_target(settings, daily_target)
        )
        if summary is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Product not found"
            )
        return _shopping_list_payload(settings, summary)

    @app.get("/products/{product_id}/purchase-plan")
    async def product_purchase_plan(
        product_id: UUID,
        request: Request,
        daily_target: float | None = None,
        use_stock: bool = True,
    ) -> dict[str, object]:
        """Purchase plan for a daily target of a product."""
        state_container: AppContainer = request.app.state.container
        settings = state_container.settings
        on_hand = state_container.stock_service.on_hand() if use_stock else None
        plan = state_container.product_service.purchase_plan(
            product_id, _daily_target(settings, daily_target), on_hand
        )
        if plan is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Product not found"
            )
        return _purchase_plan_payload(settings, plan)

    @app.get("/stock")
    async def stock_levels(request: Request) -> dict[str, object]:
        """Return current stock levels."""
        state_container: AppContainer = request.app.state.container
        levels = state_container.stock_service.list_levels()
        return {"stock": [_stock_level_payload(level) for level in levels]}

    @app.get("/stock/alerts")
    async def stock_alerts(request: Request) -> dict[str, object]:
        """Return stock levels at or below their alert threshold."""
        state_container: AppContainer = request.app.state.container
        alerts = state_container.stock_service.low_stock_alerts()
        return {"alerts": [_stock_level_payload(level) for level in alerts]}

    @app.post("/sales")
    async def record_sale(payload: SaleRequest, request: Request) -> dict[str, object]:
        """Deduct the ingredients of a sale from stock and store the sale."""
        state_container: AppContainer = request.app.state.container
        product = _get_product(state_container, payload.product_id)
        usages = state_container.product_service.get_usages(product)
        result = state_container.stock_service.process_sale(payload.units_sold, usages)
        if not result.success:
            logger.warning("Sale for product %s rejected", product.id)
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT, detail=result.errors
            )
        record = state_container.sales_service.record_sale(
            product,
            payload.units_sold,
            costing.total_cogs_per_unit(usages),
            unit_price=payload.unit_price,
            note=payload.note,
        )
        logger.info("Recorded sale of %s x %s", payload.units_sold, product.name)
        return {
            "success": True,
            "deductions": result.deductions,
            "record": _sales_record_payload(state_container.settings, record),
        }

    @app.get("/sales")
    async def list_sales(
        request: Request, start: date | None = None, end: date | None = None
    ) -> dict[str, object]:
        """Sales of a day or an inclusive date range, newest first."""
        state_container: AppContainer = request.app.state.container
        first, last = _sales_period(start, end)
        records = state_container.sales_service.records_for_range(first, last)
        return {
            "start": first,
            "end": last,
            "records": [
                _sales_record_payload(state_container.settings, record)
                for record in records
            ],
        }

    @app.get("/sales/summary")
    async def sales_summary(
        request: Request, start: date | None = None, end: date | None = None
    ) -> dict[str, object]:
        """Units, revenue and ingredient cost of a day or a date range."""
        state_container: AppContainer = request.app.state.container
        settings = state_container.settings
        first, last = _sales_period(start, end)
        summary = state_container.sales_service.summary(first, last)
        return {
            "start": first,
            "end": last,
            "record_count": summary.record_count,
            "total_sales": summary.total_sales,
            "total_revenue": summary.total_revenue,
            "total_revenue_display": _money(settings, summary.total_revenue),
            "total_cogs": summary.total_cogs,
            "total_cogs_display": _money(settings, summary.total_cogs),
            "gross_profit": summary.gross_profit,
            "average_order_value": summary.average_order_value,
            "top_product": summary.top_product,
        }

    return app


def _settings(request: Request) -> Settings:
    return request.app.state.container.settings


def _money(settings: Settings, value: float) -> str:
    return format_money(value, settings.currency_code, settings.currency_locale)


def _daily_target(settings: Settings, daily_target: float | None) -> float:
    if daily_target is None:
        return settings.default_daily_target
    return daily_target


def _get_product(container: AppContainer, product_id: UUID) -> Product:
    product = container.product_service.get(product_id)
    if product is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Product not found"
        )
    return product


def _sales_period(start: date | None, end: date | None) -> tuple[date, date]:
    first = start or end or datetime.now(tz=UTC).date()
    last = end or first
    if last < first:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="End date must not be before start date",
        )
    return first, last


def _ingredient_payload(
    settings: Settings, ingredient: Ingredient
) -> dict[str, object]:
    unit_cost = costing.unit_cost(
        ingredient.base_unit_cost, ingredient.base_unit_quantity
    )
    return {
        "id": ingredient.id,
        "name": ingredient.name,
        "unit": ingredient.unit,
        "category": ingredient.category,
        "supplier_info": ingredient.supplier_info,
        "note": ingredient.note,
        "is_active": ingredient.is_active,
        "base_unit_cost": ingredient.base_unit_cost,
        "base_unit_quantity": ingredient.base_unit_quantity,
        "base_unit_cost_display": _money(settings, ingredient.base_unit_cost or 0),
        "unit_cost": unit_cost,
    }


def _product_payload(product: Product) -> dict[str, object]:
    return {
        "id": product.id,
        "name": product.name,
        "description": product.description,
        "note": product.note,
        "is_active": product.is_active,
        "ingredients": product.ingredients,
    }


def _breakdown_payload(
    settings: Settings, breakdown: CogsBreakdown
) -> dict[str, object]:
    return {
        "total_cost_per_unit": breakdown.total_cost_per_unit,
        "total_cost_per_unit_display": _money(
            settings, breakdown.total_cost_per_unit
        ),
        "items": [
            {
                "name": item.name,
                "ingredient_id": item.ingredient_id,
                "cost_per_unit": item.cost_per_unit,
                "cost_per_unit_display": _money(settings, item.cost_per_unit),
                "percentage": item.percentage,
                "usage_per_unit": item.usage_per_unit,
                "unit": item.unit,
            }
            for item in breakdown.items
        ],
    }


def _shopping_list_payload(
    settings: Settings, summary: ShoppingListSummary
) -> dict[str, object]:
    return {
        "items": [
            {
                "name": item.name,
                "ingredient_id": item.ingredient_id,
                "unit": item.unit,
                "usage_per_unit": item.usage_per_unit,
                "total_needed": item.total_needed,
                "formatted_quantity": item.formatted_quantity,
                "unit_cost": item.unit_cost,
                "total_cost": item.total_cost,
                "total_cost_display": _money(settings, item.total_cost),
            }
            for item in summary.items
        ],
        "grand_total": summary.grand_total,
        "grand_total_display": _money(settings, summary.grand_total),
        "total_items": summary.total_items,
    }


def _purchase_plan_payload(settings: Settings, plan: PurchasePlan) -> dict[str, object]:
    return {
        "items": [
            {
                "name": item.name,
                "ingredient_id": item.ingredient_id,
                "unit": item.unit,
                "total_needed": item.total_needed,
                "on_hand": item.on_hand,
                "shortfall": item.shortfall,
                "units_to_buy": item.units_to_buy,
                "base_unit_quantity": item.base_unit_quantity,
                "purchased_quantity": item.purchased_quantity,
                "formatted_quantity": costing.format_quantity(
                    item.purchased_quantity, item.unit
                ),
                "total_cost": item.total_cost,
                "total_cost_display": _money(settings, item.total_cost),
                "waste_amount": item.waste_amount,
                "waste_percentage": item.waste_percentage,
            }
            for item in plan.items
        ],
        "total_cost": plan.total_cost,
        "total_cost_display": _money(settings, plan.total_cost),
        "total_units": plan.total_units,
        "total_waste": plan.total_waste,
    }


def _stock_level_payload(level: StockLevel) -> dict[str, object]:
    return {
        "ingredient_name": level.ingredient_name,
        "unit": level.unit,
        "current_stock": level.current_stock,
        "reserved_stock": level.reserved_stock,
        "available": level.available,
        "low_stock_threshold": level.low_stock_threshold,
        "is_low": level.is_low,
        "display": costing.format_quantity(level.available, level.unit),
    }


def _sales_record_payload(settings: Settings, record: SalesRecord) -> dict[str, object]:
    return {
        "id": record.id,
        "product_id": record.product_id,
        "product_name": record.product_name,
        "quantity": record.quantity,
        "unit_price": record.unit_price,
        "total_amount": record.total_amount,
        "total_amount_display": _money(settings, record.total_amount),
        "cogs_per_unit": record.cogs_per_unit,
        "total_cogs": record.total_cogs,
        "gross_profit": record.gross_profit,
        "sale_date": record.sale_date,
        "note": record.note,
    }
