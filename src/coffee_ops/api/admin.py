"""Admin API endpoints with simple token auth."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from coffee_ops.api.schemas import (
    IngredientCreate,
    IngredientUpdate,
    ProductCreate,
    ProductIngredientCreate,
    ReservationUpdateRequest,
    StockReservationRequest,
    WarehouseBatchRequest,
)
from coffee_ops.domain.errors import (
    DuplicateIngredientError,
    IngredientInUseError,
    InvalidIngredientError,
    InvalidUsageError,
)
from coffee_ops.services.money import format_money

if TYPE_CHECKING:
    from coffee_ops.containers import AppContainer
    from coffee_ops.domain.stock import StockReservation

router = APIRouter(prefix="/admin", tags=["admin"])

_logger = logging.getLogger(__name__)


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/health", dependencies=[Depends(require_admin)])
async def admin_health() -> dict[str, str]:
    """Admin health check endpoint."""
    return {"status": "ok"}


@router.post(
    "/ingredients",
    dependencies=[Depends(require_admin)],
    status_code=status.HTTP_201_CREATED,
)
async def create_ingredient(
    payload: IngredientCreate, request: Request
) -> dict[str, object]:
    """Add an ingredient to the catalogue."""
    container: AppContainer = request.app.state.container
    try:
        ingredient = container.ingredient_service.create(payload.model_dump())
    except InvalidIngredientError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=exc.errors
        ) from exc
    return {"ingredient": ingredient}


@router.patch("/ingredients/{ingredient_id}", dependencies=[Depends(require_admin)])
async def update_ingredient(
    ingredient_id: UUID, payload: IngredientUpdate, request: Request
) -> dict[str, object]:
    """Apply a partial update to an ingredient."""
    container: AppContainer = request.app.state.container
    try:
        ingredient = container.ingredient_service.update(
            ingredient_id, payload.model_dump(exclude_unset=True)
        )
    except InvalidIngredientError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=exc.errors
        ) from exc
    if ingredient is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Ingredient not found"
        )
    return {"ingredient": ingredient}


@router.delete("/ingredients/{ingredient_id}", dependencies=[Depends(require_admin)])
async def delete_ingredient(ingredient_id: UUID, request: Request) -> dict[str, str]:
    """Deactivate an ingredient that no product uses."""
    container: AppContainer = request.app.state.container
    try:
        deleted = container.ingredient_service.delete(ingredient_id)
    except IngredientInUseError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail=str(exc)
        ) from exc
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Ingredient not found"
        )
    return {"status": "deleted"}


@router.post(
    "/products",
    dependencies=[Depends(require_admin)],
    status_code=status.HTTP_201_CREATED,
)
async def create_product(payload: ProductCreate, request: Request) -> dict[str, object]:
    """Create a product without ingredients."""
    container: AppContainer = request.app.state.container
    product = container.product_service.create(payload.model_dump())
    _logger.info("Created product %s (%s)", product.name, product.id)
    return {"product": product}


@router.post(
    "/products/{product_id}/ingredients",
    dependencies=[Depends(require_admin)],
    status_code=status.HTTP_201_CREATED,
)
async def add_product_ingredient(
    product_id: UUID, payload: ProductIngredientCreate, request: Request
) -> dict[str, object]:
    """Add an ingredient line to a product recipe."""
    container: AppContainer = request.app.state.container
    try:
        line = container.product_service.add_ingredient(
            product_id, payload.ingredient_id, payload.usage_per_unit, payload.note
        )
    except InvalidUsageError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
        ) from exc
    except DuplicateIngredientError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail=str(exc)
        ) from exc
    if line is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Product or ingredient not found",
        )
    return {"product_ingredient": line}


@router.delete(
    "/products/{product_id}/ingredients/{ingredient_id}",
    dependencies=[Depends(require_admin)],
)
async def remove_product_ingredient(
    product_id: UUID, ingredient_id: UUID, request: Request
) -> dict[str, str]:
    """Remove an ingredient line from a product recipe."""
    container: AppContainer = request.app.state.container
    if not container.product_service.remove_ingredient(product_id, ingredient_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Ingredient is not part of this product",
        )
    return {"status": "removed"}


@router.post(
    "/warehouse/batches",
    dependencies=[Depends(require_admin)],
    status_code=status.HTTP_201_CREATED,
)
async def create_warehouse_batch(
    payload: WarehouseBatchRequest, request: Request
) -> dict[str, object]:
    """Receive everything the purchase plan of a product buys."""
    container: AppContainer = request.app.state.container
    daily_target = (
        payload.daily_target
        if payload.daily_target is not None
        else container.settings.default_daily_target
    )
    on_hand = container.stock_service.on_hand() if payload.use_stock else None
    plan = container.product_service.purchase_plan(
        payload.product_id, daily_target, on_hand
    )
    if plan is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Product not found"
        )
    if not plan.items:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Nothing to purchase",
        )
    batch = container.warehouse_service.receive_purchase_plan(plan, payload.note)
    return {"batch": batch}


@router.get("/warehouse/batches", dependencies=[Depends(require_admin)])
async def list_warehouse_batches(request: Request) -> dict[str, object]:
    """Return warehouse batches, newest first."""
    container: AppContainer = request.app.state.container
    return {"batches": container.warehouse_service.list_batches()}


@router.get("/warehouse/stats", dependencies=[Depends(require_admin)])
async def warehouse_stats(request: Request) -> dict[str, object]:
    """Return totals across warehouse batches."""
    container: AppContainer = request.app.state.container
    stats = container.warehouse_service.stats()
    return {
        "total_batches": stats.total_batches,
        "total_items": stats.total_items,
        "total_value": stats.total_value,
        "total_value_display": format_money(
            stats.total_value,
            container.settings.currency_code,
            container.settings.currency_locale,
        ),
        "latest_batch_number": stats.latest_batch_number,
    }


@router.get("/stock/transactions", dependencies=[Depends(require_admin)])
async def stock_transactions(
    request: Request,
    ingredient_name: str | None = None,
    unit: str | None = None,
    limit: int = 50,
) -> dict[str, object]:
    """Return recent stock movements."""
    container: AppContainer = request.app.state.container
    return {
        "transactions": container.stock_service.transactions(
            ingredient_name, unit, limit
        )
    }


@router.post("/stock/reserve", dependencies=[Depends(require_admin)])
async def reserve_stock(
    payload: StockReservationRequest, request: Request
) -> dict[str, object]:
    """Hold back stock for a pending order."""
    container: AppContainer = request.app.state.container
    _require_stock_level(container, payload.ingredient_name, payload.unit)
    result = container.stock_service.reserve_stock(
        payload.ingredient_name,
        payload.unit,
        payload.quantity,
        payload.reason or "Reserved for order",
    )
    return _reservation_payload(result)


@router.post("/stock/unreserve", dependencies=[Depends(require_admin)])
async def unreserve_stock(
    payload: StockReservationRequest, request: Request
) -> dict[str, object]:
    """Release reserved stock."""
    container: AppContainer = request.app.state.container
    _require_stock_level(container, payload.ingredient_name, payload.unit)
    result = container.stock_service.unreserve_stock(
        payload.ingredient_name,
        payload.unit,
        payload.quantity,
        payload.reason or "Reservation released",
    )
    return _reservation_payload(result)


@router.put("/stock/reservation", dependencies=[Depends(require_admin)])
async def update_reservation(
    payload: ReservationUpdateRequest, request: Request
) -> dict[str, object]:
    """Set the reserved amount of an ingredient."""
    container: AppContainer = request.app.state.container
    _require_stock_level(container, payload.ingredient_name, payload.unit)
    result = container.stock_service.update_reservation(
        payload.ingredient_name, payload.unit, payload.quantity, payload.reason
    )
    return _reservation_payload(result)


def _require_stock_level(
    container: AppContainer, ingredient_name: str, unit: str
) -> None:
    if container.stock_service.get_level(ingredient_name, unit) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Stock level not found"
        )


def _reservation_payload(result: StockReservation) -> dict[str, object]:
    if not result.success:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=result.error)
    return {
        "success": True,
        "available_stock": result.available_stock,
        "reserved_stock": result.reserved_stock,
    }
