"""Dependency container wiring for the application."""

from dataclasses import dataclass

from supabase import create_client

from coffee_ops.adapters.supabase_ingredient_repository import (
    SupabaseIngredientRepository,
)
from coffee_ops.adapters.supabase_product_repository import SupabaseProductRepository
from coffee_ops.adapters.supabase_sales_repository import SupabaseSalesRepository
from coffee_ops.adapters.supabase_stock_repository import SupabaseStockRepository
from coffee_ops.adapters.supabase_warehouse_repository import (
    SupabaseWarehouseRepository,
)
from coffee_ops.config import Settings
from coffee_ops.services.ingredients import IngredientService
from coffee_ops.services.products import ProductService
from coffee_ops.services.sales import SalesService
from coffee_ops.services.stock import StockService
from coffee_ops.services.warehouse import WarehouseService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    ingredient_service: IngredientService
    product_service: ProductService
    stock_service: StockService
    warehouse_service: WarehouseService
    sales_service: SalesService


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    ingredient_repository = SupabaseIngredientRepository(supabase_client)
    product_repository = SupabaseProductRepository(supabase_client)
    stock_repository = SupabaseStockRepository(supabase_client)
    warehouse_repository = SupabaseWarehouseRepository(supabase_client)
    sales_repository = SupabaseSalesRepository(supabase_client)
    stock_service = StockService(
        stock_repository,
        default_low_stock_threshold=resolved_settings.default_low_stock_threshold,
    )
    return AppContainer(
        settings=resolved_settings,
        ingredient_service=IngredientService(ingredient_repository),
        product_service=ProductService(product_repository, ingredient_repository),
        stock_service=stock_service,
        warehouse_service=WarehouseService(warehouse_repository, stock_service),
        sales_service=SalesService(sales_repository),
    )
