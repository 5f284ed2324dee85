"""Tests for container wiring."""

from coffee_ops.containers import build_container


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)

    assert container.ingredient_service is not None
    assert container.product_service.ingredient_repository is (
        container.ingredient_service.repository
    )
    assert container.warehouse_service.stock_service is container.stock_service
    assert container.stock_service.default_low_stock_threshold == 10.0
    assert container.sales_service.repository.client is (
        container.stock_service.repository.client
    )
