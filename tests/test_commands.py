import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from storefront.cart import services as cart
from storefront.catalog import queries
from storefront.catalog.models import Category, Product, Province
from storefront.orders.models import OrderStatus
from storefront.orders.services import place_order


def test_seed_catalog_is_idempotent(db):
    call_command("seed_catalog")
    call_command("seed_catalog")

    assert Province.objects.count() == 13
    assert Category.objects.count() == 3
    assert Product.objects.count() == 8

    food_band = queries.search_products(
        category="Food",
        min_price=queries.parse_price("20", "minPrice"),
        max_price=queries.parse_price("30", "maxPrice"),
    )
    assert [p.name for p in food_band] == ["Canadian Maple Syrup"]


def test_set_order_status(customer, make_product, shipping):
    cart.add_item(customer.pk, make_product().pk, 1)
    order = place_order(customer.pk, shipping)

    call_command("set_order_status", str(order.pk), "paid")

    order.refresh_from_db()
    assert order.status == OrderStatus.PAID

    with pytest.raises(CommandError):
        call_command("set_order_status", str(order.pk), "delivered")
    with pytest.raises(CommandError):
        call_command("set_order_status", "not-a-uuid", "paid")
