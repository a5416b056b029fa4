import itertools
from decimal import Decimal

import pytest
from django.contrib.auth.hashers import make_password

from storefront.accounts.models import Customer
from storefront.accounts.tokens import issue_token
from storefront.catalog.models import Category, Product, Province
from storefront.orders.services import ShippingAddress

_sku = itertools.count(1)
_email = itertools.count(1)


@pytest.fixture(autouse=True)
def _fast_password_hashing(settings):
    """PBKDF2 at full strength makes every registration take a second."""
    settings.PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]


@pytest.fixture
def province(db):
    return Province.objects.create(name="Ontario", code="ON")


@pytest.fixture
def food(db):
    return Category.objects.create(name="Food", display_order=1)


@pytest.fixture
def make_product(db, food):
    def make(name="Maple Syrup", price="24.99", stock=10, **kwargs):
        kwargs.setdefault("category", food)
        return Product.objects.create(
            sku=f"SKU-{next(_sku)}",
            name=name,
            price=Decimal(price),
            stock_quantity=stock,
            **kwargs,
        )

    return make


@pytest.fixture
def make_customer(db):
    def make(email=None, password="correct horse", **kwargs):
        kwargs.setdefault("first_name", "Anne")
        kwargs.setdefault("last_name", "Shirley")
        return Customer.objects.create(
            email=email or f"customer{next(_email)}@example.ca",
            password_hash=make_password(password),
            **kwargs,
        )

    return make


@pytest.fixture
def customer(make_customer):
    return make_customer()


@pytest.fixture
def shipping(province):
    return ShippingAddress(
        first_name="Anne",
        last_name="Shirley",
        street="1 Green Gables Lane",
        city="Cavendish",
        postal_code="C0A 1N0",
        province_id=province.pk,
    )


@pytest.fixture
def auth_client(client, customer):
    """Django test client that sends the customer's bearer token."""
    client.defaults["HTTP_AUTHORIZATION"] = f"Bearer {issue_token(customer)}"
    client.customer = customer
    return client
