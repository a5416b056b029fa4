"""
PostgreSQL concurrency tests.

These exercise real row locks and advisory locks (not mocks):
- Two simultaneous checkouts of the same cart: exactly one order.
- Many customers racing for the last units of one product: stock never
  goes below zero and exactly the available units are sold.
- The same lock key blocks, different keys do not.

They require DATABASE_URL to point at PostgreSQL and are skipped otherwise.
"""

import threading
import time

import pytest
from django.db import connection, connections

from storefront.cart import services as cart
from storefront.catalog.models import Product
from storefront.exceptions import EmptyCart, InsufficientStock, LockAcquireTimeout
from storefront.locking import lock
from storefront.orders.models import Order, OrderItem
from storefront.orders.services import place_order

pytestmark = [pytest.mark.postgres, pytest.mark.django_db(transaction=True)]


@pytest.fixture(autouse=True)
def _require_postgres(db):
    if connection.vendor != "postgresql":
        pytest.skip("DATABASE_URL is not PostgreSQL; skipping concurrency tests.")


def _ensure_thread_connection() -> None:
    """Open a thread-local DB connection early to avoid first-connect races."""
    connections["default"].ensure_connection()


def _close_thread_connection() -> None:
    """Close the thread-local DB connection to avoid leaks between tests."""
    connections["default"].close()


def _run_together(targets, timeout=10.0):
    """Start every target behind one barrier and wait for all of them."""
    barrier = threading.Barrier(len(targets))
    outcomes: list[object] = [None] * len(targets)

    def runner(i, target):
        try:
            _ensure_thread_connection()
            barrier.wait(timeout=timeout)
            outcomes[i] = target()
        except Exception as e:  # collected and asserted on by the caller
            outcomes[i] = e
        finally:
            _close_thread_connection()

    threads = [threading.Thread(target=runner, args=(i, t), name=f"racer-{i}") for i, t in enumerate(targets)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=timeout)
    return outcomes


def test_double_submit_creates_one_order(customer, make_product, shipping):
    syrup = make_product(stock=5)
    cart.add_item(customer.pk, syrup.pk, 3)

    outcomes = _run_together([lambda: place_order(customer.pk, shipping)] * 2)

    orders = [o for o in outcomes if isinstance(o, Order)]
    losers = [o for o in outcomes if not isinstance(o, Order)]
    assert len(orders) == 1
    assert len(losers) == 1 and isinstance(losers[0], (EmptyCart, LockAcquireTimeout))

    assert Order.objects.count() == 1
    assert OrderItem.objects.get().quantity == 3
    assert Product.objects.get(pk=syrup.pk).stock_quantity == 2


def test_last_units_are_sold_exactly_once(make_customer, make_product, shipping):
    wine = make_product("Ice Wine", stock=3)
    buyers = [make_customer() for _ in range(6)]
    for buyer in buyers:
        cart.add_item(buyer.pk, wine.pk, 1)

    outcomes = _run_together([(lambda b=b: place_order(b.pk, shipping)) for b in buyers])

    sold = [o for o in outcomes if isinstance(o, Order)]
    refused = [o for o in outcomes if isinstance(o, InsufficientStock)]
    assert len(sold) == 3
    assert len(refused) == 3
    assert Product.objects.get(pk=wine.pk).stock_quantity == 0


def test_concurrent_adds_and_checkouts_keep_stock_non_negative(make_customer, make_product, shipping):
    jam = make_product("Blueberry Jam", stock=4)
    buyers = [make_customer() for _ in range(4)]
    for buyer in buyers[:2]:
        cart.add_item(buyer.pk, jam.pk, 2)

    def add_then_buy(buyer):
        try:
            cart.add_item(buyer.pk, jam.pk, 2)
        except InsufficientStock:
            pass
        return place_order(buyer.pk, shipping)

    outcomes = _run_together([(lambda b=b: add_then_buy(b)) for b in buyers])

    sold_units = sum(o.items.get().quantity for o in outcomes if isinstance(o, Order))
    stock = Product.objects.get(pk=jam.pk).stock_quantity
    assert stock >= 0
    assert sold_units + stock == 4


def test_same_key_blocks_and_times_out():
    """The same key must block concurrent acquisition; contender should time out."""
    key = "test:concurrency:same-key"

    started = threading.Event()
    release = threading.Event()
    results: dict[str, object] = {}

    def holder() -> None:
        try:
            _ensure_thread_connection()
            with lock(key, timeout=2.0):
                results["holder_acquired"] = True
                started.set()
                release.wait(timeout=2.0)
        finally:
            _close_thread_connection()

    def contender() -> None:
        try:
            _ensure_thread_connection()
            assert started.wait(timeout=2.0)
            t0 = time.monotonic()
            try:
                with lock(key, timeout=0.2):
                    results["contender_acquired"] = True
            except LockAcquireTimeout:
                results["contender_elapsed"] = time.monotonic() - t0
        finally:
            _close_thread_connection()

    t1 = threading.Thread(target=holder, name="lock-holder")
    t2 = threading.Thread(target=contender, name="lock-contender")

    t1.start()
    t2.start()
    t2.join(timeout=5.0)
    release.set()
    t1.join(timeout=5.0)

    assert results.get("holder_acquired") is True
    assert "contender_acquired" not in results
    assert results.get("contender_elapsed", 0) >= 0.15


def test_different_keys_do_not_block():
    key_a = "test:concurrency:key-a"
    key_b = "test:concurrency:key-b"

    started = threading.Event()
    results: list[str] = []

    def a() -> None:
        try:
            _ensure_thread_connection()
            with lock(key_a, timeout=2.0):
                results.append("a_acquired")
                started.set()
                time.sleep(0.3)
        finally:
            _close_thread_connection()

    def b() -> None:
        try:
            _ensure_thread_connection()
            assert started.wait(timeout=2.0)
            with lock(key_b, timeout=0.5):
                results.append("b_acquired")
        finally:
            _close_thread_connection()

    t1 = threading.Thread(target=a, name="lock-a")
    t2 = threading.Thread(target=b, name="lock-b")

    t1.start()
    t2.start()
    t1.join(timeout=5.0)
    t2.join(timeout=5.0)

    assert "a_acquired" in results
    assert "b_acquired" in results
