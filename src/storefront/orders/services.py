"""
Order placement and lifecycle.

`place_order` is the one operation in the storefront that has to be
serialized: it turns the customer's cart into an order, takes the ordered
units out of stock and empties the cart, all in one transaction.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from decimal import Decimal

import structlog
from django.conf import settings
from django.db import DatabaseError, transaction
from django.db.models import Count, F
from django.utils import timezone

from ..accounts.models import Customer
from ..cart.models import CartItem
from ..catalog.models import Product, Province
from ..db import bound_transaction, retry_on_transaction_failure
from ..exceptions import (
    Conflict,
    CustomerNotFound,
    EmptyCart,
    InsufficientStock,
    NotFound,
    TransactionAborted,
    ValidationError,
)
from ..locking import exclusive
from .models import Order, OrderItem, OrderStatus

log = structlog.get_logger(__name__)

# Largest value Order.total_amount can hold.
MAX_ORDER_TOTAL = Decimal("9999999999.99")


@dataclass(frozen=True)
class ShippingAddress:
    first_name: str
    last_name: str
    street: str
    city: str
    postal_code: str
    province_id: int


def new_order_number() -> str:
    return f"CA-{timezone.now():%Y%m%d}-{uuid.uuid4().hex[:8].upper()}"


def _checkout_lock_timeout() -> float:
    return settings.STOREFRONT_CHECKOUT_LOCK_TIMEOUT


def place_order(customer_id: int, shipping: ShippingAddress) -> Order:
    """
    Convert the customer's cart into an order.

    Raises
    ------
    EmptyCart, InsufficientStock, CustomerNotFound, ValidationError
        Business failures; nothing was changed.
    LockAcquireTimeout
        Another checkout for the same customer is still running.
    TransactionAborted
        The database gave up on the transaction; it was rolled back.
    """
    province = Province.objects.filter(pk=shipping.province_id).first()
    if province is None:
        raise ValidationError(
            "Unknown shipping province", details={"provinceId": [f"No province {shipping.province_id}"]}
        )

    try:
        return _convert_cart(customer_id, shipping, province)
    except DatabaseError as e:
        log.exception("order.aborted", customer_id=customer_id)
        raise TransactionAborted() from e


@exclusive(key="checkout:customer:{customer_id}", timeout=_checkout_lock_timeout)
@retry_on_transaction_failure()
@transaction.atomic
def _convert_cart(customer_id: int, shipping: ShippingAddress, province: Province) -> Order:
    bound_transaction()

    if not Customer.objects.filter(pk=customer_id, is_active=True).exists():
        raise CustomerNotFound(customer_id)

    # Lock order: cart lines, then products by primary key. Every checkout
    # takes product locks in the same order, so two carts sharing products
    # cannot deadlock each other.
    lines = list(CartItem.objects.select_for_update().filter(customer_id=customer_id).order_by("product_id"))
    if not lines:
        raise EmptyCart()

    products = {
        p.pk: p
        for p in Product.objects.select_for_update().filter(pk__in=[line.product_id for line in lines]).order_by("pk")
    }

    for line in lines:
        product = products[line.product_id]
        available = product.stock_quantity if product.is_active else 0
        if line.quantity > available:
            log.info("order.stock_conflict", product_id=product.pk, requested=line.quantity, available=available)
            raise InsufficientStock(product.name, line.quantity, available)

    total = sum((products[line.product_id].unit_price * line.quantity for line in lines), Decimal("0.00"))
    if total > MAX_ORDER_TOTAL:
        raise ValidationError(
            "Order total is too large, reduce some quantities",
            details={"totalAmount": [f"Must not exceed {MAX_ORDER_TOTAL}"]},
        )
    order = Order.objects.create(
        order_number=new_order_number(),
        customer_id=customer_id,
        status=OrderStatus.CREATED,
        total_amount=total.quantize(Decimal("0.01")),
    )

    items = []
    for line in lines:
        product = products[line.product_id]
        items.append(
            OrderItem(
                order=order,
                product=product,
                product_name=product.name,
                quantity=line.quantity,
                unit_price=product.unit_price,
            )
        )
        _take_stock(product, line.quantity)
    OrderItem.objects.bulk_create(items)

    # Only the lines read under lock above; anything added since stays in the cart.
    CartItem.objects.filter(pk__in=[line.pk for line in lines]).delete()
    _apply_shipping(order, shipping, province)

    order_id, number = order.pk, order.order_number
    transaction.on_commit(
        lambda: log.info("order.placed", order_id=str(order_id), order_number=number, total=str(total))
    )
    return order


def _take_stock(product: Product, quantity: int) -> None:
    # Conditional decrement: succeeds only while enough stock is left.
    updated = Product.objects.filter(pk=product.pk, stock_quantity__gte=quantity).update(
        stock_quantity=F("stock_quantity") - quantity
    )
    if updated != 1:
        product.refresh_from_db(fields=["stock_quantity"])
        raise InsufficientStock(product.name, quantity, product.stock_quantity)


def _apply_shipping(order: Order, shipping: ShippingAddress, province: Province) -> None:
    order.shipping_first_name = shipping.first_name
    order.shipping_last_name = shipping.last_name
    order.shipping_street = shipping.street
    order.shipping_city = shipping.city
    order.shipping_postal_code = shipping.postal_code
    order.shipping_province = province
    order.save(
        update_fields=[
            "shipping_first_name",
            "shipping_last_name",
            "shipping_street",
            "shipping_city",
            "shipping_postal_code",
            "shipping_province",
            "updated_at",
        ]
    )


@transaction.atomic
def transition_order(order_id, status: str) -> Order:
    """
    Move an order to ``status``.

    Cancelling puts every ordered unit back into stock in the same
    transaction. Illegal moves (e.g. shipped → cancelled) raise Conflict.
    """
    try:
        target = OrderStatus(status)
    except ValueError as e:
        raise ValidationError(f"Unknown order status {status!r}") from e

    try:
        order_id = uuid.UUID(str(order_id))
    except ValueError as e:
        raise NotFound(f"Order {order_id} not found") from e

    order = Order.objects.select_for_update().filter(pk=order_id).first()
    if order is None:
        raise NotFound(f"Order {order_id} not found")
    if not order.can_transition_to(target):
        raise Conflict(f"Order {order.order_number} cannot go from {order.status} to {target.value}")

    if target == OrderStatus.CANCELLED:
        for item in order.items.order_by("product_id"):
            Product.objects.filter(pk=item.product_id).update(stock_quantity=F("stock_quantity") + item.quantity)

    previous = order.status
    order.status = target
    order.save(update_fields=["status", "updated_at"])
    log.info("order.status_changed", order_id=str(order.pk), previous=previous, status=target.value)
    return order


@transaction.atomic
def cancel_order(customer_id: int, order_id) -> Order:
    if not Order.objects.filter(pk=order_id, customer_id=customer_id).exists():
        raise NotFound(f"Order {order_id} not found")
    return transition_order(order_id, OrderStatus.CANCELLED)


def list_orders(customer_id: int):
    return (
        Order.objects.filter(customer_id=customer_id)
        .annotate(item_count=Count("items"))
        .order_by("-created_at")
    )


def get_order(customer_id: int, order_id) -> Order:
    order = (
        Order.objects.filter(pk=order_id, customer_id=customer_id)
        .select_related("shipping_province")
        .prefetch_related("items__product")
        .first()
    )
    if order is None:
        raise NotFound(f"Order {order_id} not found")
    return order


def order_summary_to_dict(order: Order) -> dict:
    return {
        "id": str(order.pk),
        "orderNumber": order.order_number,
        "status": order.status,
        "totalAmount": str(order.total_amount),
        "createdAt": order.created_at.isoformat(),
        "itemCount": getattr(order, "item_count", None),
    }


def order_to_dict(order: Order) -> dict:
    items = list(order.items.all())
    data = order_summary_to_dict(order)
    data["itemCount"] = len(items)
    data["shippingAddress"] = {
        "firstName": order.shipping_first_name,
        "lastName": order.shipping_last_name,
        "street": order.shipping_street,
        "city": order.shipping_city,
        "postalCode": order.shipping_postal_code,
        "province": order.shipping_province.name if order.shipping_province else None,
    }
    data["items"] = [
        {
            "id": item.pk,
            "productId": item.product_id,
            "productName": item.product_name,
            "imageEmoji": item.product.image_emoji,
            "quantity": item.quantity,
            "unitPrice": str(item.unit_price),
            "lineTotal": str(item.line_total),
        }
        for item in items
    ]
    return data
