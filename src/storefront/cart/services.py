"""
Cart mutations.

Every mutation is scoped to one customer: a line id that belongs to someone
else behaves exactly like a line that does not exist.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

import structlog
from django.db import transaction
from django.db.models import F

from ..accounts.models import Customer
from ..catalog.models import Product
from ..exceptions import CustomerNotFound, InsufficientStock, NotFound, ValidationError
from .models import MAX_LINE_QUANTITY, CartItem

log = structlog.get_logger(__name__)

CENT = Decimal("0.01")


@dataclass
class CartSummary:
    lines: list[CartItem] = field(default_factory=list)
    subtotal: Decimal = Decimal("0.00")
    item_count: int = 0

    def to_dict(self) -> dict:
        return {
            "items": [line_to_dict(line) for line in self.lines],
            "subtotal": f"{self.subtotal:.2f}",
            "itemCount": self.item_count,
        }


def line_to_dict(line: CartItem) -> dict:
    product = line.product
    return {
        "id": line.pk,
        "productId": product.pk,
        "productName": product.name,
        "imageEmoji": product.image_emoji,
        "unitPrice": str(product.unit_price),
        "quantity": line.quantity,
        "stockQuantity": product.stock_quantity,
        "lineTotal": str(line.line_total),
    }


def _active_customer(customer_id: int) -> Customer:
    customer = Customer.objects.filter(pk=customer_id, is_active=True).first()
    if customer is None:
        raise CustomerNotFound(customer_id)
    return customer


def _too_many() -> ValidationError:
    return ValidationError(
        f"A cart line holds at most {MAX_LINE_QUANTITY} units",
        details={"quantity": [f"Line quantity must not exceed {MAX_LINE_QUANTITY}"]},
    )


def get_cart(customer_id: int) -> CartSummary:
    lines = list(
        CartItem.objects.filter(customer_id=customer_id).select_related("product").order_by("added_at", "id")
    )
    subtotal = sum((line.line_total for line in lines), Decimal("0.00")).quantize(CENT)
    return CartSummary(lines=lines, subtotal=subtotal, item_count=sum(line.quantity for line in lines))


@transaction.atomic
def add_item(customer_id: int, product_id: int, quantity: int = 1) -> CartItem:
    """
    Put ``quantity`` units of a product into the cart.

    Adds to the existing line for that product if there is one. The stock
    check compares the requested quantity with what is on hand now; the
    authoritative check happens again at checkout.
    """
    if quantity < 1:
        raise ValidationError("Quantity must be at least 1", details={"quantity": ["Must be at least 1"]})
    if quantity > MAX_LINE_QUANTITY:
        raise _too_many()

    _active_customer(customer_id)
    product = Product.objects.filter(pk=product_id, is_active=True).first()
    if product is None:
        raise NotFound(f"Product {product_id} not found")
    if quantity > product.stock_quantity:
        raise InsufficientStock(product.name, quantity, product.stock_quantity)

    line, created = CartItem.objects.get_or_create(
        customer_id=customer_id,
        product_id=product_id,
        defaults={"quantity": quantity},
    )
    if not created:
        updated = CartItem.objects.filter(pk=line.pk, quantity__lte=MAX_LINE_QUANTITY - quantity).update(
            quantity=F("quantity") + quantity
        )
        if updated:
            line.refresh_from_db()
        elif CartItem.objects.filter(pk=line.pk).exists():
            raise _too_many()
        else:
            # A checkout converted and deleted the line after we read it.
            line = CartItem.objects.create(customer_id=customer_id, product_id=product_id, quantity=quantity)

    log.info("cart.item_added", product_id=product_id, quantity=quantity, line_quantity=line.quantity)
    return line


@transaction.atomic
def set_quantity(customer_id: int, line_id: int, quantity: int) -> CartItem | None:
    """
    Set a line's quantity; zero or less removes the line.

    Returns the updated line, or None when the line was removed (or was
    already gone).
    """
    if quantity <= 0:
        remove_item(customer_id, line_id)
        return None
    if quantity > MAX_LINE_QUANTITY:
        raise _too_many()

    line = (
        CartItem.objects.select_for_update(of=("self",))
        .select_related("product")
        .filter(pk=line_id, customer_id=customer_id)
        .first()
    )
    if line is None:
        raise NotFound(f"Cart item {line_id} not found")
    if quantity > line.product.stock_quantity:
        raise InsufficientStock(line.product.name, quantity, line.product.stock_quantity)

    line.quantity = quantity
    line.save(update_fields=["quantity", "updated_at"])
    log.info("cart.quantity_set", line_id=line_id, quantity=quantity)
    return line


def remove_item(customer_id: int, line_id: int) -> bool:
    """Delete a line. Returns whether anything was deleted; absent lines are fine."""
    deleted, _ = CartItem.objects.filter(pk=line_id, customer_id=customer_id).delete()
    if deleted:
        log.info("cart.item_removed", line_id=line_id)
    return bool(deleted)
