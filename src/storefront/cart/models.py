from decimal import Decimal

from django.db import models

MAX_LINE_QUANTITY = 10_000


class CartItem(models.Model):
    """
    One line of a customer's cart.

    There is at most one line per (customer, product); a line whose quantity
    would drop to zero is deleted instead.
    """

    customer = models.ForeignKey("accounts.Customer", on_delete=models.CASCADE, related_name="cart_items")
    product = models.ForeignKey("catalog.Product", on_delete=models.CASCADE, related_name="cart_items")
    quantity = models.PositiveIntegerField()
    added_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["added_at", "id"]
        constraints = [
            models.UniqueConstraint(fields=["customer", "product"], name="cart_item_customer_product_unique"),
            models.CheckConstraint(condition=models.Q(quantity__gt=0), name="cart_item_quantity_positive"),
        ]

    def __str__(self) -> str:
        return f"{self.customer_id}:{self.product_id} x{self.quantity}"

    @property
    def line_total(self) -> Decimal:
        return (self.product.unit_price * self.quantity).quantize(Decimal("0.01"))
