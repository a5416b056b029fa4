from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


class StockStatus(models.TextChoices):
    OUT_OF_STOCK = "OutOfStock"
    LOW_STOCK = "LowStock"
    IN_STOCK = "InStock"


def stock_status(stock_quantity: int, low_stock_threshold: int) -> str:
    if stock_quantity <= 0:
        return StockStatus.OUT_OF_STOCK.value
    if stock_quantity <= low_stock_threshold:
        return StockStatus.LOW_STOCK.value
    return StockStatus.IN_STOCK.value


class Province(models.Model):
    name = models.CharField(max_length=64, unique=True)
    code = models.CharField(max_length=2, unique=True)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class Category(models.Model):
    name = models.CharField(max_length=64, unique=True)
    description = models.TextField(blank=True, default="")
    display_order = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["display_order", "name"]
        verbose_name_plural = "categories"

    def __str__(self) -> str:
        return self.name


class Product(models.Model):
    """
    A sellable item.

    ``stock_quantity`` is only ever decremented through the guarded update in
    the order service; the check constraint is the last line of defence
    against overselling.
    """

    sku = models.CharField(max_length=64, unique=True)
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True, default="")
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(Decimal("0"))])
    sale_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    stock_quantity = models.PositiveIntegerField(default=0)
    low_stock_threshold = models.PositiveIntegerField(default=10)
    image_emoji = models.CharField(max_length=16, blank=True, default="")
    category = models.ForeignKey(Category, on_delete=models.PROTECT, related_name="products")
    origin_province = models.ForeignKey(
        Province, on_delete=models.SET_NULL, null=True, blank=True, related_name="products"
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]
        constraints = [
            models.CheckConstraint(condition=models.Q(stock_quantity__gte=0), name="product_stock_non_negative"),
            models.CheckConstraint(condition=models.Q(price__gte=0), name="product_price_non_negative"),
        ]

    def __str__(self) -> str:
        return f"{self.sku} ({self.stock_quantity})"

    @property
    def unit_price(self) -> Decimal:
        """Price charged right now: the sale price when there is one."""
        return self.sale_price if self.sale_price is not None else self.price

    @property
    def stock_status(self) -> str:
        return stock_status(self.stock_quantity, self.low_stock_threshold)


class Review(models.Model):
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name="reviews")
    customer = models.ForeignKey("accounts.Customer", on_delete=models.CASCADE, related_name="reviews")
    rating = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(5)])
    title = models.CharField(max_length=200, blank=True, default="")
    review_text = models.TextField(blank=True, default="")
    is_verified_purchase = models.BooleanField(default=False)
    helpful_count = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        constraints = [
            models.CheckConstraint(condition=models.Q(rating__gte=1, rating__lte=5), name="review_rating_range"),
        ]
