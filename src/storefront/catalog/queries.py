"""Read-only catalog queries."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any

from django.db.models import Avg, Count, FloatField, Q, QuerySet, Value
from django.db.models.functions import Coalesce

from ..exceptions import NotFound, ValidationError
from .models import Category, Product, Province, Review


def parse_price(raw: Any, name: str) -> Decimal | None:
    if raw is None or raw == "":
        return None
    try:
        value = Decimal(str(raw))
    except InvalidOperation as e:
        raise ValidationError(f"{name} must be a number", details={name: [f"Not a number: {raw!r}"]}) from e
    if not value.is_finite() or value < 0:
        raise ValidationError(f"{name} must be a non-negative number", details={name: [f"Out of range: {raw!r}"]})
    return value


def _listing() -> QuerySet[Product]:
    return (
        Product.objects.filter(is_active=True)
        .select_related("category", "origin_province")
        .annotate(
            avg_rating=Coalesce(Avg("reviews__rating"), Value(0.0), output_field=FloatField()),
            review_count=Count("reviews", distinct=True),
        )
    )


def search_products(
    *,
    category: str | None = None,
    search: str | None = None,
    min_price: Decimal | None = None,
    max_price: Decimal | None = None,
    region: str | None = None,
) -> QuerySet[Product]:
    """
    Active products matching every given filter, ordered by name.

    ``search`` matches case-insensitively anywhere in the name or the
    description; the price band is inclusive on both ends and applies to the
    list price.
    """
    if min_price is not None and max_price is not None and min_price > max_price:
        raise ValidationError("minPrice must not be greater than maxPrice")

    qs = _listing()
    if category:
        qs = qs.filter(category__name=category)
    if search:
        qs = qs.filter(Q(name__icontains=search) | Q(description__icontains=search))
    if min_price is not None:
        qs = qs.filter(price__gte=min_price)
    if max_price is not None:
        qs = qs.filter(price__lte=max_price)
    if region:
        qs = qs.filter(origin_province__name=region)
    return qs.order_by("name", "id")


def get_product(product_id: int) -> Product:
    product = _listing().filter(pk=product_id).first()
    if product is None:
        raise NotFound(f"Product {product_id} not found")
    return product


def product_reviews(product_id: int) -> QuerySet[Review]:
    if not Product.objects.filter(pk=product_id, is_active=True).exists():
        raise NotFound(f"Product {product_id} not found")
    return Review.objects.filter(product_id=product_id).select_related("customer").order_by("-created_at", "-id")


def list_categories() -> QuerySet[Category]:
    return (
        Category.objects.filter(is_active=True)
        .annotate(product_count=Count("products", filter=Q(products__is_active=True)))
        .order_by("display_order", "name")
    )


def list_provinces() -> QuerySet[Province]:
    return Province.objects.order_by("name")


def product_to_dict(product: Product) -> dict[str, Any]:
    avg_rating = getattr(product, "avg_rating", None)
    return {
        "id": product.pk,
        "sku": product.sku,
        "name": product.name,
        "description": product.description,
        "price": str(product.price),
        "salePrice": str(product.sale_price) if product.sale_price is not None else None,
        "unitPrice": str(product.unit_price),
        "stockQuantity": product.stock_quantity,
        "stockStatus": product.stock_status,
        "imageEmoji": product.image_emoji,
        "category": product.category.name,
        "originProvince": product.origin_province.name if product.origin_province else None,
        "avgRating": round(float(avg_rating), 2) if avg_rating is not None else 0.0,
        "reviewCount": getattr(product, "review_count", 0),
    }


def review_to_dict(review: Review) -> dict[str, Any]:
    return {
        "id": review.pk,
        "rating": review.rating,
        "title": review.title,
        "reviewText": review.review_text,
        "isVerifiedPurchase": review.is_verified_purchase,
        "helpfulCount": review.helpful_count,
        "createdAt": review.created_at.isoformat(),
        "firstName": review.customer.first_name,
        "lastName": review.customer.last_name,
    }


def category_to_dict(category: Category) -> dict[str, Any]:
    return {
        "id": category.pk,
        "name": category.name,
        "description": category.description,
        "productCount": getattr(category, "product_count", 0),
    }


def province_to_dict(province: Province) -> dict[str, Any]:
    return {"id": province.pk, "name": province.name, "code": province.code}
