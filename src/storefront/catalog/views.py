from django.http import HttpRequest, JsonResponse

from ..http import allow_methods, api_endpoint, ok
from . import queries


@allow_methods("GET")
@api_endpoint
def product_list(request: HttpRequest) -> JsonResponse:
    params = request.GET
    products = queries.search_products(
        category=params.get("category") or None,
        search=params.get("search") or None,
        min_price=queries.parse_price(params.get("minPrice"), "minPrice"),
        max_price=queries.parse_price(params.get("maxPrice"), "maxPrice"),
        region=params.get("region") or params.get("province") or None,
    )
    return ok([queries.product_to_dict(p) for p in products])


@allow_methods("GET")
@api_endpoint
def product_detail(request: HttpRequest, product_id: int) -> JsonResponse:
    return ok(queries.product_to_dict(queries.get_product(product_id)))


@allow_methods("GET")
@api_endpoint
def product_reviews(request: HttpRequest, product_id: int) -> JsonResponse:
    return ok([queries.review_to_dict(r) for r in queries.product_reviews(product_id)])


@allow_methods("GET")
@api_endpoint
def category_list(request: HttpRequest) -> JsonResponse:
    return ok([queries.category_to_dict(c) for c in queries.list_categories()])


@allow_methods("GET")
@api_endpoint
def province_list(request: HttpRequest) -> JsonResponse:
    return ok([queries.province_to_dict(p) for p in queries.list_provinces()])
