from uuid import UUID

from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt

from ..accounts.guards import customer_required
from ..exceptions import ValidationError
from ..http import allow_methods, api_endpoint, clean, json_body, ok
from . import services
from .forms import ShippingAddressForm


@csrf_exempt  # token-authenticated JSON API
@allow_methods("GET", "POST")
@api_endpoint
@customer_required
def orders(request: HttpRequest) -> JsonResponse:
    if request.method == "GET":
        return ok([services.order_summary_to_dict(o) for o in services.list_orders(request.customer_id)])

    body = json_body(request)
    if "shippingAddress" not in body:
        raise ValidationError("shippingAddress is required", details={"shippingAddress": ["This field is required."]})
    data = clean(ShippingAddressForm, body["shippingAddress"])

    order = services.place_order(
        request.customer_id,
        services.ShippingAddress(
            first_name=data["firstName"],
            last_name=data["lastName"],
            street=data["street"],
            city=data["city"],
            postal_code=data["postalCode"],
            province_id=data["provinceId"],
        ),
    )
    return ok(
        {"orderId": str(order.pk), "orderNumber": order.order_number, "totalAmount": str(order.total_amount)},
        status=201,
        message="Order created successfully",
    )


@allow_methods("GET")
@api_endpoint
@customer_required
def order_detail(request: HttpRequest, order_id: UUID) -> JsonResponse:
    return ok(services.order_to_dict(services.get_order(request.customer_id, order_id)))


@csrf_exempt
@allow_methods("POST")
@api_endpoint
@customer_required
def order_cancel(request: HttpRequest, order_id: UUID) -> JsonResponse:
    order = services.cancel_order(request.customer_id, order_id)
    return ok({"orderId": str(order.pk), "status": order.status}, message="Order cancelled")
