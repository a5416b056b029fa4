from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt

from ..accounts.guards import customer_required
from ..http import allow_methods, api_endpoint, clean, json_body, ok
from . import services
from .forms import AddToCartForm, UpdateCartForm


@csrf_exempt  # token-authenticated JSON API
@allow_methods("GET", "POST")
@api_endpoint
@customer_required
def cart(request: HttpRequest) -> JsonResponse:
    if request.method == "GET":
        return ok(services.get_cart(request.customer_id).to_dict())

    data = clean(AddToCartForm, json_body(request))
    line = services.add_item(request.customer_id, data["productId"], data["quantity"] or 1)
    return ok({"id": line.pk, "quantity": line.quantity}, status=201, message="Item added to cart")


@csrf_exempt
@allow_methods("PUT", "DELETE")
@api_endpoint
@customer_required
def cart_line(request: HttpRequest, line_id: int) -> JsonResponse:
    if request.method == "DELETE":
        services.remove_item(request.customer_id, line_id)
        return ok(None, message="Item removed from cart")

    data = clean(UpdateCartForm, json_body(request))
    line = services.set_quantity(request.customer_id, line_id, data["quantity"])
    if line is None:
        return ok(None, message="Item removed from cart")
    return ok({"id": line.pk, "quantity": line.quantity}, message="Cart updated")
