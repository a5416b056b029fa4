from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt

from ..http import allow_methods, api_endpoint, clean, json_body, ok
from . import services
from .forms import LoginForm, RegisterForm


@csrf_exempt  # token-authenticated JSON API
@allow_methods("POST")
@api_endpoint
def register(request: HttpRequest) -> JsonResponse:
    data = clean(RegisterForm, json_body(request))
    customer, token = services.register(
        email=data["email"],
        password=data["password"],
        first_name=data["firstName"],
        last_name=data["lastName"],
        phone=data.get("phone") or "",
    )
    return ok({"token": token, "customer": services.customer_to_dict(customer)}, status=201)


@csrf_exempt
@allow_methods("POST")
@api_endpoint
def login(request: HttpRequest) -> JsonResponse:
    data = clean(LoginForm, json_body(request))
    customer, token = services.login(email=data["email"], password=data["password"])
    return ok({"token": token, "customer": services.customer_to_dict(customer)})
