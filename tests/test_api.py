import json

import pytest

from storefront.cart import services as cart_services
from storefront.catalog.models import Product
from storefront.orders.models import Order
from storefront.views import server_error

pytestmark = pytest.mark.django_db


def post(client, url, data, method="post"):
    return getattr(client, method)(url, data=json.dumps(data), content_type="application/json")


def shipping_payload(province):
    return {
        "shippingAddress": {
            "firstName": "Anne",
            "lastName": "Shirley",
            "street": "1 Green Gables Lane",
            "city": "Cavendish",
            "postalCode": "C0A 1N0",
            "provinceId": province.pk,
        }
    }


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "ok"


def test_catalog_listing_envelope(client, make_product):
    make_product("Ice Wine", "54.99", stock=0)
    make_product("Maple Syrup", "24.99", stock=45)

    response = client.get("/api/catalog", {"maxPrice": "60", "search": "e"})

    body = response.json()
    assert response.status_code == 200
    assert body["success"] is True
    assert [(p["name"], p["stockStatus"]) for p in body["data"]] == [
        ("Ice Wine", "OutOfStock"),
        ("Maple Syrup", "InStock"),
    ]


def test_catalog_bad_price_is_400(client, db):
    response = client.get("/api/catalog", {"minPrice": "cheap"})
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "validation_error"


def test_product_detail_and_404(client, make_product):
    syrup = make_product()

    assert client.get(f"/api/catalog/{syrup.pk}").json()["data"]["id"] == syrup.pk

    missing = client.get("/api/catalog/999999")
    assert missing.status_code == 404
    assert missing.json() == {
        "success": False,
        "error": {"code": "not_found", "message": "Product 999999 not found"},
    }


def test_categories_and_provinces(client, make_product, province):
    make_product()

    assert client.get("/api/categories").json()["data"][0]["productCount"] == 1
    assert client.get("/api/provinces").json()["data"] == [{"id": province.pk, "name": "Ontario", "code": "ON"}]


def test_register_login_and_duplicate(client, db):
    payload = {"email": "Anne@Example.ca", "password": "avonlea-1908", "firstName": "Anne", "lastName": "Shirley"}

    registered = post(client, "/api/auth/register", payload)
    assert registered.status_code == 201
    assert registered.json()["data"]["customer"]["email"] == "anne@example.ca"
    assert registered.json()["data"]["token"]

    duplicate = post(client, "/api/auth/register", {**payload, "email": "anne@example.ca"})
    assert duplicate.status_code == 409
    assert duplicate.json()["error"]["code"] == "conflict"

    login = post(client, "/api/auth/login", {"email": "ANNE@example.ca", "password": "avonlea-1908"})
    assert login.status_code == 200
    assert login.json()["data"]["customer"]["firstName"] == "Anne"

    wrong = post(client, "/api/auth/login", {"email": "anne@example.ca", "password": "nope-nope"})
    assert wrong.status_code == 401


def test_register_validation(client, db):
    response = post(client, "/api/auth/register", {"email": "not-an-email", "password": "short"})

    assert response.status_code == 400
    details = response.json()["error"]["details"]
    assert {"email", "password", "firstName", "lastName"} <= set(details)


def test_invalid_json_is_400(client, db):
    response = client.post("/api/auth/login", data="{nope", content_type="application/json")
    assert response.status_code == 400


def test_cart_requires_token(client, db):
    assert client.get("/api/cart").status_code == 401
    assert client.get("/api/cart", HTTP_AUTHORIZATION="Bearer forged").status_code == 403


def test_cart_round_trip(auth_client, make_product):
    syrup = make_product(price="24.99", stock=10)

    added = post(auth_client, "/api/cart", {"productId": syrup.pk, "quantity": 2})
    assert added.status_code == 201
    line_id = added.json()["data"]["id"]

    body = auth_client.get("/api/cart").json()["data"]
    assert body["subtotal"] == "49.98"
    assert body["itemCount"] == 2

    assert post(auth_client, f"/api/cart/{line_id}", {"quantity": 4}, method="put").json()["data"]["quantity"] == 4
    assert post(auth_client, f"/api/cart/{line_id}", {"quantity": 0}, method="put").status_code == 200
    assert auth_client.delete(f"/api/cart/{line_id}").status_code == 200
    assert auth_client.get("/api/cart").json()["data"] == {"items": [], "subtotal": "0.00", "itemCount": 0}


def test_add_to_cart_errors(auth_client, make_product):
    wine = make_product(stock=1)

    short = post(auth_client, "/api/cart", {"productId": wine.pk, "quantity": 2})
    assert short.status_code == 400
    assert short.json()["error"]["code"] == "insufficient_stock"
    assert short.json()["error"]["details"]["shortfall"] == 1

    assert post(auth_client, "/api/cart", {"productId": 999999, "quantity": 1}).status_code == 404
    assert post(auth_client, "/api/cart", {"productId": "x"}).status_code == 400


def test_checkout_flow(auth_client, make_product, province):
    syrup = make_product(price="24.99", stock=5)
    post(auth_client, "/api/cart", {"productId": syrup.pk, "quantity": 3})

    placed = post(auth_client, "/api/orders", shipping_payload(province))

    assert placed.status_code == 201
    order_id = placed.json()["data"]["orderId"]
    assert placed.json()["data"]["totalAmount"] == "74.97"
    assert Product.objects.get(pk=syrup.pk).stock_quantity == 2

    history = auth_client.get("/api/orders").json()["data"]
    assert [(o["id"], o["itemCount"]) for o in history] == [(order_id, 1)]

    detail = auth_client.get(f"/api/orders/{order_id}").json()["data"]
    assert detail["items"][0]["quantity"] == 3
    assert detail["items"][0]["unitPrice"] == "24.99"

    again = post(auth_client, "/api/orders", shipping_payload(province))
    assert again.status_code == 400
    assert again.json()["error"]["code"] == "empty_cart"

    cancelled = auth_client.post(f"/api/orders/{order_id}/cancel")
    assert cancelled.json()["data"]["status"] == "cancelled"
    assert Product.objects.get(pk=syrup.pk).stock_quantity == 5

    assert auth_client.post(f"/api/orders/{order_id}/cancel").status_code == 409


def test_checkout_requires_shipping_address(auth_client, make_product):
    cart_services.add_item(auth_client.customer.pk, make_product().pk, 1)

    response = post(auth_client, "/api/orders", {})

    assert response.status_code == 400
    assert Order.objects.count() == 0


def test_other_customers_order_is_404(auth_client, make_customer, make_product, shipping):
    from storefront.orders.services import place_order

    other = make_customer()
    cart_services.add_item(other.pk, make_product().pk, 1)
    order = place_order(other.pk, shipping)

    assert auth_client.get(f"/api/orders/{order.pk}").status_code == 404


def test_unexpected_error_is_opaque(auth_client, monkeypatch):
    def explode(customer_id):
        raise RuntimeError("password=hunter2 leaked in a stack trace")

    monkeypatch.setattr(cart_services, "get_cart", explode)

    response = auth_client.get("/api/cart")

    assert response.status_code == 500
    assert "hunter2" not in response.content.decode()
    assert response.json()["error"]["code"] == "internal_error"


@pytest.mark.parametrize(
    "method, url, allowed",
    [
        ("delete", "/api/catalog", "GET"),
        ("get", "/api/auth/login", "POST"),
        ("patch", "/api/cart", "GET, POST"),
    ],
)
def test_wrong_method_is_enveloped_405(client, method, url, allowed):
    response = getattr(client, method)(url)

    assert response.status_code == 405
    assert response["Content-Type"] == "application/json"
    assert response["Allow"] == allowed
    assert response.json() == {
        "success": False,
        "error": {"code": "method_not_allowed", "message": f"Method {method.upper()} is not allowed here"},
    }


def test_unknown_route_is_enveloped_404(client):
    response = client.get("/api/nope")

    assert response.status_code == 404
    assert response["Content-Type"] == "application/json"
    assert response.json()["success"] is False
    assert response.json()["error"]["code"] == "not_found"


def test_server_error_handler_is_enveloped(rf):
    response = server_error(rf.get("/api/catalog"))

    assert response.status_code == 500
    assert json.loads(response.content) == {
        "success": False,
        "error": {"code": "internal_error", "message": "Something went wrong, please try again later"},
    }


def test_line_quantity_cap_over_http(auth_client, make_product):
    syrup = make_product(stock=50_000)
    cart_services.add_item(auth_client.customer.pk, syrup.pk, 9_000)

    response = post(auth_client, "/api/cart", {"productId": syrup.pk, "quantity": 2_000})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "validation_error"
