from django.urls import include, path

from . import views

urlpatterns = [
    path("api/health", views.health, name="health"),
    path("api/", include("storefront.catalog.urls")),
    path("api/", include("storefront.accounts.urls")),
    path("api/", include("storefront.cart.urls")),
    path("api/", include("storefront.orders.urls")),
]

handler404 = "storefront.views.not_found"
handler500 = "storefront.views.server_error"
