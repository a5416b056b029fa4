from django.urls import path

from . import views

urlpatterns = [
    path("cart", views.cart, name="cart"),
    path("cart/<int:line_id>", views.cart_line, name="cart_line"),
]
