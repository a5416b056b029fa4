from django.urls import path

from . import views

urlpatterns = [
    path("orders", views.orders, name="orders"),
    path("orders/<uuid:order_id>", views.order_detail, name="order_detail"),
    path("orders/<uuid:order_id>/cancel", views.order_cancel, name="order_cancel"),
]
