from django.urls import path

from . import views

urlpatterns = [
    path("catalog", views.product_list, name="product_list"),
    path("catalog/<int:product_id>", views.product_detail, name="product_detail"),
    path("catalog/<int:product_id>/reviews", views.product_reviews, name="product_reviews"),
    path("categories", views.category_list, name="category_list"),
    path("provinces", views.province_list, name="province_list"),
]
