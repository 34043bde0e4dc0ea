from django.urls import path

from . import admin_views, views

urlpatterns = [
    path("orders", views.create_order_view, name="order-create"),
    path("orders/<str:order_number>", views.order_detail_view, name="order-detail"),

    path("products", views.product_list_view, name="product-list"),
    path("products/collection/<slug:slug>", views.products_by_collection_view, name="product-by-collection"),
    path("products/<slug:slug>/schema", views.product_schema_view, name="product-schema"),
    path("products/<slug:slug>", views.product_detail_view, name="product-detail"),

    path("collections", views.collection_list_view, name="collection-list"),
    path("collections/<slug:slug>/schema", views.collection_schema_view, name="collection-schema"),
    path("collections/<slug:slug>", views.collection_detail_view, name="collection-detail"),

    path("admin/orders", admin_views.order_list_view, name="admin-order-list"),
    path("admin/orders/<str:order_id>", admin_views.order_detail_view, name="admin-order-detail"),
    path("admin/orders/<str:order_id>/status", admin_views.order_status_view, name="admin-order-status"),

    path("admin/products", admin_views.product_collection_view, name="admin-product-list"),
    path("admin/products/<str:product_id>", admin_views.product_item_view, name="admin-product-detail"),
    path(
        "admin/products/<str:product_id>/generate-seo",
        admin_views.product_generate_seo_view,
        name="admin-product-generate-seo",
    ),

    path("admin/collections", admin_views.collection_collection_view, name="admin-collection-list"),
    path("admin/collections/<str:collection_id>", admin_views.collection_item_view, name="admin-collection-detail"),

    path("admin/stats", admin_views.stats_view, name="admin-stats"),
]
