from django.urls import path

from . import admin_views, views

urlpatterns = [
    path("content", views.content_list_view, name="content-list"),
    path("content/<slug:page_key>/schema", views.content_schema_view, name="content-schema"),
    path("content/<slug:page_key>", views.content_detail_view, name="content-detail"),
    path("settings", views.settings_list_view, name="setting-list"),
    path("settings/<slug:key>", views.setting_detail_view, name="setting-detail"),

    path("admin/content", admin_views.content_collection_view, name="admin-content-list"),
    path("admin/content/<slug:page_key>/generate", admin_views.content_generate_view, name="admin-content-generate"),
    path("admin/content/<str:ref>", admin_views.content_item_view, name="admin-content-detail"),
    path("admin/settings", admin_views.setting_collection_view, name="admin-setting-list"),
    path("admin/settings/<str:setting_id>", admin_views.setting_item_view, name="admin-setting-detail"),
]
