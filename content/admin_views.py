from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from shop.permissions import AdminPasswordRequired

from . import services
from .generation import generate_page_content
from .models import PageContent, SiteSetting
from .serializers import GenerateContentIn, PageContentIn, PageContentSerializer, SiteSettingIn, SiteSettingSerializer


# ---------------------------
# Page content
# ---------------------------
@api_view(["GET", "POST"])
@permission_classes([AdminPasswordRequired])
def content_collection_view(request):
    if request.method == "POST":
        ser = PageContentIn(data=request.data)
        ser.is_valid(raise_exception=True)
        content = services.create_content(**ser.validated_data)
        return Response(
            {"success": True, "message": "Content created", "data": PageContentSerializer(content).data},
            status=status.HTTP_201_CREATED,
        )

    # unpublished pages included
    content = PageContent.objects.order_by("page_key")
    return Response({"success": True, "data": PageContentSerializer(content, many=True).data})


@api_view(["GET", "PATCH", "DELETE"])
@permission_classes([AdminPasswordRequired])
def content_item_view(request, ref):
    # GET addresses a page by key, PATCH and DELETE by id
    if request.method == "GET":
        content = services.get_content_by_key(ref, published_only=False)
        return Response({"success": True, "data": PageContentSerializer(content).data})

    if request.method == "DELETE":
        services.delete_content(content_id=ref)
        return Response({"success": True, "message": "Content deleted"})

    ser = PageContentIn(data=request.data, partial=True)
    ser.is_valid(raise_exception=True)
    content = services.update_content(content_id=ref, changes=dict(ser.validated_data))
    return Response({"success": True, "message": "Content updated", "data": PageContentSerializer(content).data})


@api_view(["POST"])
@permission_classes([AdminPasswordRequired])
def content_generate_view(request, page_key):
    ser = GenerateContentIn(data=request.data)
    ser.is_valid(raise_exception=True)
    # nothing is stored; the operator reviews and saves explicitly
    generated = generate_page_content(page_key, dict(ser.validated_data))
    return Response({"success": True, "data": {"pageKey": page_key, **generated}})


# ---------------------------
# Site settings
# ---------------------------
@api_view(["GET", "POST"])
@permission_classes([AdminPasswordRequired])
def setting_collection_view(request):
    if request.method == "POST":
        ser = SiteSettingIn(data=request.data)
        ser.is_valid(raise_exception=True)
        setting, created = services.save_setting(**ser.validated_data)
        return Response(
            {
                "success": True,
                "message": "Setting created" if created else "Setting updated",
                "data": SiteSettingSerializer(setting).data,
            },
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )

    settings = SiteSetting.objects.all()
    return Response({"success": True, "data": SiteSettingSerializer(settings, many=True).data})


@api_view(["PATCH", "DELETE"])
@permission_classes([AdminPasswordRequired])
def setting_item_view(request, setting_id):
    if request.method == "DELETE":
        services.delete_setting(setting_id=setting_id)
        return Response({"success": True, "message": "Setting deleted"})

    ser = SiteSettingIn(data=request.data, partial=True)
    ser.is_valid(raise_exception=True)
    setting = services.update_setting(setting_id=setting_id, changes=dict(ser.validated_data))
    return Response({"success": True, "message": "Setting updated", "data": SiteSettingSerializer(setting).data})
