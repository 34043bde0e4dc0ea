from rest_framework.decorators import api_view
from rest_framework.response import Response

from . import services
from .models import SiteSetting
from .seo import faq_schema, graph, organization_schema
from .serializers import PageContentSerializer, SiteSettingSerializer


@api_view(["GET"])
def content_list_view(request):
    content = services.published_content()
    return Response({"success": True, "data": PageContentSerializer(content, many=True).data})


@api_view(["GET"])
def content_detail_view(request, page_key):
    content = services.get_content_by_key(page_key)
    return Response({"success": True, "data": PageContentSerializer(content).data})


@api_view(["GET"])
def content_schema_view(request, page_key):
    content = services.get_content_by_key(page_key)
    schemas = [organization_schema()]
    faqs = content.content.get("faqs") if isinstance(content.content, dict) else None
    if isinstance(faqs, list):
        faq_page = faq_schema(faqs)
        if faq_page["mainEntity"]:
            schemas.append(faq_page)
    return Response({"success": True, "data": graph(*schemas)})


@api_view(["GET"])
def settings_list_view(request):
    settings = SiteSetting.objects.all()
    return Response({
        "success": True,
        "data": {s.key: s.value for s in settings},
        "all": SiteSettingSerializer(settings, many=True).data,
    })


@api_view(["GET"])
def setting_detail_view(request, key):
    setting = services.get_setting_by_key(key)
    return Response({"success": True, "data": setting.value})
