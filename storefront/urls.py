from django.urls import include, path
from django.utils import timezone
from rest_framework.decorators import api_view
from rest_framework.response import Response


@api_view(["GET"])
def health(request):
    return Response({
        "status": "ok",
        "message": "Storefront backend is running",
        "timestamp": timezone.now().isoformat(),
    })


urlpatterns = [
    path("api/health", health, name="health"),
    path("api/", include("shop.urls")),
    path("api/", include("content.urls")),
]

handler404 = "storefront.exceptions.route_not_found"
handler500 = "storefront.exceptions.server_error"
