"""Back-office endpoints under /api/admin/. Every view sits behind the shared-secret gate."""
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from content.generation import generate_seo_description, validate_seo_description

from . import catalog, services
from .permissions import AdminPasswordRequired
from .serializers import (
    AdminOrderQueryIn,
    AdminProductQueryIn,
    AdminProductSerializer,
    CollectionIn,
    CollectionSerializer,
    CollectionWithCountSerializer,
    OrderSerializer,
    OrderStatusIn,
    ProductIn,
    ProductSerializer,
    SeoGenerateIn,
)
from .views import validated_query


# ---------------------------
# Orders
# ---------------------------
@api_view(["GET"])
@permission_classes([AdminPasswordRequired])
def order_list_view(request):
    query = validated_query(AdminOrderQueryIn, request).validated_data
    orders, total = catalog.admin_orders(
        status=query.get("status"), limit=query["limit"], offset=query["offset"],
    )
    return Response({
        "success": True,
        "count": len(orders),
        "total": total,
        "data": OrderSerializer(orders, many=True).data,
    })


@api_view(["GET"])
@permission_classes([AdminPasswordRequired])
def order_detail_view(request, order_id):
    order = services.get_order(order_id)
    return Response({"success": True, "data": OrderSerializer(order).data})


@api_view(["PATCH"])
@permission_classes([AdminPasswordRequired])
def order_status_view(request, order_id):
    ser = OrderStatusIn(data=request.data)
    ser.is_valid(raise_exception=True)
    order = services.update_order_status(order_id=order_id, status=ser.validated_data["status"])
    return Response({"success": True, "message": "Order status updated", "data": OrderSerializer(order).data})


# ---------------------------
# Products
# ---------------------------
@api_view(["GET", "POST"])
@permission_classes([AdminPasswordRequired])
def product_collection_view(request):
    if request.method == "POST":
        ser = ProductIn(data=request.data)
        ser.is_valid(raise_exception=True)
        product = services.create_product(**ser.validated_data)
        return Response(
            {"success": True, "message": "Product created", "data": ProductSerializer(product).data},
            status=status.HTTP_201_CREATED,
        )

    query = validated_query(AdminProductQueryIn, request).validated_data
    products = list(catalog.admin_products(
        collection_id=query.get("collectionId"), stock_status=query.get("stockStatus"),
    ))
    return Response({
        "success": True,
        "count": len(products),
        "data": AdminProductSerializer(products, many=True).data,
    })


@api_view(["PATCH", "DELETE"])
@permission_classes([AdminPasswordRequired])
def product_item_view(request, product_id):
    if request.method == "DELETE":
        services.delete_product(product_id=product_id)
        return Response({"success": True, "message": "Product deleted"})

    ser = ProductIn(data=request.data, partial=True)
    ser.is_valid(raise_exception=True)
    product = services.update_product(product_id=product_id, changes=dict(ser.validated_data))
    return Response({"success": True, "message": "Product updated", "data": ProductSerializer(product).data})


@api_view(["POST"])
@permission_classes([AdminPasswordRequired])
def product_generate_seo_view(request, product_id):
    ser = SeoGenerateIn(data=request.data)
    ser.is_valid(raise_exception=True)

    product = services.get_product(product_id)
    generated = generate_seo_description(product)
    data = {**generated, "validation": validate_seo_description(generated["description"])}

    if ser.validated_data["save"]:
        product = services.update_product(product_id=product.pk, changes={"description": generated["description"]})
        data["product"] = ProductSerializer(product).data
    return Response({"success": True, "data": data})


# ---------------------------
# Collections
# ---------------------------
@api_view(["GET", "POST"])
@permission_classes([AdminPasswordRequired])
def collection_collection_view(request):
    if request.method == "POST":
        ser = CollectionIn(data=request.data)
        ser.is_valid(raise_exception=True)
        collection = services.create_collection(**ser.validated_data)
        return Response(
            {"success": True, "message": "Collection created", "data": CollectionSerializer(collection).data},
            status=status.HTTP_201_CREATED,
        )

    collections = catalog.list_collections()
    return Response({"success": True, "data": CollectionWithCountSerializer(collections, many=True).data})


@api_view(["PATCH", "DELETE"])
@permission_classes([AdminPasswordRequired])
def collection_item_view(request, collection_id):
    if request.method == "DELETE":
        services.delete_collection(collection_id=collection_id)
        return Response({"success": True, "message": "Collection deleted"})

    ser = CollectionIn(data=request.data, partial=True)
    ser.is_valid(raise_exception=True)
    collection = services.update_collection(collection_id=collection_id, changes=dict(ser.validated_data))
    return Response({
        "success": True,
        "message": "Collection updated",
        "data": CollectionSerializer(collection).data,
    })


# ---------------------------
# Dashboard
# ---------------------------
@api_view(["GET"])
@permission_classes([AdminPasswordRequired])
def stats_view(request):
    stats = catalog.dashboard_stats()
    stats["recentOrders"] = OrderSerializer(stats["recentOrders"], many=True).data
    return Response({"success": True, "data": stats})
