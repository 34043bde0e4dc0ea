from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response

from content.seo import breadcrumb_schema, collection_schema, graph, product_schema

from . import catalog
from .serializers import (
    CollectionDetailSerializer,
    CollectionWithCountSerializer,
    OrderCreateIn,
    OrderSerializer,
    ProductListSerializer,
    ProductQueryIn,
    ProductSerializer,
)
from .services import get_order_by_number, place_order


def validated_query(serializer_cls, request):
    # empty query values count as absent
    params = {k: v for k, v in request.query_params.items() if v != ""}
    ser = serializer_cls(data=params)
    ser.is_valid(raise_exception=True)
    return ser


# ---------------------------
# Orders
# ---------------------------
@api_view(["POST"])
def create_order_view(request):
    ser = OrderCreateIn(data=request.data)
    ser.is_valid(raise_exception=True)

    order = place_order(**ser.to_service_kwargs())

    headers = {"Location": f"/api/orders/{order.order_number}"}
    return Response(
        {"success": True, "message": "Order created successfully", "data": OrderSerializer(order).data},
        status=status.HTTP_201_CREATED,
        headers=headers,
    )


@api_view(["GET"])
def order_detail_view(request, order_number):
    order = get_order_by_number(order_number)
    return Response({"success": True, "data": OrderSerializer(order).data})


# ---------------------------
# Catalog
# ---------------------------
@api_view(["GET"])
def product_list_view(request):
    query = validated_query(ProductQueryIn, request)
    products, total = catalog.list_products(**query.to_filters())
    return Response({
        "success": True,
        "count": len(products),
        "total": total,
        "data": ProductListSerializer(products, many=True).data,
    })


@api_view(["GET"])
def product_detail_view(request, slug):
    product = catalog.get_product_by_slug(slug)
    return Response({"success": True, "data": ProductSerializer(product).data})


@api_view(["GET"])
def product_schema_view(request, slug):
    product = catalog.get_product_by_slug(slug)
    return Response({"success": True, "data": product_schema(product)})


@api_view(["GET"])
def products_by_collection_view(request, slug):
    products = catalog.products_in_collection(slug)
    return Response({
        "success": True,
        "count": len(products),
        "data": ProductSerializer(products, many=True).data,
    })


@api_view(["GET"])
def collection_list_view(request):
    collections = catalog.list_collections()
    return Response({"success": True, "data": CollectionWithCountSerializer(collections, many=True).data})


@api_view(["GET"])
def collection_detail_view(request, slug):
    collection = catalog.get_collection_by_slug(slug)
    return Response({"success": True, "data": CollectionDetailSerializer(collection).data})


@api_view(["GET"])
def collection_schema_view(request, slug):
    collection = catalog.get_collection_by_slug(slug)
    products = list(collection.products.all())
    crumbs = [("Home", "/"), (collection.name, f"/{collection.slug}")]
    return Response({
        "success": True,
        "data": graph(collection_schema(collection, products), breadcrumb_schema(crumbs)),
    })
