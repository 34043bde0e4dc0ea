"""Read-only catalog queries: filtered product listing, collections, dashboard stats."""
from django.db.models import Count, Prefetch, Q, Sum

from storefront.exceptions import CollectionNotFoundError, ProductNotFoundError

from .models import Collection, Order, OrderItem, OrderStatus, Product, StockStatus


def filter_products(*, collection=None, min_price=None, max_price=None, stock_status=None, search=None):
    qs = Product.objects.select_related("collection")
    if collection:
        qs = qs.filter(collection__slug=collection)
    if min_price is not None:
        qs = qs.filter(price__gte=min_price)
    if max_price is not None:
        qs = qs.filter(price__lte=max_price)
    if stock_status:
        qs = qs.filter(stock_status=stock_status)
    if search:
        qs = qs.filter(
            Q(name__icontains=search) | Q(color__icontains=search) | Q(description__icontains=search)
        )
    return qs.order_by("-created_at", "pk")


def list_products(*, limit: int = 100, offset: int = 0, **filters) -> tuple[list[Product], int]:
    qs = filter_products(**filters)
    return list(qs[offset:offset + limit]), qs.count()


def get_product_by_slug(slug: str) -> Product:
    product = Product.objects.select_related("collection").filter(slug=slug).first()
    if product is None:
        raise ProductNotFoundError()
    return product


def products_in_collection(slug: str) -> list[Product]:
    return list(filter_products(collection=slug))


def list_collections():
    return Collection.objects.annotate(product_count=Count("products")).order_by("order", "name")


def get_collection_by_slug(slug: str, *, in_stock_only: bool = True) -> Collection:
    products = Product.objects.order_by("-created_at")
    if in_stock_only:
        products = products.filter(stock_status=StockStatus.IN_STOCK)
    collection = (
        Collection.objects
        .prefetch_related(Prefetch("products", queryset=products))
        .filter(slug=slug)
        .first()
    )
    if collection is None:
        raise CollectionNotFoundError()
    return collection


def admin_products(*, collection_id=None, stock_status=None):
    qs = Product.objects.select_related("collection").annotate(order_count=Count("order_items"))
    if collection_id:
        qs = qs.filter(collection_id=collection_id)
    if stock_status:
        qs = qs.filter(stock_status=stock_status)
    return qs.order_by("-created_at", "pk")


def admin_orders(*, status=None, limit: int = 50, offset: int = 0) -> tuple[list[Order], int]:
    qs = Order.objects.prefetch_related(
        Prefetch("items", queryset=OrderItem.objects.select_related("product__collection"))
    ).order_by("-created_at", "pk")
    if status:
        qs = qs.filter(status=status)
    return list(qs[offset:offset + limit]), qs.count()


def dashboard_stats() -> dict:
    products = Product.objects.aggregate(
        total=Count("id"),
        in_stock=Count("id", filter=Q(stock_status=StockStatus.IN_STOCK)),
    )
    orders = Order.objects.aggregate(
        total=Count("id"),
        pending=Count("id", filter=Q(status=OrderStatus.PENDING)),
        confirmed=Count("id", filter=Q(status=OrderStatus.CONFIRMED)),
    )
    revenue = Order.objects.filter(
        status__in=[OrderStatus.CONFIRMED, OrderStatus.DELIVERED]
    ).aggregate(total=Sum("total_amount"))["total"]
    recent = list(
        Order.objects.prefetch_related(
            Prefetch("items", queryset=OrderItem.objects.select_related("product__collection"))
        ).order_by("-created_at")[:5]
    )
    return {
        "products": {
            "total": products["total"],
            "inStock": products["in_stock"],
            "outOfStock": products["total"] - products["in_stock"],
        },
        "orders": {
            "total": orders["total"],
            "pending": orders["pending"],
            "confirmed": orders["confirmed"],
        },
        "revenue": {"total": revenue or 0},
        "recentOrders": recent,
    }
