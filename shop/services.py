import logging
import random
import uuid
from dataclasses import dataclass
from decimal import Decimal

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Case, F, Prefetch, ProtectedError, Value, When
from django.utils import timezone

from storefront.exceptions import (
    CollectionNotFoundError,
    DeleteBlockedError,
    DuplicateError,
    InsufficientStockError,
    InvalidStatusTransitionError,
    OrderNotFoundError,
    OutOfStockError,
    ProductNotFoundError,
)

from .models import Collection, Order, OrderItem, OrderStatus, Product, StockStatus, product_slug
from .outbox import record_order_placed
from .tx_retry import retry_on_tx_failure

logger = logging.getLogger(__name__)


def parse_uuid(raw):
    try:
        return uuid.UUID(str(raw))
    except (TypeError, ValueError, AttributeError):
        return None


def generate_order_number(now=None) -> str:
    now = now or timezone.now()
    return f"{settings.ORDER_NUMBER_PREFIX}-{now:%Y%m%d}-{random.randint(1000, 9999)}"


def order_queryset():
    # items -> product -> collection in two queries
    return Order.objects.prefetch_related(
        Prefetch("items", queryset=OrderItem.objects.select_related("product__collection"))
    )


def get_order_by_number(order_number: str) -> Order:
    order = order_queryset().filter(order_number=order_number).first()
    if order is None:
        raise OrderNotFoundError()
    return order


def get_order(order_id) -> Order:
    pk = parse_uuid(order_id)
    order = order_queryset().filter(pk=pk).first() if pk else None
    if order is None:
        raise OrderNotFoundError()
    return order


def get_product(product_id) -> Product:
    pk = parse_uuid(product_id)
    product = Product.objects.select_related("collection").filter(pk=pk).first() if pk else None
    if product is None:
        raise ProductNotFoundError()
    return product


# ---------------------------
# Order placement
# ---------------------------
@dataclass(frozen=True)
class OrderLine:
    product: Product
    quantity: int
    price: Decimal

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


def decrement_stock(product_id, quantity: int) -> None:
    """Take ``quantity`` units off a product; fails instead of going below zero."""
    updated = Product.objects.filter(pk=product_id, quantity__gte=quantity).update(
        # stock_status listed first: MySQL evaluates SET clauses left to right
        stock_status=Case(
            When(quantity__gt=quantity, then=Value(StockStatus.IN_STOCK.value)),
            default=Value(StockStatus.OUT_OF_STOCK.value),
        ),
        quantity=F("quantity") - quantity,
        updated_at=timezone.now(),
    )
    if updated:
        return
    product = Product.objects.filter(pk=product_id).first()
    if product is None:
        raise ProductNotFoundError(product_id)
    raise InsufficientStockError(product, available=product.quantity)


def resolve_lines(items: list[dict], products: dict) -> tuple[list[OrderLine], Decimal]:
    """Check each requested line against stock, in submission order, and freeze prices."""
    remaining = {pk: p.quantity for pk, p in products.items()}
    lines = []
    total = Decimal("0.00")

    for it in items:
        product = products.get(parse_uuid(it["product_id"]))
        if product is None:
            raise ProductNotFoundError(it["product_id"])
        q = int(it["quantity"])
        if product.quantity <= 0:
            raise OutOfStockError(product)
        if q > remaining[product.pk]:
            raise InsufficientStockError(product, available=remaining[product.pk])
        remaining[product.pk] -= q

        line = OrderLine(product=product, quantity=q, price=product.price)
        lines.append(line)
        total += line.line_total

    return lines, total


def _create_order_row(**fields) -> Order:
    attempts = settings.ORDER_NUMBER_ATTEMPTS
    for attempt in range(1, attempts + 1):
        order_number = generate_order_number()
        try:
            # savepoint, so a collision leaves the outer transaction usable
            with transaction.atomic():
                return Order.objects.create(order_number=order_number, **fields)
        except IntegrityError:
            if attempt >= attempts or not Order.objects.filter(order_number=order_number).exists():
                raise
            logger.warning(f"order number collision on {order_number} ({attempt}/{attempts}), retrying")


@transaction.atomic
def place_order(*, customer: dict, items: list[dict]) -> Order:
    """
    customer = {"customer_name", "customer_phone", "customer_email", "delivery_address", "city", "notes"}
    items = [{"product_id": "...", "quantity": 2}, ...]
    """
    ids = sorted({pk for pk in (parse_uuid(i["product_id"]) for i in items) if pk}, key=str)
    # lock every referenced product up front, always in the same order
    products = {p.pk: p for p in Product.objects.select_for_update().filter(pk__in=ids).order_by("pk")}

    lines, total = resolve_lines(items, products)

    order = _create_order_row(
        customer_name=customer["customer_name"],
        customer_phone=customer["customer_phone"],
        customer_email=customer.get("customer_email") or "",
        delivery_address=customer["delivery_address"],
        city=customer["city"],
        notes=customer.get("notes") or None,
        total_amount=total,
        status=OrderStatus.PENDING,
    )
    OrderItem.objects.bulk_create([
        OrderItem(order=order, product=line.product, quantity=line.quantity, price=line.price)
        for line in lines
    ])
    for line in lines:
        decrement_stock(line.product.pk, line.quantity)

    if order.customer_email:
        record_order_placed(order)

    logger.info(f"order placed: {order.order_number} items={len(lines)} total={total}")
    return order_queryset().get(pk=order.pk)


# ---------------------------
# Order status
# ---------------------------
@retry_on_tx_failure(max_attempts=3)
@transaction.atomic
def update_order_status(*, order_id, status: str) -> Order:
    pk = parse_uuid(order_id)
    order = Order.objects.select_for_update().filter(pk=pk).first() if pk else None
    if order is None:
        raise OrderNotFoundError()

    if order.status != status:
        if not order.can_transition_to(status):
            raise InvalidStatusTransitionError(order.status, status)
        previous = order.status
        order.status = status
        order.save(update_fields=["status", "updated_at"])
        logger.info(f"order {order.order_number}: {previous} -> {status}")

    return order_queryset().get(pk=order.pk)


# ---------------------------
# Back-office: products
# ---------------------------
DUPLICATE_PRODUCT = "A product with this name and color already exists"


def _get_product_for_update(product_id) -> Product:
    pk = parse_uuid(product_id)
    product = Product.objects.select_for_update().filter(pk=pk).first() if pk else None
    if product is None:
        raise ProductNotFoundError()
    return product


@transaction.atomic
def create_product(*, name: str, color: str, **fields) -> Product:
    slug = product_slug(name, color)
    if Product.objects.filter(slug=slug).exists():
        raise DuplicateError(DUPLICATE_PRODUCT)
    try:
        with transaction.atomic():
            product = Product.objects.create(name=name, color=color, slug=slug, **fields)
    except IntegrityError as exc:
        raise DuplicateError(DUPLICATE_PRODUCT) from exc
    logger.info(f"product created: {product.slug} qty={product.quantity}")
    return Product.objects.select_related("collection").get(pk=product.pk)


@transaction.atomic
def update_product(*, product_id, changes: dict) -> Product:
    product = _get_product_for_update(product_id)

    if "name" in changes or "color" in changes:
        new_slug = product_slug(changes.get("name", product.name), changes.get("color", product.color))
        if new_slug != product.slug:
            if Product.objects.filter(slug=new_slug).exclude(pk=product.pk).exists():
                raise DuplicateError(DUPLICATE_PRODUCT)
            product.slug = new_slug

    for field, value in changes.items():
        setattr(product, field, value)
    product.save()
    logger.info(f"product updated: {product.slug} fields={sorted(changes)}")
    return Product.objects.select_related("collection").get(pk=product.pk)


@transaction.atomic
def delete_product(*, product_id) -> None:
    product = _get_product_for_update(product_id)
    blocked = DeleteBlockedError(
        "Cannot delete product with existing orders. Consider marking it as out of stock instead."
    )
    if product.order_items.exists():
        raise blocked
    try:
        product.delete()
    except ProtectedError as exc:
        raise blocked from exc
    logger.info(f"product deleted: {product.slug}")


# ---------------------------
# Back-office: collections
# ---------------------------
DUPLICATE_COLLECTION = "A collection with this slug already exists"


def _get_collection(collection_id) -> Collection:
    pk = parse_uuid(collection_id)
    collection = Collection.objects.filter(pk=pk).first() if pk else None
    if collection is None:
        raise CollectionNotFoundError()
    return collection


@transaction.atomic
def create_collection(*, name: str, slug: str, **fields) -> Collection:
    if Collection.objects.filter(slug=slug).exists():
        raise DuplicateError(DUPLICATE_COLLECTION)
    try:
        with transaction.atomic():
            collection = Collection.objects.create(name=name, slug=slug, **fields)
    except IntegrityError as exc:
        raise DuplicateError(DUPLICATE_COLLECTION) from exc
    logger.info(f"collection created: {collection.slug}")
    return collection


@transaction.atomic
def update_collection(*, collection_id, changes: dict) -> Collection:
    collection = _get_collection(collection_id)
    slug = changes.get("slug")
    if slug and slug != collection.slug and Collection.objects.filter(slug=slug).exists():
        raise DuplicateError(DUPLICATE_COLLECTION)
    for field, value in changes.items():
        setattr(collection, field, value)
    collection.save()
    return collection


@transaction.atomic
def delete_collection(*, collection_id) -> None:
    collection = _get_collection(collection_id)
    blocked = DeleteBlockedError("Cannot delete collection with products. Delete or reassign products first.")
    if collection.products.exists():
        raise blocked
    try:
        collection.delete()
    except ProtectedError as exc:
        raise blocked from exc
    logger.info(f"collection deleted: {collection.slug}")
