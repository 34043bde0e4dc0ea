from decimal import Decimal

from rest_framework import serializers

from .models import Collection, Order, OrderItem, OrderStatus, Product, StockStatus


def _required(label: str) -> dict:
    return {"required": f"{label} is required", "blank": f"{label} is required", "null": f"{label} is required"}


# ---------------------------
# Output
# ---------------------------
class CollectionSerializer(serializers.ModelSerializer):
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Collection
        fields = ["id", "name", "slug", "description", "image", "order", "createdAt", "updatedAt"]
        read_only_fields = fields


class CollectionSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Collection
        fields = ["id", "name", "slug"]
        read_only_fields = fields


class CollectionWithCountSerializer(CollectionSerializer):
    productCount = serializers.IntegerField(source="product_count", read_only=True)

    class Meta(CollectionSerializer.Meta):
        fields = CollectionSerializer.Meta.fields + ["productCount"]
        read_only_fields = fields


class ProductSerializer(serializers.ModelSerializer):
    stockStatus = serializers.CharField(source="stock_status", read_only=True)
    collectionId = serializers.UUIDField(source="collection_id", read_only=True, allow_null=True)
    collection = CollectionSerializer(read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Product
        fields = [
            "id", "name", "slug", "description", "color", "price", "pieces", "images",
            "quantity", "stockStatus", "collectionId", "collection", "createdAt", "updatedAt",
        ]
        read_only_fields = fields


class ProductListSerializer(ProductSerializer):
    collection = CollectionSummarySerializer(read_only=True)


class AdminProductSerializer(ProductSerializer):
    orderCount = serializers.IntegerField(source="order_count", read_only=True)

    class Meta(ProductSerializer.Meta):
        fields = ProductSerializer.Meta.fields + ["orderCount"]
        read_only_fields = fields


class CollectionProductSerializer(ProductSerializer):
    class Meta(ProductSerializer.Meta):
        fields = [f for f in ProductSerializer.Meta.fields if f != "collection"]
        read_only_fields = fields


class CollectionDetailSerializer(CollectionSerializer):
    products = CollectionProductSerializer(many=True, read_only=True)

    class Meta(CollectionSerializer.Meta):
        fields = CollectionSerializer.Meta.fields + ["products"]
        read_only_fields = fields


class OrderItemSerializer(serializers.ModelSerializer):
    orderId = serializers.UUIDField(source="order_id", read_only=True)
    productId = serializers.UUIDField(source="product_id", read_only=True)
    product = ProductSerializer(read_only=True)

    class Meta:
        model = OrderItem
        fields = ["id", "orderId", "productId", "quantity", "price", "product"]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    orderNumber = serializers.CharField(source="order_number", read_only=True)
    customerName = serializers.CharField(source="customer_name", read_only=True)
    customerPhone = serializers.CharField(source="customer_phone", read_only=True)
    customerEmail = serializers.SerializerMethodField()
    deliveryAddress = serializers.CharField(source="delivery_address", read_only=True)
    totalAmount = serializers.DecimalField(source="total_amount", max_digits=12, decimal_places=2, read_only=True)
    paymentMethod = serializers.CharField(source="payment_method", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)
    items = OrderItemSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id", "orderNumber", "customerName", "customerPhone", "customerEmail",
            "deliveryAddress", "city", "totalAmount", "status", "paymentMethod", "notes",
            "createdAt", "updatedAt", "items",
        ]
        read_only_fields = fields

    def get_customerEmail(self, obj):
        return obj.customer_email or None


# ---------------------------
# Input
# ---------------------------
class OrderItemIn(serializers.Serializer):
    productId = serializers.CharField(max_length=64, error_messages=_required("Product ID"))
    quantity = serializers.IntegerField(
        min_value=1,
        error_messages={
            "required": "Valid quantity required",
            "invalid": "Valid quantity required",
            "min_value": "Valid quantity required",
            "null": "Valid quantity required",
        },
    )


class OrderCreateIn(serializers.Serializer):
    customerName = serializers.CharField(max_length=200, error_messages=_required("Name"))
    customerPhone = serializers.CharField(max_length=50, error_messages=_required("Phone"))
    customerEmail = serializers.EmailField(
        required=False, allow_blank=True, allow_null=True, error_messages={"invalid": "Invalid email"},
    )
    deliveryAddress = serializers.CharField(error_messages=_required("Address"))
    city = serializers.CharField(max_length=100, error_messages=_required("City"))
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    items = OrderItemIn(many=True, error_messages={"required": "At least one item required"})

    def validate_items(self, items):
        if not items:
            raise serializers.ValidationError("At least one item required")
        return items

    def to_service_kwargs(self) -> dict:
        data = self.validated_data
        return {
            "customer": {
                "customer_name": data["customerName"],
                "customer_phone": data["customerPhone"],
                "customer_email": data.get("customerEmail") or "",
                "delivery_address": data["deliveryAddress"],
                "city": data["city"],
                "notes": data.get("notes") or None,
            },
            "items": [{"product_id": i["productId"], "quantity": i["quantity"]} for i in data["items"]],
        }


class OrderStatusIn(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=OrderStatus.choices,
        error_messages={"invalid_choice": "Invalid status", "required": "Invalid status"},
    )


class ProductIn(serializers.Serializer):
    name = serializers.CharField(max_length=200, error_messages=_required("Name"))
    color = serializers.CharField(max_length=100, error_messages=_required("Color"))
    price = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal("0"),
        error_messages={"invalid": "Valid price required", "min_value": "Valid price required",
                        "required": "Valid price required"},
    )
    collectionId = serializers.PrimaryKeyRelatedField(
        source="collection", queryset=Collection.objects.all(), error_messages=_required("Collection"),
    )
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    pieces = serializers.CharField(required=False, allow_blank=True, max_length=50)
    images = serializers.ListField(child=serializers.CharField(max_length=500), required=False)
    quantity = serializers.IntegerField(required=False, min_value=0)

    def validate_pieces(self, value):
        return value.strip() or "3 pc"


class CollectionIn(serializers.Serializer):
    name = serializers.CharField(max_length=200, error_messages=_required("Name"))
    slug = serializers.SlugField(max_length=200, error_messages=_required("Slug"))
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    image = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=500)
    order = serializers.IntegerField(required=False, default=0)

    def validate(self, attrs):
        for field in ("description", "image"):
            if field in attrs and not attrs[field]:
                attrs[field] = None
        return attrs


class SeoGenerateIn(serializers.Serializer):
    save = serializers.BooleanField(required=False, default=False)


# ---------------------------
# Query strings
# ---------------------------
class ProductQueryIn(serializers.Serializer):
    collection = serializers.CharField(required=False)
    minPrice = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, min_value=Decimal("0"))
    maxPrice = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, min_value=Decimal("0"))
    stockStatus = serializers.ChoiceField(choices=StockStatus.choices, required=False)
    search = serializers.CharField(required=False)
    limit = serializers.IntegerField(required=False, default=100, min_value=1, max_value=500)
    offset = serializers.IntegerField(required=False, default=0, min_value=0)

    def to_filters(self) -> dict:
        data = self.validated_data
        return {
            "collection": data.get("collection"),
            "min_price": data.get("minPrice"),
            "max_price": data.get("maxPrice"),
            "stock_status": data.get("stockStatus"),
            "search": data.get("search"),
            "limit": data["limit"],
            "offset": data["offset"],
        }


class AdminOrderQueryIn(serializers.Serializer):
    status = serializers.ChoiceField(choices=OrderStatus.choices, required=False)
    limit = serializers.IntegerField(required=False, default=50, min_value=1, max_value=500)
    offset = serializers.IntegerField(required=False, default=0, min_value=0)


class AdminProductQueryIn(serializers.Serializer):
    collectionId = serializers.UUIDField(required=False)
    stockStatus = serializers.ChoiceField(choices=StockStatus.choices, required=False)
