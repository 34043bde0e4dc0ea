from rest_framework import serializers

from .models import PageContent, SettingCategory, SiteSetting


def _required(label: str) -> dict:
    return {"required": f"{label} is required", "blank": f"{label} is required", "null": f"{label} is required"}


class PageContentSerializer(serializers.ModelSerializer):
    pageKey = serializers.CharField(source="page_key", read_only=True)
    metaTitle = serializers.CharField(source="meta_title", read_only=True)
    metaDescription = serializers.CharField(source="meta_description", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = PageContent
        fields = [
            "id", "pageKey", "title", "content", "metaTitle", "metaDescription",
            "keywords", "published", "createdAt", "updatedAt",
        ]
        read_only_fields = fields


class SiteSettingSerializer(serializers.ModelSerializer):
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = SiteSetting
        fields = ["id", "key", "value", "label", "category", "updatedAt"]
        read_only_fields = fields


class PageContentIn(serializers.Serializer):
    pageKey = serializers.SlugField(source="page_key", max_length=100, error_messages=_required("Page key"))
    title = serializers.CharField(max_length=255, error_messages=_required("Title"))
    content = serializers.JSONField(required=False, default=dict)
    metaTitle = serializers.CharField(source="meta_title", max_length=255, required=False, allow_blank=True,
                                      allow_null=True)
    metaDescription = serializers.CharField(source="meta_description", required=False, allow_blank=True,
                                            allow_null=True)
    keywords = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    published = serializers.BooleanField(required=False, default=True)


class SiteSettingIn(serializers.Serializer):
    key = serializers.SlugField(max_length=100, error_messages=_required("Key"))
    value = serializers.CharField(allow_blank=True, trim_whitespace=False, error_messages={"required": "Value is required"})
    label = serializers.CharField(max_length=200, required=False, allow_blank=True)
    category = serializers.CharField(max_length=50, required=False)

    def validate_category(self, value):
        return value.strip().lower() or SettingCategory.GENERAL


class GenerateContentIn(serializers.Serializer):
    collectionName = serializers.CharField(required=False, allow_blank=True)
    instructions = serializers.CharField(required=False, allow_blank=True)
