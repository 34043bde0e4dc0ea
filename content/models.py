import uuid

from django.db import models


class PageContent(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    page_key = models.CharField(max_length=100, unique=True)
    title = models.CharField(max_length=255)
    # structured sections (dict) or plain copy (str)
    content = models.JSONField(default=dict, blank=True)
    meta_title = models.CharField(max_length=255, blank=True, null=True)
    meta_description = models.TextField(blank=True, null=True)
    keywords = models.TextField(blank=True, null=True)
    published = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["page_key"]

    def __str__(self):
        return self.page_key


class SettingCategory(models.TextChoices):
    GENERAL = "general", "General"
    CONTACT = "contact", "Contact"
    SOCIAL = "social", "Social"
    SEO = "seo", "SEO"


class SiteSetting(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    key = models.CharField(max_length=100, unique=True)
    value = models.TextField(blank=True, default="")
    label = models.CharField(max_length=200, blank=True, default="")
    category = models.CharField(max_length=50, default=SettingCategory.GENERAL)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["category", "key"]

    def __str__(self):
        return f"{self.key}={self.value!r}"
