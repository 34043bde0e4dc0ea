import logging

from django.db import IntegrityError, transaction

from shop.services import parse_uuid
from storefront.exceptions import ContentNotFoundError, DuplicateError, SettingNotFoundError

from .models import PageContent, SiteSetting

logger = logging.getLogger(__name__)

DUPLICATE_CONTENT = "Content with this page key already exists"


# ---------------------------
# Page content
# ---------------------------
def published_content():
    return PageContent.objects.filter(published=True).order_by("page_key")


def get_content_by_key(page_key: str, *, published_only: bool = True) -> PageContent:
    qs = published_content() if published_only else PageContent.objects.all()
    content = qs.filter(page_key=page_key).first()
    if content is None:
        raise ContentNotFoundError()
    return content


def _get_content(content_id) -> PageContent:
    pk = parse_uuid(content_id)
    content = PageContent.objects.filter(pk=pk).first() if pk else None
    if content is None:
        raise ContentNotFoundError()
    return content


@transaction.atomic
def create_content(*, page_key: str, **fields) -> PageContent:
    # create only; an existing page is never overwritten from here
    if PageContent.objects.filter(page_key=page_key).exists():
        raise DuplicateError(DUPLICATE_CONTENT)
    try:
        with transaction.atomic():
            content = PageContent.objects.create(page_key=page_key, **fields)
    except IntegrityError as exc:
        raise DuplicateError(DUPLICATE_CONTENT) from exc
    logger.info(f"page content created: {page_key}")
    return content


@transaction.atomic
def update_content(*, content_id, changes: dict) -> PageContent:
    content = _get_content(content_id)
    page_key = changes.get("page_key")
    if page_key and page_key != content.page_key and PageContent.objects.filter(page_key=page_key).exists():
        raise DuplicateError(DUPLICATE_CONTENT)
    for field, value in changes.items():
        setattr(content, field, value)
    content.save()
    logger.info(f"page content updated: {content.page_key} fields={sorted(changes)}")
    return content


def delete_content(*, content_id) -> None:
    content = _get_content(content_id)
    content.delete()
    logger.info(f"page content deleted: {content.page_key}")


# ---------------------------
# Site settings
# ---------------------------
def get_setting_by_key(key: str) -> SiteSetting:
    setting = SiteSetting.objects.filter(key=key).first()
    if setting is None:
        raise SettingNotFoundError()
    return setting


def _get_setting(setting_id) -> SiteSetting:
    pk = parse_uuid(setting_id)
    setting = SiteSetting.objects.filter(pk=pk).first() if pk else None
    if setting is None:
        raise SettingNotFoundError()
    return setting


@transaction.atomic
def save_setting(*, key: str, value: str, **fields) -> tuple[SiteSetting, bool]:
    """Upsert by key; label and category are only changed when given."""
    setting, created = SiteSetting.objects.select_for_update().get_or_create(
        key=key, defaults={"value": value, **fields},
    )
    if not created:
        setting.value = value
        for field, field_value in fields.items():
            setattr(setting, field, field_value)
        setting.save()
    logger.info(f"setting {'created' if created else 'updated'}: {key}")
    return setting, created


@transaction.atomic
def update_setting(*, setting_id, changes: dict) -> SiteSetting:
    setting = _get_setting(setting_id)
    key = changes.get("key")
    if key and key != setting.key and SiteSetting.objects.filter(key=key).exists():
        raise DuplicateError("A setting with this key already exists")
    for field, value in changes.items():
        setattr(setting, field, value)
    setting.save()
    return setting


def delete_setting(*, setting_id) -> None:
    setting = _get_setting(setting_id)
    setting.delete()
    logger.info(f"setting deleted: {setting.key}")
