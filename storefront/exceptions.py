"""
Error taxonomy shared by every app, and the DRF exception handler that turns
it into the ``{"success": false, ...}`` envelope.

Expected failures (validation, missing rows, business rules, the admin gate)
are ``APIException`` subclasses and keep their message. Anything else is an
internal error: logged with its traceback and answered with a generic 500.
"""
import logging
import traceback

from django.conf import settings
from django.http import JsonResponse
from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.response import Response
from rest_framework.settings import api_settings
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class ShopError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Request could not be completed."
    default_code = "error"

    def __init__(self, detail=None, code=None, **extra):
        super().__init__(detail, code)
        self.extra = extra


# ---------------------------
# 404
# ---------------------------
class NotFoundError(ShopError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"
    default_code = "not_found"


class ProductNotFoundError(NotFoundError):
    default_code = "product_not_found"

    def __init__(self, product_id=None):
        if product_id is None:
            super().__init__("Product not found")
        else:
            super().__init__(f"Product not found: {product_id}", productId=str(product_id))


class OrderNotFoundError(NotFoundError):
    default_detail = "Order not found"
    default_code = "order_not_found"


class CollectionNotFoundError(NotFoundError):
    default_detail = "Collection not found"
    default_code = "collection_not_found"


class ContentNotFoundError(NotFoundError):
    default_detail = "Content not found"
    default_code = "content_not_found"


class SettingNotFoundError(NotFoundError):
    default_detail = "Setting not found"
    default_code = "setting_not_found"


# ---------------------------
# 400 business rules
# ---------------------------
class BusinessRuleError(ShopError):
    default_code = "business_rule"


class OutOfStockError(BusinessRuleError):
    default_code = "out_of_stock"

    def __init__(self, product):
        super().__init__(
            f"Product out of stock: {product.name} - {product.color}",
            productId=str(product.pk),
        )


class InsufficientStockError(BusinessRuleError):
    default_code = "insufficient_stock"

    def __init__(self, product, available: int):
        super().__init__(
            f"Only {available} available for: {product.name}",
            productId=str(product.pk),
            available=available,
        )
        self.available = available


class DuplicateError(BusinessRuleError):
    default_code = "duplicate"


class DeleteBlockedError(BusinessRuleError):
    default_code = "delete_blocked"


class InvalidStatusTransitionError(BusinessRuleError):
    default_code = "invalid_status_transition"

    def __init__(self, current: str, requested: str):
        super().__init__(
            f"Cannot change order status from {current} to {requested}",
            currentStatus=current,
            requestedStatus=requested,
        )


# ---------------------------
# 401
# ---------------------------
class UnauthorizedError(ShopError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Unauthorized"
    default_code = "unauthorized"


def _flatten_errors(detail, path=""):
    """Yield ``{"field", "message"}`` pairs from a nested DRF error detail."""
    if isinstance(detail, dict):
        for key, value in detail.items():
            if key == api_settings.NON_FIELD_ERRORS_KEY:
                child = path
            elif isinstance(key, int):
                # list item errors come back keyed by index on newer DRF
                child = f"{path}[{key}]"
            else:
                child = f"{path}.{key}" if path else str(key)
            yield from _flatten_errors(value, child)
    elif isinstance(detail, list):
        for index, value in enumerate(detail):
            if isinstance(value, (dict, list)):
                yield from _flatten_errors(value, f"{path}[{index}]")
            else:
                yield {"field": path or None, "message": str(value)}
    else:
        yield {"field": path or None, "message": str(detail)}


def api_exception_handler(exc, context):
    response = exception_handler(exc, context)

    if response is None:
        view = context.get("view")
        logger.error(f"unhandled error in {view.__class__.__name__ if view else 'view'}: {exc!r}", exc_info=exc)
        body = {"success": False, "error": "Internal server error"}
        if settings.DEBUG:
            body["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        return Response(body, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    if isinstance(exc, ValidationError):
        response.data = {
            "success": False,
            "error": "Validation failed",
            "errors": list(_flatten_errors(exc.detail)),
        }
        return response

    detail = response.data.get("detail") if isinstance(response.data, dict) else response.data
    body = {
        "success": False,
        "error": str(detail),
        "code": getattr(detail, "code", None) or getattr(exc, "default_code", "error"),
    }
    body.update(getattr(exc, "extra", {}))
    response.data = body
    return response


def route_not_found(request, exception=None):
    return JsonResponse(
        {"success": False, "error": "Route not found", "path": request.path},
        status=status.HTTP_404_NOT_FOUND,
    )


def server_error(request):
    return JsonResponse(
        {"success": False, "error": "Internal server error"},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
