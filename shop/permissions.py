import hmac
import logging

from django.conf import settings
from rest_framework.permissions import BasePermission

from storefront.exceptions import UnauthorizedError

logger = logging.getLogger(__name__)

ADMIN_HEADER = "x-admin-password"


class AdminPasswordRequired(BasePermission):
    """
    Single-operator shared-secret gate for the back-office.

    Not user authentication: there are no sessions or roles, just one secret
    from ``ADMIN_PASSWORD`` compared against the ``x-admin-password`` header.
    An unset secret rejects every request.
    """

    def has_permission(self, request, view):
        expected = settings.ADMIN_PASSWORD
        supplied = request.headers.get(ADMIN_HEADER, "")
        if not expected or not supplied or not hmac.compare_digest(supplied.encode(), expected.encode()):
            logger.warning(
                f"admin gate rejected {request.method} {request.path} "
                f"(header {'present' if supplied else 'missing'}, secret {'set' if expected else 'not set'})"
            )
            raise UnauthorizedError()
        return True
