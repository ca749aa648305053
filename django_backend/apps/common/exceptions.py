import logging

from rest_framework import status
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


def api_exception_handler(exc, context):
    """
    DRF exception handler adding a machine readable ``code`` and the HTTP
    ``status`` to every error body.

    Anything DRF does not recognise is left to Django (500) after logging.
    """
    response = exception_handler(exc, context)

    if response is None:
        view = context.get("view")
        logger.exception(
            "Unhandled error in %s", view.__class__.__name__ if view else "unknown view"
        )
        return None

    data = response.data
    if not isinstance(data, dict):
        data = {"detail": data}

    codes = getattr(exc, "get_codes", None)
    code = codes() if codes else None
    if not isinstance(code, str):
        code = getattr(exc, "default_code", "error")

    data.setdefault("code", code)
    data["status"] = response.status_code
    response.data = data

    if response.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("API error %s: %s", response.status_code, data.get("detail"))
    return response
