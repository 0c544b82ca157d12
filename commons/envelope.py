# commons/envelope.py
"""
Every response leaves the API in the same shape:

    {"success": true,  "data": ...}
    {"success": false, "error": "<code>", "message": "...", "details": ...}

Views return plain data and `commons.renderers.EnvelopeJSONRenderer` wraps it.
Errors are never caught in the views; the exception handler below builds the
failure envelope.
"""
import logging

from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from .exceptions import DashboardError, UnknownError

logger = logging.getLogger(__name__)

# codigo por status para los errores del propio framework
STATUS_CODES = {
    400: "validation_error",
    401: "not_authenticated",
    403: "permission_denied",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
    415: "unsupported_media_type",
}


def _first_message(detail):
    if isinstance(detail, list):
        return _first_message(detail[0]) if detail else ""
    if isinstance(detail, dict):
        for key, value in detail.items():
            msg = _first_message(value)
            if key == "non_field_errors" or key == "detail":
                return msg
            return f"{key}: {msg}"
        return ""
    return str(detail)


def failure(code, message, details=None, status_code=status.HTTP_400_BAD_REQUEST):
    body = {"success": False, "error": code, "message": message}
    if details is not None:
        body["details"] = details
    return Response(body, status=status_code)


def envelope_exception_handler(exc, context):
    response = exception_handler(exc, context)

    if response is None:
        # nada lo manejo: error inesperado
        view = context.get("view")
        logger.exception("Unhandled error in %s", type(view).__name__ if view else "view")
        err = UnknownError(f"{type(exc).__name__}: {exc}")
        return failure(err.default_code, str(err.detail), status_code=err.status_code)

    if isinstance(exc, DashboardError):
        code = exc.default_code
        message = str(exc.detail)
        details = None
    else:
        if isinstance(exc, (Http404, DjangoPermissionDenied)):
            exc = exceptions.NotFound() if isinstance(exc, Http404) else exceptions.PermissionDenied()
        code = STATUS_CODES.get(response.status_code, getattr(exc, "default_code", "error"))
        message = _first_message(response.data)
        details = response.data if isinstance(exc, exceptions.ValidationError) else None

    if response.status_code >= 500:
        logger.error("%s: %s", code, message)
    else:
        logger.warning("%s: %s", code, message)

    out = failure(code, message, details=details, status_code=response.status_code)
    for header in ("WWW-Authenticate", "Retry-After", "Allow"):
        if response.has_header(header):
            out[header] = response[header]
    return out

