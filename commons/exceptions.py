# commons/exceptions.py
from rest_framework import status
from rest_framework.exceptions import APIException


class DashboardError(APIException):
    """Base for every error the services raise on purpose."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Request could not be completed."
    default_code = "error"


class ValidationError(DashboardError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid input."
    default_code = "validation_error"


class NotFoundError(DashboardError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Resource not found."
    default_code = "not_found"


class ConflictError(DashboardError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Resource already exists."
    default_code = "conflict"


class StorageError(DashboardError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = "Object storage operation failed."
    default_code = "storage_error"


class UnknownError(DashboardError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Unexpected error."
    default_code = "unknown_error"


def status_for_code(code, default=status.HTTP_400_BAD_REQUEST):
    """Status HTTP del error de la taxonomia con ese codigo."""
    for cls in (ValidationError, NotFoundError, ConflictError, StorageError, UnknownError):
        if cls.default_code == code:
            return cls.status_code
    return default
