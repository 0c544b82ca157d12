# commons/validators.py
import re
import uuid

from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import validate_email, validate_ipv4_address

from .exceptions import ValidationError

# dotted-quad con puerto opcional, ej: 10.0.0.5 o 10.0.0.5:2222
VM_ADDRESS_RE = re.compile(r"^(\d{1,3}\.){3}\d{1,3}(:\d+)?$")


def require_text(value, field, max_length=None):
    text = "" if value is None else str(value).strip()
    if not text:
        raise ValidationError(f"{field} is required")
    if max_length is not None and len(text) > max_length:
        raise ValidationError(f"{field} must be at most {max_length} characters")
    return text


def clean_email(value):
    email = require_text(value, "email")
    try:
        validate_email(email)
    except DjangoValidationError:
        raise ValidationError(f"'{email}' is not a valid email address")
    return email


def clean_ipv4(value):
    ip = require_text(value, "vm_ip")
    try:
        validate_ipv4_address(ip)
    except DjangoValidationError:
        raise ValidationError(f"'{ip}' is not a valid IPv4 address")
    return ip


def clean_vm_address(value):
    """IP de la VM, admite puerto: <a.b.c.d>[:port]."""
    address = "" if value is None else str(value).strip()
    if not address or not VM_ADDRESS_RE.match(address):
        raise ValidationError("Invalid VM IP address format")
    return address


def clean_uuid(value, field="id"):
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        raise ValidationError(f"'{value}' is not a valid {field}")


def clean_int(value, field):
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer")
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be an integer")
