# files/services/file_service.py
from __future__ import annotations

import logging
import mimetypes
import os
import re
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from django.conf import settings
from django.core.exceptions import SuspiciousFileOperation
from django.utils.text import get_valid_filename

from clients.services.client_service import get_client
from commons.exceptions import DashboardError, ValidationError
from commons.validators import clean_int
from files.services import s3_client

logger = logging.getLogger(__name__)

FILE_TYPES = ("mission", "image")

ALLOWED_CONTENT_TYPES = {
    "mission": (
        "application/json",
        "text/plain",
        "application/xml",
        "text/xml",
        "application/zip",
        "application/x-yaml",
        "application/yaml",
        "text/yaml",
    ),
    "image": ("image/jpeg", "image/png", "image/gif", "image/webp"),
}

SORT_FIELDS = ("name", "created", "size")
MAX_SIGNED_URL_TTL = 7 * 24 * 3600

# "<epoch ms>_<8 hex>_<nombre original>"; los nombres viejos no traen el sufijo hex
TIMESTAMP_PREFIX_RE = re.compile(r"^(\d+)_(?:[0-9a-f]{8}_)?(.+)$")


@dataclass
class StoredFile:
    name: str
    display_name: str
    path: str
    bucket: str
    size: int
    size_formatted: str
    extension: str
    created_at: Optional[datetime]
    url: str


# ---------------------------
# Helpers
# ---------------------------
def format_file_size(size: int) -> str:
    if not size:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB", "GB", "TB"]
    value, i = float(size), 0
    while value >= 1024 and i < len(units) - 1:
        value /= 1024
        i += 1
    return f"{round(value, 2):g} {units[i]}"


def split_timestamp(name: str):
    """'1700000000000_1a2b3c4d_mission.json' -> (datetime, 'mission.json')."""
    m = TIMESTAMP_PREFIX_RE.match(name)
    if not m:
        return None, name
    try:
        created = datetime.fromtimestamp(int(m.group(1)) / 1000, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None, name
    return created, m.group(2)


def file_extension(name: str) -> str:
    return name.rsplit(".", 1)[-1].lower() if "." in name else ""


def bucket_for(file_type: str) -> str:
    if file_type not in FILE_TYPES:
        raise ValidationError(f"Invalid file type '{file_type}'. Allowed: {', '.join(FILE_TYPES)}")
    return settings.STORAGE["BUCKETS"][file_type]


def _content_type(upload) -> str:
    content_type = getattr(upload, "content_type", None)
    if not content_type:
        content_type, _ = mimetypes.guess_type(getattr(upload, "name", "") or "")
    return (content_type or "").split(";")[0].strip().lower()


def validate_upload(upload, file_type: str) -> str:
    """Valida tamaño y tipo; devuelve el content type normalizado."""
    if upload is None:
        raise ValidationError("No file provided")

    max_size = settings.STORAGE["MAX_UPLOAD_SIZE"]
    size = getattr(upload, "size", None) or 0
    if size > max_size:
        raise ValidationError(f"File too large. Maximum size is {max_size // (1024 * 1024)}MB")

    allowed = ALLOWED_CONTENT_TYPES[file_type]
    content_type = _content_type(upload)
    if content_type not in allowed:
        raise ValidationError(f"Invalid file type. Allowed: {', '.join(allowed)}")
    return content_type


def _to_stored_file(gateway, bucket: str, folder: str, name: str, size: int,
                    created_at: Optional[datetime]) -> StoredFile:
    stamped, display = split_timestamp(name)
    path = f"{folder}/{name}"
    return StoredFile(
        name=name,
        display_name=display,
        path=path,
        bucket=bucket,
        size=size,
        size_formatted=format_file_size(size),
        extension=file_extension(name),
        created_at=stamped or created_at,
        url=gateway.public_url(bucket, path),
    )


# ---------------------------
# Operaciones
# ---------------------------
def upload_client_file(client_id, file_type: str, upload, gateway=None) -> StoredFile:
    gateway = gateway or s3_client.get_gateway()
    client = get_client(client_id)
    bucket = bucket_for(file_type)
    content_type = validate_upload(upload, file_type)

    try:
        filename = get_valid_filename(os.path.basename(upload.name or ""))
    except SuspiciousFileOperation:
        raise ValidationError(f"Invalid file name '{upload.name}'")
    name = f"{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}_{filename}"
    folder = str(client.pk)

    gateway.upload(bucket, f"{folder}/{name}", upload, content_type=content_type)
    logger.info("Client %s: uploaded %s file %s", client.pk, file_type, name)
    return _to_stored_file(gateway, bucket, folder, name, getattr(upload, "size", 0) or 0, None)


def upload_client_files(client_id, file_type: str, uploads: Iterable, gateway=None) -> Dict[str, Any]:
    """Sube varios archivos; los que fallan se reportan sin cortar el resto."""
    gateway = gateway or s3_client.get_gateway()
    client = get_client(client_id)
    bucket_for(file_type)

    stored: List[StoredFile] = []
    errors: List[Dict[str, str]] = []
    for upload in uploads:
        try:
            stored.append(upload_client_file(client.pk, file_type, upload, gateway=gateway))
        except DashboardError as e:
            logger.warning("Client %s: upload of %s failed: %s", client.pk, getattr(upload, "name", "?"), e.detail)
            errors.append({
                "name": getattr(upload, "name", ""),
                "error": e.default_code,
                "message": str(e.detail),
            })
    return {"files": stored, "errors": errors}


def list_client_files(client_id, file_type: str = "mission", extensions=None, sort_by: str = "name",
                      direction: str = "asc", limit=None, gateway=None) -> List[StoredFile]:
    gateway = gateway or s3_client.get_gateway()
    client = get_client(client_id)
    bucket = bucket_for(file_type)

    if sort_by not in SORT_FIELDS:
        raise ValidationError(f"Invalid sort field '{sort_by}'. Allowed: {', '.join(SORT_FIELDS)}")
    if direction not in ("asc", "desc"):
        raise ValidationError("direction must be 'asc' or 'desc'")

    folder = str(client.pk)
    files = [
        _to_stored_file(gateway, bucket, folder, obj.name, obj.size, obj.created_at)
        for obj in gateway.list(bucket, folder)
    ]

    if extensions:
        if isinstance(extensions, str):
            extensions = extensions.split(",")
        wanted = {e.strip().lstrip(".").lower() for e in extensions if e.strip()}
        files = [f for f in files if f.extension in wanted]

    reverse = direction == "desc"
    if sort_by == "created":
        epoch = datetime.min.replace(tzinfo=timezone.utc)
        files.sort(key=lambda f: f.created_at or epoch, reverse=reverse)
    elif sort_by == "size":
        files.sort(key=lambda f: f.size, reverse=reverse)
    else:
        files.sort(key=lambda f: f.name, reverse=reverse)

    if limit not in (None, ""):
        limit = clean_int(limit, "limit")
        if limit > 0:
            files = files[:limit]
    return files


def signed_file_url(path: str, file_type: str = "mission", ttl=None, gateway=None) -> Dict[str, Any]:
    gateway = gateway or s3_client.get_gateway()
    bucket = bucket_for(file_type)
    path = (path or "").strip().lstrip("/")
    if not path:
        raise ValidationError("path is required")

    ttl = settings.STORAGE["SIGNED_URL_TTL"] if ttl in (None, "") else clean_int(ttl, "ttl")
    if ttl <= 0 or ttl > MAX_SIGNED_URL_TTL:
        raise ValidationError(f"ttl must be between 1 and {MAX_SIGNED_URL_TTL} seconds")

    return {
        "url": gateway.signed_url(bucket, path, ttl),
        "path": path,
        "bucket": bucket,
        "expires_in": ttl,
    }


def delete_client_file(client_id, file_type: str, path: str, gateway=None) -> Dict[str, Any]:
    gateway = gateway or s3_client.get_gateway()
    client = get_client(client_id)
    bucket = bucket_for(file_type)

    path = (path or "").strip().lstrip("/")
    folder = f"{client.pk}/"
    if not path.startswith(folder) or ".." in path.split("/") or path == folder:
        raise ValidationError("path does not belong to this client")

    gateway.remove(bucket, [path])
    logger.info("Client %s: deleted %s/%s", client.pk, bucket, path)
    return {"path": path, "bucket": bucket}
