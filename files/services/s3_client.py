# files/services/s3_client.py
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional
from urllib.parse import quote

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from django.conf import settings

from commons.exceptions import ConflictError, StorageError

logger = logging.getLogger(__name__)

NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound", "NoSuchBucket"}


@dataclass
class StoredObject:
    name: str
    size: int
    created_at: Optional[datetime]


def s3():
    conf = settings.STORAGE
    return boto3.client(
        "s3",
        aws_access_key_id=conf.get("ACCESS_KEY_ID") or None,
        aws_secret_access_key=conf.get("SECRET_ACCESS_KEY") or None,
        region_name=conf.get("REGION") or "us-east-1",
        endpoint_url=conf.get("ENDPOINT_URL") or None,
    )


def _error_code(exc: ClientError) -> str:
    return str(exc.response.get("Error", {}).get("Code", ""))


def _error_message(exc: Exception) -> str:
    if isinstance(exc, ClientError):
        return exc.response.get("Error", {}).get("Message", str(exc))
    return str(exc)


@contextmanager
def _storage_errors(action: str, bucket: str):
    try:
        yield
    except (ClientError, BotoCoreError) as e:
        logger.error("Storage %s failed on bucket %s: %s", action, bucket, _error_message(e))
        raise StorageError(f"Unable to {action} in bucket '{bucket}': {_error_message(e)}")


class S3Gateway:
    """
    Acceso a un object storage S3 compatible (bucket + key).
    Los servicios solo usan: upload, list, signed_url, remove, ensure_bucket.
    """

    def __init__(self, client=None, public_url: str = "", endpoint_url: Optional[str] = None,
                 region: str = "us-east-1"):
        self.client = client if client is not None else s3()
        self.public_base = (public_url or "").rstrip("/")
        self.endpoint_url = (endpoint_url or "").rstrip("/")
        self.region = region

    # ---------- buckets ----------
    def ensure_bucket(self, bucket: str) -> bool:
        """Crea el bucket si no existe (idempotente). True si lo creo."""
        try:
            self.client.head_bucket(Bucket=bucket)
            return False
        except ClientError as e:
            if _error_code(e) not in NOT_FOUND_CODES:
                raise StorageError(f"Unable to check bucket '{bucket}': {_error_message(e)}")
        except BotoCoreError as e:
            raise StorageError(f"Unable to check bucket '{bucket}': {e}")

        kwargs = {"Bucket": bucket}
        if self.region != "us-east-1" and not self.endpoint_url:
            kwargs["CreateBucketConfiguration"] = {"LocationConstraint": self.region}
        with _storage_errors("create bucket", bucket):
            self.client.create_bucket(**kwargs)
        logger.info("Bucket %s created", bucket)
        return True

    # ---------- objetos ----------
    def exists(self, bucket: str, path: str) -> bool:
        try:
            self.client.head_object(Bucket=bucket, Key=path)
            return True
        except ClientError as e:
            if _error_code(e) in NOT_FOUND_CODES:
                return False
            raise StorageError(f"Unable to check object '{path}': {_error_message(e)}")
        except BotoCoreError as e:
            raise StorageError(f"Unable to check object '{path}': {e}")

    def upload(self, bucket: str, path: str, fileobj, content_type: Optional[str] = None) -> str:
        """Sube sin sobrescribir; devuelve la URL publica del objeto."""
        if self.exists(bucket, path):
            raise ConflictError(f"Object '{path}' already exists in bucket '{bucket}'")

        if hasattr(fileobj, "seek"):
            fileobj.seek(0)
        body = fileobj.read() if hasattr(fileobj, "read") else fileobj

        params = {"Bucket": bucket, "Key": path, "Body": body, "CacheControl": "max-age=3600"}
        if content_type:
            params["ContentType"] = content_type
        with _storage_errors("upload", bucket):
            self.client.put_object(**params)

        logger.info("Uploaded %s/%s", bucket, path)
        return self.public_url(bucket, path)

    def list(self, bucket: str, prefix: str) -> List[StoredObject]:
        """Objetos directamente bajo `prefix/` (no recursivo). Bucket inexistente = vacio."""
        folder = prefix.strip("/") + "/" if prefix.strip("/") else ""
        objects: List[StoredObject] = []
        token = None
        while True:
            kw = {"Bucket": bucket, "Prefix": folder, "Delimiter": "/"}
            if token:
                kw["ContinuationToken"] = token
            try:
                r = self.client.list_objects_v2(**kw)
            except ClientError as e:
                if _error_code(e) in NOT_FOUND_CODES:
                    return []
                raise StorageError(f"Unable to list '{folder}' in bucket '{bucket}': {_error_message(e)}")
            except BotoCoreError as e:
                raise StorageError(f"Unable to list '{folder}' in bucket '{bucket}': {e}")

            for item in r.get("Contents", []):
                name = item["Key"][len(folder):]
                if not name:
                    continue
                objects.append(StoredObject(
                    name=name,
                    size=int(item.get("Size", 0)),
                    created_at=item.get("LastModified"),
                ))
            token = r.get("NextContinuationToken")
            if not r.get("IsTruncated") or not token:
                break
        return objects

    def signed_url(self, bucket: str, path: str, ttl: int = 3600) -> str:
        with _storage_errors("sign url", bucket):
            return self.client.generate_presigned_url(
                "get_object",
                Params={"Bucket": bucket, "Key": path},
                ExpiresIn=ttl,
            )

    def remove(self, bucket: str, paths: Iterable[str]) -> None:
        keys = [{"Key": p} for p in paths]
        if not keys:
            return
        with _storage_errors("delete objects", bucket):
            r = self.client.delete_objects(Bucket=bucket, Delete={"Objects": keys, "Quiet": True})
        errors = r.get("Errors") or []
        if errors:
            first = errors[0]
            raise StorageError(f"Unable to delete '{first.get('Key')}': {first.get('Message', 'unknown error')}")
        logger.info("Removed %d objects from %s", len(keys), bucket)

    def public_url(self, bucket: str, path: str) -> str:
        key = quote(path)
        if self.public_base:
            return f"{self.public_base}/{bucket}/{key}"
        if self.endpoint_url:
            return f"{self.endpoint_url}/{bucket}/{key}"
        return f"https://{bucket}.s3.{self.region}.amazonaws.com/{key}"


_gateway: Optional[S3Gateway] = None


def get_gateway() -> S3Gateway:
    global _gateway
    if _gateway is None:
        conf = settings.STORAGE
        _gateway = S3Gateway(
            public_url=conf.get("PUBLIC_URL", ""),
            endpoint_url=conf.get("ENDPOINT_URL"),
            region=conf.get("REGION") or "us-east-1",
        )
    return _gateway
