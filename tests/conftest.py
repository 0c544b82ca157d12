from datetime import datetime, timezone

import pytest
from rest_framework.test import APIClient

from clients.cache import client_cache
from commons.exceptions import ConflictError
from files.services import s3_client
from files.services.s3_client import StoredObject
from fleet.models import Drone, Payload


class FakeGateway:
    """Object storage en memoria con la misma interfaz que S3Gateway."""

    def __init__(self):
        self.buckets = {}
        self.created_buckets = []

    def ensure_bucket(self, bucket):
        if bucket in self.buckets:
            return False
        self.buckets[bucket] = {}
        self.created_buckets.append(bucket)
        return True

    def exists(self, bucket, path):
        return path in self.buckets.get(bucket, {})

    def upload(self, bucket, path, fileobj, content_type=None):
        objects = self.buckets.setdefault(bucket, {})
        if path in objects:
            raise ConflictError(f"Object '{path}' already exists in bucket '{bucket}'")
        if hasattr(fileobj, "seek"):
            fileobj.seek(0)
        body = fileobj.read() if hasattr(fileobj, "read") else fileobj
        objects[path] = {
            "body": body,
            "content_type": content_type,
            "created_at": datetime.now(timezone.utc),
        }
        return self.public_url(bucket, path)

    def list(self, bucket, prefix):
        folder = prefix.strip("/") + "/"
        out = []
        for key, obj in sorted(self.buckets.get(bucket, {}).items()):
            if not key.startswith(folder):
                continue
            name = key[len(folder):]
            if "/" in name:
                continue
            out.append(StoredObject(name=name, size=len(obj["body"]), created_at=obj["created_at"]))
        return out

    def signed_url(self, bucket, path, ttl=3600):
        return f"https://storage.test/signed/{bucket}/{path}?expires={ttl}"

    def remove(self, bucket, paths):
        objects = self.buckets.get(bucket, {})
        for path in paths:
            objects.pop(path, None)

    def public_url(self, bucket, path):
        return f"https://storage.test/{bucket}/{path}"


@pytest.fixture(autouse=True)
def _clear_client_cache():
    client_cache.clear()
    yield
    client_cache.clear()


@pytest.fixture
def gateway(monkeypatch):
    fake = FakeGateway()
    monkeypatch.setattr(s3_client, "get_gateway", lambda: fake)
    return fake


@pytest.fixture
def operator(django_user_model):
    return django_user_model.objects.create_user(email="ops@example.com", password="secret-pass")


@pytest.fixture
def api_client(operator):
    client = APIClient()
    client.force_authenticate(user=operator)
    return client


@pytest.fixture
def catalog(db):
    drone = Drone.objects.create(id=5, name="Scout X4")
    payloads = [
        Payload.objects.create(id=7, name="Thermal camera"),
        Payload.objects.create(id=8, name="LiDAR"),
    ]
    return drone, payloads


@pytest.fixture
def acme(db):
    from clients.services.client_service import create_client
    return create_client({"name": "Acme", "email": "ops@acme.test", "address": "1 Main St"})
