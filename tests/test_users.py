import pytest
from rest_framework.test import APIClient

pytestmark = pytest.mark.django_db


def test_login_returns_tokens_and_operator(operator):
    r = APIClient().post(
        "/api/login/", {"email": "ops@example.com", "password": "secret-pass"}, format="json"
    )
    assert r.status_code == 200
    data = r.json()["data"]
    assert {"access", "refresh"} <= set(data)
    assert data["email"] == "ops@example.com"


def test_login_with_wrong_password(operator):
    r = APIClient().post(
        "/api/login/", {"email": "ops@example.com", "password": "nope"}, format="json"
    )
    assert r.status_code == 401
    assert r.json()["success"] is False


def test_me(api_client):
    r = api_client.get("/api/users/me/")
    assert r.json()["data"]["email"] == "ops@example.com"
