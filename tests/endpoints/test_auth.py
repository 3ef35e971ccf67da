from datetime import timedelta
from fastapi.testclient import TestClient
from jose import jwt

from app.core.security import ALGORITHM, create_access_token
from tests.helpers.asserts import api_call, assert_error


def test_health_is_public(client: TestClient):
    response = api_call(client, "GET", "/health")
    assert response.json()["data"]["status"] == "ok"
    assert response.headers["X-Request-ID"]


def test_request_id_is_echoed(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "abc-123"})
    assert response.headers["X-Request-ID"] == "abc-123"


def test_missing_and_malformed_tokens(client: TestClient):
    assert_error(client.get("/progress/mine"), 401, "UNAUTHORIZED")
    assert_error(client.get("/progress/mine", headers={"Authorization": "Bearer not-a-jwt"}), 401, "UNAUTHORIZED")


def test_token_signed_with_wrong_key(client: TestClient, user_factory):
    student = user_factory("student")
    token = jwt.encode({"user_id": student.id, "sub": student.email}, "some-other-key", algorithm=ALGORITHM)
    response = client.get("/progress/mine", headers={"Authorization": f"Bearer {token}"})
    assert_error(response, 401, "UNAUTHORIZED")


def test_expired_token(client: TestClient, user_factory):
    student = user_factory("student")
    token = create_access_token({"user_id": student.id}, student.email, expires_delta=timedelta(minutes=-5))
    response = client.get("/progress/mine", headers={"Authorization": f"Bearer {token}"})
    assert_error(response, 401, "UNAUTHORIZED")


def test_token_for_unknown_user(client: TestClient):
    token = create_access_token({"user_id": 424242}, "ghost@test.com")
    response = client.get("/progress/mine", headers={"Authorization": f"Bearer {token}"})
    assert_error(response, 401, "UNAUTHORIZED")


def test_token_without_user_id(client: TestClient):
    token = create_access_token({}, "nobody@test.com")
    response = client.get("/progress/mine", headers={"Authorization": f"Bearer {token}"})
    assert_error(response, 401, "UNAUTHORIZED")


def test_inactive_user_is_forbidden(client: TestClient, user_factory, auth_headers):
    student = user_factory("student", is_active=False)
    response = client.get("/progress/mine", headers=auth_headers(student))
    assert_error(response, 403, "FORBIDDEN")


def test_anonymous_catalog_with_bad_token_is_rejected(client: TestClient):
    response = client.get("/content", headers={"Authorization": "Bearer garbage"})
    assert_error(response, 401, "UNAUTHORIZED")
