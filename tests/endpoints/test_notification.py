from fastapi.testclient import TestClient

from tests.helpers.asserts import api_call, assert_error
from tests.helpers.content import create_content, video_payload


def _seed_two_notices(client: TestClient, user_factory, auth_headers):
    admin = user_factory("admin")
    teacher = user_factory("teacher")
    create_content(client, auth_headers(teacher), video_payload(title="One"))
    create_content(client, auth_headers(teacher), video_payload(title="Two"))
    return admin, teacher


def test_notification_endpoints_smoke(client: TestClient, token_for_role):
    headers = {"Authorization": f"Bearer {token_for_role('student')}"}

    response = api_call(client, "GET", "/notifications/", headers=headers)
    assert response.json()["data"] == []
    response = api_call(client, "GET", "/notifications/unread_count", headers=headers)
    assert response.json()["data"] == 0


def test_notifications_require_auth(client: TestClient):
    assert_error(client.get("/notifications/"), 401, "UNAUTHORIZED")


def test_mark_read_and_unread_count(client: TestClient, user_factory, auth_headers):
    admin, _ = _seed_two_notices(client, user_factory, auth_headers)
    headers = auth_headers(admin)

    notices = api_call(client, "GET", "/notifications/", headers=headers).json()["data"]
    assert len(notices) == 2
    assert api_call(client, "GET", "/notifications/unread_count", headers=headers).json()["data"] == 2

    data = api_call(client, "POST", f"/notifications/{notices[0]['id']}/read", headers=headers).json()["data"]
    assert data["is_read"] is True
    assert api_call(client, "GET", "/notifications/unread_count", headers=headers).json()["data"] == 1

    api_call(client, "POST", "/notifications/mark_all_read", headers=headers)
    assert api_call(client, "GET", "/notifications/unread_count", headers=headers).json()["data"] == 0


def test_cannot_read_someone_elses_notification(client: TestClient, user_factory, auth_headers):
    admin, teacher = _seed_two_notices(client, user_factory, auth_headers)
    notices = api_call(client, "GET", "/notifications/", headers=auth_headers(admin)).json()["data"]

    response = client.post(f"/notifications/{notices[0]['id']}/read", headers=auth_headers(teacher))
    assert_error(response, 404, "NOT_FOUND")
