import pytest

ROLES = ["admin", "teacher", "student", "parent"]
CASES = [
    ("GET", "/content", {"admin": 200, "teacher": 200, "student": 200, "parent": 200}),
    ("GET", "/teacher/content", {"admin": 200, "teacher": 200, "student": 403, "parent": 403}),
    ("GET", "/admin/content", {"admin": 200, "teacher": 403, "student": 403, "parent": 403}),
    ("GET", "/progress/mine", {"admin": 403, "teacher": 403, "student": 200, "parent": 403}),
    ("GET", "/progress/recent", {"admin": 403, "teacher": 403, "student": 200, "parent": 403}),
    ("GET", "/parent/links", {"admin": 403, "teacher": 403, "student": 403, "parent": 200}),
    ("GET", "/parent/links/pending", {"admin": 403, "teacher": 403, "student": 200, "parent": 403}),
    ("GET", "/notifications/", {"admin": 200, "teacher": 200, "student": 200, "parent": 200}),
    ("GET", "/notifications/unread_count", {"admin": 200, "teacher": 200, "student": 200, "parent": 200}),
]

@pytest.mark.parametrize("method,path,expect", CASES, ids=[f"{m} {p}" for m, p, _ in CASES])
@pytest.mark.parametrize("role", ROLES)
def test_rbac_matrix(client, token_for_role, method, path, expect, role):
    headers = {"Authorization": f"Bearer {token_for_role(role)}"}
    response = client.request(method, path, headers=headers)
    status = response.status_code
    if expect[role] == 200:
        assert 200 <= status < 300, f"{role} {method} {path} => {status}, body={response.text}"
    else:
        assert status == 403, f"{role} {method} {path} => {status}, body={response.text}"
        assert response.json()["error"]["code"] == "FORBIDDEN"

MUTATIONS = [
    ("POST", "/content", {"admin", "teacher"}),
    ("POST", "/uploads/presign", {"admin", "teacher"}),
    ("POST", "/progress/open", {"student"}),
    ("POST", "/progress/video/ping", {"student"}),
    ("POST", "/progress/complete", {"student"}),
    ("POST", "/parent/links", {"parent"}),
    ("PATCH", "/admin/content/1/approve", {"admin"}),
    ("PATCH", "/parent/links/1/approve", {"student"}),
    ("DELETE", "/progress/1", {"admin", "teacher"}),
]

@pytest.mark.parametrize("method,path,allowed", MUTATIONS, ids=[f"{m} {p}" for m, p, _ in MUTATIONS])
@pytest.mark.parametrize("role", ROLES)
def test_role_gate_on_mutations(client, token_for_role, method, path, allowed, role):
    """Roles outside the gate are refused before the body is even looked at."""
    headers = {"Authorization": f"Bearer {token_for_role(role)}"}
    response = client.request(method, path, headers=headers, json={})
    if role in allowed:
        assert response.status_code != 403, f"{role} {method} {path} => {response.text}"
    else:
        assert response.status_code == 403, f"{role} {method} {path} => {response.status_code}, body={response.text}"
