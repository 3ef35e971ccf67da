from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.core.constants import NotificationTypeEnum
from app.crud.notification import notification as crud_notification
from tests.helpers.asserts import api_call, assert_error
from tests.helpers.content import approve, create_content, native_quiz_payload, video_payload


def test_teacher_submission_starts_pending(client: TestClient, user_factory, auth_headers):
    teacher = user_factory("teacher")
    headers = auth_headers(teacher)

    response = api_call(
        client, "POST", "/content", headers=headers,
        json=video_payload(approval_status="approved", is_admin_content=True),
    )
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["approval_status"] == "pending"
    assert data["is_admin_content"] is False
    assert data["uploader_id"] == teacher.id
    assert data["uploader_role"] == "teacher"


def test_admin_submission_is_auto_approved(client: TestClient, token_for_role):
    headers = {"Authorization": f"Bearer {token_for_role('admin')}"}
    data = create_content(client, headers, video_payload(approval_status="pending"))
    assert data["approval_status"] == "approved"
    assert data["is_admin_content"] is True


def test_students_and_parents_cannot_submit(client: TestClient, token_for_role):
    for role in ("student", "parent"):
        headers = {"Authorization": f"Bearer {token_for_role(role)}"}
        response = client.post("/content", headers=headers, json=video_payload())
        assert_error(response, 403, "FORBIDDEN")


def test_submission_requires_token(client: TestClient):
    response = client.post("/content", json=video_payload())
    assert_error(response, 401, "UNAUTHORIZED")


def test_video_requires_duration_and_file_size(client: TestClient, token_for_role):
    headers = {"Authorization": f"Bearer {token_for_role('teacher')}"}
    response = client.post("/content", headers=headers, json=video_payload(duration=None, file_size=None))
    body = assert_error(response, 400, "BAD_REQUEST")
    fields = {issue["field"] for issue in body["error"]["details"]["errors"]}
    assert fields == {"duration", "file_size"}


def test_non_quiz_requires_s3_key(client: TestClient, token_for_role):
    headers = {"Authorization": f"Bearer {token_for_role('teacher')}"}
    payload = video_payload(type="file", s3_key=None, duration=None, file_size=None)
    response = client.post("/content", headers=headers, json=payload)
    assert_error(response, 400, "BAD_REQUEST")


def test_native_quiz_question_rules(client: TestClient, token_for_role):
    headers = {"Authorization": f"Bearer {token_for_role('teacher')}"}

    bad_questions = [
        {"question_text": "Pick one", "options": ["a", "b", "c"], "correct_option": 0},
        {"question_text": "Pick one", "options": ["a", "b", " ", "d"], "correct_option": 1},
        {"question_text": "Pick one", "options": ["a", "b", "c", "d"], "correct_option": 4},
        {"question_text": "", "options": ["a", "b", "c", "d"], "correct_option": 2},
    ]
    for question in bad_questions:
        response = client.post("/content", headers=headers, json=native_quiz_payload(questions=[question]))
        assert_error(response, 400, "BAD_REQUEST")

    response = client.post("/content", headers=headers, json=native_quiz_payload(questions=[]))
    assert_error(response, 400, "BAD_REQUEST")

    data = create_content(client, headers, native_quiz_payload())
    assert data["questions"][0]["correct_option"] == 0


def test_google_form_quiz_requires_url(client: TestClient, token_for_role):
    headers = {"Authorization": f"Bearer {token_for_role('teacher')}"}
    payload = native_quiz_payload(quiz_type="google_form", questions=None)
    assert_error(client.post("/content", headers=headers, json=payload), 400, "BAD_REQUEST")

    payload["google_form_url"] = "https://forms.example.com/quiz"
    data = create_content(client, headers, payload)
    assert data["quiz_type"] == "google_form"


def test_pending_content_hidden_from_students(client: TestClient, user_factory, auth_headers):
    teacher = user_factory("teacher")
    other_teacher = user_factory("teacher")
    student = user_factory("student")
    parent = user_factory("parent")
    admin = user_factory("admin")
    content = create_content(client, auth_headers(teacher), video_payload())

    for viewer in (student, parent, other_teacher):
        response = client.get(f"/content/{content['id']}", headers=auth_headers(viewer))
        assert_error(response, 404, "NOT_FOUND")

    api_call(client, "GET", f"/content/{content['id']}", headers=auth_headers(teacher))
    api_call(client, "GET", f"/content/{content['id']}", headers=auth_headers(admin))

    approve(client, auth_headers(admin), content["id"])
    for viewer in (student, parent, other_teacher):
        api_call(client, "GET", f"/content/{content['id']}", headers=auth_headers(viewer))


def test_teacher_edits_own_pending_content(client: TestClient, user_factory, auth_headers, db_session: Session):
    admin = user_factory("admin")
    teacher = user_factory("teacher")
    content = create_content(client, auth_headers(teacher), video_payload())

    response = api_call(
        client, "PATCH", f"/content/{content['id']}", headers=auth_headers(teacher),
        json={"title": "Fractions, revised", "approval_status": "approved"},
    )
    data = response.json()["data"]
    assert data["title"] == "Fractions, revised"
    assert data["approval_status"] == "pending"

    # Resubmission refreshes the admin's existing notice rather than adding another
    notices = crud_notification.get_for_user(db_session, user_id=admin.id)
    pending = [n for n in notices if n.notification_type == NotificationTypeEnum.CONTENT_PENDING.value]
    assert len(pending) == 1
    assert pending[0].meta["content_id"] == content["id"]


def test_edit_revalidates_merged_draft(client: TestClient, token_for_role):
    headers = {"Authorization": f"Bearer {token_for_role('teacher')}"}
    content = create_content(client, headers, video_payload())

    response = client.patch(f"/content/{content['id']}", headers=headers, json={"duration": None})
    assert_error(response, 400, "BAD_REQUEST")

    response = client.patch(f"/content/{content['id']}", headers=headers, json={"title": None})
    assert_error(response, 400, "BAD_REQUEST")


def test_teacher_cannot_edit_others_or_reviewed_content(client: TestClient, user_factory, auth_headers):
    admin = user_factory("admin")
    owner = user_factory("teacher")
    intruder = user_factory("teacher")
    content = create_content(client, auth_headers(owner), video_payload())

    response = client.patch(f"/content/{content['id']}", headers=auth_headers(intruder), json={"title": "Mine now"})
    assert_error(response, 403, "FORBIDDEN")

    approve(client, auth_headers(admin), content["id"])
    response = client.patch(f"/content/{content['id']}", headers=auth_headers(owner), json={"title": "Late edit"})
    assert_error(response, 403, "FORBIDDEN")

    rejected = create_content(client, auth_headers(owner), video_payload(title="Second"))
    api_call(client, "PATCH", f"/admin/content/{rejected['id']}/reject", headers=auth_headers(admin), json={"feedback": "Blurry"})
    response = client.patch(f"/content/{rejected['id']}", headers=auth_headers(owner), json={"title": "Resurrected"})
    assert_error(response, 403, "FORBIDDEN")


def test_admin_can_edit_any_content(client: TestClient, user_factory, auth_headers):
    admin = user_factory("admin")
    teacher = user_factory("teacher")
    content = create_content(client, auth_headers(teacher), video_payload())
    approve(client, auth_headers(admin), content["id"])

    response = api_call(client, "PATCH", f"/content/{content['id']}", headers=auth_headers(admin), json={"tags": ["fractions"]})
    assert response.json()["data"]["tags"] == ["fractions"]
    assert response.json()["data"]["approval_status"] == "approved"


def test_delete_rules(client: TestClient, user_factory, auth_headers):
    admin = user_factory("admin")
    teacher = user_factory("teacher")
    student = user_factory("student")

    pending = create_content(client, auth_headers(teacher), video_payload())
    assert_error(client.delete(f"/content/{pending['id']}", headers=auth_headers(student)), 403, "FORBIDDEN")
    api_call(client, "DELETE", f"/content/{pending['id']}", headers=auth_headers(teacher))
    assert_error(client.get(f"/content/{pending['id']}", headers=auth_headers(teacher)), 404, "NOT_FOUND")
    assert_error(client.get(f"/content/{pending['id']}", headers=auth_headers(admin)), 404, "NOT_FOUND")

    approved = create_content(client, auth_headers(teacher), video_payload(title="Approved one"))
    approve(client, auth_headers(admin), approved["id"])
    assert_error(client.delete(f"/content/{approved['id']}", headers=auth_headers(teacher)), 403, "FORBIDDEN")
    api_call(client, "DELETE", f"/content/{approved['id']}", headers=auth_headers(admin))
    assert_error(client.delete(f"/content/{approved['id']}", headers=auth_headers(admin)), 404, "NOT_FOUND")


def test_listing_only_shows_approved_to_students(client: TestClient, user_factory, auth_headers):
    admin = user_factory("admin")
    teacher = user_factory("teacher")
    student = user_factory("student")

    approved = create_content(client, auth_headers(teacher), video_payload(title="Visible"))
    approve(client, auth_headers(admin), approved["id"])
    create_content(client, auth_headers(teacher), video_payload(title="Waiting"))

    for params in ("", "?approval_status=pending", "?approval_status=rejected"):
        response = api_call(client, "GET", f"/content{params}", headers=auth_headers(student))
        items = response.json()["data"]["items"]
        assert all(item["approval_status"] == "approved" for item in items)
    titles = [item["title"] for item in api_call(client, "GET", "/content", headers=auth_headers(student)).json()["data"]["items"]]
    assert titles == ["Visible"]

    anonymous = api_call(client, "GET", "/content").json()["data"]
    assert [item["title"] for item in anonymous["items"]] == ["Visible"]

    admin_view = api_call(client, "GET", "/content", headers=auth_headers(admin)).json()["data"]
    assert admin_view["total"] == 2


def test_listing_attaches_student_progress(client: TestClient, user_factory, auth_headers):
    admin = user_factory("admin")
    student = user_factory("student")
    opened = create_content(client, auth_headers(admin), video_payload(title="Opened"))
    create_content(client, auth_headers(admin), video_payload(title="Untouched"))

    api_call(client, "POST", "/progress/open", headers=auth_headers(student), json={"contentId": opened["id"]})

    items = api_call(client, "GET", "/content", headers=auth_headers(student)).json()["data"]["items"]
    by_title = {item["title"]: item for item in items}
    assert by_title["Opened"]["progress"]["status"] == "in_progress"
    assert by_title["Untouched"]["progress"] is None


def test_listing_filters_and_pagination(client: TestClient, token_for_role):
    headers = {"Authorization": f"Bearer {token_for_role('admin')}"}
    for chapter_id in (1, 1, 2):
        create_content(client, headers, video_payload(chapter_id=chapter_id))

    data = api_call(client, "GET", "/content?chapter_id=1&size=1&page=2", headers=headers).json()["data"]
    assert data["total"] == 2
    assert data["pages"] == 2
    assert len(data["items"]) == 1
    assert data["has_previous"] is True
    assert data["has_next"] is False

    response = client.get("/content?size=1000", headers=headers)
    assert_error(response, 422, "VALIDATION_ERROR")


def test_teacher_dashboard_lists_own_uploads(client: TestClient, user_factory, auth_headers):
    admin = user_factory("admin")
    teacher = user_factory("teacher")
    other = user_factory("teacher")
    create_content(client, auth_headers(teacher), video_payload(title="Mine"))
    theirs = create_content(client, auth_headers(other), video_payload(title="Theirs"))
    approve(client, auth_headers(admin), theirs["id"])

    data = api_call(client, "GET", "/teacher/content", headers=auth_headers(teacher)).json()["data"]
    assert [item["title"] for item in data["items"]] == ["Mine"]

    data = api_call(client, "GET", f"/teacher/content?uploader_id={other.id}", headers=auth_headers(teacher)).json()["data"]
    assert [item["title"] for item in data["items"]] == ["Mine"]

    data = api_call(client, "GET", f"/teacher/content?uploader_id={other.id}", headers=auth_headers(admin)).json()["data"]
    assert [item["title"] for item in data["items"]] == ["Theirs"]

    student_headers = auth_headers(user_factory("student"))
    assert_error(client.get("/teacher/content", headers=student_headers), 403, "FORBIDDEN")
