import pytest


@pytest.fixture
def post_announcement(client, teacher):
    _, headers = teacher

    def _post(group_id: str, message: str):
        response = client.post(
            "/api/announcements", json={"groupId": group_id, "message": message}, headers=headers
        )
        assert response.status_code == 201, response.text
        return response.json()
    return _post


def test_owner_posts_announcement(group, post_announcement, teacher):
    teacher_user, _ = teacher

    announcement = post_announcement(group["id"], "Quiz on Friday")

    assert announcement["message"] == "Quiz on Friday"
    assert announcement["groupId"] == group["id"]
    assert announcement["teacherId"] == teacher_user["id"]
    assert announcement["teacherName"] == "Terry Teacher"


def test_only_owner_posts(client, group, other_teacher, student):
    _, other_headers = other_teacher
    _, student_headers = student
    body = {"groupId": group["id"], "message": "Hello"}

    assert client.post("/api/announcements", json=body, headers=other_headers).status_code == 403
    assert client.post("/api/announcements", json=body, headers=student_headers).status_code == 403


def test_empty_message_rejected(client, group, teacher):
    _, headers = teacher

    response = client.post("/api/announcements", json={"groupId": group["id"], "message": "  "}, headers=headers)

    assert response.status_code == 400
    assert response.json() == {"message": "Message is required"}


def test_group_announcements_newest_first_with_read_flags(client, group, post_announcement, teacher, student):
    _, teacher_headers = teacher
    _, student_headers = student
    older = post_announcement(group["id"], "First")
    newer = post_announcement(group["id"], "Second")

    student_view = client.get(f"/api/announcements/{group['id']}", headers=student_headers).json()
    assert [a["id"] for a in student_view] == [newer["id"], older["id"]]
    assert all(a["isRead"] is False for a in student_view)

    teacher_view = client.get(f"/api/announcements/{group['id']}", headers=teacher_headers).json()
    assert all(a["isRead"] is None for a in teacher_view)


def test_non_member_cannot_read_announcements(client, group, post_announcement, outsider):
    _, headers = outsider
    post_announcement(group["id"], "Members only")

    assert client.get(f"/api/announcements/{group['id']}", headers=headers).status_code == 403


def test_mark_read_is_idempotent_and_updates_count(client, group, post_announcement, student, outsider):
    _, headers = student
    _, outsider_headers = outsider
    first = post_announcement(group["id"], "First")
    post_announcement(group["id"], "Second")

    assert client.get("/api/announcements/unread/count", headers=headers).json() == {"unreadCount": 2}

    for _ in range(2):
        response = client.post(f"/api/announcements/{first['id']}/read", headers=headers)
        assert response.status_code == 200
        assert response.json() == {"message": "Marked as read"}

    assert client.get("/api/announcements/unread/count", headers=headers).json() == {"unreadCount": 1}
    flags = {a["id"]: a["isRead"] for a in client.get(f"/api/announcements/{group['id']}", headers=headers).json()}
    assert flags[first["id"]] is True

    assert client.post(f"/api/announcements/{first['id']}/read", headers=outsider_headers).status_code == 403
    assert client.post("/api/announcements/missing/read", headers=headers).status_code == 404


def test_unread_count_is_zero_for_teachers(client, group, post_announcement, teacher):
    _, headers = teacher
    post_announcement(group["id"], "Hello")

    assert client.get("/api/announcements/unread/count", headers=headers).json() == {"unreadCount": 0}


def test_all_announcements_across_groups(client, group, post_announcement, teacher, student, outsider):
    _, teacher_headers = teacher
    _, student_headers = student
    _, outsider_headers = outsider
    second_group = client.post("/api/groups", json={"name": "Biology"}, headers=teacher_headers).json()
    post_announcement(group["id"], "Math news")
    post_announcement(second_group["id"], "Biology news")

    teacher_all = client.get("/api/announcements/all", headers=teacher_headers).json()
    assert {a["message"] for a in teacher_all} == {"Math news", "Biology news"}

    student_all = client.get("/api/announcements/all", headers=student_headers).json()
    assert [a["message"] for a in student_all] == ["Math news"]
    assert student_all[0]["groupName"] == "Math101"

    assert client.get("/api/announcements/all", headers=outsider_headers).json() == []


def test_delete_announcement(client, group, post_announcement, teacher, other_teacher, student):
    _, teacher_headers = teacher
    _, other_headers = other_teacher
    _, student_headers = student
    announcement = post_announcement(group["id"], "Oops")
    client.post(f"/api/announcements/{announcement['id']}/read", headers=student_headers)

    assert client.delete(f"/api/announcements/{announcement['id']}", headers=other_headers).status_code == 403
    assert client.delete(f"/api/announcements/{announcement['id']}", headers=student_headers).status_code == 403

    response = client.delete(f"/api/announcements/{announcement['id']}", headers=teacher_headers)
    assert response.status_code == 200
    assert response.json() == {"message": "Announcement deleted"}
    assert client.get(f"/api/announcements/{group['id']}", headers=student_headers).json() == []
