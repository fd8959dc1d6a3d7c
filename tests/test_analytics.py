import csv
from io import StringIO

from sqlalchemy.exc import OperationalError


def submit(client, task_id, headers, text="answer"):
    response = client.post(f"/api/tasks/{task_id}/submit", data={"textContent": text}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def read_csv(response):
    return list(csv.reader(StringIO(response.text)))


def test_csv_export_has_one_row_per_submission(client, group, create_task, teacher, student, register_user):
    _, teacher_headers = teacher
    _, student_headers = student
    _, second_headers = register_user("Bea Second", "bea@example.com", "student")
    client.post("/api/groups/join", json={"joinCode": group["joinCode"]}, headers=second_headers)
    task = create_task(group["id"], title="HW1")
    graded = submit(client, task["id"], student_headers)
    submit(client, task["id"], second_headers)
    client.patch(f"/api/submissions/{graded['id']}/score", json={"score": 88}, headers=teacher_headers)

    response = client.get(f"/api/analytics/export-csv?groupId={group['id']}", headers=teacher_headers)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert response.headers["content-disposition"] == 'attachment; filename="Math101-grades.csv"'
    rows = read_csv(response)
    assert rows[0] == ["Task", "Student Name", "Student Email", "Submitted At", "Score"]
    assert len(rows) == 3
    scores = {row[1]: row[4] for row in rows[1:]}
    assert scores == {"Sam Student": "88", "Bea Second": "Not Graded"}


def test_csv_export_path_form_matches_query_form(client, group, create_task, teacher, student):
    _, teacher_headers = teacher
    _, student_headers = student
    task = create_task(group["id"])
    submit(client, task["id"], student_headers)

    by_query = client.get(f"/api/analytics/export-csv?groupId={group['id']}", headers=teacher_headers)
    by_path = client.get(f"/api/analytics/export-csv/{group['id']}", headers=teacher_headers)

    assert by_path.status_code == 200
    assert by_path.text == by_query.text


def test_csv_export_requires_group_and_ownership(client, group, teacher, other_teacher, student):
    _, teacher_headers = teacher
    _, other_headers = other_teacher
    _, student_headers = student

    missing = client.get("/api/analytics/export-csv", headers=teacher_headers)
    assert missing.status_code == 400
    assert missing.json() == {"message": "Group ID is required"}

    assert client.get(f"/api/analytics/export-csv?groupId={group['id']}", headers=other_headers).status_code == 403
    assert client.get(f"/api/analytics/export-csv?groupId={group['id']}", headers=student_headers).status_code == 403


def test_teacher_analytics(client, group, create_task, teacher, student, register_user):
    _, teacher_headers = teacher
    _, student_headers = student
    _, second_headers = register_user("Bea Second", "bea@example.com", "student")
    client.post("/api/groups/join", json={"joinCode": group["joinCode"]}, headers=second_headers)
    first = create_task(group["id"], title="HW1")
    create_task(group["id"], title="HW2")
    a = submit(client, first["id"], student_headers)
    b = submit(client, first["id"], second_headers)
    client.patch(f"/api/submissions/{a['id']}/score", json={"score": 90}, headers=teacher_headers)
    client.patch(f"/api/submissions/{b['id']}/score", json={"score": 71}, headers=teacher_headers)

    analytics = client.get("/api/analytics", headers=teacher_headers).json()

    assert analytics["totalGroups"] == 1
    assert analytics["totalTasks"] == 2
    assert analytics["totalSubmissions"] == 2
    # 2 submissions out of 2 tasks x 2 students
    assert analytics["submissionRate"] == 50
    assert analytics["averageScore"] == 80  # round(80.5), banker's rounding
    assert analytics["groupStats"] == [{
        "groupId": group["id"],
        "groupName": "Math101",
        "taskCount": 2,
        "submissionCount": 2,
        "submissionRate": 50,
        "averageScore": 80,
    }]


def test_student_analytics(client, group, create_task, teacher, student):
    _, teacher_headers = teacher
    _, student_headers = student
    first = create_task(group["id"], title="HW1")
    create_task(group["id"], title="HW2")
    submission = submit(client, first["id"], student_headers)
    client.patch(f"/api/submissions/{submission['id']}/score", json={"score": 60}, headers=teacher_headers)

    analytics = client.get("/api/analytics", headers=student_headers).json()

    assert analytics["totalGroups"] == 1
    assert analytics["totalTasks"] == 2
    assert analytics["totalSubmissions"] == 1
    assert analytics["submissionRate"] == 50
    assert analytics["averageScore"] == 60
    assert analytics["groupStats"] == []


def test_stats_are_teacher_only(client, group, create_task, teacher, student, due_in):
    _, teacher_headers = teacher
    _, student_headers = student
    open_task = create_task(group["id"], title="Open", dueDate=due_in(days=2))
    create_task(group["id"], title="Closed", dueDate=due_in(days=-2))
    submit(client, open_task["id"], student_headers)

    stats = client.get("/api/stats", headers=teacher_headers).json()

    assert stats == {"pendingSubmissions": 1, "totalTasks": 2, "activeTasks": 1, "totalGroups": 1}
    assert client.get("/api/stats", headers=student_headers).status_code == 403


def test_unread_counts_by_role(client, group, create_task, teacher, student, due_in):
    _, teacher_headers = teacher
    _, student_headers = student
    first = create_task(group["id"], title="HW1", dueDate=due_in(days=2))
    create_task(group["id"], title="HW2", dueDate=due_in(days=3))
    create_task(group["id"], title="Old", dueDate=due_in(days=-1))

    assert client.get("/api/unread-counts", headers=student_headers).json() == {"unreadCount": 2}
    assert client.get("/api/unread-counts", headers=teacher_headers).json() == {"unreadCount": 0}

    submit(client, first["id"], student_headers)

    assert client.get("/api/unread-counts", headers=student_headers).json() == {"unreadCount": 1}
    assert client.get("/api/unread-counts", headers=teacher_headers).json() == {"unreadCount": 1}


def test_storage_failure_is_reported_as_500(client, teacher, mocker):
    _, headers = teacher
    mocker.patch(
        "classroom.routers.groups.get_groups_for_user",
        side_effect=OperationalError("SELECT 1", {}, Exception("database is locked")),
    )

    response = client.get("/api/groups", headers=headers)

    assert response.status_code == 500
    assert response.json() == {"message": "Storage unavailable"}
