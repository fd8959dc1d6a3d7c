from classroom.utils.helpers import JOIN_CODE_ALPHABET, JOIN_CODE_LENGTH


def test_teacher_creates_group_with_join_code(client, teacher):
    user, headers = teacher

    response = client.post("/api/groups", json={"name": "Physics"}, headers=headers)

    assert response.status_code == 201
    body = response.json()
    assert body["name"] == "Physics"
    assert body["ownerId"] == user["id"]
    assert body["ownerName"] == "Terry Teacher"
    assert body["memberCount"] == 0
    assert len(body["joinCode"]) == JOIN_CODE_LENGTH
    assert set(body["joinCode"]) <= set(JOIN_CODE_ALPHABET)


def test_taken_join_code_is_regenerated(client, group, teacher, mocker):
    """A drawn code that already belongs to a group is replaced by a fresh one"""
    _, headers = teacher
    mocker.patch("classroom.crud.groups.generate_join_code", side_effect=[group["joinCode"], "ZZZZZ9"])

    response = client.post("/api/groups", json={"name": "Physics"}, headers=headers)

    assert response.status_code == 201
    assert response.json()["joinCode"] == "ZZZZZ9"


def test_join_code_insert_race_is_retried(client, group, teacher, mocker):
    """The unique index on join codes catches a collision the lookup missed"""
    _, headers = teacher
    mocker.patch("classroom.crud.groups.get_group_by_join_code", return_value=None)
    mocker.patch("classroom.crud.groups.generate_join_code", side_effect=[group["joinCode"], "ZZZZZ9"])

    response = client.post("/api/groups", json={"name": "Physics"}, headers=headers)

    assert response.status_code == 201
    assert response.json()["joinCode"] == "ZZZZZ9"
    codes = {g["joinCode"] for g in client.get("/api/groups", headers=headers).json()}
    assert codes == {group["joinCode"], "ZZZZZ9"}


def test_join_code_allocation_gives_up(client, group, teacher, mocker):
    _, headers = teacher
    mocker.patch("classroom.crud.groups.generate_join_code", return_value=group["joinCode"])

    response = client.post("/api/groups", json={"name": "Physics"}, headers=headers)

    assert response.status_code == 400
    assert response.json() == {"message": "Could not allocate a unique join code, please try again"}
    assert len(client.get("/api/groups", headers=headers).json()) == 1


def test_student_cannot_create_group(client, student):
    _, headers = student

    response = client.post("/api/groups", json={"name": "Physics"}, headers=headers)

    assert response.status_code == 403
    assert response.json() == {"message": "Teacher access required"}


def test_group_name_validation(client, teacher):
    _, headers = teacher

    response = client.post("/api/groups", json={"name": " "}, headers=headers)

    assert response.status_code == 400
    assert response.json() == {"message": "Group name must be at least 2 characters"}


def test_groups_are_scoped_to_owner_and_members(client, group, teacher, other_teacher, student, outsider):
    _, teacher_headers = teacher
    _, other_headers = other_teacher
    _, student_headers = student
    _, outsider_headers = outsider

    assert [g["id"] for g in client.get("/api/groups", headers=teacher_headers).json()] == [group["id"]]
    assert [g["id"] for g in client.get("/api/groups", headers=student_headers).json()] == [group["id"]]
    assert client.get("/api/groups", headers=other_headers).json() == []
    assert client.get("/api/groups", headers=outsider_headers).json() == []

    listed = client.get("/api/groups", headers=teacher_headers).json()[0]
    assert listed["memberCount"] == 1


def test_join_with_invalid_code_is_not_found(client, group, outsider):
    _, headers = outsider

    response = client.post("/api/groups/join", json={"joinCode": "ZZZZZZ"}, headers=headers)

    assert response.status_code == 404
    assert response.json() == {"message": "Invalid join code"}


def test_join_twice_conflicts(client, group, student):
    _, headers = student

    response = client.post("/api/groups/join", json={"joinCode": group["joinCode"]}, headers=headers)

    assert response.status_code == 400
    assert response.json() == {"message": "Already a member of this group"}


def test_concurrent_double_join_is_rejected(client, group, student, mocker):
    """The membership unique constraint rejects a join that slipped past the lookup"""
    _, headers = student
    mocker.patch("classroom.routers.groups.is_member_of_group", return_value=False)

    response = client.post("/api/groups/join", json={"joinCode": group["joinCode"]}, headers=headers)

    assert response.status_code == 400
    assert response.json() == {"message": "Already a member of this group"}
    members = client.get(f"/api/groups/{group['id']}/members", headers=headers).json()
    assert len(members) == 1


def test_join_code_is_case_insensitive(client, group, outsider):
    _, headers = outsider

    response = client.post("/api/groups/join", json={"joinCode": group["joinCode"].lower()}, headers=headers)

    assert response.status_code == 200
    assert response.json()["message"] == "Joined group successfully"
    assert response.json()["group"]["id"] == group["id"]


def test_teacher_cannot_join(client, group, other_teacher):
    _, headers = other_teacher

    response = client.post("/api/groups/join", json={"joinCode": group["joinCode"]}, headers=headers)

    assert response.status_code == 403


def test_leave_and_rejoin_with_same_code(client, group, student):
    """Leaving does not invalidate the join code"""
    _, headers = student

    left = client.post(f"/api/groups/{group['id']}/leave", headers=headers)
    assert left.status_code == 200
    assert left.json() == {"message": "Left group successfully"}
    assert client.get("/api/groups", headers=headers).json() == []

    rejoined = client.post("/api/groups/join", json={"joinCode": group["joinCode"]}, headers=headers)
    assert rejoined.status_code == 200
    assert [g["id"] for g in client.get("/api/groups", headers=headers).json()] == [group["id"]]


def test_leave_when_not_a_member(client, group, outsider):
    _, headers = outsider

    response = client.post(f"/api/groups/{group['id']}/leave", headers=headers)

    assert response.status_code == 400
    assert response.json() == {"message": "Not a member of this group"}


def test_group_detail_access(client, group, student, outsider):
    _, student_headers = student
    _, outsider_headers = outsider

    assert client.get(f"/api/groups/{group['id']}", headers=student_headers).status_code == 200
    assert client.get(f"/api/groups/{group['id']}", headers=outsider_headers).status_code == 403
    assert client.get("/api/groups/does-not-exist", headers=student_headers).status_code == 404


def test_members_listing(client, group, teacher, student, outsider):
    _, teacher_headers = teacher
    student_user, _ = student
    _, outsider_headers = outsider

    response = client.get(f"/api/groups/{group['id']}/members", headers=teacher_headers)

    assert response.status_code == 200
    members = response.json()
    assert [m["userId"] for m in members] == [student_user["id"]]
    assert members[0]["name"] == "Sam Student"
    assert members[0]["email"] == "student@example.com"
    assert client.get(f"/api/groups/{group['id']}/members", headers=outsider_headers).status_code == 403


def test_owner_removes_member(client, group, teacher, other_teacher, student):
    _, teacher_headers = teacher
    _, other_headers = other_teacher
    student_user, student_headers = student
    url = f"/api/groups/{group['id']}/members/{student_user['id']}"

    assert client.delete(url, headers=other_headers).status_code == 403

    response = client.delete(url, headers=teacher_headers)
    assert response.status_code == 200
    assert response.json() == {"message": "Student removed"}
    assert client.get(f"/api/groups/{group['id']}", headers=student_headers).status_code == 403

    assert client.delete(url, headers=teacher_headers).status_code == 404


def test_delete_group_is_owner_only_and_hides_it(client, group, teacher, other_teacher, student):
    _, teacher_headers = teacher
    _, other_headers = other_teacher
    _, student_headers = student

    assert client.delete(f"/api/groups/{group['id']}", headers=other_headers).status_code == 403
    assert client.delete(f"/api/groups/{group['id']}", headers=student_headers).status_code == 403

    response = client.delete(f"/api/groups/{group['id']}", headers=teacher_headers)
    assert response.status_code == 200
    assert response.json() == {"message": "Group deleted"}

    assert client.get(f"/api/groups/{group['id']}", headers=teacher_headers).status_code == 404
    assert client.get("/api/groups", headers=student_headers).json() == []

    # The code of a deleted group no longer admits anyone
    rejoin = client.post("/api/groups/join", json={"joinCode": group["joinCode"]}, headers=student_headers)
    assert rejoin.status_code == 404
