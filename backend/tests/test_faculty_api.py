def faculty_payload(**overrides):
    payload = {
        "name": "Dr. Rao",
        "faculty_code": "F101",
        "department": "CSE",
        "designation": "Associate Professor",
        "course_handled": [
            {"course_code": "CS301", "role": "Theory Teacher", "batch": "A"},
            {"course_code": "CSL33", "role": "Lab Incharge", "batch": "B"},
        ],
    }
    payload.update(overrides)
    return payload


def test_create_and_list_faculty(client):
    response = client.post("/api/faculty/", json=faculty_payload())
    assert response.status_code == 201
    created = response.json()
    assert created["id"]
    assert created["course_handled"][1] == {"course_code": "CSL33", "role": "Lab Incharge", "batch": "B"}

    listing = client.get("/api/faculty/")
    assert listing.status_code == 200
    assert [item["faculty_code"] for item in listing.json()] == ["F101"]


def test_duplicate_faculty_code_is_rejected(client):
    assert client.post("/api/faculty/", json=faculty_payload()).status_code == 201

    response = client.post("/api/faculty/", json=faculty_payload(name="Dr. Someone Else"))
    assert response.status_code == 409


def test_course_handled_entries_are_validated(client):
    bad_role = faculty_payload(course_handled=[{"course_code": "CS301", "role": "Dean", "batch": "A"}])
    assert client.post("/api/faculty/", json=bad_role).status_code == 422

    blank_batch = faculty_payload(course_handled=[{"course_code": "CS301", "role": "Theory Teacher", "batch": "  "}])
    assert client.post("/api/faculty/", json=blank_batch).status_code == 422


def test_update_faculty_course_links(client):
    created = client.post("/api/faculty/", json=faculty_payload()).json()

    response = client.put(
        f"/api/faculty/{created['id']}",
        json={"course_handled": [{"course_code": " CS305 ", "role": "Lab Assistant", "batch": "C"}]},
    )
    assert response.status_code == 200
    updated = response.json()
    assert updated["name"] == "Dr. Rao"
    assert updated["course_handled"] == [{"course_code": "CS305", "role": "Lab Assistant", "batch": "C"}]


def test_update_rejects_code_owned_by_another_member(client):
    client.post("/api/faculty/", json=faculty_payload())
    other = client.post("/api/faculty/", json=faculty_payload(name="Dr. Iyer", faculty_code="F102")).json()

    response = client.put(f"/api/faculty/{other['id']}", json={"faculty_code": "F101"})
    assert response.status_code == 409


def test_update_and_delete_unknown_faculty(client):
    assert client.put("/api/faculty/missing", json={"name": "Nobody"}).status_code == 404
    assert client.delete("/api/faculty/missing").status_code == 404


def test_delete_faculty(client):
    created = client.post("/api/faculty/", json=faculty_payload()).json()

    response = client.delete(f"/api/faculty/{created['id']}")
    assert response.status_code == 200
    assert response.json() == {"success": True}
    assert client.get("/api/faculty/").json() == []


def test_unknown_faculty_error_body(client):
    response = client.delete("/api/faculty/missing")
    assert response.json() == {"message": "Faculty with id missing not found", "details": {}}
