from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

FIRST_SLOT = "08:30-09:20"


def create_faculty(client, name, code, links):
    response = client.post(
        "/api/faculty/",
        json={
            "name": name,
            "faculty_code": code,
            "department": "CSE",
            "course_handled": [
                {"course_code": course_code, "role": role, "batch": batch} for course_code, role, batch in links
            ],
        },
    )
    assert response.status_code == 201
    return response.json()


def schedule_payload(**overrides):
    payload = {
        "semester": "5",
        "studentType": "UG",
        "batches": ["A"],
        "courses": [
            {"code": "CS301", "name": "Compilers", "credits": 3, "category": "Theory", "batch": "A"},
        ],
    }
    payload.update(overrides)
    return payload


def test_auto_schedule_places_and_stores_timetable(client):
    create_faculty(client, "Dr. Rao", "F101", [("CS301", "Theory Teacher", "A")])

    response = client.post("/api/timetable/auto-schedule", json=schedule_payload())
    assert response.status_code == 200
    body = response.json()
    assert body["persisted"] is True
    assert body["unscheduled"] == []
    assert body["diagnostics"]["placed_sessions"] == 3
    assert body["diagnostics"]["phases"] == ["first_hour", "labs", "theory", "free_day", "balance"]

    grid = body["timetable"]["A"]
    first = grid["Monday"][FIRST_SLOT]
    assert first["code"] == "CS301"
    assert first["name"] == "Compilers"
    assert first["faculty"] == "Dr. Rao"
    assert first["slotType"] == "FirstHour"
    assert grid["Tuesday"][FIRST_SLOT]["slotType"] == "Theory"
    assert grid["Thursday"][FIRST_SLOT] is None

    stored = client.get("/api/timetable/batch", params={"type": "UG", "batch": "A", "semester": "5"})
    assert stored.status_code == 200
    assert stored.json()["timetable"]["Monday"][FIRST_SLOT]["code"] == "CS301"


def test_auto_schedule_reports_unassigned_and_unscheduled(client):
    courses = [
        {"code": f"CSL{index}", "credits": 2, "category": "Lab", "batch": batch}
        for index, batch in enumerate(["A", "B", "C", "D", "E", "F"])
    ]
    create_faculty(
        client,
        "Dr. Menon",
        "F103",
        [(course["code"], "Lab Incharge", course["batch"]) for course in courses],
    )

    response = client.post(
        "/api/timetable/auto-schedule",
        json=schedule_payload(
            batches=["A", "B", "C", "D", "E", "F"],
            courses=courses + [{"code": "HS101", "credits": 1, "category": "theory", "batch": "A"}],
            persist=False,
            options={"phases": ["labs", "theory"]},
        ),
    )
    assert response.status_code == 200
    body = response.json()
    assert body["persisted"] is False
    assert body["unscheduled"] == [
        {
            "code": "CSL5",
            "faculty": "Dr. Menon",
            "semester": "5",
            "batch": "F",
            "reason": "Lab/Lab-Integrated block could not be scheduled as a single continuous block",
        }
    ]
    assert body["timetable"]["A"]["Monday"]["10:30-11:20"]["faculty"] == "Unassigned"
    assert client.get("/api/timetable").json() == []


def test_auto_schedule_reports_forced_free_days(client):
    batches = ["A", "B", "C", "D", "E"]
    create_faculty(client, "Dr. Menon", "F103", [(f"CSL{index}", "Lab Incharge", batch) for index, batch in enumerate(batches)])

    response = client.post(
        "/api/timetable/auto-schedule",
        json=schedule_payload(
            batches=batches,
            courses=[
                {"code": f"CSL{index}", "credits": 2, "category": "Lab", "batch": batch}
                for index, batch in enumerate(batches)
            ],
            persist=False,
        ),
    )
    assert response.status_code == 200
    body = response.json()
    assert body["diagnostics"]["forced_clears"] == [{"faculty": "Dr. Menon", "day": "Monday", "cleared_cells": 2}]
    assert all(cell is None for cell in body["timetable"]["A"]["Monday"].values())
    assert body["unscheduled"] == []


def test_auto_schedule_rejects_invalid_requests(client):
    bad_category = schedule_payload(courses=[{"code": "CS301", "credits": 3, "category": "Seminar", "batch": "A"}])
    assert client.post("/api/timetable/auto-schedule", json=bad_category).status_code == 422

    assert client.post("/api/timetable/auto-schedule", json=schedule_payload(batches=[])).status_code == 422
    assert client.post("/api/timetable/auto-schedule", json=schedule_payload(batches=[" "])).status_code == 422

    bad_phase = schedule_payload(options={"phases": ["labs", "shuffle"]})
    assert client.post("/api/timetable/auto-schedule", json=bad_phase).status_code == 422


def test_auto_schedule_keeps_batches_stored_before_a_failed_commit(client, monkeypatch):
    real_commit = Session.commit
    calls = {"count": 0}

    def commit_failing_on_second_batch(self):
        calls["count"] += 1
        if calls["count"] == 2:
            raise OperationalError("INSERT INTO batch_timetables", {}, Exception("database is locked"))
        return real_commit(self)

    monkeypatch.setattr(Session, "commit", commit_failing_on_second_batch)

    response = client.post(
        "/api/timetable/auto-schedule",
        json=schedule_payload(
            batches=["A", "B"],
            courses=[
                {"code": "HS101", "credits": 1, "category": "Theory", "batch": "A"},
                {"code": "HS101", "credits": 1, "category": "Theory", "batch": "B"},
            ],
        ),
    )
    assert response.status_code == 500
    body = response.json()
    assert body["message"] == "Failed to store timetable for semester 5 batch B"
    assert body["details"]["semester"] == "5"
    assert body["details"]["batch"] == "B"
    assert "database is locked" in body["details"]["reason"]

    stored_a = client.get("/api/timetable/batch", params={"type": "UG", "batch": "A", "semester": "5"})
    assert stored_a.status_code == 200
    assert stored_a.json()["timetable"]["Monday"][FIRST_SLOT]["code"] == "HS101"
    missing_b = client.get("/api/timetable/batch", params={"type": "UG", "batch": "B", "semester": "5"})
    assert missing_b.status_code == 404


def test_fallback_faculty_follows_directory_insertion_order(client):
    create_faculty(client, "Dr. Zed", "F900", [("CS301", "Theory Teacher", "X")])
    create_faculty(client, "Dr. Amy", "F100", [("CS301", "Theory Teacher", "X")])

    assert [item["faculty_code"] for item in client.get("/api/faculty/").json()] == ["F900", "F100"]

    response = client.post("/api/timetable/auto-schedule", json=schedule_payload(persist=False))
    assert response.status_code == 200
    assert response.json()["timetable"]["A"]["Monday"][FIRST_SLOT]["faculty"] == "Dr. Zed"


def test_save_timetables_upserts_by_semester_and_batch(client):
    cell = {"code": "CS301", "faculty": "Dr. Rao", "type": "Theory", "slotType": "Theory"}
    payload = [{"semester": "5", "batch": "B", "timetable": {"Monday": {FIRST_SLOT: cell}}}]

    first = client.post("/api/timetable", json=payload)
    assert first.status_code == 200
    saved = first.json()[0]
    assert saved["timetable"]["Monday"][FIRST_SLOT]["code"] == "CS301"

    payload[0]["timetable"] = {"Tuesday": {FIRST_SLOT: cell}}
    second = client.post("/api/timetable", json=payload)
    assert second.status_code == 200
    assert second.json()[0]["id"] == saved["id"]
    assert "Monday" not in second.json()[0]["timetable"]

    listing = client.get("/api/timetable").json()
    assert len(listing) == 1


def test_save_timetables_validates_payload(client):
    assert client.post("/api/timetable", json=[]).status_code == 400

    bad_day = [{"semester": "5", "batch": "B", "timetable": {"Sunday": {}}}]
    assert client.post("/api/timetable", json=bad_day).status_code == 422

    bad_slot = [{"semester": "5", "batch": "B", "timetable": {"Monday": {"07:00-08:00": None}}}]
    assert client.post("/api/timetable", json=bad_slot).status_code == 422


def test_batch_lookup_rules(client):
    client.post(
        "/api/timetable",
        json=[
            {"semester": "1", "batch": "PG-B", "timetable": {}},
            {"semester": "1", "batch": "PG-A", "timetable": {}},
        ],
    )

    assert client.get("/api/timetable/batch").status_code == 400
    assert client.get("/api/timetable/batch", params={"type": "UG", "semester": "1"}).status_code == 400
    assert client.get("/api/timetable/batch", params={"type": "PG"}).status_code == 400
    assert client.get("/api/timetable/batch", params={"type": "UG", "batch": "A", "semester": "9"}).status_code == 404

    pg = client.get("/api/timetable/batch", params={"type": "PG", "semester": "1"})
    assert pg.status_code == 200
    assert pg.json()["batch"] == "PG-A"


def test_faculty_timetable_and_overview(client):
    create_faculty(client, "Dr. Rao", "F101", [("CS301", "Theory Teacher", "A"), ("CS301", "Theory Teacher", "B")])
    client.post(
        "/api/timetable/auto-schedule",
        json=schedule_payload(
            batches=["A", "B"],
            courses=[
                {"code": "CS301", "credits": 2, "category": "Theory", "batch": "A"},
                {"code": "CS301", "credits": 2, "category": "Theory", "batch": "B"},
            ],
        ),
    )

    view = client.get("/api/timetable/faculty", params={"name": "  dr. RAO "})
    assert view.status_code == 200
    monday = view.json()["timetable"]["Monday"]
    assert monday[FIRST_SLOT]["batch"] == "A"
    assert monday[FIRST_SLOT]["day"] == "Monday"
    assert monday[FIRST_SLOT]["slot"] == FIRST_SLOT

    overview = client.get("/api/timetable/faculty/overview", params={"name": "Dr. Rao"})
    assert overview.status_code == 200
    assert overview.json() == {"totalHours": 4, "classesHandled": 1}

    assert client.get("/api/timetable/faculty", params={"name": " "}).status_code == 400
    assert client.get("/api/timetable/faculty/overview").status_code == 400


def test_stored_timetable_by_id(client):
    cell = {"code": "CS301", "faculty": "Dr. Rao", "type": "Theory", "slotType": "Theory"}
    saved = client.post(
        "/api/timetable",
        json=[
            {"semester": "5", "batch": "A", "timetable": {"Monday": {FIRST_SLOT: cell}}},
            {"semester": "5", "batch": "B", "timetable": {}},
        ],
    ).json()
    record_id = saved[0]["id"]

    fetched = client.get(f"/api/timetable/{record_id}")
    assert fetched.status_code == 200
    assert fetched.json()["batch"] == "A"

    updated = client.put(f"/api/timetable/{record_id}", json={"timetable": {"Friday": {FIRST_SLOT: cell}}})
    assert updated.status_code == 200
    assert list(updated.json()["timetable"]) == ["Friday"]
    assert updated.json()["semester"] == "5"

    assert client.put(f"/api/timetable/{record_id}", json={"batch": "B"}).status_code == 409
    assert client.put(f"/api/timetable/{record_id}", json={"timetable": {"Sunday": {}}}).status_code == 422

    deleted = client.delete(f"/api/timetable/{record_id}")
    assert deleted.status_code == 200
    assert deleted.json() == {"success": True}
    assert [item["batch"] for item in client.get("/api/timetable").json()] == ["B"]


def test_unknown_timetable_id(client):
    missing = client.get("/api/timetable/missing")
    assert missing.status_code == 404
    assert missing.json() == {"message": "Timetable with id missing not found", "details": {}}
    assert client.put("/api/timetable/missing", json={"batch": "A"}).status_code == 404
    assert client.delete("/api/timetable/missing").status_code == 404
