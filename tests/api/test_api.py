from __future__ import annotations

from attendance_insights.core.exceptions import StorageError

from conftest import ADMIN, STUDENT, weekday_timetable


def _setup(client):
    body = {
        "semesterId": "S1",
        "subjects": [{"id": "MATH", "name": "Maths"}, {"id": "PHY"}],
        "timetable": weekday_timetable("MATH", "PHY", periods_per_day=2).to_document(),
    }
    return client.post("/api/attendance/setup", json=body, headers=STUDENT)


def test_missing_identity_is_401(client):
    resp = client.get("/api/timetable/S1")

    assert resp.status_code == 401
    assert resp.get_json() == {"ok": False, "message": "Unauthorized"}


def test_setup_then_read_timetable_and_subjects(client):
    assert _setup(client).status_code == 201

    timetable = client.get("/api/timetable/S1", headers=STUDENT).get_json()["data"]["timetable"]
    subjects = client.get("/api/subjects/S1", headers=STUDENT).get_json()["data"]["subjects"]

    assert timetable["mon"]["periods"][1] == {"index": 1, "subjectId": "PHY"}
    assert [s["id"] for s in subjects] == ["MATH", "PHY"]


def test_malformed_timetable_is_400(client):
    resp = client.post("/api/timetable/S1", json={"mon": {"periods": [{"subjectId": "A"}]}}, headers=STUDENT)

    assert resp.status_code == 400
    assert resp.get_json()["ok"] is False


def test_effective_subject_and_day(client):
    _setup(client)

    slot = client.get(
        "/api/attendance/effective-subject?semesterId=S1&date=2024-01-01&periodIndex=1", headers=STUDENT
    ).get_json()["data"]
    day = client.get("/api/attendance/day?semesterId=S1&date=2024-01-07", headers=STUDENT).get_json()["data"]

    assert slot["subjectId"] == "PHY" and slot["cancelled"] is False and slot["kind"] == "scheduled"
    assert [s["source"] for s in day["slots"]] == ["sunday", "sunday"]


def test_bad_date_and_period_are_400(client):
    bad_date = client.get("/api/attendance/effective-subject?semesterId=S1&date=2024-13-01&periodIndex=0", headers=STUDENT)
    bad_period = client.get("/api/attendance/effective-subject?semesterId=S1&date=2024-01-01&periodIndex=-2", headers=STUDENT)

    assert bad_date.status_code == 400
    assert bad_period.status_code == 400


def test_holidays_need_admin(client):
    body = {"date": "2024-01-01", "isHoliday": True, "reason": "New Year"}

    assert client.post("/api/holidays", json=body, headers=STUDENT).status_code == 403
    assert client.post("/api/holidays", json=body, headers=ADMIN).status_code == 200

    listed = client.get("/api/holidays?start=2024-01-01&end=2024-01-31", headers=STUDENT).get_json()["data"]
    assert listed["holidays"] == [body]


def test_mark_records_and_insights(client):
    _setup(client)
    client.post(
        "/api/class-changes",
        json={"date": "2024-01-03", "overrides": [{"periodIndex": 1, "cancelled": True}]},
        headers=ADMIN,
    )
    for d in ("2024-01-01", "2024-01-02", "2024-01-03"):
        resp = client.post(
            "/api/attendance/mark",
            json={"semesterId": "S1", "date": d, "periodIndex": 0, "status": "present"},
            headers=STUDENT,
        )
        assert resp.status_code == 200

    refused = client.post(
        "/api/attendance/mark",
        json={"semesterId": "S1", "date": "2024-01-03", "periodIndex": 1, "status": "present"},
        headers=STUDENT,
    )
    records = client.get("/api/attendance/records", headers=STUDENT).get_json()["data"]["records"]
    insights = client.get(
        "/api/attendance/insights?semesterId=S1&start=2024-01-01&end=2024-01-05&minRequiredPercent=60",
        headers=STUDENT,
    ).get_json()["data"]

    assert refused.status_code == 400
    assert [r["date"] for r in records] == ["2024-01-03", "2024-01-02", "2024-01-01"]
    by_subject = {s["subjectId"]: s for s in insights["bySubject"]}
    assert by_subject["MATH"]["held"] == 5 and by_subject["MATH"]["present"] == 3
    assert by_subject["PHY"]["held"] == 4 and by_subject["PHY"]["present"] == 0
    assert insights["minRequiredPercent"] == 60.0
    assert insights["totalHeld"] == 9


def test_insights_without_timetable_is_empty_200(client):
    resp = client.get("/api/attendance/insights?semesterId=S9", headers=STUDENT)

    assert resp.status_code == 200
    assert resp.get_json()["data"]["totalHeld"] == 0


def test_non_finite_threshold_is_400(client):
    _setup(client)

    for raw in ("nan", "inf", "-inf"):
        resp = client.get(f"/api/attendance/insights?semesterId=S1&minRequiredPercent={raw}", headers=STUDENT)

        assert resp.status_code == 400
        assert resp.get_json()["ok"] is False


def test_bulk_absence(client):
    _setup(client)

    data = client.post(
        "/api/attendance/bulk-absence",
        json={"semesterId": "S1", "start": "2024-01-01", "end": "2024-01-02", "periods": [0]},
        headers=STUDENT,
    ).get_json()["data"]

    assert [(m["date"], m["subjectId"], m["status"]) for m in data["marked"]] == [
        ("2024-01-01", "MATH", "absent"),
        ("2024-01-02", "MATH", "absent"),
    ]


def test_user_class_changes(client):
    change = {"date": "2024-01-01", "overrides": [{"periodIndex": 0, "subjectId": "BIO"}]}

    assert client.post("/api/user-class-changes", json=change, headers=STUDENT).status_code == 200
    got = client.get("/api/user-class-changes?date=2024-01-01", headers=STUDENT).get_json()["data"]["change"]
    assert got == change

    assert client.delete("/api/user-class-changes?date=2024-01-01", headers=STUDENT).status_code == 200
    cleared = client.get("/api/user-class-changes?date=2024-01-01", headers=STUDENT).get_json()["data"]["change"]
    assert cleared["overrides"] == []


def test_templates_flow(client):
    template = {
        "branch": "CSE",
        "division": "A",
        "semester": "3",
        "periodsPerDay": 2,
        "subjects": [{"id": "MATH"}],
        "timetable": weekday_timetable("MATH", periods_per_day=2).to_document(),
    }

    assert client.post("/api/admin/templates", json=template, headers=STUDENT).status_code == 403
    stored = client.post("/api/admin/templates", json=template, headers=ADMIN).get_json()["data"]["template"]
    assert stored["id"] == "cse_a_3"
    assert stored["verifiedBy"] == "admin-1"

    found = client.get("/api/templates?branch=CSE&division=A&semester=3", headers=STUDENT).get_json()["data"]
    assert found["template"]["id"] == "cse_a_3"
    assert len(client.get("/api/templates", headers=STUDENT).get_json()["data"]["items"]) == 1

    applied = client.post("/api/templates/apply", json={"id": "cse_a_3", "semesterId": "S1"}, headers=STUDENT)
    assert applied.get_json()["data"]["id"] == "u1_S1"

    assert client.delete("/api/admin/templates?id=cse_a_3", headers=ADMIN).status_code == 200
    assert client.delete("/api/admin/templates?id=cse_a_3", headers=ADMIN).status_code == 404


def test_locked_timetable_is_403(client):
    locked = weekday_timetable("MATH", periods_per_day=1, locked=True).to_document()
    client.post("/api/timetable/S1", json=locked, headers=STUDENT)

    resp = client.post("/api/timetable/S1", json=weekday_timetable("PHY", periods_per_day=1).to_document(), headers=STUDENT)

    assert resp.status_code == 403


def test_storage_failure_is_503(client, container, monkeypatch):
    def _boom(*args, **kwargs):
        raise StorageError("database unavailable")

    monkeypatch.setattr(container.timetables_repo, "get_weekly_timetable", _boom)

    resp = client.get("/api/timetable/S1", headers=STUDENT)

    assert resp.status_code == 503
    assert resp.get_json() == {"ok": False, "message": "database unavailable"}


def test_unexpected_error_is_500(client, container, monkeypatch):
    def _boom(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(container.subjects_repo, "get_subjects", _boom)

    resp = client.get("/api/subjects/S1", headers=STUDENT)

    assert resp.status_code == 500
    assert resp.get_json()["message"] == "Internal server error"
