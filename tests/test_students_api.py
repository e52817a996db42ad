# tests/test_students_api.py
import math

import pytest

pytestmark = pytest.mark.anyio


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------

async def test_create_then_get_returns_marks(client, student_payload):
    r = await client.post("/students", json=student_payload)
    assert r.status_code == 201
    body = r.json()
    assert body["success"] is True
    student = body["student"]
    assert isinstance(student["id"], int)
    assert "marks" not in student

    r = await client.get(f"/students/{student['id']}")
    assert r.status_code == 200
    fetched = r.json()["student"]
    assert fetched["first_name"] == "Ann"
    assert fetched["last_name"] == "Lee"
    assert fetched["email"] == "a@x.com"
    assert len(fetched["marks"]) == 1
    mark = fetched["marks"][0]
    assert {k: mark[k] for k in ("subject", "marks", "term")} == {"subject": "Math", "marks": 90, "term": "Final"}
    assert isinstance(mark["id"], int)


async def test_create_normalizes_dob(client, make_student):
    student = await make_student(dob="2001-05-10")
    assert student["dob"].startswith("2001-05-10T00:00:00")
    assert student["created_at"] is not None
    assert student["updated_at"] is not None


async def test_create_with_many_marks_round_trips(client, make_student):
    marks = [
        {"subject": "Math", "marks": 90, "term": "Final"},
        {"subject": "Physics", "marks": 0, "term": "Midterm"},
        {"subject": "Art", "marks": 100},
    ]
    student = await make_student(marks=marks)

    r = await client.get(f"/students/{student['id']}")
    got = [{k: m[k] for k in ("subject", "marks", "term")} for m in r.json()["student"]["marks"]]
    assert got == [
        {"subject": "Math", "marks": 90, "term": "Final"},
        {"subject": "Physics", "marks": 0, "term": "Midterm"},
        {"subject": "Art", "marks": 100, "term": None},
    ]


async def test_create_without_marks_has_empty_marks(client, make_student):
    student = await make_student(marks=None)
    r = await client.get(f"/students/{student['id']}")
    assert r.json()["student"]["marks"] == []


async def test_create_ids_strictly_increase(make_student):
    ids = [(await make_student(email=f"s{i}@x.com"))["id"] for i in range(5)]
    assert ids == sorted(ids)
    assert len(set(ids)) == len(ids)


async def test_create_with_bad_dob_is_rejected_and_persists_nothing(client, student_payload):
    student_payload["dob"] = "not-a-date"
    r = await client.post("/students", json=student_payload)
    assert r.status_code == 400
    assert r.json() == {"success": False, "error": "Invalid date format. Please use YYYY-MM-DD"}

    r = await client.get("/students")
    assert r.json()["meta"]["total"] == 0


async def test_create_without_dob_is_rejected(client):
    r = await client.post("/students", json={"first_name": "Ann", "email": "a@x.com"})
    assert r.status_code == 400
    assert r.json()["success"] is False


@pytest.mark.parametrize("bad_mark,field", [
    ({"marks": 90, "term": "Final"}, "subject"),
    ({"subject": "  ", "marks": 90}, "subject"),
    ({"subject": "Math", "marks": "ninety"}, "marks"),
    ({"subject": "Math"}, "marks"),
    ({"subject": "Math", "marks": "90"}, "marks"),
    ({"subject": "Math", "marks": True}, "marks"),
    ({"subject": "Math", "marks": 90.5}, "marks"),
    ({"subject": "Math", "marks": 90.0}, "marks"),
])
async def test_create_with_malformed_mark_is_rejected(client, student_payload, bad_mark, field):
    student_payload["marks"].append(bad_mark)
    r = await client.post("/students", json=student_payload)
    assert r.status_code == 400
    body = r.json()
    assert body["success"] is False
    assert f"marks.1.{field}" in body["error"]

    r = await client.get("/students")
    assert r.json()["meta"]["total"] == 0


async def test_create_missing_required_fields(client):
    r = await client.post("/students", json={"last_name": "Lee", "dob": "2000-01-01"})
    assert r.status_code == 400
    error = r.json()["error"]
    assert "first_name" in error
    assert "email" in error


# ---------------------------------------------------------------------------
# List
# ---------------------------------------------------------------------------

async def test_list_is_paginated_newest_first(client, make_student):
    created = [(await make_student(first_name=f"S{i}"))["id"] for i in range(12)]

    r = await client.get("/students", params={"page": 1, "limit": 5})
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["meta"] == {"total": 12, "page": 1, "limit": 5, "totalPages": 3}
    assert [s["id"] for s in body["data"]] == list(reversed(created))[:5]
    assert "marks" not in body["data"][0]

    r = await client.get("/students", params={"page": 3, "limit": 5})
    assert [s["id"] for s in r.json()["data"]] == list(reversed(created))[10:]


async def test_list_defaults(client, make_student):
    for i in range(3):
        await make_student()
    r = await client.get("/students")
    assert r.json()["meta"] == {"total": 3, "page": 1, "limit": 10, "totalPages": 1}


async def test_list_empty_store(client):
    r = await client.get("/students")
    assert r.status_code == 200
    assert r.json() == {
        "success": True,
        "meta": {"total": 0, "page": 1, "limit": 10, "totalPages": 0},
        "data": [],
    }


async def test_list_page_past_end_is_empty_not_error(client, make_student):
    for _ in range(3):
        await make_student()
    r = await client.get("/students", params={"page": 9, "limit": 2})
    assert r.status_code == 200
    body = r.json()
    assert body["data"] == []
    assert body["meta"] == {"total": 3, "page": 9, "limit": 2, "totalPages": 2}


async def test_list_limit_capped_and_page_floored(client, make_student):
    await make_student()
    r = await client.get("/students", params={"page": -4, "limit": 1000})
    assert r.json()["meta"]["page"] == 1
    assert r.json()["meta"]["limit"] == 100


@pytest.mark.parametrize("limit", [1, 2, 3, 7, 100])
async def test_list_meta_is_consistent(client, make_student, limit):
    for _ in range(7):
        await make_student()
    for page in range(1, 5):
        body = (await client.get("/students", params={"page": page, "limit": limit})).json()
        meta = body["meta"]
        assert len(body["data"]) <= limit
        assert meta["totalPages"] == math.ceil(meta["total"] / meta["limit"])


async def test_list_is_stable(client, make_student):
    for _ in range(4):
        await make_student()
    first = (await client.get("/students", params={"limit": 3})).json()
    second = (await client.get("/students", params={"limit": 3})).json()
    assert first == second


# ---------------------------------------------------------------------------
# Get
# ---------------------------------------------------------------------------

async def test_get_unknown_is_404(client):
    r = await client.get("/students/999999")
    assert r.status_code == 404
    assert r.json() == {"success": False, "message": "Not found"}


async def test_get_non_integer_id_is_400(client):
    r = await client.get("/students/abc")
    assert r.status_code == 400
    assert r.json()["success"] is False


# ---------------------------------------------------------------------------
# Update
# ---------------------------------------------------------------------------

async def test_update_replaces_fields_and_keeps_marks(client, student_payload):
    student = (await client.post("/students", json=student_payload)).json()["student"]

    r = await client.put(f"/students/{student['id']}", json={
        "first_name": "Anna",
        "last_name": None,
        "email": "anna@x.com",
        "dob": "1999-12-31",
    })
    assert r.status_code == 200
    updated = r.json()["student"]
    assert updated["id"] == student["id"]
    assert updated["first_name"] == "Anna"
    assert updated["last_name"] is None
    assert updated["email"] == "anna@x.com"
    assert updated["dob"].startswith("1999-12-31T00:00:00")

    fetched = (await client.get(f"/students/{student['id']}")).json()["student"]
    assert fetched["first_name"] == "Anna"
    assert len(fetched["marks"]) == 1


async def test_update_twice_is_idempotent(client, make_student):
    student = await make_student()
    payload = {"first_name": "Same", "last_name": "Person", "email": "same@x.com", "dob": "2002-02-02"}

    first = (await client.put(f"/students/{student['id']}", json=payload)).json()["student"]
    second = (await client.put(f"/students/{student['id']}", json=payload)).json()["student"]

    fields = ("id", "first_name", "last_name", "email", "dob", "created_at")
    assert {k: first[k] for k in fields} == {k: second[k] for k in fields}


async def test_update_unknown_is_404(client):
    r = await client.put("/students/424242", json={"first_name": "A", "email": "a@x.com", "dob": "2000-01-01"})
    assert r.status_code == 404
    assert r.json() == {"success": False, "message": "Student not found"}


async def test_update_unknown_with_bad_dob_is_404(client):
    r = await client.put("/students/4242", json={"first_name": "A", "email": "a@x.com", "dob": "bad"})
    assert r.status_code == 404
    assert r.json() == {"success": False, "message": "Student not found"}


async def test_update_with_bad_dob_is_400_and_leaves_row(client, make_student):
    student = await make_student(first_name="Keep")
    r = await client.put(f"/students/{student['id']}", json={
        "first_name": "Changed", "email": "c@x.com", "dob": "31/12/1999",
    })
    assert r.status_code == 400
    fetched = (await client.get(f"/students/{student['id']}")).json()["student"]
    assert fetched["first_name"] == "Keep"


# ---------------------------------------------------------------------------
# Delete
# ---------------------------------------------------------------------------

async def test_delete_then_get_is_404(client, student_payload):
    student = (await client.post("/students", json=student_payload)).json()["student"]

    r = await client.delete(f"/students/{student['id']}")
    assert r.status_code == 200
    assert r.json() == {"success": True, "message": "Deleted"}

    r = await client.get(f"/students/{student['id']}")
    assert r.status_code == 404


async def test_delete_twice_is_404_second_time(client, make_student):
    student = await make_student()
    assert (await client.delete(f"/students/{student['id']}")).status_code == 200

    r = await client.delete(f"/students/{student['id']}")
    assert r.status_code == 404
    assert r.json() == {"success": False, "message": "Student not found"}


async def test_delete_only_removes_target(client, make_student):
    keep = await make_student(first_name="Keep")
    drop = await make_student(first_name="Drop")
    await client.delete(f"/students/{drop['id']}")

    body = (await client.get("/students")).json()
    assert [s["id"] for s in body["data"]] == [keep["id"]]
    assert body["meta"]["total"] == 1
