"""HTTP surface: routing, response shapes and error-kind to status mapping."""

from datetime import datetime, timedelta

import pytest

from app.models import ExamDetail, Student
from app.services.validation import MAX_WHOLE_NUMBER

BASE = "/api/v1/students"


async def create(client, name):
    res = await client.post(f"{BASE}/", json={"name": name})
    assert res.status_code == 201
    return res.json()


async def test_health(client):
    res = await client.get("/health")
    assert res.status_code == 200
    assert res.json()["status"] == "healthy"


async def test_create_student(client):
    body = await create(client, " Ali ")

    assert body["name"] == "Ali"
    assert body["points"] == 0
    assert body["total"] == 0
    assert body["id"]


@pytest.mark.parametrize("payload", [{}, {"name": ""}, {"name": "   "}])
async def test_create_student_requires_name(client, payload):
    res = await client.post(f"{BASE}/", json=payload)
    assert res.status_code == 400


async def test_create_duplicate_returns_409(client):
    await create(client, "Ali")

    res = await client.post(f"{BASE}/", json={"name": "Ali"})

    assert res.status_code == 409
    assert res.json()["detail"] == "Student already exists"


async def test_exam_scenario(client):
    await create(client, "Ali")

    res = await client.post(f"{BASE}/name/Ali/details", json={"exam": "Math", "points": 8, "total": 10})
    assert res.status_code == 201
    math = res.json()["detail"]
    assert math["exam"] == "Math"

    res = await client.post(f"{BASE}/name/Ali/details", json={"exam": "Science", "points": 15, "total": 20})
    body = res.json()
    science = body["detail"]
    assert (body["points"], body["total"]) == (23, 30)

    res = await client.put(f"{BASE}/name/Ali/details/{math['id']}", json={"points": 10})
    assert res.status_code == 200
    body = res.json()
    assert (body["points"], body["total"]) == (25, 30)
    assert body["detail"]["id"] == math["id"]
    assert body["detail"]["createdAt"] == math["createdAt"]

    res = await client.delete(f"{BASE}/name/Ali/details/{science['id']}")
    assert res.status_code == 200
    body = res.json()
    assert (body["points"], body["total"]) == (10, 10)
    assert body["message"]


async def test_points_above_total_returns_400(client):
    await create(client, "Ali")
    await client.post(f"{BASE}/name/Ali/details", json={"exam": "Math", "points": 8, "total": 10})

    res = await client.post(f"{BASE}/name/Ali/details", json={"exam": "Physics", "points": 12, "total": 10})
    assert res.status_code == 400

    body = (await client.get(f"{BASE}/name/Ali")).json()
    assert (body["points"], body["total"]) == (8, 10)
    assert len(body["details"]) == 1


@pytest.mark.parametrize("payload", [
    {"points": 1, "total": 2},
    {"exam": "Math", "total": 2},
    {"exam": "Math", "points": 1},
    {"exam": "Math", "points": "many", "total": 2},
    {"exam": "Math", "points": 1, "total": 0},
])
async def test_add_detail_validation(client, payload):
    await create(client, "Ali")

    res = await client.post(f"{BASE}/name/Ali/details", json=payload)

    assert res.status_code == 400


async def test_update_detail_checks_merged_values(client):
    await create(client, "Ali")
    detail = (await client.post(
        f"{BASE}/name/Ali/details", json={"exam": "Math", "points": 8, "total": 10}
    )).json()["detail"]

    res = await client.put(f"{BASE}/name/Ali/details/{detail['id']}", json={"total": 5})

    assert res.status_code == 400


async def test_missing_records_return_404(client):
    assert (await client.get(f"{BASE}/name/Nobody")).status_code == 404
    assert (await client.get(f"{BASE}/missing")).status_code == 404
    assert (await client.put(f"{BASE}/missing", json={"name": "X"})).status_code == 404
    assert (await client.delete(f"{BASE}/missing")).status_code == 404
    assert (await client.post(
        f"{BASE}/name/Nobody/details", json={"exam": "Math", "points": 1, "total": 1}
    )).status_code == 404

    await create(client, "Ali")
    assert (await client.put(f"{BASE}/name/Ali/details/missing", json={"points": 1})).status_code == 404
    assert (await client.delete(f"{BASE}/name/Ali/details/missing")).status_code == 404


async def test_rename_student(client):
    ali = await create(client, "Ali")
    await create(client, "Bob")

    res = await client.put(f"{BASE}/{ali['id']}", json={"name": "Bob"})
    assert res.status_code == 409

    res = await client.put(f"{BASE}/{ali['id']}", json={"name": ""})
    assert res.status_code == 400

    res = await client.put(f"{BASE}/{ali['id']}", json={"name": "Alia"})
    assert res.status_code == 200
    assert res.json()["name"] == "Alia"
    assert (await client.get(f"{BASE}/name/Alia")).json()["id"] == ali["id"]


async def test_delete_student(client):
    ali = await create(client, "Ali")
    await client.post(f"{BASE}/name/Ali/details", json={"exam": "Math", "points": 8, "total": 10})

    res = await client.delete(f"{BASE}/{ali['id']}")

    assert res.status_code == 200
    assert (await client.get(f"{BASE}/name/Ali")).status_code == 404


async def test_leaderboard_order(client, test_db):
    base = datetime(2024, 1, 1)
    rows = [("old", 10, 0), ("low", 5, 1), ("high", 20, 2), ("new", 10, 3)]
    for name, points, offset in rows:
        test_db.add(Student(id=name, name=name, points=points, total=20, created_at=base + timedelta(hours=offset)))
    await test_db.commit()

    res = await client.get(f"{BASE}/")

    assert res.status_code == 200
    assert [s["name"] for s in res.json()] == ["high", "new", "old", "low"]
    assert "details" not in res.json()[0]


async def test_get_student_lists_newest_detail_first(client, test_db):
    base = datetime(2024, 1, 1)
    student = Student(id="ali", name="Ali", points=3, total=30, created_at=base, details=[
        ExamDetail(id="d1", position=0, exam="First", points=1, total=10, created_at=base),
        ExamDetail(id="d2", position=1, exam="Third", points=1, total=10, created_at=base + timedelta(days=2)),
        ExamDetail(id="d3", position=2, exam="Second", points=1, total=10, created_at=base + timedelta(days=1)),
    ])
    test_db.add(student)
    await test_db.commit()

    body = (await client.get(f"{BASE}/name/Ali")).json()

    assert [d["exam"] for d in body["details"]] == ["Third", "Second", "First"]
    assert (await client.get(f"{BASE}/ali")).json()["details"][0]["id"] == "d2"


async def test_points_beyond_64_bits_return_400(client):
    await create(client, "Ali")

    res = await client.post(f"{BASE}/name/Ali/details", json={"exam": "Math", "points": 10 ** 20, "total": 10 ** 20})

    assert res.status_code == 400


async def test_aggregate_overflow_returns_500(client):
    await create(client, "Ali")
    big = {"exam": "Math", "points": MAX_WHOLE_NUMBER, "total": MAX_WHOLE_NUMBER}
    assert (await client.post(f"{BASE}/name/Ali/details", json=big)).status_code == 201

    res = await client.post(f"{BASE}/name/Ali/details", json={"exam": "Art", "points": 1, "total": 1})

    assert res.status_code == 500
    assert res.json()["detail"] == "Error while adding the exam detail"


async def test_storage_failure_returns_generic_500(client, test_engine):
    async with test_engine.begin() as conn:
        await conn.run_sync(Student.__table__.drop)

    res = await client.get(f"{BASE}/")
    assert res.status_code == 500
    assert res.json()["detail"] == "Error while listing students"

    res = await client.post(f"{BASE}/", json={"name": "Ali"})
    assert res.status_code == 500
    assert res.json()["detail"] == "Error while creating the student"
