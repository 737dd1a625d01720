import uuid
from unittest.mock import AsyncMock, patch

import pytest
from sqlmodel import select

from app.core.database import AsyncSessionLocal
from app.core.exceptions import AllocationFailed
from app.models.student import Student
from app.models.user import UserRole
from conftest import ALL_FLAGS, auth_headers


async def _create(client, user, name="Abebe Kebede", **extra):
    res = await client.post("/api/students/", json={"name": name, **extra}, headers=auth_headers(user))
    assert res.status_code == 201, res.text
    return res.json()


@pytest.mark.asyncio
async def test_create_student_allocates_id(client, super_admin):
    data = await _create(client, super_admin, gender="Female", class_grade="Grade 5")

    assert data["student_id"].startswith("ADERA/STU/")
    assert data["student_id"].endswith("/00001")
    assert data["qr_code_data"] == data["student_id"]
    assert data["created_by_id"] == str(super_admin.id)
    assert data["gender"] == "Female"


@pytest.mark.asyncio
async def test_student_ids_are_sequential(client, super_admin):
    first = await _create(client, super_admin, name="One")
    second = await _create(client, super_admin, name="Two")
    assert first["student_id"].endswith("/00001")
    assert second["student_id"].endswith("/00002")


@pytest.mark.asyncio
async def test_create_requires_capability(client, make_user):
    user = await make_user(UserRole.User, can_read_students=True)
    res = await client.post("/api/students/", json={"name": "X"}, headers=auth_headers(user))
    assert res.status_code == 403


@pytest.mark.asyncio
async def test_blank_name_rejected(client, super_admin):
    res = await client.post("/api/students/", json={"name": "   "}, headers=auth_headers(super_admin))
    assert res.status_code == 422


@pytest.mark.asyncio
async def test_admin_sees_only_own_students(client, make_user):
    admin_a = await make_user(UserRole.Admin, can_create_students=True, can_read_students=True)
    admin_b = await make_user(UserRole.Admin, can_create_students=True, can_read_students=True)
    mine = await _create(client, admin_a, name="Mine")
    theirs = await _create(client, admin_b, name="Theirs")

    res = await client.get("/api/students/", headers=auth_headers(admin_a))
    assert [s["id"] for s in res.json()] == [mine["id"]]

    res = await client.get(f"/api/students/{theirs['id']}", headers=auth_headers(admin_a))
    assert res.status_code == 404


@pytest.mark.asyncio
async def test_see_all_records_lists_every_student(client, super_admin, make_user):
    await _create(client, super_admin, name="One")
    await _create(client, super_admin, name="Two")
    reader = await make_user(UserRole.User, can_read_students=True, can_see_all_records=True)

    res = await client.get("/api/students/", headers=auth_headers(reader))
    assert len(res.json()) == 2


@pytest.mark.asyncio
async def test_lookup_by_public_id(client, super_admin):
    await _create(client, super_admin, name="One")
    second = await _create(client, super_admin, name="Two")

    res = await client.get(
        "/api/students/", params={"student_id": second["student_id"]}, headers=auth_headers(super_admin)
    )
    assert [s["name"] for s in res.json()] == ["Two"]


@pytest.mark.asyncio
async def test_update_student(client, super_admin):
    student = await _create(client, super_admin)
    res = await client.put(
        f"/api/students/{student['id']}", json={"class_grade": "Grade 6"}, headers=auth_headers(super_admin)
    )
    assert res.status_code == 200
    assert res.json()["class_grade"] == "Grade 6"
    assert res.json()["student_id"] == student["student_id"]


@pytest.mark.asyncio
async def test_update_requires_write_flag(client, make_user):
    admin = await make_user(UserRole.Admin, can_create_students=True)
    student = await _create(client, admin)

    res = await client.put(f"/api/students/{student['id']}", json={"name": "X"}, headers=auth_headers(admin))
    assert res.status_code == 403


@pytest.mark.asyncio
async def test_delete_student_removes_attendance(client, super_admin):
    student = await _create(client, super_admin)
    headers = auth_headers(super_admin)
    await client.post("/api/attendance/scan", json={"qr_code_data": student["qr_code_data"], "meal_type": "LUNCH"}, headers=headers)

    res = await client.delete(f"/api/students/{student['id']}", headers=headers)
    assert res.status_code == 200

    assert (await client.get(f"/api/students/{student['id']}", headers=headers)).status_code == 404
    assert (await client.get("/api/attendance/", headers=headers)).json() == []


@pytest.mark.asyncio
async def test_deleted_ids_are_not_reused(client, super_admin):
    headers = auth_headers(super_admin)
    first = await _create(client, super_admin, name="One")
    await client.delete(f"/api/students/{first['id']}", headers=headers)

    second = await _create(client, super_admin, name="Two")
    assert second["student_id"].endswith("/00002")


@pytest.mark.asyncio
async def test_unknown_student_not_found(client, make_user):
    user = await make_user(UserRole.User, **ALL_FLAGS)
    res = await client.get(f"/api/students/{uuid.uuid4()}", headers=auth_headers(user))
    assert res.status_code == 404


@pytest.mark.asyncio
async def test_allocation_failure_is_503_and_saves_nothing(client, super_admin):
    failing = AsyncMock(side_effect=AllocationFailed("STUDENT"))
    with patch("app.services.student_service.allocate_next_id", failing):
        res = await client.post("/api/students/", json={"name": "Abebe"}, headers=auth_headers(super_admin))

    assert res.status_code == 503
    assert res.headers["Retry-After"] == "1"
    assert res.json()["detail"] == "Could not generate the next ID. Please try again."

    async with AsyncSessionLocal() as session:
        assert (await session.execute(select(Student))).first() is None
