import uuid

import pytest

from app.models.user import UserRole
from app.services.attendance_service import today_utc
from conftest import auth_headers


async def _student(client, creator, name="Abebe Kebede", class_grade="Grade 5"):
    res = await client.post(
        "/api/students/", json={"name": name, "class_grade": class_grade}, headers=auth_headers(creator)
    )
    return res.json()


async def _scan(client, user, qr_code_data, meal_type="LUNCH"):
    return await client.post(
        "/api/attendance/scan",
        json={"qr_code_data": qr_code_data, "meal_type": meal_type},
        headers=auth_headers(user),
    )


# ------------------------------------------------------------------
# Scanning
# ------------------------------------------------------------------
@pytest.mark.asyncio
async def test_first_scan_creates_record(client, super_admin):
    student = await _student(client, super_admin)

    res = await _scan(client, super_admin, student["qr_code_data"])
    assert res.status_code == 201

    data = res.json()
    assert data["status"] == "new_record"
    assert data["student"]["student_id"] == student["student_id"]
    assert data["record"]["attendance_id"].startswith("ADERA/ATT/")
    assert data["record"]["meal_type"] == "LUNCH"
    assert data["record"]["status"] == "PRESENT"
    assert data["record"]["record_date"] == today_utc().isoformat()
    assert data["record"]["scanned_by_id"] == str(super_admin.id)


@pytest.mark.asyncio
async def test_second_scan_same_meal_is_already_recorded(client, super_admin):
    student = await _student(client, super_admin)
    first = await _scan(client, super_admin, student["qr_code_data"])

    res = await _scan(client, super_admin, student["qr_code_data"])
    assert res.status_code == 200

    data = res.json()
    assert data["status"] == "already_recorded"
    assert data["record"]["id"] == first.json()["record"]["id"]
    assert "already been recorded for lunch" in data["message"]


@pytest.mark.asyncio
async def test_other_meal_is_a_new_record(client, super_admin):
    student = await _student(client, super_admin)
    await _scan(client, super_admin, student["qr_code_data"], "BREAKFAST")

    res = await _scan(client, super_admin, student["qr_code_data"], "DINNER")
    assert res.status_code == 201


@pytest.mark.asyncio
async def test_scan_by_internal_id(client, super_admin):
    student = await _student(client, super_admin)
    res = await _scan(client, super_admin, student["id"])
    assert res.status_code == 201
    assert res.json()["student"]["id"] == student["id"]


@pytest.mark.asyncio
async def test_scan_unknown_student(client, super_admin):
    res = await _scan(client, super_admin, "ADERA/STU/2024/99999")
    assert res.status_code == 404


@pytest.mark.asyncio
async def test_scan_invalid_meal_type(client, super_admin):
    student = await _student(client, super_admin)
    res = await _scan(client, super_admin, student["qr_code_data"], "SNACK")
    assert res.status_code == 422


@pytest.mark.asyncio
async def test_scan_requires_capability(client, super_admin, make_user):
    student = await _student(client, super_admin)
    user = await make_user(UserRole.User, can_read_attendance=True)

    res = await _scan(client, user, student["qr_code_data"])
    assert res.status_code == 403


@pytest.mark.asyncio
async def test_scanner_with_flag_can_scan(client, super_admin, make_user):
    student = await _student(client, super_admin)
    scanner = await make_user(UserRole.User, can_scan_id=True)

    res = await _scan(client, scanner, student["qr_code_data"])
    assert res.status_code == 201


# ------------------------------------------------------------------
# Status
# ------------------------------------------------------------------
@pytest.mark.asyncio
async def test_status_before_and_after_scan(client, super_admin):
    student = await _student(client, super_admin)
    headers = auth_headers(super_admin)
    params = {"student_id": student["student_id"], "meal_type": "BREAKFAST"}

    res = await client.get("/api/attendance/status", params=params, headers=headers)
    assert res.status_code == 200
    assert res.json()["attendance_record"] is None

    await _scan(client, super_admin, student["qr_code_data"], "BREAKFAST")

    res = await client.get("/api/attendance/status", params=params, headers=headers)
    assert res.json()["attendance_record"]["meal_type"] == "BREAKFAST"


@pytest.mark.asyncio
async def test_status_unknown_student(client, super_admin):
    res = await client.get(
        "/api/attendance/status",
        params={"student_id": "NOPE", "meal_type": "LUNCH"},
        headers=auth_headers(super_admin),
    )
    assert res.status_code == 404


# ------------------------------------------------------------------
# Listing
# ------------------------------------------------------------------
@pytest.mark.asyncio
async def test_list_filters(client, super_admin):
    headers = auth_headers(super_admin)
    grade5 = await _student(client, super_admin, name="A", class_grade="Grade 5")
    grade6 = await _student(client, super_admin, name="B", class_grade="Grade 6")
    await _scan(client, super_admin, grade5["qr_code_data"], "LUNCH")
    await _scan(client, super_admin, grade6["qr_code_data"], "LUNCH")
    await _scan(client, super_admin, grade6["qr_code_data"], "DINNER")

    res = await client.get("/api/attendance/", headers=headers)
    assert len(res.json()) == 3

    res = await client.get("/api/attendance/", params={"class_grade": "Grade 6"}, headers=headers)
    assert {r["student"]["name"] for r in res.json()} == {"B"}

    res = await client.get("/api/attendance/", params={"meal_type": "DINNER"}, headers=headers)
    assert len(res.json()) == 1

    res = await client.get("/api/attendance/", params={"student_id": grade5["student_id"]}, headers=headers)
    assert len(res.json()) == 1

    today = today_utc().isoformat()
    res = await client.get("/api/attendance/", params={"from_date": today, "to_date": today}, headers=headers)
    assert len(res.json()) == 3

    res = await client.get("/api/attendance/", params={"to_date": "2000-01-01"}, headers=headers)
    assert res.json() == []


@pytest.mark.asyncio
async def test_scanner_lists_only_own_scans(client, super_admin, make_user):
    student = await _student(client, super_admin)
    scanner = await make_user(UserRole.User, can_scan_id=True, can_read_attendance=True)
    await _scan(client, super_admin, student["qr_code_data"], "BREAKFAST")
    await _scan(client, scanner, student["qr_code_data"], "LUNCH")

    res = await client.get("/api/attendance/", headers=auth_headers(scanner))
    assert [r["meal_type"] for r in res.json()] == ["LUNCH"]


# ------------------------------------------------------------------
# Deletion
# ------------------------------------------------------------------
@pytest.mark.asyncio
async def test_super_admin_deletes_record(client, super_admin):
    student = await _student(client, super_admin)
    record = (await _scan(client, super_admin, student["qr_code_data"])).json()["record"]
    headers = auth_headers(super_admin)

    res = await client.delete(f"/api/attendance/{record['id']}", headers=headers)
    assert res.status_code == 200

    # The meal can be scanned again
    res = await _scan(client, super_admin, student["qr_code_data"])
    assert res.status_code == 201
    assert res.json()["record"]["attendance_id"] != record["attendance_id"]


@pytest.mark.asyncio
async def test_admin_cannot_delete_record(client, super_admin, make_user):
    student = await _student(client, super_admin)
    record = (await _scan(client, super_admin, student["qr_code_data"])).json()["record"]
    admin = await make_user(UserRole.Admin, can_read_attendance=True, can_see_all_records=True)

    res = await client.delete(f"/api/attendance/{record['id']}", headers=auth_headers(admin))
    assert res.status_code == 403


@pytest.mark.asyncio
async def test_delete_unknown_record(client, super_admin):
    res = await client.delete(f"/api/attendance/{uuid.uuid4()}", headers=auth_headers(super_admin))
    assert res.status_code == 404
