import asyncio
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError
from sqlmodel import select

from app.core.database import AsyncSessionLocal
from app.core.exceptions import AllocationFailed
from app.models.app_settings import AppSettings
from app.models.enums import IdType
from app.models.id_counter import IdCounter
from app.services.id_service import (
    allocate_next_id,
    format_identifier,
    parse_identifier,
)


def _suffix(identifier: str) -> int:
    return int(identifier.rsplit("/", 1)[1])


# ------------------------------------------------------------------
# Formatting
# ------------------------------------------------------------------
def test_format_identifier_example():
    assert format_identifier("ADERA", IdType.STUDENT, 2024, 205) == "ADERA/STU/2024/00205"


@pytest.mark.parametrize(
    "id_type, abbreviation",
    [
        (IdType.STUDENT, "STU"),
        (IdType.USER, "USR"),
        (IdType.DEPARTMENT, "DEP"),
        (IdType.ATTENDANCE, "ATT"),
        (IdType.ACTIVITY_LOG, "LOG"),
    ],
)
def test_format_identifier_abbreviations(id_type, abbreviation):
    assert format_identifier("ACME", id_type, 2025, 1) == f"ACME/{abbreviation}/2025/00001"


def test_format_identifier_does_not_truncate_large_counts():
    assert format_identifier("ADERA", IdType.USER, 2024, 123456) == "ADERA/USR/2024/123456"


def test_parse_identifier():
    assert parse_identifier("ADERA/STU/2024/00205") == ("ADERA", IdType.STUDENT, 2024, 205)


@pytest.mark.parametrize("bad", ["", "ADERA/STU/2024", "ADERA/XYZ/2024/00001", "ADERA/STU/20x4/00001"])
def test_parse_identifier_rejects_malformed(bad):
    with pytest.raises(ValueError):
        parse_identifier(bad)


# ------------------------------------------------------------------
# Allocation
# ------------------------------------------------------------------
@pytest.mark.asyncio
async def test_first_allocation_starts_at_one():
    async with AsyncSessionLocal() as session:
        identifier = await allocate_next_id(session, IdType.STUDENT, year=2024)
    assert identifier == "ADERA/STU/2024/00001"


@pytest.mark.asyncio
async def test_sequence_reaches_205():
    async with AsyncSessionLocal() as session:
        for _ in range(204):
            await allocate_next_id(session, IdType.STUDENT, year=2024)
        identifier = await allocate_next_id(session, IdType.STUDENT, year=2024)
    assert identifier == "ADERA/STU/2024/00205"


@pytest.mark.asyncio
async def test_uses_current_year_by_default():
    async with AsyncSessionLocal() as session:
        identifier = await allocate_next_id(session, IdType.DEPARTMENT)
    assert identifier == f"ADERA/DEP/{datetime.now(timezone.utc).year}/00001"


@pytest.mark.asyncio
async def test_default_year_is_taken_in_utc():
    # 23:30 on 31 December in UTC-1 is already New Year in UTC
    clock = MagicMock(wraps=datetime)
    clock.now.return_value = datetime(2025, 1, 1, 0, 30, tzinfo=timezone.utc)

    with patch("app.services.id_service.datetime", clock):
        async with AsyncSessionLocal() as session:
            identifier = await allocate_next_id(session, IdType.STUDENT)

    clock.now.assert_called_with(timezone.utc)
    assert identifier == "ADERA/STU/2025/00001"


@pytest.mark.asyncio
async def test_counters_are_independent_per_type():
    async with AsyncSessionLocal() as session:
        await allocate_next_id(session, IdType.STUDENT)
        await allocate_next_id(session, IdType.STUDENT)
        user_id = await allocate_next_id(session, IdType.USER)
        student_id = await allocate_next_id(session, IdType.STUDENT)

    assert _suffix(user_id) == 1
    assert _suffix(student_id) == 3


@pytest.mark.asyncio
async def test_year_change_does_not_reset_sequence():
    async with AsyncSessionLocal() as session:
        first = await allocate_next_id(session, IdType.STUDENT, year=2024)
        second = await allocate_next_id(session, IdType.STUDENT, year=2025)
    assert first == "ADERA/STU/2024/00001"
    assert second == "ADERA/STU/2025/00002"


@pytest.mark.asyncio
async def test_prefix_comes_from_site_settings():
    async with AsyncSessionLocal() as session:
        session.add(AppSettings(id=1, id_prefix="ACME"))
        await session.commit()
        identifier = await allocate_next_id(session, IdType.USER, year=2024)
    assert identifier == "ACME/USR/2024/00001"


@pytest.mark.asyncio
async def test_counter_row_is_persisted():
    async with AsyncSessionLocal() as session:
        await allocate_next_id(session, IdType.ATTENDANCE)
        await allocate_next_id(session, IdType.ATTENDANCE)

    async with AsyncSessionLocal() as session:
        result = await session.execute(select(IdCounter).where(IdCounter.type == "ATTENDANCE"))
        assert result.scalar_one().count == 2


@pytest.mark.asyncio
async def test_concurrent_allocations_never_collide():
    async with AsyncSessionLocal() as session:
        for _ in range(3):
            await allocate_next_id(session, IdType.STUDENT)

    async def allocate_in_own_session():
        async with AsyncSessionLocal() as session:
            return await allocate_next_id(session, IdType.STUDENT)

    n = 25
    identifiers = await asyncio.gather(*(allocate_in_own_session() for _ in range(n)))

    suffixes = sorted(_suffix(i) for i in identifiers)
    assert len(set(suffixes)) == n
    assert suffixes == list(range(4, 4 + n))


@pytest.mark.asyncio
async def test_database_error_raises_allocation_failed():
    async with AsyncSessionLocal() as session:
        with patch.object(
            session, "commit", side_effect=OperationalError("COMMIT", {}, Exception("database is locked"))
        ):
            with pytest.raises(AllocationFailed):
                await allocate_next_id(session, IdType.STUDENT)

    # The failed increment was rolled back
    async with AsyncSessionLocal() as session:
        identifier = await allocate_next_id(session, IdType.STUDENT, year=2024)
    assert identifier == "ADERA/STU/2024/00001"
