# app/services/id_service.py

from datetime import datetime, timezone

from loguru import logger
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.config import settings
from app.core.exceptions import AllocationFailed
from app.models.app_settings import AppSettings
from app.models.enums import IdType
from app.models.id_counter import IdCounter

TYPE_ABBREVIATIONS: dict[IdType, str] = {
    IdType.STUDENT: "STU",
    IdType.USER: "USR",
    IdType.DEPARTMENT: "DEP",
    IdType.ATTENDANCE: "ATT",
    IdType.ACTIVITY_LOG: "LOG",
}

SEQUENCE_WIDTH = 5

_UPSERT_DIALECTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


# ============================================================================
# FORMAT / PARSE
# ============================================================================
def format_identifier(prefix: str, id_type: IdType, year: int, count: int) -> str:
    """ADERA, STUDENT, 2024, 205 -> ADERA/STU/2024/00205"""
    abbreviation = TYPE_ABBREVIATIONS[IdType(id_type)]
    return f"{prefix}/{abbreviation}/{year}/{str(count).zfill(SEQUENCE_WIDTH)}"


def parse_identifier(identifier: str) -> tuple[str, IdType, int, int]:
    parts = identifier.split("/")
    if len(parts) != 4:
        raise ValueError(f"Malformed identifier '{identifier}'")

    prefix, abbreviation, year, sequence = parts
    by_abbreviation = {abbr: t for t, abbr in TYPE_ABBREVIATIONS.items()}
    if abbreviation not in by_abbreviation:
        raise ValueError(f"Unknown identifier type '{abbreviation}'")
    if not prefix or not year.isdigit() or not sequence.isdigit():
        raise ValueError(f"Malformed identifier '{identifier}'")

    return prefix, by_abbreviation[abbreviation], int(year), int(sequence)


# ============================================================================
# PREFIX
# ============================================================================
async def get_id_prefix(session: AsyncSession) -> str:
    result = await session.execute(select(AppSettings.id_prefix).where(AppSettings.id == 1))
    prefix = result.scalar_one_or_none()
    return prefix or settings.ID_PREFIX


# ============================================================================
# ATOMIC INCREMENT
# ============================================================================
async def _increment_counter(session: AsyncSession, id_type: IdType) -> int:
    dialect = session.bind.dialect.name
    insert = _UPSERT_DIALECTS.get(dialect)

    if insert is not None:
        # Increment and read-back are one statement; the row lock is held until commit
        stmt = (
            insert(IdCounter)
            .values(type=id_type.value, count=1)
            .on_conflict_do_update(
                index_elements=["type"],
                set_={"count": IdCounter.count + 1},
            )
            .returning(IdCounter.count)
        )
        result = await session.execute(stmt)
        return result.scalar_one()

    # Other dialects: lock the row, then update or create it
    result = await session.execute(
        select(IdCounter).where(IdCounter.type == id_type.value).with_for_update()
    )
    counter = result.scalar_one_or_none()
    if counter is None:
        counter = IdCounter(type=id_type.value, count=1)
        session.add(counter)
    else:
        counter.count += 1
    await session.flush()
    return counter.count


async def allocate_next_id(
    session: AsyncSession,
    id_type: IdType,
    *,
    year: int | None = None,
) -> str:
    """
    Returns the next identifier for ``id_type``.

    The counter update is committed before returning, so a caller that fails
    to persist its record leaves a gap in the sequence rather than a duplicate.
    Raises AllocationFailed when the transaction cannot complete.
    """
    id_type = IdType(id_type)

    try:
        prefix = await get_id_prefix(session)
        count = await _increment_counter(session, id_type)
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.error(f"Failed to generate next ID for type {id_type.value}: {exc}")
        raise AllocationFailed(id_type.value) from exc

    if year is None:
        year = datetime.now(timezone.utc).year

    identifier = format_identifier(prefix, id_type, year, count)
    logger.debug(f"Allocated {identifier}")
    return identifier
