# app/services/homepage_service.py
"""
Team members and homepage features share one shape: a list ordered by
``display_order`` that the Super Admin edits and rearranges.
"""

from typing import Type, TypeVar
import uuid

from pydantic import BaseModel
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel, select

from app.models.homepage import HomepageFeature, TeamMember

Item = TypeVar("Item", TeamMember, HomepageFeature)


async def list_items(session: AsyncSession, model: Type[Item], visible_only: bool = False) -> list[Item]:
    query = select(model).order_by(model.display_order.asc())
    if visible_only:
        query = query.where(model.is_visible == True)  # noqa: E712
    result = await session.execute(query)
    return result.scalars().all()


async def get_item(session: AsyncSession, model: Type[Item], item_id) -> Item | None:
    try:
        item_uuid = uuid.UUID(str(item_id))
    except ValueError:
        return None
    return await session.get(model, item_uuid)


async def create_item(session: AsyncSession, model: Type[Item], data: BaseModel) -> Item:
    # New entries go to the end of the list
    result = await session.execute(select(func.max(model.display_order)))
    last_order = result.scalar_one_or_none()

    item = model(**data.model_dump(), display_order=(last_order if last_order is not None else -1) + 1)
    session.add(item)
    await session.commit()
    await session.refresh(item)
    return item


async def update_item(session: AsyncSession, item: SQLModel, data: BaseModel) -> SQLModel:
    for key, value in data.model_dump(exclude_unset=True).items():
        if value is None and key != "avatar_url":
            continue
        if isinstance(value, str) and key != "avatar_url":
            value = value.strip()
            if not value:
                raise ValueError(f"{key} cannot be empty")
        setattr(item, key, value)

    session.add(item)
    await session.commit()
    await session.refresh(item)
    return item


async def delete_item(session: AsyncSession, item: SQLModel) -> None:
    await session.delete(item)
    await session.commit()


async def reorder_items(session: AsyncSession, model: Type[Item], ordered_ids: list[uuid.UUID]) -> list[Item]:
    """
    ``ordered_ids`` must name every existing entry exactly once.
    Positions are rewritten in one transaction.
    """
    items = {item.id: item for item in await list_items(session, model)}

    if len(set(ordered_ids)) != len(ordered_ids) or set(ordered_ids) != set(items):
        raise ValueError("ordered_ids must list every entry exactly once")

    for position, item_id in enumerate(ordered_ids):
        items[item_id].display_order = position
        session.add(items[item_id])

    await session.commit()
    return await list_items(session, model)
