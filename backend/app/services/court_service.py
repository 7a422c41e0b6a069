"""Court catalog lookups. The catalog itself is managed elsewhere."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.court import Court


async def list_courts(db: AsyncSession, active_only: bool = True) -> list[Court]:
    query = select(Court)
    if active_only:
        query = query.where(Court.is_active.is_(True))
    result = await db.execute(query.order_by(Court.name))
    return list(result.scalars().all())


async def get_court(db: AsyncSession, court_id: str) -> Court | None:
    return await db.get(Court, court_id)
