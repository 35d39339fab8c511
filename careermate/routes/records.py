"""Dashboard helpers shared by the saved-record routers"""
from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from careermate.models.user import User

DASHBOARD_LIMIT = 10


async def list_recent(db: AsyncSession, model, user: User, limit: int = DASHBOARD_LIMIT):
    """The user's newest records of one type"""
    result = await db.execute(
        select(model)
        .where(model.user_id == user.id)
        .order_by(model.created_at.desc(), model.id.desc())
        .limit(limit)
    )
    return [record.to_dict() for record in result.scalars().all()]


async def delete_owned(db: AsyncSession, model, record_id: int, user: User, not_found: str) -> None:
    """Delete one of the user's records; other users' records are reported as missing"""
    result = await db.execute(
        select(model).where(model.id == record_id, model.user_id == user.id)
    )
    record = result.scalar_one_or_none()
    if not record:
        raise HTTPException(status_code=404, detail=not_found)

    await db.delete(record)
    await db.commit()
