"""Operational endpoints: persisted logs and store counts."""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Document, SystemLog
from .deps import get_db_session, require_system_token

router = APIRouter(dependencies=[Depends(require_system_token)])


@router.get("/logs")
async def list_logs(
    limit: int = Query(50, ge=1, le=500),
    level: Optional[str] = Query(default=None, description="Only records at this level (e.g. ERROR)."),
    service: Optional[str] = Query(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> Dict[str, Any]:
    """Most recent log records written by the centralized log handler."""
    stmt = select(SystemLog).order_by(desc(SystemLog.created_at), desc(SystemLog.id))
    if level:
        stmt = stmt.where(SystemLog.level == level.upper())
    if service:
        stmt = stmt.where(SystemLog.service == service)

    result = await db.execute(stmt.limit(limit))
    items: List[Dict[str, Any]] = [record.to_dict() for record in result.scalars()]
    return {"count": len(items), "items": items}


@router.get("/db/summary")
async def database_summary(db: AsyncSession = Depends(get_db_session)) -> Dict[str, Any]:
    result = await db.execute(
        select(Document.collection, func.count()).group_by(Document.collection)
    )
    collections = {collection: count for collection, count in result.all()}
    return {"collections": collections, "total_documents": sum(collections.values())}
