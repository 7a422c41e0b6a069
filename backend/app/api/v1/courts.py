"""Public court directory."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db
from app.schemas.catalog import CourtResponse
from app.services.court_service import list_courts

router = APIRouter(prefix="/api/v1/courts", tags=["courts"])


@router.get("", response_model=list[CourtResponse], summary="List courts")
async def get_courts(
    active_only: bool = Query(True, description="Hide courts that are out of service"),
    db: AsyncSession = Depends(get_db),
) -> list[CourtResponse]:
    courts = await list_courts(db, active_only=active_only)
    return [CourtResponse.model_validate(c) for c in courts]
