"""Public coach directory."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db
from app.schemas.catalog import CoachResponse
from app.services.coach_service import list_coaches

router = APIRouter(prefix="/api/v1/coaches", tags=["coaches"])


@router.get("", response_model=list[CoachResponse], summary="List coaches")
async def get_coaches(db: AsyncSession = Depends(get_db)) -> list[CoachResponse]:
    """Return every coach; the default roster is seeded on first use."""
    coaches = await list_coaches(db)
    return [CoachResponse.model_validate(c) for c in coaches]
