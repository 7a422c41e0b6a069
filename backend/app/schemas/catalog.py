"""Pydantic v2 response schemas for the court and coach directories."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class CourtResponse(BaseModel):
    id: str
    name: str
    color: str | None = None
    description: str | None = None
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


class CoachResponse(BaseModel):
    id: str
    name: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
