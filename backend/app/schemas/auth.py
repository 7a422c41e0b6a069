"""Pydantic v2 schemas shared by the profile and generic endpoints."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict


class UserResponse(BaseModel):
    """Profile of the authenticated user."""

    id: uuid.UUID
    email: str
    full_name: str | None = None
    phone: str | None = None
    role: str
    is_admin: bool
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MessageResponse(BaseModel):
    """Generic message response."""

    message: str
