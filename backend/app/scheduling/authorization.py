"""Who may view or mutate a booking: its owner, or a privileged actor."""

import uuid

from app.errors import NotAuthorizedError
from app.models.booking import Booking


def can_modify_booking(booking: Booking, actor_id: uuid.UUID, is_privileged: bool) -> bool:
    return is_privileged or booking.user_id == actor_id


def ensure_can_modify_booking(booking: Booking, actor_id: uuid.UUID, is_privileged: bool) -> None:
    if not can_modify_booking(booking, actor_id, is_privileged):
        raise NotAuthorizedError("You are not authorized to modify this booking")
