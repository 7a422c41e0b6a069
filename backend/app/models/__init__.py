"""SQLAlchemy models for the court booking service.

All models are imported here so that ``Base.metadata`` knows every table
before ``create_all`` runs. If you add a new model, import it in this file.
"""

from app.models.booking import Booking, BookingStatus, MembershipStatus
from app.models.coach import Coach
from app.models.court import Court
from app.models.user import User

__all__ = [
    "Booking",
    "BookingStatus",
    "Coach",
    "Court",
    "MembershipStatus",
    "User",
]
