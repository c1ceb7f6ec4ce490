"""Domain entities and database models for WaterRefill."""

from .base import Base
from .badge import ALL_BADGES, Badge, badge_with_id, earned_badges
from .document import Document
from .review import Review, ReviewDecodeError
from .station import Coordinate, ListingType, LocationType, RefillCost, Station
from .system_log import SystemLog
from .user import UserDecodeError, UserProfile

__all__ = [
    "Base",
    "Document",
    "SystemLog",
    "Coordinate",
    "Station",
    "LocationType",
    "RefillCost",
    "ListingType",
    "Review",
    "ReviewDecodeError",
    "UserProfile",
    "UserDecodeError",
    "Badge",
    "ALL_BADGES",
    "badge_with_id",
    "earned_badges",
]
