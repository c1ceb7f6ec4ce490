"""User profile entity as stored in the users collection."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

CO2_KG_PER_REFILL = 0.082


class UserDecodeError(ValueError):
    """Raised when a stored profile is missing required fields."""


@dataclass
class UserProfile:
    """Account data plus contribution counters and settings."""

    id: str
    email: str
    username: str
    date_joined: datetime
    profile_image_path: Optional[str] = None
    role: Optional[str] = None
    is_verified: bool = False
    stations_added: int = 0
    reviews_written: int = 0
    personal_refills_logged: int = 0
    contributions: int = 0
    favorite_stations: List[str] = field(default_factory=list)
    default_search_radius: float = 1.0
    use_dark_mode: bool = False
    notifications_enabled: bool = True

    @property
    def total_contributions(self) -> int:
        return self.stations_added + self.reviews_written + self.personal_refills_logged

    @property
    def co2_saved_kg(self) -> int:
        return int(self.personal_refills_logged * CO2_KG_PER_REFILL)

    @property
    def is_business(self) -> bool:
        return self.role == "business"

    @classmethod
    def from_document(cls, document_id: str, data: Mapping[str, Any]) -> "UserProfile":
        email = data.get("email")
        username = data.get("username")
        date_joined = data.get("dateJoined")
        if not isinstance(email, str) or not isinstance(username, str) or not isinstance(date_joined, datetime):
            raise UserDecodeError(f"User {document_id} is missing email, username or dateJoined")

        return cls(
            id=document_id,
            email=email,
            username=username,
            date_joined=date_joined,
            profile_image_path=data.get("profileImageUrl"),
            role=data.get("role"),
            is_verified=bool(data.get("isVerified", False)),
            stations_added=int(data.get("stationsAdded") or 0),
            reviews_written=int(data.get("reviewsWritten") or 0),
            personal_refills_logged=int(data.get("personalRefillsLogged") or 0),
            contributions=int(data.get("contributions") or 0),
            favorite_stations=list(data.get("favoriteStations") or []),
            default_search_radius=float(data.get("defaultSearchRadius", 1.0)),
            use_dark_mode=bool(data.get("useDarkMode", False)),
            notifications_enabled=bool(data.get("notificationsEnabled", True)),
        )

    def to_document(self) -> Dict[str, Any]:
        return {
            "email": self.email,
            "username": self.username,
            "dateJoined": self.date_joined,
            "profileImageUrl": self.profile_image_path,
            "role": self.role,
            "isVerified": self.is_verified,
            "stationsAdded": self.stations_added,
            "reviewsWritten": self.reviews_written,
            "personalRefillsLogged": self.personal_refills_logged,
            "contributions": self.contributions,
            "favoriteStations": list(self.favorite_stations),
            "defaultSearchRadius": self.default_search_radius,
            "useDarkMode": self.use_dark_mode,
            "notificationsEnabled": self.notifications_enabled,
        }
