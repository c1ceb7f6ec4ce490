"""Achievement badges awarded for contributions."""

from dataclasses import dataclass
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class Badge:
    id: str
    name: str
    description: str
    icon_name: str
    counter: str  # UserProfile attribute the threshold applies to
    threshold: int


FIRST_REFILL = Badge("refill_1", "First Refill", "Logged your first bottle refill!", "drop.fill", "personal_refills_logged", 1)
TEN_REFILLS = Badge("refill_10", "Hydration Helper", "Logged 10 bottle refills.", "10.circle.fill", "personal_refills_logged", 10)
FIFTY_REFILLS = Badge("refill_50", "Eco Hydrator", "Logged 50 bottle refills.", "50.circle.fill", "personal_refills_logged", 50)

FIRST_STATION = Badge("station_1", "Map Pioneer", "Added your first station.", "mappin.and.ellipse", "stations_added", 1)
FIVE_STATIONS = Badge("station_5", "Community Mapper", "Added 5 stations.", "5.circle.fill", "stations_added", 5)
TEN_STATIONS = Badge("station_10", "Mapping Master", "Added 10 stations.", "10.circle.fill", "stations_added", 10)

ALL_BADGES: Tuple[Badge, ...] = (
    FIRST_REFILL,
    TEN_REFILLS,
    FIFTY_REFILLS,
    FIRST_STATION,
    FIVE_STATIONS,
    TEN_STATIONS,
)


def badge_with_id(badge_id: str) -> Optional[Badge]:
    return next((badge for badge in ALL_BADGES if badge.id == badge_id), None)


def earned_badges(profile) -> List[Badge]:
    """Badges whose threshold the profile's counters have reached."""
    return [
        badge
        for badge in ALL_BADGES
        if getattr(profile, badge.counter, 0) >= badge.threshold
    ]
