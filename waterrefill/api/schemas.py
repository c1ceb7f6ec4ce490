"""Request and response schemas for the HTTP API."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from ..models.badge import Badge
from ..models.review import Review
from ..models.station import Coordinate, ListingType, LocationType, RefillCost, Station
from ..models.user import UserProfile


class StationIn(BaseModel):
    """Fields a contributor supplies for a new station or draft."""
    name: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    limitations: str = ""
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    location_type: LocationType = LocationType.OTHER
    cost: RefillCost = RefillCost.FREE
    listing_type: ListingType = ListingType.USER
    is_car_accessible: Optional[bool] = None
    manual_address: Optional[str] = None
    manual_description: Optional[str] = None

    @model_validator(mode="after")
    def _coordinate_pair(self):
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("latitude and longitude must be given together")
        return self

    @property
    def coordinate(self) -> Optional[Coordinate]:
        if self.latitude is None or self.longitude is None:
            return None
        return Coordinate(self.latitude, self.longitude)

    def to_station(self, is_draft: bool = False, station_id: Optional[str] = None) -> Station:
        station = Station(
            name=self.name,
            description=self.description,
            limitations=self.limitations,
            coordinate=self.coordinate,
            location_type=self.location_type,
            cost=self.cost,
            listing_type=self.listing_type,
            is_car_accessible=self.is_car_accessible,
            is_draft=is_draft,
            manual_address=self.manual_address,
            manual_description=self.manual_description,
        )
        if station_id:
            station.id = station_id
        return station


class StationOut(BaseModel):
    id: str
    name: str
    description: str
    limitations: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    location_type: LocationType
    icon: str
    cost: RefillCost
    marker_color: str
    listing_type: ListingType
    photo_references: List[str]
    date_added: datetime
    added_by_user_id: str
    average_rating: Optional[float] = None
    ratings_count: int = 0
    is_car_accessible: Optional[bool] = None
    is_draft: bool = False
    manual_address: Optional[str] = None
    manual_description: Optional[str] = None
    verified: bool = False
    distance_miles: Optional[float] = None

    @classmethod
    def from_station(cls, station: Station, distance_miles: Optional[float] = None) -> "StationOut":
        coordinate = station.coordinate
        return cls(
            id=station.id,
            name=station.name,
            description=station.description,
            limitations=station.limitations,
            latitude=coordinate.latitude if coordinate else None,
            longitude=coordinate.longitude if coordinate else None,
            location_type=station.location_type,
            icon=station.location_type.icon,
            cost=station.cost,
            marker_color=station.cost.marker_color,
            listing_type=station.listing_type,
            photo_references=station.photo_references,
            date_added=station.date_added,
            added_by_user_id=station.added_by_user_id,
            average_rating=station.average_rating,
            ratings_count=station.ratings_count,
            is_car_accessible=station.is_car_accessible,
            is_draft=station.is_draft,
            manual_address=station.manual_address,
            manual_description=station.manual_description,
            verified=station.verified,
            distance_miles=round(distance_miles, 3) if distance_miles is not None else None,
        )


class StationListResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    count: int
    stations: List[StationOut]


class SubmissionResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    document_id: str
    storage_paths: List[str]
    station: StationOut


class ReviewIn(BaseModel):
    station_id: str
    username: str
    rating: int = Field(..., ge=1, le=5)
    comment: str = ""


class ReviewUpdate(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: str = ""


class ReviewOut(BaseModel):
    id: str
    station_id: str
    user_id: str
    username: str
    rating: int
    comment: str
    date_posted: datetime
    date_updated: Optional[datetime] = None
    is_edited: bool
    helpful_count: int
    report_count: int

    @classmethod
    def from_review(cls, review: Review) -> "ReviewOut":
        return cls(
            id=review.id,
            station_id=review.station_id,
            user_id=review.user_id,
            username=review.username,
            rating=review.rating,
            comment=review.comment,
            date_posted=review.date_posted,
            date_updated=review.date_updated,
            is_edited=review.is_edited,
            helpful_count=review.helpful_count,
            report_count=review.report_count,
        )


class PreferencesIn(BaseModel):
    default_search_radius: Optional[float] = Field(None, gt=0)
    use_dark_mode: Optional[bool] = None
    notifications_enabled: Optional[bool] = None


class UserIn(BaseModel):
    email: str = Field(..., min_length=3)
    username: str = Field(..., min_length=1, max_length=80)
    role: Optional[str] = None


class UserOut(BaseModel):
    id: str
    email: str
    username: str
    date_joined: datetime
    profile_image_path: Optional[str] = None
    role: Optional[str] = None
    is_verified: bool
    stations_added: int
    reviews_written: int
    personal_refills_logged: int
    total_contributions: int
    co2_saved_kg: int
    favorite_stations: List[str]

    @classmethod
    def from_profile(cls, profile: UserProfile) -> "UserOut":
        return cls(
            id=profile.id,
            email=profile.email,
            username=profile.username,
            date_joined=profile.date_joined,
            profile_image_path=profile.profile_image_path,
            role=profile.role,
            is_verified=profile.is_verified,
            stations_added=profile.stations_added,
            reviews_written=profile.reviews_written,
            personal_refills_logged=profile.personal_refills_logged,
            total_contributions=profile.total_contributions,
            co2_saved_kg=profile.co2_saved_kg,
            favorite_stations=profile.favorite_stations,
        )


class BadgeOut(BaseModel):
    id: str
    name: str
    description: str
    icon_name: str

    @classmethod
    def from_badge(cls, badge: Badge) -> "BadgeOut":
        return cls(id=badge.id, name=badge.name, description=badge.description, icon_name=badge.icon_name)
