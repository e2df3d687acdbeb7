"""Facility Model - Facility documents, request bodies, and ranked views."""

import math
from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from wheelmate.constants import LATITUDE_LIMIT, LONGITUDE_LIMIT, RATING_MAX, RATING_MIN
from wheelmate.errors import ValidationError


class FacilityType(str, Enum):
    """Closed set of facility categories."""
    HOSPITAL = "hospital"
    POLICE = "police"
    RESTAURANT = "restaurant"
    REPAIR = "repair"
    TOILET = "toilet"
    OTHER = "other"


FACILITY_TYPES = [t.value for t in FacilityType]


# =============================================================================
# Field checks
# =============================================================================

def check_required_text(field: str, value: Any) -> str:
    """Strip and require a non-empty string."""
    if value is None:
        raise ValidationError(f"{field} is required.")
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be text.")
    value = value.strip()
    if not value:
        raise ValidationError(f"{field} is required.")
    return value


def check_coordinate(field: str, value: Any, limit: float) -> float:
    """
    Require a finite number within [-limit, limit].

    Zero is a real coordinate (equator / prime meridian) and is accepted.
    """
    if value is None:
        raise ValidationError(f"{field} is required.")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{field} must be a number.")
    value = float(value)
    if not math.isfinite(value):
        raise ValidationError(f"{field} must be a finite number.")
    if value < -limit or value > limit:
        raise ValidationError(f"{field} must be between {-limit:g} and {limit:g}.")
    return value


def check_facility_type(value: Any) -> str:
    if value is None or value == "":
        raise ValidationError("type is required.")
    if isinstance(value, FacilityType):
        return value.value
    if value not in FACILITY_TYPES:
        raise ValidationError(f"type must be one of: {', '.join(FACILITY_TYPES)}.")
    return value


def check_rating(value: Any) -> int:
    """
    Require an int in [RATING_MIN, RATING_MAX].

    Type and range are checked explicitly, so 0 is reported as out of range
    rather than missing. Booleans, floats and strings are rejected.
    """
    if value is None:
        raise ValidationError("rating is required.")
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError("rating must be a whole number.")
    if value < RATING_MIN or value > RATING_MAX:
        raise ValidationError(f"rating must be between {RATING_MIN} and {RATING_MAX}.")
    return value


# =============================================================================
# Models
# =============================================================================

class GeoPoint(BaseModel):
    """Latitude/longitude pair in degrees."""
    lat: float
    lng: float

    @field_validator("lat", mode="before")
    @classmethod
    def _check_lat(cls, v: Any) -> float:
        return check_coordinate("lat", v, LATITUDE_LIMIT)

    @field_validator("lng", mode="before")
    @classmethod
    def _check_lng(cls, v: Any) -> float:
        return check_coordinate("lng", v, LONGITUDE_LIMIT)


class FacilityCreate(BaseModel):
    """Data required to register a facility."""
    name: str = Field(None, validate_default=True)
    address: str = Field(None, validate_default=True)
    type: FacilityType = Field(None, validate_default=True)
    notes: Optional[str] = ""
    lat: float = Field(None, validate_default=True)
    lng: float = Field(None, validate_default=True)

    @field_validator("name", "address", mode="before")
    @classmethod
    def _check_text(cls, v: Any, info: ValidationInfo) -> str:
        return check_required_text(info.field_name, v)

    @field_validator("type", mode="before")
    @classmethod
    def _check_type(cls, v: Any) -> str:
        return check_facility_type(v)

    @field_validator("lat", mode="before")
    @classmethod
    def _check_lat(cls, v: Any) -> float:
        return check_coordinate("lat", v, LATITUDE_LIMIT)

    @field_validator("lng", mode="before")
    @classmethod
    def _check_lng(cls, v: Any) -> float:
        return check_coordinate("lng", v, LONGITUDE_LIMIT)

    @field_validator("notes", mode="before")
    @classmethod
    def _default_notes(cls, v: Any) -> str:
        if v is None:
            return ""
        if not isinstance(v, str):
            raise ValidationError("notes must be text.")
        return v.strip()


class Facility(BaseModel):
    """
    Facility as stored and returned by the API.

    Fields:
    - id: Immutable UUID, stored as facility_id
    - rating_values: Append-only star ratings
    - average_rating: Mean of rating_values, 0 when empty
    - owner_id: User who registered the facility
    """
    id: str = Field(..., description="Facility UUID")
    name: str
    type: FacilityType
    location: GeoPoint
    address: str
    notes: str = ""
    accessible: bool = True
    rating_values: List[int] = Field(default_factory=list)
    average_rating: float = 0.0
    owner_id: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    @classmethod
    def from_document(cls, doc: dict) -> "Facility":
        return cls(
            id=doc["facility_id"],
            name=doc["name"],
            type=doc["type"],
            location=doc["location"],
            address=doc["address"],
            notes=doc.get("notes") or "",
            accessible=doc.get("accessible", True),
            rating_values=doc.get("rating_values", []),
            average_rating=doc.get("average_rating", 0.0),
            owner_id=doc.get("owner_id"),
            created_at=doc["created_at"],
            updated_at=doc.get("updated_at"),
        )


class FacilityView(Facility):
    """Facility annotated with distance from the observer (km, None if unknown)."""
    distance: Optional[float] = None

    @classmethod
    def from_facility(cls, facility: Facility, distance: Optional[float]) -> "FacilityView":
        data = facility.model_dump()
        data["distance"] = distance
        return cls(**data)


class RatingSubmit(BaseModel):
    """Data required to rate a facility."""
    rating: int = Field(None, validate_default=True)
    feedback: Optional[str] = None

    @field_validator("rating", mode="before")
    @classmethod
    def _check_rating(cls, v: Any) -> int:
        return check_rating(v)
