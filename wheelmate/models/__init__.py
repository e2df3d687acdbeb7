"""WheelMate Models Package"""

from wheelmate.models.facility import (
    Facility,
    FacilityCreate,
    FacilityType,
    FacilityView,
    GeoPoint,
    RatingSubmit,
)
from wheelmate.models.user import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
    SessionContext,
    UserPublic,
)

__all__ = [
    "Facility", "FacilityCreate", "FacilityType", "FacilityView", "GeoPoint", "RatingSubmit",
    "LoginRequest", "LoginResponse", "RegisterRequest", "RegisterResponse",
    "SessionContext", "UserPublic",
]
