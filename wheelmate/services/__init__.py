"""WheelMate Services Package"""

from wheelmate.services.auth_service import AuthService
from wheelmate.services.facility_service import FacilityService

__all__ = ["AuthService", "FacilityService"]
