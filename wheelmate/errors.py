"""
Error Taxonomy

Typed failures raised by the services and rendered by the API as
{"detail": {"error": <kind>, "message": <text>}}.
"""

from fastapi import status


class WheelMateError(Exception):
    """Base class for every failure a caller is expected to handle."""

    kind: str = "internal"
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_detail(self) -> dict:
        return {"error": self.kind, "message": self.message}


class ValidationError(WheelMateError, ValueError):
    """Missing or malformed input.

    Also a ValueError so pydantic validators can raise it directly.
    """

    kind = "validation"
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(WheelMateError):
    kind = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class UnauthorizedError(WheelMateError):
    kind = "unauthorized"
    status_code = status.HTTP_401_UNAUTHORIZED


class ConflictError(WheelMateError):
    """Concurrent updates kept winning until the retry budget ran out."""

    kind = "conflict"
    status_code = status.HTTP_409_CONFLICT


class InternalError(WheelMateError):
    kind = "internal"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class LocationUnavailableError(ValidationError):
    """Nearest lookup requested without an observer location."""

    def __init__(self, message: str = "Location needed to find the nearest facility."):
        super().__init__(message)


class NoFacilityFoundError(NotFoundError):
    """No facility of the requested type exists."""

    def __init__(self, facility_type: str):
        super().__init__(f"No {facility_type} nearby.")
        self.facility_type = facility_type
