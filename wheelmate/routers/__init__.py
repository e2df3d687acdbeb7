"""WheelMate Routers Package"""

from wheelmate.routers import auth, facilities

__all__ = ["auth", "facilities"]
