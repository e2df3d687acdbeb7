"""User Model - Account documents, auth request bodies, and the per-request session."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from wheelmate.utils.timezone_utils import ensure_utc, utc_now


class RegisterRequest(BaseModel):
    username: str
    password: str


class LoginRequest(BaseModel):
    username: str
    password: str


class UserPublic(BaseModel):
    """User info safe to return to clients."""
    id: str
    username: str


class RegisterResponse(BaseModel):
    message: str
    user: UserPublic


class LoginResponse(BaseModel):
    message: str
    token: str
    user: UserPublic


class SessionContext(BaseModel):
    """
    Verified caller for a single request.

    Built from the bearer token on every request and passed explicitly into
    store operations. Never cached between requests.
    """
    user_id: str = Field(..., description="Verified user UUID")
    username: str
    expires_at: datetime
    issued_at: Optional[datetime] = None

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return ensure_utc(self.expires_at) <= (now or utc_now())
