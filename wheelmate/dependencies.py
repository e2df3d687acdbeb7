"""
Authentication Dependencies

FastAPI dependencies that turn the Authorization header into a SessionContext.
"""

from typing import Optional

from fastapi import Header

from wheelmate.errors import UnauthorizedError
from wheelmate.models.user import SessionContext
from wheelmate.services.auth_service import AuthService


auth_service = AuthService()


async def get_current_session(
    authorization: Optional[str] = Header(None)
) -> SessionContext:
    """
    Verify the bearer token for this request.

    Expects Authorization header: Bearer <token>
    """
    if not authorization:
        raise UnauthorizedError("No token, authorization denied.")

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise UnauthorizedError("Invalid authorization format. Use: Bearer <token>")

    return auth_service.verify_token(token.strip())
