"""
Authentication Service

Username/password accounts and JWT capability tokens.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError
from pymongo.errors import DuplicateKeyError, PyMongoError
from starlette.concurrency import run_in_threadpool

from wheelmate.config import get_settings
from wheelmate.constants import PASSWORD_MAX_BYTES, PASSWORD_MIN_LENGTH, USERNAME_MIN_LENGTH
from wheelmate.database import get_db
from wheelmate.errors import InternalError, UnauthorizedError, ValidationError
from wheelmate.models.user import SessionContext, UserPublic
from wheelmate.utils.timezone_utils import utc_now

logger = logging.getLogger(__name__)


class AuthService:
    """Service for account registration, login and token verification."""

    # =========================================================================
    # Passwords
    # =========================================================================

    @staticmethod
    def hash_password(password: str) -> str:
        return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")

    @staticmethod
    def verify_password(password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except ValueError:
            # Malformed stored hash
            return False

    # =========================================================================
    # Tokens
    # =========================================================================

    def create_access_token(
        self,
        user_id: str,
        username: str,
        expires_delta: Optional[timedelta] = None,
    ) -> str:
        """Create a signed JWT bound to the user, expiring after the configured hours."""
        settings = get_settings()
        now = utc_now()
        expire = now + (expires_delta or timedelta(hours=settings.access_token_expiry_hours))
        payload = {
            "sub": user_id,
            "username": username,
            "iat": int(now.timestamp()),
            "exp": int(expire.timestamp()),
        }
        return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)

    def verify_token(self, token: str) -> SessionContext:
        """
        Verify a bearer token and return the caller's session.

        Raises UnauthorizedError for bad signatures, malformed tokens and expiry.
        """
        settings = get_settings()
        if not token:
            raise UnauthorizedError("No token, authorization denied.")

        try:
            payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
        except ExpiredSignatureError:
            raise UnauthorizedError("Token has expired.")
        except JWTError as e:
            logger.debug(f"Token verification failed: {type(e).__name__}: {e}")
            raise UnauthorizedError("Token is not valid.")

        user_id = payload.get("sub")
        exp = payload.get("exp")
        if not user_id or exp is None:
            raise UnauthorizedError("Token is not valid.")

        iat = payload.get("iat")
        session = SessionContext(
            user_id=user_id,
            username=payload.get("username", ""),
            expires_at=datetime.fromtimestamp(exp, tz=timezone.utc),
            issued_at=datetime.fromtimestamp(iat, tz=timezone.utc) if iat else None,
        )
        if session.is_expired():
            raise UnauthorizedError("Token has expired.")
        return session

    # =========================================================================
    # Accounts
    # =========================================================================

    async def register(self, username: str, password: str) -> UserPublic:
        """Create an account. The password is hashed before it is stored."""
        username = (username or "").strip()
        password = password or ""

        if not username or not password:
            raise ValidationError("Please enter all fields.")
        if len(username) < USERNAME_MIN_LENGTH:
            raise ValidationError(f"Username must be at least {USERNAME_MIN_LENGTH} characters.")
        if len(password) < PASSWORD_MIN_LENGTH:
            raise ValidationError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters.")
        if len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
            raise ValidationError(f"Password must be at most {PASSWORD_MAX_BYTES} bytes.")

        db = get_db()
        try:
            existing = await db.users.find_one({"username": username})
            if existing:
                raise ValidationError("Username already exists.")

            # bcrypt is CPU bound, keep it off the event loop
            password_hash = await run_in_threadpool(self.hash_password, password)
            user_doc = {
                "user_id": str(uuid.uuid4()),
                "username": username,
                "password_hash": password_hash,
                "created_at": utc_now(),
            }
            await db.users.insert_one(user_doc)
        except DuplicateKeyError:
            # Lost a race with a concurrent registration of the same name
            raise ValidationError("Username already exists.")
        except PyMongoError as e:
            logger.error(f"Register error: {e}")
            raise InternalError("Could not register user.")

        logger.info(f"Registered user {user_doc['user_id']} ({username})")
        return UserPublic(id=user_doc["user_id"], username=username)

    async def login(self, username: str, password: str) -> tuple:
        """Check credentials. Returns (token, UserPublic)."""
        username = (username or "").strip()
        if not username or not password:
            raise ValidationError("Please enter all fields.")

        db = get_db()
        try:
            user = await db.users.find_one({"username": username})
        except PyMongoError as e:
            logger.error(f"Login error: {e}")
            raise InternalError("Could not log in.")

        if not user or not await run_in_threadpool(
            self.verify_password, password, user.get("password_hash", "")
        ):
            raise ValidationError("Invalid credentials.")

        token = self.create_access_token(user["user_id"], user["username"])
        logger.info(f"Login successful: {user['user_id']} ({username})")
        return token, UserPublic(id=user["user_id"], username=user["username"])
