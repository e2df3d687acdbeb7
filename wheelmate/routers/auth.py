#   __          __ _    _  ______  ______  _       __  __            _______  ______
#   \ \        / /| |  | ||  ____||  ____|| |     |  \/  |    /\    |__   __||  ____|
#    \ \  /\  / / | |__| || |__   | |__   | |     | \  / |   /  \      | |   | |__
#     \ \/  \/ /  |  __  ||  __|  |  __|  | |     | |\/| |  / /\ \     | |   |  __|
#      \  /\  /   | |  | || |____ | |____ | |____ | |  | | / ____ \    | |   | |____
#       \/  \/    |_|  |_||______||______||______||_|  |_|/_/    \_\   |_|   |______|
#

# Authentication router - Username/password accounts and JWT sessions.

# --------------------------------------------------------------------------
#                                  Functions
# --------------------------------------------------------------------------
# register: Endpoint to create an account.
# login: Endpoint to exchange credentials for a capability token.
# get_me: Endpoint to get the session bound to the current token.

# --------------------------------------------------------------------------
#                            Variables and others
# --------------------------------------------------------------------------
# logger: Logger instance.
# router: FastAPI APIRouter instance.
# SessionInfo: Pydantic model for the /me response.

# --------------------------------------------------------------------------
#                                   imports
# --------------------------------------------------------------------------
# fastapi: Framework components (APIRouter, Depends, status).
# pydantic: Data validation.
# datetime: Date and time utilities.
# logging: Logging module.
# wheelmate.dependencies: Session dependency.
# wheelmate.models.user: Auth request/response models.
# wheelmate.services.auth_service: Account service.

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel
from datetime import datetime
import logging

from wheelmate.dependencies import get_current_session
from wheelmate.models.user import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
    SessionContext,
)
from wheelmate.services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter()
auth_service = AuthService()


class SessionInfo(BaseModel):
    id: str
    username: str
    expires_at: datetime


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(request: RegisterRequest):
    """Register a new account with username and password"""
    user = await auth_service.register(request.username, request.password)
    return RegisterResponse(message="User registered successfully!", user=user)


@router.post("/login", response_model=LoginResponse)
async def login(request: LoginRequest):
    """Login and receive a token valid for a few hours"""
    token, user = await auth_service.login(request.username, request.password)
    return LoginResponse(message="Logged in successfully!", token=token, user=user)


@router.get("/me", response_model=SessionInfo)
async def get_me(session: SessionContext = Depends(get_current_session)):
    return SessionInfo(
        id=session.user_id,
        username=session.username,
        expires_at=session.expires_at,
    )
