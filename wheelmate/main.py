#   __          __ _    _  ______  ______  _       __  __            _______  ______
#   \ \        / /| |  | ||  ____||  ____|| |     |  \/  |    /\    |__   __||  ____|
#    \ \  /\  / / | |__| || |__   | |__   | |     | \  / |   /  \      | |   | |__
#     \ \/  \/ /  |  __  ||  __|  |  __|  | |     | |\/| |  / /\ \     | |   |  __|
#      \  /\  /   | |  | || |____ | |____ | |____ | |  | | / ____ \    | |   | |____
#       \/  \/    |_|  |_||______||______||______||_|  |_|/_/    \_\   |_|   |______|
#

# Main FastAPI application entry point. Configures the app, middleware, database connections, and routes.

# --------------------------------------------------------------------------
#                                  Functions
# --------------------------------------------------------------------------
# lifespan: Async context manager for application startup (db connection) and shutdown events.
# RequestIDMiddleware.dispatch: Middleware to generate and attach a unique X-Request-ID to every request.
# wheelmate_error_handler: Renders typed service errors as {"detail": {"error", "message"}}.
# request_validation_handler: Maps FastAPI body/query validation failures to the same envelope.
# global_exception_handler: Last-resort handler that hides internal details.
# root: Plain text liveness check.
# health: Health check including database connectivity.
# run: Console entry point that serves the app with uvicorn.

# --------------------------------------------------------------------------
#                            Variables and others
# --------------------------------------------------------------------------
# app: The main FastAPI application instance.
# logger: Logger instance for this module.
# settings: Application settings loaded from config.

# --------------------------------------------------------------------------
#                                   imports
# --------------------------------------------------------------------------
# fastapi: Web framework.
# fastapi.middleware.cors: Middleware for handling CORS.
# contextlib.asynccontextmanager: Decorator for lifespan.
# logging: standard logging library.
# uuid: For generating unique request IDs.
# uvicorn: ASGI server.
# wheelmate.config.get_settings: Helper to load settings.
# wheelmate.database.Database: Database connection manager.
# wheelmate.errors: Typed service errors.
# wheelmate.routers: Module containing API route definitions.

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from contextlib import asynccontextmanager
import logging
import uuid
from starlette.middleware.base import BaseHTTPMiddleware

from wheelmate import __version__
from wheelmate.config import get_settings
from wheelmate.database import Database
from wheelmate.errors import UnauthorizedError, WheelMateError
from wheelmate.routers import auth, facilities

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("WheelMate Backend starting...")
    if settings.uses_default_secret:
        logger.warning("SECURITY: JWT_SECRET is not set, using the development default.")

    await Database.connect()

    yield

    await Database.disconnect()
    logger.info("WheelMate Backend shutting down...")

app = FastAPI(
    title="wheelmate",
    description="Find and rate accessible hospitals, police stations, restaurants, repair shops and toilets",
    version=__version__,
    lifespan=lifespan,
)

logger.info(f"Configuring CORS for origins: {settings.cors_origins_list}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=settings.cors_origins_list != ["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
    max_age=3600,
)

class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

app.add_middleware(RequestIDMiddleware)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(WheelMateError)
async def wheelmate_error_handler(request: Request, exc: WheelMateError):
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthorizedError) else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.to_detail()},
        headers=headers,
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    messages = []
    for error in exc.errors():
        # loc is ("body" | "query" | "path", field, ...)
        field = ".".join(str(part) for part in error.get("loc", ())[1:])
        msg = str(error.get("msg", "Invalid value")).removeprefix("Value error, ")
        if field and not msg.startswith(field):
            msg = f"{field}: {msg}"
        messages.append(msg)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": {"error": "validation", "message": "; ".join(messages) or "Invalid request."}},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    request_id = getattr(request.state, "request_id", None)
    logger.exception(f"Unhandled error on {request.method} {request.url.path} (request {request_id}): {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": {"error": "internal", "message": "Something went wrong. Please try again later."}},
    )


# =============================================================================
# Routers
# =============================================================================

app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
app.include_router(facilities.router, prefix="/api/facilities", tags=["Facilities"])

@app.get("/", response_class=PlainTextResponse)
async def root():
    return "WHEEL-MATE API is running!"

@app.get("/health")
async def health():
    db_healthy = await Database.check_health()
    return {
        "status": "healthy" if db_healthy else "degraded",
        "version": __version__,
        "services": {
            "database": "connected" if db_healthy else "disconnected",
        },
    }


def run() -> None:
    import uvicorn

    uvicorn.run("wheelmate.main:app", host=settings.host, port=settings.port, reload=settings.debug)
