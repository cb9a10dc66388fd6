"""API Gateway - FastAPI application for login evaluation and session integrity."""

import os
import threading
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, List, Optional
from uuid import uuid4

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from session_sentinel.api.schemas import (
    AccountRiskResponse,
    ActivityListResponse,
    ActivityTrackResponse,
    AlertActionResponse,
    AlertListResponse,
    ConcurrentCheckResponse,
    DeviceActionResponse,
    DeviceListResponse,
    ErrorResponse,
    LoginRequest,
    LoginResponse,
    LogoutResponse,
    MessageResponse,
    SessionListResponse,
    TrackActivityRequest,
    VerifyResponse,
)
from session_sentinel.api.service import SentinelService
from session_sentinel.common.constants import ActivityConstants, SessionConstants
from session_sentinel.common.exceptions import (
    AccountNotActiveError,
    ConflictError,
    InvalidInputError,
    InvalidTokenError,
    NotFoundError,
    SessionSentinelError,
)
from session_sentinel.common.logging import get_logger

logger = get_logger("sentinel_api")


class ServiceManager:
    """Thread-safe service singleton manager."""

    _instance: Optional[SentinelService] = None
    _lock = threading.Lock()
    _initialized = False

    @classmethod
    def get_service(cls) -> SentinelService:
        """Get or create the service instance (thread-safe)."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = SentinelService()
                    cls._initialized = True
                    logger.info("SentinelService initialized")
        return cls._instance

    @classmethod
    def set_service(cls, service: SentinelService) -> None:
        """Install a pre-built service (tests, embedding applications)."""
        with cls._lock:
            cls._instance = service
            cls._initialized = True

    @classmethod
    def shutdown(cls) -> None:
        """Shutdown the service and release resources."""
        with cls._lock:
            if cls._instance is not None:
                cls._instance.shutdown()
                cls._instance = None
                cls._initialized = False

                logger.info("SentinelService shutdown complete")


def get_service() -> SentinelService:
    """Get the service instance."""
    return ServiceManager.get_service()


def current_user_id(x_user_id: str = Header(..., min_length=1)) -> str:
    """Caller identity, established by the upstream authentication layer."""
    return x_user_id


def bearer_token(authorization: str = Header(...)) -> str:
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise InvalidTokenError("Authorization header must be 'Bearer <token>'")
    return token


# =============================================================================
# CORS CONFIGURATION
# =============================================================================

def get_cors_origins() -> List[str]:
    """Get allowed CORS origins from environment.

    In production, set SENTINEL_CORS_ORIGINS to a comma-separated list
    of allowed origins.

    Example: SENTINEL_CORS_ORIGINS="https://app.example.com,https://admin.example.com"
    """
    origins_env = os.environ.get("SENTINEL_CORS_ORIGINS", "")

    if origins_env:
        return [origin.strip() for origin in origins_env.split(",") if origin.strip()]

    if os.environ.get("SENTINEL_ENVIRONMENT", "development") == "production":
        logger.warning(
            "SENTINEL_CORS_ORIGINS not set in production. "
            "CORS will be disabled. Set SENTINEL_CORS_ORIGINS for cross-origin access."
        )
        return []

    logger.warning("Running in development mode with permissive CORS (allow_origins=['*'])")
    return ["*"]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    logger.info("SessionSentinel API starting up...")
    get_service().start()
    logger.info("SessionSentinel API ready")

    yield

    logger.info("SessionSentinel API shutting down...")
    ServiceManager.shutdown()
    logger.info("SessionSentinel API shutdown complete")


environment = os.environ.get("SENTINEL_ENVIRONMENT", "development")
enable_docs_default = "false" if environment == "production" else "true"
enable_docs = os.environ.get("SENTINEL_ENABLE_DOCS", enable_docs_default).lower() == "true"

app = FastAPI(
    title="SessionSentinel API",
    description="Login risk analysis and session integrity API.",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if enable_docs else None,
    redoc_url="/redoc" if enable_docs else None,
)


cors_origins = get_cors_origins()
if cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["POST", "GET", "DELETE"],
        allow_headers=["Content-Type", "Authorization", "X-Request-ID", "X-User-Id"],
    )


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

_STATUS_BY_ERROR = (
    (NotFoundError, 404),
    (ConflictError, 409),
    (InvalidInputError, 400),
    (AccountNotActiveError, 403),
    (InvalidTokenError, 401),
)


def _error_response(request: Request, status_code: int, error: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            error=error,
            message=message,
            request_id=getattr(request.state, "request_id", None),
        ).model_dump(),
    )


@app.exception_handler(SessionSentinelError)
async def sentinel_error_handler(request: Request, exc: SessionSentinelError) -> JSONResponse:
    """Map the engine's error taxonomy to HTTP status codes."""
    status_code = next(
        (code for error_type, code in _STATUS_BY_ERROR if isinstance(exc, error_type)),
        500,
    )
    request_id = getattr(request.state, "request_id", None)
    if status_code >= 500:
        logger.error(f"[{request_id}] {exc.code}: {exc.message}")
        return _error_response(request, 500, "internal_error", "An unexpected error occurred")

    logger.warning(f"[{request_id}] {exc.code}: {exc.message}")
    return _error_response(request, status_code, exc.code.lower(), exc.message)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected errors.

    Logs full exception for debugging but returns sanitized message to client.
    """
    request_id = getattr(request.state, "request_id", None)
    logger.exception(f"[{request_id}] Unexpected {type(exc).__name__}")
    return _error_response(request, 500, "internal_error", "An unexpected error occurred")


# =============================================================================
# MIDDLEWARE
# =============================================================================

@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Add request ID to each request for tracing."""
    request_id = f"req_{uuid4().hex[:12]}"
    request.state.request_id = request_id

    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


# =============================================================================
# AUTH
# =============================================================================

@app.post(
    "/auth/login",
    response_model=LoginResponse,
    responses={
        403: {"description": "Account not active", "model": ErrorResponse},
        404: {"description": "Unknown user", "model": ErrorResponse},
    },
    summary="Evaluate a login and open a session",
)
def login(
    body: LoginRequest,
    request: Request,
    user_id: str = Depends(current_user_id),
) -> LoginResponse:
    """Resolve the device, open a session, score the login and raise alerts.

    Returns the access token, sanitized user, device summary, composite
    risk score, warnings and any alerts raised.
    """
    client_ip = request.client.host if request.client else "unknown"
    logger.info(f"[{request.state.request_id}] Login for user {user_id} from {client_ip}")
    return get_service().login(user_id, body, client_ip)


@app.post("/auth/logout", response_model=LogoutResponse)
def logout(token: str = Depends(bearer_token)) -> LogoutResponse:
    session_id = get_service().logout(token)
    return LogoutResponse(message="Logged out successfully", session_id=session_id)


@app.post("/auth/verify", response_model=VerifyResponse)
def verify(token: str = Depends(bearer_token)) -> VerifyResponse:
    """Check a token and that its account is still active."""
    return get_service().verify_token(token)


# =============================================================================
# USERS
# =============================================================================

@app.get("/users/me")
def current_user(user_id: str = Depends(current_user_id)) -> Dict[str, Any]:
    return get_service().get_user(user_id).sanitized()


# =============================================================================
# DEVICES
# =============================================================================

@app.get("/devices", response_model=DeviceListResponse)
def list_devices(user_id: str = Depends(current_user_id)) -> DeviceListResponse:
    devices = get_service().list_devices(user_id)
    return DeviceListResponse(count=len(devices), devices=devices)


@app.post("/devices/{device_id}/trust", response_model=DeviceActionResponse)
def trust_device(device_id: str, user_id: str = Depends(current_user_id)) -> DeviceActionResponse:
    device = get_service().trust_device(user_id, device_id)
    return DeviceActionResponse(message="Device marked as trusted", device=device)


@app.delete("/devices/{device_id}", response_model=MessageResponse)
def remove_device(device_id: str, user_id: str = Depends(current_user_id)) -> MessageResponse:
    get_service().remove_device(user_id, device_id)
    return MessageResponse(message="Device removed successfully")


# =============================================================================
# SESSIONS
# =============================================================================

@app.get("/sessions/active", response_model=SessionListResponse)
def active_sessions(user_id: str = Depends(current_user_id)) -> SessionListResponse:
    sessions = get_service().active_sessions(user_id)
    return SessionListResponse(count=len(sessions), sessions=sessions)


@app.get("/sessions/history", response_model=SessionListResponse)
def session_history(
    limit: int = Query(default=SessionConstants.API_HISTORY_LIMIT, description="Maximum sessions"),
    user_id: str = Depends(current_user_id),
) -> SessionListResponse:
    sessions = get_service().session_history(user_id, limit=limit)
    return SessionListResponse(count=len(sessions), sessions=sessions)


@app.get("/sessions/concurrent-check", response_model=ConcurrentCheckResponse)
def concurrent_check(user_id: str = Depends(current_user_id)) -> ConcurrentCheckResponse:
    return get_service().concurrent_check(user_id)


@app.delete("/sessions/{session_id}", response_model=MessageResponse)
def terminate_session(session_id: str, user_id: str = Depends(current_user_id)) -> MessageResponse:
    get_service().terminate_session(user_id, session_id)
    return MessageResponse(message="Session terminated successfully")


@app.get("/sessions/{session_id}/activity", response_model=ActivityListResponse)
def session_activity(
    session_id: str, user_id: str = Depends(current_user_id)
) -> ActivityListResponse:
    activities = get_service().session_activity(user_id, session_id)
    return ActivityListResponse(count=len(activities), activities=activities)


# =============================================================================
# ACTIVITY
# =============================================================================

@app.post("/activity/track", response_model=ActivityTrackResponse)
def track_activity(
    body: TrackActivityRequest, token: str = Depends(bearer_token)
) -> ActivityTrackResponse:
    """Record an action in the session named by the token.

    Counts as session activity for the inactivity sweep.
    """
    activity = get_service().track_activity(token, body.activity_type, body.metadata)
    return ActivityTrackResponse(message="Activity tracked successfully", activity=activity)


@app.get("/activity/history", response_model=ActivityListResponse)
def activity_history(
    limit: int = Query(
        default=ActivityConstants.DEFAULT_HISTORY_LIMIT, description="Maximum activities"
    ),
    user_id: str = Depends(current_user_id),
) -> ActivityListResponse:
    activities = get_service().activity_history(user_id, limit=limit)
    return ActivityListResponse(count=len(activities), activities=activities)


# =============================================================================
# RISK
# =============================================================================

@app.get("/risk/score", response_model=AccountRiskResponse)
def account_risk(user_id: str = Depends(current_user_id)) -> AccountRiskResponse:
    """Account-level risk from unresolved alerts of the last 7 days."""
    return get_service().account_risk(user_id)


@app.get("/risk/alerts", response_model=AlertListResponse)
def list_alerts(
    unresolved: bool = Query(default=False, description="Only unresolved alerts"),
    user_id: str = Depends(current_user_id),
) -> AlertListResponse:
    alerts = get_service().list_alerts(user_id, unresolved_only=unresolved)
    return AlertListResponse(count=len(alerts), alerts=alerts)


@app.post("/risk/alerts/{alert_id}/resolve", response_model=AlertActionResponse)
def resolve_alert(alert_id: str, user_id: str = Depends(current_user_id)) -> AlertActionResponse:
    alert = get_service().resolve_alert(user_id, alert_id)
    return AlertActionResponse(message="Alert resolved successfully", alert=alert)


# =============================================================================
# HEALTH
# =============================================================================

@app.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "healthy", "service": "session-sentinel"}


@app.get("/ready")
async def readiness_check() -> dict:
    """Readiness check endpoint.

    Returns 503 until the service singleton is initialized.
    """
    if not ServiceManager._initialized:
        raise HTTPException(status_code=503, detail="not_ready")
    return {"status": "ready", "service": "session-sentinel"}


# =============================================================================
# DEVELOPMENT SERVER
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "session_sentinel.api.gateway:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info",
    )
