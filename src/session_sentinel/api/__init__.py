"""API - login evaluation, device, session and risk endpoints.

    POST   /auth/login                    evaluate a login, open a session
    POST   /auth/logout                   end the token's session
    GET    /devices                       list devices
    POST   /devices/{id}/trust            mark a device trusted
    DELETE /devices/{id}                  remove a device
    GET    /sessions/active               active sessions
    GET    /sessions/history              recent sessions
    GET    /sessions/concurrent-check     concurrent session count
    DELETE /sessions/{id}                 terminate a session
    GET    /risk/score                    account-level risk
    GET    /risk/alerts                   list alerts
    POST   /risk/alerts/{id}/resolve      resolve an alert
"""

from session_sentinel.api.gateway import app
from session_sentinel.api.schemas import ErrorResponse, LoginRequest, LoginResponse
from session_sentinel.api.service import SentinelService

__all__ = [
    "app",
    "ErrorResponse",
    "LoginRequest",
    "LoginResponse",
    "SentinelService",
]
