"""Orchestration - login pipeline."""

from session_sentinel.orchestration.login_flow import LoginAttempt, LoginFlow, LoginResult

__all__ = ["LoginAttempt", "LoginFlow", "LoginResult"]
