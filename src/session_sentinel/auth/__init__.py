"""Credential issuer - module init."""

from session_sentinel.auth.tokens import TokenIssuer

__all__ = ["TokenIssuer"]
