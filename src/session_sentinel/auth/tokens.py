"""Credential issuer - signed access tokens for evaluated logins.

Tokens are HS256 JWTs carrying the user id (sub), email and the id of
the session the login opened. Logout decodes the token to find that
session.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from session_sentinel.common.clock import Clock, utc_now
from session_sentinel.common.config import Config, get_config
from session_sentinel.common.exceptions import InvalidTokenError
from session_sentinel.data.schemas import User


class TokenIssuer:

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        expire_minutes: int = 60,
        clock: Optional[Clock] = None,
    ):
        self._secret = secret
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes
        self._clock = clock or utc_now

    @classmethod
    def from_config(cls, config: Optional[Config] = None) -> "TokenIssuer":
        config = config or get_config()
        return cls(
            secret=config.token_secret,
            algorithm=config.token_algorithm,
            expire_minutes=config.token_expire_minutes,
        )

    def issue(self, user: User, session_id: str) -> str:
        expire = self._clock() + timedelta(minutes=self.expire_minutes)
        claims = {
            "sub": user.id,
            "email": user.email,
            "session_id": session_id,
            "exp": expire,
        }
        return jwt.encode(claims, self._secret, algorithm=self.algorithm)

    def decode(self, token: str) -> Dict[str, Any]:
        """Validate a token and return its claims.

        Raises:
            InvalidTokenError: On a bad signature, expiry or missing claims
        """
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"verify_exp": False},
            )
        except JWTError as e:
            raise InvalidTokenError() from e

        # Expiry is checked against the injected clock rather than wall time.
        exp = claims.get("exp")
        if exp is None or datetime.fromtimestamp(exp, tz=timezone.utc) <= self._clock():
            raise InvalidTokenError()
        if not claims.get("sub") or not claims.get("session_id"):
            raise InvalidTokenError("Token is missing session claims")
        return claims
