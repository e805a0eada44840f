"""
DAYFLOW Planner API - Auth Service

JWT handling. Tokens are issued by the identity service; this API only
verifies them and reads the user id from the `sub` claim. Token creation is
kept for service-to-service calls and tests.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt, JWTError

from dayflow.config import settings


class AuthService:
    """JWT encode/decode with the shared secret."""

    def create_access_token(self, user_id: str, expires_delta: Optional[timedelta] = None) -> str:
        """Create a JWT access token."""
        if expires_delta is None:
            expires_delta = timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)

        now = datetime.now(timezone.utc)
        to_encode = {
            "sub": user_id,
            "exp": now + expires_delta,
            "iat": now,
        }
        return jwt.encode(
            to_encode,
            settings.JWT_SECRET_KEY,
            algorithm=settings.JWT_ALGORITHM,
        )

    def decode_token(self, token: str) -> Optional[str]:
        """Decode and validate a JWT token. Returns user_id if valid."""
        try:
            payload = jwt.decode(
                token,
                settings.JWT_SECRET_KEY,
                algorithms=[settings.JWT_ALGORITHM],
            )
        except JWTError:
            return None
        user_id = payload.get("sub")
        if not user_id:
            return None
        return user_id
