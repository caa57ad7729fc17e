"""
Bearer session tokens for operator logins.

A token is a signed JWT whose subject is the numeric user id. Decoding
returns the validated claims; anything unusable raises ValueError so routes
can answer 401 with the message.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from config import settings

SESSION_TOKEN_TYPE = "igboost_session"


@dataclass(frozen=True)
class IssuedSession:
    token: str
    expires_at: int


@dataclass(frozen=True)
class SessionClaims:
    user_id: int
    username: Optional[str]
    expires_at: int


def create_session_token(
    user_id: int,
    username: Optional[str] = None,
    expires_hours: Optional[int] = None,
) -> IssuedSession:
    issued_at = datetime.now(timezone.utc)
    lifetime = timedelta(hours=max(int(expires_hours or settings.JWT_EXPIRATION_HOURS), 1))
    expires_at = int((issued_at + lifetime).timestamp())

    claims = {
        "sub": str(user_id),
        "type": SESSION_TOKEN_TYPE,
        "iat": int(issued_at.timestamp()),
        "exp": expires_at,
    }
    if username:
        claims["username"] = username
    return IssuedSession(
        token=jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM),
        expires_at=expires_at,
    )


def decode_session_token(token: str) -> SessionClaims:
    try:
        claims = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as exc:
        raise ValueError("Invalid or expired session token.") from exc

    if claims.get("type") != SESSION_TOKEN_TYPE:
        raise ValueError("Invalid session token type.")
    subject = str(claims.get("sub") or "").strip()
    if not subject.isdigit():
        raise ValueError("Session token missing subject.")

    return SessionClaims(
        user_id=int(subject),
        username=claims.get("username"),
        expires_at=int(claims["exp"]),
    )
