"""Authentication dependencies for API user scoping."""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from services.automation import AutomationOrchestrator
from services.entity_store import EntityStore, RecordNotFoundError, StorageError
from services.instagram import InstagramClient
from services.session_token import decode_session_token

logger = logging.getLogger(__name__)

auth_scheme = HTTPBearer(auto_error=False)


@dataclass
class AuthContext:
    user_id: int
    username: Optional[str] = None
    is_admin: bool = False


def get_store(request: Request) -> EntityStore:
    return request.app.state.store


def get_orchestrator(request: Request) -> AutomationOrchestrator:
    return request.app.state.orchestrator


def get_instagram_client(request: Request) -> InstagramClient:
    return request.app.state.instagram_client


def ensure_owner(owner_id: int, auth: AuthContext, what: str) -> None:
    """Reject access to a record owned by another user. Missing and foreign records look the same."""
    if owner_id != auth.user_id:
        raise HTTPException(status_code=404, detail=f"{what} not found")


@contextmanager
def store_errors(what: str):
    """Turn store failures into HTTP errors: a vanished record is 404, a rejected write 409."""
    try:
        yield
    except RecordNotFoundError as exc:
        raise HTTPException(status_code=404, detail=f"{what} not found") from exc
    except StorageError as exc:
        logger.warning("%s write rejected: %s", what, exc)
        raise HTTPException(status_code=409, detail=f"{what} could not be saved") from exc


async def get_auth_context(
    credentials: HTTPAuthorizationCredentials = Depends(auth_scheme),
    store: EntityStore = Depends(get_store),
) -> AuthContext:
    """Resolve authenticated user from Bearer session token."""
    if not credentials or credentials.scheme.lower() != "bearer":
        raise HTTPException(status_code=401, detail="Missing Bearer session token.")

    try:
        claims = decode_session_token(credentials.credentials)
    except ValueError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc

    user = await store.get_user(claims.user_id)
    if user is None:
        raise HTTPException(status_code=401, detail="Session user no longer exists.")

    return AuthContext(user_id=user.id, username=user.username, is_admin=bool(user.is_admin))


async def require_admin(auth: AuthContext = Depends(get_auth_context)) -> AuthContext:
    if not auth.is_admin:
        raise HTTPException(status_code=403, detail="Admin access required.")
    return auth
