"""
Authentication router: registration, password login and the current user.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from routers.auth_scope import AuthContext, get_auth_context, get_store
from services.entity_store import EntityStore
from services.session_token import create_session_token
from services.users import UsernameTakenError, authenticate_user, register_user

router = APIRouter()


class RegisterRequest(BaseModel):
    username: str = Field(min_length=1, max_length=150)
    password: str = Field(min_length=1)
    email: Optional[str] = None


class LoginRequest(BaseModel):
    username: str
    password: str


class UserResponse(BaseModel):
    id: int
    username: str
    email: Optional[str] = None
    is_admin: bool = False
    created_at: datetime


class SessionResponse(BaseModel):
    user: UserResponse
    session_token: str
    session_expires_at: int


def _user_response(user) -> UserResponse:
    return UserResponse(
        id=user.id,
        username=user.username,
        email=user.email,
        is_admin=bool(user.is_admin),
        created_at=user.created_at,
    )


def _session_response(user) -> SessionResponse:
    session = create_session_token(user.id, user.username)
    return SessionResponse(
        user=_user_response(user),
        session_token=session.token,
        session_expires_at=session.expires_at,
    )


@router.post("/register", response_model=SessionResponse, status_code=201)
async def register(request: RegisterRequest, store: EntityStore = Depends(get_store)):
    """Create a user account and return a session for it."""
    try:
        user = await register_user(
            store,
            username=request.username,
            password=request.password,
            email=request.email,
        )
    except UsernameTakenError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return _session_response(user)


@router.post("/login", response_model=SessionResponse)
async def login(request: LoginRequest, store: EntityStore = Depends(get_store)):
    user = await authenticate_user(store, request.username, request.password)
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid username or password")
    return _session_response(user)


@router.get("/me", response_model=UserResponse)
async def get_current_user(
    auth: AuthContext = Depends(get_auth_context),
    store: EntityStore = Depends(get_store),
):
    """Get the signed-in user."""
    user = await store.get_user(auth.user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return _user_response(user)


@router.post("/logout")
async def logout(_auth: AuthContext = Depends(get_auth_context)):
    """Frontend-managed logout acknowledgment endpoint."""
    return {"message": "Logged out successfully"}
