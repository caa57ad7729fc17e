"""Admin-only user management."""

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel

from routers.auth_scope import AuthContext, get_store, require_admin, store_errors
from services.entity_store import EntityStore, RecordNotFoundError

logger = logging.getLogger(__name__)

router = APIRouter()


class AdminUserResponse(BaseModel):
    id: int
    username: str
    email: Optional[str] = None
    is_admin: bool
    created_at: datetime


@router.get("/users", response_model=List[AdminUserResponse])
async def list_users(
    _admin: AuthContext = Depends(require_admin),
    store: EntityStore = Depends(get_store),
):
    return [
        AdminUserResponse(
            id=user.id,
            username=user.username,
            email=user.email,
            is_admin=bool(user.is_admin),
            created_at=user.created_at,
        )
        for user in await store.list_users()
    ]


@router.delete("/users/{user_id}", status_code=204)
async def delete_user(
    user_id: int,
    admin: AuthContext = Depends(require_admin),
    store: EntityStore = Depends(get_store),
):
    """Delete a user with all of its accounts, cookies and activity logs."""
    user = await store.get_user(user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    if user.is_admin:
        raise HTTPException(status_code=403, detail="Cannot delete admin users")

    with store_errors("User"):
        if not await store.delete_user(user_id):
            raise RecordNotFoundError(f"User with ID {user_id} not found")
    logger.info("Admin %s deleted user %s", admin.user_id, user_id)
    return Response(status_code=204)
