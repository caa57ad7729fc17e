"""Activity log listing for the signed-in user."""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from routers.auth_scope import AuthContext, get_auth_context, get_store
from services.entity_store import EntityStore

router = APIRouter()


class ActivityLogResponse(BaseModel):
    id: int
    action_type: str
    target: str
    description: str
    status: str
    created_at: datetime
    updated_at: datetime


@router.get("", response_model=List[ActivityLogResponse])
async def list_activity_logs(
    limit: Optional[int] = Query(default=None, ge=0),
    auth: AuthContext = Depends(get_auth_context),
    store: EntityStore = Depends(get_store),
):
    """Most recent activity first."""
    logs = await store.list_activity_logs(auth.user_id, limit=limit)
    return [
        ActivityLogResponse(
            id=log.id,
            action_type=log.action_type,
            target=log.target,
            description=log.description,
            status=log.status,
            created_at=log.created_at,
            updated_at=log.updated_at,
        )
        for log in logs
    ]
