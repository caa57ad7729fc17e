"""User registration, login and first-boot admin seeding."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from config import settings
from models.user import User
from services.entity_store import EntityStore, StorageError
from services.passwords import hash_password, verify_password

logger = logging.getLogger(__name__)


class UsernameTakenError(ValueError):
    """Raised when a username already exists (compared case-insensitively)."""


async def register_user(
    store: EntityStore,
    *,
    username: str,
    password: str,
    email: Optional[str] = None,
    is_admin: bool = False,
) -> User:
    normalized = (username or "").strip()
    if not normalized:
        raise ValueError("Username is required")
    if not password:
        raise ValueError("Password is required")
    if await store.get_user_by_username(normalized):
        raise UsernameTakenError("Username already exists")

    password_hash = await asyncio.to_thread(hash_password, password)
    try:
        return await store.create_user(
            username=normalized,
            email=email,
            password_hash=password_hash,
            is_admin=is_admin,
        )
    except StorageError:
        # Lost a race with a concurrent registration of the same name.
        if await store.get_user_by_username(normalized):
            raise UsernameTakenError("Username already exists") from None
        raise


async def authenticate_user(store: EntityStore, username: str, password: str) -> Optional[User]:
    user = await store.get_user_by_username((username or "").strip())
    if user is None:
        return None
    if not await asyncio.to_thread(verify_password, password, user.password_hash):
        return None
    return user


async def seed_admin_user(store: EntityStore) -> Optional[User]:
    """Create the configured admin account unless it already exists."""
    if not settings.ADMIN_PASSWORD:
        logger.info("ADMIN_PASSWORD not set; skipping admin seeding")
        return None
    existing = await store.get_user_by_username(settings.ADMIN_USERNAME)
    if existing:
        return existing
    admin = await register_user(
        store,
        username=settings.ADMIN_USERNAME,
        password=settings.ADMIN_PASSWORD,
        email=settings.ADMIN_EMAIL,
        is_admin=True,
    )
    logger.info("Seeded admin user %s", admin.username)
    return admin
