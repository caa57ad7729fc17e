"""
Entity store for users, Instagram accounts, session cookies and activity logs.

The store is the only component that writes these tables. Identities are
assigned by the database (monotonic, never reused), timestamps are stamped
here, and deleting an owner removes everything it owns before the owner row.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Dict, List, Mapping, Optional, Sequence, Type, TypeVar

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from database import Base, build_session_maker
from models.activity_log import ACTIVITY_STATUSES, ActivityLog
from models.instagram_account import InstagramAccount
from models.instagram_cookie import InstagramCookie
from models.user import User
from services.crypto import encrypt_cookie

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)

_READ_ONLY_FIELDS = {"id", "created_at", "updated_at", "user_id", "account_id"}


class StorageError(RuntimeError):
    """Raised when the underlying database rejects or fails an operation."""


class RecordNotFoundError(StorageError, LookupError):
    """Raised when updating a record id that does not exist."""


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _label(model: Type[Base]) -> str:
    return model.__name__


class EntityStore:
    """Owns the entity tables; constructed once per process and passed to its users."""

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine
        self._session_maker = build_session_maker(engine)
        # One operation at a time: a cascade never interleaves with another write.
        self._lock = asyncio.Lock()

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    async def create_schema(self) -> None:
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self._engine.dispose()

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        async with self._lock:
            async with self._session_maker() as db:
                try:
                    yield db
                except SQLAlchemyError as exc:
                    await db.rollback()
                    raise StorageError(str(exc)) from exc

    # Generic helpers

    async def _insert(self, model: Type[ModelT], values: Dict[str, Any]) -> ModelT:
        now = _now()
        record = model(**values, created_at=now, updated_at=now)
        async with self._session() as db:
            db.add(record)
            await db.commit()
        return record

    async def _get(self, model: Type[ModelT], record_id: int) -> Optional[ModelT]:
        async with self._session() as db:
            return await db.get(model, record_id)

    async def _list_by_owner(self, model: Type[ModelT], owner_column: Any, owner_id: int) -> List[ModelT]:
        async with self._session() as db:
            result = await db.execute(select(model).where(owner_column == owner_id).order_by(model.id))
            return list(result.scalars().all())

    async def _update(self, model: Type[ModelT], record_id: int, changes: Mapping[str, Any]) -> ModelT:
        _check_fields(model, changes)
        async with self._session() as db:
            record = await db.get(model, record_id)
            if record is None:
                raise RecordNotFoundError(f"{_label(model)} with ID {record_id} not found")
            for field, value in changes.items():
                setattr(record, field, value)
            record.updated_at = _now()
            await db.commit()
            return record

    async def _delete_row(self, model: Type[ModelT], record_id: int) -> bool:
        async with self._session() as db:
            result = await db.execute(delete(model).where(model.id == record_id))
            await db.commit()
            return bool(result.rowcount)

    # Users

    async def create_user(
        self,
        *,
        username: str,
        password_hash: str,
        email: Optional[str] = None,
        is_admin: bool = False,
    ) -> User:
        return await self._insert(
            User,
            {"username": username, "password_hash": password_hash, "email": email, "is_admin": bool(is_admin)},
        )

    async def get_user(self, user_id: int) -> Optional[User]:
        return await self._get(User, user_id)

    async def get_user_by_username(self, username: str) -> Optional[User]:
        async with self._session() as db:
            result = await db.execute(
                select(User).where(func.lower(User.username) == (username or "").lower()).limit(1)
            )
            return result.scalar_one_or_none()

    async def list_users(self) -> List[User]:
        async with self._session() as db:
            result = await db.execute(select(User).order_by(User.id))
            return list(result.scalars().all())

    async def update_user(self, user_id: int, changes: Mapping[str, Any]) -> User:
        return await self._update(User, user_id, changes)

    async def delete_user(self, user_id: int) -> bool:
        """Delete a user with its accounts, their cookies, and its activity logs."""
        async with self._session() as db:
            if await db.get(User, user_id) is None:
                return False
            account_ids = await _ids(db, select(InstagramAccount.id).where(InstagramAccount.user_id == user_id))
            cookie_count = await _delete_accounts(db, account_ids)
            log_result = await db.execute(delete(ActivityLog).where(ActivityLog.user_id == user_id))
            await db.execute(delete(User).where(User.id == user_id))
            await db.commit()
        logger.info(
            "Deleted user %s with %s accounts, %s cookies, %s activity logs",
            user_id,
            len(account_ids),
            cookie_count,
            log_result.rowcount,
        )
        return True

    # Instagram accounts

    async def create_account(
        self,
        *,
        user_id: int,
        username: str,
        email: Optional[str] = None,
        active: bool = True,
    ) -> InstagramAccount:
        return await self._insert(
            InstagramAccount,
            {"user_id": user_id, "username": username, "email": email, "active": bool(active)},
        )

    async def get_account(self, account_id: int) -> Optional[InstagramAccount]:
        return await self._get(InstagramAccount, account_id)

    async def list_accounts(self, user_id: int) -> List[InstagramAccount]:
        return await self._list_by_owner(InstagramAccount, InstagramAccount.user_id, user_id)

    async def update_account(self, account_id: int, changes: Mapping[str, Any]) -> InstagramAccount:
        return await self._update(InstagramAccount, account_id, changes)

    async def delete_account(self, account_id: int) -> bool:
        """Delete an account and every cookie stored for it."""
        async with self._session() as db:
            if await db.get(InstagramAccount, account_id) is None:
                return False
            cookie_count = await _delete_accounts(db, [account_id])
            await db.commit()
        logger.info("Deleted Instagram account %s with %s cookies", account_id, cookie_count)
        return True

    # Cookies

    async def create_cookie(self, *, account_id: int, cookie_value: str, active: bool = True) -> InstagramCookie:
        return await self._insert(
            InstagramCookie,
            {"account_id": account_id, "cookie_value_encrypted": encrypt_cookie(cookie_value), "active": bool(active)},
        )

    async def get_cookie(self, cookie_id: int) -> Optional[InstagramCookie]:
        return await self._get(InstagramCookie, cookie_id)

    async def list_cookies(self, account_id: int) -> List[InstagramCookie]:
        return await self._list_by_owner(InstagramCookie, InstagramCookie.account_id, account_id)

    async def list_cookies_for_user(self, user_id: int, active_only: bool = False) -> List[InstagramCookie]:
        """Cookies of every account the user owns, oldest first."""
        stmt = (
            select(InstagramCookie)
            .join(InstagramAccount, InstagramCookie.account_id == InstagramAccount.id)
            .where(InstagramAccount.user_id == user_id)
        )
        if active_only:
            stmt = stmt.where(InstagramCookie.active.is_(True), InstagramAccount.active.is_(True))
        async with self._session() as db:
            result = await db.execute(stmt.order_by(InstagramCookie.id))
            return list(result.scalars().all())

    async def update_cookie(self, cookie_id: int, changes: Mapping[str, Any]) -> InstagramCookie:
        values = dict(changes)
        if "cookie_value" in values:
            values["cookie_value_encrypted"] = encrypt_cookie(values.pop("cookie_value"))
        return await self._update(InstagramCookie, cookie_id, values)

    async def delete_cookie(self, cookie_id: int) -> bool:
        return await self._delete_row(InstagramCookie, cookie_id)

    # Activity logs

    async def create_activity_log(
        self,
        *,
        user_id: int,
        action_type: str,
        description: str,
        target: Optional[str] = None,
        status: str = "pending",
    ) -> ActivityLog:
        _check_status(status)
        return await self._insert(
            ActivityLog,
            {
                "user_id": user_id,
                "action_type": action_type,
                "description": description,
                "target": target or "Unknown",
                "status": status,
            },
        )

    async def get_activity_log(self, log_id: int) -> Optional[ActivityLog]:
        return await self._get(ActivityLog, log_id)

    async def list_activity_logs(self, user_id: int, limit: Optional[int] = None) -> List[ActivityLog]:
        """Logs of a user, most recent first; equal timestamps fall back to insertion order."""
        if limit is not None and limit < 0:
            raise ValueError("limit must not be negative")
        stmt = (
            select(ActivityLog)
            .where(ActivityLog.user_id == user_id)
            .order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        async with self._session() as db:
            result = await db.execute(stmt)
            return list(result.scalars().all())

    async def update_activity_log(self, log_id: int, changes: Mapping[str, Any]) -> ActivityLog:
        if "status" in changes:
            _check_status(changes["status"])
        return await self._update(ActivityLog, log_id, changes)

    async def delete_activity_log(self, log_id: int) -> bool:
        return await self._delete_row(ActivityLog, log_id)


def _check_fields(model: Type[Base], changes: Mapping[str, Any]) -> None:
    columns = set(model.__table__.columns.keys())
    unknown = sorted(set(changes) - columns)
    if unknown:
        raise ValueError(f"Unknown {_label(model)} fields: {', '.join(unknown)}")
    read_only = sorted(set(changes) & _READ_ONLY_FIELDS)
    if read_only:
        raise ValueError(f"{_label(model)} fields cannot be changed: {', '.join(read_only)}")


def _check_status(status: str) -> None:
    if status not in ACTIVITY_STATUSES:
        raise ValueError(f"Invalid activity status: {status}")


async def _ids(db: AsyncSession, stmt: Any) -> List[int]:
    result = await db.execute(stmt)
    return [int(value) for value in result.scalars().all()]


async def _delete_accounts(db: AsyncSession, account_ids: Sequence[int]) -> int:
    """Remove cookies of the given accounts, then the accounts. Returns removed cookie count."""
    if not account_ids:
        return 0
    cookie_result = await db.execute(delete(InstagramCookie).where(InstagramCookie.account_id.in_(account_ids)))
    await db.execute(delete(InstagramAccount).where(InstagramAccount.id.in_(account_ids)))
    return int(cookie_result.rowcount or 0)
