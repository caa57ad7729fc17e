"""
Instagram account and session cookie management.

Every route scopes to the signed-in user: a record owned by someone else
answers exactly like a missing one.
"""

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, Field, field_validator, model_validator

from routers.auth_scope import (
    AuthContext,
    ensure_owner,
    get_auth_context,
    get_instagram_client,
    get_store,
    store_errors,
)
from services.crypto import CookieDecryptionError, cookie_preview, decrypt_cookie
from services.entity_store import EntityStore, RecordNotFoundError
from services.instagram import InstagramClient, is_logged_in, retrieve_session_cookies

logger = logging.getLogger(__name__)

router = APIRouter()


class AccountCreateRequest(BaseModel):
    username: Optional[str] = None
    email: Optional[str] = None
    active: bool = True

    @model_validator(mode="after")
    def _username_or_email(self):
        if not (self.username or "").strip():
            local_part = (self.email or "").split("@")[0].strip()
            if not local_part:
                raise ValueError("Username or email is required")
            self.username = local_part
        self.username = self.username.strip().lstrip("@")
        return self


class AccountUpdateRequest(BaseModel):
    username: Optional[str] = Field(default=None, min_length=1)
    email: Optional[str] = None
    active: Optional[bool] = None

    @field_validator("active")
    @classmethod
    def _not_null(cls, value):
        if value is None:
            raise ValueError("may be omitted but not null")
        return value

    @field_validator("username")
    @classmethod
    def _strip_handle(cls, value: Optional[str]) -> str:
        cleaned = (value or "").strip().lstrip("@")
        if not cleaned:
            raise ValueError("Username is required")
        return cleaned


class AccountResponse(BaseModel):
    id: int
    user_id: int
    username: str
    email: Optional[str] = None
    active: bool
    created_at: datetime
    updated_at: datetime


class AccountLoginRequest(BaseModel):
    password: str = Field(min_length=1)


class CookieCreateRequest(BaseModel):
    account_id: int
    cookie_value: str = Field(min_length=1)
    active: bool = True


class CookieUpdateRequest(BaseModel):
    cookie_value: Optional[str] = Field(default=None, min_length=1)
    active: Optional[bool] = None

    @field_validator("active")
    @classmethod
    def _not_null(cls, value):
        if value is None:
            raise ValueError("may be omitted but not null")
        return value

    @field_validator("cookie_value")
    @classmethod
    def _strip_value(cls, value: Optional[str]) -> str:
        cleaned = (value or "").strip()
        if not cleaned:
            raise ValueError("Cookie value is required")
        return cleaned


class CookieResponse(BaseModel):
    id: int
    account_id: int
    cookie_preview: str
    active: bool
    created_at: datetime
    updated_at: datetime


class CookieVerifyResponse(BaseModel):
    id: int
    valid: bool
    active: bool


def _account_response(account) -> AccountResponse:
    return AccountResponse(
        id=account.id,
        user_id=account.user_id,
        username=account.username,
        email=account.email,
        active=bool(account.active),
        created_at=account.created_at,
        updated_at=account.updated_at,
    )


def _cookie_response(cookie) -> CookieResponse:
    try:
        preview = cookie_preview(decrypt_cookie(cookie.cookie_value_encrypted))
    except CookieDecryptionError:
        preview = "<unreadable>"
    return CookieResponse(
        id=cookie.id,
        account_id=cookie.account_id,
        cookie_preview=preview,
        active=bool(cookie.active),
        created_at=cookie.created_at,
        updated_at=cookie.updated_at,
    )


async def _owned_account(store: EntityStore, account_id: int, auth: AuthContext):
    account = await store.get_account(account_id)
    if account is None:
        raise HTTPException(status_code=404, detail="Account not found")
    ensure_owner(account.user_id, auth, "Account")
    return account


async def _owned_cookie(store: EntityStore, cookie_id: int, auth: AuthContext):
    cookie = await store.get_cookie(cookie_id)
    if cookie is None:
        raise HTTPException(status_code=404, detail="Cookie not found")
    account = await store.get_account(cookie.account_id)
    if account is None:
        raise HTTPException(status_code=404, detail="Cookie not found")
    ensure_owner(account.user_id, auth, "Cookie")
    return cookie


# Accounts


@router.get("/accounts", response_model=List[AccountResponse])
async def list_accounts(
    auth: AuthContext = Depends(get_auth_context),
    store: EntityStore = Depends(get_store),
):
    return [_account_response(account) for account in await store.list_accounts(auth.user_id)]


@router.post("/accounts", response_model=AccountResponse, status_code=201)
async def create_account(
    request: AccountCreateRequest,
    auth: AuthContext = Depends(get_auth_context),
    store: EntityStore = Depends(get_store),
):
    with store_errors("Account"):
        account = await store.create_account(
            user_id=auth.user_id,
            username=request.username,
            email=request.email,
            active=request.active,
        )
    return _account_response(account)


@router.patch("/accounts/{account_id}", response_model=AccountResponse)
async def update_account(
    account_id: int,
    request: AccountUpdateRequest,
    auth: AuthContext = Depends(get_auth_context),
    store: EntityStore = Depends(get_store),
):
    await _owned_account(store, account_id, auth)
    changes = request.model_dump(exclude_unset=True)
    if not changes:
        raise HTTPException(status_code=400, detail="No changes supplied")
    with store_errors("Account"):
        account = await store.update_account(account_id, changes)
    return _account_response(account)


@router.delete("/accounts/{account_id}", status_code=204)
async def delete_account(
    account_id: int,
    auth: AuthContext = Depends(get_auth_context),
    store: EntityStore = Depends(get_store),
):
    """Delete an account together with its stored cookies."""
    await _owned_account(store, account_id, auth)
    with store_errors("Account"):
        if not await store.delete_account(account_id):
            raise RecordNotFoundError(f"Account with ID {account_id} not found")
    return Response(status_code=204)


@router.post("/accounts/{account_id}/login", response_model=CookieResponse, status_code=201)
async def login_account(
    account_id: int,
    request: AccountLoginRequest,
    auth: AuthContext = Depends(get_auth_context),
    store: EntityStore = Depends(get_store),
    client: InstagramClient = Depends(get_instagram_client),
):
    """
    Log the account in on Instagram and store the resulting session cookie.

    The password is only used for this login; it is never stored.
    """
    account = await _owned_account(store, account_id, auth)
    result = await retrieve_session_cookies(client, account.username, request.password)
    if not result.success:
        raise HTTPException(status_code=400, detail=result.message)
    with store_errors("Cookie"):
        cookie = await store.create_cookie(account_id=account.id, cookie_value=result.cookie_string)
    logger.info("Stored fresh session cookie %s for account %s", cookie.id, account.id)
    return _cookie_response(cookie)


# Cookies


@router.get("/cookies", response_model=List[CookieResponse])
async def list_cookies(
    account_id: Optional[int] = None,
    auth: AuthContext = Depends(get_auth_context),
    store: EntityStore = Depends(get_store),
):
    if account_id is not None:
        await _owned_account(store, account_id, auth)
        cookies = await store.list_cookies(account_id)
    else:
        cookies = await store.list_cookies_for_user(auth.user_id)
    return [_cookie_response(cookie) for cookie in cookies]


@router.post("/cookies", response_model=CookieResponse, status_code=201)
async def create_cookie(
    request: CookieCreateRequest,
    auth: AuthContext = Depends(get_auth_context),
    store: EntityStore = Depends(get_store),
):
    await _owned_account(store, request.account_id, auth)
    with store_errors("Cookie"):
        cookie = await store.create_cookie(
            account_id=request.account_id,
            cookie_value=request.cookie_value.strip(),
            active=request.active,
        )
    return _cookie_response(cookie)


@router.patch("/cookies/{cookie_id}", response_model=CookieResponse)
async def update_cookie(
    cookie_id: int,
    request: CookieUpdateRequest,
    auth: AuthContext = Depends(get_auth_context),
    store: EntityStore = Depends(get_store),
):
    await _owned_cookie(store, cookie_id, auth)
    changes = request.model_dump(exclude_unset=True)
    if not changes:
        raise HTTPException(status_code=400, detail="No changes supplied")
    with store_errors("Cookie"):
        cookie = await store.update_cookie(cookie_id, changes)
    return _cookie_response(cookie)


@router.delete("/cookies/{cookie_id}", status_code=204)
async def delete_cookie(
    cookie_id: int,
    auth: AuthContext = Depends(get_auth_context),
    store: EntityStore = Depends(get_store),
):
    await _owned_cookie(store, cookie_id, auth)
    with store_errors("Cookie"):
        if not await store.delete_cookie(cookie_id):
            raise RecordNotFoundError(f"Cookie with ID {cookie_id} not found")
    return Response(status_code=204)


@router.post("/cookies/{cookie_id}/verify", response_model=CookieVerifyResponse)
async def verify_cookie(
    cookie_id: int,
    auth: AuthContext = Depends(get_auth_context),
    store: EntityStore = Depends(get_store),
    client: InstagramClient = Depends(get_instagram_client),
):
    """Check the cookie against Instagram; a cookie that no longer logs in is deactivated."""
    cookie = await _owned_cookie(store, cookie_id, auth)
    try:
        cookie_value = decrypt_cookie(cookie.cookie_value_encrypted)
    except CookieDecryptionError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    valid = await is_logged_in(client, cookie_value)
    if not valid and cookie.active:
        with store_errors("Cookie"):
            cookie = await store.update_cookie(cookie_id, {"active": False})
        logger.info("Deactivated expired session cookie %s", cookie_id)
    return CookieVerifyResponse(id=cookie.id, valid=valid, active=bool(cookie.active))
