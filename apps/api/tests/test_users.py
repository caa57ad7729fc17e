import asyncio

import pytest
from jose import jwt

from config import settings
from services.passwords import hash_password, verify_password
from services.session_token import create_session_token, decode_session_token
from services.users import UsernameTakenError, authenticate_user, register_user, seed_admin_user


def test_password_hash_round_trip():
    hashed = hash_password("correct horse")
    assert hashed != "correct horse"
    assert verify_password("correct horse", hashed) is True
    assert verify_password("wrong horse", hashed) is False
    assert verify_password("correct horse", "not-a-bcrypt-hash") is False
    assert verify_password("", hashed) is False


def test_session_token_carries_numeric_user_id():
    session = create_session_token(17, "operator")
    claims = decode_session_token(session.token)
    assert claims.user_id == 17
    assert claims.username == "operator"
    assert claims.expires_at == session.expires_at


def test_session_token_rejects_non_numeric_subject():
    token = jwt.encode(
        {"sub": "alice", "type": "igboost_session"},
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )
    with pytest.raises(ValueError, match="missing subject"):
        decode_session_token(token)


def test_session_token_rejects_garbage():
    with pytest.raises(ValueError):
        decode_session_token("garbage.token.value")


@pytest.mark.asyncio
async def test_register_and_authenticate(store):
    user = await register_user(store, username="  Operator ", password="pw-1", email="op@example.com")

    assert user.username == "Operator"
    assert user.password_hash != "pw-1"
    assert (await authenticate_user(store, "operator", "pw-1")).id == user.id
    assert await authenticate_user(store, "operator", "pw-2") is None
    assert await authenticate_user(store, "nobody", "pw-1") is None


@pytest.mark.asyncio
async def test_register_rejects_case_insensitive_duplicate(store):
    await register_user(store, username="Operator", password="pw")
    with pytest.raises(UsernameTakenError):
        await register_user(store, username="OPERATOR", password="pw")


@pytest.mark.asyncio
async def test_seed_admin_user_runs_once(store, monkeypatch):
    monkeypatch.setattr(settings, "ADMIN_USERNAME", "root")
    monkeypatch.setattr(settings, "ADMIN_PASSWORD", "root-password")

    first = await seed_admin_user(store)
    second = await seed_admin_user(store)

    assert first.is_admin is True
    assert second.id == first.id
    assert len(await store.list_users()) == 1


@pytest.mark.asyncio
async def test_seed_admin_user_skipped_without_password(store, monkeypatch):
    monkeypatch.setattr(settings, "ADMIN_PASSWORD", "")

    assert await seed_admin_user(store) is None
    assert await store.list_users() == []


@pytest.mark.asyncio
async def test_concurrent_registrations_of_one_name_yield_one_user(store):
    results = await asyncio.gather(
        register_user(store, username="Bob", password="pw-1"),
        register_user(store, username="bob", password="pw-2"),
        return_exceptions=True,
    )

    created = [result for result in results if not isinstance(result, Exception)]
    rejected = [result for result in results if isinstance(result, Exception)]
    assert len(created) == 1
    assert len(rejected) == 1
    assert isinstance(rejected[0], UsernameTakenError)
    assert len(await store.list_users()) == 1
