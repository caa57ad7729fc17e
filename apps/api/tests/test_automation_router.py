import pytest

from conftest import auth_header, profile_payload
from services.entity_store import StorageError

POST_URL = "https://www.instagram.com/p/ABC123/"


@pytest.mark.asyncio
async def test_run_requires_authentication(api_client):
    response = await api_client.post("/automation/run", json={"type": "dedupe"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_no_cookies_is_400_with_message(api_client, store, make_user):
    user = await make_user()

    response = await api_client.post(
        "/automation/run",
        json={"type": "follow", "username": "alice"},
        headers=auth_header(user),
    )

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "No cookies available. Please add an account first."}
    assert await store.list_activity_logs(user.id) == []


@pytest.mark.asyncio
async def test_blank_and_null_values_count_as_missing(api_client, store, make_user, make_account_with_cookie):
    user = await make_user()
    await make_account_with_cookie(user)

    response = await api_client.post(
        "/automation/run",
        json={"type": "comment", "postUrl": POST_URL, "commentText": "   ", "commentId": None},
        headers=auth_header(user),
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Comment text is required"
    assert await store.list_activity_logs(user.id) == []


@pytest.mark.asyncio
async def test_follow_returns_outcome_and_records_log(api_client, store, make_user, make_account_with_cookie, fake_instagram):
    user = await make_user()
    await make_account_with_cookie(user)
    fake_instagram.reply("GET", "/api/v1/users/web_profile_info/", json=profile_payload("1001"))
    fake_instagram.reply("POST", "/api/v1/friendships/create/1001/", json={"status": "ok"})

    response = await api_client.post(
        "/automation/run",
        json={"type": "follow", "username": "alice"},
        headers=auth_header(user),
    )

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Successfully followed alice"}

    logs = await api_client.get("/activity-logs", headers=auth_header(user))
    assert logs.status_code == 200
    [entry] = logs.json()
    assert entry["action_type"] == "follow"
    assert entry["description"] == "Followed @alice"
    assert entry["status"] == "success"


@pytest.mark.asyncio
async def test_failed_action_is_still_200(api_client, store, make_user, make_account_with_cookie, fake_instagram):
    user = await make_user()
    await make_account_with_cookie(user)
    fake_instagram.reply("POST", "/web/likes/17522103/like/", status=400)

    response = await api_client.post(
        "/automation/run",
        json={"type": "like", "postUrl": POST_URL},
        headers=auth_header(user),
    )

    assert response.status_code == 200
    assert response.json()["success"] is False
    [log] = await store.list_activity_logs(user.id)
    assert log.status == "failed"


@pytest.mark.asyncio
async def test_storage_fault_is_500(api_client, store, make_user, make_account_with_cookie, monkeypatch):
    user = await make_user()
    await make_account_with_cookie(user)

    async def broken_create(**kwargs):
        raise StorageError("database is locked")

    monkeypatch.setattr(store, "create_activity_log", broken_create)

    response = await api_client.post("/automation/run", json={"type": "dedupe"}, headers=auth_header(user))

    assert response.status_code == 500
    assert response.json() == {
        "success": False,
        "message": "Error running automation",
        "error": "database is locked",
    }


@pytest.mark.asyncio
async def test_activity_logs_honour_limit(api_client, make_user, make_account_with_cookie):
    user = await make_user()
    await make_account_with_cookie(user)
    headers = auth_header(user)
    for _ in range(3):
        await api_client.post("/automation/run", json={"type": "dedupe"}, headers=headers)

    limited = await api_client.get("/activity-logs?limit=2", headers=headers)
    assert limited.status_code == 200
    entries = limited.json()
    assert len(entries) == 2
    assert entries[0]["id"] > entries[1]["id"]

    negative = await api_client.get("/activity-logs?limit=-1", headers=headers)
    assert negative.status_code == 422
