import httpx
import pytest

from conftest import SESSION_COOKIE, profile_payload
from services.automation import actions
from services.automation.types import (
    CommentParams,
    DeleteCommentParams,
    NoParams,
    PostParams,
    TargetUserParams,
)

PROFILE_PATH = "/api/v1/users/web_profile_info/"
POST_URL = "https://www.instagram.com/p/ABC123/"


@pytest.mark.asyncio
async def test_follow_resolves_user_pk_then_follows(instagram_client, fake_instagram):
    fake_instagram.reply("GET", PROFILE_PATH, json=profile_payload("1001"))
    fake_instagram.reply("POST", "/api/v1/friendships/create/1001/", json={"status": "ok"})

    outcome = await actions.follow_user(instagram_client, TargetUserParams(username="alice"), SESSION_COOKIE)

    assert outcome.succeeded is True
    assert outcome.message == "Successfully followed alice"
    assert fake_instagram.paths() == [PROFILE_PATH, "/api/v1/friendships/create/1001/"]

    lookup, follow = fake_instagram.requests
    assert lookup.url.params["username"] == "alice"
    assert follow.headers["Cookie"] == SESSION_COOKIE
    assert follow.headers["X-CSRFToken"] == "csrf123"
    assert follow.headers["X-IG-App-ID"] == instagram_client.app_id


@pytest.mark.asyncio
async def test_follow_short_circuits_when_lookup_fails(instagram_client, fake_instagram):
    fake_instagram.reply("GET", PROFILE_PATH, status=404, json={"status": "fail"})

    outcome = await actions.follow_user(instagram_client, TargetUserParams(username="ghost"), SESSION_COOKIE)

    assert outcome.succeeded is False
    assert outcome.message == "Failed to get profile info for ghost"
    assert fake_instagram.paths() == [PROFILE_PATH]


@pytest.mark.asyncio
async def test_unfollow_reports_rejected_mutation(instagram_client, fake_instagram):
    fake_instagram.reply("GET", PROFILE_PATH, json=profile_payload("1001"))
    fake_instagram.reply("POST", "/api/v1/friendships/destroy/1001/", status=400, json={"status": "fail"})

    outcome = await actions.unfollow_user(instagram_client, TargetUserParams(username="alice"), SESSION_COOKIE)

    assert outcome.succeeded is False
    assert outcome.message == "Failed to unfollow alice"


@pytest.mark.asyncio
async def test_transport_error_becomes_failed_outcome(instagram_client, fake_instagram):
    fake_instagram.fail("GET", PROFILE_PATH, httpx.ConnectError("connection refused"))

    outcome = await actions.follow_user(instagram_client, TargetUserParams(username="alice"), SESSION_COOKIE)

    assert outcome.succeeded is False
    assert outcome.message.startswith("Error following alice")
    assert "connection refused" in outcome.message


@pytest.mark.asyncio
async def test_follow_non_ascii_username_is_percent_encoded(instagram_client, fake_instagram):
    fake_instagram.reply("GET", PROFILE_PATH, json=profile_payload("1001"))
    fake_instagram.reply("POST", "/api/v1/friendships/create/1001/", json={"status": "ok"})

    outcome = await actions.follow_user(instagram_client, TargetUserParams(username="café"), SESSION_COOKIE)

    assert outcome.succeeded is True
    assert outcome.message == "Successfully followed café"
    lookup, follow = fake_instagram.requests
    assert lookup.url.params["username"] == "café"
    assert follow.headers["Referer"] == "https://www.instagram.com/caf%C3%A9/"


@pytest.mark.asyncio
async def test_like_non_ascii_post_url_is_percent_encoded_in_referer(instagram_client, fake_instagram):
    post_url = f"{POST_URL}?utm_source=café"
    fake_instagram.reply("POST", "/web/likes/17522103/like/", json={"status": "ok"})

    outcome = await actions.like_post(instagram_client, PostParams(post_url=post_url), SESSION_COOKIE)

    assert outcome.succeeded is True
    assert fake_instagram.requests[0].headers["Referer"] == f"{POST_URL}?utm_source=caf%C3%A9"


@pytest.mark.asyncio
async def test_unencodable_request_becomes_failed_outcome(instagram_client, fake_instagram):
    outcome = await actions.follow_user(
        instagram_client,
        TargetUserParams(username="alice"),
        "csrftoken=csrf123; sessionid=sessé",
    )

    assert outcome.succeeded is False
    assert outcome.message.startswith("Error following alice")
    assert fake_instagram.requests == []


@pytest.mark.asyncio
async def test_like_posts_to_decoded_media_id(instagram_client, fake_instagram):
    fake_instagram.reply("POST", "/web/likes/17522103/like/", json={"status": "ok"})

    outcome = await actions.like_post(instagram_client, PostParams(post_url=POST_URL), SESSION_COOKIE)

    assert outcome.succeeded is True
    assert outcome.message == f"Successfully liked post: {POST_URL}"
    assert fake_instagram.requests[0].headers["Referer"] == POST_URL


@pytest.mark.asyncio
async def test_unlike_failure_keeps_post_reference_in_message(instagram_client, fake_instagram):
    fake_instagram.reply("POST", "/web/likes/17522103/unlike/", status=403, json={"status": "fail"})

    outcome = await actions.unlike_post(instagram_client, PostParams(post_url=POST_URL), SESSION_COOKIE)

    assert outcome.succeeded is False
    assert POST_URL in outcome.message


@pytest.mark.asyncio
async def test_malformed_post_reference_is_failed_outcome_without_network(instagram_client, fake_instagram):
    params = PostParams.model_construct(post_url="https://www.instagram.com/alice/")

    outcome = await actions.like_post(instagram_client, params, SESSION_COOKIE)

    assert outcome.succeeded is False
    assert outcome.message == "Invalid post URL format"
    assert fake_instagram.requests == []


@pytest.mark.asyncio
async def test_comment_sends_text_as_form_field(instagram_client, fake_instagram):
    fake_instagram.reply("POST", "/web/comments/17522103/add/", json={"id": "555", "status": "ok"})

    params = CommentParams(post_url=POST_URL, comment_text="Great shot!")
    outcome = await actions.comment_post(instagram_client, params, SESSION_COOKIE)

    assert outcome.succeeded is True
    body = fake_instagram.requests[0].content.decode()
    assert "comment_text=Great+shot%21" in body


@pytest.mark.asyncio
async def test_delete_comment_uses_comment_id(instagram_client, fake_instagram):
    fake_instagram.reply("POST", "/web/comments/987/delete/", json={"status": "ok"})

    outcome = await actions.delete_comment(instagram_client, DeleteCommentParams(comment_id="987"), SESSION_COOKIE)

    assert outcome.succeeded is True
    assert outcome.message == "Successfully deleted comment: 987"


@pytest.mark.asyncio
async def test_profile_info_returns_user_data(instagram_client, fake_instagram):
    fake_instagram.reply("GET", PROFILE_PATH, json=profile_payload("1001", "alice"))

    outcome = await actions.profile_info(instagram_client, TargetUserParams(username="alice"), SESSION_COOKIE)

    assert outcome.succeeded is True
    assert outcome.message == "Successfully retrieved profile info for alice"
    assert outcome.data["id"] == "1001"


@pytest.mark.asyncio
async def test_profile_info_with_unusable_body_fails(instagram_client, fake_instagram):
    fake_instagram.handle("GET", PROFILE_PATH, lambda request: httpx.Response(200, text="<html>login</html>"))

    outcome = await actions.profile_info(instagram_client, TargetUserParams(username="alice"), SESSION_COOKIE)

    assert outcome.succeeded is False
    assert outcome.data is None


@pytest.mark.asyncio
async def test_dedupe_succeeds_without_network(instagram_client, fake_instagram):
    outcome = await actions.remove_duplicate_accounts(instagram_client, NoParams(), SESSION_COOKIE)

    assert outcome.succeeded is True
    assert outcome.message == "Duplicate account check completed. No duplicates found."
    assert fake_instagram.requests == []
