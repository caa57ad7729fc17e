"""
Action registry: the closed mapping from ActionKind to its handler.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Mapping, Optional, Type

from config import settings
from services.automation import actions
from services.automation.types import (
    ActionKind,
    ActionOutcome,
    ActionParams,
    CommentParams,
    DeleteCommentParams,
    NoParams,
    PostParams,
    TargetUserParams,
)
from services.instagram.client import InstagramClient

logger = logging.getLogger(__name__)

Handler = Callable[[InstagramClient, ActionParams, str], Awaitable[ActionOutcome]]


@dataclass(frozen=True)
class ActionSpec:
    kind: ActionKind
    params_model: Type[ActionParams]
    handler: Handler
    describe: Callable[[ActionParams], str]
    target: Callable[[ActionParams], Optional[str]]


def _no_target(params: ActionParams) -> Optional[str]:
    return None


ACTION_SPECS: Mapping[ActionKind, ActionSpec] = {
    ActionKind.FOLLOW: ActionSpec(
        kind=ActionKind.FOLLOW,
        params_model=TargetUserParams,
        handler=actions.follow_user,
        describe=lambda p: f"Followed @{p.username}",
        target=lambda p: p.username,
    ),
    ActionKind.UNFOLLOW: ActionSpec(
        kind=ActionKind.UNFOLLOW,
        params_model=TargetUserParams,
        handler=actions.unfollow_user,
        describe=lambda p: f"Unfollowed @{p.username}",
        target=lambda p: p.username,
    ),
    ActionKind.LIKE: ActionSpec(
        kind=ActionKind.LIKE,
        params_model=PostParams,
        handler=actions.like_post,
        describe=lambda p: f"Liked post: {p.post_url}",
        target=lambda p: p.post_url,
    ),
    ActionKind.UNLIKE: ActionSpec(
        kind=ActionKind.UNLIKE,
        params_model=PostParams,
        handler=actions.unlike_post,
        describe=lambda p: f"Unliked post: {p.post_url}",
        target=lambda p: p.post_url,
    ),
    ActionKind.COMMENT: ActionSpec(
        kind=ActionKind.COMMENT,
        params_model=CommentParams,
        handler=actions.comment_post,
        describe=lambda p: f"Commented on post: {p.post_url}",
        target=lambda p: p.post_url,
    ),
    ActionKind.DELETE_COMMENT: ActionSpec(
        kind=ActionKind.DELETE_COMMENT,
        params_model=DeleteCommentParams,
        handler=actions.delete_comment,
        describe=lambda p: f"Deleted comment: {p.comment_id}",
        target=lambda p: p.post_url,
    ),
    ActionKind.PROFILE_INFO: ActionSpec(
        kind=ActionKind.PROFILE_INFO,
        params_model=TargetUserParams,
        handler=actions.profile_info,
        describe=lambda p: f"Retrieved profile info: @{p.username}",
        target=lambda p: p.username,
    ),
    ActionKind.DEDUPE: ActionSpec(
        kind=ActionKind.DEDUPE,
        params_model=NoParams,
        handler=actions.remove_duplicate_accounts,
        describe=lambda p: "Removed duplicate accounts",
        target=_no_target,
    ),
}


class ActionRegistry:
    """Runs the handler registered for an action kind against one session cookie."""

    def __init__(
        self,
        client: InstagramClient,
        *,
        timeout_seconds: Optional[float] = None,
        specs: Optional[Mapping[ActionKind, ActionSpec]] = None,
    ) -> None:
        self._client = client
        self._timeout = timeout_seconds if timeout_seconds is not None else settings.AUTOMATION_ACTION_TIMEOUT_SECONDS
        self._specs = dict(specs if specs is not None else ACTION_SPECS)
        missing = [kind.value for kind in ActionKind if kind not in self._specs]
        if missing:
            raise RuntimeError(f"No handler registered for action kinds: {', '.join(missing)}")

    def spec_for(self, kind: ActionKind) -> ActionSpec:
        return self._specs[kind]

    async def run(self, kind: ActionKind, params: ActionParams, cookie: str) -> ActionOutcome:
        spec = self._specs[kind]
        try:
            return await asyncio.wait_for(spec.handler(self._client, params, cookie), timeout=self._timeout)
        except asyncio.TimeoutError:
            logger.warning("Action %s timed out after %ss", kind.value, self._timeout)
            return ActionOutcome(succeeded=False, message=f"Action {kind.value} timed out")
        except Exception as exc:
            logger.exception("Action %s raised unexpectedly", kind.value)
            return ActionOutcome(succeeded=False, message=f"Action {kind.value} failed: {exc}")
