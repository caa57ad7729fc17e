"""
Automation dispatch.

dispatch() is the single entry point for running an action on behalf of a
user: it validates the request, picks the user's session cookie, opens a
pending activity log, runs the action and closes that same log with the
outcome.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Type, Union

from pydantic import ValidationError

from services.automation.registry import ActionRegistry
from services.automation.types import ActionKind, ActionOutcome, ActionParams, DispatchResult
from services.crypto import decrypt_cookie
from services.entity_store import EntityStore

logger = logging.getLogger(__name__)

NO_COOKIES_MESSAGE = "No cookies available. Please add an account first."
UNKNOWN_TYPE_MESSAGE = "Unknown automation type"
SERVER_ERROR_MESSAGE = "Error running automation"


def _field_title(model: Type[ActionParams], key: Any) -> str:
    for name, field in model.model_fields.items():
        if key in (name, field.alias):
            return field.title or name
    return str(key)


def describe_validation_error(model: Type[ActionParams], exc: ValidationError) -> str:
    """First validation problem as a short sentence, e.g. "Post URL is required"."""
    error = exc.errors()[0]
    loc = error.get("loc") or ("",)
    key = loc[0]
    kind = error.get("type", "")
    if kind == "extra_forbidden":
        return f"Unexpected parameter: {key}"
    if kind in ("missing", "string_too_short"):
        return f"{_field_title(model, key)} is required"
    if kind == "value_error":
        ctx_error = (error.get("ctx") or {}).get("error")
        if ctx_error is not None:
            return str(ctx_error)
    return f"{_field_title(model, key)}: {error.get('msg', 'invalid value')}"


def _client_error(message: str) -> DispatchResult:
    return DispatchResult(status="client_error", outcome=ActionOutcome(succeeded=False, message=message))


class AutomationOrchestrator:
    def __init__(self, store: EntityStore, registry: ActionRegistry) -> None:
        self._store = store
        self._registry = registry

    def validate(self, action_kind: Union[ActionKind, str], params: Mapping[str, Any]):
        """Resolve the kind and build its parameters. Returns (kind, params) or a client-error result."""
        try:
            kind = ActionKind(action_kind)
        except ValueError:
            return _client_error(UNKNOWN_TYPE_MESSAGE)

        model = self._registry.spec_for(kind).params_model
        try:
            parsed = model.model_validate(dict(params or {}))
        except ValidationError as exc:
            return _client_error(describe_validation_error(model, exc))
        return kind, parsed

    async def dispatch(
        self,
        user_id: int,
        action_kind: Union[ActionKind, str],
        params: Optional[Mapping[str, Any]] = None,
    ) -> DispatchResult:
        validated = self.validate(action_kind, params or {})
        if isinstance(validated, DispatchResult):
            logger.warning("Rejected %s request for user %s: %s", action_kind, user_id, validated.outcome.message)
            return validated
        kind, parsed = validated
        spec = self._registry.spec_for(kind)

        log_id: Optional[int] = None
        try:
            cookies = await self._store.list_cookies_for_user(user_id, active_only=True)
            if not cookies:
                logger.warning("Rejected %s request for user %s: no cookies", kind.value, user_id)
                return _client_error(NO_COOKIES_MESSAGE)
            cookie_value = decrypt_cookie(cookies[0].cookie_value_encrypted)

            log = await self._store.create_activity_log(
                user_id=user_id,
                action_type=kind.value,
                description=spec.describe(parsed),
                target=spec.target(parsed),
                status="pending",
            )
            log_id = log.id

            outcome = await self._registry.run(kind, parsed, cookie_value)

            await self._store.update_activity_log(log_id, {"status": "success" if outcome.succeeded else "failed"})
        except Exception as exc:
            logger.exception("Automation %s failed for user %s (activity log %s)", kind.value, user_id, log_id)
            return DispatchResult(
                status="server_error",
                outcome=ActionOutcome(succeeded=False, message=SERVER_ERROR_MESSAGE),
                activity_log_id=log_id,
                error=str(exc),
            )

        logger.info(
            "Automation %s for user %s finished: %s (activity log %s)",
            kind.value,
            user_id,
            "success" if outcome.succeeded else "failed",
            log_id,
        )
        return DispatchResult(status="completed", outcome=outcome, activity_log_id=log_id)
