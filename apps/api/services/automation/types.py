"""Automation contracts: action kinds, per-kind parameters and outcomes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from services.instagram.media import extract_shortcode


class ActionKind(str, Enum):
    FOLLOW = "follow"
    UNFOLLOW = "unfollow"
    LIKE = "like"
    UNLIKE = "unlike"
    COMMENT = "comment"
    DELETE_COMMENT = "delete_comment"
    PROFILE_INFO = "profile_info"
    DEDUPE = "dedupe"


@dataclass(frozen=True)
class ActionOutcome:
    """Result of one external interaction. Variants return this instead of raising."""

    succeeded: bool
    message: str
    data: Optional[Any] = None

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"success": self.succeeded, "message": self.message}
        if self.data is not None:
            payload["data"] = self.data
        return payload


DispatchStatus = Literal["completed", "client_error", "server_error"]


@dataclass(frozen=True)
class DispatchResult:
    status: DispatchStatus
    outcome: ActionOutcome
    activity_log_id: Optional[int] = None
    error: Optional[str] = None

    @property
    def completed(self) -> bool:
        return self.status == "completed"


class ActionParams(BaseModel):
    """Base for per-kind parameters. Accepts snake_case or camelCase keys, rejects anything else."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        frozen=True,
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_blank_values(cls, data: Any) -> Any:
        """Null and whitespace-only values count as missing."""
        if not isinstance(data, dict):
            return data
        return {
            key: value
            for key, value in data.items()
            if value is not None and not (isinstance(value, str) and not value.strip())
        }


class TargetUserParams(ActionParams):
    username: str = Field(min_length=1, title="Username")

    @field_validator("username")
    @classmethod
    def _strip_handle(cls, value: str) -> str:
        cleaned = value.strip().lstrip("@")
        if not cleaned:
            raise ValueError("Username is required")
        return cleaned


class PostParams(ActionParams):
    post_url: str = Field(min_length=1, title="Post URL")

    @field_validator("post_url")
    @classmethod
    def _has_shortcode(cls, value: str) -> str:
        extract_shortcode(value)
        return value


class CommentParams(PostParams):
    comment_text: str = Field(min_length=1, title="Comment text")


class DeleteCommentParams(ActionParams):
    comment_id: str = Field(min_length=1, title="Comment ID")
    post_url: Optional[str] = Field(default=None, title="Post URL")

    @field_validator("comment_id", mode="before")
    @classmethod
    def _numeric_id_as_text(cls, value: Union[str, int]) -> Union[str, int]:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class NoParams(ActionParams):
    pass
