# -*- coding: utf-8 -*-
"""
Agent API models

Messages, contents and streaming updates exchanged with a hosted agent.
Contents form a closed tagged union discriminated on ``type``.
"""
import json
import re
from datetime import datetime
from enum import Enum
from typing import (
    Annotated,
    Any,
    Dict,
    Iterable,
    List,
    Literal,
    Optional,
    Union,
)

from pydantic import BaseModel, ConfigDict, Field, model_validator

_DATA_URI_PATTERN = re.compile(r"^data:(?P<media_type>[^;,]+)[;,]")


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"
    DEVELOPER = "developer"
    TOOL = "tool"


class BaseContent(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    additional_properties: Optional[Dict[str, Any]] = None


class MediaContentMixin:
    def has_top_level_media_type(self, top_level: str) -> bool:
        """Check ``image`` against ``image/png`` and similar."""
        if not self.media_type:
            return False
        prefix = self.media_type.split("/", 1)[0]
        return prefix.lower() == top_level.lower()


class TextContent(BaseContent):
    type: Literal["text"] = "text"
    text: str = ""


class TextReasoningContent(BaseContent):
    type: Literal["reasoning"] = "reasoning"
    text: str = ""


class FunctionCallContent(BaseContent):
    type: Literal["function_call"] = "function_call"
    call_id: str
    name: str
    arguments: Optional[Dict[str, Any]] = None


class FunctionResultContent(BaseContent):
    type: Literal["function_result"] = "function_result"
    call_id: str
    result: Any = None
    exception: Optional[BaseException] = None

    def result_as_text(self) -> str:
        """Render the result the way it is reported back to the caller."""
        if self.exception is not None:
            return f'{type(self.exception).__name__}("{self.exception}")'
        if self.result is None:
            return "(null)"
        if isinstance(self.result, str):
            return self.result
        if isinstance(self.result, (dict, list)):
            return json.dumps(self.result, ensure_ascii=False, default=str)
        return str(self.result)


class DataContent(MediaContentMixin, BaseContent):
    """Inline data, carried as a ``data:`` URI."""

    type: Literal["data"] = "data"
    uri: str
    media_type: Optional[str] = None
    name: Optional[str] = None

    @model_validator(mode="after")
    def _infer_media_type(self) -> "DataContent":
        if not self.media_type:
            match = _DATA_URI_PATTERN.match(self.uri)
            if match:
                self.media_type = match.group("media_type")
        return self


class UriContent(MediaContentMixin, BaseContent):
    type: Literal["uri"] = "uri"
    uri: str
    media_type: Optional[str] = None


class HostedFileContent(BaseContent):
    type: Literal["hosted_file"] = "hosted_file"
    file_id: str


class ErrorContent(BaseContent):
    type: Literal["error"] = "error"
    message: Optional[str] = None
    error_code: Optional[str] = None
    details: Optional[str] = None


class UsageDetails(BaseModel):
    input_token_count: Optional[int] = None
    output_token_count: Optional[int] = None
    total_token_count: Optional[int] = None
    # e.g. "InputTokenDetails.CachedTokenCount"
    additional_counts: Dict[str, int] = Field(default_factory=dict)

    def __add__(self, other: "UsageDetails") -> "UsageDetails":
        def _sum(left: Optional[int], right: Optional[int]) -> Optional[int]:
            if left is None and right is None:
                return None
            return (left or 0) + (right or 0)

        counts = dict(self.additional_counts)
        for key, value in other.additional_counts.items():
            counts[key] = counts.get(key, 0) + value
        return UsageDetails(
            input_token_count=_sum(
                self.input_token_count,
                other.input_token_count,
            ),
            output_token_count=_sum(
                self.output_token_count,
                other.output_token_count,
            ),
            total_token_count=_sum(
                self.total_token_count,
                other.total_token_count,
            ),
            additional_counts=counts,
        )


class UsageContent(BaseContent):
    type: Literal["usage"] = "usage"
    details: Optional[UsageDetails] = None


AgentContent = Annotated[
    Union[
        TextContent,
        TextReasoningContent,
        FunctionCallContent,
        FunctionResultContent,
        DataContent,
        UriContent,
        HostedFileContent,
        ErrorContent,
        UsageContent,
    ],
    Field(discriminator="type"),
]


class ChatMessage(BaseModel):
    role: Role = Role.USER
    contents: List[AgentContent] = Field(default_factory=list)
    author_name: Optional[str] = None
    message_id: Optional[str] = None

    @property
    def text(self) -> str:
        return "".join(
            content.text
            for content in self.contents
            if isinstance(content, TextContent)
        )

    @classmethod
    def from_text(cls, role: Role, text: str) -> "ChatMessage":
        return cls(role=role, contents=[TextContent(text=text)])


class AgentRunResponseUpdate(BaseModel):
    """One incremental update streamed by an agent."""

    author_name: Optional[str] = None
    role: Optional[Role] = None
    message_id: Optional[str] = None
    contents: List[AgentContent] = Field(default_factory=list)

    @property
    def text(self) -> str:
        return "".join(
            content.text
            for content in self.contents
            if isinstance(content, TextContent)
        )


def is_new_message(
    update: Optional[AgentRunResponseUpdate],
    previous: Optional[AgentRunResponseUpdate],
) -> bool:
    """
    Whether ``update`` starts a different message than ``previous``.

    A field only counts when it is set on both updates, so an update
    that omits its author, role or message id never splits a message.
    """
    if update is None or previous is None:
        return False

    def _differs(left, right) -> bool:
        return bool(left) and bool(right) and left != right

    return (
        _differs(update.author_name, previous.author_name)
        or _differs(update.message_id, previous.message_id)
        or _differs(update.role, previous.role)
    )


def carry_identity(
    update: AgentRunResponseUpdate,
    previous: Optional[AgentRunResponseUpdate],
) -> AgentRunResponseUpdate:
    """
    Return ``update`` with its unset identity fields taken from
    ``previous``.

    Boundary detection compares against the result, so updates that
    carry no identity (usage only, for instance) keep the last seen
    author, message id and role instead of hiding the next change.
    """
    if previous is None:
        return update
    return update.model_copy(
        update={
            "author_name": update.author_name or previous.author_name,
            "message_id": update.message_id or previous.message_id,
            "role": update.role or previous.role,
        },
    )


class AgentRunResponse(BaseModel):
    messages: List[ChatMessage] = Field(default_factory=list)
    usage: Optional[UsageDetails] = None
    response_id: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def text(self) -> str:
        return "".join(message.text for message in self.messages)

    @classmethod
    def from_updates(
        cls,
        updates: Iterable[AgentRunResponseUpdate],
    ) -> "AgentRunResponse":
        """
        Materialize a streamed run.

        Updates are grouped into messages on the same boundary rule the
        stream projector uses, adjacent text is coalesced and usage is
        summed instead of being kept as content.
        """
        messages: List[ChatMessage] = []
        usage: Optional[UsageDetails] = None
        previous: Optional[AgentRunResponseUpdate] = None

        for update in updates:
            if not messages or is_new_message(update, previous):
                messages.append(
                    ChatMessage(
                        role=update.role or Role.ASSISTANT,
                        author_name=update.author_name,
                        message_id=update.message_id,
                    ),
                )
            previous = carry_identity(update, previous)
            current = messages[-1]
            for content in update.contents:
                if isinstance(content, UsageContent):
                    if content.details is not None:
                        usage = (
                            content.details
                            if usage is None
                            else usage + content.details
                        )
                    continue
                if (
                    isinstance(content, TextContent)
                    and current.contents
                    and isinstance(current.contents[-1], TextContent)
                ):
                    last = current.contents[-1]
                    current.contents[-1] = TextContent(
                        text=last.text + content.text,
                        additional_properties=last.additional_properties,
                    )
                    continue
                current.contents.append(content)

        messages = [message for message in messages if message.contents]
        return cls(messages=messages, usage=usage)
