# -*- coding: utf-8 -*-
# pylint: disable=too-many-return-statements

"""
Responses Adapter utilities

Conversion helpers between the Agent API and the Responses API:
1. Agent content → Responses content parts and output items
2. Responses input messages → Agent chat messages (and back)
3. Usage, tool definitions and the response snapshot
"""

import copy
import json
import time
from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Union

from openai.types.responses import ResponseFunctionToolCall, ResponseUsage
from openai.types.responses.response_usage import (
    InputTokensDetails,
    OutputTokensDetails,
)

from .id_generator import IdGenerator
from ....schemas.agent_schemas import (
    AgentContent,
    AgentRunResponse,
    ChatMessage,
    DataContent,
    ErrorContent,
    FunctionCallContent,
    FunctionResultContent,
    HostedFileContent,
    Role,
    TextContent,
    TextReasoningContent,
    UriContent,
    UsageDetails,
)
from ....schemas.exception import ContentConversionError
from ....schemas.response_api import (
    ConversationReference,
    CreateResponse,
    FunctionToolCallOutputItemResource,
    InputMessage,
    ItemContentInputAudio,
    ItemContentInputFile,
    ItemContentInputImage,
    ItemContentInputText,
    ItemContentOutputAudio,
    ItemContentOutputText,
    ItemContentRefusal,
    ItemStatus,
    Response,
    ResponsesMessageItemResource,
    zero_usage,
)

CACHED_TOKENS_KEY = "InputTokenDetails.CachedTokenCount"
REASONING_TOKENS_KEY = "OutputTokenDetails.ReasoningTokenCount"

# audio media subtype -> Responses audio format
AUDIO_FORMAT_BY_SUBTYPE = {
    "mpeg": "mp3",
    "wav": "wav",
    "opus": "opus",
    "aac": "aac",
    "flac": "flac",
    "pcm": "pcm16",
}
DEFAULT_AUDIO_FORMAT = "mp3"

MEDIA_TYPE_BY_AUDIO_FORMAT = {
    "mp3": "audio/mpeg",
    "wav": "audio/wav",
    "opus": "audio/opus",
    "aac": "audio/aac",
    "flac": "audio/flac",
    "pcm16": "audio/pcm",
}

_INPUT_ROLES = {
    Role.USER: "user",
    Role.ASSISTANT: "assistant",
    Role.SYSTEM: "system",
    Role.DEVELOPER: "developer",
}


# ===== Agent content -> Responses content parts =====


def is_image_content(content: Any) -> bool:
    return isinstance(
        content,
        (DataContent, UriContent),
    ) and content.has_top_level_media_type("image")


def is_audio_content(content: Any) -> bool:
    return isinstance(
        content,
        DataContent,
    ) and content.has_top_level_media_type("audio")


def is_file_content(content: Any) -> bool:
    return (
        isinstance(content, DataContent)
        and not content.has_top_level_media_type("image")
        and not content.has_top_level_media_type("audio")
    )


def image_detail(content: AgentContent) -> Optional[str]:
    """Read the image detail hint carried in ``additional_properties``."""
    if not content.additional_properties:
        return None
    detail = content.additional_properties.get("detail")
    return None if detail is None else str(detail)


def audio_format(media_type: Optional[str]) -> str:
    if not media_type or "/" not in media_type:
        return DEFAULT_AUDIO_FORMAT
    subtype = media_type.split("/", 1)[1].lower()
    return AUDIO_FORMAT_BY_SUBTYPE.get(subtype, DEFAULT_AUDIO_FORMAT)


def to_image_part(
    content: Union[DataContent, UriContent],
) -> ItemContentInputImage:
    return ItemContentInputImage(
        image_url=content.uri,
        detail=image_detail(content),
    )


def to_audio_part(content: DataContent) -> ItemContentInputAudio:
    return ItemContentInputAudio(
        data=content.uri,
        format=audio_format(content.media_type),
    )


def to_file_part(content: DataContent) -> ItemContentInputFile:
    return ItemContentInputFile(file_data=content.uri, filename=content.name)


def to_hosted_file_part(content: HostedFileContent) -> ItemContentInputFile:
    return ItemContentInputFile(file_id=content.file_id)


def to_refusal_part(content: ErrorContent) -> ItemContentRefusal:
    return ItemContentRefusal(refusal=content.message or "")


class ContentConversionResult(NamedTuple):
    """Outcome of converting one agent content into a content part"""

    content: Any = None
    error: Optional[ContentConversionError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self):
        if self.error is not None:
            raise self.error
        return self.content


def to_item_content(
    content: AgentContent,
    is_input: bool = False,
) -> ContentConversionResult:
    """
    Convert agent content into a Responses content part.

    Contents without a content-part mapping (function calls, function
    results, usage, non-image URIs) convert to ``None``. Reasoning text
    and error contents are refused in the input direction.
    """
    if isinstance(content, TextContent):
        if is_input:
            return ContentConversionResult(
                ItemContentInputText(text=content.text or ""),
            )
        return ContentConversionResult(
            ItemContentOutputText(text=content.text or ""),
        )
    if isinstance(content, TextReasoningContent):
        if is_input:
            return ContentConversionResult(
                error=ContentConversionError(
                    "Reasoning content cannot be used as input content. "
                    "It represents reasoning output from the model, not "
                    "user input.",
                ),
            )
        return ContentConversionResult(
            ItemContentOutputText(text=content.text or ""),
        )
    if isinstance(content, ErrorContent):
        if is_input:
            return ContentConversionResult(
                error=ContentConversionError(
                    "Error content cannot be used as input content. It "
                    "represents errors or refusals from the model, not "
                    "user input.",
                ),
            )
        return ContentConversionResult(to_refusal_part(content))
    if is_image_content(content):
        return ContentConversionResult(to_image_part(content))
    if isinstance(content, HostedFileContent):
        return ContentConversionResult(to_hosted_file_part(content))
    if is_file_content(content):
        return ContentConversionResult(to_file_part(content))
    if is_audio_content(content):
        return ContentConversionResult(to_audio_part(content))
    return ContentConversionResult()


def to_input_item_content(content: AgentContent):
    return to_item_content(content, is_input=True).unwrap()


def to_output_item_content(content: AgentContent):
    return to_item_content(content, is_input=False).unwrap()


# ===== Responses input -> Agent messages =====


def item_content_to_agent_content(part) -> Optional[AgentContent]:
    """Convert one input content part into agent content."""
    result: Optional[AgentContent] = None
    if isinstance(part, (ItemContentInputText, ItemContentOutputText)):
        result = TextContent(text=part.text)
    elif isinstance(part, ItemContentRefusal):
        result = ErrorContent(message=part.refusal)
    elif isinstance(part, ItemContentInputImage):
        if part.image_url:
            if part.image_url.lower().startswith("data:"):
                result = DataContent(uri=part.image_url, media_type="image/*")
            else:
                result = UriContent(uri=part.image_url, media_type="image/*")
        elif part.file_id:
            result = HostedFileContent(file_id=part.file_id)
        if result is not None and part.detail is not None:
            result.additional_properties = {"detail": part.detail}
    elif isinstance(part, ItemContentInputFile):
        if part.file_id:
            result = HostedFileContent(file_id=part.file_id)
        elif part.file_data:
            result = DataContent(
                uri=part.file_data,
                media_type="application/octet-stream",
                name=part.filename,
            )
    elif isinstance(part, ItemContentInputAudio):
        media_type = MEDIA_TYPE_BY_AUDIO_FORMAT.get(
            (part.format or "").lower(),
            "audio/*",
        )
        result = DataContent(uri=part.data, media_type=media_type)
    elif isinstance(part, ItemContentOutputAudio):
        result = DataContent(uri=part.data, media_type="audio/*")
    return result


def input_message_to_chat_message(message: InputMessage) -> ChatMessage:
    role = Role(message.role)
    if isinstance(message.content, str):
        return ChatMessage.from_text(role, message.content)
    contents = [
        converted
        for converted in (
            item_content_to_agent_content(part) for part in message.content
        )
        if converted is not None
    ]
    return ChatMessage(role=role, contents=contents)


def chat_message_to_input_message(message: ChatMessage) -> InputMessage:
    role = _INPUT_ROLES.get(message.role)
    if role is None:
        raise ContentConversionError(
            f"Messages with role '{message.role.value}' cannot be used as "
            f"input messages.",
        )
    if message.text:
        return InputMessage(role=role, content=message.text)
    parts = [
        part
        for part in (
            to_input_item_content(content) for content in message.contents
        )
        if part is not None
    ]
    return InputMessage(role=role, content=parts)


def to_chat_messages(request: CreateResponse) -> List[ChatMessage]:
    return [
        message.to_chat_message() for message in request.get_input_messages()
    ]


# ===== Output items =====


def serialize_arguments(arguments: Optional[Dict[str, Any]]) -> str:
    return json.dumps(arguments, ensure_ascii=False, default=str)


def to_function_call_item(
    content: FunctionCallContent,
    item_id: str,
    status: ItemStatus = "completed",
    arguments: Optional[str] = None,
) -> ResponseFunctionToolCall:
    if arguments is None:
        arguments = serialize_arguments(content.arguments)
    return ResponseFunctionToolCall(
        type="function_call",
        id=item_id,
        call_id=content.call_id,
        name=content.name,
        arguments=arguments,
        status=status,
    )


def to_function_output_item(
    content: FunctionResultContent,
    item_id: str,
    status: ItemStatus = "completed",
) -> FunctionToolCallOutputItemResource:
    return FunctionToolCallOutputItemResource(
        id=item_id,
        call_id=content.call_id,
        output=content.result_as_text(),
        status=status,
    )


def chat_message_to_items(
    message: ChatMessage,
    id_generator: IdGenerator,
) -> List[Any]:
    """
    Turn one materialized message into output items.

    Function calls and function results become standalone items, every
    other convertible content of the message is collected into a single
    message item.
    """
    items: List[Any] = []
    parts = []
    for content in message.contents:
        if isinstance(content, FunctionCallContent):
            items.append(
                to_function_call_item(
                    content,
                    id_generator.function_call_id(),
                ),
            )
        elif isinstance(content, FunctionResultContent):
            items.append(
                to_function_output_item(
                    content,
                    id_generator.function_output_id(),
                ),
            )
        else:
            part = to_output_item_content(content)
            if part is not None:
                parts.append(part)
    if parts:
        items.append(
            ResponsesMessageItemResource(
                id=id_generator.message_id(),
                status="completed",
                content=parts,
            ),
        )
    return items


# ===== Tools =====


def process_tool(tool: Dict[str, Any]) -> Dict[str, Any]:
    """
    Apply strict mode to a function tool definition.

    Every declared property becomes required, extra properties are
    forbidden and ``strict`` is set. Other tool types are returned
    unchanged. Applying it twice gives the same result as applying it
    once.
    """
    if not isinstance(tool, dict) or tool.get("type") != "function":
        return tool

    processed = {
        key: copy.deepcopy(value)
        for key, value in tool.items()
        if key != "strict"
    }
    parameters = processed.get("parameters")
    if isinstance(parameters, dict):
        properties = parameters.get("properties")
        required = parameters.get("required")
        strict_parameters = {
            key: value
            for key, value in parameters.items()
            if key not in ("required", "additionalProperties")
        }
        if isinstance(properties, dict):
            strict_parameters["required"] = list(properties.keys())
        elif required is not None:
            strict_parameters["required"] = required
        strict_parameters["additionalProperties"] = False
        processed["parameters"] = strict_parameters
    processed["strict"] = True
    return processed


# ===== Usage =====


def combine_usage(
    total: Optional[UsageDetails],
    usage: Optional[UsageDetails],
) -> Optional[UsageDetails]:
    """Add ``usage`` to ``total`` without mutating either."""
    if usage is None:
        return total
    if total is None:
        return usage.model_copy(deep=True)
    return total + usage


def to_response_usage(usage: Optional[UsageDetails]) -> ResponseUsage:
    if usage is None:
        return zero_usage()
    input_tokens = usage.input_token_count or 0
    output_tokens = usage.output_token_count or 0
    total_tokens = usage.total_token_count
    if total_tokens is None:
        total_tokens = input_tokens + output_tokens
    return ResponseUsage(
        input_tokens=input_tokens,
        input_tokens_details=InputTokensDetails(
            cached_tokens=usage.additional_counts.get(CACHED_TOKENS_KEY, 0),
        ),
        output_tokens=output_tokens,
        output_tokens_details=OutputTokensDetails(
            reasoning_tokens=usage.additional_counts.get(
                REASONING_TOKENS_KEY,
                0,
            ),
        ),
        total_tokens=total_tokens,
    )


# ===== Response snapshot =====


def build_response(
    request: CreateResponse,
    context,
    status: str,
    output: Optional[Iterable[Any]] = None,
    usage: Optional[UsageDetails] = None,
    created_at: Optional[int] = None,
    **kwargs,
) -> Response:
    """
    Build a response snapshot echoing the request parameters.

    Args:
        request: the originating ``CreateResponse``
        context: the ``AgentInvocationContext`` of this response
        status: response status
        output: finalized output items
        usage: accumulated usage
        created_at: unix timestamp in seconds, defaults to now
        **kwargs: extra snapshot fields such as ``incomplete_details``
    """
    conversation = request.conversation
    if conversation is None and context.conversation_id:
        conversation = ConversationReference(id=context.conversation_id)
    agent = request.agent
    return Response(
        id=context.response_id,
        created_at=int(time.time()) if created_at is None else created_at,
        model=agent.name if agent is not None else request.model,
        status=status,
        agent=agent,
        conversation=conversation,
        metadata=dict(request.metadata or {}),
        instructions=request.instructions,
        temperature=(
            1.0 if request.temperature is None else request.temperature
        ),
        top_p=1.0 if request.top_p is None else request.top_p,
        output=list(output or []),
        usage=to_response_usage(usage),
        parallel_tool_calls=(
            True
            if request.parallel_tool_calls is None
            else request.parallel_tool_calls
        ),
        tools=[process_tool(tool) for tool in request.tools or []],
        tool_choice=request.tool_choice,
        service_tier="default",
        store=True if request.store is None else request.store,
        previous_response_id=request.previous_response_id,
        reasoning=request.reasoning,
        text=request.text,
        max_output_tokens=request.max_output_tokens,
        **kwargs,
    )


def to_response(
    agent_run_response: AgentRunResponse,
    request: CreateResponse,
    context,
) -> Response:
    """Project a materialized agent run into a completed response."""
    output: List[Any] = []
    for message in agent_run_response.messages:
        output.extend(chat_message_to_items(message, context.id_generator))
    created_at = None
    if agent_run_response.created_at is not None:
        created_at = int(agent_run_response.created_at.timestamp())
    return build_response(
        request,
        context,
        status="completed",
        output=output,
        usage=agent_run_response.usage,
        created_at=created_at,
    )
