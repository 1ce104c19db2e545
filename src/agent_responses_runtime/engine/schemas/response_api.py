# -*- coding: utf-8 -*-
"""
Responses API wire models

Request, response snapshot, output items, content parts and the
streaming events of the OpenAI Responses protocol.
"""
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from openai.types.responses import (
    ResponseFunctionToolCall,
    ResponseStatus,
    ResponseUsage,
)
from openai.types.responses.response_usage import (
    InputTokensDetails,
    OutputTokensDetails,
)
from openai.types.shared import Reasoning
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


class OpenAIBaseModel(BaseModel):
    # OpenAI API does allow extra fields
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    def to_wire(self) -> Dict[str, Any]:
        """JSON-ready dict using the wire field names."""
        return self.model_dump(mode="json", by_alias=True)


# ===== Content parts =====


class ItemContentInputText(OpenAIBaseModel):
    type: Literal["input_text"] = "input_text"
    text: str = ""


class ItemContentOutputText(OpenAIBaseModel):
    type: Literal["output_text"] = "output_text"
    text: str = ""
    annotations: List[Any] = Field(default_factory=list)
    logprobs: List[Any] = Field(default_factory=list)


class ItemContentRefusal(OpenAIBaseModel):
    type: Literal["refusal"] = "refusal"
    refusal: str = ""


class ItemContentInputImage(OpenAIBaseModel):
    type: Literal["input_image"] = "input_image"
    image_url: Optional[str] = None
    file_id: Optional[str] = None
    detail: Optional[str] = None


class ItemContentInputFile(OpenAIBaseModel):
    type: Literal["input_file"] = "input_file"
    file_id: Optional[str] = None
    file_data: Optional[str] = None
    file_url: Optional[str] = None
    filename: Optional[str] = None


class ItemContentInputAudio(OpenAIBaseModel):
    type: Literal["input_audio"] = "input_audio"
    data: str
    format: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _flatten_nested_audio(cls, value):
        return _flatten_audio(value)


class ItemContentOutputAudio(OpenAIBaseModel):
    type: Literal["output_audio"] = "output_audio"
    data: str
    transcript: Optional[str] = None


def _flatten_audio(obj: Any) -> Any:
    # {"input_audio": {"data": ..., "format": ...}} is accepted as well
    if isinstance(obj, dict) and isinstance(obj.get("input_audio"), dict):
        flattened = {k: v for k, v in obj.items() if k != "input_audio"}
        flattened.update(obj["input_audio"])
        return flattened
    return obj


ItemContent = Annotated[
    Union[
        ItemContentInputText,
        ItemContentOutputText,
        ItemContentRefusal,
        ItemContentInputImage,
        ItemContentInputFile,
        ItemContentInputAudio,
        ItemContentOutputAudio,
    ],
    Field(discriminator="type"),
]

# ===== Output items =====

ItemStatus = Literal["in_progress", "completed", "incomplete"]


class ResponsesMessageItemResource(OpenAIBaseModel):
    type: Literal["message"] = "message"
    id: str
    status: ItemStatus = "completed"
    role: Literal["assistant"] = "assistant"
    content: List[ItemContent] = Field(default_factory=list)


class FunctionToolCallOutputItemResource(OpenAIBaseModel):
    type: Literal["function_call_output"] = "function_call_output"
    id: str
    call_id: str
    output: str
    status: ItemStatus = "completed"


ItemResource = Annotated[
    Union[
        ResponsesMessageItemResource,
        ResponseFunctionToolCall,
        FunctionToolCallOutputItemResource,
    ],
    Field(discriminator="type"),
]


def zero_usage() -> ResponseUsage:
    return ResponseUsage(
        input_tokens=0,
        input_tokens_details=InputTokensDetails(cached_tokens=0),
        output_tokens=0,
        output_tokens_details=OutputTokensDetails(reasoning_tokens=0),
        total_tokens=0,
    )


# ===== Request =====


class AgentReference(OpenAIBaseModel):
    type: Literal["agent_reference"] = "agent_reference"
    name: str
    version: Optional[str] = None


class ConversationReference(OpenAIBaseModel):
    id: str
    metadata: Optional[Dict[str, str]] = None


class TextFormatConfiguration(OpenAIBaseModel):
    type: Literal["text", "json_object", "json_schema"]
    name: Optional[str] = None
    strict: Optional[bool] = None
    json_schema: Optional[Dict[str, Any]] = Field(default=None, alias="schema")
    description: Optional[str] = None


class TextConfiguration(OpenAIBaseModel):
    format: Optional[TextFormatConfiguration] = None


class InputMessage(OpenAIBaseModel):
    type: Literal["message"] = "message"
    role: Literal["user", "assistant", "system", "developer"] = "user"
    content: Union[str, List[ItemContent]]

    def to_chat_message(self):
        # pylint: disable=import-outside-toplevel
        from ..deployers.adapter.responses.response_api_adapter_utils import (
            input_message_to_chat_message,
        )

        return input_message_to_chat_message(self)

    @classmethod
    def from_chat_message(cls, message) -> "InputMessage":
        # pylint: disable=import-outside-toplevel
        from ..deployers.adapter.responses.response_api_adapter_utils import (
            chat_message_to_input_message,
        )

        return chat_message_to_input_message(message)


class CreateResponse(OpenAIBaseModel):
    # Ordered by official OpenAI API documentation
    # https://platform.openai.com/docs/api-reference/responses/create
    input: Union[str, List[InputMessage]]
    agent: Optional[AgentReference] = None
    model: Optional[str] = None
    instructions: Optional[str] = None
    max_output_tokens: Optional[int] = None
    reasoning: Optional[Reasoning] = None
    store: Optional[bool] = None
    stream: Optional[bool] = None
    previous_response_id: Optional[str] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    parallel_tool_calls: Optional[bool] = None
    metadata: Optional[Dict[str, str]] = None
    include: Optional[List[str]] = None
    conversation: Optional[ConversationReference] = None
    background: Optional[bool] = None
    max_tool_calls: Optional[int] = None
    top_logprobs: Optional[int] = None
    safety_identifier: Optional[str] = None
    prompt_cache_key: Optional[str] = None
    truncation: Optional[str] = None
    tools: Optional[List[Dict[str, Any]]] = None
    tool_choice: Optional[Any] = None
    text: Optional[TextConfiguration] = None

    @field_validator("conversation", mode="before")
    @classmethod
    def _conversation_from_id(cls, value):
        if isinstance(value, str):
            return {"id": value}
        return value

    def get_input_messages(self) -> List[InputMessage]:
        if isinstance(self.input, str):
            return [InputMessage(role="user", content=self.input)]
        return list(self.input)


# ===== Response snapshot =====


class ResponseError(OpenAIBaseModel):
    code: str
    message: str


class IncompleteDetails(OpenAIBaseModel):
    reason: Optional[str] = None


class Response(OpenAIBaseModel):
    id: str
    object: Literal["response"] = "response"
    created_at: int
    model: Optional[str] = None
    status: ResponseStatus
    agent: Optional[AgentReference] = None
    conversation: Optional[ConversationReference] = None
    metadata: Dict[str, str] = Field(default_factory=dict)
    instructions: Optional[str] = None
    temperature: float = 1.0
    top_p: float = 1.0
    output: List[ItemResource] = Field(default_factory=list)
    usage: ResponseUsage = Field(default_factory=zero_usage)
    parallel_tool_calls: bool = True
    tools: List[Dict[str, Any]] = Field(default_factory=list)
    tool_choice: Optional[Any] = None
    service_tier: str = "default"
    store: bool = True
    previous_response_id: Optional[str] = None
    reasoning: Optional[Reasoning] = None
    text: Optional[TextConfiguration] = None
    max_output_tokens: Optional[int] = None
    error: Optional[ResponseError] = None
    incomplete_details: Optional[IncompleteDetails] = None


# ===== Streaming events =====


class StreamingResponseEvent(OpenAIBaseModel):
    type: str
    sequence_number: int


class StreamingResponseCreated(StreamingResponseEvent):
    type: Literal["response.created"] = "response.created"
    response: Response


class StreamingResponseInProgress(StreamingResponseEvent):
    type: Literal["response.in_progress"] = "response.in_progress"
    response: Response


class StreamingResponseCompleted(StreamingResponseEvent):
    type: Literal["response.completed"] = "response.completed"
    response: Response


class StreamingResponseIncomplete(StreamingResponseEvent):
    type: Literal["response.incomplete"] = "response.incomplete"
    response: Response


class StreamingOutputItemAdded(StreamingResponseEvent):
    type: Literal["response.output_item.added"] = (
        "response.output_item.added"
    )
    output_index: int
    item: ItemResource


class StreamingOutputItemDone(StreamingResponseEvent):
    type: Literal["response.output_item.done"] = "response.output_item.done"
    output_index: int
    item: ItemResource


class StreamingContentPartAdded(StreamingResponseEvent):
    type: Literal["response.content_part.added"] = (
        "response.content_part.added"
    )
    item_id: str
    output_index: int
    content_index: int
    part: ItemContent


class StreamingContentPartDone(StreamingResponseEvent):
    type: Literal["response.content_part.done"] = (
        "response.content_part.done"
    )
    item_id: str
    output_index: int
    content_index: int
    part: ItemContent


class StreamingOutputTextDelta(StreamingResponseEvent):
    type: Literal["response.output_text.delta"] = (
        "response.output_text.delta"
    )
    item_id: str
    output_index: int
    content_index: int
    delta: str
    logprobs: List[Any] = Field(default_factory=list)


class StreamingOutputTextDone(StreamingResponseEvent):
    type: Literal["response.output_text.done"] = "response.output_text.done"
    item_id: str
    output_index: int
    content_index: int
    text: str
    logprobs: List[Any] = Field(default_factory=list)


class StreamingFunctionCallArgumentsDelta(StreamingResponseEvent):
    type: Literal["response.function_call_arguments.delta"] = (
        "response.function_call_arguments.delta"
    )
    item_id: str
    output_index: int
    delta: str


class StreamingFunctionCallArgumentsDone(StreamingResponseEvent):
    type: Literal["response.function_call_arguments.done"] = (
        "response.function_call_arguments.done"
    )
    item_id: str
    output_index: int
    arguments: str


class StreamingErrorEvent(StreamingResponseEvent):
    type: Literal["error"] = "error"
    code: Optional[str] = None
    message: str
    param: Optional[str] = None
