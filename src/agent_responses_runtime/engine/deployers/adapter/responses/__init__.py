# -*- coding: utf-8 -*-
from .id_generator import DefaultIdGenerator, IdGenerator
from .invocation_context import AgentInvocationContext
from .response_api_agent_adapter import (
    ResponseAPIExecutor,
    create_model_response,
)
from .response_api_protocol_adapter import (
    ResponseAPIDefaultAdapter,
    map_openai_responses,
)
from .sequence_number import DefaultSequenceNumber, SequenceNumber
from .stream_projector import ResponseStreamProjector, to_response_events

# The adapter under the protocol-neutral name used by hosting code
ResponsesProtocolAdapter = ResponseAPIDefaultAdapter

__all__ = [
    "AgentInvocationContext",
    "DefaultIdGenerator",
    "DefaultSequenceNumber",
    "IdGenerator",
    "ResponseAPIDefaultAdapter",
    "ResponseAPIExecutor",
    "ResponseStreamProjector",
    "ResponsesProtocolAdapter",
    "SequenceNumber",
    "create_model_response",
    "map_openai_responses",
    "to_response_events",
]
