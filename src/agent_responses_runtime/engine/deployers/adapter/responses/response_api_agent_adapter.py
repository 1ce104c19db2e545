# -*- coding: utf-8 -*-
import asyncio
import logging
from typing import (
    AsyncIterator,
    Optional,
    Sequence,
    Type,
    Union,
)

from .event_generators import (
    DEFAULT_GENERATORS,
    EXTENDED_GENERATORS,
    StreamingEventGenerator,
)
from .id_generator import DEFAULT_ENTROPY_LENGTH, DEFAULT_PARTITION_KEY_LENGTH
from .invocation_context import AgentInvocationContext
from .response_api_adapter_utils import to_chat_messages, to_response
from .stream_projector import ResponseStreamProjector
from ....agents.base_agent import Agent
from ....schemas.exception import AgentInvocationException
from ....schemas.response_api import (
    CreateResponse,
    Response,
    StreamingResponseEvent,
)

logger = logging.getLogger(__name__)


class ResponseAPIExecutor:
    """
    Runs an agent for a ``CreateResponse`` request.

    Streaming requests produce the projected event stream, other
    requests the completed response. Agent failures surface as
    ``AgentInvocationException``.
    """

    def __init__(
        self,
        agent: Agent,
        stream_media_content: bool = False,
        generators: Optional[Sequence[Type[StreamingEventGenerator]]] = None,
        entropy_length: int = DEFAULT_ENTROPY_LENGTH,
        partition_key_length: int = DEFAULT_PARTITION_KEY_LENGTH,
    ):
        if agent is None:
            raise ValueError("agent is required")
        self.agent = agent
        if generators is None:
            generators = (
                EXTENDED_GENERATORS
                if stream_media_content
                else DEFAULT_GENERATORS
            )
        self.generators = tuple(generators)
        self.entropy_length = entropy_length
        self.partition_key_length = partition_key_length

    def create_context(
        self,
        request: CreateResponse,
    ) -> AgentInvocationContext:
        return AgentInvocationContext.from_request(
            request,
            entropy_length=self.entropy_length,
            partition_key_length=self.partition_key_length,
        )

    async def create_model_response(
        self,
        request: CreateResponse,
        context: Optional[AgentInvocationContext] = None,
        cancellation: Optional[asyncio.Event] = None,
    ) -> Union[Response, AsyncIterator[StreamingResponseEvent]]:
        """
        Create a model response for ``request``.

        Args:
            request: the validated request
            context: identifiers to use, derived from the request when
                omitted
            cancellation: stops a streaming response without a terminal
                event when set

        Returns:
            The completed ``Response``, or an async iterator of stream
            events when ``request.stream`` is set.

        Raises:
            AgentInvocationException: the agent failed (non-streaming)
        """
        if context is None:
            context = self.create_context(request)
        messages = to_chat_messages(request)

        if request.stream:
            return self._stream(request, context, messages, cancellation)

        try:
            agent_response = await self.agent.run(messages)
        except AgentInvocationException:
            raise
        except Exception as e:
            logger.error(
                "Agent %s failed for response %s: %s",
                self.agent.display_name,
                context.response_id,
                e,
                exc_info=True,
            )
            raise AgentInvocationException.wrap(e) from e
        return to_response(agent_response, request, context)

    async def _stream(
        self,
        request: CreateResponse,
        context: AgentInvocationContext,
        messages,
        cancellation: Optional[asyncio.Event],
    ) -> AsyncIterator[StreamingResponseEvent]:
        projector = ResponseStreamProjector(
            request,
            context,
            generators=self.generators,
            cancellation=cancellation,
        )
        try:
            updates = self.agent.run_stream(messages)
            async for event in projector.project(updates):
                yield event
        except AgentInvocationException:
            raise
        except Exception as e:
            logger.error(
                "Agent %s failed while streaming response %s: %s",
                self.agent.display_name,
                context.response_id,
                e,
                exc_info=True,
            )
            raise AgentInvocationException.wrap(e) from e


async def create_model_response(
    agent: Agent,
    request: CreateResponse,
    **kwargs,
) -> Union[Response, AsyncIterator[StreamingResponseEvent]]:
    """One-shot helper around ``ResponseAPIExecutor``."""
    cancellation = kwargs.pop("cancellation", None)
    context = kwargs.pop("context", None)
    executor = ResponseAPIExecutor(agent, **kwargs)
    return await executor.create_model_response(
        request,
        context=context,
        cancellation=cancellation,
    )
