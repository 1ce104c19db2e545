# -*- coding: utf-8 -*-
"""
Stream projector

Turns the update stream of an agent run into the ordered Responses API
event stream: ``response.created`` and ``response.in_progress`` first,
then the lifecycle events of every output item, then a terminal
``response.completed`` (or ``response.incomplete``) event carrying the
final snapshot.
"""
import asyncio
import logging
import time
from enum import Enum
from typing import (
    Any,
    AsyncIterable,
    AsyncIterator,
    Iterable,
    List,
    Optional,
    Sequence,
    Type,
)

from .event_generators import DEFAULT_GENERATORS, StreamingEventGenerator
from .event_generators.base import item_done_payload
from .invocation_context import AgentInvocationContext
from .response_api_adapter_utils import build_response, combine_usage
from .sequence_number import DefaultSequenceNumber, SequenceNumber
from ....schemas.agent_schemas import (
    AgentRunResponseUpdate,
    UsageContent,
    UsageDetails,
    carry_identity,
    is_new_message,
)
from ....schemas.exception import InvalidGeneratorStateError
from ....schemas.response_api import (
    CreateResponse,
    IncompleteDetails,
    Response,
    StreamingResponseCompleted,
    StreamingResponseCreated,
    StreamingResponseEvent,
    StreamingResponseIncomplete,
    StreamingResponseInProgress,
)

logger = logging.getLogger(__name__)


class ProjectorState(str, Enum):
    IDLE = "idle"
    OPEN = "open"
    STREAMING = "streaming"
    DRAINING = "draining"
    DONE = "done"


class ResponseStreamProjector:
    """
    Projects one agent run into Responses API events.

    A projector owns its sequence counter, its generators and its usage
    totals and is used for exactly one response. Every generator gets a
    fresh output index, so indices are dense and match the position of
    the finalized item in the response output.

    Args:
        request: the originating ``CreateResponse``
        context: identifiers of this response
        generators: ordered generator classes to select from; the first
            one supporting a content is used
        created_at: unix timestamp echoed in every snapshot
        seq: sequence counter, a fresh one starting at 0 by default
        cancellation: checked once per update, stops the projection
            without a terminal event when set
    """

    def __init__(
        self,
        request: CreateResponse,
        context: AgentInvocationContext,
        generators: Optional[Sequence[Type[StreamingEventGenerator]]] = None,
        created_at: Optional[int] = None,
        seq: Optional[SequenceNumber] = None,
        cancellation: Optional[asyncio.Event] = None,
    ):
        self.request = request
        self.context = context
        self.generators = tuple(
            DEFAULT_GENERATORS if generators is None else generators,
        )
        self.created_at = (
            int(time.time()) if created_at is None else created_at
        )
        self.seq = seq or DefaultSequenceNumber()
        self.cancellation = cancellation
        self.state = ProjectorState.IDLE

        self._usage: Optional[UsageDetails] = None
        self._output: List[Any] = []
        self._next_output_index = 0
        self._generator: Optional[StreamingEventGenerator] = None
        self._incomplete_reason: Optional[str] = None

    @property
    def usage(self) -> Optional[UsageDetails]:
        return self._usage

    @property
    def output(self) -> List[Any]:
        return list(self._output)

    def mark_incomplete(self, reason: str = "max_output_tokens") -> None:
        """End the stream with ``response.incomplete`` instead."""
        self._incomplete_reason = reason

    def snapshot(self, status: str, **kwargs) -> Response:
        return build_response(
            self.request,
            self.context,
            status=status,
            output=self._output,
            usage=self._usage,
            created_at=self.created_at,
            **kwargs,
        )

    async def project(
        self,
        updates: AsyncIterable[AgentRunResponseUpdate],
    ) -> AsyncIterator[StreamingResponseEvent]:
        if self.state is not ProjectorState.IDLE:
            raise InvalidGeneratorStateError(
                "A stream projector can only be used once.",
            )
        self.state = ProjectorState.OPEN
        logger.debug(
            "Projecting response %s",
            self.context.response_id,
        )

        yield StreamingResponseCreated(
            sequence_number=self.seq.next(),
            response=self.snapshot("in_progress"),
        )
        yield StreamingResponseInProgress(
            sequence_number=self.seq.next(),
            response=self.snapshot("in_progress"),
        )

        iterator = updates.__aiter__()
        previous: Optional[AgentRunResponseUpdate] = None
        try:
            async for update in iterator:
                self._check_cancelled()

                if is_new_message(update, previous):
                    for event in self._close_generator():
                        yield event
                previous = carry_identity(update, previous)

                for content in update.contents:
                    if isinstance(content, UsageContent):
                        self._usage = combine_usage(
                            self._usage,
                            content.details,
                        )
                        continue

                    generator = self._generator
                    if (
                        generator is None
                        or generator.is_completed
                        or not generator.supports(content)
                    ):
                        for event in self._close_generator():
                            yield event
                        generator = self._open_generator(content)
                        if generator is None:
                            logger.debug(
                                "No generator for content type %s, dropped",
                                getattr(content, "type", None),
                            )
                            continue

                    for event in generator.process_content(content):
                        self._on_event(event)
                        yield event

            self.state = ProjectorState.DRAINING
            for event in self._close_generator():
                yield event
        finally:
            aclose = getattr(iterator, "aclose", None)
            if aclose is not None:
                await aclose()

        if self._incomplete_reason is not None:
            yield StreamingResponseIncomplete(
                sequence_number=self.seq.next(),
                response=self.snapshot(
                    "incomplete",
                    incomplete_details=IncompleteDetails(
                        reason=self._incomplete_reason,
                    ),
                ),
            )
        else:
            yield StreamingResponseCompleted(
                sequence_number=self.seq.next(),
                response=self.snapshot("completed"),
            )
        self.state = ProjectorState.DONE

    def _check_cancelled(self) -> None:
        if self.cancellation is not None and self.cancellation.is_set():
            logger.info(
                "Response %s cancelled by caller",
                self.context.response_id,
            )
            raise asyncio.CancelledError()

    def _open_generator(self, content) -> Optional[StreamingEventGenerator]:
        for generator_cls in self.generators:
            if generator_cls.supports(content):
                self._generator = generator_cls(
                    self.context.id_generator,
                    self.seq,
                    self._next_output_index,
                )
                self._next_output_index += 1
                self.state = ProjectorState.STREAMING
                return self._generator
        return None

    def _close_generator(self) -> Iterable[StreamingResponseEvent]:
        generator, self._generator = self._generator, None
        if generator is None:
            return []
        events = generator.complete()
        for event in events:
            self._on_event(event)
        return events

    def _on_event(self, event: StreamingResponseEvent) -> None:
        item = item_done_payload(event)
        if item is not None:
            self._output.append(item)
        logger.debug(
            "event %s seq=%s",
            event.type,
            event.sequence_number,
        )


def to_response_events(
    updates: AsyncIterable[AgentRunResponseUpdate],
    request: CreateResponse,
    context: AgentInvocationContext,
    **kwargs,
) -> AsyncIterator[StreamingResponseEvent]:
    """Shortcut for ``ResponseStreamProjector(...).project(updates)``."""
    return ResponseStreamProjector(request, context, **kwargs).project(
        updates,
    )
