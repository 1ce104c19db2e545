# -*- coding: utf-8 -*-
"""
Streaming event generators

A generator turns the contents of one logical output item into the
Responses API event lifecycle of that item. Instances are single use:
once completed they reject further contents.
"""
from abc import ABC, abstractmethod
from typing import Any, Iterator, List, Optional

from ..id_generator import IdGenerator
from ..sequence_number import SequenceNumber
from .....schemas.exception import (
    InvalidGeneratorStateError,
    UnsupportedContentError,
)
from .....schemas.response_api import (
    ResponsesMessageItemResource,
    StreamingContentPartAdded,
    StreamingContentPartDone,
    StreamingOutputItemAdded,
    StreamingOutputItemDone,
    StreamingResponseEvent,
)


class StreamingEventGenerator(ABC):
    def __init__(
        self,
        id_generator: IdGenerator,
        seq: SequenceNumber,
        output_index: int,
    ):
        self.id_generator = id_generator
        self.seq = seq
        self.output_index = output_index
        self._is_completed = False

    @classmethod
    @abstractmethod
    def supports(cls, content: Any) -> bool:
        """Whether this generator can project ``content``."""

    @property
    def is_completed(self) -> bool:
        return self._is_completed

    def process_content(
        self,
        content: Any,
    ) -> Iterator[StreamingResponseEvent]:
        """
        Project one content into events.

        The state checks happen immediately, the events themselves are
        produced lazily and draw sequence numbers as they are consumed.

        Raises:
            InvalidGeneratorStateError: the generator is already completed
            UnsupportedContentError: ``content`` is not supported
        """
        if self._is_completed:
            raise InvalidGeneratorStateError()
        if not self.supports(content):
            raise UnsupportedContentError(
                type(self).__name__,
                getattr(content, "type", type(content).__name__),
            )
        return self._process(content)

    def complete(self) -> List[StreamingResponseEvent]:
        """Finalize the item. Calls after the first one return nothing."""
        if self._is_completed:
            return []
        self._is_completed = True
        return self._complete()

    @abstractmethod
    def _process(self, content: Any) -> Iterator[StreamingResponseEvent]:
        pass

    def _complete(self) -> List[StreamingResponseEvent]:
        return []


class SinglePartEventGenerator(StreamingEventGenerator):
    """
    Base for contents that map to exactly one content part.

    The whole item is emitted on the first content as
    item added, part added, part done and item done, after which the
    generator is completed.
    """

    @abstractmethod
    def build_part(self, content: Any) -> Any:
        pass

    def process_content(
        self,
        content: Any,
    ) -> Iterator[StreamingResponseEvent]:
        events = super().process_content(content)
        self._is_completed = True
        return events

    def _process(self, content: Any) -> Iterator[StreamingResponseEvent]:
        part = self.build_part(content)
        item_id = self.id_generator.message_id()

        yield StreamingOutputItemAdded(
            sequence_number=self.seq.next(),
            output_index=self.output_index,
            item=ResponsesMessageItemResource(
                id=item_id,
                status="in_progress",
                content=[part],
            ),
        )
        yield StreamingContentPartAdded(
            sequence_number=self.seq.next(),
            item_id=item_id,
            output_index=self.output_index,
            content_index=0,
            part=part,
        )
        yield StreamingContentPartDone(
            sequence_number=self.seq.next(),
            item_id=item_id,
            output_index=self.output_index,
            content_index=0,
            part=part,
        )
        yield StreamingOutputItemDone(
            sequence_number=self.seq.next(),
            output_index=self.output_index,
            item=ResponsesMessageItemResource(
                id=item_id,
                status="completed",
                content=[part],
            ),
        )


def item_done_payload(event: StreamingResponseEvent) -> Optional[Any]:
    """Return the finalized item carried by an item-done event."""
    if isinstance(event, StreamingOutputItemDone):
        return event.item
    return None
