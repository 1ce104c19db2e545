# -*- coding: utf-8 -*-
from typing import Iterator, List, Optional

from .base import StreamingEventGenerator
from .....schemas.agent_schemas import TextContent
from .....schemas.response_api import (
    ItemContentOutputText,
    ResponsesMessageItemResource,
    StreamingContentPartAdded,
    StreamingContentPartDone,
    StreamingOutputItemAdded,
    StreamingOutputItemDone,
    StreamingOutputTextDelta,
    StreamingOutputTextDone,
    StreamingResponseEvent,
)


class AssistantMessageEventGenerator(StreamingEventGenerator):
    """
    Streams assistant text as deltas of a single output text part.

    The item stays open across contents and is closed by ``complete``,
    which emits the accumulated text.
    """

    CONTENT_INDEX = 0

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._item_id: Optional[str] = None
        self._chunks: List[str] = []

    @classmethod
    def supports(cls, content) -> bool:
        return isinstance(content, TextContent)

    @property
    def text(self) -> str:
        return "".join(self._chunks)

    def _process(
        self,
        content: TextContent,
    ) -> Iterator[StreamingResponseEvent]:
        if self._item_id is None:
            self._item_id = self.id_generator.message_id()
            yield StreamingOutputItemAdded(
                sequence_number=self.seq.next(),
                output_index=self.output_index,
                item=ResponsesMessageItemResource(
                    id=self._item_id,
                    status="in_progress",
                    content=[],
                ),
            )
            yield StreamingContentPartAdded(
                sequence_number=self.seq.next(),
                item_id=self._item_id,
                output_index=self.output_index,
                content_index=self.CONTENT_INDEX,
                part=ItemContentOutputText(text=""),
            )

        if content.text:
            self._chunks.append(content.text)
            yield StreamingOutputTextDelta(
                sequence_number=self.seq.next(),
                item_id=self._item_id,
                output_index=self.output_index,
                content_index=self.CONTENT_INDEX,
                delta=content.text,
            )

    def _complete(self) -> List[StreamingResponseEvent]:
        if self._item_id is None:
            # nothing was opened
            return []

        text = self.text
        part = ItemContentOutputText(text=text)
        return [
            StreamingOutputTextDone(
                sequence_number=self.seq.next(),
                item_id=self._item_id,
                output_index=self.output_index,
                content_index=self.CONTENT_INDEX,
                text=text,
            ),
            StreamingContentPartDone(
                sequence_number=self.seq.next(),
                item_id=self._item_id,
                output_index=self.output_index,
                content_index=self.CONTENT_INDEX,
                part=part,
            ),
            StreamingOutputItemDone(
                sequence_number=self.seq.next(),
                output_index=self.output_index,
                item=ResponsesMessageItemResource(
                    id=self._item_id,
                    status="completed",
                    content=[part],
                ),
            ),
        ]
