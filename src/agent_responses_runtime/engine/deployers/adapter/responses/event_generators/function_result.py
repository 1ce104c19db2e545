# -*- coding: utf-8 -*-
from typing import Iterator

from .base import StreamingEventGenerator
from ..response_api_adapter_utils import to_function_output_item
from .....schemas.agent_schemas import FunctionResultContent
from .....schemas.response_api import (
    ItemContentOutputText,
    StreamingContentPartAdded,
    StreamingContentPartDone,
    StreamingOutputItemAdded,
    StreamingOutputItemDone,
    StreamingResponseEvent,
)


class FunctionResultEventGenerator(StreamingEventGenerator):
    """
    Emits a function call output item.

    The output string is also surfaced as an output text part so the
    item follows the same four event lifecycle as the other kinds.
    """

    @classmethod
    def supports(cls, content) -> bool:
        return isinstance(content, FunctionResultContent)

    def process_content(self, content) -> Iterator[StreamingResponseEvent]:
        events = super().process_content(content)
        self._is_completed = True
        return events

    def _process(
        self,
        content: FunctionResultContent,
    ) -> Iterator[StreamingResponseEvent]:
        item_id = self.id_generator.function_output_id()
        item = to_function_output_item(content, item_id)
        part = ItemContentOutputText(text=item.output)

        yield StreamingOutputItemAdded(
            sequence_number=self.seq.next(),
            output_index=self.output_index,
            item=to_function_output_item(
                content,
                item_id,
                status="in_progress",
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
            item=item,
        )
