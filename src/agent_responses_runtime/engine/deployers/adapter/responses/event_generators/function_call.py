# -*- coding: utf-8 -*-
from typing import Iterator

from .base import StreamingEventGenerator
from ..response_api_adapter_utils import (
    serialize_arguments,
    to_function_call_item,
)
from .....schemas.agent_schemas import FunctionCallContent
from .....schemas.response_api import (
    StreamingFunctionCallArgumentsDelta,
    StreamingFunctionCallArgumentsDone,
    StreamingOutputItemAdded,
    StreamingOutputItemDone,
    StreamingResponseEvent,
)


class FunctionCallEventGenerator(StreamingEventGenerator):
    """Emits a function call item with its arguments in a single delta"""

    @classmethod
    def supports(cls, content) -> bool:
        return isinstance(content, FunctionCallContent)

    def process_content(self, content) -> Iterator[StreamingResponseEvent]:
        events = super().process_content(content)
        self._is_completed = True
        return events

    def _process(
        self,
        content: FunctionCallContent,
    ) -> Iterator[StreamingResponseEvent]:
        item_id = self.id_generator.function_call_id()
        arguments = serialize_arguments(content.arguments)

        yield StreamingOutputItemAdded(
            sequence_number=self.seq.next(),
            output_index=self.output_index,
            item=to_function_call_item(
                content,
                item_id,
                status="in_progress",
                arguments="",
            ),
        )
        yield StreamingFunctionCallArgumentsDelta(
            sequence_number=self.seq.next(),
            item_id=item_id,
            output_index=self.output_index,
            delta=arguments,
        )
        yield StreamingFunctionCallArgumentsDone(
            sequence_number=self.seq.next(),
            item_id=item_id,
            output_index=self.output_index,
            arguments=arguments,
        )
        yield StreamingOutputItemDone(
            sequence_number=self.seq.next(),
            output_index=self.output_index,
            item=to_function_call_item(
                content,
                item_id,
                arguments=arguments,
            ),
        )
