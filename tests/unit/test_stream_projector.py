# -*- coding: utf-8 -*-
# pylint: disable=redefined-outer-name
"""
Unit tests for the stream projector.

Tests cover:
- Envelope events and sequence numbering
- Message boundaries and output indices
- Usage accumulation
- Generator switching on content kind changes
- Cancellation and incomplete responses
"""
import asyncio

import pytest

from agent_responses_runtime.engine.deployers.adapter.responses.event_generators import (  # noqa: E501
    EXTENDED_GENERATORS,
)
from agent_responses_runtime.engine.deployers.adapter.responses.stream_projector import (  # noqa: E501
    ProjectorState,
    ResponseStreamProjector,
)
from agent_responses_runtime.engine.schemas.agent_schemas import (
    AgentRunResponseUpdate,
    DataContent,
    FunctionCallContent,
    FunctionResultContent,
    Role,
    TextContent,
    TextReasoningContent,
    UsageContent,
    UsageDetails,
)
from agent_responses_runtime.engine.schemas.exception import (
    InvalidGeneratorStateError,
)
from agent_responses_runtime.engine.schemas.response_api import CreateResponse

ENVELOPE_EVENT_TYPES = frozenset(
    {
        "response.created",
        "response.in_progress",
        "response.completed",
        "response.incomplete",
    },
)


def _update(*contents, message_id="m1", role=Role.ASSISTANT):
    return AgentRunResponseUpdate(
        role=role,
        message_id=message_id,
        contents=list(contents),
    )


def _request(**kwargs):
    return CreateResponse.model_validate(kwargs)


def _usage(input_tokens, output_tokens):
    return UsageContent(
        details=UsageDetails(
            input_token_count=input_tokens,
            output_token_count=output_tokens,
        ),
    )


@pytest.fixture
def project(request_model, context, stream_of, gather):
    async def _project(updates, **kwargs):
        projector = ResponseStreamProjector(request_model, context, **kwargs)
        events = await gather(projector.project(stream_of(updates)))
        return projector, events

    return _project


class TestEnvelope:
    @pytest.mark.asyncio
    async def test_empty_stream(self, project, context):
        projector, events = await project([])

        assert [e.type for e in events] == [
            "response.created",
            "response.in_progress",
            "response.completed",
        ]
        assert [e.sequence_number for e in events] == [0, 1, 2]
        assert projector.state is ProjectorState.DONE

        created = events[0].response
        assert created.id == context.response_id
        assert created.status == "in_progress"
        assert created.output == []
        assert created.model == "test-model"
        assert created.conversation.id == context.conversation_id

        completed = events[-1].response
        assert completed.status == "completed"
        assert completed.usage.total_tokens == 0

    @pytest.mark.asyncio
    async def test_snapshot_echoes_request(
        self,
        context,
        stream_of,
        gather,
    ):
        request = _request(
            input="hi",
            temperature=0.2,
            metadata={"k": "v"},
            tools=[
                {
                    "type": "function",
                    "name": "f",
                    "parameters": {
                        "type": "object",
                        "properties": {"a": {"type": "string"}},
                    },
                },
            ],
        )
        projector = ResponseStreamProjector(request, context, created_at=123)

        events = await gather(projector.project(stream_of([])))

        response = events[-1].response
        assert response.created_at == 123
        assert response.temperature == 0.2
        assert response.top_p == 1.0
        assert response.metadata == {"k": "v"}
        assert response.tools[0]["strict"] is True
        assert response.tools[0]["parameters"]["required"] == ["a"]
        assert response.service_tier == "default"
        assert response.store is True
        assert response.parallel_tool_calls is True

    @pytest.mark.asyncio
    async def test_projector_is_single_use(
        self,
        request_model,
        context,
        stream_of,
        gather,
    ):
        projector = ResponseStreamProjector(request_model, context)
        await gather(projector.project(stream_of([])))

        with pytest.raises(InvalidGeneratorStateError):
            await gather(projector.project(stream_of([])))


class TestSequenceNumbers:
    @pytest.mark.asyncio
    async def test_four_events_per_single_part_item(self, project):
        contents = [
            FunctionCallContent(call_id="c1", name="f", arguments={}),
            FunctionResultContent(call_id="c1", result="ok"),
            FunctionCallContent(call_id="c2", name="g", arguments={}),
        ]

        projector, events = await project([_update(*contents)])

        n = len(contents)
        assert len(events) == 4 * n + 3
        assert [e.sequence_number for e in events] == list(range(4 * n + 3))
        assert events[0].type == "response.created"
        assert events[-1].type == "response.completed"
        envelope = [
            i for i, e in enumerate(events) if e.type in ENVELOPE_EVENT_TYPES
        ]
        assert envelope == [0, 1, len(events) - 1]
        assert len(projector.output) == n
        assert len(events[-1].response.output) == n

    @pytest.mark.asyncio
    async def test_media_contents_with_extended_generators(self, project):
        contents = [
            DataContent(uri="data:image/png;base64,AAAA"),
            DataContent(uri="data:audio/wav;base64,AAAA"),
            DataContent(uri="data:image/png;base64,BBBB"),
        ]

        _, events = await project(
            [_update(*contents)],
            generators=EXTENDED_GENERATORS,
        )

        assert len(events) == 4 * 3 + 3
        added = [e for e in events if e.type == "response.output_item.added"]
        assert [e.output_index for e in added] == [0, 1, 2]
        assert [e.item.content[0].type for e in added] == [
            "input_image",
            "input_audio",
            "input_image",
        ]

    @pytest.mark.asyncio
    async def test_media_contents_dropped_by_default(self, project):
        _, events = await project(
            [_update(DataContent(uri="data:image/png;base64,AAAA"))],
        )

        assert [e.type for e in events] == [
            "response.created",
            "response.in_progress",
            "response.completed",
        ]

    @pytest.mark.asyncio
    async def test_unrecognized_content_is_dropped(self, project):
        _, events = await project(
            [_update(TextReasoningContent(text="thinking"))],
        )

        assert len(events) == 3
        assert events[-1].response.output == []


class TestTextStreaming:
    @pytest.mark.asyncio
    async def test_deltas_are_concatenated(self, project):
        updates = [
            _update(TextContent(text="Hel")),
            _update(TextContent(text="lo")),
        ]

        _, events = await project(updates)

        types = [e.type for e in events]
        assert types == [
            "response.created",
            "response.in_progress",
            "response.output_item.added",
            "response.content_part.added",
            "response.output_text.delta",
            "response.output_text.delta",
            "response.output_text.done",
            "response.content_part.done",
            "response.output_item.done",
            "response.completed",
        ]
        assert events[3].part.text == ""
        assert [events[4].delta, events[5].delta] == ["Hel", "lo"]
        assert events[6].text == "Hello"

        output = events[-1].response.output
        assert len(output) == 1
        assert output[0].type == "message"
        assert output[0].content[0].text == "Hello"


class TestBoundaries:
    @pytest.mark.asyncio
    async def test_same_message_id_keeps_item_open(self, project):
        updates = [
            _update(TextContent(text="a"), message_id="m1"),
            _update(TextContent(text="b"), message_id="m1"),
        ]

        _, events = await project(updates)

        added = [e for e in events if e.type == "response.output_item.added"]
        assert len(added) == 1

    @pytest.mark.asyncio
    async def test_new_message_id_closes_item(self, project):
        updates = [
            _update(TextContent(text="a"), message_id="m1"),
            _update(TextContent(text="b"), message_id="m2"),
        ]

        _, events = await project(updates)

        types = [e.type for e in events]
        first_done = types.index("response.output_item.done")
        second_added = [
            i
            for i, t in enumerate(types)
            if t == "response.output_item.added"
        ][1]
        assert first_done < second_added

        added = [e for e in events if e.type == "response.output_item.added"]
        done = [e for e in events if e.type == "response.output_item.done"]
        assert [e.output_index for e in added] == [0, 1]
        assert [e.output_index for e in done] == [0, 1]
        output = events[-1].response.output
        assert [item.content[0].text for item in output] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_missing_message_id_does_not_split(self, project):
        updates = [
            _update(TextContent(text="a"), message_id="m1"),
            _update(TextContent(text="b"), message_id=None),
            _update(TextContent(text="c"), message_id="m1"),
        ]

        _, events = await project(updates)

        done = [e for e in events if e.type == "response.output_text.done"]
        assert [e.text for e in done] == ["abc"]

    @pytest.mark.asyncio
    async def test_usage_only_update_keeps_boundary(self, project):
        updates = [
            _update(TextContent(text="a"), message_id="m1"),
            AgentRunResponseUpdate(contents=[_usage(3, 1)]),
            _update(TextContent(text="b"), message_id="m2"),
        ]

        _, events = await project(updates)

        output = events[-1].response.output
        assert [item.content[0].text for item in output] == ["a", "b"]
        assert events[-1].response.usage.input_tokens == 3

    @pytest.mark.asyncio
    async def test_role_change_splits(self, project):
        updates = [
            _update(TextContent(text="a"), message_id=None),
            _update(
                TextContent(text="b"),
                message_id=None,
                role=Role.TOOL,
            ),
        ]

        _, events = await project(updates)

        done = [e for e in events if e.type == "response.output_text.done"]
        assert [e.text for e in done] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_call_then_result_never_interleave(self, project):
        updates = [
            _update(
                FunctionCallContent(call_id="c1", name="f", arguments={}),
                FunctionResultContent(call_id="c1", result="ok"),
            ),
        ]

        _, events = await project(updates)

        assert [e.type for e in events[2:-1]] == [
            "response.output_item.added",
            "response.function_call_arguments.delta",
            "response.function_call_arguments.done",
            "response.output_item.done",
            "response.output_item.added",
            "response.content_part.added",
            "response.content_part.done",
            "response.output_item.done",
        ]
        assert [e.output_index for e in events[2:6]] == [0, 0, 0, 0]
        assert [e.output_index for e in events[6:10]] == [1, 1, 1, 1]
        output = events[-1].response.output
        assert [item.type for item in output] == [
            "function_call",
            "function_call_output",
        ]

    @pytest.mark.asyncio
    async def test_text_then_call_in_same_message(self, project):
        updates = [
            _update(
                TextContent(text="Let me check."),
                FunctionCallContent(call_id="c1", name="f", arguments={}),
            ),
            _update(TextContent(text="Done.")),
        ]

        _, events = await project(updates)

        output = events[-1].response.output
        assert [item.type for item in output] == [
            "message",
            "function_call",
            "message",
        ]
        added = [e for e in events if e.type == "response.output_item.added"]
        assert [e.output_index for e in added] == [0, 1, 2]


class TestUsage:
    @pytest.mark.asyncio
    async def test_usage_is_commutative(self, project):
        forward = [_update(_usage(5, 2)), _update(_usage(3, 1))]
        backward = [_update(_usage(3, 1)), _update(_usage(5, 2))]

        _, forward_events = await project(forward)
        _, backward_events = await project(backward)

        usage = forward_events[-1].response.usage
        assert usage.input_tokens == 8
        assert usage.output_tokens == 3
        assert usage.total_tokens == 11
        assert usage == backward_events[-1].response.usage

    @pytest.mark.asyncio
    async def test_usage_is_not_an_item(self, project):
        updates = [
            _update(TextContent(text="hi"), _usage(10, 4)),
        ]

        projector, events = await project(updates)

        assert len(projector.output) == 1
        assert "usage" not in {e.type for e in events}
        assert events[-1].response.usage.input_tokens == 10

    @pytest.mark.asyncio
    async def test_usage_details_are_mapped(self, project):
        usage = UsageContent(
            details=UsageDetails(
                input_token_count=10,
                output_token_count=4,
                total_token_count=14,
                additional_counts={
                    "InputTokenDetails.CachedTokenCount": 6,
                    "OutputTokenDetails.ReasoningTokenCount": 2,
                },
            ),
        )

        _, events = await project([_update(usage)])

        result = events[-1].response.usage
        assert result.total_tokens == 14
        assert result.input_tokens_details.cached_tokens == 6
        assert result.output_tokens_details.reasoning_tokens == 2


class TestTermination:
    @pytest.mark.asyncio
    async def test_incomplete(self, request_model, context, stream_of, gather):
        projector = ResponseStreamProjector(request_model, context)
        projector.mark_incomplete("max_output_tokens")

        events = await gather(
            projector.project(stream_of([_update(TextContent(text="a"))])),
        )

        assert events[-1].type == "response.incomplete"
        assert events[-1].response.status == "incomplete"
        assert events[-1].response.incomplete_details.reason == (
            "max_output_tokens"
        )
        assert "response.completed" not in [e.type for e in events]

    @pytest.mark.asyncio
    async def test_cancellation_emits_no_terminal_event(
        self,
        request_model,
        context,
    ):
        cancellation = asyncio.Event()
        closed = []

        async def updates():
            try:
                yield _update(TextContent(text="a"))
                cancellation.set()
                yield _update(TextContent(text="b"))
                yield _update(TextContent(text="c"))
            finally:
                closed.append(True)

        projector = ResponseStreamProjector(
            request_model,
            context,
            cancellation=cancellation,
        )
        events = []
        with pytest.raises(asyncio.CancelledError):
            async for event in projector.project(updates()):
                events.append(event)

        types = [e.type for e in events]
        assert "response.completed" not in types
        assert "response.output_item.done" not in types
        assert [e.delta for e in events if hasattr(e, "delta")] == ["a"]
        assert closed == [True]

    @pytest.mark.asyncio
    async def test_upstream_failure_propagates(
        self,
        request_model,
        context,
    ):
        async def updates():
            yield _update(TextContent(text="a"))
            raise RuntimeError("upstream failed")

        projector = ResponseStreamProjector(request_model, context)
        events = []
        with pytest.raises(RuntimeError, match="upstream failed"):
            async for event in projector.project(updates()):
                events.append(event)

        assert "response.completed" not in [e.type for e in events]
