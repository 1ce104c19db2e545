# -*- coding: utf-8 -*-
# pylint: disable=redefined-outer-name
from typing import List, Optional

import pytest

from agent_responses_runtime.engine.agents.base_agent import Agent
from agent_responses_runtime.engine.deployers.adapter.responses import (
    AgentInvocationContext,
    DefaultIdGenerator,
)
from agent_responses_runtime.engine.schemas.agent_schemas import (
    AgentRunResponse,
    AgentRunResponseUpdate,
    Role,
    TextContent,
)
from agent_responses_runtime.engine.schemas.response_api import CreateResponse


class ScriptedAgent(Agent):
    """Replays prepared updates, or returns a prepared response."""

    def __init__(
        self,
        updates: Optional[List] = None,
        response: Optional[AgentRunResponse] = None,
        error: Optional[BaseException] = None,
        name: str = "scripted",
    ):
        super().__init__(name=name, description="Scripted test agent")
        self.updates = updates or []
        self.response = response
        self.error = error
        self.received = None

    async def run(self, messages, **kwargs):
        self.received = messages
        if self.error is not None:
            raise self.error
        if self.response is not None:
            return self.response
        return await super().run(messages, **kwargs)

    async def run_stream(self, messages, **kwargs):
        self.received = messages
        for update in self.updates:
            if isinstance(update, BaseException):
                raise update
            yield update


def text_update(text: str, message_id: str = "m1", **kwargs):
    return AgentRunResponseUpdate(
        role=kwargs.pop("role", Role.ASSISTANT),
        message_id=message_id,
        contents=[TextContent(text=text)],
        **kwargs,
    )


async def async_iter(items):
    for item in items:
        yield item


async def collect(events):
    return [event async for event in events]


@pytest.fixture
def request_model():
    return CreateResponse(input="Hello, how are you?", model="test-model")


@pytest.fixture
def context():
    id_generator = DefaultIdGenerator()
    return AgentInvocationContext(
        id_generator=id_generator,
        response_id=id_generator.response_id,
        conversation_id=id_generator.conversation_id,
    )


@pytest.fixture
def scripted_agent():
    return ScriptedAgent


@pytest.fixture
def make_text_update():
    return text_update


@pytest.fixture
def stream_of():
    return async_iter


@pytest.fixture
def gather():
    return collect
