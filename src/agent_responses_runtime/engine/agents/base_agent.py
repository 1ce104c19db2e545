# -*- coding: utf-8 -*-
from typing import AsyncIterator, List

from ..schemas.agent_schemas import (
    AgentRunResponse,
    AgentRunResponseUpdate,
    ChatMessage,
)


class Agent:
    """
    An agent hosted behind the Responses API.

    Subclasses implement ``run_stream``. ``run`` collects the stream by
    default and may be overridden when the agent has a cheaper one-shot
    path.
    """

    def __init__(
        self,
        name: str = "",
        description: str = "",
        **kwargs,
    ):
        self.name = name
        self.description = description
        self.kwargs = kwargs

    @property
    def display_name(self) -> str:
        return self.name or type(self).__name__

    async def run(
        self,
        messages: List[ChatMessage],
        **kwargs,
    ) -> AgentRunResponse:
        updates = [
            update async for update in self.run_stream(messages, **kwargs)
        ]
        return AgentRunResponse.from_updates(updates)

    def run_stream(
        self,
        messages: List[ChatMessage],
        **kwargs,
    ) -> AsyncIterator[AgentRunResponseUpdate]:
        raise NotImplementedError("Subclasses must implement this method")
