# -*- coding: utf-8 -*-
from dataclasses import dataclass

from .id_generator import DefaultIdGenerator, IdGenerator


@dataclass
class AgentInvocationContext:
    """Identifiers shared by everything produced for one response"""

    id_generator: IdGenerator
    response_id: str
    conversation_id: str

    @classmethod
    def from_request(cls, request, **kwargs) -> "AgentInvocationContext":
        id_generator = DefaultIdGenerator.from_request(request, **kwargs)
        return cls(
            id_generator=id_generator,
            response_id=id_generator.response_id,
            conversation_id=id_generator.conversation_id,
        )
