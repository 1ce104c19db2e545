# -*- coding: utf-8 -*-
from .base import SinglePartEventGenerator
from ..response_api_adapter_utils import to_refusal_part
from .....schemas.agent_schemas import ErrorContent


class ErrorContentEventGenerator(SinglePartEventGenerator):
    """Error contents surface as a refusal part"""

    @classmethod
    def supports(cls, content) -> bool:
        return isinstance(content, ErrorContent)

    def build_part(self, content):
        return to_refusal_part(content)
