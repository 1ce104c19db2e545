# -*- coding: utf-8 -*-
from .base import SinglePartEventGenerator
from ..response_api_adapter_utils import is_file_content, to_file_part


class FileContentEventGenerator(SinglePartEventGenerator):
    """Inline data that is neither image nor audio"""

    @classmethod
    def supports(cls, content) -> bool:
        return is_file_content(content)

    def build_part(self, content):
        return to_file_part(content)
