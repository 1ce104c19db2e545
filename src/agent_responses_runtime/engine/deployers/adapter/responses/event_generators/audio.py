# -*- coding: utf-8 -*-
from .base import SinglePartEventGenerator
from ..response_api_adapter_utils import is_audio_content, to_audio_part


class AudioContentEventGenerator(SinglePartEventGenerator):
    @classmethod
    def supports(cls, content) -> bool:
        return is_audio_content(content)

    def build_part(self, content):
        return to_audio_part(content)
