# -*- coding: utf-8 -*-
from .base import SinglePartEventGenerator
from ..response_api_adapter_utils import is_image_content, to_image_part


class ImageContentEventGenerator(SinglePartEventGenerator):
    """Image URIs and inline image data as an input image part"""

    @classmethod
    def supports(cls, content) -> bool:
        return is_image_content(content)

    def build_part(self, content):
        return to_image_part(content)
