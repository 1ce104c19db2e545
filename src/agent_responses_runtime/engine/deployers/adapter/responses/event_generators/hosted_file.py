# -*- coding: utf-8 -*-
from .base import SinglePartEventGenerator
from ..response_api_adapter_utils import to_hosted_file_part
from .....schemas.agent_schemas import HostedFileContent


class HostedFileContentEventGenerator(SinglePartEventGenerator):
    @classmethod
    def supports(cls, content) -> bool:
        return isinstance(content, HostedFileContent)

    def build_part(self, content):
        return to_hosted_file_part(content)
