# -*- coding: utf-8 -*-
from .assistant_message import AssistantMessageEventGenerator
from .audio import AudioContentEventGenerator
from .base import SinglePartEventGenerator, StreamingEventGenerator
from .error import ErrorContentEventGenerator
from .file import FileContentEventGenerator
from .function_call import FunctionCallEventGenerator
from .function_result import FunctionResultEventGenerator
from .hosted_file import HostedFileContentEventGenerator
from .image import ImageContentEventGenerator

# Ordered capability tables, the first generator supporting a content wins
DEFAULT_GENERATORS = (
    AssistantMessageEventGenerator,
    FunctionCallEventGenerator,
    FunctionResultEventGenerator,
)

EXTENDED_GENERATORS = DEFAULT_GENERATORS + (
    ImageContentEventGenerator,
    AudioContentEventGenerator,
    FileContentEventGenerator,
    HostedFileContentEventGenerator,
    ErrorContentEventGenerator,
)

__all__ = [
    "StreamingEventGenerator",
    "SinglePartEventGenerator",
    "AssistantMessageEventGenerator",
    "FunctionCallEventGenerator",
    "FunctionResultEventGenerator",
    "ImageContentEventGenerator",
    "AudioContentEventGenerator",
    "FileContentEventGenerator",
    "HostedFileContentEventGenerator",
    "ErrorContentEventGenerator",
    "DEFAULT_GENERATORS",
    "EXTENDED_GENERATORS",
]
