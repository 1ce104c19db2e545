# -*- coding: utf-8 -*-
import json
import logging
from datetime import datetime
from typing import Optional, Union

DEFAULT_LOG_NAME = "agent_responses_runtime"
DEFAULT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

_EXTRA_FIELDS = ("response_id", "conversation_id", "agent_name", "code")


class JsonFormatter(logging.Formatter):
    """
    Formats records as one-line JSON documents.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as JSON.

        Args:
            record (logging.LogRecord): The log record to format.

        Returns:
            str: The formatted log record as a JSON string.
        """
        log_record = {
            "time": datetime.now().strftime("%Y-%m-%d %H:%M:%S.%f")[:-3],
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in _EXTRA_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_record[field] = value
        if record.exc_info:
            log_record["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(log_record, ensure_ascii=False)


def setup_logging(
    level: Union[int, str] = logging.INFO,
    json_format: bool = False,
    handler: Optional[logging.Handler] = None,
) -> logging.Logger:
    """
    Configure the package logger.

    Repeated calls replace the handler installed by the previous call.
    """
    logger = logging.getLogger(DEFAULT_LOG_NAME)
    if isinstance(level, str):
        level = level.upper()
    logger.setLevel(level)

    if handler is None:
        handler = logging.StreamHandler()
    if json_format:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))

    for existing in list(logger.handlers):
        if getattr(existing, "_agent_responses_handler", False):
            logger.removeHandler(existing)
    handler._agent_responses_handler = True  # pylint: disable=W0212
    logger.addHandler(handler)
    logger.propagate = False
    return logger
