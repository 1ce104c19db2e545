# -*- coding: utf-8 -*-
import os
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import ConfigDict, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Responses Runtime Settings"""

    # Service settings
    HOST: str = "127.0.0.1"
    PORT: int = 8000
    LOG_LEVEL: Literal[
        "DEBUG",
        "INFO",
        "WARNING",
        "ERROR",
        "CRITICAL",
    ] = "INFO"
    LOG_JSON: bool = False

    # Responses endpoint settings
    RESPONSES_PATH_TEMPLATE: str = "/{agent_name}/v1/responses"
    MAX_CONCURRENT_REQUESTS: int = 100
    # Project image, audio, file and error contents instead of dropping
    STREAM_MEDIA_CONTENT: bool = False

    # Identifier settings
    ID_ENTROPY_LENGTH: int = 32
    ID_PARTITION_KEY_LENGTH: int = 16

    model_config = ConfigDict(
        case_sensitive=True,
        extra="allow",
    )

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def normalize_log_level(cls, value):
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @field_validator(
        "MAX_CONCURRENT_REQUESTS",
        "ID_ENTROPY_LENGTH",
        "ID_PARTITION_KEY_LENGTH",
    )
    @classmethod
    def validate_positive(cls, value):
        if value < 1:
            raise ValueError("must be a positive integer")
        return value


_settings: Optional[Settings] = None


def get_settings(config_file: Optional[str] = None) -> Settings:
    global _settings

    env_file = ".env"
    env_example_file = ".env.example"

    if _settings is None:
        if config_file and os.path.exists(config_file):
            load_dotenv(config_file, override=True)
        elif os.path.exists(env_file):
            load_dotenv(env_file)
        elif os.path.exists(env_example_file):
            load_dotenv(env_example_file)
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next ``get_settings`` reloads."""
    global _settings
    _settings = None
