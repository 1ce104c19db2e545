# -*- coding: utf-8 -*-
import logging
from typing import Optional

from fastapi import FastAPI

from .agents.base_agent import Agent
from .config import Settings, get_settings
from .deployers.adapter.responses.response_api_protocol_adapter import (
    ResponseAPIDefaultAdapter,
)
from ..version import __version__

logger = logging.getLogger(__name__)


def create_app(
    agent: Agent,
    agent_name: Optional[str] = None,
    responses_path: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """
    Build a FastAPI application serving ``agent`` over the Responses API.

    Args:
        agent: the agent to serve
        agent_name: route name, defaults to the agent's display name
        responses_path: explicit route, overrides the path template
        settings: runtime settings, loaded from the environment when
            omitted
    """
    settings = settings or get_settings()
    agent_name = agent_name or agent.display_name

    app = FastAPI(
        title=f"{agent_name} Responses API",
        description=agent.description or "",
        version=__version__,
    )

    adapter = ResponseAPIDefaultAdapter(
        responses_path=responses_path,
        agent_name=agent_name,
        path_template=settings.RESPONSES_PATH_TEMPLATE,
        max_concurrent_requests=settings.MAX_CONCURRENT_REQUESTS,
        stream_media_content=settings.STREAM_MEDIA_CONTENT,
        entropy_length=settings.ID_ENTROPY_LENGTH,
        partition_key_length=settings.ID_PARTITION_KEY_LENGTH,
    )
    adapter.add_endpoint(app, agent)
    app.state.responses_adapter = adapter

    @app.get("/health")
    async def health():
        return {"status": "healthy", "agent": agent_name}

    return app
