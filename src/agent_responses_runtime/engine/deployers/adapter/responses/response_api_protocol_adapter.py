# -*- coding: utf-8 -*-
import asyncio
import json
import logging
from typing import Any, AsyncIterator, Optional
from urllib.parse import quote

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import ValidationError

from .response_api_agent_adapter import ResponseAPIExecutor
from ..protocol_adapter import ProtocolAdapter
from ....agents.base_agent import Agent
from ....schemas.exception import (
    AgentInvocationException,
    AppBaseException,
    InvalidRequestException,
)
from ....schemas.response_api import (
    CreateResponse,
    StreamingErrorEvent,
    StreamingResponseEvent,
)

logger = logging.getLogger(__name__)

RESPONSES_PATH_TEMPLATE = "/{agent_name}/v1/responses"
SSE_HEADERS = {
    "Cache-Control": "no-cache,no-store",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",  # disable Nginx buffering
}


def validate_agent_name(agent_name: str) -> None:
    """
    Reject agent names that would need escaping inside a URL path.

    Raises:
        ValueError: the name is empty or contains reserved characters
    """
    if not agent_name:
        raise ValueError("Agent name must not be empty.")
    if quote(agent_name, safe="").lower() != agent_name.lower():
        raise ValueError(
            f"Agent name '{agent_name}' contains characters invalid for "
            f"URL routes.",
        )


def format_sse(event: StreamingResponseEvent) -> str:
    data = json.dumps(event.to_wire(), ensure_ascii=False)
    return f"event: {event.type}\ndata: {data}\n\n"


async def _handle_app_exception(
    request: Request,
    exc: AppBaseException,
) -> JSONResponse:
    return JSONResponse(status_code=exc.status, content=exc.to_error_body())


async def _handle_unexpected_exception(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    logger.error(
        "Unhandled error on %s: %s",
        request.url.path,
        exc,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "server_error",
                "message": "Internal server error",
                "type": type(exc).__name__,
            },
        },
    )


def install_exception_handlers(app: FastAPI) -> None:
    """Map runtime exceptions to OpenAI-style error bodies."""
    if AppBaseException not in app.exception_handlers:
        app.add_exception_handler(AppBaseException, _handle_app_exception)
    if Exception not in app.exception_handlers:
        app.add_exception_handler(Exception, _handle_unexpected_exception)


class ResponseAPIDefaultAdapter(ProtocolAdapter):
    """
    Serves an agent as an OpenAI Responses API endpoint.

    Keyword Args:
        responses_path: explicit route, defaults to
            ``/{agent_name}/v1/responses``
        agent_name: name used in the default route, defaults to the
            agent's display name
        max_concurrent_requests: size of the request concurrency guard
        stream_media_content: project media contents when streaming
        entropy_length / partition_key_length: identifier layout
    """

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._executor: Optional[ResponseAPIExecutor] = None
        self._responses_path: Optional[str] = kwargs.get("responses_path")
        self._agent_name: Optional[str] = kwargs.get("agent_name")
        self._path_template = kwargs.get(
            "path_template",
            RESPONSES_PATH_TEMPLATE,
        )
        self._max_concurrent_requests = kwargs.get(
            "max_concurrent_requests",
            100,
        )
        self._semaphore = asyncio.Semaphore(self._max_concurrent_requests)

    @property
    def responses_path(self) -> Optional[str]:
        return self._responses_path

    def add_endpoint(self, app: FastAPI, agent: Agent, **kwargs) -> str:
        """
        Register ``POST {responses_path}`` on ``app``.

        Args:
            app: FastAPI application instance
            agent: the agent to serve
            **kwargs: overrides for the constructor options

        Returns:
            str: the registered route
        """
        options = {**self._kwargs, **kwargs}
        self._executor = ResponseAPIExecutor(
            agent,
            stream_media_content=options.get("stream_media_content", False),
            generators=options.get("generators"),
            **{
                key: options[key]
                for key in ("entropy_length", "partition_key_length")
                if key in options
            },
        )

        if self._responses_path is None:
            agent_name = self._agent_name or agent.display_name
            validate_agent_name(agent_name)
            self._responses_path = self._path_template.format(
                agent_name=agent_name,
            )

        install_exception_handlers(app)
        app.post(
            self._responses_path,
            name=f"{agent.display_name}/CreateResponse",
            summary="Create a model response",
            description="OpenAI Response API compatible request format",
        )(self._handle_requests)
        logger.info(
            "Responses endpoint for agent %s registered at %s",
            agent.display_name,
            self._responses_path,
        )
        return self._responses_path

    async def _parse_request(self, request: Request) -> CreateResponse:
        try:
            body = await request.json()
        except ValueError as e:
            raise InvalidRequestException(
                "Request body is not valid JSON.",
            ) from e
        try:
            return CreateResponse.model_validate(body)
        except ValidationError as e:
            raise InvalidRequestException(
                f"Invalid request: {e.error_count()} validation error(s).",
                details={
                    "errors": e.errors(
                        include_url=False,
                        include_context=False,
                    ),
                },
            ) from e

    async def _handle_requests(self, request: Request):
        """
        Handle an OpenAI Response API request.

        Args:
            request: FastAPI Request object

        Returns:
            StreamingResponse for streaming requests, JSONResponse with
            the completed response otherwise
        """
        create_request = await self._parse_request(request)
        context = self._executor.create_context(create_request)

        if create_request.stream:
            events = await self._executor.create_model_response(
                create_request,
                context=context,
            )
            return StreamingResponse(
                self._generate_stream_response(events, context.response_id),
                media_type="text/event-stream",
                headers=SSE_HEADERS,
            )

        # Concurrency guard per request
        async with self._semaphore:
            logger.info(
                "[ResponseAPI] start response_id=%s",
                context.response_id,
            )
            try:
                response = await self._executor.create_model_response(
                    create_request,
                    context=context,
                )
            finally:
                logger.info(
                    "[ResponseAPI] end response_id=%s",
                    context.response_id,
                )
        return JSONResponse(content=response.to_wire())

    async def _generate_stream_response(
        self,
        events: AsyncIterator[StreamingResponseEvent],
        response_id: str,
    ) -> AsyncIterator[str]:
        """
        Frame stream events as SSE.

        A failure after the stream started is reported as a single
        ``error`` event, the stream then ends without a terminal event.
        """
        async with self._semaphore:
            logger.info("[ResponseAPI] start response_id=%s", response_id)
            next_sequence = 0
            try:
                async for event in events:
                    next_sequence = event.sequence_number + 1
                    yield format_sse(event)
            except Exception as e:
                error = AgentInvocationException.wrap(e).error
                logger.error(
                    "Error in stream generation for %s: %s",
                    response_id,
                    e,
                    exc_info=True,
                    extra={"response_id": response_id, "code": error.code},
                )
                yield format_sse(
                    StreamingErrorEvent(
                        sequence_number=next_sequence,
                        code=error.code,
                        message=error.message,
                    ),
                )
            finally:
                logger.info("[ResponseAPI] end response_id=%s", response_id)


def map_openai_responses(
    app: FastAPI,
    agent_name: str,
    agent: Agent,
    responses_path: Optional[str] = None,
    **kwargs: Any,
) -> ResponseAPIDefaultAdapter:
    """
    Expose ``agent`` at ``responses_path``, by default
    ``/{agent_name}/v1/responses``.

    Raises:
        ValueError: no path was given and ``agent_name`` is not URL safe
    """
    if responses_path is None:
        validate_agent_name(agent_name)
        responses_path = RESPONSES_PATH_TEMPLATE.format(agent_name=agent_name)
    adapter = ResponseAPIDefaultAdapter(
        responses_path=responses_path,
        agent_name=agent_name,
        **kwargs,
    )
    adapter.add_endpoint(app, agent)
    return adapter
