# -*- coding: utf-8 -*-
"""Agent Responses Runtime CLI - Main entry point."""
# pylint: disable=no-value-for-parameter

import logging
import sys
from typing import Optional

import click
import uvicorn

from agent_responses_runtime.cli.loaders.agent_loader import (
    AgentLoader,
    AgentLoadError,
)
from agent_responses_runtime.cli.utils.console import (
    echo_error,
    echo_info,
    echo_success,
    echo_warning,
    format_serve_info,
)
from agent_responses_runtime.engine.app import create_app
from agent_responses_runtime.engine.config import get_settings
from agent_responses_runtime.engine.log_utils import setup_logging
from agent_responses_runtime.version import __version__


@click.group()
@click.version_option(version=__version__, prog_name="agent-responses")
@click.pass_context
def cli(ctx):
    """
    Agent Responses Runtime - serve agents over the OpenAI Responses API.
    """
    # Ensure context object exists
    ctx.ensure_object(dict)


@cli.command()
@click.argument("source", required=True)
@click.option(
    "--host",
    "-h",
    help="Host address to bind to",
    default=None,
)
@click.option(
    "--port",
    "-p",
    help="Port number to serve the application on",
    type=int,
    default=None,
)
@click.option(
    "--name",
    "-n",
    help="Agent name used in the route, defaults to the agent's name",
    default=None,
)
@click.option(
    "--path",
    "responses_path",
    help="Explicit responses route, e.g. /v1/responses",
    default=None,
)
@click.option(
    "--config",
    "config_file",
    help="Path to a .env file with runtime settings",
    default=None,
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Show verbose output including logs",
    default=False,
)
def serve(
    source: str,
    host: Optional[str],
    port: Optional[int],
    name: Optional[str],
    responses_path: Optional[str],
    config_file: Optional[str],
    verbose: bool,
):
    """
    Serve an agent over the Responses API.

    SOURCE can be:
    \b
    - A module attribute (e.g., my_pkg.agents:agent)
    - Path to Python file (e.g., agent.py or agent.py:create_agent)

    Examples:
    \b
    $ agent-responses serve agent.py
    $ agent-responses serve my_pkg.agents:agent --port 8090 --verbose
    """
    settings = get_settings(config_file)
    setup_logging(
        level=logging.DEBUG if verbose else settings.LOG_LEVEL,
        json_format=settings.LOG_JSON,
    )

    echo_info(f"Loading agent from: {source}")
    try:
        agent = AgentLoader().load(source)
    except AgentLoadError as e:
        echo_error(f"Failed to load agent: {e}")
        sys.exit(1)
    echo_success(f"Agent '{agent.display_name}' loaded successfully")

    try:
        app = create_app(
            agent,
            agent_name=name,
            responses_path=responses_path,
            settings=settings,
        )
    except ValueError as e:
        echo_error(str(e))
        sys.exit(1)

    host = host or settings.HOST
    port = port or settings.PORT
    route = app.state.responses_adapter.responses_path
    click.echo(
        format_serve_info(
            {
                "agent": agent.display_name,
                "url": f"http://{host}:{port}{route}",
                "stream_media_content": settings.STREAM_MEDIA_CONTENT,
                "max_concurrent_requests": settings.MAX_CONCURRENT_REQUESTS,
                "log_level": "DEBUG" if verbose else settings.LOG_LEVEL,
            },
        ),
    )
    echo_info("The service will run continuously. Press Ctrl+C to stop.")
    try:
        uvicorn.run(
            app,
            host=host,
            port=port,
            log_level="debug" if verbose else settings.LOG_LEVEL.lower(),
        )
    except KeyboardInterrupt:
        echo_warning("\nService interrupted by user")


def main():
    """Entry point for console script."""
    cli(obj={})


if __name__ == "__main__":
    main()
