"""MCP server for clickup-mcp.

The dispatcher is transport-agnostic; this module binds it to an MCP
low-level ``Server`` and runs that server over stdio or SSE.
"""

import asyncio
import json
import logging
import sys
from dataclasses import asdict
from typing import Any, Dict, List, Optional

import click
import mcp.types as types
import uvicorn
from mcp.server.lowlevel import Server
from mcp.server.sse import SseServerTransport
from mcp.server.stdio import stdio_server
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Mount, Route

from clickup_mcp.config import ServerConfig, get_config, set_config
from clickup_mcp.core.dispatcher import ToolDispatcher
from clickup_mcp.core.responses import ToolResponse
from clickup_mcp.services import ClickUpServices, create_clickup_services
from clickup_mcp.tools import build_registry

logger = logging.getLogger(__name__)


class ToolCallFailed(Exception):
    """Carries a failed envelope out of the call handler.

    The SDK turns an exception raised by the handler into a result with
    ``isError`` set and ``str(exc)`` as its text, which is the envelope JSON.
    """

    def __init__(self, response: ToolResponse):
        super().__init__(dump_response(response))
        self.response = response


def dump_response(response: ToolResponse) -> str:
    """Serialize an envelope as minified JSON."""
    return json.dumps(asdict(response), separators=(",", ":"), default=str)


def create_server(config: ServerConfig, dispatcher: ToolDispatcher) -> Server:
    """Create the MCP server with tool discovery and invocation bound to ``dispatcher``."""
    server: Server = Server(config.server_name, version=config.server_version)

    @server.list_tools()
    async def list_tools() -> List[types.Tool]:
        return [
            types.Tool(
                name=definition.name,
                description=definition.description,
                inputSchema=definition.input_schema,
            )
            for definition in dispatcher.list_tools()
        ]

    # Arguments are validated by the dispatcher so its error classes are the
    # only ones callers see.
    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: Optional[Dict[str, Any]]) -> List[types.TextContent]:
        response = await dispatcher.call_tool(name, arguments)
        if not response.success:
            raise ToolCallFailed(response)
        return [types.TextContent(type="text", text=dump_response(response))]

    return server


def create_sse_app(server: Server) -> Starlette:
    """Starlette app serving ``GET /sse`` and ``POST /messages/?session_id=...``."""
    sse = SseServerTransport("/messages/")

    async def handle_sse(request: Request) -> Response:
        async with sse.connect_sse(request.scope, request.receive, request._send) as streams:
            await server.run(streams[0], streams[1], server.create_initialization_options())
        return Response()

    return Starlette(
        routes=[
            Route("/sse", endpoint=handle_sse, methods=["GET"]),
            Mount("/messages/", app=sse.handle_post_message),
        ]
    )


async def run_stdio(server: Server) -> None:
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


async def run_sse(server: Server, config: ServerConfig) -> None:
    uvicorn_config = uvicorn.Config(
        create_sse_app(server),
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
    )
    await uvicorn.Server(uvicorn_config).serve()


async def serve(config: ServerConfig, services: Optional[ClickUpServices] = None) -> None:
    """Build the registry, dispatcher and server, run the transport, then close the client."""
    if not config.api_key:
        logger.warning("CLICKUP_API_KEY is not set; every ClickUp call will fail")
    if not config.team_id:
        logger.warning("CLICKUP_TEAM_ID is not set; workspace-scoped tools will fail")

    services = services or create_clickup_services(config)
    dispatcher = ToolDispatcher(build_registry(config), services)
    server = create_server(config, dispatcher)

    logger.info(
        f"Starting {config.server_name} v{config.server_version} over {config.transport}"
    )
    try:
        if config.transport == "sse":
            await run_sse(server, config)
        else:
            await run_stdio(server)
    finally:
        await services.aclose()


@click.command()
@click.option(
    "--config",
    "config_file",
    envvar="CLICKUP_MCP_CONFIG_FILE",
    type=click.Path(exists=False),
    help="Path to a TOML config file",
)
@click.option(
    "--transport",
    type=click.Choice(["stdio", "sse"]),
    default=None,
    help="Transport to serve on (overrides config)",
)
@click.option("--host", default=None, help="Bind address for the SSE transport")
@click.option("--port", type=int, default=None, help="Port for the SSE transport")
def main(
    config_file: Optional[str],
    transport: Optional[str],
    host: Optional[str],
    port: Optional[int],
) -> None:
    """Run the ClickUp MCP server."""
    config = ServerConfig.from_env(config_file) if config_file else get_config()
    if transport:
        config.transport = transport
    if host:
        config.host = host
    if port is not None:
        config.port = port
    set_config(config)
    config.setup_logging()

    try:
        asyncio.run(serve(config))
    except KeyboardInterrupt:
        logger.info("Server shutdown requested")
        sys.exit(0)
    except Exception as exc:
        logger.error(f"Server error: {type(exc).__name__}: {exc}")
        sys.exit(1)


if __name__ == "__main__":
    main()
