"""ClickUp MCP - MCP server exposing ClickUp workspaces as tools."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("clickup-mcp")
except PackageNotFoundError:
    # Package not installed (development mode without editable install)
    __version__ = "0.1.0"

from clickup_mcp.server import create_server, main

__all__ = ["__version__", "create_server", "main"]
