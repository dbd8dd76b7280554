"""
Server configuration for clickup-mcp.

Supports configuration via:
1. Environment variables (highest priority)
2. TOML config file (clickup-mcp.toml)
3. Default values (lowest priority)

Environment variables:
- CLICKUP_API_KEY: ClickUp personal API token (required to reach the API)
- CLICKUP_TEAM_ID: ClickUp workspace (team) ID
- CLICKUP_MCP_API_BASE_URL: Override for the ClickUp API base URL
- CLICKUP_MCP_REQUEST_TIMEOUT: HTTP request timeout in seconds
- CLICKUP_MCP_DOCUMENT_SUPPORT: Register the document tools (true/false)
- CLICKUP_MCP_DISABLED_TOOLS: Comma-separated list of tool names to disable
- CLICKUP_MCP_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
- CLICKUP_MCP_STRUCTURED_LOGGING: Emit JSON log lines (true/false)
- CLICKUP_MCP_TRANSPORT: "stdio" (default) or "sse"
- CLICKUP_MCP_HOST / CLICKUP_MCP_PORT: Bind address for the SSE transport
- CLICKUP_MCP_CONFIG_FILE: Path to TOML config file

Example clickup-mcp.toml:

    [clickup]
    team_id = "9012345"
    document_support = true

    [tools]
    disabled = ["delete_space", "delete_bulk_tasks"]

    [server]
    transport = "sse"
    port = 3231
"""

import logging
import os
from dataclasses import dataclass, field
from importlib.metadata import PackageNotFoundError, version as get_package_version
from pathlib import Path
from typing import Any, List, Optional

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # Python < 3.11 fallback

from clickup_mcp.core.logging_config import configure_logging

logger = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = "https://api.clickup.com/api"
VALID_TRANSPORTS = frozenset(["stdio", "sse"])


def _get_version() -> str:
    """Get package version from metadata (single source of truth: pyproject.toml)."""
    try:
        return get_package_version("clickup-mcp")
    except PackageNotFoundError:
        return "0.1.0"


_PACKAGE_VERSION = _get_version()


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"true", "1", "yes", "on"}


def _parse_tool_list(value: Any) -> List[str]:
    """Accept a comma-separated string or a list; trim and drop empty names."""
    if isinstance(value, str):
        items = value.split(",")
    else:
        items = [str(v) for v in value]
    return [item.strip() for item in items if item.strip()]


@dataclass
class ServerConfig:
    """Server configuration with support for env vars and TOML overrides."""

    # ClickUp API
    api_key: str = ""
    team_id: str = ""
    api_base_url: str = DEFAULT_API_BASE_URL
    request_timeout: float = 30.0

    # Tool catalogue
    document_support: bool = False
    disabled_tools: List[str] = field(default_factory=list)

    # Logging configuration
    log_level: str = "INFO"
    structured_logging: bool = False

    # Server configuration
    server_name: str = "clickup-mcp"
    server_version: str = field(default_factory=lambda: _PACKAGE_VERSION)
    transport: str = "stdio"
    host: str = "127.0.0.1"
    port: int = 3231

    @classmethod
    def from_env(cls, config_file: Optional[str] = None) -> "ServerConfig":
        """
        Create configuration from environment variables and optional TOML file.

        Priority (highest to lowest):
        1. Environment variables
        2. TOML config file
        3. Default values
        """
        config = cls()

        toml_path = config_file or os.environ.get("CLICKUP_MCP_CONFIG_FILE")
        if toml_path:
            config._load_toml(Path(toml_path))
        else:
            for default_path in ["clickup-mcp.toml", ".clickup-mcp.toml"]:
                if Path(default_path).exists():
                    config._load_toml(Path(default_path))
                    break

        config._load_env()

        return config

    def _load_toml(self, path: Path) -> None:
        """Load configuration from TOML file."""
        if not path.exists():
            logger.warning(f"Config file not found: {path}")
            return

        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.error(f"Error loading config file {path}: {e}")
            return

        if "clickup" in data:
            cu = data["clickup"]
            if "api_key" in cu:
                self.api_key = str(cu["api_key"])
            if "team_id" in cu:
                self.team_id = str(cu["team_id"])
            if "api_base_url" in cu:
                self.api_base_url = str(cu["api_base_url"]).rstrip("/")
            if "request_timeout" in cu:
                self.request_timeout = float(cu["request_timeout"])
            if "document_support" in cu:
                self.document_support = _parse_bool(cu["document_support"])

        if "tools" in data:
            tools = data["tools"]
            if "disabled" in tools:
                self.disabled_tools = _parse_tool_list(tools["disabled"])

        if "logging" in data:
            log = data["logging"]
            if "level" in log:
                self.log_level = str(log["level"]).upper()
            if "structured" in log:
                self.structured_logging = _parse_bool(log["structured"])

        if "server" in data:
            srv = data["server"]
            if "name" in srv:
                self.server_name = srv["name"]
            if "version" in srv:
                self.server_version = srv["version"]
            if "transport" in srv:
                self.transport = self._normalize_transport(str(srv["transport"]))
            if "host" in srv:
                self.host = srv["host"]
            if "port" in srv:
                self.port = int(srv["port"])

    def _load_env(self) -> None:
        """Load configuration from environment variables."""
        if api_key := os.environ.get("CLICKUP_API_KEY"):
            self.api_key = api_key

        if team_id := os.environ.get("CLICKUP_TEAM_ID"):
            self.team_id = team_id

        if base_url := os.environ.get("CLICKUP_MCP_API_BASE_URL"):
            self.api_base_url = base_url.rstrip("/")

        if timeout := os.environ.get("CLICKUP_MCP_REQUEST_TIMEOUT"):
            try:
                self.request_timeout = float(timeout)
            except ValueError:
                logger.warning(f"Ignoring invalid CLICKUP_MCP_REQUEST_TIMEOUT: {timeout}")

        if doc_support := os.environ.get("CLICKUP_MCP_DOCUMENT_SUPPORT"):
            self.document_support = _parse_bool(doc_support)

        if disabled := os.environ.get("CLICKUP_MCP_DISABLED_TOOLS"):
            self.disabled_tools = _parse_tool_list(disabled)

        if level := os.environ.get("CLICKUP_MCP_LOG_LEVEL"):
            self.log_level = level.upper()

        if structured := os.environ.get("CLICKUP_MCP_STRUCTURED_LOGGING"):
            self.structured_logging = _parse_bool(structured)

        if transport := os.environ.get("CLICKUP_MCP_TRANSPORT"):
            self.transport = self._normalize_transport(transport)

        if host := os.environ.get("CLICKUP_MCP_HOST"):
            self.host = host

        if port := os.environ.get("CLICKUP_MCP_PORT"):
            try:
                self.port = int(port)
            except ValueError:
                logger.warning(f"Ignoring invalid CLICKUP_MCP_PORT: {port}")

    @staticmethod
    def _normalize_transport(value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in VALID_TRANSPORTS:
            logger.warning(
                "Invalid transport '%s'. Falling back to 'stdio'. Valid options: %s",
                value,
                ", ".join(sorted(VALID_TRANSPORTS)),
            )
            return "stdio"
        return normalized

    def setup_logging(self) -> None:
        """Configure logging based on settings."""
        configure_logging(
            level=getattr(logging, self.log_level, logging.INFO),
            format="structured" if self.structured_logging else "human",
        )


# Global configuration instance
_config: Optional[ServerConfig] = None


def get_config() -> ServerConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = ServerConfig.from_env()
    return _config


def set_config(config: ServerConfig) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config
