"""Per-call request context for log correlation.

Every tool invocation runs inside a request context so that log records
and response envelopes share the same correlation ID.

Usage:
    from clickup_mcp.core.context import sync_request_context, get_correlation_id

    with sync_request_context(tool_name="create_task") as ctx:
        logger.info("Handling %s", ctx.tool_name)  # record carries ctx.correlation_id
"""

from __future__ import annotations

import secrets
import time
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Generator, Optional

__all__ = [
    "correlation_id_var",
    "tool_name_var",
    "start_time_var",
    "RequestContext",
    "generate_correlation_id",
    "sync_request_context",
    "get_correlation_id",
    "get_tool_name",
    "get_start_time",
]

correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")
"""Correlation ID of the tool call currently being handled."""

tool_name_var: ContextVar[str] = ContextVar("tool_name", default="")
"""Name of the tool currently being handled."""

start_time_var: ContextVar[float] = ContextVar("start_time", default=0.0)
"""Call start time as Unix timestamp."""


def generate_correlation_id(prefix: str = "req") -> str:
    """Generate a unique correlation ID.

    Format: {prefix}_{12_hex_chars}, e.g. "req_a1b2c3d4e5f6".
    """
    return f"{prefix}_{secrets.token_hex(6)}"


@dataclass
class RequestContext:
    """Snapshot of the current request context."""

    correlation_id: str = ""
    tool_name: str = ""
    start_time: float = field(default_factory=time.time)


@contextmanager
def sync_request_context(
    *,
    correlation_id: Optional[str] = None,
    tool_name: str = "",
) -> Generator[RequestContext, None, None]:
    """Set the request context variables for the duration of the block.

    contextvars are task-local under asyncio, so this is safe to use around
    awaits in concurrently running tool calls.

    Args:
        correlation_id: Request ID (auto-generated if None)
        tool_name: Tool being invoked

    Yields:
        RequestContext snapshot
    """
    corr_id = correlation_id or generate_correlation_id()
    start = time.time()

    token_corr = correlation_id_var.set(corr_id)
    token_tool = tool_name_var.set(tool_name)
    token_start = start_time_var.set(start)

    try:
        yield RequestContext(
            correlation_id=corr_id,
            tool_name=tool_name,
            start_time=start,
        )
    finally:
        correlation_id_var.reset(token_corr)
        tool_name_var.reset(token_tool)
        start_time_var.reset(token_start)


def get_correlation_id() -> str:
    """Current correlation ID, or empty string outside a request."""
    return correlation_id_var.get()


def get_tool_name() -> str:
    return tool_name_var.get()


def get_start_time() -> float:
    return start_time_var.get()
