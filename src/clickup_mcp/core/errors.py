"""Closed error taxonomy raised inside the tool layer.

The dispatcher maps each of these onto one of the caller-visible error
classes (see ``clickup_mcp.core.responses.ErrorClass``). Backend failures
use ``clickup_mcp.services.base.ClickUpServiceError``.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from clickup_mcp.core.responses import ErrorCode


class ToolError(Exception):
    """Base exception for tool-layer failures.

    Attributes:
        message: Human-readable error description
        details: Machine-readable context attached to the error envelope
    """

    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class UnknownToolError(ToolError):
    """No tool is registered under the requested name."""

    error_code = ErrorCode.METHOD_NOT_FOUND

    def __init__(self, tool_name: str):
        super().__init__(f"Unknown tool: {tool_name}", details={"tool": tool_name})
        self.tool_name = tool_name


class ToolDisabledError(ToolError):
    """The requested tool is on the disabled tools list."""

    error_code = ErrorCode.TOOL_DISABLED

    def __init__(self, tool_name: str):
        super().__init__(f"Tool '{tool_name}' is disabled.", details={"tool": tool_name})
        self.tool_name = tool_name


class InvalidParamsError(ToolError):
    """Arguments failed schema or constraint validation.

    Attributes:
        tool_name: Tool whose arguments were rejected (may be filled in later
            by the dispatcher)
        errors: Individual validation messages
    """

    error_code = ErrorCode.VALIDATION_ERROR

    def __init__(
        self,
        message: str,
        *,
        tool_name: str = "",
        errors: Optional[Sequence[str]] = None,
        error_code: Optional[ErrorCode] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details=details)
        self.tool_name = tool_name
        self.errors: List[str] = list(errors) if errors else [message]
        if error_code is not None:
            self.error_code = error_code


class ResourceNotFoundError(ToolError):
    """A name lookup matched no resource."""

    error_code = ErrorCode.NOT_FOUND

    def __init__(self, resource_type: str, name: str, *, scope: Optional[str] = None):
        where = f" in {scope}" if scope else ""
        super().__init__(
            f"{resource_type} with name '{name}' not found{where}",
            details={"resource_type": resource_type, "name": name},
        )
        self.resource_type = resource_type
        self.name = name


class AmbiguousMatchError(ToolError):
    """A name lookup matched more than one resource."""

    error_code = ErrorCode.AMBIGUOUS_MATCH

    def __init__(self, resource_type: str, name: str, candidate_ids: Sequence[str]):
        ids = [str(c) for c in candidate_ids]
        super().__init__(
            f"Multiple {resource_type.lower()}s named '{name}' found "
            f"(ids: {', '.join(ids)}); use the id instead",
            details={"resource_type": resource_type, "name": name, "candidates": ids},
        )
        self.resource_type = resource_type
        self.name = name
        self.candidate_ids = ids
