"""
Standard response contracts for ClickUp MCP tool operations.

Response Schema Contract
========================

Every tool call returns the same envelope:

    {
        "success": bool,       # Required: operation success/failure
        "data": {...},         # Required: primary payload
        "error": str | null,   # Required: error message or null on success
        "meta": {              # Required: response metadata
            "version": "response-v2",
            "request_id": "req_abc123"?,
            "warnings": ["..."]?,
        }
    }

Successful payloads always include a human-readable ``message`` and, where
one exists, the affected resource under a named key (``task``, ``space``,
``list``...).

Error payloads always carry the error class used by callers to branch:

    {
        "error_class": "invalid_params",   # method_not_found | invalid_params | execution_error
        "code": -32602,                    # JSON-RPC analog of the class
        "error_code": "MISSING_REQUIRED",  # fine-grained ErrorCode
        "error_type": "validation",
        "details": {...}?,
        "remediation": "..."?
    }
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Sequence, Union

from clickup_mcp.core.context import get_correlation_id

logger = logging.getLogger(__name__)


class ErrorClass(str, Enum):
    """The three caller-visible error classes, in detection order."""

    METHOD_NOT_FOUND = "method_not_found"
    INVALID_PARAMS = "invalid_params"
    EXECUTION_ERROR = "execution_error"

    @property
    def rpc_code(self) -> int:
        return _RPC_CODES[self]


_RPC_CODES = {
    ErrorClass.METHOD_NOT_FOUND: -32601,
    ErrorClass.INVALID_PARAMS: -32602,
    ErrorClass.EXECUTION_ERROR: -32000,
}


class ErrorCode(str, Enum):
    """Machine-readable error codes for tool responses.

    Categories:
        - Routing (unknown or disabled tools)
        - Validation (input errors)
        - Resource (not found, ambiguous)
        - System (backend service, internal)
    """

    # Routing errors
    METHOD_NOT_FOUND = "METHOD_NOT_FOUND"
    TOOL_DISABLED = "TOOL_DISABLED"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    MISSING_REQUIRED = "MISSING_REQUIRED"
    NO_UPDATE_DATA = "NO_UPDATE_DATA"

    # Resource errors
    NOT_FOUND = "NOT_FOUND"
    AMBIGUOUS_MATCH = "AMBIGUOUS_MATCH"

    # System errors
    SERVICE_ERROR = "SERVICE_ERROR"
    BATCH_FAILED = "BATCH_FAILED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorType(str, Enum):
    """Error categories for routing and client-side handling.

    Each type corresponds to an HTTP status code analog.
    """

    VALIDATION = "validation"  # 400 - fix input
    AUTHENTICATION = "authentication"  # 401
    AUTHORIZATION = "authorization"  # 403
    NOT_FOUND = "not_found"  # 404
    CONFLICT = "conflict"  # 409
    RATE_LIMIT = "rate_limit"  # 429
    INTERNAL = "internal"  # 500
    UNAVAILABLE = "unavailable"  # 503


@dataclass
class ToolResponse:
    """
    Standard response structure for tool operations.

    Attributes:
        success: Whether the operation completed successfully
        data: The primary payload (operation-specific structured data)
        error: Error message if success is False, None otherwise
        meta: Response metadata including version identifier
    """

    success: bool
    data: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None
    meta: Dict[str, Any] = field(default_factory=lambda: {"version": "response-v2"})

    @property
    def error_class(self) -> Optional[str]:
        return self.data.get("error_class") if not self.success else None


def _enum_value(value: Union[Enum, str]) -> str:
    return value.value if isinstance(value, Enum) else value


def _build_meta(
    *,
    request_id: Optional[str] = None,
    warnings: Optional[Sequence[str]] = None,
    extra: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """Construct a metadata payload that always includes the response version.

    The request_id defaults to the correlation ID of the active request
    context.
    """
    meta: Dict[str, Any] = {"version": "response-v2"}

    effective_request_id = request_id or get_correlation_id() or None
    if effective_request_id:
        meta["request_id"] = effective_request_id
    if warnings:
        meta["warnings"] = list(warnings)
    if extra:
        meta.update(dict(extra))

    return meta


def success_response(
    data: Optional[Mapping[str, Any]] = None,
    *,
    warnings: Optional[Sequence[str]] = None,
    request_id: Optional[str] = None,
    meta: Optional[Mapping[str, Any]] = None,
    **fields: Any,
) -> ToolResponse:
    """Create a standardized success response.

    Args:
        data: Optional mapping used as the base payload.
        warnings: Non-fatal issues to surface in ``meta.warnings``.
        request_id: Correlation identifier (defaults to the active context).
        meta: Arbitrary extra metadata to merge into ``meta``.
        **fields: Additional payload fields (shorthand for ``data.update``).

    Example:
        >>> success_response(message="Created space Engineering", space=space)
    """
    payload: Dict[str, Any] = {}
    if data:
        payload.update(dict(data))
    if fields:
        payload.update(fields)

    return ToolResponse(
        success=True,
        data=payload,
        error=None,
        meta=_build_meta(request_id=request_id, warnings=warnings, extra=meta),
    )


def error_response(
    message: str,
    *,
    error_class: Union[ErrorClass, str] = ErrorClass.EXECUTION_ERROR,
    error_code: Optional[Union[ErrorCode, str]] = None,
    error_type: Optional[Union[ErrorType, str]] = None,
    data: Optional[Mapping[str, Any]] = None,
    remediation: Optional[str] = None,
    details: Optional[Mapping[str, Any]] = None,
    request_id: Optional[str] = None,
    meta: Optional[Mapping[str, Any]] = None,
) -> ToolResponse:
    """Create a standardized error response.

    Args:
        message: Human-readable description of the failure.
        error_class: Caller-visible class; also determines ``code``.
        error_code: Canonical error code (defaults to INTERNAL_ERROR).
        error_type: Error category (defaults to internal).
        data: Optional mapping with additional machine-readable context.
        remediation: User-facing guidance on how to fix the issue.
        details: Nested structure describing the failure.
        request_id: Correlation identifier (defaults to the active context).
        meta: Arbitrary extra metadata to merge into ``meta``.
    """
    payload: Dict[str, Any] = {}
    if data:
        payload.update(dict(data))

    effective_class = ErrorClass(error_class)
    payload["error_class"] = effective_class.value
    payload["code"] = effective_class.rpc_code
    payload["error_code"] = _enum_value(
        error_code if error_code is not None else ErrorCode.INTERNAL_ERROR
    )
    payload["error_type"] = _enum_value(
        error_type if error_type is not None else ErrorType.INTERNAL
    )
    if remediation is not None:
        payload["remediation"] = remediation
    if details:
        payload["details"] = dict(details)

    return ToolResponse(
        success=False,
        data=payload,
        error=message,
        meta=_build_meta(request_id=request_id, extra=meta),
    )


# ---------------------------------------------------------------------------
# Specialized Error Helpers
# ---------------------------------------------------------------------------


def method_not_found_error(
    tool_name: str,
    *,
    disabled: bool = False,
    request_id: Optional[str] = None,
) -> ToolResponse:
    """Unknown or disabled tool (JSON-RPC -32601 analog)."""
    if disabled:
        return error_response(
            f"Tool '{tool_name}' is disabled.",
            error_class=ErrorClass.METHOD_NOT_FOUND,
            error_code=ErrorCode.TOOL_DISABLED,
            error_type=ErrorType.AUTHORIZATION,
            data={"tool": tool_name},
            remediation="Remove the tool from the disabled tools list to use it.",
            request_id=request_id,
        )
    return error_response(
        f"Method not found: {tool_name}",
        error_class=ErrorClass.METHOD_NOT_FOUND,
        error_code=ErrorCode.METHOD_NOT_FOUND,
        error_type=ErrorType.NOT_FOUND,
        data={"tool": tool_name},
        remediation="Call tools/list to see the available tools.",
        request_id=request_id,
    )


def invalid_params_error(
    tool_name: str,
    message: str,
    *,
    error_code: Union[ErrorCode, str] = ErrorCode.VALIDATION_ERROR,
    details: Optional[Mapping[str, Any]] = None,
    request_id: Optional[str] = None,
) -> ToolResponse:
    """Validation failure (JSON-RPC -32602 analog)."""
    return error_response(
        f"Invalid params for tool {tool_name}: {message}",
        error_class=ErrorClass.INVALID_PARAMS,
        error_code=error_code,
        error_type=ErrorType.VALIDATION,
        data={"tool": tool_name},
        details=details,
        request_id=request_id,
    )


def execution_error(
    tool_name: str,
    message: str,
    *,
    error_code: Union[ErrorCode, str] = ErrorCode.INTERNAL_ERROR,
    error_type: Union[ErrorType, str] = ErrorType.INTERNAL,
    details: Optional[Mapping[str, Any]] = None,
    request_id: Optional[str] = None,
) -> ToolResponse:
    """Backend or runtime failure (JSON-RPC -32000 analog)."""
    return error_response(
        f"Error executing tool {tool_name}: {message}",
        error_class=ErrorClass.EXECUTION_ERROR,
        error_code=error_code,
        error_type=error_type,
        data={"tool": tool_name},
        details=details,
        request_id=request_id,
    )
