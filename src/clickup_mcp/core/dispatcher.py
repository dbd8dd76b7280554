"""Tool discovery and invocation.

``ToolDispatcher.call_tool`` is the single entry point used by every
transport binding. It never raises: each failure is translated into an
error envelope of one of three classes, detected in this order:

1. ``method_not_found``: unknown or disabled tool, before any validation
2. ``invalid_params``: schema or constraint failure, before any backend call
3. ``execution_error``: backend failure, failed name resolution, or any
   other runtime fault, carrying the original message
"""

import logging
from typing import TYPE_CHECKING, Any, List, Mapping, Optional

from clickup_mcp.core.context import sync_request_context
from clickup_mcp.core.errors import (
    AmbiguousMatchError,
    InvalidParamsError,
    ResourceNotFoundError,
    ToolDisabledError,
    UnknownToolError,
)
from clickup_mcp.core.registry import ToolDefinition, ToolRegistry
from clickup_mcp.core.responses import (
    ErrorCode,
    ErrorType,
    ToolResponse,
    execution_error,
    invalid_params_error,
    method_not_found_error,
)
from clickup_mcp.core.validation import validate_arguments
from clickup_mcp.services.base import ClickUpServiceError

if TYPE_CHECKING:
    from clickup_mcp.services import ClickUpServices

logger = logging.getLogger(__name__)

_STATUS_ERROR_TYPES = {
    401: ErrorType.AUTHENTICATION,
    403: ErrorType.AUTHORIZATION,
    404: ErrorType.NOT_FOUND,
    409: ErrorType.CONFLICT,
    429: ErrorType.RATE_LIMIT,
    503: ErrorType.UNAVAILABLE,
}


def error_type_for_status(status_code: Optional[int]) -> ErrorType:
    if status_code is None:
        return ErrorType.UNAVAILABLE
    if status_code in _STATUS_ERROR_TYPES:
        return _STATUS_ERROR_TYPES[status_code]
    if 400 <= status_code < 500:
        return ErrorType.VALIDATION
    return ErrorType.INTERNAL


class ToolDispatcher:
    """Routes calls by name to handlers and normalizes their outcome.

    Args:
        registry: Tool catalogue (with the disabled list applied)
        services: Backend service bundle passed to every handler
    """

    def __init__(self, registry: ToolRegistry, services: "ClickUpServices"):
        self.registry = registry
        self.services = services

    def list_tools(self) -> List[ToolDefinition]:
        return self.registry.list_tools()

    async def call_tool(
        self, name: str, arguments: Optional[Mapping[str, Any]] = None
    ) -> ToolResponse:
        with sync_request_context(tool_name=name):
            logger.info(f"Tool call: {name}", extra={"params": dict(arguments or {})})
            response = await self._dispatch(name, arguments)
            if not response.success:
                logger.warning(
                    f"Tool {name} failed: {response.error}",
                    extra={
                        "params": dict(arguments or {}),
                        "error_class": response.data.get("error_class"),
                        "error_code": response.data.get("error_code"),
                    },
                )
            return response

    async def _dispatch(
        self, name: str, arguments: Optional[Mapping[str, Any]]
    ) -> ToolResponse:
        try:
            definition = self.registry.get(name)
        except ToolDisabledError:
            return method_not_found_error(name, disabled=True)
        except UnknownToolError:
            return method_not_found_error(name)

        try:
            params = validate_arguments(definition, arguments)
        except InvalidParamsError as e:
            return invalid_params_error(
                name, e.message, error_code=e.error_code, details=e.details
            )

        try:
            return await definition.handler(params, self.services)
        except InvalidParamsError as e:
            # raised by value conversion inside handlers (dates, durations)
            return invalid_params_error(
                name, e.message, error_code=e.error_code, details=e.details
            )
        except ClickUpServiceError as e:
            return execution_error(
                name,
                e.message,
                error_code=ErrorCode.SERVICE_ERROR,
                error_type=error_type_for_status(e.status_code),
                details=e.to_dict(),
            )
        except (ResourceNotFoundError, AmbiguousMatchError) as e:
            return execution_error(
                name,
                e.message,
                error_code=e.error_code,
                error_type=ErrorType.NOT_FOUND
                if isinstance(e, ResourceNotFoundError)
                else ErrorType.CONFLICT,
                details=e.details,
            )
        except Exception as e:
            logger.exception(f"Unexpected error in tool {name}")
            return execution_error(name, str(e) or type(e).__name__)
