"""Argument validation for tool calls.

Arguments are checked against the tool's JSON Schema (Draft 7), then
against the declarative constraints on its ``ToolDefinition``. Nothing in
this module talks to the backend.
"""

import copy
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from jsonschema import Draft7Validator

from clickup_mcp.core.errors import InvalidParamsError
from clickup_mcp.core.registry import ResourceRef, ToolDefinition
from clickup_mcp.core.responses import ErrorCode


def is_present(params: Mapping[str, Any], key: str) -> bool:
    """A parameter counts as supplied unless it is missing, null or blank.

    ``False`` and ``0`` are present values.
    """
    if key not in params:
        return False
    value = params[key]
    if value is None:
        return False
    if isinstance(value, str) and not value.strip():
        return False
    return True


def has_update_value(params: Mapping[str, Any], key: str) -> bool:
    """Update fields count when supplied, including an explicit null that
    clears the value. Blank strings do not count.
    """
    if key not in params:
        return False
    value = params[key]
    return not (isinstance(value, str) and not value.strip())


def _check_update_fields(
    params: Mapping[str, Any], fields: Tuple[str, ...], *, tool_name: str, prefix: str = ""
) -> None:
    if fields and not any(has_update_value(params, f) for f in fields):
        raise InvalidParamsError(
            prefix + "No update data provided",
            tool_name=tool_name,
            error_code=ErrorCode.NO_UPDATE_DATA,
            details={"update_fields": list(fields)},
        )


def _format_error(error: Any) -> str:
    pointer = ".".join(str(part) for part in error.absolute_path)
    return f"{pointer}: {error.message}" if pointer else error.message


def _schema_errors(validator: Draft7Validator, instance: Any) -> List[Any]:
    return sorted(validator.iter_errors(instance), key=lambda err: list(map(str, err.path)))


def _raise_for_schema_errors(errors: List[Any], *, tool_name: str, prefix: str = "") -> None:
    if not errors:
        return
    messages = [prefix + _format_error(e) for e in errors]
    missing_only = all(e.validator == "required" for e in errors)
    raise InvalidParamsError(
        "; ".join(messages),
        tool_name=tool_name,
        errors=messages,
        error_code=ErrorCode.MISSING_REQUIRED if missing_only else ErrorCode.VALIDATION_ERROR,
        details={"errors": messages},
    )


def _check_identifier_groups(
    params: Mapping[str, Any],
    groups: Iterable[ResourceRef],
    *,
    tool_name: str,
    prefix: str = "",
) -> None:
    for ref in groups:
        has_id = is_present(params, ref.id_field)
        has_name = bool(ref.name_field) and is_present(params, ref.name_field)
        if not has_id and not has_name:
            raise InvalidParamsError(
                prefix + ref.describe(),
                tool_name=tool_name,
                error_code=ErrorCode.MISSING_REQUIRED,
                details={"fields": [f for f in (ref.id_field, ref.name_field) if f]},
            )
        if not has_id and ref.scope_fields:
            if not any(is_present(params, f) for f in ref.scope_fields):
                raise InvalidParamsError(
                    f"{prefix}{ref.name_field} requires one of: {', '.join(ref.scope_fields)}",
                    tool_name=tool_name,
                    error_code=ErrorCode.MISSING_REQUIRED,
                    details={"fields": list(ref.scope_fields)},
                )


def _relaxed_schema(definition: ToolDefinition) -> Dict[str, Any]:
    """Top-level schema with the batch items reduced to plain objects.

    Individual items are checked later by ``validate_batch_item`` so one bad
    item does not fail the whole batch.
    """
    schema = copy.deepcopy(definition.input_schema)
    batch = schema.get("properties", {}).get(definition.batch_field)
    if batch is not None:
        batch["items"] = {"type": "object"}
    return schema


def _validator_for(definition: ToolDefinition) -> Draft7Validator:
    if definition.batch_field:
        return Draft7Validator(_relaxed_schema(definition))
    return Draft7Validator(definition.input_schema)


def validate_arguments(
    definition: ToolDefinition, arguments: Optional[Mapping[str, Any]]
) -> Dict[str, Any]:
    """Validate call arguments and return them as a plain dict.

    Order: JSON Schema, then identifier groups, then update fields.

    Raises:
        InvalidParamsError: On the first failing stage
    """
    params: Dict[str, Any] = dict(arguments or {})

    _raise_for_schema_errors(
        _schema_errors(_validator_for(definition), params), tool_name=definition.name
    )
    _check_identifier_groups(params, definition.identifier_groups, tool_name=definition.name)

    _check_update_fields(params, definition.update_fields, tool_name=definition.name)

    return params


def validate_batch_item(definition: ToolDefinition, index: int, item: Any) -> Dict[str, Any]:
    """Validate one element of the tool's batch array.

    Raises:
        InvalidParamsError: Message is prefixed with the item index
    """
    prefix = f"item {index}: "
    item_schema = definition.input_schema["properties"][definition.batch_field]["items"]
    errors = _schema_errors(Draft7Validator(item_schema), item)
    _raise_for_schema_errors(errors, tool_name=definition.name, prefix=prefix)
    _check_identifier_groups(
        item, definition.item_identifier_groups, tool_name=definition.name, prefix=prefix
    )
    _check_update_fields(
        item, definition.item_update_fields, tool_name=definition.name, prefix=prefix
    )
    return dict(item)
