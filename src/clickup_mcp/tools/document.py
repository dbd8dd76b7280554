"""Document tools. Registered only when document support is enabled."""

from typing import TYPE_CHECKING, Any, Dict

from clickup_mcp.core.errors import InvalidParamsError
from clickup_mcp.core.registry import ToolDefinition
from clickup_mcp.core.responses import ErrorCode, ToolResponse, success_response
from clickup_mcp.core.validation import is_present
from clickup_mcp.tools.common import (
    bool_prop,
    copy_present,
    object_schema,
    resolve_space_id,
    string_prop,
)

if TYPE_CHECKING:
    from clickup_mcp.services import ClickUpServices

# ClickUp's numeric codes for a document's parent container.
PARENT_TYPES = {"space": 4, "folder": 5, "list": 6, "everything": 7, "workspace": 12}

CONTENT_FORMATS = ["text/md", "text/plain"]

_PARENT_PROPS = {
    "spaceId": string_prop("ID of the space the document belongs to"),
    "spaceName": string_prop("Name of the space (alternative to spaceId)"),
    "parentId": string_prop("ID of a folder or list parent; overrides the space"),
    "parentType": {
        "type": "string",
        "enum": list(PARENT_TYPES),
        "description": "Type of parentId",
    },
}
_PAGE_BODY_PROPS = {
    "name": string_prop("Page title"),
    "subTitle": string_prop("Page subtitle"),
    "content": string_prop("Page content"),
    "contentFormat": {
        "type": "string",
        "enum": CONTENT_FORMATS,
        "description": "Format of content (default text/md)",
    },
}
_PAGE_FIELDS = (
    ("name", "name"),
    ("subTitle", "sub_title"),
    ("content", "content"),
    ("contentFormat", "content_format"),
)

DOCUMENT_ID_PROP = {"documentId": string_prop("ID of the document")}


async def _resolve_parent(params: Dict[str, Any], services: "ClickUpServices") -> Dict[str, Any]:
    if is_present(params, "parentId"):
        return {
            "id": params["parentId"],
            "type": PARENT_TYPES[params.get("parentType") or "space"],
        }
    if not (is_present(params, "spaceId") or is_present(params, "spaceName")):
        raise InvalidParamsError(
            "Either parentId, spaceId or spaceName is required",
            error_code=ErrorCode.MISSING_REQUIRED,
        )
    space_id = await resolve_space_id(params, services)
    return {"id": space_id, "type": PARENT_TYPES["space"]}


async def handle_create_document(
    params: Dict[str, Any], services: "ClickUpServices"
) -> ToolResponse:
    payload = copy_present(
        params, (("name", "name"), ("visibility", "visibility"), ("createPage", "create_page"))
    )
    payload["parent"] = await _resolve_parent(params, services)
    document = await services.documents.create_document(payload)
    return success_response(
        message=f"Successfully created document: {document.get('name')} (ID: {document.get('id')})",
        document=document,
    )


async def handle_get_document(
    params: Dict[str, Any], services: "ClickUpServices"
) -> ToolResponse:
    document = await services.documents.get_document(params["documentId"])
    return success_response(
        message=f"Document: {document.get('name')} (ID: {document.get('id')})",
        document=document,
    )


async def handle_list_documents(
    params: Dict[str, Any], services: "ClickUpServices"
) -> ToolResponse:
    query = copy_present(
        params,
        (
            ("parentId", "parent_id"),
            ("creator", "creator"),
            ("archived", "archived"),
            ("deleted", "deleted"),
            ("limit", "limit"),
            ("cursor", "cursor"),
        ),
    )
    if params.get("parentType"):
        query["parent_type"] = PARENT_TYPES[params["parentType"]]
    for flag in ("archived", "deleted"):
        if flag in query:
            query[flag] = str(query[flag]).lower()
    data = await services.documents.list_documents(query)
    documents = data["docs"]
    return success_response(
        message=f"Found {len(documents)} documents",
        documents=documents,
        next_cursor=data["next_cursor"],
    )


async def handle_list_document_pages(
    params: Dict[str, Any], services: "ClickUpServices"
) -> ToolResponse:
    pages = await services.documents.list_pages(params["documentId"])
    return success_response(
        message=f"Document {params['documentId']} has {len(pages)} top-level pages",
        document_id=params["documentId"],
        pages=pages,
    )


async def handle_get_document_pages(
    params: Dict[str, Any], services: "ClickUpServices"
) -> ToolResponse:
    pages = await services.documents.get_pages(
        params["documentId"], params["pageIds"], content_format=params.get("contentFormat")
    )
    return success_response(
        message=f"Retrieved {len(pages)} pages",
        document_id=params["documentId"],
        pages=pages,
    )


async def handle_create_document_page(
    params: Dict[str, Any], services: "ClickUpServices"
) -> ToolResponse:
    payload = copy_present(params, _PAGE_FIELDS + (("parentPageId", "parent_page_id"),))
    page = await services.documents.create_page(params["documentId"], payload)
    return success_response(
        message=f"Successfully created page: {page.get('name')} (ID: {page.get('id')})",
        document_id=params["documentId"],
        page=page,
    )


async def handle_update_document_page(
    params: Dict[str, Any], services: "ClickUpServices"
) -> ToolResponse:
    payload = copy_present(params, _PAGE_FIELDS + (("contentEditMode", "content_edit_mode"),))
    page = await services.documents.update_page(params["documentId"], params["pageId"], payload)
    return success_response(
        message=f"Successfully updated page: {params['pageId']}",
        document_id=params["documentId"],
        page_id=params["pageId"],
        page=page,
    )


TOOLS = (
    ToolDefinition(
        name="create_document",
        description=(
            "Create a document in a space (spaceId or spaceName), or under a folder or "
            "list given by parentId and parentType."
        ),
        input_schema=object_schema(
            {
                "name": string_prop("Name of the document"),
                **_PARENT_PROPS,
                "visibility": {
                    "type": "string",
                    "enum": ["PUBLIC", "PRIVATE", "PERSONAL", "HIDDEN"],
                    "description": "Who can see the document",
                },
                "createPage": bool_prop("Create an initial blank page"),
            },
            required=["name"],
        ),
        handler=handle_create_document,
    ),
    ToolDefinition(
        name="get_document",
        description="Get a document's details by id.",
        input_schema=object_schema(dict(DOCUMENT_ID_PROP), required=["documentId"]),
        handler=handle_get_document,
    ),
    ToolDefinition(
        name="list_documents",
        description="List documents in the workspace, optionally filtered by parent.",
        input_schema=object_schema(
            {
                "parentId": string_prop("Only documents under this parent"),
                "parentType": _PARENT_PROPS["parentType"],
                "creator": {"type": "integer", "description": "Only documents by this user id"},
                "archived": bool_prop("Include archived documents"),
                "deleted": bool_prop("Include deleted documents"),
                "limit": {"type": "integer", "minimum": 10, "maximum": 100},
                "cursor": string_prop("Cursor from a previous page of results"),
            }
        ),
        handler=handle_list_documents,
    ),
    ToolDefinition(
        name="list_document_pages",
        description="List the page tree of a document (ids and names).",
        input_schema=object_schema(dict(DOCUMENT_ID_PROP), required=["documentId"]),
        handler=handle_list_document_pages,
    ),
    ToolDefinition(
        name="get_document_pages",
        description="Get the content of one or more document pages.",
        input_schema=object_schema(
            {
                **DOCUMENT_ID_PROP,
                "pageIds": {"type": "array", "items": {"type": "string"}, "minItems": 1},
                "contentFormat": _PAGE_BODY_PROPS["contentFormat"],
            },
            required=["documentId", "pageIds"],
        ),
        handler=handle_get_document_pages,
    ),
    ToolDefinition(
        name="create_document_page",
        description="Add a page to a document, optionally nested under parentPageId.",
        input_schema=object_schema(
            {
                **DOCUMENT_ID_PROP,
                **_PAGE_BODY_PROPS,
                "parentPageId": string_prop("ID of the parent page"),
            },
            required=["documentId", "name"],
        ),
        handler=handle_create_document_page,
    ),
    ToolDefinition(
        name="update_document_page",
        description=(
            "Update a document page. contentEditMode chooses whether content replaces, "
            "or is appended or prepended to, the existing content."
        ),
        input_schema=object_schema(
            {
                **DOCUMENT_ID_PROP,
                "pageId": string_prop("ID of the page"),
                **_PAGE_BODY_PROPS,
                "contentEditMode": {
                    "type": "string",
                    "enum": ["replace", "append", "prepend"],
                    "description": "How content is applied (default replace)",
                },
            },
            required=["documentId", "pageId"],
        ),
        handler=handle_update_document_page,
        update_fields=("name", "subTitle", "content"),
    ),
)
