"""Name-to-resource matching used by name resolution.

Matching is exact after trimming and case folding. A single hit resolves;
zero hits raise ``ResourceNotFoundError``; several raise
``AmbiguousMatchError`` listing the candidate ids so the caller can retry
with an id.
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional

from clickup_mcp.core.errors import AmbiguousMatchError, ResourceNotFoundError


def normalize_name(value: Any) -> str:
    return str(value or "").strip().casefold()


def find_by_name(
    items: Iterable[Mapping[str, Any]],
    name: str,
    *,
    resource_type: str,
    key: str = "name",
    scope: Optional[str] = None,
) -> Dict[str, Any]:
    """Return the single item whose ``key`` matches ``name``.

    Raises:
        ResourceNotFoundError: No item matches
        AmbiguousMatchError: More than one item matches
    """
    wanted = normalize_name(name)
    matches = [dict(item) for item in items if normalize_name(item.get(key)) == wanted]
    return _single(matches, name, resource_type=resource_type, scope=scope)


def find_member(members: Iterable[Mapping[str, Any]], query: str) -> Dict[str, Any]:
    """Match a workspace member by email or username.

    Exact email or username matches win. Failing those, a username that
    contains the query is accepted when it is the only one.
    """
    members = [dict(m) for m in members]
    wanted = normalize_name(query)

    exact = [
        m
        for m in members
        if wanted in (normalize_name(m.get("email")), normalize_name(m.get("username")))
    ]
    if exact:
        return _single(exact, query, resource_type="Member")

    partial = [m for m in members if wanted and wanted in normalize_name(m.get("username"))]
    return _single(partial, query, resource_type="Member")


def _single(
    matches: List[Dict[str, Any]],
    name: str,
    *,
    resource_type: str,
    scope: Optional[str] = None,
) -> Dict[str, Any]:
    if not matches:
        raise ResourceNotFoundError(resource_type, name, scope=scope)
    if len(matches) > 1:
        raise AmbiguousMatchError(resource_type, name, [m.get("id") for m in matches])
    return matches[0]
