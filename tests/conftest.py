"""
Root pytest configuration and shared fixtures.

Provides an in-memory ClickUp API served through ``httpx.MockTransport`` so
tests run the real client and services, plus helpers for building the
registry and dispatcher on top of it. Every request the fake receives is
recorded, which lets tests assert that validation failures never reach
the backend.
"""

import json
import re
from itertools import count
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx
import pytest

from clickup_mcp.config import ServerConfig
from clickup_mcp.core.dispatcher import ToolDispatcher
from clickup_mcp.services import ClickUpServices, create_clickup_services
from clickup_mcp.tools import build_registry

TEAM_ID = "9000"

Route = Tuple[str, "re.Pattern[str]", Callable[..., httpx.Response]]


def _json(payload: Any, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, json=payload)


def _not_found(what: str) -> httpx.Response:
    return _json({"err": f"{what} not found", "ECODE": "ITEM_013"}, 404)


class FakeClickUp:
    """Minimal stateful stand-in for the ClickUp v2/v3 REST API.

    Seed data:
        Space "Product" (s1): folder "Roadmap" (f1) with list "Backlog" (l1),
        folderless list "Inbox" (l2)
        Space "Marketing" (s2): folderless list "Campaigns" (l3)
        Tasks: "Write spec" (t1) and "Review spec" (t2) in Backlog,
        "Write spec" (t3) in Campaigns
        Members: Ada Lovelace (11), Alan Turing (12), Alan Kay (13)
    """

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self._ids = count(100)
        self._failures: List[Tuple[str, "re.Pattern[str]", int, Dict[str, Any]]] = []
        self.spaces: Dict[str, Dict[str, Any]] = {
            "s1": {"id": "s1", "name": "Product", "multiple_assignees": True},
            "s2": {"id": "s2", "name": "Marketing", "multiple_assignees": False},
        }
        self.folders: Dict[str, Dict[str, Any]] = {
            "f1": {"id": "f1", "name": "Roadmap", "space_id": "s1"},
        }
        self.lists: Dict[str, Dict[str, Any]] = {
            "l1": {"id": "l1", "name": "Backlog", "space_id": "s1", "folder_id": "f1"},
            "l2": {"id": "l2", "name": "Inbox", "space_id": "s1", "folder_id": None},
            "l3": {"id": "l3", "name": "Campaigns", "space_id": "s2", "folder_id": None},
        }
        self.tasks: Dict[str, Dict[str, Any]] = {}
        for task_id, name, list_id in (
            ("t1", "Write spec", "l1"),
            ("t2", "Review spec", "l1"),
            ("t3", "Write spec", "l3"),
        ):
            self.tasks[task_id] = self._task(task_id, list_id, {"name": name})
        self.members: List[Dict[str, Any]] = [
            {"id": 11, "username": "Ada Lovelace", "email": "ada@example.com"},
            {"id": 12, "username": "Alan Turing", "email": "alan@example.com"},
            {"id": 13, "username": "Alan Kay", "email": "kay@example.com"},
        ]
        # Tasks per listing page; None serves everything on page 0.
        self.page_size: Optional[int] = None
        self.tags: Dict[str, List[Dict[str, Any]]] = {"s1": [{"name": "urgent"}]}
        self.comments: Dict[str, List[Dict[str, Any]]] = {}
        self.time_entries: List[Dict[str, Any]] = []
        self.running_entry: Optional[Dict[str, Any]] = None
        self.docs: Dict[str, Dict[str, Any]] = {}
        self.pages: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._routes: List[Route] = self._build_routes()

    # -- recording helpers -------------------------------------------------

    @property
    def calls(self) -> List[Tuple[str, str]]:
        return [(r.method, r.url.path.replace("/api", "", 1)) for r in self.requests]

    def calls_to(self, method: str, path: str) -> int:
        return sum(1 for call in self.calls if call == (method, path))

    def fail(self, method: str, pattern: str, status_code: int, body: Dict[str, Any]) -> None:
        """Make matching requests fail with the given status and body."""
        self._failures.append((method, re.compile(pattern), status_code, body))

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    # -- dispatch ----------------------------------------------------------

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.replace("/api", "", 1)
        for method, pattern, status_code, body in self._failures:
            if method == request.method and pattern.fullmatch(path):
                return _json(body, status_code)
        for method, pattern, handler in self._routes:
            match = pattern.fullmatch(path)
            if method == request.method and match:
                return handler(request, *match.groups())
        return _json({"err": "Route not found", "ECODE": "APP_001"}, 404)

    def _build_routes(self) -> List[Route]:
        table = [
            ("GET", r"/v2/team", self._get_teams),
            ("GET", r"/v2/team/(\w+)/space", self._get_spaces),
            ("POST", r"/v2/team/(\w+)/space", self._create_space),
            ("GET", r"/v2/space/(\w+)", self._get_space),
            ("PUT", r"/v2/space/(\w+)", self._update_space),
            ("DELETE", r"/v2/space/(\w+)", self._delete_space),
            ("GET", r"/v2/space/(\w+)/folder", self._get_folders),
            ("POST", r"/v2/space/(\w+)/folder", self._create_folder),
            ("GET", r"/v2/space/(\w+)/list", self._get_folderless_lists),
            ("POST", r"/v2/space/(\w+)/list", self._create_space_list),
            ("GET", r"/v2/space/(\w+)/tag", self._get_tags),
            ("GET", r"/v2/folder/(\w+)", self._get_folder),
            ("PUT", r"/v2/folder/(\w+)", self._update_folder),
            ("DELETE", r"/v2/folder/(\w+)", self._delete_folder),
            ("POST", r"/v2/folder/(\w+)/list", self._create_folder_list),
            ("GET", r"/v2/list/(\w+)", self._get_list),
            ("PUT", r"/v2/list/(\w+)", self._update_list),
            ("DELETE", r"/v2/list/(\w+)", self._delete_list),
            ("GET", r"/v2/list/(\w+)/task", self._get_list_tasks),
            ("POST", r"/v2/list/(\w+)/task", self._create_task),
            ("GET", r"/v2/team/(\w+)/task", self._get_team_tasks),
            ("GET", r"/v2/task/([\w-]+)", self._get_task),
            ("PUT", r"/v2/task/([\w-]+)", self._update_task),
            ("DELETE", r"/v2/task/([\w-]+)", self._delete_task),
            ("GET", r"/v2/task/([\w-]+)/comment", self._get_comments),
            ("POST", r"/v2/task/([\w-]+)/comment", self._create_comment),
            ("POST", r"/v2/task/([\w-]+)/attachment", self._create_attachment),
            ("POST", r"/v2/task/([\w-]+)/tag/([^/]+)", self._add_tag),
            ("DELETE", r"/v2/task/([\w-]+)/tag/([^/]+)", self._remove_tag),
            ("GET", r"/v2/team/(\w+)/time_entries", self._get_time_entries),
            ("POST", r"/v2/team/(\w+)/time_entries", self._add_time_entry),
            ("GET", r"/v2/team/(\w+)/time_entries/current", self._get_current_entry),
            ("POST", r"/v2/team/(\w+)/time_entries/start", self._start_timer),
            ("POST", r"/v2/team/(\w+)/time_entries/stop", self._stop_timer),
            ("DELETE", r"/v2/team/(\w+)/time_entries/(\w+)", self._delete_time_entry),
            ("GET", r"/files/([\w.-]+)", self._download),
            ("GET", r"/v3/workspaces/(\w+)/docs", self._list_docs),
            ("POST", r"/v3/workspaces/(\w+)/docs", self._create_doc),
            ("GET", r"/v3/workspaces/(\w+)/docs/(\w+)", self._get_doc),
            ("GET", r"/v3/workspaces/(\w+)/docs/(\w+)/pageListing", self._list_pages),
            ("POST", r"/v3/workspaces/(\w+)/docs/(\w+)/pages", self._create_page),
            ("GET", r"/v3/workspaces/(\w+)/docs/(\w+)/pages/(\w+)", self._get_page),
            ("PUT", r"/v3/workspaces/(\w+)/docs/(\w+)/pages/(\w+)", self._update_page),
        ]
        return [(method, re.compile(pattern), handler) for method, pattern, handler in table]

    # -- helpers -----------------------------------------------------------

    def _new_id(self, prefix: str) -> str:
        return f"{prefix}{next(self._ids)}"

    @staticmethod
    def _body(request: httpx.Request) -> Dict[str, Any]:
        if not request.content or "json" not in request.headers.get("content-type", ""):
            return {}
        return json.loads(request.content)

    def _task(self, task_id: str, list_id: str, body: Dict[str, Any]) -> Dict[str, Any]:
        task = {k: v for k, v in body.items() if k not in ("status", "priority", "assignees", "tags")}
        task.update(
            {
                "id": task_id,
                "list": {"id": list_id, "name": self.lists[list_id]["name"]},
                "url": f"https://app.clickup.com/t/{task_id}",
                "status": {"status": body.get("status", "to do")},
                "priority": {"id": str(body["priority"]), "priority": "p"}
                if body.get("priority")
                else None,
                "assignees": [{"id": a} for a in body.get("assignees", [])],
                "tags": [{"name": t} for t in body.get("tags", [])],
            }
        )
        return task

    def _list_view(self, lst: Dict[str, Any]) -> Dict[str, Any]:
        return {"id": lst["id"], "name": lst["name"], **{k: v for k, v in lst.items() if k not in ("space_id", "folder_id")}}

    # -- team / members ----------------------------------------------------

    def _get_teams(self, request: httpx.Request) -> httpx.Response:
        return _json(
            {
                "teams": [
                    {"id": TEAM_ID, "name": "Acme", "members": [{"user": m} for m in self.members]}
                ]
            }
        )

    # -- spaces ------------------------------------------------------------

    def _get_spaces(self, request: httpx.Request, team_id: str) -> httpx.Response:
        return _json({"spaces": list(self.spaces.values())})

    def _create_space(self, request: httpx.Request, team_id: str) -> httpx.Response:
        body = self._body(request)
        space = {**body, "id": self._new_id("s")}
        self.spaces[space["id"]] = space
        return _json(space)

    def _get_space(self, request: httpx.Request, space_id: str) -> httpx.Response:
        if space_id not in self.spaces:
            return _not_found("Space")
        return _json(self.spaces[space_id])

    def _update_space(self, request: httpx.Request, space_id: str) -> httpx.Response:
        if space_id not in self.spaces:
            return _not_found("Space")
        self.spaces[space_id].update(self._body(request))
        return _json(self.spaces[space_id])

    def _delete_space(self, request: httpx.Request, space_id: str) -> httpx.Response:
        if self.spaces.pop(space_id, None) is None:
            return _not_found("Space")
        return _json({})

    # -- folders -----------------------------------------------------------

    def _folder_view(self, folder: Dict[str, Any]) -> Dict[str, Any]:
        lists = [self._list_view(l) for l in self.lists.values() if l["folder_id"] == folder["id"]]
        return {"id": folder["id"], "name": folder["name"], "lists": lists}

    def _get_folders(self, request: httpx.Request, space_id: str) -> httpx.Response:
        folders = [f for f in self.folders.values() if f["space_id"] == space_id]
        return _json({"folders": [self._folder_view(f) for f in folders]})

    def _create_folder(self, request: httpx.Request, space_id: str) -> httpx.Response:
        if space_id not in self.spaces:
            return _not_found("Space")
        folder = {**self._body(request), "id": self._new_id("f"), "space_id": space_id}
        self.folders[folder["id"]] = folder
        return _json(self._folder_view(folder))

    def _get_folder(self, request: httpx.Request, folder_id: str) -> httpx.Response:
        if folder_id not in self.folders:
            return _not_found("Folder")
        return _json(self._folder_view(self.folders[folder_id]))

    def _update_folder(self, request: httpx.Request, folder_id: str) -> httpx.Response:
        if folder_id not in self.folders:
            return _not_found("Folder")
        self.folders[folder_id].update(self._body(request))
        return _json(self._folder_view(self.folders[folder_id]))

    def _delete_folder(self, request: httpx.Request, folder_id: str) -> httpx.Response:
        if self.folders.pop(folder_id, None) is None:
            return _not_found("Folder")
        return _json({})

    # -- lists -------------------------------------------------------------

    def _get_folderless_lists(self, request: httpx.Request, space_id: str) -> httpx.Response:
        lists = [
            self._list_view(l)
            for l in self.lists.values()
            if l["space_id"] == space_id and l["folder_id"] is None
        ]
        return _json({"lists": lists})

    def _add_list(self, body: Dict[str, Any], space_id: str, folder_id: Optional[str]) -> httpx.Response:
        lst = {**body, "id": self._new_id("l"), "space_id": space_id, "folder_id": folder_id}
        self.lists[lst["id"]] = lst
        return _json(self._list_view(lst))

    def _create_space_list(self, request: httpx.Request, space_id: str) -> httpx.Response:
        if space_id not in self.spaces:
            return _not_found("Space")
        return self._add_list(self._body(request), space_id, None)

    def _create_folder_list(self, request: httpx.Request, folder_id: str) -> httpx.Response:
        if folder_id not in self.folders:
            return _not_found("Folder")
        return self._add_list(self._body(request), self.folders[folder_id]["space_id"], folder_id)

    def _get_list(self, request: httpx.Request, list_id: str) -> httpx.Response:
        if list_id not in self.lists:
            return _not_found("List")
        return _json(self._list_view(self.lists[list_id]))

    def _update_list(self, request: httpx.Request, list_id: str) -> httpx.Response:
        if list_id not in self.lists:
            return _not_found("List")
        self.lists[list_id].update(self._body(request))
        return _json(self._list_view(self.lists[list_id]))

    def _delete_list(self, request: httpx.Request, list_id: str) -> httpx.Response:
        if self.lists.pop(list_id, None) is None:
            return _not_found("List")
        return _json({})

    def _get_tags(self, request: httpx.Request, space_id: str) -> httpx.Response:
        return _json({"tags": self.tags.get(space_id, [])})

    # -- tasks -------------------------------------------------------------

    def _get_list_tasks(self, request: httpx.Request, list_id: str) -> httpx.Response:
        if list_id not in self.lists:
            return _not_found("List")
        tasks = [t for t in self.tasks.values() if t["list"]["id"] == list_id]
        return self._task_page(request, tasks)

    def _create_task(self, request: httpx.Request, list_id: str) -> httpx.Response:
        if list_id not in self.lists:
            return _not_found("List")
        body = self._body(request)
        if not body.get("name"):
            return _json({"err": "Task name invalid", "ECODE": "INPUT_005"}, 400)
        task = self._task(self._new_id("t"), list_id, body)
        self.tasks[task["id"]] = task
        return _json(task)

    def _get_team_tasks(self, request: httpx.Request, team_id: str) -> httpx.Response:
        list_ids = request.url.params.get_list("list_ids[]")
        tasks = [t for t in self.tasks.values() if not list_ids or t["list"]["id"] in list_ids]
        return self._task_page(request, tasks)

    def _task_page(self, request: httpx.Request, tasks: List[Dict[str, Any]]) -> httpx.Response:
        if self.page_size is None:
            return _json({"tasks": tasks, "last_page": True})
        start = int(request.url.params.get("page", 0)) * self.page_size
        end = start + self.page_size
        return _json({"tasks": tasks[start:end], "last_page": end >= len(tasks)})

    def _get_task(self, request: httpx.Request, task_id: str) -> httpx.Response:
        if task_id not in self.tasks:
            return _not_found("Task")
        return _json(self.tasks[task_id])

    def _update_task(self, request: httpx.Request, task_id: str) -> httpx.Response:
        if task_id not in self.tasks:
            return _not_found("Task")
        body = self._body(request)
        task = self.tasks[task_id]
        for key, value in body.items():
            if key == "status":
                task["status"] = {"status": value}
            elif key == "priority":
                task["priority"] = {"id": str(value), "priority": "p"} if value else None
            else:
                task[key] = value
        return _json(task)

    def _delete_task(self, request: httpx.Request, task_id: str) -> httpx.Response:
        if self.tasks.pop(task_id, None) is None:
            return _not_found("Task")
        return httpx.Response(204)

    def _get_comments(self, request: httpx.Request, task_id: str) -> httpx.Response:
        return _json({"comments": self.comments.get(task_id, [])})

    def _create_comment(self, request: httpx.Request, task_id: str) -> httpx.Response:
        if task_id not in self.tasks:
            return _not_found("Task")
        comment = {"id": next(self._ids), **self._body(request)}
        self.comments.setdefault(task_id, []).append(comment)
        return _json({"id": comment["id"], "date": 1700000000000})

    def _create_attachment(self, request: httpx.Request, task_id: str) -> httpx.Response:
        if task_id not in self.tasks:
            return _not_found("Task")
        return _json(
            {
                "id": self._new_id("a"),
                "size": len(request.content),
                "multipart": "multipart/form-data" in request.headers.get("content-type", ""),
            }
        )

    def _add_tag(self, request: httpx.Request, task_id: str, tag: str) -> httpx.Response:
        if task_id not in self.tasks:
            return _not_found("Task")
        self.tasks[task_id]["tags"].append({"name": tag})
        return _json({})

    def _remove_tag(self, request: httpx.Request, task_id: str, tag: str) -> httpx.Response:
        if task_id not in self.tasks:
            return _not_found("Task")
        self.tasks[task_id]["tags"] = [t for t in self.tasks[task_id]["tags"] if t["name"] != tag]
        return _json({})

    # -- time tracking -----------------------------------------------------

    def _get_time_entries(self, request: httpx.Request, team_id: str) -> httpx.Response:
        task_id = request.url.params.get("task_id")
        entries = [e for e in self.time_entries if e["task"]["id"] == task_id]
        return _json({"data": entries})

    def _add_time_entry(self, request: httpx.Request, team_id: str) -> httpx.Response:
        body = self._body(request)
        entry = {
            "id": self._new_id("e"),
            "task": {"id": body["tid"]},
            "start": body["start"],
            "duration": body["duration"],
            "description": body.get("description", ""),
        }
        self.time_entries.append(entry)
        return _json({"data": entry})

    def _get_current_entry(self, request: httpx.Request, team_id: str) -> httpx.Response:
        return _json({"data": self.running_entry})

    def _start_timer(self, request: httpx.Request, team_id: str) -> httpx.Response:
        body = self._body(request)
        self.running_entry = {
            "id": self._new_id("e"),
            "task": {"id": body["tid"]},
            "start": 1700000000000,
            "duration": -1,
        }
        return _json({"data": self.running_entry})

    def _stop_timer(self, request: httpx.Request, team_id: str) -> httpx.Response:
        entry, self.running_entry = self.running_entry, None
        if entry is None:
            return _json({"err": "No timer running", "ECODE": "TIMER_001"}, 400)
        entry = {**entry, "duration": 60000}
        self.time_entries.append(entry)
        return _json({"data": entry})

    def _delete_time_entry(self, request: httpx.Request, team_id: str, entry_id: str) -> httpx.Response:
        before = len(self.time_entries)
        self.time_entries = [e for e in self.time_entries if e["id"] != entry_id]
        if len(self.time_entries) == before:
            return _not_found("Time entry")
        return _json({"data": [{"id": entry_id}]})

    def _download(self, request: httpx.Request, filename: str) -> httpx.Response:
        return httpx.Response(200, content=b"%PDF-1.4 fake")

    # -- documents (v3) ----------------------------------------------------

    def _list_docs(self, request: httpx.Request, team_id: str) -> httpx.Response:
        return _json({"docs": list(self.docs.values())})

    def _create_doc(self, request: httpx.Request, team_id: str) -> httpx.Response:
        doc = {**self._body(request), "id": self._new_id("d")}
        self.docs[doc["id"]] = doc
        self.pages[doc["id"]] = {}
        return _json(doc)

    def _get_doc(self, request: httpx.Request, team_id: str, doc_id: str) -> httpx.Response:
        if doc_id not in self.docs:
            return _not_found("Doc")
        return _json(self.docs[doc_id])

    def _list_pages(self, request: httpx.Request, team_id: str, doc_id: str) -> httpx.Response:
        pages = self.pages.get(doc_id, {}).values()
        return _json([{"id": p["id"], "name": p.get("name")} for p in pages])

    def _create_page(self, request: httpx.Request, team_id: str, doc_id: str) -> httpx.Response:
        if doc_id not in self.docs:
            return _not_found("Doc")
        page = {**self._body(request), "id": self._new_id("p"), "doc_id": doc_id}
        self.pages[doc_id][page["id"]] = page
        return _json(page)

    def _get_page(self, request: httpx.Request, team_id: str, doc_id: str, page_id: str) -> httpx.Response:
        page = self.pages.get(doc_id, {}).get(page_id)
        if page is None:
            return _not_found("Page")
        return _json(page)

    def _update_page(self, request: httpx.Request, team_id: str, doc_id: str, page_id: str) -> httpx.Response:
        page = self.pages.get(doc_id, {}).get(page_id)
        if page is None:
            return _not_found("Page")
        page.update(self._body(request))
        return httpx.Response(200)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def fake_clickup() -> FakeClickUp:
    return FakeClickUp()


@pytest.fixture
def config() -> ServerConfig:
    return ServerConfig(api_key="pk_test_token", team_id=TEAM_ID, document_support=True)


@pytest.fixture
def services(config: ServerConfig, fake_clickup: FakeClickUp) -> ClickUpServices:
    return create_clickup_services(config, transport=fake_clickup.transport())


@pytest.fixture
def dispatcher(config: ServerConfig, services: ClickUpServices) -> ToolDispatcher:
    return ToolDispatcher(build_registry(config), services)


@pytest.fixture
def make_dispatcher(services: ClickUpServices) -> Callable[..., ToolDispatcher]:
    """Build a dispatcher over the fake API with config overrides."""

    def _make(**overrides: Any) -> ToolDispatcher:
        cfg = ServerConfig(api_key="pk_test_token", team_id=TEAM_ID, **overrides)
        return ToolDispatcher(build_registry(cfg), services)

    return _make
