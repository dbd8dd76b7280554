"""Task tools against the in-memory ClickUp API."""

import base64
import json

import pytest


def _sent_json(fake, method, path):
    for request in fake.requests:
        if request.method == method and request.url.path == f"/api{path}":
            return json.loads(request.content)
    raise AssertionError(f"no {method} {path} request")


class TestCreateTask:
    @pytest.mark.asyncio
    async def test_create_with_conversions(self, dispatcher, fake_clickup):
        response = await dispatcher.call_tool(
            "create_task",
            {
                "name": "Ship it",
                "listName": "Inbox",
                "dueDate": "2024-05-01",
                "timeEstimate": "1h 30m",
                "priority": 2,
                "assignees": ["ada@example.com", 12],
            },
        )
        assert response.success is True
        assert response.data["task"]["list"]["id"] == "l2"
        body = _sent_json(fake_clickup, "POST", "/v2/list/l2/task")
        assert body == {
            "name": "Ship it",
            "priority": 2,
            "due_date": 1714521600000,
            "time_estimate": 5_400_000,
            "assignees": [11, 12],
        }

    @pytest.mark.asyncio
    async def test_bad_duration_makes_no_requests(self, dispatcher, fake_clickup):
        response = await dispatcher.call_tool(
            "create_task", {"name": "x", "listName": "Inbox", "timeEstimate": "a while"}
        )
        assert response.data["error_class"] == "invalid_params"
        assert fake_clickup.requests == []

    @pytest.mark.asyncio
    async def test_unknown_assignee(self, dispatcher, fake_clickup):
        response = await dispatcher.call_tool(
            "create_task", {"name": "x", "listId": "l1", "assignees": ["grace"]}
        )
        assert response.data["error_code"] == "NOT_FOUND"
        assert fake_clickup.calls_to("POST", "/v2/list/l1/task") == 0

    @pytest.mark.asyncio
    async def test_list_name_not_found(self, dispatcher):
        response = await dispatcher.call_tool("create_task", {"name": "x", "listName": "Nope"})
        assert response.error.endswith("List with name 'Nope' not found")


class TestReadTasks:
    @pytest.mark.asyncio
    async def test_get_by_id_makes_one_request(self, dispatcher, fake_clickup):
        response = await dispatcher.call_tool("get_task", {"taskId": "t2", "taskName": "whatever"})
        assert response.data["task"]["name"] == "Review spec"
        assert fake_clickup.calls == [("GET", "/v2/task/t2")]

    @pytest.mark.asyncio
    async def test_custom_task_id(self, dispatcher, fake_clickup):
        fake_clickup.tasks["DEV-12"] = fake_clickup._task("DEV-12", "l1", {"name": "Custom"})
        response = await dispatcher.call_tool("get_task", {"taskId": "DEV-12"})
        assert response.success is True
        params = fake_clickup.requests[0].url.params
        assert params["custom_task_ids"] == "true"
        assert params["team_id"] == "9000"

    @pytest.mark.asyncio
    async def test_ambiguous_task_name_across_workspace(self, dispatcher):
        response = await dispatcher.call_tool("get_task", {"taskName": "write spec"})
        assert response.data["error_code"] == "AMBIGUOUS_MATCH"
        assert response.data["details"]["candidates"] == ["t1", "t3"]

    @pytest.mark.asyncio
    async def test_task_name_scoped_by_list(self, dispatcher):
        response = await dispatcher.call_tool(
            "get_task", {"taskName": "Write spec", "listName": "Campaigns"}
        )
        assert response.data["task"]["id"] == "t3"

    @pytest.mark.asyncio
    async def test_task_name_found_on_a_later_page(self, dispatcher, fake_clickup):
        fake_clickup.page_size = 1
        response = await dispatcher.call_tool(
            "get_task", {"taskName": "Review spec", "listName": "Backlog"}
        )
        assert response.data["task"]["id"] == "t2"
        assert fake_clickup.calls_to("GET", "/v2/list/l1/task") == 2

    @pytest.mark.asyncio
    async def test_ambiguity_detected_across_pages(self, dispatcher, fake_clickup):
        fake_clickup.page_size = 1
        response = await dispatcher.call_tool("get_task", {"taskName": "Write spec"})
        assert response.data["error_code"] == "AMBIGUOUS_MATCH"
        assert response.data["details"]["candidates"] == ["t1", "t3"]
        pages = [r.url.params["page"] for r in fake_clickup.requests]
        assert pages == ["0", "1", "2"]

    @pytest.mark.asyncio
    async def test_workspace_tasks_filters(self, dispatcher, fake_clickup):
        response = await dispatcher.call_tool(
            "get_workspace_tasks",
            {
                "listIds": ["l1"],
                "statuses": ["to do", "in progress"],
                "dueDateLessThan": "2024-05-01",
                "includeClosed": True,
                "assignees": ["Ada Lovelace"],
                "detailLevel": "summary",
            },
        )
        assert response.data["count"] == 2
        assert set(response.data["tasks"][0]) == {"id", "name", "url", "status", "list"}
        params = fake_clickup.requests[-1].url.params
        assert params.get_list("statuses[]") == ["to do", "in progress"]
        assert params.get_list("list_ids[]") == ["l1"]
        assert params["due_date_lt"] == "1714521600000"
        assert params["include_closed"] == "true"
        assert params.get_list("assignees[]") == ["11"]

    @pytest.mark.asyncio
    async def test_workspace_tasks_no_filters(self, dispatcher, fake_clickup):
        response = await dispatcher.call_tool("get_workspace_tasks", {})
        assert response.data["count"] == 3
        assert response.data["tasks"][0]["list"]["id"] == "l1"
        assert dict(fake_clickup.requests[0].url.params) == {}


class TestUpdateTask:
    @pytest.mark.asyncio
    async def test_update_sends_only_supplied_fields(self, dispatcher, fake_clickup):
        response = await dispatcher.call_tool(
            "update_task", {"taskId": "t1", "status": "in progress", "dueDate": None}
        )
        assert response.success is True
        assert _sent_json(fake_clickup, "PUT", "/v2/task/t1") == {
            "status": "in progress",
            "due_date": None,
        }
        assert fake_clickup.tasks["t1"]["status"] == {"status": "in progress"}

    @pytest.mark.asyncio
    async def test_null_priority_is_an_update(self, dispatcher, fake_clickup):
        response = await dispatcher.call_tool("update_task", {"taskId": "t1", "priority": None})
        assert response.success is True
        assert _sent_json(fake_clickup, "PUT", "/v2/task/t1") == {"priority": None}

    @pytest.mark.asyncio
    async def test_blank_name_is_not_an_update(self, dispatcher, fake_clickup):
        response = await dispatcher.call_tool("update_task", {"taskId": "t1", "name": "  "})
        assert response.data["error_code"] == "NO_UPDATE_DATA"
        assert fake_clickup.requests == []


class TestMoveDuplicateDelete:
    @pytest.mark.asyncio
    async def test_move_recreates_and_deletes(self, dispatcher, fake_clickup):
        response = await dispatcher.call_tool(
            "move_task", {"taskId": "t2", "targetListName": "Campaigns"}
        )
        assert response.success is True
        new_task = response.data["task"]
        assert response.data["previous_task_id"] == "t2"
        assert new_task["id"] != "t2"
        assert new_task["list"]["id"] == "l3"
        assert new_task["name"] == "Review spec"
        assert "t2" not in fake_clickup.tasks

    @pytest.mark.asyncio
    async def test_move_needs_target(self, dispatcher, fake_clickup):
        response = await dispatcher.call_tool("move_task", {"taskId": "t2"})
        assert "Either targetListId or targetListName is required" in response.error
        assert fake_clickup.requests == []

    @pytest.mark.asyncio
    async def test_duplicate_into_same_list(self, dispatcher, fake_clickup):
        response = await dispatcher.call_tool("duplicate_task", {"taskId": "t1", "newName": "Copy"})
        assert response.data["task"]["name"] == "Copy"
        assert response.data["task"]["list"]["id"] == "l1"
        assert response.data["source_task_id"] == "t1"
        assert "t1" in fake_clickup.tasks

    @pytest.mark.asyncio
    async def test_delete(self, dispatcher, fake_clickup):
        response = await dispatcher.call_tool("delete_task", {"taskId": "t3"})
        assert response.data == {"message": "Successfully deleted task: t3", "task_id": "t3"}
        assert "t3" not in fake_clickup.tasks

    @pytest.mark.asyncio
    async def test_delete_missing_task(self, dispatcher):
        response = await dispatcher.call_tool("delete_task", {"taskId": "zzz"})
        assert response.data["error_code"] == "SERVICE_ERROR"
        assert response.data["details"]["status_code"] == 404


class TestComments:
    @pytest.mark.asyncio
    async def test_create_then_list(self, dispatcher, fake_clickup):
        created = await dispatcher.call_tool(
            "create_task_comment", {"taskId": "t1", "commentText": "Looks good", "notifyAll": False}
        )
        assert created.success is True
        assert _sent_json(fake_clickup, "POST", "/v2/task/t1/comment") == {
            "comment_text": "Looks good",
            "notify_all": False,
        }
        listed = await dispatcher.call_tool("get_task_comments", {"taskId": "t1"})
        assert len(listed.data["comments"]) == 1

    @pytest.mark.asyncio
    async def test_comment_paging_parameters(self, dispatcher, fake_clickup):
        await dispatcher.call_tool(
            "get_task_comments", {"taskId": "t1", "start": "2024-05-01", "startId": "c9"}
        )
        params = fake_clickup.requests[0].url.params
        assert params["start"] == "1714521600000"
        assert params["start_id"] == "c9"

    @pytest.mark.asyncio
    async def test_comment_text_required(self, dispatcher, fake_clickup):
        response = await dispatcher.call_tool("create_task_comment", {"taskId": "t1"})
        assert response.data["error_code"] == "MISSING_REQUIRED"
        assert fake_clickup.requests == []


class TestAttachments:
    @pytest.mark.asyncio
    async def test_base64_upload(self, dispatcher, fake_clickup):
        data = base64.b64encode(b"hello world").decode()
        response = await dispatcher.call_tool(
            "attach_task_file", {"taskId": "t1", "file_data": data, "file_name": "hello.txt"}
        )
        assert response.success is True
        assert response.data["attachment"]["multipart"] is True
        assert b"hello world" in fake_clickup.requests[0].content

    @pytest.mark.asyncio
    async def test_data_url_upload(self, dispatcher):
        data = "data:text/plain;base64," + base64.b64encode(b"hi").decode()
        response = await dispatcher.call_tool(
            "attach_task_file", {"taskId": "t1", "file_data": data, "file_name": "hi.txt"}
        )
        assert response.success is True

    @pytest.mark.asyncio
    async def test_url_upload_uses_remote_name(self, dispatcher, fake_clickup):
        response = await dispatcher.call_tool(
            "attach_task_file",
            {"taskId": "t1", "file_url": "https://files.example.com/files/report.pdf"},
        )
        assert response.data["message"] == "Successfully attached report.pdf to task t1"
        assert fake_clickup.calls[0] == ("GET", "/files/report.pdf")

    @pytest.mark.asyncio
    async def test_file_data_needs_name(self, dispatcher, fake_clickup):
        response = await dispatcher.call_tool(
            "attach_task_file", {"taskId": "t1", "file_data": "aGk="}
        )
        assert response.data["error_class"] == "invalid_params"
        assert fake_clickup.requests == []

    @pytest.mark.asyncio
    async def test_invalid_base64(self, dispatcher, fake_clickup):
        response = await dispatcher.call_tool(
            "attach_task_file", {"taskId": "t1", "file_data": "not base64!", "file_name": "x"}
        )
        assert "file_data is not valid base64" in response.error
        assert fake_clickup.requests == []

    @pytest.mark.asyncio
    async def test_file_source_required(self, dispatcher, fake_clickup):
        response = await dispatcher.call_tool("attach_task_file", {"taskId": "t1"})
        assert "Either file_data or file_url is required" in response.error
