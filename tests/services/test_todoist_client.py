"""Unit tests for TodoistClient.

All HTTP calls are mocked via unittest.mock so tests are fast,
deterministic, and offline.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from pinepomo.services.todoist.client import (
    DEFAULT_FILTER,
    TodoistClient,
    TodoistClientProtocol,
    sort_tasks,
)
from pinepomo.services.todoist.models import TodoistTask


def _make_client() -> TodoistClient:
    return TodoistClient(api_key="test-key")


def _make_response(data=None, *, status_code: int = 200):
    resp = MagicMock()
    resp.status_code = status_code
    resp.content = b"{}" if data is not None else b""
    resp.json.return_value = data
    resp.raise_for_status = MagicMock()
    return resp


def _patched_async_client(response):
    """Patch httpx.AsyncClient so request() returns *response*."""
    instance = MagicMock()
    instance.request = AsyncMock(return_value=response)
    instance.__aenter__ = AsyncMock(return_value=instance)
    instance.__aexit__ = AsyncMock(return_value=False)
    return patch("pinepomo.services.todoist.client.httpx.AsyncClient", return_value=instance), instance


# ---------------------------------------------------------------------------
# Protocol conformance
# ---------------------------------------------------------------------------


class TestTodoistClientProtocol:
    def test_concrete_client_satisfies_protocol(self):
        assert isinstance(_make_client(), TodoistClientProtocol)


# ---------------------------------------------------------------------------
# get_tasks
# ---------------------------------------------------------------------------


class TestGetTasks:
    @pytest.mark.asyncio
    async def test_sorted_by_priority_then_due(self):
        raw = [
            {"id": "1", "content": "low", "priority": 1},
            {"id": "2", "content": "urgent later", "priority": 4, "due": {"date": "2026-03-05"}},
            {"id": "3", "content": "urgent sooner", "priority": 4, "due": {"date": "2026-03-01"}},
            {"id": "4", "content": "urgent undated", "priority": 4},
        ]
        client = _make_client()
        with patch.object(client, "_request", new=AsyncMock(return_value=raw)) as request:
            tasks = await client.get_tasks()

        request.assert_awaited_once_with("GET", "/tasks", params={"filter": DEFAULT_FILTER})
        assert [t.id for t in tasks] == ["3", "2", "4", "1"]
        assert all(isinstance(t, TodoistTask) for t in tasks)

    @pytest.mark.asyncio
    async def test_handles_paginated_response_format(self):
        client = _make_client()
        data = {"results": [{"id": "1", "content": "x"}]}
        with patch.object(client, "_request", new=AsyncMock(return_value=data)):
            tasks = await client.get_tasks("today")
        assert [t.content for t in tasks] == ["x"]


def test_sort_tasks_empty():
    assert sort_tasks([]) == []


# ---------------------------------------------------------------------------
# post_comment / validate_key
# ---------------------------------------------------------------------------


class TestPostComment:
    @pytest.mark.asyncio
    async def test_posts_comment(self):
        client = _make_client()
        with patch.object(client, "_request", new=AsyncMock(return_value={"id": "c1"})) as request:
            ok = await client.post_comment("task-1", "done")

        assert ok is True
        request.assert_awaited_once_with(
            "POST", "/comments", json={"task_id": "task-1", "content": "done"}
        )

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [ValueError("bad key"), PermissionError("nope"), httpx.ConnectError("offline")],
    )
    async def test_failure_returns_false(self, error):
        client = _make_client()
        with patch.object(client, "_request", new=AsyncMock(side_effect=error)):
            assert await client.post_comment("task-1", "done") is False


class TestValidateKey:
    @pytest.mark.asyncio
    async def test_valid(self):
        client = _make_client()
        with patch.object(client, "_request", new=AsyncMock(return_value=[])):
            assert await client.validate_key() is True

    @pytest.mark.asyncio
    async def test_invalid(self):
        client = _make_client()
        with patch.object(client, "_request", new=AsyncMock(side_effect=ValueError("401"))):
            assert await client.validate_key() is False


# ---------------------------------------------------------------------------
# _request
# ---------------------------------------------------------------------------


class TestRequest:
    @pytest.mark.asyncio
    async def test_sends_auth_header(self):
        patcher, instance = _patched_async_client(_make_response([]))
        with patcher:
            await _make_client()._request("GET", "/tasks", params={"filter": "today"})

        _, kwargs = instance.request.call_args
        assert kwargs["headers"]["Authorization"] == "Bearer test-key"
        assert instance.request.call_args.args == ("GET", "https://api.todoist.com/rest/v2/tasks")

    @pytest.mark.asyncio
    async def test_401_raises_value_error(self):
        patcher, _ = _patched_async_client(_make_response({}, status_code=401))
        with patcher, pytest.raises(ValueError, match="Invalid Todoist API key"):
            await _make_client()._request("GET", "/tasks")

    @pytest.mark.asyncio
    async def test_403_raises_permission_error(self):
        patcher, _ = _patched_async_client(_make_response({}, status_code=403))
        with patcher, pytest.raises(PermissionError):
            await _make_client()._request("GET", "/tasks")

    @pytest.mark.asyncio
    async def test_empty_body(self):
        patcher, _ = _patched_async_client(_make_response(None, status_code=204))
        with patcher:
            assert await _make_client()._request("POST", "/comments") == {}
