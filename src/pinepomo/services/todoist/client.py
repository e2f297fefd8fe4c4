"""Todoist REST client.

Defines a Protocol for testability and a concrete implementation backed by
httpx.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import httpx

from pinepomo.utils.logger import get_logger

from .models import TodoistTask

logger = get_logger(__name__)

_BASE_URL = "https://api.todoist.com/rest/v2"
_DEFAULT_TIMEOUT = 30.0
DEFAULT_FILTER = "(today | overdue)"


@runtime_checkable
class TodoistClientProtocol(Protocol):
    """What the rest of Pinepomo needs from Todoist."""

    async def get_tasks(self, filter: str = DEFAULT_FILTER) -> list[TodoistTask]:
        """Return active tasks matching a Todoist filter."""
        ...

    async def post_comment(self, task_id: str, content: str) -> bool:
        """Add a comment to a task; return whether it was accepted."""
        ...


def sort_tasks(tasks: list[TodoistTask]) -> list[TodoistTask]:
    """Highest priority first, then earliest due date; undated tasks last."""
    return sorted(
        tasks,
        key=lambda t: (-t.priority, t.due is None, t.due.date if t.due else ""),
    )


class TodoistClient:
    """Concrete Todoist client using httpx.

    Args:
        api_key: Todoist personal API token.
        base_url: Override API base URL (useful for testing).
        timeout: HTTP request timeout in seconds.
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = _BASE_URL,
        timeout: float = _DEFAULT_TIMEOUT,
    ) -> None:
        self._headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    async def get_tasks(self, filter: str = DEFAULT_FILTER) -> list[TodoistTask]:
        """Return active tasks for *filter*, most urgent first."""
        data = await self._request("GET", "/tasks", params={"filter": filter})
        items = data if isinstance(data, list) else data.get("results", [])
        return sort_tasks([TodoistTask.model_validate(item) for item in items])

    async def validate_key(self) -> bool:
        """Return whether the API key is accepted by Todoist."""
        try:
            await self._request("GET", "/projects")
        except (ValueError, PermissionError, httpx.HTTPError):
            return False
        return True

    async def post_comment(self, task_id: str, content: str) -> bool:
        """Post a comment on *task_id*.

        Failures are logged and reported as ``False``; completion comments are
        best-effort and must never interrupt the timer.
        """
        try:
            await self._request(
                "POST", "/comments", json={"task_id": task_id, "content": content}
            )
        except (ValueError, PermissionError, httpx.HTTPError) as e:
            logger.warning("Could not post Todoist comment on %s: %s", task_id, e)
            return False
        return True

    async def _request(
        self,
        method: str,
        path: str,
        params: dict | None = None,
        json: dict | None = None,
    ) -> list | dict:
        """Execute a request, raising descriptive errors on failure."""
        url = f"{self._base_url}{path}"
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            response = await client.request(
                method, url, headers=self._headers, params=params, json=json
            )

        if response.status_code == 401:
            raise ValueError("Invalid Todoist API key - check your credentials.")
        if response.status_code == 403:
            raise PermissionError("Insufficient permissions for the requested resource.")
        response.raise_for_status()
        if not response.content:
            return {}
        return response.json()
