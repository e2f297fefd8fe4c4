"""Pydantic models for Todoist REST responses."""

from __future__ import annotations

from pydantic import BaseModel, Field


class TodoistDue(BaseModel):
    """Due date object from the Todoist API."""

    date: str
    is_recurring: bool = False
    string: str = ""
    datetime: str | None = None
    timezone: str | None = None


class TodoistTask(BaseModel):
    """An active Todoist task a focus session can be linked to."""

    id: str
    content: str
    description: str = ""
    project_id: str | None = None
    section_id: str | None = None
    priority: int = Field(default=1, ge=1, le=4)  # 4 = urgent
    due: TodoistDue | None = None
    labels: list[str] = Field(default_factory=list)
    url: str | None = None
