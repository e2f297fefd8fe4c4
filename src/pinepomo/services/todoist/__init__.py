"""Todoist integration: task lookup and completion comments."""

from .client import DEFAULT_FILTER, TodoistClient, TodoistClientProtocol, sort_tasks
from .completion import TodoistCompletionReporter, completion_comment
from .models import TodoistDue, TodoistTask

__all__ = [
    "DEFAULT_FILTER",
    "TodoistClient",
    "TodoistClientProtocol",
    "TodoistCompletionReporter",
    "TodoistDue",
    "TodoistTask",
    "completion_comment",
    "sort_tasks",
]
