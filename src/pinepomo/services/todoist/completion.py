"""Posts a Todoist comment when a linked focus session completes."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine
from typing import Any

from pinepomo.events.emitter import TimerEventEmitter
from pinepomo.models.timer import SessionKind, TimerEvent, TimerEventType

from .client import TodoistClientProtocol

COMMENT_TEMPLATE = "🍅 {duration_mins}min focus session completed via Pinepomo"


def completion_comment(duration_mins: int) -> str:
    return COMMENT_TEMPLATE.format(duration_mins=duration_mins)


class TodoistCompletionReporter:
    """Listener for ``timer:completed`` that reports back to Todoist.

    Breaks and sessions without an ``external_task_ref`` are ignored.
    The comment is posted synchronously, so delivery waits until the client
    returns or times out.
    """

    def __init__(
        self,
        client: TodoistClientProtocol,
        runner: Callable[[Coroutine[Any, Any, bool]], Any] | None = None,
    ):
        self.client = client
        self._run = runner or asyncio.run
        self._unsubscribe: Callable[[], None] | None = None

    def attach(self, emitter: TimerEventEmitter) -> TodoistCompletionReporter:
        self._unsubscribe = emitter.subscribe(TimerEventType.COMPLETED, self.on_completed)
        return self

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def on_completed(self, event: TimerEvent) -> bool:
        task_ref = event.session.external_task_ref
        if not task_ref or event.session.kind != SessionKind.WORK:
            return False
        comment = completion_comment(event.session.duration_mins)
        return bool(self._run(self.client.post_comment(task_ref, comment)))
