"""Legacy completion-handler support for action tasks."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable
from typing import Any, TypeVar

_LOGGER = logging.getLogger(__name__)

_T = TypeVar("_T")

# Called as callback(error) on failure or callback(None, result) on success.
CompletionCallback = Callable[..., Any]

# Tasks running coroutine callbacks; held until done so they are not collected.
_CALLBACK_TASKS: set[asyncio.Task[Any]] = set()


def _on_callback_task_done(task: asyncio.Task[Any]) -> None:
    _CALLBACK_TASKS.discard(task)
    if task.cancelled():
        return
    if (error := task.exception()) is not None:
        _LOGGER.error("Completion callback raised", exc_info=error)


def attach_callback(
    task: asyncio.Future[_T], callback: CompletionCallback | None
) -> asyncio.Future[_T]:
    """Invoke ``callback`` once when ``task`` settles and return ``task``.

    The callback never runs before the task is done, and runs exactly once.
    A coroutine returned by the callback is run as a task on the running loop;
    its failure is logged like that of a plain callback.
    """
    if callback is None:
        return task

    def _on_done(done: asyncio.Future[_T]) -> None:
        try:
            if done.cancelled():
                result = callback(asyncio.CancelledError())
            elif (error := done.exception()) is not None:
                result = callback(error)
            else:
                result = callback(None, done.result())
            if inspect.iscoroutine(result):
                callback_task = asyncio.get_running_loop().create_task(result)
                _CALLBACK_TASKS.add(callback_task)
                callback_task.add_done_callback(_on_callback_task_done)
        except Exception:  # Callback errors must not break the event loop
            _LOGGER.exception("Completion callback raised")

    task.add_done_callback(_on_done)
    return task
