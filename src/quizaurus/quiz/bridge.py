"""Fire-and-forget notifications from the quiz runner to its host.

The hosting chat client learns about the user's progress through widget
state updates and can be asked to continue the conversation with a follow-up
prompt. Neither call has a response the runner depends on, so
:func:`dispatch` swallows and logs every failure.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import inspect
import logging
import threading
from dataclasses import dataclass
from typing import Any, Protocol, Union

__all__ = [
    "FollowUpRequest",
    "HostBridge",
    "HostMessage",
    "LoggingBridge",
    "WidgetStateUpdate",
    "dispatch",
    "drain_notifications",
]

logger = logging.getLogger(__name__)

# Deliveries still in flight.
_lock = threading.Lock()
_background_loop: asyncio.AbstractEventLoop | None = None
_pending: set["concurrent.futures.Future[Any]"] = set()
_tasks: set["asyncio.Task[Any]"] = set()


@dataclass(frozen=True)
class WidgetStateUpdate:
    """Answers recorded so far, in question order."""

    user_answers: tuple[int, ...]
    current_question_index: int

    def to_wire(self) -> dict[str, Any]:
        return {
            "userAnswers": list(self.user_answers),
            "currentQuestionIndex": self.current_question_index,
        }


@dataclass(frozen=True)
class FollowUpRequest:
    """Free-text prompt the host should post on the user's behalf."""

    prompt: str

    def to_wire(self) -> dict[str, Any]:
        return {"prompt": self.prompt}


HostMessage = Union[WidgetStateUpdate, FollowUpRequest]


class HostBridge(Protocol):
    """Port implemented by whatever hosts the quiz runner.

    ``notify`` may be a plain function or a coroutine function.
    """

    def notify(self, message: HostMessage) -> Any: ...


class LoggingBridge:
    """Bridge for local runs: every host message becomes a log record."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._log = log or logger

    def notify(self, message: HostMessage) -> None:
        kind = type(message).__name__
        self._log.info(
            "Host notification: %s",
            kind,
            extra={"host_message": kind, "payload": message.to_wire()},
        )


def dispatch(bridge: HostBridge | None, message: HostMessage) -> bool:
    """Deliver ``message`` without letting a failure reach the caller.

    Returns ``True`` when the bridge accepted the message synchronously or an
    awaitable was scheduled, ``False`` when delivery failed or no bridge is
    attached. Awaitables never block the caller: they run as a task on the
    caller's loop or, without one, on a background loop thread. Their
    failures are logged once they finish.
    """

    if bridge is None:
        return False
    kind = type(message).__name__
    try:
        result = bridge.notify(message)
        if inspect.isawaitable(result):
            _schedule(result, kind)
    except Exception:
        logger.warning("Host notification failed: %s", kind, exc_info=True)
        return False
    return True


def drain_notifications(timeout: float | None = None) -> bool:
    """Wait for notifications running on the background loop.

    Returns ``True`` when every pending delivery finished within ``timeout``.
    """

    with _lock:
        pending = list(_pending)
    if not pending:
        return True
    _, not_done = concurrent.futures.wait(pending, timeout=timeout)
    return not not_done


def _schedule(awaitable: Any, kind: str) -> None:
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        future = asyncio.run_coroutine_threadsafe(
            _deliver(awaitable, kind), _get_background_loop()
        )
        with _lock:
            _pending.add(future)
        future.add_done_callback(_forget_future)
        return
    task = loop.create_task(_deliver(awaitable, kind))
    _tasks.add(task)
    task.add_done_callback(_tasks.discard)


def _get_background_loop() -> asyncio.AbstractEventLoop:
    global _background_loop
    with _lock:
        if _background_loop is None:
            _background_loop = asyncio.new_event_loop()
            threading.Thread(
                target=_background_loop.run_forever,
                name="quizaurus-host-bridge",
                daemon=True,
            ).start()
        return _background_loop


def _forget_future(future: "concurrent.futures.Future[Any]") -> None:
    with _lock:
        _pending.discard(future)


async def _deliver(awaitable: Any, kind: str) -> None:
    try:
        await awaitable
    except Exception:
        logger.warning("Host notification failed: %s", kind, exc_info=True)
