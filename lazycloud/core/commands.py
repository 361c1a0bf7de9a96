"""
Async command protocol.

A command is a unit of I/O started by a message handler.  It runs as an
asyncio task on the UI loop and reports back with exactly one message sent
through the sender of the instance that spawned it.  Failures become
messages too; no exception reaches the render loop.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
import time
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass
from typing import Any

from lazycloud.constants import COMMAND_HISTORY_SIZE
from lazycloud.core.channel import Sender

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandFailed:
    """Default message for a command that raised."""

    command: str
    error: str


class Command(ABC):
    """One asynchronous operation producing one message."""

    name: str = "command"

    @abstractmethod
    async def execute(self) -> Any:
        """Do the work and return the result message."""

    def on_error(self, exc: Exception) -> Any:
        """Turn a failure into a message for the spawning service."""
        return CommandFailed(self.name, str(exc) or type(exc).__name__)


_ids = itertools.count(1)


class CommandHandle:
    """Bookkeeping reference to a running command."""

    def __init__(self, name: str) -> None:
        self.id = next(_ids)
        self.name = name
        self.task: asyncio.Task | None = None

    @property
    def done(self) -> bool:
        return self.task is not None and self.task.done()

    def __repr__(self) -> str:
        state = "done" if self.done else "running"
        return f"<CommandHandle #{self.id} {self.name} {state}>"


@dataclass
class CommandRecord:
    """A command as seen by the header's status display."""

    id: int
    name: str
    started_at: float
    finished_at: float | None = None
    error: str | None = None

    @property
    def running(self) -> bool:
        return self.finished_at is None

    @property
    def ok(self) -> bool:
        return self.finished_at is not None and self.error is None

    @property
    def duration(self) -> float:
        end = self.finished_at if self.finished_at is not None else time.monotonic()
        return end - self.started_at


class CommandTracker:
    """App-wide record of running commands and a short history."""

    def __init__(self, history_size: int = COMMAND_HISTORY_SIZE) -> None:
        self._running: dict[int, CommandRecord] = {}
        self._history: deque[CommandRecord] = deque(maxlen=history_size)

    def started(self, handle: CommandHandle) -> None:
        self._running[handle.id] = CommandRecord(handle.id, handle.name, time.monotonic())

    def finished(self, handle: CommandHandle, error: str | None = None) -> None:
        record = self._running.pop(handle.id, None)
        if record is None:
            return
        record.finished_at = time.monotonic()
        record.error = error
        self._history.append(record)

    @property
    def running(self) -> list[CommandRecord]:
        return list(self._running.values())

    @property
    def history(self) -> list[CommandRecord]:
        """Finished commands, most recent last."""
        return list(self._history)

    @property
    def last(self) -> CommandRecord | None:
        return self._history[-1] if self._history else None


class CommandDispatcher:
    """Starts commands as tasks on the running loop."""

    def __init__(self, tracker: CommandTracker | None = None) -> None:
        self.tracker = tracker or CommandTracker()
        # The loop only keeps weak references to tasks.
        self._tasks: set[asyncio.Task] = set()

    def spawn(self, command: Command, sender: Sender) -> CommandHandle:
        """Start ``command`` now; its result message goes to ``sender``."""
        handle = CommandHandle(command.name)
        task = asyncio.get_running_loop().create_task(
            self._run(command, sender, handle), name=command.name
        )
        handle.task = task
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        self.tracker.started(handle)
        logger.debug("Spawned %r", handle)
        return handle

    async def _run(
        self,
        command: Command,
        sender: Sender,
        handle: CommandHandle,
    ) -> None:
        error: str | None = None
        try:
            message = await command.execute()
        except Exception as exc:
            error = str(exc) or type(exc).__name__
            logger.warning("Command %s failed: %s", command.name, error)
            message = self._error_message(command, exc)
        else:
            logger.debug("Command %s finished", command.name)
        finally:
            self.tracker.finished(handle, error)
        sender.send(message)

    @staticmethod
    def _error_message(command: Command, exc: Exception) -> Any:
        try:
            return command.on_error(exc)
        except Exception:
            logger.exception("on_error of %s raised", command.name)
            return CommandFailed(command.name, str(exc) or type(exc).__name__)

    async def wait_idle(self) -> None:
        """Wait for every running command; used by tests and shutdown."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
