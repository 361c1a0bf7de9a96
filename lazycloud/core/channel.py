"""Per-instance message queue and the sender handed to commands."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterator
from typing import Any


class MessageChannel:
    """FIFO queue of messages owned by one service instance.

    Messages are only consumed on tick.  Once closed, the channel accepts
    nothing and holds nothing.
    """

    def __init__(self) -> None:
        self._queue: deque[Any] = deque()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def sender(self) -> Sender:
        return Sender(self)

    def put(self, message: Any) -> bool:
        if self._closed:
            return False
        self._queue.append(message)
        return True

    def drain(self) -> Iterator[Any]:
        """Yield queued messages in order, including ones queued while draining."""
        while self._queue and not self._closed:
            yield self._queue.popleft()

    def close(self) -> None:
        self._closed = True
        self._queue.clear()

    def __len__(self) -> int:
        return len(self._queue)


class Sender:
    """Write end of a channel; safe to keep after the instance is gone."""

    __slots__ = ("_channel",)

    def __init__(self, channel: MessageChannel) -> None:
        self._channel = channel

    @property
    def closed(self) -> bool:
        return self._channel.closed

    def send(self, message: Any) -> bool:
        """Enqueue ``message``; returns False (and drops it) if the channel is closed."""
        return self._channel.put(message)
