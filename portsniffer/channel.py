"""
Multi-producer, single-consumer channel used to stream discoveries from the
scan workers back to the engine.

Every sender handle must be closed before the receiver sees end-of-stream,
so each worker owns its own clone and the creator closes the original once
the workers are running.
"""

from __future__ import annotations

import queue
import threading
from typing import Any, Iterator, Tuple

_END = object()


class ChannelClosed(RuntimeError):
    """Raised when sending through a sender that was already closed."""


class _State:
    def __init__(self) -> None:
        self.queue: "queue.SimpleQueue[Any]" = queue.SimpleQueue()
        self.lock = threading.Lock()
        self.senders = 0


class Sender:
    def __init__(self, state: _State):
        self._state = state
        self._closed = False
        with state.lock:
            state.senders += 1

    @property
    def closed(self) -> bool:
        return self._closed

    def clone(self) -> "Sender":
        if self._closed:
            raise ChannelClosed("Cannot clone a closed sender.")
        return Sender(self._state)

    def send(self, value: Any) -> None:
        if self._closed:
            raise ChannelClosed("Cannot send on a closed sender.")
        self._state.queue.put(value)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        with self._state.lock:
            self._state.senders -= 1
            last = self._state.senders == 0
        if last:
            self._state.queue.put(_END)

    def __enter__(self) -> "Sender":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class Receiver:
    def __init__(self, state: _State):
        self._state = state
        self._finished = False

    def __iter__(self) -> Iterator[Any]:
        while not self._finished:
            item = self._state.queue.get()
            if item is _END:
                self._finished = True
                return
            yield item


def channel() -> Tuple[Sender, Receiver]:
    """Create a connected ``(Sender, Receiver)`` pair."""
    state = _State()
    return Sender(state), Receiver(state)
