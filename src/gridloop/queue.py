"""Bounded, de-duplicating FIFO of lattice indices awaiting inspection."""

from collections import deque
from typing import Deque, List


class PropagationQueue:
    """
    Each index can be pending at most once, so the queue never holds more than
    `capacity` items. `start()`/`finish()` only track whether a batch is open;
    draining is driven by the batch guard in `kernel.batch`.
    """

    def __init__(self, capacity: int):
        self.capacity = capacity
        self._items: Deque[int] = deque()
        self._stored: List[bool] = [False] * capacity
        self._started = False

    def is_started(self) -> bool:
        return self._started

    def start(self) -> None:
        self._started = True

    def finish(self) -> None:
        self._started = False

    def push(self, item: int) -> None:
        if not self._stored[item]:
            self._stored[item] = True
            self._items.append(item)

    def pop(self) -> int:
        if not self._items:
            raise IndexError("pop from empty propagation queue")
        item = self._items.popleft()
        self._stored[item] = False
        return item

    def empty(self) -> bool:
        return not self._items

    def clear(self) -> None:
        while self._items:
            self.pop()

    def __len__(self) -> int:
        return len(self._items)
