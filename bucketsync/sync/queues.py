"""Closable work queues connecting the diff to the worker pools."""

import threading
from collections import deque
from typing import Generic, Iterator, TypeVar

from ..utils import QUEUE_SIZE

T = TypeVar("T")


class QueueClosedError(RuntimeError):
    """Raised when putting on a closed queue, or getting from a drained one."""

    pass


class WorkQueue(Generic[T]):
    """Bounded FIFO queue with close semantics.

    Consumers iterate over the queue; iteration blocks while the queue is
    empty and ends once the queue has been closed and drained. Any number
    of producers and consumers may share one queue.

    Examples:
        >>> jobs = WorkQueue(maxsize=10)
        >>> jobs.put("a")
        >>> jobs.close()
        >>> list(jobs)
        ['a']
    """

    def __init__(self, maxsize: int = QUEUE_SIZE):
        """Initialize the queue.

        Args:
            maxsize: Capacity; ``put`` blocks while the queue is full
        """
        self.maxsize = maxsize
        self._items: deque[T] = deque()
        self._closed = False
        self._cond = threading.Condition()

    @property
    def closed(self) -> bool:
        """Whether close() has been called."""
        with self._cond:
            return self._closed

    def put(self, item: T) -> None:
        """Add an item, blocking while the queue is at capacity.

        Raises:
            QueueClosedError: If the queue is closed
        """
        with self._cond:
            while len(self._items) >= self.maxsize and not self._closed:
                self._cond.wait()
            if self._closed:
                raise QueueClosedError("put on closed queue")
            self._items.append(item)
            self._cond.notify_all()

    def close(self) -> None:
        """Close the queue. Items already queued are still delivered."""
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    def get(self) -> T:
        """Remove and return the next item, blocking while empty.

        Raises:
            QueueClosedError: If the queue is closed and drained
        """
        with self._cond:
            while not self._items and not self._closed:
                self._cond.wait()
            if not self._items:
                raise QueueClosedError("queue closed")
            item = self._items.popleft()
            self._cond.notify_all()
            return item

    def __iter__(self) -> Iterator[T]:
        while True:
            try:
                yield self.get()
            except QueueClosedError:
                return

    def __len__(self) -> int:
        with self._cond:
            return len(self._items)
