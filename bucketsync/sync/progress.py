"""Live transfer progress for sync runs."""

import time
from typing import Callable, Optional

from rich.console import Console
from rich.live import Live
from rich.text import Text

from ..utils import humanize
from .queues import WorkQueue


class ProgressAggregator:
    """Accumulates byte deltas and repaints a single status line.

    Positive deltas add to the estimated total, negative deltas count as
    completed bytes. Only one thread may feed a given aggregator; workers
    send their deltas through a queue consumed by :meth:`run`.

    Examples:
        >>> progress = ProgressAggregator(console=Console(file=io.StringIO()))
        >>> for delta in (100, -40, -60):
        ...     progress.update(delta)
        >>> progress.status.startswith("100 B / 100 B (100.0%)")
        True
    """

    def __init__(
        self,
        console: Optional[Console] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the aggregator.

        Args:
            console: Console the status line is rendered on (stdout if None)
            clock: Time source used for the transfer rate
        """
        self.console = console or Console(highlight=False)
        self.clock = clock
        self.total_bytes = 0
        self.sent_bytes = 0
        self.status = ""
        self._start = clock()
        self._live = Live(
            console=self.console,
            auto_refresh=False,
            transient=False,
            redirect_stdout=False,
            redirect_stderr=False,
        )

    @property
    def percent(self) -> float:
        """Completed share of the estimated total, in percent."""
        if self.total_bytes == 0:
            return 0.0
        return 100.0 * self.sent_bytes / self.total_bytes

    def rate(self) -> int:
        """Average transfer rate since start, in bytes per second."""
        elapsed = self.clock() - self._start
        if elapsed <= 0:
            return 0
        return int(self.sent_bytes / elapsed)

    def format_status(self) -> str:
        """Build the status line for the current totals."""
        return (
            f"{humanize(self.sent_bytes)} / {humanize(self.total_bytes)} "
            f"({self.percent:2.1f}%)   {humanize(self.rate())}/sec"
        )

    def update(self, delta: int) -> None:
        """Apply one delta and repaint if the status line changed."""
        if delta > 0:
            self.total_bytes += delta
        else:
            self.sent_bytes += -delta

        if self.total_bytes == 0:
            return

        status = self.format_status()
        if status == self.status:
            return

        self.status = status
        if not self._live.is_started:
            self._live.start()
        self._live.update(Text(status), refresh=True)

    def run(self, updates: WorkQueue[int]) -> None:
        """Consume deltas until the queue is closed and drained."""
        for delta in updates:
            self.update(delta)

    def finish(self) -> None:
        """End the status line."""
        if self._live.is_started:
            self._live.stop()
            # Live ends the line itself only on terminals
            if self.console.is_terminal:
                return
        self.console.line()
