"""
Rotating progress messages.

Purely cosmetic: the message says nothing about real job progress.
"""
import asyncio
from typing import Callable, Optional, Sequence

from shared.logging import get_logger

logger = get_logger("workflow.ticker")


class ProgressTicker:
    """Periodic task that cycles through a fixed list of messages."""

    def __init__(
        self,
        messages: Sequence[str],
        interval: float,
        on_message: Callable[[str], None]
    ):
        if not messages:
            raise ValueError("ProgressTicker needs at least one message")
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.messages = tuple(messages)
        self.interval = interval
        self.on_message = on_message
        self.index = 0
        self.ticks = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def current(self) -> str:
        return self.messages[self.index]

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start from the first message. Must be called inside a running event loop."""
        if self.running:
            return
        self.index = 0
        self.ticks = 0
        self._task = asyncio.get_running_loop().create_task(self._run())

    def stop(self) -> None:
        """Cancel the periodic task. No message is emitted after this returns."""
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            self.index = (self.index + 1) % len(self.messages)
            self.ticks += 1
            try:
                self.on_message(self.messages[self.index])
            except Exception as e:
                logger.error(f"Progress listener failed: {e}", exc_info=e)
