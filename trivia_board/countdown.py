"""
Periodic countdown driver that advances a TurnEngine's clock on an asyncio loop.
"""
import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, List, Optional

from .models import GameState
from .turn_engine import TurnEngine

logger = logging.getLogger(__name__)


class CountdownDriver:
    """
    Calls ``TurnEngine.tick`` once per interval while the engine's timer is active.

    The engine decides when the clock stops (expiry or judgment); the driver
    only watches ``timer_active`` and exits once it goes False.
    """

    def __init__(
        self,
        engine: TurnEngine,
        interval: float = 1.0,
        on_tick: Optional[Callable[[GameState], Awaitable[Any]]] = None,
        sleep: Optional[Callable[[float], Awaitable[Any]]] = None
    ):
        """
        Initialize the driver.

        Args:
            engine: Engine whose clock is driven
            interval: Seconds between ticks
            on_tick: Coroutine called with a fresh snapshot after every tick
            sleep: Awaitable sleep function, ``asyncio.sleep`` by default
        """
        self._engine = engine
        self._interval = interval
        self._on_tick = on_tick
        self._sleep = sleep or asyncio.sleep
        self._task: Optional[asyncio.Task] = None
        self._cancelled: List[asyncio.Task] = []

    def start(self) -> bool:
        """
        Launch the countdown task. Must be called from a running event loop.

        Returns:
            True if a task was started, False if one is running or the clock is stopped
        """
        if self.is_running:
            logger.debug("Countdown already running, start ignored")
            return False
        if not self._engine.timer_active:
            logger.debug("Engine timer is not active, countdown not started")
            return False

        self._task = asyncio.create_task(self._run())
        logger.debug(
            "Countdown task started",
            extra={
                'event_type': 'countdown_started',
                'task_id': str(id(self._task)),
                'remaining_time': self._engine.time_remaining,
                'timestamp': time.time()
            }
        )
        return True

    def stop(self) -> bool:
        """
        Cancel the countdown task.

        Returns:
            True if a running task was cancelled, False otherwise
        """
        task, self._task = self._task, None
        if task and not task.done():
            # Detached at once so a new turn can start before the loop reaps it;
            # wait() still collects it
            task.cancel()
            self._cancelled.append(task)
            logger.debug("Countdown task cancelled")
            return True
        return False

    async def wait(self) -> None:
        """Wait for cancelled tasks and the current countdown task to finish."""
        pending, self._cancelled = self._cancelled, []
        if self._task is not None:
            pending.append(self._task)
        for task in pending:
            try:
                await task
            except asyncio.CancelledError:
                pass

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _run(self) -> None:
        try:
            while self._engine.timer_active:
                await self._sleep(self._interval)
                if not self._engine.tick():
                    break
                if self._on_tick is not None:
                    try:
                        await self._on_tick(self._engine.snapshot())
                    except asyncio.CancelledError:
                        raise
                    except Exception as e:
                        logger.error(f"Countdown tick callback failed: {e}")
            logger.debug(
                "Countdown finished",
                extra={
                    'event_type': 'countdown_finished',
                    'remaining_time': self._engine.time_remaining,
                    'timestamp': time.time()
                }
            )
        except asyncio.CancelledError:
            logger.debug(
                "Countdown cancelled",
                extra={
                    'event_type': 'countdown_cancelled',
                    'remaining_time': self._engine.time_remaining,
                    'timestamp': time.time()
                }
            )
            raise
