"""
Lockout Monitor Module

Periodically re-checks the login lockout so a locked session notices when
its lockout ends, at most one interval late.

The monitor is an asyncio task owned by the session. stop() cancels it and
waits for it, so no timer outlives its session.
"""

import asyncio
from typing import Callable, Optional
from loguru import logger

from storefront.core.constants import LOCKOUT_POLL_INTERVAL_SECONDS


class LockoutMonitor:
    """
    Cancellable polling task.

    Example:
        >>> monitor = LockoutMonitor(session.refresh_lockout, interval=10)
        >>> monitor.start()
        >>> ...
        >>> await monitor.stop()
    """

    def __init__(
        self,
        check: Callable[[], object],
        interval: float = LOCKOUT_POLL_INTERVAL_SECONDS
    ):
        """
        Args:
            check: Called once immediately and then every `interval` seconds
            interval: Poll interval in seconds
        """
        if interval <= 0:
            raise ValueError("Poll interval must be positive")

        self._check = check
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        """True while the polling task is alive."""
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """
        Start polling on the running event loop.

        Calling start() on a running monitor does nothing.
        """
        if self.running:
            return

        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.debug(f"Lockout monitor started (interval: {self.interval}s)")

    async def stop(self) -> None:
        """Cancel the polling task and wait for it to finish."""
        task, self._task = self._task, None
        if task is None or task.done():
            return

        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

        logger.debug("Lockout monitor stopped")

    async def _run(self) -> None:
        while True:
            try:
                self._check()
            except Exception as e:
                logger.error(f"Lockout check failed: {e}")
            await asyncio.sleep(self.interval)
