"""
Unit tests for the lockout monitor.

Tests the polling task lifecycle.
"""

import asyncio

import pytest
from storefront.security.lockout_monitor import LockoutMonitor


@pytest.mark.asyncio
class TestLockoutMonitor:
    """Tests for LockoutMonitor class."""

    async def test_polls_until_stopped(self):
        """Test that the check runs immediately and then repeatedly."""
        calls = []
        monitor = LockoutMonitor(lambda: calls.append(1), interval=0.01)

        monitor.start()
        await asyncio.sleep(0.05)
        await monitor.stop()

        assert len(calls) >= 2
        assert monitor.running is False

        count = len(calls)
        await asyncio.sleep(0.03)
        assert len(calls) == count

    async def test_start_twice_single_task(self):
        """Test that a second start() does not spawn another task."""
        calls = []
        monitor = LockoutMonitor(lambda: calls.append(1), interval=10)

        monitor.start()
        monitor.start()
        await asyncio.sleep(0)
        await asyncio.sleep(0)

        assert monitor.running is True
        assert len(calls) == 1
        await monitor.stop()

    async def test_failing_check_keeps_polling(self):
        """Test that an exception in the check does not kill the task."""
        calls = []

        def check():
            calls.append(1)
            raise RuntimeError("boom")

        monitor = LockoutMonitor(check, interval=0.01)
        monitor.start()
        await asyncio.sleep(0.05)

        assert monitor.running is True
        assert len(calls) >= 2
        await monitor.stop()

    async def test_stop_without_start(self):
        """Test that stop() on an idle monitor is a no-op."""
        monitor = LockoutMonitor(lambda: None)
        await monitor.stop()
        assert monitor.running is False


class TestLockoutMonitorConfig:
    """Tests for LockoutMonitor construction."""

    def test_invalid_interval(self):
        """Test that a non-positive interval is rejected."""
        with pytest.raises(ValueError):
            LockoutMonitor(lambda: None, interval=0)
