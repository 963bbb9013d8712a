"""
Unit tests for logging context helpers.
"""

import pytest
from loguru import logger
from storefront.core.logging_config import add_store_context, add_user_context


@pytest.fixture
def records():
    captured = []
    sink_id = logger.add(lambda message: captured.append(message.record), level="DEBUG")
    yield captured
    logger.remove(sink_id)


class TestLogContext:
    """Tests for add_store_context and add_user_context."""

    def test_store_context(self, records):
        """Test that the store id is bound to the record."""
        add_store_context("store-123").info("Product added")

        assert records[-1]["extra"] == {"store_id": "store-123"}

    def test_user_context_extends_store_logger(self, records):
        """Test that user context keeps an existing store binding."""
        add_user_context("uid-1", add_store_context("store-123")).info("Ownership confirmed")

        assert records[-1]["extra"] == {"store_id": "store-123", "user_id": "uid-1"}

    def test_user_context_default_logger(self, records):
        """Test that user context works on the root logger."""
        add_user_context("uid-1").warning("Signed in")

        assert records[-1]["extra"] == {"user_id": "uid-1"}
