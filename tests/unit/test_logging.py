"""Tests for logging helpers."""
import logging

import pytest

from mediaqueue import setup_logging
from mediaqueue.core.logging import get_logger


@pytest.fixture
def restore_levels():
    """Restore mediaqueue logger levels after a test."""
    names = ['mediaqueue', 'mediaqueue.queue', 'mediaqueue.queue.scheduler', 'mediaqueue.test']
    saved = {name: logging.getLogger(name).level for name in names}
    yield
    for name, level in saved.items():
        logging.getLogger(name).setLevel(level)


class TestGetLogger:
    """Test suite for get_logger."""

    def test_returns_named_logger(self):
        logger = get_logger('mediaqueue.test')

        assert logger is logging.getLogger('mediaqueue.test')
        assert logger.propagate is True

    def test_keeps_explicit_level(self, restore_levels):
        logging.getLogger('mediaqueue.test').setLevel(logging.DEBUG)

        logger = get_logger('mediaqueue.test')

        assert logger.level == logging.DEBUG


class TestSetupLogging:
    """Test suite for setup_logging."""

    def test_sets_level_on_package_loggers(self, restore_levels):
        setup_logging(logging.DEBUG)

        assert logging.getLogger('mediaqueue').level == logging.DEBUG
        assert logging.getLogger('mediaqueue.queue').level == logging.DEBUG
        assert logging.getLogger('mediaqueue.queue.scheduler').level == logging.DEBUG

    def test_default_level_is_info(self, restore_levels):
        setup_logging()

        assert logging.getLogger('mediaqueue.queue.scheduler').level == logging.INFO

    @pytest.mark.asyncio
    async def test_run_logs_summary(self, restore_levels, transport, video, caplog):
        from mediaqueue import UploadQueue

        setup_logging(logging.INFO)
        queue = UploadQueue(transport=transport)
        queue.add_files([video("a.mp4")])

        with caplog.at_level(logging.INFO, logger='mediaqueue.queue.scheduler'):
            await queue.start_upload()

        assert "Upload run complete: 1 succeeded, 0 failed, 1 total" in caplog.text
