"""
Tests for error handling utilities
"""

import logging
from unittest.mock import Mock

from dashbuild.utils.error_handling import log_and_continue, log_and_return_default


class TestLogAndContinue:
    """Test log_and_continue function"""

    def test_logs_warning_with_context(self):
        logger = Mock(spec=logging.Logger)
        error = RuntimeError("boom")

        log_and_continue(logger, error, context={"area": "prs"}, error_type="Fetching area 'prs'")

        logger.warning.assert_called_once()
        message = logger.warning.call_args[0][0]
        extra = logger.warning.call_args[1]["extra"]
        assert message == "Fetching area 'prs' failed: boom"
        assert extra["exception_class"] == "RuntimeError"
        assert extra["context"] == {"area": "prs"}


class TestLogAndReturnDefault:
    """Test log_and_return_default function"""

    def test_returns_default(self):
        logger = Mock(spec=logging.Logger)

        result = log_and_return_default(logger, ValueError("bad"), {"path": "x"}, default_value={})

        assert result == {}
        logger.log.assert_called_once()
        assert logger.log.call_args[0][0] == logging.WARNING

    def test_custom_level(self):
        logger = Mock(spec=logging.Logger)

        log_and_return_default(logger, ValueError("bad"), {}, default_value=None, level=logging.INFO)

        assert logger.log.call_args[0][0] == logging.INFO

    def test_message_names_default(self):
        logger = Mock(spec=logging.Logger)

        log_and_return_default(logger, ValueError("bad"), {}, default_value=[], error_type="Loading cache")

        assert logger.log.call_args[0][1] == "Loading cache failed, using []: bad"
