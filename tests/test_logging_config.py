"""
Tests for application logging setup.
"""
import logging

from content_ingest.core.logging_config import resolve_level, setup_logging


class TestSetupLogging:
    """The content_ingest logger and third-party noise."""

    def teardown_method(self):
        setup_logging()

    def test_single_handler_without_propagation(self):
        setup_logging("DEBUG")
        logger = setup_logging("DEBUG")
        assert logger.name == "content_ingest"
        assert len(logger.handlers) == 1
        assert logger.propagate is False
        assert logger.level == logging.DEBUG

    def test_third_party_loggers_quieted(self):
        setup_logging("DEBUG")
        assert logging.getLogger("botocore").level == logging.WARNING
        setup_logging("ERROR")
        assert logging.getLogger("boto3").level == logging.ERROR

    def test_unknown_level_falls_back_to_info(self):
        assert resolve_level("verbose") == logging.INFO
        assert resolve_level("warning") == logging.WARNING
