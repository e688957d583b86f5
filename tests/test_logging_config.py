"""Tests for logging setup."""

import logging

from curlwrap.logging_config import setup_logging


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_configures_package_logger(self):
        logger = setup_logging(level="DEBUG", force=True)
        assert logger.name == "curlwrap"
        assert logger.level == logging.DEBUG
        assert logger.propagate is False
        assert len(logger.handlers) == 1

    def test_invalid_level_falls_back_to_warning(self):
        logger = setup_logging(level="NOPE", force=True)
        assert logger.level == logging.WARNING

    def test_log_file_handler(self, tmp_path):
        log_file = tmp_path / "curlwrap.log"
        logger = setup_logging(level="INFO", log_file=log_file, force=True)
        logging.getLogger("curlwrap.client").info("hello file")
        for handler in logger.handlers:
            handler.flush()
        assert "hello file" in log_file.read_text()
        setup_logging(force=True)

    def test_handlers_not_duplicated(self):
        setup_logging(force=True)
        logger = setup_logging()
        assert len(logger.handlers) == 1
