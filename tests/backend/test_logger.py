import logging
from unittest.mock import patch

from shipchat.core.config import settings
from shipchat.utils.logger import ColoredFormatter, get_logger, log_separator, setup_logger

class TestLogger:

    def test_get_logger_config(self):
        logger = get_logger("shipchat.test.module")
        assert isinstance(logger, logging.Logger)
        assert logger.name == "shipchat.test.module"
        assert len(logger.handlers) == 1

    def test_handlers_not_duplicated(self):
        first = get_logger("shipchat.test.dupes")
        second = get_logger("shipchat.test.dupes")
        assert second is first
        assert len(second.handlers) == 1

    def test_explicit_level(self):
        logger = setup_logger("shipchat.test.debug_level", level=logging.DEBUG)
        assert logger.level == logging.DEBUG

    def test_level_from_settings(self, monkeypatch):
        monkeypatch.setattr(settings, "LOG_LEVEL", "warning")
        logger = get_logger("shipchat.test.from_settings")
        assert logger.level == logging.WARNING

    def test_unknown_level_falls_back_to_info(self, monkeypatch):
        monkeypatch.setattr(settings, "LOG_LEVEL", "chatty")
        logger = get_logger("shipchat.test.unknown_level")
        assert logger.level == logging.INFO

    def test_colored_formatter(self):
        formatter = ColoredFormatter("%(levelname)s: %(message)s")
        record = logging.LogRecord("shipchat", logging.ERROR, "path", 1, "bad weight", (), None)

        output = formatter.format(record)
        assert "\033[31m" in output
        assert "❌ ERROR" in output
        assert "bad weight" in output
        # The original record is left alone for other handlers
        assert record.levelname == "ERROR"

    def test_log_separator(self, caplog):
        logger = get_logger("shipchat.test.separator")
        with caplog.at_level(logging.INFO, logger="shipchat.test.separator"):
            log_separator(logger, "*", 10)
        assert caplog.records[-1].getMessage() == "*" * 10


class TestStartup:

    def test_run_logs_banner_and_starts_uvicorn(self, caplog):
        with patch("shipchat.main.uvicorn.run") as mock_run, \
                caplog.at_level(logging.INFO, logger="shipchat.main"):
            from shipchat.main import run
            run()

        mock_run.assert_called_once()
        assert mock_run.call_args.kwargs["port"] == settings.API_PORT
        messages = [r.getMessage() for r in caplog.records]
        assert any("Starting shipment intake API" in m for m in messages)
