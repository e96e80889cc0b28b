"""Tests for settings and logging configuration."""

import json
import logging

import pytest
from pydantic import ValidationError

from barcount.core.config import Settings
from barcount.core.logging_config import JSONFormatter, configure_logging


class TestSettings:
    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.pre_holiday_days == 5
        assert settings.holiday_multiplier == 2.0
        assert settings.api_v1_prefix == "/api/v1"

    def test_multiplier_below_one_is_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, holiday_multiplier=0.5)

    def test_negative_window_is_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, pre_holiday_days=-1)

    def test_cors_origins_list(self):
        settings = Settings(_env_file=None, cors_origins="http://a.test, http://b.test,")
        assert settings.cors_origins_list == ["http://a.test", "http://b.test"]
        assert Settings(_env_file=None, cors_origins="*").cors_origins_list == ["*"]


class TestLogging:
    def test_json_formatter(self):
        record = logging.LogRecord("barcount.test", logging.WARNING, __file__, 10, "low stock %s", ("gin",), None)

        payload = json.loads(JSONFormatter().format(record))

        assert payload["level"] == "WARNING"
        assert payload["msg"] == "low stock gin"

    def test_configure_logging_sets_level(self):
        root = logging.getLogger()
        previous_level, previous_handlers = root.level, list(root.handlers)
        try:
            configure_logging(Settings(_env_file=None, debug=False, log_level="WARNING"))
            assert root.level == logging.WARNING
            assert isinstance(root.handlers[-1].formatter, JSONFormatter)
        finally:
            root.handlers[:] = previous_handlers
            root.setLevel(previous_level)
