"""Tests for environment-driven configuration."""

import logging
from pathlib import Path

from salonbook.config import BUNDLED_FORMS_PATH, FormsConfig


class TestFormsConfig:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("SALONBOOK_FORMS_PATH", raising=False)
        monkeypatch.delenv("SALONBOOK_LOG_LEVEL", raising=False)
        config = FormsConfig.from_env()
        assert config.forms_path == BUNDLED_FORMS_PATH
        assert config.log_level == "WARNING"
        assert config.is_bundled

    def test_forms_path_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("SALONBOOK_FORMS_PATH", str(tmp_path))
        config = FormsConfig.from_env()
        assert config.forms_path == Path(tmp_path)
        assert not config.is_bundled

    def test_log_level_from_env(self, monkeypatch):
        monkeypatch.setenv("SALONBOOK_LOG_LEVEL", "debug")
        assert FormsConfig.from_env().log_level == "DEBUG"

    def test_bundled_path_exists(self):
        assert BUNDLED_FORMS_PATH.is_dir()
        assert (BUNDLED_FORMS_PATH / "login.yaml").is_file()

    def test_configure_logging_tolerates_unknown_level(self, monkeypatch):
        calls = {}
        monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.update(kw))
        FormsConfig(forms_path=BUNDLED_FORMS_PATH, log_level="CHATTY").configure_logging()
        assert calls["level"] == logging.WARNING

    def test_configure_logging_verbose(self, monkeypatch):
        calls = {}
        monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.update(kw))
        FormsConfig(forms_path=BUNDLED_FORMS_PATH).configure_logging(verbose=True)
        assert calls["level"] == logging.DEBUG
