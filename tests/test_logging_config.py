"""
Tests for logging setup.
"""

import logging

from rps_arena.logging_config import configure_logging


class TestConfigureLogging:

    def test_env_var_sets_level(self, monkeypatch):
        monkeypatch.setenv("RPS_ARENA_LOG_LEVEL", "debug")

        logger = configure_logging()

        assert logger.name == "rps_arena"
        assert logger.level == logging.DEBUG

    def test_explicit_level_wins(self, monkeypatch):
        monkeypatch.setenv("RPS_ARENA_LOG_LEVEL", "DEBUG")

        assert configure_logging("warning").level == logging.WARNING

    def test_defaults_to_info(self, monkeypatch):
        monkeypatch.delenv("RPS_ARENA_LOG_LEVEL", raising=False)

        assert configure_logging().level == logging.INFO
