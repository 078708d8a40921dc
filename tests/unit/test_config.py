"""Tests for environment-driven configuration."""

from __future__ import annotations

import pytest

from specwatch.config import load_config


class TestLoadConfig:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for key in ("LLM_ENDPOINT", "LLM_MODEL", "CONCURRENCY", "LOG_LEVEL", "WEBHOOK_URL"):
            monkeypatch.delenv(f"SPECWATCH_{key}", raising=False)

        config = load_config()

        assert config.llm.endpoint == "https://api.openai.com"
        assert config.llm.model == "gpt-5"
        assert config.pipeline.concurrency == 5
        assert config.fetch.max_attempts == 3
        assert config.fetch.backoff_seconds == (5.0, 30.0)
        assert config.storage.changes_dir == "changes"
        assert config.log.level == "info"
        assert config.notifications.webhook_url == ""

    def test_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SPECWATCH_LLM_ENDPOINT", "http://localhost:8080/")
        monkeypatch.setenv("SPECWATCH_LLM_MODEL", "local-model")
        monkeypatch.setenv("SPECWATCH_CACHE_DIR", "/tmp/specs")
        monkeypatch.setenv("SPECWATCH_LOG_LEVEL", "DEBUG")

        config = load_config()

        assert config.llm.endpoint == "http://localhost:8080"
        assert config.llm.model == "local-model"
        assert config.storage.cache_dir == "/tmp/specs"
        assert config.log.level == "debug"

    def test_integers_are_clamped(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SPECWATCH_CONCURRENCY", "0")
        monkeypatch.setenv("SPECWATCH_LLM_TIMEOUT", "99999")

        config = load_config()

        assert config.pipeline.concurrency == 1
        assert config.llm.timeout_seconds == 900

    def test_invalid_log_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SPECWATCH_LOG_LEVEL", "verbose")
        with pytest.raises(ValueError, match="Invalid log level"):
            load_config()
