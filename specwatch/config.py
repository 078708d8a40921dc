"""Configuration loading from environment variables."""

from __future__ import annotations

import os

from specwatch.models.config import (
    FetchConfig,
    LLMConfig,
    LogConfig,
    NotificationConfig,
    PipelineConfig,
    SpecwatchConfig,
    StorageConfig,
)


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"SPECWATCH_{key}", default)


def _env_int(key: str, default: int, min_val: int | None = None, max_val: int | None = None) -> int:
    val = int(_env(key, str(default)))
    if min_val is not None:
        val = max(val, min_val)
    if max_val is not None:
        val = min(val, max_val)
    return val


def _env_float(key: str, default: float) -> float:
    return float(_env(key, str(default)))


def _validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ValueError(f"Invalid log level: {value}. Must be one of {valid}")
    return value.lower()


def load_config() -> SpecwatchConfig:
    """Load configuration from SPECWATCH_* environment variables."""
    return SpecwatchConfig(
        llm=LLMConfig(
            endpoint=_env("LLM_ENDPOINT", "https://api.openai.com").rstrip("/"),
            model=_env("LLM_MODEL", "gpt-5"),
            api_key=_env("LLM_API_KEY", ""),
            timeout_seconds=_env_int("LLM_TIMEOUT", 300, min_val=10, max_val=900),
            temperature=_env_float("LLM_TEMPERATURE", 0.1),
            max_retries=_env_int("LLM_MAX_RETRIES", 1, min_val=0, max_val=5),
        ),
        fetch=FetchConfig(
            timeout_seconds=_env_int("FETCH_TIMEOUT", 60, min_val=5, max_val=600),
        ),
        storage=StorageConfig(
            cache_dir=_env("CACHE_DIR", "cache"),
            changes_dir=_env("CHANGES_DIR", "changes"),
        ),
        pipeline=PipelineConfig(
            concurrency=_env_int("CONCURRENCY", 5, min_val=1, max_val=20),
        ),
        notifications=NotificationConfig(
            webhook_url=_env("WEBHOOK_URL", ""),
            webhook_token=_env("WEBHOOK_TOKEN", ""),
        ),
        log=LogConfig(
            level=_validate_log_level(_env("LOG_LEVEL", "info")),
        ),
    )
