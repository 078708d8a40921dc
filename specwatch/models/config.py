"""Configuration data structures."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class LLMConfig:
    """Generation service (OpenAI-compatible chat completions) configuration."""

    endpoint: str = "https://api.openai.com"
    model: str = "gpt-5"
    api_key: str = ""
    timeout_seconds: int = 300
    temperature: float = 0.1
    max_retries: int = 1


@dataclass
class FetchConfig:
    """Specification retrieval configuration."""

    timeout_seconds: int = 60
    max_attempts: int = 3
    backoff_seconds: tuple[float, ...] = (5.0, 30.0)


@dataclass
class StorageConfig:
    """On-disk layout roots."""

    cache_dir: str = "cache"
    changes_dir: str = "changes"


@dataclass
class PipelineConfig:
    """Classification fan-out configuration."""

    concurrency: int = 5


@dataclass
class NotificationConfig:
    """Route-change notification configuration."""

    webhook_url: str = ""
    webhook_token: str = ""


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "info"


@dataclass
class SpecwatchConfig:
    """Top-level specwatch configuration."""

    llm: LLMConfig = field(default_factory=LLMConfig)
    fetch: FetchConfig = field(default_factory=FetchConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    notifications: NotificationConfig = field(default_factory=NotificationConfig)
    log: LogConfig = field(default_factory=LogConfig)
