"""Configuration models with Pydantic validation."""

from crawlapi.domain.config.client import ClientConfig
from crawlapi.domain.config.retry import RetryConfig

__all__ = [
    "ClientConfig",
    "RetryConfig",
]
