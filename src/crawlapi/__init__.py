"""Async client for the crawling platform API"""

from crawlapi.client import CrawlApiClient
from crawlapi.domain.config import ClientConfig, RetryConfig
from crawlapi.domain.errors import (
    BailError,
    BodyParseError,
    CrawlApiError,
    IncompleteBodyError,
    NotFoundError,
    ParameterValidationError,
    TerminalServerError,
    TransientTransportError,
)
from crawlapi.domain.models.envelope import Pagination, ResponseEnvelope
from crawlapi.log_setup import setup_logging

__version__ = "0.3.0"

__all__ = [
    "BailError",
    "BodyParseError",
    "ClientConfig",
    "CrawlApiClient",
    "CrawlApiError",
    "IncompleteBodyError",
    "NotFoundError",
    "Pagination",
    "ParameterValidationError",
    "ResponseEnvelope",
    "RetryConfig",
    "TerminalServerError",
    "TransientTransportError",
    "setup_logging",
]
