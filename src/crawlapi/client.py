"""API client facade"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from crawlapi.application.datasets import DatasetsEndpoint
from crawlapi.application.logs import LogsEndpoint
from crawlapi.application.request_queues import RequestQueuesEndpoint
from crawlapi.application.webhook_dispatches import WebhookDispatchesEndpoint
from crawlapi.domain.config import ClientConfig, RetryConfig
from crawlapi.infrastructure.config.config_manager import ConfigManager
from crawlapi.infrastructure.http_client import HttpTransport

logger = logging.getLogger(__name__)


class CrawlApiClient:
    """Entry point of the SDK.

    Usage:
        async with CrawlApiClient(token="...") as client:
            dataset = await client.datasets.get_or_create("my-dataset")
            page = await client.datasets.get_items(dataset["id"], limit=10)
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        *,
        token: Optional[str] = None,
        base_url: Optional[str] = None,
        retry_config: Optional[RetryConfig] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the client

        Args:
            config: Full configuration (default: loaded by ConfigManager from
                .crawlapi.yml and CRAWLAPI_* environment variables)
            token: API token, overrides the configuration
            base_url: API origin, overrides the configuration
            retry_config: Default retry policy, overrides the configuration
            http_client: Pre-built httpx client (tests, custom proxies)
        """
        if config is None:
            config = ConfigManager().config

        overrides = {}
        if token is not None:
            overrides["token"] = token
        if base_url is not None:
            overrides["base_url"] = base_url
        if retry_config is not None:
            overrides["retry"] = retry_config
        self.config = config.model_copy(update=overrides) if overrides else config

        if not self.config.token:
            logger.warning("No API token configured, only public resources will be accessible")

        self.transport = HttpTransport(self.config, http_client=http_client)
        retry = self.config.retry
        self.datasets = DatasetsEndpoint(self.transport, retry)
        self.logs = LogsEndpoint(self.transport, retry)
        self.webhook_dispatches = WebhookDispatchesEndpoint(self.transport, retry)
        self.request_queues = RequestQueuesEndpoint(self.transport, retry)

        logger.info(f"API client initialized for {self.config.base_url}")

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.transport.close()

    async def __aenter__(self) -> "CrawlApiClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
