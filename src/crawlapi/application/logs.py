"""Logs endpoint"""

from __future__ import annotations

from typing import Optional

from crawlapi.application.endpoint import Endpoint
from crawlapi.domain.config import RetryConfig
from crawlapi.domain.errors import NotFoundError
from crawlapi.domain.models.options import require_id
from crawlapi.infrastructure.http_client import HttpTransport, ResponseMode
from crawlapi.infrastructure.normalizer import catch_not_found


class LogsEndpoint(Endpoint):
    """Logs of actor runs and builds."""

    def __init__(self, transport: HttpTransport, retry_config: RetryConfig):
        super().__init__(transport, "/v2/logs", retry_config)

    async def get(self, log_id: str, *, retry: Optional[RetryConfig] = None) -> Optional[str]:
        """Get the log text, None when the log does not exist.

        Args:
            log_id: ID of the run or build
        """
        require_id(log_id, "log_id")
        try:
            response = await self._call("GET", f"/{log_id}", response_mode=ResponseMode.RAW, retry=retry)
        except NotFoundError as e:
            return catch_not_found(e)
        return (response.body or b"").decode("utf-8", errors="replace")
