"""Webhook dispatches endpoint"""

from __future__ import annotations

from typing import Any, Dict, Optional

from crawlapi.application.endpoint import Endpoint
from crawlapi.domain.config import RetryConfig
from crawlapi.domain.models.envelope import ResponseEnvelope
from crawlapi.domain.models.options import PaginationOptions, build_options, require_id
from crawlapi.infrastructure.http_client import HttpTransport


class WebhookDispatchesEndpoint(Endpoint):
    """Records of webhook deliveries. Read only."""

    def __init__(self, transport: HttpTransport, retry_config: RetryConfig):
        super().__init__(transport, "/v2/webhook-dispatches", retry_config)

    async def list(
        self,
        *,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        desc: Optional[bool] = None,
        retry: Optional[RetryConfig] = None,
    ) -> ResponseEnvelope:
        """List webhook dispatches of the user, sorted by ``createdAt``."""
        options = build_options(PaginationOptions, limit=limit, offset=offset, desc=desc)
        return await self._list(options.to_query(), retry=retry)

    async def get(self, dispatch_id: str, *, retry: Optional[RetryConfig] = None) -> Optional[Dict[str, Any]]:
        """Get a webhook dispatch, None when it does not exist."""
        require_id(dispatch_id, "dispatch_id")
        return await self._get_object(f"/{dispatch_id}", retry=retry)
