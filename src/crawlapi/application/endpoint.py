"""Base class of resource endpoints"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from crawlapi.domain.config import RetryConfig
from crawlapi.domain.errors import NotFoundError
from crawlapi.domain.models.envelope import ResponseEnvelope
from crawlapi.domain.models.outcome import AttemptOutcome
from crawlapi.infrastructure.http_client import HttpTransport, RawResponse, ResponseMode, classify_response
from crawlapi.infrastructure.normalizer import catch_not_found, parse_date_fields, pluck_data, to_envelope
from crawlapi.infrastructure.retry import run_with_retry

logger = logging.getLogger(__name__)


class Endpoint:
    """Resource endpoint rooted at ``base_path``.

    Every request goes through ``_call``: transport send, response
    classification and the retry engine with either the per-call or the
    client-wide retry policy.
    """

    def __init__(self, transport: HttpTransport, base_path: str, retry_config: RetryConfig):
        self.transport = transport
        self.base_path = base_path
        self.retry_config = retry_config

    def _url(self, path: str = "") -> str:
        return f"{self.base_path}{path}"

    async def _call(
        self,
        method: str,
        path: str = "",
        *,
        query: Optional[Dict[str, Any]] = None,
        body: Any = None,
        response_mode: ResponseMode = ResponseMode.JSON,
        retry: Optional[RetryConfig] = None,
    ) -> RawResponse:
        url = self._url(path)

        async def _attempt() -> AttemptOutcome:
            response = await self.transport.send(method, url, query=query, body=body, response_mode=response_mode)
            return classify_response(response, f"{method} {url}")

        return await run_with_retry(_attempt, retry or self.retry_config, f"{method} {url}")

    async def _get_object(self, path: str, retry: Optional[RetryConfig] = None) -> Optional[Any]:
        """GET a single object, None when it does not exist."""
        try:
            response = await self._call("GET", path, retry=retry)
        except NotFoundError as e:
            return catch_not_found(e)
        return parse_date_fields(pluck_data(response.body))

    async def _list(self, query: Dict[str, Any], path: str = "", retry: Optional[RetryConfig] = None) -> ResponseEnvelope:
        response = await self._call("GET", path, query=query, retry=retry)
        return to_envelope(response.body, paginated=True)

    async def _fetch(
        self,
        method: str,
        path: str = "",
        *,
        query: Optional[Dict[str, Any]] = None,
        body: Any = None,
        retry: Optional[RetryConfig] = None,
    ) -> Any:
        """Send a request and return its unwrapped payload with dates parsed."""
        response = await self._call(method, path, query=query, body=body, retry=retry)
        return parse_date_fields(pluck_data(response.body))

    async def _delete(self, path: str, retry: Optional[RetryConfig] = None) -> None:
        """DELETE an object; an already missing object is not an error."""
        try:
            await self._call("DELETE", path, retry=retry)
        except NotFoundError:
            logger.debug(f"DELETE {self._url(path)}: already deleted")
