"""Shared HTTP transport (httpx) and response classification.

All endpoints talk to the API through ``HttpTransport.send`` so that query
encoding, auth and error mapping do not diverge between resources.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional

import httpx

from crawlapi.domain.config import ClientConfig
from crawlapi.domain.errors import (
    BodyParseError,
    IncompleteBodyError,
    NotFoundError,
    TerminalServerError,
    TransientTransportError,
)
from crawlapi.domain.models.outcome import AttemptOutcome, Retryable, Success, Terminal
from crawlapi.infrastructure.json_body import loads_body

logger = logging.getLogger(__name__)

USER_AGENT = "crawlapi-python/0.3.0"


class ResponseMode(str, Enum):
    """How the transport should treat a successful response body"""

    JSON = "json"  # parse body as JSON
    RAW = "raw"  # keep body as bytes


@dataclass(frozen=True)
class RawResponse:
    """Transport-level response"""

    status: int
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Any = None

    @property
    def content_type(self) -> str:
        for key, value in self.headers.items():
            if key.lower() == "content-type":
                return value
        return ""

    @property
    def is_success(self) -> bool:
        return 200 <= self.status < 300


def _should_retry_status(status_code: int) -> bool:
    """Check if an error status should be retried."""
    # Retry on 429 and 5xx
    return status_code == 429 or status_code >= 500


def _error_message(response: RawResponse) -> str:
    """Extract an error message from an error response body."""
    message = f"HTTP {response.status}"
    body = response.body
    if isinstance(body, bytes):
        try:
            body = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, ValueError):
            text = response.body.decode("utf-8", errors="replace").strip()
            return f"{message}: {text[:200]}" if text else message
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict):
            return f"{message}: {error.get('message') or error.get('type') or error}"
        if error:
            return f"{message}: {error}"
    return message


def classify_response(response: RawResponse, context: str = "") -> AttemptOutcome:
    """Map a transport response to an attempt outcome.

    2xx is success, 404 is a terminal ``NotFoundError``, 429 and 5xx are
    retryable, every other status is a terminal server error.
    """
    if response.is_success:
        return Success(response)

    message = _error_message(response)
    if context:
        message = f"{context}: {message}"

    if response.status == 404:
        return Terminal(NotFoundError(message, status_code=404, response_data=response.body))
    if _should_retry_status(response.status):
        return Retryable(TransientTransportError(message, status_code=response.status, response_data=response.body))
    return Terminal(TerminalServerError(message, status_code=response.status, response_data=response.body))


def _encode_query(query: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    result: Dict[str, Any] = {}
    for key, value in (query or {}).items():
        if value is None:
            continue
        if isinstance(value, bool):
            value = 1 if value else 0
        result[key] = value
    return result


class HttpTransport:
    """Async transport adapter over ``httpx.AsyncClient``.

    Args:
        config: Client configuration (base URL, token, timeout)
        http_client: Pre-built client, mainly for tests (``httpx.MockTransport``)
    """

    def __init__(self, config: ClientConfig, http_client: Optional[httpx.AsyncClient] = None):
        self.config = config
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=config.timeout_secs,
            headers={"User-Agent": USER_AGENT, "Accept-Encoding": "gzip"},
        )

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "HttpTransport":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _build_url(self, path: str) -> str:
        return f"{self.config.base_url.rstrip('/')}{path}"

    async def send(
        self,
        method: str,
        path: str,
        query: Optional[Dict[str, Any]] = None,
        body: Any = None,
        headers: Optional[Dict[str, str]] = None,
        response_mode: ResponseMode = ResponseMode.JSON,
    ) -> RawResponse:
        """Send one HTTP request.

        Dicts and lists are sent as JSON, strings and bytes as-is. In JSON mode a
        successful non-empty body is parsed, in RAW mode it is returned as bytes.
        Error bodies are always returned as bytes.

        Raises:
            TransientTransportError: On network errors and timeouts
            IncompleteBodyError: A JSON body was cut short (retryable)
            BodyParseError: A JSON body is malformed for another reason
        """
        params = _encode_query(query)
        if self.config.token:
            params.setdefault("token", self.config.token)

        request_headers = dict(headers or {})
        content: Optional[bytes] = None
        if body is not None:
            if isinstance(body, (dict, list)):
                content = json.dumps(body).encode("utf-8")
            elif isinstance(body, str):
                content = body.encode("utf-8")
            else:
                content = body
            request_headers.setdefault("Content-Type", "application/json; charset=utf-8")

        start_time = time.time()
        try:
            response = await self._client.request(
                method,
                self._build_url(path),
                params=params,
                content=content,
                headers=request_headers,
            )
        except httpx.TimeoutException as e:
            raise TransientTransportError(f"{method} {path} timed out: {e}") from e
        except httpx.TransportError as e:
            raise TransientTransportError(f"{method} {path} failed: {e}") from e

        logger.debug(
            f"{method} {path} - {response.status_code} "
            f"({int((time.time() - start_time) * 1000)}ms)"
        )

        raw_body: Any = response.content
        if response_mode == ResponseMode.JSON and response.is_success and raw_body:
            try:
                raw_body = loads_body(raw_body.decode("utf-8").lstrip("\ufeff"))
            except UnicodeDecodeError as e:
                raise BodyParseError(
                    f"{method} {path} returned a body that is not UTF-8: {e}",
                    status_code=response.status_code,
                ) from e
            except (IncompleteBodyError, BodyParseError) as e:
                raise type(e)(f"{method} {path}: {e.message}", status_code=response.status_code) from e
        elif response_mode == ResponseMode.JSON and response.is_success:
            raw_body = None

        return RawResponse(status=response.status_code, headers=dict(response.headers), body=raw_body)

