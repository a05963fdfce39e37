"""Shared fixtures: an API client backed by httpx.MockTransport"""

from __future__ import annotations

import json
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

from crawlapi import ClientConfig, CrawlApiClient, RetryConfig

BASE_URL = "http://api.test"
DEFAULT_TOKEN = "default-token"


def json_response(status_code: int, payload: Any = None, headers: Optional[Dict[str, str]] = None) -> httpx.Response:
    content = b"" if payload is None else json.dumps(payload).encode("utf-8")
    all_headers = {"Content-Type": "application/json; charset=utf-8"}
    all_headers.update(headers or {})
    return httpx.Response(status_code, content=content, headers=all_headers)


class MockApi:
    """Records requests and answers them with a configurable handler"""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.handler: Callable[[httpx.Request], httpx.Response] = lambda request: json_response(
            200, {"data": {"id": "default"}}
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    def respond_with(self, *responses: httpx.Response) -> None:
        """Answer the next requests in order, repeating the last response."""
        queue = list(responses)

        def handler(request: httpx.Request) -> httpx.Response:
            return queue.pop(0) if len(queue) > 1 else queue[0]

        self.handler = handler

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    @property
    def last_query(self) -> Dict[str, str]:
        return dict(self.last_request.url.params)

    @property
    def last_body(self) -> Any:
        content = self.last_request.content
        return json.loads(content) if content else None


@pytest.fixture
def mock_api() -> MockApi:
    return MockApi()


@pytest.fixture
def make_client(mock_api: MockApi) -> Callable[..., CrawlApiClient]:
    def _make(**retry: Any) -> CrawlApiClient:
        retry.setdefault("max_retries", 0)
        retry.setdefault("base_delay_millis", 1)
        config = ClientConfig(base_url=BASE_URL, token=DEFAULT_TOKEN, retry=RetryConfig(**retry))
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(mock_api))
        return CrawlApiClient(config, http_client=http_client)

    return _make


@pytest.fixture
def no_sleep(monkeypatch) -> List[float]:
    """Skip backoff sleeps, recording the requested delays."""
    delays: List[float] = []

    async def fake_sleep(seconds: float) -> None:
        delays.append(seconds)

    monkeypatch.setattr("crawlapi.infrastructure.retry._sleep", fake_sleep)
    return delays
