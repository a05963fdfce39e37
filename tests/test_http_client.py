"""Tests for the HTTP transport and response classification"""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from crawlapi.domain.config import ClientConfig
from crawlapi.domain.errors import (
    BodyParseError,
    IncompleteBodyError,
    NotFoundError,
    TerminalServerError,
    TransientTransportError,
)
from crawlapi.domain.models.outcome import Retryable, Success, Terminal
from crawlapi.infrastructure.http_client import (
    HttpTransport,
    RawResponse,
    ResponseMode,
    classify_response,
)


def _transport(handler, token="test-token") -> HttpTransport:
    config = ClientConfig(base_url="http://api.test", token=token)
    return HttpTransport(config, http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


class TestHttpTransportSend:
    """Tests for HttpTransport.send"""

    def test_adds_token_and_encodes_query(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"data": {"ok": True}})

        response = asyncio.run(
            _transport(handler).send("GET", "/v2/datasets", query={"limit": 5, "desc": True, "offset": None})
        )

        assert response.status == 200
        assert response.body == {"data": {"ok": True}}
        assert str(seen[0].url).startswith("http://api.test/v2/datasets?")
        assert dict(seen[0].url.params) == {"limit": "5", "desc": "1", "token": "test-token"}

    def test_no_token_param_without_token(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={})

        asyncio.run(_transport(handler, token=None).send("GET", "/v2/logs/abc"))

        assert "token" not in dict(seen[0].url.params)

    def test_json_body(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(201, json={"data": {"id": "x"}})

        asyncio.run(_transport(handler).send("PUT", "/v2/datasets/x", body={"name": "renamed"}))

        assert json.loads(seen[0].content) == {"name": "renamed"}
        assert seen[0].headers["content-type"].startswith("application/json")

    def test_string_body_sent_verbatim(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(201)

        asyncio.run(_transport(handler).send("POST", "/v2/datasets/x/items", body='[{"a":1}]'))

        assert seen[0].content == b'[{"a":1}]'

    def test_empty_json_body_is_none(self):
        response = asyncio.run(_transport(lambda request: httpx.Response(204)).send("DELETE", "/v2/datasets/x"))

        assert response.status == 204
        assert response.body is None

    def test_raw_mode_keeps_bytes(self):
        def handler(request):
            return httpx.Response(200, content=b"a,b\n", headers={"Content-Type": "text/csv"})

        response = asyncio.run(_transport(handler).send("GET", "/v2/datasets/x/items", response_mode=ResponseMode.RAW))

        assert response.body == b"a,b\n"
        assert response.content_type == "text/csv"

    def test_error_body_kept_as_bytes(self):
        def handler(request):
            return httpx.Response(400, content=b'{"error": {"message": "bad"}}')

        response = asyncio.run(_transport(handler).send("GET", "/v2/datasets"))

        assert response.status == 400
        assert response.body == b'{"error": {"message": "bad"}}'

    def test_timeout_is_transient(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(TransientTransportError, match="timed out"):
            asyncio.run(_transport(handler).send("GET", "/v2/datasets"))

    def test_connect_error_is_transient(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(TransientTransportError):
            asyncio.run(_transport(handler).send("GET", "/v2/datasets"))

    def test_truncated_json_is_incomplete(self):
        def handler(request):
            return httpx.Response(200, content=b'{"data": {"isPublic": fal', headers={"Content-Type": "application/json"})

        with pytest.raises(IncompleteBodyError) as exc_info:
            asyncio.run(_transport(handler).send("GET", "/v2/datasets"))

        assert isinstance(exc_info.value, TransientTransportError)
        assert exc_info.value.status_code == 200

    @pytest.mark.parametrize("content", [b"<html>oops</html>", b'{"data": 1} extra', b"\xff\xfe"])
    def test_malformed_json_is_terminal(self, content):
        def handler(request):
            return httpx.Response(200, content=content, headers={"Content-Type": "text/html"})

        with pytest.raises(BodyParseError) as exc_info:
            asyncio.run(_transport(handler).send("GET", "/v2/datasets"))

        assert not isinstance(exc_info.value, TransientTransportError)
        assert exc_info.value.status_code == 200


class TestClassifyResponse:
    """Tests for classify_response"""

    def test_success(self):
        response = RawResponse(status=200, body={"data": {}})

        outcome = classify_response(response)

        assert isinstance(outcome, Success)
        assert outcome.value is response

    def test_not_found_is_terminal(self):
        outcome = classify_response(RawResponse(status=404, body=b'{"error": {"type": "record-not-found"}}'))

        assert isinstance(outcome, Terminal)
        assert isinstance(outcome.error, NotFoundError)
        assert "record-not-found" in str(outcome.error)

    @pytest.mark.parametrize("status", [429, 500, 502, 503])
    def test_rate_limit_and_server_errors_are_retryable(self, status):
        outcome = classify_response(RawResponse(status=status, body=b""))

        assert isinstance(outcome, Retryable)
        assert isinstance(outcome.error, TransientTransportError)
        assert outcome.error.status_code == status

    @pytest.mark.parametrize("status", [400, 401, 403, 409])
    def test_client_errors_are_terminal(self, status):
        outcome = classify_response(RawResponse(status=status, body=b"plain text error"), "GET /v2/datasets")

        assert isinstance(outcome, Terminal)
        assert isinstance(outcome.error, TerminalServerError)
        assert str(outcome.error) == f"GET /v2/datasets: HTTP {status}: plain text error"
