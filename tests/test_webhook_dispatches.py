"""Tests for the webhook dispatches endpoint"""

from __future__ import annotations

import asyncio

import pytest

from crawlapi.domain.errors import ParameterValidationError
from tests.conftest import DEFAULT_TOKEN, json_response


class TestWebhookDispatches:
    def test_list(self, make_client, mock_api):
        mock_api.respond_with(
            json_response(
                200,
                {"data": {"total": 1, "offset": 3, "limit": 5, "count": 1, "desc": True, "items": [{"id": "list-dispatches"}]}},
            )
        )
        client = make_client()

        envelope = asyncio.run(client.webhook_dispatches.list(limit=5, offset=3, desc=True))

        assert mock_api.last_request.url.path == "/v2/webhook-dispatches"
        assert mock_api.last_query == {"limit": "5", "offset": "3", "desc": "1", "token": DEFAULT_TOKEN}
        assert envelope.data[0]["id"] == "list-dispatches"
        assert envelope.pagination.offset == 3

    def test_list_rejects_unnamed(self, make_client, mock_api):
        client = make_client()

        with pytest.raises(TypeError):
            asyncio.run(client.webhook_dispatches.list(unnamed=True))

    def test_get(self, make_client, mock_api):
        mock_api.respond_with(json_response(200, {"data": {"id": "get-dispatch", "createdAt": "2023-01-01T00:00:00Z"}}))
        client = make_client()

        dispatch = asyncio.run(client.webhook_dispatches.get("some-id"))

        assert mock_api.last_request.url.path == "/v2/webhook-dispatches/some-id"
        assert dispatch["id"] == "get-dispatch"

    def test_get_not_found(self, make_client, mock_api):
        mock_api.respond_with(json_response(404, {}))
        client = make_client()

        assert asyncio.run(client.webhook_dispatches.get("404")) is None

    def test_invalid_limit(self, make_client, mock_api):
        client = make_client()

        with pytest.raises(ParameterValidationError):
            asyncio.run(client.webhook_dispatches.list(limit=True))

        assert mock_api.requests == []
