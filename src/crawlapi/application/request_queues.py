"""Request queues endpoint"""

from __future__ import annotations

from typing import Any, Dict, Optional

from crawlapi.application.endpoint import Endpoint
from crawlapi.domain.config import RetryConfig
from crawlapi.domain.errors import ParameterValidationError
from crawlapi.domain.models.envelope import ResponseEnvelope
from crawlapi.domain.models.options import (
    ListOptions,
    QueueHeadOptions,
    RequestWriteOptions,
    build_options,
    require_id,
    require_mapping,
)
from crawlapi.infrastructure.http_client import HttpTransport


class RequestQueuesEndpoint(Endpoint):
    """Request queues: ordered stores of URLs to crawl.

    Queue methods mirror the datasets endpoint; request methods operate on
    single requests inside a queue.
    """

    def __init__(self, transport: HttpTransport, retry_config: RetryConfig):
        super().__init__(transport, "/v2/request-queues", retry_config)

    async def get_or_create(self, name: str, *, retry: Optional[RetryConfig] = None) -> Dict[str, Any]:
        """Create a queue with the given name, or return the existing one."""
        require_id(name, "name")
        return await self._fetch("POST", query={"name": name}, retry=retry)

    async def list(
        self,
        *,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        desc: Optional[bool] = None,
        unnamed: Optional[bool] = None,
        retry: Optional[RetryConfig] = None,
    ) -> ResponseEnvelope:
        options = build_options(ListOptions, limit=limit, offset=offset, desc=desc, unnamed=unnamed)
        return await self._list(options.to_query(), retry=retry)

    async def get(self, queue_id: str, *, retry: Optional[RetryConfig] = None) -> Optional[Dict[str, Any]]:
        require_id(queue_id, "queue_id")
        return await self._get_object(f"/{queue_id}", retry=retry)

    async def update(
        self, queue_id: str, queue: Dict[str, Any], *, retry: Optional[RetryConfig] = None
    ) -> Dict[str, Any]:
        require_id(queue_id, "queue_id")
        require_mapping(queue, "queue")
        body = {key: value for key, value in queue.items() if key != "id"}
        return await self._fetch("PUT", f"/{queue_id}", body=body, retry=retry)

    async def delete(self, queue_id: str, *, retry: Optional[RetryConfig] = None) -> None:
        require_id(queue_id, "queue_id")
        await self._delete(f"/{queue_id}", retry=retry)

    async def add_request(
        self,
        queue_id: str,
        request: Dict[str, Any],
        *,
        forefront: Optional[bool] = None,
        client_key: Optional[str] = None,
        retry: Optional[RetryConfig] = None,
    ) -> Dict[str, Any]:
        """Add a request to the queue.

        Args:
            queue_id: Queue ID
            request: Request object, must not have an ``id`` yet
            forefront: Put the request at the head of the queue
            client_key: Identifies the client for queue head locking

        Returns:
            Operation info (``requestId``, ``wasAlreadyPresent``, ``wasAlreadyHandled``)
        """
        require_id(queue_id, "queue_id")
        require_mapping(request, "request")
        if request.get("id"):
            raise ParameterValidationError("Request already has an 'id', use update_request() instead")
        options = build_options(RequestWriteOptions, forefront=forefront, client_key=client_key)
        return await self._fetch(
            "POST", f"/{queue_id}/requests", query=options.to_query(), body=request, retry=retry
        )

    async def get_request(
        self, queue_id: str, request_id: str, *, retry: Optional[RetryConfig] = None
    ) -> Optional[Dict[str, Any]]:
        """Get a request from the queue, None when it does not exist."""
        require_id(queue_id, "queue_id")
        require_id(request_id, "request_id")
        return await self._get_object(f"/{queue_id}/requests/{request_id}", retry=retry)

    async def update_request(
        self,
        queue_id: str,
        request: Dict[str, Any],
        *,
        forefront: Optional[bool] = None,
        client_key: Optional[str] = None,
        retry: Optional[RetryConfig] = None,
    ) -> Dict[str, Any]:
        """Update a request; ``request["id"]`` selects the request."""
        require_id(queue_id, "queue_id")
        require_mapping(request, "request")
        request_id = require_id(request.get("id"), "request.id")
        options = build_options(RequestWriteOptions, forefront=forefront, client_key=client_key)
        return await self._fetch(
            "PUT", f"/{queue_id}/requests/{request_id}", query=options.to_query(), body=request, retry=retry
        )

    async def delete_request(self, queue_id: str, request_id: str, *, retry: Optional[RetryConfig] = None) -> None:
        """Delete a request. Deleting a missing request is not an error."""
        require_id(queue_id, "queue_id")
        require_id(request_id, "request_id")
        await self._delete(f"/{queue_id}/requests/{request_id}", retry=retry)

    async def get_head(
        self,
        queue_id: str,
        *,
        limit: Optional[int] = None,
        client_key: Optional[str] = None,
        retry: Optional[RetryConfig] = None,
    ) -> Dict[str, Any]:
        """Get the first requests of the queue without removing them.

        Returns:
            ``{limit, queueModifiedAt, hadMultipleClients, items}``
        """
        require_id(queue_id, "queue_id")
        options = build_options(QueueHeadOptions, limit=limit, client_key=client_key)
        return await self._fetch("GET", f"/{queue_id}/head", query=options.to_query(), retry=retry)
