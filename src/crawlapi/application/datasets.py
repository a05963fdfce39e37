"""Datasets endpoint"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Union

from crawlapi.application.endpoint import Endpoint
from crawlapi.domain.config import RetryConfig
from crawlapi.domain.errors import (
    BodyParseError,
    IncompleteBodyError,
    NotFoundError,
    ParameterValidationError,
)
from crawlapi.domain.models.envelope import ResponseEnvelope
from crawlapi.domain.models.options import (
    DatasetItemsOptions,
    ListOptions,
    build_options,
    require_id,
    require_mapping,
)
from crawlapi.domain.models.outcome import AttemptOutcome, Retryable, Success, Terminal
from crawlapi.infrastructure.http_client import HttpTransport, ResponseMode, classify_response
from crawlapi.infrastructure.normalizer import catch_not_found, wrap_items
from crawlapi.infrastructure.retry import run_with_retry

logger = logging.getLogger(__name__)

ItemsData = Union[Dict[str, Any], List[Dict[str, Any]], str]


class DatasetsEndpoint(Endpoint):
    """Datasets: append-only stores of structured records.

    Usage:
        dataset = await client.datasets.get_or_create("my-dataset")
        await client.datasets.put_items(dataset["id"], [{"foo": "bar"}])
        page = await client.datasets.get_items(dataset["id"], limit=100)
        for item in page.items:
            ...
    """

    def __init__(self, transport: HttpTransport, retry_config: RetryConfig):
        super().__init__(transport, "/v2/datasets", retry_config)

    async def get_or_create(self, name: str, *, retry: Optional[RetryConfig] = None) -> Dict[str, Any]:
        """Create a dataset with the given name, or return the existing one."""
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
        """List datasets owned by the user, sorted by ``createdAt``.

        Args:
            limit: Maximum number of datasets (the API caps it at 1000)
            offset: Number of datasets to skip
            desc: Sort descending
            unnamed: Include unnamed datasets

        Returns:
            Envelope with the dataset objects and pagination counters
        """
        options = build_options(ListOptions, limit=limit, offset=offset, desc=desc, unnamed=unnamed)
        return await self._list(options.to_query(), retry=retry)

    async def get(self, dataset_id: str, *, retry: Optional[RetryConfig] = None) -> Optional[Dict[str, Any]]:
        """Get a dataset, None when it does not exist.

        ``dataset_id`` may also be ``username~dataset-name``.
        """
        require_id(dataset_id, "dataset_id")
        return await self._get_object(f"/{dataset_id}", retry=retry)

    async def update(
        self, dataset_id: str, dataset: Dict[str, Any], *, retry: Optional[RetryConfig] = None
    ) -> Dict[str, Any]:
        """Update dataset fields (for example ``name``). ``id`` in the body is ignored."""
        require_id(dataset_id, "dataset_id")
        require_mapping(dataset, "dataset")
        body = {key: value for key, value in dataset.items() if key != "id"}
        return await self._fetch("PUT", f"/{dataset_id}", body=body, retry=retry)

    async def delete(self, dataset_id: str, *, retry: Optional[RetryConfig] = None) -> None:
        """Delete a dataset. Deleting a missing dataset is not an error."""
        require_id(dataset_id, "dataset_id")
        await self._delete(f"/{dataset_id}", retry=retry)

    async def get_items(
        self, dataset_id: str, *, retry: Optional[RetryConfig] = None, **options: Any
    ) -> Optional[ResponseEnvelope]:
        """Get dataset items.

        Keyword options are the fields of ``DatasetItemsOptions`` (format,
        offset, limit, desc, fields, omit, unwind, delimiter, xml_root,
        xml_row, attachment, bom, skip_header_row, clean, skip_hidden,
        skip_empty, simplified, skip_failed_pages, disable_body_parser).

        The body is parsed according to its content type unless
        ``disable_body_parser`` is set. A truncated JSON body is retried like
        a 5xx response; any other parse failure is raised immediately.

        Returns:
            Envelope whose ``items`` are the parsed body, with pagination taken
            from the response headers. None when the dataset does not exist.
        """
        require_id(dataset_id, "dataset_id")
        items_options = build_options(DatasetItemsOptions, **options)
        url = self._url(f"/{dataset_id}/items")
        query = items_options.to_query()
        parse_body = not items_options.disable_body_parser

        async def _attempt() -> AttemptOutcome:
            response = await self.transport.send("GET", url, query=query, response_mode=ResponseMode.RAW)
            outcome = classify_response(response, f"GET {url}")
            if not isinstance(outcome, Success):
                return outcome
            try:
                return Success(wrap_items(response, parse_body=parse_body))
            except IncompleteBodyError as e:
                return Retryable(e)
            except BodyParseError as e:
                return Terminal(e)

        try:
            return await run_with_retry(_attempt, retry or self.retry_config, f"GET {url}")
        except NotFoundError as e:
            return catch_not_found(e)

    async def put_items(self, dataset_id: str, data: ItemsData, *, retry: Optional[RetryConfig] = None) -> None:
        """Store an object, a list of objects or a JSON string in the dataset."""
        require_id(dataset_id, "dataset_id")
        if not isinstance(data, (dict, list, str)):
            raise ParameterValidationError(
                f"Parameter 'data' must be an object, a list or a JSON string, got {type(data).__name__}"
            )
        await self._call("POST", f"/{dataset_id}/items", body=data, retry=retry)
