"""Response normalization.

Turns transport responses into the values returned by endpoint methods:
unwraps ``data``, builds pagination envelopes, parses known date fields and
item bodies in the supported export formats.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from crawlapi.domain.errors import BodyParseError, NotFoundError
from crawlapi.domain.models.envelope import Pagination, ResponseEnvelope
from crawlapi.infrastructure.http_client import RawResponse
from crawlapi.infrastructure.json_body import loads_body

logger = logging.getLogger(__name__)

DATE_FIELDS = frozenset(
    {
        "createdAt",
        "modifiedAt",
        "startedAt",
        "finishedAt",
        "accessedAt",
        "deletedAt",
        "expiresAt",
        "lastRunStartedAt",
        "handledAt",
        "queueModifiedAt",
    }
)
DATE_FIELDS_MAX_DEPTH = 3

PAGINATION_HEADER_PREFIX = "x-apify-pagination-"

_ISO_TIMESTAMP = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}")

_TEXT_CONTENT_TYPES = (
    "application/xml",
    "application/rss+xml",
    "application/xhtml+xml",
)


def pluck_data(body: Any) -> Any:
    """Return ``body["data"]`` when the API wrapped the payload, else the body."""
    if isinstance(body, dict) and "data" in body:
        return body["data"]
    return body


def _fromisoformat(text: str) -> Optional[datetime]:
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        # Fractions other than 3 or 6 digits are rejected by older interpreters
        match = re.match(r"^(.*T\d{2}:\d{2}:\d{2})\.(\d+)(.*)$", text)
        if not match:
            return None
        head, fraction, tail = match.groups()
        try:
            return datetime.fromisoformat(f"{head}.{fraction[:6].ljust(6, '0')}{tail}")
        except ValueError:
            return None


def _parse_timestamp(value: str) -> Any:
    if not _ISO_TIMESTAMP.match(value):
        return value
    parsed = _fromisoformat(value[:-1] + "+00:00" if value.endswith("Z") else value)
    if parsed is None:
        return value
    # The API sends UTC; timestamps without an offset are UTC too
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_date_fields(payload: Any, max_depth: int = DATE_FIELDS_MAX_DEPTH, _depth: int = 0) -> Any:
    """Convert allow-listed timestamp fields to ``datetime``.

    Follows lists and dicts only, up to ``max_depth`` levels. Strings that are
    not ISO-8601 timestamps are kept as they are. Returns a new structure.
    """
    if _depth > max_depth:
        return payload

    if isinstance(payload, list):
        return [parse_date_fields(item, max_depth, _depth + 1) for item in payload]

    if isinstance(payload, dict):
        result: Dict[str, Any] = {}
        for key, value in payload.items():
            if key in DATE_FIELDS and isinstance(value, str):
                result[key] = _parse_timestamp(value)
            else:
                result[key] = parse_date_fields(value, max_depth, _depth + 1)
        return result

    return payload


def _to_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def to_envelope(body: Any, paginated: bool = False) -> ResponseEnvelope:
    """Build an envelope from a JSON response body.

    For list endpoints the API returns ``{total, offset, limit, count, desc, items}``
    inside ``data``; the items become ``data`` and the counters ``pagination``.
    """
    data = parse_date_fields(pluck_data(body))
    if not paginated:
        return ResponseEnvelope(data=data)

    page = data if isinstance(data, dict) else {}
    desc = page.get("desc")
    return ResponseEnvelope(
        data=page.get("items", []),
        pagination=Pagination(
            limit=_to_int(page.get("limit")),
            offset=_to_int(page.get("offset")),
            count=_to_int(page.get("count")),
            total=_to_int(page.get("total")),
            desc=desc if isinstance(desc, bool) else None,
        ),
    )


def is_not_found(error: BaseException) -> bool:
    return isinstance(error, NotFoundError) or getattr(error, "status_code", None) == 404


def catch_not_found(error: BaseException) -> None:
    """Return None for a 404 error, re-raise anything else.

    Only for get-style reads; every other operation lets a 404 propagate.
    """
    if is_not_found(error):
        logger.debug(f"Resource not found: {error}")
        return None
    raise error


def _media_type(content_type: str) -> str:
    return content_type.split(";", 1)[0].strip().lower()


def _charset(content_type: str) -> str:
    for part in content_type.split(";")[1:]:
        key, _, value = part.strip().partition("=")
        if key.lower() == "charset" and value:
            return value.strip('"')
    return "utf-8"


def parse_items_body(body: bytes, content_type: str) -> Any:
    """Parse an items body according to its content type.

    JSON gives the decoded records, JSONL a list of records (one per line),
    textual formats (CSV, HTML, XML, RSS) a string, anything else (XLSX) the
    bytes unchanged.

    Raises:
        IncompleteBodyError: The JSON body was cut short (retryable)
        BodyParseError: The body is malformed for another reason (terminal)
    """
    media_type = _media_type(content_type)
    is_json = media_type == "application/json" or media_type.endswith("+json")
    is_jsonl = media_type in ("application/jsonl", "application/x-ndjson", "application/x-jsonlines")
    is_text = media_type.startswith("text/") or media_type in _TEXT_CONTENT_TYPES

    if not (is_json or is_jsonl or is_text):
        return body

    try:
        text = body.decode(_charset(content_type))
    except (UnicodeDecodeError, LookupError) as e:
        raise BodyParseError(f"Cannot decode response body as {content_type}: {e}") from e
    # Byte order mark is optional for every format
    text = text.lstrip("\ufeff")

    if is_json:
        return loads_body(text)
    if is_jsonl:
        return [loads_body(line) for line in text.splitlines() if line.strip()]
    return text


def _pagination_from_headers(headers: Mapping[str, str]) -> Pagination:
    values: Dict[str, Optional[int]] = {}
    for key, value in headers.items():
        key = key.lower()
        if key.startswith(PAGINATION_HEADER_PREFIX):
            values[key[len(PAGINATION_HEADER_PREFIX):]] = _to_int(value)
    return Pagination(
        limit=values.get("limit"),
        offset=values.get("offset"),
        count=values.get("count"),
        total=values.get("total"),
    )


def wrap_items(response: RawResponse, parse_body: bool = True) -> ResponseEnvelope:
    """Build the item container of an items response.

    Pagination comes from the ``X-Apify-Pagination-*`` headers.
    """
    body = response.body if response.body is not None else b""
    items = parse_items_body(body, response.content_type) if parse_body else body
    return ResponseEnvelope(data=items, pagination=_pagination_from_headers(response.headers))
