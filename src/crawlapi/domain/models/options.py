"""Per-operation option models.

Each model fixes the accepted fields and their types. Values are checked in
strict mode (no coercion, so ``"5"`` is not a valid ``limit``) and unknown
fields are rejected. ``to_query()`` renders the model as API query params.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from crawlapi.domain.errors import ParameterValidationError

OptionsT = TypeVar("OptionsT", bound="CallOptions")

ItemsFormat = Literal["json", "jsonl", "csv", "xlsx", "html", "xml", "rss"]


def _flag(value: Optional[bool]) -> Optional[int]:
    """Booleans go out as 1 when set and are omitted otherwise."""
    return 1 if value else None


def _joined(values: Optional[List[str]]) -> Optional[str]:
    return ",".join(values) if values else None


def _compact(query: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in query.items() if value is not None}


class CallOptions(BaseModel):
    """Base of all option models."""

    model_config = ConfigDict(extra="forbid", strict=True, frozen=True)

    def to_query(self) -> Dict[str, Any]:
        return {}


class PaginationOptions(CallOptions):
    """Pagination of list endpoints.

    Attributes:
        limit: Maximum number of records to return; 0 is left out of the query
        offset: Number of records to skip; 0 is left out of the query
        desc: Sort by creation time descending
    """

    limit: Optional[int] = Field(None, ge=0)
    offset: Optional[int] = Field(None, ge=0)
    desc: Optional[bool] = None

    def to_query(self) -> Dict[str, Any]:
        return _compact(
            {
                "limit": self.limit or None,
                "offset": self.offset or None,
                "desc": _flag(self.desc),
            }
        )


class ListOptions(PaginationOptions):
    """Pagination of storage list endpoints, plus ``unnamed`` stores."""

    unnamed: Optional[bool] = None

    def to_query(self) -> Dict[str, Any]:
        query = super().to_query()
        if self.unnamed:
            query["unnamed"] = 1
        return query


class DatasetItemsOptions(CallOptions):
    """Export options of the dataset items endpoint.

    ``bom`` is the one flag sent explicitly as ``0`` when False: the API adds
    a byte order mark to CSV output by default, so omitting the flag does not
    disable it.

    ``disable_body_parser`` is local only, it keeps the body as returned.
    """

    format: Optional[ItemsFormat] = None
    offset: Optional[int] = Field(None, ge=0)
    limit: Optional[int] = Field(None, ge=0)
    desc: Optional[bool] = None
    fields: Optional[List[str]] = None
    omit: Optional[List[str]] = None
    unwind: Optional[str] = None
    delimiter: Optional[str] = None
    xml_root: Optional[str] = None
    xml_row: Optional[str] = None
    attachment: Optional[bool] = None
    bom: Optional[bool] = None
    skip_header_row: Optional[bool] = None
    clean: Optional[bool] = None
    skip_hidden: Optional[bool] = None
    skip_empty: Optional[bool] = None
    simplified: Optional[bool] = None
    skip_failed_pages: Optional[bool] = None
    disable_body_parser: bool = False

    def to_query(self) -> Dict[str, Any]:
        query = _compact(
            {
                "format": self.format,
                "offset": self.offset,
                "limit": self.limit,
                "unwind": self.unwind,
                "delimiter": self.delimiter,
                "xmlRoot": self.xml_root,
                "xmlRow": self.xml_row,
                "fields": _joined(self.fields),
                "omit": _joined(self.omit),
                "desc": _flag(self.desc),
                "attachment": _flag(self.attachment),
                "skipHeaderRow": _flag(self.skip_header_row),
                "clean": _flag(self.clean),
                "skipHidden": _flag(self.skip_hidden),
                "skipEmpty": _flag(self.skip_empty),
                "simplified": _flag(self.simplified),
                "skipFailedPages": _flag(self.skip_failed_pages),
            }
        )
        if self.bom is not None:
            query["bom"] = 1 if self.bom else 0
        return query


class QueueHeadOptions(CallOptions):
    """Options of the request queue head endpoint."""

    limit: Optional[int] = Field(None, ge=0)
    client_key: Optional[str] = None

    def to_query(self) -> Dict[str, Any]:
        return _compact({"limit": self.limit, "clientKey": self.client_key})


class RequestWriteOptions(CallOptions):
    """Options of request add/update endpoints."""

    forefront: Optional[bool] = None
    client_key: Optional[str] = None

    def to_query(self) -> Dict[str, Any]:
        return _compact({"forefront": _flag(self.forefront), "clientKey": self.client_key})


def build_options(options_cls: Type[OptionsT], **values: Any) -> OptionsT:
    """Validate keyword arguments against an option model.

    Raises:
        ParameterValidationError: If a value has the wrong type or a field is unknown
    """
    try:
        return options_cls(**values)
    except ValidationError as e:
        errors = []
        for error in e.errors():
            field = ".".join(str(x) for x in error["loc"])
            errors.append(f"{field}: {error['msg']}")
        raise ParameterValidationError("Invalid parameters: " + "; ".join(errors)) from e


def require_id(value: Any, name: str) -> str:
    """Check that an identifier parameter is a non-empty string."""
    if not isinstance(value, str) or not value:
        raise ParameterValidationError(f"Parameter '{name}' must be a non-empty string, got {value!r}")
    return value


def require_mapping(value: Any, name: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise ParameterValidationError(f"Parameter '{name}' must be an object, got {type(value).__name__}")
    return value
