"""Response envelope - normalized wrapper around API responses"""

from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Pagination:
    """Pagination counters of a list or items response"""

    limit: Optional[int] = None
    offset: Optional[int] = None
    count: Optional[int] = None
    total: Optional[int] = None
    desc: Optional[bool] = None


@dataclass(frozen=True)
class ResponseEnvelope(Generic[T]):
    """Normalized response.

    ``pagination`` is only set for list-style and items operations.
    """

    data: T
    pagination: Optional[Pagination] = None

    @property
    def is_paginated(self) -> bool:
        return self.pagination is not None

    @property
    def items(self) -> Any:
        """Alias of ``data`` for item containers"""
        return self.data
