"""Attempt outcome - tagged result of a single retried operation attempt"""

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class Success:
    """Attempt succeeded, stop and return ``value``"""

    value: Any


@dataclass(frozen=True)
class Retryable:
    """Attempt failed, may be retried"""

    error: Exception


@dataclass(frozen=True)
class Terminal:
    """Attempt failed, stop immediately and raise ``error``"""

    error: Exception


AttemptOutcome = Union[Success, Retryable, Terminal]
