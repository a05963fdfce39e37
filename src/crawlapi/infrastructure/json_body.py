"""JSON body decoding shared by the transport and the items parser.

A body that stops early (connection closed mid-transfer) is reported as
``IncompleteBodyError`` and retried; any other malformed body is a
``BodyParseError`` and is not.
"""

from __future__ import annotations

import json
import re
from typing import Any

from crawlapi.domain.errors import BodyParseError, IncompleteBodyError

_LITERALS = ("true", "false", "null")

# What can be left of a number cut short: "-", "1.", "1e", "1e+"
_PARTIAL_NUMBER = re.compile(r"-?\d*\.?\d*([eE][+-]?\d*)?")


def is_truncated(error: json.JSONDecodeError) -> bool:
    """Whether the decode error comes from a document that ends too early."""
    if error.msg.startswith("Unterminated string"):
        return True
    if error.msg.startswith("Extra data"):
        return False
    rest = error.doc[error.pos:].strip()
    if not rest:
        return True
    if any(literal.startswith(rest) and literal != rest for literal in _LITERALS):
        return True
    return _PARTIAL_NUMBER.fullmatch(rest) is not None


def loads_body(text: str) -> Any:
    """Decode a JSON document.

    Raises:
        IncompleteBodyError: The document was cut short
        BodyParseError: The document is malformed for another reason
    """
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        if is_truncated(e):
            raise IncompleteBodyError(f"Response body is incomplete: {e}") from e
        raise BodyParseError(f"Response body is not valid JSON: {e}") from e
