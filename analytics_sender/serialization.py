from __future__ import annotations

import json
from datetime import date, datetime
from typing import Any, Mapping, Protocol

from .constants import MAX_MESSAGE_BYTES
from .errors import MessageTooLargeError, SerializationError


class Serializer(Protocol):
    def serialize(self, message: Any) -> str: ...


def _default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class JsonSerializer:
    """
    Turns a message mapping into a compact JSON fragment.

    Raises ``SerializationError`` for anything that cannot be encoded and
    ``MessageTooLargeError`` when the encoded fragment exceeds ``max_bytes``.
    """

    def __init__(self, max_bytes: int = MAX_MESSAGE_BYTES):
        self.max_bytes = max_bytes

    def serialize(self, message: Any) -> str:
        if not isinstance(message, Mapping):
            raise SerializationError(
                f"expected a mapping, got {type(message).__name__}"
            )

        try:
            fragment = json.dumps(
                message, separators=(",", ":"), default=_default, allow_nan=False
            )
        except (TypeError, ValueError, RecursionError) as e:
            raise SerializationError(str(e)) from e

        size = len(fragment.encode("utf-8"))
        if size > self.max_bytes:
            raise MessageTooLargeError(size, self.max_bytes)

        return fragment
