from __future__ import annotations

from typing import List

from .constants import DEFAULT_BATCH_SIZE, MAX_BATCH_BYTES, MAX_MESSAGE_BYTES
from .errors import BatchFullError


class MessageBatch:
    """
    Bounded accumulator of serialized messages.

    Full triggers: max_message_count, or accumulated bytes leaving less room
    than one maximal message under max_bytes. The second rule guarantees that
    a message accepted by the serializer always fits in a non-full batch.
    """

    def __init__(
        self,
        max_message_count: int = DEFAULT_BATCH_SIZE,
        max_bytes: int = MAX_BATCH_BYTES,
        max_message_bytes: int = MAX_MESSAGE_BYTES,
    ):
        self.max_message_count = max_message_count
        self.max_bytes = max_bytes
        self.max_message_bytes = max_message_bytes

        self._fragments: List[str] = []
        self._size = 0

    def __len__(self) -> int:
        return len(self._fragments)

    @property
    def size(self) -> int:
        return self._size

    def is_empty(self) -> bool:
        return not self._fragments

    def is_full(self) -> bool:
        return self._count_exhausted() or self._size_exhausted()

    def _count_exhausted(self) -> bool:
        return len(self._fragments) >= self.max_message_count

    def _size_exhausted(self) -> bool:
        return self._size >= self.max_bytes - self.max_message_bytes

    def append(self, fragment: str) -> None:
        if self.is_full():
            raise BatchFullError(
                self.max_message_count if self._count_exhausted() else None
            )

        self._fragments.append(fragment)
        # one byte for the separating comma in the payload
        self._size += len(fragment.encode("utf-8")) + 1

    def fragments(self) -> List[str]:
        return list(self._fragments)

    def to_payload(self) -> str:
        """
        JSON array text of the accumulated fragments.
        """
        return "[" + ",".join(self._fragments) + "]"

    def clear(self) -> None:
        self._fragments.clear()
        self._size = 0
