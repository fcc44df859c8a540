"""Observer interface for batch delivery."""

from enum import Enum
from typing import Protocol


class SendState(Enum):
    """States of one batch's send cycle."""

    IDLE = "idle"
    SENDING = "sending"
    SUCCESS = "success"
    CLIENT_ERROR = "client_error"
    REPORTED = "reported"
    TRANSIENT_ERROR = "transient_error"
    BACKOFF_WAIT = "backoff_wait"
    RETRY_EXHAUSTED = "retry_exhausted"
    DROPPED = "dropped"


class DeliveryCallbacks(Protocol):
    def state_change(self, state: SendState) -> None: ...
    def batch_sent(self, count: int) -> None: ...
    def batch_dropped(self, count: int, state: SendState) -> None: ...


class NullDeliveryCallbacks:
    def state_change(self, state: SendState) -> None:
        pass

    def batch_sent(self, count: int) -> None:
        pass

    def batch_dropped(self, count: int, state: SendState) -> None:
        pass
