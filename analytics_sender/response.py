from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Outcome(Enum):
    """Classification of a send attempt."""

    SUCCESS = "success"
    CLIENT_ERROR = "client_error"
    TRANSIENT = "transient"


@dataclass(frozen=True)
class Response:
    status: int
    error: str = ""

    @property
    def outcome(self) -> Outcome:
        return classify(self.status)

    @property
    def is_success(self) -> bool:
        return self.outcome is Outcome.SUCCESS


def classify(status: int) -> Outcome:
    """
    2xx is delivered, 4xx is the request's fault and final; everything else
    (5xx, -1 for network or unknown failures) is worth retrying.
    """
    if 200 <= status < 300:
        return Outcome.SUCCESS
    if 400 <= status < 500:
        return Outcome.CLIENT_ERROR
    return Outcome.TRANSIENT
