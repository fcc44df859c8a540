from __future__ import annotations

import json
import logging
import platform
from datetime import datetime, timezone
from typing import List, Optional, Protocol

import httpx

from .constants import (
    BATCH_PATH,
    DEFAULT_DATA_PLANE_URL,
    DEFAULT_REQUEST_TIMEOUT,
    STATUS_UNKNOWN_ERROR,
)
from .response import Response

logger = logging.getLogger(__name__)

RETRYABLE_EXCEPTIONS = (
    httpx.TimeoutException,
    httpx.NetworkError,
    httpx.RemoteProtocolError,
    httpx.ProxyError,
)


class Transport(Protocol):
    def send(self, write_key: str, payload: str) -> Response: ...


def get_user_agent() -> str:
    from . import __version__

    return (
        f"analytics-sender/{__version__} "
        f"({platform.system()}; Python/{platform.python_version()})"
    )


def build_body(payload: str, sent_at: Optional[datetime] = None) -> str:
    """
    Wrap a JSON array of messages into the batch envelope.
    """
    sent_at = sent_at or datetime.now(timezone.utc)
    return '{"batch":%s,"sentAt":%s}' % (payload, json.dumps(sent_at.isoformat()))


def extract_error(response: httpx.Response) -> str:
    """
    Pull a human readable error out of a failed response.
    """
    try:
        data = response.json()
    except (json.JSONDecodeError, ValueError):
        return response.text or response.reason_phrase

    if isinstance(data, dict):
        for key in ("error", "message", "detail"):
            if data.get(key):
                return str(data[key])

    return response.text or response.reason_phrase


class HttpTransport:
    """Synchronous httpx transport posting batches to a data plane."""

    def __init__(
        self,
        data_plane_url: str = DEFAULT_DATA_PLANE_URL,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        http_client: Optional[httpx.Client] = None,
    ):
        self.url = data_plane_url.rstrip("/") + BATCH_PATH
        self.timeout = timeout
        self._owns_client = http_client is None
        self.client = http_client or httpx.Client(timeout=timeout)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def close(self) -> None:
        # Don't close injected client - let caller manage lifecycle
        if self._owns_client:
            self.client.close()

    def send(self, write_key: str, payload: str) -> Response:
        try:
            resp = self.client.post(
                self.url,
                content=build_body(payload),
                headers={
                    "Content-Type": "application/json",
                    "Accept": "application/json",
                    "User-Agent": get_user_agent(),
                },
                auth=(write_key, ""),
                timeout=self.timeout,
            )
        except RETRYABLE_EXCEPTIONS as e:
            logger.warning("Request to %s failed: %s", self.url, e)
            return Response(STATUS_UNKNOWN_ERROR, f"{type(e).__name__}: {e}")

        if resp.is_success:
            return Response(resp.status_code, "")

        return Response(resp.status_code, extract_error(resp))


class StubTransport:
    """
    Transport that never touches the network.

    Every send succeeds unless ``responses`` is given, in which case they are
    returned in order and the last one repeats.
    """

    def __init__(self, responses: Optional[List[Response]] = None):
        self.responses = list(responses or [Response(200, "")])
        self.sent: List[str] = []

    def send(self, write_key: str, payload: str) -> Response:
        self.sent.append(payload)
        index = min(len(self.sent), len(self.responses)) - 1
        return self.responses[index]
