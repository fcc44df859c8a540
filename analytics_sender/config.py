from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields, replace
from typing import Any, Callable, Mapping, Optional

from .backoff import BackoffPolicy
from .callbacks import DeliveryCallbacks, NullDeliveryCallbacks
from .constants import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_DATA_PLANE_URL,
    DEFAULT_REQUEST_TIMEOUT,
    ENV_BACKOFF_INITIAL,
    ENV_BATCH_SIZE,
    ENV_DATA_PLANE_URL,
    ENV_MAX_RETRIES,
    ENV_REQUEST_TIMEOUT,
    MAX_BATCH_BYTES,
    MAX_BATCH_SIZE,
    MAX_MESSAGE_BYTES,
)
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

ErrorCallback = Callable[[int, str], None]


def _ignore_error(status: int, error: str) -> None:
    pass


@dataclass(frozen=True)
class WorkerConfig:
    batch_size: int = DEFAULT_BATCH_SIZE
    on_error: Optional[ErrorCallback] = field(default=_ignore_error, compare=False)
    backoff: BackoffPolicy = field(default_factory=BackoffPolicy)
    max_batch_bytes: int = MAX_BATCH_BYTES
    max_message_bytes: int = MAX_MESSAGE_BYTES
    report_exhausted: bool = False
    callbacks: DeliveryCallbacks = field(
        default_factory=NullDeliveryCallbacks, compare=False
    )

    def __post_init__(self) -> None:
        if self.on_error is None:
            object.__setattr__(self, "on_error", _ignore_error)
        if (
            not isinstance(self.batch_size, int)
            or isinstance(self.batch_size, bool)
            or self.batch_size < 1
        ):
            raise ConfigurationError("batch_size", "must be a positive integer")
        if self.batch_size > MAX_BATCH_SIZE:
            logger.warning(
                "batch_size %s exceeds the maximum of %s, clamping",
                self.batch_size,
                MAX_BATCH_SIZE,
            )
            object.__setattr__(self, "batch_size", MAX_BATCH_SIZE)
        if not callable(self.on_error):
            raise ConfigurationError("on_error", "must be callable")
        if not isinstance(self.backoff, BackoffPolicy):
            raise ConfigurationError("backoff", "must be a BackoffPolicy")
        if self.max_message_bytes < 1:
            raise ConfigurationError("max_message_bytes", "must be positive")
        if self.max_batch_bytes <= self.max_message_bytes:
            raise ConfigurationError(
                "max_batch_bytes", "must be larger than max_message_bytes"
            )

    @classmethod
    def from_options(
        cls, options: Optional[Mapping[Any, Any]] = None, **kwargs: Any
    ) -> "WorkerConfig":
        """
        Build a config from an options mapping and/or keyword arguments.

        Keys may be given as strings or keywords. Values missing from both are
        taken from the environment, then from the defaults.
        """
        merged = {str(k): v for k, v in (options or {}).items()}
        merged.update(kwargs)

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(merged) - known)
        if unknown:
            raise ConfigurationError(unknown[0], "unrecognized option")

        values = from_environment()
        values.update(merged)
        return cls(**values)

    def with_options(self, **changes: Any) -> "WorkerConfig":
        return replace(self, **changes)


def _env_number(name: str, cast: Callable[[str], Any]) -> Optional[Any]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        return cast(raw)
    except ValueError:
        raise ConfigurationError(name, f"expected a number, got {raw!r}")


def from_environment() -> dict:
    """
    Options derived from ANALYTICS_SENDER_* variables.
    """
    values: dict = {}

    batch_size = _env_number(ENV_BATCH_SIZE, int)
    if batch_size is not None:
        values["batch_size"] = batch_size

    initial = _env_number(ENV_BACKOFF_INITIAL, float)
    retries = _env_number(ENV_MAX_RETRIES, int)
    if initial is not None or retries is not None:
        policy = BackoffPolicy()
        if initial is not None:
            policy = replace(
                policy, initial=initial, max_delay=max(policy.max_delay, initial)
            )
        if retries is not None:
            policy = replace(policy, max_attempts=retries + 1)
        values["backoff"] = policy

    return values


def request_timeout() -> float:
    timeout = _env_number(ENV_REQUEST_TIMEOUT, float)
    return DEFAULT_REQUEST_TIMEOUT if timeout is None else timeout


def data_plane_url() -> str:
    return os.getenv(ENV_DATA_PLANE_URL) or DEFAULT_DATA_PLANE_URL
