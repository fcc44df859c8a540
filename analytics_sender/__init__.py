# -*- coding: utf-8 -*-

__author__ = """analytics-sender contributors"""

import os

ROOT = os.path.dirname(os.path.abspath(__file__))

with open(os.path.join(ROOT, 'VERSION')) as version_file:
    VERSION = version_file.read().strip()

__version__ = VERSION

from .backoff import BackoffPolicy  # noqa: E402
from .batch import MessageBatch  # noqa: E402
from .callbacks import DeliveryCallbacks, NullDeliveryCallbacks, SendState  # noqa: E402
from .config import WorkerConfig  # noqa: E402
from .response import Outcome, Response  # noqa: E402
from .serialization import JsonSerializer  # noqa: E402
from .transport import HttpTransport, StubTransport  # noqa: E402
from .worker import Worker  # noqa: E402

__all__ = [
    "BackoffPolicy",
    "DeliveryCallbacks",
    "HttpTransport",
    "JsonSerializer",
    "MessageBatch",
    "NullDeliveryCallbacks",
    "Outcome",
    "Response",
    "SendState",
    "StubTransport",
    "Worker",
    "WorkerConfig",
]
