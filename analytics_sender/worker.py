from __future__ import annotations

import logging
import threading
from queue import Empty, Queue
from typing import Any, Mapping, Optional, Union

from tenacity import RetryCallState, RetryError

from .batch import MessageBatch
from .callbacks import SendState
from .config import WorkerConfig, data_plane_url, request_timeout
from .constants import STATUS_RETRY_EXHAUSTED, STATUS_UNKNOWN_ERROR
from .errors import SerializationError
from .response import Outcome, Response
from .serialization import JsonSerializer, Serializer
from .transport import HttpTransport, Transport

logger = logging.getLogger(__name__)


def _is_transient(response: Response) -> bool:
    return response.outcome is Outcome.TRANSIENT


class Worker:
    """
    Drains a shared queue of messages into batches and delivers them.

    ``run()`` returns once it observes the queue empty; messages enqueued later
    need another ``run()``. Failures never escape ``run()``: serialization
    failures and client errors go to ``on_error``, transient failures are
    retried per the configured ``BackoffPolicy`` and dropped once the budget
    is spent.
    """

    def __init__(
        self,
        queue: "Queue[Any]",
        write_key: str,
        options: Union[WorkerConfig, Mapping[Any, Any], None] = None,
        transport: Optional[Transport] = None,
        serializer: Optional[Serializer] = None,
        **kwargs: Any,
    ):
        if isinstance(options, WorkerConfig):
            self.config = options.with_options(**kwargs) if kwargs else options
        else:
            self.config = WorkerConfig.from_options(options, **kwargs)

        self.queue = queue
        self.write_key = write_key
        self._owns_transport = transport is None
        if transport is None:
            transport = HttpTransport(data_plane_url(), timeout=request_timeout())
        self.transport = transport
        self.serializer = serializer or JsonSerializer(self.config.max_message_bytes)

        self.batch = self._new_batch()
        self.state = SendState.IDLE

        # Set/cleared around every transport call; read without locking.
        self._in_flight = threading.Event()
        self._idle = threading.Event()
        self._idle.set()

        self._run_lock = threading.Lock()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def close(self) -> None:
        """
        Release the transport if this worker created it. Injected transports
        are left to the caller.
        """
        if self._owns_transport:
            self.transport.close()

    def run(self) -> None:
        with self._run_lock:
            while not self.queue.empty():
                try:
                    self._cycle()
                except Exception:
                    logger.exception("Unexpected error while delivering a batch")
                    self._transition(SendState.IDLE)

    def is_requesting(self) -> bool:
        return self._in_flight.is_set()

    def wait_for_request(self, timeout: Optional[float] = None) -> bool:
        """
        Block until a transport call is outstanding. Returns False on timeout.
        """
        return self._in_flight.wait(timeout)

    def wait_until_idle(self, timeout: Optional[float] = None) -> bool:
        """
        Block until no transport call is outstanding. Returns False on timeout.
        """
        return self._idle.wait(timeout)

    def _new_batch(self) -> MessageBatch:
        return MessageBatch(
            max_message_count=self.config.batch_size,
            max_bytes=self.config.max_batch_bytes,
            max_message_bytes=self.config.max_message_bytes,
        )

    def _cycle(self) -> None:
        self.batch = self._new_batch()
        self._fill_batch()

        if self.batch.is_empty():
            logger.debug("No deliverable messages in this cycle, skipping send")
            return

        self._deliver(self.batch)

    def _fill_batch(self) -> None:
        while not self.batch.is_full():
            try:
                message = self.queue.get_nowait()
            except Empty:
                break

            try:
                fragment = self.serializer.serialize(message)
            except Exception as e:
                error = e if isinstance(e, SerializationError) else SerializationError(str(e))
                logger.error("Dropping message: %s", error)
                self._report(STATUS_UNKNOWN_ERROR, str(error))
                continue

            self.batch.append(fragment)

    def _deliver(self, batch: MessageBatch) -> None:
        payload = batch.to_payload()
        count = len(batch)

        retrying = self.config.backoff.retrying(
            should_retry=_is_transient,
            before_sleep=self._before_backoff,
        )

        try:
            for attempt in retrying:
                with attempt:
                    response = self._send(payload)
                if not attempt.retry_state.outcome.failed:
                    attempt.retry_state.set_result(response)
        except RetryError as e:
            self._exhausted(count, e.last_attempt)
            return

        if response.outcome is Outcome.SUCCESS:
            self._transition(SendState.SUCCESS)
            logger.info("Delivered batch of %s messages", count)
            self._notify("batch_sent", count)
        else:
            self._transition(SendState.CLIENT_ERROR)
            logger.error(
                "Batch of %s messages rejected with status %s: %s",
                count,
                response.status,
                response.error,
            )
            self._report(response.status, response.error)
            self._transition(SendState.REPORTED)
            self._notify("batch_dropped", count, SendState.CLIENT_ERROR)

        self._transition(SendState.IDLE)

    def _send(self, payload: str) -> Response:
        self._transition(SendState.SENDING)
        self._idle.clear()
        self._in_flight.set()
        try:
            response = self.transport.send(self.write_key, payload)
        except Exception as e:
            logger.warning("Transport failed, treating as transient: %s", e, exc_info=True)
            response = Response(STATUS_UNKNOWN_ERROR, str(e) or type(e).__name__)
        finally:
            self._in_flight.clear()
            self._idle.set()

        if response.outcome is Outcome.TRANSIENT:
            self._transition(SendState.TRANSIENT_ERROR)

        return response

    def _before_backoff(self, retry_state: RetryCallState) -> None:
        response = retry_state.outcome.result()
        delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
        logger.warning(
            "Send attempt %s failed with status %s (%s), retrying in %.2fs",
            retry_state.attempt_number,
            response.status,
            response.error,
            delay,
        )
        self._transition(SendState.BACKOFF_WAIT)

    def _exhausted(self, count: int, last_attempt: Any) -> None:
        response = last_attempt.result()
        attempts = last_attempt.attempt_number

        self._transition(SendState.RETRY_EXHAUSTED)
        logger.warning(
            "Dropping batch of %s messages after %s attempts, last status %s: %s",
            count,
            attempts,
            response.status,
            response.error,
        )
        if self.config.report_exhausted:
            self._report(
                STATUS_RETRY_EXHAUSTED,
                f"Batch of {count} messages dropped after {attempts} attempts: "
                f"{response.error}",
            )
        self._transition(SendState.DROPPED)
        self._notify("batch_dropped", count, SendState.RETRY_EXHAUSTED)
        self._transition(SendState.IDLE)

    def _transition(self, state: SendState) -> None:
        if state is self.state:
            return
        logger.debug("Send state %s -> %s", self.state.value, state.value)
        self.state = state
        self._notify("state_change", state)

    def _report(self, status: int, error: str) -> None:
        try:
            self.config.on_error(status, error)
        except Exception:
            logger.exception("on_error callback raised")

    def _notify(self, name: str, *args: Any) -> None:
        try:
            getattr(self.config.callbacks, name)(*args)
        except Exception:
            logger.exception("Delivery callback %s raised", name)
