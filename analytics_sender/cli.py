import json
import logging
import sys
from pathlib import Path
from queue import Queue
from typing import Any, List, Optional, TextIO, Tuple

import typer
from rich.console import Console
from rich.markup import escape

from .callbacks import NullDeliveryCallbacks, SendState
from .config import WorkerConfig
from .constants import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_DATA_PLANE_URL,
    DEFAULT_REQUEST_TIMEOUT,
    ENV_BATCH_SIZE,
    ENV_DATA_PLANE_URL,
    ENV_REQUEST_TIMEOUT,
    ENV_WRITE_KEY,
    EXIT_CODE_FAILURE,
    EXIT_CODE_OK,
    MAX_BATCH_SIZE,
)
from .transport import HttpTransport
from .worker import Worker

LOG = logging.getLogger(__name__)

console = Console()

cli = typer.Typer(
    name="analytics-sender",
    rich_markup_mode="rich",
    help="Deliver analytics events to a collection endpoint in batches.",
)


class DeliverySummary(NullDeliveryCallbacks):
    """
    Tallies what a worker run did, for the final report.
    """

    def __init__(self) -> None:
        self.batches_sent = 0
        self.messages_sent = 0
        self.batches_dropped = 0
        self.errors: List[Tuple[int, str]] = []

    def batch_sent(self, count: int) -> None:
        self.batches_sent += 1
        self.messages_sent += count

    def batch_dropped(self, count: int, state: SendState) -> None:
        self.batches_dropped += 1

    def on_error(self, status: int, error: str) -> None:
        self.errors.append((status, error))
        console.print(f"[red]Error {status}[/red]: {escape(error)}", highlight=False)


def configure_logger(debug: bool) -> None:
    level = logging.DEBUG if debug else logging.CRITICAL
    logging.basicConfig(format="%(asctime)s %(name)s => %(message)s", level=level)


def read_messages(stream: TextIO, summary: DeliverySummary) -> List[Any]:
    """
    Parse newline-delimited JSON, recording malformed lines as errors.
    """
    messages = []
    for lineno, line in enumerate(stream, start=1):
        if not line.strip():
            continue
        try:
            messages.append(json.loads(line))
        except json.JSONDecodeError as e:
            summary.on_error(-1, f"Line {lineno}: invalid JSON ({e.msg})")
    return messages


@cli.callback()
def main(
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging."),
) -> None:
    configure_logger(debug)


@cli.command(help="Send newline-delimited JSON messages read from FILE or stdin.")
def send(
    source: Optional[Path] = typer.Argument(
        None,
        exists=True,
        dir_okay=False,
        readable=True,
        help="File with one JSON message per line. Reads stdin when omitted.",
    ),
    write_key: str = typer.Option(
        ..., "--write-key", envvar=ENV_WRITE_KEY, help="Source write key."
    ),
    data_plane_url: str = typer.Option(
        DEFAULT_DATA_PLANE_URL,
        "--data-plane-url",
        envvar=ENV_DATA_PLANE_URL,
        help="Base URL of the collection endpoint.",
    ),
    batch_size: int = typer.Option(
        DEFAULT_BATCH_SIZE,
        "--batch-size",
        envvar=ENV_BATCH_SIZE,
        min=1,
        max=MAX_BATCH_SIZE,
        help="Maximum messages per batch.",
    ),
    timeout: float = typer.Option(
        DEFAULT_REQUEST_TIMEOUT,
        "--timeout",
        envvar=ENV_REQUEST_TIMEOUT,
        help="Request timeout in seconds.",
    ),
) -> None:
    summary = DeliverySummary()

    if source is None:
        messages = read_messages(sys.stdin, summary)
    else:
        with source.open(encoding="utf-8") as fp:
            messages = read_messages(fp, summary)

    pending: "Queue[Any]" = Queue()
    for message in messages:
        pending.put(message)

    LOG.info("Queued %s messages for %s", len(messages), data_plane_url)

    config = WorkerConfig.from_options(
        batch_size=batch_size, on_error=summary.on_error, callbacks=summary
    )

    with HttpTransport(data_plane_url, timeout=timeout) as transport:
        Worker(pending, write_key, config, transport=transport).run()

    console.print(
        f"Sent {summary.messages_sent} messages in {summary.batches_sent} batches, "
        f"{summary.batches_dropped} batches dropped, {len(summary.errors)} errors."
    )

    failed = summary.errors or summary.batches_dropped
    raise typer.Exit(EXIT_CODE_FAILURE if failed else EXIT_CODE_OK)
