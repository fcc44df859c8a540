"""Allow analytics-sender to be executable through `python -m analytics_sender`."""
from analytics_sender.cli import cli


if __name__ == "__main__":  # pragma: no cover
    cli(prog_name="analytics-sender")
