import pytest


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without network access")


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """
    Keep ANALYTICS_SENDER_* variables from the host out of the tests.
    """
    for name in (
        "ANALYTICS_SENDER_BATCH_SIZE",
        "ANALYTICS_SENDER_BACKOFF_INITIAL",
        "ANALYTICS_SENDER_MAX_RETRIES",
        "ANALYTICS_SENDER_REQUEST_TIMEOUT",
        "ANALYTICS_SENDER_DATA_PLANE_URL",
        "ANALYTICS_SENDER_WRITE_KEY",
    ):
        monkeypatch.delenv(name, raising=False)
