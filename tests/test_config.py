import logging
from unittest.mock import Mock

import pytest

from analytics_sender.backoff import BackoffPolicy
from analytics_sender.config import WorkerConfig, data_plane_url, request_timeout
from analytics_sender.constants import DEFAULT_DATA_PLANE_URL, DEFAULT_REQUEST_TIMEOUT
from analytics_sender.errors import ConfigurationError


@pytest.mark.unit
class TestWorkerConfig:
    """
    Test WorkerConfig construction and validation.
    """

    def test_defaults(self) -> None:
        config = WorkerConfig()

        assert config.batch_size == 100
        assert config.report_exhausted is False
        assert config.backoff == BackoffPolicy()

    def test_accepts_string_keys(self) -> None:
        on_error = Mock()
        config = WorkerConfig.from_options({"batch_size": 10, "on_error": on_error})

        assert config.batch_size == 10
        assert config.on_error is on_error

    def test_keyword_options_override_mapping(self) -> None:
        config = WorkerConfig.from_options({"batch_size": 10}, batch_size=20)

        assert config.batch_size == 20

    def test_unknown_option(self) -> None:
        with pytest.raises(ConfigurationError, match="bogus"):
            WorkerConfig.from_options({"bogus": 1})

    @pytest.mark.parametrize("batch_size", [0, -5, "10"])
    def test_invalid_batch_size(self, batch_size) -> None:
        with pytest.raises(ConfigurationError, match="batch_size"):
            WorkerConfig(batch_size=batch_size)

    def test_batch_size_is_clamped(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="analytics_sender.config"):
            config = WorkerConfig(batch_size=500)

        assert config.batch_size == 100
        assert "clamping" in caplog.text

    def test_on_error_must_be_callable(self) -> None:
        with pytest.raises(ConfigurationError, match="on_error"):
            WorkerConfig(on_error="not callable")

    def test_batch_bytes_must_exceed_message_bytes(self) -> None:
        with pytest.raises(ConfigurationError, match="max_batch_bytes"):
            WorkerConfig(max_batch_bytes=1000, max_message_bytes=1000)

    def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ANALYTICS_SENDER_BATCH_SIZE", "25")
        monkeypatch.setenv("ANALYTICS_SENDER_BACKOFF_INITIAL", "0.5")
        monkeypatch.setenv("ANALYTICS_SENDER_MAX_RETRIES", "2")

        config = WorkerConfig.from_options()

        assert config.batch_size == 25
        assert config.backoff.initial == pytest.approx(0.5)
        assert config.backoff.max_attempts == 3

    def test_explicit_options_win_over_environment(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("ANALYTICS_SENDER_BATCH_SIZE", "25")

        config = WorkerConfig.from_options({"batch_size": 5})

        assert config.batch_size == 5

    def test_invalid_environment_value(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ANALYTICS_SENDER_BATCH_SIZE", "many")

        with pytest.raises(ConfigurationError, match="ANALYTICS_SENDER_BATCH_SIZE"):
            WorkerConfig.from_options()

    def test_with_options_returns_new_config(self) -> None:
        config = WorkerConfig()
        changed = config.with_options(batch_size=7)

        assert changed.batch_size == 7
        assert config.batch_size == 100


@pytest.mark.unit
class TestTransportSettings:
    def test_defaults(self) -> None:
        assert data_plane_url() == DEFAULT_DATA_PLANE_URL
        assert request_timeout() == DEFAULT_REQUEST_TIMEOUT

    def test_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ANALYTICS_SENDER_DATA_PLANE_URL", "https://dp.example.com")
        monkeypatch.setenv("ANALYTICS_SENDER_REQUEST_TIMEOUT", "3.5")

        assert data_plane_url() == "https://dp.example.com"
        assert request_timeout() == pytest.approx(3.5)


@pytest.mark.unit
class TestWorkerConfigCoercion:
    def test_none_on_error_is_a_no_op(self) -> None:
        config = WorkerConfig.from_options({"on_error": None})

        assert callable(config.on_error)
        assert config.on_error(400, "Some error") is None

    def test_boolean_batch_size_is_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="batch_size"):
            WorkerConfig(batch_size=True)
