import json

import pytest

from analytics_sender.batch import MessageBatch
from analytics_sender.errors import BatchFullError


@pytest.mark.unit
class TestMessageBatch:
    """
    Test MessageBatch accumulation and capacity rules.
    """

    @pytest.fixture
    def batch(self) -> MessageBatch:
        """
        Batch holding at most three messages.
        """
        return MessageBatch(max_message_count=3)

    def test_new_batch_is_empty(self, batch: MessageBatch) -> None:
        assert batch.is_empty()
        assert not batch.is_full()
        assert len(batch) == 0
        assert batch.size == 0

    def test_full_at_message_count(self, batch: MessageBatch) -> None:
        for i in range(3):
            batch.append(json.dumps({"n": i}))

        assert batch.is_full()
        assert len(batch) == 3

    def test_append_beyond_capacity_is_refused(self, batch: MessageBatch) -> None:
        """
        Test a full batch refuses more messages instead of growing.
        """
        for i in range(3):
            batch.append(json.dumps({"n": i}))

        with pytest.raises(BatchFullError) as exc_info:
            batch.append('{"n":3}')

        assert exc_info.value.capacity == 3
        assert len(batch) == 3

    def test_full_when_byte_headroom_is_gone(self) -> None:
        """
        Test batch closes once less than one maximal message fits.
        """
        batch = MessageBatch(max_message_count=100, max_bytes=100, max_message_bytes=40)
        fragment = "x" * 30

        batch.append(fragment)
        assert not batch.is_full()

        batch.append(fragment)
        assert batch.size == 62
        assert batch.is_full()

        with pytest.raises(BatchFullError) as exc_info:
            batch.append(fragment)
        assert exc_info.value.capacity is None

    def test_to_payload_is_json_array(self, batch: MessageBatch) -> None:
        batch.append('{"event":"a"}')
        batch.append('{"event":"b"}')

        assert json.loads(batch.to_payload()) == [{"event": "a"}, {"event": "b"}]

    def test_empty_payload(self, batch: MessageBatch) -> None:
        assert batch.to_payload() == "[]"

    def test_clear(self, batch: MessageBatch) -> None:
        batch.append('{"event":"a"}')
        batch.clear()

        assert batch.is_empty()
        assert batch.size == 0
        assert batch.fragments() == []
