import pytest

from src.recruitpilot.core.conversation import ConversationLifecycle
from src.recruitpilot.core.errors import RunTimeout, TransportError


class _FakeClient:
    def __init__(self, *, fail_create: bool = False, fail_delete: bool = False) -> None:
        self.fail_create = fail_create
        self.fail_delete = fail_delete
        self.created: list[str] = []
        self.deleted: list[str] = []

    def create_conversation(self) -> str:
        if self.fail_create:
            raise TransportError("create failed")
        thread_id = f"thread_{len(self.created) + 1}"
        self.created.append(thread_id)
        return thread_id

    def delete_conversation(self, conversation_id: str) -> None:
        self.deleted.append(conversation_id)
        if self.fail_delete:
            raise TransportError("delete failed")


def _no_retry(operation, label=None):
    _ = label
    return operation()


def test_with_conversation_success_deletes_once():
    client = _FakeClient()
    lifecycle = ConversationLifecycle(client, retry_fn=_no_retry)
    out = lifecycle.with_conversation(lambda thread_id: f"used:{thread_id}")
    assert out == "used:thread_1"
    assert client.deleted == ["thread_1"]


@pytest.mark.parametrize("error", [RuntimeError("body failed"), RunTimeout(5)])
def test_with_conversation_error_still_deletes_once_and_propagates(error):
    client = _FakeClient()
    lifecycle = ConversationLifecycle(client, retry_fn=_no_retry)

    def _body(_thread_id):
        raise error

    with pytest.raises(type(error)):
        lifecycle.with_conversation(_body)
    assert client.deleted == ["thread_1"]


def test_cleanup_failure_does_not_mask_result():
    client = _FakeClient(fail_delete=True)
    lifecycle = ConversationLifecycle(client, retry_fn=_no_retry)
    assert lifecycle.with_conversation(lambda _t: 42) == 42
    assert client.deleted == ["thread_1"]


def test_cleanup_failure_does_not_replace_primary_error(caplog):
    caplog.set_level("ERROR", logger="src.recruitpilot.core.conversation")
    client = _FakeClient(fail_delete=True)
    lifecycle = ConversationLifecycle(client, retry_fn=_no_retry)

    def _body(_thread_id):
        raise ValueError("primary")

    with pytest.raises(ValueError, match="primary"):
        lifecycle.with_conversation(_body)
    assert client.deleted == ["thread_1"]
    assert any("Thread cleanup failed" in rec.getMessage() for rec in caplog.records)


def test_create_failure_has_nothing_to_delete():
    client = _FakeClient(fail_create=True)
    lifecycle = ConversationLifecycle(client, retry_fn=_no_retry)
    with pytest.raises(TransportError):
        lifecycle.with_conversation(lambda _t: None)
    assert client.deleted == []


def test_each_open_creates_a_fresh_conversation():
    client = _FakeClient()
    lifecycle = ConversationLifecycle(client, retry_fn=_no_retry)
    with lifecycle.open() as first:
        pass
    with lifecycle.open() as second:
        pass
    assert first != second
    assert client.deleted == [first, second]


def test_creation_goes_through_retry_executor():
    client = _FakeClient()
    labels: list[str] = []

    def _recording_retry(operation, label=None):
        labels.append(label)
        return operation()

    ConversationLifecycle(client, retry_fn=_recording_retry).with_conversation(lambda _t: None)
    assert labels == ["create_conversation"]
