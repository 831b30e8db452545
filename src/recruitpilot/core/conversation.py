"""Scoped ownership of one assistant conversation (thread)."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Protocol, TypeVar

from .retry import retry

logger = logging.getLogger(__name__)

R = TypeVar("R")


class ConversationClient(Protocol):
    def create_conversation(self) -> str: ...

    def delete_conversation(self, conversation_id: str) -> None: ...


class ConversationLifecycle:
    """Create a thread, hand it to the caller, and always delete it once.

    Delete failures are logged and dropped so they never replace the
    caller's own result or exception.
    """

    def __init__(self, client: ConversationClient, *, retry_fn: Callable[..., Any] = retry) -> None:
        self._client = client
        self._retry = retry_fn

    def _cleanup(self, conversation_id: str) -> bool:
        try:
            self._client.delete_conversation(conversation_id)
        except Exception as exc:
            logger.error("Thread cleanup failed for %s: %s", conversation_id, exc)
            return False
        logger.info("Thread cleanup completed: %s", conversation_id)
        return True

    @contextmanager
    def open(self) -> Iterator[str]:
        conversation_id = self._retry(self._client.create_conversation, label="create_conversation")
        logger.info("Thread created: %s", conversation_id)
        try:
            yield conversation_id
        finally:
            self._cleanup(conversation_id)

    def with_conversation(self, fn: Callable[[str], R]) -> R:
        with self.open() as conversation_id:
            return fn(conversation_id)
