"""Observable per-conversation state.

One ``ChatStore`` belongs to one conversation.  Every mutation notifies the
subscribed listeners with a deep-copied snapshot, so listeners can never
modify the live state.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Literal

from pickleai.infra.id_utils import generate_sequential_id

from .models import ChatMessage, ChatState

logger = logging.getLogger(__name__)

StateListener = Callable[[ChatState], None]

_MESSAGE_ID_PREFIX = "msg"


class ChatStore:
    def __init__(self) -> None:
        self._state = ChatState()
        self._listeners: list[StateListener] = []
        self._sequence = 0

    def snapshot(self) -> ChatState:
        return self._state.model_copy(deep=True)

    @property
    def state(self) -> ChatState:
        """Live state, for readers inside the chat package only."""
        return self._state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register *listener*; the returned callable unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def update(self, **changes: Any) -> None:
        for name, value in changes.items():
            setattr(self._state, name, value)
        self._notify()

    def append_message(self, role: Literal["user", "assistant"], content: str) -> ChatMessage:
        self._sequence += 1
        message = ChatMessage(
            id=generate_sequential_id(_MESSAGE_ID_PREFIX, self._sequence),
            role=role,
            content=content,
        )
        self._state.messages.append(message)
        self._notify()
        return message

    def reset(self) -> None:
        """Back to an empty conversation.  Message ids keep increasing."""
        self._state = ChatState()
        self._notify()

    def _notify(self) -> None:
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Chat state listener %r failed", listener)
