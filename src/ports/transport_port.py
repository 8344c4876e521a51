"""Transport port — abstract interface for talking to a chat.

Core modules depend on this protocol, never on a specific messaging provider.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from src.core.renderer import Keyboard, OutboundMessage


class TransportError(Exception):
    """Raised when sending, editing or deleting a message fails."""


@dataclass(frozen=True)
class SentMessage:
    """Handle of a delivered message."""

    chat_id: int
    message_id: int
    text: str = ""
    sent_at: datetime | None = None


class TransportPort(Protocol):
    """Abstract chat interface used by core modules."""

    async def send(self, chat_id: int, message: OutboundMessage) -> SentMessage: ...

    async def edit_reply_markup(
        self, chat_id: int, message_id: int, keyboard: Keyboard | None = None
    ) -> None: ...

    async def delete(self, chat_id: int, message_id: int) -> None: ...

    async def answer_callback(self, callback_id: str, text: str = "") -> None: ...
