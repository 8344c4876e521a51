"""
Plants Care Bot — Wizard transitions.

A transition shows the next screen and moves the session to the next
step. The screen is sent first so its message id is known, then the
step, the staged draft and that id are written in one update. If the
write fails the freshly sent screen is deleted again and the user stays
on the previous step with the previous screen. Only after the write
succeeds is the previous screen removed from the chat.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any

from src.core.renderer import OutboundMessage
from src.core.steps import Step
from src.data.models import GroupDraft, PlantDraft, Temporary
from src.ports.storage_port import StoragePort
from src.ports.transport_port import TransportError, TransportPort

logger = logging.getLogger(__name__)

# Sentinel: keep the staged draft as it is.
KEEP: Any = object()


class Wizard:
    def __init__(self, storage: StoragePort, transport: TransportPort) -> None:
        self.storage = storage
        self.transport = transport

    async def show(
        self,
        chat_id: int,
        temp: Temporary,
        step: Step,
        message: OutboundMessage,
        draft: GroupDraft | PlantDraft | None = KEEP,
    ) -> Temporary:
        """Send ``message`` and move ``temp`` to ``step``. Returns the stored session."""
        sent = await self.transport.send(chat_id, message)
        updated = replace(
            temp,
            step=step,
            message_id=sent.message_id,
            draft=temp.draft if draft is KEEP else draft,
        )
        try:
            self.storage.update_temporary(updated)
        except Exception:
            await self.discard(chat_id, sent.message_id)
            raise

        if temp.message_id and temp.message_id != sent.message_id:
            await self.discard(chat_id, temp.message_id)

        logger.debug("User #%d: %s -> %s (message %d)", temp.user_id, temp.step, step, sent.message_id)
        return updated

    async def discard(self, chat_id: int, message_id: int) -> None:
        """Delete a message that is no longer needed; a failure only costs a stale message."""
        try:
            await self.transport.delete(chat_id, message_id)
        except TransportError as exc:
            logger.warning("Could not delete message %d in chat %d: %s", message_id, chat_id, exc)
