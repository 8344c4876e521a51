"""Telegram transport adapter — implements TransportPort.

Wraps a telegram.Bot instance. Screens with an image are sent as photos
with a caption; screens whose asset is missing fall back to plain text.
"""

from __future__ import annotations

import logging
from pathlib import Path

from telegram import Bot, InlineKeyboardButton, InlineKeyboardMarkup
from telegram.error import TelegramError

from src.core.buttons import encode_callback
from src.core.renderer import Keyboard, OutboundMessage
from src.ports.transport_port import SentMessage, TransportError

logger = logging.getLogger(__name__)

ASSET_EXTENSIONS = (".jpg", ".jpeg", ".png")


class AssetCatalog:
    """Resolves screen asset keys to image files under one directory."""

    def __init__(self, assets_dir: str | Path) -> None:
        self._dir = Path(assets_dir)
        self._cache: dict[str, Path | None] = {}

    def resolve(self, key: str | None) -> Path | None:
        if not key:
            return None
        if key not in self._cache:
            self._cache[key] = next(
                (p for ext in ASSET_EXTENSIONS if (p := self._dir / f"{key}{ext}").is_file()),
                None,
            )
            if self._cache[key] is None:
                logger.debug("No image for screen '%s' in %s", key, self._dir)
        return self._cache[key]


def to_markup(keyboard: Keyboard | None) -> InlineKeyboardMarkup | None:
    if not keyboard:
        return None
    return InlineKeyboardMarkup([
        [InlineKeyboardButton(text=b.label, callback_data=encode_callback(b)) for b in row]
        for row in keyboard
    ])


class TelegramTransport:
    """Telegram implementation of TransportPort."""

    def __init__(self, bot: Bot, assets_dir: str | Path | None = None) -> None:
        if assets_dir is None:
            from src.config import settings
            assets_dir = settings.ASSETS_DIR

        self._bot = bot
        self._assets = AssetCatalog(assets_dir)

    async def send(self, chat_id: int, message: OutboundMessage) -> SentMessage:
        markup = to_markup(message.keyboard)
        try:
            if message.photo:
                sent = await self._bot.send_photo(
                    chat_id=chat_id, photo=message.photo, caption=message.text, reply_markup=markup,
                )
            elif (path := self._assets.resolve(message.media)) is not None:
                sent = await self._bot.send_photo(
                    chat_id=chat_id, photo=path, caption=message.text, reply_markup=markup,
                )
            else:
                sent = await self._bot.send_message(chat_id=chat_id, text=message.text, reply_markup=markup)
        except TelegramError as exc:
            raise TransportError(f"send to chat {chat_id} failed: {exc}") from exc

        return SentMessage(
            chat_id=chat_id,
            message_id=sent.message_id,
            text=sent.caption or sent.text or message.text,
            sent_at=sent.date,
        )

    async def edit_reply_markup(self, chat_id: int, message_id: int, keyboard: Keyboard | None = None) -> None:
        try:
            await self._bot.edit_message_reply_markup(
                chat_id=chat_id, message_id=message_id, reply_markup=to_markup(keyboard),
            )
        except TelegramError as exc:
            raise TransportError(f"edit of message {message_id} failed: {exc}") from exc

    async def delete(self, chat_id: int, message_id: int) -> None:
        try:
            await self._bot.delete_message(chat_id=chat_id, message_id=message_id)
        except TelegramError as exc:
            raise TransportError(f"delete of message {message_id} failed: {exc}") from exc

    async def answer_callback(self, callback_id: str, text: str = "") -> None:
        try:
            await self._bot.answer_callback_query(callback_query_id=callback_id, text=text or None)
        except TelegramError as exc:
            raise TransportError(f"callback answer failed: {exc}") from exc
