"""Classified inbound chat events handed to the dispatcher."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Union

from src.data.models import UserProfile

TEXT = "text"
PHOTO = "photo"
DATE = "date"


@dataclass(frozen=True)
class Command:
    """A slash command such as /start or /help."""

    telegram_id: int
    chat_id: int
    message_id: int
    name: str
    profile: UserProfile | None = None


@dataclass(frozen=True)
class TextMessage:
    telegram_id: int
    chat_id: int
    message_id: int
    text: str


@dataclass(frozen=True)
class PhotoUpload:
    telegram_id: int
    chat_id: int
    message_id: int
    photo: bytes = field(repr=False)


@dataclass(frozen=True)
class ButtonCallback:
    """An inline button press, already split into its routing tag and payload."""

    telegram_id: int
    chat_id: int
    message_id: int
    callback_id: str
    unique: str
    data: str = ""


@dataclass(frozen=True)
class DateSelection:
    """A day picked on the inline calendar."""

    telegram_id: int
    chat_id: int
    message_id: int
    callback_id: str
    day: date


Intent = Union[Command, TextMessage, PhotoUpload, ButtonCallback, DateSelection]


def intent_kind(intent: Intent) -> str:
    """Routing key of an intent: a button's unique tag or the input kind."""
    if isinstance(intent, ButtonCallback):
        return intent.unique
    if isinstance(intent, TextMessage):
        return TEXT
    if isinstance(intent, PhotoUpload):
        return PHOTO
    if isinstance(intent, DateSelection):
        return DATE
    return f"/{intent.name}"


def is_callback(intent: Intent) -> bool:
    return isinstance(intent, (ButtonCallback, DateSelection))


def intent_payload(intent: Intent) -> str:
    """Short loggable form of what the user sent. Photo bytes are never included."""
    if isinstance(intent, ButtonCallback):
        return f"{intent.unique}|{intent.data}" if intent.data else intent.unique
    if isinstance(intent, TextMessage):
        return repr(intent.text)
    if isinstance(intent, PhotoUpload):
        return f"<photo, {len(intent.photo)} bytes>"
    if isinstance(intent, DateSelection):
        return intent.day.isoformat()
    return f"/{intent.name}"
