"""
Plants Care Bot — Data Models.

Users group their plants into watering scenarios (groups). A group carries
the cadence: the last watering date and the interval in days, from which
the next watering date is derived. Temporary is the per-user wizard buffer
holding the current step and the partially edited group or plant.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from datetime import date
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter, field_serializer, field_validator


@dataclass
class User:
    """A chat participant; telegram_id is the external lookup key."""

    id: int
    telegram_id: int
    username: str = ""
    first_name: str = ""
    last_name: str = ""
    is_bot: bool = False
    created_at: str = ""
    updated_at: str = ""


@dataclass
class Group:
    """A watering scenario owned by a user.

    next_watering_date is always last_watering_date + watering_interval days.
    """

    id: int
    user_id: int
    title: str
    description: str
    last_watering_date: date
    watering_interval: int
    next_watering_date: date
    created_at: str = ""
    updated_at: str = ""


@dataclass
class Plant:
    """A plant that belongs to exactly one group of the same user."""

    id: int
    user_id: int
    group_id: int
    title: str
    description: str
    photo: bytes = field(default=b"", repr=False)
    created_at: str = ""
    updated_at: str = ""


@dataclass
class Notification:
    """Audit record of a reminder delivered for a group."""

    id: int
    group_id: int
    message_id: int
    text: str
    sent_at: str                      # ISO timestamp
    sent_on: str                      # ISO date YYYY-MM-DD, one per group per day


# ---------------------------------------------------------------------------
# Staged payload (wizard buffer)
# ---------------------------------------------------------------------------


class GroupDraft(BaseModel):
    """A group being created or edited. id is set when editing an existing group."""

    kind: Literal["group"] = "group"
    id: int | None = None
    user_id: int | None = None
    title: str | None = None
    description: str | None = None
    last_watering_date: date | None = None
    watering_interval: int | None = None
    next_watering_date: date | None = None

    @classmethod
    def from_group(cls, group: Group) -> GroupDraft:
        return cls(
            id=group.id,
            user_id=group.user_id,
            title=group.title,
            description=group.description,
            last_watering_date=group.last_watering_date,
            watering_interval=group.watering_interval,
            next_watering_date=group.next_watering_date,
        )


class PlantDraft(BaseModel):
    """A plant being created or edited. Photo bytes travel as base64 in JSON."""

    kind: Literal["plant"] = "plant"
    id: int | None = None
    user_id: int | None = None
    group_id: int | None = None
    title: str | None = None
    description: str | None = None
    photo: bytes | None = Field(default=None, repr=False)

    @field_validator("photo", mode="before")
    @classmethod
    def decode_photo(cls, v: str | bytes | None) -> bytes | None:
        if isinstance(v, str):
            return base64.b64decode(v)
        return v

    @field_serializer("photo", when_used="json")
    def encode_photo(self, v: bytes | None) -> str | None:
        if v is None:
            return None
        return base64.b64encode(v).decode("ascii")

    @classmethod
    def from_plant(cls, plant: Plant) -> PlantDraft:
        return cls(
            id=plant.id,
            user_id=plant.user_id,
            group_id=plant.group_id,
            title=plant.title,
            description=plant.description,
            photo=plant.photo,
        )


Draft = Annotated[Union[GroupDraft, PlantDraft], Field(discriminator="kind")]

_draft_adapter: TypeAdapter[Draft] = TypeAdapter(Draft)


def dump_draft(draft: GroupDraft | PlantDraft | None) -> str | None:
    """Serialize a staged payload for the temporary.data column."""
    if draft is None:
        return None
    return draft.model_dump_json()


def load_draft(raw: str | bytes | None) -> GroupDraft | PlantDraft | None:
    """Parse the temporary.data column back into its tagged variant."""
    if not raw:
        return None
    return _draft_adapter.validate_json(raw)


@dataclass
class Temporary:
    """Per-user wizard buffer: current step, staged payload, pending prompt message."""

    id: int
    user_id: int
    step: str
    draft: GroupDraft | PlantDraft | None = None
    message_id: int | None = None
    updated_at: str = ""

    @property
    def group_draft(self) -> GroupDraft | None:
        return self.draft if isinstance(self.draft, GroupDraft) else None

    @property
    def plant_draft(self) -> PlantDraft | None:
        return self.draft if isinstance(self.draft, PlantDraft) else None


@dataclass(frozen=True)
class UserProfile:
    """Chat profile fields reported by the transport on /start."""

    telegram_id: int
    username: str = ""
    first_name: str = ""
    last_name: str = ""
    is_bot: bool = False

