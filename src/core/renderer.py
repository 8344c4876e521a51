"""
Plants Care Bot — Outbound message renderer.

``render(screen, snapshot)`` is a pure function: it turns a screen id and
the domain data that screen shows into an ``OutboundMessage`` (an asset
key or photo bytes, a caption and an inline keyboard). Nothing here
talks to storage or to the transport.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import StrEnum
from typing import Callable

from src.core import buttons, texts
from src.core.buttons import Button
from src.core.calendar_keyboard import month_keyboard
from src.core.errors import NotFoundError
from src.core.watering import (
    ALLOWED_INTERVALS,
    NO_DESCRIPTION,
    TITLE_MAX_LENGTH,
    format_date,
    format_interval,
)
from src.data.models import Group, GroupDraft, Plant, PlantDraft

Keyboard = list[list[Button]]

INTERVALS_PER_ROW = 3
DEFAULT_PLANT_MEDIA = "default_plant"


class Screen(StrEnum):
    START = "start"
    HELP = "help"
    UNKNOWN_SESSION = "unknown_session"

    ADD_GROUP_TITLE = "add_group_title"
    ADD_GROUP_DESCRIPTION = "add_group_description"
    ADD_GROUP_LAST_WATERING = "add_group_last_watering"
    ADD_GROUP_INTERVAL = "add_group_interval"
    ADD_GROUP_CONFIRM = "add_group_confirm"
    GROUP_CREATED = "group_created"

    MANAGE_GROUPS = "manage_groups"
    MANAGE_GROUP_ACTION = "manage_group_action"
    MANAGE_GROUP_CHANGE = "manage_group_change"
    CHANGE_GROUP_TITLE = "change_group_title"
    CHANGE_GROUP_DESCRIPTION = "change_group_description"
    CHANGE_GROUP_LAST_WATERING = "change_group_last_watering"
    CHANGE_GROUP_INTERVAL = "change_group_interval"
    MANAGE_GROUP_REMOVAL = "manage_group_removal"
    MANAGE_GROUP_SEE_PLANTS = "manage_group_see_plants"

    ADD_PLANT_TITLE = "add_plant_title"
    ADD_PLANT_DESCRIPTION = "add_plant_description"
    ADD_PLANT_GROUP = "add_plant_group"
    ADD_PLANT_PHOTO_QUESTION = "add_plant_photo_question"
    ADD_PLANT_PHOTO = "add_plant_photo"
    ADD_PLANT_CONFIRM = "add_plant_confirm"
    PLANT_CREATED = "plant_created"

    MANAGE_PLANTS_CHOOSE_GROUP = "manage_plants_choose_group"
    MANAGE_PLANTS_CHOOSE = "manage_plants_choose"
    MANAGE_PLANT_ACTION = "manage_plant_action"
    MANAGE_PLANT_CHANGE = "manage_plant_change"
    CHANGE_PLANT_TITLE = "change_plant_title"
    CHANGE_PLANT_DESCRIPTION = "change_plant_description"
    CHANGE_PLANT_GROUP = "change_plant_group"
    CHANGE_PLANT_PHOTO = "change_plant_photo"
    MANAGE_PLANT_REMOVAL = "manage_plant_removal"

    NOTIFY = "notify"


@dataclass
class OutboundMessage:
    """A screen ready for the transport.

    ``media`` is an asset key resolved by the transport; ``photo`` bytes,
    when present, are sent instead of it.
    """

    text: str
    keyboard: Keyboard = field(default_factory=list)
    media: str | None = None
    photo: bytes | None = field(default=None, repr=False)

    @property
    def buttons(self) -> list[Button]:
        return [button for row in self.keyboard for button in row]


@dataclass
class Snapshot:
    """Domain data a screen displays."""

    group: GroupDraft | None = None
    plant: PlantDraft | None = None
    group_title: str = ""
    groups: list[Group] = field(default_factory=list)
    plants: list[Plant] = field(default_factory=list)
    groups_count: int = 0
    plants_count: int = 0
    month: date | None = None


# ---------------------------------------------------------------------------
# Keyboard helpers
# ---------------------------------------------------------------------------


def _nav() -> list[Button]:
    return [buttons.BACK, buttons.MENU]


def _interval_keyboard() -> Keyboard:
    rows: Keyboard = []
    row: list[Button] = []
    for days in ALLOWED_INTERVALS:
        row.append(buttons.WATERING_INTERVAL.with_data(days, label=format_interval(days)))
        if len(row) == INTERVALS_PER_ROW:
            rows.append(row)
            row = []
    if row:
        rows.append(row)
    rows.append(_nav())
    return rows


def _group_choices(groups: list[Group]) -> Keyboard:
    rows: Keyboard = [[buttons.GROUP_CHOICE.with_data(g.id, label=g.title)] for g in groups]
    rows.append(_nav())
    return rows


def _plant_choices(plants: list[Plant]) -> Keyboard:
    rows: Keyboard = [[buttons.PLANT_CHOICE.with_data(p.id, label=p.title)] for p in plants]
    rows.append(_nav())
    return rows


def _calendar(snapshot: Snapshot) -> Keyboard:
    if snapshot.month is None:
        raise ValueError("calendar screens need the month to show")
    return month_keyboard(snapshot.month)


# ---------------------------------------------------------------------------
# Caption fields
# ---------------------------------------------------------------------------


def _group_fields(group: GroupDraft | None) -> dict[str, str]:
    group = group or GroupDraft()
    return {
        "title": group.title or "",
        "description": group.description or NO_DESCRIPTION,
        "last": format_date(group.last_watering_date),
        "interval": format_interval(group.watering_interval) if group.watering_interval else NO_DESCRIPTION,
        "next": format_date(group.next_watering_date),
    }


def _plant_fields(snapshot: Snapshot) -> dict[str, str]:
    plant = snapshot.plant or PlantDraft()
    return {
        "title": plant.title or "",
        "description": plant.description or NO_DESCRIPTION,
        "group": snapshot.group_title or NO_DESCRIPTION,
    }


def _plant_photo(snapshot: Snapshot, text: str, keyboard: Keyboard) -> OutboundMessage:
    photo = snapshot.plant.photo if snapshot.plant else None
    if photo:
        return OutboundMessage(text=text, keyboard=keyboard, photo=photo)
    return OutboundMessage(text=text, keyboard=keyboard, media=DEFAULT_PLANT_MEDIA)


def plants_list_text(plants: list[Plant]) -> str:
    if not plants:
        return texts.NO_PLANTS_IN_GROUP
    return "".join(
        texts.PLANT_LINE.format(number=i, title=p.title) for i, p in enumerate(plants, start=1)
    )


# ---------------------------------------------------------------------------
# Screens
# ---------------------------------------------------------------------------


def _start(s: Snapshot) -> OutboundMessage:
    keyboard: Keyboard = [[buttons.CREATE_GROUP]]
    if s.groups_count:
        keyboard.append([buttons.ADD_PLANT])
        keyboard.append([buttons.MANAGE_GROUPS])
    if s.plants_count:
        keyboard.append([buttons.MANAGE_PLANTS])
    return OutboundMessage(texts.START, keyboard, media=Screen.START)


def _help(s: Snapshot) -> OutboundMessage:
    return OutboundMessage(texts.HELP)


def _unknown_session(s: Snapshot) -> OutboundMessage:
    return OutboundMessage(NotFoundError.user_message)


def _add_group_title(s: Snapshot) -> OutboundMessage:
    return OutboundMessage(
        texts.ADD_GROUP_TITLE.format(limit=TITLE_MAX_LENGTH), [_nav()], media=Screen.ADD_GROUP_TITLE,
    )


def _add_group_description(s: Snapshot) -> OutboundMessage:
    return OutboundMessage(
        texts.ADD_GROUP_DESCRIPTION.format(**_group_fields(s.group)),
        [[buttons.SKIP_DESCRIPTION], _nav()],
        media=Screen.ADD_GROUP_DESCRIPTION,
    )


def _add_group_last_watering(s: Snapshot) -> OutboundMessage:
    return OutboundMessage(
        texts.ADD_GROUP_LAST_WATERING.format(**_group_fields(s.group)),
        _calendar(s),
        media=Screen.ADD_GROUP_LAST_WATERING,
    )


def _add_group_interval(s: Snapshot) -> OutboundMessage:
    return OutboundMessage(
        texts.ADD_GROUP_INTERVAL.format(**_group_fields(s.group)),
        _interval_keyboard(),
        media=Screen.ADD_GROUP_INTERVAL,
    )


def _add_group_confirm(s: Snapshot) -> OutboundMessage:
    return OutboundMessage(
        texts.ADD_GROUP_CONFIRM.format(**_group_fields(s.group)),
        [[buttons.CONFIRM_ADD_GROUP], _nav()],
        media=Screen.ADD_GROUP_CONFIRM,
    )


def _group_created(s: Snapshot) -> OutboundMessage:
    return OutboundMessage(
        texts.GROUP_CREATED.format(**_group_fields(s.group)),
        [[buttons.ADD_PLANT], [buttons.MENU]],
        media=Screen.GROUP_CREATED,
    )


def _manage_groups(s: Snapshot) -> OutboundMessage:
    return OutboundMessage(texts.MANAGE_GROUPS, _group_choices(s.groups), media=Screen.MANAGE_GROUPS)


def _manage_group_action(s: Snapshot) -> OutboundMessage:
    keyboard: Keyboard = []
    if s.plants_count:
        keyboard.append([buttons.SEE_GROUP_PLANTS])
    keyboard.append([buttons.CHANGE_GROUP, buttons.REMOVE_GROUP])
    keyboard.append(_nav())
    return OutboundMessage(
        texts.MANAGE_GROUP_ACTION.format(plants_count=s.plants_count, **_group_fields(s.group)),
        keyboard,
        media=Screen.MANAGE_GROUP_ACTION,
    )


def _manage_group_change(s: Snapshot) -> OutboundMessage:
    return OutboundMessage(
        texts.MANAGE_GROUP_CHANGE.format(**_group_fields(s.group)),
        [
            [buttons.CHANGE_GROUP_TITLE, buttons.CHANGE_GROUP_DESCRIPTION],
            [buttons.CHANGE_GROUP_LAST_WATERING],
            [buttons.CHANGE_GROUP_INTERVAL],
            _nav(),
        ],
        media=Screen.MANAGE_GROUP_CHANGE,
    )


def _change_group_title(s: Snapshot) -> OutboundMessage:
    return OutboundMessage(
        texts.CHANGE_GROUP_TITLE.format(**_group_fields(s.group)), [_nav()],
        media=Screen.CHANGE_GROUP_TITLE,
    )


def _change_group_description(s: Snapshot) -> OutboundMessage:
    return OutboundMessage(
        texts.CHANGE_GROUP_DESCRIPTION.format(**_group_fields(s.group)), [_nav()],
        media=Screen.CHANGE_GROUP_DESCRIPTION,
    )


def _change_group_last_watering(s: Snapshot) -> OutboundMessage:
    return OutboundMessage(
        texts.CHANGE_GROUP_LAST_WATERING.format(**_group_fields(s.group)), _calendar(s),
        media=Screen.CHANGE_GROUP_LAST_WATERING,
    )


def _change_group_interval(s: Snapshot) -> OutboundMessage:
    return OutboundMessage(
        texts.CHANGE_GROUP_INTERVAL.format(**_group_fields(s.group)), _interval_keyboard(),
        media=Screen.CHANGE_GROUP_INTERVAL,
    )


def _manage_group_removal(s: Snapshot) -> OutboundMessage:
    return OutboundMessage(
        texts.MANAGE_GROUP_REMOVAL.format(**_group_fields(s.group)),
        [[buttons.CONFIRM_REMOVE_GROUP], _nav()],
        media=Screen.MANAGE_GROUP_REMOVAL,
    )


def _manage_group_see_plants(s: Snapshot) -> OutboundMessage:
    return OutboundMessage(
        texts.MANAGE_GROUP_SEE_PLANTS.format(**_group_fields(s.group)),
        _plant_choices(s.plants),
        media=Screen.MANAGE_GROUP_SEE_PLANTS,
    )


def _add_plant_title(s: Snapshot) -> OutboundMessage:
    return OutboundMessage(
        texts.ADD_PLANT_TITLE.format(limit=TITLE_MAX_LENGTH), [_nav()], media=Screen.ADD_PLANT_TITLE,
    )


def _add_plant_description(s: Snapshot) -> OutboundMessage:
    return OutboundMessage(
        texts.ADD_PLANT_DESCRIPTION.format(**_plant_fields(s)),
        [[buttons.SKIP_DESCRIPTION], _nav()],
        media=Screen.ADD_PLANT_DESCRIPTION,
    )


def _add_plant_group(s: Snapshot) -> OutboundMessage:
    return OutboundMessage(
        texts.ADD_PLANT_GROUP.format(**_plant_fields(s)), _group_choices(s.groups),
        media=Screen.ADD_PLANT_GROUP,
    )


def _add_plant_photo_question(s: Snapshot) -> OutboundMessage:
    return OutboundMessage(
        texts.ADD_PLANT_PHOTO_QUESTION.format(**_plant_fields(s)),
        [[buttons.PHOTO_YES, buttons.PHOTO_NO], _nav()],
        media=Screen.ADD_PLANT_PHOTO_QUESTION,
    )


def _add_plant_photo(s: Snapshot) -> OutboundMessage:
    return OutboundMessage(
        texts.ADD_PLANT_PHOTO.format(**_plant_fields(s)), [_nav()], media=Screen.ADD_PLANT_PHOTO,
    )


def _add_plant_confirm(s: Snapshot) -> OutboundMessage:
    return _plant_photo(
        s,
        texts.ADD_PLANT_CONFIRM.format(**_plant_fields(s)),
        [[buttons.CONFIRM_ADD_PLANT], _nav()],
    )


def _plant_created(s: Snapshot) -> OutboundMessage:
    return OutboundMessage(
        texts.PLANT_CREATED.format(**_plant_fields(s)),
        [[buttons.ADD_ANOTHER_PLANT], [buttons.MENU]],
        media=Screen.PLANT_CREATED,
    )


def _manage_plants_choose_group(s: Snapshot) -> OutboundMessage:
    return OutboundMessage(
        texts.MANAGE_PLANTS_CHOOSE_GROUP, _group_choices(s.groups),
        media=Screen.MANAGE_PLANTS_CHOOSE_GROUP,
    )


def _manage_plants_choose(s: Snapshot) -> OutboundMessage:
    return OutboundMessage(
        texts.MANAGE_PLANTS_CHOOSE.format(**_plant_fields(s)), _plant_choices(s.plants),
        media=Screen.MANAGE_PLANTS_CHOOSE,
    )


def _manage_plant_action(s: Snapshot) -> OutboundMessage:
    return _plant_photo(
        s,
        texts.MANAGE_PLANT_ACTION.format(**_plant_fields(s)),
        [[buttons.CHANGE_PLANT, buttons.REMOVE_PLANT], _nav()],
    )


def _manage_plant_change(s: Snapshot) -> OutboundMessage:
    return _plant_photo(
        s,
        texts.MANAGE_PLANT_CHANGE.format(**_plant_fields(s)),
        [
            [buttons.CHANGE_PLANT_TITLE, buttons.CHANGE_PLANT_DESCRIPTION],
            [buttons.CHANGE_PLANT_GROUP, buttons.CHANGE_PLANT_PHOTO],
            _nav(),
        ],
    )


def _change_plant_title(s: Snapshot) -> OutboundMessage:
    return OutboundMessage(
        texts.CHANGE_PLANT_TITLE.format(**_plant_fields(s)), [_nav()], media=Screen.CHANGE_PLANT_TITLE,
    )


def _change_plant_description(s: Snapshot) -> OutboundMessage:
    return OutboundMessage(
        texts.CHANGE_PLANT_DESCRIPTION.format(**_plant_fields(s)), [_nav()],
        media=Screen.CHANGE_PLANT_DESCRIPTION,
    )


def _change_plant_group(s: Snapshot) -> OutboundMessage:
    current = s.plant.group_id if s.plant else None
    return OutboundMessage(
        texts.CHANGE_PLANT_GROUP.format(**_plant_fields(s)),
        _group_choices([g for g in s.groups if g.id != current]),
        media=Screen.CHANGE_PLANT_GROUP,
    )


def _change_plant_photo(s: Snapshot) -> OutboundMessage:
    return OutboundMessage(
        texts.CHANGE_PLANT_PHOTO.format(**_plant_fields(s)), [_nav()], media=Screen.CHANGE_PLANT_PHOTO,
    )


def _manage_plant_removal(s: Snapshot) -> OutboundMessage:
    return OutboundMessage(
        texts.MANAGE_PLANT_REMOVAL.format(**_plant_fields(s)),
        [[buttons.CONFIRM_REMOVE_PLANT], _nav()],
        media=Screen.MANAGE_PLANT_REMOVAL,
    )


def _notify(s: Snapshot) -> OutboundMessage:
    group = s.group or GroupDraft()
    return OutboundMessage(
        texts.NOTIFY.format(plants=plants_list_text(s.plants), **_group_fields(group)),
        [[buttons.GROUP_WATERED.with_data(group.id)]],
    )


_SCREENS: dict[Screen, Callable[[Snapshot], OutboundMessage]] = {
    Screen.START: _start,
    Screen.HELP: _help,
    Screen.UNKNOWN_SESSION: _unknown_session,
    Screen.ADD_GROUP_TITLE: _add_group_title,
    Screen.ADD_GROUP_DESCRIPTION: _add_group_description,
    Screen.ADD_GROUP_LAST_WATERING: _add_group_last_watering,
    Screen.ADD_GROUP_INTERVAL: _add_group_interval,
    Screen.ADD_GROUP_CONFIRM: _add_group_confirm,
    Screen.GROUP_CREATED: _group_created,
    Screen.MANAGE_GROUPS: _manage_groups,
    Screen.MANAGE_GROUP_ACTION: _manage_group_action,
    Screen.MANAGE_GROUP_CHANGE: _manage_group_change,
    Screen.CHANGE_GROUP_TITLE: _change_group_title,
    Screen.CHANGE_GROUP_DESCRIPTION: _change_group_description,
    Screen.CHANGE_GROUP_LAST_WATERING: _change_group_last_watering,
    Screen.CHANGE_GROUP_INTERVAL: _change_group_interval,
    Screen.MANAGE_GROUP_REMOVAL: _manage_group_removal,
    Screen.MANAGE_GROUP_SEE_PLANTS: _manage_group_see_plants,
    Screen.ADD_PLANT_TITLE: _add_plant_title,
    Screen.ADD_PLANT_DESCRIPTION: _add_plant_description,
    Screen.ADD_PLANT_GROUP: _add_plant_group,
    Screen.ADD_PLANT_PHOTO_QUESTION: _add_plant_photo_question,
    Screen.ADD_PLANT_PHOTO: _add_plant_photo,
    Screen.ADD_PLANT_CONFIRM: _add_plant_confirm,
    Screen.PLANT_CREATED: _plant_created,
    Screen.MANAGE_PLANTS_CHOOSE_GROUP: _manage_plants_choose_group,
    Screen.MANAGE_PLANTS_CHOOSE: _manage_plants_choose,
    Screen.MANAGE_PLANT_ACTION: _manage_plant_action,
    Screen.MANAGE_PLANT_CHANGE: _manage_plant_change,
    Screen.CHANGE_PLANT_TITLE: _change_plant_title,
    Screen.CHANGE_PLANT_DESCRIPTION: _change_plant_description,
    Screen.CHANGE_PLANT_GROUP: _change_plant_group,
    Screen.CHANGE_PLANT_PHOTO: _change_plant_photo,
    Screen.MANAGE_PLANT_REMOVAL: _manage_plant_removal,
    Screen.NOTIFY: _notify,
}


def render(screen: Screen, snapshot: Snapshot | None = None) -> OutboundMessage:
    """Build the outbound message for a screen."""
    return _SCREENS[screen](snapshot or Snapshot())
