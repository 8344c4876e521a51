"""
Plants Care Bot — Inline button catalog.

Every button kind has one stable ``unique`` tag. Buttons that stand for
an entry of a variable list (a group, a plant, an interval, a calendar
day) share their kind's tag and carry the entry in ``data``; the
dispatcher routes on the tag and hands the data to the handler.

The catalog is immutable: buttons are frozen and parameterized copies
are made with ``Button.with_data``.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

CALLBACK_SEPARATOR = "|"
CALLBACK_DATA_LIMIT = 64  # bytes, Telegram limit for callback_data


@dataclass(frozen=True)
class Button:
    label: str
    unique: str
    data: str = ""

    def with_data(self, data: object, label: str | None = None) -> Button:
        """Copy of this button carrying a payload (and optionally another label)."""
        return replace(self, data=str(data), label=label if label is not None else self.label)


def encode_callback(button: Button) -> str:
    """Pack a button's routing tag and payload into Telegram callback_data."""
    raw = f"{button.unique}{CALLBACK_SEPARATOR}{button.data}" if button.data else button.unique
    if len(raw.encode("utf-8")) > CALLBACK_DATA_LIMIT:
        raise ValueError(f"callback_data too long for button '{button.unique}': {raw!r}")
    return raw


def decode_callback(raw: str) -> tuple[str, str]:
    """Split callback_data back into (unique, data)."""
    unique, _, data = (raw or "").partition(CALLBACK_SEPARATOR)
    return unique, data


# --- Navigation ---

MENU = Button("В меню 🏠", "menu")
BACK = Button("Назад ↩️", "back")
SKIP_DESCRIPTION = Button("Пропустить", "skipDescription")

# --- Start screen ---

CREATE_GROUP = Button("Добавить сценарий полива", "createGroup")
MANAGE_GROUPS = Button("Управление сценариями полива", "manageGroups")
ADD_PLANT = Button("Добавить растение", "addPlant")
ADD_ANOTHER_PLANT = Button("Добавить ещё растение", "addPlant")
MANAGE_PLANTS = Button("Управление растениями", "managePlants")

# --- Parameterized lists ---

WATERING_INTERVAL = Button("", "wateringInterval")   # data: days
GROUP_CHOICE = Button("", "groupChoice")             # data: group id
PLANT_CHOICE = Button("", "plantChoice")             # data: plant id

# --- Groups ---

CONFIRM_ADD_GROUP = Button("Подтвердить ✅", "confirmAddGroup")
SEE_GROUP_PLANTS = Button("Растения сценария 🌱", "seeGroupPlants")
CHANGE_GROUP = Button("Изменить ✏️", "changeGroup")
REMOVE_GROUP = Button("Удалить 🗑", "removeGroup")
CONFIRM_REMOVE_GROUP = Button("Да, удалить ❌", "confirmRemoveGroup")
CHANGE_GROUP_TITLE = Button("Название", "changeGroupTitle")
CHANGE_GROUP_DESCRIPTION = Button("Описание", "changeGroupDescription")
CHANGE_GROUP_LAST_WATERING = Button("Дата последнего полива", "changeGroupLastWatering")
CHANGE_GROUP_INTERVAL = Button("Интервал полива", "changeGroupInterval")

# Sent with reminders; data: group id
GROUP_WATERED = Button("Растения в данном сценарии политы ✅", "groupWatered")

# --- Plants ---

PHOTO_YES = Button("Да 📷", "photoYes")
PHOTO_NO = Button("Нет", "photoNo")
CONFIRM_ADD_PLANT = Button("Подтвердить ✅", "confirmAddPlant")
CHANGE_PLANT = Button("Изменить ✏️", "changePlant")
REMOVE_PLANT = Button("Удалить 🗑", "removePlant")
CONFIRM_REMOVE_PLANT = Button("Да, удалить ❌", "confirmRemovePlant")
CHANGE_PLANT_TITLE = Button("Название", "changePlantTitle")
CHANGE_PLANT_DESCRIPTION = Button("Описание", "changePlantDescription")
CHANGE_PLANT_GROUP = Button("Сценарий полива", "changePlantGroup")
CHANGE_PLANT_PHOTO = Button("Фото", "changePlantPhoto")

# --- Calendar ---

CALENDAR_DAY = Button("", "calendarDay")             # data: YYYY-MM-DD
CALENDAR_MONTH = Button("", "calendarMonth")         # data: YYYY-MM, switches the shown month
CALENDAR_MONTHS = Button("", "calendarMonths")       # data: YYYY, opens the month picker
CALENDAR_IGNORE = Button(" ", "calendarIgnore")
