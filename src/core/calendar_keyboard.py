"""
Plants Care Bot — Inline calendar.

A month grid of day buttons used to pick a watering date. Pressing a day
produces a ``DateSelection`` intent; the header and the arrows only
redraw the keyboard in place.
"""

from __future__ import annotations

import calendar
from datetime import date

from src.core import buttons
from src.core.buttons import Button

MONTH_NAMES = (
    "Январь", "Февраль", "Март", "Апрель", "Май", "Июнь",
    "Июль", "Август", "Сентябрь", "Октябрь", "Ноябрь", "Декабрь",
)
WEEKDAY_NAMES = ("Пн", "Вт", "Ср", "Чт", "Пт", "Сб", "Вс")

MIN_YEAR = 1970
MAX_YEAR = 2100

_calendar = calendar.Calendar(firstweekday=calendar.MONDAY)


def _nav_row() -> list[Button]:
    return [buttons.BACK, buttons.MENU]


def _shift_month(month: date, delta: int) -> date:
    index = month.year * 12 + (month.month - 1) + delta
    return date(index // 12, index % 12 + 1, 1)


def month_keyboard(month: date) -> list[list[Button]]:
    """Day grid for the month containing ``month``, Monday first."""
    first = month.replace(day=1)
    rows: list[list[Button]] = [[
        buttons.CALENDAR_MONTHS.with_data(
            first.year, label=f"{MONTH_NAMES[first.month - 1]} {first.year}",
        ),
    ]]
    rows.append([buttons.CALENDAR_IGNORE.with_data("", label=name) for name in WEEKDAY_NAMES])

    for week in _calendar.monthdayscalendar(first.year, first.month):
        row = []
        for day in week:
            if day == 0:
                row.append(buttons.CALENDAR_IGNORE)
            else:
                row.append(buttons.CALENDAR_DAY.with_data(
                    first.replace(day=day).isoformat(), label=str(day),
                ))
        rows.append(row)

    controls: list[Button] = []
    previous, following = _shift_month(first, -1), _shift_month(first, 1)
    controls.append(
        buttons.CALENDAR_MONTH.with_data(previous.strftime("%Y-%m"), label="◀️")
        if previous.year >= MIN_YEAR else buttons.CALENDAR_IGNORE
    )
    controls.append(
        buttons.CALENDAR_MONTH.with_data(following.strftime("%Y-%m"), label="▶️")
        if following.year <= MAX_YEAR else buttons.CALENDAR_IGNORE
    )
    rows.append(controls)
    rows.append(_nav_row())
    return rows


def month_picker_keyboard(year: int) -> list[list[Button]]:
    """Twelve month buttons in two columns for ``year``."""
    rows: list[list[Button]] = []
    row: list[Button] = []
    for number, name in enumerate(MONTH_NAMES, start=1):
        row.append(buttons.CALENDAR_MONTH.with_data(f"{year:04d}-{number:02d}", label=name))
        if len(row) == 2:
            rows.append(row)
            row = []
    rows.append(_nav_row())
    return rows


def parse_day(data: str) -> date:
    """Date carried by a calendar day button."""
    return date.fromisoformat(data)


def parse_month(data: str) -> date:
    """First day of the month carried by a navigation button (``YYYY-MM``)."""
    year, _, month = data.partition("-")
    return date(int(year), int(month), 1)
