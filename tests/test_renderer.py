"""Tests for src.core.renderer, buttons and the inline calendar."""

from datetime import date

import pytest

from src.core import buttons
from src.core.buttons import CALLBACK_DATA_LIMIT, Button, decode_callback, encode_callback
from src.core.calendar_keyboard import month_keyboard, month_picker_keyboard, parse_day, parse_month
from src.core.renderer import DEFAULT_PLANT_MEDIA, Screen, Snapshot, plants_list_text, render
from src.core.watering import ALLOWED_INTERVALS
from src.data.models import GroupDraft, Plant, PlantDraft


def _uniques(message):
    return [b.unique for b in message.buttons]


def _plant(number, title):
    return Plant(id=number, user_id=1, group_id=1, title=title, description="➖")


# ---------------------------------------------------------------------------
# Callback data
# ---------------------------------------------------------------------------


class TestCallbackData:
    def test_plain_button(self):
        assert encode_callback(buttons.MENU) == "menu"
        assert decode_callback("menu") == ("menu", "")

    def test_button_with_data(self):
        raw = encode_callback(buttons.GROUP_CHOICE.with_data(42, label="Кухня"))
        assert raw == "groupChoice|42"
        assert decode_callback(raw) == ("groupChoice", "42")

    def test_calendar_day(self):
        raw = encode_callback(buttons.CALENDAR_DAY.with_data("2024-06-10"))
        assert decode_callback(raw) == ("calendarDay", "2024-06-10")

    def test_too_long_rejected(self):
        with pytest.raises(ValueError):
            encode_callback(Button("x", "u", "d" * CALLBACK_DATA_LIMIT))

    def test_with_data_keeps_catalog_intact(self):
        copy = buttons.WATERING_INTERVAL.with_data(7, label="7 дней")
        assert copy.data == "7"
        assert buttons.WATERING_INTERVAL.data == ""

    def test_every_catalog_button_fits(self):
        for value in vars(buttons).values():
            if isinstance(value, Button):
                assert len(encode_callback(value.with_data("2024-06-10")).encode()) <= CALLBACK_DATA_LIMIT


# ---------------------------------------------------------------------------
# Calendar
# ---------------------------------------------------------------------------


class TestCalendar:
    def test_june_2024_layout(self):
        rows = month_keyboard(date(2024, 6, 15))
        assert rows[0][0].label == "Июнь 2024"
        assert [b.label for b in rows[1]] == ["Пн", "Вт", "Ср", "Чт", "Пт", "Сб", "Вс"]
        # 1 June 2024 is a Saturday
        first_week = rows[2]
        assert [b.unique for b in first_week[:5]] == ["calendarIgnore"] * 5
        assert first_week[5].data == "2024-06-01"

        days = [b for row in rows for b in row if b.unique == "calendarDay"]
        assert len(days) == 30
        assert days[-1].data == "2024-06-30"

    def test_month_navigation(self):
        rows = month_keyboard(date(2024, 1, 1))
        controls = rows[-2]
        assert [b.data for b in controls] == ["2023-12", "2024-02"]
        assert [b.unique for b in rows[-1]] == ["back", "menu"]

    def test_month_picker(self):
        rows = month_picker_keyboard(2024)
        months = [b for row in rows for b in row if b.unique == "calendarMonth"]
        assert len(months) == 12
        assert months[0].data == "2024-01"
        assert months[-1].data == "2024-12"

    def test_parse(self):
        assert parse_day("2024-06-10") == date(2024, 6, 10)
        assert parse_month("2024-06") == date(2024, 6, 1)


# ---------------------------------------------------------------------------
# Screens
# ---------------------------------------------------------------------------


class TestStartScreen:
    def test_new_user_can_only_create_group(self):
        message = render(Screen.START, Snapshot())
        assert _uniques(message) == ["createGroup"]
        assert message.media == Screen.START

    def test_with_groups(self):
        message = render(Screen.START, Snapshot(groups_count=1))
        assert _uniques(message) == ["createGroup", "addPlant", "manageGroups"]

    def test_with_groups_and_plants(self):
        message = render(Screen.START, Snapshot(groups_count=2, plants_count=3))
        assert _uniques(message) == ["createGroup", "addPlant", "manageGroups", "managePlants"]


class TestGroupScreens:
    DRAFT = GroupDraft(
        id=5, user_id=1, title="Кухня", description="➖",
        last_watering_date=date(2024, 6, 1), watering_interval=3,
        next_watering_date=date(2024, 6, 4),
    )

    def test_interval_keyboard(self):
        message = render(Screen.ADD_GROUP_INTERVAL, Snapshot(group=self.DRAFT))
        intervals = [b for b in message.buttons if b.unique == "wateringInterval"]
        assert [int(b.data) for b in intervals] == list(ALLOWED_INTERVALS)
        assert intervals[0].label == "1 день"
        assert intervals[1].label == "2 дня"
        assert message.keyboard[-1] == [buttons.BACK, buttons.MENU]

    def test_confirm_shows_card(self):
        message = render(Screen.ADD_GROUP_CONFIRM, Snapshot(group=self.DRAFT))
        assert "Кухня" in message.text
        assert "01.06.2024" in message.text
        assert "3 дня" in message.text
        assert "04.06.2024" in message.text
        assert "confirmAddGroup" in _uniques(message)

    def test_last_watering_shows_calendar(self):
        message = render(
            Screen.ADD_GROUP_LAST_WATERING, Snapshot(group=self.DRAFT, month=date(2024, 6, 1)),
        )
        assert "calendarDay" in _uniques(message)
        assert message.keyboard[0][0].label == "Июнь 2024"

    def test_action_hides_plants_button_for_empty_group(self):
        empty = render(Screen.MANAGE_GROUP_ACTION, Snapshot(group=self.DRAFT, plants_count=0))
        assert "seeGroupPlants" not in _uniques(empty)
        full = render(Screen.MANAGE_GROUP_ACTION, Snapshot(group=self.DRAFT, plants_count=2))
        assert "seeGroupPlants" in _uniques(full)

    def test_group_choices(self):
        from src.data.models import Group
        groups = [
            Group(id=i, user_id=1, title=t, description="➖", last_watering_date=date(2024, 6, 1),
                  watering_interval=7, next_watering_date=date(2024, 6, 8))
            for i, t in ((3, "Кухня"), (9, "Балкон"))
        ]
        message = render(Screen.MANAGE_GROUPS, Snapshot(groups=groups))
        choices = [b for b in message.buttons if b.unique == "groupChoice"]
        assert [(b.label, b.data) for b in choices] == [("Кухня", "3"), ("Балкон", "9")]


class TestPlantScreens:
    def test_confirm_uses_uploaded_photo(self):
        draft = PlantDraft(user_id=1, group_id=2, title="Фикус", photo=b"img")
        message = render(Screen.ADD_PLANT_CONFIRM, Snapshot(plant=draft, group_title="Кухня"))
        assert message.photo == b"img"
        assert "Кухня" in message.text

    def test_empty_photo_falls_back_to_default_image(self):
        draft = PlantDraft(user_id=1, group_id=2, title="Фикус", photo=b"")
        message = render(Screen.MANAGE_PLANT_ACTION, Snapshot(plant=draft, group_title="Кухня"))
        assert message.photo is None
        assert message.media == DEFAULT_PLANT_MEDIA

    def test_change_group_excludes_current(self):
        from src.data.models import Group
        groups = [
            Group(id=i, user_id=1, title=f"G{i}", description="➖", last_watering_date=date(2024, 6, 1),
                  watering_interval=7, next_watering_date=date(2024, 6, 8))
            for i in (1, 2, 3)
        ]
        draft = PlantDraft(id=1, user_id=1, group_id=2, title="Фикус")
        message = render(Screen.CHANGE_PLANT_GROUP, Snapshot(plant=draft, groups=groups))
        assert [b.data for b in message.buttons if b.unique == "groupChoice"] == ["1", "3"]


class TestNotifyScreen:
    GROUP = GroupDraft(
        id=7, user_id=1, title="Кухня", description="у окна",
        last_watering_date=date(2024, 6, 3), watering_interval=7,
        next_watering_date=date(2024, 6, 10),
    )

    def test_lists_plants_in_order(self):
        plants = [_plant(1, "Фикус"), _plant(2, "Кактус")]
        message = render(Screen.NOTIFY, Snapshot(group=self.GROUP, plants=plants))
        assert "1) Фикус\n2) Кактус\n" in message.text
        assert "03.06.2024" in message.text
        assert "7 дней" in message.text
        assert message.media is None

    def test_watered_button_carries_group_id(self):
        message = render(Screen.NOTIFY, Snapshot(group=self.GROUP))
        assert len(message.buttons) == 1
        assert message.buttons[0].unique == "groupWatered"
        assert message.buttons[0].data == "7"

    def test_empty_group(self):
        message = render(Screen.NOTIFY, Snapshot(group=self.GROUP))
        assert "не было добавлено ни одно растение" in message.text

    def test_plants_list_text(self):
        assert plants_list_text([]) == "В данный сценарий полива пока что не было добавлено ни одно растение!\n"
        assert plants_list_text([_plant(1, "A")]) == "1) A\n"


def test_every_screen_renders_without_data():
    for screen in Screen:
        message = render(screen, Snapshot(month=date(2024, 6, 1)))
        assert message.text


@pytest.mark.parametrize("screen", [Screen.ADD_GROUP_LAST_WATERING, Screen.CHANGE_GROUP_LAST_WATERING])
def test_calendar_screens_need_a_month(screen):
    with pytest.raises(ValueError):
        render(screen)
