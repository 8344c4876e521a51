"""Tests for src.data.db — PlantsCareDB (SQLite storage)."""

import pytest
from datetime import date

from src.core.errors import GroupAlreadyExists, PlantAlreadyExists
from src.core.steps import Step
from src.data.db import PlantsCareDB
from src.data.models import (
    Group,
    GroupDraft,
    Notification,
    Plant,
    PlantDraft,
    Temporary,
    UserProfile,
)
from src.ports.storage_port import DuplicateNotification


def _add_user(db, telegram_id=12345, **kwargs):
    return db.save_user(UserProfile(telegram_id=telegram_id, **kwargs))


def _add_group(db, user_id, title="Кухня", last=date(2024, 6, 1), interval=7, next_date=None):
    group = Group(
        id=0,
        user_id=user_id,
        title=title,
        description="➖",
        last_watering_date=last,
        watering_interval=interval,
        next_watering_date=next_date or date.fromordinal(last.toordinal() + interval),
    )
    group.id = db.create_group(group)
    return group


def _add_plant(db, user_id, group_id, title="Фикус", photo=b""):
    plant = Plant(id=0, user_id=user_id, group_id=group_id, title=title, description="➖", photo=photo)
    plant.id = db.create_plant(plant)
    return plant


def _notification(group_id, day="2024-06-10", message_id=1):
    return Notification(
        id=0, group_id=group_id, message_id=message_id, text="Пора полить",
        sent_at=f"{day}T12:00:00+03:00", sent_on=day,
    )


class TestUsers:
    def test_save_user_returns_id(self, db):
        user_id = _add_user(db, first_name="Аня")
        user = db.get_user_by_id(user_id)
        assert user.telegram_id == 12345
        assert user.first_name == "Аня"

    def test_save_user_is_upsert(self, db):
        first = _add_user(db, username="old")
        second = _add_user(db, username="new")
        assert first == second
        assert db.get_user_by_telegram_id(12345).username == "new"

    def test_unknown_user(self, db):
        assert db.get_user_by_telegram_id(999) is None
        assert db.get_user_by_id(999) is None

    def test_creates_parent_directory(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "plants.db"
        PlantsCareDB(db_path=str(path), timeout=5)
        assert path.exists()


class TestTemporary:
    def test_create_temporary_once_per_user(self, db):
        user_id = _add_user(db)
        first = db.create_temporary(Temporary(id=0, user_id=user_id, step=Step.IDLE))
        db.update_temporary(Temporary(
            id=first.id, user_id=user_id, step=Step.ADD_GROUP_TITLE, message_id=55,
        ))

        again = db.create_temporary(Temporary(id=0, user_id=user_id, step=Step.IDLE))
        assert again.id == first.id
        assert again.step == Step.ADD_GROUP_TITLE
        assert again.message_id == 55

    def test_draft_roundtrip(self, db):
        user_id = _add_user(db)
        temp = db.create_temporary(Temporary(id=0, user_id=user_id, step=Step.IDLE))
        temp.step = Step.ADD_GROUP_INTERVAL
        temp.draft = GroupDraft(user_id=user_id, title="Кухня", last_watering_date=date(2024, 6, 1))
        db.update_temporary(temp)

        stored = db.get_temporary_by_user_id(user_id)
        assert stored.step == Step.ADD_GROUP_INTERVAL
        assert isinstance(stored.draft, GroupDraft)
        assert stored.draft.last_watering_date == date(2024, 6, 1)

    def test_plant_draft_with_photo(self, db):
        user_id = _add_user(db)
        temp = db.create_temporary(Temporary(id=0, user_id=user_id, step=Step.IDLE))
        temp.draft = PlantDraft(user_id=user_id, title="Фикус", photo=b"\x00\x01\x02")
        db.update_temporary(temp)
        assert db.get_temporary_by_user_id(user_id).draft.photo == b"\x00\x01\x02"

    def test_missing_temporary(self, db):
        assert db.get_temporary_by_user_id(42) is None


class TestGroups:
    def test_create_and_get(self, db):
        user_id = _add_user(db)
        group = _add_group(db, user_id)
        fetched = db.get_group(group.id)
        assert fetched.title == "Кухня"
        assert fetched.last_watering_date == date(2024, 6, 1)
        assert fetched.next_watering_date == date(2024, 6, 8)

    def test_title_unique_per_user(self, db):
        user_id = _add_user(db)
        _add_group(db, user_id)
        with pytest.raises(GroupAlreadyExists):
            _add_group(db, user_id)

    def test_same_title_for_other_user(self, db):
        _add_group(db, _add_user(db, 1))
        _add_group(db, _add_user(db, 2))

    def test_group_exists_with_exclude(self, db):
        user_id = _add_user(db)
        group = _add_group(db, user_id)
        assert db.group_exists(user_id, "Кухня")
        assert not db.group_exists(user_id, "Кухня", exclude_id=group.id)
        assert not db.group_exists(user_id, "Балкон")

    def test_update_into_existing_title_rejected(self, db):
        user_id = _add_user(db)
        _add_group(db, user_id, title="Кухня")
        other = _add_group(db, user_id, title="Балкон")
        other.title = "Кухня"
        with pytest.raises(GroupAlreadyExists):
            db.update_group(other)

    def test_user_groups_ordered_by_id(self, db):
        user_id = _add_user(db)
        for title in ("В", "А", "Б"):
            _add_group(db, user_id, title=title)
        assert [g.title for g in db.get_user_groups(user_id)] == ["В", "А", "Б"]
        assert db.count_user_groups(user_id) == 3

    def test_delete_cascades(self, db):
        user_id = _add_user(db)
        group = _add_group(db, user_id)
        _add_plant(db, user_id, group.id)
        db.save_notification(_notification(group.id))

        assert db.delete_group(group.id) is True
        assert db.get_group(group.id) is None
        assert db.count_group_plants(group.id) == 0
        assert db.get_group_notifications(group.id) == []

    def test_delete_missing_group(self, db):
        assert db.delete_group(999) is False


class TestPlants:
    def test_create_with_photo(self, db):
        user_id = _add_user(db)
        group = _add_group(db, user_id)
        plant = _add_plant(db, user_id, group.id, photo=b"jpeg-bytes")
        assert db.get_plant(plant.id).photo == b"jpeg-bytes"

    def test_title_unique_per_group(self, db):
        user_id = _add_user(db)
        group = _add_group(db, user_id)
        _add_plant(db, user_id, group.id)
        with pytest.raises(PlantAlreadyExists):
            _add_plant(db, user_id, group.id)

    def test_same_title_in_other_group(self, db):
        user_id = _add_user(db)
        first = _add_group(db, user_id, title="Кухня")
        second = _add_group(db, user_id, title="Балкон")
        _add_plant(db, user_id, first.id)
        _add_plant(db, user_id, second.id)
        assert db.count_user_plants(user_id) == 2

    def test_move_plant(self, db):
        user_id = _add_user(db)
        first = _add_group(db, user_id, title="Кухня")
        second = _add_group(db, user_id, title="Балкон")
        plant = _add_plant(db, user_id, first.id)

        plant.group_id = second.id
        db.update_plant(plant)

        assert db.count_group_plants(first.id) == 0
        assert [p.title for p in db.get_group_plants(second.id)] == ["Фикус"]

    def test_plant_exists_with_exclude(self, db):
        user_id = _add_user(db)
        group = _add_group(db, user_id)
        plant = _add_plant(db, user_id, group.id)
        assert db.plant_exists(group.id, "Фикус")
        assert not db.plant_exists(group.id, "Фикус", exclude_id=plant.id)

    def test_delete_plant(self, db):
        user_id = _add_user(db)
        group = _add_group(db, user_id)
        plant = _add_plant(db, user_id, group.id)
        assert db.delete_plant(plant.id) is True
        assert db.delete_plant(plant.id) is False
        assert db.get_plant(plant.id) is None

    def test_user_plants(self, db):
        user_id = _add_user(db)
        group = _add_group(db, user_id)
        _add_plant(db, user_id, group.id, title="Фикус")
        _add_plant(db, user_id, group.id, title="Кактус")
        assert [p.title for p in db.get_user_plants(user_id)] == ["Фикус", "Кактус"]


class TestGroupsForNotify:
    TODAY = date(2024, 6, 10)

    def _setup(self, db):
        user_id = _add_user(db)
        overdue = _add_group(db, user_id, title="Просрочен", next_date=date(2024, 6, 1))
        due = _add_group(db, user_id, title="Сегодня", next_date=self.TODAY)
        _add_group(db, user_id, title="Завтра", next_date=date(2024, 6, 11))
        return overdue, due

    def test_only_due_groups_in_date_order(self, db):
        overdue, due = self._setup(db)
        groups = db.get_groups_for_notify(10, today=self.TODAY)
        assert [g.id for g in groups] == [overdue.id, due.id]

    def test_limit_and_offset(self, db):
        overdue, due = self._setup(db)
        assert [g.id for g in db.get_groups_for_notify(1, today=self.TODAY)] == [overdue.id]
        assert [g.id for g in db.get_groups_for_notify(1, offset=1, today=self.TODAY)] == [due.id]

    def test_keyset_cursor(self, db):
        overdue, due = self._setup(db)
        after = (overdue.next_watering_date, overdue.id)
        groups = db.get_groups_for_notify(10, today=self.TODAY, after=after)
        assert [g.id for g in groups] == [due.id]

    def test_cursor_breaks_date_ties_by_id(self, db):
        user_id = _add_user(db)
        a = _add_group(db, user_id, title="A", next_date=self.TODAY)
        b = _add_group(db, user_id, title="B", next_date=self.TODAY)
        groups = db.get_groups_for_notify(10, today=self.TODAY, after=(self.TODAY, a.id))
        assert [g.id for g in groups] == [b.id]

    def test_skips_groups_notified_today(self, db):
        overdue, due = self._setup(db)
        db.save_notification(_notification(overdue.id, day=self.TODAY.isoformat()))

        groups = db.get_groups_for_notify(10, today=self.TODAY)
        assert [g.id for g in groups] == [due.id]

        groups = db.get_groups_for_notify(10, today=self.TODAY, skip_notified=False)
        assert [g.id for g in groups] == [overdue.id, due.id]

    def test_yesterdays_notification_does_not_skip(self, db):
        overdue, _ = self._setup(db)
        db.save_notification(_notification(overdue.id, day="2024-06-09"))
        groups = db.get_groups_for_notify(10, today=self.TODAY)
        assert overdue.id in [g.id for g in groups]


class TestNotifications:
    def test_save_and_list(self, db):
        user_id = _add_user(db)
        group = _add_group(db, user_id)
        notification_id = db.save_notification(_notification(group.id, message_id=77))

        stored = db.get_group_notifications(group.id)
        assert len(stored) == 1
        assert stored[0].id == notification_id
        assert stored[0].message_id == 77
        assert db.notification_exists(group.id, date(2024, 6, 10))
        assert not db.notification_exists(group.id, date(2024, 6, 11))

    def test_one_per_group_per_day(self, db):
        user_id = _add_user(db)
        group = _add_group(db, user_id)
        db.save_notification(_notification(group.id))
        with pytest.raises(DuplicateNotification):
            db.save_notification(_notification(group.id, message_id=2))

    def test_next_day_allowed(self, db):
        user_id = _add_user(db)
        group = _add_group(db, user_id)
        db.save_notification(_notification(group.id, day="2024-06-10"))
        db.save_notification(_notification(group.id, day="2024-06-11"))
        assert len(db.get_group_notifications(group.id)) == 2
