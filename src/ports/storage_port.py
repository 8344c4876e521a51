"""Storage port — abstract interface for persisting users, groups and plants.

Core modules depend on this protocol, never on a specific database.
Every operation is atomic on its own; multi-row consistency (deleting a
group together with its plants) is the implementation's job.
"""

from __future__ import annotations

from datetime import date
from typing import Protocol

from src.data.models import Group, Notification, Plant, Temporary, User, UserProfile


class StorageError(Exception):
    """Raised when the underlying persistence layer fails."""


class DuplicateNotification(StorageError):
    """A reminder for this group was already recorded for that day."""


class StoragePort(Protocol):
    """Abstract storage interface used by core modules."""

    # Users
    def save_user(self, profile: UserProfile) -> int: ...

    def get_user_by_id(self, user_id: int) -> User | None: ...

    def get_user_by_telegram_id(self, telegram_id: int) -> User | None: ...

    # Temporary
    def create_temporary(self, temp: Temporary) -> Temporary: ...

    def update_temporary(self, temp: Temporary) -> None: ...

    def get_temporary_by_user_id(self, user_id: int) -> Temporary | None: ...

    # Groups
    def create_group(self, group: Group) -> int: ...

    def update_group(self, group: Group) -> None: ...

    def group_exists(self, user_id: int, title: str, exclude_id: int | None = None) -> bool: ...

    def delete_group(self, group_id: int) -> bool: ...

    def get_user_groups(self, user_id: int) -> list[Group]: ...

    def count_user_groups(self, user_id: int) -> int: ...

    def get_group(self, group_id: int) -> Group | None: ...

    def get_groups_for_notify(
        self,
        limit: int,
        offset: int = 0,
        today: date | None = None,
        after: tuple[date, int] | None = None,
        skip_notified: bool = True,
    ) -> list[Group]: ...

    # Plants
    def create_plant(self, plant: Plant) -> int: ...

    def update_plant(self, plant: Plant) -> None: ...

    def plant_exists(self, group_id: int, title: str, exclude_id: int | None = None) -> bool: ...

    def delete_plant(self, plant_id: int) -> bool: ...

    def get_user_plants(self, user_id: int) -> list[Plant]: ...

    def count_user_plants(self, user_id: int) -> int: ...

    def count_group_plants(self, group_id: int) -> int: ...

    def get_plant(self, plant_id: int) -> Plant | None: ...

    def get_group_plants(self, group_id: int) -> list[Plant]: ...

    # Notifications
    def save_notification(self, notification: Notification) -> int: ...

    def notification_exists(self, group_id: int, day: date) -> bool: ...

    def get_group_notifications(self, group_id: int) -> list[Notification]: ...
