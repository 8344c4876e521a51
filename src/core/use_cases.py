"""
Plants Care Bot — Use cases.

Thin orchestrators between the chat layer and storage. Wizard steps that
only stage input (AddGroupTitle, AddPlantGroup, ...) validate it and
return the new draft without writing it: the wizard persists the draft
together with the step and the id of the screen it sent, so a failed
send never leaves a half-advanced session. Commit steps and edits of
existing groups and plants write straight to storage.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Callable
from zoneinfo import ZoneInfo

from src.core.errors import (
    DraftIncomplete,
    GroupAlreadyExists,
    GroupNotFound,
    GroupsLimitExceeded,
    PlantAlreadyExists,
    PlantNotFound,
    PlantsLimitExceeded,
    TemporaryNotFound,
    UserNotFound,
)
from src.core.steps import Step
from src.core.watering import (
    compute_next_watering,
    normalize_description,
    validate_group_title,
    validate_interval,
    validate_last_watering,
    validate_plant_title,
)
from src.data.models import (
    Group,
    GroupDraft,
    Notification,
    Plant,
    PlantDraft,
    Temporary,
    User,
    UserProfile,
)
from src.ports.storage_port import StoragePort
from src.ports.transport_port import SentMessage

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def default_clock(tz_name: str | None = None) -> Clock:
    """Clock returning the current time in the configured time zone."""
    if tz_name is None:
        from src.config import settings
        tz_name = settings.TIMEZONE
    tz = ZoneInfo(tz_name)
    return lambda: datetime.now(tz)


class PlantsCareService:
    """Use-case layer over a StoragePort."""

    def __init__(
        self,
        storage: StoragePort,
        clock: Clock | None = None,
        groups_limit: int | None = None,
        plants_limit: int | None = None,
    ) -> None:
        if groups_limit is None or plants_limit is None:
            from src.config import settings
            groups_limit = groups_limit or settings.GROUPS_PER_USER_LIMIT
            plants_limit = plants_limit or settings.PLANTS_PER_GROUP_LIMIT

        self.storage = storage
        self.clock = clock or default_clock()
        self.groups_limit = groups_limit
        self.plants_limit = plants_limit

    def now(self) -> datetime:
        return self.clock()

    def today(self) -> date:
        return self.clock().date()

    # ------------------------------------------------------------------
    # Users and sessions
    # ------------------------------------------------------------------

    def save_user(self, profile: UserProfile) -> int:
        """Upsert the user by telegram_id and put their session back to Idle.

        The pending screen id is kept so the next screen can replace it.
        """
        user_id = self.storage.save_user(profile)
        temp = self.storage.create_temporary(Temporary(id=0, user_id=user_id, step=Step.IDLE))
        if temp.step != Step.IDLE or temp.draft is not None:
            self.storage.update_temporary(replace(temp, step=Step.IDLE, draft=None))
        return user_id

    def get_user(self, telegram_id: int) -> User:
        user = self.storage.get_user_by_telegram_id(telegram_id)
        if user is None:
            raise UserNotFound()
        return user

    def get_user_by_id(self, user_id: int) -> User:
        user = self.storage.get_user_by_id(user_id)
        if user is None:
            raise UserNotFound()
        return user

    def get_user_temporary(self, telegram_id: int) -> Temporary:
        user = self.get_user(telegram_id)
        temp = self.storage.get_temporary_by_user_id(user.id)
        if temp is None:
            raise TemporaryNotFound()
        return temp

    def reset_temporary(self, telegram_id: int) -> Temporary:
        """Back to Idle with nothing staged."""
        temp = self.get_user_temporary(telegram_id)
        temp = replace(temp, step=Step.IDLE, draft=None)
        self.storage.update_temporary(temp)
        return temp

    def set_temporary_step(self, telegram_id: int, step: Step, message_id: int | None = None) -> Temporary:
        temp = replace(self.get_user_temporary(telegram_id), step=step, message_id=message_id)
        self.storage.update_temporary(temp)
        return temp

    def count_user_entities(self, telegram_id: int) -> tuple[int, int]:
        """(groups, plants) owned by the user; drives the menu buttons."""
        user = self.get_user(telegram_id)
        return self.storage.count_user_groups(user.id), self.storage.count_user_plants(user.id)

    # ------------------------------------------------------------------
    # Add group (staged)
    # ------------------------------------------------------------------

    def _group_draft(self, telegram_id: int) -> GroupDraft:
        temp = self.get_user_temporary(telegram_id)
        return temp.group_draft or GroupDraft(user_id=temp.user_id)

    def start_add_group(self, telegram_id: int) -> GroupDraft:
        user = self.get_user(telegram_id)
        if self.storage.count_user_groups(user.id) >= self.groups_limit:
            raise GroupsLimitExceeded(self.groups_limit)
        return GroupDraft(user_id=user.id)

    def add_group_title(self, telegram_id: int, title: str) -> GroupDraft:
        draft = self._group_draft(telegram_id)
        title = validate_group_title(title)
        if self.storage.group_exists(draft.user_id, title):
            raise GroupAlreadyExists()
        return draft.model_copy(update={"title": title})

    def add_group_description(self, telegram_id: int, description: str | None) -> GroupDraft:
        draft = self._group_draft(telegram_id)
        return draft.model_copy(update={"description": normalize_description(description)})

    def add_group_last_watering_date(self, telegram_id: int, last: date) -> GroupDraft:
        draft = self._group_draft(telegram_id)
        last = validate_last_watering(last, self.now())
        update: dict = {"last_watering_date": last}
        if draft.watering_interval:
            update["next_watering_date"] = compute_next_watering(last, draft.watering_interval)
        return draft.model_copy(update=update)

    def add_group_watering_interval(self, telegram_id: int, interval: int) -> GroupDraft:
        draft = self._group_draft(telegram_id)
        interval = validate_interval(interval)
        update: dict = {"watering_interval": interval}
        if draft.last_watering_date:
            update["next_watering_date"] = compute_next_watering(draft.last_watering_date, interval)
        return draft.model_copy(update=update)

    def confirm_add_group(self, telegram_id: int) -> Group:
        """Create the staged group. The session is reset by the caller's next screen."""
        draft = self._group_draft(telegram_id)
        if not draft.title or draft.last_watering_date is None or not draft.watering_interval:
            raise DraftIncomplete()

        count = self.storage.count_user_groups(draft.user_id)
        if count >= self.groups_limit:
            raise GroupsLimitExceeded(self.groups_limit)
        if self.storage.group_exists(draft.user_id, draft.title):
            raise GroupAlreadyExists()

        group = Group(
            id=0,
            user_id=draft.user_id,
            title=draft.title,
            description=normalize_description(draft.description),
            last_watering_date=draft.last_watering_date,
            watering_interval=draft.watering_interval,
            next_watering_date=compute_next_watering(draft.last_watering_date, draft.watering_interval),
        )
        group.id = self.storage.create_group(group)
        return group

    # ------------------------------------------------------------------
    # Existing groups
    # ------------------------------------------------------------------

    def get_group(self, group_id: int) -> Group:
        group = self.storage.get_group(group_id)
        if group is None:
            raise GroupNotFound()
        return group

    def get_owned_group(self, telegram_id: int, group_id: int) -> Group:
        user = self.get_user(telegram_id)
        group = self.get_group(group_id)
        if group.user_id != user.id:
            raise GroupNotFound()
        return group

    def get_user_groups(self, telegram_id: int) -> list[Group]:
        return self.storage.get_user_groups(self.get_user(telegram_id).id)

    def get_user_groups_with_plants(self, telegram_id: int) -> list[Group]:
        return [
            g for g in self.get_user_groups(telegram_id)
            if self.storage.count_group_plants(g.id) > 0
        ]

    def get_group_plants(self, group_id: int) -> list[Plant]:
        return self.storage.get_group_plants(group_id)

    def count_group_plants(self, group_id: int) -> int:
        return self.storage.count_group_plants(group_id)

    def manage_group(self, telegram_id: int, group_id: int) -> GroupDraft:
        """Snapshot of the group the user is about to manage."""
        return GroupDraft.from_group(self.get_owned_group(telegram_id, group_id))

    def update_group_title(self, group_id: int, title: str) -> Group:
        group = self.get_group(group_id)
        title = validate_group_title(title)
        if self.storage.group_exists(group.user_id, title, exclude_id=group.id):
            raise GroupAlreadyExists()
        group.title = title
        self.storage.update_group(group)
        return group

    def update_group_description(self, group_id: int, description: str | None) -> Group:
        group = self.get_group(group_id)
        group.description = normalize_description(description)
        self.storage.update_group(group)
        return group

    def update_group_last_watering_date(self, group_id: int, last: date) -> Group:
        group = self.get_group(group_id)
        group.last_watering_date = validate_last_watering(last, self.now())
        group.next_watering_date = compute_next_watering(group.last_watering_date, group.watering_interval)
        self.storage.update_group(group)
        return group

    def update_group_watering_interval(self, group_id: int, interval: int) -> Group:
        group = self.get_group(group_id)
        group.watering_interval = validate_interval(interval)
        group.next_watering_date = compute_next_watering(group.last_watering_date, group.watering_interval)
        self.storage.update_group(group)
        return group

    def delete_group(self, group_id: int) -> None:
        if not self.storage.delete_group(group_id):
            raise GroupNotFound()

    def confirm_watering(self, group_id: int) -> Group:
        """The user watered the group today: move the schedule forward."""
        group = self.get_group(group_id)
        group.last_watering_date = self.today()
        group.next_watering_date = compute_next_watering(group.last_watering_date, group.watering_interval)
        self.storage.update_group(group)
        return group

    # ------------------------------------------------------------------
    # Add plant (staged)
    # ------------------------------------------------------------------

    def _plant_draft(self, telegram_id: int) -> PlantDraft:
        temp = self.get_user_temporary(telegram_id)
        return temp.plant_draft or PlantDraft(user_id=temp.user_id)

    def start_add_plant(self, telegram_id: int) -> PlantDraft:
        return PlantDraft(user_id=self.get_user(telegram_id).id)

    def add_plant_title(self, telegram_id: int, title: str) -> PlantDraft:
        draft = self._plant_draft(telegram_id)
        title = validate_plant_title(title)
        if draft.group_id is not None and self.storage.plant_exists(draft.group_id, title):
            raise PlantAlreadyExists()
        return draft.model_copy(update={"title": title})

    def add_plant_description(self, telegram_id: int, description: str | None) -> PlantDraft:
        draft = self._plant_draft(telegram_id)
        return draft.model_copy(update={"description": normalize_description(description)})

    def _check_plant_fits(self, group_id: int, title: str | None, exclude_id: int | None = None) -> None:
        if self.storage.count_group_plants(group_id) >= self.plants_limit:
            raise PlantsLimitExceeded(self.plants_limit)
        if title and self.storage.plant_exists(group_id, title, exclude_id=exclude_id):
            raise PlantAlreadyExists()

    def add_plant_group(self, telegram_id: int, group_id: int) -> PlantDraft:
        draft = self._plant_draft(telegram_id)
        group = self.get_owned_group(telegram_id, group_id)
        self._check_plant_fits(group.id, draft.title)
        return draft.model_copy(update={"group_id": group.id})

    def add_plant_photo(self, telegram_id: int, photo: bytes | None) -> PlantDraft:
        """Stage the uploaded photo; None means the user declined and the default image is used."""
        draft = self._plant_draft(telegram_id)
        return draft.model_copy(update={"photo": photo or b""})

    def confirm_add_plant(self, telegram_id: int) -> Plant:
        draft = self._plant_draft(telegram_id)
        if not draft.title or draft.group_id is None:
            raise DraftIncomplete()
        group = self.get_owned_group(telegram_id, draft.group_id)
        self._check_plant_fits(group.id, draft.title)

        plant = Plant(
            id=0,
            user_id=group.user_id,
            group_id=group.id,
            title=draft.title,
            description=normalize_description(draft.description),
            photo=draft.photo or b"",
        )
        plant.id = self.storage.create_plant(plant)
        return plant

    # ------------------------------------------------------------------
    # Existing plants
    # ------------------------------------------------------------------

    def get_plant(self, plant_id: int) -> Plant:
        plant = self.storage.get_plant(plant_id)
        if plant is None:
            raise PlantNotFound()
        return plant

    def manage_plant(self, telegram_id: int, plant_id: int) -> PlantDraft:
        """Snapshot of the plant the user is about to manage."""
        user = self.get_user(telegram_id)
        plant = self.get_plant(plant_id)
        if plant.user_id != user.id:
            raise PlantNotFound()
        return PlantDraft.from_plant(plant)

    def update_plant_title(self, plant_id: int, title: str) -> Plant:
        plant = self.get_plant(plant_id)
        title = validate_plant_title(title)
        if self.storage.plant_exists(plant.group_id, title, exclude_id=plant.id):
            raise PlantAlreadyExists()
        plant.title = title
        self.storage.update_plant(plant)
        return plant

    def update_plant_description(self, plant_id: int, description: str | None) -> Plant:
        plant = self.get_plant(plant_id)
        plant.description = normalize_description(description)
        self.storage.update_plant(plant)
        return plant

    def update_plant_group(self, plant_id: int, group_id: int) -> Plant:
        """Move a plant to another group of the same user."""
        plant = self.get_plant(plant_id)
        if plant.group_id == group_id:
            return plant
        target = self.get_group(group_id)
        if target.user_id != plant.user_id:
            raise GroupNotFound()
        self._check_plant_fits(target.id, plant.title, exclude_id=plant.id)
        plant.group_id = target.id
        self.storage.update_plant(plant)
        return plant

    def update_plant_photo(self, plant_id: int, photo: bytes) -> Plant:
        plant = self.get_plant(plant_id)
        plant.photo = photo
        self.storage.update_plant(plant)
        return plant

    def delete_plant(self, plant_id: int) -> None:
        if not self.storage.delete_plant(plant_id):
            raise PlantNotFound()

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def get_groups_for_notify(
        self, limit: int, offset: int = 0, after: tuple[date, int] | None = None,
    ) -> list[Group]:
        """Due groups (next watering today or earlier) not yet reminded today."""
        return self.storage.get_groups_for_notify(limit, offset, today=self.today(), after=after)

    def save_notification(self, group_id: int, sent: SentMessage) -> int:
        sent_at = sent.sent_at or self.now()
        return self.storage.save_notification(Notification(
            id=0,
            group_id=group_id,
            message_id=sent.message_id,
            text=sent.text,
            sent_at=sent_at.isoformat(),
            sent_on=self.today().isoformat(),
        ))

    def already_notified(self, group_id: int) -> bool:
        return self.storage.notification_exists(group_id, self.today())
