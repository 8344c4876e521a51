"""
Plants Care Bot — Intent handlers.

One coroutine per (step, intent) pair. A handler asks a use case for the
next draft or writes an edit, then moves the session with ``go``, which
renders the screen for the target step from the draft. Back navigation
uses the same ``go`` with the staged draft untouched, so a step looks
the same whether it is reached forwards or backwards.

Routing tables live at the bottom: ``COMMANDS`` and ``FIXED_BUTTONS``
apply on every step, ``STEP_HANDLERS`` is keyed by (step, intent kind).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

from src.core import buttons, texts
from src.core.calendar_keyboard import month_keyboard, month_picker_keyboard, parse_month
from src.core.errors import GroupNotFound, PlantNotFound
from src.core.intents import DATE, PHOTO, TEXT, Intent, is_callback
from src.core.renderer import OutboundMessage, Screen, Snapshot, render
from src.core.steps import Step, back_of
from src.core.use_cases import PlantsCareService
from src.core.watering import format_date
from src.core.wizard import KEEP, Wizard
from src.data.models import GroupDraft, PlantDraft, Temporary, UserProfile
from src.ports.transport_port import TransportPort

logger = logging.getLogger(__name__)


@dataclass
class HandlerContext:
    """Everything a handler needs for one intent of one user."""

    service: PlantsCareService
    wizard: Wizard
    transport: TransportPort
    telegram_id: int
    chat_id: int
    temp: Temporary | None = None
    answered: bool = False
    inbound_deleted: bool = False

    async def answer(self, intent: Intent, text: str = "") -> None:
        """Answer a button press once; ``text`` shows as a popup."""
        if is_callback(intent) and not self.answered:
            self.answered = True
            await self.transport.answer_callback(intent.callback_id, text)

    async def delete_inbound(self, intent: Intent) -> None:
        if not self.inbound_deleted:
            self.inbound_deleted = True
            await self.wizard.discard(self.chat_id, intent.message_id)

    async def reply(self, text: str) -> None:
        await self.transport.send(self.chat_id, OutboundMessage(text))

    async def show(
        self,
        step: Step,
        screen: Screen,
        snapshot: Snapshot,
        draft: GroupDraft | PlantDraft | None = KEEP,
    ) -> None:
        self.temp = await self.wizard.show(self.chat_id, self.temp, step, render(screen, snapshot), draft)


Handler = Callable[[HandlerContext, Intent], Awaitable[None]]

# Screen shown while the session sits on a step.
STEP_SCREENS: dict[Step, Screen] = {
    Step.IDLE: Screen.START,
    Step.ADD_GROUP_TITLE: Screen.ADD_GROUP_TITLE,
    Step.ADD_GROUP_DESCRIPTION: Screen.ADD_GROUP_DESCRIPTION,
    Step.ADD_GROUP_LAST_WATERING: Screen.ADD_GROUP_LAST_WATERING,
    Step.ADD_GROUP_INTERVAL: Screen.ADD_GROUP_INTERVAL,
    Step.ADD_GROUP_CONFIRM: Screen.ADD_GROUP_CONFIRM,
    Step.MANAGE_GROUP_CHOOSE: Screen.MANAGE_GROUPS,
    Step.MANAGE_GROUP_ACTION: Screen.MANAGE_GROUP_ACTION,
    Step.MANAGE_GROUP_CHANGE: Screen.MANAGE_GROUP_CHANGE,
    Step.CHANGE_GROUP_TITLE: Screen.CHANGE_GROUP_TITLE,
    Step.CHANGE_GROUP_DESCRIPTION: Screen.CHANGE_GROUP_DESCRIPTION,
    Step.CHANGE_GROUP_LAST_WATERING: Screen.CHANGE_GROUP_LAST_WATERING,
    Step.CHANGE_GROUP_INTERVAL: Screen.CHANGE_GROUP_INTERVAL,
    Step.MANAGE_GROUP_REMOVAL: Screen.MANAGE_GROUP_REMOVAL,
    Step.MANAGE_GROUP_SEE_PLANTS: Screen.MANAGE_GROUP_SEE_PLANTS,
    Step.ADD_PLANT_TITLE: Screen.ADD_PLANT_TITLE,
    Step.ADD_PLANT_DESCRIPTION: Screen.ADD_PLANT_DESCRIPTION,
    Step.ADD_PLANT_GROUP: Screen.ADD_PLANT_GROUP,
    Step.ADD_PLANT_PHOTO_QUESTION: Screen.ADD_PLANT_PHOTO_QUESTION,
    Step.ADD_PLANT_PHOTO: Screen.ADD_PLANT_PHOTO,
    Step.ADD_PLANT_CONFIRM: Screen.ADD_PLANT_CONFIRM,
    Step.MANAGE_PLANT_CHOOSE_GROUP: Screen.MANAGE_PLANTS_CHOOSE_GROUP,
    Step.MANAGE_PLANT_CHOOSE: Screen.MANAGE_PLANTS_CHOOSE,
    Step.MANAGE_PLANT_ACTION: Screen.MANAGE_PLANT_ACTION,
    Step.MANAGE_PLANT_CHANGE: Screen.MANAGE_PLANT_CHANGE,
    Step.CHANGE_PLANT_TITLE: Screen.CHANGE_PLANT_TITLE,
    Step.CHANGE_PLANT_DESCRIPTION: Screen.CHANGE_PLANT_DESCRIPTION,
    Step.CHANGE_PLANT_GROUP: Screen.CHANGE_PLANT_GROUP,
    Step.CHANGE_PLANT_PHOTO: Screen.CHANGE_PLANT_PHOTO,
    Step.MANAGE_PLANT_REMOVAL: Screen.MANAGE_PLANT_REMOVAL,
}

_CALENDAR_STEPS = frozenset({Step.ADD_GROUP_LAST_WATERING, Step.CHANGE_GROUP_LAST_WATERING})


def build_snapshot(ctx: HandlerContext, step: Step, draft: GroupDraft | PlantDraft | None) -> Snapshot:
    """Collect what the screen of ``step`` displays."""
    service = ctx.service
    snapshot = Snapshot()

    if isinstance(draft, GroupDraft):
        snapshot.group = draft
    elif isinstance(draft, PlantDraft):
        snapshot.plant = draft
        if draft.group_id is not None:
            snapshot.group_title = service.get_group(draft.group_id).title

    if step == Step.IDLE:
        snapshot.groups_count, snapshot.plants_count = service.count_user_entities(ctx.telegram_id)
    elif step in (Step.MANAGE_GROUP_CHOOSE, Step.ADD_PLANT_GROUP, Step.CHANGE_PLANT_GROUP):
        snapshot.groups = service.get_user_groups(ctx.telegram_id)
    elif step == Step.MANAGE_PLANT_CHOOSE_GROUP:
        snapshot.groups = service.get_user_groups_with_plants(ctx.telegram_id)
    elif step == Step.MANAGE_PLANT_CHOOSE:
        snapshot.plants = service.get_group_plants(_plant_draft(ctx, draft).group_id)
    elif step == Step.MANAGE_GROUP_SEE_PLANTS:
        snapshot.plants = service.get_group_plants(_group_id(draft))
    elif step == Step.MANAGE_GROUP_ACTION:
        snapshot.plants_count = service.count_group_plants(_group_id(draft))

    if step in _CALENDAR_STEPS:
        last = draft.last_watering_date if isinstance(draft, GroupDraft) else None
        snapshot.month = (last or service.today()).replace(day=1)
    return snapshot


async def go(ctx: HandlerContext, step: Step, draft: GroupDraft | PlantDraft | None = KEEP) -> None:
    """Move the session to ``step`` and show its screen."""
    if step == Step.IDLE:
        draft = None
    elif draft is KEEP:
        draft = ctx.temp.draft
    await ctx.show(step, STEP_SCREENS[step], build_snapshot(ctx, step, draft), draft)


def _group_id(draft: GroupDraft | PlantDraft | None) -> int:
    if not isinstance(draft, GroupDraft) or draft.id is None:
        raise GroupNotFound()
    return draft.id


def _plant_draft(ctx: HandlerContext, draft: GroupDraft | PlantDraft | None = KEEP) -> PlantDraft:
    if draft is KEEP:
        draft = ctx.temp.draft
    if not isinstance(draft, PlantDraft) or draft.group_id is None:
        raise PlantNotFound()
    return draft


def _plant_id(ctx: HandlerContext) -> int:
    draft = _plant_draft(ctx)
    if draft.id is None:
        raise PlantNotFound()
    return draft.id


# ---------------------------------------------------------------------------
# Commands and buttons valid on every step
# ---------------------------------------------------------------------------


async def start(ctx: HandlerContext, intent: Intent) -> None:
    profile = intent.profile or UserProfile(telegram_id=intent.telegram_id)
    ctx.service.save_user(profile)
    await ctx.delete_inbound(intent)
    ctx.temp = ctx.service.get_user_temporary(intent.telegram_id)
    await go(ctx, Step.IDLE)


async def help_command(ctx: HandlerContext, intent: Intent) -> None:
    await ctx.delete_inbound(intent)
    await ctx.transport.send(ctx.chat_id, render(Screen.HELP))


async def menu(ctx: HandlerContext, intent: Intent) -> None:
    await go(ctx, Step.IDLE)


async def back(ctx: HandlerContext, intent: Intent) -> None:
    await go(ctx, back_of(Step(ctx.temp.step)))


async def group_watered(ctx: HandlerContext, intent: Intent) -> None:
    group = ctx.service.get_owned_group(ctx.telegram_id, int(intent.data))
    group = ctx.service.confirm_watering(group.id)
    await ctx.transport.edit_reply_markup(ctx.chat_id, intent.message_id, None)
    await ctx.answer(intent, texts.GROUP_WATERED.format(next=format_date(group.next_watering_date)))


async def calendar_month(ctx: HandlerContext, intent: Intent) -> None:
    await ctx.transport.edit_reply_markup(ctx.chat_id, intent.message_id, month_keyboard(parse_month(intent.data)))


async def calendar_months(ctx: HandlerContext, intent: Intent) -> None:
    await ctx.transport.edit_reply_markup(ctx.chat_id, intent.message_id, month_picker_keyboard(int(intent.data)))


async def calendar_ignore(ctx: HandlerContext, intent: Intent) -> None:
    await ctx.answer(intent)


# ---------------------------------------------------------------------------
# Menu
# ---------------------------------------------------------------------------


async def create_group(ctx: HandlerContext, intent: Intent) -> None:
    await go(ctx, Step.ADD_GROUP_TITLE, ctx.service.start_add_group(ctx.telegram_id))


async def add_plant(ctx: HandlerContext, intent: Intent) -> None:
    await go(ctx, Step.ADD_PLANT_TITLE, ctx.service.start_add_plant(ctx.telegram_id))


async def manage_groups(ctx: HandlerContext, intent: Intent) -> None:
    await go(ctx, Step.MANAGE_GROUP_CHOOSE, None)


async def manage_plants(ctx: HandlerContext, intent: Intent) -> None:
    await go(ctx, Step.MANAGE_PLANT_CHOOSE_GROUP, None)


# ---------------------------------------------------------------------------
# Add group
# ---------------------------------------------------------------------------


async def add_group_title(ctx: HandlerContext, intent: Intent) -> None:
    draft = ctx.service.add_group_title(ctx.telegram_id, intent.text)
    await go(ctx, Step.ADD_GROUP_DESCRIPTION, draft)


async def add_group_description(ctx: HandlerContext, intent: Intent) -> None:
    draft = ctx.service.add_group_description(ctx.telegram_id, intent.text)
    await go(ctx, Step.ADD_GROUP_LAST_WATERING, draft)


async def skip_group_description(ctx: HandlerContext, intent: Intent) -> None:
    draft = ctx.service.add_group_description(ctx.telegram_id, None)
    await go(ctx, Step.ADD_GROUP_LAST_WATERING, draft)


async def add_group_last_watering(ctx: HandlerContext, intent: Intent) -> None:
    draft = ctx.service.add_group_last_watering_date(ctx.telegram_id, intent.day)
    await go(ctx, Step.ADD_GROUP_INTERVAL, draft)


async def add_group_interval(ctx: HandlerContext, intent: Intent) -> None:
    draft = ctx.service.add_group_watering_interval(ctx.telegram_id, int(intent.data))
    await go(ctx, Step.ADD_GROUP_CONFIRM, draft)


async def confirm_add_group(ctx: HandlerContext, intent: Intent) -> None:
    group = ctx.service.confirm_add_group(ctx.telegram_id)
    await ctx.show(Step.IDLE, Screen.GROUP_CREATED, Snapshot(group=GroupDraft.from_group(group)), None)


# ---------------------------------------------------------------------------
# Manage groups
# ---------------------------------------------------------------------------


async def choose_group(ctx: HandlerContext, intent: Intent) -> None:
    draft = ctx.service.manage_group(ctx.telegram_id, int(intent.data))
    await go(ctx, Step.MANAGE_GROUP_ACTION, draft)


def _to_step(step: Step) -> Handler:
    async def handler(ctx: HandlerContext, intent: Intent) -> None:
        await go(ctx, step)

    handler.__name__ = f"to_{step.name.lower()}"
    return handler


async def change_group_title(ctx: HandlerContext, intent: Intent) -> None:
    group = ctx.service.update_group_title(_group_id(ctx.temp.draft), intent.text)
    await go(ctx, Step.MANAGE_GROUP_CHANGE, GroupDraft.from_group(group))


async def change_group_description(ctx: HandlerContext, intent: Intent) -> None:
    group = ctx.service.update_group_description(_group_id(ctx.temp.draft), intent.text)
    await go(ctx, Step.MANAGE_GROUP_CHANGE, GroupDraft.from_group(group))


async def change_group_last_watering(ctx: HandlerContext, intent: Intent) -> None:
    group = ctx.service.update_group_last_watering_date(_group_id(ctx.temp.draft), intent.day)
    await go(ctx, Step.MANAGE_GROUP_CHANGE, GroupDraft.from_group(group))


async def change_group_interval(ctx: HandlerContext, intent: Intent) -> None:
    group = ctx.service.update_group_watering_interval(_group_id(ctx.temp.draft), int(intent.data))
    await go(ctx, Step.MANAGE_GROUP_CHANGE, GroupDraft.from_group(group))


async def remove_group(ctx: HandlerContext, intent: Intent) -> None:
    ctx.service.delete_group(_group_id(ctx.temp.draft))
    await ctx.answer(intent, texts.GROUP_DELETED)
    await go(ctx, Step.IDLE)


# ---------------------------------------------------------------------------
# Add plant
# ---------------------------------------------------------------------------


async def add_plant_title(ctx: HandlerContext, intent: Intent) -> None:
    draft = ctx.service.add_plant_title(ctx.telegram_id, intent.text)
    await go(ctx, Step.ADD_PLANT_DESCRIPTION, draft)


async def add_plant_description(ctx: HandlerContext, intent: Intent) -> None:
    draft = ctx.service.add_plant_description(ctx.telegram_id, intent.text)
    await go(ctx, Step.ADD_PLANT_GROUP, draft)


async def skip_plant_description(ctx: HandlerContext, intent: Intent) -> None:
    draft = ctx.service.add_plant_description(ctx.telegram_id, None)
    await go(ctx, Step.ADD_PLANT_GROUP, draft)


async def add_plant_group(ctx: HandlerContext, intent: Intent) -> None:
    draft = ctx.service.add_plant_group(ctx.telegram_id, int(intent.data))
    await go(ctx, Step.ADD_PLANT_PHOTO_QUESTION, draft)


async def decline_plant_photo(ctx: HandlerContext, intent: Intent) -> None:
    draft = ctx.service.add_plant_photo(ctx.telegram_id, None)
    await go(ctx, Step.ADD_PLANT_CONFIRM, draft)


async def add_plant_photo(ctx: HandlerContext, intent: Intent) -> None:
    draft = ctx.service.add_plant_photo(ctx.telegram_id, intent.photo)
    await go(ctx, Step.ADD_PLANT_CONFIRM, draft)


async def confirm_add_plant(ctx: HandlerContext, intent: Intent) -> None:
    plant = ctx.service.confirm_add_plant(ctx.telegram_id)
    snapshot = Snapshot(
        plant=PlantDraft.from_plant(plant),
        group_title=ctx.service.get_group(plant.group_id).title,
    )
    await ctx.show(Step.IDLE, Screen.PLANT_CREATED, snapshot, None)


# ---------------------------------------------------------------------------
# Manage plants
# ---------------------------------------------------------------------------


async def choose_plants_group(ctx: HandlerContext, intent: Intent) -> None:
    group = ctx.service.get_owned_group(ctx.telegram_id, int(intent.data))
    await go(ctx, Step.MANAGE_PLANT_CHOOSE, PlantDraft(user_id=group.user_id, group_id=group.id))


async def choose_plant(ctx: HandlerContext, intent: Intent) -> None:
    draft = ctx.service.manage_plant(ctx.telegram_id, int(intent.data))
    await go(ctx, Step.MANAGE_PLANT_ACTION, draft)


async def change_plant_title(ctx: HandlerContext, intent: Intent) -> None:
    plant = ctx.service.update_plant_title(_plant_id(ctx), intent.text)
    await go(ctx, Step.MANAGE_PLANT_CHANGE, PlantDraft.from_plant(plant))


async def change_plant_description(ctx: HandlerContext, intent: Intent) -> None:
    plant = ctx.service.update_plant_description(_plant_id(ctx), intent.text)
    await go(ctx, Step.MANAGE_PLANT_CHANGE, PlantDraft.from_plant(plant))


async def change_plant_group(ctx: HandlerContext, intent: Intent) -> None:
    group = ctx.service.get_owned_group(ctx.telegram_id, int(intent.data))
    plant = ctx.service.update_plant_group(_plant_id(ctx), group.id)
    await go(ctx, Step.MANAGE_PLANT_CHANGE, PlantDraft.from_plant(plant))


async def change_plant_photo(ctx: HandlerContext, intent: Intent) -> None:
    plant = ctx.service.update_plant_photo(_plant_id(ctx), intent.photo)
    await go(ctx, Step.MANAGE_PLANT_CHANGE, PlantDraft.from_plant(plant))


async def remove_plant(ctx: HandlerContext, intent: Intent) -> None:
    ctx.service.delete_plant(_plant_id(ctx))
    await ctx.answer(intent, texts.PLANT_DELETED)
    await go(ctx, Step.IDLE)


# ---------------------------------------------------------------------------
# Routing tables
# ---------------------------------------------------------------------------

COMMANDS: dict[str, Handler] = {
    "start": start,
    "help": help_command,
}

FIXED_BUTTONS: dict[str, Handler] = {
    buttons.MENU.unique: menu,
    buttons.BACK.unique: back,
    buttons.GROUP_WATERED.unique: group_watered,
    buttons.CALENDAR_MONTH.unique: calendar_month,
    buttons.CALENDAR_MONTHS.unique: calendar_months,
    buttons.CALENDAR_IGNORE.unique: calendar_ignore,
}

STEP_HANDLERS: dict[tuple[Step, str], Handler] = {
    (Step.IDLE, buttons.CREATE_GROUP.unique): create_group,
    (Step.IDLE, buttons.ADD_PLANT.unique): add_plant,
    (Step.IDLE, buttons.MANAGE_GROUPS.unique): manage_groups,
    (Step.IDLE, buttons.MANAGE_PLANTS.unique): manage_plants,

    (Step.ADD_GROUP_TITLE, TEXT): add_group_title,
    (Step.ADD_GROUP_DESCRIPTION, TEXT): add_group_description,
    (Step.ADD_GROUP_DESCRIPTION, buttons.SKIP_DESCRIPTION.unique): skip_group_description,
    (Step.ADD_GROUP_LAST_WATERING, DATE): add_group_last_watering,
    (Step.ADD_GROUP_INTERVAL, buttons.WATERING_INTERVAL.unique): add_group_interval,
    (Step.ADD_GROUP_CONFIRM, buttons.CONFIRM_ADD_GROUP.unique): confirm_add_group,

    (Step.MANAGE_GROUP_CHOOSE, buttons.GROUP_CHOICE.unique): choose_group,
    (Step.MANAGE_GROUP_ACTION, buttons.SEE_GROUP_PLANTS.unique): _to_step(Step.MANAGE_GROUP_SEE_PLANTS),
    (Step.MANAGE_GROUP_ACTION, buttons.CHANGE_GROUP.unique): _to_step(Step.MANAGE_GROUP_CHANGE),
    (Step.MANAGE_GROUP_ACTION, buttons.REMOVE_GROUP.unique): _to_step(Step.MANAGE_GROUP_REMOVAL),
    (Step.MANAGE_GROUP_CHANGE, buttons.CHANGE_GROUP_TITLE.unique): _to_step(Step.CHANGE_GROUP_TITLE),
    (Step.MANAGE_GROUP_CHANGE, buttons.CHANGE_GROUP_DESCRIPTION.unique): _to_step(Step.CHANGE_GROUP_DESCRIPTION),
    (Step.MANAGE_GROUP_CHANGE, buttons.CHANGE_GROUP_LAST_WATERING.unique): _to_step(Step.CHANGE_GROUP_LAST_WATERING),
    (Step.MANAGE_GROUP_CHANGE, buttons.CHANGE_GROUP_INTERVAL.unique): _to_step(Step.CHANGE_GROUP_INTERVAL),
    (Step.CHANGE_GROUP_TITLE, TEXT): change_group_title,
    (Step.CHANGE_GROUP_DESCRIPTION, TEXT): change_group_description,
    (Step.CHANGE_GROUP_LAST_WATERING, DATE): change_group_last_watering,
    (Step.CHANGE_GROUP_INTERVAL, buttons.WATERING_INTERVAL.unique): change_group_interval,
    (Step.MANAGE_GROUP_REMOVAL, buttons.CONFIRM_REMOVE_GROUP.unique): remove_group,
    (Step.MANAGE_GROUP_SEE_PLANTS, buttons.PLANT_CHOICE.unique): choose_plant,

    (Step.ADD_PLANT_TITLE, TEXT): add_plant_title,
    (Step.ADD_PLANT_DESCRIPTION, TEXT): add_plant_description,
    (Step.ADD_PLANT_DESCRIPTION, buttons.SKIP_DESCRIPTION.unique): skip_plant_description,
    (Step.ADD_PLANT_GROUP, buttons.GROUP_CHOICE.unique): add_plant_group,
    (Step.ADD_PLANT_PHOTO_QUESTION, buttons.PHOTO_YES.unique): _to_step(Step.ADD_PLANT_PHOTO),
    (Step.ADD_PLANT_PHOTO_QUESTION, buttons.PHOTO_NO.unique): decline_plant_photo,
    (Step.ADD_PLANT_PHOTO, PHOTO): add_plant_photo,
    (Step.ADD_PLANT_CONFIRM, buttons.CONFIRM_ADD_PLANT.unique): confirm_add_plant,

    (Step.MANAGE_PLANT_CHOOSE_GROUP, buttons.GROUP_CHOICE.unique): choose_plants_group,
    (Step.MANAGE_PLANT_CHOOSE, buttons.PLANT_CHOICE.unique): choose_plant,
    (Step.MANAGE_PLANT_ACTION, buttons.CHANGE_PLANT.unique): _to_step(Step.MANAGE_PLANT_CHANGE),
    (Step.MANAGE_PLANT_ACTION, buttons.REMOVE_PLANT.unique): _to_step(Step.MANAGE_PLANT_REMOVAL),
    (Step.MANAGE_PLANT_CHANGE, buttons.CHANGE_PLANT_TITLE.unique): _to_step(Step.CHANGE_PLANT_TITLE),
    (Step.MANAGE_PLANT_CHANGE, buttons.CHANGE_PLANT_DESCRIPTION.unique): _to_step(Step.CHANGE_PLANT_DESCRIPTION),
    (Step.MANAGE_PLANT_CHANGE, buttons.CHANGE_PLANT_GROUP.unique): _to_step(Step.CHANGE_PLANT_GROUP),
    (Step.MANAGE_PLANT_CHANGE, buttons.CHANGE_PLANT_PHOTO.unique): _to_step(Step.CHANGE_PLANT_PHOTO),
    (Step.CHANGE_PLANT_TITLE, TEXT): change_plant_title,
    (Step.CHANGE_PLANT_DESCRIPTION, TEXT): change_plant_description,
    (Step.CHANGE_PLANT_GROUP, buttons.GROUP_CHOICE.unique): change_plant_group,
    (Step.CHANGE_PLANT_PHOTO, PHOTO): change_plant_photo,
    (Step.MANAGE_PLANT_REMOVAL, buttons.CONFIRM_REMOVE_PLANT.unique): remove_plant,
}
