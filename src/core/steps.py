"""Wizard steps.

The step a user is on decides which staged payload is valid and which
intents are accepted. Values are stored as text in temporary.step.
"""

from __future__ import annotations

from enum import StrEnum


class Step(StrEnum):
    IDLE = "idle"

    ADD_GROUP_TITLE = "add_group.title"
    ADD_GROUP_DESCRIPTION = "add_group.description"
    ADD_GROUP_LAST_WATERING = "add_group.last_watering"
    ADD_GROUP_INTERVAL = "add_group.interval"
    ADD_GROUP_CONFIRM = "add_group.confirm"

    MANAGE_GROUP_CHOOSE = "manage_group.choose"
    MANAGE_GROUP_ACTION = "manage_group.action"
    MANAGE_GROUP_CHANGE = "manage_group.change"
    CHANGE_GROUP_TITLE = "change_group.title"
    CHANGE_GROUP_DESCRIPTION = "change_group.description"
    CHANGE_GROUP_LAST_WATERING = "change_group.last_watering"
    CHANGE_GROUP_INTERVAL = "change_group.interval"
    MANAGE_GROUP_REMOVAL = "manage_group.removal"
    MANAGE_GROUP_SEE_PLANTS = "manage_group.see_plants"

    ADD_PLANT_TITLE = "add_plant.title"
    ADD_PLANT_DESCRIPTION = "add_plant.description"
    ADD_PLANT_GROUP = "add_plant.group"
    ADD_PLANT_PHOTO_QUESTION = "add_plant.photo_question"
    ADD_PLANT_PHOTO = "add_plant.photo"
    ADD_PLANT_CONFIRM = "add_plant.confirm"

    MANAGE_PLANT_CHOOSE_GROUP = "manage_plant.choose_group"
    MANAGE_PLANT_CHOOSE = "manage_plant.choose"
    MANAGE_PLANT_ACTION = "manage_plant.action"
    MANAGE_PLANT_CHANGE = "manage_plant.change"
    CHANGE_PLANT_TITLE = "change_plant.title"
    CHANGE_PLANT_DESCRIPTION = "change_plant.description"
    CHANGE_PLANT_GROUP = "change_plant.group"
    CHANGE_PLANT_PHOTO = "change_plant.photo"
    MANAGE_PLANT_REMOVAL = "manage_plant.removal"


GROUP_STEPS = frozenset({
    Step.ADD_GROUP_TITLE,
    Step.ADD_GROUP_DESCRIPTION,
    Step.ADD_GROUP_LAST_WATERING,
    Step.ADD_GROUP_INTERVAL,
    Step.ADD_GROUP_CONFIRM,
    Step.MANAGE_GROUP_ACTION,
    Step.MANAGE_GROUP_CHANGE,
    Step.CHANGE_GROUP_TITLE,
    Step.CHANGE_GROUP_DESCRIPTION,
    Step.CHANGE_GROUP_LAST_WATERING,
    Step.CHANGE_GROUP_INTERVAL,
    Step.MANAGE_GROUP_REMOVAL,
    Step.MANAGE_GROUP_SEE_PLANTS,
})

PLANT_STEPS = frozenset({
    Step.ADD_PLANT_TITLE,
    Step.ADD_PLANT_DESCRIPTION,
    Step.ADD_PLANT_GROUP,
    Step.ADD_PLANT_PHOTO_QUESTION,
    Step.ADD_PLANT_PHOTO,
    Step.ADD_PLANT_CONFIRM,
    Step.MANAGE_PLANT_CHOOSE,
    Step.MANAGE_PLANT_ACTION,
    Step.MANAGE_PLANT_CHANGE,
    Step.CHANGE_PLANT_TITLE,
    Step.CHANGE_PLANT_DESCRIPTION,
    Step.CHANGE_PLANT_GROUP,
    Step.CHANGE_PLANT_PHOTO,
    Step.MANAGE_PLANT_REMOVAL,
})

# Previous step inside the same flow; pressing "Back" on a step's screen goes there.
BACK: dict[Step, Step] = {
    Step.ADD_GROUP_TITLE: Step.IDLE,
    Step.ADD_GROUP_DESCRIPTION: Step.ADD_GROUP_TITLE,
    Step.ADD_GROUP_LAST_WATERING: Step.ADD_GROUP_DESCRIPTION,
    Step.ADD_GROUP_INTERVAL: Step.ADD_GROUP_LAST_WATERING,
    Step.ADD_GROUP_CONFIRM: Step.ADD_GROUP_INTERVAL,

    Step.MANAGE_GROUP_CHOOSE: Step.IDLE,
    Step.MANAGE_GROUP_ACTION: Step.MANAGE_GROUP_CHOOSE,
    Step.MANAGE_GROUP_CHANGE: Step.MANAGE_GROUP_ACTION,
    Step.CHANGE_GROUP_TITLE: Step.MANAGE_GROUP_CHANGE,
    Step.CHANGE_GROUP_DESCRIPTION: Step.MANAGE_GROUP_CHANGE,
    Step.CHANGE_GROUP_LAST_WATERING: Step.MANAGE_GROUP_CHANGE,
    Step.CHANGE_GROUP_INTERVAL: Step.MANAGE_GROUP_CHANGE,
    Step.MANAGE_GROUP_REMOVAL: Step.MANAGE_GROUP_ACTION,
    Step.MANAGE_GROUP_SEE_PLANTS: Step.MANAGE_GROUP_ACTION,

    Step.ADD_PLANT_TITLE: Step.IDLE,
    Step.ADD_PLANT_DESCRIPTION: Step.ADD_PLANT_TITLE,
    Step.ADD_PLANT_GROUP: Step.ADD_PLANT_DESCRIPTION,
    Step.ADD_PLANT_PHOTO_QUESTION: Step.ADD_PLANT_GROUP,
    Step.ADD_PLANT_PHOTO: Step.ADD_PLANT_PHOTO_QUESTION,
    Step.ADD_PLANT_CONFIRM: Step.ADD_PLANT_PHOTO_QUESTION,

    Step.MANAGE_PLANT_CHOOSE_GROUP: Step.IDLE,
    Step.MANAGE_PLANT_CHOOSE: Step.MANAGE_PLANT_CHOOSE_GROUP,
    Step.MANAGE_PLANT_ACTION: Step.MANAGE_PLANT_CHOOSE,
    Step.MANAGE_PLANT_CHANGE: Step.MANAGE_PLANT_ACTION,
    Step.CHANGE_PLANT_TITLE: Step.MANAGE_PLANT_CHANGE,
    Step.CHANGE_PLANT_DESCRIPTION: Step.MANAGE_PLANT_CHANGE,
    Step.CHANGE_PLANT_GROUP: Step.MANAGE_PLANT_CHANGE,
    Step.CHANGE_PLANT_PHOTO: Step.MANAGE_PLANT_CHANGE,
    Step.MANAGE_PLANT_REMOVAL: Step.MANAGE_PLANT_ACTION,
}


def back_of(step: Step) -> Step:
    """Step that "Back" leads to; steps without one fall back to the menu."""
    return BACK.get(step, Step.IDLE)
