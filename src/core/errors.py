"""Domain error taxonomy.

Validation, uniqueness and limit errors are shown to the user, so each
carries the Russian text to display. Everything else is logged and
swallowed at the dispatcher boundary.
"""

from __future__ import annotations


class PlantsCareError(Exception):
    """Base class for all domain errors."""

    user_message: str = "Что-то пошло не так. Попробуйте ещё раз."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.user_message)


# --- Validation ---


class ValidationError(PlantsCareError):
    """Input rejected by a domain validator; the wizard step is unchanged."""


class TitleEmpty(ValidationError):
    user_message = "Название не может быть пустым ❗"


class TitleTooLong(ValidationError):
    user_message = "Название слишком длинное ❗ Максимальная длина — %d символов."

    def __init__(self, limit: int) -> None:
        self.limit = limit
        self.user_message = self.user_message % limit
        super().__init__(self.user_message)


class IntervalInvalid(ValidationError):
    user_message = "Такой интервал полива недоступен ❗"


class LastWateringInFuture(ValidationError):
    user_message = "Дата последнего полива не может быть в будущем ❗"


class DraftIncomplete(ValidationError):
    user_message = "Заполнены не все данные. Вернитесь назад и заполните пропущенные шаги ❗"


# --- Uniqueness ---


class UniquenessError(PlantsCareError):
    """A title collides with an existing one in the same scope."""


class GroupAlreadyExists(UniquenessError):
    user_message = "Сценарий полива с таким названием уже существует ❗"


class PlantAlreadyExists(UniquenessError):
    user_message = "Растение с таким названием уже есть в этом сценарии полива ❗"


# --- Limits ---


class LimitExceeded(PlantsCareError):
    """A per-user or per-group count limit would be exceeded."""

    template = "Достигнут лимит: %d"

    def __init__(self, limit: int) -> None:
        self.limit = limit
        self.user_message = self.template % limit
        super().__init__(self.user_message)


class GroupsLimitExceeded(LimitExceeded):
    template = "Нельзя создать больше %d сценариев полива ❗"


class PlantsLimitExceeded(LimitExceeded):
    template = "В одном сценарии полива может быть не больше %d растений ❗"


# --- Not found ---


class NotFoundError(PlantsCareError):
    """A referenced row is missing; treated as an unknown session."""

    user_message = "Сессия не найдена. Нажмите /start, чтобы начать заново."


class UserNotFound(NotFoundError):
    pass


class TemporaryNotFound(NotFoundError):
    pass


class GroupNotFound(NotFoundError):
    pass


class PlantNotFound(NotFoundError):
    pass
