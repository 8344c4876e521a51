"""Outbound text templates (Russian). Fields are filled with str.format."""

START = (
    "Привет! 🌿\n\n"
    "Я помогу не забывать о поливе растений. Создайте сценарий полива, "
    "добавьте в него растения, и в день полива я пришлю напоминание.\n\n"
    "Выберите действие:"
)

HELP = (
    "🌿 Как пользоваться ботом\n\n"
    "1. Создайте сценарий полива: укажите название, описание, дату "
    "последнего полива и интервал.\n"
    "2. Добавьте в сценарий растения, которые поливаются одновременно.\n"
    "3. В день полива придёт напоминание. После полива нажмите кнопку "
    "под ним, и я запомню новую дату.\n\n"
    "/start — главное меню\n"
    "/help — эта справка"
)

# --- Groups ---

GROUP_CARD = (
    "Сценарий полива «{title}»\n\n"
    "Описание: {description}\n"
    "Дата последнего полива: {last}\n"
    "Интервал полива: {interval}\n"
    "Следующий полив: {next}"
)

ADD_GROUP_TITLE = (
    "Введите название сценария полива (не более {limit} символов).\n\n"
    "Например: «Кухня» или «Суккуленты»."
)

ADD_GROUP_DESCRIPTION = (
    "Сценарий полива «{title}».\n\n"
    "Введите описание сценария «{title}» или нажмите «Пропустить»."
)

ADD_GROUP_LAST_WATERING = (
    "Сценарий полива «{title}».\n"
    "Описание: {description}\n\n"
    "Выберите дату последнего полива растений в сценарии «{title}»."
)

ADD_GROUP_INTERVAL = (
    "Сценарий полива «{title}».\n"
    "Описание: {description}\n"
    "Дата последнего полива: {last}\n\n"
    "Как часто нужно поливать растения в сценарии «{title}»?"
)

ADD_GROUP_CONFIRM = "Проверьте данные:\n\n" + GROUP_CARD

GROUP_CREATED = (
    "Сценарий полива «{title}» создан ✅\n\n"
    "Следующий полив: {next}. Теперь добавьте в него растения."
)

MANAGE_GROUPS = "Выберите сценарий полива:"

MANAGE_GROUP_ACTION = GROUP_CARD + "\nРастений в сценарии: {plants_count}\n\nЧто вы хотите сделать?"

MANAGE_GROUP_CHANGE = GROUP_CARD + "\n\nЧто вы хотите изменить?"

CHANGE_GROUP_TITLE = "Текущее название: «{title}».\n\nВведите новое название сценария полива."

CHANGE_GROUP_DESCRIPTION = (
    "Текущее описание сценария «{title}»: {description}\n\n"
    "Введите новое описание."
)

CHANGE_GROUP_LAST_WATERING = (
    "Текущая дата последнего полива в сценарии «{title}»: {last}\n\n"
    "Выберите новую дату."
)

CHANGE_GROUP_INTERVAL = (
    "Текущий интервал полива в сценарии «{title}»: {interval}\n\n"
    "Выберите новый интервал."
)

MANAGE_GROUP_REMOVAL = (
    "Удалить сценарий полива «{title}»?\n\n"
    "Все растения этого сценария тоже будут удалены ❗"
)

MANAGE_GROUP_SEE_PLANTS = "Растения в сценарии полива «{title}»:"

GROUP_DELETED = "Сценарий полива удалён 🗑"

GROUP_WATERED = "Отлично! Следующий полив: {next} 💧"

# --- Plants ---

PLANT_CARD = (
    "Растение «{title}»\n\n"
    "Описание: {description}\n"
    "Сценарий полива: {group}"
)

ADD_PLANT_TITLE = "Введите название растения (не более {limit} символов)."

ADD_PLANT_DESCRIPTION = (
    "Растение «{title}».\n\n"
    "Введите описание растения «{title}» или нажмите «Пропустить»."
)

ADD_PLANT_GROUP = (
    "Растение «{title}».\n"
    "Описание: {description}\n\n"
    "Выберите сценарий полива для растения «{title}»."
)

ADD_PLANT_PHOTO_QUESTION = (
    "Растение «{title}».\n"
    "Описание: {description}\n"
    "Сценарий полива: {group}\n\n"
    "Хотите добавить фото растения?"
)

ADD_PLANT_PHOTO = "Отправьте фото растения «{title}» одним изображением."

ADD_PLANT_CONFIRM = "Проверьте данные:\n\n" + PLANT_CARD

PLANT_CREATED = "Растение «{title}» добавлено в сценарий полива «{group}» ✅"

MANAGE_PLANTS_CHOOSE_GROUP = "Выберите сценарий полива, растения которого хотите посмотреть:"

MANAGE_PLANTS_CHOOSE = "Растения в сценарии полива «{group}»:"

MANAGE_PLANT_ACTION = PLANT_CARD + "\n\nЧто вы хотите сделать?"

MANAGE_PLANT_CHANGE = PLANT_CARD + "\n\nЧто вы хотите изменить?"

CHANGE_PLANT_TITLE = "Текущее название: «{title}».\n\nВведите новое название растения."

CHANGE_PLANT_DESCRIPTION = (
    "Текущее описание растения «{title}»: {description}\n\n"
    "Введите новое описание."
)

CHANGE_PLANT_GROUP = (
    "Растение «{title}» сейчас в сценарии полива «{group}».\n\n"
    "Выберите новый сценарий."
)

CHANGE_PLANT_PHOTO = "Отправьте новое фото растения «{title}»."

MANAGE_PLANT_REMOVAL = "Удалить растение «{title}»?"

PLANT_DELETED = "Растение удалено 🗑"

# --- Reminders ---

NOTIFY = (
    "Пора полить растения 💧\n\n"
    "Сценарий полива: «{title}»\n"
    "Описание: {description}\n"
    "Дата последнего полива: {last}\n"
    "Интервал полива: {interval}\n\n"
    "Растения:\n{plants}"
)

NO_PLANTS_IN_GROUP = "В данный сценарий полива пока что не было добавлено ни одно растение!\n"

PLANT_LINE = "{number}) {title}\n"
