"""
Plants Care Bot — Telegram Bot.

Telegram is the only user interface. Every update is classified into an
intent (command, text, photo, button press, calendar date) and handed to
the IntentDispatcher; the bot layer itself holds no conversation state.

The watering reminder tick is a repeating job on the application's
JobQueue, registered while the app is built and removed on shutdown.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from telegram import Update, User as TelegramUser
from telegram.ext import (
    Application,
    ApplicationBuilder,
    CallbackQueryHandler,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    filters,
)

from src.config import configure_logging, settings
from src.core import buttons
from src.core.buttons import decode_callback
from src.core.calendar_keyboard import parse_day
from src.core.intents import ButtonCallback, Command, DateSelection, Intent, PhotoUpload, TextMessage
from src.data.models import UserProfile

if TYPE_CHECKING:
    from src.core.use_cases import Clock
    from src.ports.storage_port import StoragePort
    from src.ports.transport_port import TransportPort

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Update -> Intent
# ---------------------------------------------------------------------------


def profile_from_user(user: TelegramUser) -> UserProfile:
    return UserProfile(
        telegram_id=user.id,
        username=user.username or "",
        first_name=user.first_name or "",
        last_name=user.last_name or "",
        is_bot=bool(user.is_bot),
    )


def command_intent(update: Update, name: str) -> Command:
    user = update.effective_user
    return Command(
        telegram_id=user.id,
        chat_id=update.effective_chat.id,
        message_id=update.effective_message.message_id,
        name=name,
        profile=profile_from_user(user),
    )


def text_intent(update: Update) -> TextMessage:
    return TextMessage(
        telegram_id=update.effective_user.id,
        chat_id=update.effective_chat.id,
        message_id=update.effective_message.message_id,
        text=update.effective_message.text or "",
    )


def callback_intent(update: Update) -> ButtonCallback | DateSelection:
    """Split callback_data into the button's tag and payload; calendar days become dates."""
    query = update.callback_query
    unique, data = decode_callback(query.data)
    message_id = query.message.message_id if query.message else 0

    if unique == buttons.CALENDAR_DAY.unique:
        return DateSelection(
            telegram_id=query.from_user.id,
            chat_id=update.effective_chat.id,
            message_id=message_id,
            callback_id=query.id,
            day=parse_day(data),
        )
    return ButtonCallback(
        telegram_id=query.from_user.id,
        chat_id=update.effective_chat.id,
        message_id=message_id,
        callback_id=query.id,
        unique=unique,
        data=data,
    )


async def photo_intent(update: Update) -> PhotoUpload:
    """Download the largest size of the sent photo."""
    message = update.effective_message
    photo_file = await message.photo[-1].get_file()
    content = await photo_file.download_as_bytearray()
    return PhotoUpload(
        telegram_id=update.effective_user.id,
        chat_id=update.effective_chat.id,
        message_id=message.message_id,
        photo=bytes(content),
    )


# ---------------------------------------------------------------------------
# Telegram handlers
# ---------------------------------------------------------------------------


async def _dispatch(context: ContextTypes.DEFAULT_TYPE, intent: Intent) -> None:
    await context.bot_data["dispatcher"].dispatch(intent)


async def cmd_start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /start — register the user and show the menu."""
    await _dispatch(context, command_intent(update, "start"))


async def cmd_help(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /help — usage hints."""
    await _dispatch(context, command_intent(update, "help"))


async def handle_text(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await _dispatch(context, text_intent(update))


async def handle_photo(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await _dispatch(context, await photo_intent(update))


async def handle_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await _dispatch(context, callback_intent(update))


async def _on_error(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    logger.error("Unhandled error while processing update %s", update, exc_info=context.error)


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


async def _post_stop(app: Application) -> None:
    app.bot_data["scheduler"].stop()
    await app.bot_data["dispatcher"].close(settings.SHUTDOWN_TIMEOUT)
    logger.info("Plants Care Bot stopped")


# ---------------------------------------------------------------------------
# App builder
# ---------------------------------------------------------------------------


def build_app(
    storage: StoragePort | None = None,
    transport: TransportPort | None = None,
    clock: Clock | None = None,
) -> Application:
    """Build the Telegram Application with all handlers.

    Args:
        storage: Storage port implementation. Defaults to PlantsCareDB.
        transport: Transport port implementation. Defaults to TelegramTransport
                   (created from the bot instance after app is built).
        clock: Time source for "today" and the send-hour gate.
    """
    from src.core.dispatcher import IntentDispatcher
    from src.core.scheduler import NotificationScheduler
    from src.core.use_cases import PlantsCareService

    app = (
        ApplicationBuilder()
        .token(settings.TELEGRAM_BOT_TOKEN)
        .concurrent_updates(True)
        .post_stop(_post_stop)
        .build()
    )

    if storage is None:
        from src.data.db import PlantsCareDB
        storage = PlantsCareDB()

    if transport is None:
        from src.adapters.telegram_transport import TelegramTransport
        transport = TelegramTransport(app.bot)

    service = PlantsCareService(storage, clock=clock)
    app.bot_data["service"] = service
    app.bot_data["dispatcher"] = IntentDispatcher(service, transport)
    scheduler = NotificationScheduler(service, transport)
    scheduler.schedule(app.job_queue)
    app.bot_data["scheduler"] = scheduler

    app.add_handler(CommandHandler("start", cmd_start))
    app.add_handler(CommandHandler("help", cmd_help))
    app.add_handler(CallbackQueryHandler(handle_callback))
    app.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, handle_text))
    app.add_handler(MessageHandler(filters.PHOTO, handle_photo))
    app.add_error_handler(_on_error)

    logger.info("Telegram bot application built with %d handlers", len(app.handlers[0]))
    return app


def main() -> None:
    """Entry point: build the app and start polling."""
    configure_logging(settings.LOG_LEVEL, settings.LOG_FILE_PATH)
    logger.info("Starting Plants Care Bot...")
    app = build_app()
    app.run_polling(timeout=settings.BOT_POLL_TIMEOUT, allowed_updates=Update.ALL_TYPES)
