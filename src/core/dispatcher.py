"""
Plants Care Bot — Intent dispatcher.

Entry point for every inbound chat event. Intents of the same user run
one at a time under a per-user lock; intents of different users run
concurrently. Resolution order:

1. commands (/start, /help);
2. buttons valid on any step (menu, back, "watered", calendar paging);
3. ``STEP_HANDLERS[(step, kind)]``; anything else is deleted from the chat.

Error policy: validation, uniqueness and limit errors reach the user as
a popup (buttons) or a short reply (text, photos). A missing user,
session or entity deletes the inbound message and asks for /start.
Anything else is logged with its traceback and swallowed so the
transport task survives.
"""

from __future__ import annotations

import asyncio
import logging

from src.core.errors import NotFoundError, PlantsCareError
from src.core.handlers import COMMANDS, FIXED_BUTTONS, STEP_HANDLERS, HandlerContext
from src.core.intents import (
    Command,
    Intent,
    PhotoUpload,
    TextMessage,
    intent_kind,
    intent_payload,
    is_callback,
)
from src.core.renderer import Screen, render
from src.core.steps import Step
from src.core.use_cases import PlantsCareService
from src.core.wizard import Wizard
from src.ports.transport_port import TransportPort

logger = logging.getLogger(__name__)


class IntentDispatcher:
    def __init__(
        self,
        service: PlantsCareService,
        transport: TransportPort,
        intent_timeout: float | None = None,
    ) -> None:
        if intent_timeout is None:
            from src.config import settings
            intent_timeout = settings.INTENT_TIMEOUT

        self.service = service
        self.transport = transport
        self.wizard = Wizard(service.storage, transport)
        self.intent_timeout = intent_timeout
        self._locks: dict[int, asyncio.Lock] = {}
        self._lock_holders: dict[int, int] = {}
        self._in_flight = 0
        self._idle = asyncio.Event()
        self._idle.set()
        self._closed = False

    @property
    def in_flight(self) -> int:
        return self._in_flight

    def _lock_for(self, telegram_id: int) -> asyncio.Lock:
        lock = self._locks.get(telegram_id)
        if lock is None:
            lock = self._locks[telegram_id] = asyncio.Lock()
        self._lock_holders[telegram_id] = self._lock_holders.get(telegram_id, 0) + 1
        return lock

    def _release_lock(self, telegram_id: int) -> None:
        # Dropped once no intent of this user holds or waits for it.
        self._lock_holders[telegram_id] -= 1
        if self._lock_holders[telegram_id] == 0:
            del self._lock_holders[telegram_id]
            del self._locks[telegram_id]

    async def dispatch(self, intent: Intent) -> None:
        """Handle one intent. Never raises."""
        if self._closed:
            logger.warning(
                "Dropping %s from telegram_id=%d: shutting down", intent_kind(intent), intent.telegram_id,
            )
            return

        logger.info(
            "Received %s from telegram_id=%d: %s", intent_kind(intent), intent.telegram_id, intent_payload(intent),
        )
        self._in_flight += 1
        self._idle.clear()
        lock = self._lock_for(intent.telegram_id)
        try:
            async with lock:
                await self._handle(intent)
        finally:
            self._release_lock(intent.telegram_id)
            self._in_flight -= 1
            if self._in_flight == 0:
                self._idle.set()

    async def close(self, timeout: float | None = None) -> None:
        """Stop accepting intents and wait for the running ones to finish."""
        if timeout is None:
            from src.config import settings
            timeout = settings.SHUTDOWN_TIMEOUT

        self._closed = True
        if self._in_flight == 0:
            return
        try:
            await asyncio.wait_for(self._idle.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning("%d intent(s) still running after %.1fs shutdown wait", self._in_flight, timeout)

    async def _handle(self, intent: Intent) -> None:
        ctx = HandlerContext(
            service=self.service,
            wizard=self.wizard,
            transport=self.transport,
            telegram_id=intent.telegram_id,
            chat_id=intent.chat_id,
        )
        kind = intent_kind(intent)
        try:
            try:
                await asyncio.wait_for(self._route(ctx, intent), timeout=self.intent_timeout)
            except NotFoundError:
                logger.info("Unknown session for telegram_id=%d on %s", intent.telegram_id, kind)
                await ctx.delete_inbound(intent)
                await ctx.answer(intent)
                await self.transport.send(ctx.chat_id, render(Screen.UNKNOWN_SESSION))
            except PlantsCareError as exc:
                logger.info("Rejected %s for telegram_id=%d: %s", kind, intent.telegram_id, exc)
                if is_callback(intent):
                    await ctx.answer(intent, str(exc))
                else:
                    await ctx.reply(str(exc))
            await ctx.answer(intent)
        except asyncio.TimeoutError:
            logger.error(
                "Intent %s for telegram_id=%d timed out after %.1fs", kind, intent.telegram_id, self.intent_timeout,
            )
        except Exception:
            logger.exception("Failed to handle %s for telegram_id=%d", kind, intent.telegram_id)

    async def _route(self, ctx: HandlerContext, intent: Intent) -> None:
        kind = intent_kind(intent)

        if isinstance(intent, Command):
            handler = COMMANDS.get(intent.name)
            if handler is None:
                await ctx.delete_inbound(intent)
                return
            await handler(ctx, intent)
            return

        ctx.temp = self.service.get_user_temporary(intent.telegram_id)
        if isinstance(intent, (TextMessage, PhotoUpload)):
            await ctx.delete_inbound(intent)

        handler = FIXED_BUTTONS.get(kind) or STEP_HANDLERS.get((Step(ctx.temp.step), kind))
        if handler is None:
            logger.debug("No handler for %s on step %s (telegram_id=%d)", kind, ctx.temp.step, intent.telegram_id)
            await ctx.delete_inbound(intent)
            return

        await handler(ctx, intent)
