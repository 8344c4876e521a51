"""Shared test fixtures and configuration.

Sets up fake environment variables so src.config doesn't sys.exit(),
and provides common fixtures: a temp DB, a settable clock, the service,
an in-memory transport and the dispatcher.
"""

import os

# Patch env vars BEFORE any src imports
os.environ.setdefault("TELEGRAM_BOT_TOKEN", "fake-token-for-tests")
os.environ.setdefault("DATABASE_PATH", ":memory:")
os.environ.setdefault("TIMEZONE", "Europe/Moscow")
os.environ.setdefault("ASSETS_DIR", "assets")

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

MOSCOW = ZoneInfo("Europe/Moscow")


class FixedClock:
    """Callable clock the tests can move around."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def set(self, *args) -> None:
        self.now = datetime(*args, tzinfo=MOSCOW)


class FakeTransport:
    """Records every call; message ids grow from 100."""

    def __init__(self):
        self.sent = []        # (chat_id, OutboundMessage)
        self.deleted = []     # (chat_id, message_id)
        self.edited = []      # (chat_id, message_id, keyboard)
        self.answered = []    # (callback_id, text)
        self.fail_send = False
        self.fail_delete = False
        self._next_id = 100

    async def send(self, chat_id, message):
        from src.ports.transport_port import SentMessage, TransportError

        if self.fail_send:
            raise TransportError("send failed")
        self._next_id += 1
        self.sent.append((chat_id, message))
        return SentMessage(chat_id=chat_id, message_id=self._next_id, text=message.text)

    async def edit_reply_markup(self, chat_id, message_id, keyboard=None):
        self.edited.append((chat_id, message_id, keyboard))

    async def delete(self, chat_id, message_id):
        from src.ports.transport_port import TransportError

        if self.fail_delete:
            raise TransportError("delete failed")
        self.deleted.append((chat_id, message_id))

    async def answer_callback(self, callback_id, text=""):
        self.answered.append((callback_id, text))

    @property
    def last(self):
        """The most recently sent OutboundMessage."""
        return self.sent[-1][1]

    @property
    def last_message_id(self):
        return self._next_id


@pytest.fixture
def tmp_db_path(tmp_path):
    """Return a temporary SQLite DB path."""
    return str(tmp_path / "test_plants.db")


@pytest.fixture
def db(tmp_db_path):
    """Return a PlantsCareDB instance backed by a temp file."""
    from src.data.db import PlantsCareDB
    return PlantsCareDB(db_path=tmp_db_path, timeout=5)


@pytest.fixture
def clock():
    """Monday 10 June 2024, 12:30 Moscow time."""
    return FixedClock(datetime(2024, 6, 10, 12, 30, tzinfo=MOSCOW))


@pytest.fixture
def service(db, clock):
    from src.core.use_cases import PlantsCareService
    return PlantsCareService(db, clock=clock, groups_limit=10, plants_limit=50)


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def dispatcher(service, transport):
    from src.core.dispatcher import IntentDispatcher
    return IntentDispatcher(service, transport, intent_timeout=5)
