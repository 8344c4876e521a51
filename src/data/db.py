"""
Plants Care Bot — SQLite storage.

Users, their watering scenarios (groups), plants, the per-user wizard
buffer and the log of delivered reminders persist in one SQLite file.
Every public method runs in its own transaction on its own connection,
so one instance can be shared by concurrent handlers and the scheduler.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date, datetime, timezone
from pathlib import Path

from src.core.errors import GroupAlreadyExists, PlantAlreadyExists
from src.core.steps import Step
from src.data.models import (
    Group,
    Notification,
    Plant,
    Temporary,
    User,
    UserProfile,
    dump_draft,
    load_draft,
)
from src.ports.storage_port import DuplicateNotification, StorageError

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    telegram_id INTEGER NOT NULL UNIQUE,
    username    TEXT    NOT NULL DEFAULT '',
    first_name  TEXT    NOT NULL DEFAULT '',
    last_name   TEXT    NOT NULL DEFAULT '',
    is_bot      INTEGER NOT NULL DEFAULT 0,
    created_at  TEXT    NOT NULL,
    updated_at  TEXT    NOT NULL
);

CREATE TABLE IF NOT EXISTS temporary (
    id         INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id    INTEGER NOT NULL UNIQUE REFERENCES users(id) ON DELETE CASCADE,
    step       TEXT    NOT NULL,
    message_id INTEGER,
    data       TEXT,
    updated_at TEXT    NOT NULL
);

CREATE TABLE IF NOT EXISTS groups (
    id                 INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id            INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    title              TEXT    NOT NULL,
    description        TEXT    NOT NULL,
    last_watering_date TEXT    NOT NULL,
    watering_interval  INTEGER NOT NULL,
    next_watering_date TEXT    NOT NULL,
    created_at         TEXT    NOT NULL,
    updated_at         TEXT    NOT NULL,
    UNIQUE (user_id, title)
);

CREATE INDEX IF NOT EXISTS idx_groups_next_watering ON groups (next_watering_date, id);

CREATE TABLE IF NOT EXISTS plants (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id     INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    group_id    INTEGER NOT NULL REFERENCES groups(id) ON DELETE CASCADE,
    title       TEXT    NOT NULL,
    description TEXT    NOT NULL,
    photo       BLOB    NOT NULL DEFAULT x'',
    created_at  TEXT    NOT NULL,
    updated_at  TEXT    NOT NULL,
    UNIQUE (group_id, title)
);

CREATE TABLE IF NOT EXISTS notifications (
    id         INTEGER PRIMARY KEY AUTOINCREMENT,
    group_id   INTEGER NOT NULL REFERENCES groups(id) ON DELETE CASCADE,
    message_id INTEGER NOT NULL,
    text       TEXT    NOT NULL,
    sent_at    TEXT    NOT NULL,
    sent_on    TEXT    NOT NULL,
    UNIQUE (group_id, sent_on)
);
"""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _is_unique_violation(exc: sqlite3.IntegrityError) -> bool:
    return "UNIQUE" in str(exc)


class PlantsCareDB:
    """SQLite-backed implementation of StoragePort."""

    def __init__(self, db_path: str | None = None, timeout: float | None = None) -> None:
        if db_path is None or timeout is None:
            from src.config import settings
            db_path = db_path or settings.DATABASE_PATH
            timeout = timeout if timeout is not None else settings.DATABASE_TIMEOUT

        self._db_path = db_path
        self._timeout = timeout
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection inside one transaction; sqlite errors become StorageError."""
        try:
            conn = sqlite3.connect(self._db_path, timeout=self._timeout)
        except sqlite3.Error as exc:
            raise StorageError(f"Cannot open database {self._db_path}: {exc}") from exc
        conn.row_factory = sqlite3.Row
        try:
            conn.execute("PRAGMA foreign_keys = ON")
            with conn:
                yield conn
        except sqlite3.IntegrityError:
            raise
        except sqlite3.Error as exc:
            raise StorageError(str(exc)) from exc
        finally:
            conn.close()

    def _init_db(self) -> None:
        """Create the tables if they don't exist."""
        with self._connect() as conn:
            conn.executescript(_SCHEMA)
        logger.debug("Plants care schema initialized at %s", self._db_path)

    # ------------------------------------------------------------------
    # Row mappers
    # ------------------------------------------------------------------

    @staticmethod
    def _row_to_user(row: sqlite3.Row) -> User:
        return User(
            id=row["id"],
            telegram_id=row["telegram_id"],
            username=row["username"],
            first_name=row["first_name"],
            last_name=row["last_name"],
            is_bot=bool(row["is_bot"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    @staticmethod
    def _row_to_temporary(row: sqlite3.Row) -> Temporary:
        return Temporary(
            id=row["id"],
            user_id=row["user_id"],
            step=Step(row["step"]),
            draft=load_draft(row["data"]),
            message_id=row["message_id"],
            updated_at=row["updated_at"],
        )

    @staticmethod
    def _row_to_group(row: sqlite3.Row) -> Group:
        return Group(
            id=row["id"],
            user_id=row["user_id"],
            title=row["title"],
            description=row["description"],
            last_watering_date=date.fromisoformat(row["last_watering_date"]),
            watering_interval=row["watering_interval"],
            next_watering_date=date.fromisoformat(row["next_watering_date"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    @staticmethod
    def _row_to_plant(row: sqlite3.Row) -> Plant:
        return Plant(
            id=row["id"],
            user_id=row["user_id"],
            group_id=row["group_id"],
            title=row["title"],
            description=row["description"],
            photo=bytes(row["photo"] or b""),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def save_user(self, profile: UserProfile) -> int:
        """Insert or refresh a user by telegram_id. Returns the internal id."""
        now = _now()
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO users
                    (telegram_id, username, first_name, last_name, is_bot, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT (telegram_id) DO UPDATE SET
                    username   = excluded.username,
                    first_name = excluded.first_name,
                    last_name  = excluded.last_name,
                    is_bot     = excluded.is_bot,
                    updated_at = excluded.updated_at
                """,
                (
                    profile.telegram_id, profile.username, profile.first_name,
                    profile.last_name, int(profile.is_bot), now, now,
                ),
            )
            row = conn.execute(
                "SELECT id FROM users WHERE telegram_id = ?", (profile.telegram_id,)
            ).fetchone()
        user_id = row["id"]
        logger.info("User saved: #%d telegram_id=%d", user_id, profile.telegram_id)
        return user_id

    def get_user_by_id(self, user_id: int) -> User | None:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        return self._row_to_user(row) if row else None

    def get_user_by_telegram_id(self, telegram_id: int) -> User | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM users WHERE telegram_id = ?", (telegram_id,)
            ).fetchone()
        return self._row_to_user(row) if row else None

    # ------------------------------------------------------------------
    # Temporary
    # ------------------------------------------------------------------

    def create_temporary(self, temp: Temporary) -> Temporary:
        """Insert the user's wizard buffer unless one already exists; return the stored row."""
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO temporary (user_id, step, message_id, data, updated_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT (user_id) DO NOTHING
                """,
                (temp.user_id, str(temp.step), temp.message_id, dump_draft(temp.draft), _now()),
            )
            row = conn.execute(
                "SELECT * FROM temporary WHERE user_id = ?", (temp.user_id,)
            ).fetchone()
        return self._row_to_temporary(row)

    def update_temporary(self, temp: Temporary) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                UPDATE temporary
                   SET step = ?, message_id = ?, data = ?, updated_at = ?
                 WHERE user_id = ?
                """,
                (str(temp.step), temp.message_id, dump_draft(temp.draft), _now(), temp.user_id),
            )

    def get_temporary_by_user_id(self, user_id: int) -> Temporary | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM temporary WHERE user_id = ?", (user_id,)
            ).fetchone()
        return self._row_to_temporary(row) if row else None

    # ------------------------------------------------------------------
    # Groups
    # ------------------------------------------------------------------

    def create_group(self, group: Group) -> int:
        now = _now()
        try:
            with self._connect() as conn:
                cursor = conn.execute(
                    """
                    INSERT INTO groups
                        (user_id, title, description, last_watering_date,
                         watering_interval, next_watering_date, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        group.user_id, group.title, group.description,
                        group.last_watering_date.isoformat(), group.watering_interval,
                        group.next_watering_date.isoformat(), now, now,
                    ),
                )
                group_id = cursor.lastrowid
        except sqlite3.IntegrityError as exc:
            if _is_unique_violation(exc):
                raise GroupAlreadyExists() from exc
            raise StorageError(str(exc)) from exc

        logger.info(
            "Group added: #%d '%s' every %d days, next %s",
            group_id, group.title, group.watering_interval, group.next_watering_date,
        )
        return group_id

    def update_group(self, group: Group) -> None:
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    UPDATE groups
                       SET title = ?, description = ?, last_watering_date = ?,
                           watering_interval = ?, next_watering_date = ?, updated_at = ?
                     WHERE id = ?
                    """,
                    (
                        group.title, group.description, group.last_watering_date.isoformat(),
                        group.watering_interval, group.next_watering_date.isoformat(),
                        _now(), group.id,
                    ),
                )
        except sqlite3.IntegrityError as exc:
            if _is_unique_violation(exc):
                raise GroupAlreadyExists() from exc
            raise StorageError(str(exc)) from exc
        logger.info("Group #%d updated, next watering %s", group.id, group.next_watering_date)

    def group_exists(self, user_id: int, title: str, exclude_id: int | None = None) -> bool:
        query = "SELECT 1 FROM groups WHERE user_id = ? AND title = ?"
        params: list = [user_id, title]
        if exclude_id is not None:
            query += " AND id != ?"
            params.append(exclude_id)
        with self._connect() as conn:
            row = conn.execute(query, params).fetchone()
        return row is not None

    def delete_group(self, group_id: int) -> bool:
        """Delete a group together with its plants and notifications, atomically."""
        with self._connect() as conn:
            conn.execute("DELETE FROM plants WHERE group_id = ?", (group_id,))
            conn.execute("DELETE FROM notifications WHERE group_id = ?", (group_id,))
            cursor = conn.execute("DELETE FROM groups WHERE id = ?", (group_id,))
        deleted = cursor.rowcount > 0
        if deleted:
            logger.info("Group #%d deleted with its plants", group_id)
        return deleted

    def get_user_groups(self, user_id: int) -> list[Group]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM groups WHERE user_id = ? ORDER BY id", (user_id,)
            ).fetchall()
        return [self._row_to_group(r) for r in rows]

    def count_user_groups(self, user_id: int) -> int:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT COUNT(*) FROM groups WHERE user_id = ?", (user_id,)
            ).fetchone()
        return row[0]

    def get_group(self, group_id: int) -> Group | None:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM groups WHERE id = ?", (group_id,)).fetchone()
        return self._row_to_group(row) if row else None

    def get_groups_for_notify(
        self,
        limit: int,
        offset: int = 0,
        today: date | None = None,
        after: tuple[date, int] | None = None,
        skip_notified: bool = True,
    ) -> list[Group]:
        """Return due groups ordered by (next_watering_date, id).

        after is a keyset cursor: only groups strictly past that
        (next_watering_date, id) pair are returned. skip_notified drops
        groups that already got a reminder today.
        """
        if today is None:
            today = date.today()

        query = "SELECT g.* FROM groups g WHERE g.next_watering_date <= ?"
        params: list = [today.isoformat()]
        if after is not None:
            after_date, after_id = after
            query += (
                " AND (g.next_watering_date > ?"
                " OR (g.next_watering_date = ? AND g.id > ?))"
            )
            params.extend([after_date.isoformat(), after_date.isoformat(), after_id])
        if skip_notified:
            query += (
                " AND NOT EXISTS (SELECT 1 FROM notifications n"
                " WHERE n.group_id = g.id AND n.sent_on = ?)"
            )
            params.append(today.isoformat())
        query += " ORDER BY g.next_watering_date, g.id LIMIT ? OFFSET ?"
        params.extend([limit, offset])

        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._row_to_group(r) for r in rows]

    # ------------------------------------------------------------------
    # Plants
    # ------------------------------------------------------------------

    def create_plant(self, plant: Plant) -> int:
        now = _now()
        try:
            with self._connect() as conn:
                cursor = conn.execute(
                    """
                    INSERT INTO plants
                        (user_id, group_id, title, description, photo, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        plant.user_id, plant.group_id, plant.title, plant.description,
                        sqlite3.Binary(plant.photo or b""), now, now,
                    ),
                )
                plant_id = cursor.lastrowid
        except sqlite3.IntegrityError as exc:
            if _is_unique_violation(exc):
                raise PlantAlreadyExists() from exc
            raise StorageError(str(exc)) from exc

        logger.info("Plant added: #%d '%s' in group #%d", plant_id, plant.title, plant.group_id)
        return plant_id

    def update_plant(self, plant: Plant) -> None:
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    UPDATE plants
                       SET group_id = ?, title = ?, description = ?, photo = ?, updated_at = ?
                     WHERE id = ?
                    """,
                    (
                        plant.group_id, plant.title, plant.description,
                        sqlite3.Binary(plant.photo or b""), _now(), plant.id,
                    ),
                )
        except sqlite3.IntegrityError as exc:
            if _is_unique_violation(exc):
                raise PlantAlreadyExists() from exc
            raise StorageError(str(exc)) from exc
        logger.info("Plant #%d updated", plant.id)

    def plant_exists(self, group_id: int, title: str, exclude_id: int | None = None) -> bool:
        query = "SELECT 1 FROM plants WHERE group_id = ? AND title = ?"
        params: list = [group_id, title]
        if exclude_id is not None:
            query += " AND id != ?"
            params.append(exclude_id)
        with self._connect() as conn:
            row = conn.execute(query, params).fetchone()
        return row is not None

    def delete_plant(self, plant_id: int) -> bool:
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM plants WHERE id = ?", (plant_id,))
        deleted = cursor.rowcount > 0
        if deleted:
            logger.info("Plant #%d deleted", plant_id)
        return deleted

    def get_user_plants(self, user_id: int) -> list[Plant]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM plants WHERE user_id = ? ORDER BY id", (user_id,)
            ).fetchall()
        return [self._row_to_plant(r) for r in rows]

    def count_user_plants(self, user_id: int) -> int:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT COUNT(*) FROM plants WHERE user_id = ?", (user_id,)
            ).fetchone()
        return row[0]

    def count_group_plants(self, group_id: int) -> int:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT COUNT(*) FROM plants WHERE group_id = ?", (group_id,)
            ).fetchone()
        return row[0]

    def get_plant(self, plant_id: int) -> Plant | None:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM plants WHERE id = ?", (plant_id,)).fetchone()
        return self._row_to_plant(row) if row else None

    def get_group_plants(self, group_id: int) -> list[Plant]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM plants WHERE group_id = ? ORDER BY id", (group_id,)
            ).fetchall()
        return [self._row_to_plant(r) for r in rows]

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def save_notification(self, notification: Notification) -> int:
        """Append a delivered reminder. A second one for the same group and day is rejected."""
        try:
            with self._connect() as conn:
                cursor = conn.execute(
                    """
                    INSERT INTO notifications (group_id, message_id, text, sent_at, sent_on)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (
                        notification.group_id, notification.message_id, notification.text,
                        notification.sent_at, notification.sent_on,
                    ),
                )
                notification_id = cursor.lastrowid
        except sqlite3.IntegrityError as exc:
            if _is_unique_violation(exc):
                raise DuplicateNotification(
                    f"Group #{notification.group_id} already notified on {notification.sent_on}"
                ) from exc
            raise StorageError(str(exc)) from exc

        logger.info(
            "Notification #%d saved for group #%d (message %d)",
            notification_id, notification.group_id, notification.message_id,
        )
        return notification_id

    def notification_exists(self, group_id: int, day: date) -> bool:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT 1 FROM notifications WHERE group_id = ? AND sent_on = ?",
                (group_id, day.isoformat()),
            ).fetchone()
        return row is not None

    def get_group_notifications(self, group_id: int) -> list[Notification]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM notifications WHERE group_id = ? ORDER BY id", (group_id,)
            ).fetchall()
        return [
            Notification(
                id=r["id"],
                group_id=r["group_id"],
                message_id=r["message_id"],
                text=r["text"],
                sent_at=r["sent_at"],
                sent_on=r["sent_on"],
            )
            for r in rows
        ]
