"""
db.py
SQLite record store (creates DB/tables, inserts default admin, member lookups).

The store is an explicit object: the app builds one GymStore and passes it to
whatever needs it.
"""

from __future__ import annotations

import logging
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path

from models import MemberRecord

log = logging.getLogger(__name__)

MEMBER_COLUMNS = (
    "first_name",
    "last_name",
    "status",
    "duration",
    "price",
    "profile_image_url",
    "register_date",
    "remaining",
)
_COLUMN_LIST = ", ".join(MEMBER_COLUMNS)
_PLACEHOLDERS = ", ".join("?" for _ in MEMBER_COLUMNS)
_ASSIGNMENTS = ", ".join(f"{c}=?" for c in MEMBER_COLUMNS)


def new_member_id() -> str:
    return uuid.uuid4().hex[:12]


class GymStore:
    def __init__(self, db_file: str | Path):
        self.db_file = Path(db_file)

    @contextmanager
    def get_conn(self):
        conn = sqlite3.connect(self.db_file, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def execute(self, sql: str, params: tuple = ()) -> int:
        with self.get_conn() as conn:
            cur = conn.execute(sql, params)
            return cur.lastrowid

    def executemany(self, sql: str, seq_of_params: list[tuple]) -> None:
        with self.get_conn() as conn:
            conn.executemany(sql, seq_of_params)

    def fetch_one(self, sql: str, params: tuple = ()):
        with self.get_conn() as conn:
            cur = conn.execute(sql, params)
            return cur.fetchone()

    def fetch_all(self, sql: str, params: tuple = ()) -> list[sqlite3.Row]:
        with self.get_conn() as conn:
            cur = conn.execute(sql, params)
            return cur.fetchall()

    # ---------- schema ----------

    def _create_tables(self) -> None:
        self.execute(
            """
            CREATE TABLE IF NOT EXISTS admin_users (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                username TEXT NOT NULL UNIQUE,
                password_hash TEXT NOT NULL,
                created_at TEXT NOT NULL
            )
            """
        )

        # register_date is an Ethiopian YYYY-MM-DD string; remaining is an optional cached figure
        self.execute(
            """
            CREATE TABLE IF NOT EXISTS members (
                id TEXT PRIMARY KEY,
                first_name TEXT,
                last_name TEXT,
                status TEXT,
                duration TEXT,
                price TEXT,
                profile_image_url TEXT,
                register_date TEXT,
                remaining INTEGER,
                created_at TEXT NOT NULL
            )
            """
        )

        # Small settings table (used to force password change on first login)
        self.execute(
            """
            CREATE TABLE IF NOT EXISTS app_settings (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )
            """
        )

    def _get_setting(self, key: str, default: str | None = None) -> str | None:
        row = self.fetch_one("SELECT value FROM app_settings WHERE key = ?", (key,))
        if row:
            return str(row["value"])
        return default

    def _set_setting(self, key: str, value: str) -> None:
        self.execute(
            """
            INSERT INTO app_settings(key, value) VALUES(?, ?)
            ON CONFLICT(key) DO UPDATE SET value=excluded.value
            """,
            (key, value),
        )

    def init_db(self, default_admin_hash: str) -> None:
        """
        Initialize the database.
        - Create tables
        - Insert default admin (admin/admin123) if no admin exists
        - Force password change on first login
        """
        self._create_tables()

        admin = self.fetch_one("SELECT id FROM admin_users LIMIT 1")
        if not admin:
            now = datetime.now(timezone.utc).isoformat(timespec="seconds")
            self.execute(
                "INSERT INTO admin_users(username, password_hash, created_at) VALUES(?,?,?)",
                ("admin", default_admin_hash, now),
            )
            self._set_setting("force_password_change", "1")
            log.info("Created default admin user in %s", self.db_file)
        else:
            # ensure setting exists
            if self._get_setting("force_password_change") is None:
                self._set_setting("force_password_change", "0")

    def is_force_password_change(self) -> bool:
        return self._get_setting("force_password_change") == "1"

    def clear_force_password_change(self) -> None:
        self._set_setting("force_password_change", "0")

    # ---------- members ----------

    def fetch_member(self, member_id: str) -> MemberRecord | None:
        row = self.fetch_one("SELECT * FROM members WHERE id = ?", (member_id,))
        if row is None:
            return None
        return MemberRecord.from_mapping(row["id"], row)

    def list_members(self, search: str = "") -> list[MemberRecord]:
        sql = "SELECT * FROM members WHERE 1=1"
        params = []
        if search.strip():
            sql += " AND (first_name LIKE ? OR last_name LIKE ? OR id LIKE ?)"
            like = f"%{search.strip()}%"
            params.extend([like, like, like])
        sql += " ORDER BY created_at DESC, id ASC"
        return [MemberRecord.from_mapping(r["id"], r) for r in self.fetch_all(sql, tuple(params))]

    def add_member(self, record: MemberRecord) -> str:
        """Insert a member; returns its id (generated when the record has none)."""
        values = self._member_values(record)
        member_id = record.member_id or new_member_id()
        now = datetime.now(timezone.utc).isoformat(timespec="seconds")
        self.execute(
            f"""
            INSERT INTO members(id, {_COLUMN_LIST}, created_at)
            VALUES(?, {_PLACEHOLDERS}, ?)
            """,
            (member_id, *values, now),
        )
        return member_id

    def update_member(self, record: MemberRecord) -> None:
        values = self._member_values(record)
        self.execute(f"UPDATE members SET {_ASSIGNMENTS} WHERE id=?", (*values, record.member_id))

    def delete_member(self, member_id: str) -> None:
        self.execute("DELETE FROM members WHERE id = ?", (member_id,))

    def set_cached_remaining(self, member_id: str, remaining: int | None) -> None:
        self.execute("UPDATE members SET remaining = ? WHERE id = ?", (remaining, member_id))

    @staticmethod
    def _member_values(record: MemberRecord) -> tuple:
        return tuple(getattr(record, c) for c in MEMBER_COLUMNS)
