"""
auth.py
Owner authentication for the console (bcrypt hashing, verify, login, change password).
The public scan page needs none of this.
"""

from __future__ import annotations

import logging

import bcrypt

from db import GymStore

log = logging.getLogger(__name__)


def _to_bcrypt_secret(password: str) -> bytes:
    """
    bcrypt only uses the first 72 BYTES of the password.
    We truncate to 72 bytes to avoid ValueError and to make behavior explicit.
    """
    return password.encode("utf-8")[:72]


def hash_password(password: str, rounds: int = 12) -> str:
    """
    Returns a bcrypt hash as a UTF-8 string (stored in SQLite).
    """
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(_to_bcrypt_secret(password), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(_to_bcrypt_secret(password), password_hash.encode("utf-8"))


def get_admin_by_username(store: GymStore, username: str):
    return store.fetch_one("SELECT * FROM admin_users WHERE username = ?", (username,))


def login(store: GymStore, username: str, password: str) -> bool:
    admin = get_admin_by_username(store, username)
    if not admin:
        log.info("Login rejected for unknown user %r", username)
        return False
    ok = verify_password(password, admin["password_hash"])
    log.info("Login %s for %r", "succeeded" if ok else "failed", username)
    return ok


def change_password(store: GymStore, username: str, new_password: str, rounds: int = 12) -> None:
    store.execute(
        "UPDATE admin_users SET password_hash = ? WHERE username = ?",
        (hash_password(new_password, rounds=rounds), username),
    )
    store.clear_force_password_change()
