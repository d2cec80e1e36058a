"""Data access helpers for the users table."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable

import bcrypt
from flask import current_app

from ..models.entities import PublicUser, User
from .db import execute, get_db, query_all, query_one


def _row_to_user(row) -> User:
    return User(
        user_id=row["user_id"],
        name=row["name"],
        email=row["email"],
        password_hash=row["password_hash"],
        created_at=datetime.fromisoformat(row["created_at"].replace(" ", "T")),
    )


def is_institutional_email(email: str) -> bool:
    """Return True when the address belongs to one of the configured domains."""

    domains = current_app.config["INSTITUTION_EMAIL_DOMAINS"]
    _, _, domain = email.strip().lower().rpartition("@")
    return bool(domain) and domain in domains


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def create_user(name: str, email: str, password_hash: str) -> User:
    """Insert a new user and return the persisted entity."""

    if not is_institutional_email(email):
        raise ValueError(f"'{email}' is not an institutional email address")

    db = get_db()
    cursor = execute(
        db,
        """
        INSERT INTO users (name, email, password_hash)
        VALUES (?, ?, ?)
        """,
        (name, email.strip().lower(), password_hash),
    )
    return get_user_by_id(cursor.lastrowid, connection=db)


def get_user_by_id(user_id: int, connection=None) -> User | None:
    """Fetch a user by primary key."""

    db = connection or get_db()
    row = query_one(
        db,
        "SELECT * FROM users WHERE user_id = ?",
        (user_id,),
    )
    return _row_to_user(row) if row else None


def get_user_by_email(email: str) -> User | None:
    """Fetch a user by unique email address."""

    db = get_db()
    row = query_one(
        db,
        "SELECT * FROM users WHERE email = ?",
        (email.strip().lower(),),
    )
    return _row_to_user(row) if row else None


def get_public_users(user_ids: Iterable[int]) -> dict[int, PublicUser]:
    """Resolve public identities for many users in a single query.

    Ids that no longer resolve to a row are simply absent from the result.
    """

    ids = sorted(set(user_ids))
    if not ids:
        return {}
    placeholders = ", ".join("?" for _ in ids)
    db = get_db()
    rows = query_all(
        db,
        f"SELECT user_id, name, email FROM users WHERE user_id IN ({placeholders})",
        ids,
    )
    return {row["user_id"]: PublicUser(row["user_id"], row["name"], row["email"]) for row in rows}
