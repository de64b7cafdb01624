"""
User repository.

Stores accounts with their bcrypt password hashes. Hashing and token
issuance live in vidly_server.auth; this module only persists users.
"""

from __future__ import annotations

import sqlite3

from ..errors import ConflictError
from ..models import User
from .rows import new_id, row_to_user


class UserRepository:
    """User persistence keyed by id and by (unique) email."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def get(self, user_id: str) -> User | None:
        row = self.conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        return row_to_user(row) if row else None

    def find_by_email(self, email: str) -> User | None:
        row = self.conn.execute("SELECT * FROM users WHERE email = ?", (email,)).fetchone()
        return row_to_user(row) if row else None

    def create(
        self,
        name: str,
        email: str,
        password_hash: str,
        is_admin: bool = False,
        user_id: str | None = None,
    ) -> User:
        """Insert a new user.

        Raises:
            ConflictError: If the email is already registered
        """
        user = User(
            id=user_id or new_id(),
            name=name,
            email=email,
            password_hash=password_hash,
            is_admin=is_admin,
        )
        try:
            self.conn.execute(
                """
                INSERT INTO users (id, name, email, password_hash, is_admin)
                VALUES (?, ?, ?, ?, ?)
                """,
                (user.id, user.name, user.email, user.password_hash, int(user.is_admin)),
            )
        except sqlite3.IntegrityError as e:
            raise ConflictError("User already registered.", details={"email": email}) from e
        return user
