"""The credential store.

This module provides:
- User: a user record
- UserStore: a class that persists users, their password hashes and roles
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from sqlite3 import IntegrityError

from ..constants import ADMIN, ROLES, USER
from ..glue import Glue
from ..utils.clock import Clock, from_db, to_db, to_json, utcnow
from ..utils.errors import ConflictError, NotFoundError


@dataclass(frozen=True)
class User:
    id: int
    username: str
    password_hash: bytes
    role: str
    created_at: datetime

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN

    def to_json(self) -> dict:
        """Public representation, never includes the password hash."""
        return {
            "id": self.id,
            "username": self.username,
            "role": self.role,
            "createdAt": to_json(self.created_at),
        }

    @classmethod
    def from_row(cls, row: dict) -> "User":
        return cls(
            id=row["id"],
            username=row["username"],
            password_hash=row["password"],
            role=row["role"],
            created_at=from_db(row["created_at"]),
        )


class UserStore:
    """Persists user records. Username uniqueness is enforced by the schema."""

    def __init__(self, glue: Glue, clock: Clock = utcnow):
        self.glue = glue
        self.clock = clock
        self.logger = logging.getLogger(__name__)

    def create_user(self, username: str, password_hash: bytes, role: str = USER) -> User:
        """Creates a new user.

        Args:
            username (str): New user's login, already validated
            password_hash (bytes): bcrypt hash of the password
            role (str): ``admin`` or ``user``

        Returns:
            User: The stored record.

        Raises:
            ValueError: If ``role`` is unknown
            ConflictError: If ``username`` is already taken
        """
        if role not in ROLES:
            raise ValueError("role is invalid")
        with self.glue.querying() as sql:
            try:
                rows = sql.query(
                    """
                    INSERT INTO users (username, password, role, created_at)
                    VALUES (:username, :password, :role, :created_at)
                    RETURNING *
                    """,
                    {
                        "username": username,
                        "password": password_hash,
                        "role": role,
                        "created_at": to_db(self.clock()),
                    },
                    fetch=0,
                )
            except IntegrityError as e:
                raise ConflictError("Username already exists") from e
        return User.from_row(rows[0])

    def find_by_username(self, username: str) -> User | None:
        with self.glue.querying() as sql:
            row = sql.query("SELECT * FROM users WHERE username = ?", (username,))
        return User.from_row(row) if row else None

    def find_by_id(self, user_id: int) -> User | None:
        with self.glue.querying() as sql:
            row = sql.query("SELECT * FROM users WHERE id = ?", (user_id,))
        return User.from_row(row) if row else None

    def update_password(self, user_id: int, new_hash: bytes) -> None:
        with self.glue.querying() as sql:
            sql.query(
                "UPDATE users SET password = ? WHERE id = ?",
                (new_hash, user_id),
                fetch=-1,
            )
            if not sql.rowcount:
                raise NotFoundError("User not found")

    def update_role(self, user_id: int, role: str) -> User:
        """Sets a user's role.

        Raises:
            ValueError: If ``role`` is unknown
            NotFoundError: If the user doesn't exist
        """
        if role not in ROLES:
            raise ValueError("role is invalid")
        with self.glue.querying() as sql:
            rows = sql.query(
                "UPDATE users SET role = ? WHERE id = ? RETURNING *",
                (role, user_id),
                fetch=0,
            )
        if not rows:
            raise NotFoundError("User not found")
        return User.from_row(rows[0])

    def list_users(self) -> list[User]:
        """All users, newest first."""
        with self.glue.querying() as sql:
            rows = sql.query(
                "SELECT * FROM users ORDER BY created_at DESC, id DESC",
                fetch=0,
            )
        return [User.from_row(row) for row in rows]

    def count(self) -> int:
        with self.glue.querying(row=False) as sql:
            (total,) = sql.query("SELECT COUNT(*) FROM users")
        return total
