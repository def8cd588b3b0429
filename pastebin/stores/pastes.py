"""The paste store and its sharing grants.

This module provides:
- Paste: a paste record
- ShareGrant: a record letting a user read, and maybe edit, a paste they don't own
- SharedPaste: paste metadata as seen by a grantee
- PasteStore: a class that persists pastes and grants
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime
from sqlite3 import IntegrityError

from ..constants import SHARE_ID_ATTEMPTS
from ..glue import Glue
from ..utils.clock import from_db, to_db, to_json
from ..utils.errors import ConflictError, InternalError, NotFoundError
from ..utils.ids import generate_share_id


@dataclass(frozen=True)
class Paste:
    id: int
    share_id: str
    title: str | None
    content: str
    owner_id: int
    created_at: datetime
    expires_at: datetime | None = None

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and self.expires_at < now

    def summary(self) -> dict:
        """Listing representation, without content."""
        return {
            "id": self.id,
            "shareId": self.share_id,
            "title": self.title,
            "createdAt": to_json(self.created_at),
            "expiresAt": to_json(self.expires_at),
        }

    @classmethod
    def from_row(cls, row: dict) -> "Paste":
        return cls(
            id=row["id"],
            share_id=row["share_id"],
            title=row["title"],
            content=row["content"],
            owner_id=row["owner_id"],
            created_at=from_db(row["created_at"]),
            expires_at=from_db(row["expires_at"]),
        )


@dataclass(frozen=True)
class ShareGrant:
    paste_id: int
    grantee_id: int
    can_edit: bool
    username: str | None = None

    def to_json(self) -> dict:
        return {
            "userId": self.grantee_id,
            "username": self.username,
            "canEdit": self.can_edit,
        }


@dataclass(frozen=True)
class SharedPaste:
    share_id: str
    title: str | None
    owner_username: str
    can_edit: bool
    created_at: datetime
    expires_at: datetime | None

    def to_json(self) -> dict:
        return {
            "shareId": self.share_id,
            "title": self.title,
            "owner": self.owner_username,
            "canEdit": self.can_edit,
            "createdAt": to_json(self.created_at),
            "expiresAt": to_json(self.expires_at),
        }


class PasteStore:
    """Persists pastes and the grants that share them."""

    def __init__(self, glue: Glue, id_factory: Callable[[], str] = generate_share_id):
        self.glue = glue
        self.id_factory = id_factory
        self.logger = logging.getLogger(__name__)

    def create(
            self,
            owner_id: int,
            title: str | None,
            content: str,
            created_at: datetime,
            expires_at: datetime | None = None,
            shared_with: Iterable[tuple[str, bool]] = (),
    ) -> Paste:
        """Creates a paste under a fresh share ID, sharing it in the same transaction.

        Args:
            owner_id (int): The poster's user ID
            title (str | None): The title
            content (str): The content, already validated
            created_at (datetime): Creation time
            expires_at (datetime | None): When the paste stops being visible
            shared_with (Iterable[tuple[str, bool]]): ``(username, can_edit)`` pairs,
                unknown usernames and the owner are skipped

        Returns:
            Paste: The stored paste.

        Raises:
            InternalError: If every attempt at a unique share ID collided
        """
        with self.glue.querying() as sql:
            for _ in range(SHARE_ID_ATTEMPTS):
                share_id = self.id_factory()
                try:
                    rows = sql.query(
                        """
                        INSERT INTO pastes (
                            share_id, title, content, owner_id, created_at, expires_at
                        ) VALUES (
                            :share_id, :title, :content, :owner_id, :created_at, :expires_at
                        )
                        RETURNING *
                        """,
                        {
                            "share_id": share_id,
                            "title": title,
                            "content": content,
                            "owner_id": owner_id,
                            "created_at": to_db(created_at),
                            "expires_at": to_db(expires_at),
                        },
                        fetch=0,
                    )
                except IntegrityError as e:
                    if "share_id" not in str(e):
                        raise
                    self.logger.warning("Share ID %s collided, generating another", share_id)
                    continue
                paste = Paste.from_row(rows[0])
                self._share_with(sql, paste, shared_with)
                return paste
            raise InternalError("Attempts at generating a share ID depleted unsuccessfully")

    def find_by_share_id(self, share_id: str) -> Paste | None:
        with self.glue.querying() as sql:
            row = sql.query("SELECT * FROM pastes WHERE share_id = ?", (share_id,))
        return Paste.from_row(row) if row else None

    def find_owned_by(self, user_id: int) -> list[Paste]:
        """Pastes of a user, newest first."""
        with self.glue.querying() as sql:
            rows = sql.query(
                "SELECT * FROM pastes WHERE owner_id = ? ORDER BY created_at DESC, id DESC",
                (user_id,),
                fetch=0,
            )
        return [Paste.from_row(row) for row in rows]

    def update(
            self,
            share_id: str,
            content: str | None = None,
            title: str | None = None,
    ) -> Paste:
        """Overwrites the supplied fields. Last write wins.

        Raises:
            NotFoundError: If no paste has ``share_id``
        """
        changes = {}
        if content is not None:
            changes["content"] = content
        if title is not None:
            changes["title"] = title
        with self.glue.querying() as sql:
            if changes:
                assignments = ", ".join(f"{column} = :{column}" for column in changes)
                rows = sql.query(
                    f"UPDATE pastes SET {assignments} WHERE share_id = :share_id RETURNING *",
                    {**changes, "share_id": share_id},
                    fetch=0,
                )
                row = rows[0] if rows else None
            else:
                row = sql.query("SELECT * FROM pastes WHERE share_id = ?", (share_id,))
        if not row:
            raise NotFoundError("Paste not found")
        return Paste.from_row(row)

    def delete(self, share_id: str) -> None:
        """Deletes a paste, its grants cascade."""
        with self.glue.querying() as sql:
            sql.query("DELETE FROM pastes WHERE share_id = ?", (share_id,), fetch=-1)
            if not sql.rowcount:
                raise NotFoundError("Paste not found")

    def purge_expired(self, now: datetime) -> int:
        """Physically removes pastes past their expiry.

        Returns:
            int: How many pastes were removed.
        """
        with self.glue.querying() as sql:
            sql.query(
                "DELETE FROM pastes WHERE expires_at IS NOT NULL AND expires_at < ?",
                (to_db(now),),
                fetch=-1,
            )
            removed = sql.rowcount
        if removed:
            self.logger.info("Purged %d expired pastes", removed)
        return removed

    def grant(self, paste_id: int, grantee_id: int, can_edit: bool) -> ShareGrant:
        """Shares a paste with a user.

        Raises:
            ValueError: If ``grantee_id`` owns the paste
            NotFoundError: If the paste doesn't exist
            ConflictError: If the user already holds a grant for the paste
        """
        with self.glue.querying() as sql:
            owner = sql.query("SELECT owner_id FROM pastes WHERE id = ?", (paste_id,))
            if not owner:
                raise NotFoundError("Paste not found")
            if owner["owner_id"] == grantee_id:
                raise ValueError("cannot share a paste with its owner")
            try:
                sql.query(
                    "INSERT INTO share_grants (paste_id, grantee_id, can_edit) VALUES (?, ?, ?)",
                    (paste_id, grantee_id, int(can_edit)),
                    fetch=-1,
                )
            except IntegrityError as e:
                raise ConflictError("Paste is already shared with this user") from e
        return ShareGrant(paste_id=paste_id, grantee_id=grantee_id, can_edit=bool(can_edit))

    def share_with(self, paste: Paste, entries: Iterable[tuple[str, bool]]) -> list[ShareGrant]:
        """Grants by username, skipping unknown usernames, the owner and existing grants."""
        with self.glue.querying() as sql:
            return self._share_with(sql, paste, entries)

    def _share_with(
            self,
            sql: Glue.QueryContext,
            paste: Paste,
            entries: Iterable[tuple[str, bool]],
    ) -> list[ShareGrant]:
        wanted: dict[str, bool] = {}
        for username, can_edit in entries:
            wanted[username] = wanted.get(username, False) or bool(can_edit)
        grants = []
        for username, can_edit in wanted.items():
            user = sql.query("SELECT id FROM users WHERE username = ?", (username,))
            if not user:
                self.logger.debug("Skipping unknown grantee %s", username)
                continue
            if user["id"] == paste.owner_id:
                continue
            sql.query(
                """
                INSERT INTO share_grants (paste_id, grantee_id, can_edit)
                VALUES (?, ?, ?)
                ON CONFLICT (paste_id, grantee_id) DO NOTHING
                """,
                (paste.id, user["id"], int(can_edit)),
                fetch=-1,
            )
            if sql.rowcount:
                grants.append(ShareGrant(paste.id, user["id"], can_edit, username))
        return grants

    def find_grant(self, paste_id: int, user_id: int) -> ShareGrant | None:
        with self.glue.querying() as sql:
            row = sql.query(
                "SELECT can_edit FROM share_grants WHERE paste_id = ? AND grantee_id = ?",
                (paste_id, user_id),
            )
        if not row:
            return None
        return ShareGrant(paste_id=paste_id, grantee_id=user_id, can_edit=bool(row["can_edit"]))

    def list_grants_for_paste(self, paste_id: int) -> list[ShareGrant]:
        with self.glue.querying() as sql:
            rows = sql.query(
                """
                SELECT g.paste_id, g.grantee_id, g.can_edit, u.username
                FROM share_grants g
                JOIN users u ON u.id = g.grantee_id
                WHERE g.paste_id = ?
                ORDER BY u.username
                """,
                (paste_id,),
                fetch=0,
            )
        return [
            ShareGrant(
                paste_id=row["paste_id"],
                grantee_id=row["grantee_id"],
                can_edit=bool(row["can_edit"]),
                username=row["username"],
            )
            for row in rows
        ]

    def list_granted_to(self, user_id: int) -> list[SharedPaste]:
        """Pastes shared with a user, newest first."""
        with self.glue.querying() as sql:
            rows = sql.query(
                """
                SELECT p.share_id, p.title, p.created_at, p.expires_at,
                       g.can_edit, u.username AS owner_username
                FROM share_grants g
                JOIN pastes p ON p.id = g.paste_id
                JOIN users u ON u.id = p.owner_id
                WHERE g.grantee_id = ?
                ORDER BY p.created_at DESC, p.id DESC
                """,
                (user_id,),
                fetch=0,
            )
        return [
            SharedPaste(
                share_id=row["share_id"],
                title=row["title"],
                owner_username=row["owner_username"],
                can_edit=bool(row["can_edit"]),
                created_at=from_db(row["created_at"]),
                expires_at=from_db(row["expires_at"]),
            )
            for row in rows
        ]
