"""Jailing users, checking sentences and releasing them."""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum

from .database import DointUser, get_doint_user, transaction

log = logging.getLogger(__name__)


class JailReason(Enum):
    """The law that was broken."""

    ATTEMPTED_ROBBERY = "AttemptedRobbery"
    # Only for stored values no longer recognised; never used when jailing.
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, value: str) -> JailReason:
        """Read a stored reason; anything unrecognised becomes UNKNOWN."""
        if value == cls.ATTEMPTED_ROBBERY.value:
            return cls.ATTEMPTED_ROBBERY
        return cls.UNKNOWN

    def to_time(self) -> timedelta:
        """Default sentence length for this crime."""
        if self is JailReason.ATTEMPTED_ROBBERY:
            return timedelta(seconds=60 * 60)
        log.warning("Tried to send a user to jail for a reason of Unknown!")
        return timedelta(seconds=10)

    def __str__(self) -> str:
        return self.value


class JailCause(Enum):
    """Who or what sent the user to jail."""

    ADMIN = "Admin"
    THE_POLICE = "ThePolice"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, value: str) -> JailCause:
        """Read a stored cause; anything unrecognised becomes UNKNOWN."""
        if value == cls.ADMIN.value:
            return cls.ADMIN
        return cls.UNKNOWN

    def __str__(self) -> str:
        return self.value


@dataclass
class JailedUser:
    """A row of the jail table. `until` is a naive UTC datetime."""

    id: int
    until: datetime
    reason: JailReason
    cause: JailCause
    can_bail: bool


@dataclass(frozen=True)
class JailForm:
    """What is needed to put someone in jail.

    With `jail_for` left as None the sentence comes from the crime.
    """

    law_broke: JailReason
    arrested_by: JailCause
    jail_for: timedelta | None = None
    can_bail: bool = False


class JailError(Exception):
    """Base class for jail failures."""


class AlreadyInJail(JailError):
    """The user is already in jail; carries their current record."""

    def __init__(self, jailed_user: JailedUser) -> None:
        super().__init__("The user is already in jail")
        self.jailed_user = jailed_user


class UserNotInJail(JailError):
    """The user isn't in jail."""

    def __init__(self) -> None:
        super().__init__("User isn't in jail")


class StillServingSentence(JailError):
    """The user has time left on their sentence."""

    def __init__(self) -> None:
        super().__init__("The user has more time to their sentence. Can't free them yet.")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _epoch_seconds(moment: datetime) -> int:
    return int(moment.replace(tzinfo=timezone.utc).timestamp())


def _jailed_from_row(row) -> JailedUser:
    return JailedUser(
        id=row[0],
        until=datetime.fromisoformat(row[1]),
        reason=JailReason.parse(row[2]),
        cause=JailCause.parse(row[3]),
        can_bail=bool(row[4]),
    )


_SELECT = "SELECT id, until, reason, cause, can_bail FROM jail"


def is_jailed(conn: sqlite3.Connection, user: DointUser) -> JailedUser | None:
    """Return the user's jail record, or None if they are free."""
    row = conn.execute(f"{_SELECT} WHERE id = ?", (user.id,)).fetchone()
    return _jailed_from_row(row) if row else None


def jail_user(conn: sqlite3.Connection, user: DointUser, form: JailForm) -> None:
    """Put a user in jail; raises AlreadyInJail if they are there already."""
    current = is_jailed(conn, user)
    if current is not None:
        raise AlreadyInJail(current)

    sentence = form.jail_for if form.jail_for is not None else form.law_broke.to_time()
    release_time = _utc_now() + sentence

    with transaction(conn):
        conn.execute(
            "INSERT INTO jail (id, until, reason, cause, can_bail) VALUES (?, ?, ?, ?, ?)",
            (
                user.id,
                release_time.isoformat(sep=" "),
                str(form.law_broke),
                str(form.arrested_by),
                int(form.can_bail),
            ),
        )


def free_user_from_jail(conn: sqlite3.Connection, user: DointUser) -> None:
    """Release a user whose sentence is over.

    Raises UserNotInJail or StillServingSentence when that is not possible.
    """
    jailed = is_jailed(conn, user)
    if jailed is None:
        raise UserNotInJail()

    if _epoch_seconds(jailed.until) >= _epoch_seconds(_utc_now()):
        raise StillServingSentence()

    with transaction(conn):
        removed = conn.execute("DELETE FROM jail WHERE id = ?", (jailed.id,)).rowcount
        if removed != 1:
            log.warning(
                "Tried to remove %s rows from the jail table when we expected to remove 1!",
                removed,
            )
            raise sqlite3.DatabaseError(f"expected to remove 1 jail row, removed {removed}")

    log.info("User [%s] was freed from jail.", user.id)


def load_jailed_users(conn: sqlite3.Connection) -> list[JailedUser]:
    """Return everyone currently in jail."""
    return [_jailed_from_row(row) for row in conn.execute(f"{_SELECT} ORDER BY id").fetchall()]


def minute_events(conn: sqlite3.Connection) -> bool:
    """Release everyone whose sentence is over. Returns True when done."""
    with transaction(conn):
        for in_jail in load_jailed_users(conn):
            user = get_doint_user(conn, in_jail.id)
            if user is None:
                raise LookupError(f"jailed user {in_jail.id} is not in the users table")
            try:
                free_user_from_jail(conn, user)
            except UserNotInJail:
                log.warning("Jail claims to not have user we just loaded from jail!")
            except StillServingSentence:
                pass
    return True