"""Storage for users, the bank and fee settings, backed by SQLite."""

from __future__ import annotations

import itertools
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterator

_ROW_ID = "1"
_savepoint_ids = itertools.count()

_SCHEMA = """
CREATE TABLE IF NOT EXISTS bank (
    id TEXT PRIMARY KEY CHECK (length(id) = 1),
    doints_on_hand TEXT NOT NULL,
    total_doints TEXT NOT NULL,
    tax_rate INTEGER NOT NULL,
    ubi_rate INTEGER NOT NULL
);
CREATE TABLE IF NOT EXISTS fees (
    id TEXT PRIMARY KEY CHECK (length(id) = 1),
    flat_fee TEXT NOT NULL,
    percentage_fee INTEGER NOT NULL
);
CREATE TABLE IF NOT EXISTS users (
    id INTEGER PRIMARY KEY,
    bal TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS jail (
    id INTEGER PRIMARY KEY REFERENCES users(id),
    until TEXT NOT NULL,
    reason TEXT NOT NULL,
    cause TEXT NOT NULL,
    can_bail INTEGER NOT NULL
);
"""


@dataclass
class DointUser:
    """A participant in the doint system."""

    id: int
    bal: Decimal


@dataclass
class BankInfo:
    """The single row describing the central bank.

    Rates are in tenths of a percent: 1000 is 100.0%, 1 is 0.1%.
    """

    doints_on_hand: Decimal
    total_doints: Decimal
    tax_rate: int
    ubi_rate: int
    id: str = _ROW_ID


@dataclass
class FeeInfo:
    """The single row describing transaction fees.

    The percentage fee is in tenths of a percent.
    """

    flat_fee: Decimal
    percentage_fee: int
    id: str = _ROW_ID


def _dec(value) -> str:
    return format(Decimal(value), "f")


def connect(path) -> sqlite3.Connection:
    """Open a database connection with explicit transaction control."""
    conn = sqlite3.connect(path, isolation_level=None)
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def create_schema(conn: sqlite3.Connection) -> None:
    """Create the tables and the single bank and fee rows if missing."""
    conn.executescript(_SCHEMA)
    with transaction(conn):
        conn.execute(
            "INSERT OR IGNORE INTO bank (id, doints_on_hand, total_doints, tax_rate, ubi_rate)"
            " VALUES (?, '0', '0', 0, 0)",
            (_ROW_ID,),
        )
        conn.execute(
            "INSERT OR IGNORE INTO fees (id, flat_fee, percentage_fee) VALUES (?, '0', 0)",
            (_ROW_ID,),
        )


@contextmanager
def transaction(conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """Run a block atomically; nested blocks use savepoints."""
    if conn.in_transaction:
        name = f"doint_sp_{next(_savepoint_ids)}"
        conn.execute(f"SAVEPOINT {name}")
        try:
            yield conn
        except BaseException:
            conn.execute(f"ROLLBACK TO SAVEPOINT {name}")
            conn.execute(f"RELEASE SAVEPOINT {name}")
            raise
        conn.execute(f"RELEASE SAVEPOINT {name}")
    else:
        conn.execute("BEGIN")
        try:
            yield conn
        except BaseException:
            conn.execute("ROLLBACK")
            raise
        conn.execute("COMMIT")


def _user_from_row(row) -> DointUser:
    return DointUser(id=row[0], bal=Decimal(row[1]))


def get_doint_user(conn: sqlite3.Connection, user_id: int) -> DointUser | None:
    """Return the user with this id, or None if they are not enrolled."""
    with transaction(conn):
        row = conn.execute("SELECT id, bal FROM users WHERE id = ?", (int(user_id),)).fetchone()
    return _user_from_row(row) if row else None


def insert_user(conn: sqlite3.Connection, user: DointUser) -> None:
    """Add a new user; raises sqlite3.IntegrityError if the id exists."""
    with transaction(conn):
        conn.execute("INSERT INTO users (id, bal) VALUES (?, ?)", (user.id, _dec(user.bal)))


def save_user(conn: sqlite3.Connection, user: DointUser) -> None:
    """Write a user's balance back; raises LookupError if the user is missing."""
    with transaction(conn):
        cursor = conn.execute("UPDATE users SET bal = ? WHERE id = ?", (_dec(user.bal), user.id))
        if cursor.rowcount == 0:
            raise LookupError(f"no user with id {user.id}")


def delete_user(conn: sqlite3.Connection, user_id: int) -> int:
    """Remove a user and return how many rows were deleted."""
    with transaction(conn):
        cursor = conn.execute("DELETE FROM users WHERE id = ?", (int(user_id),))
    return cursor.rowcount


def load_all_users(conn: sqlite3.Connection) -> list[DointUser]:
    """Return every enrolled user."""
    with transaction(conn):
        rows = conn.execute("SELECT id, bal FROM users ORDER BY id").fetchall()
    return [_user_from_row(row) for row in rows]


def get_top_n(conn: sqlite3.Connection, limit: int) -> list[DointUser]:
    """Return up to `limit` users, richest first."""
    with transaction(conn):
        rows = conn.execute(
            "SELECT id, bal FROM users ORDER BY CAST(bal AS REAL) DESC LIMIT ?", (limit,)
        ).fetchall()
    return [_user_from_row(row) for row in rows]


def load_bank(conn: sqlite3.Connection) -> BankInfo:
    """Return the bank row; raises LookupError if it does not exist."""
    row = conn.execute(
        "SELECT id, doints_on_hand, total_doints, tax_rate, ubi_rate FROM bank LIMIT 1"
    ).fetchone()
    if row is None:
        raise LookupError("the bank row is missing")
    return BankInfo(
        id=row[0],
        doints_on_hand=Decimal(row[1]),
        total_doints=Decimal(row[2]),
        tax_rate=row[3],
        ubi_rate=row[4],
    )


def save_bank(conn: sqlite3.Connection, bank: BankInfo) -> None:
    """Write the bank row back; raises LookupError if it is missing."""
    with transaction(conn):
        cursor = conn.execute(
            "UPDATE bank SET doints_on_hand = ?, total_doints = ?, tax_rate = ?, ubi_rate = ?"
            " WHERE id = ?",
            (_dec(bank.doints_on_hand), _dec(bank.total_doints), bank.tax_rate, bank.ubi_rate, bank.id),
        )
        if cursor.rowcount == 0:
            raise LookupError("the bank row is missing")


def load_fees(conn: sqlite3.Connection) -> FeeInfo:
    """Return the fee row; raises LookupError if it does not exist."""
    row = conn.execute("SELECT id, flat_fee, percentage_fee FROM fees LIMIT 1").fetchone()
    if row is None:
        raise LookupError("the fee row is missing")
    return FeeInfo(id=row[0], flat_fee=Decimal(row[1]), percentage_fee=row[2])


def save_fees(conn: sqlite3.Connection, fees: FeeInfo) -> None:
    """Write the fee row back; raises LookupError if it is missing."""
    with transaction(conn):
        cursor = conn.execute(
            "UPDATE fees SET flat_fee = ?, percentage_fee = ? WHERE id = ?",
            (_dec(fees.flat_fee), fees.percentage_fee, fees.id),
        )
        if cursor.rowcount == 0:
            raise LookupError("the fee row is missing")