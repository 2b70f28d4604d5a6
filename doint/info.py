"""Public information commands: a user's balance and the leaderboard."""

from __future__ import annotations

import sqlite3
from collections.abc import Callable

from .database import get_doint_user, get_top_n
from .formatting import display_doint

LEADERBOARD_SIZE = 10


def balance(conn: sqlite3.Connection, user_id: int) -> str | None:
    """Return the reply showing a user's balance, or None if they are not enrolled."""
    user = get_doint_user(conn, user_id)
    if user is None:
        return None
    return f"You currently have {display_doint(user.bal)}."


def leaderboard(conn: sqlite3.Connection, display_name: Callable[[int], str]) -> str:
    """Return the reply listing the richest users, named by `display_name(user_id)`."""
    entries = [(display_name(user.id), user.bal) for user in get_top_n(conn, LEADERBOARD_SIZE)]
    lines = ["Leaderboard:"]
    lines.extend(
        f"- {rank}: {name} - {display_doint(doints)}"
        for rank, (name, doints) in enumerate(entries, start=1)
    )
    return "\n".join(lines)