"""Administrator commands for the economy, returning the reply text."""

from __future__ import annotations

import sqlite3

from .bank import collect_taxes, set_tax_rate, set_ubi_rate
from .database import load_bank, transaction
from .events import ubi_time
from .formatting import display_doint


def admin_tax_now(conn: sqlite3.Connection) -> str:
    """Collect taxes immediately."""
    collected = collect_taxes(conn)
    return f"Taxation collected {collected} doints."


def admin_bank_info(conn: sqlite3.Connection) -> str:
    """Describe the bank's holdings and tax rate."""
    with transaction(conn):
        bank = load_bank(conn)
    formatted_tax_rate = f"{bank.tax_rate / 10:.1f}% [{bank.tax_rate}]"
    return (
        "Bank:"
        f"\n- Doints in bank: {bank.doints_on_hand}"
        f"\n- Doints in circulation: {bank.total_doints}"
        f"\n- Current tax rate {formatted_tax_rate}"
    )


def _rate_reply(was_set: bool) -> str:
    return "Rate set." if was_set else "Failed to set rate."


def admin_set_tax_rate(conn: sqlite3.Connection, new_rate: int) -> str:
    """Set the tax rate; it must be between 0 and 1000 inclusive."""
    return _rate_reply(set_tax_rate(conn, new_rate))


def admin_set_ubi_rate(conn: sqlite3.Connection, new_rate: int) -> str:
    """Set the UBI rate; it must be between 0 and 1000 inclusive."""
    return _rate_reply(set_ubi_rate(conn, new_rate))


def admin_force_disperse_ubi(conn: sqlite3.Connection) -> str:
    """Pay out universal basic income immediately."""
    try:
        given = ubi_time(conn)
    except (sqlite3.Error, LookupError) as err:
        return f"UBI failed: {err!r}"
    if given is None:
        return "Bank could not afford UBI."
    return f"Dispersed {display_doint(given)} to each player."