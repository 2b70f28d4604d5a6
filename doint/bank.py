"""Bank operations: balance, fees, taxes, rates and universal basic income."""

from __future__ import annotations

import logging
import sqlite3
from decimal import ROUND_HALF_EVEN, Decimal

from .database import (
    load_all_users,
    load_bank,
    load_fees,
    save_bank,
    save_user,
    transaction,
)
from .formatting import display_doint

log = logging.getLogger(__name__)

_DENT = Decimal("0.01")
_RATE_SCALE = Decimal(1000)
_MIN_RATE = Decimal("0.001")
_MAX_RATE = 1000


def _round_dents(amount: Decimal) -> Decimal:
    return amount.quantize(_DENT, rounding=ROUND_HALF_EVEN)


def _rate_multiplier(rate: int) -> Decimal:
    """Turn a rate in tenths of a percent into a multiplier."""
    return Decimal(rate) / _RATE_SCALE


def get_bank_balance(conn: sqlite3.Connection) -> Decimal:
    """Return how many liquid doints the bank holds."""
    with transaction(conn):
        return load_bank(conn).doints_on_hand


def calculate_fees(conn: sqlite3.Connection, transaction_amount) -> Decimal:
    """Return the fee on a transaction: the flat fee plus the percentage fee.

    The percentage part is rounded to the nearest dent.
    """
    with transaction(conn):
        fee_info = load_fees(conn)

    percent = abs(_rate_multiplier(fee_info.percentage_fee))
    percentage_part = _round_dents(Decimal(transaction_amount) * percent)
    return fee_info.flat_fee + percentage_part


def collect_taxes(conn: sqlite3.Connection) -> Decimal:
    """Tax every user with a positive balance and put the proceeds in the bank.

    Each user pays their balance times the tax rate, rounded to the dent,
    capped at their balance, but never less than one doint.
    Returns the total collected.
    """
    log.info("Collecting taxes...")
    with transaction(conn):
        bank = load_bank(conn)
        tax_rate = _rate_multiplier(bank.tax_rate)

        if tax_rate < _MIN_RATE:
            log.info("Tax rate is zero. Skipping!")
            return Decimal(0)

        taxpayers = [user for user in load_all_users(conn) if user.bal > 0]

        collected = Decimal(0)
        for user in taxpayers:
            rounded = _round_dents(user.bal * tax_rate)
            adjustment = max(min(user.bal, rounded), Decimal(1))
            user.bal -= adjustment
            collected += adjustment

        for user in taxpayers:
            save_user(conn, user)

        bank = load_bank(conn)
        bank.doints_on_hand += collected
        save_bank(conn, bank)

    log.info("Tax collection finished!")
    log.info("Collected [%s] doints via taxes.", display_doint(collected))
    return collected


def _set_rate(conn: sqlite3.Connection, field: str, new_rate: int) -> bool:
    if not 0 <= new_rate <= _MAX_RATE:
        return False
    try:
        with transaction(conn):
            bank = load_bank(conn)
            setattr(bank, field, int(new_rate))
            save_bank(conn, bank)
    except (sqlite3.Error, LookupError):
        return False
    return True


def set_tax_rate(conn: sqlite3.Connection, new_rate: int) -> bool:
    """Set the tax rate (0 to 1000 tenths of a percent). Returns whether it was set."""
    return _set_rate(conn, "tax_rate", new_rate)


def set_ubi_rate(conn: sqlite3.Connection, new_rate: int) -> bool:
    """Set the UBI rate (0 to 1000 tenths of a percent). Returns whether it was set."""
    return _set_rate(conn, "ubi_rate", new_rate)


def disperse_ubi(conn: sqlite3.Connection) -> Decimal | None:
    """Pay every user an equal share of the bank's liquid doints times the UBI rate.

    Each share is rounded to the dent, with a minimum of one doint.
    Returns the amount each user got, zero when UBI is disabled or nobody
    is enrolled, and None when the bank cannot afford it.
    """
    log.info("Distributing universal basic income...")
    with transaction(conn):
        bank = load_bank(conn)
        ubi_rate = _rate_multiplier(bank.ubi_rate)

        if ubi_rate < _MIN_RATE:
            log.info("UBI disabled! Skipping!")
            return Decimal(0)

        pool = bank.doints_on_hand * ubi_rate
        recipients = load_all_users(conn)
        if not recipients:
            log.debug("Nobody to pay UBI to.")
            return Decimal(0)

        headcount = Decimal(len(recipients))
        per_person = max(_round_dents(pool / headcount), Decimal(1))

        total = per_person * headcount
        if total > bank.doints_on_hand:
            log.debug("Bank cant afford UBI. Skipping.")
            return None

        if total <= 0:
            log.warning("Tried to give out negative money? %s. Skipping.", total)

        for user in recipients:
            user.bal += per_person
            save_user(conn, user)

        bank = load_bank(conn)
        bank.doints_on_hand -= total
        save_bank(conn, bank)

        if bank.doints_on_hand < 0:
            log.warning("Paid too much UBI and bank went negative! Canceling!")
            raise sqlite3.DatabaseError("UBI would leave the bank negative")

    return per_person