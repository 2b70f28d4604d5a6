"""Scheduled economy events: taxes, UBI and inflation checks."""

from __future__ import annotations

import logging
import sqlite3
from decimal import Decimal
from enum import Enum

from .bank import collect_taxes, disperse_ubi
from .database import load_all_users, load_bank, transaction

log = logging.getLogger(__name__)


class InflationLeak(Enum):
    """Which way the money supply is off."""

    TOO_MANY = "TooMany"
    TOO_FEW = "TooFew"


def inflation_check(conn: sqlite3.Connection) -> InflationLeak | None:
    """Compare the doints held by the bank and users with the expected total.

    Returns the kind of leak, or None if the books balance.
    """
    log.debug("Checking for inflation/deflation.")
    try:
        with transaction(conn):
            bank = load_bank(conn)
            expected = bank.total_doints
            actual = bank.doints_on_hand + sum(
                (user.bal for user in load_all_users(conn)), Decimal(0)
            )
    except Exception as err:
        log.warning("Inflation check did not run! %r", err)
        raise

    if expected == actual:
        log.debug("No inflation/deflation detected.")
        return None

    log.warning("The economy is leaking!")
    if expected > actual:
        log.warning("Doints are disappearing!")
        log.warning("%s are missing!", expected - actual)
        return InflationLeak.TOO_FEW

    log.warning("Doints are being created!")
    log.warning("%s over expected amount!", actual - expected)
    return InflationLeak.TOO_MANY


def tax_time(conn: sqlite3.Connection) -> Decimal:
    """Collect taxes as defined in the bank."""
    return collect_taxes(conn)


def ubi_time(conn: sqlite3.Connection) -> Decimal | None:
    """Disperse universal basic income as defined in the bank."""
    return disperse_ubi(conn)


def daily_events(conn: sqlite3.Connection) -> bool:
    """Collect taxes, then pay UBI; if the bank is too broke, tax and try once more.

    Returns True when done.
    """
    log.info("Running daily events...")
    with transaction(conn):
        collected = tax_time(conn)
        log.info("Collected %s in taxes...", collected)

        log.info("Distributing UBI...")
        if ubi_time(conn) is None:
            log.info("Re-running taxes and UBI...")
            again = tax_time(conn)
            log.info("Collected an additional %s in taxes...", again)
            ubi_time(conn)
    return True


def hourly_events(conn: sqlite3.Connection) -> bool:
    """Run hourly checks. Returns False if any check found a problem."""
    log.info("Running hourly events...")
    with transaction(conn):
        healthy = True
        leak = inflation_check(conn)
        if leak is not None:
            log.warning("INFLATION/DEFLATION DETECTED!")
            log.warning("TYPE: %s!", leak.name)
            healthy = False
    return healthy