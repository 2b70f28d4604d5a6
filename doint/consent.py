"""Opting in to the doint system."""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Callable
from decimal import Decimal

from .database import DointUser, delete_user, get_doint_user, insert_user

log = logging.getLogger(__name__)

ALREADY_OPTED_IN_TEXT = "You've already opted in."

TERMS_AND_CONDITIONS_TEXT = (
    "You have now opted into Doints!\nBy opting into doints, you have given permission "
    "for the Doint bot to store your discord ID in the database and start keeping track "
    "of actions you do in Doccord."
    "\n"
    "\nThe Doint bot will see almost every action that you perform on Doccord, however "
    "**this information will not be stored**, "
    "it will only be used to calculate your Doint income and other Doint related actions, "
    "then immediately discarded."
    "\n"
    "\nIf you wish to opt out of the Doint system, you may do so at any time by informing "
    "a staff member of your intent to do so. "
    "Opting out will remove all data associated with you."
    "\n\n    "
    "\nWhat we currently store:\n    "
    "\n - User ID: Used to keep track of you in our database, since unlike usernames or "
    "nicknames, User IDs do not change."
    "\n - Doint balance: How many doints you currently have."
    "\n"
    "\n"
    "\nT&C last updated: 9/15/2025"
)

_ATTEMPTS = 3


def opt_in(
    conn: sqlite3.Connection,
    user_id: int,
    give_role: Callable[[int], bool],
    revoke_role: Callable[[int], bool],
    send: Callable[[str], object],
) -> bool:
    """Enrol a user, give them the dointer role and show them the terms.

    `give_role` and `revoke_role` report whether the member ends up with or
    without the role; `send` raises if the message could not be delivered.
    If the role or the terms cannot be delivered after three tries, the
    enrolment is rolled back. Returns True when the user was newly enrolled.
    """
    if get_doint_user(conn, user_id) is not None:
        send(ALREADY_OPTED_IN_TEXT)
        return False

    log.info("Adding new user to database...")
    insert_user(conn, DointUser(id=user_id, bal=Decimal(0)))

    for _ in range(_ATTEMPTS):
        if not give_role(user_id):
            continue
        try:
            send(TERMS_AND_CONDITIONS_TEXT)
        except Exception as err:  # delivery failures of any kind are retried
            log.warning("Failed to send the terms and conditions: %r", err)
            continue
        return True

    log.warning("New user enrollment failed! Rolling back...")
    try:
        removed = delete_user(conn, user_id)
    except sqlite3.Error:
        log.exception("Attempt to remove un-consenting user failed!")
        raise
    if removed == 1:
        log.info("Rolled back.")
    else:
        log.error("Failed to remove un-consenting user!")

    if not revoke_role(user_id):
        log.warning("User [%s] now has the dointer role without being in the DB!", user_id)

    return False