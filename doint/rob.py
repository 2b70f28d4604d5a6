"""The rob command: steal from another user, or go to jail trying."""

from __future__ import annotations

import logging
import math
import random
import sqlite3
from decimal import Decimal

from .database import get_doint_user, transaction
from .formatting import display_doint
from .jail import JailCause, JailForm, JailReason, is_jailed, jail_user
from .transfer import DointTransfer, TransferParty, TransferReason, bank_transfer

log = logging.getLogger(__name__)

MAX_ODDS = 0.90
MAX_STEAL_SHARE = 0.05

SUCCESS_FLAVOR = (
    "You ran by and stole their hat worth",
    "You ran off with",
    "You tied their shoelaces together while you leafed through their wallet, taking",
    "You pointed a banana at them, and they thought it was a gun! Ran off with",
    "You dipped into their back pocket, which contained 3 jelly beans, a fish skeleton, and",
)

FAIL_FLAVOR = (
    "You asked a cop what the best way to rob somebody was, and they didn't think that was very funny!",
    "You sneezed while reaching into their backpack, and they called the police!",
    "You reached into their back pocket, but it wasn't a back pocket... Shit!",
    "Some french lady started yelling when you walked near the target, alerting the police!",
    "You tried to mug them with a banana, but they didn't fall for it!",
)

_ROBBERY_FORM = JailForm(
    law_broke=JailReason.ATTEMPTED_ROBBERY,
    arrested_by=JailCause.THE_POLICE,
    jail_for=None,
    can_bail=False,
)


def robbery_odds(robber_bal, victim_bal) -> float:
    """Chance of a robbery succeeding: a tenth of the wealth ratio, at most 90%.

    A robber with nothing always gets the maximum odds.
    """
    if Decimal(robber_bal) == 0:
        return MAX_ODDS
    raw = (float(victim_bal) / float(robber_bal)) / 10.0
    return min(raw, MAX_ODDS)


def flavor_text(worked: bool, rng: random.Random | None = None) -> str:
    """A random line describing how the robbery went."""
    rng = rng if rng is not None else random.Random()
    return rng.choice(SUCCESS_FLAVOR if worked else FAIL_FLAVOR)


def rob(
    conn: sqlite3.Connection,
    robber_id: int,
    victim_id: int,
    rng: random.Random | None = None,
) -> str:
    """Attempt a robbery and return the reply text.

    Robbing the poor, the broke or the jailed sends the robber to jail.
    Otherwise a random amount up to 5% of the victim's balance times the odds
    is stolen, or the robber is jailed on failure.
    """
    rng = rng if rng is not None else random.Random()
    log.debug("User [%s] is robbing User [%s]!", robber_id, victim_id)

    robber = get_doint_user(conn, robber_id)
    if robber is None:
        log.warning("User not in DB!")
        return "Uhh, you're not in the doint DB properly, tell doc."

    victim = get_doint_user(conn, victim_id)
    if victim is None:
        return "You cant rob someone who isn't a Dointer!"

    if robber.id == victim.id:
        return "You robbed yourself, and stole your own wallet. Good job!"

    if robber.bal / 2 > victim.bal or victim.bal == 0:
        jail_user(conn, robber, _ROBBERY_FORM)
        return "Mf robbing poor people, straight to jail."

    if is_jailed(conn, victim) is not None:
        jail_user(conn, robber, _ROBBERY_FORM)
        return (
            "You snuck into jail to rob them, thats breaking and entering! "
            "You've been sent to jail!"
        )

    odds = robbery_odds(robber.bal, victim.bal)
    log.debug("Odds of this robbery working are %.3f", odds)

    max_steal = float(victim.bal) * MAX_STEAL_SHARE * odds
    if not max_steal > 0:
        raise ValueError(f"nothing can be stolen: the range up to {max_steal} is empty")
    steal_amount = Decimal(math.floor(rng.random() * max_steal))

    if steal_amount == 0:
        log.debug("Robbery canceled, would have robbed 0 doint.")
        return "You were going to rob them, but you forgot to take your ADHD meds and forgot."

    if not rng.random() < odds:
        message = f"{flavor_text(False, rng)}\nYou've been sent to jail for attempted robbery!"
        jail_user(conn, robber, _ROBBERY_FORM)
        return message

    with transaction(conn):
        bank_transfer(
            conn,
            DointTransfer(
                sender=TransferParty.user(victim.id),
                recipient=TransferParty.user(robber.id),
                transfer_amount=steal_amount,
                apply_fees=False,
                transfer_reason=TransferReason.CRIME_ROBBERY,
            ),
        )

    return f"{flavor_text(True, rng)} {display_doint(steal_amount)}!"