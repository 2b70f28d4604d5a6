"""The pay command: one user sends doints to another, with fees."""

from __future__ import annotations

import logging
import math
import sqlite3
from decimal import Decimal

from .formatting import display_doint
from .transfer import (
    DointTransfer,
    InvalidParty,
    RecipientFull,
    SenderInsufficientFunds,
    TransferParty,
    TransferReason,
    TransferTooBig,
    bank_transfer,
)

log = logging.getLogger(__name__)


def _to_decimal(amount) -> Decimal:
    if isinstance(amount, float) and not math.isfinite(amount):
        raise ValueError(f"cannot turn {amount!r} into an amount of doints")
    value = Decimal(str(amount))
    if not value.is_finite():
        raise ValueError(f"cannot turn {amount!r} into an amount of doints")
    return value


def pay(
    conn: sqlite3.Connection,
    sender_id: int,
    recipient_id: int,
    payment,
    recipient_enrolled: bool,
    recipient_name: str | None,
) -> str:
    """Pay another user and return the reply text.

    Fees apply. `recipient_name` of None is shown as "them".
    Raises ValueError for an amount that is not a finite number.
    """
    amount = _to_decimal(payment)
    log.debug("User [%s] is attempting to pay user [%s] %s doints.", sender_id, recipient_id, amount)

    if sender_id == recipient_id:
        log.debug("User tried to pay self. Not allowed. Skipping.")
        return "Paying yourself? Bruh, No."

    if not recipient_enrolled:
        log.debug("Person user was trying to pay was not a dointer. Not allowed. Skipping.")
        return "You cant pay them, they aren't a dointer."

    if amount == 0:
        log.debug("User tried to pay 0 doints. Not allowed. Skipping.")
        return "You cant pay somebody nothing."

    transfer = DointTransfer(
        sender=TransferParty.user(sender_id),
        recipient=TransferParty.user(recipient_id),
        transfer_amount=amount,
        apply_fees=True,
        transfer_reason=TransferReason.USER_PAYMENT_NO_REASON,
    )

    try:
        receipt = bank_transfer(conn, transfer)
    except SenderInsufficientFunds as broke:
        log.debug("User cant afford the transfer. Cancelled.")
        fee_money = display_doint(broke.fees_required)
        return (
            "You cannot afford that.\n"
            f"You may need to factor in the transaction fee of {fee_money}."
        )
    except RecipientFull:
        log.debug("Recipient has too much money. Cancelled.")
        return "Recipient can't have any more money. They win."
    except InvalidParty:
        log.debug("One of the parties in the transaction is invalid. Cancelled.")
        return "One of the parties in the transaction was invalid.\nThat shouldn't happen, tell Doc."
    except TransferTooBig:
        return "Somehow your payment was too big.\nThat shouldn't happen, tell Doc."

    log.debug("User was paid.")
    amount_string = display_doint(receipt.amount_sent)
    fee_string = display_doint(receipt.fees_paid)
    name = recipient_name if recipient_name is not None else "them"
    return f"You've paid {name} {amount_string}.\nYou paid a transfer fee of {fee_string}."