"""Moving doints between users and the bank, with validation and fees."""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from .bank import calculate_fees, get_bank_balance
from .database import get_doint_user, load_bank, save_bank, save_user, transaction

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransferParty:
    """One side of a transfer: the central bank, or a user by id."""

    user_id: int | None = None

    @classmethod
    def bank(cls) -> TransferParty:
        """The central doint bank."""
        return cls(None)

    @classmethod
    def user(cls, user_id) -> TransferParty:
        """A user, identified by their id."""
        return cls(int(user_id))

    @property
    def is_bank(self) -> bool:
        return self.user_id is None

    @property
    def is_user(self) -> bool:
        return self.user_id is not None


class TransferReason(Enum):
    """Why a transfer is happening."""

    TAX_COLLECTION = "TaxCollection"
    CASINO_LOSS = "CasinoLoss"
    CASINO_WIN = "CasinoWin"
    UNIVERSAL_BASIC_INCOME = "UniversalBasicIncome"
    USER_PAYMENT_NO_REASON = "UserPaymentNoReason"
    CRIME_ROBBERY = "CrimeRobbery"
    USER_PAYMENT_WITH_REASON = "UserPaymentWithReason"

    @property
    def is_user_payment(self) -> bool:
        return self in (TransferReason.USER_PAYMENT_NO_REASON, TransferReason.USER_PAYMENT_WITH_REASON)


@dataclass
class DointTransfer:
    """A request to move doints.

    The amount must be non-zero; fees may not be applied when the bank sends.
    `note` carries the message of a payment made with a reason.
    """

    sender: TransferParty
    recipient: TransferParty
    transfer_amount: Decimal
    apply_fees: bool
    transfer_reason: TransferReason
    note: str | None = None


@dataclass
class DointTransferReceipt:
    """What a completed transfer did. `amount_sent` excludes fees."""

    sender: TransferParty
    recipient: TransferParty
    amount_sent: Decimal
    fees_paid: Decimal | None
    transfer_reason: TransferReason
    note: str | None = None


class DointTransferError(Exception):
    """Base class for transfer failures."""


class SenderInsufficientFunds(DointTransferError):
    """The sender cannot cover the amount and, where applicable, the fees."""

    def __init__(self, transfer_amount: Decimal, fees_required: Decimal | None) -> None:
        super().__init__(
            "The sender doesn't have enough Doints to cover the transaction, and possibly its fees."
        )
        self.transfer_amount = transfer_amount
        self.fees_required = fees_required


class RecipientFull(DointTransferError):
    """The recipient has no room for the incoming funds."""

    def __init__(self) -> None:
        super().__init__("The recipient doesn't have room for the incoming funds.")


class InvalidParty(DointTransferError):
    """A party to the transfer does not exist."""

    def __init__(self) -> None:
        super().__init__("At least one of the parties involved in the transfer does not exist.")


class TransferFeesOnBank(DointTransferError):
    """Fees were requested on a transfer out of the bank."""

    def __init__(self) -> None:
        super().__init__("Attempted to make a transfer from the bank with fees enabled.")


class PointlessTransfer(DointTransferError):
    """Sender and recipient are the same, or the amount is zero."""

    def __init__(self) -> None:
        super().__init__(
            "Cannot transfer funds from a party, to that same party. Cannot transfer 0 doints."
        )


class TransferTooBig(DointTransferError):
    """The amount cannot be represented."""

    def __init__(self) -> None:
        super().__init__("Casting the numbers around failed. Transfer must be <= u32")


class InvalidTransferReason(DointTransferError):
    """The reason does not fit the parties involved."""

    def __init__(self) -> None:
        super().__init__("The picked reason for the transfer is incompatible with other arguments.")


def _validate_reason(transfer: DointTransfer) -> None:
    reason = transfer.transfer_reason
    sender, recipient = transfer.sender, transfer.recipient

    if reason.is_user_payment and not (sender.is_user and recipient.is_user):
        raise InvalidTransferReason()
    if reason is TransferReason.TAX_COLLECTION and not (sender.is_user and recipient.is_bank):
        raise InvalidTransferReason()
    if reason is TransferReason.UNIVERSAL_BASIC_INCOME and not (
        sender.is_bank and recipient.is_user
    ):
        raise InvalidTransferReason()


def _adjust(conn: sqlite3.Connection, party: TransferParty, delta: Decimal) -> None:
    if party.is_bank:
        bank = load_bank(conn)
        bank.doints_on_hand += delta
        save_bank(conn, bank)
        return
    user = get_doint_user(conn, party.user_id)
    if user is None:
        raise InvalidParty()
    user.bal += delta
    save_user(conn, user)


def bank_transfer(conn: sqlite3.Connection, transfer: DointTransfer) -> DointTransferReceipt:
    """Move doints between two parties and return a receipt.

    Raises a DointTransferError subclass when the transfer is not allowed;
    database failures propagate and roll the transfer back.
    """
    amount = Decimal(transfer.transfer_amount)

    if transfer.sender == transfer.recipient:
        log.warning("Attempted to send money between self and self! Pointless!")
        raise PointlessTransfer()
    if amount == 0:
        log.warning("Attempted to move 0 doints between parties! Pointless!")
        raise PointlessTransfer()
    if transfer.sender.is_bank and transfer.apply_fees:
        raise TransferFeesOnBank()

    fees = calculate_fees(conn, amount) if transfer.apply_fees else Decimal(0)
    full_sender_spend = amount + fees

    _validate_reason(transfer)

    def broke() -> SenderInsufficientFunds:
        return SenderInsufficientFunds(amount, fees if transfer.apply_fees else None)

    if transfer.sender.is_bank:
        balance = get_bank_balance(conn)
        if balance <= 0 or balance < full_sender_spend:
            raise broke()
    else:
        sender = get_doint_user(conn, transfer.sender.user_id)
        if sender is None:
            raise InvalidParty()
        if sender.bal < full_sender_spend:
            raise broke()

    if transfer.recipient.is_user and get_doint_user(conn, transfer.recipient.user_id) is None:
        raise InvalidParty()

    with transaction(conn):
        _adjust(conn, transfer.sender, -full_sender_spend)
        _adjust(conn, transfer.recipient, amount)
        if transfer.apply_fees:
            _adjust(conn, TransferParty.bank(), fees)

    return DointTransferReceipt(
        sender=transfer.sender,
        recipient=transfer.recipient,
        amount_sent=amount,
        fees_paid=fees if transfer.apply_fees else None,
        transfer_reason=transfer.transfer_reason,
        note=transfer.note,
    )