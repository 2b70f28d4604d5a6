from decimal import Decimal

import pytest

from doint.database import (
    DointUser,
    connect,
    create_schema,
    get_doint_user,
    insert_user,
    load_bank,
    load_fees,
    save_bank,
    save_fees,
    save_user,
)
from doint.transfer import (
    DointTransfer,
    InvalidParty,
    InvalidTransferReason,
    PointlessTransfer,
    SenderInsufficientFunds,
    TransferFeesOnBank,
    TransferParty,
    TransferReason,
    bank_transfer,
)


@pytest.fixture
def conn():
    connection = connect(":memory:")
    create_schema(connection)
    insert_user(connection, DointUser(id=1, bal=Decimal(1000)))
    insert_user(connection, DointUser(id=2, bal=Decimal(1000)))

    bank = load_bank(connection)
    bank.doints_on_hand = Decimal(0)
    bank.total_doints = Decimal(1_000_000)
    save_bank(connection, bank)

    fees = load_fees(connection)
    fees.flat_fee = Decimal(1)
    fees.percentage_fee = 10
    save_fees(connection, fees)
    yield connection
    connection.close()


def _payment(sender, recipient, amount, apply_fees=True, reason=TransferReason.USER_PAYMENT_NO_REASON):
    return DointTransfer(
        sender=sender,
        recipient=recipient,
        transfer_amount=Decimal(amount),
        apply_fees=apply_fees,
        transfer_reason=reason,
    )


def test_zero_payment_is_pointless(conn):
    with pytest.raises(PointlessTransfer):
        bank_transfer(conn, _payment(TransferParty.user(1), TransferParty.user(2), 0))


def test_in_range_payments_work_both_ways(conn):
    for amount in range(1, 990):
        user1_sent = bank_transfer(
            conn, _payment(TransferParty.user(1), TransferParty.user(2), amount)
        ).amount_sent
        user2_sent = bank_transfer(
            conn, _payment(TransferParty.user(2), TransferParty.user(1), amount)
        ).amount_sent
        assert user1_sent == Decimal(amount)
        assert user1_sent == user2_sent

        save_user(conn, DointUser(id=1, bal=Decimal(1000)))
        save_user(conn, DointUser(id=2, bal=Decimal(1000)))

    assert load_bank(conn).doints_on_hand > 0


def test_out_of_range_payments_fail(conn):
    for amount in range(990, 2000):
        with pytest.raises(SenderInsufficientFunds):
            bank_transfer(conn, _payment(TransferParty.user(1), TransferParty.user(2), amount))


def test_paying_nobody_fails(conn):
    with pytest.raises(InvalidParty):
        bank_transfer(conn, _payment(TransferParty.user(1), TransferParty.user(0), 50))


def test_missing_sender_is_invalid(conn):
    with pytest.raises(InvalidParty):
        bank_transfer(conn, _payment(TransferParty.user(99), TransferParty.user(1), 5))


def test_self_payment_is_pointless(conn):
    with pytest.raises(PointlessTransfer):
        bank_transfer(conn, _payment(TransferParty.user(1), TransferParty.user(1), 5))


def test_fees_on_bank_rejected(conn):
    transfer = _payment(
        TransferParty.bank(), TransferParty.user(1), 5, reason=TransferReason.CASINO_WIN
    )
    with pytest.raises(TransferFeesOnBank):
        bank_transfer(conn, transfer)


def test_user_payment_requires_two_users(conn):
    transfer = _payment(TransferParty.user(1), TransferParty.bank(), 5)
    with pytest.raises(InvalidTransferReason):
        bank_transfer(conn, transfer)


def test_ubi_must_come_from_bank(conn):
    transfer = _payment(
        TransferParty.user(1),
        TransferParty.user(2),
        5,
        apply_fees=False,
        reason=TransferReason.UNIVERSAL_BASIC_INCOME,
    )
    with pytest.raises(InvalidTransferReason):
        bank_transfer(conn, transfer)


def test_broke_bank_cannot_send(conn):
    transfer = _payment(
        TransferParty.bank(), TransferParty.user(1), 5, apply_fees=False,
        reason=TransferReason.CASINO_WIN,
    )
    with pytest.raises(SenderInsufficientFunds) as info:
        bank_transfer(conn, transfer)
    assert info.value.fees_required is None
    assert info.value.transfer_amount == Decimal(5)


def test_insufficient_funds_reports_fees(conn):
    with pytest.raises(SenderInsufficientFunds) as info:
        bank_transfer(conn, _payment(TransferParty.user(1), TransferParty.user(2), 1000))
    assert info.value.fees_required is not None
    assert info.value.fees_required > 0


def test_fees_are_conserved(conn):
    receipt = bank_transfer(conn, _payment(TransferParty.user(1), TransferParty.user(2), 100))
    sender = get_doint_user(conn, 1)
    recipient = get_doint_user(conn, 2)
    bank = load_bank(conn)
    assert recipient.bal == Decimal(1100)
    assert sender.bal == Decimal(900) - receipt.fees_paid
    assert bank.doints_on_hand == receipt.fees_paid
    assert sender.bal + recipient.bal + bank.doints_on_hand == Decimal(2000)


def test_no_fee_transfer_to_bank(conn):
    transfer = _payment(
        TransferParty.user(1), TransferParty.bank(), 40, apply_fees=False,
        reason=TransferReason.CASINO_LOSS,
    )
    receipt = bank_transfer(conn, transfer)
    assert receipt.fees_paid is None
    assert receipt.sender == TransferParty.user(1)
    assert receipt.recipient == TransferParty.bank()
    assert load_bank(conn).doints_on_hand == Decimal(40)
    assert get_doint_user(conn, 1).bal == Decimal(960)


def test_bank_can_pay_out_when_funded(conn):
    bank = load_bank(conn)
    bank.doints_on_hand = Decimal(100)
    save_bank(conn, bank)
    transfer = _payment(
        TransferParty.bank(), TransferParty.user(2), 30, apply_fees=False,
        reason=TransferReason.CASINO_WIN,
    )
    receipt = bank_transfer(conn, transfer)
    assert receipt.amount_sent == Decimal(30)
    assert load_bank(conn).doints_on_hand == Decimal(70)
    assert get_doint_user(conn, 2).bal == Decimal(1030)