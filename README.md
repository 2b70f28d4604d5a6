# doint

`doint` is the engine behind a community currency called the *doint*
(symbol `Đ`). Amounts are exact `Decimal` values. All data lives in a SQLite
database.

## What is in the package

- `doint.database` holds the storage layer.
  - `connect(path)` opens a database and `create_schema(conn)` sets it up.
  - `transaction(conn)` is a context manager. A nested block uses a savepoint.
  - `DointUser`, `BankInfo` and `FeeInfo` describe the rows, and there are
    load and save helpers for each. These include `get_doint_user`,
    `insert_user`, `save_user`, `delete_user`, `load_all_users`, `get_top_n`,
    `load_bank`, `save_bank`, `load_fees` and `save_fees`.
- `doint.bank` runs the bank.
  - `get_bank_balance` returns the bank's liquid doints.
  - `calculate_fees` returns the fee on a transaction: the flat fee plus the
    percentage fee, rounded to the cent.
  - `collect_taxes` and `disperse_ubi` apply the bank's tax and UBI rates.
  - `set_tax_rate` and `set_ubi_rate` set a rate. Rates are in tenths of a
    percent, from 0 to 1000.
- `doint.transfer` moves money. `bank_transfer(conn, DointTransfer(...))`
  makes a validated, transactional move between users (`TransferParty.user(id)`)
  and the bank (`TransferParty.bank()`). It returns a `DointTransferReceipt`.
- `doint.jail` handles the jail.
  - `jail_user`, `is_jailed` and `free_user_from_jail` arrest, check and
    release a user.
  - `minute_events` releases everyone whose sentence is over.
  - `JailReason`, `JailCause` and `JailForm` describe an arrest.
- `doint.events` holds the scheduled jobs.
  - `daily_events` collects taxes and then pays UBI. If the bank cannot afford
    UBI, it taxes and tries once more.
  - `hourly_events` runs `inflation_check`. That check compares the doints held
    by the bank and by users with the expected total and reports an
    `InflationLeak`.
- Player commands return the reply text as a string:
  - `doint.payment.pay` pays another user, with fees.
  - `doint.rob.rob` is a robbery attempt. Pass a `random.Random` to make it
    repeatable.
  - `doint.info.balance` and `doint.info.leaderboard` report balances. The
    leaderboard takes a `display_name(user_id)` callable.
- `doint.admin` holds the administrator commands: `admin_tax_now`,
  `admin_bank_info`, `admin_set_tax_rate`, `admin_set_ubi_rate` and
  `admin_force_disperse_ubi`.
- `doint.checks` decides whether a command may run.
  - `pre_command_call(conn, command_name, member)` returns `True` or raises
    `CommandCheckFailed` with a `CheckFailureReason`.
  - `Member` carries a user id, role ids and an administrator flag.
- `doint.consent.opt_in` enrols a user. It takes callbacks that give or revoke
  the dointer role and send messages. If the role or the terms cannot be
  delivered after three tries, it rolls the enrolment back.
- `doint.formatting.display_doint` formats an amount, for example
  `Đ1,234.50`.

## Installing

```
pip install .
```

To install the test dependencies as well:

```
pip install ".[test]"
```

## Quick start

```python
from decimal import Decimal

from doint.database import connect, create_schema, insert_user, DointUser
from doint.transfer import DointTransfer, TransferParty, TransferReason, bank_transfer
from doint.formatting import display_doint

conn = connect(":memory:")
create_schema(conn)
insert_user(conn, DointUser(id=1, bal=Decimal("1000")))
insert_user(conn, DointUser(id=2, bal=Decimal("1000")))

receipt = bank_transfer(
    conn,
    DointTransfer(
        sender=TransferParty.user(1),
        recipient=TransferParty.user(2),
        transfer_amount=Decimal("50"),
        apply_fees=True,
        transfer_reason=TransferReason.USER_PAYMENT_NO_REASON,
    ),
)
print(display_doint(receipt.amount_sent))  # Đ50.00
```

Run the periodic tasks from your own scheduler:

```python
from doint.events import daily_events, hourly_events
from doint.jail import minute_events

daily_events(conn)    # taxes, then UBI
hourly_events(conn)   # inflation / deflation check
minute_events(conn)   # release users whose sentence is over
```

Failures are raised as exceptions:

- Transfers raise subclasses of `doint.transfer.DointTransferError`, such as
  `SenderInsufficientFunds` or `InvalidParty`.
- The jail raises subclasses of `doint.jail.JailError`.
- Command checks raise `doint.checks.CommandCheckFailed`.

## What the package does not do

- It has no chat bot, no command-line program and no scheduler. The commands
  return reply strings, and you connect them to your own front end. The
  periodic events only run when you call them.
- It includes no casino games. The emoji ids in `doint.knobs` are only
  constants.

## Running the tests

```
pytest
```