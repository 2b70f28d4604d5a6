from decimal import Decimal

import pytest

from doint.database import DointUser, connect, create_schema, get_doint_user, insert_user
from doint.formatting import display_doint
from doint.jail import JailCause, JailForm, JailReason, is_jailed, jail_user
from doint.rob import FAIL_FLAVOR, SUCCESS_FLAVOR, flavor_text, rob, robbery_odds


class _Rng:
    def __init__(self, *values):
        self._values = list(values)

    def random(self):
        return self._values.pop(0)

    def choice(self, seq):
        return seq[0]


@pytest.fixture
def conn():
    connection = connect(":memory:")
    create_schema(connection)
    yield connection
    connection.close()


def _add(conn, user_id, bal):
    user = DointUser(id=user_id, bal=Decimal(bal))
    insert_user(conn, user)
    return user


def test_odds_for_broke_robber_are_maximum():
    assert robbery_odds(Decimal(0), Decimal(50)) == 0.90


def test_odds_are_capped():
    assert robbery_odds(Decimal(1), Decimal(1_000_000)) == 0.90


def test_odds_scale_with_ratio():
    assert robbery_odds(Decimal(10), Decimal(20)) == pytest.approx(0.2)
    assert robbery_odds(Decimal(10), Decimal(30)) > robbery_odds(Decimal(10), Decimal(20))


@pytest.mark.parametrize("worked, pool", [(True, SUCCESS_FLAVOR), (False, FAIL_FLAVOR)])
def test_flavor_text_comes_from_the_right_pool(worked, pool):
    import random

    for seed in range(10):
        assert flavor_text(worked, random.Random(seed)) in pool


def test_unknown_robber(conn):
    _add(conn, 2, 100)
    assert rob(conn, 1, 2, _Rng()) == "Uhh, you're not in the doint DB properly, tell doc."


def test_unknown_victim(conn):
    _add(conn, 1, 100)
    assert rob(conn, 1, 2, _Rng()) == "You cant rob someone who isn't a Dointer!"


def test_robbing_self(conn):
    _add(conn, 1, 100)
    assert rob(conn, 1, 1, _Rng()) == "You robbed yourself, and stole your own wallet. Good job!"


def test_robbing_the_poor_is_jail(conn):
    robber = _add(conn, 1, 1000)
    _add(conn, 2, 10)
    assert rob(conn, 1, 2, _Rng()) == "Mf robbing poor people, straight to jail."
    record = is_jailed(conn, robber)
    assert record.reason is JailReason.ATTEMPTED_ROBBERY


def test_robbing_the_broke_is_jail(conn):
    robber = _add(conn, 1, 0)
    _add(conn, 2, 0)
    assert rob(conn, 1, 2, _Rng()) == "Mf robbing poor people, straight to jail."
    assert is_jailed(conn, robber).id == 1


def test_robbing_the_jailed_is_jail(conn):
    robber = _add(conn, 1, 100)
    victim = _add(conn, 2, 1000)
    jail_user(conn, victim, JailForm(JailReason.ATTEMPTED_ROBBERY, JailCause.ADMIN))
    reply = rob(conn, 1, 2, _Rng())
    assert reply == (
        "You snuck into jail to rob them, thats breaking and entering! You've been sent to jail!"
    )
    assert is_jailed(conn, robber).id == 1


def test_stealing_nothing(conn):
    robber = _add(conn, 1, 100)
    _add(conn, 2, 1000)
    reply = rob(conn, 1, 2, _Rng(0.0))
    assert reply == "You were going to rob them, but you forgot to take your ADHD meds and forgot."
    assert is_jailed(conn, robber) is None
    assert get_doint_user(conn, 2).bal == Decimal(1000)


def test_successful_robbery_moves_money(conn):
    robber = _add(conn, 1, 100)
    _add(conn, 2, 10000)
    reply = rob(conn, 1, 2, _Rng(0.5, 0.1))
    robber_after = get_doint_user(conn, 1).bal
    victim_after = get_doint_user(conn, 2).bal
    stolen = Decimal(10000) - victim_after
    assert stolen > 0
    assert robber_after == Decimal(100) + stolen
    assert stolen == stolen.to_integral_value()
    assert reply == f"{SUCCESS_FLAVOR[0]} {display_doint(stolen)}!"
    assert is_jailed(conn, robber) is None