from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from doint.database import DointUser, connect, create_schema, insert_user
from doint.jail import (
    AlreadyInJail,
    JailCause,
    JailForm,
    JailReason,
    StillServingSentence,
    UserNotInJail,
    free_user_from_jail,
    is_jailed,
    jail_user,
    load_jailed_users,
    minute_events,
)


@pytest.fixture
def conn():
    connection = connect(":memory:")
    create_schema(connection)
    yield connection
    connection.close()


def make_user(conn, user_id):
    user = DointUser(id=user_id, bal=Decimal("100"))
    insert_user(conn, user)
    return user


def utc_now():
    return datetime.now(timezone.utc).replace(tzinfo=None)


ROBBERY = JailForm(law_broke=JailReason.ATTEMPTED_ROBBERY, arrested_by=JailCause.ADMIN)
EXPIRED = JailForm(
    law_broke=JailReason.ATTEMPTED_ROBBERY,
    arrested_by=JailCause.ADMIN,
    jail_for=timedelta(seconds=-10),
)


def test_reason_parse_round_trip():
    assert JailReason.parse(str(JailReason.ATTEMPTED_ROBBERY)) is JailReason.ATTEMPTED_ROBBERY
    assert JailReason.parse("SomethingRemoved") is JailReason.UNKNOWN


def test_cause_parse():
    assert JailCause.parse(str(JailCause.ADMIN)) is JailCause.ADMIN
    assert JailCause.parse("SomethingRemoved") is JailCause.UNKNOWN


def test_sentence_lengths():
    assert JailReason.ATTEMPTED_ROBBERY.to_time() == timedelta(seconds=60 * 60)
    assert JailReason.UNKNOWN.to_time() == timedelta(seconds=10)


def test_jail_and_check(conn):
    user = make_user(conn, 1)
    assert is_jailed(conn, user) is None
    before = utc_now()
    jail_user(conn, user, ROBBERY)
    after = utc_now()
    record = is_jailed(conn, user)
    assert record.id == user.id
    assert record.reason is JailReason.ATTEMPTED_ROBBERY
    assert record.cause is JailCause.ADMIN
    assert record.can_bail is False
    sentence = JailReason.ATTEMPTED_ROBBERY.to_time()
    assert before + sentence <= record.until <= after + sentence


def test_custom_sentence(conn):
    user = make_user(conn, 2)
    form = JailForm(
        law_broke=JailReason.ATTEMPTED_ROBBERY,
        arrested_by=JailCause.ADMIN,
        jail_for=timedelta(minutes=5),
        can_bail=True,
    )
    before = utc_now()
    jail_user(conn, user, form)
    after = utc_now()
    record = is_jailed(conn, user)
    assert before + form.jail_for <= record.until <= after + form.jail_for
    assert record.can_bail is True


def test_already_in_jail(conn):
    user = make_user(conn, 3)
    jail_user(conn, user, ROBBERY)
    with pytest.raises(AlreadyInJail) as caught:
        jail_user(conn, user, ROBBERY)
    assert caught.value.jailed_user.id == user.id


def test_free_when_not_jailed(conn):
    user = make_user(conn, 4)
    with pytest.raises(UserNotInJail):
        free_user_from_jail(conn, user)


def test_free_while_serving(conn):
    user = make_user(conn, 5)
    jail_user(conn, user, ROBBERY)
    with pytest.raises(StillServingSentence):
        free_user_from_jail(conn, user)
    assert is_jailed(conn, user) is not None


def test_free_after_sentence(conn):
    user = make_user(conn, 6)
    jail_user(conn, user, EXPIRED)
    free_user_from_jail(conn, user)
    assert is_jailed(conn, user) is None


def test_load_jailed_users(conn):
    first = make_user(conn, 7)
    second = make_user(conn, 8)
    make_user(conn, 9)
    jail_user(conn, first, ROBBERY)
    jail_user(conn, second, EXPIRED)
    assert [record.id for record in load_jailed_users(conn)] == [7, 8]


def test_minute_events_frees_only_expired(conn):
    serving = make_user(conn, 10)
    done = make_user(conn, 11)
    jail_user(conn, serving, ROBBERY)
    jail_user(conn, done, EXPIRED)
    assert minute_events(conn) is True
    assert is_jailed(conn, serving) is not None
    assert is_jailed(conn, done) is None


def test_minute_events_with_empty_jail(conn):
    make_user(conn, 12)
    assert minute_events(conn) is True
    assert load_jailed_users(conn) == []