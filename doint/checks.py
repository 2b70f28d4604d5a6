"""Checks run before every command, and the reasons they can fail."""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass, field
from enum import Enum

from .database import get_doint_user
from .jail import JailedUser, is_jailed

log = logging.getLogger(__name__)

# The role that shows a member is participating in the doint system.
DOINTS_ENABLED_ROLE_ID = 1_417_375_143_591_940_096

OPT_IN_COMMAND = "opt_in"


@dataclass(frozen=True)
class Member:
    """A server member as seen by the checks."""

    user_id: int
    role_ids: frozenset[int] = field(default_factory=frozenset)
    is_administrator: bool = False


class CheckFailureReason(Enum):
    """Why a command check refused to let a command run."""

    USER_NOT_ENROLLED = "UserNotEnrolled"
    CHECK_ERRORED_OUT = "CheckErroredOut"
    INVALID_CHANNEL = "InvalidChannel"
    MEMBER_NOT_FOUND = "MemberNotFound"
    DATABASE_UNAVAILABLE = "DatabaseUnavailable"
    USER_IN_JAIL = "UserInJail"


class CommandCheckFailed(Exception):
    """A command check failed.

    `jailed_user` is set for USER_IN_JAIL; `where_fail` names the step
    that errored for CHECK_ERRORED_OUT.
    """

    def __init__(
        self,
        reason: CheckFailureReason,
        *,
        jailed_user: JailedUser | None = None,
        where_fail: str | None = None,
    ) -> None:
        super().__init__(f"Command check failed: {reason.value}")
        self.reason = reason
        self.jailed_user = jailed_user
        self.where_fail = where_fail


def member_enrolled(member: Member) -> bool:
    """Whether the member has the dointer role."""
    return DOINTS_ENABLED_ROLE_ID in member.role_ids


def pre_command_call(conn: sqlite3.Connection, command_name: str, member: Member | None) -> bool:
    """Decide whether a member may run a command.

    Returns True when allowed; raises CommandCheckFailed otherwise.
    """
    if command_name == OPT_IN_COMMAND:
        log.debug("Opt-in command, skipping pre-command checks...")
        return True

    if member is None:
        log.debug("Pre-command check, couldn't find member.")
        raise CommandCheckFailed(CheckFailureReason.MEMBER_NOT_FOUND)

    if not member_enrolled(member):
        raise CommandCheckFailed(CheckFailureReason.USER_NOT_ENROLLED)

    if member.is_administrator:
        log.info("Skipping pre_command checks, this user is an administrator.")
        return True

    try:
        user = get_doint_user(conn, member.user_id)
    except sqlite3.Error as err:
        raise CommandCheckFailed(
            CheckFailureReason.CHECK_ERRORED_OUT, where_fail="Getting the Doint user."
        ) from err
    if user is None:
        raise CommandCheckFailed(CheckFailureReason.USER_NOT_ENROLLED)

    try:
        jailed = is_jailed(conn, user)
    except sqlite3.Error as err:
        raise CommandCheckFailed(
            CheckFailureReason.CHECK_ERRORED_OUT,
            where_fail="Failed to check if user was in jail.",
        ) from err
    if jailed is not None:
        raise CommandCheckFailed(CheckFailureReason.USER_IN_JAIL, jailed_user=jailed)

    log.debug("All checks pass, user can run command.")
    return True