"""Expiration and password checks on records. Pure functions, no I/O."""

import hmac
import re
import time

from pastes.exceptions import InvalidExpiry, NegativeExpiry
from pastes.records import Record

NANOSECONDS_PER_SECOND = 1_000_000_000
# Durations are kept within a signed 64-bit nanosecond count
MAX_EXPIRY_SECONDS = (2 ** 63 - 1) // NANOSECONDS_PER_SECOND

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


def now_ns() -> int:
    """Current UTC time as Unix nanoseconds."""
    return time.time_ns()


def _matches(supplied: str, expected: str) -> bool:
    return hmac.compare_digest(supplied.encode("utf-8"), expected.encode("utf-8"))


def is_expired(record: Record, now: int) -> bool:
    if record.expires_after == 0:
        return False
    return now > record.created_at + record.expires_after


def is_reapable(record: Record, now: int, grace: int) -> bool:
    """True once the record has been expired for longer than ``grace`` nanoseconds."""
    if record.expires_after == 0:
        return False
    return now > record.created_at + record.expires_after + grace


def allows_access(record: Record, password: str) -> bool:
    return record.access_password == "" or _matches(password, record.access_password)


def allows_edit(record: Record, password: str) -> bool:
    # A record without an edit password can never be edited or deleted
    return record.edit_password != "" and _matches(password, record.edit_password)


def parse_expiry(raw: str) -> int:
    """
    Convert the expiry form value (whole seconds) to nanoseconds.

    An empty value means the record never expires.

    Raises:
        InvalidExpiry: If the value is not an integer
        NegativeExpiry: If the value is below zero
    """
    if raw == "":
        return 0
    if not _INTEGER_RE.fullmatch(raw):
        raise InvalidExpiry(f"Invalid time format: {raw!r}")
    seconds = int(raw)
    if seconds < 0:
        raise NegativeExpiry(f"Expiry must not be negative, got {seconds}")
    if seconds > MAX_EXPIRY_SECONDS:
        raise InvalidExpiry(f"Expiry out of range: {seconds}")
    return seconds * NANOSECONDS_PER_SECOND
