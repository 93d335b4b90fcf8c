"""
Name lookup and uniqueness checks over the record store.

Both operations scan every entry of the bucket. That is fine for a small
single-node deployment; a secondary name index would replace the scans
without changing the results below.

A corrupt entry aborts a lookup but is skipped by a uniqueness check.
"""

import enum
import logging
import string
from typing import Optional

from django.utils.crypto import get_random_string

from pastes.exceptions import CorruptRecord
from pastes.records import Record
from pastes.serializers import decode_record
from pastes.store import Store

logger = logging.getLogger(__name__)

NAME_CHARSET = string.ascii_letters + string.digits


class RecordField(enum.Enum):
    """Record fields that can be checked for uniqueness."""

    NAME = "name"
    DATA = "data"
    ACCESS_PASSWORD = "access_password"
    EDIT_PASSWORD = "edit_password"

    def value_of(self, record: Record) -> str:
        if self is RecordField.NAME:
            return record.name
        if self is RecordField.DATA:
            return record.data
        if self is RecordField.ACCESS_PASSWORD:
            return record.access_password
        return record.edit_password


class NamingIndex:
    def __init__(self, store: Store):
        self.store = store

    def find_by_name(self, name: str) -> Optional[Record]:
        """
        Return the record published under ``name``, or None.

        Entries are scanned from the highest id down, so the newest record
        wins if a name were ever duplicated.

        Raises:
            CorruptRecord: If an entry met during the scan cannot be decoded
        """
        with self.store.begin() as tx:
            for key, value in tx.items(newest_first=True):
                record = decode_record(value, key)
                if record.name == name:
                    return record
        return None

    def is_unique(self, field: RecordField, value: str) -> bool:
        """True when no stored record has ``value`` in ``field``."""
        with self.store.begin() as tx:
            for key, raw in tx.items():
                try:
                    record = decode_record(raw, key)
                except CorruptRecord as exc:
                    logger.warning(f"Skipping entry during uniqueness check: {exc}")
                    continue
                if field.value_of(record) == value:
                    return False
        return True


def generate_name(index: NamingIndex, length: int = 3) -> str:
    """Pick random names until one is not used by any stored record."""
    name = get_random_string(length, NAME_CHARSET)
    while not index.is_unique(RecordField.NAME, name):
        name = get_random_string(length, NAME_CHARSET)
    return name
