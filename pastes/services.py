import logging
from typing import Optional

from pastes.exceptions import AccessDenied, NameTaken, RecordExpired, RecordNotFound
from pastes.naming import NamingIndex, RecordField, generate_name
from pastes.policy import allows_access, allows_edit, is_expired, now_ns, parse_expiry
from pastes.records import Record
from pastes.store import Store

logger = logging.getLogger(__name__)


def _require(store: Store, name: str) -> Record:
    record = NamingIndex(store).find_by_name(name)
    if record is None:
        raise RecordNotFound(name)
    return record


def upload(
    store: Store,
    data: str,
    name: str = "",
    expire: str = "",
    access_password: str = "",
    edit_password: str = "",
    name_length: int = 3,
) -> Record:
    """
    Store a new paste and publish it under a unique name.

    Args:
        store: Store to persist into
        data: The text to store
        name: Name chosen by the caller; generated when empty
        expire: Expiry in whole seconds as sent by the client; empty means never
        access_password: Password needed to read the paste, empty for none
        edit_password: Password needed to edit or delete, empty makes it immutable
        name_length: Length of generated names

    Returns:
        The saved record, with its id assigned

    Raises:
        NameTaken: If ``name`` is already used by a stored record
        InvalidExpiry: If ``expire`` is not an integer
        NegativeExpiry: If ``expire`` is negative
    """
    record = Record(name="", data=data, created_at=now_ns())

    index = NamingIndex(store)
    if not name:
        name = generate_name(index, name_length)
    elif not index.is_unique(RecordField.NAME, name):
        raise NameTaken(name)
    record.name = name

    record.expires_after = parse_expiry(expire)
    record.access_password = access_password
    record.edit_password = edit_password

    store.save(record)
    logger.info(f"Stored paste {record}")
    return record


def retrieve(store: Store, name: str, access_password: str = "", now: Optional[int] = None) -> Record:
    """
    Fetch a paste for reading.

    Raises:
        RecordNotFound: If no record has that name
        RecordExpired: If the record has expired but is not yet deleted
        AccessDenied: If the access password does not match
    """
    record = _require(store, name)
    if is_expired(record, now_ns() if now is None else now):
        raise RecordExpired(name)
    if not allows_access(record, access_password):
        raise AccessDenied(f"Access to {name!r} denied")
    return record


def edit(store: Store, name: str, data: str, edit_password: str = "", now: Optional[int] = None) -> Record:
    """
    Replace the text of a paste.

    Fetch, check and save are separate steps with no lock held in between;
    concurrent edits of one paste end with the last save winning.

    Raises:
        RecordNotFound: If no record has that name
        RecordExpired: If the record has expired
        AccessDenied: If editing is not allowed with this password
    """
    if now is None:
        now = now_ns()

    record = _require(store, name)
    if is_expired(record, now):
        raise RecordExpired(name)
    if not allows_edit(record, edit_password):
        raise AccessDenied(f"Edit of {name!r} denied")

    record.data = data
    record.edited_at = now
    store.save(record)
    logger.info(f"Edited paste {record}")
    return record


def delete(store: Store, name: str, edit_password: str = "") -> None:
    """
    Delete a paste. Expired pastes can still be deleted by their owner.

    Raises:
        RecordNotFound: If no record has that name
        AccessDenied: If deleting is not allowed with this password
    """
    record = _require(store, name)
    if not allows_edit(record, edit_password):
        raise AccessDenied(f"Delete of {name!r} denied")

    store.remove(record)
    logger.info(f"Deleted paste {record}")
