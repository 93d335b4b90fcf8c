"""
Errors raised by the paste core.

They carry no HTTP knowledge; the view layer maps each class to a status
code and a short plain-text message.
"""


class PasteError(Exception):
    """Base class for every error raised by the paste core."""


# Client input


class MissingPayload(PasteError):
    pass


class PayloadTooLarge(PasteError):
    def __init__(self, limit: int):
        super().__init__(f"Content larger than {limit} bytes")
        self.limit = limit


class NameTaken(PasteError):
    def __init__(self, name: str):
        super().__init__(f"Name {name!r} is already taken")
        self.name = name


class UndecodablePayload(PasteError):
    pass


class InvalidExpiry(PasteError):
    pass


class NegativeExpiry(PasteError):
    pass


# Authorization


class AccessDenied(PasteError):
    pass


# Temporal state


class RecordNotFound(PasteError):
    def __init__(self, name: str):
        super().__init__(f"No record named {name!r}")
        self.name = name


class RecordExpired(PasteError):
    def __init__(self, name: str):
        super().__init__(f"Record {name!r} has expired")
        self.name = name


# Storage


class StorageError(PasteError):
    """Transaction, commit or decoding failure in the store."""


class CorruptRecord(StorageError):
    def __init__(self, key: str, reason):
        super().__init__(f"Entry {key} could not be decoded: {reason}")
        self.key = key


class ReadOnlyTransaction(StorageError):
    pass
