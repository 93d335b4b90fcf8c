from dataclasses import dataclass


@dataclass
class Record:
    """
    One shared text blob and its metadata.

    Timestamps are UTC Unix nanoseconds. ``expires_after`` is a duration in
    nanoseconds counted from ``created_at``; 0 means the record never expires.
    ``edited_at`` stays 0 until the first successful edit.

    ``id`` is assigned by the store on first save and is not part of the
    serialized payload.
    """

    name: str
    data: str
    access_password: str = ""
    edit_password: str = ""
    created_at: int = 0
    expires_after: int = 0
    edited_at: int = 0
    id: int = 0

    @property
    def key(self) -> str:
        """Store key for this record (decimal id)."""
        return str(self.id)

    def __str__(self) -> str:
        return f"{self.name} (#{self.id})"
