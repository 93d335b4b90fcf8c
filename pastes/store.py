"""
Transactional key/value store backed by the Django ORM.

Entries live in a named bucket and are keyed by the decimal string of a
record id. Each bucket owns a monotonic sequence used to hand out ids.

Writable transactions are serialized per (database, bucket) with a process
lock, so there is at most one active writer. Readers never take the lock and
only see committed data.
"""

import logging
import threading
from contextlib import contextmanager, nullcontext
from typing import Callable, Dict, Iterator, Optional, Tuple

from django.db import DatabaseError, transaction
from django.db.models import BigIntegerField, F
from django.db.models.functions import Cast

from pastes.exceptions import ReadOnlyTransaction, StorageError
from pastes.models import Bucket, Entry
from pastes.records import Record
from pastes.serializers import encode_record

logger = logging.getLogger(__name__)

ITERATOR_CHUNK_SIZE = 500

_writer_locks: Dict[Tuple[str, str], threading.Lock] = {}
_writer_locks_guard = threading.Lock()


def _writer_lock(using: str, bucket: str) -> threading.Lock:
    with _writer_locks_guard:
        return _writer_locks.setdefault((using, bucket), threading.Lock())


class Transaction:
    """Handle for reads and writes inside one ``Store.begin()`` block."""

    def __init__(self, bucket: Bucket, writable: bool, using: str):
        self.bucket = bucket
        self.writable = writable
        self.using = using

    def _entries(self):
        if self.bucket.pk is None:
            # Bucket not created yet, only possible in a read transaction
            return Entry.objects.using(self.using).none()
        return Entry.objects.using(self.using).filter(bucket=self.bucket)

    def _check_writable(self) -> None:
        if not self.writable:
            raise ReadOnlyTransaction(f"Bucket {self.bucket.name!r} opened read-only")

    def sequence(self) -> int:
        """Last id issued by the bucket (0 when none was issued)."""
        return self.bucket.sequence

    def next_sequence(self) -> int:
        """Issue a fresh id, strictly greater than every id issued before."""
        self._check_writable()
        Bucket.objects.using(self.using).filter(pk=self.bucket.pk).update(
            sequence=F("sequence") + 1
        )
        self.bucket.refresh_from_db(fields=["sequence"])
        return self.bucket.sequence

    def get(self, key: str) -> Optional[bytes]:
        value = self._entries().filter(key=key).values_list("value", flat=True).first()
        if value is None:
            return None
        return bytes(value)

    def put(self, key: str, value: bytes) -> None:
        self._check_writable()
        updated = self._entries().filter(key=key).update(value=value)
        if not updated:
            Entry.objects.using(self.using).create(bucket=self.bucket, key=key, value=value)

    def delete(self, key: str) -> None:
        self._check_writable()
        self._entries().filter(key=key).delete()

    def items(self, newest_first: bool = False) -> Iterator[Tuple[str, bytes]]:
        """
        Iterate over ``(key, value)`` pairs of the bucket.

        Default order is insertion order. ``newest_first`` orders by numeric
        key, highest id first.
        """
        queryset = self._entries()
        if newest_first:
            queryset = queryset.annotate(
                numeric_key=Cast("key", output_field=BigIntegerField())
            ).order_by("-numeric_key")
        else:
            queryset = queryset.order_by("pk")

        for key, value in queryset.values_list("key", "value").iterator(
            chunk_size=ITERATOR_CHUNK_SIZE
        ):
            yield key, bytes(value)

    def for_each(self, callback: Callable[[str, bytes], None]) -> None:
        for key, value in self.items():
            callback(key, value)


class Store:
    """
    Durable record storage for one bucket of one database.

    Construct it explicitly and hand it to every component that needs it;
    tests use their own bucket names to stay isolated.
    """

    def __init__(self, bucket: str = "files", using: str = "default"):
        self.bucket_name = bucket
        self.using = using

    def __repr__(self) -> str:
        return f"Store(bucket={self.bucket_name!r}, using={self.using!r})"

    def _bucket(self, writable: bool) -> Bucket:
        buckets = Bucket.objects.using(self.using)
        if writable:
            bucket, _ = buckets.select_for_update().get_or_create(name=self.bucket_name)
            return bucket
        bucket = buckets.filter(name=self.bucket_name).first()
        if bucket is None:
            return Bucket(name=self.bucket_name, sequence=0)
        return bucket

    @contextmanager
    def begin(self, writable: bool = False) -> Iterator[Transaction]:
        """
        Open a transaction on the bucket.

        Everything done inside the block commits together when it exits
        normally and is rolled back when it raises.

        Raises:
            StorageError: If the database fails, including at commit
        """
        lock = _writer_lock(self.using, self.bucket_name) if writable else nullcontext()
        try:
            with lock, transaction.atomic(using=self.using):
                yield Transaction(self._bucket(writable), writable, self.using)
        except DatabaseError as exc:
            logger.error(f"Transaction on bucket {self.bucket_name!r} failed: {exc}")
            raise StorageError(f"Transaction on bucket {self.bucket_name!r} failed") from exc

    def save(self, record: Record) -> Record:
        """
        Persist a record, assigning it an id from the sequence on first save.

        The id is only set on the record once the transaction has committed.
        """
        payload = encode_record(record)
        with self.begin(writable=True) as tx:
            record_id = record.id or tx.next_sequence()
            tx.put(str(record_id), payload)
        record.id = record_id
        return record

    def remove(self, record: Record) -> None:
        with self.begin(writable=True) as tx:
            tx.delete(record.key)
