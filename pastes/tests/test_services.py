from django.test import TestCase

from pastes import services
from pastes.exceptions import (
    AccessDenied,
    InvalidExpiry,
    NameTaken,
    NegativeExpiry,
    RecordExpired,
    RecordNotFound,
)
from pastes.naming import NamingIndex
from pastes.policy import NANOSECONDS_PER_SECOND
from pastes.store import Store


class PasteServiceTests(TestCase):
    def setUp(self):
        self.store = Store(bucket="services")

    def test_upload_sets_metadata(self):
        record = services.upload(self.store, "hello", expire="60", access_password="a", edit_password="e")
        self.assertGreater(record.id, 0)
        self.assertEqual(len(record.name), 3)
        self.assertEqual(record.expires_after, 60 * NANOSECONDS_PER_SECOND)
        self.assertGreater(record.created_at, 0)
        self.assertEqual(record.edited_at, 0)
        self.assertEqual(NamingIndex(self.store).find_by_name(record.name), record)

    def test_upload_name_length(self):
        record = services.upload(self.store, "hello", name_length=6)
        self.assertEqual(len(record.name), 6)

    def test_name_checked_before_expiry(self):
        services.upload(self.store, "first", name="taken")
        with self.assertRaises(NameTaken):
            services.upload(self.store, "second", name="taken", expire="bad")

    def test_bad_expiry_stores_nothing(self):
        with self.assertRaises(InvalidExpiry):
            services.upload(self.store, "x", name="a", expire="bad")
        with self.assertRaises(NegativeExpiry):
            services.upload(self.store, "x", name="b", expire="-3")
        with self.store.begin() as tx:
            self.assertEqual(list(tx.items()), [])

    def test_expired_name_stays_reserved(self):
        record = services.upload(self.store, "x", name="old", expire="1")
        with self.assertRaises(RecordExpired):
            services.retrieve(self.store, "old", now=record.created_at + 2 * NANOSECONDS_PER_SECOND)
        with self.assertRaises(NameTaken):
            services.upload(self.store, "y", name="old")

    def test_nul_characters_are_stored_verbatim(self):
        services.upload(self.store, "first", name="old")
        services.upload(self.store, "bin\x00ary", name="new", access_password="p\x00w")

        self.assertEqual(services.retrieve(self.store, "old").data, "first")
        self.assertEqual(services.retrieve(self.store, "new", access_password="p\x00w").data, "bin\x00ary")

    def test_retrieve_checks_expiry_before_password(self):
        record = services.upload(self.store, "x", name="p", expire="1", access_password="pw")
        later = record.created_at + 2 * NANOSECONDS_PER_SECOND
        with self.assertRaises(RecordExpired):
            services.retrieve(self.store, "p", access_password="wrong", now=later)
        with self.assertRaises(AccessDenied):
            services.retrieve(self.store, "p", access_password="wrong", now=record.created_at)

    def test_edit_updates_data_and_timestamp(self):
        record = services.upload(self.store, "v1", name="doc", edit_password="pw")
        edited = services.edit(self.store, "doc", "v2", edit_password="pw", now=record.created_at + 5)

        self.assertEqual(edited.id, record.id)
        self.assertEqual(edited.edited_at, record.created_at + 5)

        stored = services.retrieve(self.store, "doc", now=record.created_at + 5)
        self.assertEqual(stored.data, "v2")
        self.assertEqual(stored.edited_at, record.created_at + 5)
        self.assertEqual(stored.created_at, record.created_at)
        self.assertEqual(stored.edit_password, "pw")

    def test_edit_without_edit_password_is_denied(self):
        services.upload(self.store, "v1", name="locked")
        with self.assertRaises(AccessDenied):
            services.edit(self.store, "locked", "v2", edit_password="")

    def test_delete(self):
        services.upload(self.store, "v1", name="doc", edit_password="pw")
        with self.assertRaises(AccessDenied):
            services.delete(self.store, "doc", edit_password="nope")

        services.delete(self.store, "doc", edit_password="pw")
        with self.assertRaises(RecordNotFound):
            services.retrieve(self.store, "doc")
        with self.assertRaises(RecordNotFound):
            services.delete(self.store, "doc", edit_password="pw")

        # The name is free again once deleted
        services.upload(self.store, "v2", name="doc")
