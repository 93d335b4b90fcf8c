from django.test import SimpleTestCase

from pastes.exceptions import InvalidExpiry, NegativeExpiry
from pastes.policy import (
    NANOSECONDS_PER_SECOND,
    allows_access,
    allows_edit,
    is_expired,
    is_reapable,
    parse_expiry,
)
from pastes.records import Record


class ExpiryTests(SimpleTestCase):
    def test_zero_never_expires(self):
        record = Record(name="a", data="x", created_at=100, expires_after=0)
        self.assertFalse(is_expired(record, 100))
        self.assertFalse(is_expired(record, 2 ** 62))

    def test_expiry_boundary(self):
        record = Record(name="a", data="x", created_at=100, expires_after=50)
        self.assertFalse(is_expired(record, 100))
        self.assertFalse(is_expired(record, 150))
        self.assertTrue(is_expired(record, 151))

    def test_reapable_after_grace(self):
        record = Record(name="a", data="x", created_at=100, expires_after=50)
        self.assertTrue(is_expired(record, 160))
        self.assertFalse(is_reapable(record, 160, grace=10))
        self.assertTrue(is_reapable(record, 161, grace=10))

        forever = Record(name="b", data="x", created_at=100, expires_after=0)
        self.assertFalse(is_reapable(forever, 2 ** 62, grace=0))


class PasswordTests(SimpleTestCase):
    def test_empty_access_password_allows_everyone(self):
        record = Record(name="a", data="x")
        self.assertTrue(allows_access(record, ""))
        self.assertTrue(allows_access(record, "anything"))

    def test_access_password_must_match(self):
        record = Record(name="a", data="x", access_password="secret")
        self.assertTrue(allows_access(record, "secret"))
        self.assertFalse(allows_access(record, ""))
        self.assertFalse(allows_access(record, "Secret"))

    def test_empty_edit_password_forbids_everyone(self):
        record = Record(name="a", data="x")
        self.assertFalse(allows_edit(record, ""))
        self.assertFalse(allows_edit(record, "anything"))

    def test_edit_password_must_match(self):
        record = Record(name="a", data="x", edit_password="pässword")
        self.assertTrue(allows_edit(record, "pässword"))
        self.assertFalse(allows_edit(record, "password"))
        self.assertFalse(allows_edit(record, ""))


class ParseExpiryTests(SimpleTestCase):
    def test_empty_means_never(self):
        self.assertEqual(parse_expiry(""), 0)
        self.assertEqual(parse_expiry("0"), 0)

    def test_seconds_to_nanoseconds(self):
        self.assertEqual(parse_expiry("1"), NANOSECONDS_PER_SECOND)
        self.assertEqual(parse_expiry("+90"), 90 * NANOSECONDS_PER_SECOND)

    def test_invalid_values(self):
        for raw in ("soon", "1.5", " 1", "1_000", "0x10", "99999999999999999999"):
            with self.subTest(raw=raw):
                with self.assertRaises(InvalidExpiry):
                    parse_expiry(raw)

    def test_negative_values(self):
        with self.assertRaises(NegativeExpiry):
            parse_expiry("-1")
