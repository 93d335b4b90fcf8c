import json

from django.test import SimpleTestCase

from pastes.exceptions import CorruptRecord, StorageError
from pastes.records import Record
from pastes.serializers import UploadSerializer, decode_record, encode_record


class RecordCodecTests(SimpleTestCase):
    def test_round_trip_keeps_sentinels(self):
        record = Record(
            name="abc",
            data=" text with spaces \n",
            created_at=1_600_000_000_123_456_789,
            expires_after=0,
            edited_at=0,
            id=7,
        )
        decoded = decode_record(encode_record(record), "7")
        self.assertEqual(decoded, record)
        self.assertEqual(decoded.expires_after, 0)
        self.assertEqual(decoded.edited_at, 0)

    def test_id_is_not_part_of_payload(self):
        payload = json.loads(encode_record(Record(name="abc", data="x", id=42)))
        self.assertNotIn("id", payload)
        self.assertEqual(decode_record(encode_record(Record(name="abc", data="x")), "9").id, 9)

    def test_unicode_payload(self):
        record = Record(name="ünï", data="日本語 🦆", access_password="pässword", id=1)
        self.assertEqual(decode_record(encode_record(record), "1"), record)

    def test_nul_characters_survive(self):
        record = Record(name="n\x00ul", data="a\x00b", edit_password="\x00", id=2)
        self.assertEqual(decode_record(encode_record(record), "2"), record)

    def test_garbage_is_corrupt(self):
        with self.assertRaises(CorruptRecord):
            decode_record(b"\x00\x01", "3")

    def test_invalid_fields_are_corrupt(self):
        payload = json.dumps(
            {
                "name": "abc",
                "data": "x",
                "access_password": "",
                "edit_password": "",
                "created_at": 1,
                "expires_after": -5,
                "edited_at": 0,
            }
        ).encode()
        with self.assertRaises(StorageError) as ctx:
            decode_record(payload, "4")
        self.assertIsInstance(ctx.exception, CorruptRecord)
        self.assertEqual(ctx.exception.key, "4")

    def test_non_object_payload_is_corrupt(self):
        with self.assertRaises(CorruptRecord):
            decode_record(b"[1, 2, 3]", "5")


class UploadSerializerTests(SimpleTestCase):
    def test_optional_fields_default_to_empty(self):
        serializer = UploadSerializer(data={"f": "text"})
        self.assertTrue(serializer.is_valid())
        self.assertEqual(
            serializer.validated_data,
            {"f": "text", "name": "", "e": "", "ap": "", "ep": ""},
        )

    def test_payload_required(self):
        serializer = UploadSerializer(data={"name": "x"})
        self.assertFalse(serializer.is_valid())
        self.assertIn("f", serializer.errors)

    def test_nul_characters_accepted(self):
        serializer = UploadSerializer(data={"f": "a\x00b", "name": "n\x00"})
        self.assertTrue(serializer.is_valid(), serializer.errors)
        self.assertEqual(serializer.validated_data["f"], "a\x00b")
