import io

from django.core.validators import ProhibitNullCharactersValidator

from rest_framework import serializers
from rest_framework.exceptions import ParseError
from rest_framework.parsers import JSONParser
from rest_framework.renderers import JSONRenderer

from pastes.exceptions import CorruptRecord
from pastes.records import Record


class TextField(serializers.CharField):
    """CharField that accepts any text, NUL characters included."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.validators = [
            validator
            for validator in self.validators
            if not isinstance(validator, ProhibitNullCharactersValidator)
        ]


class RecordSerializer(serializers.Serializer):
    """Storage representation of a record. The id lives in the entry key."""

    name = TextField(trim_whitespace=False)
    data = TextField(allow_blank=True, trim_whitespace=False)
    access_password = TextField(allow_blank=True, trim_whitespace=False)
    edit_password = TextField(allow_blank=True, trim_whitespace=False)
    created_at = serializers.IntegerField(min_value=0)
    expires_after = serializers.IntegerField(min_value=0)
    edited_at = serializers.IntegerField(min_value=0)

    def create(self, validated_data):
        return Record(**validated_data)


def encode_record(record: Record) -> bytes:
    return JSONRenderer().render(RecordSerializer(record).data)


def decode_record(raw: bytes, key: str) -> Record:
    """
    Decode a stored entry back into a Record carrying ``key`` as its id.

    Raises:
        CorruptRecord: If the bytes are not a valid record payload
    """
    try:
        payload = JSONParser().parse(io.BytesIO(bytes(raw)))
    except ParseError as exc:
        raise CorruptRecord(key, exc) from exc

    serializer = RecordSerializer(data=payload)
    if not serializer.is_valid():
        raise CorruptRecord(key, serializer.errors)
    return serializer.save(id=int(key))


class UploadSerializer(serializers.Serializer):
    """Form fields accepted when creating a paste."""

    f = TextField(
        trim_whitespace=False,
        help_text="Text to store.",
    )
    name = TextField(
        default="",
        allow_blank=True,
        trim_whitespace=False,
        help_text="Name to publish the text under. Generated when empty.",
    )
    e = TextField(
        default="",
        allow_blank=True,
        trim_whitespace=False,
        help_text="Seconds until the paste expires. Empty or 0 means never.",
    )
    ap = TextField(
        default="",
        allow_blank=True,
        trim_whitespace=False,
        help_text="Password required to read the paste.",
    )
    ep = TextField(
        default="",
        allow_blank=True,
        trim_whitespace=False,
        help_text="Password required to edit or delete the paste. Without it the paste is immutable.",
    )


class EditSerializer(serializers.Serializer):
    """Form fields accepted when replacing a paste's text."""

    f = TextField(
        trim_whitespace=False,
        help_text="New text for the paste.",
    )
    ep = TextField(
        default="",
        allow_blank=True,
        trim_whitespace=False,
        help_text="Edit password given at upload.",
    )
