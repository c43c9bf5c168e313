"""
Tests for the record codec.

Covers:
- encode_record: line shape, field order, non-ASCII names
- decode_record: round trip, malformed lines, wrong field types
- FileRecord.from_dict: zero values for missing fields
"""

import json

import pytest

from explore_me.indexer.record import (
    FileRecord,
    RecordDecodeError,
    decode_record,
    encode_record,
)


@pytest.fixture
def record() -> FileRecord:
    return FileRecord(
        name="photo[cat][2024].jpg",
        path="/albums/photo[cat][2024].jpg",
        ext="jpg",
        tags=["cat", "2024"],
    )


class TestEncode:
    def test_single_line_with_terminator(self, record: FileRecord):
        line = encode_record(record)
        assert line.endswith(b"\n")
        assert line.count(b"\n") == 1

    def test_field_layout(self, record: FileRecord):
        line = encode_record(record)
        assert line == (
            b'{"name":"photo[cat][2024].jpg",'
            b'"path":"/albums/photo[cat][2024].jpg",'
            b'"tags":["cat","2024"],"ext":"jpg"}\n'
        )

    def test_empty_tags_and_ext(self):
        line = encode_record(FileRecord(name="README", path="/README"))
        assert json.loads(line) == {"name": "README", "path": "/README", "tags": [], "ext": ""}

    def test_non_ascii_written_as_utf8(self):
        line = encode_record(FileRecord(name="café.txt", path="/café.txt", ext="txt"))
        assert "café".encode("utf-8") in line

    def test_newline_in_name_is_escaped(self):
        line = encode_record(FileRecord(name="a\nb", path="/a\nb"))
        assert line.count(b"\n") == 1


class TestDecode:
    def test_round_trip(self, record: FileRecord):
        assert decode_record(encode_record(record)) == record

    def test_round_trip_non_ascii(self):
        original = FileRecord(name="日本[旅行].png", path="/日本[旅行].png", ext="png", tags=["旅行"])
        assert decode_record(encode_record(original)) == original

    def test_without_terminator(self):
        rec = decode_record(b'{"name":"a.txt","path":"/a.txt","tags":[],"ext":"txt"}')
        assert rec.name == "a.txt"
        assert rec.ext == "txt"

    def test_malformed_json(self):
        with pytest.raises(RecordDecodeError) as exc_info:
            decode_record(b'{"name": "a.txt"', offset=42)
        assert exc_info.value.offset == 42
        assert "offset 42" in str(exc_info.value)

    def test_blank_line_is_malformed(self):
        with pytest.raises(RecordDecodeError):
            decode_record(b"\n")

    def test_invalid_utf8(self):
        with pytest.raises(RecordDecodeError):
            decode_record(b'{"name":"\xff"}\n')

    def test_not_an_object(self):
        with pytest.raises(RecordDecodeError, match="JSON object"):
            decode_record(b'["a.txt"]\n')

    def test_wrong_name_type(self):
        with pytest.raises(RecordDecodeError, match="name"):
            decode_record(b'{"name":1,"path":"/a","tags":[],"ext":""}\n')

    def test_wrong_tags_type(self):
        with pytest.raises(RecordDecodeError, match="tags"):
            decode_record(b'{"name":"a","path":"/a","tags":"x","ext":""}\n')

    def test_decode_error_is_value_error(self):
        with pytest.raises(ValueError):
            decode_record(b"nope\n")


class TestFromDict:
    def test_missing_fields_use_zero_values(self):
        rec = FileRecord.from_dict({"name": "a"})
        assert rec == FileRecord(name="a", path="", ext="", tags=[])

    def test_null_tags(self):
        rec = FileRecord.from_dict({"name": "a", "path": "/a", "tags": None, "ext": ""})
        assert rec.tags == []

    def test_to_dict_copies_tags(self, record: FileRecord):
        data = record.to_dict()
        data["tags"].append("dog")
        assert record.tags == ["cat", "2024"]
