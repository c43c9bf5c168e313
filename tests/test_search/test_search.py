"""
Tests for the search engine.

Covers:
- SearchFilter: each criterion and their conjunction
- search(): file order, pagination, unbounded scans, errors
- get_record(): lookup by id (byte offset)
- load_extensions / load_tags
"""

import json
from pathlib import Path

import pytest

from explore_me.config.schema import ScanConfig
from explore_me.indexer.builder import IndexBuilder
from explore_me.indexer.record import FileRecord, RecordDecodeError, encode_record
from explore_me.indexer.stream import RecordStream
from explore_me.search import (
    UNLIMITED,
    RecordNotFoundError,
    SearchFilter,
    get_record,
    load_extensions,
    load_tags,
    search,
)


REC_A = FileRecord(name="a.txt", path="/x/a.txt", ext="txt", tags=["x"])
REC_B = FileRecord(name="b.txt", path="/y/b.txt", ext="txt", tags=["y"])
REC_C = FileRecord(name="Cat[pet].PNG", path="/y/pics/Cat[pet].PNG", ext="png", tags=["pet", "x"])


@pytest.fixture
def index_path(tmp_path: Path) -> Path:
    path = tmp_path / "index.jsonl"
    path.write_bytes(b"".join(encode_record(r) for r in (REC_A, REC_B, REC_C)))
    return path


# ── Tests: SearchFilter ───────────────────────────────────────────────────


class TestSearchFilter:
    def test_empty_filter_matches_everything(self):
        f = SearchFilter()
        assert all(f.matches(r) for r in (REC_A, REC_B, REC_C))

    def test_name_substring(self):
        f = SearchFilter(name="a.t")
        assert f.matches(REC_A)
        assert not f.matches(REC_B)

    def test_name_case_sensitive(self):
        assert not SearchFilter(name="cat").matches(REC_C)
        assert SearchFilter(name="Cat").matches(REC_C)

    def test_path_substring(self):
        f = SearchFilter(path="/y")
        assert not f.matches(REC_A)
        assert f.matches(REC_B)
        assert f.matches(REC_C)

    def test_ext_exact(self):
        assert SearchFilter(ext="txt").matches(REC_A)
        assert not SearchFilter(ext="tx").matches(REC_A)
        assert not SearchFilter(ext="PNG").matches(REC_C)

    def test_tag_exact_any_element(self):
        assert SearchFilter(tag="x").matches(REC_C)
        assert not SearchFilter(tag="pe").matches(REC_C)

    def test_conjunction(self):
        f = SearchFilter(ext="txt", tag="x")
        assert f.matches(REC_A)
        assert not f.matches(REC_B)
        assert not f.matches(REC_C)


# ── Tests: search ─────────────────────────────────────────────────────────


class TestSearch:
    def test_ext_and_tag(self, index_path: Path):
        results = search(index_path, SearchFilter(ext="txt", tag="x"), UNLIMITED)
        assert [r.record for r in results] == [REC_A]

    def test_path_filter(self, index_path: Path):
        results = search(index_path, SearchFilter(path="/y/b"), UNLIMITED)
        assert [r.record for r in results] == [REC_B]

    def test_file_order_and_ids(self, index_path: Path):
        results = search(index_path, SearchFilter(), UNLIMITED)
        assert [r.record for r in results] == [REC_A, REC_B, REC_C]
        len_a = len(encode_record(REC_A))
        len_b = len(encode_record(REC_B))
        assert [r.id for r in results] == [0, len_a, len_a + len_b]

    def test_limit_one_returns_first_match(self, index_path: Path):
        results = search(index_path, SearchFilter(ext="txt"), 1)
        assert [r.record for r in results] == [REC_A]

    def test_limit_larger_than_matches(self, index_path: Path):
        results = search(index_path, SearchFilter(ext="txt"), 10)
        assert [r.record for r in results] == [REC_A, REC_B]

    def test_limit_zero(self, index_path: Path):
        assert search(index_path, SearchFilter(), 0) == []

    def test_default_is_unbounded(self, index_path: Path):
        assert len(search(index_path, SearchFilter())) == 3

    def test_no_match(self, index_path: Path):
        assert search(index_path, SearchFilter(tag="nope"), UNLIMITED) == []

    def test_invalid_negative_limit(self, index_path: Path):
        with pytest.raises(ValueError):
            search(index_path, SearchFilter(), -2)

    def test_missing_index(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            search(tmp_path / "missing.jsonl", SearchFilter(), UNLIMITED)

    def test_decode_error_aborts(self, index_path: Path):
        with open(index_path, "ab") as f:
            f.write(b"garbage\n")
        with pytest.raises(RecordDecodeError):
            search(index_path, SearchFilter(), UNLIMITED)

    def test_limit_stops_before_corrupt_tail(self, index_path: Path):
        with open(index_path, "ab") as f:
            f.write(b"garbage\n")
        results = search(index_path, SearchFilter(), 3)
        assert len(results) == 3

    def test_ids_stable_through_stream(self, index_path: Path):
        results = search(index_path, SearchFilter(path="/y"), UNLIMITED)
        with open(index_path, "rb") as f:
            stream = RecordStream(f)
            for result in results:
                stream.seek_to(result.id)
                assert stream.next() == (result.id, result.record)

    def test_to_dict(self, index_path: Path):
        result = search(index_path, SearchFilter(name="b.txt"), 1)[0]
        assert result.to_dict() == {
            "id": len(encode_record(REC_A)),
            "name": "b.txt",
            "path": "/y/b.txt",
            "tags": ["y"],
            "ext": "txt",
        }


# ── Tests: get_record ─────────────────────────────────────────────────────


class TestGetRecord:
    def test_lookup_by_id(self, index_path: Path):
        for result in search(index_path, SearchFilter(), UNLIMITED):
            assert get_record(index_path, result.id) == result

    def test_past_end(self, index_path: Path):
        size = index_path.stat().st_size
        with pytest.raises(RecordNotFoundError):
            get_record(index_path, size)

    def test_mid_record(self, index_path: Path):
        with pytest.raises(RecordDecodeError):
            get_record(index_path, 5)

    def test_negative_id(self, index_path: Path):
        with pytest.raises(ValueError):
            get_record(index_path, -1)


# ── Tests: built index ────────────────────────────────────────────────────


class TestBuiltIndex:
    @pytest.fixture
    def built(self, tmp_path: Path) -> tuple[Path, ScanConfig]:
        src = tmp_path / "src"
        (src / "albums").mkdir(parents=True)
        (src / "albums" / "photo[cat][2024].jpg").write_text("x")
        (src / "albums" / "photo[dog].jpg").write_text("x")
        (src / "notes.md").write_text("x")
        data = tmp_path / "data"
        config = ScanConfig()
        IndexBuilder(config).create(src, data)
        return data, config

    def test_search_by_tag(self, built):
        data, config = built
        results = search(data / config.index_file, SearchFilter(tag="2024"), UNLIMITED)
        assert [r.record.path for r in results] == ["/albums/photo[cat][2024].jpg"]

    def test_search_by_ext_paginated(self, built):
        data, config = built
        results = search(data / config.index_file, SearchFilter(ext="jpg"), 1)
        assert [r.record.name for r in results] == ["photo[cat][2024].jpg"]

    def test_load_extensions(self, built):
        data, config = built
        assert load_extensions(data, config) == ["jpg", "md"]

    def test_load_tags(self, built):
        data, config = built
        assert load_tags(data, config) == ["2024", "cat", "dog"]

    def test_dictionaries_missing(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_tags(tmp_path, ScanConfig())

    def test_corrupt_dictionary(self, tmp_path: Path):
        config = ScanConfig()
        (tmp_path / config.ext_list_file).write_text("{", encoding="utf-8")
        with pytest.raises(json.JSONDecodeError):
            load_extensions(tmp_path, config)
