"""Tests for FileStore."""

import pytest

from playwright_insight.exceptions import FileAccessError, MalformedResultsError
from playwright_insight.file_ops import FileStore


class TestListing:
    def test_missing_directory_is_empty(self, tmp_path):
        assert FileStore().list_files(tmp_path / "absent") == []

    def test_prefix_suffix_sorted(self, tmp_path):
        for name in ("results-2024-05-02.json", "results-2024-05-01.json", "results.txt", "other.json"):
            (tmp_path / name).write_text("{}", encoding="utf-8")
        (tmp_path / "results-dir.json").mkdir()

        names = FileStore().list_files(tmp_path, prefix="results-", suffix=".json")

        assert names == ["results-2024-05-01.json", "results-2024-05-02.json"]

    def test_walk_recursive(self, tmp_path):
        (tmp_path / "b").mkdir()
        (tmp_path / "b" / "x.spec.ts").write_text("", encoding="utf-8")
        (tmp_path / "a.spec.ts").write_text("", encoding="utf-8")
        (tmp_path / "util.ts").write_text("", encoding="utf-8")

        paths = list(FileStore().walk(tmp_path, ".spec.ts"))

        assert [p.relative_to(tmp_path).as_posix() for p in paths] == ["a.spec.ts", "b/x.spec.ts"]


class TestReading:
    def test_read_json(self, tmp_path):
        path = tmp_path / "a.json"
        path.write_text('{"suites": []}', encoding="utf-8")
        assert FileStore().read_json(path) == {"suites": []}

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "a.json"
        path.write_text("{", encoding="utf-8")
        with pytest.raises(MalformedResultsError):
            FileStore().read_json(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileAccessError):
            FileStore().read_text(tmp_path / "absent.json")

    def test_size_limit(self, tmp_path):
        path = tmp_path / "big.json"
        path.write_text("x" * 100, encoding="utf-8")
        with pytest.raises(FileAccessError, match="exceeds limit"):
            FileStore(max_file_size_bytes=10).read_text(path)


class TestWriting:
    def test_write_json_creates_parents(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "out.json"
        FileStore().write_json(path, {"a": 1})
        assert FileStore().read_json(path) == {"a": 1}

    def test_copy(self, tmp_path):
        source = tmp_path / "src.json"
        source.write_text("[]", encoding="utf-8")
        FileStore().copy(source, tmp_path / "archive" / "dst.json")
        assert (tmp_path / "archive" / "dst.json").read_text(encoding="utf-8") == "[]"
