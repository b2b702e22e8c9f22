"""Tests for feed2json_api.io.artifact_store module."""

import logging
from unittest.mock import patch

import pytest

from feed2json_api.errors import NotFoundError, PersistenceError
from feed2json_api.io.artifact_store import ArtifactStore, Variant


@pytest.fixture
def store(tmp_path):
    return ArtifactStore(tmp_path / "cache")


class TestArtifactStore:
    def test_creates_cache_dir(self, tmp_path) -> None:
        ArtifactStore(tmp_path / "nested" / "cache")
        assert (tmp_path / "nested" / "cache").is_dir()

    def test_variant_file_layout(self, store) -> None:
        assert store.path("abc123def456", Variant.RAW).name == "abc123def456"
        assert store.path("abc123def456", Variant.PRETTY).name == "abc123def456.json"
        assert store.path("abc123def456", Variant.MINIFIED).name == "abc123def456.min.json"

    def test_exists_is_false_for_missing_artifact(self, store) -> None:
        assert store.exists("abc123def456", Variant.PRETTY) is False

    def test_write_then_read(self, store) -> None:
        store.write_atomic("abc123def456", Variant.RAW, b"<rss/>")
        assert store.exists("abc123def456", Variant.RAW) is True
        assert store.read("abc123def456", Variant.RAW) == b"<rss/>"

    def test_logs_written_artifact(self, store, caplog) -> None:
        with caplog.at_level(logging.INFO, logger="feed2json_api.io.artifact_store"):
            store.write_atomic("abc123def456", Variant.RAW, b"<rss/>")
        assert "Written raw artifact" in caplog.text
        assert "(6 bytes)" in caplog.text

    def test_variants_are_independent(self, store) -> None:
        store.write_atomic("abc123def456", Variant.PRETTY, b"{}")
        assert store.exists("abc123def456", Variant.PRETTY) is True
        assert store.exists("abc123def456", Variant.MINIFIED) is False
        assert store.exists("abc123def456", Variant.RAW) is False

    def test_existence_is_rechecked_on_disk(self, store) -> None:
        store.write_atomic("abc123def456", Variant.RAW, b"data")
        store.path("abc123def456", Variant.RAW).unlink()
        assert store.exists("abc123def456", Variant.RAW) is False

    def test_state_survives_new_instance(self, store) -> None:
        store.write_atomic("abc123def456", Variant.MINIFIED, b"{}")
        other = ArtifactStore(store.cache_dir)
        assert other.read("abc123def456", Variant.MINIFIED) == b"{}"

    def test_read_missing_raises_not_found(self, store) -> None:
        with pytest.raises(NotFoundError):
            store.read("abc123def456", Variant.PRETTY)

    def test_open_missing_raises_not_found(self, store) -> None:
        with pytest.raises(NotFoundError):
            store.open("abc123def456", Variant.RAW)

    def test_open_streams_content(self, store) -> None:
        store.write_atomic("abc123def456", Variant.RAW, b"<feed/>")
        with store.open("abc123def456", Variant.RAW) as stream:
            assert stream.read() == b"<feed/>"

    def test_write_leaves_no_temp_files(self, store) -> None:
        store.write_atomic("abc123def456", Variant.PRETTY, b"{\n}")
        assert [p.name for p in store.cache_dir.iterdir()] == ["abc123def456.json"]

    def test_failed_write_cleans_up_and_keeps_old_file(self, store) -> None:
        store.write_atomic("abc123def456", Variant.RAW, b"old")
        with patch("feed2json_api.io.artifact_store.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(PersistenceError, match="disk full"):
                store.write_atomic("abc123def456", Variant.RAW, b"new")
        assert store.read("abc123def456", Variant.RAW) == b"old"
        assert [p.name for p in store.cache_dir.iterdir()] == ["abc123def456"]

    def test_not_found_is_a_persistence_error(self) -> None:
        assert issubclass(NotFoundError, PersistenceError)
