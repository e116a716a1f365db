"""Tests for the local reference dataset."""

import json
from pathlib import Path

import pytest

from camelot_sort.domain.library.models import ReferenceEntry
from camelot_sort.domain.library.reference import (
    ReferenceDataError,
    ReferenceStore,
    normalize_text,
)


class TestNormalizeText:
    """Tests for normalize_text."""

    def test_lowercase_and_trim(self) -> None:
        assert normalize_text("  Around The World ") == "around the world"

    def test_quotes_unified(self) -> None:
        """Curly quotes and backticks become straight quotes."""
        assert normalize_text("Don’t Stop") == "don't stop"
        assert normalize_text("Don`t Stop") == "don't stop"
        assert normalize_text("“Heroes”") == '"heroes"'

    def test_hyphens_become_spaces(self) -> None:
        assert normalize_text("Jay-Z") == "jay z"
        assert normalize_text("Song - Radio Edit") == "song radio edit"

    def test_unicode_dashes_and_long_space_runs(self) -> None:
        """Em dashes and any whitespace run collapse to single spaces."""
        assert normalize_text("Song — Extended    Mix") == "song extended mix"

    def test_empty(self) -> None:
        assert normalize_text(None) == ""
        assert normalize_text("") == ""


class TestReferenceStore:
    """Tests for ReferenceStore indexing and lookup."""

    def test_lookup_by_normalized_title(self, reference_store: ReferenceStore) -> None:
        """Lookup ignores case and quote style."""
        entries = reference_store.lookup("DON'T STOP ME NOW")
        assert [e.artist for e in entries] == ["Queen"]

    def test_lookup_missing_title(self, reference_store: ReferenceStore) -> None:
        assert reference_store.lookup("Nope") == ()

    def test_shared_titles_keep_dataset_order(self) -> None:
        """Covers by several artists share one bucket in load order."""
        store = ReferenceStore(
            [
                ReferenceEntry("Hurt", "Nine Inch Nails", 90.0, "4A"),
                ReferenceEntry("Other", "Someone", 100.0, "1A"),
                ReferenceEntry("hurt", "Johnny Cash", 94.0, "4A"),
            ]
        )
        assert [e.artist for e in store.lookup("Hurt")] == ["Nine Inch Nails", "Johnny Cash"]
        assert len(store) == 3
        assert len(store.entries) == 3

    def test_fuzzy_candidates_mutual_containment(self, reference_store: ReferenceStore) -> None:
        """Remix suffixes and partial artist names still find the entry."""
        found = reference_store.fuzzy_candidates("Cry Baby - Remastered", "Kills")
        assert [e.name for e in found] == ["Cry Baby"]

    def test_fuzzy_candidates_need_artist_overlap(self, reference_store: ReferenceStore) -> None:
        """A matching title with an unrelated artist is not a candidate."""
        assert reference_store.fuzzy_candidates("Around the World", "Justice") == []

    def test_suggest_near_titles(self, reference_store: ReferenceStore) -> None:
        """Near misses are suggested for diagnostics."""
        suggestions = reference_store.suggest("Around the World (Live)")
        assert suggestions
        assert suggestions[0][0] == "around the world"

    def test_suggest_on_empty_store(self) -> None:
        assert ReferenceStore().suggest("anything") == []


class TestLoading:
    """Tests for building a store from records and files."""

    def test_from_records_skips_incomplete(self) -> None:
        """Records missing required fields or with bad numbers are skipped."""
        store = ReferenceStore.from_records(
            [
                {"name": "Good", "artist": "A", "bpm": 120, "key_camelot": "8A",
                 "duration_ms": 180000, "album": "LP"},
                {"name": "No Key", "artist": "A", "bpm": 120},
                {"name": "Bad BPM", "artist": "A", "bpm": "fast", "key_camelot": "8A"},
                "not a record",
            ]
        )
        assert len(store) == 1
        entry = store.entries[0]
        assert entry.bpm == 120.0
        assert entry.duration_ms == 180000
        assert entry.album == "LP"

    def test_optional_fields_default_to_none(self) -> None:
        store = ReferenceStore.from_records(
            [{"name": "Song", "artist": "A", "bpm": "98.5", "key_camelot": "3B"}]
        )
        entry = store.entries[0]
        assert entry.bpm == 98.5
        assert entry.duration_ms is None
        assert entry.album is None

    def test_missing_file_is_empty(self, tmp_path: Path) -> None:
        store = ReferenceStore.from_file(tmp_path / "missing.json")
        assert len(store) == 0

    def test_from_file(self, tmp_path: Path) -> None:
        path = tmp_path / "local_db.json"
        path.write_text(
            json.dumps([{"name": "Song", "artist": "Artist", "bpm": 120, "key_camelot": "8A"}]),
            encoding="utf-8",
        )
        store = ReferenceStore.from_file(path)
        assert [e.name for e in store.lookup("song")] == ["Song"]

    def test_invalid_json_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "local_db.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ReferenceDataError, match="not valid JSON"):
            ReferenceStore.from_file(path)

    def test_non_array_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "local_db.json"
        path.write_text('{"name": "Song"}', encoding="utf-8")
        with pytest.raises(ReferenceDataError, match="JSON array"):
            ReferenceStore.from_file(path)

    def test_invalid_utf8_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "local_db.json"
        path.write_bytes(
            b'[{"name": "Caf\xe9", "artist": "A", "bpm": 120, "key_camelot": "8A"}]'
        )
        with pytest.raises(ReferenceDataError, match="not valid JSON"):
            ReferenceStore.from_file(path)

    def test_directory_path_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ReferenceDataError, match="Cannot read"):
            ReferenceStore.from_file(tmp_path)

    def test_blank_name_or_artist_skipped(self) -> None:
        """Whitespace-only titles and artists never become matchable entries."""
        store = ReferenceStore.from_records(
            [
                {"name": "Song", "artist": "   ", "bpm": 120, "key_camelot": "8A"},
                {"name": " \t", "artist": "Artist", "bpm": 120, "key_camelot": "8A"},
            ]
        )
        assert len(store) == 0
        assert store.lookup("song") == ()
