"""Tests for scoring playlist tracks against reference entries."""

from camelot_sort.domain.library.matching import (
    find_best_candidate,
    find_best_match,
    score_candidate,
)
from camelot_sort.domain.library.models import ReferenceEntry


class TestScoreCandidate:
    """Tests for score_candidate."""

    def test_exact_artist_close_duration_exact_title(self, make_track, song_entry) -> None:
        """100 (artist) + 50 (duration within 5s) + 20 (title) = 170."""
        track = make_track(name="Song", artist="Artist", duration_ms=201000)
        assert score_candidate(track, song_entry).score == 170

    def test_duration_mismatch_penalized(self, make_track, song_entry) -> None:
        """A 10s difference costs 50: 100 - 50 + 20 = 70."""
        track = make_track(name="Song", artist="Artist", duration_ms=210000)
        assert score_candidate(track, song_entry).score == 70

    def test_duration_boundary_is_exclusive(self, make_track, song_entry) -> None:
        """Exactly 5000 ms apart counts as a mismatch."""
        track = make_track(duration_ms=205000)
        assert score_candidate(track, song_entry).score == 70

    def test_partial_artist(self, make_track) -> None:
        """'Kills' is contained in 'The Kills': +80, not rejected."""
        entry = ReferenceEntry("Cry Baby", "The Kills", 98.0, "1B")
        track = make_track(name="Cry Baby", artist="Kills")
        assert score_candidate(track, entry).score == 80 + 20

    def test_artist_mismatch_rejected(self, make_track) -> None:
        """Unrelated artists are rejected whatever the title."""
        entry = ReferenceEntry("Genesis", "Daft Punk", 120.0, "8A")
        track = make_track(name="Genesis", artist="Justice")
        assert score_candidate(track, entry) is None

    def test_unknown_entry_duration_is_neutral(self, make_track) -> None:
        entry = ReferenceEntry("Song", "Artist", 120.0, "8A")
        track = make_track(duration_ms=999999)
        assert score_candidate(track, entry).score == 120

    def test_zero_track_duration_still_compared(self, make_track, song_entry) -> None:
        """A known entry duration is compared even when the track reports 0."""
        track = make_track(duration_ms=0)
        assert score_candidate(track, song_entry).score == 70

    def test_title_normalization(self, make_track) -> None:
        """Curly quotes and case do not break exact title equality."""
        entry = ReferenceEntry("Don’t Stop Me Now", "Queen", 156.0, "7B")
        track = make_track(name="don't stop me now", artist="QUEEN")
        assert score_candidate(track, entry).score == 120


class TestFindBestMatch:
    """Tests for find_best_match / find_best_candidate."""

    def test_single_candidate_low_score_still_matches(self, make_track, song_entry) -> None:
        """Only the artist gate rejects; a low score still wins alone."""
        track = make_track(duration_ms=210000)
        assert find_best_match(track, [song_entry]) == song_entry

    def test_highest_score_wins(self, make_track) -> None:
        far = ReferenceEntry("Song", "Artist", 120.0, "8A", duration_ms=100000)
        close = ReferenceEntry("Song", "Artist", 124.0, "9A", duration_ms=200500)
        track = make_track(duration_ms=200000)
        assert find_best_match(track, [far, close]) == close

    def test_ties_keep_first(self, make_track) -> None:
        first = ReferenceEntry("Song", "Artist", 120.0, "8A")
        second = ReferenceEntry("Song", "Artist", 128.0, "9B")
        track = make_track()
        best = find_best_candidate(track, [first, second])
        assert best.entry == first
        assert best.score == 120

    def test_entry_without_duration_beats_known_one_for_zero_duration_track(
        self, make_track
    ) -> None:
        known = ReferenceEntry("Song", "Artist", 120.0, "8A", duration_ms=200000)
        unknown = ReferenceEntry("Song", "Artist", 128.0, "9B")
        track = make_track(duration_ms=0)
        best = find_best_candidate(track, [known, unknown])
        assert best.entry == unknown
        assert best.score == 120

    def test_no_candidate_passes_gate(self, make_track) -> None:
        entries = [ReferenceEntry("Song", "Somebody Else", 120.0, "8A")]
        assert find_best_match(make_track(), entries) is None

    def test_empty_candidates(self, make_track) -> None:
        assert find_best_match(make_track(), []) is None
