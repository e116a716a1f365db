"""Tests for the enrichment pipeline."""

import threading
import time
from typing import Dict, List, Optional

import pytest

from camelot_sort.domain.enrichment.exceptions import (
    LookupUnavailable,
    MalformedLookupPayload,
    NoResultFound,
)
from camelot_sort.domain.enrichment.pipeline import enrich_tracks
from camelot_sort.domain.enrichment.resolvers import LocalResolver, Resolution
from camelot_sort.domain.harmony import InvalidCamelotCode, Mode
from camelot_sort.domain.library.models import Track


class FakeResolver:
    """Resolver answering from a name -> outcome table and recording calls."""

    def __init__(self, name: str, answers: Dict[str, object], delay: float = 0.0):
        self.name = name
        self.answers = answers
        self.delay = delay
        self.calls: List[str] = []
        self._lock = threading.Lock()

    def resolve(self, track: Track) -> Optional[Resolution]:
        with self._lock:
            self.calls.append(track.name)
        if self.delay:
            time.sleep(self.delay)
        answer = self.answers.get(track.name)
        if isinstance(answer, Exception):
            raise answer
        return answer


def _resolution(key: int, tempo: float, source: str = "fake", mode: Mode = Mode.MINOR) -> Resolution:
    return Resolution(key=key, mode=mode, tempo=tempo, source=source)


class TestEnrichTracks:
    """Tests for enrich_tracks."""

    def test_local_then_remote_fallback(self, make_track, reference_store) -> None:
        """Tracks missing locally go to the next resolver; others never do."""
        remote = FakeResolver("remote", {"Obscure": _resolution(0, 125.0, "remote")})
        tracks = [
            make_track(name="Around the World", artist="Daft Punk"),
            make_track(name="Obscure", artist="Nobody Known"),
        ]

        enriched, report = enrich_tracks(tracks, [LocalResolver(reference_store), remote])

        assert remote.calls == ["Obscure"]
        assert enriched[0].tempo == 121.0
        assert (enriched[1].key, enriched[1].tempo) == (0, 125.0)
        assert report.resolved_by == {"local": 1, "remote": 1}
        assert report.unresolved == 0

    def test_order_and_identity_preserved(self, make_track) -> None:
        tracks = [make_track(name=f"T{i}") for i in range(5)]
        resolver = FakeResolver("fake", {"T1": _resolution(3, 100.0), "T3": _resolution(4, 90.0)})

        enriched, report = enrich_tracks(tracks, [resolver])

        assert [t.id for t in enriched] == [t.id for t in tracks]
        assert [t.is_resolved for t in enriched] == [False, True, False, True, False]
        assert report.resolved == 2
        assert report.unresolved == 3

    def test_input_tracks_not_modified(self, make_track) -> None:
        track = make_track(name="A")
        enrich_tracks([track], [FakeResolver("fake", {"A": _resolution(1, 100.0)})])
        assert track.is_resolved is False

    @pytest.mark.parametrize(
        "error",
        [
            LookupUnavailable("HTTP 500", status_code=500),
            NoResultFound("nothing"),
            MalformedLookupPayload("bad shape", {"x": 1}),
            InvalidCamelotCode("99Q"),
        ],
    )
    def test_failures_are_not_fatal(self, make_track, error) -> None:
        """Every recoverable error leaves the track unresolved and the run continues."""
        resolver = FakeResolver("fake", {"Bad": error, "Good": _resolution(5, 110.0)})
        tracks = [make_track(name="Bad"), make_track(name="Good")]

        enriched, report = enrich_tracks(tracks, [resolver])

        assert not enriched[0].is_resolved
        assert enriched[1].is_resolved
        assert report.failures == 1

    def test_local_key_error_falls_through_to_next(self, make_track) -> None:
        """A bad key from the first resolver lets the second one try."""
        first = FakeResolver("first", {"Song": InvalidCamelotCode("13A")})
        second = FakeResolver("second", {"Song": _resolution(7, 99.0, "second")})

        enriched, report = enrich_tracks([make_track(name="Song")], [first, second])

        assert (enriched[0].key, enriched[0].tempo) == (7, 99.0)
        assert report.resolved_by == {"second": 1}

    def test_already_resolved_tracks_are_skipped(self, make_track) -> None:
        resolver = FakeResolver("fake", {})
        track = make_track(name="Done", key=2, tempo=100.0)
        enriched, _ = enrich_tracks([track], [resolver])
        assert resolver.calls == []
        assert enriched == [track]

    def test_concurrent_results_merge_by_index(self, make_track) -> None:
        """Slow and fast lookups still land on the right track."""
        answers = {f"T{i}": _resolution(i % 12, 100.0 + i) for i in range(8)}
        answers["T3"] = LookupUnavailable("boom")
        resolver = FakeResolver("remote", answers, delay=0.01)
        tracks = [make_track(name=f"T{i}") for i in range(8)]

        enriched, report = enrich_tracks(tracks, [resolver], max_workers=4)

        for i, track in enumerate(enriched):
            if i == 3:
                assert not track.is_resolved
            else:
                assert track.tempo == 100.0 + i
                assert track.key == i % 12
        assert sorted(resolver.calls) == sorted(t.name for t in tracks)
        assert report.failures == 1

    def test_no_resolvers(self, make_track) -> None:
        enriched, report = enrich_tracks([make_track()], [])
        assert not enriched[0].is_resolved
        assert report.unresolved == 1

    def test_unresolved_with_store_suggestions(self, make_track, reference_store) -> None:
        """Passing the store for diagnostics does not change results."""
        tracks = [make_track(name="Around the Wrld", artist="Someone")]
        enriched, report = enrich_tracks(
            tracks, [LocalResolver(reference_store)], store=reference_store
        )
        assert not enriched[0].is_resolved
        assert report.unresolved == 1
