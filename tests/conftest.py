"""Shared fixtures for camelot-sort tests."""

from typing import Callable

import pytest

from camelot_sort.domain.harmony import Mode
from camelot_sort.domain.library.models import ReferenceEntry, Track
from camelot_sort.domain.library.reference import ReferenceStore


@pytest.fixture
def make_track() -> Callable[..., Track]:
    """Factory for playlist tracks with sensible defaults."""
    counter = {"n": 0}

    def _make(
        name: str = "Song",
        artist: str = "Artist",
        duration_ms: int = 200000,
        key: int = -1,
        mode: Mode = Mode.MAJOR,
        tempo: float = 0.0,
        id: str | None = None,
    ) -> Track:
        counter["n"] += 1
        return Track(
            id=id or f"track{counter['n']}",
            name=name,
            artist=artist,
            duration_ms=duration_ms,
            key=key,
            mode=mode,
            tempo=tempo,
        )

    return _make


@pytest.fixture
def song_entry() -> ReferenceEntry:
    """The reference entry used throughout the matcher scenarios."""
    return ReferenceEntry(
        name="Song", artist="Artist", bpm=120.0, key_camelot="8A", duration_ms=200000
    )


@pytest.fixture
def reference_store() -> ReferenceStore:
    """A small reference dataset with a few awkward entries."""
    return ReferenceStore(
        [
            ReferenceEntry(name="Around the World", artist="Daft Punk", bpm=121.0, key_camelot="10A"),
            ReferenceEntry(name="D.A.N.C.E.", artist="Justice", bpm=114.0, key_camelot="7B", duration_ms=242000),
            ReferenceEntry(name="Don’t Stop Me Now", artist="Queen", bpm=156.0, key_camelot="7B"),
            ReferenceEntry(name="Cry Baby", artist="The Kills", bpm=98.0, key_camelot="1B"),
            ReferenceEntry(name="Broken Key", artist="Nobody", bpm=100.0, key_camelot="13Z"),
        ]
    )
