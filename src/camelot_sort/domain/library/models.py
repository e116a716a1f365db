"""
Music library domain models.

Contains data structures for playlist tracks and reference metadata.
"""

from typing import NamedTuple, Optional

from ..harmony.notation import Mode

UNRESOLVED_KEY = -1


class Track(NamedTuple):
    """A playlist entry plus its (possibly unresolved) key and tempo.

    key is a pitch class 0-11, or UNRESOLVED_KEY until enrichment finds one.
    tempo is in BPM; 0.0 means unresolved.
    """
    id: str  # Spotify track ID
    name: str
    artist: str  # First credited artist
    duration_ms: int = 0  # 0 when unknown
    key: int = UNRESOLVED_KEY
    mode: Mode = Mode.MAJOR
    tempo: float = 0.0

    @property
    def is_resolved(self) -> bool:
        """True when both a key and a positive tempo are known."""
        return self.key >= 0 and self.tempo > 0

    def with_features(self, key: int, mode: Mode, tempo: float) -> "Track":
        """Return an enriched copy of this track."""
        return self._replace(key=key, mode=mode, tempo=tempo)


class ReferenceEntry(NamedTuple):
    """Known key/tempo metadata for a track, from the local dataset."""
    name: str
    artist: str
    bpm: float
    key_camelot: str  # e.g. "5A"
    duration_ms: Optional[int] = None
    album: Optional[str] = None
