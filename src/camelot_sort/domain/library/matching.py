"""
Track matching between playlist tracks and reference entries.

Scoring is additive per candidate:
- artist: exact +100, containment +80, otherwise the candidate is rejected
- duration (when both are known): within 5s +50, otherwise -50
- title: exact +20
"""

from typing import Iterable, NamedTuple, Optional

from loguru import logger

from .models import ReferenceEntry, Track
from .reference import normalize_text

ARTIST_EXACT_SCORE = 100
ARTIST_PARTIAL_SCORE = 80
DURATION_MATCH_SCORE = 50
DURATION_MISMATCH_PENALTY = -50
TITLE_EXACT_SCORE = 20

DURATION_TOLERANCE_MS = 5000


class MatchCandidate(NamedTuple):
    """Scored reference entry for a single playlist track."""

    entry: ReferenceEntry
    score: int


def score_candidate(track: Track, entry: ReferenceEntry) -> Optional[MatchCandidate]:
    """Score a reference entry against a playlist track.

    Returns:
        MatchCandidate, or None if the artists do not match at all
    """
    track_artist = normalize_text(track.artist)
    entry_artist = normalize_text(entry.artist)

    if track_artist == entry_artist:
        score = ARTIST_EXACT_SCORE
    elif track_artist and entry_artist and (
        track_artist in entry_artist or entry_artist in track_artist
    ):
        score = ARTIST_PARTIAL_SCORE
    else:
        return None

    # Entries without a duration are neutral; a track duration of 0 still counts
    if entry.duration_ms is not None:
        if abs(track.duration_ms - entry.duration_ms) < DURATION_TOLERANCE_MS:
            score += DURATION_MATCH_SCORE
        else:
            score += DURATION_MISMATCH_PENALTY

    if normalize_text(track.name) == normalize_text(entry.name):
        score += TITLE_EXACT_SCORE

    return MatchCandidate(entry=entry, score=score)


def find_best_candidate(
    track: Track, candidates: Iterable[ReferenceEntry]
) -> Optional[MatchCandidate]:
    """Highest-scoring candidate; on ties the earliest one wins."""
    best: Optional[MatchCandidate] = None
    for entry in candidates:
        scored = score_candidate(track, entry)
        if scored is None:
            continue
        if best is None or scored.score > best.score:
            best = scored

    if best is not None:
        logger.debug(
            f"Best match for '{track.artist} - {track.name}': "
            f"'{best.entry.artist} - {best.entry.name}' (score={best.score})"
        )
    return best


def find_best_match(
    track: Track, candidates: Iterable[ReferenceEntry]
) -> Optional[ReferenceEntry]:
    """Best reference entry for a track, or None if no artist matches."""
    best = find_best_candidate(track, candidates)
    return best.entry if best else None
