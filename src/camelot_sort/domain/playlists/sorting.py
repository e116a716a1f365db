"""
Harmonic playlist ordering.

Resolved tracks are grouped by Camelot wheel position (1A, 1B, 2A, ...) and
sorted by tempo within each position. Unresolved tracks follow in their
original order.
"""

from functools import cmp_to_key
from typing import List, Sequence, Tuple

from ..harmony.notation import sort_weight
from ..library.models import Track


def partition(tracks: Sequence[Track]) -> Tuple[List[Track], List[Track]]:
    """Split into (resolved, unresolved), keeping relative order in each."""
    resolved, unresolved = [], []
    for track in tracks:
        (resolved if track.is_resolved else unresolved).append(track)
    return resolved, unresolved


def _compare_tempo(a: float, b: float) -> int:
    # NaN compares False both ways, which falls through to "equal"
    if a < b:
        return -1
    if a > b:
        return 1
    return 0


def compare_tracks(a: Track, b: Track) -> int:
    """Order by wheel position, then tempo ascending."""
    weight_a = sort_weight(a.key, a.mode)
    weight_b = sort_weight(b.key, b.mode)
    if weight_a != weight_b:
        return -1 if weight_a < weight_b else 1
    return _compare_tempo(a.tempo, b.tempo)


def harmonic_sort(tracks: Sequence[Track]) -> List[Track]:
    """Resolved tracks in wheel/tempo order, then unresolved tracks.

    The sort is stable: tracks with equal weight and tempo keep their input
    order.
    """
    resolved, unresolved = partition(tracks)
    resolved.sort(key=cmp_to_key(compare_tracks))
    return resolved + unresolved
