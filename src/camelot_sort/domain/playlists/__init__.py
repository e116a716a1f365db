"""
Playlist domain - harmonic ordering of playlist tracks.
"""

from .sorting import compare_tracks, harmonic_sort, partition

__all__ = ["compare_tracks", "harmonic_sort", "partition"]
