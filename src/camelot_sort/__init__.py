"""
camelot-sort - reorder Spotify playlists along the Camelot wheel.

Tracks are enriched with key and tempo from a local reference dataset and
GetSongBPM, then grouped by wheel position and sorted by tempo.
"""

__version__ = "0.1.0"
