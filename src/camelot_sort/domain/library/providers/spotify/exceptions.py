"""Spotify-specific exceptions for error handling."""

from typing import Optional


class SpotifyError(Exception):
    """Base exception for Spotify operations."""

    pass


class InvalidPlaylistIdError(SpotifyError):
    """Raised when a playlist ID, URI or URL cannot be parsed."""

    pass


class AuthenticationError(SpotifyError):
    """Raised when Spotify authentication fails or is missing."""

    pass


class PlaylistUnavailableError(SpotifyError):
    """Raised when a playlist cannot be read (missing, private, API error)."""

    pass


class PlaylistWriteError(SpotifyError):
    """Raised when writing the new order back fails part-way.

    written is the number of track URIs already persisted; the playlist is
    inconsistent whenever it is between 0 and the total.
    """

    def __init__(self, message: str, written: int = 0, status_code: Optional[int] = None):
        self.written = written
        self.status_code = status_code
        super().__init__(message)
