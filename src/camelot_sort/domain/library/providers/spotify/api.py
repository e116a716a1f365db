"""
Spotify API operations.

Pure functions for reading playlists and writing a new order back.
All functions take ProviderState and return (ProviderState, result).
Failures raise SpotifyError subclasses: a half-read or half-written
playlist must stop the run.
"""

import re
from typing import Any, Dict, List, Optional, Sequence, Tuple

import requests
from loguru import logger

from ...models import Track
from ...provider import ProviderState
from .exceptions import (
    AuthenticationError,
    InvalidPlaylistIdError,
    PlaylistUnavailableError,
    PlaylistWriteError,
)

API_BASE = "https://api.spotify.com/v1"

PAGE_SIZE = 100
WRITE_CHUNK_SIZE = 100

_ID_PATTERN = re.compile(r"[A-Za-z0-9]{22}")
_URL_PATTERN = re.compile(r"open\.spotify\.com/(?:[\w-]+/)?playlist/([A-Za-z0-9]+)")


def parse_playlist_id(value: str) -> str:
    """Accept a bare ID, a spotify:playlist:<id> URI or an open.spotify.com URL.

    Raises:
        InvalidPlaylistIdError: If no playlist ID can be extracted

    Examples:
        >>> parse_playlist_id("spotify:playlist:37i9dQZF1DXcBWIGoYBM5M")
        '37i9dQZF1DXcBWIGoYBM5M'
        >>> parse_playlist_id("https://open.spotify.com/playlist/37i9dQZF1DXcBWIGoYBM5M?si=abc")
        '37i9dQZF1DXcBWIGoYBM5M'
    """
    value = (value or "").strip()

    url_match = _URL_PATTERN.search(value)
    if url_match:
        candidate = url_match.group(1)
    elif value.startswith("spotify:"):
        parts = value.split(":")
        if len(parts) != 3 or parts[1] != "playlist":
            raise InvalidPlaylistIdError(f"Not a playlist URI: {value!r}")
        candidate = parts[2]
    else:
        candidate = value

    if not _ID_PATTERN.fullmatch(candidate):
        raise InvalidPlaylistIdError(f"Invalid playlist ID: {value!r}")
    return candidate


def _ensure_valid_token(state: ProviderState) -> Tuple[ProviderState, str]:
    """Return a usable access token, refreshing it if expired.

    Raises:
        AuthenticationError: If there is no token or refresh fails
    """
    from . import auth

    token_data = state.cache.get("token_data")
    if not state.authenticated or not token_data:
        raise AuthenticationError("Not authenticated with Spotify")

    if auth.is_token_expired(token_data):
        logger.info("Spotify token expired, attempting refresh")
        token_data = auth.refresh_token(state.config, token_data)
        if not token_data:
            raise AuthenticationError("Spotify token refresh failed")
        state = state.with_cache(token_data=token_data)

    return state, token_data["access_token"]


def _to_track(item: Dict[str, Any]) -> Optional[Track]:
    """Convert a playlist item to a Track; None for local files, episodes and removed tracks."""
    track = item.get("track")
    if not track or track.get("is_local") or track.get("type", "track") != "track":
        return None
    if not track.get("id"):
        return None

    artists = [a.get("name") for a in track.get("artists", []) if a.get("name")]
    return Track(
        id=track["id"],
        name=(track.get("name") or "").strip(),
        artist=artists[0] if artists else "Unknown",
        duration_ms=int(track.get("duration_ms") or 0),
    )


def get_playlist_tracks(
    state: ProviderState, playlist_id: str, page_size: int = PAGE_SIZE
) -> Tuple[ProviderState, List[Track]]:
    """Fetch every track of a playlist, following pagination.

    Raises:
        AuthenticationError: If not authenticated
        PlaylistUnavailableError: On any API or transport failure
    """
    state, token = _ensure_valid_token(state)

    tracks: List[Track] = []
    skipped = 0
    url: Optional[str] = f"{API_BASE}/playlists/{playlist_id}/tracks"
    params: Dict[str, Any] = {"limit": page_size, "offset": 0}
    headers = {"Authorization": f"Bearer {token}"}

    try:
        while url:
            response = requests.get(url, params=params, headers=headers, timeout=30)
            response.raise_for_status()
            data = response.json()

            for item in data.get("items", []):
                track = _to_track(item)
                if track is None:
                    skipped += 1
                    continue
                tracks.append(track)

            # "next" already carries offset and limit
            url = data.get("next")
            params = {}

    except requests.HTTPError as e:
        status = e.response.status_code if e.response is not None else None
        if status == 401:
            raise AuthenticationError("Spotify rejected the access token") from e
        raise PlaylistUnavailableError(
            f"Could not read playlist {playlist_id} (HTTP {status})"
        ) from e
    except (requests.RequestException, ValueError) as e:
        raise PlaylistUnavailableError(f"Could not read playlist {playlist_id}: {e}") from e

    logger.debug(
        f"Fetched {len(tracks)} tracks for playlist {playlist_id} "
        f"({skipped} local/unavailable items skipped)"
    )
    return state, tracks


def chunked(items: Sequence[str], size: int) -> List[List[str]]:
    """Split items into consecutive lists of at most size elements."""
    return [list(items[i:i + size]) for i in range(0, len(items), size)]


def replace_playlist_items(
    state: ProviderState,
    playlist_id: str,
    track_ids: Sequence[str],
    chunk_size: int = WRITE_CHUNK_SIZE,
) -> Tuple[ProviderState, int]:
    """Replace playlist contents with track_ids, in exactly that order.

    The first chunk replaces the contents (PUT); each further chunk is appended
    (POST), preserving order.

    Returns:
        (updated_state, number of tracks written)

    Raises:
        AuthenticationError: If not authenticated
        PlaylistWriteError: If any request fails; the playlist may be partially written
    """
    state, token = _ensure_valid_token(state)
    chunks = chunked([f"spotify:track:{track_id}" for track_id in track_ids], chunk_size)
    if not chunks:
        logger.info(f"Nothing to write to playlist {playlist_id}")
        return state, 0

    url = f"{API_BASE}/playlists/{playlist_id}/tracks"
    headers = {"Authorization": f"Bearer {token}"}
    written = 0

    for index, chunk in enumerate(chunks):
        method = requests.put if index == 0 else requests.post
        try:
            response = method(url, json={"uris": chunk}, headers=headers, timeout=30)
            response.raise_for_status()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            raise PlaylistWriteError(
                f"Writing chunk {index + 1}/{len(chunks)} to playlist {playlist_id} "
                f"failed (HTTP {status}) after {written} tracks",
                written=written,
                status_code=status,
            ) from e
        except requests.RequestException as e:
            raise PlaylistWriteError(
                f"Writing chunk {index + 1}/{len(chunks)} to playlist {playlist_id} "
                f"failed after {written} tracks: {e}",
                written=written,
            ) from e

        written += len(chunk)
        logger.debug(f"Wrote chunk {index + 1}/{len(chunks)} ({written} tracks)")

    logger.info(f"Rewrote playlist {playlist_id} with {written} tracks")
    return state, written
