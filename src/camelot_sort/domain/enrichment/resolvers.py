"""
Key/tempo resolvers.

A resolver turns a playlist track into a Resolution or raises one of the
recoverable errors from .exceptions / harmony.exceptions. Resolvers are tried
in a fixed order by the pipeline: local dataset first, GetSongBPM second.
"""

from typing import Any, Dict, NamedTuple, Optional, Protocol

import requests
from loguru import logger

from ..harmony.notation import Mode, camelot_to_internal, parse_key
from ..library.matching import find_best_candidate
from ..library.models import Track
from ..library.reference import ReferenceStore
from .exceptions import LookupUnavailable, MalformedLookupPayload, NoResultFound

GETSONGBPM_URL = "https://api.getsong.co/search/"


class Resolution(NamedTuple):
    """Key and tempo found for a track, and where they came from."""

    key: int
    mode: Mode
    tempo: float
    source: str


class KeyTempoResolver(Protocol):
    """Something that can find a key and tempo for a track.

    resolve() returns None when the resolver simply has nothing for the track,
    and raises a KeyNotationError or LookupFailure when it found something
    unusable.
    """

    name: str

    def resolve(self, track: Track) -> Optional[Resolution]: ...


class LocalResolver:
    """Resolve tracks against the local reference dataset."""

    name = "local"

    def __init__(self, store: ReferenceStore):
        self.store = store

    def resolve(self, track: Track) -> Optional[Resolution]:
        """Direct title lookup first, then the fuzzy title/artist fallback.

        Raises:
            InvalidCamelotCode: If the matched entry carries a bad key
        """
        best = find_best_candidate(track, self.store.lookup(track.name))
        if best is None:
            best = find_best_candidate(
                track, self.store.fuzzy_candidates(track.name, track.artist)
            )
            if best is None:
                return None
            logger.debug(f"Fuzzy reference match for '{track.name}' -> '{best.entry.name}'")

        entry = best.entry
        key, mode = camelot_to_internal(entry.key_camelot)
        if entry.bpm <= 0:
            logger.debug(f"Reference entry '{entry.name}' has no usable BPM ({entry.bpm})")
            return None
        return Resolution(key=key, mode=mode, tempo=entry.bpm, source=self.name)


def _parse_tempo(value: Any, payload: Any) -> float:
    """Tempo arrives as a number or a numeric string."""
    if isinstance(value, bool):
        raise MalformedLookupPayload("Tempo is not numeric", payload)
    try:
        tempo = float(value)
    except (TypeError, ValueError):
        raise MalformedLookupPayload("Tempo is not numeric", payload) from None
    if tempo != tempo:  # NaN
        raise MalformedLookupPayload("Tempo is not numeric", payload)
    return tempo


class GetSongBpmResolver:
    """Resolve tracks through the GetSongBPM search API."""

    name = "getsongbpm"

    def __init__(
        self,
        api_key: str,
        base_url: str = GETSONGBPM_URL,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self.session = session or requests.Session()

    def _fetch(self, title: str, artist: str) -> Dict[str, Any]:
        params = {
            "api_key": self.api_key,
            "type": "both",
            "lookup": f"song:{title} artist:{artist}",
            "limit": 1,
        }
        try:
            response = self.session.get(self.base_url, params=params, timeout=self.timeout)
        except requests.Timeout as e:
            raise LookupUnavailable(f"GetSongBPM timed out: {e}") from e
        except requests.RequestException as e:
            raise LookupUnavailable(f"GetSongBPM request failed: {e}") from e

        if response.status_code == 429:
            raise LookupUnavailable("GetSongBPM rate limit hit", status_code=429)
        if not response.ok:
            raise LookupUnavailable(
                f"GetSongBPM returned HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise MalformedLookupPayload("Response is not JSON", response.text) from e
        if not isinstance(data, dict):
            raise MalformedLookupPayload("Response is not a JSON object", data)
        return data

    def resolve(self, track: Track) -> Optional[Resolution]:
        """Query by title and artist and parse the first result.

        Raises:
            LookupUnavailable: Transport failure or non-success status
            NoResultFound: Empty result list or an "error" search object
            MalformedLookupPayload: Unexpected response shape or tempo
            UnrecognizedKeyString: key_of cannot be parsed
        """
        data = self._fetch(track.name, track.artist)

        search = data.get("search")
        if isinstance(search, dict) and "error" in search:
            raise NoResultFound(f"GetSongBPM: {search['error']}")
        if not isinstance(search, list):
            raise MalformedLookupPayload("Missing 'search' list", data)
        if not search:
            raise NoResultFound("GetSongBPM returned no results")

        song = search[0]
        if not isinstance(song, dict):
            raise MalformedLookupPayload("Search result is not an object", song)

        tempo = _parse_tempo(song.get("tempo"), song)
        if tempo <= 0:
            raise NoResultFound(f"GetSongBPM has no tempo for '{track.name}'")

        key_of = song.get("key_of")
        if not isinstance(key_of, str):
            raise MalformedLookupPayload("Missing 'key_of' string", song)
        key, mode = parse_key(key_of)

        return Resolution(key=key, mode=mode, tempo=tempo, source=self.name)
