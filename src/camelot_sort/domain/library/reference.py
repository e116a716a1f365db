"""
Local reference dataset of known track keys and tempos.

The store is built once at startup and is read-only afterwards, so it can be
shared freely between enrichment workers.
"""

import json
import re
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from loguru import logger
from rapidfuzz import fuzz, process

from .models import ReferenceEntry

_QUOTE_TRANSLATION = str.maketrans(
    {
        "‘": "'",  # left single quote
        "’": "'",  # right single quote / apostrophe
        "‛": "'",
        "`": "'",
        "´": "'",  # acute accent used as apostrophe
        "“": '"',  # left double quote
        "”": '"',  # right double quote
        "-": " ",
        "‐": " ",  # hyphen
        "–": " ",  # en dash
        "—": " ",  # em dash
    }
)
_WHITESPACE = re.compile(r"\s+")

REQUIRED_FIELDS = ("name", "artist", "bpm", "key_camelot")


class ReferenceDataError(ValueError):
    """Raised when the reference dataset file cannot be parsed."""


def normalize_text(s: Optional[str]) -> str:
    """Normalize a title or artist name for comparison.

    Lowercases, unifies quote glyphs, turns dashes into spaces and collapses
    whitespace.

    Examples:
        >>> normalize_text("  Don’t Stop - Radio Edit ")
        "don't stop radio edit"
        >>> normalize_text("Jay-Z")
        'jay z'
    """
    if not s:
        return ""
    s = s.strip().lower().translate(_QUOTE_TRANSLATION)
    return _WHITESPACE.sub(" ", s).strip()


def _parse_record(record: Any) -> Optional[ReferenceEntry]:
    """Convert one raw dataset record, or return None if it is unusable."""
    if not isinstance(record, dict):
        return None
    if any(record.get(name) in (None, "") for name in REQUIRED_FIELDS):
        return None
    if not normalize_text(str(record["name"])) or not normalize_text(str(record["artist"])):
        return None

    try:
        bpm = float(record["bpm"])
        duration = record.get("duration_ms")
        duration_ms = int(duration) if duration not in (None, "") else None
    except (TypeError, ValueError):
        return None

    album = record.get("album")
    return ReferenceEntry(
        name=str(record["name"]),
        artist=str(record["artist"]),
        bpm=bpm,
        key_camelot=str(record["key_camelot"]),
        duration_ms=duration_ms,
        album=str(album) if album else None,
    )


class ReferenceStore:
    """Reference entries indexed by normalized title.

    Several entries may share a title (covers, remixes, other artists); they
    keep dataset order inside their bucket.
    """

    def __init__(self, entries: Iterable[ReferenceEntry] = ()):
        self._entries: Tuple[ReferenceEntry, ...] = tuple(entries)
        by_title: Dict[str, List[ReferenceEntry]] = {}
        for entry in self._entries:
            by_title.setdefault(normalize_text(entry.name), []).append(entry)
        self._by_title: Dict[str, Tuple[ReferenceEntry, ...]] = {
            title: tuple(bucket) for title, bucket in by_title.items()
        }
        self._titles: List[str] = list(self._by_title)

    @classmethod
    def from_records(cls, records: Iterable[Any]) -> "ReferenceStore":
        """Build a store from raw dataset records, skipping unusable ones."""
        entries = []
        skipped = 0
        for index, record in enumerate(records):
            entry = _parse_record(record)
            if entry is None:
                skipped += 1
                logger.warning(f"Skipping reference record #{index}: {record!r}")
                continue
            entries.append(entry)

        if skipped:
            logger.warning(f"Skipped {skipped} malformed reference records")
        return cls(entries)

    @classmethod
    def from_file(cls, path: Path) -> "ReferenceStore":
        """Load a JSON array of reference records.

        A missing file yields an empty store.

        Raises:
            ReferenceDataError: If the file cannot be read or is not a JSON array
        """
        path = Path(path).expanduser()
        if not path.exists():
            logger.info(f"No reference dataset at {path}, continuing without one")
            return cls()

        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ReferenceDataError(f"Reference dataset {path} is not valid JSON: {e}") from e
        except OSError as e:
            raise ReferenceDataError(f"Cannot read reference dataset {path}: {e}") from e

        if not isinstance(data, list):
            raise ReferenceDataError(
                f"Reference dataset {path} must be a JSON array, got {type(data).__name__}"
            )

        store = cls.from_records(data)
        logger.info(f"Loaded {len(store)} reference entries from {path}")
        return store

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> Tuple[ReferenceEntry, ...]:
        """All entries, in dataset order."""
        return self._entries

    def lookup(self, title: str) -> Tuple[ReferenceEntry, ...]:
        """Entries whose normalized title equals the normalized title given."""
        return self._by_title.get(normalize_text(title), ())

    def fuzzy_candidates(self, title: str, artist: str) -> List[ReferenceEntry]:
        """Entries whose title and artist each contain, or are contained by, the query's.

        Both comparisons use normalized text and either containment direction.
        """
        norm_title = normalize_text(title)
        norm_artist = normalize_text(artist)
        if not norm_title or not norm_artist:
            return []

        candidates = []
        for entry in self._entries:
            entry_title = normalize_text(entry.name)
            entry_artist = normalize_text(entry.artist)
            if not entry_title or not entry_artist:
                continue
            if not (norm_title in entry_title or entry_title in norm_title):
                continue
            if not (norm_artist in entry_artist or entry_artist in norm_artist):
                continue
            candidates.append(entry)
        return candidates

    def suggest(self, title: str, limit: int = 3, min_score: float = 70.0) -> List[Tuple[str, float]]:
        """Closest reference titles to an unmatched title, best first.

        Only for diagnostics; never used to resolve a track.
        """
        query = normalize_text(title)
        if not query or not self._titles:
            return []
        matches = process.extract(
            query, self._titles, scorer=fuzz.token_set_ratio, limit=limit
        )
        return [(choice, score) for choice, score, _ in matches if score >= min_score]
