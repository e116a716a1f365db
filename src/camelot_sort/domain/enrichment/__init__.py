"""
Enrichment domain - resolve key and tempo for playlist tracks.
"""

from .exceptions import (
    LookupFailure,
    LookupUnavailable,
    MalformedLookupPayload,
    NoResultFound,
)
from .pipeline import EnrichmentReport, enrich_tracks
from .resolvers import (
    GetSongBpmResolver,
    KeyTempoResolver,
    LocalResolver,
    Resolution,
)

__all__ = [
    "LookupFailure",
    "LookupUnavailable",
    "MalformedLookupPayload",
    "NoResultFound",
    "EnrichmentReport",
    "enrich_tracks",
    "GetSongBpmResolver",
    "KeyTempoResolver",
    "LocalResolver",
    "Resolution",
]
