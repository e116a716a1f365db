"""Library domain - track models, reference data and matching.

This domain handles:
- Track and reference entry models
- The local reference dataset
- Matching playlist tracks to reference entries
- Playlist providers (Spotify)
"""

from .matching import MatchCandidate, find_best_candidate, find_best_match, score_candidate
from .models import UNRESOLVED_KEY, ReferenceEntry, Track
from .provider import ProviderConfig, ProviderState
from .reference import ReferenceDataError, ReferenceStore, normalize_text

__all__ = [
    # Models
    "UNRESOLVED_KEY",
    "ReferenceEntry",
    "Track",
    # Matching
    "MatchCandidate",
    "find_best_candidate",
    "find_best_match",
    "score_candidate",
    # Providers
    "ProviderConfig",
    "ProviderState",
    # Reference data
    "ReferenceDataError",
    "ReferenceStore",
    "normalize_text",
]
