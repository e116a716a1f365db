"""
Enrichment pipeline: attach key and tempo to playlist tracks.

Resolvers run in order; each phase only sees tracks that earlier phases left
unresolved, so every track is enriched at most once and results from
different sources are never merged. A phase may fan out over a bounded
thread pool, but results are always merged back by index and logged in
playlist order.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple, Union

from loguru import logger

from ...core.output import log
from ..harmony.exceptions import KeyNotationError
from ..library.models import Track
from ..library.reference import ReferenceStore
from .exceptions import (
    LookupFailure,
    LookupUnavailable,
    MalformedLookupPayload,
    NoResultFound,
)
from .resolvers import KeyTempoResolver, Resolution

Outcome = Union[Resolution, Exception, None]


@dataclass
class EnrichmentReport:
    """Per-source counts for one enrichment run."""

    total: int = 0
    resolved_by: Dict[str, int] = field(default_factory=dict)
    failures: int = 0

    @property
    def resolved(self) -> int:
        return sum(self.resolved_by.values())

    @property
    def unresolved(self) -> int:
        return self.total - self.resolved


def _attempt(resolver: KeyTempoResolver, track: Track) -> Outcome:
    """Run one resolver on one track, capturing recoverable errors."""
    try:
        return resolver.resolve(track)
    except (KeyNotationError, LookupFailure) as e:
        return e


def _run_phase(
    resolver: KeyTempoResolver, tracks: Sequence[Track], max_workers: int
) -> List[Outcome]:
    """Outcomes in the same order as tracks."""
    if max_workers <= 1 or len(tracks) <= 1:
        return [_attempt(resolver, track) for track in tracks]

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        return list(executor.map(lambda t: _attempt(resolver, t), tracks))


def _report_failure(resolver: KeyTempoResolver, track: Track, error: Exception) -> None:
    label = f"{track.artist} - {track.name}"
    if isinstance(error, NoResultFound):
        logger.debug(f"[{resolver.name}] no result for {label}: {error}")
    elif isinstance(error, MalformedLookupPayload):
        logger.warning(f"[{resolver.name}] malformed payload for {label}: {error}")
    elif isinstance(error, LookupUnavailable):
        logger.warning(f"[{resolver.name}] lookup unavailable for {label}: {error}")
    else:
        logger.warning(f"[{resolver.name}] unusable key for {label}: {error}")


def enrich_tracks(
    tracks: Sequence[Track],
    resolvers: Sequence[KeyTempoResolver],
    max_workers: int = 1,
    store: Optional[ReferenceStore] = None,
) -> Tuple[List[Track], EnrichmentReport]:
    """Resolve key and tempo for every track.

    Args:
        tracks: Playlist tracks in playlist order
        resolvers: Resolvers in fallback order
        max_workers: Concurrent resolutions per phase (1 = sequential)
        store: Reference store, only used to suggest near misses in the log

    Returns:
        (enriched tracks in the original order, report)
    """
    enriched = list(tracks)
    report = EnrichmentReport(total=len(enriched))
    pending = [i for i, track in enumerate(enriched) if not track.is_resolved]

    for resolver in resolvers:
        if not pending:
            break

        logger.info(f"Resolving {len(pending)} tracks via {resolver.name}")
        outcomes = _run_phase(resolver, [enriched[i] for i in pending], max_workers)

        still_pending = []
        for index, outcome in zip(pending, outcomes):
            track = enriched[index]
            if isinstance(outcome, Resolution):
                enriched[index] = track.with_features(
                    outcome.key, outcome.mode, outcome.tempo
                )
                report.resolved_by[outcome.source] = (
                    report.resolved_by.get(outcome.source, 0) + 1
                )
                log(f"[✓ {resolver.name.upper()}] {track.artist} - {track.name}")
                continue

            if isinstance(outcome, Exception):
                report.failures += 1
                _report_failure(resolver, track, outcome)
            still_pending.append(index)
        pending = still_pending

    for index in pending:
        track = enriched[index]
        log(f"[✗ MISS] {track.artist} - {track.name}", level="warning")
        if store is not None:
            suggestions = store.suggest(track.name)
            if suggestions:
                logger.debug(
                    f"Closest reference titles for '{track.name}': "
                    + ", ".join(f"{title} ({score:.0f})" for title, score in suggestions)
                )

    logger.info(
        f"Enrichment done: {report.resolved}/{report.total} resolved "
        f"({report.resolved_by}), {report.failures} lookup failures"
    )
    return enriched, report
