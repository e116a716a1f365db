"""
camelot-sort CLI - Entry point

Reads a Spotify playlist, resolves key and tempo for every track, and writes
the playlist back in Camelot wheel / tempo order.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from loguru import logger

from camelot_sort.core import config as config_module
from camelot_sort.core.console import print_table
from camelot_sort.core.output import log, setup_loguru
from camelot_sort.domain.enrichment import (
    GetSongBpmResolver,
    KeyTempoResolver,
    LocalResolver,
    enrich_tracks,
)
from camelot_sort.domain.harmony import internal_to_camelot
from camelot_sort.domain.library import ProviderConfig, ReferenceDataError, ReferenceStore, Track
from camelot_sort.domain.library.providers import spotify
from camelot_sort.domain.playlists import harmonic_sort


def build_resolvers(
    cfg: config_module.Config, store: ReferenceStore, use_lookup: bool = True
) -> List[KeyTempoResolver]:
    """Resolvers in fallback order: local dataset, then GetSongBPM if configured."""
    resolvers: List[KeyTempoResolver] = [LocalResolver(store)]

    if not (use_lookup and cfg.lookup.enabled):
        logger.info("External lookup disabled")
    elif not cfg.lookup.api_key:
        log("⚠ GETSONGBPM_API_KEY not set - only the local dataset will be used", level="warning")
    else:
        resolvers.append(
            GetSongBpmResolver(
                api_key=cfg.lookup.api_key,
                base_url=cfg.lookup.base_url,
                timeout=cfg.lookup.timeout_seconds,
            )
        )
    return resolvers


def print_order(tracks: Sequence[Track]) -> None:
    """Show the final order; unresolved tracks are dimmed."""
    rows = []
    unresolved = set()
    for position, track in enumerate(tracks, start=1):
        if track.is_resolved:
            rows.append(
                (position, internal_to_camelot(track.key, track.mode), f"{track.tempo:.1f}",
                 track.artist, track.name)
            )
        else:
            unresolved.add(position - 1)
            rows.append((position, "-", "-", track.artist, track.name))
    print_table("New order", ("#", "Key", "BPM", "Artist", "Title"), rows, frozenset(unresolved))


def run(args: argparse.Namespace) -> int:
    """Execute one sort. Returns a process exit code."""
    try:
        cfg = config_module.load_config(Path(args.config) if args.config else None)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.workers is not None:
        cfg.lookup.max_workers = max(1, args.workers)

    log_file = Path(cfg.logging.log_file).expanduser() if cfg.logging.log_file else None
    setup_loguru(
        log_file,
        level="DEBUG" if args.verbose else cfg.logging.level,
        console_output=cfg.logging.console_output,
        verbose=args.verbose,
    )

    try:
        playlist_id = spotify.api.parse_playlist_id(args.playlist)
        reference_path = Path(args.reference or cfg.reference.path)
        log(f"Loading reference dataset {reference_path}...")
        store = ReferenceStore.from_file(reference_path)
        log(f"Loaded {len(store)} entries from reference dataset.")

        state = spotify.init_provider(
            ProviderConfig(
                name="spotify",
                client_id=cfg.spotify.client_id,
                client_secret=cfg.spotify.client_secret,
                redirect_uri=cfg.spotify.redirect_uri,
            )
        )

        log("Fetching playlist tracks...")
        state, tracks = spotify.api.get_playlist_tracks(
            state, playlist_id, page_size=cfg.spotify.page_size
        )
        log(f"Found {len(tracks)} tracks.")

        resolvers = build_resolvers(cfg, store, use_lookup=not args.no_lookup)
        enriched, report = enrich_tracks(
            tracks, resolvers, max_workers=cfg.lookup.max_workers, store=store
        )
        ordered = harmonic_sort(enriched)
        log(f"Resolved {report.resolved}/{report.total} tracks; {report.unresolved} moved to the end.")

        if args.dry_run:
            print_order(ordered)
            log("Dry run - playlist not modified.")
            return 0

        log("Updating Spotify playlist order...")
        state, written = spotify.api.replace_playlist_items(
            state,
            playlist_id,
            [track.id for track in ordered],
            chunk_size=cfg.spotify.write_chunk_size,
        )
        log(f"✓ Done! Wrote {written} tracks in harmonic order.")
        return 0

    except spotify.PlaylistWriteError as e:
        logger.exception("Playlist write-back failed")
        log(f"❌ {e}", level="error")
        if e.written:
            log(
                f"⚠ The playlist now holds only the first {e.written} tracks; re-run to restore it.",
                level="error",
            )
        return 1
    except (spotify.SpotifyError, ReferenceDataError) as e:
        logger.exception("Fatal error")
        log(f"❌ {e}", level="error")
        return 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="camelot-sort",
        description="Reorder a Spotify playlist by Camelot key, then tempo",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "playlist",
        help="Playlist ID, spotify:playlist:<id> URI or open.spotify.com URL",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the new order without modifying the playlist",
    )
    parser.add_argument(
        "--reference",
        metavar="PATH",
        help="Reference dataset JSON (default: reference.path from config)",
    )
    parser.add_argument(
        "--no-lookup",
        action="store_true",
        help="Only use the local reference dataset",
    )
    parser.add_argument(
        "--workers",
        type=int,
        metavar="N",
        help="Concurrent lookups (default: lookup.max_workers from config)",
    )
    parser.add_argument("--config", metavar="PATH", help="Path to config.toml")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Stream debug logs to stderr"
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Main entry point for the camelot-sort command."""
    args = build_parser().parse_args(argv)
    sys.exit(run(args))


if __name__ == "__main__":
    main()
