# =============================================================================
# songmatch/cli/search.py - CLI Search Command
# =============================================================================
#
# Harvests an artist's catalog and prints the songs that best match a lyric
# fragment, without starting the API server:
#
#   python -m songmatch.cli demo "walking down the beach"
#   python -m songmatch.cli demo "beach at sunset" --json
#   python -m songmatch.cli demo "city lights" --limit 3
#
# Collection progress and logs go to stderr so stdout carries only the
# results (useful with --json).
# =============================================================================

"""Standalone CLI for lyric search against one artist's catalog."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys

from songmatch.config.loader import load_settings
from songmatch.main import build_components
from songmatch.models.search import CoordinatorSnapshot, SearchResult
from songmatch.pipeline.search_coordinator import SearchCoordinator
from songmatch.services.ranking import RankingEngine
from songmatch.utils.logging import configure_logging

_SNIPPET_LENGTH = 80


def _format_text_output(artist: str, result: SearchResult, song_count: int) -> str:
    """Format ranked matches as a human-readable report."""
    lines: list[str] = []
    sep = "=" * 60

    lines.append(sep)
    lines.append(f"  songmatch - {artist}  ({song_count} songs searched)")
    lines.append(sep)

    if result.is_empty:
        lines.append("No matching songs.")
        return "\n".join(lines)

    for position, item in enumerate(result.entries, start=1):
        snippet = " ".join(item.entry.lyrics.split())
        if len(snippet) > _SNIPPET_LENGTH:
            snippet = snippet[:_SNIPPET_LENGTH] + "..."
        lines.append(f"{position:>2}. {item.entry.title}  [{item.score:.0%}]")
        if snippet:
            lines.append(f"    {snippet}")
        if item.entry.audio_url:
            lines.append(f"    {item.entry.audio_url}")

    stats = result.stats()
    lines.append("")
    lines.append(f"Matches: {stats.count}  |  Top: {stats.top_score}%  |  Average: {stats.avg_score}%")
    return "\n".join(lines)


def _format_json_output(artist: str, result: SearchResult, song_count: int) -> str:
    payload = {
        "artist": artist,
        "query": result.query,
        "song_count": song_count,
        "results": [
            {**item.entry.model_dump(), "match_score": item.score} for item in result.entries
        ],
        "stats": result.stats().model_dump(),
    }
    return json.dumps(payload, indent=2, ensure_ascii=False)


def _print_progress(snapshot: CoordinatorSnapshot) -> None:
    if snapshot.is_loading:
        print(f"\rLoading songs... {snapshot.song_count}", end="", file=sys.stderr, flush=True)


async def run_search(artist: str, query: str, limit: int | None = None) -> tuple[CoordinatorSnapshot, int]:
    """Load *artist* and rank it against *query*.

    Returns the settled coordinator snapshot and a process exit code.
    """
    settings = load_settings()
    components = build_components(settings)
    ranker = RankingEngine(max_results=limit) if limit else components["ranking_engine"]
    coordinator = SearchCoordinator(
        components["catalog_cache"],
        ranker,
        artist_debounce=0.0,
    )
    coordinator.register_listener(_print_progress)

    try:
        coordinator.set_query(query)
        await coordinator.load_artist(artist)
        await coordinator.wait_idle()
        snapshot = coordinator.snapshot()
    finally:
        await coordinator.close()
        await components["http_client"].aclose()

    print(file=sys.stderr)
    return snapshot, (1 if snapshot.error else 0)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="songmatch",
        description="Find the songs in an artist's catalog that match a lyric fragment.",
    )
    parser.add_argument("artist", help="Artist profile name")
    parser.add_argument("query", help="Lyric fragment to search for")
    parser.add_argument("--json", action="store_true", help="Print results as JSON")
    parser.add_argument("--limit", type=int, default=None, help="Maximum number of results")
    parser.add_argument("--log-level", default="WARNING", help="Log level for stderr output")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    if not args.query.strip():
        print("error: query must not be blank", file=sys.stderr)
        return 2
    if args.limit is not None and args.limit < 1:
        print("error: --limit must be at least 1", file=sys.stderr)
        return 2

    configure_logging(log_level=args.log_level, stream=sys.stderr)

    snapshot, exit_code = asyncio.run(run_search(args.artist, args.query, args.limit))
    if snapshot.error:
        print(f"error: {snapshot.error}", file=sys.stderr)
        return exit_code

    if args.json:
        print(_format_json_output(args.artist, snapshot.results, snapshot.song_count))
    else:
        print(_format_text_output(args.artist, snapshot.results, snapshot.song_count))
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
