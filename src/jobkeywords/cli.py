"""CLI command handlers for jobkeywords.

Each public function corresponds to a CLI subcommand and encapsulates
the wiring, orchestration, and output for that command.  Handlers return
the process exit code.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from jobkeywords.errors import ActionableError
from jobkeywords.extractors import ExtractorRegistry
from jobkeywords.logging import logger

if TYPE_CHECKING:
    import argparse

    from jobkeywords.pipeline.runner import RunResult


def handle_run(args: argparse.Namespace) -> int:
    """Process every configured posting URL.

    Exits non-zero when any source failed; every source is still
    attempted to completion first.
    """
    from jobkeywords.config import load_settings
    from jobkeywords.logging import configure_file_logging, set_verbose
    from jobkeywords.pipeline.runner import PipelineRunner

    if args.verbose:
        set_verbose()
    if args.log_dir:
        configure_file_logging(args.log_dir, level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        settings = load_settings(args.settings)
    except ActionableError as exc:
        _print_error(exc)
        return 2

    urls = args.url or settings.urls
    runner = PipelineRunner.from_settings(settings)

    async def _run() -> RunResult:
        try:
            return await runner.run(urls)
        finally:
            await runner.aclose()

    result = asyncio.run(_run())
    _print_summary(result)
    return 0 if result.ok else 1


def handle_extractors() -> int:
    """List all registered extractors and whether each runs by default."""
    names = ExtractorRegistry.list_registered()
    if not names:
        print("No extractors registered.")
        return 0
    defaults = set(ExtractorRegistry.defaults())
    print("Registered extractors:")
    for name in names:
        marker = "default" if name in defaults else "optional"
        print(f"  - {name} ({marker})")
    return 0


def handle_forget(args: argparse.Namespace) -> int:
    """Delete cache entries so the URLs are fetched again next run."""
    from jobkeywords.cache import FetchCache

    cache = FetchCache(args.cache_dir)
    for url in args.urls:
        try:
            removed = cache.forget(url)
        except ActionableError as exc:
            _print_error(exc)
            return 1
        state = "removed" if removed else "not cached"
        print(f"{state}: {url}")
    return 0


def handle_cache_key(args: argparse.Namespace) -> int:
    """Print the cache filename for each URL."""
    from jobkeywords.cache import cache_key

    for url in args.urls:
        print(f"{cache_key(url)}  {url}")
    return 0


# ---------------------------------------------------------------------------
# Output helpers
# ---------------------------------------------------------------------------


def _print_summary(result: RunResult) -> None:
    from jobkeywords.pipeline.runner import SourceStatus

    print(f"\n{'=' * 60}")
    print(" Keyword Extraction Summary")
    print(f"{'=' * 60}")
    print(f" Sources:     {len(result.outcomes)}")
    print(f" Extracted:   {result.count(SourceStatus.EXTRACTED)}")
    print(f" From cache:  {result.count(SourceStatus.CACHED)}")
    print(f" No data:     {result.count(SourceStatus.NO_DATA)}")
    print(f" Failed:      {result.count(SourceStatus.FAILED)}")
    print(f"{'=' * 60}\n")

    for outcome in result.failures:
        print(f"FAILED {outcome.url}")
        if outcome.failure is not None:
            print(f"   {outcome.failure.error}")
            if outcome.failure.suggestion:
                print(f"   → {outcome.failure.suggestion}")
            if outcome.failure.retryable:
                print("   (not cached; re-run to retry)")


def _print_error(exc: ActionableError) -> None:
    logger.error(exc.error)
    if exc.suggestion:
        print(f"→ {exc.suggestion}")
    for step in exc.steps:
        print(f"   {step}")
