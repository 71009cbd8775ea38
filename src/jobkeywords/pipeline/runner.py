"""Pipeline runner — cache → fetch → extract → persist, per source.

Every source URL runs as its own asyncio task through this state machine::

    CacheCheck ─┬─ hit ─────────────────────────────────────────▶ Done
                └─ miss ─▶ Fetch ─▶ Extract ─▶ Persist + Emit ─▶ Done
                             │         │           │
                             └─────────┴───────────┴──────────▶ Failed

- A cached tombstone finishes immediately with "no data"; nothing is
  re-fetched.
- Fetch, a corrupt cache entry, or a cache write failure fails the source.
- Extractor errors are collected on the outcome.  They fail the source
  only when no extractor produced data; a failed source is not cached, so
  the next run tries again.
- No applicable extractor (or none with an opinion) is not an error: a
  tombstone is cached and the consumer receives ``None``.

Sources never abort each other.  :meth:`PipelineRunner.run` waits for
every source to reach a terminal state and reports failures afterwards.

Parsing and extraction run on a thread pool; keyword scoring is
serialised through the :class:`~jobkeywords.scoring.ScoringArbiter`.
"""

from __future__ import annotations

import asyncio
import inspect
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from jobkeywords.cache import CacheEntry, FetchCache
from jobkeywords.errors import ActionableError
from jobkeywords.extractors import ExtractorRegistry, PageContent, extract_page
from jobkeywords.logging import logger

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable, Sequence
    from concurrent.futures import Executor

    from jobkeywords.config import Settings
    from jobkeywords.extractors import Extractor, KeywordScorer
    from jobkeywords.fetch import PageFetcher
    from jobkeywords.keywords import ExtractionResult

    ResultConsumer = Callable[[str, ExtractionResult | None], Awaitable[None] | None]


class SourceStatus(StrEnum):
    """Terminal state of one source."""

    EXTRACTED = "extracted"
    CACHED = "cached"
    NO_DATA = "no_data"
    FAILED = "failed"


@dataclass
class SourceOutcome:
    """What happened to one source URL."""

    url: str
    status: SourceStatus
    result: ExtractionResult | None = None
    errors: list[ActionableError] = field(default_factory=list)
    failure: ActionableError | None = None

    @property
    def failed(self) -> bool:
        return self.status is SourceStatus.FAILED


@dataclass
class RunResult:
    """Outcomes of every source in submission order."""

    outcomes: list[SourceOutcome] = field(default_factory=list)

    @property
    def failures(self) -> list[SourceOutcome]:
        return [o for o in self.outcomes if o.failed]

    @property
    def ok(self) -> bool:
        return not self.failures

    def count(self, status: SourceStatus) -> int:
        return sum(1 for o in self.outcomes if o.status is status)


class PipelineRunner:
    """Top-level orchestrator over many sources.

    All collaborators are injected; :meth:`from_settings` wires the
    production ones (browser fetcher, Ollama-backed arbiter, JSON or
    Markdown exporter).

    Usage::

        runner = PipelineRunner(
            cache=FetchCache(".cache"),
            fetcher=BrowserFetcher(),
            scorer=ScoringArbiter(model_factory),
            extractors=ExtractorRegistry.create(["workday", "simplify"]),
            consumer=JsonExporter("output"),
        )
        result = await runner.run(urls)
        await runner.aclose()
    """

    def __init__(
        self,
        *,
        cache: FetchCache,
        fetcher: PageFetcher,
        scorer: KeywordScorer,
        extractors: Sequence[Extractor],
        consumer: ResultConsumer | None = None,
        cpu_workers: int | None = None,
        max_concurrent_fetches: int | None = None,
    ) -> None:
        self._cache = cache
        self._fetcher = fetcher
        self._scorer = scorer
        self._extractors = tuple(extractors)
        self._consumer = consumer
        self._cpu_workers = cpu_workers
        self._fetch_slots = (
            asyncio.Semaphore(max_concurrent_fetches) if max_concurrent_fetches else None
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> PipelineRunner:
        """Build a runner with production collaborators from *settings*."""
        from jobkeywords.export import exporter_for
        from jobkeywords.fetch import BrowserConfig, BrowserFetcher
        from jobkeywords.scoring import OllamaKeywordModel, ScoringArbiter

        ollama = settings.ollama
        arbiter = ScoringArbiter(
            lambda: OllamaKeywordModel(ollama.base_url, ollama.model, max_retries=ollama.max_retries),
            name=ollama.model,
        )
        fetcher = BrowserFetcher(
            BrowserConfig(
                headless=settings.browser.headless,
                channel=settings.browser.channel,
                navigation_timeout_ms=settings.browser.navigation_timeout_ms,
            )
        )
        return cls(
            cache=FetchCache(settings.cache.dir),
            fetcher=fetcher,
            scorer=arbiter,
            extractors=ExtractorRegistry.create(settings.enabled_extractors),
            consumer=exporter_for(settings.output.format, settings.output.dir),
            cpu_workers=settings.pipeline.cpu_workers,
            max_concurrent_fetches=settings.pipeline.max_concurrent_fetches,
        )

    @property
    def extractor_names(self) -> list[str]:
        return [e.name for e in self._extractors]

    # -- run -----------------------------------------------------------------

    async def run(self, urls: Iterable[str]) -> RunResult:
        """Process every URL concurrently; never fails fast.

        Returns a :class:`RunResult`; check :attr:`RunResult.ok`.
        """
        url_list = list(dict.fromkeys(urls))
        logger.info(
            "Processing %d sources with extractors: %s",
            len(url_list),
            ", ".join(self.extractor_names) or "(none)",
        )

        with ThreadPoolExecutor(
            max_workers=self._cpu_workers, thread_name_prefix="jobkeywords-extract"
        ) as pool:
            outcomes = await asyncio.gather(*(self._process_guarded(url, pool) for url in url_list))

        result = RunResult(outcomes=list(outcomes))
        logger.info(
            "Run complete: %d extracted, %d cached, %d no data, %d failed",
            result.count(SourceStatus.EXTRACTED),
            result.count(SourceStatus.CACHED),
            result.count(SourceStatus.NO_DATA),
            result.count(SourceStatus.FAILED),
        )
        if result.failures:
            logger.error(
                "%d source(s) failed: %s",
                len(result.failures),
                ", ".join(o.url for o in result.failures),
            )
        return result

    async def _process_guarded(self, url: str, executor: Executor | None) -> SourceOutcome:
        """Run :meth:`process`, converting any exception into a FAILED outcome."""
        try:
            outcome = await self.process(url, executor=executor)
        except ActionableError as exc:
            outcome = SourceOutcome(url=url, status=SourceStatus.FAILED, failure=exc)
        except Exception as exc:
            logger.exception("Unexpected error processing %s", url)
            outcome = SourceOutcome(
                url=url,
                status=SourceStatus.FAILED,
                failure=ActionableError.from_exception(exc, "pipeline", f"processing {url}"),
            )
        self._report(outcome)
        return outcome

    async def process(self, url: str, *, executor: Executor | None = None) -> SourceOutcome:
        """Drive one source to a terminal state.

        Raises :class:`ActionableError` for fetch and cache failures.
        """
        # CacheCheck
        entry = await self._cache.lookup(url)
        if entry is not None:
            await self._emit(url, entry.result)
            status = SourceStatus.NO_DATA if entry.is_tombstone else SourceStatus.CACHED
            return SourceOutcome(url=url, status=status, result=entry.result)

        if url.lower().startswith("http://"):
            logger.warning("Fetching %s without https — consider switching the URL to https", url)

        # Fetch
        if self._fetch_slots is not None:
            async with self._fetch_slots:
                html = await self._fetcher.fetch(url)
        else:
            html = await self._fetcher.fetch(url)

        # Extract
        extracted = await extract_page(
            PageContent(url=url, html=html), self._extractors, self._scorer, executor=executor
        )
        for error in extracted.errors:
            logger.warning("Extractor error for %s: %s", url, error.error)

        if extracted.result is None and extracted.errors:
            return SourceOutcome(
                url=url,
                status=SourceStatus.FAILED,
                errors=extracted.errors,
                failure=extracted.errors[0],
            )

        # Persist + Emit
        stored, emitted = await asyncio.gather(
            self._cache.store(url, CacheEntry(extracted.result)),
            self._emit(url, extracted.result),
            return_exceptions=True,
        )
        for exc in (stored, emitted):
            if isinstance(exc, BaseException):
                raise exc

        status = SourceStatus.NO_DATA if extracted.result is None else SourceStatus.EXTRACTED
        return SourceOutcome(url=url, status=status, result=extracted.result, errors=extracted.errors)

    async def _emit(self, url: str, result: ExtractionResult | None) -> None:
        """Deliver to the consumer; synchronous consumers run off the event loop."""
        consumer = self._consumer
        if consumer is None:
            return
        if inspect.iscoroutinefunction(consumer) or inspect.iscoroutinefunction(
            getattr(consumer, "__call__", None)
        ):
            returned = consumer(url, result)
            if inspect.isawaitable(returned):
                await returned
        else:
            await asyncio.to_thread(consumer, url, result)

    @staticmethod
    def _report(outcome: SourceOutcome) -> None:
        if outcome.status is SourceStatus.FAILED:
            logger.error(
                "Failed %s: %s",
                outcome.url,
                outcome.failure.error if outcome.failure else "unknown error",
            )
        elif outcome.status is SourceStatus.NO_DATA:
            logger.info("Finished %s — no data", outcome.url)
        elif outcome.result is None:
            logger.info("Finished %s (%s)", outcome.url, outcome.status.value)
        else:
            logger.info(
                "Finished %s (%s) — %d keywords",
                outcome.url,
                outcome.status.value,
                len(outcome.result.keywords),
            )

    # -- shutdown ------------------------------------------------------------

    async def aclose(self) -> None:
        """Close the fetcher and the scorer, if it can be closed."""
        await self._fetcher.close()
        close = getattr(self._scorer, "close", None)
        if callable(close):
            await asyncio.to_thread(close)
