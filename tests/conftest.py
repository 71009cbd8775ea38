"""Global test configuration — shared fixtures and I/O-boundary fakes.

This conftest provides:

1. **Scoring fakes** — ``StubKeywordModel`` (a deterministic
   ``KeywordModel`` that records every call and the thread it ran on) and
   the ``make_arbiter`` factory, which builds real ``ScoringArbiter``
   instances around it and closes them after the test.

2. **Fetch fake** — ``FakeFetcher`` serves canned HTML per URL, counts
   calls, and raises a FETCH error for unknown URLs.

3. **Runner factory** — ``make_runner`` wires a real ``PipelineRunner``
   with a real ``FetchCache`` under ``tmp_path``; only the browser and the
   keyword model are faked.

4. **Registry isolation** — ``isolated_registry`` snapshots the extractor
   registry and restores it after the test.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

import pytest

from jobkeywords.cache import FetchCache
from jobkeywords.errors import ActionableError
from jobkeywords.extractors import ExtractorRegistry
from jobkeywords.keywords import KeywordSet
from jobkeywords.pipeline.runner import PipelineRunner
from jobkeywords.scoring import ScoringArbiter

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Sequence
    from pathlib import Path

    from jobkeywords.extractors import Extractor
    from jobkeywords.keywords import ExtractionResult


# ---------------------------------------------------------------------------
# Scoring fakes
# ---------------------------------------------------------------------------


class StubKeywordModel:
    """Deterministic keyword model.

    ``mapping`` maps a fragment to its candidates; unmapped fragments score
    as ``[(fragment.lower(), 1.0)]``.  Every call appends the fragments to
    ``calls`` and the worker thread's ident to ``threads``.
    """

    instances = 0

    def __init__(self, mapping: dict[str, list[tuple[str, float]]] | None = None) -> None:
        StubKeywordModel.instances += 1
        self.mapping = mapping or {}
        self.calls: list[list[str]] = []
        self.threads: list[int] = []

    def predict(self, fragments: Sequence[str]) -> list[list[tuple[str, float]]]:
        self.calls.append(list(fragments))
        self.threads.append(threading.get_ident())
        return [self.mapping.get(f, [(f.lower(), 1.0)]) for f in fragments]


class StubScorer:
    """In-thread scorer for extractor unit tests: one keyword per fragment."""

    def __init__(self, weight: float = 1.0) -> None:
        self.weight = weight
        self.fragments: list[str] = []

    def keywords(self, fragments: Sequence[str]) -> KeywordSet:
        self.fragments.extend(fragments)
        return KeywordSet((f.lower(), self.weight) for f in fragments)


@pytest.fixture
def make_arbiter() -> Iterator[Callable[..., tuple[ScoringArbiter, StubKeywordModel]]]:
    """Factory fixture — returns ``(arbiter, model)`` around a StubKeywordModel.

    Every arbiter created is closed at teardown.

    Usage::

        arbiter, model = make_arbiter()
        arbiter, model = make_arbiter({"Build APIs": [("api", 1.0)]})
    """
    created: list[ScoringArbiter] = []

    def _factory(
        mapping: dict[str, list[tuple[str, float]]] | None = None,
    ) -> tuple[ScoringArbiter, StubKeywordModel]:
        model = StubKeywordModel(mapping)
        arbiter = ScoringArbiter(lambda: model, name="stub")
        created.append(arbiter)
        return arbiter, model

    yield _factory

    for arbiter in created:
        arbiter.close(timeout=5)


# ---------------------------------------------------------------------------
# Fetch fake
# ---------------------------------------------------------------------------


class FakeFetcher:
    """Serves canned HTML; unknown URLs raise a FETCH error."""

    def __init__(self, pages: dict[str, str] | None = None) -> None:
        self.pages = pages or {}
        self.calls: list[str] = []
        self.closed = False

    async def fetch(self, url: str) -> str:
        self.calls.append(url)
        if url not in self.pages:
            raise ActionableError.fetch(url, "net::ERR_NAME_NOT_RESOLVED")
        return self.pages[url]

    async def close(self) -> None:
        self.closed = True


class RecordingConsumer:
    """Downstream consumer that records every delivery."""

    def __init__(self) -> None:
        self.received: dict[str, ExtractionResult | None] = {}

    def __call__(self, url: str, result: ExtractionResult | None) -> None:
        self.received[url] = result


# ---------------------------------------------------------------------------
# Runner factory
# ---------------------------------------------------------------------------


@pytest.fixture
def make_runner(
    tmp_path: Path,
    make_arbiter: Callable[..., tuple[ScoringArbiter, StubKeywordModel]],
) -> Callable[..., tuple[PipelineRunner, FakeFetcher, StubKeywordModel, RecordingConsumer]]:
    """Factory fixture — a real PipelineRunner with faked browser and model.

    The cache lives in ``tmp_path / "cache"``; pass ``cache`` to share one
    between runners.

    Returns ``(runner, fetcher, model, consumer)``.

    Usage::

        runner, fetcher, model, consumer = make_runner(
            pages={url: html},
            extractors=[ListItemExtractor()],
            mapping={"Build APIs": [("api", 1.0)]},
        )
    """

    def _factory(
        *,
        pages: dict[str, str] | None = None,
        extractors: list[Extractor] | None = None,
        mapping: dict[str, list[tuple[str, float]]] | None = None,
        cache: FetchCache | None = None,
    ) -> tuple[PipelineRunner, FakeFetcher, StubKeywordModel, RecordingConsumer]:
        arbiter, model = make_arbiter(mapping)
        fetcher = FakeFetcher(pages)
        consumer = RecordingConsumer()
        runner = PipelineRunner(
            cache=cache or FetchCache(tmp_path / "cache"),
            fetcher=fetcher,
            scorer=arbiter,
            extractors=extractors if extractors is not None else ExtractorRegistry.create(["workday"]),
            consumer=consumer,
            cpu_workers=2,
        )
        return runner, fetcher, model, consumer

    return _factory


# ---------------------------------------------------------------------------
# Registry isolation
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_registry() -> Iterator[None]:
    """Snapshot the extractor registry and restore it after the test."""
    saved = dict(ExtractorRegistry._registry)
    try:
        yield
    finally:
        ExtractorRegistry._registry.clear()
        ExtractorRegistry._registry.update(saved)
