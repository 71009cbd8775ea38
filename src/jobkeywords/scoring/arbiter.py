"""Scoring arbiter — one worker thread owns the one keyword model.

The keyword model is expensive to build and must not be called from more
than one thread.  :class:`ScoringArbiter` starts a dedicated worker thread
(lazily, exactly once) that constructs the model and then services a FIFO
mailbox of ``(ScoreRequest, Future)`` envelopes until the mailbox is
closed.  Callers never see the model; they submit a request and wait on
its private single-use :class:`concurrent.futures.Future`:

- extractor code running on a worker pool thread calls :meth:`score`
  and blocks on the future;
- coroutines call :meth:`score_async`, which suspends on the wrapped
  future without blocking the event loop.

A caller that cancels its future before the worker reaches it is skipped
— the worker moves on to the next envelope instead of waiting.  Once a
future is running, cancellation is no longer possible and the result is
simply discarded if nobody reads it.
"""

from __future__ import annotations

import asyncio
import queue
import threading
from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from jobkeywords.errors import ActionableError
from jobkeywords.keywords import KeywordSet
from jobkeywords.logging import logger

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from jobkeywords.scoring.model import Candidate, KeywordModel


@dataclass(frozen=True)
class ScoreRequest:
    """An ordered batch of text fragments to score."""

    fragments: tuple[str, ...]
    tag: object = field(default=None, compare=False)

    @classmethod
    def of(cls, fragments: Sequence[str], *, tag: object = None) -> ScoreRequest:
        return cls(fragments=tuple(fragments), tag=tag)


@dataclass(frozen=True)
class ScoreResponse:
    """Per-fragment keyword candidates; ``candidates[i]`` answers ``fragments[i]``."""

    candidates: tuple[tuple[Candidate, ...], ...]

    def keyword_set(self) -> KeywordSet:
        """Fold every candidate of every fragment into one keyword set."""
        keywords = KeywordSet()
        for fragment_candidates in self.candidates:
            for text, weight in fragment_candidates:
                keywords.add(text, weight)
        return keywords


_Envelope = tuple[ScoreRequest, "Future[ScoreResponse]"]


class ScoringArbiter:
    """Serialises scoring requests from many callers onto one model.

    Usage::

        arbiter = ScoringArbiter(lambda: OllamaKeywordModel(url, "mistral:7b"))
        response = arbiter.score(["Build APIs", "Ship features"])
        ...
        arbiter.close()

    Requests are serviced strictly in submission order; no two requests
    are ever scored concurrently.
    """

    def __init__(
        self,
        model_factory: Callable[[], KeywordModel],
        *,
        name: str = "keyword-model",
    ) -> None:
        self._model_factory = model_factory
        self.name = name
        self._mailbox: queue.SimpleQueue[_Envelope | None] = queue.SimpleQueue()
        self._lock = threading.Lock()
        self._thread: threading.Thread | None = None
        self._closed = False

    # -- lifecycle -----------------------------------------------------------

    def start(self) -> None:
        """Start the worker thread if it is not already running."""
        with self._lock:
            if self._closed:
                raise ActionableError.scoring(
                    self.name,
                    "arbiter is closed",
                    suggestion="Create a new ScoringArbiter; a closed one cannot be restarted",
                )
            if self._thread is None:
                self._thread = threading.Thread(
                    target=self._run, name=f"scoring-arbiter[{self.name}]", daemon=True
                )
                self._thread.start()

    def close(self, timeout: float | None = None) -> None:
        """Close the mailbox and wait for the worker to drain it and exit.

        Requests already submitted are still serviced.  Safe to call twice.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            thread = self._thread
        self._mailbox.put(None)
        if thread is not None:
            thread.join(timeout)

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def __enter__(self) -> ScoringArbiter:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # -- caller API ----------------------------------------------------------

    def submit(self, request: ScoreRequest) -> Future[ScoreResponse]:
        """Queue *request* and return its single-use reply future."""
        self.start()
        reply: Future[ScoreResponse] = Future()
        self._mailbox.put((request, reply))
        return reply

    def score(self, fragments: Sequence[str]) -> ScoreResponse:
        """Blocking scoring call for worker-pool threads."""
        if not fragments:
            return ScoreResponse(candidates=())
        return self.submit(ScoreRequest.of(fragments)).result()

    async def score_async(self, fragments: Sequence[str]) -> ScoreResponse:
        """Suspend the calling coroutine until its request is scored.

        Cancelling the awaiting task cancels the pending request.
        """
        if not fragments:
            return ScoreResponse(candidates=())
        return await asyncio.wrap_future(self.submit(ScoreRequest.of(fragments)))

    def keywords(self, fragments: Sequence[str]) -> KeywordSet:
        """Score *fragments* and fold all candidates into one keyword set."""
        return self.score(fragments).keyword_set()

    # -- worker --------------------------------------------------------------

    def _run(self) -> None:
        model: KeywordModel | None = None
        init_error: ActionableError | None = None
        try:
            model = self._model_factory()
            logger.info("Keyword model '%s' initialised", self.name)
        except ActionableError as exc:
            init_error = exc
        except Exception as exc:
            logger.exception("Keyword model '%s' failed to initialise", self.name)
            init_error = ActionableError.scoring(self.name, f"model initialisation failed: {exc}")

        if init_error is not None:
            logger.error("Keyword model unavailable: %s", init_error.error)

        while True:
            envelope = self._mailbox.get()
            if envelope is None:
                break
            request, reply = envelope
            if not reply.set_running_or_notify_cancel():
                logger.debug("Skipping cancelled score request (tag=%r)", request.tag)
                continue
            if model is None:
                reply.set_exception(init_error)  # type: ignore[arg-type]
                continue
            try:
                reply.set_result(self._predict(model, request))
            except ActionableError as exc:
                reply.set_exception(exc)
            except Exception as exc:
                logger.warning("Keyword model raised on request (tag=%r): %s", request.tag, exc)
                reply.set_exception(ActionableError.scoring(self.name, str(exc)))

        logger.debug("Scoring arbiter '%s' stopped", self.name)

    def _predict(self, model: KeywordModel, request: ScoreRequest) -> ScoreResponse:
        raw = model.predict(list(request.fragments))
        if len(raw) != len(request.fragments):
            raise ActionableError.scoring(
                self.name,
                f"model returned {len(raw)} candidate lists for {len(request.fragments)} fragments",
            )
        return ScoreResponse(
            candidates=tuple(
                tuple((str(text), float(weight)) for text, weight in fragment)
                for fragment in raw
            )
        )
