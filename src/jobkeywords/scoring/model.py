"""Keyword model — the scoring resource owned by the arbiter.

Any object with a ``predict(fragments) -> list[list[(text, weight)]]``
method satisfies :class:`KeywordModel`.  The shipped implementation asks
a local Ollama model for the keywords of each fragment in JSON mode:

- **Initialisation** verifies Ollama is reachable and the model is pulled
  (the one-time expensive step).
- **Prediction** issues one chat call per fragment and parses
  ``{"keywords": [{"text": ..., "score": ...}]}``.
- **Retry with backoff**: transient 5xx / connection errors are retried
  up to ``max_retries`` times before raising a SCORING error.

The model is synchronous and not thread-safe by contract; only the
arbiter's worker thread may call it.
"""

from __future__ import annotations

import json
import time
from typing import TYPE_CHECKING, Any, Protocol, TypeVar

import ollama as ollama_sdk

from jobkeywords.errors import ActionableError
from jobkeywords.logging import logger

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

_T = TypeVar("_T")

Candidate = tuple[str, float]

_RETRYABLE_STATUS_CODES = {408, 429, 500, 502, 503, 504}

# Keywords per fragment; list items rarely carry more than a handful
_MAX_KEYWORDS = 5

_SYSTEM_PROMPT = (
    "You extract resume keywords from job posting text. "
    "Return JSON of the form "
    '{"keywords": [{"text": "<keyword>", "score": <relevance between 0 and 1>}]} '
    f"with at most {_MAX_KEYWORDS} entries. Keywords are short nouns, verbs or "
    "adjectives (skills, tools, responsibilities), lowercase, no punctuation."
)


class KeywordModel(Protocol):
    """Scoring resource contract: one candidate list per input fragment, in order."""

    def predict(self, fragments: Sequence[str]) -> list[list[Candidate]]: ...


def parse_candidates(raw: str) -> list[Candidate]:
    """Parse the model's JSON reply into ``(text, weight)`` candidates.

    Entries with blank text or a non-numeric score are dropped; scores
    are clamped to ``[0.0, 1.0]`` and texts lowercased.
    """
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ActionableError.parse("keyword model", "JSON reply", str(exc)) from None

    items: Any = data.get("keywords", []) if isinstance(data, dict) else data
    if not isinstance(items, list):
        raise ActionableError.parse(
            "keyword model", "keywords", f"expected a list, got {type(items).__name__}"
        )

    candidates: list[Candidate] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        text = str(item.get("text", "")).strip().lower()
        try:
            score = float(item.get("score", 0.0))
        except (TypeError, ValueError):
            continue
        if text:
            candidates.append((text, min(max(score, 0.0), 1.0)))
    return candidates


class OllamaKeywordModel:
    """Keyword extraction backed by a local Ollama chat model.

    Usage::

        model = OllamaKeywordModel("http://localhost:11434", "mistral:7b")
        model.predict(["Design REST APIs in Python"])
        # → [[("rest apis", 0.9), ("python", 0.8)]]
    """

    def __init__(
        self,
        base_url: str,
        model: str,
        *,
        max_retries: int = 3,
        base_delay: float = 1.0,
        check_model: bool = True,
    ) -> None:
        self.base_url = base_url
        self.model = model
        self.max_retries = max_retries
        self.base_delay = base_delay
        self._client = ollama_sdk.Client(host=base_url)
        if check_model:
            self.health_check()

    def predict(self, fragments: Sequence[str]) -> list[list[Candidate]]:
        return [self._predict_one(fragment) for fragment in fragments]

    def health_check(self) -> None:
        """Verify Ollama is reachable and the configured model is pulled.

        Raises :class:`ActionableError`:
          - CONNECTION if Ollama is unreachable
          - SCORING if the model is not pulled
        """
        try:
            response = self._client.list()
        except (ConnectionError, OSError) as exc:
            raise ActionableError.connection(
                service="Ollama",
                url=self.base_url,
                raw_error=str(exc),
            ) from None

        available = {m.model for m in response.models if m.model}
        # Ollama model names may include :latest suffix — normalise
        available |= {name.split(":")[0] for name in available}
        if self.model not in available and self.model.split(":")[0] not in available:
            raise ActionableError.scoring(
                self.model,
                f"Model '{self.model}' is not pulled in Ollama",
                suggestion=f"Run: ollama pull {self.model}",
            )
        logger.info("Ollama health check passed — %s available", self.model)

    def _predict_one(self, fragment: str) -> list[Candidate]:
        cleaned = fragment.strip()
        if not cleaned:
            return []

        def _call() -> str:
            response = self._client.chat(
                model=self.model,
                messages=[
                    {"role": "system", "content": _SYSTEM_PROMPT},
                    {"role": "user", "content": cleaned},
                ],
                format="json",
                options={"temperature": 0},
            )
            return response.message.content or ""

        return parse_candidates(self._with_retry(_call))

    def _with_retry(self, fn: Callable[[], _T]) -> _T:
        """Call *fn* with exponential backoff on retryable errors.

        Non-retryable errors (e.g. 404 model not found) fail immediately.
        """
        last_error: Exception | None = None

        for attempt in range(1, self.max_retries + 1):
            try:
                return fn()
            except ollama_sdk.ResponseError as exc:
                if exc.status_code not in _RETRYABLE_STATUS_CODES:
                    raise ActionableError.scoring(self.model, str(exc)) from None
                last_error = exc
                reason = f"status {exc.status_code}"
            except (ConnectionError, OSError) as exc:
                last_error = exc
                reason = "connection failed"

            if attempt == self.max_retries:
                break
            delay = self.base_delay * (2 ** (attempt - 1))
            logger.warning(
                "Ollama keyword call attempt %d/%d failed (%s), retrying in %.1fs: %s",
                attempt,
                self.max_retries,
                reason,
                delay,
                last_error,
            )
            time.sleep(delay)

        raise ActionableError.scoring(
            self.model,
            f"Failed after {self.max_retries} attempts: {last_error}",
            suggestion="Ollama may be overloaded — check resources and retry",
        )
