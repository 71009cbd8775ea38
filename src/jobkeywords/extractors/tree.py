"""Parallel fan-out of extractors with a balanced merge tree.

Every applicable extractor runs on the worker pool against the same page.
Outcomes are combined pairwise in a balanced binary reduction, so the
critical path holds O(log n) merges.  Leaves keep registration order,
which makes the merge left-biased in that order.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from jobkeywords.errors import ActionableError
from jobkeywords.logging import logger

if TYPE_CHECKING:
    from collections.abc import Sequence
    from concurrent.futures import Executor

    from jobkeywords.extractors.base import Extractor, KeywordScorer, PageContent
    from jobkeywords.keywords import ExtractionResult


@dataclass
class ExtractionOutcome:
    """Merged data (``None`` = no extractor had an opinion) plus reported errors."""

    result: ExtractionResult | None = None
    errors: list[ActionableError] = field(default_factory=list)

    def combine(self, other: ExtractionOutcome) -> ExtractionOutcome:
        """Merge two outcomes; ``self`` is the left operand.

        Error lists are concatenated by appending the shorter list to the
        longer one, so error order is not stable across runs.
        """
        if self.result is None:
            result = other.result
        elif other.result is None:
            result = self.result
        else:
            result = self.result.merge(other.result)

        larger, smaller = (
            (self.errors, other.errors)
            if len(self.errors) >= len(other.errors)
            else (other.errors, self.errors)
        )
        return ExtractionOutcome(result=result, errors=[*larger, *smaller])


def run_extractor(extractor: Extractor, page: PageContent, scorer: KeywordScorer) -> ExtractionOutcome:
    """Run one extractor, turning a failure into a reported error."""
    try:
        result = extractor.extract(page, scorer)
    except ActionableError as exc:
        return ExtractionOutcome(errors=[exc])
    except Exception as exc:
        logger.debug("Extractor '%s' raised on %s", extractor.name, page.url, exc_info=True)
        return ExtractionOutcome(
            errors=[ActionableError.extraction(extractor.name, page.url, f"{type(exc).__name__}: {exc}")]
        )
    return ExtractionOutcome(result=result)


async def extract_page(
    page: PageContent,
    extractors: Sequence[Extractor],
    scorer: KeywordScorer,
    *,
    executor: Executor | None = None,
) -> ExtractionOutcome:
    """Run every applicable extractor concurrently and merge the outcomes."""
    applicable = [e for e in extractors if e.is_applicable(page.url)]
    if not applicable:
        return ExtractionOutcome()

    loop = asyncio.get_running_loop()

    async def _reduce(group: Sequence[Extractor]) -> ExtractionOutcome:
        if len(group) == 1:
            return await loop.run_in_executor(executor, run_extractor, group[0], page, scorer)
        mid = len(group) // 2
        left, right = await asyncio.gather(_reduce(group[:mid]), _reduce(group[mid:]))
        return left.combine(right)

    return await _reduce(applicable)
