"""Simplify extractor — postings on simplify.jobs."""

from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import urlsplit

from jobkeywords.extractors import markup
from jobkeywords.extractors.base import Extractor
from jobkeywords.extractors.registry import ExtractorRegistry
from jobkeywords.keywords import ExtractionResult

if TYPE_CHECKING:
    from jobkeywords.extractors.base import KeywordScorer, PageContent

# Requirement and responsibility bullets share this Tailwind list style
_BULLET_LIST = "ul.ml-5.list-disc"


@ExtractorRegistry.register
class SimplifyExtractor(Extractor):
    @property
    def name(self) -> str:
        return "simplify"

    def is_applicable(self, url: str) -> bool:
        return "simplify.jobs" in (urlsplit(url).hostname or "")

    def extract(self, page: PageContent, scorer: KeywordScorer) -> ExtractionResult | None:
        soup = markup.parse(page.html)
        lines = markup.list_items(soup, _BULLET_LIST)
        if lines is None:
            return None
        return ExtractionResult(
            source=page.url,
            keywords=scorer.keywords(lines),
            job_title=markup.first_text(soup, "h1") or "",
        )
