"""Workday extractor — hosted career sites on myworkdaysite.com / myworkdayjobs.com.

Workday renders each posting into a stable set of ``data-automation-id``
hooks:

- ``h2[data-automation-id=jobPostingHeader]`` — the job title
- ``div[data-automation-id=jobPostingDescription]`` — the description,
  whose ``<li>`` bullets carry the requirements worth scoring

The organisation is the second URL path segment
(``/recruiting/<organisation>/...``).
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import urlsplit

from jobkeywords.extractors import markup
from jobkeywords.extractors.base import Extractor
from jobkeywords.extractors.registry import ExtractorRegistry
from jobkeywords.keywords import ExtractionResult

if TYPE_CHECKING:
    from jobkeywords.extractors.base import KeywordScorer, PageContent

_HOSTS = ("myworkdaysite.com", "myworkdayjobs.com")

_TITLE = 'h2[data-automation-id="jobPostingHeader"]'
_DESCRIPTION = 'div[data-automation-id="jobPostingDescription"]'


@ExtractorRegistry.register
class WorkdayExtractor(Extractor):
    """Extracts title, organisation, and scored requirement bullets."""

    @property
    def name(self) -> str:
        return "workday"

    def is_applicable(self, url: str) -> bool:
        host = urlsplit(url).hostname or ""
        return any(h in host for h in _HOSTS)

    def extract(self, page: PageContent, scorer: KeywordScorer) -> ExtractionResult | None:
        segments = page.path_segments
        if len(segments) < 2:
            return None

        soup = markup.parse(page.html)
        title = markup.first_text(soup, _TITLE)
        if title is None:
            return None

        lines = markup.list_items(soup, _DESCRIPTION)
        if lines is None:
            return None

        return ExtractionResult(
            source=page.url,
            keywords=scorer.keywords(lines),
            job_title=title,
            organization=segments[1],
        )
