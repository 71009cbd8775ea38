"""JSON-LD extractor — schema.org ``JobPosting`` blocks on any site.

Many applicant-tracking systems embed the posting as structured data in
``<script type="application/ld+json">``.  The block may be a single
object, a list, or an ``@graph`` container.  Title and hiring
organisation come straight from the fields; the ``description`` is HTML,
whose list items are scored (or its sentences when it has no list).

Optional: enable with ``[extractors].enable_optional = ["jsonld"]``.
"""

from __future__ import annotations

import html
import json
from typing import TYPE_CHECKING, Any

from jobkeywords.errors import ActionableError
from jobkeywords.extractors import markup
from jobkeywords.extractors.base import Extractor
from jobkeywords.extractors.registry import ExtractorRegistry
from jobkeywords.keywords import ExtractionResult
from jobkeywords.text import clean_text, split_sentences

if TYPE_CHECKING:
    from jobkeywords.extractors.base import KeywordScorer, PageContent


def _is_job_posting(item: dict[str, Any]) -> bool:
    item_type = item.get("@type", "")
    if isinstance(item_type, list):
        return any("JobPosting" in str(t) for t in item_type)
    return "JobPosting" in str(item_type)


def _flatten(data: Any) -> list[dict[str, Any]]:
    if isinstance(data, list):
        return [item for item in data if isinstance(item, dict)]
    if isinstance(data, dict):
        graph = data.get("@graph")
        if isinstance(graph, list):
            return [item for item in graph if isinstance(item, dict)]
        return [data]
    return []


def find_job_postings(page_html: str) -> list[dict[str, Any]]:
    """Return every JobPosting object embedded in *page_html*.

    Raises :class:`ActionableError` (PARSE) when a JSON-LD block is not
    valid JSON.
    """
    postings: list[dict[str, Any]] = []
    for raw in markup.script_texts(markup.parse(page_html), "application/ld+json"):
        if not raw.strip():
            continue
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ActionableError.parse("jsonld", "application/ld+json", str(exc)) from None
        postings.extend(item for item in _flatten(data) if _is_job_posting(item))
    return postings


def _organization_name(posting: dict[str, Any]) -> str:
    org = posting.get("hiringOrganization")
    if isinstance(org, dict):
        return clean_text(str(org.get("name", "")))
    if isinstance(org, str):
        return clean_text(org)
    return ""


def description_fragments(description: str) -> list[str]:
    """Bullets of an HTML description, or its sentences when it has none."""
    # Some sites entity-escape the markup inside the JSON string
    if "&lt;" in description:
        description = html.unescape(description)
    soup = markup.parse(description)
    bullets = markup.items_of(soup)
    if bullets:
        return bullets
    return split_sentences(markup.text_of(soup, separator=" "))


@ExtractorRegistry.register
class JsonLdExtractor(Extractor):
    """Reads schema.org JobPosting structured data."""

    default = False

    @property
    def name(self) -> str:
        return "jsonld"

    def is_applicable(self, url: str) -> bool:
        return True

    def extract(self, page: PageContent, scorer: KeywordScorer) -> ExtractionResult | None:
        postings = find_job_postings(page.html)
        if not postings:
            return None

        posting = postings[0]
        fragments = description_fragments(str(posting.get("description", "")))
        return ExtractionResult(
            source=page.url,
            keywords=scorer.keywords(fragments),
            job_title=clean_text(str(posting.get("title", ""))),
            organization=_organization_name(posting),
        )
