"""Extractor layer — pluggable per-site keyword extraction.

Importing this package triggers extractor registration via the
``@ExtractorRegistry.register`` decorator on each concrete extractor.
"""

# Import concrete extractors to trigger registration; order is merge order
from jobkeywords.extractors import workday as _workday  # noqa: F401
from jobkeywords.extractors import simplify as _simplify  # noqa: F401
from jobkeywords.extractors import jsonld as _jsonld  # noqa: F401
from jobkeywords.extractors.base import Extractor, KeywordScorer, PageContent
from jobkeywords.extractors.registry import ExtractorRegistry
from jobkeywords.extractors.tree import ExtractionOutcome, extract_page, run_extractor

__all__ = [
    "ExtractionOutcome",
    "Extractor",
    "ExtractorRegistry",
    "KeywordScorer",
    "PageContent",
    "extract_page",
    "run_extractor",
]
