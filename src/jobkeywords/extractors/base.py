"""Extractor contract and the page content handed to extractors."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar, Protocol
from urllib.parse import urlsplit

if TYPE_CHECKING:
    from collections.abc import Sequence

    from jobkeywords.keywords import ExtractionResult, KeywordSet


class KeywordScorer(Protocol):
    """What extractors see of the scoring arbiter."""

    def keywords(self, fragments: Sequence[str]) -> KeywordSet: ...


@dataclass(frozen=True)
class PageContent:
    """Rendered HTML of one posting page plus the URL it came from."""

    url: str
    html: str

    @property
    def host(self) -> str:
        return urlsplit(self.url).hostname or ""

    @property
    def path_segments(self) -> list[str]:
        return [segment for segment in urlsplit(self.url).path.split("/") if segment]


class Extractor(ABC):
    """Strategy interface for one site family.

    ``extract`` returns:

    - ``None`` — no opinion (the page is not one this extractor understands);
    - an :class:`ExtractionResult` — data found, possibly empty;

    and raises :class:`~jobkeywords.errors.ActionableError` when the page
    should have been understood but extraction failed.

    Extractors run concurrently on worker threads against the same page;
    they must not keep mutable state between calls.
    """

    #: Enabled unless configuration omits it.  Optional extractors set ``False``.
    default: ClassVar[bool] = True

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique identifier used in configuration and error reports."""
        ...

    @abstractmethod
    def is_applicable(self, url: str) -> bool:
        """Cheap URL test deciding whether :meth:`extract` runs at all."""
        ...

    @abstractmethod
    def extract(self, page: PageContent, scorer: KeywordScorer) -> ExtractionResult | None:
        """Extract keywords (scored through *scorer*) and posting metadata."""
        ...
