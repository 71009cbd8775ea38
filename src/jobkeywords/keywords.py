"""Weighted keyword data model and merge algebra.

A :class:`KeywordSet` maps keyword text to a float weight.  Identity is
the text alone: adding a keyword that is already present sums the weights
instead of creating a second entry.  Merging two sets therefore forms a
commutative, associative algebra (up to floating-point summation order)
with the empty set as identity.

An :class:`ExtractionResult` bundles a keyword set with the posting's
source URL, job title, and organisation.  Merging two results is
**left-biased** for the scalar fields: a non-empty title or organisation
on the left operand wins over the right operand's value.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator


@dataclass(eq=False)
class WeightedKeyword:
    """A keyword text plus its mutable weight.

    Equality and hashing consider ``text`` only.
    """

    text: str
    weight: float = 0.0

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WeightedKeyword):
            return NotImplemented
        return self.text == other.text

    def __hash__(self) -> int:
        return hash(self.text)


class KeywordSet:
    """Set of weighted keywords, unique by text.

    Usage::

        ks = KeywordSet()
        ks.add("api", 1.0)
        ks.add("api", 1.0)          # weight is now 2.0
        merged = ks.merge(other)    # new set, operands unchanged
    """

    __slots__ = ("_weights",)

    def __init__(self, items: Iterable[tuple[str, float]] | None = None) -> None:
        self._weights: dict[str, float] = {}
        if items is not None:
            for text, weight in items:
                self.add(text, weight)

    # -- mutation ------------------------------------------------------------

    def add(self, text: str, weight: float) -> None:
        """Insert *text*, summing *weight* into an existing entry."""
        if text in self._weights:
            self._weights[text] += weight
        else:
            self._weights[text] = float(weight)

    def update(self, other: KeywordSet) -> None:
        """Merge *other* into this set in place."""
        for text, weight in other._weights.items():
            self.add(text, weight)

    def __iadd__(self, other: KeywordSet) -> KeywordSet:
        self.update(other)
        return self

    # -- algebra -------------------------------------------------------------

    def merge(self, other: KeywordSet) -> KeywordSet:
        """Return a new set combining both operands."""
        merged = self.copy()
        merged.update(other)
        return merged

    def __add__(self, other: KeywordSet) -> KeywordSet:
        return self.merge(other)

    def copy(self) -> KeywordSet:
        clone = KeywordSet()
        clone._weights = dict(self._weights)
        return clone

    # -- queries -------------------------------------------------------------

    def weight(self, text: str) -> float:
        """Return the weight of *text*, or ``0.0`` when absent."""
        return self._weights.get(text, 0.0)

    def as_dict(self) -> dict[str, float]:
        return dict(self._weights)

    def ranked(self) -> list[WeightedKeyword]:
        """Keywords sorted by descending weight, ties broken by text."""
        return [
            WeightedKeyword(text, weight)
            for text, weight in sorted(self._weights.items(), key=lambda kv: (-kv[1], kv[0]))
        ]

    def __contains__(self, text: object) -> bool:
        if isinstance(text, WeightedKeyword):
            return text.text in self._weights
        return text in self._weights

    def __iter__(self) -> Iterator[WeightedKeyword]:
        for text, weight in self._weights.items():
            yield WeightedKeyword(text, weight)

    def __len__(self) -> int:
        return len(self._weights)

    def __bool__(self) -> bool:
        return bool(self._weights)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, KeywordSet):
            return NotImplemented
        return self._weights == other._weights

    def __repr__(self) -> str:
        return f"KeywordSet({self._weights!r})"


@dataclass
class ExtractionResult:
    """Structured data extracted from one posting page."""

    source: str
    keywords: KeywordSet = field(default_factory=KeywordSet)
    job_title: str = ""
    organization: str = ""

    def merge(self, other: ExtractionResult) -> ExtractionResult:
        """Combine two results into a new one.

        Keywords merge through :meth:`KeywordSet.merge`.  For ``job_title``
        and ``organization`` the left operand's value wins whenever it is
        non-empty; the right operand only fills blanks.
        """
        return ExtractionResult(
            source=self.source or other.source,
            keywords=self.keywords.merge(other.keywords),
            job_title=self.job_title or other.job_title,
            organization=self.organization or other.organization,
        )

    def is_empty(self) -> bool:
        return not self.keywords and not self.job_title and not self.organization

    # -- serialisation -------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "job_title": self.job_title,
            "organization": self.organization,
            "keywords": self.keywords.as_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExtractionResult:
        """Rebuild a result from :meth:`to_dict` output.

        Raises ``KeyError``/``TypeError``/``ValueError`` on malformed input;
        callers decide how to report that.
        """
        keywords = data["keywords"]
        if not isinstance(keywords, dict):
            msg = f"'keywords' must be an object, not {type(keywords).__name__}"
            raise TypeError(msg)
        return cls(
            source=str(data["source"]),
            keywords=KeywordSet((str(k), float(v)) for k, v in keywords.items()),
            job_title=str(data.get("job_title", "")),
            organization=str(data.get("organization", "")),
        )
