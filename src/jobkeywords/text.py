"""Text helpers shared by extractors and exporters.

Pure functions over ``str``; nothing here knows about pages or keywords.
"""

from __future__ import annotations

import re

MAX_SLUG_LEN = 80


def slugify(text: str, *, max_len: int = MAX_SLUG_LEN) -> str:
    """Convert *text* to a filesystem-safe slug.

    Lowercases, strips non-alphanumeric characters (except hyphens),
    collapses whitespace/underscores to single hyphens, and truncates
    to *max_len* characters.

    >>> slugify("Senior Staff Engineer — Platform (Remote)")
    'senior-staff-engineer-platform-remote'
    """
    slug = text.lower()
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"[\s_]+", "-", slug)
    slug = slug.strip("-")
    return slug[:max_len]


def clean_text(text: str) -> str:
    """Normalise page text: non-breaking spaces become spaces, runs of
    whitespace collapse to one space, and the ends are stripped.

    >>> clean_text("  Build\\u00a0APIs \\n fast ")
    'Build APIs fast'
    """
    return re.sub(r"\s+", " ", text.replace("\xa0", " ")).strip()


def split_sentences(text: str) -> list[str]:
    """Split prose into sentence fragments, dropping empty pieces."""
    parts = re.split(r"(?<=[.!?;])\s+", clean_text(text))
    return [p for p in parts if p]
