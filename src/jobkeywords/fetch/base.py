"""Fetch collaborator contract."""

from __future__ import annotations

from typing import Protocol


class PageFetcher(Protocol):
    """Anything that can render *url* and return its HTML.

    Implementations raise :class:`~jobkeywords.errors.ActionableError`
    (FETCH) on navigation or network failure and own any retry policy.
    """

    async def fetch(self, url: str) -> str: ...

    async def close(self) -> None: ...
