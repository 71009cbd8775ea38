"""Extractor registry — decorator-based loader and factory."""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from collections.abc import Iterable

    from jobkeywords.extractors.base import Extractor


class ExtractorRegistry:
    """Maps extractor names to extractor classes, in registration order.

    Registration order is also the left-to-right merge order, which
    decides which extractor's job title wins when several supply one.

    Usage::

        @ExtractorRegistry.register
        class WorkdayExtractor(Extractor):
            @property
            def name(self) -> str:
                return "workday"
            ...
    """

    _registry: ClassVar[dict[str, type[Extractor]]] = {}

    @classmethod
    def register(cls, extractor_class: type[Extractor]) -> type[Extractor]:
        """Class decorator — registers an extractor by its ``name``."""
        instance = extractor_class.__new__(extractor_class)
        cls._registry[instance.name] = extractor_class
        return extractor_class

    @classmethod
    def get(cls, name: str) -> Extractor:
        """Return a new instance of the extractor registered under *name*."""
        if name not in cls._registry:
            msg = f"No extractor registered under name: '{name}'"
            raise ValueError(msg)
        return cls._registry[name]()

    @classmethod
    def list_registered(cls) -> list[str]:
        return list(cls._registry.keys())

    @classmethod
    def defaults(cls) -> list[str]:
        return [name for name, klass in cls._registry.items() if klass.default]

    @classmethod
    def resolve_enabled(
        cls,
        omit_default: Iterable[str] = (),
        enable_optional: Iterable[str] = (),
    ) -> frozenset[str]:
        """Enabled set = (defaults − *omit_default*) ∪ *enable_optional*.

        Raises ``ValueError`` naming the first unknown extractor.
        """
        omit = set(omit_default)
        extra = set(enable_optional)
        for name in sorted(omit | extra):
            if name not in cls._registry:
                msg = f"No extractor registered under name: '{name}'"
                raise ValueError(msg)
        return frozenset((set(cls.defaults()) - omit) | extra)

    @classmethod
    def create(cls, enabled: Iterable[str]) -> list[Extractor]:
        """Instantiate the *enabled* extractors in registration order."""
        wanted = set(enabled)
        for name in sorted(wanted):
            if name not in cls._registry:
                msg = f"No extractor registered under name: '{name}'"
                raise ValueError(msg)
        return [klass() for name, klass in cls._registry.items() if name in wanted]
