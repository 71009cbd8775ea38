"""Settings loading and validation.

``config/settings.toml`` is read once, at startup, and every value is
checked before the browser launches or the keyword model loads.  Only
``[sources]`` is required; each other section falls back to the
defaults of its dataclass below.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

from jobkeywords.errors import ActionableError
from jobkeywords.export import EXPORT_FORMATS
from jobkeywords.extractors import ExtractorRegistry

DEFAULT_SETTINGS_PATH = Path("config/settings.toml")

_Section = dict[str, Any]


@dataclass
class ExtractorsConfig:
    """``[extractors]`` — adjustments to the default extractor set."""

    omit_default: list[str] = field(default_factory=list)
    enable_optional: list[str] = field(default_factory=list)


@dataclass
class CacheConfig:
    """``[cache]``"""

    dir: str = ".cache"


@dataclass
class OutputConfig:
    """``[output]`` — where and how each source's result is written."""

    dir: str = "./output"
    format: str = "json"


@dataclass
class OllamaConfig:
    """``[ollama]`` — the keyword model."""

    base_url: str = "http://localhost:11434"
    model: str = "mistral:7b"
    max_retries: int = 3


@dataclass
class BrowserSettings:
    """``[browser]``"""

    headless: bool = True
    channel: str | None = None
    navigation_timeout_ms: int = 30_000


@dataclass
class PipelineConfig:
    """``[pipeline]`` — concurrency bounds."""

    cpu_workers: int = 4
    max_concurrent_fetches: int = 4


@dataclass
class Settings:
    urls: list[str]
    extractors: ExtractorsConfig = field(default_factory=ExtractorsConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    ollama: OllamaConfig = field(default_factory=OllamaConfig)
    browser: BrowserSettings = field(default_factory=BrowserSettings)
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)

    @property
    def enabled_extractors(self) -> frozenset[str]:
        """(defaults − omit_default) ∪ enable_optional."""
        return ExtractorRegistry.resolve_enabled(
            self.extractors.omit_default, self.extractors.enable_optional
        )


def load_settings(path: str | Path = DEFAULT_SETTINGS_PATH) -> Settings:
    """Read and validate *path*.

    Raises :class:`~jobkeywords.errors.ActionableError`:
      - CONFIG when the file, ``[sources]`` or its URLs are missing
      - PARSE when the file is not valid TOML
      - VALIDATION when a value is present but unusable
    """
    settings_path = Path(path)
    try:
        data = tomllib.loads(settings_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise ActionableError.config(
            "settings",
            f"Settings file not found: {settings_path}",
            suggestion=f"Create {settings_path} or copy from config/settings.toml.example",
        ) from None
    except tomllib.TOMLDecodeError as exc:
        raise ActionableError.parse(
            "settings",
            "TOML",
            str(exc),
            suggestion=f"Fix the TOML syntax in {settings_path}",
        ) from None

    return Settings(
        urls=_parse_sources(data, settings_path),
        extractors=_parse_extractors(_section(data, "extractors")),
        cache=CacheConfig(dir=str(_section(data, "cache").get("dir", CacheConfig.dir))),
        output=_parse_output(_section(data, "output")),
        ollama=_parse_ollama(_section(data, "ollama")),
        browser=_parse_browser(_section(data, "browser")),
        pipeline=_parse_pipeline(_section(data, "pipeline")),
    )


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


def _parse_sources(data: _Section, settings_path: Path) -> list[str]:
    sources = data.get("sources")
    if not isinstance(sources, dict):
        raise ActionableError.config(
            "sources",
            f"Required section [sources] is missing from {settings_path}",
            suggestion=f"Add a [sources] section with a urls list to {settings_path}",
        )
    urls = sources.get("urls")
    if not isinstance(urls, list) or not urls:
        raise ActionableError.config(
            "sources.urls",
            "must be a non-empty list of posting URLs",
            suggestion="Add at least one job posting URL to [sources].urls",
        )
    for url in urls:
        parts = urlsplit(str(url))
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ActionableError.validation(
                "sources.urls",
                f"'{url}' is not an http(s) URL",
                suggestion="Use full URLs such as https://company.myworkdaysite.com/...",
            )
    return [str(url) for url in urls]


def _parse_extractors(section: _Section) -> ExtractorsConfig:
    config = ExtractorsConfig(
        omit_default=_string_list(section, "omit_default", "extractors"),
        enable_optional=_string_list(section, "enable_optional", "extractors"),
    )
    registered = ExtractorRegistry.list_registered()
    unknown = [
        name for name in (*config.omit_default, *config.enable_optional) if name not in registered
    ]
    if unknown:
        raise ActionableError.validation(
            "extractors",
            f"'{unknown[0]}' is not a registered extractor",
            suggestion=f"Choose from: {', '.join(registered)} (see: jobkeywords extractors)",
        )
    return config


def _parse_output(section: _Section) -> OutputConfig:
    fmt = str(section.get("format", OutputConfig.format))
    if fmt not in EXPORT_FORMATS:
        raise ActionableError.validation(
            "output.format",
            f"'{fmt}' is not one of {', '.join(EXPORT_FORMATS)}",
        )
    return OutputConfig(dir=str(section.get("dir", OutputConfig.dir)), format=fmt)


def _parse_ollama(section: _Section) -> OllamaConfig:
    base_url = str(section.get("base_url", OllamaConfig.base_url))
    if not base_url.startswith(("http://", "https://")):
        raise ActionableError.validation(
            "ollama.base_url",
            f"'{base_url}' is missing a scheme (http:// or https://)",
            suggestion=f"Use http://{base_url}",
        )
    return OllamaConfig(
        base_url=base_url,
        model=str(section.get("model", OllamaConfig.model)),
        max_retries=_positive_int(section, "max_retries", "ollama", OllamaConfig.max_retries),
    )


def _parse_browser(section: _Section) -> BrowserSettings:
    return BrowserSettings(
        headless=bool(section.get("headless", BrowserSettings.headless)),
        # An empty string means "use the bundled Chromium"
        channel=str(section.get("channel") or "") or None,
        navigation_timeout_ms=_positive_int(
            section, "navigation_timeout_ms", "browser", BrowserSettings.navigation_timeout_ms
        ),
    )


def _parse_pipeline(section: _Section) -> PipelineConfig:
    return PipelineConfig(
        cpu_workers=_positive_int(section, "cpu_workers", "pipeline", PipelineConfig.cpu_workers),
        max_concurrent_fetches=_positive_int(
            section, "max_concurrent_fetches", "pipeline", PipelineConfig.max_concurrent_fetches
        ),
    )


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------


def _section(data: _Section, name: str) -> _Section:
    """An optional section; a missing or non-table value reads as empty."""
    value = data.get(name)
    return value if isinstance(value, dict) else {}


def _string_list(section: _Section, key: str, section_name: str) -> list[str]:
    value = section.get(key, [])
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ActionableError.validation(
            f"{section_name}.{key}",
            "must be a list of strings",
            suggestion=f'Set [{section_name}].{key} = ["name", ...]',
        )
    return list(value)


def _positive_int(section: _Section, key: str, section_name: str, default: int) -> int:
    value = section.get(key, default)
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ActionableError.validation(
            f"{section_name}.{key}",
            f"is {value!r}, must be an integer >= 1",
            suggestion=f"Set [{section_name}].{key} to a positive integer",
        )
    return value
