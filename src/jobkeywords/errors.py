"""Actionable errors for jobkeywords.

Every failure the pipeline reports is an :class:`ActionableError`.  It is
classified by what the operator has to *do* about it (``error_type``),
not by which module raised it, and it carries its own remedy:

- ``suggestion`` — one line for the run summary;
- ``steps`` — numbered recovery steps for the operator;
- ``guidance`` — a machine-readable action, command and checklist for
  tooling that consumes :meth:`ActionableError.to_dict`.

Build errors through the factory classmethods; they hold the wording so
raising sites stay one line long.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any

_SETTINGS_FILE = "config/settings.toml"


class ErrorType(StrEnum):
    """Recovery-path categories."""

    CACHE = "cache"
    CONFIG = "config"
    CONNECTION = "connection"
    EXTRACTION = "extraction"
    FETCH = "fetch"
    PARSE = "parse"
    SCORING = "scoring"
    VALIDATION = "validation"
    UNEXPECTED = "unexpected"

    @property
    def retryable(self) -> bool:
        """Whether simply re-running may succeed (failed sources are never cached)."""
        return self in _RETRYABLE


_RETRYABLE = frozenset({ErrorType.CONNECTION, ErrorType.FETCH, ErrorType.SCORING})


@dataclass(frozen=True)
class Guidance:
    """Machine-readable next action for tooling that consumes errors."""

    action: str
    command: str | None = None
    checks: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"action": self.action}
        if self.command:
            data["command"] = self.command
        if self.checks:
            data["checks"] = list(self.checks)
        return data


def _steps(*lines: str) -> tuple[str, ...]:
    return tuple(f"{n}. {line}" for n, line in enumerate(lines, start=1))


@dataclass
class ActionableError(Exception):
    """A failure plus everything needed to recover from it."""

    error: str
    error_type: ErrorType
    service: str

    suggestion: str | None = None
    guidance: Guidance | None = None
    steps: tuple[str, ...] = ()
    context: dict[str, Any] | None = None
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def __post_init__(self) -> None:
        super().__init__(self.error)

    @property
    def retryable(self) -> bool:
        return self.error_type.retryable

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready form; empty and ``None`` fields are left out."""
        data: dict[str, Any] = {
            "error": self.error,
            "error_type": self.error_type.value,
            "service": self.service,
            "retryable": self.retryable,
            "timestamp": self.timestamp,
        }
        optional = {
            "suggestion": self.suggestion,
            "guidance": self.guidance.to_dict() if self.guidance else None,
            "steps": list(self.steps) or None,
            "context": self.context,
        }
        data.update({key: value for key, value in optional.items() if value is not None})
        return data

    # -- settings ------------------------------------------------------------

    @classmethod
    def config(cls, field_name: str, reason: str, *, suggestion: str | None = None) -> ActionableError:
        """A required setting is missing, or the settings file is absent."""
        return cls(
            error=f"Configuration error — {field_name}: {reason}",
            error_type=ErrorType.CONFIG,
            service="settings",
            suggestion=suggestion or f"Set '{field_name}' in {_SETTINGS_FILE}",
            guidance=Guidance(
                action=f"Add or fix '{field_name}' in {_SETTINGS_FILE}",
                checks=(f"Does {_SETTINGS_FILE} exist?", f"Is '{field_name}' present?"),
            ),
            steps=_steps(
                f"Open {_SETTINGS_FILE} (start from config/settings.toml.example)",
                f"Fix '{field_name}': {reason}",
                "Run: jobkeywords run",
            ),
            context={"field": field_name},
        )

    @classmethod
    def validation(cls, field_name: str, reason: str, *, suggestion: str | None = None) -> ActionableError:
        """A setting or input is present but has an unusable value."""
        return cls(
            error=f"Validation error — {field_name}: {reason}",
            error_type=ErrorType.VALIDATION,
            service="settings",
            suggestion=suggestion or f"Correct '{field_name}' ({reason})",
            guidance=Guidance(action=f"Replace the value of '{field_name}'"),
            steps=_steps(f"Correct '{field_name}' in {_SETTINGS_FILE}", "Run: jobkeywords run"),
            context={"field": field_name},
        )

    # -- collaborators -------------------------------------------------------

    @classmethod
    def connection(
        cls, service: str, url: str, raw_error: str, *, suggestion: str | None = None
    ) -> ActionableError:
        """Ollama or the browser cannot be reached or started."""
        target = f" at {url}" if url else ""
        return cls(
            error=f"Cannot reach {service}{target}: {raw_error}",
            error_type=ErrorType.CONNECTION,
            service=service,
            suggestion=suggestion or f"Make sure {service} is running{target}",
            guidance=Guidance(
                action=f"Start {service} or correct its address",
                command=f"curl -s {url}" if url.startswith("http") else None,
                checks=(f"Is {service} running?", f"Does {_SETTINGS_FILE} point at it?"),
            ),
            steps=_steps(f"Start {service}", "Check its address in settings", "Re-run"),
        )

    @classmethod
    def fetch(cls, url: str, raw_error: str, *, suggestion: str | None = None) -> ActionableError:
        """A posting page could not be loaded."""
        return cls(
            error=f"Failed to fetch {url}: {raw_error}",
            error_type=ErrorType.FETCH,
            service="browser",
            suggestion=suggestion or "Open the URL in a normal browser and confirm the posting still exists",
            guidance=Guidance(
                action="Confirm the posting is still online, then re-run",
                checks=("Is the posting still online?", "Is Chromium installed? (playwright install chromium)"),
            ),
            steps=_steps(
                f"Open {url} in a browser",
                "If the posting moved, update [sources].urls",
                "Re-run; failed sources are not cached",
            ),
            context={"url": url},
        )

    # -- extraction ----------------------------------------------------------

    @classmethod
    def extraction(
        cls, extractor: str, url: str, raw_error: str, *, suggestion: str | None = None
    ) -> ActionableError:
        """An applicable extractor failed on a page it should understand."""
        return cls(
            error=f"Extractor '{extractor}' failed on {url}: {raw_error}",
            error_type=ErrorType.EXTRACTION,
            service=extractor,
            suggestion=suggestion or f"The page layout may have changed; review the '{extractor}' extractor",
            guidance=Guidance(
                action=f"Compare {url} with the selectors of the '{extractor}' extractor",
                checks=(
                    "Does the page still contain the expected elements?",
                    f"Add '{extractor}' to [extractors].omit_default to skip it meanwhile",
                ),
            ),
            context={"url": url, "extractor": extractor},
        )

    @classmethod
    def parse(
        cls, source: str, selector: str, raw_error: str, *, suggestion: str | None = None
    ) -> ActionableError:
        """Structured content (settings TOML, JSON-LD, model JSON) is malformed."""
        return cls(
            error=f"Cannot parse {selector} from {source}: {raw_error}",
            error_type=ErrorType.PARSE,
            service=source,
            suggestion=suggestion or f"Inspect the {selector} content produced by {source}",
            guidance=Guidance(action=f"Inspect {selector} in {source}"),
        )

    # -- scoring -------------------------------------------------------------

    @classmethod
    def scoring(cls, model: str, raw_error: str, *, suggestion: str | None = None) -> ActionableError:
        """The keyword model failed, is missing, or its arbiter is closed."""
        return cls(
            error=f"Keyword scoring failed for model '{model}': {raw_error}",
            error_type=ErrorType.SCORING,
            service="keyword-model",
            suggestion=suggestion or f"Check that Ollama is responsive and '{model}' is pulled",
            guidance=Guidance(
                action=f"Make model '{model}' available",
                command=f"ollama pull {model}",
                checks=("Is Ollama running? (ollama list)", f"Is '{model}' listed?"),
            ),
            steps=_steps("Run: ollama list", f"If '{model}' is missing: ollama pull {model}", "Re-run"),
            context={"model": model},
        )

    # -- cache ---------------------------------------------------------------

    @classmethod
    def cache_read(cls, path: str, raw_error: str, *, suggestion: str | None = None) -> ActionableError:
        """A cache entry exists but cannot be read or decoded."""
        return cls(
            error=f"Cannot read cache entry {path}: {raw_error}",
            error_type=ErrorType.CACHE,
            service="cache",
            suggestion=suggestion or f"Delete {path} to force a fresh fetch on the next run",
            guidance=Guidance(action="Remove the corrupt cache entry and re-run", command=f"rm {path}"),
            steps=_steps(f"Delete {path} (or: jobkeywords forget <url>)", "Re-run; the source is fetched again"),
            context={"path": path},
        )

    @classmethod
    def cache_write(cls, path: str, raw_error: str, *, suggestion: str | None = None) -> ActionableError:
        """A cache entry could not be persisted."""
        return cls(
            error=f"Cannot write cache entry {path}: {raw_error}",
            error_type=ErrorType.CACHE,
            service="cache",
            suggestion=suggestion or "Check permissions and free space for the cache directory",
            guidance=Guidance(
                action="Make the cache directory writable",
                checks=("Does the process own [cache].dir?", "Is the disk full?"),
            ),
            context={"path": path},
        )

    # -- fallback ------------------------------------------------------------

    @classmethod
    def unexpected(
        cls, service: str, operation: str, raw_error: str, *, suggestion: str | None = None
    ) -> ActionableError:
        """A failure nothing above anticipated."""
        return cls(
            error=f"Unexpected error in {service} while {operation}: {raw_error}",
            error_type=ErrorType.UNEXPECTED,
            service=service,
            suggestion=suggestion or "Re-run with --log-dir and --verbose and inspect the traceback",
            guidance=Guidance(action="Read the traceback in the run log"),
        )

    @classmethod
    def from_exception(
        cls, error: Exception, service: str, operation: str, *, suggestion: str | None = None
    ) -> ActionableError:
        """Classify an arbitrary exception.

        An :class:`ActionableError` is returned unchanged.  Timeouts and
        connection failures become CONNECTION; everything else is
        UNEXPECTED.  A caller-supplied *suggestion* always wins.
        """
        if isinstance(error, ActionableError):
            return error

        raw_error = str(error)
        lowered = raw_error.lower()
        if isinstance(error, (TimeoutError, ConnectionError)) or any(
            marker in lowered for marker in _CONNECTION_MARKERS
        ):
            return cls.connection(service, "", raw_error, suggestion=suggestion)
        return cls.unexpected(service, operation, raw_error, suggestion=suggestion)


_CONNECTION_MARKERS = ("timeout", "timed out", "connection refused", "unreachable", "resolve")
