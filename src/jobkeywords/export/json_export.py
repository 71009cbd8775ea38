"""JSON export — one file per processed source.

Files are named ``<organization>_<title>_<key>.json`` (slugified, with
the first eight characters of the URL's cache key to keep names unique).
Sources without data are written as ``no-data_<key>.json`` holding
``{"source": <url>, "data": null}``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from jobkeywords.cache import cache_key
from jobkeywords.text import slugify

if TYPE_CHECKING:
    from jobkeywords.keywords import ExtractionResult

logger = logging.getLogger(__name__)


def file_stem(url: str, result: ExtractionResult | None) -> str:
    """Human-readable, collision-resistant filename stem for one source."""
    key = cache_key(url)[:8]
    if result is None:
        return f"no-data_{key}"
    parts = [slugify(result.organization, max_len=40), slugify(result.job_title, max_len=60)]
    named = "_".join(p for p in parts if p)
    return f"{named}_{key}" if named else key


class JsonExporter:
    """Writes each source's result as a JSON document.

    Usage::

        exporter = JsonExporter("output")
        path = exporter(url, result)
    """

    def __init__(self, output_dir: str) -> None:
        self.output_dir = Path(output_dir)

    def __call__(self, url: str, result: ExtractionResult | None) -> Path:
        return self.export(url, result)

    def export(self, url: str, result: ExtractionResult | None) -> Path:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        path = self.output_dir / f"{file_stem(url, result)}.json"

        data: dict[str, Any] | None = None
        if result is not None:
            data = result.to_dict()
            data["keywords"] = [
                {"text": kw.text, "weight": kw.weight} for kw in result.keywords.ranked()
            ]
        payload = {"source": url, "data": data}

        path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        logger.debug("Exported %s → %s", url, path)
        return path
