"""Markdown keyword report export."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from jobkeywords.export.json_export import file_stem

if TYPE_CHECKING:
    from jobkeywords.keywords import ExtractionResult

logger = logging.getLogger(__name__)


class MarkdownExporter:
    """Renders one source's keywords as a Markdown table, heaviest first."""

    def __init__(self, output_dir: str) -> None:
        self.output_dir = Path(output_dir)

    def __call__(self, url: str, result: ExtractionResult | None) -> Path:
        return self.export(url, result)

    def export(self, url: str, result: ExtractionResult | None) -> Path:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        path = self.output_dir / f"{file_stem(url, result)}.md"
        path.write_text(self._render(url, result), encoding="utf-8")
        logger.debug("Exported %s → %s", url, path)
        return path

    def _render(self, url: str, result: ExtractionResult | None) -> str:
        lines: list[str] = []

        if result is None:
            lines.append("# No data")
            lines.append("")
            lines.append(f"**URL:** {url}  ")
            lines.append("")
            lines.append("No extractor found usable data on this page.")
            lines.append("")
            return "\n".join(lines)

        lines.append(f"# {result.job_title or 'Untitled posting'}")
        lines.append("")
        if result.organization:
            lines.append(f"**Organization:** {result.organization}  ")
        lines.append(f"**URL:** {url}  ")
        lines.append("")

        ranked = result.keywords.ranked()
        if not ranked:
            lines.append("No keywords found.")
            lines.append("")
            return "\n".join(lines)

        lines.append("## Keywords")
        lines.append("")
        lines.append("| # | Keyword | Weight |")
        lines.append("|---|---------|--------|")
        for rank, kw in enumerate(ranked, start=1):
            lines.append(f"| {rank} | {kw.text} | {kw.weight:.2f} |")
        lines.append("")

        return "\n".join(lines)
