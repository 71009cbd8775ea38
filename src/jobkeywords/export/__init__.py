"""Export layer — per-source JSON and Markdown keyword reports."""

from jobkeywords.export.json_export import JsonExporter
from jobkeywords.export.markdown import MarkdownExporter

_EXPORTERS = {
    "json": JsonExporter,
    "markdown": MarkdownExporter,
}

EXPORT_FORMATS = tuple(_EXPORTERS)


def exporter_for(fmt: str, output_dir: str) -> JsonExporter | MarkdownExporter:
    """Return the exporter for *fmt* writing under *output_dir*."""
    if fmt not in _EXPORTERS:
        msg = f"Unknown export format: '{fmt}'"
        raise ValueError(msg)
    return _EXPORTERS[fmt](output_dir)


__all__ = ["EXPORT_FORMATS", "JsonExporter", "MarkdownExporter", "exporter_for"]
