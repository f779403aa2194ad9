"""Exportación del reporte a HTML.

Por qué está en adapters:
- HTML es un detalle de infraestructura (Jinja2).
- El Core solo conoce el agregado `PlacementReport`.
"""

from __future__ import annotations

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from core.domain.models import PlacementReport


_TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


def _get_env() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(_TEMPLATES_DIR)),
        autoescape=select_autoescape(["html", "xml"]),
    )


def render_report_html(*, report: PlacementReport) -> str:
    """Renderiza el reporte respetando el orden de hosts y aplicaciones."""

    template = _get_env().get_template("report.html")
    return template.render(
        report=report,
        host_count=len(report.hosts),
        instance_count=report.instance_count,
        generated_at=report.generated_at.strftime("%Y-%m-%d %H:%M:%S UTC"),
    )


def export_report_html(*, report: PlacementReport, output_path: Path) -> Path:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(render_report_html(report=report), encoding="utf-8")
    return output_path
