"""Exportación JSON del reporte.

Por qué JSON:
- Interoperabilidad con scripts de operación (jq, dashboards).
- Las claves de cada host se ordenan, pero la lista de hosts conserva el
  orden por dirección del reporte.
"""

from __future__ import annotations

import json
from pathlib import Path

from core.domain.models import PlacementReport


def report_to_json(report: PlacementReport) -> str:
    payload = report.model_dump(mode="json")
    payload["instance_count"] = report.instance_count
    return json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n"


def export_report_json(*, report: PlacementReport, output_path: Path) -> Path:
    """Exporta `PlacementReport` a JSON UTF-8 con formato estable."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(report_to_json(report), encoding="utf-8")
    return output_path
