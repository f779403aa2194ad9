"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en múltiples comandos.
"""

from __future__ import annotations

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import PlacementReport


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida.

    Por qué aquí:
    - Evita dependencias circulares (main <-> doctor).
    - Permite desactivar banner en modos no interactivos (JSON/pipelines).
    """

    title = Text("CF Placements", style="bold cyan")
    subtitle = Text("Aplicaciones • Hosts • Cloud Foundry", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_placements_table(report: PlacementReport) -> Table:
    """Una fila por host, en el orden del reporte."""

    table = Table(title="CF Application Placements")
    table.add_column("Host", style="cyan", no_wrap=True)
    table.add_column("Instances", style="green", justify="right")
    table.add_column("Applications", style="white")
    for entry in report.hosts:
        table.add_row(entry.host or "(unknown)", str(len(entry.apps)), ", ".join(entry.apps))
    table.caption = (
        f"{len(report.hosts)} hosts · {report.instance_count} instances · "
        f"{report.application_count} applications"
    )
    return table
