"""CLI principal (Typer).

Comandos:
- `serve`: arranca el servidor HTTP con el reporte en `/`.
- `report`: genera el reporte una vez y lo imprime (tabla, JSON o HTML).
- `doctor`: diagnósticos y configuración de credenciales.

La configuración obligatoria se valida antes de servir: sin credenciales el
proceso termina con código 1.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer
import uvicorn
from rich.console import Console

from adapters.cloud_controller import CloudControllerClient
from adapters.json_exporter import export_report_json, report_to_json
from adapters.report_exporter import export_report_html
from cli import doctor
from cli.ui_components import build_placements_table, print_banner
from core.config import AppSettings
from core.domain.models import PlacementReport
from core.errors import ConfigurationError, PlacementError
from core.logging_setup import configure_logging
from core.services.placement_pipeline import build_placement_report
from web.app import create_app

app = typer.Typer(no_args_is_help=True, help="Application-to-host placement report for Cloud Foundry.")
app.add_typer(doctor.app, name="doctor")

_console = Console()
_err_console = Console(stderr=True)


def _load_settings() -> AppSettings:
    settings = AppSettings()
    configure_logging(settings.log_level, console=_err_console)
    try:
        settings.require_platform()
    except ConfigurationError as exc:
        _err_console.print(f"[red]Configuration error:[/red] {exc}")
        raise typer.Exit(code=1) from exc
    return settings


async def _generate(settings: AppSettings) -> PlacementReport:
    async with CloudControllerClient.from_settings(settings) as client:
        return await build_placement_report(
            client,
            max_concurrency=settings.max_concurrency,
            timeout_seconds=settings.report_timeout_seconds,
            process_type=settings.process_type,
        )


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Interfaz en la que escuchar."),
    port: Optional[int] = typer.Option(None, help="Puerto (por defecto PORT o 8080)."),
) -> None:
    """Sirve el reporte HTML en `/` y JSON en `/api/placements`."""

    settings = _load_settings()
    uvicorn.run(create_app(settings), host=host, port=port or settings.port, log_config=None)


@app.command()
def report(
    as_json: bool = typer.Option(False, "--json", help="Imprime el reporte como JSON."),
    json_path: Optional[Path] = typer.Option(None, "--export-json", help="Guarda el reporte JSON en esta ruta."),
    html_path: Optional[Path] = typer.Option(None, "--export-html", help="Guarda el reporte HTML en esta ruta."),
    no_banner: bool = typer.Option(False, "--no-banner", help="No mostrar el banner."),
) -> None:
    """Genera el reporte de placements una vez."""

    settings = _load_settings()
    try:
        result = asyncio.run(_generate(settings))
    except PlacementError as exc:
        _err_console.print(f"[red]Report failed:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    if as_json:
        typer.echo(report_to_json(result), nl=False)
    else:
        if not no_banner:
            print_banner(_console)
        _console.print(build_placements_table(result))

    if json_path:
        written = export_report_json(report=result, output_path=json_path)
        _err_console.print(f"[green]JSON saved to:[/green] {written}")
    if html_path:
        written = export_report_html(report=result, output_path=html_path)
        _err_console.print(f"[green]HTML saved to:[/green] {written}")


def run() -> None:
    app()


if __name__ == "__main__":
    run()
