"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from adapters.cloud_controller import CloudControllerClient
from core.config import AppSettings, write_user_env_vars
from core.errors import ConfigurationError, PlacementError

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_platform(settings: AppSettings) -> tuple[bool, str]:
    """Authenticate and fetch the first application page."""

    try:
        async with CloudControllerClient.from_settings(settings) as client:
            page = await client.list_applications_page()
        more = " (more pages)" if page.next_cursor else ""
        return True, f"{len(page.applications)} applications on first page{more}"
    except PlacementError as exc:
        return False, str(exc)


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="CF Placements Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    # Config
    config_ok = True
    try:
        table.add_row("API endpoint", "OK", settings.resolve_api_url())
    except ConfigurationError as exc:
        config_ok = False
        table.add_row("API endpoint", "FAIL", str(exc))
    table.add_row("CF_USER", "OK" if settings.cf_user else "FAIL", settings.cf_user or "not set")
    table.add_row("CF_PASSWORD", "OK" if settings.cf_password else "FAIL", "set" if settings.cf_password else "not set")
    config_ok = config_ok and bool(settings.cf_user and settings.cf_password)

    table.add_row("TLS validation", "OFF" if settings.skip_tls_validation else "ON", "")
    table.add_row("Concurrency", "OK", str(settings.max_concurrency))

    # Connectivity + auth
    if config_ok:
        ok_api, detail_api = asyncio.run(_check_platform(settings))
        table.add_row("Platform API", "OK" if ok_api else "FAIL", detail_api)
    else:
        table.add_row("Platform API", "SKIPPED", "incomplete configuration")

    _console.print(table)

    if not config_ok:
        _console.print(
            "\n[yellow]Note:[/yellow] run `cf-placements doctor setup-cf` to store the endpoint and credentials."
        )
        raise typer.Exit(code=1)


@app.command(name="setup-cf")
def setup_cf() -> None:
    """Interactive platform setup (stores config in the user config .env)."""

    api_url = typer.prompt("Cloud Controller API URL", default="", show_default=False).strip()
    user = typer.prompt("CF user").strip()
    password = typer.prompt("CF password", hide_input=True, confirmation_prompt=False).strip()

    if not api_url or not user or not password:
        raise typer.BadParameter("api url, user and password are required")

    env_path = write_user_env_vars(
        {
            "CF_API": api_url,
            "CF_USER": user,
            "CF_PASSWORD": password,
        }
    )

    _console.print(f"[green]Saved platform config to:[/green] {env_path}")
