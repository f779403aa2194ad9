"""Servidor HTTP del reporte de placements.

El cliente de la plataforma se crea una vez en el lifespan (o se inyecta en
tests) y vive en `app.state`; cada petición genera un reporte nuevo.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import HTMLResponse, JSONResponse

from adapters.cloud_controller import CloudControllerClient
from adapters.report_exporter import render_report_html
from core.config import AppSettings
from core.domain.models import PlacementReport
from core.errors import PlacementError
from core.interfaces.platform import PlatformClient
from core.services.placement_pipeline import build_placement_report

logger = logging.getLogger(__name__)


def get_settings(request: Request) -> AppSettings:
    return request.app.state.settings


def get_platform_client(request: Request) -> PlatformClient:
    return request.app.state.platform_client


async def _current_report(settings: AppSettings, client: PlatformClient) -> PlacementReport:
    try:
        return await build_placement_report(
            client,
            max_concurrency=settings.max_concurrency,
            timeout_seconds=settings.report_timeout_seconds,
            process_type=settings.process_type,
        )
    except PlacementError as exc:
        logger.error("placement report failed: %s", exc)
        raise HTTPException(status_code=500, detail="Failed to build placement report") from exc


def create_app(
    settings: AppSettings | None = None,
    *,
    platform_client: PlatformClient | None = None,
) -> FastAPI:
    """Crea la app FastAPI.

    Sin `platform_client`, el lifespan construye un `CloudControllerClient`
    desde `settings` (falla con `ConfigurationError` si faltan credenciales)
    y lo cierra al apagar.
    """

    settings = settings or AppSettings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if platform_client is not None:
            yield
            return
        async with CloudControllerClient.from_settings(settings) as client:
            app.state.platform_client = client
            logger.info("serving placements for %s", client.api_url)
            yield

    app = FastAPI(
        title="CF Application Placements",
        description="Which application instances run on which host",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    if platform_client is not None:
        app.state.platform_client = platform_client

    @app.get("/", response_class=HTMLResponse, tags=["placements"])
    async def index(
        settings: AppSettings = Depends(get_settings),
        client: PlatformClient = Depends(get_platform_client),
    ) -> HTMLResponse:
        report = await _current_report(settings, client)
        return HTMLResponse(render_report_html(report=report))

    @app.get("/api/placements", tags=["placements"])
    async def placements(
        settings: AppSettings = Depends(get_settings),
        client: PlatformClient = Depends(get_platform_client),
    ) -> JSONResponse:
        report = await _current_report(settings, client)
        payload = report.model_dump(mode="json")
        payload["instance_count"] = report.instance_count
        return JSONResponse(payload)

    @app.get("/healthz", tags=["health"])
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    return app
