"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Nos da validación estricta y documentación autocontenida (Field) sin acoplar
  el Core a librerías de I/O.
- Facilita serializar el reporte (JSON/HTML) sin modelos intermedios.

Nota:
- Estos modelos describen *qué* es la información, no *cómo* se obtiene.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Application(BaseModel):
    """Unidad desplegable de la plataforma."""

    guid: str = Field(
        ...,
        min_length=1,
        description="Identificador opaco y único de la aplicación.",
    )
    name: str = Field(
        ...,
        description="Nombre visible; no es único entre aplicaciones.",
    )


class ApplicationPage(BaseModel):
    """Una página del catálogo de aplicaciones."""

    applications: list[Application] = Field(default_factory=list)
    next_cursor: str | None = Field(
        default=None,
        description="Cursor opaco de la siguiente página; `None` indica que no hay más.",
    )
    first_cursor: str | None = Field(
        default=None,
        description="Cursor que direcciona la primera página, si el backend lo anuncia.",
    )


class ProcessInstance(BaseModel):
    """Instancia en ejecución de un proceso, tal como la reporta la plataforma."""

    index: int | None = None
    state: str | None = None
    host: str = Field(
        default="",
        description="Host que ocupa la instancia (dirección IP textual, no validada).",
    )


class PlacementRecord(BaseModel):
    host: str
    app_name: str
    instance_index: int | None = None
    state: str | None = None


class HostReport(BaseModel):
    """Aplicaciones ubicadas en un host, ordenadas por nombre."""

    host: str
    apps: list[str] = Field(default_factory=list)


class PlacementReport(BaseModel):
    """Agregado final: un `HostReport` por host distinto, en orden de dirección.

    Se construye completo o no se construye: el pipeline nunca devuelve un
    reporte parcial.
    """

    hosts: list[HostReport] = Field(default_factory=list)
    application_count: int = Field(
        default=0,
        ge=0,
        description="Aplicaciones listadas en la plataforma al generar el reporte.",
    )
    generated_at: datetime = Field(
        default_factory=_utcnow,
        description="Momento de generación del reporte (UTC).",
    )

    @property
    def instance_count(self) -> int:
        return sum(len(h.apps) for h in self.hosts)
