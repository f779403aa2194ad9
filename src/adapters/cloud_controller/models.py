"""Documentos JSON de Cloud Controller v3 y UAA.

Idea:
- Validamos solo los campos que usamos; el resto se ignora (`extra="ignore"`)
  para tolerar versiones nuevas de la API.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Link(BaseModel):
    model_config = ConfigDict(extra="ignore")

    href: str = Field(..., min_length=1)


class Pagination(BaseModel):
    model_config = ConfigDict(extra="ignore")

    total_results: int | None = None
    total_pages: int | None = None
    first: Link | None = None
    next: Link | None = None


class AppResource(BaseModel):
    model_config = ConfigDict(extra="ignore")

    guid: str = Field(..., min_length=1)
    name: str
    state: str | None = None


class AppListDocument(BaseModel):
    """Respuesta de `GET /v3/apps`."""

    model_config = ConfigDict(extra="ignore")

    pagination: Pagination
    resources: list[AppResource] = Field(default_factory=list)


class ProcessStatResource(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: str | None = None
    index: int | None = None
    state: str | None = None
    # Instancias DOWN/STARTING pueden venir sin host.
    host: str | None = None


class ProcessStatsDocument(BaseModel):
    """Respuesta de `GET /v3/apps/:guid/processes/:type/stats`."""

    model_config = ConfigDict(extra="ignore")

    resources: list[ProcessStatResource] = Field(default_factory=list)


class RootLinks(BaseModel):
    model_config = ConfigDict(extra="ignore")

    login: Link | None = None
    uaa: Link | None = None


class RootDocument(BaseModel):
    """Respuesta de `GET /` (descubrimiento de endpoints)."""

    model_config = ConfigDict(extra="ignore")

    links: RootLinks


class TokenDocument(BaseModel):
    """Respuesta de `POST /oauth/token` en UAA."""

    model_config = ConfigDict(extra="ignore")

    access_token: str = Field(..., min_length=1)
    token_type: str = "bearer"
    # Ausente o <= 0: el token vale hasta que la API lo rechace.
    expires_in: int | None = None
