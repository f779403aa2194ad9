"""Contrato del cliente de la plataforma.

Por qué Protocol:
- Define un contrato estructural (duck typing) sin herencia rígida.
- El pipeline recibe el cliente como parámetro; en tests se sustituye por un
  fake en memoria sin tocar HTTP.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from core.domain.models import ApplicationPage, ProcessInstance


@runtime_checkable
class PlatformClient(Protocol):
    """Operaciones remotas que necesita el pipeline.

    Reglas de diseño:
    - Ambas son asíncronas porque hacen I/O (HTTP).
    - Los fallos se señalan con excepciones de `core.errors`, nunca con
      resultados vacíos.
    """

    async def list_applications_page(self, cursor: str | None = None) -> ApplicationPage:
        """Devuelve una página del catálogo; `cursor=None` pide la primera."""

        ...

    async def get_process_instances(self, app_guid: str, process_type: str) -> list[ProcessInstance]:
        """Devuelve las instancias del proceso `process_type` de la aplicación."""

        ...
