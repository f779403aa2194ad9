"""Errores del Core.

Por qué una jerarquía propia:
- Los adaptadores traducen fallos de httpx/pydantic a estos tipos, así el
  pipeline y las capas de presentación no dependen de librerías de I/O.
- Un único `PlacementError` permite a la CLI y al servidor web capturar
  "la operación falló" sin conocer el detalle.
"""

from __future__ import annotations


class PlacementError(Exception):
    """Base de todos los fallos de generación del reporte."""


class TransportOrAuthError(PlacementError):
    """No se pudo llegar a la API de la plataforma o autenticarse contra ella."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class MalformedResponseError(PlacementError):
    """La plataforma devolvió datos que el cliente no sabe interpretar."""


class ConfigurationError(PlacementError):
    """Falta configuración obligatoria (endpoint o credenciales).

    Es fatal: el proceso no debe empezar a servir peticiones.
    """


class ReportTimeoutError(PlacementError):
    """La operación completa superó su tiempo máximo."""
