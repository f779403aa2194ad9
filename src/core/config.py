"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Permite que adaptadores (HTTP/Cloud Controller) lean config de forma consistente.

Las credenciales usan los nombres habituales de Cloud Foundry (`CF_API`,
`CF_USER`, `CF_PASSWORD`, `PORT`, `VCAP_APPLICATION`); el resto de ajustes
lleva el prefijo `CF_PLACEMENTS_`.
"""

from __future__ import annotations

import json
import os
import sys
from dataclasses import dataclass
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.errors import ConfigurationError


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "cf-placements"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "cf-placements"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "cf-placements"
    return Path.home() / ".config" / "cf-placements"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key:
            data[key] = value
    return data


def write_user_env_vars(values: dict[str, str], *, env_path: Path | None = None) -> Path:
    """Escribe/actualiza variables en el .env global del usuario."""

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# cf-placements user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


@dataclass(frozen=True)
class PlatformCredentials:
    """Datos mínimos para abrir sesión contra la API de la plataforma."""

    api_url: str
    username: str
    password: str


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el Core con lógica.
    - Un único contrato de configuración para CLI, servidor web y adapters.
    """

    model_config = SettingsConfigDict(
        env_prefix="CF_PLACEMENTS_",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    # Plataforma (nombres estándar de Cloud Foundry, sin prefijo)
    cf_api: str | None = Field(
        default=None,
        validation_alias=AliasChoices("CF_API", "cf_api"),
        description="Endpoint de la API (Cloud Controller). Tiene prioridad sobre VCAP_APPLICATION.",
    )
    vcap_application: str | None = Field(
        default=None,
        validation_alias=AliasChoices("VCAP_APPLICATION", "vcap_application"),
        description="Documento JSON que Cloud Foundry inyecta en cada app; se usa su campo `cf_api`.",
    )
    cf_user: str | None = Field(
        default=None,
        validation_alias=AliasChoices("CF_USER", "cf_user"),
        description="Usuario para el password grant de UAA.",
    )
    cf_password: str | None = Field(
        default=None,
        validation_alias=AliasChoices("CF_PASSWORD", "cf_password"),
        description="Password para el password grant de UAA.",
    )
    port: int = Field(
        default=8080,
        ge=1,
        le=65535,
        validation_alias=AliasChoices("PORT", "port"),
        description="Puerto del servidor HTTP.",
    )

    # HTTP
    http_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Timeout por request (segundos).",
    )
    user_agent: str = Field(
        default="cf-placements/0.1",
        min_length=1,
        description="User-Agent para las peticiones a la plataforma.",
    )
    skip_tls_validation: bool = Field(
        default=True,
        description="No validar certificados TLS de la API (entornos con CA propia).",
    )

    # Pipeline
    report_timeout_seconds: float = Field(
        default=120.0,
        gt=0,
        description="Tiempo máximo para generar un reporte completo (segundos).",
    )
    max_concurrency: int = Field(
        default=8,
        ge=1,
        le=64,
        description="Llamadas de process stats simultáneas (respeta rate limits de la API).",
    )
    page_size: int = Field(
        default=50,
        ge=1,
        le=5000,
        description="Tamaño de página al listar aplicaciones.",
    )
    process_type: str = Field(
        default="web",
        min_length=1,
        description="Tipo de proceso cuyas instancias se ubican.",
    )

    log_level: str = Field(
        default="INFO",
        description="Nivel de logging (DEBUG, INFO, WARNING, ERROR).",
    )

    def resolve_api_url(self) -> str:
        """Devuelve el endpoint de la API: `CF_API` o el `cf_api` de VCAP_APPLICATION."""

        if self.cf_api and self.cf_api.strip():
            return self.cf_api.strip().rstrip("/")

        if self.vcap_application:
            try:
                vcap = json.loads(self.vcap_application)
            except json.JSONDecodeError as exc:
                raise ConfigurationError(f"failed to read VCAP_APPLICATION: {exc}") from exc
            endpoint = vcap.get("cf_api") if isinstance(vcap, dict) else None
            if isinstance(endpoint, str) and endpoint.strip():
                return endpoint.strip().rstrip("/")

        raise ConfigurationError("failed to read CF_API (or cf_api from VCAP_APPLICATION)")

    def require_platform(self) -> PlatformCredentials:
        """Valida la configuración obligatoria de arranque.

        Lanza `ConfigurationError` si falta endpoint, usuario o password.
        """

        api_url = self.resolve_api_url()
        if not self.cf_user:
            raise ConfigurationError("failed to read CF_USER")
        if not self.cf_password:
            raise ConfigurationError("failed to read CF_PASSWORD")
        return PlatformCredentials(api_url=api_url, username=self.cf_user, password=self.cf_password)
