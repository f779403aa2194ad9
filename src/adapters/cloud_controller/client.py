"""Cliente de Cloud Controller v3 (implementa `PlatformClient`).

Responsabilidad:
- Autenticarse contra UAA (password grant) descubriendo el login endpoint en
  el documento raíz de la API.
- Listar aplicaciones página a página y leer las stats de un proceso.
- Traducir fallos de httpx/pydantic a `TransportOrAuthError` y
  `MalformedResponseError`. No reintenta: el pipeline decide.

Se crea una vez al arrancar y se reutiliza entre peticiones; el token se
renueva antes de expirar.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from adapters.cloud_controller.models import (
    AppListDocument,
    ProcessStatsDocument,
    RootDocument,
    TokenDocument,
)
from adapters.http_client import build_async_client
from core.config import AppSettings
from core.domain.models import Application, ApplicationPage, ProcessInstance
from core.errors import MalformedResponseError, TransportOrAuthError
from core.interfaces.platform import PlatformClient

logger = logging.getLogger(__name__)

_ModelT = TypeVar("_ModelT", bound=BaseModel)

# El CLI oficial `cf` se registra en UAA como cliente público "cf" sin secreto.
_UAA_CLIENT_ID = "cf"
_UAA_CLIENT_SECRET = ""
_TOKEN_REFRESH_MARGIN_SECONDS = 30.0


def _parse(model: type[_ModelT], data: Any, *, what: str) -> _ModelT:
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise MalformedResponseError(f"unexpected {what} document: {exc}") from exc


class CloudControllerClient(PlatformClient):
    """Acceso asíncrono a la API v3 de Cloud Foundry."""

    def __init__(
        self,
        *,
        api_url: str,
        username: str,
        password: str,
        settings: AppSettings | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._api_url = api_url.rstrip("/")
        self._username = username
        self._password = password
        self._http = http_client or build_async_client(self._settings)
        self._access_token: str | None = None
        # None: sin caducidad conocida.
        self._token_refresh_at: float | None = None
        self._auth_lock = asyncio.Lock()

    @classmethod
    def from_settings(
        cls,
        settings: AppSettings,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> "CloudControllerClient":
        """Construye el cliente desde la configuración; falla con `ConfigurationError`."""

        creds = settings.require_platform()
        return cls(
            api_url=creds.api_url,
            username=creds.username,
            password=creds.password,
            settings=settings,
            http_client=http_client,
        )

    @property
    def api_url(self) -> str:
        return self._api_url

    async def __aenter__(self) -> "CloudControllerClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # --- HTTP -----------------------------------------------------------

    async def _send(self, method: str, url: str, **kwargs: Any) -> Any:
        try:
            resp = await self._http.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise TransportOrAuthError(f"{method} {url} failed: {exc}") from exc

        if resp.status_code in (401, 403):
            raise TransportOrAuthError(
                f"{method} {url} was rejected (HTTP {resp.status_code})",
                status_code=resp.status_code,
            )
        if resp.status_code >= 400:
            raise TransportOrAuthError(
                f"{method} {url} returned HTTP {resp.status_code}",
                status_code=resp.status_code,
            )

        try:
            return resp.json()
        except ValueError as exc:
            raise MalformedResponseError(f"{method} {url} did not return JSON") from exc

    async def _get_authorized(self, url: str, *, params: dict[str, Any] | None = None) -> Any:
        token = await self._ensure_token()
        return await self._send(
            "GET",
            url,
            params=params,
            headers={"Authorization": f"Bearer {token}"},
        )

    # --- Autenticación --------------------------------------------------

    async def _discover_login_url(self) -> str:
        data = await self._send("GET", f"{self._api_url}/")
        root = _parse(RootDocument, data, what="API root")
        link = root.links.login or root.links.uaa
        if link is None:
            raise MalformedResponseError("API root does not advertise a login endpoint")
        return link.href.rstrip("/")

    async def authenticate(self) -> None:
        """Obtiene un token nuevo (password grant)."""

        login_url = await self._discover_login_url()
        data = await self._send(
            "POST",
            f"{login_url}/oauth/token",
            data={
                "grant_type": "password",
                "username": self._username,
                "password": self._password,
            },
            auth=(_UAA_CLIENT_ID, _UAA_CLIENT_SECRET),
        )
        token = _parse(TokenDocument, data, what="token")
        self._access_token = token.access_token
        if token.expires_in is None or token.expires_in <= 0:
            self._token_refresh_at = None
        else:
            margin = min(_TOKEN_REFRESH_MARGIN_SECONDS, token.expires_in / 2)
            self._token_refresh_at = time.monotonic() + token.expires_in - margin
        logger.debug("authenticated against %s (expires_in=%s)", login_url, token.expires_in)

    def _token_is_fresh(self) -> bool:
        if self._access_token is None:
            return False
        if self._token_refresh_at is None:
            return True
        return time.monotonic() < self._token_refresh_at

    async def _ensure_token(self) -> str:
        # Con fan-out concurrente solo una tarea renueva el token.
        async with self._auth_lock:
            if not self._token_is_fresh():
                await self.authenticate()
        assert self._access_token is not None
        return self._access_token

    # --- PlatformClient -------------------------------------------------

    async def list_applications_page(self, cursor: str | None = None) -> ApplicationPage:
        if cursor is None:
            data = await self._get_authorized(
                f"{self._api_url}/v3/apps",
                params={"per_page": self._settings.page_size},
            )
        else:
            data = await self._get_authorized(cursor)

        doc = _parse(AppListDocument, data, what="application list")
        next_link = doc.pagination.next
        first_link = doc.pagination.first
        return ApplicationPage(
            applications=[Application(guid=r.guid, name=r.name) for r in doc.resources],
            next_cursor=next_link.href if next_link else None,
            first_cursor=first_link.href if first_link else None,
        )

    async def get_process_instances(self, app_guid: str, process_type: str) -> list[ProcessInstance]:
        data = await self._get_authorized(
            f"{self._api_url}/v3/apps/{app_guid}/processes/{process_type}/stats"
        )
        doc = _parse(ProcessStatsDocument, data, what="process stats")
        return [
            ProcessInstance(index=r.index, state=r.state, host=r.host or "")
            for r in doc.resources
        ]
