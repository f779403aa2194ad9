"""Shared pytest fixtures for cf-placements tests.

Provides:
- A clean environment (no CF_* variables leaking from the host)
- An in-memory `PlatformClient` fake with per-call bookkeeping
- Settings that ignore `.env` files
"""

from __future__ import annotations

import asyncio
import os

import pytest

from core.config import AppSettings
from core.domain.models import Application, ApplicationPage, ProcessInstance
from core.errors import TransportOrAuthError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in list(os.environ):
        if key.upper().startswith("CF_") or key.upper() in ("VCAP_APPLICATION", "PORT"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(
        _env_file=None,
        cf_api="https://api.example.com",
        cf_user="admin",
        cf_password="secret",
        max_concurrency=4,
        report_timeout_seconds=5.0,
    )


class FakePlatformClient:
    """Pages of applications plus per-app instances, served from memory.

    Cursors are `"page-<n>"`; `fail_pages` / `fail_apps` raise
    `TransportOrAuthError`; `delays` makes a stats call sleep first.
    """

    def __init__(
        self,
        pages: list[list[Application]],
        instances: dict[str, list[ProcessInstance]] | None = None,
        *,
        fail_pages: set[int] | None = None,
        fail_apps: set[str] | None = None,
        delays: dict[str, float] | None = None,
    ) -> None:
        self.pages = pages or [[]]
        self.instances = instances or {}
        self.fail_pages = fail_pages or set()
        self.fail_apps = fail_apps or set()
        self.delays = delays or {}
        self.page_calls: list[str | None] = []
        self.stats_calls: list[tuple[str, str]] = []
        self.cancelled: list[str] = []

    async def list_applications_page(self, cursor: str | None = None) -> ApplicationPage:
        self.page_calls.append(cursor)
        index = 0 if cursor is None else int(cursor.removeprefix("page-"))
        if index in self.fail_pages:
            raise TransportOrAuthError(f"page {index} unavailable", status_code=502)
        next_cursor = f"page-{index + 1}" if index + 1 < len(self.pages) else None
        return ApplicationPage(applications=self.pages[index], next_cursor=next_cursor)

    async def get_process_instances(self, app_guid: str, process_type: str) -> list[ProcessInstance]:
        self.stats_calls.append((app_guid, process_type))
        try:
            await asyncio.sleep(self.delays.get(app_guid, 0))
        except asyncio.CancelledError:
            self.cancelled.append(app_guid)
            raise
        if app_guid in self.fail_apps:
            raise TransportOrAuthError(f"stats for {app_guid} unavailable")
        return list(self.instances.get(app_guid, []))


def make_app(guid: str, name: str | None = None) -> Application:
    return Application(guid=guid, name=name or guid.upper())


def at(*hosts: str) -> list[ProcessInstance]:
    return [ProcessInstance(index=i, state="RUNNING", host=h) for i, h in enumerate(hosts)]


@pytest.fixture
def example_client() -> FakePlatformClient:
    """A on 10.0.0.5; B on 10.0.0.2 and 10.0.0.5."""

    return FakePlatformClient(
        pages=[[make_app("guid-a", "A"), make_app("guid-b", "B")]],
        instances={
            "guid-a": at("10.0.0.5"),
            "guid-b": at("10.0.0.2", "10.0.0.5"),
        },
    )
