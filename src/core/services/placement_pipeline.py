"""Placement report orchestration.

This module holds the whole retrieval -> aggregation -> ordering flow. The
platform client is always passed in explicitly, so the same pipeline backs the
web listener, the CLI and the tests.

The operation is all-or-nothing: it either returns a complete
`PlacementReport` or raises a single `PlacementError`. The first failure
cancels every outstanding remote call.
"""

from __future__ import annotations

import asyncio
import ipaddress
import logging
from typing import Iterable, Sequence

from core.domain.models import (
    Application,
    HostReport,
    PlacementRecord,
    PlacementReport,
)
from core.errors import MalformedResponseError, ReportTimeoutError
from core.interfaces.platform import PlatformClient

logger = logging.getLogger(__name__)

DEFAULT_PROCESS_TYPE = "web"

# ::ffff:0:0/96, the 16-byte form an IPv4 address takes when compared with IPv6.
_IPV4_MAPPED_PREFIX = bytes(10) + b"\xff\xff"


async def list_applications(client: PlatformClient) -> list[Application]:
    """Walk every page of the application catalog.

    Cursors are threaded through untouched. A cursor the backend already
    handed out means the pagination would revisit a page, so it is rejected.
    The first page is requested without a cursor; its own address, when the
    backend advertises one, counts as already seen.
    """

    applications: list[Application] = []
    seen_cursors: set[str] = set()
    cursor: str | None = None
    pages = 0

    while True:
        page = await client.list_applications_page(cursor)
        pages += 1
        applications.extend(page.applications)
        if pages == 1 and page.first_cursor is not None:
            seen_cursors.add(page.first_cursor)

        if page.next_cursor is None:
            break
        if page.next_cursor in seen_cursors:
            raise MalformedResponseError(f"pagination cursor repeated: {page.next_cursor!r}")
        seen_cursors.add(page.next_cursor)
        cursor = page.next_cursor

    logger.debug("listed %d applications across %d pages", len(applications), pages)
    return applications


async def resolve_placements(
    client: PlatformClient,
    app: Application,
    *,
    process_type: str = DEFAULT_PROCESS_TYPE,
) -> list[PlacementRecord]:
    """One `PlacementRecord` per instance of the app's `process_type` process."""

    instances = await client.get_process_instances(app.guid, process_type)
    return [
        PlacementRecord(
            host=instance.host,
            app_name=app.name,
            instance_index=instance.index,
            state=instance.state,
        )
        for instance in instances
    ]


class HostAggregator:
    """Folds placement records into host -> application names.

    Repeated (host, app) pairs are kept: each record is one instance.
    """

    def __init__(self) -> None:
        self._hosts: dict[str, list[str]] = {}

    def __len__(self) -> int:
        return len(self._hosts)

    def add(self, records: Iterable[PlacementRecord]) -> None:
        for record in records:
            self._hosts.setdefault(record.host, []).append(record.app_name)

    def results(self) -> list[HostReport]:
        """Per-host reports with names sorted; host order is arbitrary."""

        return [HostReport(host=host, apps=sorted(apps)) for host, apps in self._hosts.items()]


def host_sort_key(host: str) -> bytes:
    """16-byte address of `host`, or `b""` when it is not an IP address.

    IPv4 addresses are mapped into IPv6 so both families compare on the same
    scale. Scoped IPv6 literals (`fe80::1%eth0`) are not plain addresses.
    """

    if "%" in host:
        return b""
    try:
        address = ipaddress.ip_address(host)
    except ValueError:
        return b""
    if address.version == 4:
        return _IPV4_MAPPED_PREFIX + address.packed
    return address.packed


def sort_host_reports(reports: Iterable[HostReport]) -> list[HostReport]:
    """Order reports by address; unparsable hosts first.

    Hosts that share the empty key fall back to their raw identifier.
    """

    return sorted(reports, key=lambda r: (host_sort_key(r.host), r.host))


async def _resolve_all(
    client: PlatformClient,
    applications: Sequence[Application],
    aggregator: HostAggregator,
    *,
    max_concurrency: int,
    process_type: str,
) -> None:
    semaphore = asyncio.Semaphore(max(1, max_concurrency))

    async def resolve_one(app: Application) -> list[PlacementRecord]:
        async with semaphore:
            return await resolve_placements(client, app, process_type=process_type)

    tasks = [asyncio.create_task(resolve_one(app)) for app in applications]
    try:
        # The aggregator is only touched here, in the caller's task.
        for finished in asyncio.as_completed(tasks):
            aggregator.add(await finished)
    finally:
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)


async def _build(
    client: PlatformClient,
    *,
    max_concurrency: int,
    process_type: str,
) -> PlacementReport:
    applications = await list_applications(client)

    aggregator = HostAggregator()
    await _resolve_all(
        client,
        applications,
        aggregator,
        max_concurrency=max_concurrency,
        process_type=process_type,
    )

    hosts = sort_host_reports(aggregator.results())
    logger.info("placement report ready: %d applications on %d hosts", len(applications), len(hosts))
    return PlacementReport(hosts=hosts, application_count=len(applications))


async def build_placement_report(
    client: PlatformClient,
    *,
    max_concurrency: int = 8,
    timeout_seconds: float | None = None,
    process_type: str = DEFAULT_PROCESS_TYPE,
) -> PlacementReport:
    """Produce the current placement report.

    Args:
        client: platform handle, created once by the caller.
        max_concurrency: process-stats calls allowed in flight at once.
            `1` gives the fully sequential behaviour.
        timeout_seconds: deadline for the whole operation; `None` disables it.
        process_type: process whose instances are placed (normally "web").

    Raises:
        PlacementError: any listing or resolution failure, or the deadline.
    """

    try:
        return await asyncio.wait_for(
            _build(client, max_concurrency=max_concurrency, process_type=process_type),
            timeout=timeout_seconds,
        )
    except asyncio.TimeoutError as exc:
        raise ReportTimeoutError(
            f"placement report did not finish within {timeout_seconds} seconds"
        ) from exc
