"""Live crash pings provider: daily ping tables and per-ping stacks from crash-pings.mozilla.org."""

from __future__ import annotations

import logging

import httpx

from app.config import Settings
from core.crash_ids import validate_crash_id
from core.models import RawCrashPingsResponse, RawCrashPingStack
from integrations.base import CrashPingsProvider
from integrations.providers.http import HTTPProvider

logger = logging.getLogger(__name__)


class CrashPingsClient(CrashPingsProvider, HTTPProvider):
    """No token is sent; the ping data is public.

    A day's table is one large gzip-encoded document, decoded by httpx.
    """

    provider_key = "crash_pings"

    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None) -> None:
        HTTPProvider.__init__(
            self, settings.crash_pings_url, settings.request_timeout, transport
        )

    async def get_ping_data(self, date: str) -> RawCrashPingsResponse:
        logger.info("Fetching crash ping data for %s", date)
        return await self._get_json(
            f"/ping_data/{date}",
            RawCrashPingsResponse,
            not_found=(
                f"No crash ping data for date {date}. "
                "Data is available from September 2024 onwards."
            ),
            not_ready=(
                f"Crash ping data for {date} is not available yet (HTTP 202). "
                "Today's data typically appears around 04:00 UTC."
            ),
        )

    async def get_stack(self, date: str, crash_id: str) -> RawCrashPingStack:
        validate_crash_id(crash_id)
        logger.info("Fetching crash ping stack %s on %s", crash_id, date)
        return await self._get_json(
            f"/stack/{date}/{crash_id}",
            RawCrashPingStack,
            not_found=f"Stack not found for crash ping {crash_id} on {date}",
        )
