"""Mock crash pings provider: implements CrashPingsProvider with scenario fixtures."""

from __future__ import annotations

from app.config import Settings
from core.crash_ids import validate_crash_id
from core.exceptions import NotFoundError
from core.models import RawCrashPingsResponse, RawCrashPingStack
from integrations.base import CrashPingsProvider
from integrations.mock.base import MockBase


class MockCrashPings(CrashPingsProvider, MockBase):
    provider_key = "crash_pings"

    def __init__(self, settings: Settings) -> None:
        MockBase.__init__(self, settings)

    async def get_ping_data(self, date: str) -> RawCrashPingsResponse:
        await self._simulate_delay()
        by_date = self._get("ping_data", {})
        if date not in by_date:
            raise NotFoundError(self.provider_key, f"No crash ping data for date {date}")
        return self._parse(RawCrashPingsResponse, by_date[date])

    async def get_stack(self, date: str, crash_id: str) -> RawCrashPingStack:
        validate_crash_id(crash_id)
        await self._simulate_delay()
        stacks = self._get("stacks", {}).get(date, {})
        if crash_id not in stacks:
            raise NotFoundError(
                self.provider_key, f"Stack not found for crash ping {crash_id} on {date}"
            )
        return self._parse(RawCrashPingStack, stacks[crash_id])
