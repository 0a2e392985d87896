"""Mock correlations provider: implements CorrelationProvider with scenario fixtures."""

from __future__ import annotations

from app.config import Settings
from core.exceptions import NotFoundError
from core.models import RawCorrelationResponse, RawCorrelationTotals
from integrations.base import CorrelationProvider
from integrations.mock.base import MockBase


class MockCorrelations(CorrelationProvider, MockBase):
    provider_key = "correlations"

    def __init__(self, settings: Settings) -> None:
        MockBase.__init__(self, settings)

    async def get_totals(self) -> RawCorrelationTotals:
        await self._simulate_delay()
        return self._parse(RawCorrelationTotals, self._get("totals", {}))

    async def get_correlations(self, signature: str, channel: str) -> RawCorrelationResponse:
        await self._simulate_delay()
        by_signature = self._get("signatures", {}).get(channel, {})
        if signature not in by_signature:
            raise NotFoundError(
                self.provider_key,
                f'No correlation data for signature "{signature}" on channel "{channel}"',
            )
        return self._parse(RawCorrelationResponse, by_signature[signature])
