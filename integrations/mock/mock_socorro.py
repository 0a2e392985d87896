"""Mock Socorro provider: implements CrashReportProvider with scenario fixtures."""

from __future__ import annotations

from app.config import Settings
from core.crash_ids import validate_crash_id
from core.exceptions import NotFoundError
from core.models import RawCrashRecord, RawSearchResponse, SearchParams
from integrations.base import CrashReportProvider
from integrations.mock.base import MockBase


class MockSocorro(CrashReportProvider, MockBase):
    provider_key = "socorro"

    def __init__(self, settings: Settings) -> None:
        MockBase.__init__(self, settings)

    async def get_crash(self, crash_id: str, use_auth: bool = True) -> RawCrashRecord:
        validate_crash_id(crash_id)
        await self._simulate_delay()
        crashes = self._get("crashes", {})
        if crash_id not in crashes:
            raise NotFoundError(self.provider_key, f"Crash not found: {crash_id}")
        return self._parse(RawCrashRecord, crashes[crash_id])

    async def search(self, params: SearchParams) -> RawSearchResponse:
        await self._simulate_delay()
        response = self._parse(RawSearchResponse, self._get("search", {}))

        # Mirror the server: honour _results_number, _facets and _facets_size
        facets = {
            name: response.facets[name][: params.facets_size]
            if params.facets_size is not None
            else response.facets[name]
            for name in params.facets
            if name in response.facets
        }
        return response.model_copy(
            update={"hits": response.hits[: params.effective_limit], "facets": facets}
        )
