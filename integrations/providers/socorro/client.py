"""Live Socorro provider: crash-stats ``/ProcessedCrash/`` and ``/SuperSearch/``."""

from __future__ import annotations

import logging

import httpx

from app.config import Settings
from core.crash_ids import validate_crash_id
from core.models import RawCrashRecord, RawSearchResponse, SearchParams
from integrations.base import CrashReportProvider
from integrations.providers.http import HTTPProvider

logger = logging.getLogger(__name__)

AUTH_HEADER = "Auth-Token"


class SocorroClient(CrashReportProvider, HTTPProvider):
    provider_key = "socorro"

    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None) -> None:
        HTTPProvider.__init__(
            self, settings.socorro_api_url, settings.request_timeout, transport
        )
        self._token = settings.resolve_token()

    def _headers(self, use_auth: bool) -> dict[str, str]:
        if use_auth and self._token:
            return {AUTH_HEADER: self._token}
        return {}

    async def get_crash(self, crash_id: str, use_auth: bool = True) -> RawCrashRecord:
        """Fetch one processed crash.

        ``use_auth=False`` drops the token so the server strips protected
        fields regardless of what the token is allowed to see.
        """
        validate_crash_id(crash_id)
        logger.info("Fetching crash %s (auth=%s)", crash_id, bool(use_auth and self._token))
        return await self._get_json(
            "/ProcessedCrash/",
            RawCrashRecord,
            params={"crash_id": crash_id},
            headers=self._headers(use_auth),
            not_found=f"Crash not found: {crash_id}",
        )

    async def search(self, params: SearchParams) -> RawSearchResponse:
        logger.info(
            "Searching %s crashes (limit=%d, facets=%s)",
            params.product,
            params.effective_limit,
            params.facets,
        )
        return await self._get_json(
            "/SuperSearch/",
            RawSearchResponse,
            params=params.to_query(),
            headers=self._headers(True),
        )
