"""Live correlations provider: daily top-signature correlation files on the telemetry CDN."""

from __future__ import annotations

import hashlib
import logging

import httpx

from app.config import Settings
from core.models import RawCorrelationResponse, RawCorrelationTotals
from integrations.base import CorrelationProvider
from integrations.providers.http import HTTPProvider

logger = logging.getLogger(__name__)


def signature_hash(signature: str) -> str:
    """SHA-1 hex digest naming a signature's file on the CDN."""
    return hashlib.sha1(signature.encode("utf-8")).hexdigest()


class CorrelationsClient(CorrelationProvider, HTTPProvider):
    """No token is sent; the CDN is public.

    Files are served gzip-encoded and decoded transparently by httpx.
    """

    provider_key = "correlations"

    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None) -> None:
        HTTPProvider.__init__(
            self, settings.correlations_url, settings.request_timeout, transport
        )

    async def get_totals(self) -> RawCorrelationTotals:
        return await self._get_json("/all.json.gz", RawCorrelationTotals)

    async def get_correlations(self, signature: str, channel: str) -> RawCorrelationResponse:
        path = f"/{channel}/{signature_hash(signature)}.json.gz"
        logger.info("Fetching correlations for %r on %s", signature, channel)
        return await self._get_json(
            path,
            RawCorrelationResponse,
            not_found=(
                f'No correlation data for signature "{signature}" on channel "{channel}". '
                "Correlations are only available for the top ~200 signatures per channel."
            ),
        )
