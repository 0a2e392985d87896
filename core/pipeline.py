"""Pipeline: fetch a raw payload, normalize it, render it.

One request chain per call, awaited sequentially. Upstream failures from the
providers propagate unchanged; this module never retries.
"""

from __future__ import annotations

import logging

from app.config import Settings
from core.correlation_normalizer import normalize_correlations
from core.crash_ids import extract_crash_id
from core.crash_normalizer import normalize_crash
from core.crash_pings_normalizer import (
    aggregate_crash_pings,
    normalize_ping_stack,
    resolve_date,
    validate_facet,
)
from core.exceptions import InvalidRequestError
from core.models import (
    DEFAULT_CRASH_PINGS_LIMIT,
    Channel,
    CrashPingFilters,
    OutputFormat,
    SearchParams,
)
from core.search_normalizer import normalize_search
from integrations.registry import IntegrationRegistry
from output.render import render
from output.structured import render_raw_crash

logger = logging.getLogger(__name__)


class Pipeline:
    """Coordinates providers, normalizers and renderers for each command."""

    def __init__(self, settings: Settings, registry: IntegrationRegistry) -> None:
        self._settings = settings
        self._registry = registry

    # ------------------------------------------------------------------
    # crash
    # ------------------------------------------------------------------

    async def crash(
        self,
        crash_id: str,
        fmt: OutputFormat = OutputFormat.COMPACT,
        depth: int | None = None,
        all_threads: bool = False,
        full: bool = False,
    ) -> str:
        """Render one crash report.

        ``full`` dumps every public field of the raw record as JSON. Full and
        structured output skip the API token so the server strips protected
        fields even if the token was granted more than it should have been.
        """
        crash_id = extract_crash_id(crash_id)
        depth = self._settings.default_depth if depth is None else depth
        use_auth = not full and fmt != OutputFormat.STRUCTURED

        provider = self._registry.get_provider("crash_reports")
        raw = await provider.get_crash(crash_id, use_auth=use_auth)

        if full:
            return render_raw_crash(raw)

        summary = normalize_crash(raw, depth=depth, all_threads=all_threads)
        logger.debug(
            "Crash %s: %d thread(s) kept, crashing thread %s",
            summary.crash_id,
            len(summary.threads),
            summary.crashing_thread,
        )
        return render(summary, fmt)

    # ------------------------------------------------------------------
    # search
    # ------------------------------------------------------------------

    async def search(self, params: SearchParams, fmt: OutputFormat = OutputFormat.COMPACT) -> str:
        if params.facets and params.facets_size is None:
            params = params.model_copy(update={"facets_size": self._settings.default_facets_size})

        provider = self._registry.get_provider("crash_reports")
        raw = await provider.search(params)

        result = normalize_search(
            raw,
            requested_limit=params.effective_limit,
            facet_fields=params.facets,
            facets_size=params.facets_size,
        )
        return render(result, fmt)

    # ------------------------------------------------------------------
    # correlations
    # ------------------------------------------------------------------

    async def correlations(
        self,
        signature: str,
        channel: str = Channel.RELEASE.value,
        fmt: OutputFormat = OutputFormat.COMPACT,
    ) -> str:
        if channel not in {c.value for c in Channel}:
            raise InvalidRequestError(
                f'Unknown channel "{channel}". '
                f"Valid channels: {', '.join(c.value for c in Channel)}"
            )

        provider = self._registry.get_provider("correlations")
        totals = await provider.get_totals()
        response = await provider.get_correlations(signature, channel)
        summary = normalize_correlations(totals, response, signature=signature, channel=channel)
        return render(summary, fmt)

    # ------------------------------------------------------------------
    # crash pings
    # ------------------------------------------------------------------

    async def crash_pings(
        self,
        date: str | None = None,
        filters: CrashPingFilters | None = None,
        facet: str = "signature",
        limit: int = DEFAULT_CRASH_PINGS_LIMIT,
        fmt: OutputFormat = OutputFormat.COMPACT,
    ) -> str:
        """Render one day's crash pings counted by ``facet``; ``date`` defaults to yesterday (UTC)."""
        date = resolve_date(date)
        validate_facet(facet)

        provider = self._registry.get_provider("crash_pings")
        raw = await provider.get_ping_data(date)
        summary = aggregate_crash_pings(raw, date, filters=filters, facet=facet, limit=limit)
        return render(summary, fmt)

    async def crash_ping_stack(
        self,
        crash_id: str,
        date: str | None = None,
        fmt: OutputFormat = OutputFormat.COMPACT,
    ) -> str:
        crash_id = extract_crash_id(crash_id)
        date = resolve_date(date)

        provider = self._registry.get_provider("crash_pings")
        raw = await provider.get_stack(date, crash_id)
        return render(normalize_ping_stack(raw, crash_id=crash_id, date=date), fmt)
