"""Abstract base classes for all integration providers."""

from __future__ import annotations

from abc import ABC, abstractmethod

from core.models import (
    RawCorrelationResponse,
    RawCorrelationTotals,
    RawCrashPingsResponse,
    RawCrashPingStack,
    RawCrashRecord,
    RawSearchResponse,
    SearchParams,
)


class CrashReportProvider(ABC):
    """Interface for the crash report store (Socorro crash-stats API).

    Failures surface as ``core.exceptions.UpstreamError`` subclasses.
    """

    @abstractmethod
    async def get_crash(self, crash_id: str, use_auth: bool = True) -> RawCrashRecord:
        ...

    @abstractmethod
    async def search(self, params: SearchParams) -> RawSearchResponse:
        ...


class CorrelationProvider(ABC):
    """Interface for pre-computed signature correlation data."""

    @abstractmethod
    async def get_totals(self) -> RawCorrelationTotals:
        ...

    @abstractmethod
    async def get_correlations(self, signature: str, channel: str) -> RawCorrelationResponse:
        ...


class CrashPingsProvider(ABC):
    """Interface for the crash ping telemetry service (crash-pings.mozilla.org)."""

    @abstractmethod
    async def get_ping_data(self, date: str) -> RawCrashPingsResponse:
        ...

    @abstractmethod
    async def get_stack(self, date: str, crash_id: str) -> RawCrashPingStack:
        ...
