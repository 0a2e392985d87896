"""Structured renderer: lossless JSON for programmatic consumers.

Fields absent from a summary are omitted, never written as ``null``, so
``Model.model_validate_json`` on the output rebuilds an equal summary.
"""

from __future__ import annotations

from pydantic import BaseModel

from core.models import (
    CorrelationSummary,
    CrashPingsSummary,
    CrashPingStackSummary,
    CrashSummary,
    RawCrashRecord,
    SearchResultSet,
)


def _dump(model: BaseModel) -> str:
    return model.model_dump_json(indent=2, exclude_none=True) + "\n"


def render_crash(summary: CrashSummary) -> str:
    return _dump(summary)


def render_search(result: SearchResultSet) -> str:
    return _dump(result)


def render_correlations(summary: CorrelationSummary) -> str:
    return _dump(summary)


def render_crash_pings(summary: CrashPingsSummary) -> str:
    return _dump(summary)


def render_crash_ping_stack(summary: CrashPingStackSummary) -> str:
    return _dump(summary)


def render_raw_crash(raw: RawCrashRecord) -> str:
    """Every public field of the raw record, for ``--full`` dumps."""
    return _dump(raw)
