"""Crash ping aggregation: one day of column-stored pings → per-facet counts.

Crash pings are the telemetry submitted by the browser on every crash,
symbolicated server-side. They carry far fewer fields than a processed crash
report but cover every crash, not only those the user chose to submit.
"""

from __future__ import annotations

import json
import logging
from collections import Counter
from datetime import datetime, timedelta, timezone

from core.correlation_normalizer import percentage
from core.crash_normalizer import function_label
from core.exceptions import InvalidRequestError
from core.models import (
    CRASH_PING_FACETS,
    DEFAULT_CRASH_PINGS_LIMIT,
    CrashPingFilters,
    CrashPingsItem,
    CrashPingsSummary,
    CrashPingStackSummary,
    RawCrashPingsResponse,
    RawCrashPingStack,
    StackFrame,
)

logger = logging.getLogger(__name__)

NO_VALUE = "(none)"
DATE_FORMAT = "%Y-%m-%d"


def resolve_date(date: str | None, now: datetime | None = None) -> str:
    """Validate a ``YYYY-MM-DD`` date, defaulting to yesterday in UTC."""
    if date is None:
        now = now or datetime.now(timezone.utc)
        return (now - timedelta(days=1)).strftime(DATE_FORMAT)
    try:
        datetime.strptime(date, DATE_FORMAT)
    except ValueError as e:
        raise InvalidRequestError(f"Invalid date {date!r}: expected YYYY-MM-DD") from e
    return date


def validate_facet(facet: str) -> str:
    if facet not in CRASH_PING_FACETS:
        raise InvalidRequestError(
            f"Unknown crash ping facet {facet!r}. Valid facets: {', '.join(CRASH_PING_FACETS)}"
        )
    return facet


def _same_text(value: str | None, wanted: str) -> bool:
    return value is not None and value.lower() == wanted.lower()


def _signature_matches(value: str | None, wanted: str) -> bool:
    if wanted.startswith("~"):
        return wanted[1:].lower() in (value or "").lower()
    return value == wanted


def matches_filters(raw: RawCrashPingsResponse, i: int, filters: CrashPingFilters) -> bool:
    """Whether ping ``i`` passes every filter that is set."""
    for name in ("channel", "os", "process", "arch"):
        wanted = getattr(filters, name)
        if wanted is not None and not _same_text(raw.column(name).get(i), wanted):
            return False
    if filters.version is not None and raw.version.get(i) != filters.version:
        return False
    if filters.signature is not None:
        return _signature_matches(raw.signature.get(i), filters.signature)
    return True


def facet_value(raw: RawCrashPingsResponse, i: int, facet: str) -> str:
    value = raw.column(facet).get(i)
    return NO_VALUE if value is None else value


def aggregate_crash_pings(
    raw: RawCrashPingsResponse,
    date: str,
    filters: CrashPingFilters | None = None,
    facet: str = "signature",
    limit: int = DEFAULT_CRASH_PINGS_LIMIT,
) -> CrashPingsSummary:
    """Count matching pings per ``facet`` value, most frequent first.

    Percentages are shares of the filtered total, not of the whole day. Equal
    counts are ordered by label, and only the top ``limit`` values are kept.
    """
    validate_facet(facet)
    filters = filters or CrashPingFilters()
    limit = max(limit, 0)

    matching = [i for i in range(raw.ping_count) if matches_filters(raw, i, filters)]
    counts = Counter(facet_value(raw, i, facet) for i in matching)
    ranked = sorted(counts.items(), key=lambda pair: (-pair[1], pair[0]))[:limit]
    logger.debug(
        "%d of %d crash pings matched; %d distinct %s values",
        len(matching),
        raw.ping_count,
        len(counts),
        facet,
    )

    return CrashPingsSummary(
        date=date,
        total=raw.ping_count,
        filtered_total=len(matching),
        facet=facet,
        signature_filter=filters.signature,
        items=tuple(
            CrashPingsItem(label=label, count=count, percentage=percentage(count, len(matching)))
            for label, count in ranked
        ),
    )


def normalize_ping_stack(raw: RawCrashPingStack, crash_id: str, date: str) -> CrashPingStackSummary:
    frames = raw.stack or []
    java_exception = None
    if raw.java_exception is not None:
        java_exception = json.dumps(raw.java_exception, indent=2, sort_keys=True)

    return CrashPingStackSummary(
        crash_id=crash_id,
        date=date,
        frames=tuple(
            StackFrame(
                index=frame.frame if frame.frame is not None else position,
                function=function_label(frame),
                file=frame.file,
                line=frame.line,
                module=frame.module,
            )
            for position, frame in enumerate(frames)
        ),
        java_exception=java_exception,
    )
