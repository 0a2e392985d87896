"""Core data models: raw Socorro payloads, request parameters, and normalized summaries."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class OutputFormat(str, Enum):
    COMPACT = "compact"
    STRUCTURED = "structured"
    MARKDOWN = "markdown"


class Channel(str, Enum):
    RELEASE = "release"
    BETA = "beta"
    NIGHTLY = "nightly"
    ESR = "esr"


# ---------------------------------------------------------------------------
# Raw service payloads
#
# Only publicly disclosable fields are declared here. Unknown keys are
# ignored at parse time, so protected fields the server may return (user
# comments, URLs, e-mail addresses, memory contents) never reach a summary
# or a rendered dump.
# ---------------------------------------------------------------------------


class _RawModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


def _string_or_number(value: Any) -> Any:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, bool):
        return str(value).lower()
    return str(value)


class RawStackFrame(_RawModel):
    frame: int | None = None
    function: str | None = None
    file: str | None = None
    line: int | None = None
    module: str | None = None
    offset: str | None = None


class RawThread(_RawModel):
    thread: int | None = None
    thread_name: str | None = None
    frames: list[RawStackFrame] = Field(default_factory=list)


class RawCrashInfo(_RawModel):
    type: str | None = None
    address: str | None = None
    crashing_thread: int | None = None


class RawJsonDump(_RawModel):
    """The minidump-stackwalk output nested under ``json_dump``."""

    crashing_thread: int | None = None
    threads: list[RawThread] | None = None
    crash_info: RawCrashInfo | None = None


class RawCrashRecord(_RawModel):
    """A ProcessedCrash record as returned by ``/api/ProcessedCrash/``."""

    uuid: str
    signature: str | None = None
    product: str | None = None
    version: str | None = None
    os_name: str | None = None
    os_version: str | None = None
    build: str | None = None
    release_channel: str | None = None

    crash_info: RawCrashInfo | None = None
    moz_crash_reason: str | None = None
    abort_message: str | None = None

    android_model: str | None = None
    android_version: str | None = None

    crashing_thread: int | None = None
    threads: list[RawThread] | None = None
    json_dump: RawJsonDump | None = None

    @field_validator("build", mode="before")
    @classmethod
    def _coerce_build(cls, value: Any) -> Any:
        return _string_or_number(value)


class RawCrashHit(_RawModel):
    uuid: str
    date: str | None = None
    signature: str | None = None
    product: str | None = None
    version: str | None = None
    platform: str | None = None
    platform_version: str | None = None
    build_id: str | None = None
    release_channel: str | None = None

    @field_validator("build_id", mode="before")
    @classmethod
    def _coerce_build_id(cls, value: Any) -> Any:
        return _string_or_number(value)


class RawFacetBucket(_RawModel):
    term: str
    count: int = 0

    @field_validator("term", mode="before")
    @classmethod
    def _coerce_term(cls, value: Any) -> Any:
        return _string_or_number(value)


class RawSearchResponse(_RawModel):
    """A SuperSearch response: matching hits plus facet aggregations."""

    total: int = 0
    hits: list[RawCrashHit] = Field(default_factory=list)
    facets: dict[str, list[RawFacetBucket]] = Field(default_factory=dict)


class RawCorrelationTotals(_RawModel):
    """Per-channel crash totals published alongside the correlation data."""

    date: str = ""
    release: int = 0
    beta: int = 0
    nightly: int = 0
    esr: int = 0

    def total_for_channel(self, channel: str) -> int | None:
        if channel not in {c.value for c in Channel}:
            return None
        return getattr(self, channel)


class RawCorrelationPrior(_RawModel):
    item: dict[str, Any] = Field(default_factory=dict)
    count_reference: float = 0.0
    count_group: float = 0.0
    total_reference: float = 0.0
    total_group: float = 0.0


class RawCorrelationResult(_RawModel):
    item: dict[str, Any] = Field(default_factory=dict)
    count_reference: float = 0.0
    count_group: float = 0.0
    prior: RawCorrelationPrior | None = None


class RawCorrelationResponse(_RawModel):
    total: float = 0.0
    results: list[RawCorrelationResult] = Field(default_factory=list)


class RawIndexedStrings(_RawModel):
    """A deduplicated string column: ``values[i]`` indexes into ``strings``."""

    strings: list[str | None] = Field(default_factory=list)
    values: list[int] = Field(default_factory=list)

    def get(self, i: int) -> str | None:
        if i >= len(self.values):
            return None
        index = self.values[i]
        if not 0 <= index < len(self.strings):
            return None
        return self.strings[index]


class RawCrashPingsResponse(_RawModel):
    """One day of crash pings from ``/ping_data/<date>``, stored column-wise.

    Every column holds one entry per ping; the ping count is the length of
    ``crashid``. Client IDs and minidump hashes are not declared.
    """

    crashid: list[str] = Field(default_factory=list)
    channel: RawIndexedStrings = Field(default_factory=RawIndexedStrings)
    process: RawIndexedStrings = Field(default_factory=RawIndexedStrings)
    ipc_actor: RawIndexedStrings = Field(default_factory=RawIndexedStrings)
    version: RawIndexedStrings = Field(default_factory=RawIndexedStrings)
    os: RawIndexedStrings = Field(default_factory=RawIndexedStrings)
    osversion: RawIndexedStrings = Field(default_factory=RawIndexedStrings)
    arch: RawIndexedStrings = Field(default_factory=RawIndexedStrings)
    date: RawIndexedStrings = Field(default_factory=RawIndexedStrings)
    reason: RawIndexedStrings = Field(default_factory=RawIndexedStrings)
    type: RawIndexedStrings = Field(default_factory=RawIndexedStrings)
    build_id: RawIndexedStrings = Field(default_factory=RawIndexedStrings)
    signature: RawIndexedStrings = Field(default_factory=RawIndexedStrings)

    @property
    def ping_count(self) -> int:
        return len(self.crashid)

    def column(self, name: str) -> RawIndexedStrings:
        return getattr(self, name)


class RawCrashPingFrame(RawStackFrame):
    function_offset: str | None = None
    module_offset: str | None = None
    omitted: Any = None
    error: str | None = None


class RawCrashPingStack(_RawModel):
    """A symbolicated crash ping stack from ``/stack/<date>/<crash_id>``."""

    stack: list[RawCrashPingFrame] | None = None
    java_exception: Any = None


# ---------------------------------------------------------------------------
# Request parameters
# ---------------------------------------------------------------------------

SEARCH_COLUMNS: tuple[str, ...] = (
    "uuid",
    "date",
    "signature",
    "product",
    "version",
    "platform",
    "platform_version",
    "build_id",
    "release_channel",
)

DEFAULT_SEARCH_LIMIT = 10


class SearchParams(BaseModel):
    """Filters and shaping options for a SuperSearch query."""

    signature: str | None = None
    product: str = "Firefox"
    version: str | None = None
    platform: str | None = None
    cpu_arch: str | None = None
    release_channel: str | None = None
    platform_version: str | None = None
    process_type: str | None = None
    days: int = Field(default=7, ge=0)
    limit: int | None = Field(default=None, ge=0)
    facets: list[str] = Field(default_factory=list)
    facets_size: int | None = Field(default=None, ge=0)
    sort: str = "-date"

    @property
    def effective_limit(self) -> int:
        """Row count to request: explicit limit, else 0 for facet queries, else 10."""
        if self.limit is not None:
            return self.limit
        return 0 if self.facets else DEFAULT_SEARCH_LIMIT

    def to_query(self, now: datetime | None = None) -> list[tuple[str, str]]:
        """Build the repeated-key query string pairs for ``/api/SuperSearch/``."""
        now = now or datetime.now(timezone.utc)
        since = (now - timedelta(days=self.days)).strftime("%Y-%m-%d")

        query: list[tuple[str, str]] = [
            ("product", self.product),
            ("_results_number", str(self.effective_limit)),
            ("_sort", self.sort),
        ]
        query.extend(("_columns", col) for col in SEARCH_COLUMNS)
        query.append(("date", f">={since}"))

        filters = {
            "signature": self.signature,
            "version": self.version,
            "platform": self.platform,
            "cpu_arch": self.cpu_arch,
            "release_channel": self.release_channel,
            "platform_version": self.platform_version,
            "process_type": self.process_type,
        }
        query.extend((key, value) for key, value in filters.items() if value is not None)

        query.extend(("_facets", facet) for facet in self.facets)
        if self.facets_size is not None:
            query.append(("_facets_size", str(self.facets_size)))
        return query


CRASH_PING_FACETS: tuple[str, ...] = (
    "signature",
    "channel",
    "os",
    "process",
    "version",
    "arch",
    "osversion",
    "build_id",
    "ipc_actor",
    "reason",
    "type",
)

DEFAULT_CRASH_PINGS_LIMIT = 10


class CrashPingFilters(BaseModel):
    """Per-ping filters applied before counting.

    Channel, OS, process and architecture compare case-insensitively and the
    version exactly. A signature starting with ``~`` matches any signature
    containing the rest, ignoring case; otherwise it must match exactly.
    """

    channel: str | None = None
    os: str | None = None
    process: str | None = None
    version: str | None = None
    signature: str | None = None
    arch: str | None = None


# ---------------------------------------------------------------------------
# Summaries
#
# Summaries are frozen and hold tuples rather than lists, so nothing can be
# added, removed, or reassigned once a normalizer has built one.
# ---------------------------------------------------------------------------


class _Summary(BaseModel):
    model_config = ConfigDict(frozen=True)


class StackFrame(_Summary):
    index: int
    function: str
    file: str | None = None
    line: int | None = None
    module: str | None = None


class ThreadSummary(_Summary):
    index: int
    name: str
    is_crashing: bool = False
    frames: tuple[StackFrame, ...] = ()


class CrashSummary(_Summary):
    """Bounded, privacy-safe view of one crash report."""

    crash_id: str
    signature: str
    reason: str | None = None
    address: str | None = None
    moz_crash_reason: str | None = None
    abort_message: str | None = None

    product: str | None = None
    version: str | None = None
    os_name: str | None = None
    os_version: str | None = None
    build_id: str | None = None
    release_channel: str | None = None
    android_model: str | None = None
    android_version: str | None = None

    crashing_thread: int | None = None
    all_threads: bool = False
    threads: tuple[ThreadSummary, ...] = ()

    @property
    def platform(self) -> str | None:
        parts = [p for p in (self.os_name, self.os_version) if p]
        return " ".join(parts) if parts else None


class SearchRow(_Summary):
    crash_id: str
    date: str | None = None
    signature: str | None = None
    product: str | None = None
    version: str | None = None
    platform: str | None = None
    platform_version: str | None = None
    build_id: str | None = None
    release_channel: str | None = None


class FacetBucket(_Summary):
    term: str
    count: int


class SearchFacet(_Summary):
    field: str
    buckets: tuple[FacetBucket, ...] = ()


class SearchResultSet(_Summary):
    """Display-ready search hits and facet aggregations."""

    total: int
    rows: tuple[SearchRow, ...] = ()
    facets: tuple[SearchFacet, ...] = ()

    @property
    def facet_fields(self) -> list[str]:
        return [f.field for f in self.facets]

    def buckets(self, field: str) -> tuple[FacetBucket, ...] | None:
        """Buckets recorded for ``field``, or ``None`` when it was not requested."""
        for facet in self.facets:
            if facet.field == field:
                return facet.buckets
        return None


class CorrelationPrior(_Summary):
    label: str
    percentage: float
    reference_percentage: float


class CorrelationItem(_Summary):
    attribute: str
    value: str
    label: str
    count: float
    reference_count: float
    percentage: float
    reference_percentage: float
    prior: CorrelationPrior | None = None


class CorrelationGroup(_Summary):
    attribute: str
    items: tuple[CorrelationItem, ...] = ()


class CorrelationSummary(_Summary):
    """Attributes over-represented in one signature's crashes versus the channel."""

    signature: str
    channel: str
    date: str
    signature_count: float
    reference_count: int
    items: tuple[CorrelationItem, ...] = ()
    groups: tuple[CorrelationGroup, ...] = ()

    def group(self, attribute: str) -> tuple[CorrelationItem, ...] | None:
        for group in self.groups:
            if group.attribute == attribute:
                return group.items
        return None


class CrashPingsItem(_Summary):
    label: str
    count: int
    percentage: float


class CrashPingsSummary(_Summary):
    """Crash ping counts for one day, broken down by a single facet."""

    date: str
    total: int
    filtered_total: int
    facet: str
    signature_filter: str | None = None
    items: tuple[CrashPingsItem, ...] = ()


class CrashPingStackSummary(_Summary):
    """The symbolicated stack of one crash ping."""

    crash_id: str
    date: str
    frames: tuple[StackFrame, ...] = ()
    java_exception: str | None = None
