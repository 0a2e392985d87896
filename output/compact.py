"""Compact renderer: terse, label-minimized text for terminals and LLM agents.

Absent fields are skipped entirely; nothing prints an empty placeholder.
"""

from __future__ import annotations

from core.models import (
    CorrelationItem,
    CorrelationSummary,
    CrashPingsSummary,
    CrashPingStackSummary,
    CrashSummary,
    SearchResultSet,
    SearchRow,
    StackFrame,
    ThreadSummary,
)

CRASHING_MARKER = "[CRASHING]"
NULL_ADDRESSES = frozenset({"0x0", "0"})


def format_count(value: float) -> str:
    """Whole counts without a decimal point, fractional ones to one place."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.1f}"


def format_location(frame: StackFrame) -> str:
    if frame.file and frame.line is not None:
        return f" @ {frame.file}:{frame.line}"
    if frame.file:
        return f" @ {frame.file}"
    return ""


def format_frame(frame: StackFrame) -> str:
    return f"#{frame.index} {frame.function}{format_location(frame)}"


def format_device(summary: CrashSummary) -> str | None:
    parts = [p for p in (summary.android_model, summary.android_version) if p]
    return " ".join(parts) if parts else None


def _thread_header(thread: ThreadSummary, all_threads: bool) -> str:
    marker = f" {CRASHING_MARKER}" if thread.is_crashing else ""
    if all_threads:
        return f"stack[thread {thread.index}:{thread.name}{marker}]:"
    return f"stack[{thread.name}{marker}]:"


def _product_line(summary: CrashSummary) -> str | None:
    head = " ".join(p for p in (summary.product, summary.version) if p)
    env = ", ".join(p for p in (summary.platform, format_device(summary)) if p)
    if head and env:
        return f"product: {head} ({env})"
    if head or env:
        return f"product: {head or env}"
    return None


def render_crash(summary: CrashSummary) -> str:
    lines = [
        f"CRASH {summary.crash_id}",
        f"sig: {summary.signature}",
    ]

    if summary.reason is not None:
        if summary.address:
            null_ptr = " (null ptr)" if summary.address in NULL_ADDRESSES else ""
            lines.append(f"reason: {summary.reason} @ {summary.address}{null_ptr}")
        else:
            lines.append(f"reason: {summary.reason}")
    if summary.moz_crash_reason is not None:
        lines.append(f"moz_reason: {summary.moz_crash_reason}")
    if summary.abort_message is not None:
        lines.append(f"abort: {summary.abort_message}")

    product = _product_line(summary)
    if product:
        lines.append(product)
    if summary.build_id is not None:
        lines.append(f"build: {summary.build_id}")
    if summary.release_channel is not None:
        lines.append(f"channel: {summary.release_channel}")

    for thread in summary.threads:
        lines.append("")
        lines.append(_thread_header(thread, summary.all_threads))
        lines.extend(f"  {format_frame(frame)}" for frame in thread.frames)

    return "\n".join(lines) + "\n"


def _row_line(row: SearchRow) -> str:
    platform = " ".join(p for p in (row.platform, row.platform_version) if p)
    product = " ".join(p for p in (row.product, row.version) if p)
    cells = [row.crash_id, row.date, product, platform, row.release_channel, row.build_id, row.signature]
    return " | ".join(c for c in cells if c)


def render_search(result: SearchResultSet) -> str:
    lines = [f"FOUND {result.total} crashes"]

    if result.rows:
        lines.append("")
        lines.extend(_row_line(row) for row in result.rows)

    if result.facets:
        lines.append("")
        lines.append("AGGREGATIONS:")
        for facet in result.facets:
            lines.append("")
            lines.append(f"{facet.field}:")
            if not facet.buckets:
                lines.append("  (no buckets)")
            lines.extend(f"  {b.term} ({b.count})" for b in facet.buckets)

    return "\n".join(lines) + "\n"


def _correlation_line(item: CorrelationItem) -> str:
    line = f"  {item.percentage:.1f}% vs {item.reference_percentage:.1f}% | {item.label}"
    if item.prior:
        line += (
            f" [prior {item.prior.label}: "
            f"{item.prior.percentage:.1f}% vs {item.prior.reference_percentage:.1f}%]"
        )
    return line


def render_correlations(summary: CorrelationSummary) -> str:
    lines = [
        f"CORRELATIONS {summary.signature}",
        f"channel: {summary.channel}",
    ]
    if summary.date:
        lines.append(f"date: {summary.date}")
    lines.append(f"crashes: {format_count(summary.signature_count)} sig / {summary.reference_count} ref")
    lines.append("sig_% vs ref_% | attribute")

    for group in summary.groups:
        lines.append("")
        lines.append(f"{group.attribute}:")
        lines.extend(_correlation_line(item) for item in group.items)

    return "\n".join(lines) + "\n"


def render_crash_pings(summary: CrashPingsSummary) -> str:
    lines = [
        f"CRASH PINGS {summary.date}",
        f"pings: {summary.filtered_total} matched / {summary.total} total",
    ]
    if summary.signature_filter is not None:
        lines.append(f"sig_filter: {summary.signature_filter}")

    lines.append("")
    lines.append(f"by {summary.facet}:")
    if not summary.items:
        lines.append("  (no matching pings)")
    lines.extend(f"  {item.percentage:.1f}% ({item.count}) {item.label}" for item in summary.items)

    return "\n".join(lines) + "\n"


def render_crash_ping_stack(summary: CrashPingStackSummary) -> str:
    lines = [
        f"CRASH PING {summary.crash_id}",
        f"date: {summary.date}",
    ]

    if summary.frames:
        lines.append("")
        lines.append("stack:")
        lines.extend(f"  {format_frame(frame)}" for frame in summary.frames)
    if summary.java_exception is not None:
        lines.append("")
        lines.append("java_exception:")
        lines.extend(f"  {line}" for line in summary.java_exception.splitlines())
    if not summary.frames and summary.java_exception is None:
        lines.append("(no stack)")

    return "\n".join(lines) + "\n"
