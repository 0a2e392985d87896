"""Markdown renderer: the compact field set with headings, lists and tables."""

from __future__ import annotations

import re

from core.models import (
    CorrelationSummary,
    CrashPingsSummary,
    CrashPingStackSummary,
    CrashSummary,
    SearchResultSet,
    ThreadSummary,
)
from output.compact import NULL_ADDRESSES, format_count, format_device, format_frame

_BACKTICK_RUN = re.compile(r"`+")


def _cell(value: object) -> str:
    if value is None:
        return ""
    return str(value).replace("|", "\\|")


def _fence(text: str, minimum: int = 3) -> str:
    """A backtick fence longer than any backtick run inside ``text``."""
    longest = max((len(run) for run in _BACKTICK_RUN.findall(text)), default=0)
    return "`" * max(minimum, longest + 1)


def _code(text: str) -> str:
    """Inline code span for ``text``, even when it contains backticks."""
    fence = _fence(text, minimum=1)
    if fence == "`":
        return f"`{text}`"
    # The padding spaces are stripped by markdown, and they keep a leading
    # or trailing backtick in the text from merging with the fence.
    return f"{fence} {text} {fence}"


def _code_block(lines: list[str], info: str = "", indent: str = "") -> list[str]:
    fence = _fence("\n".join(lines))
    body = [f"{indent}{line}" if line else "" for line in lines]
    return [f"{indent}{fence}{info}", *body, f"{indent}{fence}"]


def _message(label: str, text: str) -> list[str]:
    """A details bullet; multi-line text goes in a code block inside the item."""
    if "\n" not in text:
        return [f"- **{label}:** {_code(text)}"]
    return [f"- **{label}:**", "", *_code_block(text.splitlines(), indent="  ")]


def _thread_heading(thread: ThreadSummary, all_threads: bool) -> str:
    marker = " **[CRASHING]**" if thread.is_crashing else ""
    if all_threads:
        return f"### Thread {thread.index} ({thread.name}){marker}"
    return f"## Stack Trace ({thread.name}){marker}"


def render_crash(summary: CrashSummary) -> str:
    out = [
        "# Crash Report",
        "",
        f"**Crash ID:** {_code(summary.crash_id)}",
        "",
        f"**Signature:** {_code(summary.signature)}",
        "",
    ]

    details = []
    if summary.reason is not None:
        if summary.address:
            null_ptr = " (null pointer)" if summary.address in NULL_ADDRESSES else ""
            details.append(f"- **Crash Reason:** {summary.reason} at {_code(summary.address)}{null_ptr}")
        else:
            details.append(f"- **Crash Reason:** {summary.reason}")
    if summary.moz_crash_reason is not None:
        details.extend(_message("Mozilla Crash Reason", summary.moz_crash_reason))
    if summary.abort_message is not None:
        details.extend(_message("Abort Message", summary.abort_message))

    product = " ".join(p for p in (summary.product, summary.version) if p)
    if product:
        details.append(f"- **Product:** {product}")
    if summary.platform or format_device(summary):
        platform = summary.platform or ""
        device = format_device(summary)
        if device:
            platform = f"{platform} on {device}".strip()
        details.append(f"- **Platform:** {platform}")
    if summary.build_id is not None:
        details.append(f"- **Build ID:** {summary.build_id}")
    if summary.release_channel is not None:
        details.append(f"- **Channel:** {summary.release_channel}")

    if details:
        out.extend(["## Details", "", *details, ""])

    if summary.threads and summary.all_threads:
        out.extend(["## All Threads", ""])
    for thread in summary.threads:
        out.append(_thread_heading(thread, summary.all_threads))
        out.append("")
        out.extend(_code_block([format_frame(frame) for frame in thread.frames]))
        out.append("")

    return "\n".join(out).rstrip("\n") + "\n"


def render_search(result: SearchResultSet) -> str:
    out = [
        "# Search Results",
        "",
        f"Found **{result.total}** crashes",
        "",
    ]

    if result.rows:
        out.extend([
            "## Crashes",
            "",
            "| Crash ID | Date | Product | Version | Platform | Channel | Build ID | Signature |",
            "|----------|------|---------|---------|----------|---------|----------|-----------|",
        ])
        for row in result.rows:
            platform = " ".join(p for p in (row.platform, row.platform_version) if p)
            cells = [
                row.crash_id,
                row.date,
                row.product,
                row.version,
                platform,
                row.release_channel,
                row.build_id,
                row.signature,
            ]
            out.append("| " + " | ".join(_cell(c) for c in cells) + " |")
        out.append("")

    if result.facets:
        out.extend(["## Aggregations", ""])
        for facet in result.facets:
            out.extend([f"### {facet.field}", ""])
            if not facet.buckets:
                out.append("_No buckets._")
            out.extend(f"- **{b.term}**: {b.count} crashes" for b in facet.buckets)
            out.append("")

    return "\n".join(out).rstrip("\n") + "\n"


def render_correlations(summary: CorrelationSummary) -> str:
    out = [
        "# Correlations",
        "",
        f"**Signature:** {_code(summary.signature)}",
        "",
        f"- **Channel:** {summary.channel}",
    ]
    if summary.date:
        out.append(f"- **Date:** {summary.date}")
    out.append(f"- **Signature crashes:** {format_count(summary.signature_count)}")
    out.append(f"- **Channel crashes:** {summary.reference_count}")
    out.append("")

    for group in summary.groups:
        out.extend([
            f"## {_cell(group.attribute)}",
            "",
            "| Signature % | Reference % | Attribute | Prior |",
            "|-------------|-------------|-----------|-------|",
        ])
        for item in group.items:
            prior = ""
            if item.prior:
                prior = (
                    f"{item.prior.label}: {item.prior.percentage:.1f}% vs "
                    f"{item.prior.reference_percentage:.1f}%"
                )
            out.append(
                f"| {item.percentage:.1f}% | {item.reference_percentage:.1f}% "
                f"| {_cell(item.label)} | {_cell(prior)} |"
            )
        out.append("")

    return "\n".join(out).rstrip("\n") + "\n"


def render_crash_pings(summary: CrashPingsSummary) -> str:
    out = [
        "# Crash Pings",
        "",
        f"- **Date:** {summary.date}",
        f"- **Pings:** {summary.filtered_total} matched of {summary.total}",
    ]
    if summary.signature_filter is not None:
        out.append(f"- **Signature filter:** {_code(summary.signature_filter)}")
    out.extend(["", f"## By {_cell(summary.facet)}", ""])

    if not summary.items:
        out.append("_No matching pings._")
    else:
        out.extend([
            f"| Count | % | {_cell(summary.facet)} |",
            "|-------|---|" + "-" * (len(_cell(summary.facet)) + 2) + "|",
        ])
        out.extend(
            f"| {item.count} | {item.percentage:.1f}% | {_cell(item.label)} |"
            for item in summary.items
        )

    return "\n".join(out).rstrip("\n") + "\n"


def render_crash_ping_stack(summary: CrashPingStackSummary) -> str:
    out = [
        "# Crash Ping Stack",
        "",
        f"**Crash ID:** {_code(summary.crash_id)}",
        "",
        f"- **Date:** {summary.date}",
        "",
    ]

    if summary.frames:
        out.extend(["## Stack", ""])
        out.extend(_code_block([format_frame(frame) for frame in summary.frames]))
        out.append("")
    if summary.java_exception is not None:
        out.extend(["## Java Exception", ""])
        out.extend(_code_block(summary.java_exception.splitlines(), info="json"))
        out.append("")
    if not summary.frames and summary.java_exception is None:
        out.append("_No stack available._")

    return "\n".join(out).rstrip("\n") + "\n"
