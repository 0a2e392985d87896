"""Renderer selection: one function per (format, summary type) pair."""

from __future__ import annotations

from collections.abc import Callable
from typing import Union

from core.exceptions import RenderError
from core.models import (
    CorrelationSummary,
    CrashPingsSummary,
    CrashPingStackSummary,
    CrashSummary,
    OutputFormat,
    SearchResultSet,
)
from output import compact, markdown, structured

Summary = Union[
    CrashSummary,
    SearchResultSet,
    CorrelationSummary,
    CrashPingsSummary,
    CrashPingStackSummary,
]

RENDERERS: dict[tuple[OutputFormat, type], Callable[..., str]] = {
    (OutputFormat.COMPACT, CrashSummary): compact.render_crash,
    (OutputFormat.COMPACT, SearchResultSet): compact.render_search,
    (OutputFormat.COMPACT, CorrelationSummary): compact.render_correlations,
    (OutputFormat.COMPACT, CrashPingsSummary): compact.render_crash_pings,
    (OutputFormat.COMPACT, CrashPingStackSummary): compact.render_crash_ping_stack,
    (OutputFormat.STRUCTURED, CrashSummary): structured.render_crash,
    (OutputFormat.STRUCTURED, SearchResultSet): structured.render_search,
    (OutputFormat.STRUCTURED, CorrelationSummary): structured.render_correlations,
    (OutputFormat.STRUCTURED, CrashPingsSummary): structured.render_crash_pings,
    (OutputFormat.STRUCTURED, CrashPingStackSummary): structured.render_crash_ping_stack,
    (OutputFormat.MARKDOWN, CrashSummary): markdown.render_crash,
    (OutputFormat.MARKDOWN, SearchResultSet): markdown.render_search,
    (OutputFormat.MARKDOWN, CorrelationSummary): markdown.render_correlations,
    (OutputFormat.MARKDOWN, CrashPingsSummary): markdown.render_crash_pings,
    (OutputFormat.MARKDOWN, CrashPingStackSummary): markdown.render_crash_ping_stack,
}


def render(summary: Summary, fmt: OutputFormat) -> str:
    """Render a normalized summary as text in the requested format."""
    try:
        fmt = OutputFormat(fmt)
    except ValueError as e:
        raise RenderError(f"Unknown output format: {fmt!r}") from e

    renderer = RENDERERS.get((fmt, type(summary)))
    if renderer is None:
        raise RenderError(f"No {fmt.value} renderer for {type(summary).__name__}")
    return renderer(summary)
