"""Crash normalization: raw ProcessedCrash record → bounded CrashSummary.

The raw record is inconsistently shaped across crash versions: the crashing
thread index can live at the top level, under ``crash_info`` or under
``json_dump``, and thread lists may come from ``threads`` or
``json_dump.threads``. Normalization resolves those alternatives with fixed
priorities and never raises for missing data.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from core.models import (
    CrashSummary,
    RawCrashInfo,
    RawCrashRecord,
    RawStackFrame,
    RawThread,
    StackFrame,
    ThreadSummary,
)

logger = logging.getLogger(__name__)

UNKNOWN_SIGNATURE = "Unknown"
UNKNOWN_FUNCTION = "???"


# ---------------------------------------------------------------------------
# Crashing-thread lookup, tried in order; first non-None wins
# ---------------------------------------------------------------------------


def _top_level_crashing_thread(raw: RawCrashRecord) -> int | None:
    return raw.crashing_thread


def _crash_info_crashing_thread(raw: RawCrashRecord) -> int | None:
    return raw.crash_info.crashing_thread if raw.crash_info else None


def _json_dump_crashing_thread(raw: RawCrashRecord) -> int | None:
    return raw.json_dump.crashing_thread if raw.json_dump else None


CRASHING_THREAD_EXTRACTORS: tuple[Callable[[RawCrashRecord], int | None], ...] = (
    _top_level_crashing_thread,
    _crash_info_crashing_thread,
    _json_dump_crashing_thread,
)


def find_crashing_thread(raw: RawCrashRecord) -> int | None:
    """Return the crashing thread index, or None when no source names one."""
    for extractor in CRASHING_THREAD_EXTRACTORS:
        index = extractor(raw)
        if index is not None:
            return index
    return None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _source_threads(raw: RawCrashRecord) -> list[RawThread]:
    if raw.threads is not None:
        return raw.threads
    if raw.json_dump and raw.json_dump.threads is not None:
        return raw.json_dump.threads
    return []


def _source_crash_info(raw: RawCrashRecord) -> RawCrashInfo | None:
    if raw.crash_info is not None:
        return raw.crash_info
    return raw.json_dump.crash_info if raw.json_dump else None


def function_label(frame: RawStackFrame) -> str:
    """Function name, else ``offset (module)``, else ``???``."""
    if frame.function is not None:
        return frame.function
    parts = []
    if frame.offset:
        parts.append(frame.offset)
    if frame.module:
        parts.append(f"({frame.module})")
    return " ".join(parts) if parts else UNKNOWN_FUNCTION


def _summarize_frames(frames: list[RawStackFrame], depth: int) -> tuple[StackFrame, ...]:
    return tuple(
        StackFrame(
            index=frame.frame if frame.frame is not None else position,
            function=function_label(frame),
            file=frame.file,
            line=frame.line,
            module=frame.module,
        )
        for position, frame in enumerate(frames[:depth])
    )


def _summarize_thread(index: int, thread: RawThread, depth: int, is_crashing: bool) -> ThreadSummary:
    return ThreadSummary(
        index=index,
        name=thread.thread_name or f"thread {index}",
        is_crashing=is_crashing,
        frames=_summarize_frames(thread.frames, depth),
    )


def _select_threads(
    threads: list[RawThread],
    crashing: int | None,
    depth: int,
    all_threads: bool,
) -> tuple[ThreadSummary, ...]:
    if all_threads:
        return tuple(
            _summarize_thread(i, thread, depth, i == crashing)
            for i, thread in enumerate(threads)
        )

    if crashing is not None and 0 <= crashing < len(threads):
        return (_summarize_thread(crashing, threads[crashing], depth, True),)

    if not threads:
        return ()

    if crashing is None:
        logger.debug("No crashing thread identified; showing thread 0")
    else:
        logger.debug(
            "Crashing thread %d out of range (%d threads); showing thread 0",
            crashing,
            len(threads),
        )
    return (_summarize_thread(0, threads[0], depth, False),)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def normalize_crash(raw: RawCrashRecord, depth: int, all_threads: bool = False) -> CrashSummary:
    """Build a CrashSummary keeping at most ``depth`` innermost frames per thread.

    With ``all_threads`` every thread is kept and the crashing one flagged;
    otherwise only the crashing thread (or thread 0 as a fallback) is kept.
    """
    depth = max(depth, 0)
    crashing = find_crashing_thread(raw)
    crash_info = _source_crash_info(raw)

    return CrashSummary(
        crash_id=raw.uuid,
        signature=raw.signature if raw.signature is not None else UNKNOWN_SIGNATURE,
        reason=crash_info.type if crash_info else None,
        address=crash_info.address if crash_info else None,
        moz_crash_reason=raw.moz_crash_reason,
        abort_message=raw.abort_message,
        product=raw.product,
        version=raw.version,
        os_name=raw.os_name,
        os_version=raw.os_version,
        build_id=raw.build,
        release_channel=raw.release_channel,
        android_model=raw.android_model,
        android_version=raw.android_version,
        crashing_thread=crashing,
        all_threads=all_threads,
        threads=_select_threads(_source_threads(raw), crashing, depth, all_threads),
    )
