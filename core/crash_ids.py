"""Crash ID parsing: bare UUIDs or crash-stats report URLs."""

from __future__ import annotations

import re

from core.exceptions import InvalidRequestError

_CRASH_ID_RE = re.compile(r"^[0-9a-fA-F-]+$")


def extract_crash_id(value: str) -> str:
    """Return the crash ID from a bare ID or a ``.../report/index/<id>`` URL."""
    value = value.strip()
    if value.startswith(("http://", "https://")):
        segments = [s for s in value.split("?")[0].split("/") if s]
        return segments[-1] if segments else value
    return value


def validate_crash_id(crash_id: str) -> str:
    """Reject anything but hex digits and dashes before it reaches a request."""
    if not _CRASH_ID_RE.match(crash_id):
        raise InvalidRequestError(f"Invalid crash ID format: {crash_id}")
    return crash_id
