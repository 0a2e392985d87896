"""Shared test fixtures for the socorro-digest test suite."""

from __future__ import annotations

import pytest

from app.config import Settings
from core.models import (
    RawCorrelationResponse,
    RawCorrelationTotals,
    RawCrashRecord,
)

FENIX_CRASH_ID = "247653e8-7a18-4836-97d1-42a720260120"


@pytest.fixture
def mock_settings() -> Settings:
    """Return a Settings instance configured for mock mode."""
    return Settings(
        crashstats_mode="mock",
        socorro_mode="",
        correlations_mode="",
        crash_pings_mode="",
        mock_scenario="fenix_audio_crash",
        mock_delay_enabled=False,
        socorro_api_token="",
        socorro_api_token_path="",
    )


@pytest.fixture
def live_settings() -> Settings:
    return Settings(
        crashstats_mode="live",
        socorro_mode="",
        correlations_mode="",
        crash_pings_mode="",
        socorro_api_url="https://crash-stats.example.test/api",
        correlations_url="https://cdn.example.test/data",
        crash_pings_url="https://pings.example.test",
        socorro_api_token="secret-token",
        socorro_api_token_path="",
    )


@pytest.fixture
def raw_crash() -> RawCrashRecord:
    """A processed crash with three threads; thread 1 crashed."""
    return RawCrashRecord.model_validate({
        "uuid": FENIX_CRASH_ID,
        "signature": "mozilla::AudioDecoderInputTrack::EnsureTimeStretcher",
        "product": "Fenix",
        "version": "147.0.1",
        "os_name": "Android",
        "os_version": "36",
        "build": 20260115093012,
        "release_channel": "release",
        "android_model": "Pixel 8",
        "android_version": "16",
        "moz_crash_reason": "MOZ_RELEASE_ASSERT(mTimeStretcher->Init())",
        "user_comments": "private words",
        "crash_info": {"type": "SIGSEGV", "address": "0x0", "crashing_thread": 1},
        "threads": [
            {
                "thread_name": "MainThread",
                "frames": [{"frame": 0, "function": "epoll_wait", "module": "libc.so"}],
            },
            {
                "thread_name": "GraphRunner",
                "frames": [
                    {"frame": 0, "function": "EnsureTimeStretcher", "file": "AudioDecoderInputTrack.cpp", "line": 624},
                    {"frame": 1, "function": "AppendData", "file": "AudioDecoderInputTrack.cpp", "line": 423},
                    {"frame": 2, "offset": "0x7f3a2c", "module": "libxul.so"},
                    {"frame": 3},
                ],
            },
            {"frames": [{"frame": 0, "function": "futex_wait"}]},
        ],
    })


@pytest.fixture
def correlation_totals() -> RawCorrelationTotals:
    return RawCorrelationTotals(
        date="2026-02-13", release=79268, beta=4996, nightly=4876, esr=792
    )


@pytest.fixture
def correlation_response() -> RawCorrelationResponse:
    return RawCorrelationResponse.model_validate({
        "total": 220.0,
        "results": [
            {"item": {"Module \"cscapi.dll\"": True}, "count_reference": 19432.0, "count_group": 220.0},
            {"item": {"process_type": "content"}, "count_reference": 40211.0, "count_group": 88.0},
            {"item": {"process_type": "gpu"}, "count_reference": 2012.0, "count_group": 88.0},
            {
                "item": {"startup_crash": None},
                "count_reference": 920.0,
                "count_group": 65.0,
                "prior": {
                    "item": {"process_type": "parent"},
                    "count_reference": 3630.0,
                    "count_group": 112.0,
                    "total_reference": 79268.0,
                    "total_group": 220.0,
                },
            },
        ],
    })
