"""Tests for the live httpx clients, driven through httpx.MockTransport."""

import gzip
import json

import httpx
import pytest

from core.exceptions import (
    DataNotReadyError,
    InvalidRequestError,
    NotFoundError,
    PayloadParseError,
    RateLimitedError,
    TransportError,
    UpstreamHTTPError,
)
from core.models import SearchParams
from integrations.providers.correlations.client import CorrelationsClient, signature_hash
from integrations.providers.crash_pings.client import CrashPingsClient
from integrations.providers.socorro.client import AUTH_HEADER, SocorroClient

CRASH_ID = "247653e8-7a18-4836-97d1-42a720260120"


class Recorder:
    """MockTransport handler that records requests and replays one response."""

    def __init__(self, status_code=200, payload=None, content=None):
        self.status_code = status_code
        self.payload = payload if payload is not None else {}
        self.content = content
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.content is not None:
            return httpx.Response(self.status_code, content=self.content)
        return httpx.Response(self.status_code, json=self.payload)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def _socorro(settings, recorder) -> SocorroClient:
    return SocorroClient(settings, transport=httpx.MockTransport(recorder))


def _correlations(settings, recorder) -> CorrelationsClient:
    return CorrelationsClient(settings, transport=httpx.MockTransport(recorder))


def _crash_pings(settings, recorder) -> CrashPingsClient:
    return CrashPingsClient(settings, transport=httpx.MockTransport(recorder))


# ---------------------------------------------------------------------------
# SocorroClient
# ---------------------------------------------------------------------------


class TestSocorroGetCrash:
    @pytest.mark.asyncio
    async def test_request_shape(self, live_settings):
        recorder = Recorder(payload={"uuid": CRASH_ID, "signature": "sig"})
        raw = await _socorro(live_settings, recorder).get_crash(CRASH_ID)
        assert raw.signature == "sig"
        assert recorder.last.url.path == "/api/ProcessedCrash/"
        assert recorder.last.url.params["crash_id"] == CRASH_ID
        assert recorder.last.headers[AUTH_HEADER] == "secret-token"

    @pytest.mark.asyncio
    async def test_no_auth_header_when_disabled(self, live_settings):
        recorder = Recorder(payload={"uuid": CRASH_ID})
        await _socorro(live_settings, recorder).get_crash(CRASH_ID, use_auth=False)
        assert AUTH_HEADER not in recorder.last.headers

    @pytest.mark.asyncio
    async def test_no_auth_header_without_token(self, mock_settings):
        recorder = Recorder(payload={"uuid": CRASH_ID})
        await _socorro(mock_settings, recorder).get_crash(CRASH_ID)
        assert AUTH_HEADER not in recorder.last.headers

    @pytest.mark.asyncio
    async def test_protected_fields_dropped(self, live_settings):
        recorder = Recorder(payload={"uuid": CRASH_ID, "user_comments": "secret", "email": "x@y.z"})
        raw = await _socorro(live_settings, recorder).get_crash(CRASH_ID)
        assert "user_comments" not in raw.model_dump()

    @pytest.mark.asyncio
    async def test_invalid_id_never_sent(self, live_settings):
        recorder = Recorder()
        with pytest.raises(InvalidRequestError):
            await _socorro(live_settings, recorder).get_crash("not a crash id!")
        assert recorder.requests == []

    @pytest.mark.asyncio
    async def test_not_found(self, live_settings):
        recorder = Recorder(status_code=404)
        with pytest.raises(NotFoundError) as exc_info:
            await _socorro(live_settings, recorder).get_crash(CRASH_ID)
        assert CRASH_ID in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_rate_limited(self, live_settings):
        with pytest.raises(RateLimitedError) as exc_info:
            await _socorro(live_settings, Recorder(status_code=429)).get_crash(CRASH_ID)
        assert "token" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_other_status(self, live_settings):
        with pytest.raises(UpstreamHTTPError) as exc_info:
            await _socorro(live_settings, Recorder(status_code=503)).get_crash(CRASH_ID)
        assert exc_info.value.status_code == 503
        assert "ProcessedCrash" in exc_info.value.url

    @pytest.mark.asyncio
    async def test_unparseable_body(self, live_settings):
        recorder = Recorder(content=b"<html>" + b"x" * 500)
        with pytest.raises(PayloadParseError) as exc_info:
            await _socorro(live_settings, recorder).get_crash(CRASH_ID)
        assert exc_info.value.preview.startswith("<html>")
        assert len(exc_info.value.preview) == PayloadParseError.PREVIEW_LENGTH

    @pytest.mark.asyncio
    async def test_wrong_shape(self, live_settings):
        with pytest.raises(PayloadParseError):
            await _socorro(live_settings, Recorder(payload={"signature": "no uuid"})).get_crash(CRASH_ID)

    @pytest.mark.asyncio
    async def test_transport_failure(self, live_settings):
        def fail(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = SocorroClient(live_settings, transport=httpx.MockTransport(fail))
        with pytest.raises(TransportError) as exc_info:
            await client.get_crash(CRASH_ID)
        assert "ConnectError" in str(exc_info.value)


class TestSocorroSearch:
    @pytest.mark.asyncio
    async def test_query_parameters(self, live_settings):
        recorder = Recorder(payload={"total": 3, "hits": [], "facets": {}})
        params = SearchParams(signature="OOM | small", facets=["version", "platform"], facets_size=5)
        response = await _socorro(live_settings, recorder).search(params)
        assert response.total == 3

        query = recorder.last.url.params
        assert recorder.last.url.path == "/api/SuperSearch/"
        assert query["product"] == "Firefox"
        assert query["signature"] == "OOM | small"
        assert query["_results_number"] == "0"
        assert query.get_list("_facets") == ["version", "platform"]
        assert query["_facets_size"] == "5"
        assert "uuid" in query.get_list("_columns")
        assert query["date"].startswith(">=")
        assert recorder.last.headers[AUTH_HEADER] == "secret-token"

    @pytest.mark.asyncio
    async def test_response_parsed(self, live_settings):
        payload = {
            "total": 69146,
            "hits": [{"uuid": "id-1", "build_id": 20260205140000}],
            "facets": {"signature": [{"term": "OOM | small", "count": 5120}]},
        }
        response = await _socorro(live_settings, Recorder(payload=payload)).search(SearchParams())
        assert response.hits[0].build_id == "20260205140000"
        assert response.facets["signature"][0].count == 5120


# ---------------------------------------------------------------------------
# CorrelationsClient
# ---------------------------------------------------------------------------


class TestSignatureHash:
    def test_known_hash(self):
        assert signature_hash("UiaNode::ProviderInfo::~ProviderInfo") == (
            "4361bb82d8d8c7f34466f8b7589fbd6c920da702"
        )


class TestCorrelationsClient:
    @pytest.mark.asyncio
    async def test_totals(self, live_settings):
        recorder = Recorder(payload={"date": "2026-02-13", "release": 79268, "beta": 4996})
        totals = await _correlations(live_settings, recorder).get_totals()
        assert totals.release == 79268
        assert recorder.last.url.path == "/data/all.json.gz"
        assert AUTH_HEADER not in recorder.last.headers

    @pytest.mark.asyncio
    async def test_signature_path(self, live_settings):
        signature = "UiaNode::ProviderInfo::~ProviderInfo"
        recorder = Recorder(payload={"total": 10.0, "results": []})
        await _correlations(live_settings, recorder).get_correlations(signature, "beta")
        assert recorder.last.url.path == f"/data/beta/{signature_hash(signature)}.json.gz"

    @pytest.mark.asyncio
    async def test_gzip_encoded_body(self, live_settings):
        body = gzip.compress(json.dumps({"total": 2.0, "results": []}).encode())

        def handler(request):
            return httpx.Response(200, content=body, headers={"Content-Encoding": "gzip"})

        client = CorrelationsClient(live_settings, transport=httpx.MockTransport(handler))
        response = await client.get_correlations("sig", "release")
        assert response.total == 2.0

    @pytest.mark.asyncio
    async def test_signature_not_covered(self, live_settings):
        with pytest.raises(NotFoundError) as exc_info:
            await _correlations(live_settings, Recorder(status_code=404)).get_correlations("rare", "esr")
        assert "top ~200" in str(exc_info.value)


# ---------------------------------------------------------------------------
# CrashPingsClient
# ---------------------------------------------------------------------------


PING_DATA = {
    "crashid": ["p-1", "p-2"],
    "clientid": {"strings": ["c-1"], "values": [0, 0]},
    "signature": {"strings": ["OOM | small"], "values": [0, 0]},
}


class TestCrashPingsClient:
    @pytest.mark.asyncio
    async def test_ping_data_path(self, live_settings):
        recorder = Recorder(payload=PING_DATA)
        raw = await _crash_pings(live_settings, recorder).get_ping_data("2026-02-12")
        assert raw.ping_count == 2
        assert "clientid" not in raw.model_dump()
        assert str(recorder.last.url) == "https://pings.example.test/ping_data/2026-02-12"
        assert AUTH_HEADER not in recorder.last.headers

    @pytest.mark.asyncio
    async def test_gzip_encoded_ping_data(self, live_settings):
        body = gzip.compress(json.dumps(PING_DATA).encode())

        def handler(request):
            return httpx.Response(200, content=body, headers={"Content-Encoding": "gzip"})

        client = CrashPingsClient(live_settings, transport=httpx.MockTransport(handler))
        raw = await client.get_ping_data("2026-02-12")
        assert raw.signature.get(1) == "OOM | small"

    @pytest.mark.asyncio
    async def test_data_not_ready(self, live_settings):
        with pytest.raises(DataNotReadyError) as exc_info:
            await _crash_pings(live_settings, Recorder(status_code=202)).get_ping_data("2026-02-12")
        assert "04:00 UTC" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_date_not_found(self, live_settings):
        with pytest.raises(NotFoundError) as exc_info:
            await _crash_pings(live_settings, Recorder(status_code=404)).get_ping_data("2023-01-01")
        assert "September 2024" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_stack_path(self, live_settings):
        recorder = Recorder(payload={"stack": [{"function": "main"}], "java_exception": None})
        raw = await _crash_pings(live_settings, recorder).get_stack("2026-02-12", "e3d1c6a2-0001")
        assert raw.stack[0].function == "main"
        assert recorder.last.url.path == "/stack/2026-02-12/e3d1c6a2-0001"

    @pytest.mark.asyncio
    async def test_stack_not_found(self, live_settings):
        with pytest.raises(NotFoundError) as exc_info:
            await _crash_pings(live_settings, Recorder(status_code=404)).get_stack("2026-02-12", "e3d1c6a2-0001")
        assert "e3d1c6a2-0001" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_invalid_stack_id_never_sent(self, live_settings):
        recorder = Recorder()
        with pytest.raises(InvalidRequestError):
            await _crash_pings(live_settings, recorder).get_stack("2026-02-12", "../../etc")
        assert recorder.requests == []

    @pytest.mark.asyncio
    async def test_accepted_without_message_is_upstream_error(self, live_settings):
        # Only endpoints that declare a not-ready message treat 202 specially.
        with pytest.raises(UpstreamHTTPError) as exc_info:
            await _crash_pings(live_settings, Recorder(status_code=202)).get_stack("2026-02-12", "e3d1c6a2-0001")
        assert exc_info.value.status_code == 202
