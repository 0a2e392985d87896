"""Shared httpx plumbing for the live providers: one GET, typed failures."""

from __future__ import annotations

import logging
import time
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from core.exceptions import (
    DataNotReadyError,
    NotFoundError,
    PayloadParseError,
    RateLimitedError,
    TransportError,
    UpstreamHTTPError,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class HTTPProvider:
    """Base for providers that GET JSON documents and validate them into models.

    No retries: rate limits and transport failures propagate to the caller.
    """

    provider_key: str = ""

    def __init__(
        self,
        base_url: str,
        timeout: float,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
            follow_redirects=True,
        )

    async def _get_json(
        self,
        path: str,
        model: type[ModelT],
        *,
        params: Any = None,
        headers: dict[str, str] | None = None,
        not_found: str | None = None,
        not_ready: str | None = None,
    ) -> ModelT:
        t0 = time.monotonic()
        try:
            async with self._client() as client:
                response = await client.get(path, params=params, headers=headers)
        except httpx.HTTPError as e:
            raise TransportError(self.provider_key, f"{type(e).__name__}: {e}") from e

        logger.debug(
            "GET %s -> %d (%d bytes in %.2fs)",
            response.request.url,
            response.status_code,
            len(response.content),
            time.monotonic() - t0,
        )

        if response.status_code == httpx.codes.NOT_FOUND:
            raise NotFoundError(self.provider_key, not_found or f"Not found: {path}")
        if response.status_code == httpx.codes.ACCEPTED and not_ready:
            raise DataNotReadyError(self.provider_key, not_ready)
        if response.status_code == httpx.codes.TOO_MANY_REQUESTS:
            raise RateLimitedError(self.provider_key)
        if response.status_code != httpx.codes.OK:
            raise UpstreamHTTPError(self.provider_key, response.status_code, str(response.request.url))

        try:
            return model.model_validate_json(response.content)
        except ValidationError as e:
            raise PayloadParseError(self.provider_key, str(e), response.text) from e
