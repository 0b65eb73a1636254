"""httpx-based content fetcher with manual body decompression.

Redirects are never followed: the resolver needs to see the ``302`` and its
``Location`` header after the form submission.

Bodies are read raw and decompressed here rather than by httpx so that a
corrupt ``gzip``/``deflate``/``br`` payload degrades to the raw bytes instead
of raising.
"""

from __future__ import annotations

import zlib
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager

import brotli
import httpx
import structlog

from kwikresolver.domain.entities import FetchResult, NetworkError
from kwikresolver.domain.entities.resolution import HeaderValue
from kwikresolver.infrastructure.http.headers import DEFAULT_USER_AGENT, browser_headers

log = structlog.get_logger(__name__)


def _gunzip(data: bytes) -> bytes:
    return zlib.decompress(data, 16 + zlib.MAX_WBITS)


def _inflate(data: bytes) -> bytes:
    # Servers send both zlib-wrapped and raw deflate under "deflate".
    try:
        return zlib.decompress(data)
    except zlib.error:
        return zlib.decompress(data, -zlib.MAX_WBITS)


_DECODERS = {
    "gzip": _gunzip,
    "x-gzip": _gunzip,
    "deflate": _inflate,
    "br": brotli.decompress,
}


def decompress_body(raw: bytes, content_encoding: str | None) -> bytes:
    """Undo ``content-encoding`` on *raw*.

    Stacked encodings are undone last-applied first.  Unknown encodings are
    passed through.  On any decompression failure the raw bytes are returned.
    """
    encodings = [
        part.strip().lower()
        for part in (content_encoding or "").split(",")
        if part.strip() and part.strip().lower() != "identity"
    ]
    data = raw
    for encoding in reversed(encodings):
        decoder = _DECODERS.get(encoding)
        if decoder is None:
            log.debug("fetch_unknown_encoding", encoding=encoding)
            continue
        try:
            data = decoder(data)
        except (zlib.error, brotli.error, EOFError, OSError) as e:
            log.debug("fetch_decompress_failed", encoding=encoding, error=str(e))
            return raw
    return data


def decode_text(body: bytes, charset: str | None) -> str:
    """Decode *body* with the declared charset, UTF-8 otherwise; never raises."""
    try:
        return body.decode(charset or "utf-8", errors="replace")
    except LookupError:
        return body.decode("utf-8", errors="replace")


def collect_headers(headers: httpx.Headers) -> dict[str, HeaderValue]:
    """Lower-cased header map; repeated headers become lists."""
    out: dict[str, HeaderValue] = {}
    for key, value in headers.multi_items():
        name = key.lower()
        existing = out.get(name)
        if existing is None:
            out[name] = value
        elif isinstance(existing, list):
            existing.append(value)
        else:
            out[name] = [existing, value]
    return out


class HttpxContentFetcher:
    """Performs HTTP exchanges with browser-like headers.

    One instance (and one ``httpx.AsyncClient``) per resolution: the client's
    cookie jar must not leak between concurrent resolutions.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self._http = http_client
        self._default_headers = browser_headers(user_agent)

    async def fetch(
        self,
        url: str,
        *,
        method: str = "GET",
        headers: Mapping[str, str] | None = None,
        data: Mapping[str, str] | None = None,
    ) -> FetchResult:
        """Fetch *url* without following redirects.

        Caller *headers* win over the browser defaults (case-insensitive).

        Raises:
            NetworkError: DNS, connection, TLS, timeout or malformed URL.
        """
        request_headers = httpx.Headers(self._default_headers)
        if headers:
            request_headers.update(headers)

        try:
            request = self._http.build_request(
                method,
                url,
                headers=request_headers,
                data=dict(data) if data is not None else None,
            )
            response = await self._http.send(
                request, stream=True, follow_redirects=False
            )
            try:
                raw = b"".join([chunk async for chunk in response.aiter_raw()])
            finally:
                await response.aclose()
        except (httpx.TransportError, httpx.InvalidURL) as e:
            log.warning(
                "fetch_transport_error",
                url=url,
                method=method,
                error=type(e).__name__,
            )
            raise NetworkError(f"{type(e).__name__} while fetching {url}: {e}") from e

        body = decompress_body(raw, response.headers.get("content-encoding"))
        text = decode_text(body, response.charset_encoding)

        log.debug(
            "fetch_completed",
            url=url,
            method=method,
            status=response.status_code,
            size_bytes=len(body),
        )
        return FetchResult(
            body=text,
            status_code=response.status_code,
            headers=collect_headers(response.headers),
            url=url,
        )


@asynccontextmanager
async def open_fetcher(
    *,
    timeout_seconds: float = 30.0,
    user_agent: str = DEFAULT_USER_AGENT,
) -> AsyncIterator[HttpxContentFetcher]:
    """Yield a fetcher backed by a fresh client, closed on exit."""
    async with httpx.AsyncClient(
        timeout=httpx.Timeout(timeout_seconds),
        follow_redirects=False,
    ) as client:
        yield HttpxContentFetcher(client, user_agent=user_agent)
