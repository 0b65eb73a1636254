"""Port for fetching page content over HTTP."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol, runtime_checkable

from kwikresolver.domain.entities import FetchResult


@runtime_checkable
class ContentFetcherPort(Protocol):
    """Performs one HTTP exchange and returns its decoded snapshot.

    Implementations never follow redirects: the caller must see the 3xx
    status and ``Location`` header itself.  Transport failures are raised
    as ``NetworkError`` and are not retried at this layer.
    """

    async def fetch(
        self,
        url: str,
        *,
        method: str = "GET",
        headers: Mapping[str, str] | None = None,
        data: Mapping[str, str] | None = None,
    ) -> FetchResult:
        """Fetch *url* and return the decoded response.

        Args:
            url: Absolute URL to request.
            method: HTTP method (``GET`` or ``POST``).
            headers: Extra headers; they win over the default browser headers.
            data: Form fields, sent URL-encoded.

        Raises:
            NetworkError: DNS, connection, TLS or timeout failure.
        """
        ...
