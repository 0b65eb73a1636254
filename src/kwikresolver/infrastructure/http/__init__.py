"""HTTP transport adapters."""

from __future__ import annotations

from .fetcher import HttpxContentFetcher, open_fetcher

__all__ = ["HttpxContentFetcher", "open_fetcher"]
