"""Application state container for FastAPI dependency injection."""

from __future__ import annotations

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager

from starlette.datastructures import State

from kwikresolver.domain.ports import ContentFetcherPort
from kwikresolver.infrastructure.config import AppConfig

FetcherFactory = Callable[[], AbstractAsyncContextManager[ContentFetcherPort]]


class AppState(State):
    """FastAPI application state with all DI resources.

    Lifecycle managed by composition.py::lifespan().
    """

    # Configuration
    config: AppConfig

    # Opens a fresh fetcher (own client, own cookie jar) per resolution
    fetcher_factory: FetcherFactory
