"""Composition root: dependency injection via FastAPI lifespan."""

from __future__ import annotations

import functools
from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

import structlog
from fastapi import FastAPI

from kwikresolver.application.use_cases import ResolveLinkUseCase
from kwikresolver.domain.ports import ContentFetcherPort
from kwikresolver.infrastructure.config.schema import AppConfig
from kwikresolver.infrastructure.http import open_fetcher
from kwikresolver.interfaces.app_state import AppState, FetcherFactory

log = structlog.get_logger(__name__)


def build_fetcher_factory(config: AppConfig) -> FetcherFactory:
    """Bind the HTTP settings so callers only need ``async with factory()``."""
    return functools.partial(
        open_fetcher,
        timeout_seconds=config.http_timeout_seconds,
        user_agent=config.http_user_agent,
    )


def build_resolver(
    fetcher: ContentFetcherPort, config: AppConfig
) -> ResolveLinkUseCase:
    return ResolveLinkUseCase(
        fetcher,
        max_attempts=config.resolver_max_attempts,
        retry_delay_seconds=config.resolver_retry_delay_seconds,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan hook: wire resources (DI composition root).

    No HTTP client lives for the whole app. Each resolution opens its own
    through ``state.fetcher_factory`` so cookies never cross requests.
    """
    state = cast(AppState, app.state)
    config = state.config

    state.fetcher_factory = build_fetcher_factory(config)
    log.info(
        "fetcher_factory_initialized",
        timeout_seconds=config.http_timeout_seconds,
        max_attempts=config.resolver_max_attempts,
    )

    log.info("app_startup_complete")

    try:
        yield
    finally:
        log.info("app_shutdown_complete")
