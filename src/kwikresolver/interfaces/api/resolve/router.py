"""Resolution endpoints: resolve a Kwik link, fetch a Kwik page."""

from __future__ import annotations

from typing import Annotated, cast
from urllib.parse import unquote

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, StringConstraints

from kwikresolver.domain.entities import NetworkError, TargetValidationError
from kwikresolver.domain.kwik import is_valid_target_url
from kwikresolver.interfaces.app_state import AppState
from kwikresolver.interfaces.composition import build_resolver

log = structlog.get_logger(__name__)

router = APIRouter(tags=["resolve"])


class ResolveRequest(BaseModel):
    url: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


@router.post("/resolve")
async def resolve_link(body: ResolveRequest, request: Request) -> JSONResponse:
    """Resolve a Kwik share link to its direct download link.

    Returns:
        200 with the success shape (``warning`` set when only the Kwik link
        could be resolved), 400 for a non-Kwik URL, 502 when not even the
        Kwik link could be extracted.
    """
    state = cast(AppState, request.app.state)

    async with state.fetcher_factory() as fetcher:
        use_case = build_resolver(fetcher, state.config)
        try:
            result = await use_case.execute(body.url)
        except TargetValidationError as e:
            log.info("resolve_rejected", url=body.url)
            return JSONResponse(
                {"success": False, "error": str(e)}, status_code=400
            )

    status_code = 200 if result.success else 502
    return JSONResponse(result.to_dict(), status_code=status_code)


@router.get("/fetch/{encoded_url:path}")
async def fetch_page(encoded_url: str, request: Request) -> JSONResponse:
    """Fetch a Kwik page on behalf of a client and return it verbatim.

    Only Kwik URLs are accepted; anything else gets 400.
    """
    state = cast(AppState, request.app.state)

    url = encoded_url if "://" in encoded_url else unquote(encoded_url)
    if not is_valid_target_url(url):
        log.info("fetch_rejected", url=url)
        return JSONResponse(
            {"error": "Only kwik.si, kwik.cx, kwik.sx and kwik.li URLs can be fetched"},
            status_code=400,
        )

    async with state.fetcher_factory() as fetcher:
        try:
            page = await fetcher.fetch(url)
        except NetworkError as e:
            return JSONResponse({"error": str(e)}, status_code=502)

    return JSONResponse(
        {
            "contents": page.body,
            "headers": dict(page.headers),
            "status": page.status_code,
        }
    )
