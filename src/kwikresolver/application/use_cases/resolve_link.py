"""Resolve a Kwik page URL to its direct download link."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar
from urllib.parse import urljoin

import structlog

from kwikresolver.domain.entities import (
    RETRYABLE_ERRORS,
    DirectLink,
    ExtractionError,
    NetworkError,
    NotFound,
    ObfuscationParameters,
    PipelineResult,
    ResolverError,
    SubmissionError,
    TargetValidationError,
)
from kwikresolver.domain.kwik.decoder import decode_segment
from kwikresolver.domain.kwik.extractor import (
    SESSION_COOKIE_NAME,
    TOKEN_FIELD_NAME,
    extract_link_or_params,
    find_embedded_location,
    find_form_token,
    find_obfuscation_params,
    find_session_cookie,
    find_submission_url,
    normalize_page_text,
)
from kwikresolver.domain.kwik.validator import is_valid_target_url
from kwikresolver.domain.ports import ContentFetcherPort

log = structlog.get_logger(__name__)

T = TypeVar("T")

MESSAGE_SUCCESS = "Direct download link extracted successfully!"
MESSAGE_PARTIAL = (
    "Kwik link extracted successfully. "
    "The direct download link could not be resolved; open the Kwik link manually."
)


def _decode(params: ObfuscationParameters) -> str:
    try:
        return decode_segment(
            params.cipher_text, params.alphabet, params.offset, params.radix
        )
    except ValueError as e:
        raise ExtractionError(f"Could not decode obfuscated content: {e}") from e


class ResolveLinkUseCase:
    """Runs the Kwik resolution pipeline for one URL.

    Flow:
        1. Fetch the shared page, find (or decode) the Kwik ``/f/`` link
           (the intermediate link).
        2. Fetch the intermediate link, keep the session cookie, find the
           obfuscation parameters.
        3. Decode them, find the form submission URL and ``_token``.
        4. POST the token and read the redirect ``Location`` (final link).

    Step 1 and steps 2-4 each get ``max_attempts`` attempts with fresh
    fetches.  Failing step 1 is a hard failure.  Failing steps 2-4 degrades
    to the intermediate link with the last error as a warning.

    One instance per resolution; it holds no state between calls besides its
    collaborators.
    """

    def __init__(
        self,
        fetcher: ContentFetcherPort,
        *,
        max_attempts: int = 3,
        retry_delay_seconds: float = 0.0,
        session_cookie_name: str = SESSION_COOKIE_NAME,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self._fetcher = fetcher
        self._max_attempts = max_attempts
        self._retry_delay = retry_delay_seconds
        self._cookie_name = session_cookie_name

    async def execute(self, url: str) -> PipelineResult:
        """Resolve *url*.

        Raises:
            TargetValidationError: *url* is not a Kwik URL.
        """
        url = url.strip() if isinstance(url, str) else url
        if not is_valid_target_url(url):
            raise TargetValidationError(
                "Invalid Kwik URL. Please enter a valid kwik.si, kwik.cx, "
                "kwik.sx or kwik.li URL"
            )

        log.info("resolve_started", url=url)

        try:
            intermediate = await self._with_retries(
                "intermediate", lambda: self._resolve_intermediate(url)
            )
        except ResolverError as e:
            log.warning("resolve_failed", url=url, error=str(e))
            return PipelineResult.failure(f"Failed to extract Kwik link: {e}")

        try:
            final = await self._with_retries(
                "final", lambda: self._resolve_final(intermediate)
            )
        except ResolverError as e:
            log.info(
                "resolve_partial_result",
                url=url,
                intermediate_link=intermediate,
                warning=str(e),
            )
            return PipelineResult(
                success=True,
                final_link=intermediate,
                intermediate_link=intermediate,
                message=MESSAGE_PARTIAL,
                warning=str(e),
            )

        log.info("resolve_succeeded", url=url, intermediate_link=intermediate)
        return PipelineResult(
            success=True,
            final_link=final,
            intermediate_link=intermediate,
            message=MESSAGE_SUCCESS,
        )

    async def _with_retries(
        self, stage: str, attempt_fn: Callable[[], Awaitable[T]]
    ) -> T:
        """Run *attempt_fn* up to ``max_attempts`` times; re-raise the last error."""
        attempt = 1
        while True:
            try:
                return await attempt_fn()
            except RETRYABLE_ERRORS as e:
                log.info(
                    "resolve_stage_failed",
                    stage=stage,
                    attempt=attempt,
                    max_attempts=self._max_attempts,
                    error_type=type(e).__name__,
                    error=str(e),
                )
                if attempt >= self._max_attempts:
                    raise
            if self._retry_delay > 0:
                await asyncio.sleep(self._retry_delay)
            attempt += 1

    # -- stage 1 -----------------------------------------------------------

    async def _resolve_intermediate(self, url: str) -> str:
        page = await self._fetcher.fetch(url)
        page.raise_for_status()

        outcome = extract_link_or_params(page.body)
        if isinstance(outcome, NotFound):
            raise ExtractionError(f"Could not find encoding parameters in {url}")
        if isinstance(outcome, DirectLink):
            return outcome.url

        decoded = _decode(outcome.params)
        link = extract_link_or_params(decoded)
        if not isinstance(link, DirectLink):
            raise ExtractionError("Could not extract Kwik link from decoded content")
        return link.url

    # -- stages 2-4 --------------------------------------------------------

    async def _resolve_final(self, intermediate: str) -> str:
        page = await self._fetcher.fetch(intermediate)
        page.raise_for_status()
        session = find_session_cookie(
            page.header_values("set-cookie"), self._cookie_name
        )

        # The hosting page links to itself, so parameters take precedence
        # over a plain link here.
        params = find_obfuscation_params(normalize_page_text(page.body))
        if params is not None:
            script = _decode(params)
        elif isinstance(extract_link_or_params(page.body), NotFound):
            raise ExtractionError(
                "Could not find encoding parameters on the Kwik page"
            )
        else:
            # Unobfuscated page: the form is in the page itself.
            script = normalize_page_text(page.body)

        submission_url = find_submission_url(script)
        token = find_form_token(script)
        if not submission_url or not token:
            raise ExtractionError(
                "Could not extract required parameters from decoded content"
            )

        return await self._submit(submission_url, token, intermediate, session)

    async def _submit(
        self, submission_url: str, token: str, referer: str, session: str
    ) -> str:
        headers = {
            "Referer": referer,
            "Content-Type": "application/x-www-form-urlencoded",
        }
        if session:
            headers["Cookie"] = f"{self._cookie_name}={session}"

        response = await self._fetcher.fetch(
            submission_url,
            method="POST",
            headers=headers,
            data={TOKEN_FIELD_NAME: token},
        )

        location = response.location
        if response.is_redirect and location:
            return urljoin(submission_url, location)

        if response.status_code >= 400:
            raise NetworkError(
                f"Form submission to {submission_url} failed with "
                f"HTTP {response.status_code}",
                status_code=response.status_code,
            )

        embedded = find_embedded_location(response.body)
        if embedded:
            return embedded

        raise SubmissionError(
            f"Redirect location not found in response from {submission_url} "
            f"(HTTP {response.status_code})"
        )
