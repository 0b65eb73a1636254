"""Pattern extraction for Kwik pages.

A page either carries the target link as a plain quoted string, or hides it
behind an obfuscated call whose arguments are::

    ("<cipher>", <num>, "<alphabet>", <offset>, <radix>, <num>[letter])

``extract_link_or_params`` tries the plain link first, then an ordered list
of increasingly lenient call matchers.  First hit wins.

The remaining helpers pick the pieces the later pipeline stages need out of
decoded text and response headers.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from typing import Optional

from kwikresolver.domain.entities import (
    DirectLink,
    ExtractionOutcome,
    NotFound,
    ObfuscatedLink,
    ObfuscationParameters,
)
from kwikresolver.domain.kwik.decoder import BASE_ALPHABET

SESSION_COOKIE_NAME = "kwik_session"
TOKEN_FIELD_NAME = "_token"

# "https://kwik.si/f/abc123": host plus at least two non-empty path segments.
_TARGET_LINK_RE = re.compile(r'"(https?://kwik\.[^/\s"]+/[^/\s"]+/[^/\s"][^"\s]*)"')

# Fallback for the form action when the link is not quoted on its own.
_FORM_ACTION_RE = re.compile(r"""action\s*=\s*["'](https?://[^"'\s]+)["']""", re.IGNORECASE)

# Strict: double quotes, original argument shape.
_CALL_STRICT_RE = re.compile(
    r'\(\s*"([^",]*)"\s*,\s*\d+\s*,\s*"([^",]*)"\s*,\s*(\d+)\s*,\s*(\d+)\s*,\s*\d+[a-zA-Z]?\s*\)'
)

# Either quote style, quotes must pair up.
_CALL_QUOTED_RE = re.compile(
    r"""\(\s*(["'])([^"',]*)\1\s*,\s*\d+\s*,\s*(["'])([^"',]*)\3\s*,"""
    r"""\s*(\d+)\s*,\s*(\d+)\s*,\s*\d+[a-zA-Z]?\s*\)"""
)

# Lenient: any quote, any whitespace, trailing argument any identifier-like token.
_CALL_LENIENT_RE = re.compile(
    r"""\(\s*["']([^"']+)["']\s*,\s*[\w.]+\s*,\s*["']([^"']+)["']\s*,"""
    r"""\s*(\d+)\s*,\s*(\d+)\s*,\s*[\w.]*\s*\)""",
    re.DOTALL,
)

_METADATA_PATH_RE = re.compile(r"^(https?://kwik\.[^/]+/)d/", re.IGNORECASE)

_TOKEN_RES = (
    re.compile(r'name\s*=\s*"_token"[^>]*?value\s*=\s*"([^"]*)"'),
    re.compile(r'value\s*=\s*"([^"]*)"[^>]*?name\s*=\s*"_token"'),
    # Loose shape used by the page script itself.
    re.compile(r'name="_token"[^"]*"(\S*)">'),
)

_EMBEDDED_LOCATION_RE = re.compile(
    r"""(?:location|href)["':\s=]*["']?(https?://[^"'\s<>]+)""",
    re.IGNORECASE,
)

_LINE_ENDINGS_RE = re.compile(r"[\r\n]")
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


def normalize_page_text(text: str) -> str:
    """Strip line endings and control characters.

    Kwik injects line breaks inside otherwise matchable literals.
    """
    return _CONTROL_CHARS_RE.sub("", _LINE_ENDINGS_RE.sub("", text))


def rewrite_metadata_path(url: str) -> str:
    """Rewrite a ``/d/`` (metadata) link to its ``/f/`` (fetchable) form."""
    return _METADATA_PATH_RE.sub(r"\1f/", url, count=1)


def _params(
    cipher_text: str, alphabet: str, offset: str, radix: str
) -> ObfuscationParameters | None:
    if not cipher_text or not alphabet:
        return None
    radix_value = int(radix)
    if not 2 <= radix_value <= len(BASE_ALPHABET) or radix_value >= len(alphabet):
        return None
    return ObfuscationParameters(
        cipher_text=cipher_text,
        alphabet=alphabet,
        offset=int(offset),
        radix=radix_value,
    )


def _match_strict(text: str) -> ObfuscationParameters | None:
    for m in _CALL_STRICT_RE.finditer(text):
        params = _params(m.group(1), m.group(2), m.group(3), m.group(4))
        if params:
            return params
    return None


def _match_quoted(text: str) -> ObfuscationParameters | None:
    for m in _CALL_QUOTED_RE.finditer(text):
        params = _params(m.group(2), m.group(4), m.group(5), m.group(6))
        if params:
            return params
    return None


def _match_lenient(text: str) -> ObfuscationParameters | None:
    for m in _CALL_LENIENT_RE.finditer(text):
        params = _params(m.group(1), m.group(2), m.group(3), m.group(4))
        if params:
            return params
    return None


ParamMatcher = Callable[[str], Optional[ObfuscationParameters]]

# Order is the fallback policy: strictest shape first.
PARAM_MATCHERS: tuple[ParamMatcher, ...] = (
    _match_strict,
    _match_quoted,
    _match_lenient,
)


def find_target_link(text: str) -> str | None:
    """Return the first quoted Kwik link with a two-segment path, as written."""
    m = _TARGET_LINK_RE.search(text)
    return m.group(1) if m else None


def find_obfuscation_params(
    text: str, matchers: Iterable[ParamMatcher] = PARAM_MATCHERS
) -> ObfuscationParameters | None:
    for matcher in matchers:
        params = matcher(text)
        if params is not None:
            return params
    return None


def extract_link_or_params(page_text: str) -> ExtractionOutcome:
    """Find a plain Kwik link or the obfuscation parameters on a page.

    A plain link wins and is returned with the ``/d/`` → ``/f/`` rewrite
    applied.  Otherwise the call matchers are tried in order.
    """
    text = normalize_page_text(page_text)

    link = find_target_link(text)
    if link:
        return DirectLink(url=rewrite_metadata_path(link))

    params = find_obfuscation_params(text)
    if params:
        return ObfuscatedLink(params=params)

    return NotFound()


def find_submission_url(text: str) -> str | None:
    """Find the form submission URL in decoded hosting-page script.

    Returned as written: the form posts to the ``/d/`` path.
    """
    text = normalize_page_text(text)
    link = find_target_link(text)
    if link:
        return link
    m = _FORM_ACTION_RE.search(text)
    return m.group(1) if m else None


def find_form_token(text: str) -> str | None:
    """Find the value of the ``_token`` input field."""
    text = normalize_page_text(text)
    for pattern in _TOKEN_RES:
        m = pattern.search(text)
        if m and m.group(1):
            return m.group(1)
    return None


def find_session_cookie(
    set_cookie_headers: Iterable[str], name: str = SESSION_COOKIE_NAME
) -> str:
    """Return the value of the session cookie, or ``""`` when absent."""
    pattern = re.compile(rf"(?:^|[\s,;]){re.escape(name)}=([^;,\s]*)")
    for header in set_cookie_headers:
        m = pattern.search(header)
        if m:
            return m.group(1)
    return ""


def find_embedded_location(body: str) -> str | None:
    """Find an absolute URL following a ``location``/``href`` marker."""
    m = _EMBEDDED_LOCATION_RE.search(body)
    return m.group(1) if m else None
