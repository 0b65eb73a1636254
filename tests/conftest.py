"""Shared test fixtures for the kwikresolver test suite."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from kwikresolver.domain.kwik.decoder import convert_base

# Letters only, so the digits produced by substitution never collide with
# alphabet symbols.  alphabet[RADIX] ("W") is the segment separator.
ALPHABET = "pQrStUvWxY"
OFFSET = 13
RADIX = 7


def _encode(
    text: str,
    alphabet: str = ALPHABET,
    offset: int = OFFSET,
    radix: int = RADIX,
) -> str:
    """Inverse of decode_segment for radix <= 10."""
    separator = alphabet[radix]
    segments = []
    for char in text:
        numeral = convert_base(str(ord(char) + offset), 10, radix)
        segments.append("".join(alphabet[int(d)] for d in numeral) + separator)
    return "".join(segments)


def _obfuscated_script(text: str) -> str:
    cipher = _encode(text)
    return (
        "<script>eval(function(h,u,n,t,e,r){r=\"\";return decodeURIComponent(r)}"
        f'("{cipher}",17,"{ALPHABET}",{OFFSET},{RADIX},24))</script>'
    )


# ---------------------------------------------------------------------------
# Obfuscation helpers
# ---------------------------------------------------------------------------


@pytest.fixture()
def kwik_encode() -> Callable[..., str]:
    """Synthetic encoder producing cipher text for ALPHABET/OFFSET/RADIX."""
    return _encode


@pytest.fixture()
def obfuscated_page() -> Callable[[str], str]:
    """Build an HTML page whose inline script hides *text*."""

    def build(text: str) -> str:
        return f"<html><head>{_obfuscated_script(text)}</head><body></body></html>"

    return build


# ---------------------------------------------------------------------------
# Canned Kwik pages
# ---------------------------------------------------------------------------

INTERMEDIATE_URL = "https://kwik.si/f/xyz"
SUBMISSION_URL = "https://kwik.si/d/xyz"
FORM_TOKEN = "tok3nValue42"


@pytest.fixture()
def share_page(obfuscated_page: Callable[[str], str]) -> str:
    """Share page hiding the intermediate link."""
    return obfuscated_page(f'"{INTERMEDIATE_URL}"')


@pytest.fixture()
def hosting_page(obfuscated_page: Callable[[str], str]) -> str:
    """Hosting page hiding the download form."""
    return obfuscated_page(
        f'<form action="{SUBMISSION_URL}" method="POST">'
        f'<input type="hidden" name="_token" value="{FORM_TOKEN}">'
        '<button type="submit">Download</button></form>'
    )

